"""
Post-turn extractors.

LLM-backed extraction of memory candidates, profile patches and
conversation titles from a finished exchange. Every extractor degrades to an
empty result (or the default title) instead of raising.
"""

from casual_creator.extractors.memory_extractor import (
    ConversationMemoryExtracter,
    MemoryCandidate,
    fallback_candidates,
    score_candidate,
)
from casual_creator.extractors.profile_extractor import ProfileExtracter
from casual_creator.extractors.title_generator import TitleGenerator

__all__ = [
    "ConversationMemoryExtracter",
    "MemoryCandidate",
    "fallback_candidates",
    "score_candidate",
    "ProfileExtracter",
    "TitleGenerator",
]
