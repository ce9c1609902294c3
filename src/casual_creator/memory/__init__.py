"""
Semantic long-term memory: merge-on-write storage, decay scoring, and
memory-search query shaping.
"""

from casual_creator.memory.models import MemoryWriteResult, RetrievedMemory
from casual_creator.memory.query import build_memory_search_query
from casual_creator.memory.scoring import (
    calculate_importance_score,
    calculate_memory_score,
    extract_keywords,
    find_related_memories,
    identify_stale_memories,
    updated_after_retrieval,
)
from casual_creator.memory.service import MemoryService

__all__ = [
    "MemoryWriteResult",
    "RetrievedMemory",
    "build_memory_search_query",
    "calculate_importance_score",
    "calculate_memory_score",
    "extract_keywords",
    "find_related_memories",
    "identify_stale_memories",
    "updated_after_retrieval",
    "MemoryService",
]
