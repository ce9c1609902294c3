"""
casual-creator: Conversational core of an AI social-media content strategist.

Core components:
- intent: Unified intent analyzer producing one typed decision bundle per turn
- workflow: Deterministic profile completeness and workflow phase engine
- memory: Merge-on-write semantic memory with decay scoring
- cache: Bounded TTL/LRU caches for external provider results
- actions: External action router (web search, Instagram, hashtags, blogs)
- pipeline: Prompt assembly, streamed generation and post-processing
- storage: Protocol abstractions and backends for memories, profiles, conversations
"""

__version__ = "0.1.0"

from casual_creator.config import EngineSettings
from casual_creator.errors import (
    CasualCreatorError,
    ConversationNotFoundError,
    EmptyMessageError,
    ProviderError,
    ProviderNotConfiguredError,
)
from casual_creator.models import (
    Conversation,
    ConversationMessage,
    MemoryRecord,
    UserProfile,
)
from casual_creator.memory import MemoryService
from casual_creator.pipeline import ChatPipeline, ChatTurn

__all__ = [
    "__version__",
    "EngineSettings",
    # Errors
    "CasualCreatorError",
    "ConversationNotFoundError",
    "EmptyMessageError",
    "ProviderError",
    "ProviderNotConfiguredError",
    # Models
    "Conversation",
    "ConversationMessage",
    "MemoryRecord",
    "UserProfile",
    "MemoryService",
    "ChatPipeline",
    "ChatTurn",
]
