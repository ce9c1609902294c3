"""
Storage protocols and backends for memories, profiles and conversations.

Backends whose client libraries are not installed are skipped.
"""

from casual_creator.storage.protocols import ConversationStore, ProfileStore, VectorMemoryStore

__all__ = [
    "VectorMemoryStore",
    "ProfileStore",
    "ConversationStore",
]

# Vector storage implementations
from casual_creator.storage.vector.memory import InMemoryVectorStore  # noqa: E402

__all__.append("InMemoryVectorStore")

try:
    from casual_creator.storage.vector.qdrant import QdrantMemoryStore  # noqa: F401

    __all__.append("QdrantMemoryStore")
except ImportError:
    pass

# Profile storage implementations
from casual_creator.storage.profiles.memory import InMemoryProfileStore  # noqa: E402

__all__.append("InMemoryProfileStore")

try:
    from casual_creator.storage.profiles.sqlalchemy import SQLAlchemyProfileStore  # noqa: F401

    __all__.append("SQLAlchemyProfileStore")
except ImportError:
    pass

# Conversation storage implementations
from casual_creator.storage.conversations.memory import InMemoryConversationStore  # noqa: E402
from casual_creator.storage.conversations.redis import RedisConversationStore  # noqa: E402

__all__.extend(["InMemoryConversationStore", "RedisConversationStore"])
