"""
Storage protocol definitions.

These protocols define the interface the engine needs from its persistent
collaborators. They are implementation-agnostic: memories can live in Qdrant
or in memory, profiles in any SQLAlchemy database, conversations in Redis.
"""

from typing import List, Optional, Protocol, Tuple

from casual_creator.models import Conversation, ConversationMessage, UserProfile
from casual_creator.profile_merge import ProfilePatch
from casual_creator.storage.vector.models import MemoryPoint


class VectorMemoryStore(Protocol):
    """
    Protocol for vector-based memory storage.

    Similarity scores are cosine similarities in [-1, 1]; every query is
    scoped to a single user.
    """

    def add(self, vector: List[float], payload: dict, memory_id: Optional[str] = None) -> str:
        """
        Add a memory to the store.

        Args:
            vector: The embedding vector for the memory
            payload: Dictionary of memory fields (MemoryPointPayload.model_dump())
            memory_id: Optional id to use instead of a generated one

        Returns:
            The memory ID
        """
        ...

    def replace(self, memory_id: str, vector: List[float], payload: dict) -> bool:
        """
        Overwrite an existing memory's vector and payload in place.

        Returns:
            True if the memory existed and was replaced
        """
        ...

    def search(
        self,
        query_embedding: List[float],
        user_id: str,
        top_k: int = 5,
        min_score: float = 0.0,
    ) -> List[Tuple[MemoryPoint, float]]:
        """
        Nearest-neighbour search.

        Args:
            query_embedding: The query embedding vector
            user_id: Owner whose memories are searched
            top_k: Maximum number of results to return
            min_score: Minimum similarity score

        Returns:
            (memory point, similarity) tuples, highest similarity first
        """
        ...

    def find_similar_memories(
        self,
        embedding: List[float],
        user_id: str,
        threshold: float = 0.85,
        limit: int = 5,
    ) -> List[Tuple[MemoryPoint, float]]:
        """
        Find memories at or above a similarity threshold (used for merge-on-write).

        Returns:
            (memory point, similarity) tuples, highest similarity first
        """
        ...

    def update_memory(self, memory_id: str, payload_updates: dict) -> bool:
        """Update specific payload fields. Returns True on success."""
        ...

    def get_by_id(self, memory_id: str) -> Optional[MemoryPoint]:
        """Retrieve a specific memory by its ID, or None."""
        ...

    def list_user_memories(self, user_id: str) -> List[MemoryPoint]:
        """All memories owned by a user (used for staleness scans)."""
        ...

    def delete_memory(self, memory_id: str) -> bool:
        """Delete one memory. Only called for explicit pruning."""
        ...

    def clear_user_memories(self, user_id: str) -> int:
        """Delete all of a user's memories and return how many were removed."""
        ...


class ProfileStore(Protocol):
    """Protocol for creator profile storage."""

    def get_profile(self, user_id: str) -> Optional[UserProfile]:
        """Return the stored profile, or None for unknown users."""
        ...

    def save_profile(self, profile: UserProfile) -> UserProfile:
        """Insert or overwrite a profile."""
        ...

    def merge_profile(self, user_id: str, patch: ProfilePatch) -> UserProfile:
        """
        Atomically merge a patch into the stored profile.

        Implementations must apply the read-merge-write as one unit (a lock or
        a transaction) so concurrent merges cannot lose updates. List fields
        are unioned case-insensitively and completeness is recomputed.

        Returns:
            The merged profile
        """
        ...


class ConversationStore(Protocol):
    """Protocol for conversation and message storage."""

    def create_conversation(self, user_id: str, title: str = ...) -> Conversation:
        ...

    def get_conversation(self, conversation_id: str) -> Optional[Conversation]:
        ...

    def update_title(self, conversation_id: str, title: str) -> bool:
        ...

    def add_messages(self, conversation_id: str, messages: List[ConversationMessage]) -> int:
        """Append messages in order and return how many were stored."""
        ...

    def get_messages(
        self, conversation_id: str, limit: Optional[int] = None
    ) -> List[ConversationMessage]:
        """Return messages oldest first; ``limit`` keeps only the most recent N."""
        ...

    def count_messages(self, conversation_id: str) -> int:
        ...
