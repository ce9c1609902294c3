"""
In-memory vector storage implementation.

Keeps vectors and payloads in a dict and scores with cosine similarity.
Suitable for tests and single-process development; data is lost on restart.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional, Tuple

from casual_creator.storage.vector.models import MemoryPoint, MemoryPointPayload

logger = logging.getLogger(__name__)


class InMemoryVectorStore:
    """In-memory implementation of the VectorMemoryStore protocol."""

    def __init__(self):
        self._memories: Dict[str, Dict[str, Any]] = {}  # id -> {vector, payload}

        logger.info("InMemoryVectorStore initialized")

    def add(self, vector: List[float], payload: dict, memory_id: Optional[str] = None) -> str:
        """Add a memory and return its id."""
        memory_id = memory_id or str(uuid.uuid4())

        self._memories[memory_id] = {"vector": list(vector), "payload": dict(payload)}

        logger.debug(f"Inserted memory {memory_id}: '{payload.get('content', '')[:50]}...'")
        return memory_id

    def replace(self, memory_id: str, vector: List[float], payload: dict) -> bool:
        """Overwrite a memory's vector and payload in place."""
        if memory_id not in self._memories:
            logger.error(f"Memory {memory_id} not found")
            return False

        self._memories[memory_id] = {"vector": list(vector), "payload": dict(payload)}
        return True

    def _cosine_similarity(self, vec1: List[float], vec2: List[float]) -> float:
        if len(vec1) != len(vec2):
            raise ValueError("Vectors must have the same length")

        dot_product = sum(a * b for a, b in zip(vec1, vec2))
        magnitude1 = sum(a * a for a in vec1) ** 0.5
        magnitude2 = sum(b * b for b in vec2) ** 0.5

        if magnitude1 == 0 or magnitude2 == 0:
            return 0.0

        return dot_product / (magnitude1 * magnitude2)

    def _point(self, memory_id: str) -> MemoryPoint:
        data = self._memories[memory_id]
        return MemoryPoint(
            id=memory_id,
            vector=data["vector"],
            payload=MemoryPointPayload(**data["payload"]),
        )

    def _scored(self, embedding: List[float], user_id: str) -> List[Tuple[MemoryPoint, float]]:
        results = []
        for memory_id, data in self._memories.items():
            if data["payload"].get("user_id") != user_id:
                continue
            score = self._cosine_similarity(embedding, data["vector"])
            results.append((self._point(memory_id), score))

        results.sort(key=lambda x: x[1], reverse=True)
        return results

    def search(
        self,
        query_embedding: List[float],
        user_id: str,
        top_k: int = 5,
        min_score: float = 0.0,
    ) -> List[Tuple[MemoryPoint, float]]:
        """Nearest neighbours for a user, highest similarity first."""
        results = [
            (point, score)
            for point, score in self._scored(query_embedding, user_id)
            if score >= min_score
        ][:top_k]

        logger.debug(f"{len(results)} results found (min_score={min_score})")
        return results

    def find_similar_memories(
        self,
        embedding: List[float],
        user_id: str,
        threshold: float = 0.85,
        limit: int = 5,
    ) -> List[Tuple[MemoryPoint, float]]:
        """Memories whose similarity to ``embedding`` is at least ``threshold``."""
        results = [
            (point, score)
            for point, score in self._scored(embedding, user_id)
            if score >= threshold
        ][:limit]

        logger.info(
            f"Found {len(results)} similar memories (threshold={threshold}, user_id={user_id})"
        )
        return results

    def update_memory(self, memory_id: str, payload_updates: dict) -> bool:
        """Update specific fields in a memory's payload."""
        if memory_id not in self._memories:
            logger.error(f"Memory {memory_id} not found")
            return False

        self._memories[memory_id]["payload"].update(payload_updates)

        logger.debug(f"Updated memory {memory_id}: {payload_updates}")
        return True

    def get_by_id(self, memory_id: str) -> Optional[MemoryPoint]:
        if memory_id not in self._memories:
            return None
        return self._point(memory_id)

    def list_user_memories(self, user_id: str) -> List[MemoryPoint]:
        return [
            self._point(memory_id)
            for memory_id, data in self._memories.items()
            if data["payload"].get("user_id") == user_id
        ]

    def delete_memory(self, memory_id: str) -> bool:
        if self._memories.pop(memory_id, None) is None:
            logger.warning(f"Cannot delete memory {memory_id}: not found")
            return False
        logger.info(f"Deleted memory {memory_id}")
        return True

    def clear_user_memories(self, user_id: str) -> int:
        """Clear all memories for a specific user."""
        memory_ids = [
            memory_id
            for memory_id, data in self._memories.items()
            if data["payload"].get("user_id") == user_id
        ]

        for memory_id in memory_ids:
            del self._memories[memory_id]

        logger.info(f"Cleared {len(memory_ids)} memories for user_id={user_id}")
        return len(memory_ids)

    def clear(self):
        """Clear ALL memories from the store."""
        count = len(self._memories)
        self._memories.clear()
        logger.info(f"Cleared all memories ({count} total)")
