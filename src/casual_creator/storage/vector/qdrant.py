import logging
import uuid
from typing import List, Optional, Tuple

from qdrant_client import QdrantClient
from qdrant_client.models import (
    Distance,
    FieldCondition,
    Filter,
    MatchValue,
    PointStruct,
    VectorParams,
)

from casual_creator.storage.vector.models import MemoryPoint, MemoryPointPayload

logger = logging.getLogger(__name__)


class QdrantMemoryStore:
    def __init__(
        self,
        host: str = "localhost",
        port: int = 6333,
        collection_name: str = "creator_memories",
        vector_dimension: int = 1536,
        client: Optional[QdrantClient] = None,
    ):
        """
        Initialize Qdrant memory store.

        Args:
            host: Qdrant host (default: localhost)
            port: Qdrant port (default: 6333)
            collection_name: Collection name (default: creator_memories)
            vector_dimension: Embedding dimension, fixed per deployment
            client: Pre-built client (overrides host/port)
        """
        self.client = client or QdrantClient(host=host, port=port)
        self.collection_name = collection_name
        self.vector_dimension = vector_dimension
        self._init_collection()

    def _init_collection(self):
        if not self.client.collection_exists(self.collection_name):
            self.client.create_collection(
                collection_name=self.collection_name,
                vectors_config=VectorParams(size=self.vector_dimension, distance=Distance.COSINE),
            )

    def _user_filter(self, user_id: str) -> Filter:
        return Filter(must=[FieldCondition(key="user_id", match=MatchValue(value=user_id))])

    def _to_point(self, record) -> MemoryPoint:
        return MemoryPoint(
            id=str(record.id),
            vector=record.vector or [],
            payload=MemoryPointPayload(**record.payload),
        )

    def clear(self):
        """Clear ALL memories from the collection (dangerous!)"""
        self.client.delete_collection(self.collection_name)
        self._init_collection()

    def add(self, vector: List[float], payload: dict, memory_id: Optional[str] = None) -> str:
        """
        Add a memory to the collection.

        Args:
            vector: The embedding vector
            payload: Memory fields (from MemoryPointPayload.model_dump())
            memory_id: Optional id; generated when omitted

        Returns:
            The memory ID
        """
        memory_id = memory_id or str(uuid.uuid4())
        self.client.upsert(
            collection_name=self.collection_name,
            points=[PointStruct(id=memory_id, vector=vector, payload=payload)],
        )
        logger.debug(f"Inserted memory {memory_id}: '{payload.get('content', '')[:50]}...'")
        return memory_id

    def replace(self, memory_id: str, vector: List[float], payload: dict) -> bool:
        """Overwrite an existing point's vector and payload."""
        try:
            self.client.upsert(
                collection_name=self.collection_name,
                points=[PointStruct(id=memory_id, vector=vector, payload=payload)],
            )
            return True
        except Exception as e:
            logger.error(f"Failed to replace memory {memory_id}: {e}")
            return False

    def _query(
        self, embedding: List[float], user_id: str, limit: int, score_threshold: Optional[float]
    ) -> List[Tuple[MemoryPoint, float]]:
        response = self.client.query_points(
            collection_name=self.collection_name,
            query=embedding,
            query_filter=self._user_filter(user_id),
            limit=limit,
            score_threshold=score_threshold,
            with_vectors=True,
            with_payload=True,
        )
        return [(self._to_point(hit), hit.score) for hit in response.points]

    def search(
        self,
        query_embedding: List[float],
        user_id: str,
        top_k: int = 5,
        min_score: float = 0.0,
    ) -> List[Tuple[MemoryPoint, float]]:
        results = self._query(query_embedding, user_id, top_k, min_score or None)
        logger.debug(f"{len(results)} hits found")
        return results

    def find_similar_memories(
        self,
        embedding: List[float],
        user_id: str,
        threshold: float = 0.85,
        limit: int = 5,
    ) -> List[Tuple[MemoryPoint, float]]:
        """
        Find memories at or above a similarity threshold.

        Args:
            embedding: The embedding vector to search for
            user_id: Owner of the memories
            threshold: Similarity threshold (0.0-1.0)
            limit: Maximum number of results to return

        Returns:
            List of (MemoryPoint, similarity) tuples
        """
        results = self._query(embedding, user_id, limit, threshold)
        logger.info(
            f"Found {len(results)} similar memories (threshold={threshold}, user_id={user_id})"
        )
        return results

    def update_memory(self, memory_id: str, payload_updates: dict) -> bool:
        try:
            self.client.set_payload(
                collection_name=self.collection_name, payload=payload_updates, points=[memory_id]
            )
            logger.debug(f"Updated memory {memory_id}: {payload_updates}")
            return True
        except Exception as e:
            logger.error(f"Failed to update memory {memory_id}: {e}")
            return False

    def get_by_id(self, memory_id: str) -> Optional[MemoryPoint]:
        try:
            result = self.client.retrieve(
                collection_name=self.collection_name,
                ids=[memory_id],
                with_vectors=True,
                with_payload=True,
            )
            return self._to_point(result[0]) if result else None
        except Exception as e:
            logger.error(f"Failed to retrieve memory {memory_id}: {e}")
            return None

    def list_user_memories(self, user_id: str) -> List[MemoryPoint]:
        points: List[MemoryPoint] = []
        offset = None
        while True:
            records, offset = self.client.scroll(
                collection_name=self.collection_name,
                scroll_filter=self._user_filter(user_id),
                limit=256,
                offset=offset,
                with_payload=True,
                with_vectors=True,
            )
            points.extend(self._to_point(record) for record in records)
            if offset is None:
                break
        return points

    def delete_memory(self, memory_id: str) -> bool:
        try:
            self.client.delete(collection_name=self.collection_name, points_selector=[memory_id])
            logger.info(f"Deleted memory {memory_id}")
            return True
        except Exception as e:
            logger.error(f"Failed to delete memory {memory_id}: {e}")
            return False

    def clear_user_memories(self, user_id: str) -> int:
        """
        Clear all memories for a specific user.

        Returns:
            Number of memories deleted
        """
        try:
            ids = [point.id for point in self.list_user_memories(user_id)]
            if ids:
                self.client.delete(collection_name=self.collection_name, points_selector=ids)
            logger.info(f"Cleared {len(ids)} memories for user_id={user_id}")
            return len(ids)
        except Exception as e:
            logger.error(f"Failed to clear memories for user_id={user_id}: {e}")
            raise
