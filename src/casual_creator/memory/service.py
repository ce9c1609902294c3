import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from casual_creator.embeddings import TextEmbedding
from casual_creator.memory.models import MemoryWriteResult, RetrievedMemory
from casual_creator.memory.scoring import (
    DEFAULT_HALF_LIFE_DAYS,
    calculate_importance_score,
    extract_keywords,
    identify_stale_memories,
    updated_after_retrieval,
)
from casual_creator.models import MemoryRecord, MemorySource
from casual_creator.storage import VectorMemoryStore
from casual_creator.storage.vector.models import MemoryPointPayload

logger = logging.getLogger(__name__)

DEFAULT_SIMILARITY_THRESHOLD = 0.85

# Metadata keys that map onto first-class memory fields
_RECORD_KEYS = ("source", "importance", "conversation_id", "related_memory_ids")


class MemoryService:
    """
    Semantic memory with merge-on-write de-duplication.

    Writes compare the new embedding against the user's stored memories: a
    match at or above the threshold is overwritten in place (the same fact
    restated), anything else becomes a new row. Retrieval ranks by raw vector
    similarity; decay scoring is used only to find stale memories.
    """

    def __init__(
        self,
        vector_store: VectorMemoryStore,
        embedding: TextEmbedding,
        half_life_days: float = DEFAULT_HALF_LIFE_DAYS,
    ):
        self.vector_store = vector_store
        self.embedding = embedding
        self.half_life_days = half_life_days

    def upsert(
        self,
        user_id: str,
        content: str,
        embedding: List[float],
        metadata: Optional[Dict[str, Any]] = None,
        similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
    ) -> MemoryWriteResult:
        """
        Insert a memory, or overwrite its closest near-duplicate.

        Args:
            user_id: Owner of the memory
            content: Memory text
            embedding: Embedding of ``content``
            metadata: ``source``, ``importance``, ``conversation_id`` and
                ``related_memory_ids`` populate record fields; other keys are
                kept in the record's free-form metadata
            similarity_threshold: Similarity at or above which the closest
                existing memory is treated as the same fact

        Returns:
            MemoryWriteResult describing whether a row was added or merged

        Raises:
            ValueError: If content is empty
        """
        content = content.strip() if content else ""
        if not content:
            raise ValueError("Cannot store empty memory content")

        metadata = dict(metadata or {})
        extra = {k: v for k, v in metadata.items() if k not in _RECORD_KEYS}
        source: MemorySource = metadata.get("source", "conversation")
        importance = metadata.get("importance")
        if importance is None:
            importance = calculate_importance_score(
                content,
                is_from_analysis=source in ("instagram_analysis", "hashtag_search", "blog_analysis"),
                is_user_statement=source == "user_confirmed",
            )

        similar = self.vector_store.find_similar_memories(
            embedding=embedding,
            user_id=user_id,
            threshold=similarity_threshold,
            limit=1,
        )

        if similar:
            point, similarity = similar[0]
            existing = point.to_record()
            merged = existing.model_copy(
                update={
                    "content": content,
                    "embedding": list(embedding),
                    "source": source,
                    "importance": max(existing.importance, float(importance)),
                    "conversation_id": metadata.get("conversation_id") or existing.conversation_id,
                    "related_memory_ids": metadata.get(
                        "related_memory_ids", existing.related_memory_ids
                    ),
                    "keywords": extract_keywords(content),
                    "metadata": {
                        **existing.metadata,
                        **extra,
                        "updated_at": datetime.now().isoformat(),
                    },
                }
            )
            self.vector_store.replace(
                existing.id, merged.embedding, MemoryPointPayload.from_record(merged).model_dump()
            )
            logger.info(
                f"Memory action: merged, memory_id={existing.id}, similarity={similarity:.3f}"
            )
            return MemoryWriteResult(action="merged", memory_id=existing.id, similarity=similarity)

        record = MemoryRecord(
            user_id=user_id,
            content=content,
            embedding=list(embedding),
            source=source,
            importance=float(importance),
            conversation_id=metadata.get("conversation_id"),
            related_memory_ids=list(metadata.get("related_memory_ids") or []),
            keywords=extract_keywords(content),
            metadata=extra,
        )
        memory_id = self.vector_store.add(
            record.embedding, MemoryPointPayload.from_record(record).model_dump(), memory_id=record.id
        )
        logger.info(f"Memory action: added, memory_id={memory_id}")
        return MemoryWriteResult(action="added", memory_id=memory_id)

    async def remember(
        self,
        user_id: str,
        content: str,
        metadata: Optional[Dict[str, Any]] = None,
        similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
    ) -> Optional[MemoryWriteResult]:
        """
        Embed ``content`` and upsert it.

        Embedding failures skip the write (logged, not raised, never retried
        inline).
        """
        try:
            vector = await self.embedding.embed_document(content)
        except Exception as e:
            logger.error(f"Skipping memory write, embedding failed: {e}")
            return None

        return self.upsert(user_id, content, vector, metadata, similarity_threshold)

    def retrieve(
        self, user_id: str, query_embedding: List[float], k: int = 5, min_score: float = 0.0
    ) -> List[RetrievedMemory]:
        """
        Top-k memories by raw similarity to the query embedding.

        Returned memories get their retrieval count and last-retrieved time
        bumped.
        """
        results = self.vector_store.search(
            query_embedding=query_embedding, user_id=user_id, top_k=k, min_score=min_score
        )

        now = datetime.now()
        retrieved: List[RetrievedMemory] = []
        for point, similarity in results:
            record = updated_after_retrieval(point.to_record(), now)
            self.vector_store.update_memory(
                record.id,
                {
                    "retrieval_count": record.retrieval_count,
                    "last_retrieved_at": now.isoformat(),
                },
            )
            retrieved.append(RetrievedMemory(memory=record, similarity=similarity))

        logger.info(f"{len(retrieved)} memories retrieved for user {user_id}")
        return retrieved

    async def search(self, user_id: str, query: str, k: int = 5) -> List[RetrievedMemory]:
        """Embed a query string and retrieve. Embedding failures yield no memories."""
        try:
            query_vector = await self.embedding.embed_query(query)
        except Exception as e:
            logger.error(f"Memory search skipped, embedding failed: {e}")
            return []

        return self.retrieve(user_id, query_vector, k)

    def get_user_memories(self, user_id: str) -> List[MemoryRecord]:
        return [point.to_record() for point in self.vector_store.list_user_memories(user_id)]

    def identify_stale(
        self,
        user_id: str,
        now: Optional[datetime] = None,
        min_days_old: int = 90,
        max_score: float = 0.3,
        limit: int = 50,
    ) -> List[MemoryRecord]:
        """Candidates for manual pruning: old memories with a low decayed score."""
        return identify_stale_memories(
            self.get_user_memories(user_id),
            now=now,
            min_days_old=min_days_old,
            max_score=max_score,
            limit=limit,
            half_life_days=self.half_life_days,
        )

    def prune(self, memory_ids: List[str]) -> int:
        """Delete the given memories. Only ever called explicitly."""
        deleted = sum(1 for memory_id in memory_ids if self.vector_store.delete_memory(memory_id))
        logger.info(f"Pruned {deleted}/{len(memory_ids)} memories")
        return deleted
