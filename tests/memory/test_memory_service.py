"""
Unit tests for MemoryService.

Uses the in-memory vector store with a lookup-table embedder so similarity
between texts is fully controlled.
"""

from datetime import datetime, timedelta
from unittest.mock import AsyncMock, Mock

import pytest

from casual_creator.memory import MemoryService
from casual_creator.storage.vector.memory import InMemoryVectorStore

VECTORS = {
    "Runs a vegan bakery in Leeds": [1.0, 0.0, 0.0],
    "Runs a vegan bakery in Leeds city centre": [0.98, 0.2, 0.0],
    "Prefers posting short videos on TikTok": [0.0, 1.0, 0.0],
    "bakery": [0.9, 0.1, 0.0],
}


class LookupEmbedding:
    """Embedder returning fixed vectors per text."""

    dimension = 3
    model_name = "lookup"

    def __init__(self, vectors):
        self.vectors = vectors

    async def embed_document(self, text):
        return self.vectors[text]

    async def embed_query(self, text):
        return self.vectors[text]

    async def embed_documents(self, texts):
        return [self.vectors[text] for text in texts]


@pytest.fixture
def vector_store():
    """Fresh in-memory vector store."""
    return InMemoryVectorStore()


@pytest.fixture
def memory_service(vector_store):
    """Memory service over the lookup embedder."""
    return MemoryService(vector_store=vector_store, embedding=LookupEmbedding(VECTORS))


@pytest.mark.asyncio
async def test_near_duplicate_merges_and_dissimilar_adds(memory_service):
    """Test A then near-duplicate A' keeps one row with new content; B adds a second row."""
    first = await memory_service.remember("user_123", "Runs a vegan bakery in Leeds")
    second = await memory_service.remember(
        "user_123", "Runs a vegan bakery in Leeds city centre", similarity_threshold=0.85
    )

    memories = memory_service.get_user_memories("user_123")
    assert first.action == "added"
    assert second.action == "merged"
    assert second.memory_id == first.memory_id
    assert second.similarity >= 0.85
    assert len(memories) == 1
    assert memories[0].content == "Runs a vegan bakery in Leeds city centre"

    third = await memory_service.remember("user_123", "Prefers posting short videos on TikTok")

    assert third.action == "added"
    assert len(memory_service.get_user_memories("user_123")) == 2


@pytest.mark.asyncio
async def test_merge_keeps_identity_and_counters(memory_service, vector_store):
    """Test a merge keeps id, creation time and retrieval count and takes the higher importance."""
    first = await memory_service.remember(
        "user_123", "Runs a vegan bakery in Leeds", metadata={"importance": 0.9}
    )
    vector_store.update_memory(first.memory_id, {"retrieval_count": 4})
    original = vector_store.get_by_id(first.memory_id).to_record()

    await memory_service.remember(
        "user_123",
        "Runs a vegan bakery in Leeds city centre",
        metadata={"importance": 0.4, "source": "user_confirmed"},
    )

    merged = vector_store.get_by_id(first.memory_id).to_record()
    assert merged.created_at == original.created_at
    assert merged.retrieval_count == 4
    assert merged.importance == 0.9
    assert merged.source == "user_confirmed"
    assert "updated_at" in merged.metadata


@pytest.mark.asyncio
async def test_memories_are_scoped_per_user(memory_service):
    """Test a near-duplicate from another user never merges."""
    await memory_service.remember("user_a", "Runs a vegan bakery in Leeds")
    result = await memory_service.remember("user_b", "Runs a vegan bakery in Leeds")

    assert result.action == "added"
    assert len(memory_service.get_user_memories("user_a")) == 1
    assert len(memory_service.get_user_memories("user_b")) == 1


def test_upsert_rejects_empty_content(memory_service):
    """Test blank content is rejected."""
    with pytest.raises(ValueError):
        memory_service.upsert("user_123", "   ", [1.0, 0.0, 0.0])


def test_upsert_sets_importance_from_source(memory_service):
    """Test analysis-derived memories get the analysis importance boost."""
    result = memory_service.upsert(
        "user_123",
        "Posts on weekday mornings",
        [0.0, 0.0, 1.0],
        metadata={"source": "instagram_analysis", "username": "brandx"},
    )

    record = memory_service.get_user_memories("user_123")[0]
    assert result.action == "added"
    assert record.importance == pytest.approx(0.7)
    assert record.metadata == {"username": "brandx"}
    assert record.keywords


@pytest.mark.asyncio
async def test_embedding_failure_skips_write(vector_store):
    """Test a failing embedder skips the write without raising."""
    embedding = Mock()
    embedding.embed_document = AsyncMock(side_effect=RuntimeError("embedding service down"))
    service = MemoryService(vector_store=vector_store, embedding=embedding)

    result = await service.remember("user_123", "Runs a vegan bakery in Leeds")

    assert result is None
    assert vector_store.list_user_memories("user_123") == []
    embedding.embed_document.assert_awaited_once()


@pytest.mark.asyncio
async def test_search_ranks_by_similarity_and_bumps_retrievals(memory_service, vector_store):
    """Test retrieval orders by raw similarity and records the retrieval."""
    await memory_service.remember("user_123", "Prefers posting short videos on TikTok")
    bakery = await memory_service.remember("user_123", "Runs a vegan bakery in Leeds")

    results = await memory_service.search("user_123", "bakery", k=2)

    assert [r.content for r in results] == [
        "Runs a vegan bakery in Leeds",
        "Prefers posting short videos on TikTok",
    ]
    assert results[0].similarity > results[1].similarity
    stored = vector_store.get_by_id(bakery.memory_id).to_record()
    assert stored.retrieval_count == 1
    assert stored.last_retrieved_at is not None


@pytest.mark.asyncio
async def test_search_embedding_failure_returns_nothing(vector_store):
    """Test query embedding failures degrade to no memories."""
    embedding = Mock()
    embedding.embed_query = AsyncMock(side_effect=RuntimeError("timeout"))
    service = MemoryService(vector_store=vector_store, embedding=embedding)

    assert await service.search("user_123", "anything") == []


def test_identify_stale_and_prune(memory_service, vector_store):
    """Test stale memories are reported but only removed by an explicit prune."""
    old = memory_service.upsert("user_123", "Posted once about candles", [0.0, 0.0, 1.0])
    vector_store.update_memory(
        old.memory_id,
        {"created_at": (datetime.now() - timedelta(days=200)).isoformat(), "importance": 0.3},
    )
    memory_service.upsert("user_123", "Runs a vegan bakery in Leeds", [1.0, 0.0, 0.0])

    stale = memory_service.identify_stale("user_123")

    assert [memory.id for memory in stale] == [old.memory_id]
    assert len(memory_service.get_user_memories("user_123")) == 2

    assert memory_service.prune([old.memory_id, "missing"]) == 1
    assert len(memory_service.get_user_memories("user_123")) == 1
