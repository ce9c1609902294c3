"""
Unit tests for in-memory vector storage.

Tests vector search, similarity matching, user scoping, in-place replacement
and memory management.
"""

from datetime import datetime

import pytest

from casual_creator.storage.vector.memory import InMemoryVectorStore


@pytest.fixture
def vector_store():
    """Create a fresh in-memory vector store."""
    return InMemoryVectorStore()


@pytest.fixture
def sample_vectors():
    """Sample vectors for testing."""
    return {
        "vec1": [1.0, 0.0, 0.0],  # Orthogonal to vec2
        "vec2": [0.0, 1.0, 0.0],  # Orthogonal to vec1
        "vec3": [0.9, 0.1, 0.0],  # Similar to vec1
        "vec4": [0.1, 0.9, 0.0],  # Similar to vec2
    }


def make_payload(content="User runs a vegan bakery", user_id="user123", **overrides):
    """Memory payload with ISO timestamps."""
    payload = {
        "content": content,
        "user_id": user_id,
        "source": "conversation",
        "importance": 0.5,
        "created_at": datetime.now().isoformat(),
    }
    payload.update(overrides)
    return payload


def test_add_and_get_by_id(vector_store, sample_vectors):
    """Test adding a memory and reading it back."""
    memory_id = vector_store.add(sample_vectors["vec1"], make_payload())

    point = vector_store.get_by_id(memory_id)

    assert point.payload.content == "User runs a vegan bakery"
    assert point.vector == [1.0, 0.0, 0.0]
    assert point.to_record().id == memory_id


def test_get_missing_id(vector_store):
    """Test unknown ids return None."""
    assert vector_store.get_by_id("nope") is None


def test_search_orders_by_similarity(vector_store, sample_vectors):
    """Test search returns the closest vectors first."""
    vector_store.add(sample_vectors["vec2"], make_payload("Second"))
    vector_store.add(sample_vectors["vec3"], make_payload("Close to first"))
    vector_store.add(sample_vectors["vec1"], make_payload("First"))

    results = vector_store.search(sample_vectors["vec1"], user_id="user123", top_k=2)

    assert [point.payload.content for point, _ in results] == ["First", "Close to first"]
    assert results[0][1] == pytest.approx(1.0)


def test_search_is_scoped_to_user(vector_store, sample_vectors):
    """Test another user's memories are never returned."""
    vector_store.add(sample_vectors["vec1"], make_payload(user_id="other"))

    assert vector_store.search(sample_vectors["vec1"], user_id="user123") == []


def test_search_min_score(vector_store, sample_vectors):
    """Test results below min_score are filtered."""
    vector_store.add(sample_vectors["vec2"], make_payload())

    assert vector_store.search(sample_vectors["vec1"], user_id="user123", min_score=0.5) == []


def test_find_similar_memories_threshold(vector_store, sample_vectors):
    """Test only memories at or above the threshold are returned."""
    vector_store.add(sample_vectors["vec3"], make_payload("Similar"))
    vector_store.add(sample_vectors["vec4"], make_payload("Different"))

    results = vector_store.find_similar_memories(sample_vectors["vec1"], "user123", threshold=0.9)

    assert [point.payload.content for point, _ in results] == ["Similar"]


def test_replace_overwrites_in_place(vector_store, sample_vectors):
    """Test replace keeps the id and swaps vector and payload."""
    memory_id = vector_store.add(sample_vectors["vec1"], make_payload("Old"))

    assert vector_store.replace(memory_id, sample_vectors["vec2"], make_payload("New"))

    point = vector_store.get_by_id(memory_id)
    assert point.payload.content == "New"
    assert point.vector == sample_vectors["vec2"]
    assert vector_store.replace("missing", sample_vectors["vec2"], make_payload()) is False


def test_update_memory(vector_store, sample_vectors):
    """Test partial payload updates."""
    memory_id = vector_store.add(sample_vectors["vec1"], make_payload())

    assert vector_store.update_memory(memory_id, {"retrieval_count": 3})
    assert vector_store.get_by_id(memory_id).payload.retrieval_count == 3


def test_delete_and_clear(vector_store, sample_vectors):
    """Test deleting single memories and clearing a user's memories."""
    first = vector_store.add(sample_vectors["vec1"], make_payload())
    vector_store.add(sample_vectors["vec2"], make_payload())
    vector_store.add(sample_vectors["vec3"], make_payload(user_id="other"))

    assert vector_store.delete_memory(first) is True
    assert vector_store.delete_memory(first) is False
    assert vector_store.clear_user_memories("user123") == 1
    assert vector_store.list_user_memories("user123") == []
    assert len(vector_store.list_user_memories("other")) == 1
