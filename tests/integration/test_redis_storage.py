"""Integration tests for Redis conversation storage backend."""

import pytest

from casual_creator.models import ConversationMessage


@pytest.fixture
def redis_store(skip_if_no_redis):
    """Redis store on a separate database, flushed afterwards."""
    pytest.importorskip("redis")
    from casual_creator.storage import RedisConversationStore

    store = RedisConversationStore(host="localhost", port=6379, db=15, key_prefix="test-creator:")
    yield store
    for key in store.client.scan_iter("test-creator:*"):
        store.client.delete(key)


@pytest.mark.integration
def test_redis_conversation_round_trip(redis_store):
    """Test conversations and titles persist in Redis."""
    conversation = redis_store.create_conversation("test_user")

    assert redis_store.update_title(conversation.id, "Vegan Bakery Strategy")

    stored = redis_store.get_conversation(conversation.id)
    assert stored.user_id == "test_user"
    assert stored.title == "Vegan Bakery Strategy"
    assert redis_store.get_conversation("missing") is None


@pytest.mark.integration
def test_redis_messages_and_limit(redis_store):
    """Test messages keep order and the limit returns the most recent."""
    conversation = redis_store.create_conversation("test_user")
    messages = [
        ConversationMessage(role="user", content="Hello"),
        ConversationMessage(role="assistant", content="Hi! What do you create?"),
        ConversationMessage(role="user", content="Baking videos"),
    ]

    assert redis_store.add_messages(conversation.id, messages) == 3

    assert [m.content for m in redis_store.get_messages(conversation.id)] == [
        "Hello",
        "Hi! What do you create?",
        "Baking videos",
    ]
    assert [m.role for m in redis_store.get_messages(conversation.id, limit=2)] == ["assistant", "user"]
    assert redis_store.count_messages(conversation.id) == 3
