"""
Redis conversation storage implementation.

Conversations are stored as JSON strings and messages as Redis lists, so the
store survives restarts and works across multiple replicas.
"""

import logging
from typing import List, Optional

from casual_creator.models import DEFAULT_CONVERSATION_TITLE, Conversation, ConversationMessage

try:
    import redis
except ImportError:
    redis = None  # type: ignore

logger = logging.getLogger(__name__)


class RedisConversationStore:
    """Redis implementation of the ConversationStore protocol."""

    def __init__(
        self,
        host: str = "localhost",
        port: int = 6379,
        db: int = 0,
        key_prefix: str = "creator:",
        client=None,
    ):
        """
        Initialize the Redis store.

        Args:
            host: Redis host
            port: Redis port
            db: Redis database number
            key_prefix: Prefix for Redis keys (default: "creator:")
            client: Pre-built Redis client (overrides host/port/db)
        """
        if client is None:
            if redis is None:
                raise ImportError(
                    "redis package is required for RedisConversationStore. "
                    "Install with: pip install casual-creator[redis]"
                )
            client = redis.Redis(host=host, port=port, db=db, decode_responses=True)

        self.client = client
        self._key_prefix = key_prefix

        logger.info(f"RedisConversationStore initialized (prefix={key_prefix})")

    def _conversation_key(self, conversation_id: str) -> str:
        return f"{self._key_prefix}conversation:{conversation_id}"

    def _messages_key(self, conversation_id: str) -> str:
        return f"{self._key_prefix}messages:{conversation_id}"

    def create_conversation(
        self, user_id: str, title: str = DEFAULT_CONVERSATION_TITLE
    ) -> Conversation:
        conversation = Conversation(user_id=user_id, title=title)
        self.client.set(self._conversation_key(conversation.id), conversation.model_dump_json())
        logger.debug(f"Created conversation {conversation.id} for user {user_id}")
        return conversation

    def get_conversation(self, conversation_id: str) -> Optional[Conversation]:
        data = self.client.get(self._conversation_key(conversation_id))
        if data is None:
            return None
        return Conversation.model_validate_json(data)

    def update_title(self, conversation_id: str, title: str) -> bool:
        conversation = self.get_conversation(conversation_id)
        if conversation is None:
            logger.warning(f"Cannot set title: conversation {conversation_id} not found")
            return False
        conversation.title = title
        self.client.set(self._conversation_key(conversation_id), conversation.model_dump_json())
        return True

    def add_messages(self, conversation_id: str, messages: List[ConversationMessage]) -> int:
        key = self._messages_key(conversation_id)
        pipeline = self.client.pipeline()

        for message in messages:
            pipeline.rpush(key, message.model_dump_json())

        pipeline.execute()

        logger.debug(f"Added {len(messages)} messages to conversation {conversation_id}")
        return len(messages)

    def get_messages(
        self, conversation_id: str, limit: Optional[int] = None
    ) -> List[ConversationMessage]:
        key = self._messages_key(conversation_id)
        if limit is not None and limit <= 0:
            return []
        start = -limit if limit else 0
        raw_messages = self.client.lrange(key, start, -1)

        messages = []
        for raw in raw_messages:
            try:
                messages.append(ConversationMessage.model_validate_json(raw))
            except Exception as e:
                logger.warning(f"Failed to deserialize message: {e}")
                continue

        return messages

    def count_messages(self, conversation_id: str) -> int:
        return self.client.llen(self._messages_key(conversation_id))
