"""
In-memory conversation storage implementation.

Keeps conversations and their message lists in dicts. Data is lost on restart.
"""

import logging
from typing import Dict, List, Optional

from casual_creator.models import DEFAULT_CONVERSATION_TITLE, Conversation, ConversationMessage

logger = logging.getLogger(__name__)


class InMemoryConversationStore:
    """In-memory implementation of the ConversationStore protocol."""

    def __init__(self):
        self._conversations: Dict[str, Conversation] = {}
        self._messages: Dict[str, List[ConversationMessage]] = {}

        logger.info("InMemoryConversationStore initialized")

    def create_conversation(
        self, user_id: str, title: str = DEFAULT_CONVERSATION_TITLE
    ) -> Conversation:
        conversation = Conversation(user_id=user_id, title=title)
        self._conversations[conversation.id] = conversation
        self._messages[conversation.id] = []
        logger.debug(f"Created conversation {conversation.id} for user {user_id}")
        return conversation

    def get_conversation(self, conversation_id: str) -> Optional[Conversation]:
        return self._conversations.get(conversation_id)

    def update_title(self, conversation_id: str, title: str) -> bool:
        conversation = self._conversations.get(conversation_id)
        if conversation is None:
            logger.warning(f"Cannot set title: conversation {conversation_id} not found")
            return False
        conversation.title = title
        return True

    def add_messages(self, conversation_id: str, messages: List[ConversationMessage]) -> int:
        self._messages.setdefault(conversation_id, []).extend(messages)
        logger.debug(f"Added {len(messages)} messages to conversation {conversation_id}")
        return len(messages)

    def get_messages(
        self, conversation_id: str, limit: Optional[int] = None
    ) -> List[ConversationMessage]:
        messages = self._messages.get(conversation_id, [])
        if limit is not None:
            messages = messages[-limit:] if limit > 0 else []
        return list(messages)

    def count_messages(self, conversation_id: str) -> int:
        return len(self._messages.get(conversation_id, []))
