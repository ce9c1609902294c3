import logging
from typing import Sequence

from casual_llm import LLMProvider, SystemMessage, UserMessage

from casual_creator.extractors.prompts import TITLE_PROMPT
from casual_creator.models import DEFAULT_CONVERSATION_TITLE, ConversationMessage

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 50


class TitleGenerator:
    """Generates a short conversation title from the opening exchange."""

    def __init__(self, llm_provider: LLMProvider):
        self.llm_provider = llm_provider

    async def generate(self, messages: Sequence[ConversationMessage]) -> str:
        """Title from the first four messages; falls back to the default title on any failure."""
        conversation = "\n".join(f"{m.role}: {m.content}" for m in list(messages)[:4])
        llm_messages = [
            SystemMessage(content=TITLE_PROMPT),
            UserMessage(content=f"Conversation:\n{conversation}\n\nGenerate a title:"),
        ]

        try:
            response = await self.llm_provider.chat(
                messages=llm_messages, response_format="text", temperature=0.3, max_tokens=20
            )
        except Exception as e:
            logger.error(f"Error generating conversation title: {e}")
            return DEFAULT_CONVERSATION_TITLE

        title = (response.content or "").strip().strip('"').strip()
        if not title:
            return DEFAULT_CONVERSATION_TITLE
        if len(title) > MAX_TITLE_LENGTH:
            title = title[: MAX_TITLE_LENGTH - 3].rstrip() + "..."
        return title
