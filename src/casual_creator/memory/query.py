"""Build short, focused memory-search queries from the user's message."""

import logging
from typing import Sequence

from casual_creator.models import ConversationMessage

logger = logging.getLogger(__name__)

OPTIMAL_MIN = 60
OPTIMAL_MAX = 200
CONTEXT_WORDS = 15

_CONTEXT_STOP_WORDS = {"that", "this", "with", "have", "been", "they", "your", "from", "about"}


def build_memory_search_query(
    message: str, history: Sequence[ConversationMessage] = ()
) -> str:
    """
    Shape the user message into a 60-200 character embedding query.

    Long messages are cut at the last sentence boundary inside the limit;
    short ones are padded with key words from the last assistant reply.
    """
    text = message.strip()
    length = len(text)

    if OPTIMAL_MIN <= length <= OPTIMAL_MAX:
        return text

    if length > OPTIMAL_MAX:
        truncated = text[:OPTIMAL_MAX]
        boundary = max(truncated.rfind("."), truncated.rfind("?"), truncated.rfind("!"))
        if boundary > OPTIMAL_MIN:
            truncated = truncated[: boundary + 1]
        result = truncated.strip()
        logger.debug(f"Truncated memory query ({length} -> {len(result)} chars)")
        return result

    last_assistant = next(
        (msg for msg in reversed(list(history)) if msg.role == "assistant"), None
    )
    if last_assistant is None:
        return text

    words = [
        word
        for word in last_assistant.content.lower().split()
        if len(word) > 4 and word not in _CONTEXT_STOP_WORDS
    ]
    query = f"{text} {' '.join(words[:CONTEXT_WORDS])}".strip()[:OPTIMAL_MAX]
    logger.debug(f"Padded memory query with assistant context ({length} -> {len(query)} chars)")
    return query
