import logging
import re
from dataclasses import dataclass
from typing import List, Literal, Optional, Sequence

from casual_llm import LLMProvider, SystemMessage, UserMessage

from casual_creator.extractors.prompts import EXISTING_MEMORIES_SECTION, MEMORY_EXTRACTION_PROMPT
from casual_creator.utils.json_parsing import parse_json_array

logger = logging.getLogger(__name__)

CandidateSource = Literal["user", "assistant", "conversation"]

MIN_LENGTH = 10
MAX_LENGTH = 500
MIN_WORDS = 4
MAX_WORDS = 80
FALLBACK_CONFIDENCE = 0.5

_QUOTES = re.compile(r"[\"'«»“”‘’]")
_PARENS = re.compile(r"[()\[\]]")
_QUOTED_STRING = re.compile(r'"([^"]*)"')


@dataclass
class MemoryCandidate:
    """A memory proposed by extraction, before embedding and upsert."""

    content: str
    confidence: float
    source: CandidateSource = "conversation"


def _meaningful_ratio(text: str) -> float:
    meaningful = sum(1 for char in text if char.isalnum())
    return meaningful / len(text) if text else 0.0


def score_candidate(text: str) -> Optional[MemoryCandidate]:
    """
    Apply the quality filter to one extracted string.

    Returns:
        A MemoryCandidate with an inferred confidence and source, or None when
        the text is a question, a bare JSON fragment, low-diversity noise, or
        outside the length/word-count bounds
    """
    trimmed = text.strip()
    if len(trimmed) < MIN_LENGTH or len(trimmed) > MAX_LENGTH:
        return None
    if _meaningful_ratio(trimmed) < 0.4:
        return None

    if trimmed.endswith("?"):
        logger.debug(f"Filtered question: {trimmed!r}")
        return None

    hashtag_count = trimmed.count("#")
    if hashtag_count == 0 and (
        re.match(r'^\{.*".*".*\}$', trimmed) or re.match(r"^\[.*\]$", trimmed)
    ):
        logger.debug(f"Filtered JSON structure: {trimmed!r}")
        return None

    confidence = 0.7
    if hashtag_count < 3:
        diversity = len(set(trimmed.lower())) / len(trimmed)
        if diversity < 0.15:
            logger.debug(f"Filtered low diversity ({diversity:.2f}): {trimmed!r}")
            return None
        if diversity > 0.3:
            confidence += 0.1

    if len(_QUOTES.findall(trimmed)) >= 8:
        logger.debug(f"Filtered multiple quotes: {trimmed!r}")
        return None

    word_count = len(trimmed.split())
    if word_count < MIN_WORDS and hashtag_count < 2:
        logger.debug(f"Filtered too short ({word_count} words): {trimmed!r}")
        return None
    if word_count > MAX_WORDS:
        logger.debug(f"Filtered too long ({word_count} words): {trimmed!r}")
        return None
    if 10 <= word_count <= 40 or hashtag_count >= 3:
        confidence += 0.15

    if len(_PARENS.findall(trimmed)) >= 8 and hashtag_count < 2:
        logger.debug(f"Filtered excessive parentheticals: {trimmed!r}")
        return None

    lowered = trimmed.lower()
    source: CandidateSource = "conversation"
    if "user wants" in lowered or "user confirmed" in lowered:
        source = "user"
        confidence += 0.1
    elif "analysis" in lowered or "discovered" in lowered:
        source = "assistant"

    return MemoryCandidate(content=trimmed, confidence=min(1.0, confidence), source=source)


def fallback_candidates(raw: str, limit: int = 5) -> List[MemoryCandidate]:
    """Recover quoted strings from output that failed to parse as a JSON array."""
    candidates: List[MemoryCandidate] = []
    for match in _QUOTED_STRING.findall(raw):
        text = match.strip()
        if MIN_LENGTH <= len(text) <= MAX_LENGTH and _meaningful_ratio(text) >= 0.4:
            candidates.append(
                MemoryCandidate(content=text, confidence=FALLBACK_CONFIDENCE, source="conversation")
            )
        if len(candidates) >= limit:
            break
    return candidates


class ConversationMemoryExtracter:
    """Extracts 0-N memory candidates from one user/assistant exchange."""

    def __init__(self, llm_provider: LLMProvider, max_memories: int = 4):
        self.llm_provider = llm_provider
        self.max_memories = max_memories

    async def extract(
        self,
        user_message: str,
        assistant_response: str,
        existing_memories: Sequence[str] = (),
    ) -> List[MemoryCandidate]:
        existing = ""
        if existing_memories:
            existing = EXISTING_MEMORIES_SECTION.format(
                memories="\n".join(f"- {content}" for content in list(existing_memories)[:3])
            )

        llm_messages = [
            SystemMessage(
                content=MEMORY_EXTRACTION_PROMPT.format(
                    max_memories=self.max_memories, existing=existing
                )
            ),
            UserMessage(content=f"User: {user_message}\n\nAssistant: {assistant_response}"),
        ]

        try:
            logger.debug("Extracting conversation memories")
            response = await self.llm_provider.chat(
                messages=llm_messages,
                response_format="text",
                temperature=0.15,
                max_tokens=300,
            )
        except Exception as e:
            logger.error(f"Memory LLM Failed: {e}")
            return []

        raw = (response.content or "").strip()
        if not raw:
            return []

        try:
            items = parse_json_array(raw)
        except ValueError as e:
            logger.warning(f"Failed to parse memory extraction JSON: {e}")
            candidates = fallback_candidates(raw)
        else:
            candidates = [
                candidate
                for candidate in (score_candidate(item) for item in items if isinstance(item, str))
                if candidate is not None
            ]

        candidates = candidates[: self.max_memories]
        logger.info(f"Extracted {len(candidates)} conversation memories")
        return candidates
