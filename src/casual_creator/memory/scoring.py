"""
Memory scoring and lifecycle utilities.

Implements time-decayed memory scoring, heuristic importance for new
memories, staleness detection for manual pruning, and keyword extraction for
auxiliary indexing. All functions are pure.
"""

import logging
import math
import re
from collections import Counter
from datetime import datetime
from typing import Iterable, List, Optional

from casual_creator.models import MemoryRecord

logger = logging.getLogger(__name__)

DEFAULT_HALF_LIFE_DAYS = 30.0
DEFAULT_SIMILARITY = 0.8
MAX_RETRIEVAL_BOOST_COUNT = 10
RETRIEVAL_BOOST_PER_HIT = 0.1

STALE_MIN_DAYS_OLD = 90
STALE_MAX_SCORE = 0.3
STALE_LIMIT = 50

MAX_KEYWORDS = 10
MIN_KEYWORD_LENGTH = 5

STOP_WORDS = frozenset(
    [
        "that", "this", "with", "have", "been", "they", "your", "from",
        "about", "would", "there", "their", "what", "which", "when",
        "where", "will", "can", "all", "were", "we", "but", "or",
        "some", "had", "has", "was", "for", "not", "are", "and",
        "the", "to", "of", "in", "is", "it", "you", "he", "she",
    ]
)


def age_in_days(created_at: datetime, now: Optional[datetime] = None) -> float:
    """Fractional days between ``created_at`` and ``now`` (never negative)."""
    now = now or datetime.now()
    return max(0.0, (now - created_at).total_seconds() / 86400)


def decay_factor(age_days: float, half_life_days: float = DEFAULT_HALF_LIFE_DAYS) -> float:
    """Exponential decay that halves every ``half_life_days``."""
    if half_life_days <= 0:
        raise ValueError("half_life_days must be positive")
    return math.exp(-math.log(2) * age_days / half_life_days)


def retrieval_boost(retrieval_count: int) -> float:
    return 1 + RETRIEVAL_BOOST_PER_HIT * min(max(retrieval_count, 0), MAX_RETRIEVAL_BOOST_COUNT)


def calculate_memory_score(
    memory: MemoryRecord,
    now: Optional[datetime] = None,
    half_life_days: float = DEFAULT_HALF_LIFE_DAYS,
    similarity: Optional[float] = None,
) -> float:
    """
    Score a memory by importance, age, retrieval frequency and query similarity.

    ``importance * exp(-ln2 * age / half_life) * (1 + 0.1 * min(retrievals, 10)) * similarity``
    floored at 0. Boosted scores may exceed 1.0; for fixed importance and
    retrieval count the score is strictly decreasing in age.

    Args:
        memory: Memory to score
        now: Reference time (defaults to now)
        half_life_days: Days for the time factor to halve
        similarity: Similarity to the current query; 0.8 when not known

    Returns:
        Non-negative score
    """
    if similarity is None:
        similarity = DEFAULT_SIMILARITY

    score = (
        memory.importance
        * decay_factor(age_in_days(memory.created_at, now), half_life_days)
        * retrieval_boost(memory.retrieval_count)
        * similarity
    )
    return max(0.0, score)


def calculate_importance_score(
    content: str,
    is_from_analysis: bool = False,
    is_user_statement: bool = False,
    contains_business_info: bool = False,
) -> float:
    """Heuristic importance for a new memory from its origin and wording."""
    score = 0.5

    if is_from_analysis:
        score += 0.2
    if is_user_statement:
        score += 0.15
    if contains_business_info:
        score += 0.15

    text = content.lower()

    # Identity statements
    if any(phrase in text for phrase in ("my name", "my business", "i am", "i'm")):
        score += 0.2

    # Positioning details
    if any(
        phrase in text
        for phrase in ("target audience", "brand voice", "content goal", "niche")
    ):
        score += 0.15

    # Preferences and decisions
    if any(
        phrase in text
        for phrase in ("prefer", "want to", "decided to", "will focus on")
    ):
        score += 0.1

    return min(1.0, score)


def identify_stale_memories(
    memories: Iterable[MemoryRecord],
    now: Optional[datetime] = None,
    min_days_old: int = STALE_MIN_DAYS_OLD,
    max_score: float = STALE_MAX_SCORE,
    limit: int = STALE_LIMIT,
    half_life_days: float = DEFAULT_HALF_LIFE_DAYS,
) -> List[MemoryRecord]:
    """
    Return memories older than ``min_days_old`` whose decayed score is below ``max_score``.

    Scores are computed without a query, so the similarity factor is 1.0.
    Nothing is deleted here; callers prune explicitly.
    """
    now = now or datetime.now()
    stale: List[MemoryRecord] = []

    for memory in memories:
        if age_in_days(memory.created_at, now) <= min_days_old:
            continue
        score = calculate_memory_score(memory, now, half_life_days, similarity=1.0)
        if score < max_score:
            stale.append(memory)
        if len(stale) >= limit:
            break

    logger.debug(f"Identified {len(stale)} stale memories (min_days_old={min_days_old})")
    return stale


def find_related_memories(
    target: MemoryRecord, memories: Iterable[MemoryRecord]
) -> List[MemoryRecord]:
    """Memories from the same conversation as ``target`` or explicitly linked to it."""
    related: List[MemoryRecord] = []

    for memory in memories:
        if memory.id == target.id:
            continue
        if target.conversation_id and memory.conversation_id == target.conversation_id:
            related.append(memory)
        elif memory.id in target.related_memory_ids:
            related.append(memory)

    return related


def extract_keywords(content: str, limit: int = MAX_KEYWORDS) -> List[str]:
    """
    Frequency-ranked keywords for auxiliary indexing.

    Lower-cases, strips punctuation, drops short words and stop words, then
    ranks by frequency (ties keep first-occurrence order).
    """
    words = [
        word
        for word in re.sub(r"[^\w\s]", " ", content.lower()).split()
        if len(word) >= MIN_KEYWORD_LENGTH and word not in STOP_WORDS
    ]
    counts = Counter(words)

    # Counter preserves insertion order, and sorted() is stable
    ranked = sorted(counts, key=lambda word: counts[word], reverse=True)
    return ranked[:limit]


def updated_after_retrieval(
    memory: MemoryRecord, now: Optional[datetime] = None
) -> MemoryRecord:
    """Return a copy with the retrieval count bumped and the retrieval time set."""
    return memory.model_copy(
        update={
            "retrieval_count": memory.retrieval_count + 1,
            "last_retrieved_at": now or datetime.now(),
        }
    )
