"""
Unit tests for memory scoring.

Covers time decay, retrieval boosts, importance heuristics, staleness and
keyword extraction.
"""

from datetime import datetime, timedelta

import pytest

from casual_creator.memory import (
    calculate_importance_score,
    calculate_memory_score,
    extract_keywords,
    find_related_memories,
    identify_stale_memories,
    updated_after_retrieval,
)
from casual_creator.memory.scoring import decay_factor, retrieval_boost
from casual_creator.models import MemoryRecord

NOW = datetime(2025, 6, 1, 12, 0, 0)


def make_memory(days_old: float = 0, importance: float = 0.5, retrieval_count: int = 0, **kwargs):
    """Build a memory created ``days_old`` days before NOW."""
    return MemoryRecord(
        user_id="user_123",
        content=kwargs.pop("content", "Runs a vegan bakery in Leeds"),
        importance=importance,
        retrieval_count=retrieval_count,
        created_at=NOW - timedelta(days=days_old),
        **kwargs,
    )


def test_older_memory_scores_strictly_lower():
    """Test decay: an older memory scores below an otherwise identical newer one."""
    newer = make_memory(days_old=1)
    older = make_memory(days_old=40)

    assert calculate_memory_score(older, NOW) < calculate_memory_score(newer, NOW)


@pytest.mark.parametrize("days", [0.5, 5, 30, 365])
def test_decay_is_strictly_decreasing(days):
    """Test each later age scores strictly lower than the one before."""
    assert calculate_memory_score(make_memory(days_old=days * 2), NOW) < calculate_memory_score(
        make_memory(days_old=days), NOW
    )


def test_half_life_halves_the_score():
    """Test a memory one half-life old scores half of a fresh one."""
    fresh = calculate_memory_score(make_memory(days_old=0), NOW, half_life_days=30)
    aged = calculate_memory_score(make_memory(days_old=30), NOW, half_life_days=30)

    assert aged == pytest.approx(fresh / 2)


def test_retrieval_boost_is_capped():
    """Test the retrieval boost stops growing after ten retrievals."""
    assert retrieval_boost(0) == 1.0
    assert retrieval_boost(5) == pytest.approx(1.5)
    assert retrieval_boost(10) == retrieval_boost(50)


def test_score_uses_default_similarity():
    """Test a fresh memory without a query similarity uses 0.8."""
    score = calculate_memory_score(make_memory(importance=0.5), NOW)

    assert score == pytest.approx(0.4)


def test_boosted_scores_still_decrease_with_age():
    """Test heavily retrieved, fully similar memories keep ordering strictly by age."""
    newer = make_memory(importance=1.0, retrieval_count=10, days_old=1)
    older = make_memory(importance=1.0, retrieval_count=10, days_old=10)

    newer_score = calculate_memory_score(newer, NOW, similarity=1.0)
    older_score = calculate_memory_score(older, NOW, similarity=1.0)

    assert newer_score > 1.0
    assert older_score < newer_score


def test_decay_factor_rejects_bad_half_life():
    """Test a non-positive half-life is rejected."""
    with pytest.raises(ValueError):
        decay_factor(1.0, half_life_days=0)


def test_importance_heuristics():
    """Test analysis origin and identity wording raise importance."""
    plain = calculate_importance_score("Posts on weekday mornings")
    analysis = calculate_importance_score("Posts on weekday mornings", is_from_analysis=True)
    identity = calculate_importance_score("My name is Ada and my business is a bakery")

    assert plain == 0.5
    assert analysis == pytest.approx(0.7)
    assert identity == pytest.approx(0.7)
    assert calculate_importance_score(
        "I'm Ada, my target audience is parents and I want to grow",
        is_from_analysis=True,
        is_user_statement=True,
    ) == 1.0


def test_identify_stale_memories():
    """Test only old, low-scoring memories are reported."""
    fresh = make_memory(days_old=5)
    old_low = make_memory(days_old=120, importance=0.3)
    old_high = make_memory(days_old=100, importance=1.0, retrieval_count=10)

    stale = identify_stale_memories([fresh, old_low, old_high], now=NOW, half_life_days=365)

    assert stale == [old_low]


def test_identify_stale_respects_limit():
    """Test the stale list is capped."""
    memories = [make_memory(days_old=200, importance=0.2) for _ in range(5)]

    assert len(identify_stale_memories(memories, now=NOW, limit=3)) == 3


def test_find_related_memories():
    """Test relation by shared conversation or explicit link."""
    target = make_memory(conversation_id="conv_1")
    same_conversation = make_memory(conversation_id="conv_1")
    linked = make_memory(conversation_id="conv_2")
    unrelated = make_memory(conversation_id="conv_3")
    target.related_memory_ids.append(linked.id)

    related = find_related_memories(target, [target, same_conversation, linked, unrelated])

    assert related == [same_conversation, linked]


def test_extract_keywords_ranks_by_frequency():
    """Test keywords skip short and stop words and rank by frequency."""
    keywords = extract_keywords("Sourdough bread, sourdough starter and the bakery's bread!")

    assert keywords[:2] == ["sourdough", "bread"]
    assert "the" not in keywords
    assert "and" not in keywords


def test_updated_after_retrieval():
    """Test retrieval bumps the count and sets the time without mutating the input."""
    memory = make_memory(retrieval_count=2)

    updated = updated_after_retrieval(memory, NOW)

    assert updated.retrieval_count == 3
    assert updated.last_retrieved_at == NOW
    assert memory.retrieval_count == 2
