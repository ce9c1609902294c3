"""Tests for composite cache keys."""

from casual_creator.cache import build_cache_key, normalize_query


def test_normalize_query():
    """Test case, whitespace and colons are normalized."""
    assert normalize_query("  Best   Times:\tto POST ") == "best times_ to post"


def test_equivalent_queries_share_a_key():
    """Test formatting differences and domain order do not change the key."""
    first = build_cache_key("Instagram trends", "week", ["b.com", "A.com"], "prompt")
    second = build_cache_key("  instagram   TRENDS", "week", ["a.com", "b.com"], "prompt")

    assert first == second


def test_filters_and_prompt_change_the_key():
    """Test recency, domains, system prompt and extras all separate keys."""
    base = build_cache_key("trends", "week", [], "prompt")

    assert build_cache_key("trends", "day", [], "prompt") != base
    assert build_cache_key("trends", "week", ["x.com"], "prompt") != base
    assert build_cache_key("trends", "week", [], "other prompt") != base
    assert build_cache_key("trends", "week", [], "prompt", extra={"handles": ["a"]}) != base
