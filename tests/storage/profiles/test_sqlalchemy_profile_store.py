"""
Unit tests for SQLAlchemy profile storage.

Runs against in-memory SQLite; the same store works with PostgreSQL.
"""

import pytest

pytest.importorskip("sqlalchemy")

from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from casual_creator.models import UserProfile  # noqa: E402
from casual_creator.storage.profiles.sqlalchemy import SQLAlchemyProfileStore  # noqa: E402


@pytest.fixture
def profile_store():
    """Create a fresh SQLAlchemy profile store with in-memory SQLite."""
    engine = create_engine(
        "sqlite:///:memory:", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    store = SQLAlchemyProfileStore(engine)
    store.create_tables()
    return store


def test_save_and_get_round_trip(profile_store):
    """Test JSON-backed fields survive persistence."""
    profile = UserProfile(
        user_id="user-1",
        first_name="Ada",
        content_niche=["baking"],
        primary_platforms=["Instagram"],
        profile_data={"target_audience": "Families", "hashtag_searches": {"vegan": {"total_posts": 3}}},
        profile_completeness=57,
    )

    profile_store.save_profile(profile)
    stored = profile_store.get_profile("user-1")

    assert stored.first_name == "Ada"
    assert stored.content_niche == ["baking"]
    assert stored.profile_data["hashtag_searches"]["vegan"]["total_posts"] == 3
    assert stored.profile_completeness == 57


def test_get_missing_profile(profile_store):
    """Test unknown users have no profile."""
    assert profile_store.get_profile("nobody") is None


def test_merge_profile(profile_store):
    """Test merges create the row, union lists and keep extension keys."""
    profile_store.merge_profile("user-1", {"content_niche": ["Baking"], "profile_data": {"brand_voice": "Warm"}})
    merged = profile_store.merge_profile(
        "user-1",
        {"first_name": "Ada", "content_niche": ["baking", "vegan"], "profile_data": {"target_audience": "Families"}},
    )

    stored = profile_store.get_profile("user-1")
    assert merged.content_niche == ["Baking", "vegan"]
    assert stored.profile_data == {"brand_voice": "Warm", "target_audience": "Families"}
    assert stored.profile_completeness == merged.profile_completeness == 57


def test_empty_values_do_not_overwrite(profile_store):
    """Test empty patch values leave stored values untouched."""
    profile_store.merge_profile("user-1", {"first_name": "Ada"})
    profile_store.merge_profile("user-1", {"first_name": "  "})

    assert profile_store.get_profile("user-1").first_name == "Ada"
