"""
Profile field presence and completeness scoring.

Completeness is derived, never stored as ground truth: it is recomputed from
which tracked fields are populated every time a profile changes.
"""

import logging
from typing import Any, Dict, Optional, Set

from casual_creator.models import UserProfile

logger = logging.getLogger(__name__)

# Fields that count towards the completeness score
COMPLETENESS_FIELDS = (
    "first_name",
    "last_name",
    "content_niche",
    "primary_platform",
    "target_audience",
    "brand_voice",
    "business_type",
)

# Fields stored in the profile extension map rather than as columns
EXTENSION_FIELDS = (
    "target_audience",
    "brand_voice",
    "business_type",
    "content_goals",
    "business_location",
)


def _has_value(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) > 0
    return True


def populated_fields(profile: UserProfile) -> Set[str]:
    """
    Return the names of the profile fields that are populated.

    ``primary_platform`` counts as present when either the single platform or
    the platform list is set.
    """
    present: Set[str] = set()

    if _has_value(profile.first_name):
        present.add("first_name")
    if _has_value(profile.last_name):
        present.add("last_name")
    if _has_value(profile.content_niche):
        present.add("content_niche")
    if _has_value(profile.primary_platforms):
        present.add("primary_platforms")
    if _has_value(profile.primary_platform) or "primary_platforms" in present:
        present.add("primary_platform")

    for field in EXTENSION_FIELDS:
        if _has_value(profile.profile_data.get(field)):
            present.add(field)

    return present


def calculate_profile_completeness(
    profile: UserProfile, updates: Optional[Dict[str, Any]] = None
) -> int:
    """
    Calculate the 0-100 completeness score.

    Args:
        profile: Current profile
        updates: Optional pending patch (same shape as ``UserProfile`` fields,
            with extension values under ``profile_data``) to score as if merged

    Returns:
        ``round(100 * populated / 7)`` over the tracked fields
    """
    if updates:
        merged = profile.model_copy(deep=True)
        for key, value in updates.items():
            if key == "profile_data" and isinstance(value, dict):
                merged.profile_data = {**merged.profile_data, **value}
            elif key in UserProfile.model_fields and _has_value(value):
                setattr(merged, key, value)
        profile = merged

    present = populated_fields(profile)
    completed = sum(1 for field in COMPLETENESS_FIELDS if field in present)
    score = round(completed / len(COMPLETENESS_FIELDS) * 100)

    logger.debug(f"Profile completeness for {profile.user_id}: {completed}/7 -> {score}")
    return score
