"""
Profile patch merging.

A patch is a dict keyed by ``UserProfile`` field names, with extension values
nested under ``profile_data``. Scalars are overwritten only by non-empty
values; list fields are unioned with case-insensitive de-duplication; the
completeness score is recomputed after every merge.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List

from casual_creator.models import UserProfile
from casual_creator.workflow.completeness import calculate_profile_completeness

logger = logging.getLogger(__name__)

ProfilePatch = Dict[str, Any]

SCALAR_FIELDS = ("first_name", "last_name", "primary_platform")
LIST_FIELDS = ("content_niche", "primary_platforms")


def union_case_insensitive(existing: List[Any], incoming: List[Any]) -> List[Any]:
    """Append incoming values not already present, comparing strings case-insensitively."""
    merged = list(existing)
    seen = {_fold(value) for value in existing}

    for value in incoming:
        if value is None or (isinstance(value, str) and not value.strip()):
            continue
        if isinstance(value, str):
            value = value.strip()
        key = _fold(value)
        if key not in seen:
            seen.add(key)
            merged.append(value)

    return merged


def _fold(value: Any) -> Any:
    return value.lower() if isinstance(value, str) else repr(value)


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple, set)):
        return list(value)
    return [value]


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) == 0
    return False


def has_updates(patch: ProfilePatch) -> bool:
    """True when the patch carries at least one non-empty value."""
    for key, value in patch.items():
        if key == "profile_data" and isinstance(value, dict):
            if any(not _is_empty(v) for v in value.values()):
                return True
        elif not _is_empty(value):
            return True
    return False


def merge_profile_patch(profile: UserProfile, patch: ProfilePatch) -> UserProfile:
    """
    Return a new profile with ``patch`` merged in.

    Unknown top-level keys are ignored. Within ``profile_data``, list values
    are unioned with existing lists and everything else replaces the stored
    value.
    """
    merged = profile.model_copy(deep=True)

    for field in SCALAR_FIELDS:
        value = patch.get(field)
        if not _is_empty(value):
            setattr(merged, field, str(value).strip())

    for field in LIST_FIELDS:
        if field in patch and not _is_empty(patch[field]):
            setattr(merged, field, union_case_insensitive(getattr(merged, field), _as_list(patch[field])))

    extension = patch.get("profile_data")
    if isinstance(extension, dict):
        data = dict(merged.profile_data)
        for key, value in extension.items():
            if _is_empty(value) and not isinstance(value, dict):
                continue
            current = data.get(key)
            if isinstance(value, list) and isinstance(current, list):
                data[key] = union_case_insensitive(current, value)
            else:
                data[key] = value
        merged.profile_data = data

    merged.profile_completeness = calculate_profile_completeness(merged)
    merged.updated_at = datetime.now()

    logger.debug(
        f"Merged profile patch for {profile.user_id} "
        f"(completeness {profile.profile_completeness} -> {merged.profile_completeness})"
    )
    return merged
