"""
In-memory profile storage implementation.

Profiles live in a dict guarded by a lock so ``merge_profile`` is an atomic
read-merge-write. Data is lost on restart.
"""

import logging
import threading
from typing import Dict, Optional

from casual_creator.models import UserProfile
from casual_creator.profile_merge import ProfilePatch, merge_profile_patch

logger = logging.getLogger(__name__)


class InMemoryProfileStore:
    """In-memory implementation of the ProfileStore protocol."""

    def __init__(self):
        self._profiles: Dict[str, UserProfile] = {}
        self._lock = threading.Lock()

        logger.info("InMemoryProfileStore initialized")

    def get_profile(self, user_id: str) -> Optional[UserProfile]:
        profile = self._profiles.get(user_id)
        return profile.model_copy(deep=True) if profile else None

    def save_profile(self, profile: UserProfile) -> UserProfile:
        with self._lock:
            self._profiles[profile.user_id] = profile.model_copy(deep=True)
        logger.debug(f"Saved profile for user {profile.user_id}")
        return profile

    def merge_profile(self, user_id: str, patch: ProfilePatch) -> UserProfile:
        """Merge ``patch`` into the stored profile (creating it if absent)."""
        with self._lock:
            current = self._profiles.get(user_id) or UserProfile(user_id=user_id)
            merged = merge_profile_patch(current, patch)
            self._profiles[user_id] = merged

        logger.info(f"Merged profile for user {user_id} ({merged.profile_completeness}% complete)")
        return merged.model_copy(deep=True)

    def clear(self):
        with self._lock:
            self._profiles.clear()
