"""Per-user write serialization."""

import asyncio
import logging
from typing import Dict

logger = logging.getLogger(__name__)


class UserLockRegistry:
    """
    Hands out one ``asyncio.Lock`` per user id.

    Every profile read-merge-write runs under the user's lock so concurrent
    turns for the same user cannot lose each other's array updates.
    """

    def __init__(self):
        self._locks: Dict[str, asyncio.Lock] = {}

    def lock_for(self, user_id: str) -> asyncio.Lock:
        lock = self._locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[user_id] = lock
        return lock

    def __len__(self) -> int:
        return len(self._locks)
