import logging
import time
from typing import Callable, Dict, Optional

from casual_creator.cache.ttl_cache import TTLCache
from casual_creator.config import EngineSettings

logger = logging.getLogger(__name__)

PROVIDER_CACHES = ("perplexity", "grok", "instagram", "hashtag", "blog")


class CacheRegistry:
    """One TTLCache per external provider type, configured from EngineSettings."""

    def __init__(
        self,
        settings: Optional[EngineSettings] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        settings = settings or EngineSettings()
        self._caches: Dict[str, TTLCache] = {}

        for name in PROVIDER_CACHES:
            config = settings.cache_config(name)
            self._caches[name] = TTLCache(
                name=name, max_size=config.max_size, ttl_seconds=config.ttl_seconds, clock=clock
            )

        logger.info(f"CacheRegistry initialized with caches: {', '.join(self._caches)}")

    def get(self, name: str) -> TTLCache:
        if name not in self._caches:
            raise KeyError(f"No cache configured for '{name}'")
        return self._caches[name]

    def clear_all(self):
        for cache in self._caches.values():
            cache.clear()

    def stats(self) -> Dict[str, dict]:
        return {name: cache.stats() for name, cache in self._caches.items()}
