"""Bounded TTL/LRU caches for external provider results."""

from casual_creator.cache.keys import build_cache_key, normalize_query
from casual_creator.cache.registry import PROVIDER_CACHES, CacheRegistry
from casual_creator.cache.ttl_cache import CacheEntry, TTLCache

__all__ = [
    "build_cache_key",
    "normalize_query",
    "PROVIDER_CACHES",
    "CacheRegistry",
    "CacheEntry",
    "TTLCache",
]
