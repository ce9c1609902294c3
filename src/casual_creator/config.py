"""
Engine configuration.

All tunables live on a single pydantic-settings object so deployments can
override them through environment variables (``CASUAL_CREATOR_`` prefix) or a
``.env`` file.
"""

from typing import Dict

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CacheConfig(BaseModel):
    """Capacity and lifetime of one provider cache."""

    max_size: int = Field(100, ge=1, description="Maximum number of entries before LRU eviction")
    ttl_seconds: float = Field(1800, gt=0, description="Entry lifetime in seconds")


def _default_caches() -> Dict[str, CacheConfig]:
    return {
        "perplexity": CacheConfig(max_size=100, ttl_seconds=30 * 60),
        "grok": CacheConfig(max_size=100, ttl_seconds=2 * 60),
        "instagram": CacheConfig(max_size=50, ttl_seconds=24 * 60 * 60),
        "hashtag": CacheConfig(max_size=100, ttl_seconds=6 * 60 * 60),
        "blog": CacheConfig(max_size=50, ttl_seconds=24 * 60 * 60),
    }


class EngineSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CASUAL_CREATOR_",
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Intent classification
    CLASSIFIER_TIMEOUT_SECONDS: float = 20.0
    CLASSIFIER_WINDOW: int = 4
    CLASSIFIER_TEMPERATURE: float = 0.05
    CLASSIFIER_MAX_TOKENS: int = 500

    # Generation
    GENERATION_WINDOW: int = 8
    GENERATION_MODEL: str = "gpt-4o"
    GENERATION_TEMPERATURE: float = 0.7
    GENERATION_MAX_TOKENS: int = 1000

    # Memory
    MEMORY_RETRIEVAL_K: int = 5
    MEMORY_HALF_LIFE_DAYS: float = 30.0
    CONVERSATION_MEMORY_THRESHOLD: float = 0.80
    PROFILE_ANALYSIS_MEMORY_THRESHOLD: float = 0.85
    HASHTAG_MEMORY_THRESHOLD: float = 0.80
    BLOG_MEMORY_THRESHOLD: float = 0.85
    MAX_EXTRACTED_MEMORIES: int = 4

    # External actions
    WEB_SEARCH_CONFIDENCE_GATE: float = 0.7
    HASHTAG_HISTORY_LIMIT: int = 20
    HASHTAG_POST_LIMIT: int = 12
    BLOG_MAX_URLS: int = 5
    PROVIDER_RETRY_ATTEMPTS: int = 3
    PROVIDER_RETRY_DELAY: float = 0.5

    CACHES: Dict[str, CacheConfig] = Field(default_factory=_default_caches)

    def cache_config(self, name: str) -> CacheConfig:
        """Return the cache config for a provider type, falling back to defaults."""
        return self.CACHES.get(name) or _default_caches().get(name) or CacheConfig()
