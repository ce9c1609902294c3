"""
Protocols for the external providers the action router calls.

These are Protocols (PEP 544): any class with matching async methods can be
plugged in, no inheritance required. Implementations should raise
``ProviderError`` (``transient=True`` for network-level failures).
"""

from typing import List, Optional, Protocol, Sequence

from casual_creator.actions.models import (
    BlogProfile,
    HashtagSearchResult,
    InstagramProfile,
    SearchResult,
)


class SearchProvider(Protocol):
    """Web or social search returning text plus citation URLs."""

    name: str

    async def search(
        self,
        query: str,
        system_prompt: Optional[str] = None,
        recency: Optional[str] = None,
        domains: Optional[Sequence[str]] = None,
        social_handles: Optional[Sequence[str]] = None,
    ) -> SearchResult:
        """
        Run one search.

        Args:
            query: Search query
            system_prompt: Framing for how results should be summarized
            recency: "hour", "day", "week", "month" or "year"
            domains: Restrict results to these domains
            social_handles: Restrict social search to these handles

        Returns:
            SearchResult with summarized content and citations
        """
        ...


class InstagramProfileProvider(Protocol):
    async def analyze_profile(self, username: str) -> InstagramProfile:
        """Fetch follower, engagement and post statistics plus similar accounts."""
        ...


class HashtagSearchProvider(Protocol):
    async def search_hashtag(self, hashtag: str, limit: int = 12) -> HashtagSearchResult:
        """Fetch the top posts for a hashtag, ranked by the provider."""
        ...


class BlogContentAnalyzer(Protocol):
    async def analyze(self, urls: List[str]) -> BlogProfile:
        """Read the blog posts at ``urls`` and analyze their writing style."""
        ...
