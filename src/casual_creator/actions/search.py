"""
Search providers over OpenAI-compatible chat completion APIs.

Perplexity answers general web queries with its own citation list; Grok
searches X/Twitter through xAI's search parameters. Both map openai client
errors onto ProviderError so the router can retry transient failures.
"""

import logging
import os
import re
from typing import Any, List, Optional, Sequence

import openai
from openai import AsyncOpenAI

from casual_creator.actions.models import SearchResult
from casual_creator.errors import ProviderError, ProviderNotConfiguredError

logger = logging.getLogger(__name__)

_URL_PATTERN = re.compile(r"https?://[^\s)\]>\"']+")

_TRANSIENT_ERRORS = (
    openai.APIConnectionError,
    openai.APITimeoutError,
    openai.RateLimitError,
    openai.InternalServerError,
)


def _provider_error(provider: str, error: Exception) -> ProviderError:
    transient = isinstance(error, _TRANSIENT_ERRORS)
    return ProviderError(f"{provider} request failed: {error}", provider=provider, transient=transient)


def _build_messages(query: str, system_prompt: Optional[str]) -> List[dict]:
    messages = []
    if system_prompt:
        messages.append({"role": "system", "content": system_prompt})
    messages.append({"role": "user", "content": query})
    return messages


def _response_citations(response: Any) -> List[str]:
    extra = getattr(response, "model_extra", None) or {}
    citations = extra.get("citations") or getattr(response, "citations", None) or []
    return [str(url) for url in citations if url]


def _response_content(response: Any) -> str:
    if not response.choices:
        return ""
    return response.choices[0].message.content or ""


def _dedupe(urls: Sequence[str]) -> List[str]:
    return list(dict.fromkeys(urls))


class PerplexitySearchProvider:
    """
    General web search through Perplexity's chat completions endpoint.

    Example:
        >>> provider = PerplexitySearchProvider(api_key="pplx-...")
        >>> result = await provider.search("site:example.com", recency="month")
        >>> result.citations
        ['https://example.com/about', ...]
    """

    name = "perplexity"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "sonar",
        base_url: str = "https://api.perplexity.ai",
        timeout: float = 30.0,
        client: Optional[AsyncOpenAI] = None,
    ):
        api_key = api_key or os.getenv("PERPLEXITY_API_KEY")
        if client is None and not api_key:
            raise ProviderNotConfiguredError(self.name)

        self.model = model
        self._client = client or AsyncOpenAI(
            api_key=api_key, base_url=base_url, timeout=timeout, max_retries=0
        )

    async def search(
        self,
        query: str,
        system_prompt: Optional[str] = None,
        recency: Optional[str] = None,
        domains: Optional[Sequence[str]] = None,
        social_handles: Optional[Sequence[str]] = None,
    ) -> SearchResult:
        extra_body = {"search_recency_filter": recency or "week", "return_images": False}
        if domains:
            extra_body["search_domain_filter"] = list(domains)

        try:
            response = await self._client.chat.completions.create(
                model=self.model,
                messages=_build_messages(query, system_prompt),
                temperature=0.1,
                extra_body=extra_body,
            )
        except openai.OpenAIError as e:
            raise _provider_error(self.name, e) from e

        content = _response_content(response)
        citations = _response_citations(response)
        logger.info(f"Perplexity search returned {len(content)} chars, {len(citations)} citations")
        return SearchResult(content=content, citations=citations)


class GrokSearchProvider:
    """X/Twitter and real-time social search through xAI's Grok."""

    name = "grok"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "grok-4-fast",
        base_url: str = "https://api.x.ai/v1",
        timeout: float = 30.0,
        min_favorites: int = 10,
        min_views: int = 100,
        client: Optional[AsyncOpenAI] = None,
    ):
        api_key = api_key or os.getenv("XAI_API_KEY")
        if client is None and not api_key:
            raise ProviderNotConfiguredError(self.name)

        self.model = model
        self.min_favorites = min_favorites
        self.min_views = min_views
        self._client = client or AsyncOpenAI(
            api_key=api_key, base_url=base_url, timeout=timeout, max_retries=0
        )

    def _search_parameters(self, social_handles: Optional[Sequence[str]]) -> dict:
        source = {
            "type": "x",
            "post_favorite_count": self.min_favorites,
            "post_view_count": self.min_views,
        }
        if social_handles:
            source["included_x_handles"] = [handle.lstrip("@") for handle in social_handles]
        return {
            "mode": "on",
            "sources": [source],
            "max_search_results": 10,
            "return_citations": True,
        }

    async def search(
        self,
        query: str,
        system_prompt: Optional[str] = None,
        recency: Optional[str] = None,
        domains: Optional[Sequence[str]] = None,
        social_handles: Optional[Sequence[str]] = None,
    ) -> SearchResult:
        try:
            response = await self._client.chat.completions.create(
                model=self.model,
                messages=_build_messages(query, system_prompt),
                temperature=0.2,
                extra_body={"search_parameters": self._search_parameters(social_handles)},
            )
        except openai.OpenAIError as e:
            raise _provider_error(self.name, e) from e

        content = _response_content(response)
        citations = _dedupe(_response_citations(response) + _URL_PATTERN.findall(content))
        logger.info(f"Grok search returned {len(content)} chars, {len(citations)} citations")
        return SearchResult(content=content, citations=citations)
