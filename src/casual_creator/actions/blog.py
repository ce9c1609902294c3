"""Blog writing-style analysis: read posts through a search provider, analyze with an LLM."""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional
from urllib.parse import urlparse

from casual_llm import LLMProvider, SystemMessage, UserMessage

from casual_creator.actions.models import BlogProfile
from casual_creator.actions.providers import SearchProvider
from casual_creator.errors import ProviderError
from casual_creator.utils.json_parsing import parse_json_object

logger = logging.getLogger(__name__)

MIN_CONTENT_LENGTH = 100
MAX_ANALYZED_CHARS = 8000

BLOG_CONTENT_PROMPT = (
    "Extract and provide the full text content of blog posts, including headlines, main "
    "content, and any key information about writing style and topics."
)

BLOG_ANALYSIS_PROMPT = """Analyze the provided blog content and extract detailed insights about the writing style, tone, and content patterns.

Return a JSON object with these fields:
- writingStyle: overall writing approach (conversational, formal, academic, personal, storytelling, instructional)
- averagePostLength: "short" (<500 words), "medium" (500-1500 words) or "long" (>1500 words)
- commonTopics: array of frequently discussed topics
- toneKeywords: array of words that characterize the tone
- contentThemes: array of broader content categories
- brandVoice: description of the unique voice or personality
- targetAudience: inferred target audience
- postingPattern: patterns in content structure or approach"""


def normalize_url(url: str) -> str:
    """Add a scheme to bare domains."""
    url = url.strip()
    if not url.startswith(("http://", "https://")):
        url = f"https://{url}"
    return url


class BlogAnalyzer:
    """
    Reads blog posts via a search provider and analyzes their writing style.

    Args:
        llm_provider: LLM used for the structured style analysis
        search_provider: Provider used to read the blog content
        max_urls: Maximum URLs read per analysis
        request_delay: Pause between reads, in seconds
    """

    def __init__(
        self,
        llm_provider: LLMProvider,
        search_provider: SearchProvider,
        max_urls: int = 5,
        request_delay: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.llm_provider = llm_provider
        self.search_provider = search_provider
        self.max_urls = max_urls
        self.request_delay = request_delay
        self._sleep = sleep

    async def collect_content(self, urls: List[str]) -> List[str]:
        """Read up to ``max_urls`` blogs; unreadable or near-empty ones are skipped."""
        contents: List[str] = []

        for index, url in enumerate(urls[: self.max_urls]):
            if index and self.request_delay:
                await self._sleep(self.request_delay)
            host = urlparse(normalize_url(url)).hostname
            if not host:
                logger.warning(f"Skipping blog URL without a host: {url}")
                continue
            try:
                result = await self.search_provider.search(
                    f"site:{host} blog content text",
                    system_prompt=BLOG_CONTENT_PROMPT,
                    recency="month",
                )
            except ProviderError as e:
                logger.warning(f"Could not read blog content from {host}: {e}")
                continue
            if len(result.content) > MIN_CONTENT_LENGTH:
                contents.append(result.content)

        return contents

    async def analyze(self, urls: List[str]) -> BlogProfile:
        """
        Analyze the blog at ``urls``.

        Raises:
            ProviderError: When no content could be read or the analysis
                could not be parsed
        """
        contents = await self.collect_content(urls)
        if not contents:
            raise ProviderError("Could not extract content from the provided blog URLs", provider="blog")

        combined = "\n\n---\n\n".join(contents)[:MAX_ANALYZED_CHARS]
        response = await self.llm_provider.chat(
            messages=[
                SystemMessage(content=BLOG_ANALYSIS_PROMPT),
                UserMessage(content=f"Please analyze this blog content:\n\n{combined}"),
            ],
            response_format="json",
            temperature=0.1,
            max_tokens=800,
        )

        try:
            raw = parse_json_object(response.content or "")
        except ValueError as e:
            raise ProviderError(f"Failed to parse blog analysis result: {e}", provider="blog") from e

        return _blog_profile(urls[: self.max_urls], raw)


def _string_list(value) -> List[str]:
    if isinstance(value, str):
        return [value]
    return [str(item) for item in value or [] if item]


def _optional_str(value) -> Optional[str]:
    return str(value) if value else None


def _blog_profile(urls: List[str], raw: dict) -> BlogProfile:
    return BlogProfile(
        analyzed_urls=urls,
        writing_style=raw.get("writingStyle") or "conversational",
        average_post_length=raw.get("averagePostLength") or "medium",
        common_topics=_string_list(raw.get("commonTopics")),
        tone_keywords=_string_list(raw.get("toneKeywords")),
        content_themes=_string_list(raw.get("contentThemes")),
        brand_voice=raw.get("brandVoice") or "authentic and personal",
        target_audience=_optional_str(raw.get("targetAudience")),
        posting_pattern=_optional_str(raw.get("postingPattern")),
    )
