"""Streaming text generation."""

import logging
import os
import time
from typing import AsyncIterator, Dict, List, Optional, Protocol

import openai
from openai import AsyncOpenAI

from casual_creator.errors import ProviderError

logger = logging.getLogger(__name__)


class TextGenerator(Protocol):
    """
    Protocol for streaming chat generation.

    Implementations yield text chunks as they arrive and must not buffer the
    whole response before yielding.
    """

    def stream(self, messages: List[Dict[str, str]]) -> AsyncIterator[str]:
        """
        Stream a response to ``messages``.

        Args:
            messages: Ordered role/content dicts, system prompt first

        Yields:
            Non-empty text chunks

        Raises:
            ProviderError: If the request cannot be started or fails mid-stream
        """
        ...


class OpenAIChatGenerator:
    """
    Streaming generator over an OpenAI-compatible chat completions endpoint.

    Example:
        >>> generator = OpenAIChatGenerator(model="gpt-4o")
        >>> async for chunk in generator.stream(messages):
        ...     print(chunk, end="")
    """

    def __init__(
        self,
        model: str = "gpt-4o",
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 1000,
        timeout: float = 60.0,
        client: Optional[AsyncOpenAI] = None,
    ):
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._client = client or AsyncOpenAI(
            api_key=api_key or os.getenv("OPENAI_API_KEY"),
            base_url=base_url,
            timeout=timeout,
        )

    async def stream(self, messages: List[Dict[str, str]]) -> AsyncIterator[str]:
        started = time.monotonic()
        try:
            response = await self._client.chat.completions.create(
                model=self.model,
                messages=messages,
                stream=True,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except openai.OpenAIError as e:
            raise ProviderError(f"Generation request failed: {e}", provider="openai") from e

        chunk_count = 0
        total_chars = 0
        try:
            async for chunk in response:
                if not chunk.choices:
                    continue
                delta = chunk.choices[0].delta.content
                if not delta:
                    continue
                if chunk_count == 0:
                    logger.debug(f"First chunk after {(time.monotonic() - started) * 1000:.0f}ms")
                chunk_count += 1
                total_chars += len(delta)
                yield delta
        except openai.OpenAIError as e:
            raise ProviderError(f"Generation stream failed: {e}", provider="openai") from e

        logger.info(
            f"Stream completed: {chunk_count} chunks, {total_chars} chars, "
            f"{(time.monotonic() - started) * 1000:.0f}ms"
        )
