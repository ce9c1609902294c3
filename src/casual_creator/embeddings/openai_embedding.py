"""OpenAI embedding adapter."""

import logging
import os
from typing import List, Optional

from openai import AsyncOpenAI

logger = logging.getLogger(__name__)

_DEFAULT_DIMENSIONS = {
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
    "text-embedding-ada-002": 1536,
}


class OpenAIEmbedding:
    """
    Embedding adapter using OpenAI's embedding API.

    Also works with OpenAI-compatible endpoints (Azure, OpenRouter, etc.)
    through ``base_url``.

    Example:
        >>> embedder = OpenAIEmbedding(model="text-embedding-3-small", dimensions=768)
        >>> vector = await embedder.embed_document("Runs a vegan bakery in Leeds")
        >>> len(vector)
        768
    """

    def __init__(
        self,
        model: str = "text-embedding-3-small",
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        dimensions: Optional[int] = None,
        timeout: float = 30.0,
        max_retries: int = 3,
        client: Optional[AsyncOpenAI] = None,
    ):
        """
        Initialize OpenAI embedder.

        Args:
            model: OpenAI model name (default: text-embedding-3-small)
            api_key: OpenAI API key (None = use OPENAI_API_KEY env var)
            base_url: Custom endpoint (None = official OpenAI)
            dimensions: Output dimension (text-embedding-3 models only)
            timeout: Request timeout in seconds
            max_retries: Number of retry attempts for failed requests
            client: Pre-built client (overrides the connection arguments)
        """
        if dimensions is None and model not in _DEFAULT_DIMENSIONS:
            raise ValueError(f"Unknown model {model}: pass dimensions explicitly")

        self._model = model
        self._dimensions = dimensions
        self._dimension = dimensions or _DEFAULT_DIMENSIONS[model]
        self._client = client or AsyncOpenAI(
            api_key=api_key or os.getenv("OPENAI_API_KEY"),
            base_url=base_url,
            timeout=timeout,
            max_retries=max_retries,
        )

        logger.info(f"OpenAI embedder initialized: {model} ({self._dimension} dimensions)")

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def model_name(self) -> str:
        return self._model

    async def _embed(self, texts: List[str]) -> List[List[float]]:
        kwargs = {"model": self._model, "input": texts}
        if self._dimensions is not None:
            kwargs["dimensions"] = self._dimensions

        response = await self._client.embeddings.create(**kwargs)
        return [item.embedding for item in response.data]

    async def embed_document(self, text: str) -> List[float]:
        if not text or not text.strip():
            raise ValueError("Cannot embed empty text")
        return (await self._embed([text]))[0]

    async def embed_query(self, text: str) -> List[float]:
        # OpenAI models make no document/query distinction
        return await self.embed_document(text)

    async def embed_documents(self, texts: List[str]) -> List[List[float]]:
        if not texts:
            return []
        if any(not text or not text.strip() for text in texts):
            raise ValueError("Cannot embed empty texts in batch")
        return await self._embed(texts)
