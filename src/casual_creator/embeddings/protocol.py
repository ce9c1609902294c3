"""
Text embedding protocol.

Memories and memory-search queries are embedded through this interface, so
any fixed-dimension embedding model can back the memory store.
"""

from typing import List, Protocol

from typing_extensions import runtime_checkable


@runtime_checkable
class TextEmbedding(Protocol):
    """
    Protocol for text embedding providers.

    Implementations return fixed-dimension vectors; the dimension must match
    the vector store's collection.

    Example:
        >>> embedder = OpenAIEmbedding(dimensions=768)
        >>> vector = await embedder.embed_document("Posts fitness reels on Instagram")
        >>> len(vector) == embedder.dimension
        True
    """

    @property
    def dimension(self) -> int:
        """Number of elements in each embedding vector."""
        ...

    @property
    def model_name(self) -> str:
        """Identifier of the embedding model."""
        ...

    async def embed_document(self, text: str) -> List[float]:
        """
        Embed text that will be stored as a memory.

        Raises:
            ValueError: If text is empty
        """
        ...

    async def embed_query(self, text: str) -> List[float]:
        """
        Embed a memory-search query.

        Raises:
            ValueError: If text is empty
        """
        ...

    async def embed_documents(self, texts: List[str]) -> List[List[float]]:
        """Embed several documents, preserving input order."""
        ...
