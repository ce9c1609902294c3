"""
Text embedding abstractions.

- TextEmbedding: protocol every embedder satisfies
- OpenAIEmbedding: OpenAI (or compatible) API embeddings
"""

from casual_creator.embeddings.protocol import TextEmbedding

__all__ = [
    "TextEmbedding",
]

try:
    from casual_creator.embeddings.openai_embedding import OpenAIEmbedding  # noqa: F401

    __all__.append("OpenAIEmbedding")
except ImportError:
    pass
