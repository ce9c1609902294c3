"""Test that adapters satisfy the TextEmbedding protocol."""

from casual_creator.embeddings import OpenAIEmbedding, TextEmbedding


def test_openai_is_protocol(monkeypatch):
    """OpenAIEmbedding implements TextEmbedding protocol."""
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test-key-for-testing")

    embedder = OpenAIEmbedding(model="text-embedding-3-small", dimensions=768)

    assert isinstance(embedder, TextEmbedding)
    assert embedder.dimension == 768


def test_plain_class_is_protocol():
    """Any class with the right members satisfies the protocol."""

    class StaticEmbedding:
        dimension = 2
        model_name = "static"

        async def embed_document(self, text):
            return [1.0, 0.0]

        async def embed_query(self, text):
            return [1.0, 0.0]

        async def embed_documents(self, texts):
            return [[1.0, 0.0] for _ in texts]

    assert isinstance(StaticEmbedding(), TextEmbedding)
