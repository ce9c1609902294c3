"""Tests for the Perplexity and Grok search providers."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import httpx
import openai
import pytest

from casual_creator.actions import GrokSearchProvider, PerplexitySearchProvider
from casual_creator.errors import ProviderError, ProviderNotConfiguredError


def completion(content: str, citations=None):
    """Chat completion shaped like the openai client's response."""
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        model_extra={"citations": citations} if citations is not None else {},
    )


def mock_client(response=None, error=None):
    """AsyncOpenAI stand-in whose completions.create returns ``response``."""
    client = Mock()
    client.chat.completions.create = AsyncMock(return_value=response, side_effect=error)
    return client


@pytest.mark.asyncio
async def test_perplexity_returns_content_and_citations():
    """Test content and citations are read from the completion."""
    client = mock_client(completion("Reels are up 20%", ["https://a.example", "https://b.example"]))
    provider = PerplexitySearchProvider(client=client)

    result = await provider.search("reels trends", system_prompt="Be factual", recency="day")

    assert result.content == "Reels are up 20%"
    assert result.citations == ["https://a.example", "https://b.example"]
    kwargs = client.chat.completions.create.call_args.kwargs
    assert kwargs["messages"][0] == {"role": "system", "content": "Be factual"}
    assert kwargs["extra_body"]["search_recency_filter"] == "day"
    assert "search_domain_filter" not in kwargs["extra_body"]


@pytest.mark.asyncio
async def test_perplexity_domain_filter():
    """Test domains are passed as a domain filter."""
    client = mock_client(completion("ok", []))

    await PerplexitySearchProvider(client=client).search("q", domains=["example.com"])

    assert client.chat.completions.create.call_args.kwargs["extra_body"]["search_domain_filter"] == [
        "example.com"
    ]


@pytest.mark.asyncio
async def test_perplexity_connection_error_is_transient():
    """Test network failures are raised as transient provider errors."""
    error = openai.APIConnectionError(request=httpx.Request("POST", "https://api.perplexity.ai"))
    provider = PerplexitySearchProvider(client=mock_client(error=error))

    with pytest.raises(ProviderError) as exc_info:
        await provider.search("q")

    assert exc_info.value.transient is True
    assert exc_info.value.provider == "perplexity"


@pytest.mark.asyncio
async def test_perplexity_other_errors_are_not_transient():
    """Test non-network failures are not retried."""
    provider = PerplexitySearchProvider(client=mock_client(error=openai.OpenAIError("bad request")))

    with pytest.raises(ProviderError) as exc_info:
        await provider.search("q")

    assert exc_info.value.transient is False


def test_missing_api_key_raises(monkeypatch):
    """Test providers refuse to start without credentials."""
    monkeypatch.delenv("PERPLEXITY_API_KEY", raising=False)
    monkeypatch.delenv("XAI_API_KEY", raising=False)

    with pytest.raises(ProviderNotConfiguredError):
        PerplexitySearchProvider()
    with pytest.raises(ProviderNotConfiguredError):
        GrokSearchProvider()


@pytest.mark.asyncio
async def test_grok_handles_and_inline_citations():
    """Test handles are passed without @ and inline URLs are added to citations."""
    content = "NASA posted about Artemis https://x.com/nasa/status/1 today"
    client = mock_client(completion(content, ["https://x.com/nasa/status/1"]))
    provider = GrokSearchProvider(client=client)

    result = await provider.search("artemis", social_handles=["@nasa"])

    assert result.citations == ["https://x.com/nasa/status/1"]
    parameters = client.chat.completions.create.call_args.kwargs["extra_body"]["search_parameters"]
    assert parameters["sources"][0]["included_x_handles"] == ["nasa"]
    assert parameters["return_citations"] is True


@pytest.mark.asyncio
async def test_grok_empty_choices():
    """Test an empty completion yields empty content."""
    response = SimpleNamespace(choices=[], model_extra={})

    result = await GrokSearchProvider(client=mock_client(response)).search("q")

    assert result.content == ""
    assert result.citations == []
