"""
End-to-end tests for a conversational turn.

Wires the real analyzer, router, memory service, stores and post-processor
together. Only the LLM providers, the embedding model and the streaming
generator are replaced with deterministic fakes, so no services are needed.
"""

import asyncio
import json
from string import ascii_lowercase
from unittest.mock import AsyncMock, Mock

import pytest

from casual_creator.actions import ExternalActionRouter
from casual_creator.config import EngineSettings
from casual_creator.extractors import ConversationMemoryExtracter, ProfileExtracter, TitleGenerator
from casual_creator.intent import UnifiedIntentAnalyzer
from casual_creator.memory import MemoryService
from casual_creator.pipeline import ChatPipeline, PostProcessor
from casual_creator.storage import InMemoryConversationStore, InMemoryProfileStore, InMemoryVectorStore
from casual_creator.utils import UserLockRegistry
from casual_creator.workflow.phases import DISCOVERY, IDEA_GENERATION


class MockLLMProvider:
    """Mock LLM provider for testing."""

    def __init__(self, response_content: str):
        self.response_content = response_content
        self.chat = AsyncMock(return_value=Mock(content=response_content))


class LetterCountEmbedding:
    """Deterministic 26-dimension embedding from letter frequencies."""

    dimension = 26
    model_name = "letter-count"

    async def embed_document(self, text):
        lowered = text.lower()
        return [float(lowered.count(letter)) for letter in ascii_lowercase]

    async def embed_query(self, text):
        return await self.embed_document(text)

    async def embed_documents(self, texts):
        return [await self.embed_document(text) for text in texts]


class FakeGenerator:
    """Streams a fixed reply word by word."""

    def __init__(self, reply):
        self.reply = reply

    async def stream(self, messages):
        for word in self.reply.split(" "):
            await asyncio.sleep(0)
            yield word + " "


CLASSIFIER_OUTPUT = json.dumps(
    {
        "profileUpdate": {"expectedFields": ["name", "niche", "platform"], "confidence": 0.9},
        "workflowPhase": {
            "currentPhase": DISCOVERY,
            "missingFields": ["target audience"],
            "profilePatch": {
                "firstName": "Ada",
                "contentNiche": ["vegan baking"],
                "primaryPlatform": "Instagram",
            },
        },
    }
)


@pytest.fixture
def stores():
    """Fresh in-memory stores."""
    return InMemoryConversationStore(), InMemoryProfileStore(), InMemoryVectorStore()


@pytest.fixture
def title_provider():
    """Title model."""
    return MockLLMProvider("Vegan Bakery Strategy")


@pytest.fixture
def pipeline(stores, title_provider):
    """Pipeline with real components and fake model backends."""
    conversation_store, profile_store, vector_store = stores
    settings = EngineSettings(PROVIDER_RETRY_DELAY=0.0)
    locks = UserLockRegistry()
    memory_service = MemoryService(vector_store=vector_store, embedding=LetterCountEmbedding())

    post_processor = PostProcessor(
        conversation_store=conversation_store,
        profile_store=profile_store,
        memory_service=memory_service,
        memory_extractor=ConversationMemoryExtracter(
            MockLLMProvider('["User runs a vegan bakery in Leeds"]')
        ),
        profile_extractor=ProfileExtracter(
            MockLLMProvider('{"profileData": {"targetAudience": "Local families"}}')
        ),
        title_generator=TitleGenerator(title_provider),
        locks=locks,
        settings=settings,
    )
    return ChatPipeline(
        analyzer=UnifiedIntentAnalyzer(MockLLMProvider(CLASSIFIER_OUTPUT), settings),
        router=ExternalActionRouter(profile_store, memory_service, settings=settings, locks=locks),
        memory_service=memory_service,
        generator=FakeGenerator("Lovely to meet you Ada! Who buys your bakes?"),
        post_processor=post_processor,
        conversation_store=conversation_store,
        profile_store=profile_store,
        settings=settings,
    )


@pytest.mark.asyncio
async def test_first_turn_builds_profile_memory_and_title(pipeline, stores):
    """Test one turn streams a reply and post-processing updates every store."""
    conversation_store, profile_store, vector_store = stores

    turn = await pipeline.prepare_turn("user-1", None, "I'm Ada, I run a vegan bakery on Instagram")
    text = await turn.collect()
    report = await turn.wait_post_processing()

    assert turn.phase.name == DISCOVERY
    assert text.strip() == "Lovely to meet you Ada! Who buys your bakes?"
    assert report.success, report.failed

    profile = profile_store.get_profile("user-1")
    assert profile.first_name == "Ada"
    assert profile.content_niche == ["vegan baking"]
    assert profile.profile_data["target_audience"] == "Local families"
    assert profile.profile_completeness == 57

    conversation = conversation_store.get_conversation(turn.conversation_id)
    assert conversation.title == "Vegan Bakery Strategy"
    assert conversation_store.count_messages(turn.conversation_id) == 2
    assert [m.payload.content for m in vector_store.list_user_memories("user-1")] == [
        "User runs a vegan bakery in Leeds"
    ]


@pytest.mark.asyncio
async def test_second_turn_uses_profile_and_memories(pipeline, stores, title_provider):
    """Test the next turn advances the phase, retrieves memories and keeps the title."""
    _, _, vector_store = stores
    first = await pipeline.prepare_turn("user-1", None, "I'm Ada, I run a vegan bakery on Instagram")
    await first.collect()
    await first.wait_post_processing()

    second = await pipeline.prepare_turn("user-1", first.conversation_id, "Mostly local families")
    await second.collect()
    await second.wait_post_processing()

    assert second.phase.name == IDEA_GENERATION
    assert "User runs a vegan bakery in Leeds" in second.system_prompt
    assert [m["role"] for m in second.generation_messages[1:]] == ["user", "assistant", "user"]
    assert title_provider.chat.await_count == 1
    # Restated memory merges into the existing row
    assert len(vector_store.list_user_memories("user-1")) == 1
