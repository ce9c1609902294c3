"""
Example: Interactive content-strategy chat

Wires the full turn pipeline with in-memory stores and OpenAI-backed models.
Web search is enabled when PERPLEXITY_API_KEY is set.

    export OPENAI_API_KEY=sk-...
    python examples/chat_session.py
"""

import asyncio
import logging
import os

from casual_llm import ModelConfig, Provider, create_provider

from casual_creator import EngineSettings
from casual_creator.actions import ExternalActionRouter, PerplexitySearchProvider
from casual_creator.embeddings import OpenAIEmbedding
from casual_creator.extractors import ConversationMemoryExtracter, ProfileExtracter, TitleGenerator
from casual_creator.intent import UnifiedIntentAnalyzer
from casual_creator.memory import MemoryService
from casual_creator.pipeline import ChatPipeline, OpenAIChatGenerator, PostProcessor
from casual_creator.storage import InMemoryConversationStore, InMemoryProfileStore, InMemoryVectorStore
from casual_creator.utils import UserLockRegistry


def build_pipeline(settings: EngineSettings) -> ChatPipeline:
    llm_provider = create_provider(
        ModelConfig(
            provider=Provider.OPENAI,
            base_url=os.getenv("OPENAI_BASE_URL"),
            name=os.getenv("CLASSIFIER_MODEL", "gpt-4o-mini"),
        )
    )

    conversation_store = InMemoryConversationStore()
    profile_store = InMemoryProfileStore()
    memory_service = MemoryService(
        vector_store=InMemoryVectorStore(),
        embedding=OpenAIEmbedding(model="text-embedding-3-small"),
        half_life_days=settings.MEMORY_HALF_LIFE_DAYS,
    )
    locks = UserLockRegistry()

    search_providers = {}
    if os.getenv("PERPLEXITY_API_KEY"):
        search_providers["perplexity"] = PerplexitySearchProvider()

    return ChatPipeline(
        analyzer=UnifiedIntentAnalyzer(llm_provider, settings),
        router=ExternalActionRouter(
            profile_store,
            memory_service,
            search_providers=search_providers,
            settings=settings,
            locks=locks,
        ),
        memory_service=memory_service,
        generator=OpenAIChatGenerator(
            model=settings.GENERATION_MODEL,
            temperature=settings.GENERATION_TEMPERATURE,
            max_tokens=settings.GENERATION_MAX_TOKENS,
        ),
        post_processor=PostProcessor(
            conversation_store=conversation_store,
            profile_store=profile_store,
            memory_service=memory_service,
            memory_extractor=ConversationMemoryExtracter(llm_provider, settings.MAX_EXTRACTED_MEMORIES),
            profile_extractor=ProfileExtracter(llm_provider),
            title_generator=TitleGenerator(llm_provider),
            locks=locks,
            settings=settings,
        ),
        conversation_store=conversation_store,
        profile_store=profile_store,
        settings=settings,
    )


async def main():
    logging.basicConfig(level=logging.WARNING)
    pipeline = build_pipeline(EngineSettings())
    conversation_id = None

    print("Type a message (empty line to quit)\n")
    while True:
        message = input("you> ").strip()
        if not message:
            break

        turn = await pipeline.prepare_turn("demo-user", conversation_id, message)
        conversation_id = turn.conversation_id

        print(f"[{turn.phase.name}] ", end="")
        async for chunk in turn.stream():
            print(chunk, end="", flush=True)
        print()
        for url in turn.citations:
            print(f"  source: {url}")

        report = await turn.wait_post_processing()
        if report and report.profile:
            print(f"  profile: {report.profile.profile_completeness}% complete")
        print()


if __name__ == "__main__":
    asyncio.run(main())
