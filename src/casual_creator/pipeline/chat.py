"""
Per-turn chat pipeline.

classification -> action dispatch -> memory retrieval -> streamed generation
-> fire-and-forget post-processing. The stream is never held back by
post-processing, and an interrupted stream still persists and mines the
partial text it produced.
"""

import asyncio
import logging
import time
from typing import AsyncIterator, List, Optional

from casual_creator.actions import ActionContext, ExternalActionRouter
from casual_creator.config import EngineSettings
from casual_creator.errors import ConversationNotFoundError, EmptyMessageError, ProviderError
from casual_creator.intent import UnifiedIntentAnalyzer
from casual_creator.intent.models import DecisionBundle
from casual_creator.intent.validation import reconcile_workflow_phase, validate_missing_fields
from casual_creator.memory import MemoryService, RetrievedMemory, build_memory_search_query
from casual_creator.models import ConversationMessage, UserProfile
from casual_creator.pipeline.generation import TextGenerator
from casual_creator.pipeline.post_processing import (
    CompletedTurn,
    PostProcessingReport,
    PostProcessor,
)
from casual_creator.pipeline.prompt_builder import build_generation_messages, build_system_prompt
from casual_creator.storage import ConversationStore, ProfileStore
from casual_creator.workflow import (
    ScopeCheck,
    WorkflowPhase,
    calculate_profile_completeness,
    check_output_scope,
    determine_workflow_phase,
    earliest_phase,
)

logger = logging.getLogger(__name__)


class ChatTurn:
    """
    A prepared turn: decisions made, context gathered, ready to stream.

    Consume ``stream()`` to deliver the response. When the stream ends for
    any reason (completion, provider failure, consumer cancellation or
    ``aclose()``), post-processing is scheduled over the text produced so far.
    """

    def __init__(
        self,
        user_id: str,
        conversation_id: str,
        user_message: ConversationMessage,
        history: List[ConversationMessage],
        decision: DecisionBundle,
        phase: WorkflowPhase,
        memories: List[RetrievedMemory],
        actions: ActionContext,
        generation_messages: List[dict],
        generator: TextGenerator,
        post_processor: PostProcessor,
    ):
        self.user_id = user_id
        self.conversation_id = conversation_id
        self.user_message = user_message
        self.history = history
        self.decision = decision
        self.phase = phase
        self.memories = memories
        self.actions = actions
        self.generation_messages = generation_messages
        self.text = ""
        self.error: Optional[str] = None
        self.scope_check: Optional[ScopeCheck] = None
        self._generator = generator
        self._post_processor = post_processor
        self._post_task: Optional["asyncio.Task[PostProcessingReport]"] = None
        self._started = False

    @property
    def citations(self) -> List[str]:
        return self.actions.citations

    @property
    def search_query(self) -> Optional[str]:
        return self.actions.search_query

    @property
    def system_prompt(self) -> str:
        return self.generation_messages[0]["content"]

    async def stream(self) -> AsyncIterator[str]:
        """Yield response chunks as they arrive. A turn can be streamed once."""
        if self._started:
            raise RuntimeError("Turn has already been streamed")
        self._started = True

        parts: List[str] = []
        completed = False
        try:
            async for chunk in self._generator.stream(self.generation_messages):
                parts.append(chunk)
                yield chunk
            completed = True
        except ProviderError as e:
            logger.error(f"Generation failed for {self.conversation_id}: {e}")
            self.error = str(e)
        finally:
            self.text = "".join(parts)
            self.scope_check = check_output_scope(self.text, self.phase)
            self._schedule_post_processing(interrupted=not completed)

    async def collect(self) -> str:
        """Consume the whole stream and return the full text."""
        async for _ in self.stream():
            pass
        return self.text

    def _schedule_post_processing(self, interrupted: bool):
        if interrupted:
            logger.warning(
                f"Stream for {self.conversation_id} ended early after {len(self.text)} chars"
            )
        completed_turn = CompletedTurn(
            user_id=self.user_id,
            conversation_id=self.conversation_id,
            user_message=self.user_message,
            assistant_response=self.text,
            decision=self.decision,
            actions=self.actions,
            history=self.history,
            retrieved_memories=[memory.content for memory in self.memories],
            interrupted=interrupted,
        )
        self._post_task = asyncio.get_running_loop().create_task(
            self._post_processor.run(completed_turn)
        )

    async def wait_post_processing(self) -> Optional[PostProcessingReport]:
        """Wait for scheduled post-processing; None if the stream never ran."""
        if self._post_task is None:
            return None
        return await self._post_task


class ChatPipeline:
    """
    Orchestrates one conversational turn.

    Args:
        analyzer: Unified intent analyzer (one model call per turn)
        router: External action dispatcher
        memory_service: Semantic memory retrieval
        generator: Streaming text generator
        post_processor: Post-stream steps
        conversation_store: Conversation and message persistence
        profile_store: Profile persistence
        settings: Engine settings (windows, retrieval k)

    Example:
        >>> turn = await pipeline.prepare_turn("user-1", None, "I run a vegan bakery")
        >>> async for chunk in turn.stream():
        ...     send(chunk)
        >>> turn.citations
        []
    """

    def __init__(
        self,
        analyzer: UnifiedIntentAnalyzer,
        router: ExternalActionRouter,
        memory_service: MemoryService,
        generator: TextGenerator,
        post_processor: PostProcessor,
        conversation_store: ConversationStore,
        profile_store: ProfileStore,
        settings: Optional[EngineSettings] = None,
    ):
        self.analyzer = analyzer
        self.router = router
        self.memory_service = memory_service
        self.generator = generator
        self.post_processor = post_processor
        self.conversation_store = conversation_store
        self.profile_store = profile_store
        self.settings = settings or EngineSettings()

    def _conversation_id(self, user_id: str, conversation_id: Optional[str]) -> str:
        if conversation_id is None:
            conversation = self.conversation_store.create_conversation(user_id)
            logger.info(f"Created conversation {conversation.id} for {user_id}")
            return conversation.id
        if self.conversation_store.get_conversation(conversation_id) is None:
            raise ConversationNotFoundError(conversation_id)
        return conversation_id

    def _load_profile(self, user_id: str) -> UserProfile:
        profile = self.profile_store.get_profile(user_id)
        if profile is None:
            return UserProfile(user_id=user_id)
        return profile

    async def prepare_turn(
        self, user_id: str, conversation_id: Optional[str], message: str
    ) -> ChatTurn:
        """
        Run everything that happens before the first token.

        Args:
            user_id: Authenticated user id
            conversation_id: Existing conversation, or None to start one
            message: The user's message

        Returns:
            ChatTurn ready to stream

        Raises:
            EmptyMessageError: If the message is empty or whitespace
            ConversationNotFoundError: If ``conversation_id`` does not exist
        """
        if not message or not message.strip():
            raise EmptyMessageError("Message must not be empty")

        started = time.monotonic()
        conversation_id = self._conversation_id(user_id, conversation_id)
        history = self.conversation_store.get_messages(conversation_id)
        user_message = ConversationMessage(role="user", content=message.strip())
        messages = history + [user_message]

        profile = self._load_profile(user_id)
        decision = await self.analyzer.analyze(messages, profile)

        actions = await self.router.dispatch(user_id, decision, messages)

        # Actions may have written analyses into the profile
        if actions.performed:
            profile = self._load_profile(user_id)
            if not decision.is_fallback:
                decision = validate_missing_fields(decision, profile)
                decision = reconcile_workflow_phase(decision, profile)
        if decision.is_fallback:
            phase = earliest_phase()
        else:
            phase = determine_workflow_phase(calculate_profile_completeness(profile), profile)

        query = build_memory_search_query(user_message.content, history)
        memories = await self.memory_service.search(
            user_id, query, k=self.settings.MEMORY_RETRIEVAL_K
        )

        system_prompt = build_system_prompt(
            decision.workflow_phase, phase, profile, memories, actions
        )
        generation_messages = build_generation_messages(
            system_prompt, messages, self.settings.GENERATION_WINDOW
        )

        logger.info(
            f"Turn prepared in {(time.monotonic() - started) * 1000:.0f}ms: phase={phase.name}, "
            f"actions={actions.performed}, omitted={list(actions.omitted)}, "
            f"memories={len(memories)}"
        )
        return ChatTurn(
            user_id=user_id,
            conversation_id=conversation_id,
            user_message=user_message,
            history=history,
            decision=decision,
            phase=phase,
            memories=memories,
            actions=actions,
            generation_messages=generation_messages,
            generator=self.generator,
            post_processor=self.post_processor,
        )
