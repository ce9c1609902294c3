"""
Post-stream processing.

Runs after the response has been delivered (or interrupted): persist the
turn, merge profile updates, extract memories, and title new conversations.
Each step is isolated; a failure is logged and recorded in the report and the
remaining steps still run.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from casual_creator.actions.models import ActionContext
from casual_creator.config import EngineSettings
from casual_creator.extractors import ConversationMemoryExtracter, ProfileExtracter, TitleGenerator
from casual_creator.intent.models import DecisionBundle
from casual_creator.memory import MemoryService
from casual_creator.models import ConversationMessage, UserProfile
from casual_creator.profile_merge import ProfilePatch, has_updates
from casual_creator.storage import ConversationStore, ProfileStore
from casual_creator.utils import UserLockRegistry

logger = logging.getLogger(__name__)

_CANDIDATE_SOURCES = {"user": "user_confirmed"}


@dataclass
class CompletedTurn:
    """Everything post-processing needs from one finished (or interrupted) turn."""

    user_id: str
    conversation_id: str
    user_message: ConversationMessage
    assistant_response: str
    decision: DecisionBundle
    actions: ActionContext = field(default_factory=ActionContext)
    history: List[ConversationMessage] = field(default_factory=list)
    retrieved_memories: List[str] = field(default_factory=list)
    interrupted: bool = False

    @property
    def is_first_exchange(self) -> bool:
        return not any(message.role == "assistant" for message in self.history)


@dataclass
class PostProcessingReport:
    completed: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)
    profile: Optional[UserProfile] = None
    memories_written: int = 0
    title: Optional[str] = None

    @property
    def success(self) -> bool:
        return not self.failed


def combine_patches(*patches: ProfilePatch) -> ProfilePatch:
    """Overlay patches left to right; ``profile_data`` maps are merged key by key."""
    combined: Dict[str, Any] = {}
    for patch in patches:
        for key, value in (patch or {}).items():
            if key == "profile_data" and isinstance(value, dict):
                combined["profile_data"] = {**combined.get("profile_data", {}), **value}
            else:
                combined[key] = value
    return combined


class PostProcessor:
    """
    Fault-isolated post-stream steps for a completed turn.

    Args:
        conversation_store: Message and title persistence
        profile_store: Profile persistence with atomic merge
        memory_service: Merge-on-write memory upserts
        memory_extractor: Proposes 0-N memories from the exchange
        profile_extractor: Proposes profile field updates from the exchange
        title_generator: Titles a conversation after its first exchange
        locks: Per-user write locks shared with the action router
        settings: Engine settings (memory threshold and cap)
    """

    def __init__(
        self,
        conversation_store: ConversationStore,
        profile_store: ProfileStore,
        memory_service: MemoryService,
        memory_extractor: ConversationMemoryExtracter,
        profile_extractor: ProfileExtracter,
        title_generator: TitleGenerator,
        locks: Optional[UserLockRegistry] = None,
        settings: Optional[EngineSettings] = None,
    ):
        self.conversation_store = conversation_store
        self.profile_store = profile_store
        self.memory_service = memory_service
        self.memory_extractor = memory_extractor
        self.profile_extractor = profile_extractor
        self.title_generator = title_generator
        self.locks = locks or UserLockRegistry()
        self.settings = settings or EngineSettings()

    async def run(self, turn: CompletedTurn) -> PostProcessingReport:
        report = PostProcessingReport()

        steps = (
            ("persist_turn", self.persist_turn),
            ("update_profile", self.update_profile),
            ("extract_memories", self.extract_memories),
            ("generate_title", self.generate_title),
        )
        for name, step in steps:
            try:
                await step(turn, report)
                report.completed.append(name)
            except Exception as e:
                logger.error(f"Post-processing step {name} failed for {turn.conversation_id}: {e}")
                report.failed[name] = str(e)

        logger.info(
            f"Post-processing for {turn.conversation_id}: completed={report.completed}, "
            f"failed={list(report.failed)}"
        )
        return report

    async def persist_turn(self, turn: CompletedTurn, report: PostProcessingReport):
        """Store the user message and whatever assistant text was generated."""
        messages = [turn.user_message]
        if turn.assistant_response:
            messages.append(ConversationMessage(role="assistant", content=turn.assistant_response))
        count = self.conversation_store.add_messages(turn.conversation_id, messages)
        if turn.interrupted:
            logger.info(
                f"Persisted interrupted turn ({len(turn.assistant_response)} chars) "
                f"to {turn.conversation_id}"
            )
        logger.debug(f"Stored {count} messages in {turn.conversation_id}")

    def _wants_profile_extraction(self, turn: CompletedTurn) -> bool:
        return (
            turn.decision.profile_update is not None
            or bool(turn.decision.workflow_phase.profile_patch)
            or turn.actions.has_fresh_analysis
        )

    async def update_profile(self, turn: CompletedTurn, report: PostProcessingReport):
        """Merge the classifier's patch and any extracted updates into the profile."""
        suggested = dict(turn.decision.workflow_phase.profile_patch)
        extracted: ProfilePatch = {}

        if self._wants_profile_extraction(turn) and turn.assistant_response:
            profile = self.profile_store.get_profile(turn.user_id) or UserProfile(user_id=turn.user_id)
            extracted = await self.profile_extractor.extract(
                turn.user_message.content, turn.assistant_response, profile
            )

        patch = combine_patches(suggested, extracted)
        if not has_updates(patch):
            logger.debug(f"No profile updates for user {turn.user_id}")
            return

        async with self.locks.lock_for(turn.user_id):
            report.profile = self.profile_store.merge_profile(turn.user_id, patch)
        logger.info(
            f"Profile updated for {turn.user_id}: fields={sorted(patch)}, "
            f"completeness={report.profile.profile_completeness}%"
        )

    async def extract_memories(self, turn: CompletedTurn, report: PostProcessingReport):
        if not turn.assistant_response:
            return

        candidates = await self.memory_extractor.extract(
            turn.user_message.content, turn.assistant_response, turn.retrieved_memories
        )
        for candidate in candidates[: self.settings.MAX_EXTRACTED_MEMORIES]:
            result = await self.memory_service.remember(
                turn.user_id,
                candidate.content,
                metadata={
                    "source": _CANDIDATE_SOURCES.get(candidate.source, "conversation"),
                    "conversation_id": turn.conversation_id,
                    "confidence": candidate.confidence,
                },
                similarity_threshold=self.settings.CONVERSATION_MEMORY_THRESHOLD,
            )
            if result is not None:
                report.memories_written += 1

    async def generate_title(self, turn: CompletedTurn, report: PostProcessingReport):
        if not turn.is_first_exchange or not turn.assistant_response:
            return

        exchange: Sequence[ConversationMessage] = [
            turn.user_message,
            ConversationMessage(role="assistant", content=turn.assistant_response),
        ]
        title = await self.title_generator.generate(exchange)
        self.conversation_store.update_title(turn.conversation_id, title)
        report.title = title
        logger.info(f"Conversation {turn.conversation_id} titled: {title}")
