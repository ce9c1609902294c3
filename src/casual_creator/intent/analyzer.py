"""
Unified intent analyzer.

One classification request per turn produces the whole decision bundle. The
request runs under a wall-clock timeout; any failure (timeout, provider
error, empty or unparsable output) yields the safe default bundle instead of
blocking the turn. Successful bundles are post-validated against the stored
profile before they are returned.
"""

import asyncio
import logging
import time
from typing import Optional, Sequence

from casual_llm import LLMProvider, SystemMessage, UserMessage

from casual_creator.config import EngineSettings
from casual_creator.intent.models import DecisionBundle
from casual_creator.intent.normalizer import normalize_decision_bundle
from casual_creator.intent.prompts import (
    build_classifier_system_prompt,
    build_classifier_user_prompt,
)
from casual_creator.intent.validation import validate_bundle
from casual_creator.models import ConversationMessage, UserProfile
from casual_creator.utils.json_parsing import parse_json_object

logger = logging.getLogger(__name__)


class UnifiedIntentAnalyzer:
    """
    Classifies a turn into a DecisionBundle with a single LLM call.

    Example:
        >>> analyzer = UnifiedIntentAnalyzer(llm_provider)
        >>> bundle = await analyzer.analyze(history, profile)
        >>> if bundle.web_search:
        ...     print(bundle.web_search.refined_query)
    """

    def __init__(self, llm_provider: LLMProvider, settings: Optional[EngineSettings] = None):
        """
        Initialize the analyzer.

        Args:
            llm_provider: LLM provider used for classification
            settings: Engine settings (timeout, window, sampling parameters)
        """
        self.llm_provider = llm_provider
        self.settings = settings or EngineSettings()
        self.call_count = 0
        self.success_count = 0
        self.fallback_count = 0
        self.timeout_count = 0

    async def _classify(
        self, messages: Sequence[ConversationMessage], profile: Optional[UserProfile]
    ) -> str:
        llm_messages = [
            SystemMessage(content=build_classifier_system_prompt()),
            UserMessage(content=build_classifier_user_prompt(messages, profile)),
        ]
        response = await self.llm_provider.chat(
            messages=llm_messages,
            response_format="json",
            temperature=self.settings.CLASSIFIER_TEMPERATURE,
            max_tokens=self.settings.CLASSIFIER_MAX_TOKENS,
        )
        return (response.content or "").strip()

    def _fallback(self, error: str) -> DecisionBundle:
        self.fallback_count += 1
        return DecisionBundle.safe_default(error=error)

    async def analyze(
        self, messages: Sequence[ConversationMessage], profile: Optional[UserProfile]
    ) -> DecisionBundle:
        """
        Classify the recent conversation.

        Args:
            messages: Conversation so far, oldest first; only the last
                ``CLASSIFIER_WINDOW`` messages are sent
            profile: Current profile snapshot, or None for an unknown user

        Returns:
            A classified, validated DecisionBundle, or the safe default on
            any failure
        """
        self.call_count += 1
        started = time.monotonic()
        window = list(messages)[-self.settings.CLASSIFIER_WINDOW :]
        timeout = self.settings.CLASSIFIER_TIMEOUT_SECONDS

        try:
            content = await asyncio.wait_for(self._classify(window, profile), timeout=timeout)
        except asyncio.TimeoutError:
            self.timeout_count += 1
            logger.warning(f"Intent classification timed out after {timeout}s, using safe default")
            return self._fallback("timeout")
        except Exception as e:
            logger.error(f"Intent classification failed: {e}")
            return self._fallback(f"classifier error: {e}")

        if not content:
            logger.warning("Intent classifier returned no content, using safe default")
            return self._fallback("empty response")

        try:
            raw = parse_json_object(content)
        except ValueError as e:
            logger.warning(f"Failed to parse classifier output: {e}")
            return self._fallback("unparsable response")

        bundle = normalize_decision_bundle(raw)
        if profile is not None:
            bundle = validate_bundle(bundle, profile)

        self.success_count += 1
        logger.info(
            f"Intent analysis complete in {(time.monotonic() - started) * 1000:.0f}ms: "
            f"actions={[decision.kind for decision in bundle.triggered()]}, "
            f"phase={bundle.workflow_phase.current_phase}"
        )
        return bundle

    def get_metrics(self) -> dict:
        """
        Get classification counters.

        Returns:
            Dictionary with call, success, fallback and timeout counts
        """
        metrics = {
            "intent_analyzer_call_count": self.call_count,
            "intent_analyzer_success_count": self.success_count,
            "intent_analyzer_fallback_count": self.fallback_count,
            "intent_analyzer_timeout_count": self.timeout_count,
        }
        if self.call_count > 0:
            metrics["intent_analyzer_success_rate_percent"] = round(
                self.success_count / self.call_count * 100, 2
            )
        return metrics
