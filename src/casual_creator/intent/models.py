"""
Typed decision bundle produced by the unified intent analyzer.

Each auxiliary decision is its own model with a ``kind`` discriminator. A
decision is present on the bundle only when it was triggered; the workflow
phase decision is always present. ``DecisionBundle.status`` distinguishes a
real classification from the explicit fallback used when classification
fails or times out.
"""

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

from casual_creator.workflow.guidance import DEFAULT_SUGGESTED_PROMPTS
from casual_creator.workflow.phases import DISCOVERY

Recency = Literal["hour", "day", "week", "month", "year"]
SearchService = Literal["perplexity", "grok"]
BundleStatus = Literal["classified", "fallback"]

DEFAULT_DECISION_CONFIDENCE = 0.8


class _Decision(BaseModel):
    confidence: float = Field(
        default=DEFAULT_DECISION_CONFIDENCE, ge=0.0, le=1.0, description="Classifier confidence"
    )
    reason: str = ""

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, value: Any) -> float:
        if value is None or value == "":
            return DEFAULT_DECISION_CONFIDENCE
        return min(1.0, max(0.0, float(value)))


class WebSearchDecision(_Decision):
    kind: Literal["web_search"] = "web_search"
    refined_query: str = ""
    recency: Recency = "week"
    domains: List[str] = Field(default_factory=list)
    search_service: SearchService = "perplexity"
    social_handles: List[str] = Field(default_factory=list)

    @field_validator("recency", mode="before")
    @classmethod
    def _default_recency(cls, value: Any) -> str:
        return value if value in ("hour", "day", "week", "month", "year") else "week"

    @field_validator("search_service", mode="before")
    @classmethod
    def _default_service(cls, value: Any) -> str:
        return value if value in ("perplexity", "grok") else "perplexity"


class InstagramAnalysisDecision(_Decision):
    kind: Literal["instagram_analysis"] = "instagram_analysis"
    username: str
    is_own_profile: Optional[bool] = Field(
        default=None, description="True for the user's own account, False for a competitor"
    )

    @field_validator("username")
    @classmethod
    def _strip_at(cls, value: str) -> str:
        username = value.strip().lstrip("@").strip()
        if not username:
            raise ValueError("username is empty")
        return username


class InstagramHashtagDecision(_Decision):
    kind: Literal["instagram_hashtag_search"] = "instagram_hashtag_search"
    hashtag: str

    @field_validator("hashtag")
    @classmethod
    def _strip_hash(cls, value: str) -> str:
        hashtag = value.strip().lstrip("#").strip()
        if not hashtag:
            raise ValueError("hashtag is empty")
        return hashtag


class BlogAnalysisDecision(_Decision):
    kind: Literal["blog_analysis"] = "blog_analysis"
    urls: List[str] = Field(min_length=1)

    @field_validator("urls", mode="before")
    @classmethod
    def _clean_urls(cls, value: Any) -> List[str]:
        if isinstance(value, str):
            value = [value]
        return [url.strip() for url in value or [] if isinstance(url, str) and url.strip()]


class ProfileUpdateDecision(_Decision):
    kind: Literal["profile_update"] = "profile_update"
    expected_fields: List[str] = Field(default_factory=list)


class WorkflowPhaseDecision(_Decision):
    kind: Literal["workflow_phase"] = "workflow_phase"
    current_phase: str = DISCOVERY
    classifier_phase: Optional[str] = Field(
        default=None, description="Phase the classifier proposed, before reconciliation"
    )
    missing_fields: List[str] = Field(default_factory=list)
    suggested_prompts: List[str] = Field(default_factory=list)
    profile_patch: Dict[str, Any] = Field(default_factory=dict)
    ready_to_advance: bool = False
    should_block_content_generation: bool = True


Decision = Annotated[
    Union[
        WebSearchDecision,
        InstagramAnalysisDecision,
        InstagramHashtagDecision,
        BlogAnalysisDecision,
        ProfileUpdateDecision,
        WorkflowPhaseDecision,
    ],
    Field(discriminator="kind"),
]


def default_workflow_decision() -> WorkflowPhaseDecision:
    return WorkflowPhaseDecision(
        current_phase=DISCOVERY,
        missing_fields=["name", "niche", "platform"],
        suggested_prompts=list(DEFAULT_SUGGESTED_PROMPTS),
        should_block_content_generation=True,
        confidence=0.9,
        reason="Conservative default",
    )


class DecisionBundle(BaseModel):
    """All of one turn's classification decisions. Ephemeral; never persisted."""

    status: BundleStatus = "classified"
    web_search: Optional[WebSearchDecision] = None
    instagram_analysis: Optional[InstagramAnalysisDecision] = None
    instagram_hashtag_search: Optional[InstagramHashtagDecision] = None
    blog_analysis: Optional[BlogAnalysisDecision] = None
    profile_update: Optional[ProfileUpdateDecision] = None
    workflow_phase: WorkflowPhaseDecision = Field(default_factory=default_workflow_decision)
    error: Optional[str] = Field(default=None, description="Why the fallback was used")

    @classmethod
    def safe_default(cls, error: Optional[str] = None) -> "DecisionBundle":
        """No actions, earliest phase, content generation blocked."""
        return cls(status="fallback", workflow_phase=default_workflow_decision(), error=error)

    @property
    def is_fallback(self) -> bool:
        return self.status == "fallback"

    def triggered(self) -> List[Decision]:
        """Triggered auxiliary decisions in dispatch order (workflow phase excluded)."""
        return [
            decision
            for decision in (
                self.web_search,
                self.instagram_analysis,
                self.instagram_hashtag_search,
                self.blog_analysis,
                self.profile_update,
            )
            if decision is not None
        ]
