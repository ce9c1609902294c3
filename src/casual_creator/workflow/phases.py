"""
Workflow phase engine.

A static, ordered list of completeness bands. The current phase is derived
fresh each turn from the profile: the first band whose range contains the
completeness score and whose required fields are all populated wins, falling
back to the earliest phase. Everything here is pure and deterministic.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from casual_creator.models import UserProfile
from casual_creator.workflow.completeness import populated_fields


@dataclass(frozen=True)
class WorkflowPhase:
    """
    One band of the creator workflow.

    Attributes:
        name: Human readable phase name (also used in classifier prompts)
        min_completeness: Inclusive lower bound of the completeness band
        max_completeness: Inclusive upper bound of the completeness band
        required_fields: Profile fields that must be populated to enter
        optional_fields: Fields worth collecting during the phase
        can_generate_content: Whether drafts/captions may be produced
        can_generate_ideas: Whether content ideas may be suggested
        description: Short summary shown in prompts
    """

    name: str
    min_completeness: int
    max_completeness: int
    required_fields: Tuple[str, ...]
    optional_fields: Tuple[str, ...]
    can_generate_content: bool
    can_generate_ideas: bool
    description: str

    def contains(self, score: int) -> bool:
        return self.min_completeness <= score <= self.max_completeness


DISCOVERY = "Discovery & Personalization"
BRAND_VOICE = "Brand Voice & Positioning"
IDEA_GENERATION = "Collaborative Idea Generation"
DEVELOPING_IDEAS = "Developing Chosen Ideas"
CONTENT_DRAFTING = "Content Drafting & Iterative Review"
FINALIZATION = "Finalization & Scheduling"

_BASE_REQUIRED = ("first_name", "content_niche", "primary_platform")

WORKFLOW_PHASES: Tuple[WorkflowPhase, ...] = (
    WorkflowPhase(
        name=DISCOVERY,
        min_completeness=0,
        max_completeness=35,
        required_fields=_BASE_REQUIRED,
        optional_fields=("last_name", "primary_platforms"),
        can_generate_content=False,
        can_generate_ideas=False,
        description="Getting to know the user and their basic content needs",
    ),
    WorkflowPhase(
        name=BRAND_VOICE,
        min_completeness=35,
        max_completeness=55,
        required_fields=_BASE_REQUIRED,
        optional_fields=("target_audience", "brand_voice", "business_type", "content_goals"),
        can_generate_content=False,
        can_generate_ideas=False,
        description="Understanding brand identity, voice, and target audience",
    ),
    WorkflowPhase(
        name=IDEA_GENERATION,
        min_completeness=50,
        max_completeness=60,
        required_fields=_BASE_REQUIRED,
        optional_fields=("target_audience", "brand_voice", "business_type", "content_goals"),
        can_generate_content=False,
        can_generate_ideas=True,
        description="Generating content themes and high-level ideas",
    ),
    WorkflowPhase(
        name=DEVELOPING_IDEAS,
        min_completeness=60,
        max_completeness=75,
        required_fields=_BASE_REQUIRED,
        optional_fields=("target_audience", "brand_voice", "business_type"),
        can_generate_content=True,
        can_generate_ideas=True,
        description="Creating specific content outlines and structures",
    ),
    WorkflowPhase(
        name=CONTENT_DRAFTING,
        min_completeness=75,
        max_completeness=90,
        required_fields=_BASE_REQUIRED + ("target_audience",),
        optional_fields=("brand_voice", "business_type", "content_goals"),
        can_generate_content=True,
        can_generate_ideas=True,
        description="Creating full content drafts in the user's voice",
    ),
    WorkflowPhase(
        name=FINALIZATION,
        min_completeness=90,
        max_completeness=100,
        required_fields=_BASE_REQUIRED + ("target_audience", "brand_voice"),
        optional_fields=("business_type", "content_goals", "business_location"),
        can_generate_content=True,
        can_generate_ideas=True,
        description="Optimizing and finalizing content for publication",
    ),
)

PHASE_NAMES: Tuple[str, ...] = tuple(phase.name for phase in WORKFLOW_PHASES)

# User-facing labels for missing required fields
FIELD_LABELS = {
    "first_name": "Name",
    "content_niche": "Content Niche",
    "primary_platform": "Primary Platform",
    "target_audience": "Target Audience",
    "brand_voice": "Brand Voice",
    "business_type": "Business Type",
    "content_goals": "Content Goals",
}


def get_phase(name: str) -> Optional[WorkflowPhase]:
    """Look up a phase by name (case-insensitive)."""
    wanted = name.strip().lower()
    for phase in WORKFLOW_PHASES:
        if phase.name.lower() == wanted:
            return phase
    return None


def earliest_phase() -> WorkflowPhase:
    return WORKFLOW_PHASES[0]


def determine_workflow_phase(completeness: int, profile: UserProfile) -> WorkflowPhase:
    """
    Derive the current phase from the completeness score and field presence.

    Bands overlap at their edges; the first matching band in order wins.
    """
    present = populated_fields(profile)

    for phase in WORKFLOW_PHASES:
        if phase.contains(completeness) and all(
            field in present for field in phase.required_fields
        ):
            return phase

    return earliest_phase()


def missing_fields_for_phase(phase: WorkflowPhase, profile: UserProfile) -> List[str]:
    """Return user-facing labels of the phase's required fields that are not populated."""
    present = populated_fields(profile)
    return [
        FIELD_LABELS.get(field, field)
        for field in phase.required_fields
        if field not in present
    ]


def can_advance_to_next_phase(
    phase: WorkflowPhase, completeness: int, profile: UserProfile
) -> bool:
    """True when the score has reached the top of the band and nothing required is missing."""
    if completeness < phase.max_completeness:
        return False
    return not missing_fields_for_phase(phase, profile)


def get_next_phase(phase_name: str) -> Optional[WorkflowPhase]:
    """Return the phase after ``phase_name``, or None at the final phase or for unknown names."""
    for index, phase in enumerate(WORKFLOW_PHASES):
        if phase.name == phase_name:
            if index + 1 < len(WORKFLOW_PHASES):
                return WORKFLOW_PHASES[index + 1]
            return None
    return None
