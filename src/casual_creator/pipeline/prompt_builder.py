"""
Generation prompt assembly.

One system prompt per turn, built from the phase decision, the profile
snapshot, retrieved memories and whatever the external actions returned,
followed by the bounded conversation window.
"""

from typing import Any, Dict, List, Optional, Sequence

from casual_creator.actions.formatting import (
    format_blog_analysis,
    format_hashtag_results,
    format_instagram_analysis,
)
from casual_creator.actions.models import ActionContext
from casual_creator.intent.models import WorkflowPhaseDecision
from casual_creator.memory.models import RetrievedMemory
from casual_creator.models import ConversationMessage, UserProfile
from casual_creator.workflow import WorkflowPhase, phase_guidance

MAX_PROMPT_CITATIONS = 3

BASE_PROMPT = """You are a social media content strategist and creative partner for independent creators and small businesses. You can draw on current web search results when they are provided below.

WORKFLOW RULES:
- Follow the natural flow of the conversation while guiding the user through the six workflow phases
- Be conversational and warm; use emojis sparingly
- Never jump ahead to content generation before discovery is complete
- Ask follow-up questions to gather missing information naturally
- Present options and get feedback before moving to the next phase

CURRENT WORKFLOW PHASE: {phase}

PHASE GUIDANCE:
{guidance}

CAPABILITIES IN THIS PHASE:
- Content drafts (captions, scripts, posts): {content_allowed}
- Content ideas: {ideas_allowed}

MISSING INFORMATION: {missing}"""

BLOCKED_NOTICE = "\nCONTENT GENERATION BLOCKED: finish discovery before writing any content."

_PROFILE_DATA_LABELS = (
    ("target_audience", "Target Audience"),
    ("brand_voice", "Brand Voice"),
    ("business_type", "Business Type"),
    ("content_goals", "Content Goals"),
    ("business_location", "Business Location"),
)


def _allowed(flag: bool) -> str:
    return "allowed" if flag else "not allowed"


def _join(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item) for item in value)
    return str(value)


def profile_snapshot(profile: Optional[UserProfile]) -> str:
    if profile is None:
        return ""

    name = " ".join(part for part in (profile.first_name, profile.last_name) if part)
    platforms = profile.primary_platforms or (
        [profile.primary_platform] if profile.primary_platform else []
    )
    lines = [
        "CURRENT USER PROFILE:",
        f"- Name: {name or 'Not provided'}",
        f"- Content Niche: {', '.join(profile.content_niche) or 'Not specified'}",
        f"- Primary Platform: {', '.join(platforms) or 'Not specified'}",
    ]

    data = profile.profile_data or {}
    for key, label in _PROFILE_DATA_LABELS:
        if data.get(key):
            lines.append(f"- {label}: {_join(data[key])}")
    if data.get("own_instagram_username"):
        lines.append(f"- Instagram: @{data['own_instagram_username']}")
    lines.append(f"- Profile completeness: {profile.profile_completeness}%")
    return "\n".join(lines)


def memories_section(memories: Sequence[RetrievedMemory]) -> str:
    if not memories:
        return ""
    lines = ["RELEVANT MEMORIES FROM PAST CONVERSATIONS:"]
    lines += [
        f"{index}. {memory.content} (similarity: {memory.similarity * 100:.1f}%)"
        for index, memory in enumerate(memories, start=1)
    ]
    return "\n".join(lines)


def actions_section(context: Optional[ActionContext]) -> str:
    """Summaries of the turn's action results; failed actions get a short note."""
    if context is None:
        return ""

    sections: List[str] = []

    if context.search is not None and context.search.content:
        search = [f"CURRENT WEB SEARCH RESULTS ({context.search.service}):", context.search.content]
        if context.search.citations:
            search.append(f"SOURCES: {', '.join(context.search.citations[:MAX_PROMPT_CITATIONS])}")
        sections.append("\n".join(search))

    instagram = context.instagram
    if instagram is not None:
        if instagram.analysis is not None:
            owner = "the user's own account" if instagram.is_own_profile else "a competitor account"
            sections.append(
                f"INSTAGRAM ANALYSIS RESULTS ({owner}):\n"
                f"{format_instagram_analysis(instagram.analysis, instagram.cached)}\n"
                "Give specific, actionable recommendations based on this data."
            )
        elif instagram.error:
            sections.append(
                f"INSTAGRAM ANALYSIS RESULTS:\nThe analysis of @{instagram.username} is unavailable "
                "right now. Offer general guidance and suggest trying again later."
            )

    hashtag = context.hashtag
    if hashtag is not None and hashtag.result is not None:
        sections.append(
            f"HASHTAG SEARCH RESULTS:\n{format_hashtag_results(hashtag.result, hashtag.cached)}"
        )

    blog = context.blog
    if blog is not None and blog.analysis is not None:
        sections.append(
            f"BLOG ANALYSIS RESULTS:\n{format_blog_analysis(blog.analysis, blog.cached)}\n"
            "Match this writing style when drafting content for the user."
        )

    return "\n\n".join(sections)


def build_system_prompt(
    decision: WorkflowPhaseDecision,
    phase: WorkflowPhase,
    profile: Optional[UserProfile] = None,
    memories: Sequence[RetrievedMemory] = (),
    actions: Optional[ActionContext] = None,
) -> str:
    """
    Assemble the generation system prompt.

    Args:
        decision: Reconciled workflow decision (missing fields, prompts, block flag)
        phase: Phase derived from the profile; its capability flags are stated
            explicitly in the prompt
        profile: Profile snapshot, if the user has one
        memories: Retrieved memories with their raw similarity
        actions: External action results for this turn

    Returns:
        The system prompt text
    """
    base = BASE_PROMPT.format(
        phase=phase.name,
        guidance=phase_guidance(phase.name),
        content_allowed=_allowed(phase.can_generate_content),
        ideas_allowed=_allowed(phase.can_generate_ideas),
        missing=", ".join(decision.missing_fields) or "None",
    )
    if decision.should_block_content_generation:
        base += BLOCKED_NOTICE
    if decision.missing_fields and decision.suggested_prompts:
        base += "\nQUESTIONS TO WORK IN NATURALLY: " + " ".join(decision.suggested_prompts)

    sections = [base, profile_snapshot(profile), memories_section(memories), actions_section(actions)]
    return "\n\n".join(section for section in sections if section)


def build_generation_messages(
    system_prompt: str, history: Sequence[ConversationMessage], window: int
) -> List[Dict[str, str]]:
    """System prompt followed by the last ``window`` conversation messages."""
    recent = list(history)[-window:] if window > 0 else []
    return [{"role": "system", "content": system_prompt}] + [
        {"role": message.role, "content": message.content}
        for message in recent
        if message.role in ("user", "assistant")
    ]
