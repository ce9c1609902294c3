"""Tests for generation prompt assembly."""

from casual_creator.actions import (
    ActionContext,
    InstagramOutcome,
    InstagramProfile,
    SearchOutcome,
)
from casual_creator.intent.models import WorkflowPhaseDecision
from casual_creator.memory import RetrievedMemory
from casual_creator.models import ConversationMessage, MemoryRecord, UserProfile
from casual_creator.pipeline import build_generation_messages, build_system_prompt, profile_snapshot
from casual_creator.workflow import get_phase

DISCOVERY_PHASE = get_phase("Discovery & Personalization")
DRAFTING_PHASE = get_phase("Content Drafting & Iterative Review")


def test_discovery_prompt_states_blocked_capabilities():
    """Test the discovery prompt blocks drafts and lists missing fields with questions."""
    decision = WorkflowPhaseDecision(
        missing_fields=["Name", "Content Niche"],
        suggested_prompts=["What's your name?"],
        should_block_content_generation=True,
    )

    prompt = build_system_prompt(decision, DISCOVERY_PHASE)

    assert "CURRENT WORKFLOW PHASE: Discovery & Personalization" in prompt
    assert "- Content drafts (captions, scripts, posts): not allowed" in prompt
    assert "MISSING INFORMATION: Name, Content Niche" in prompt
    assert "CONTENT GENERATION BLOCKED" in prompt
    assert "QUESTIONS TO WORK IN NATURALLY: What's your name?" in prompt


def test_drafting_prompt_allows_content():
    """Test a drafting-phase prompt allows content and omits the block notice."""
    decision = WorkflowPhaseDecision(
        current_phase=DRAFTING_PHASE.name, should_block_content_generation=False
    )

    prompt = build_system_prompt(decision, DRAFTING_PHASE)

    assert "- Content drafts (captions, scripts, posts): allowed" in prompt
    assert "MISSING INFORMATION: None" in prompt
    assert "CONTENT GENERATION BLOCKED" not in prompt
    assert "QUESTIONS TO WORK IN NATURALLY" not in prompt


def test_profile_snapshot():
    """Test the snapshot lists known fields and the Instagram handle."""
    profile = UserProfile(
        user_id="user-1",
        first_name="Ada",
        content_niche=["baking", "vegan"],
        primary_platforms=["Instagram", "TikTok"],
        profile_data={"target_audience": "Local families", "own_instagram_username": "mybakery"},
        profile_completeness=71,
    )

    snapshot = profile_snapshot(profile)

    assert "- Name: Ada" in snapshot
    assert "- Content Niche: baking, vegan" in snapshot
    assert "- Primary Platform: Instagram, TikTok" in snapshot
    assert "- Target Audience: Local families" in snapshot
    assert "- Instagram: @mybakery" in snapshot
    assert "- Profile completeness: 71%" in snapshot


def test_empty_profile_snapshot():
    """Test unknown fields are marked as not provided."""
    snapshot = profile_snapshot(UserProfile(user_id="user-1"))

    assert "- Name: Not provided" in snapshot
    assert "- Primary Platform: Not specified" in snapshot


def test_memories_and_actions_are_included():
    """Test memories show similarity and search results list at most three sources."""
    memories = [
        RetrievedMemory(memory=MemoryRecord(user_id="user-1", content="Runs a vegan bakery"), similarity=0.873)
    ]
    actions = ActionContext(
        search=SearchOutcome(
            query="reels",
            service="perplexity",
            content="Reels reach is up",
            citations=[f"https://{i}.example" for i in range(5)],
        ),
        instagram=InstagramOutcome(
            username="brandx", is_own_profile=False, analysis=InstagramProfile(username="brandx")
        ),
    )

    prompt = build_system_prompt(WorkflowPhaseDecision(), DISCOVERY_PHASE, memories=memories, actions=actions)

    assert "1. Runs a vegan bakery (similarity: 87.3%)" in prompt
    assert "CURRENT WEB SEARCH RESULTS (perplexity):\nReels reach is up" in prompt
    assert "SOURCES: https://0.example, https://1.example, https://2.example" in prompt
    assert "https://3.example" not in prompt
    assert "INSTAGRAM ANALYSIS RESULTS (a competitor account)" in prompt


def test_failed_instagram_analysis_note():
    """Test a failed analysis is acknowledged without data."""
    actions = ActionContext(
        instagram=InstagramOutcome(username="brandx", is_own_profile=False, error="quota exceeded")
    )

    prompt = build_system_prompt(WorkflowPhaseDecision(), DISCOVERY_PHASE, actions=actions)

    assert "The analysis of @brandx is unavailable right now" in prompt
    assert "quota exceeded" not in prompt


def test_generation_messages_window():
    """Test the window keeps the most recent user and assistant messages."""
    history = [
        ConversationMessage(role="user" if i % 2 == 0 else "assistant", content=f"m{i}") for i in range(10)
    ]

    messages = build_generation_messages("SYSTEM", history, window=4)

    assert messages[0] == {"role": "system", "content": "SYSTEM"}
    assert [m["content"] for m in messages[1:]] == ["m6", "m7", "m8", "m9"]
    assert messages[1]["role"] == "user"
