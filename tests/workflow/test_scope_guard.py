"""Tests for the post-hoc phase scope guard and phase guidance helpers."""

from casual_creator.workflow import check_output_scope, get_phase, phase_guidance, suggested_prompts
from casual_creator.workflow.guidance import DEFAULT_GUIDANCE
from casual_creator.workflow.phases import DEVELOPING_IDEAS, DISCOVERY, IDEA_GENERATION


def test_discovery_flags_drafted_caption():
    """Test a caption in the discovery phase is reported as a violation."""
    text = "Great to meet you!\nCaption: Fresh sourdough every morning"

    check = check_output_scope(text, get_phase(DISCOVERY))

    assert check.within_scope is False
    assert "content_generation" in check.violations


def test_discovery_flags_idea_lists():
    """Test an idea list in the discovery phase is reported."""
    text = "Here are three content ideas for you:\nIdea 1: Behind the scenes"

    check = check_output_scope(text, get_phase(DISCOVERY))

    assert "idea_generation" in check.violations


def test_hashtag_block_counts_as_content():
    """Test a dense hashtag block reads as a finished post."""
    text = "#bake #vegan #bread #sourdough #leeds #foodie"

    check = check_output_scope(text, get_phase(DISCOVERY))

    assert check.violations == ["content_generation"]


def test_ideas_allowed_in_idea_generation():
    """Test idea lists are fine once ideas are unlocked."""
    text = "Here are some content ideas:\nIdea 1: A day in the bakery"

    check = check_output_scope(text, get_phase(IDEA_GENERATION))

    assert check.within_scope is True


def test_drafts_allowed_when_content_unlocked():
    """Test drafts pass in a content-capable phase."""
    text = "Here's a draft caption for you.\nCaption: Rise and shine"

    assert check_output_scope(text, get_phase(DEVELOPING_IDEAS)).within_scope is True


def test_empty_text_is_within_scope():
    """Test an empty response has no violations."""
    assert check_output_scope("", get_phase(DISCOVERY)).within_scope is True


def test_phase_guidance_falls_back_for_unknown_phase():
    """Test unknown phases get the conservative guidance."""
    assert "DO NOT suggest content ideas" in phase_guidance(DISCOVERY)
    assert phase_guidance("Made Up Phase") == DEFAULT_GUIDANCE


def test_suggested_prompts_from_labels_and_aliases():
    """Test missing labels and short aliases both map to questions, capped by limit."""
    prompts = suggested_prompts(["Name", "niche", "platform"], limit=2)

    assert prompts == ["What's your name?", "What type of content do you create?"]


def test_suggested_prompts_ignore_unknown_labels():
    """Test labels without a question are skipped."""
    assert suggested_prompts(["favourite colour", "Target Audience"]) == [
        "Who is your ideal audience?"
    ]
