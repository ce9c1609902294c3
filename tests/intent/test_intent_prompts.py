"""Tests for classifier prompt rendering."""

import json
from datetime import date

from casual_creator.intent.prompts import (
    build_classifier_system_prompt,
    build_classifier_user_prompt,
    build_profile_status,
    dump_profile,
)
from casual_creator.models import ConversationMessage, UserProfile


def test_system_prompt_renders_date_and_rules():
    """Test the system prompt formats without leftover placeholders."""
    prompt = build_classifier_system_prompt(today=date(2025, 3, 14))

    assert "2025-03-14" in prompt
    assert "{today}" not in prompt
    assert "{phase_rules}" not in prompt
    assert "Discovery & Personalization" in prompt


def test_profile_status_without_profile():
    """Test a missing profile tells the classifier to stay in discovery."""
    assert "stay in Discovery phase" in build_profile_status(None)


def test_profile_status_marks_fields():
    """Test populated and missing fields are marked and the score shown."""
    profile = UserProfile(
        user_id="u",
        first_name="Ada",
        content_niche=["baking"],
        profile_data={"own_instagram_username": "ada_bakes"},
    )

    status = build_profile_status(profile)

    assert "PROFILE COMPLETENESS SCORE: 29%" in status
    assert "✅ Name: Ada" in status
    assert "✅ Content Niche: baking" in status
    assert "❌ Primary Platform(s): Missing" in status
    assert "Own Instagram handle: @ada_bakes" in status


def test_user_prompt_includes_conversation():
    """Test the conversation is rendered role by role."""
    messages = [
        ConversationMessage(role="user", content="I bake bread"),
        ConversationMessage(role="assistant", content="Lovely!"),
    ]

    prompt = build_classifier_user_prompt(messages, UserProfile(user_id="u"))

    assert "user: I bake bread\nassistant: Lovely!" in prompt
    assert "CURRENT USER PROFILE STATUS" in prompt


def test_dump_profile_only_editable_fields():
    """Test the profile dump omits stored analyses."""
    profile = UserProfile(
        user_id="u",
        first_name="Ada",
        profile_data={"brand_voice": "warm", "instagram_profile": {"username": "ada"}},
    )

    dumped = json.loads(dump_profile(profile))

    assert dumped["first_name"] == "Ada"
    assert dumped["profile_data"] == {"brand_voice": "warm"}
