"""Tests for decoding classifier JSON into a typed DecisionBundle."""

from casual_creator.intent import normalize_decision_bundle, normalize_profile_patch
from casual_creator.intent.models import (
    DecisionBundle,
    InstagramAnalysisDecision,
    WebSearchDecision,
)
from casual_creator.workflow.phases import BRAND_VOICE, DISCOVERY


def test_only_present_sub_objects_trigger():
    """Test absent decisions stay None and present ones decode to their model."""
    bundle = normalize_decision_bundle(
        {
            "webSearch": {"refinedQuery": "instagram reels trends 2025", "confidence": 0.9},
            "workflowPhase": {"currentPhase": DISCOVERY},
        }
    )

    assert isinstance(bundle.web_search, WebSearchDecision)
    assert bundle.web_search.refined_query == "instagram reels trends 2025"
    assert bundle.instagram_analysis is None
    assert bundle.blog_analysis is None
    assert bundle.status == "classified"
    assert [decision.kind for decision in bundle.triggered()] == ["web_search"]


def test_empty_sub_object_counts_as_triggered():
    """Test an empty web search object triggers with defaults."""
    bundle = normalize_decision_bundle({"webSearch": {}})

    assert bundle.web_search is not None
    assert bundle.web_search.recency == "week"
    assert bundle.web_search.search_service == "perplexity"
    assert bundle.web_search.confidence == 0.8
    assert bundle.web_search.reason


def test_explicit_false_trigger_flags_do_not_trigger():
    """Test decisions sent with their trigger flag set to false stay untriggered."""
    bundle = normalize_decision_bundle(
        {
            "webSearch": {"shouldSearch": False, "refinedQuery": "hello", "confidence": 0.9},
            "instagramAnalysis": {"shouldAnalyze": False, "username": "brandx"},
            "blogAnalysis": {"shouldAnalyze": True, "urls": ["https://example.com/blog"]},
            "workflowPhase": {"currentPhase": DISCOVERY},
        }
    )

    assert bundle.web_search is None
    assert bundle.instagram_analysis is None
    assert bundle.blog_analysis is not None
    assert [decision.kind for decision in bundle.triggered()] == ["blog_analysis"]


def test_malformed_decision_is_dropped_individually():
    """Test an invalid sub-object is dropped while the rest survive."""
    bundle = normalize_decision_bundle(
        {
            "instagramAnalysis": {"username": "   "},
            "blogAnalysis": {"urls": []},
            "instagramHashtagSearch": "veganbaking",
            "webSearch": {"refinedQuery": "sourdough pricing"},
        }
    )

    assert bundle.instagram_analysis is None
    assert bundle.blog_analysis is None
    assert bundle.instagram_hashtag_search is None
    assert bundle.web_search.refined_query == "sourdough pricing"


def test_decision_fields_are_cleaned():
    """Test handles, hashtags, URLs and out-of-range values are normalized."""
    bundle = normalize_decision_bundle(
        {
            "instagramAnalysis": {"username": "@brandx", "isOwnProfile": False, "confidence": 1.7},
            "instagramHashtagSearch": {"hashtag": "#veganbaking"},
            "blogAnalysis": {"urls": " https://ada.blog "},
            "webSearch": {"recency": "decade", "searchService": "bing"},
        }
    )

    assert bundle.instagram_analysis == InstagramAnalysisDecision(
        username="brandx", is_own_profile=False, confidence=1.0
    )
    assert bundle.instagram_hashtag_search.hashtag == "veganbaking"
    assert bundle.blog_analysis.urls == ["https://ada.blog"]
    assert bundle.web_search.recency == "week"
    assert bundle.web_search.search_service == "perplexity"


def test_workflow_phase_keeps_classifier_claim():
    """Test the classifier's phase is kept alongside the decoded workflow decision."""
    bundle = normalize_decision_bundle(
        {
            "workflowPhase": {
                "currentPhase": BRAND_VOICE,
                "missingFields": ["target audience"],
                "readyToAdvance": True,
                "shouldBlockContentGeneration": True,
                "profilePatch": {"firstName": "Ada"},
            }
        }
    )

    workflow = bundle.workflow_phase
    assert workflow.current_phase == BRAND_VOICE
    assert workflow.classifier_phase == BRAND_VOICE
    assert workflow.missing_fields == ["target audience"]
    assert workflow.profile_patch == {"first_name": "Ada"}


def test_missing_workflow_phase_uses_default():
    """Test a bundle without a workflow decision gets the conservative one."""
    bundle = normalize_decision_bundle({})

    assert bundle.workflow_phase.current_phase == DISCOVERY
    assert bundle.workflow_phase.should_block_content_generation is True


def test_profile_patch_maps_fields():
    """Test camelCase keys map to profile fields and extension fields nest."""
    patch = normalize_profile_patch(
        {
            "firstName": "Ada",
            "contentNiche": "baking",
            "targetAudience": "parents",
            "profileData": {"brandVoice": "warm", "instagramUsername": "@ada_bakes"},
            "blogProfile": {"writing_style": "formal"},
            "profileCompleteness": 99,
            "favouriteColour": "green",
        }
    )

    assert patch == {
        "first_name": "Ada",
        "content_niche": ["baking"],
        "profile_data": {
            "target_audience": "parents",
            "brand_voice": "warm",
            "own_instagram_username": "ada_bakes",
        },
    }


def test_profile_patch_rejects_non_dicts():
    """Test anything but an object yields an empty patch."""
    assert normalize_profile_patch(None) == {}
    assert normalize_profile_patch(["firstName"]) == {}


def test_safe_default_bundle():
    """Test the explicit fallback variant."""
    bundle = DecisionBundle.safe_default(error="timeout")

    assert bundle.is_fallback is True
    assert bundle.error == "timeout"
    assert bundle.triggered() == []
    assert bundle.workflow_phase.current_phase == DISCOVERY
    assert bundle.workflow_phase.should_block_content_generation is True
