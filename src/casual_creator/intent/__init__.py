"""
Unified intent analysis.

Turns the recent conversation and the stored profile into a typed
DecisionBundle: optional web search, Instagram, hashtag, blog and profile
update decisions plus the always-present workflow phase decision.
"""

from casual_creator.intent.analyzer import UnifiedIntentAnalyzer
from casual_creator.intent.models import (
    BlogAnalysisDecision,
    Decision,
    DecisionBundle,
    InstagramAnalysisDecision,
    InstagramHashtagDecision,
    ProfileUpdateDecision,
    WebSearchDecision,
    WorkflowPhaseDecision,
    default_workflow_decision,
)
from casual_creator.intent.normalizer import normalize_decision_bundle, normalize_profile_patch
from casual_creator.intent.validation import (
    canonical_field,
    classify_instagram_ownership,
    reconcile_workflow_phase,
    resolve_instagram_ownership,
    validate_bundle,
    validate_missing_fields,
)

__all__ = [
    "UnifiedIntentAnalyzer",
    "BlogAnalysisDecision",
    "Decision",
    "DecisionBundle",
    "InstagramAnalysisDecision",
    "InstagramHashtagDecision",
    "ProfileUpdateDecision",
    "WebSearchDecision",
    "WorkflowPhaseDecision",
    "default_workflow_decision",
    "normalize_decision_bundle",
    "normalize_profile_patch",
    "canonical_field",
    "classify_instagram_ownership",
    "reconcile_workflow_phase",
    "resolve_instagram_ownership",
    "validate_bundle",
    "validate_missing_fields",
]
