"""
Decode the classifier's condensed JSON into a DecisionBundle.

The classifier only emits a sub-object for triggered decisions and uses
camelCase keys. Each sub-object is validated independently: a malformed one
is dropped (and logged) without discarding the rest of the bundle.
"""

import logging
from typing import Any, Dict, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from casual_creator.intent.models import (
    BlogAnalysisDecision,
    DecisionBundle,
    InstagramAnalysisDecision,
    InstagramHashtagDecision,
    ProfileUpdateDecision,
    WebSearchDecision,
    WorkflowPhaseDecision,
    default_workflow_decision,
)

logger = logging.getLogger(__name__)

D = TypeVar("D", bound=BaseModel)

_KEY_MAP = {
    "refinedQuery": "refined_query",
    "searchService": "search_service",
    "socialHandles": "social_handles",
    "isOwnProfile": "is_own_profile",
    "expectedFields": "expected_fields",
    "currentPhase": "current_phase",
    "missingFields": "missing_fields",
    "suggestedPrompts": "suggested_prompts",
    "profilePatch": "profile_patch",
    "readyToAdvance": "ready_to_advance",
    "shouldBlockContentGeneration": "should_block_content_generation",
}

# Explicit trigger flags the classifier may include in a decision object
_TRIGGER_FLAGS = ("shouldSearch", "shouldAnalyze", "shouldExtract", "should_search", "should_analyze", "should_extract")

# Classifier-side profile patch keys mapped onto profile fields
_PATCH_KEY_MAP = {
    "firstName": "first_name",
    "lastName": "last_name",
    "contentNiche": "content_niche",
    "primaryPlatform": "primary_platform",
    "primaryPlatforms": "primary_platforms",
}
_PATCH_EXTENSION_KEYS = {
    "targetAudience": "target_audience",
    "brandVoice": "brand_voice",
    "businessType": "business_type",
    "contentGoals": "content_goals",
    "businessLocation": "business_location",
    "instagramUsername": "own_instagram_username",
}


def _snake_keys(raw: Dict[str, Any]) -> Dict[str, Any]:
    return {_KEY_MAP.get(key, key): value for key, value in raw.items() if value is not None}


def normalize_profile_patch(raw: Any) -> Dict[str, Any]:
    """
    Convert a camelCase classifier/extractor patch into the profile patch shape.

    Extension fields may arrive either at the top level or nested under
    ``profileData``. ``blogProfile`` is never accepted from a patch.
    """
    if not isinstance(raw, dict):
        return {}

    patch: Dict[str, Any] = {}
    extension: Dict[str, Any] = {}

    nested = raw.get("profileData") or raw.get("profile_data") or {}
    items = list(raw.items()) + (list(nested.items()) if isinstance(nested, dict) else [])

    for key, value in items:
        if key in ("profileData", "profile_data", "profileCompleteness", "blogProfile", "blog_profile"):
            continue
        if key in _PATCH_KEY_MAP or key in _PATCH_KEY_MAP.values():
            patch[_PATCH_KEY_MAP.get(key, key)] = value
        elif key in _PATCH_EXTENSION_KEYS or key in _PATCH_EXTENSION_KEYS.values():
            name = _PATCH_EXTENSION_KEYS.get(key, key)
            if name == "own_instagram_username" and isinstance(value, str):
                value = value.strip().lstrip("@")
            extension[name] = value

    if isinstance(patch.get("content_niche"), str):
        patch["content_niche"] = [patch["content_niche"]]
    if isinstance(patch.get("primary_platforms"), str):
        patch["primary_platforms"] = [patch["primary_platforms"]]
    if extension:
        patch["profile_data"] = extension

    return patch


def _decode(model: Type[D], name: str, raw: Any) -> Optional[D]:
    if raw is None or raw is False:
        return None
    if not isinstance(raw, dict):
        logger.warning(f"Dropping malformed {name} decision: expected object, got {type(raw).__name__}")
        return None
    if any(raw.get(flag) is False for flag in _TRIGGER_FLAGS):
        logger.debug(f"{name} decision explicitly not triggered")
        return None
    try:
        return model(**_snake_keys(raw))
    except ValidationError as e:
        logger.warning(f"Dropping malformed {name} decision: {e.error_count()} validation errors")
        return None


def normalize_decision_bundle(raw: Dict[str, Any]) -> DecisionBundle:
    """Build a classified DecisionBundle from the classifier's condensed JSON."""
    workflow = default_workflow_decision()
    raw_workflow = raw.get("workflowPhase") or raw.get("workflow_phase")
    if isinstance(raw_workflow, dict):
        fields = _snake_keys(raw_workflow)
        fields["profile_patch"] = normalize_profile_patch(fields.get("profile_patch"))
        fields["classifier_phase"] = fields.get("current_phase")
        fields.setdefault("missing_fields", [])
        fields.setdefault("suggested_prompts", [])
        try:
            workflow = WorkflowPhaseDecision(**fields)
        except ValidationError as e:
            logger.warning(f"Workflow phase decision malformed, using default: {e.error_count()} errors")

    bundle = DecisionBundle(
        status="classified",
        web_search=_decode(WebSearchDecision, "webSearch", raw.get("webSearch")),
        instagram_analysis=_decode(
            InstagramAnalysisDecision, "instagramAnalysis", raw.get("instagramAnalysis")
        ),
        instagram_hashtag_search=_decode(
            InstagramHashtagDecision, "instagramHashtagSearch", raw.get("instagramHashtagSearch")
        ),
        blog_analysis=_decode(BlogAnalysisDecision, "blogAnalysis", raw.get("blogAnalysis")),
        profile_update=_decode(ProfileUpdateDecision, "profileUpdate", raw.get("profileUpdate")),
        workflow_phase=workflow,
    )

    if bundle.web_search is not None and not bundle.web_search.reason:
        bundle.web_search.reason = "Classifier recommended search"

    return bundle
