"""
Post-validation of a decision bundle against authoritative profile state.

The classifier's claims about the profile are advisory. These functions drop
missing-field claims for fields that are actually populated, reconcile the
workflow phase with the phase engine, and resolve own-profile vs competitor
for Instagram analysis from the stored handles.
"""

import logging
import re
from typing import List, Optional

from casual_creator.intent.models import DecisionBundle
from casual_creator.models import UserProfile
from casual_creator.workflow import (
    calculate_profile_completeness,
    can_advance_to_next_phase,
    determine_workflow_phase,
    missing_fields_for_phase,
    populated_fields,
    suggested_prompts,
)

logger = logging.getLogger(__name__)

# Friendly names and aliases the classifier uses, keyed case/space-insensitively
FIELD_ALIASES = {
    "name": "first_name",
    "firstname": "first_name",
    "lastname": "last_name",
    "niche": "content_niche",
    "contentniche": "content_niche",
    "platform": "primary_platform",
    "primaryplatform": "primary_platform",
    "platforms": "primary_platforms",
    "primaryplatforms": "primary_platforms",
    "audience": "target_audience",
    "targetaudience": "target_audience",
    "brandvoice": "brand_voice",
    "voice": "brand_voice",
    "businesstype": "business_type",
    "contentgoals": "content_goals",
    "goals": "content_goals",
    "businesslocation": "business_location",
    "location": "business_location",
}


def canonical_field(label: str) -> Optional[str]:
    """Map a friendly field label ("Name", "target audience", "brandVoice") to a profile field."""
    key = re.sub(r"[\s_\-]", "", label).lower()
    return FIELD_ALIASES.get(key)


def validate_missing_fields(bundle: DecisionBundle, profile: UserProfile) -> DecisionBundle:
    """
    Drop claimed-missing fields that are populated on the profile.

    Labels that do not map to a known field are kept.
    """
    present = populated_fields(profile)
    claimed = bundle.workflow_phase.missing_fields

    kept = [label for label in claimed if canonical_field(label) not in present]

    if len(kept) != len(claimed):
        removed = [label for label in claimed if label not in kept]
        logger.info(f"Removed missing-field claims that are populated: {', '.join(removed)}")
        bundle.workflow_phase.missing_fields = kept

    return bundle


def reconcile_workflow_phase(bundle: DecisionBundle, profile: UserProfile) -> DecisionBundle:
    """
    Make the phase decision agree with the phase engine.

    The derived phase replaces the classifier's phase, fields the phase
    requires are added to the missing list when the classifier omitted them,
    and content generation is blocked exactly when the phase disallows it.
    """
    decision = bundle.workflow_phase
    completeness = calculate_profile_completeness(profile)
    phase = determine_workflow_phase(completeness, profile)

    if decision.classifier_phase and decision.classifier_phase != phase.name:
        logger.info(
            f"Classifier proposed phase '{decision.classifier_phase}', "
            f"derived phase is '{phase.name}' ({completeness}%)"
        )
    decision.current_phase = phase.name

    represented = {canonical_field(label) for label in decision.missing_fields}
    required_missing: List[str] = missing_fields_for_phase(phase, profile)
    for label in required_missing:
        if canonical_field(label) not in represented:
            decision.missing_fields.append(label)

    if not decision.suggested_prompts and decision.missing_fields:
        decision.suggested_prompts = suggested_prompts(decision.missing_fields)

    decision.should_block_content_generation = not phase.can_generate_content
    decision.ready_to_advance = can_advance_to_next_phase(phase, completeness, profile)
    return bundle


def _normalize_handle(handle: Optional[str]) -> str:
    return (handle or "").strip().lstrip("@").lower()


def classify_instagram_ownership(username: str, profile: UserProfile) -> bool:
    """
    Decide whether ``username`` is the user's own account.

    Own when it matches the stored own handle or the stored own analysis, or
    when neither exists yet (the first analysis defaults to own). Otherwise
    it is a competitor.
    """
    handle = _normalize_handle(username)
    own_handle = _normalize_handle(profile.profile_data.get("own_instagram_username"))
    own_profile = profile.profile_data.get("instagram_profile") or {}
    analyzed_handle = _normalize_handle(own_profile.get("username")) if isinstance(own_profile, dict) else ""

    if own_handle and handle == own_handle:
        return True
    if analyzed_handle and handle == analyzed_handle:
        return True
    return not own_handle and not analyzed_handle


def resolve_instagram_ownership(bundle: DecisionBundle, profile: UserProfile) -> DecisionBundle:
    decision = bundle.instagram_analysis
    if decision is None:
        return bundle

    resolved = classify_instagram_ownership(decision.username, profile)
    if decision.is_own_profile is not None and decision.is_own_profile != resolved:
        logger.info(
            f"Overriding classifier ownership for @{decision.username}: "
            f"{'own' if resolved else 'competitor'}"
        )
    decision.is_own_profile = resolved
    return bundle


def validate_bundle(bundle: DecisionBundle, profile: UserProfile) -> DecisionBundle:
    """Apply every post-validation step."""
    validate_missing_fields(bundle, profile)
    reconcile_workflow_phase(bundle, profile)
    resolve_instagram_ownership(bundle, profile)
    return bundle
