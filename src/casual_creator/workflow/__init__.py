"""
Workflow phase engine.

Pure functions mapping profile completeness and field presence to an ordered
phase with content/idea capability flags.
"""

from casual_creator.workflow.completeness import (
    COMPLETENESS_FIELDS,
    calculate_profile_completeness,
    populated_fields,
)
from casual_creator.workflow.guidance import phase_guidance, suggested_prompts
from casual_creator.workflow.phases import (
    FIELD_LABELS,
    PHASE_NAMES,
    WORKFLOW_PHASES,
    WorkflowPhase,
    can_advance_to_next_phase,
    determine_workflow_phase,
    earliest_phase,
    get_next_phase,
    get_phase,
    missing_fields_for_phase,
)
from casual_creator.workflow.scope_guard import ScopeCheck, check_output_scope

__all__ = [
    "COMPLETENESS_FIELDS",
    "calculate_profile_completeness",
    "populated_fields",
    "phase_guidance",
    "suggested_prompts",
    "FIELD_LABELS",
    "PHASE_NAMES",
    "WORKFLOW_PHASES",
    "WorkflowPhase",
    "can_advance_to_next_phase",
    "determine_workflow_phase",
    "earliest_phase",
    "get_next_phase",
    "get_phase",
    "missing_fields_for_phase",
    "ScopeCheck",
    "check_output_scope",
]
