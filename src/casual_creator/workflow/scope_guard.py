"""
Post-hoc check of generated text against the phase capability flags.

Capability flags are prompt instructions, so the generator can still produce
drafts or idea lists in a phase that does not allow them. The guard inspects
the finished text and reports violations; it never rewrites the output,
because by the time it runs the stream has already been delivered.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import List

from casual_creator.workflow.phases import WorkflowPhase

logger = logging.getLogger(__name__)

_CONTENT_PATTERNS = [
    re.compile(r"^\s*(caption|script|post copy|hook)\s*:", re.IGNORECASE | re.MULTILINE),
    re.compile(r"here(?:'s| is) (?:a|your) (?:draft|caption|script|post)", re.IGNORECASE),
]
_IDEA_PATTERNS = [
    re.compile(r"^\s*(?:idea|theme|concept)\s*#?\d+\s*[:.)-]", re.IGNORECASE | re.MULTILINE),
    re.compile(r"here are (?:\w+ )?(?:content )?(?:ideas|themes|concepts)", re.IGNORECASE),
]
_HASHTAG = re.compile(r"#\w+")

# Hashtag blocks this dense only appear in finished posts
HASHTAG_BLOCK_THRESHOLD = 5


@dataclass
class ScopeCheck:
    phase: str
    violations: List[str] = field(default_factory=list)

    @property
    def within_scope(self) -> bool:
        return not self.violations


def check_output_scope(text: str, phase: WorkflowPhase) -> ScopeCheck:
    """
    Flag content the phase does not allow.

    Args:
        text: Complete (or partial) generated text
        phase: Phase the turn was generated under

    Returns:
        ScopeCheck listing ``content_generation`` and/or ``idea_generation``
        violations
    """
    check = ScopeCheck(phase=phase.name)
    if not text:
        return check

    if not phase.can_generate_content:
        drafted = any(pattern.search(text) for pattern in _CONTENT_PATTERNS)
        if drafted or len(_HASHTAG.findall(text)) >= HASHTAG_BLOCK_THRESHOLD:
            check.violations.append("content_generation")

    if not phase.can_generate_ideas:
        if any(pattern.search(text) for pattern in _IDEA_PATTERNS):
            check.violations.append("idea_generation")

    if check.violations:
        logger.warning(
            f"Generated output exceeds phase '{phase.name}' scope: {', '.join(check.violations)}"
        )

    return check
