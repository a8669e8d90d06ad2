"""Violation records and their remediation lifecycle."""
from __future__ import annotations

from byoai_compliance.violations.lifecycle import (
    ALLOWED_TRANSITIONS,
    TransitionError,
    TransitionResult,
    ViolationLifecycle,
    allowed_transitions,
)
from byoai_compliance.violations.model import (
    TERMINAL_STATUSES,
    RemediationStatus,
    StatusChange,
    Violation,
)
from byoai_compliance.violations.reportability import assess_reportability, is_reportable
from byoai_compliance.violations.summary import (
    ViolationSummary,
    filter_violations,
    summarize,
    visible_violations,
)

__all__ = [
    "ALLOWED_TRANSITIONS",
    "RemediationStatus",
    "StatusChange",
    "TERMINAL_STATUSES",
    "TransitionError",
    "TransitionResult",
    "Violation",
    "ViolationLifecycle",
    "ViolationSummary",
    "allowed_transitions",
    "assess_reportability",
    "filter_violations",
    "is_reportable",
    "summarize",
    "visible_violations",
]
