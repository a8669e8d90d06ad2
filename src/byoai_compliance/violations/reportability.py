"""Notifiable Data Breaches reportability assessment.

A violation is reportable to the regulator when any of these hold:

1. severity is ``critical`` and it is a potential privacy breach;
2. at least ``subject_threshold`` (default 100) individuals are affected;
3. it involves sensitive information and severity is ``high``.

All three conditions are evaluated independently and OR-combined.
"""
from __future__ import annotations

from byoai_compliance.policies.model import Severity
from byoai_compliance.violations.model import Violation

DEFAULT_SUBJECT_THRESHOLD = 100


def assess_reportability(
    severity: Severity,
    potential_privacy_breach: bool = False,
    affected_subjects: int | None = None,
    involves_sensitive_info: bool = False,
    subject_threshold: int = DEFAULT_SUBJECT_THRESHOLD,
) -> bool:
    """Return ``True`` when the described breach must be notified.

    Example
    -------
    >>> assess_reportability(Severity.INFO, affected_subjects=100)
    True
    >>> assess_reportability(Severity.INFO, affected_subjects=99)
    False
    """
    critical_breach = severity == Severity.CRITICAL and potential_privacy_breach
    mass_exposure = affected_subjects is not None and affected_subjects >= subject_threshold
    sensitive_high = involves_sensitive_info and severity == Severity.HIGH
    return any((critical_breach, mass_exposure, sensitive_high))


def is_reportable(
    violation: Violation,
    subject_threshold: int = DEFAULT_SUBJECT_THRESHOLD,
) -> bool:
    """Assess ``violation`` from its own fields."""
    return assess_reportability(
        severity=violation.severity,
        potential_privacy_breach=violation.potential_privacy_breach,
        affected_subjects=violation.affected_subjects_count,
        involves_sensitive_info=violation.involves_sensitive_info,
        subject_threshold=subject_threshold,
    )
