"""Compliance framework assessment."""
from __future__ import annotations

from byoai_compliance.compliance.assessor import (
    ComplianceAssessor,
    ComplianceReport,
    Recommendation,
    assess,
)
from byoai_compliance.compliance.frameworks import (
    Framework,
    UnknownFrameworkError,
    get_framework,
    list_frameworks,
)
from byoai_compliance.compliance.requirements import (
    REQUIREMENTS,
    Finding,
    FindingSeverity,
    Requirement,
)
from byoai_compliance.compliance.snapshot import OrganizationSnapshot, load_snapshot

__all__ = [
    "ComplianceAssessor",
    "ComplianceReport",
    "Finding",
    "FindingSeverity",
    "Framework",
    "OrganizationSnapshot",
    "REQUIREMENTS",
    "Recommendation",
    "Requirement",
    "UnknownFrameworkError",
    "assess",
    "get_framework",
    "list_frameworks",
    "load_snapshot",
]
