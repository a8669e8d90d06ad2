"""Audit trail."""
from __future__ import annotations

from byoai_compliance.audit.trail import AuditTrail

__all__ = ["AuditTrail"]
