"""Identifier pattern collections by jurisdiction."""
from __future__ import annotations

from byoai_compliance.detection.patterns.au import (
    AU_PATTERNS,
    BUSINESS,
    PERSONAL,
    SENSITIVE,
    SENSITIVE_KEYWORDS,
)

__all__ = [
    "AU_PATTERNS",
    "BUSINESS",
    "PERSONAL",
    "SENSITIVE",
    "SENSITIVE_KEYWORDS",
]
