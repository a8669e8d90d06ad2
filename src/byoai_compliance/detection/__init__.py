"""Content sensitivity detection."""
from __future__ import annotations

from byoai_compliance.detection.classifier import (
    ClassificationResult,
    DataClassification,
    SensitivityClassifier,
    classify,
)
from byoai_compliance.detection.pii_detector import PiiDetector, PiiMatch

__all__ = [
    "ClassificationResult",
    "DataClassification",
    "PiiDetector",
    "PiiMatch",
    "SensitivityClassifier",
    "classify",
]
