"""Data sensitivity classifier.

Classifies free text into four sensitivity levels based on two signals:
1. Identifier pattern matches (personal, sensitive and business identifiers)
2. Sensitive keyword presence

Levels (ordered low to high):
    PUBLIC < INTERNAL < CONFIDENTIAL < RESTRICTED

Stronger findings always dominate: each signal can only raise the level,
so the result does not depend on the order in which signals are checked.

Example
-------
>>> classifier = SensitivityClassifier()
>>> result = classifier.classify("TFN 123 456 782")
>>> result.classification
<DataClassification.RESTRICTED: 'restricted'>
>>> result.contains_sensitive_info
True
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from byoai_compliance.detection.patterns.au import PERSONAL, SENSITIVE, SENSITIVE_KEYWORDS
from byoai_compliance.detection.pii_detector import PiiDetector

logger = logging.getLogger(__name__)


class DataClassification(str, Enum):
    """Ordered data classification tiers."""

    PUBLIC = "public"
    INTERNAL = "internal"
    CONFIDENTIAL = "confidential"
    RESTRICTED = "restricted"

    @property
    def rank(self) -> int:
        return list(DataClassification).index(self)

    def __ge__(self, other: "DataClassification") -> bool:
        return self.rank >= other.rank

    def __gt__(self, other: "DataClassification") -> bool:
        return self.rank > other.rank

    def __le__(self, other: "DataClassification") -> bool:
        return self.rank <= other.rank

    def __lt__(self, other: "DataClassification") -> bool:
        return self.rank < other.rank

    @classmethod
    def parse(cls, value: object) -> "DataClassification":
        """Parse a classification label; unknown values map to RESTRICTED."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            logger.warning(
                "Unknown data classification %r; treating as restricted.", value
            )
            return cls.RESTRICTED


@dataclass(frozen=True)
class ClassificationResult:
    """Outcome of classifying a piece of content.

    Attributes
    ----------
    classification:
        Derived sensitivity tier.
    contains_personal_info:
        ``True`` when a personal identifier, sensitive identifier or
        sensitive keyword was found.
    contains_sensitive_info:
        ``True`` when a tax, health or financial identifier was found.
    confidence:
        ``min(1.0, 0.5 + 0.2 * total_matches)``.  Heuristic only.
    matched_labels:
        Identifier labels that matched, sorted.
    """

    classification: DataClassification
    contains_personal_info: bool
    contains_sensitive_info: bool
    confidence: float
    matched_labels: tuple[str, ...] = field(default_factory=tuple)


class SensitivityClassifier:
    """Classifies content sensitivity from identifier patterns and keywords.

    Parameters
    ----------
    detector:
        Optional :class:`PiiDetector`.  Defaults to the Australian
        identifier set.
    keywords:
        Keywords that lift PUBLIC content to CONFIDENTIAL.
    """

    def __init__(
        self,
        detector: PiiDetector | None = None,
        keywords: tuple[str, ...] = SENSITIVE_KEYWORDS,
    ) -> None:
        self._detector = detector or PiiDetector()
        self._keywords = tuple(k.lower() for k in keywords)

    def classify(self, text: str) -> ClassificationResult:
        """Classify a piece of free text.

        Parameters
        ----------
        text:
            Content to analyse.  The text itself is not retained.

        Returns
        -------
        ClassificationResult
            Derived classification, flags and confidence.
        """
        matches = self._detector.detect(text)
        categories = {m.category for m in matches}

        level = DataClassification.PUBLIC
        contains_personal = False
        contains_sensitive = False

        if PERSONAL in categories:
            contains_personal = True
            level = max(level, DataClassification.INTERNAL)

        if SENSITIVE in categories:
            contains_sensitive = True
            contains_personal = True
            level = max(level, DataClassification.RESTRICTED)

        lowered = text.lower()
        if any(keyword in lowered for keyword in self._keywords):
            level = max(level, DataClassification.CONFIDENTIAL)
            contains_personal = True

        confidence = min(1.0, 0.5 + 0.2 * len(matches))

        return ClassificationResult(
            classification=level,
            contains_personal_info=contains_personal,
            contains_sensitive_info=contains_sensitive,
            confidence=confidence,
            matched_labels=tuple(sorted({m.label for m in matches})),
        )


_DEFAULT_CLASSIFIER = SensitivityClassifier()


def classify(text: str) -> ClassificationResult:
    """Classify ``text`` with the default Australian identifier set."""
    return _DEFAULT_CLASSIFIER.classify(text)
