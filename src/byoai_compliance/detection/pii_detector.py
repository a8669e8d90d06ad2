"""Regex-based identifier detector.

The detector scans text for matches against an ordered set of identifier
patterns.  Every pattern belongs to a category (``personal``,
``sensitive`` or ``business``) which the classifier uses to derive flags.

Example
-------
>>> detector = PiiDetector()
>>> detector.contains_pii("Email: alice@example.com")
True
>>> detector.detect("Email: alice@example.com")[0].label
'email_address'
"""
from __future__ import annotations

import re
from dataclasses import dataclass

from byoai_compliance.detection.patterns.au import AU_PATTERNS, PERSONAL, SENSITIVE


@dataclass(frozen=True)
class PiiMatch:
    """Represents a single identifier match within a text.

    Attributes
    ----------
    label:
        Identifier type label (e.g., ``"tax_file_number"``).
    category:
        ``"personal"``, ``"sensitive"``, ``"business"`` or a custom value.
    matched_text:
        The exact substring that was matched.
    start:
        Start index within the scanned text.
    end:
        End index within the scanned text.
    """

    label: str
    category: str
    matched_text: str
    start: int
    end: int


class PiiDetector:
    """Scans text for identifiers using compiled regex patterns.

    Parameters
    ----------
    patterns:
        Ordered ``(label, category, compiled_pattern)`` entries.  Defaults to
        the Australian identifier set.
    """

    def __init__(
        self,
        patterns: list[tuple[str, str, re.Pattern[str]]] | None = None,
    ) -> None:
        self._patterns: list[tuple[str, str, re.Pattern[str]]] = list(
            patterns if patterns is not None else AU_PATTERNS
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def contains_pii(self, text: str) -> bool:
        """Return ``True`` when a personal or sensitive pattern matches."""
        for _, category, pattern in self._patterns:
            if category in (PERSONAL, SENSITIVE) and pattern.search(text):
                return True
        return False

    def detect(self, text: str) -> list[PiiMatch]:
        """Return all identifier matches found in the text.

        Parameters
        ----------
        text:
            The string to scan.

        Returns
        -------
        list[PiiMatch]
            All matches, ordered by position.  Overlapping matches from
            different patterns are all included; a 9-digit group may match
            both the TFN and the ABN pattern, for example.
        """
        matches: list[PiiMatch] = []
        for label, category, pattern in self._patterns:
            for m in pattern.finditer(text):
                matches.append(
                    PiiMatch(
                        label=label,
                        category=category,
                        matched_text=m.group(),
                        start=m.start(),
                        end=m.end(),
                    )
                )
        matches.sort(key=lambda m: m.start)
        return matches

    def detect_labels(self, text: str) -> set[str]:
        """Return the set of identifier labels found in the text."""
        return {m.label for m in self.detect(text)}

    def detect_categories(self, text: str) -> set[str]:
        """Return the set of identifier categories found in the text."""
        return {
            category
            for _, category, pattern in self._patterns
            if pattern.search(text)
        }

    def add_pattern(
        self,
        label: str,
        pattern: re.Pattern[str],
        category: str = PERSONAL,
    ) -> None:
        """Add a custom pattern to the detector at runtime.

        Parameters
        ----------
        label:
            Human-readable label for the new pattern.
        pattern:
            Compiled regex pattern.
        category:
            Category that decides how a match affects classification.
        """
        self._patterns.append((label, category, pattern))
