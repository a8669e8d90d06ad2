"""Australian identifier patterns used by the sensitivity classifier.

Each entry is a tuple of ``(label, category, compiled_pattern)``.  The
category decides how a match affects classification:

- ``personal``:  identifies an individual (email, phone, street address)
- ``sensitive``: government or financial identifier (TFN, Medicare, card)
- ``business``:  organisation identifier (ABN); counted, never flagged

Patterns are evaluated in declaration order.
"""
from __future__ import annotations

import re

PERSONAL = "personal"
SENSITIVE = "sensitive"
BUSINESS = "business"

# ---------------------------------------------------------------------------
# Email addresses
# ---------------------------------------------------------------------------
EMAIL = (
    "email_address",
    PERSONAL,
    re.compile(r"[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}"),
)

# ---------------------------------------------------------------------------
# Phone numbers: Australian local (0X) or international (+61) prefix
# ---------------------------------------------------------------------------
PHONE_AU = (
    "phone_number_au",
    PERSONAL,
    re.compile(r"(?:\+61|0)[2-478](?:[ -]?[0-9]){8}"),
)

# ---------------------------------------------------------------------------
# Tax File Number: 9 digits, optionally grouped in threes
# ---------------------------------------------------------------------------
TAX_FILE_NUMBER = (
    "tax_file_number",
    SENSITIVE,
    re.compile(r"\b\d{3}[ -]?\d{3}[ -]?\d{3}\b"),
)

# ---------------------------------------------------------------------------
# Medicare card number: 10 digits grouped 4-5-1
# ---------------------------------------------------------------------------
MEDICARE_NUMBER = (
    "medicare_number",
    SENSITIVE,
    re.compile(r"\b\d{4}[ -]?\d{5}[ -]?\d\b"),
)

# ---------------------------------------------------------------------------
# Australian Business Number: 11 digits grouped 2-3-3-3
# ---------------------------------------------------------------------------
ABN = (
    "australian_business_number",
    BUSINESS,
    re.compile(r"\b\d{2}[ -]?\d{3}[ -]?\d{3}[ -]?\d{3}\b"),
)

# ---------------------------------------------------------------------------
# Payment card numbers: 16 digits grouped in fours
# ---------------------------------------------------------------------------
PAYMENT_CARD = (
    "payment_card_number",
    SENSITIVE,
    re.compile(r"\b\d{4}[ -]?\d{4}[ -]?\d{4}[ -]?\d{4}\b"),
)

# ---------------------------------------------------------------------------
# Street addresses: "<number> <name> <street type>"
# ---------------------------------------------------------------------------
STREET_ADDRESS = (
    "street_address",
    PERSONAL,
    re.compile(
        r"\b\d+\s+[A-Za-z]+\s+(?:Street|St|Road|Rd|Avenue|Ave|Drive|Dr|Court|Ct|Place|Pl)\b",
        re.IGNORECASE,
    ),
)

# ---------------------------------------------------------------------------
# Keywords that mark content as confidential when no stronger signal exists
# ---------------------------------------------------------------------------
SENSITIVE_KEYWORDS: tuple[str, ...] = (
    "confidential",
    "restricted",
    "health",
    "medical",
    "diagnosis",
    "financial",
    "salary",
    "wage",
    "income",
    "tax",
    "criminal",
    "conviction",
    "offense",
)

# ---------------------------------------------------------------------------
# Exported collection
# ---------------------------------------------------------------------------
AU_PATTERNS: list[tuple[str, str, re.Pattern[str]]] = [
    EMAIL,
    PHONE_AU,
    TAX_FILE_NUMBER,
    MEDICARE_NUMBER,
    ABN,
    PAYMENT_CARD,
    STREET_ADDRESS,
]
