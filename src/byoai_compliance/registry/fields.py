"""Lenient field parsing for records read from YAML files or database rows.

Stored records are not trusted to be well formed.  Each helper here turns a
raw value into the typed value the engine needs and never raises: a value
that cannot be read is logged and replaced with the ``fallback`` the caller
names, which should be the most conservative choice for that field.

Example
-------
>>> parse_flag("no", fallback=True, field="cross_border")
False
>>> parse_flag("maybe", fallback=True, field="cross_border")
True
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import TypeVar

logger = logging.getLogger(__name__)

_E = TypeVar("_E", bound=Enum)

_TRUE_WORDS = frozenset({"true", "yes", "y", "on", "1"})
_FALSE_WORDS = frozenset({"false", "no", "n", "off", "0"})


def parse_flag(value: object, *, fallback: bool | None, field: str) -> bool | None:
    """Read a boolean; strings are matched against true/false/yes/no words.

    ``None`` yields ``fallback`` silently; anything unrecognised yields it
    with a warning.
    """
    if value is None:
        return fallback
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    logger.warning("Unreadable %s value %r; using %r.", field, value, fallback)
    return fallback


def parse_optional_int(value: object, *, field: str) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool):
        logger.warning("Unreadable %s value %r; ignoring it.", field, value)
        return None
    try:
        return int(value)  # type: ignore[call-overload]
    except (TypeError, ValueError):
        logger.warning("Unreadable %s value %r; ignoring it.", field, value)
        return None


def parse_optional_float(value: object, *, field: str) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool):
        logger.warning("Unreadable %s value %r; ignoring it.", field, value)
        return None
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        logger.warning("Unreadable %s value %r; ignoring it.", field, value)
        return None


def parse_timestamp(value: object, *, field: str) -> datetime | None:
    """Read an ISO-8601 timestamp as an aware datetime (naive values are UTC).

    Returns ``None`` when the value is missing or unreadable.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value))
        except ValueError:
            logger.warning("Unreadable %s value %r; ignoring it.", field, value)
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_member(enum_cls: type[_E], value: object, *, fallback: _E, field: str) -> _E:
    """Read an enum member by value, case-insensitively, or return ``fallback``."""
    if value is None:
        return fallback
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        logger.warning("Unknown %s %r; using %s.", field, value, fallback.value)
        return fallback
