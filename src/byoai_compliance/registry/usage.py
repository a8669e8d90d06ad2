"""AI usage event records.

A :class:`UsageEvent` captures one instance of tool use.  The prompt text
itself is never retained: only its SHA-256 digest and the flags derived
from it are stored.

Example
-------
>>> event = UsageEvent.from_prompt(
...     "Summarise the attached salary review",
...     tool_id="tool-1",
...     classifier=SensitivityClassifier(),
... )
>>> event.data_classification
<DataClassification.CONFIDENTIAL: 'confidential'>
>>> len(event.prompt_digest)
64
"""
from __future__ import annotations

import hashlib
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

from byoai_compliance.detection.classifier import DataClassification, SensitivityClassifier
from byoai_compliance.registry.fields import (
    parse_flag,
    parse_optional_float,
    parse_optional_int,
    parse_timestamp,
)
from byoai_compliance.registry.tool import ApprovalStatus


def digest_prompt(prompt_text: str) -> str:
    """Return the SHA-256 hex digest of ``prompt_text`` encoded as UTF-8."""
    return hashlib.sha256(prompt_text.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class UsageEvent:
    """A single, immutable AI usage record."""

    tool_id: str
    data_classification: DataClassification = DataClassification.RESTRICTED
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    organization_id: str | None = None
    tool_approval_status: ApprovalStatus | None = None
    user_id: str | None = None
    user_role: str | None = None
    user_department: str | None = None
    contains_personal_info: bool = False
    contains_sensitive_info: bool = False
    cross_border: bool = False
    prompt_token_count: int | None = None
    response_token_count: int | None = None
    estimated_cost_usd: float | None = None
    prompt_digest: str | None = None
    recorded_at: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))

    @property
    def token_count(self) -> int | None:
        """Prompt plus response tokens, or ``None`` when neither is known."""
        if self.prompt_token_count is None and self.response_token_count is None:
            return None
        return (self.prompt_token_count or 0) + (self.response_token_count or 0)

    @classmethod
    def from_prompt(
        cls,
        prompt_text: str,
        *,
        tool_id: str,
        classifier: SensitivityClassifier | None = None,
        data_classification: DataClassification | str = DataClassification.PUBLIC,
        contains_personal_info: bool = False,
        contains_sensitive_info: bool = False,
        **kwargs: object,
    ) -> "UsageEvent":
        """Record usage of ``prompt_text`` without keeping the text.

        When a classifier is supplied its findings are merged with the
        declared values: flags are OR-ed and the stricter classification
        wins, so detection can only raise sensitivity.

        Parameters
        ----------
        prompt_text:
            The raw prompt.  Only its digest is stored.
        tool_id:
            Identifier of the tool that was used.
        classifier:
            Optional classifier used to augment the declared flags.
        data_classification:
            Classification declared by the caller.
        contains_personal_info, contains_sensitive_info:
            Flags declared by the caller.
        **kwargs:
            Any other :class:`UsageEvent` field.
        """
        level = DataClassification.parse(data_classification)
        personal = contains_personal_info
        sensitive = contains_sensitive_info

        if classifier is not None:
            detected = classifier.classify(prompt_text)
            level = max(level, detected.classification)
            personal = personal or detected.contains_personal_info
            sensitive = sensitive or detected.contains_sensitive_info

        return cls(
            tool_id=tool_id,
            data_classification=level,
            contains_personal_info=personal,
            contains_sensitive_info=sensitive,
            prompt_digest=digest_prompt(prompt_text),
            **kwargs,  # type: ignore[arg-type]
        )

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "UsageEvent":
        """Build a UsageEvent from a plain dictionary.

        A missing classification is treated as ``restricted`` and an
        unreadable data flag as set.  Unreadable counts and costs are dropped,
        and an unreadable timestamp falls back to now.  Any ``prompt_text``
        key is hashed and discarded.
        """
        kwargs: dict[str, object] = {}
        if data.get("event_id") or data.get("id"):
            kwargs["event_id"] = str(data.get("event_id") or data.get("id"))
        if data.get("prompt_text") is not None:
            kwargs["prompt_digest"] = digest_prompt(str(data["prompt_text"]))
        elif data.get("prompt_digest") or data.get("prompt_hash"):
            kwargs["prompt_digest"] = str(data.get("prompt_digest") or data.get("prompt_hash"))
        recorded_at = parse_timestamp(
            data.get("recorded_at") or data.get("created_at"), field="recorded_at"
        )
        if recorded_at is not None:
            kwargs["recorded_at"] = recorded_at

        approval_raw = data.get("tool_approval_status")
        return cls(
            tool_id=str(data.get("tool_id", "")),
            data_classification=DataClassification.parse(
                data.get("data_classification", DataClassification.RESTRICTED.value)
            ),
            organization_id=_optional_str(data.get("organization_id")),
            tool_approval_status=(
                ApprovalStatus.parse(approval_raw) if approval_raw is not None else None
            ),
            user_id=_optional_str(data.get("user_id")),
            user_role=_optional_str(data.get("user_role")),
            user_department=_optional_str(data.get("user_department")),
            contains_personal_info=_risk_flag(data, "contains_personal_info"),
            contains_sensitive_info=_risk_flag(data, "contains_sensitive_info"),
            cross_border=_risk_flag(data, "cross_border"),
            prompt_token_count=parse_optional_int(
                data.get("prompt_token_count", data.get("token_count")),
                field="prompt_token_count",
            ),
            response_token_count=parse_optional_int(
                data.get("response_token_count"), field="response_token_count"
            ),
            estimated_cost_usd=parse_optional_float(
                data.get("estimated_cost_usd", data.get("estimated_cost")),
                field="estimated_cost_usd",
            ),
            **kwargs,  # type: ignore[arg-type]
        )


def _optional_str(value: object) -> str | None:
    return None if value is None else str(value)


def _risk_flag(data: dict[str, object], key: str) -> bool:
    # Absent means not set; present but unreadable means set.
    if data.get(key) is None:
        return False
    return bool(parse_flag(data[key], fallback=True, field=key))
