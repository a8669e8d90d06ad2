"""Unit tests for registry/tool.py and registry/usage.py."""
from __future__ import annotations

import hashlib
from datetime import datetime, timezone

import pytest

from byoai_compliance.detection.classifier import DataClassification, SensitivityClassifier
from byoai_compliance.registry.tool import (
    ApprovalStatus,
    DeploymentModel,
    RiskTier,
    Tool,
    ToolCategory,
)
from byoai_compliance.registry.usage import UsageEvent, digest_prompt
from byoai_compliance.risk.scorer import RiskScorer


# ---------------------------------------------------------------------------
# Enum parsing
# ---------------------------------------------------------------------------


class TestEnumParsing:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("on-premise", DeploymentModel.ON_PREMISE),
            ("on_premise", DeploymentModel.ON_PREMISE),
            ("Cloud", DeploymentModel.CLOUD),
            ("hybrid", DeploymentModel.HYBRID),
            ("mainframe", DeploymentModel.UNKNOWN),
            (None, DeploymentModel.UNKNOWN),
        ],
    )
    def test_deployment_model_parse(self, raw: object, expected: DeploymentModel) -> None:
        assert DeploymentModel.parse(raw) is expected

    def test_tool_category_aliases(self) -> None:
        assert ToolCategory.parse("image-gen") is ToolCategory.IMAGE_GENERATION
        assert ToolCategory.parse("code_assist") is ToolCategory.CODE_ASSISTANT
        assert ToolCategory.parse("LLM") is ToolCategory.LLM

    def test_tool_category_unknown_is_other(self) -> None:
        assert ToolCategory.parse("robot") is ToolCategory.OTHER

    def test_approval_status_parse(self) -> None:
        assert ApprovalStatus.parse("under-review") is ApprovalStatus.UNDER_REVIEW
        assert ApprovalStatus.parse(ApprovalStatus.BANNED) is ApprovalStatus.BANNED

    def test_approval_status_unknown_is_none(self) -> None:
        assert ApprovalStatus.parse("maybe") is None

    def test_risk_tier_parse(self) -> None:
        assert RiskTier.parse("HIGH") is RiskTier.HIGH
        assert RiskTier.parse(None) is None
        assert RiskTier.parse("extreme") is None


# ---------------------------------------------------------------------------
# Tool records
# ---------------------------------------------------------------------------


class TestTool:
    def test_defaults_are_conservative(self) -> None:
        tool = Tool(name="Unknown bot")
        assert tool.deployment is DeploymentModel.UNKNOWN
        assert tool.approval_status is ApprovalStatus.PENDING
        assert tool.vendor_compliance_verified is None
        assert tool.is_active is True

    def test_tool_ids_are_unique(self) -> None:
        assert Tool(name="a").tool_id != Tool(name="a").tool_id

    def test_from_dict_accepts_registry_column_names(self) -> None:
        tool = Tool.from_dict(
            {
                "id": "t-9",
                "tool_name": "Claude",
                "tool_vendor": "Anthropic",
                "tool_type": "llm",
                "deployment_type": "cloud",
                "privacy_act_compliant": True,
                "approval_status": "approved",
                "risk_level": "low",
            }
        )
        assert tool.tool_id == "t-9"
        assert tool.name == "Claude"
        assert tool.vendor == "Anthropic"
        assert tool.category is ToolCategory.LLM
        assert tool.deployment is DeploymentModel.CLOUD
        assert tool.vendor_compliance_verified is True
        assert tool.approval_status is ApprovalStatus.APPROVED
        assert tool.risk_tier is RiskTier.LOW

    def test_from_dict_missing_fields(self) -> None:
        tool = Tool.from_dict({"name": "Bare"})
        assert tool.approval_status is ApprovalStatus.PENDING
        assert tool.vendor_compliance_verified is None
        assert tool.deployment is DeploymentModel.UNKNOWN
        assert tool.data_residency is None

    def test_from_dict_unknown_approval_status_is_none(self) -> None:
        assert Tool.from_dict({"name": "x", "approval_status": "weird"}).approval_status is None

    def test_from_dict_keeps_false_verification(self) -> None:
        tool = Tool.from_dict({"name": "x", "vendor_compliance_verified": False})
        assert tool.vendor_compliance_verified is False

    @pytest.mark.parametrize(
        "raw, expected",
        [("false", False), ("No", False), ("true", True), ("yes", True), ("pending", None)],
    )
    def test_from_dict_reads_verification_strings(
        self, raw: str, expected: bool | None
    ) -> None:
        tool = Tool.from_dict({"tool_name": "x", "privacy_act_compliant": raw})
        assert tool.vendor_compliance_verified is expected

    def test_string_false_verification_is_not_trusted_by_scorer(self) -> None:
        from_string = Tool.from_dict({"tool_name": "x", "privacy_act_compliant": "false"})
        explicit = Tool.from_dict({"tool_name": "x", "privacy_act_compliant": False})
        scorer = RiskScorer()
        assert scorer.score(from_string).overall_risk == scorer.score(explicit).overall_risk

    def test_from_dict_data_flags(self) -> None:
        tool = Tool.from_dict(
            {
                "name": "x",
                "processes_personal_info": "false",
                "processes_sensitive_info": "garbled",
                "cross_border_disclosure": "yes",
                "is_active": "no",
            }
        )
        assert tool.processes_personal_info is False
        assert tool.processes_sensitive_info is True
        assert tool.cross_border_disclosure is True
        assert tool.is_active is False

    def test_from_dict_ignores_non_mapping_conditions(self) -> None:
        tool = Tool.from_dict({"name": "x", "approval_conditions": ["read-only"]})
        assert tool.approval_conditions == {}


# ---------------------------------------------------------------------------
# Usage events
# ---------------------------------------------------------------------------


class TestUsageEvent:
    def test_default_classification_is_restricted(self) -> None:
        assert UsageEvent(tool_id="t").data_classification is DataClassification.RESTRICTED

    def test_digest_prompt_is_sha256(self) -> None:
        assert digest_prompt("hello") == hashlib.sha256(b"hello").hexdigest()

    @pytest.mark.parametrize(
        "prompt, response, expected",
        [(None, None, None), (10, None, 10), (None, 5, 5), (100, 50, 150)],
    )
    def test_token_count(
        self, prompt: int | None, response: int | None, expected: int | None
    ) -> None:
        event = UsageEvent(tool_id="t", prompt_token_count=prompt, response_token_count=response)
        assert event.token_count == expected


class TestUsageEventFromPrompt:
    def test_prompt_text_not_retained(self) -> None:
        event = UsageEvent.from_prompt("TFN 123 456 782", tool_id="t")
        assert event.prompt_digest == digest_prompt("TFN 123 456 782")
        assert not hasattr(event, "prompt_text")
        assert "123 456 782" not in repr(event)

    def test_without_classifier_uses_declared_values(self) -> None:
        event = UsageEvent.from_prompt("TFN 123 456 782", tool_id="t")
        assert event.data_classification is DataClassification.PUBLIC
        assert event.contains_sensitive_info is False

    def test_classifier_raises_classification(self) -> None:
        event = UsageEvent.from_prompt(
            "TFN 123 456 782", tool_id="t", classifier=SensitivityClassifier()
        )
        assert event.data_classification is DataClassification.RESTRICTED
        assert event.contains_sensitive_info is True
        assert event.contains_personal_info is True

    def test_classifier_never_lowers_declared_level(self) -> None:
        event = UsageEvent.from_prompt(
            "Lunch menu",
            tool_id="t",
            classifier=SensitivityClassifier(),
            data_classification="restricted",
            contains_personal_info=True,
        )
        assert event.data_classification is DataClassification.RESTRICTED
        assert event.contains_personal_info is True

    def test_extra_fields_pass_through(self) -> None:
        event = UsageEvent.from_prompt(
            "hi",
            tool_id="t",
            user_id="u-1",
            tool_approval_status=ApprovalStatus.APPROVED,
            prompt_token_count=12,
        )
        assert event.user_id == "u-1"
        assert event.tool_approval_status is ApprovalStatus.APPROVED
        assert event.token_count == 12


class TestUsageEventFromDict:
    def test_missing_classification_is_restricted(self) -> None:
        event = UsageEvent.from_dict({"tool_id": "t"})
        assert event.data_classification is DataClassification.RESTRICTED
        assert event.tool_approval_status is None

    def test_prompt_text_is_hashed(self) -> None:
        event = UsageEvent.from_dict({"tool_id": "t", "prompt_text": "secret"})
        assert event.prompt_digest == digest_prompt("secret")

    def test_fields_parsed(self) -> None:
        event = UsageEvent.from_dict(
            {
                "id": "e-1",
                "tool_id": "t",
                "data_classification": "internal",
                "tool_approval_status": "approved",
                "contains_personal_info": True,
                "cross_border": True,
                "token_count": 900,
                "estimated_cost": 2.5,
                "created_at": "2026-01-02T03:04:05+00:00",
            }
        )
        assert event.event_id == "e-1"
        assert event.data_classification is DataClassification.INTERNAL
        assert event.tool_approval_status is ApprovalStatus.APPROVED
        assert event.contains_personal_info is True
        assert event.cross_border is True
        assert event.prompt_token_count == 900
        assert event.estimated_cost_usd == 2.5
        assert event.recorded_at == datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

    def test_malformed_counts_are_dropped(self) -> None:
        event = UsageEvent.from_dict(
            {
                "tool_id": "t",
                "token_count": "lots",
                "response_token_count": [1],
                "estimated_cost": "cheap",
            }
        )
        assert event.prompt_token_count is None
        assert event.response_token_count is None
        assert event.estimated_cost_usd is None

    def test_unreadable_timestamp_falls_back_to_now(self) -> None:
        before = datetime.now(tz=timezone.utc)
        event = UsageEvent.from_dict({"tool_id": "t", "recorded_at": "last tuesday"})
        assert event.recorded_at >= before

    def test_naive_timestamp_is_utc(self) -> None:
        event = UsageEvent.from_dict({"tool_id": "t", "recorded_at": "2026-01-02T03:04:05"})
        assert event.recorded_at == datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

    def test_flag_strings(self) -> None:
        event = UsageEvent.from_dict(
            {
                "tool_id": "t",
                "contains_personal_info": "false",
                "contains_sensitive_info": "unsure",
                "cross_border": "no",
            }
        )
        assert event.contains_personal_info is False
        assert event.contains_sensitive_info is True
        assert event.cross_border is False
