"""Policy effectiveness reporting over a period."""
from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Protocol, Sequence

from byoai_compliance.policies.model import EnforcementLevel, Policy, Severity
from byoai_compliance.risk.scorer import round_half_up

logger = logging.getLogger(__name__)

TOP_VIOLATIONS_LIMIT = 10


class Breach(Protocol):
    """Any record of a policy rule breach (evaluated or persisted)."""

    policy_id: str
    enforcement_level: EnforcementLevel
    severity: Severity

    @property
    def rule_violated(self) -> str: ...


@dataclass(frozen=True)
class PolicyEffectiveness:
    policy_id: str
    policy_name: str
    priority: int
    times_triggered: int
    times_blocked: int
    effectiveness_score: int


@dataclass(frozen=True)
class ViolationFrequency:
    policy_id: str
    policy_name: str
    rule_violated: str
    severity: Severity
    count: int


@dataclass(frozen=True)
class PolicyReportSummary:
    total_usage: int
    blocked_requests: int
    warnings_issued: int
    policies_triggered: int


@dataclass(frozen=True)
class PolicyReport:
    """Effectiveness of an organisation's policies over a reporting period."""

    organization_id: str
    period_start: datetime
    period_end: datetime
    summary: PolicyReportSummary
    policy_effectiveness: tuple[PolicyEffectiveness, ...]
    top_violations: tuple[ViolationFrequency, ...]
    recommendations: tuple[str, ...]


def generate_policy_report(
    organization_id: str,
    policies: Sequence[Policy],
    violations: Iterable[Breach],
    total_usage: int,
    blocked_count: int,
    period: tuple[datetime, datetime],
) -> PolicyReport:
    """Build a :class:`PolicyReport`.

    Parameters
    ----------
    organization_id:
        Organisation the report is for.
    policies:
        The organisation's policies; effectiveness is listed in priority order.
    violations:
        Every breach recorded in the period.
    total_usage, blocked_count:
        Usage events and blocked requests in the period.
    period:
        ``(start, end)`` of the reporting window.

    Notes
    -----
    A policy's effectiveness score is the share of its breaches that were
    blocked (0-100); a policy that never fired scores 100.  The top
    violations list ranks ``(policy, rule)`` pairs by frequency, breaking
    ties by policy priority.
    """
    breaches = list(violations)
    by_id = {p.policy_id: p for p in policies}

    triggered: Counter[str] = Counter(v.policy_id for v in breaches)
    blocked: Counter[str] = Counter(
        v.policy_id for v in breaches if v.enforcement_level == EnforcementLevel.BLOCK
    )

    effectiveness: list[PolicyEffectiveness] = []
    for policy in sorted(policies, key=lambda p: (p.priority, p.policy_id)):
        times = triggered[policy.policy_id]
        stopped = blocked[policy.policy_id]
        effectiveness.append(
            PolicyEffectiveness(
                policy_id=policy.policy_id,
                policy_name=policy.name,
                priority=policy.priority,
                times_triggered=times,
                times_blocked=stopped,
                effectiveness_score=round_half_up(stopped / times * 100) if times else 100,
            )
        )

    pair_counts: Counter[tuple[str, str]] = Counter()
    first_seen: dict[tuple[str, str], Breach] = {}
    for breach in breaches:
        key = (breach.policy_id, breach.rule_violated)
        pair_counts[key] += 1
        first_seen.setdefault(key, breach)

    def rank(key: tuple[str, str]) -> tuple[int, int, str]:
        policy = by_id.get(key[0])
        priority = policy.priority if policy is not None else 100
        return (-pair_counts[key], priority, key[0])

    top = tuple(
        ViolationFrequency(
            policy_id=key[0],
            policy_name=by_id[key[0]].name if key[0] in by_id else key[0],
            rule_violated=key[1],
            severity=first_seen[key].severity,
            count=pair_counts[key],
        )
        for key in sorted(pair_counts, key=rank)[:TOP_VIOLATIONS_LIMIT]
    )

    recommendations: list[str] = []
    if blocked_count > total_usage * 0.1:
        recommendations.append("High block rate detected - review policies for over-restriction")
    if any(v.severity == Severity.CRITICAL for v in breaches):
        recommendations.append("Critical violations detected - immediate review required")
    ineffective = [p for p in effectiveness if p.effectiveness_score < 50]
    if ineffective:
        recommendations.append(
            f"{len(ineffective)} policies have low effectiveness - consider adjustment"
        )

    summary = PolicyReportSummary(
        total_usage=total_usage,
        blocked_requests=blocked_count,
        warnings_issued=sum(1 for v in breaches if v.enforcement_level == EnforcementLevel.ALERT),
        policies_triggered=len(triggered),
    )
    logger.debug(
        "Policy report for %s: %d breaches across %d policies",
        organization_id,
        len(breaches),
        summary.policies_triggered,
    )
    return PolicyReport(
        organization_id=organization_id,
        period_start=period[0],
        period_end=period[1],
        summary=summary,
        policy_effectiveness=tuple(effectiveness),
        top_violations=top,
        recommendations=tuple(recommendations),
    )
