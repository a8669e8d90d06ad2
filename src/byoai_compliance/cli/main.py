"""CLI entry point for byoai-compliance.

Invoked as::

    byoai-compliance [OPTIONS] COMMAND [ARGS]...

or during development::

    python -m byoai_compliance.cli.main

Commands
--------
- init        Write a compliance.yaml seeded from policy templates
- classify    Classify a piece of text by sensitivity
- score       Score the risk of an AI tool record
- evaluate    Evaluate a usage event against policies
- assess      Assess an organisation snapshot against a framework
- frameworks  List the supported compliance frameworks
- version     Show version information
"""
from __future__ import annotations

import json
import sys
from pathlib import Path

import click
import yaml
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

console = Console()
err_console = Console(stderr=True)

_DEFAULT_CONFIG = Path("compliance.yaml")

# ---------------------------------------------------------------------------
# Preset template lists
# ---------------------------------------------------------------------------
_PRESETS: dict[str, list[str]] = {
    "minimal": ["restricted_data"],
    "baseline": ["restricted_data", "approved_tools_only", "usage_limits"],
    "privacy_act": ["privacy_act_baseline", "usage_limits"],
}

_TIER_COLOURS: dict[str, str] = {
    "low": "green",
    "medium": "yellow",
    "high": "red",
    "critical": "bold red",
}


def _load_config(config_path: str):  # type: ignore[no-untyped-def]
    from byoai_compliance.config.loader import ConfigError, ConfigLoader

    loader = ConfigLoader()
    cfg_path = Path(config_path)
    try:
        return loader.load(cfg_path) if cfg_path.exists() else loader.defaults()
    except ConfigError as exc:
        err_console.print(f"[red]Invalid config:[/red] {exc}")
        sys.exit(2)


def _load_mapping(raw: str | None, file_path: str | None, what: str) -> dict[str, object]:
    """Read a JSON string or a YAML/JSON file into a mapping."""
    try:
        if file_path is not None:
            data = yaml.safe_load(Path(file_path).read_text(encoding="utf-8"))
        elif raw is not None:
            data = json.loads(raw)
        else:
            err_console.print(f"[red]Provide the {what} as JSON or with --file.[/red]")
            sys.exit(2)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        err_console.print(f"[red]Could not parse {what}:[/red] {exc}")
        sys.exit(2)
    if not isinstance(data, dict):
        err_console.print(f"[red]The {what} must be a mapping.[/red]")
        sys.exit(2)
    return data


# ---------------------------------------------------------------------------
# Root command group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="byoai-compliance")
def cli() -> None:
    """BYOAI compliance CLI: classification, risk scoring, policy and framework checks."""


# ---------------------------------------------------------------------------
# version
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from byoai_compliance import __version__

    console.print(
        Panel(
            f"[bold]byoai-compliance[/bold]  v[cyan]{__version__}[/cyan]\n"
            "Risk and policy compliance engine for employee AI tool usage.",
            title="Version",
            border_style="blue",
        )
    )


# ---------------------------------------------------------------------------
# init
# ---------------------------------------------------------------------------


@cli.command(name="init")
@click.option(
    "--preset",
    type=click.Choice(sorted(_PRESETS)),
    default="baseline",
    show_default=True,
    help="Policy template preset to initialise with.",
)
@click.option("--organization", "-g", "organization_id", default=None, help="Organisation id.")
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    default=str(_DEFAULT_CONFIG),
    show_default=True,
    help="Output config file path.",
)
def init_command(preset: str, organization_id: str | None, output: str) -> None:
    """Write a compliance config seeded with a policy template preset."""
    from byoai_compliance.templates.policy_templates import get_template

    all_policies: list[dict[str, object]] = []
    for template_name in _PRESETS[preset]:
        template_data: dict[str, object] = yaml.safe_load(get_template(template_name)) or {}
        all_policies.extend(template_data.get("policies", []))  # type: ignore[arg-type]

    config: dict[str, object] = {
        "version": "1",
        "organization_id": organization_id,
        "policies": all_policies,
        "lifecycle": {
            "remediation_min_role": "compliance_officer",
            "reopen_min_role": "admin",
            "reportable_subject_threshold": 100,
        },
        "assessment": {"breach_window_days": 30},
        "audit": {"enabled": True, "log_path": "./compliance_audit.jsonl"},
    }

    output_path = Path(output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding="utf-8") as fh:
        yaml.dump(config, fh, default_flow_style=False, sort_keys=False, allow_unicode=True)

    console.print(f"[green]Initialised[/green] compliance config: [bold]{output_path}[/bold]")
    console.print(f"  Preset: [cyan]{preset}[/cyan]")
    console.print(f"  Policies loaded: [cyan]{len(all_policies)}[/cyan]")


# ---------------------------------------------------------------------------
# classify
# ---------------------------------------------------------------------------


@cli.command(name="classify")
@click.argument("text", required=False)
@click.option(
    "--file", "-f", "file_path", type=click.Path(exists=True), help="Read the text from a file."
)
def classify_command(text: str | None, file_path: str | None) -> None:
    """Classify TEXT (or a file) by data sensitivity."""
    from byoai_compliance.detection.classifier import classify

    if file_path is not None:
        text = Path(file_path).read_text(encoding="utf-8")
    if text is None:
        err_console.print("[red]Provide TEXT or --file.[/red]")
        sys.exit(2)

    result = classify(text)

    table = Table(title="Classification", box=box.SIMPLE)
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="bold")
    table.add_row("Classification", result.classification.value)
    table.add_row("Personal information", "yes" if result.contains_personal_info else "no")
    table.add_row("Sensitive information", "yes" if result.contains_sensitive_info else "no")
    table.add_row("Confidence", f"{result.confidence:.2f}")
    table.add_row("Matched", ", ".join(result.matched_labels) or "-")
    console.print(table)


# ---------------------------------------------------------------------------
# score
# ---------------------------------------------------------------------------


@cli.command(name="score")
@click.option("--tool", "-t", "tool_json", default=None, help="Tool record as a JSON string.")
@click.option(
    "--file", "-f", "file_path", type=click.Path(exists=True), help="Tool record as YAML or JSON."
)
@click.option(
    "--config",
    "-c",
    "config_path",
    default=str(_DEFAULT_CONFIG),
    type=click.Path(),
    help="Path to compliance.yaml.",
)
def score_command(tool_json: str | None, file_path: str | None, config_path: str) -> None:
    """Compute the risk score of an AI tool."""
    from byoai_compliance.registry.tool import Tool
    from byoai_compliance.risk.scorer import RiskScorer

    config = _load_config(config_path)
    tool = Tool.from_dict(_load_mapping(tool_json, file_path, "tool"))
    result = RiskScorer(config.scoring).score(tool)

    table = Table(title=f"Risk Factors: {tool.name}", box=box.SIMPLE)
    table.add_column("Factor", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Weight", justify="right")
    table.add_column("Description")
    for factor in result.factors:
        table.add_row(
            factor.category, str(factor.score), f"{factor.weight:.2f}", factor.description
        )
    console.print(table)

    colour = _TIER_COLOURS.get(result.risk_tier.value, "bold")
    console.print(
        f"  Overall risk: [bold]{result.overall_risk}[/bold]  "
        f"Tier: [{colour}]{result.risk_tier.value.upper()}[/{colour}]"
    )
    for recommendation in result.recommendations:
        console.print(f"    - {recommendation}")


# ---------------------------------------------------------------------------
# evaluate
# ---------------------------------------------------------------------------


@cli.command(name="evaluate")
@click.option("--usage", "-u", "usage_json", default=None, help="Usage event as a JSON string.")
@click.option(
    "--file", "-f", "file_path", type=click.Path(exists=True), help="Usage event as YAML or JSON."
)
@click.option(
    "--policies",
    "-p",
    "policies_path",
    type=click.Path(exists=True),
    default=None,
    help="Policy YAML file.  Defaults to the policies in the config.",
)
@click.option(
    "--config",
    "-c",
    "config_path",
    default=str(_DEFAULT_CONFIG),
    type=click.Path(),
    help="Path to compliance.yaml.",
)
def evaluate_command(
    usage_json: str | None,
    file_path: str | None,
    policies_path: str | None,
    config_path: str,
) -> None:
    """Evaluate a usage event against organisation policies."""
    from byoai_compliance.policies.engine import PolicyEvaluator
    from byoai_compliance.policies.parser import PolicyParseError, PolicyParser
    from byoai_compliance.registry.usage import UsageEvent

    parser = PolicyParser()
    try:
        if policies_path is not None:
            policies = parser.parse(policies_path)
        else:
            policies = parser.parse_dict({"policies": _load_config(config_path).policies})
    except PolicyParseError as exc:
        err_console.print(f"[red]Invalid policy:[/red] {exc}")
        sys.exit(2)

    usage = UsageEvent.from_dict(_load_mapping(usage_json, file_path, "usage event"))
    result = PolicyEvaluator().evaluate(policies, usage)

    status_str = {
        "allow": "[green]ALLOWED[/green]",
        "warn": "[yellow]WARN[/yellow]",
        "block": "[red]BLOCKED[/red]",
    }[result.decision.value]
    console.print(Panel(status_str, title="Policy Evaluation", border_style="blue"))
    console.print(f"  Policies evaluated: [cyan]{len(result.evaluated_policies)}[/cyan]")

    if result.violations:
        table = Table(title="Violations", box=box.SIMPLE)
        table.add_column("Policy", style="cyan")
        table.add_column("Rule", style="magenta")
        table.add_column("Severity")
        table.add_column("Message")
        for violation in result.violations:
            table.add_row(
                violation.policy_name,
                violation.rule_violated,
                violation.severity.value,
                violation.message,
            )
        console.print(table)

    sys.exit(0 if result.allowed else 1)


# ---------------------------------------------------------------------------
# assess
# ---------------------------------------------------------------------------


@cli.command(name="assess")
@click.option(
    "--snapshot",
    "-s",
    "snapshot_path",
    required=True,
    type=click.Path(exists=True),
    help="Organisation snapshot as YAML or JSON.",
)
@click.option(
    "--framework",
    "-f",
    "framework_code",
    default=None,
    help="Framework code.  Defaults to the snapshot's compliance_framework.",
)
@click.option(
    "--config",
    "-c",
    "config_path",
    default=str(_DEFAULT_CONFIG),
    type=click.Path(),
    help="Path to compliance.yaml.",
)
def assess_command(snapshot_path: str, framework_code: str | None, config_path: str) -> None:
    """Assess an organisation snapshot against a compliance framework."""
    from byoai_compliance.compliance.assessor import ComplianceAssessor
    from byoai_compliance.compliance.frameworks import UnknownFrameworkError
    from byoai_compliance.compliance.snapshot import load_snapshot

    config = _load_config(config_path)
    snapshot = load_snapshot(snapshot_path)
    code = framework_code or snapshot.compliance_framework
    if not code:
        err_console.print("[red]No framework given and the snapshot does not name one.[/red]")
        sys.exit(2)

    try:
        report = ComplianceAssessor(config.assessment).assess(code, snapshot)
    except UnknownFrameworkError as exc:
        err_console.print(f"[red]{exc}[/red]")
        sys.exit(2)

    table = Table(title=f"{report.framework_name} Assessment", box=box.SIMPLE)
    table.add_column("Requirement", style="cyan")
    table.add_column("Status", style="bold")
    table.add_column("Severity")
    table.add_column("Details")
    for finding in report.findings:
        status = "[green]PASS[/green]" if finding.compliant else "[red]FAIL[/red]"
        table.add_row(finding.requirement, status, finding.severity.value, finding.details)
    console.print(table)

    colour = "green" if report.compliant else ("yellow" if report.score >= 50 else "red")
    console.print(f"  Score: [{colour}]{report.score}/100[/{colour}]")
    for item in report.recommendations:
        console.print(f"    - {escape(f'[{item.priority.value}]')} {item.recommendation}")


# ---------------------------------------------------------------------------
# frameworks
# ---------------------------------------------------------------------------


@cli.command(name="frameworks")
def frameworks_command() -> None:
    """List supported compliance frameworks."""
    from byoai_compliance.compliance.frameworks import list_frameworks

    table = Table(title="Compliance Frameworks", box=box.SIMPLE)
    table.add_column("Code", style="cyan")
    table.add_column("Name", style="bold")
    table.add_column("Authority")
    table.add_column("Checks", justify="right")
    for framework in list_frameworks():
        table.add_row(
            framework.code,
            framework.name,
            framework.authority,
            str(len(framework.requirement_ids)),
        )
    console.print(table)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    cli()
