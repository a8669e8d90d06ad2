"""Registry of supported compliance frameworks.

Each framework names the ordered checklist of requirement ids the
assessor runs.  A framework may have no automated checks; it then scores 0.
"""
from __future__ import annotations

from dataclasses import dataclass


class UnknownFrameworkError(KeyError):
    """Raised when a framework code is not registered."""

    def __init__(self, framework_code: str) -> None:
        self.framework_code = framework_code
        super().__init__(framework_code)

    def __str__(self) -> str:
        return f"Unknown compliance framework: {self.framework_code!r}"


@dataclass(frozen=True)
class Framework:
    """A regulatory framework and its checklist."""

    code: str
    name: str
    authority: str
    jurisdiction: str = "AU"
    description: str = ""
    requirement_ids: tuple[str, ...] = ()


AU_PRIVACY_ACT = Framework(
    code="au_privacy_act",
    name="Privacy Act 1988",
    authority="OAIC",
    description=(
        "Australian Privacy Principles and the Notifiable Data Breaches scheme."
    ),
    requirement_ids=("APP1", "APP3", "APP6", "APP8", "APP11", "NDB"),
)

AU_CONSUMER_LAW = Framework(
    code="au_consumer_law",
    name="Australian Consumer Law",
    authority="ACCC",
    description="Transparency and fair dealing obligations for AI-assisted services.",
    requirement_ids=("ACL_TRANSPARENCY", "ACL_TERMS"),
)

AU_SPAM_ACT = Framework(
    code="au_spam_act",
    name="Spam Act 2003",
    authority="ACMA",
    description="Consent and unsubscribe obligations for commercial messages.",
)

_FRAMEWORKS: dict[str, Framework] = {
    f.code: f for f in (AU_PRIVACY_ACT, AU_CONSUMER_LAW, AU_SPAM_ACT)
}


def get_framework(framework_code: str) -> Framework:
    """Return the framework registered under ``framework_code``.

    Raises
    ------
    UnknownFrameworkError
        If no such framework exists.
    """
    try:
        return _FRAMEWORKS[framework_code.strip().lower()]
    except KeyError:
        raise UnknownFrameworkError(framework_code) from None


def list_frameworks() -> list[Framework]:
    """Return every registered framework ordered by code."""
    return sorted(_FRAMEWORKS.values(), key=lambda f: f.code)
