"""Data model shared by the header analysis engine."""

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Severity(str, Enum):
    """Ordinal risk classification of a header rule (low < medium < high < critical)."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    @property
    def priority(self) -> int:
        """Remediation priority used to order recommendations."""
        return _SEVERITY_PRIORITY[self]


_SEVERITY_RANK = {
    Severity.LOW: 0,
    Severity.MEDIUM: 1,
    Severity.HIGH: 2,
    Severity.CRITICAL: 3,
}

_SEVERITY_PRIORITY = {
    Severity.CRITICAL: 100,
    Severity.HIGH: 75,
    Severity.MEDIUM: 50,
    Severity.LOW: 25,
}


@dataclass(frozen=True)
class HeaderRule:
    """
    A named, weighted check for one HTTP response header.

    At most one of ``expected_value`` and ``validator`` is set; a rule with
    neither gives full credit for mere presence.
    """

    name: str
    required: bool
    weight: float
    severity: Severity
    description: str
    recommendation: str
    expected_value: str | re.Pattern | None = None
    validator: Callable[[str], bool] | None = None

    def __post_init__(self):
        if self.weight <= 0:
            raise ValueError(f"Rule {self.name} must have a positive weight")
        if self.expected_value is not None and self.validator is not None:
            raise ValueError(
                f"Rule {self.name} defines both expected_value and validator"
            )

    @property
    def key(self) -> str:
        """Lower-cased header name used for lookups."""
        return self.name.lower()


@dataclass(frozen=True)
class EvaluatedHeader:
    """Result of applying one HeaderRule to one header map."""

    name: str
    present: bool
    score: float
    weight: float
    severity: Severity
    recommendation: str
    description: str
    value: str | None = None

    @property
    def is_missing(self) -> bool:
        return not self.present

    @property
    def is_misconfigured(self) -> bool:
        return self.present and self.score < self.weight

    @property
    def needs_fix(self) -> bool:
        return self.is_missing or self.is_misconfigured

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "present": self.present,
            "value": self.value,
            "score": self.score,
            "weight": self.weight,
            "severity": self.severity.value,
            "recommendation": self.recommendation,
            "description": self.description,
        }


@dataclass(frozen=True)
class Recommendation:
    """Priority-ranked remediation hint for one header."""

    header: str
    severity: Severity
    issue: str  # "Missing" or "Misconfigured"
    solution: str
    priority: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "header": self.header,
            "severity": self.severity.value,
            "issue": self.issue,
            "solution": self.solution,
            "priority": self.priority,
        }


@dataclass(frozen=True)
class HeaderBuckets:
    """Partition of evaluated headers into found / missing / misconfigured."""

    found: tuple[EvaluatedHeader, ...] = ()
    missing: tuple[EvaluatedHeader, ...] = ()
    misconfigured: tuple[EvaluatedHeader, ...] = ()

    def all(self) -> tuple[EvaluatedHeader, ...]:
        return self.found + self.missing + self.misconfigured

    def to_dict(self) -> dict[str, list[dict[str, Any]]]:
        return {
            "found": [h.to_dict() for h in self.found],
            "missing": [h.to_dict() for h in self.missing],
            "misconfigured": [h.to_dict() for h in self.misconfigured],
        }


@dataclass(frozen=True)
class CSPDirective:
    """One parsed Content-Security-Policy directive."""

    directive: str
    sources: tuple[str, ...]
    is_unsafe: bool


@dataclass(frozen=True)
class CSPValidationResult:
    is_valid: bool
    directives: tuple[CSPDirective, ...] = ()
    issues: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "directives": [
                {
                    "directive": d.directive,
                    "sources": list(d.sources),
                    "is_unsafe": d.is_unsafe,
                }
                for d in self.directives
            ],
            "issues": list(self.issues),
        }


@dataclass(frozen=True)
class HSTSConfig:
    """Parsed Strict-Transport-Security header."""

    max_age: int
    include_subdomains: bool
    preload: bool

    @property
    def is_eligible(self) -> bool:
        """Whether the header qualifies for browser HSTS preload lists."""
        return (
            self.max_age >= HSTS_PRELOAD_MIN_MAX_AGE
            and self.include_subdomains
            and self.preload
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "max_age": self.max_age,
            "include_subdomains": self.include_subdomains,
            "preload": self.preload,
            "is_eligible": self.is_eligible,
        }


HSTS_PRELOAD_MIN_MAX_AGE = 31536000  # one year


@dataclass(frozen=True)
class AnalysisResult:
    """
    Outcome of one analysis, built atomically from a single header snapshot.

    ``fixes`` maps platform name to rendered patch text.
    """

    url: str
    timestamp: str
    score: int
    grade: str
    headers: HeaderBuckets
    recommendations: tuple[Recommendation, ...] = ()
    fixes: dict[str, str] = field(default_factory=dict)
    framework: str | None = None

    def evaluated(self) -> tuple[EvaluatedHeader, ...]:
        return self.headers.all()

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "timestamp": self.timestamp,
            "score": self.score,
            "grade": self.grade,
            "headers": self.headers.to_dict(),
            "recommendations": [r.to_dict() for r in self.recommendations],
            "fixes": dict(self.fixes),
            "framework": self.framework,
        }
