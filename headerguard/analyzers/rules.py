"""The rule table: one weighted check per security header.

This is the single source of truth for scoring; the fix catalog is checked
against it at import time.
"""

from headerguard.analyzers.csp import is_secure_csp
from headerguard.analyzers.hsts import has_long_max_age
from headerguard.analyzers.models import HeaderRule, Severity

FRAME_OPTIONS_VALUES = {"DENY", "SAMEORIGIN"}
REFERRER_POLICY_VALUES = {"strict-origin-when-cross-origin", "no-referrer", "same-origin"}
XSS_PROTECTION_VALUES = {"1; mode=block", "0"}
RESOURCE_POLICY_VALUES = {"cross-origin", "same-origin", "same-site"}


RULES: tuple[HeaderRule, ...] = (
    HeaderRule(
        name="Content-Security-Policy",
        required=True,
        weight=25,
        severity=Severity.CRITICAL,
        description="Prevents XSS attacks by controlling which resources can be loaded",
        recommendation="Implement a strict CSP policy without unsafe-inline or unsafe-eval",
        validator=is_secure_csp,
    ),
    HeaderRule(
        name="Strict-Transport-Security",
        required=True,
        weight=20,
        severity=Severity.HIGH,
        description="Forces HTTPS connections and prevents downgrade attacks",
        recommendation="Set HSTS header with max-age >= 31536000, includeSubDomains, and preload",
        validator=has_long_max_age,
    ),
    HeaderRule(
        name="X-Frame-Options",
        required=True,
        weight=10,
        severity=Severity.MEDIUM,
        description="Prevents clickjacking attacks by controlling frame embedding",
        recommendation='Set to "DENY" or "SAMEORIGIN"',
        validator=lambda value: value.strip().upper() in FRAME_OPTIONS_VALUES,
    ),
    HeaderRule(
        name="X-Content-Type-Options",
        required=True,
        weight=10,
        severity=Severity.MEDIUM,
        description="Prevents MIME type sniffing attacks",
        recommendation='Set header to "nosniff"',
        expected_value="nosniff",
    ),
    HeaderRule(
        name="Referrer-Policy",
        required=True,
        weight=10,
        severity=Severity.MEDIUM,
        description="Controls how much referrer information is sent with requests",
        recommendation='Set to "strict-origin-when-cross-origin" or "no-referrer"',
        validator=lambda value: value.strip() in REFERRER_POLICY_VALUES,
    ),
    HeaderRule(
        name="Permissions-Policy",
        required=False,
        weight=15,
        severity=Severity.MEDIUM,
        description="Controls which browser features and APIs can be used",
        recommendation="Define explicit permissions for geolocation, microphone, camera, etc.",
    ),
    HeaderRule(
        name="X-XSS-Protection",
        required=False,
        weight=5,
        severity=Severity.LOW,
        description="Legacy XSS protection (deprecated in favor of CSP)",
        recommendation='Set to "1; mode=block" or remove in favor of strong CSP',
        validator=lambda value: value.strip() in XSS_PROTECTION_VALUES,
    ),
    HeaderRule(
        name="Cross-Origin-Embedder-Policy",
        required=False,
        weight=3,
        severity=Severity.LOW,
        description="Prevents cross-origin resource embedding",
        recommendation='Set to "require-corp" for enhanced isolation',
        expected_value="require-corp",
    ),
    HeaderRule(
        name="Cross-Origin-Resource-Policy",
        required=False,
        weight=2,
        severity=Severity.LOW,
        description="Controls cross-origin resource sharing",
        recommendation='Set to "cross-origin" or "same-origin" based on your needs',
        validator=lambda value: value.strip() in RESOURCE_POLICY_VALUES,
    ),
)

MAX_SCORE: float = sum(rule.weight for rule in RULES)

_RULES_BY_KEY = {rule.key: rule for rule in RULES}

if len(_RULES_BY_KEY) != len(RULES):
    raise ValueError("Header rule names must be unique (case-insensitive)")


def get_rule(name: str) -> HeaderRule | None:
    """Look up a rule by header name, case-insensitively."""
    return _RULES_BY_KEY.get(name.lower())
