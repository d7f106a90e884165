"""Content-Security-Policy semantic validation."""

from headerguard.analyzers.models import CSPDirective, CSPValidationResult

# Source tokens that weaken a policy, with the issue text reported for each
UNSAFE_SOURCES = {
    "'unsafe-inline'": "'unsafe-inline' allows inline scripts/styles, reducing XSS protection",
    "'unsafe-eval'": "'unsafe-eval' allows eval(), reducing XSS protection",
    "*": "wildcard (*) allows any source, reducing security",
}

EMPTY_POLICY_ISSUE = "CSP policy is empty"
MISSING_DEFAULT_SRC_ISSUE = "Missing default-src directive — required as fallback"


def validate_csp(policy: str | None) -> CSPValidationResult:
    """
    Parse a CSP value into directives and flag unsafe sources.

    Directive names keep their original casing; comparisons against them
    are case-insensitive. Never raises: malformed or empty input yields an
    invalid result with issues.
    """
    if not policy or not policy.strip():
        return CSPValidationResult(is_valid=False, issues=(EMPTY_POLICY_ISSUE,))

    directives: list[CSPDirective] = []
    issues: list[str] = []

    for segment in policy.split(";"):
        segment = segment.strip()
        if not segment:
            continue

        name, *sources = segment.split()
        unsafe_tokens = []
        for source in sources:
            token = source.lower()
            if token in UNSAFE_SOURCES and token not in unsafe_tokens:
                unsafe_tokens.append(token)

        for token in unsafe_tokens:
            issues.append(f"{name}: {UNSAFE_SOURCES[token]}")

        directives.append(
            CSPDirective(
                directive=name,
                sources=tuple(sources),
                is_unsafe=bool(unsafe_tokens),
            )
        )

    if not any(d.directive.lower() == "default-src" for d in directives):
        issues.append(MISSING_DEFAULT_SRC_ISSUE)

    return CSPValidationResult(
        is_valid=not issues,
        directives=tuple(directives),
        issues=tuple(issues),
    )


def is_secure_csp(value: str) -> bool:
    """Rule validator: a CSP earns full credit only when it has no issues."""
    return validate_csp(value).is_valid
