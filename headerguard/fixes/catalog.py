"""Canonical fix values: one safe default per header.

Every rule in the rule table must have an entry here; the check runs at
import time so drift surfaces immediately instead of silently dropping
fixes.
"""

from dataclasses import dataclass

from headerguard.analyzers.rules import RULES
from headerguard.exceptions import FixCatalogError

MDN_HEADERS = "https://developer.mozilla.org/en-US/docs/Web/HTTP/Headers"


@dataclass(frozen=True)
class CanonicalFix:
    header: str
    value: str
    add_description: str
    update_description: str
    reference: str


CANONICAL_FIXES: tuple[CanonicalFix, ...] = (
    CanonicalFix(
        header="Content-Security-Policy",
        value=(
            "default-src 'self'; script-src 'self'; style-src 'self'; "
            "img-src 'self' data: https:; font-src 'self'; connect-src 'self'; "
            "frame-ancestors 'none'; object-src 'none'; base-uri 'self'"
        ),
        add_description="Add Content Security Policy to prevent XSS attacks",
        update_description="Tighten Content Security Policy and remove unsafe sources",
        reference=f"{MDN_HEADERS}/Content-Security-Policy",
    ),
    CanonicalFix(
        header="Strict-Transport-Security",
        value="max-age=31536000; includeSubDomains; preload",
        add_description="Add HSTS to force HTTPS connections",
        update_description="Strengthen HSTS policy",
        reference=f"{MDN_HEADERS}/Strict-Transport-Security",
    ),
    CanonicalFix(
        header="X-Frame-Options",
        value="DENY",
        add_description="Add X-Frame-Options to prevent clickjacking",
        update_description="Restrict X-Frame-Options to DENY",
        reference=f"{MDN_HEADERS}/X-Frame-Options",
    ),
    CanonicalFix(
        header="X-Content-Type-Options",
        value="nosniff",
        add_description="Add X-Content-Type-Options to prevent MIME sniffing",
        update_description="Set X-Content-Type-Options to nosniff",
        reference=f"{MDN_HEADERS}/X-Content-Type-Options",
    ),
    CanonicalFix(
        header="Referrer-Policy",
        value="strict-origin-when-cross-origin",
        add_description="Add Referrer-Policy to limit referrer leakage",
        update_description="Use a stricter Referrer-Policy",
        reference=f"{MDN_HEADERS}/Referrer-Policy",
    ),
    CanonicalFix(
        header="Permissions-Policy",
        value="geolocation=(), microphone=(), camera=()",
        add_description="Add Permissions-Policy to restrict powerful browser features",
        update_description="Restrict Permissions-Policy features",
        reference=f"{MDN_HEADERS}/Permissions-Policy",
    ),
    CanonicalFix(
        header="X-XSS-Protection",
        value="1; mode=block",
        add_description="Add legacy X-XSS-Protection for older browsers",
        update_description="Set X-XSS-Protection to block mode",
        reference=f"{MDN_HEADERS}/X-XSS-Protection",
    ),
    CanonicalFix(
        header="Cross-Origin-Embedder-Policy",
        value="require-corp",
        add_description="Add Cross-Origin-Embedder-Policy for cross-origin isolation",
        update_description="Set Cross-Origin-Embedder-Policy to require-corp",
        reference=f"{MDN_HEADERS}/Cross-Origin-Embedder-Policy",
    ),
    CanonicalFix(
        header="Cross-Origin-Resource-Policy",
        value="same-origin",
        add_description="Add Cross-Origin-Resource-Policy to control resource sharing",
        update_description="Use a recognised Cross-Origin-Resource-Policy value",
        reference=f"{MDN_HEADERS}/Cross-Origin-Resource-Policy",
    ),
    CanonicalFix(
        header="Cross-Origin-Opener-Policy",
        value="same-origin",
        add_description="Add Cross-Origin-Opener-Policy to isolate browsing contexts",
        update_description="Set Cross-Origin-Opener-Policy to same-origin",
        reference=f"{MDN_HEADERS}/Cross-Origin-Opener-Policy",
    ),
)

_FIXES_BY_KEY = {fix.header.lower(): fix for fix in CANONICAL_FIXES}

# Tie-break order within one severity when building a fix set
HEADER_PRIORITY: tuple[str, ...] = tuple(fix.header for fix in CANONICAL_FIXES)


def get_canonical_fix(header: str) -> CanonicalFix | None:
    return _FIXES_BY_KEY.get(header.lower())


def header_priority(header: str) -> int:
    fix = get_canonical_fix(header)
    return HEADER_PRIORITY.index(fix.header) if fix else len(HEADER_PRIORITY)


def check_catalog_parity() -> None:
    """Raise FixCatalogError if any rule lacks a canonical fix."""
    missing = [rule.name for rule in RULES if rule.key not in _FIXES_BY_KEY]
    if missing:
        raise FixCatalogError(
            f"No canonical fix for rule(s): {', '.join(missing)}"
        )


check_catalog_parity()
