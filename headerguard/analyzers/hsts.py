"""Strict-Transport-Security parsing and preload eligibility."""

import re

from headerguard.analyzers.models import HSTS_PRELOAD_MIN_MAX_AGE, HSTSConfig

MAX_AGE_PATTERN = re.compile(r"max-age=(\d+)", re.IGNORECASE)


def check_hsts_preload(header_value: str | None) -> HSTSConfig:
    """
    Parse an HSTS header value.

    ``includeSubDomains`` and ``preload`` are case-insensitive substring
    checks on the raw text, so directive order and casing do not matter.
    """
    text = header_value or ""

    match = MAX_AGE_PATTERN.search(text)
    max_age = int(match.group(1)) if match else 0

    lowered = text.lower()
    return HSTSConfig(
        max_age=max_age,
        include_subdomains="includesubdomains" in lowered,
        preload="preload" in lowered,
    )


def has_long_max_age(value: str) -> bool:
    """Rule validator: full credit needs at least a one year max-age."""
    return check_hsts_preload(value).max_age >= HSTS_PRELOAD_MIN_MAX_AGE
