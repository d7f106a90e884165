"""Best-effort server / framework detection from response headers."""

from collections.abc import Mapping

# (header, substring, framework) checked in order; first match wins
_SIGNATURES = (
    ("server", "nginx", "nginx"),
    ("server", "apache", "apache"),
    ("server", "iis", "iis"),
    ("server", "cloudflare", "cloudflare"),
    ("x-powered-by", "express", "express.js"),
    ("x-powered-by", "next.js", "next.js"),
    ("x-powered-by", "php", "php"),
    ("x-powered-by", "asp.net", "asp.net"),
)

# Headers whose mere presence identifies a hosting platform
_MARKER_HEADERS = (
    ("x-vercel-id", "vercel"),
    ("x-netlify-id", "netlify"),
    ("x-nf-request-id", "netlify"),
    ("x-amz-cf-id", "aws-cloudfront"),
)


def detect_framework(headers: Mapping[str, str] | None) -> str | None:
    """Return the detected framework name or None."""
    if not headers:
        return None

    lowered = {str(k).lower(): str(v).lower() for k, v in headers.items()}

    for header, needle, framework in _SIGNATURES:
        if needle in lowered.get(header, ""):
            return framework

    for header, framework in _MARKER_HEADERS:
        if lowered.get(header):
            return framework

    return None
