"""URL validation and normalization for analysis targets."""

import ipaddress
import re
from urllib.parse import urlparse, urlunparse

from headerguard.exceptions import InvalidURLError

# Hostnames that must never be analyzed
BLOCKED_HOSTNAMES = {
    "localhost",
    "0.0.0.0",
    "metadata.google.internal",
    "metadata.azure.internal",
}

MAX_URL_LENGTH = 2083


def is_private_host(hostname: str) -> bool:
    """Check whether a hostname is local, private or link-local."""
    hostname = hostname.lower().strip("[]")
    if hostname in BLOCKED_HOSTNAMES or hostname.endswith(".localhost"):
        return True

    try:
        ip = ipaddress.ip_address(hostname)
    except ValueError:
        return False

    return (
        ip.is_private
        or ip.is_loopback
        or ip.is_link_local
        or ip.is_reserved
        or ip.is_unspecified
    )


def normalize_url(url: str) -> str:
    """
    Validate and normalize a URL before its headers are fetched.

    Performs the following normalizations:
    - Adds https:// when no scheme is given
    - Converts scheme and hostname to lowercase
    - Removes default ports (80 for HTTP, 443 for HTTPS)
    - Removes the fragment
    - Collapses duplicate slashes in the path

    Args:
        url: URL to normalize

    Returns:
        Normalized URL string

    Raises:
        InvalidURLError: If the URL is invalid, not http(s), or targets a
            local or private network
    """
    if not url or not isinstance(url, str):
        raise InvalidURLError("URL must be a non-empty string")

    url = url.strip()
    if not url:
        raise InvalidURLError("URL cannot be empty")
    if len(url) > MAX_URL_LENGTH:
        raise InvalidURLError(f"URL too long (>{MAX_URL_LENGTH} characters)")

    # Add scheme if missing
    if "://" not in url:
        url = f"https://{url}"

    try:
        parsed = urlparse(url)
        port = parsed.port
    except ValueError as e:
        raise InvalidURLError(f"Invalid URL format: {e}") from e

    scheme = parsed.scheme.lower()
    if scheme not in ("http", "https"):
        raise InvalidURLError("URL must use HTTP or HTTPS protocol")

    hostname = parsed.hostname
    if not hostname:
        raise InvalidURLError("URL must have a valid hostname")
    hostname = hostname.lower()

    if "." not in hostname and ":" not in hostname:
        raise InvalidURLError(f"Invalid URL format: {hostname!r} is not a public host")

    if is_private_host(hostname):
        raise InvalidURLError(
            "Cannot analyze local or private network URLs for security reasons"
        )

    # Handle IDN hostnames
    try:
        hostname.encode("ascii")
    except UnicodeEncodeError:
        try:
            hostname = hostname.encode("idna").decode("ascii")
        except UnicodeError as e:
            raise InvalidURLError(f"Invalid hostname: {e}") from e

    if (scheme == "http" and port == 80) or (scheme == "https" and port == 443):
        port = None

    host = f"[{hostname}]" if ":" in hostname else hostname
    netloc = f"{host}:{port}" if port else host

    path = re.sub(r"/+", "/", parsed.path or "/")

    return urlunparse((scheme, netloc, path, "", parsed.query, ""))
