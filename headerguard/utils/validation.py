"""Input validation for the GitHub patch publisher."""

import re
from urllib.parse import urlparse

GITHUB_TOKEN_PREFIXES = ("ghp_", "gho_", "ghu_", "ghs_", "ghr_")
GITHUB_TOKEN_LENGTH = 40

_REPO_PART = re.compile(r"^[a-zA-Z0-9._-]+$")
_LEGACY_TOKEN = re.compile(r"^[a-zA-Z0-9]{40}$")


def is_valid_github_token(token: str | None) -> bool:
    """Check the shape of a GitHub token (prefixed or legacy 40-char hex/alnum)."""
    if not token or not isinstance(token, str):
        return False

    token = token.strip()
    if token.startswith(GITHUB_TOKEN_PREFIXES) and len(token) == GITHUB_TOKEN_LENGTH:
        return True

    return bool(_LEGACY_TOKEN.match(token))


def parse_repository_url(url: str | None) -> tuple[str, str] | None:
    """Split ``https://github.com/<owner>/<repo>`` into (owner, repo)."""
    if not url or not isinstance(url, str):
        return None

    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return None

    if parsed.scheme not in ("http", "https") or parsed.hostname != "github.com":
        return None

    parts = [part for part in parsed.path.split("/") if part]
    if len(parts) < 2:
        return None

    owner, repo = parts[0], parts[1]
    if repo.endswith(".git"):
        repo = repo[: -len(".git")]

    if not owner or not repo:
        return None
    if not _REPO_PART.match(owner) or not _REPO_PART.match(repo):
        return None

    return owner, repo


def is_valid_repository_url(url: str | None) -> bool:
    return parse_repository_url(url) is not None
