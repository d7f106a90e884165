"""Pytest configuration and shared fixtures."""

import base64
import json
import os

import httpx
import pytest

# Set test environment before importing app modules
os.environ.setdefault("ENVIRONMENT", "test")

from headerguard.analyzers.models import Severity  # noqa: E402
from headerguard.fixes.models import FixAction, SecurityFix  # noqa: E402

SECURE_CSP = "default-src 'self'; script-src 'self'; object-src 'none'"
PRELOAD_HSTS = "max-age=31536000; includeSubDomains; preload"


@pytest.fixture
def secure_headers() -> dict[str, str]:
    """Headers that earn full credit on every rule."""
    return {
        "Content-Security-Policy": SECURE_CSP,
        "Strict-Transport-Security": PRELOAD_HSTS,
        "X-Frame-Options": "DENY",
        "X-Content-Type-Options": "nosniff",
        "Referrer-Policy": "strict-origin-when-cross-origin",
        "Permissions-Policy": "geolocation=(), camera=()",
        "X-XSS-Protection": "1; mode=block",
        "Cross-Origin-Embedder-Policy": "require-corp",
        "Cross-Origin-Resource-Policy": "same-origin",
    }


@pytest.fixture
def required_only_headers(secure_headers) -> dict[str, str]:
    """The five required headers, all well configured; no optional ones."""
    keep = {
        "Content-Security-Policy",
        "Strict-Transport-Security",
        "X-Frame-Options",
        "X-Content-Type-Options",
        "Referrer-Policy",
    }
    return {k: v for k, v in secure_headers.items() if k in keep}


@pytest.fixture
def weak_headers() -> dict[str, str]:
    """A typical half-hearted configuration."""
    return {
        "server": "nginx/1.25.3",
        "content-security-policy": "default-src 'self' 'unsafe-inline'",
        "strict-transport-security": "max-age=300",
        "x-frame-options": "ALLOW-FROM https://x.com",
        "x-content-type-options": "nosniff",
    }


@pytest.fixture
def sample_fixes() -> list[SecurityFix]:
    return [
        SecurityFix(
            header="X-Frame-Options",
            value="DENY",
            description="Add X-Frame-Options to prevent clickjacking",
            action=FixAction.ADD,
            severity=Severity.MEDIUM,
        ),
        SecurityFix(
            header="Content-Security-Policy",
            value="default-src 'self'",
            description="Add Content Security Policy to prevent XSS attacks",
            action=FixAction.ADD,
            severity=Severity.CRITICAL,
        ),
    ]


class FakeGitHub:
    """In-memory stand-in for the GitHub REST API, served through MockTransport."""

    def __init__(self, owner: str = "octo", repo: str = "site"):
        self.prefix = f"/repos/{owner}/{repo}"
        self.files: dict[str, str] = {}
        self.commits: dict[str, dict] = {}
        self.calls: list[tuple[str, str]] = []
        self.pull: dict | None = None
        self.repository = {"default_branch": "main", "permissions": {"push": True}}
        self.overrides: dict[tuple[str, str], httpx.Response] = {}

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        method, path = request.method, request.url.path
        self.calls.append((method, path))

        if (method, path) in self.overrides:
            return self.overrides[(method, path)]

        if method == "GET" and path == self.prefix:
            return httpx.Response(200, json=self.repository)
        if method == "GET" and path == f"{self.prefix}/git/ref/heads/main":
            return httpx.Response(200, json={"object": {"sha": "base-sha"}})
        if method == "POST" and path == f"{self.prefix}/git/refs":
            return httpx.Response(201, json=json.loads(request.content))
        if path.startswith(f"{self.prefix}/contents/"):
            file_path = path[len(f"{self.prefix}/contents/") :]
            if method == "PUT":
                self.commits[file_path] = json.loads(request.content)
                return httpx.Response(201, json={"content": {"path": file_path}})
            if file_path not in self.files:
                return httpx.Response(404, json={"message": "Not Found"})
            encoded = base64.b64encode(self.files[file_path].encode()).decode()
            return httpx.Response(
                200,
                json={"type": "file", "sha": f"sha-{file_path}", "content": encoded},
            )
        if method == "POST" and path == f"{self.prefix}/pulls":
            self.pull = json.loads(request.content)
            return httpx.Response(
                201,
                json={"html_url": "https://github.com/octo/site/pull/7", "number": 7},
            )

        return httpx.Response(500, json={"message": f"unexpected {method} {path}"})

    def committed(self, path: str) -> str:
        return base64.b64decode(self.commits[path]["content"]).decode()


@pytest.fixture
def fake_github() -> FakeGitHub:
    return FakeGitHub()
