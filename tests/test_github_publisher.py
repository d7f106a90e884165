"""Tests for the GitHub patch publisher."""

import base64
import json

import httpx
import pytest

from headerguard.analyzers.evaluator import evaluate_all
from headerguard.exceptions import PublishError
from headerguard.fixes.builder import build_fixes
from headerguard.fixes.pull_request import build_pull_request
from headerguard.services.github_publisher import GitHubPublisher

REPO_URL = "https://github.com/octo/site"
TOKEN = "ghp_" + "x" * 36


@pytest.fixture
def fixes(weak_headers):
    return build_fixes(evaluate_all(weak_headers))


def _publisher(fake_github) -> GitHubPublisher:
    return GitHubPublisher(TOKEN, transport=fake_github.transport())


class TestGitHubPublisher:
    @pytest.mark.asyncio
    async def test_publish_fixes_opens_pull_request(self, fake_github, fixes):
        async with _publisher(fake_github) as publisher:
            result = await publisher.publish_fixes(
                REPO_URL,
                fixes,
                ["nginx"],
                url="https://example.com/",
                score=45,
                grade="F",
            )

        assert result.success
        assert result.pull_request_url == "https://github.com/octo/site/pull/7"
        assert result.pull_request_number == 7
        assert result.files_changed == ["nginx/security-headers.conf"]
        assert result.branch.startswith("security-headers-fix-")

        assert fake_github.pull["base"] == "main"
        assert fake_github.pull["head"] == result.branch
        assert "Current score: **45/100 (F)**" in fake_github.pull["body"]

        committed = fake_github.committed("nginx/security-headers.conf")
        assert 'add_header X-Frame-Options "DENY" always;' in committed
        assert "sha" not in fake_github.commits["nginx/security-headers.conf"]

    @pytest.mark.asyncio
    async def test_existing_file_is_merged_and_updated(self, fake_github, fixes):
        fake_github.files["vercel.json"] = '{"cleanUrls": true}'

        async with _publisher(fake_github) as publisher:
            await publisher.publish_fixes(REPO_URL, fixes, ["vercel"])

        commit = fake_github.commits["vercel.json"]
        assert commit["sha"] == "sha-vercel.json"
        assert commit["branch"] == fake_github.pull["head"]
        assert json.loads(fake_github.committed("vercel.json"))["cleanUrls"] is True

    @pytest.mark.asyncio
    async def test_api_call_sequence(self, fake_github, fixes):
        async with _publisher(fake_github) as publisher:
            await publisher.publish_fixes(REPO_URL, fixes, ["netlify"])

        assert fake_github.calls == [
            ("GET", "/repos/octo/site/contents/_headers"),
            ("GET", "/repos/octo/site"),
            ("GET", "/repos/octo/site/git/ref/heads/main"),
            ("POST", "/repos/octo/site/git/refs"),
            ("GET", "/repos/octo/site/contents/_headers"),
            ("PUT", "/repos/octo/site/contents/_headers"),
            ("POST", "/repos/octo/site/pulls"),
        ]

    @pytest.mark.asyncio
    async def test_load_existing_configs(self, fake_github):
        fake_github.files["_headers"] = "/*\n  X-Frame-Options: DENY\n"

        async with _publisher(fake_github) as publisher:
            configs = await publisher.load_existing_configs(
                "octo", "site", ["netlify", "nginx"]
            )

        assert configs["netlify"].exists
        assert configs["netlify"].content == "/*\n  X-Frame-Options: DENY\n"
        assert not configs["nginx"].exists

    @pytest.mark.asyncio
    async def test_invalid_repository_url(self, fake_github, fixes):
        async with _publisher(fake_github) as publisher:
            with pytest.raises(PublishError) as exc_info:
                await publisher.publish_fixes("https://gitlab.com/octo/site", fixes, [])

        assert exc_info.value.status_code == 400
        assert fake_github.calls == []

    @pytest.mark.asyncio
    async def test_empty_draft_is_rejected(self, fake_github):
        draft = build_pull_request([], [], branch="security-headers-fix-empty")

        async with _publisher(fake_github) as publisher:
            with pytest.raises(PublishError) as exc_info:
                await publisher.publish(REPO_URL, draft)

        assert exc_info.value.status_code == 400

    @pytest.mark.parametrize(
        "response,status_code",
        [
            (httpx.Response(401, json={"message": "Bad credentials"}), 401),
            (httpx.Response(404, json={"message": "Not Found"}), 404),
            (
                httpx.Response(
                    403,
                    json={"message": "API rate limit exceeded"},
                    headers={"X-RateLimit-Remaining": "0"},
                ),
                429,
            ),
            (httpx.Response(403, json={"message": "Forbidden"}), 403),
            (httpx.Response(503, text="unavailable"), 502),
        ],
    )
    @pytest.mark.asyncio
    async def test_repository_errors(self, fake_github, fixes, response, status_code):
        fake_github.overrides[("GET", "/repos/octo/site")] = response

        async with _publisher(fake_github) as publisher:
            with pytest.raises(PublishError) as exc_info:
                await publisher.publish_fixes(REPO_URL, fixes, ["nginx"])

        assert exc_info.value.status_code == status_code
        assert fake_github.pull is None

    @pytest.mark.asyncio
    async def test_read_only_token(self, fake_github, fixes):
        fake_github.repository["permissions"] = {"push": False}

        async with _publisher(fake_github) as publisher:
            with pytest.raises(PublishError) as exc_info:
                await publisher.publish_fixes(REPO_URL, fixes, ["nginx"])

        assert exc_info.value.status_code == 403
        assert ("POST", "/repos/octo/site/git/refs") not in fake_github.calls

    @pytest.mark.asyncio
    async def test_existing_branch(self, fake_github, fixes):
        fake_github.overrides[("POST", "/repos/octo/site/git/refs")] = httpx.Response(
            422, json={"message": "Reference already exists"}
        )

        async with _publisher(fake_github) as publisher:
            with pytest.raises(PublishError, match="Branch already exists") as exc_info:
                await publisher.publish_fixes(REPO_URL, fixes, ["nginx"])

        assert exc_info.value.status_code == 409

    @pytest.mark.asyncio
    async def test_non_utf8_config_file(self, fake_github, fixes):
        encoded = base64.b64encode(b"\xff\xfe{\x00}").decode()
        fake_github.overrides[("GET", "/repos/octo/site/contents/vercel.json")] = (
            httpx.Response(
                200, json={"type": "file", "sha": "sha-1", "content": encoded}
            )
        )

        async with _publisher(fake_github) as publisher:
            with pytest.raises(PublishError, match="not UTF-8") as exc_info:
                await publisher.publish_fixes(REPO_URL, fixes, ["vercel"])

        assert exc_info.value.status_code == 422
        assert ("POST", "/repos/octo/site/git/refs") not in fake_github.calls
