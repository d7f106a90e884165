"""Publish rendered patches to a GitHub repository as a pull request."""

import base64
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

import httpx

from headerguard.config import settings
from headerguard.exceptions import PublishError
from headerguard.fixes.generators import platform_key
from headerguard.fixes.models import FrameworkConfig, Platform, SecurityFix
from headerguard.fixes.pull_request import (
    PullRequestDraft,
    build_pull_request,
    prepare_patches,
)
from headerguard.utils.validation import parse_repository_url

logger = logging.getLogger(__name__)


@dataclass
class PublishResult:
    success: bool
    branch: str
    pull_request_url: str | None = None
    pull_request_number: int | None = None
    files_changed: list[str] = field(default_factory=list)
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "branch": self.branch,
            "pull_request_url": self.pull_request_url,
            "pull_request_number": self.pull_request_number,
            "files_changed": list(self.files_changed),
            "error": self.error,
        }


class GitHubPublisher:
    """
    Thin client over the GitHub REST API.

    Creates a branch off the default branch, commits one file per platform
    patch and opens a pull request. API failures are raised as PublishError
    carrying an HTTP status the API layer can pass through.
    """

    def __init__(
        self,
        token: str,
        api_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_url = (api_url or settings.github_api_url).rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.api_url,
            timeout=httpx.Timeout(timeout or settings.github_timeout),
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
                "User-Agent": settings.user_agent,
            },
            transport=transport,
        )

    async def __aenter__(self) -> "GitHubPublisher":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def get_repository(self, owner: str, repo: str) -> dict[str, Any]:
        """Repository metadata; also proves the token can see the repository."""
        response = await self._request("GET", f"/repos/{owner}/{repo}")
        return response.json()

    async def get_file(
        self, owner: str, repo: str, path: str, ref: str | None = None
    ) -> tuple[str, str] | None:
        """
        Read a file from the repository.

        Returns:
            ``(content, blob_sha)``, or None when the file does not exist.
        """
        params = {"ref": ref} if ref else None
        try:
            response = await self._request(
                "GET", f"/repos/{owner}/{repo}/contents/{path}", params=params
            )
        except PublishError as e:
            if e.status_code == 404:
                return None
            raise

        data = response.json()
        if isinstance(data, list) or data.get("type") != "file":
            logger.warning(f"{owner}/{repo}:{path} is not a regular file")
            return None

        try:
            content = base64.b64decode(data.get("content", "")).decode("utf-8")
        except UnicodeDecodeError as e:
            raise PublishError(
                f"{owner}/{repo}:{path} is not UTF-8 text", status_code=422
            ) from e
        return content, data["sha"]

    async def load_existing_configs(
        self,
        owner: str,
        repo: str,
        platforms: Iterable[str | Platform],
        ref: str | None = None,
    ) -> dict[str, FrameworkConfig]:
        """Fetch the current configuration file for each platform, if present."""
        configs: dict[str, FrameworkConfig] = {}
        for platform in platforms:
            descriptor = FrameworkConfig.for_platform(platform)
            found = await self.get_file(owner, repo, descriptor.config_file, ref=ref)
            if found is None:
                configs[platform_key(platform)] = descriptor
                continue
            configs[platform_key(platform)] = FrameworkConfig(
                type=descriptor.type,
                config_file=descriptor.config_file,
                exists=True,
                content=found[0],
            )
        return configs

    async def publish_fixes(
        self,
        repository_url: str,
        fixes: list[SecurityFix],
        platforms: Iterable[str | Platform],
        url: str | None = None,
        score: int | None = None,
        grade: str | None = None,
        title: str | None = None,
    ) -> PublishResult:
        """Read existing configs, render patches against them and open a PR."""
        owner, repo = self._parse(repository_url)
        platforms = list(platforms)

        existing = await self.load_existing_configs(owner, repo, platforms)
        patches = prepare_patches(fixes, platforms, existing)
        draft = build_pull_request(
            fixes, patches, url=url, score=score, grade=grade, title=title
        )
        return await self.publish(repository_url, draft)

    async def publish(
        self, repository_url: str, draft: PullRequestDraft
    ) -> PublishResult:
        """Create the branch, commit every patch and open the pull request."""
        owner, repo = self._parse(repository_url)
        if not draft.patches:
            raise PublishError("Pull request has no files to commit", status_code=400)

        repository = await self.get_repository(owner, repo)
        base = repository.get("default_branch") or "main"
        permissions = repository.get("permissions") or {}
        if permissions and not permissions.get("push"):
            raise PublishError(
                f"Token lacks write access to {owner}/{repo}", status_code=403
            )

        ref = await self._request("GET", f"/repos/{owner}/{repo}/git/ref/heads/{base}")
        base_sha = ref.json()["object"]["sha"]

        await self._request(
            "POST",
            f"/repos/{owner}/{repo}/git/refs",
            json={"ref": f"refs/heads/{draft.branch}", "sha": base_sha},
        )
        logger.info(f"Created branch {draft.branch} on {owner}/{repo} from {base}")

        files_changed = []
        for patch in draft.patches:
            if not patch.validation.valid:
                logger.warning(
                    f"Committing {patch.path} despite validation problems: "
                    f"{patch.validation.warnings}"
                )
            await self._commit_file(
                owner, repo, draft.branch, patch.path, patch.content
            )
            files_changed.append(patch.path)

        pull = await self._request(
            "POST",
            f"/repos/{owner}/{repo}/pulls",
            json={
                "title": draft.title,
                "head": draft.branch,
                "base": base,
                "body": draft.body,
            },
        )
        data = pull.json()
        logger.info(f"Opened pull request {data.get('html_url')} on {owner}/{repo}")

        return PublishResult(
            success=True,
            branch=draft.branch,
            pull_request_url=data.get("html_url"),
            pull_request_number=data.get("number"),
            files_changed=files_changed,
        )

    async def _commit_file(
        self, owner: str, repo: str, branch: str, path: str, content: str
    ) -> None:
        existing = await self.get_file(owner, repo, path, ref=branch)
        payload = {
            "message": f"Update {path} with security headers",
            "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
            "branch": branch,
        }
        if existing is not None:
            payload["sha"] = existing[1]

        path_url = f"/repos/{owner}/{repo}/contents/{path}"
        await self._request("PUT", path_url, json=payload)

    def _parse(self, repository_url: str) -> tuple[str, str]:
        parsed = parse_repository_url(repository_url)
        if parsed is None:
            raise PublishError(
                f"Invalid GitHub repository URL: {repository_url}", status_code=400
            )
        return parsed

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            logger.error(f"GitHub API timeout: {method} {path}")
            raise PublishError("GitHub API timed out", status_code=504) from e
        except httpx.HTTPError as e:
            logger.error(f"GitHub API error: {method} {path}: {e}")
            raise PublishError(f"GitHub API unreachable: {e}", status_code=502) from e

        if response.is_success:
            return response

        raise _status_error(response)


def _status_error(response: httpx.Response) -> PublishError:
    try:
        detail = response.json().get("message", "")
    except ValueError:
        detail = response.text
    status = response.status_code

    if status == 401:
        return PublishError("Invalid or expired GitHub token", status_code=401)
    if status == 403 and response.headers.get("x-ratelimit-remaining") == "0":
        return PublishError("GitHub API rate limit exceeded", status_code=429)
    if status == 403:
        return PublishError(f"Permission denied: {detail}", status_code=403)
    if status == 404:
        return PublishError(f"Not found: {detail}", status_code=404)
    if status == 422 and "Reference already exists" in detail:
        return PublishError("Branch already exists", status_code=409)
    if status in (409, 422):
        return PublishError(f"GitHub rejected the change: {detail}", status_code=status)

    logger.error(f"GitHub API returned {status}: {detail}")
    return PublishError(f"GitHub API error {status}: {detail}", status_code=502)
