"""Pull request drafts: rendered patches plus a human-readable description."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime

from headerguard.fixes.generators import get_generator, platform_key, resolve_config
from headerguard.fixes.models import (
    FrameworkConfig,
    PatchValidation,
    Platform,
    SecurityFix,
)
from headerguard.fixes.validator import validate_patch

DEFAULT_TITLE = "🔒 Add missing security headers"


@dataclass
class PlatformPatch:
    """One platform's rendered patch with its validation outcome."""

    name: str
    config: FrameworkConfig
    content: str
    validation: PatchValidation

    @property
    def path(self) -> str:
        return self.config.config_file


@dataclass
class PullRequestDraft:
    title: str
    body: str
    branch: str
    patches: list[PlatformPatch] = field(default_factory=list)

    @property
    def files(self) -> dict[str, str]:
        """Repository path -> new file content."""
        return {patch.path: patch.content for patch in self.patches}


def prepare_patches(
    fixes: list[SecurityFix],
    platforms: Iterable[str | Platform],
    existing_configs: Mapping[str, FrameworkConfig | str] | None = None,
) -> list[PlatformPatch]:
    """Render and validate a patch for every requested platform."""
    patches = []
    for platform in platforms:
        config = resolve_config(platform, existing_configs)
        content = get_generator(platform).generate(config, fixes)
        patches.append(
            PlatformPatch(
                name=platform_key(platform),
                config=config,
                content=content,
                validation=validate_patch(config, content, fixes),
            )
        )
    return patches


def branch_name(now: datetime | None = None) -> str:
    now = now or datetime.now(UTC)
    return f"security-headers-fix-{now.strftime('%Y%m%d%H%M%S')}"


def build_pull_request(
    fixes: list[SecurityFix],
    patches: list[PlatformPatch],
    url: str | None = None,
    score: int | None = None,
    grade: str | None = None,
    title: str | None = None,
    branch: str | None = None,
) -> PullRequestDraft:
    """Assemble the PR title, body and branch for a set of patches."""
    return PullRequestDraft(
        title=title or DEFAULT_TITLE,
        body=render_description(fixes, patches, url=url, score=score, grade=grade),
        branch=branch or branch_name(),
        patches=patches,
    )


def render_description(
    fixes: list[SecurityFix],
    patches: list[PlatformPatch],
    url: str | None = None,
    score: int | None = None,
    grade: str | None = None,
) -> str:
    lines = ["## Security headers update", ""]

    if url:
        lines.append(f"Analysis of {url}")
    if score is not None and grade:
        lines.append(f"Current score: **{score}/100 ({grade})**")
    if url or score is not None:
        lines.append("")

    lines += [
        "This PR adds or strengthens the following HTTP security headers:",
        "",
        "| Header | Action | Value |",
        "| --- | --- | --- |",
    ]
    for fix in fixes:
        value = fix.value.replace("|", "\\|")
        lines.append(f"| {fix.header} | {fix.action.value} | `{value}` |")

    lines += ["", "### Files changed", ""]
    for patch in patches:
        state = "updated" if patch.config.has_content else "new file"
        lines.append(f"- `{patch.path}` ({patch.name}, {state})")

    warnings = [
        f"- {patch.path}: {warning}"
        for patch in patches
        for warning in patch.validation.warnings
    ]
    if warnings:
        lines += ["", "### Review notes", ""] + warnings

    references = [
        f"- [{fix.header}]({fix.reference})" for fix in fixes if fix.reference
    ]
    if references:
        lines += ["", "### References", ""] + references

    return "\n".join(lines) + "\n"
