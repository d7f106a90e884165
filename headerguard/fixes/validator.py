"""Structural sanity checks for rendered patches.

Checks are structural only (does JSON parse, is the expected directive
there); header values are never judged here. Warnings never block a patch:
the publisher decides whether to go ahead.
"""

import json
import logging
from collections.abc import Iterable

import yaml

from headerguard.fixes.models import (
    FrameworkConfig,
    PatchValidation,
    Platform,
    SecurityFix,
)

logger = logging.getLogger(__name__)

# Keyword every well-formed patch for the platform contains
EXPECTED_KEYWORDS = {
    Platform.NGINX: "add_header",
    Platform.APACHE: "Header always set",
    Platform.EXPRESS: "res.setHeader",
    Platform.NEXTJS: "headers",
    Platform.CLOUDFLARE: "headers.set",
}


def validate_patch(
    config: FrameworkConfig,
    patch: str | None,
    fixes: Iterable[SecurityFix] = (),
) -> PatchValidation:
    """
    Check a rendered patch for obvious structural problems.

    ``valid`` is False when the patch cannot be what the platform expects
    (empty, unparseable JSON/YAML, missing directive); everything else is a
    plain warning.
    """
    result = PatchValidation()
    platform = Platform.resolve(config.type)

    if not patch or not patch.strip():
        result.warn(f"Patch for {config.config_file} is empty", fatal=True)
        return result

    if platform is Platform.VERCEL:
        _check_json(patch, result)
    elif platform is Platform.AMPLIFY:
        _check_yaml(patch, result)
    elif platform is Platform.NETLIFY:
        _check_netlify(patch, result)
    elif platform in EXPECTED_KEYWORDS:
        keyword = EXPECTED_KEYWORDS[platform]
        if keyword not in patch:
            result.warn(
                f"Expected '{keyword}' in {platform.value} patch but it is missing",
                fatal=True,
            )

    if platform is Platform.NEXTJS and patch.count("{") != patch.count("}"):
        result.warn("Unbalanced braces in next.config.js patch")

    for fix in fixes:
        if fix.header not in patch:
            result.warn(f"{fix.header} is not present in the patch")

    if config.has_content and not _keeps_existing_content(
        platform, config.content, patch
    ):
        result.warn(
            f"Existing configuration in {config.config_file} is replaced, not merged"
        )

    if result.warnings:
        logger.debug(
            f"Patch for {platform.value} produced {len(result.warnings)} warning(s)"
        )
    return result


def _check_json(patch: str, result: PatchValidation) -> None:
    try:
        data = json.loads(patch)
    except json.JSONDecodeError as e:
        result.warn(f"Patch is not valid JSON: {e}", fatal=True)
        return
    if not isinstance(data, dict) or not isinstance(data.get("headers"), list):
        result.warn("vercel.json patch has no 'headers' array", fatal=True)


def _check_yaml(patch: str, result: PatchValidation) -> None:
    try:
        data = yaml.safe_load(patch)
    except yaml.YAMLError as e:
        result.warn(f"Patch is not valid YAML: {e}", fatal=True)
        return
    if not isinstance(data, dict) or not isinstance(data.get("customHeaders"), list):
        result.warn("customHttp.yml patch has no 'customHeaders' list", fatal=True)


def _check_netlify(patch: str, result: PatchValidation) -> None:
    lines = [line for line in patch.splitlines() if line.strip()]
    if not lines or lines[0][:1].isspace():
        result.warn("_headers file must start with a path line", fatal=True)
        return
    for line in lines:
        if line[:1].isspace() and ":" not in line and not line.strip().startswith("#"):
            result.warn(f"Malformed header line in _headers: {line.strip()!r}")


def _keeps_existing_content(platform: Platform, content: str, patch: str) -> bool:
    """True when the existing file survives in the patch rather than being replaced."""
    if platform in (Platform.VERCEL, Platform.AMPLIFY):
        load = json.loads if platform is Platform.VERCEL else yaml.safe_load
        try:
            before, after = load(content), load(patch)
        except (ValueError, yaml.YAMLError):
            return False
        if isinstance(before, dict) and isinstance(after, dict):
            return set(before) <= set(after)
        return False

    for line in content.splitlines():
        line = line.strip()
        if line and not line.startswith(("#", "//")):
            return line in patch
    return True
