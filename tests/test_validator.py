"""Tests for structural patch validation."""

from headerguard.fixes.generators import get_generator
from headerguard.fixes.models import FrameworkConfig, Platform
from headerguard.fixes.validator import validate_patch


def _config(platform: Platform, content: str | None = None) -> FrameworkConfig:
    return FrameworkConfig.for_platform(platform, content=content)


class TestValidatePatch:
    def test_generated_patches_are_valid(self, sample_fixes):
        for platform in Platform:
            config = _config(platform)
            patch = get_generator(platform).generate(config, sample_fixes)
            result = validate_patch(config, patch, sample_fixes)
            assert result.valid, platform
            assert result.warnings == [], platform

    def test_empty_patch_is_fatal(self):
        result = validate_patch(_config(Platform.NGINX), "  ")
        assert not result.valid

    def test_invalid_json_is_fatal(self):
        result = validate_patch(_config(Platform.VERCEL), "{not json")
        assert not result.valid
        assert result.warnings[0].startswith("Patch is not valid JSON")

    def test_yaml_without_custom_headers_is_fatal(self):
        result = validate_patch(_config(Platform.AMPLIFY), "rules: []\n")
        assert not result.valid

    def test_missing_keyword_is_fatal(self):
        result = validate_patch(_config(Platform.NGINX), "server_tokens off;\n")
        assert not result.valid
        assert "add_header" in result.warnings[0]

    def test_netlify_needs_path_line(self):
        result = validate_patch(_config(Platform.NETLIFY), "  X-Frame-Options: DENY\n")
        assert not result.valid

    def test_missing_fix_header_is_a_warning(self, sample_fixes):
        patch = 'add_header X-Frame-Options "DENY" always;\n'
        result = validate_patch(_config(Platform.NGINX), patch, sample_fixes)
        assert result.valid
        assert result.warnings == [
            "Content-Security-Policy is not present in the patch"
        ]

    def test_unbalanced_braces_warn(self):
        patch = "const nextConfig = { async headers() { return [] }\n"
        result = validate_patch(_config(Platform.NEXTJS), patch)
        assert result.valid
        assert result.warnings == ["Unbalanced braces in next.config.js patch"]

    def test_replaced_content_warns(self, sample_fixes):
        config = _config(Platform.NGINX, "server_tokens off;\n")
        patch = get_generator(Platform.NGINX).generate(config, sample_fixes)

        result = validate_patch(config, patch, sample_fixes)

        assert result.valid
        assert result.warnings == [
            "Existing configuration in nginx/security-headers.conf is replaced, "
            "not merged"
        ]

    def test_merged_content_does_not_warn(self, sample_fixes):
        config = _config(Platform.VERCEL, '{"cleanUrls": true, "headers": []}')
        patch = get_generator(Platform.VERCEL).generate(config, sample_fixes)

        result = validate_patch(config, patch, sample_fixes)

        assert result.valid
        assert result.warnings == []

    def test_to_dict(self):
        result = validate_patch(_config(Platform.VERCEL), "[]")
        assert result.to_dict() == {
            "valid": False,
            "warnings": ["vercel.json patch has no 'headers' array"],
        }
