"""Tests for CSP and HSTS semantic validators."""

from headerguard.analyzers.csp import (
    EMPTY_POLICY_ISSUE,
    MISSING_DEFAULT_SRC_ISSUE,
    validate_csp,
)
from headerguard.analyzers.hsts import check_hsts_preload


class TestValidateCSP:
    def test_strict_policy_is_valid(self):
        result = validate_csp("default-src 'self'; script-src 'self'")
        assert result.is_valid
        assert result.issues == ()
        assert [d.directive for d in result.directives] == ["default-src", "script-src"]

    def test_unsafe_inline_reported_per_directive(self):
        result = validate_csp("default-src 'self'; script-src 'self' 'unsafe-inline'")
        assert not result.is_valid
        assert result.issues == (
            "script-src: 'unsafe-inline' allows inline scripts/styles, "
            "reducing XSS protection",
        )
        assert not result.directives[0].is_unsafe
        assert result.directives[1].is_unsafe

    def test_each_unsafe_token_reported_once(self):
        result = validate_csp("default-src *; script-src 'UNSAFE-EVAL' 'unsafe-eval'")
        assert result.issues == (
            "default-src: wildcard (*) allows any source, reducing security",
            "script-src: 'unsafe-eval' allows eval(), reducing XSS protection",
        )

    def test_missing_default_src(self):
        result = validate_csp("script-src 'self'")
        assert not result.is_valid
        assert result.issues == (MISSING_DEFAULT_SRC_ISSUE,)

    def test_empty_policy(self):
        for policy in ("", "   ", None):
            result = validate_csp(policy)
            assert not result.is_valid
            assert result.directives == ()
            assert result.issues == (EMPTY_POLICY_ISSUE,)

    def test_directive_name_casing_preserved(self):
        result = validate_csp("Default-Src 'self';;")
        assert result.is_valid
        assert len(result.directives) == 1
        assert result.directives[0].directive == "Default-Src"
        assert result.directives[0].sources == ("'self'",)


class TestCheckHSTSPreload:
    def test_preload_eligible(self):
        config = check_hsts_preload("max-age=31536000; includeSubDomains; preload")
        assert config.max_age == 31536000
        assert config.include_subdomains
        assert config.preload
        assert config.is_eligible

    def test_order_and_case_do_not_matter(self):
        config = check_hsts_preload("preload; MAX-AGE=63072000; includesubdomains")
        assert config.max_age == 63072000
        assert config.is_eligible

    def test_short_max_age_not_eligible(self):
        config = check_hsts_preload("max-age=31535999; includeSubDomains; preload")
        assert not config.is_eligible

    def test_missing_directives(self):
        config = check_hsts_preload("max-age=300")
        assert config.max_age == 300
        assert not config.include_subdomains
        assert not config.preload
        assert not config.is_eligible

    def test_empty_value(self):
        config = check_hsts_preload("")
        assert config.max_age == 0
        assert not config.is_eligible
        assert check_hsts_preload(None).max_age == 0
