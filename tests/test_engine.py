"""Tests for the analysis engine and framework detection."""

import json

import pytest

from headerguard.analyzers.engine import (
    HeaderSource,
    SecurityHeaderAnalyzer,
    suggest_platform,
)
from headerguard.analyzers.framework import detect_framework
from headerguard.exceptions import HeaderFetchError, InvalidURLError
from headerguard.fixes.models import Platform


class FakeSource:
    def __init__(self, headers=None, error: Exception | None = None):
        self.headers = headers or {}
        self.error = error
        self.urls: list[str] = []

    async def fetch(self, url: str) -> dict[str, str]:
        self.urls.append(url)
        if self.error:
            raise self.error
        return self.headers


class TestSecurityHeaderAnalyzer:
    @pytest.mark.asyncio
    async def test_analyze_fetches_normalized_url(self, secure_headers):
        source = FakeSource(secure_headers)
        analyzer = SecurityHeaderAnalyzer(source)

        result = await analyzer.analyze("Example.com")

        assert source.urls == ["https://example.com/"]
        assert result.url == "https://example.com/"
        assert result.score == 100
        assert result.grade == "A+"
        assert result.recommendations == ()

    @pytest.mark.asyncio
    async def test_weak_configuration(self, weak_headers):
        analyzer = SecurityHeaderAnalyzer(FakeSource(weak_headers))

        result = await analyzer.analyze("https://example.com")

        assert result.score == 45
        assert result.grade == "F"
        assert result.framework == "nginx"
        assert len(result.headers.misconfigured) == 3
        assert result.recommendations[0].header == "Content-Security-Policy"

    @pytest.mark.asyncio
    async def test_invalid_url_is_not_fetched(self):
        source = FakeSource()
        analyzer = SecurityHeaderAnalyzer(source)

        with pytest.raises(InvalidURLError):
            await analyzer.analyze("http://127.0.0.1/admin")
        assert source.urls == []

    @pytest.mark.asyncio
    async def test_fetch_errors_propagate(self):
        error = HeaderFetchError("https://example.com/", "connection refused")
        analyzer = SecurityHeaderAnalyzer(FakeSource(error=error))

        with pytest.raises(HeaderFetchError):
            await analyzer.analyze("https://example.com")

    @pytest.mark.asyncio
    async def test_analyze_requires_source(self):
        with pytest.raises(RuntimeError):
            await SecurityHeaderAnalyzer().analyze("https://example.com")

    def test_analyze_headers_is_offline(self, weak_headers):
        result = SecurityHeaderAnalyzer().analyze_headers(
            "https://example.com/", weak_headers
        )

        assert result.timestamp.endswith("Z")
        assert set(result.fixes) == {p.value for p in Platform} - {"generic"}
        assert "X-Frame-Options" in result.fixes["nginx"]
        json.dumps(result.to_dict())

    def test_platform_selection(self, weak_headers):
        result = SecurityHeaderAnalyzer().analyze_headers(
            "https://example.com/",
            weak_headers,
            platforms=["vercel"],
            existing_configs={"vercel": '{"cleanUrls": true}'},
        )

        assert list(result.fixes) == ["vercel"]
        assert json.loads(result.fixes["vercel"])["cleanUrls"] is True

    def test_empty_headers_are_not_an_error(self):
        result = SecurityHeaderAnalyzer().analyze_headers("https://example.com/", None)
        assert result.score == 8
        assert len(result.headers.missing) == 9

    def test_same_snapshot_same_result(self, weak_headers):
        analyzer = SecurityHeaderAnalyzer()
        first = analyzer.analyze_headers("https://example.com/", weak_headers)
        second = analyzer.analyze_headers("https://example.com/", weak_headers)

        assert first.score == second.score
        assert first.headers == second.headers
        assert first.fixes == second.fixes

    def test_fake_source_satisfies_protocol(self):
        assert isinstance(FakeSource(), HeaderSource)


class TestFrameworkDetection:
    @pytest.mark.parametrize(
        "headers,framework",
        [
            ({"Server": "nginx/1.25.3"}, "nginx"),
            ({"server": "Apache/2.4.57 (Debian)"}, "apache"),
            ({"server": "cloudflare"}, "cloudflare"),
            ({"X-Powered-By": "Express"}, "express.js"),
            ({"x-powered-by": "Next.js"}, "next.js"),
            ({"x-vercel-id": "cdg1::abc"}, "vercel"),
            ({"x-nf-request-id": "01H"}, "netlify"),
            ({"x-amz-cf-id": "xyz"}, "aws-cloudfront"),
            ({"server": "gws"}, None),
            ({}, None),
        ],
    )
    def test_detect(self, headers, framework):
        assert detect_framework(headers) == framework

    def test_suggest_platform(self):
        assert suggest_platform("next.js") is Platform.NEXTJS
        assert suggest_platform("aws-cloudfront") is Platform.AMPLIFY
        assert suggest_platform("php") is Platform.GENERIC
        assert suggest_platform(None) is Platform.GENERIC
