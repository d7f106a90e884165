"""Tests for URL validation, repository validation, caching and rate limiting."""

import pytest

from headerguard.analyzers.engine import SecurityHeaderAnalyzer
from headerguard.exceptions import InvalidURLError
from headerguard.utils.cache import AnalysisCache
from headerguard.utils.rate_limiter import SlidingWindowRateLimiter
from headerguard.utils.url_normalizer import is_private_host, normalize_url
from headerguard.utils.validation import (
    is_valid_github_token,
    is_valid_repository_url,
    parse_repository_url,
)


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestNormalizeUrl:
    @pytest.mark.parametrize(
        "url,expected",
        [
            ("example.com", "https://example.com/"),
            ("  https://example.com  ", "https://example.com/"),
            ("HTTPS://Example.COM:443//a//b#frag", "https://example.com/a/b"),
            ("http://example.com:80/x?q=1", "http://example.com/x?q=1"),
            ("http://example.com:8080", "http://example.com:8080/"),
            ("https://bücher.de", "https://xn--bcher-kva.de/"),
        ],
    )
    def test_normalization(self, url, expected):
        assert normalize_url(url) == expected

    @pytest.mark.parametrize(
        "url",
        [
            "",
            "not-a-valid-url",
            "ftp://example.com",
            "http://localhost:3000",
            "http://127.0.0.1",
            "http://10.0.0.1",
            "http://192.168.1.1",
            "http://172.16.0.1",
            "http://169.254.169.254/latest/meta-data",
            "http://[::1]/",
            "http://example.com:99999",
        ],
    )
    def test_rejected(self, url):
        with pytest.raises(InvalidURLError):
            normalize_url(url)

    def test_invalid_url_is_value_error(self):
        with pytest.raises(ValueError):
            normalize_url("ftp://example.com")

    def test_private_hosts(self):
        assert is_private_host("LOCALHOST")
        assert is_private_host("app.localhost")
        assert is_private_host("fe80::1")
        assert not is_private_host("example.com")
        assert not is_private_host("8.8.8.8")


class TestGitHubValidation:
    def test_tokens(self):
        assert is_valid_github_token("ghp_" + "a" * 36)
        assert is_valid_github_token("a1" * 20)
        assert not is_valid_github_token("ghp_short")
        assert not is_valid_github_token("")
        assert not is_valid_github_token(None)

    def test_repository_urls(self):
        assert parse_repository_url("https://github.com/octocat/hello-world") == (
            "octocat",
            "hello-world",
        )
        assert parse_repository_url("https://github.com/octocat/hello-world.git") == (
            "octocat",
            "hello-world",
        )
        assert parse_repository_url("https://gitlab.com/octocat/hello-world") is None
        assert parse_repository_url("https://github.com/octocat") is None
        assert not is_valid_repository_url("not a url")


class TestAnalysisCache:
    @pytest.fixture
    def result(self, secure_headers):
        return SecurityHeaderAnalyzer().analyze_headers(
            "https://example.com/", secure_headers, platforms=[]
        )

    def test_hit_and_expiry(self, result):
        clock = FakeClock()
        cache = AnalysisCache(ttl_seconds=60, clock=clock)

        cache.store("https://example.com/", result)
        entry = cache.get("https://example.com/")
        assert entry.result is result
        assert entry.hit_count == 1

        clock.now = 61
        assert cache.get("https://example.com/") is None
        assert len(cache) == 0

    def test_platform_selection_is_part_of_key(self, result):
        cache = AnalysisCache()
        cache.store("https://example.com/", result, ("nginx",))
        assert cache.get("https://example.com/") is None
        assert cache.get("https://example.com/", ("nginx",)) is not None

    def test_oldest_entries_evicted(self, result):
        cache = AnalysisCache(max_entries=2)
        for i in range(3):
            cache.store(f"https://example{i}.com/", result)

        assert len(cache) == 2
        assert cache.get("https://example0.com/") is None
        assert cache.get("https://example2.com/") is not None


class TestSlidingWindowRateLimiter:
    def test_limits_within_window(self):
        clock = FakeClock()
        limiter = SlidingWindowRateLimiter(2, window_seconds=60, clock=clock)

        assert limiter.check("a").remaining == 1
        assert limiter.check("a").remaining == 0

        clock.now = 10
        denied = limiter.check("a")
        assert not denied.allowed
        assert denied.retry_after == 50

        assert limiter.check("b").allowed

        clock.now = 61
        assert limiter.check("a").allowed

    def test_reset(self):
        limiter = SlidingWindowRateLimiter(1)
        limiter.check("a")
        limiter.reset()
        assert limiter.check("a").allowed

    def test_idle_clients_are_forgotten(self):
        clock = FakeClock()
        limiter = SlidingWindowRateLimiter(5, window_seconds=60, clock=clock)
        for n in range(10_000):
            limiter.check(f"ip:10.0.{n // 256}.{n % 256}")
        assert len(limiter) == 10_000

        clock.now = 61
        assert limiter.check("ip:192.0.2.1").allowed
        assert len(limiter) == 1

    def test_busy_clients_survive_sweep(self):
        clock = FakeClock()
        limiter = SlidingWindowRateLimiter(1, window_seconds=60, clock=clock)
        limiter.check("old")
        clock.now = 30
        limiter.check("recent")

        clock.now = 65
        limiter.check("new")

        assert len(limiter) == 2
        assert not limiter.check("recent").allowed

    def test_zero_limit_denies_everything(self):
        limiter = SlidingWindowRateLimiter(0, window_seconds=60, clock=FakeClock())
        decision = limiter.check("a")
        assert not decision.allowed
        assert decision.retry_after == 60
        assert len(limiter) == 0
