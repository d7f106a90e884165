"""FastAPI dependencies for the analyzer, cache and rate limiters."""

from fastapi import Request

from headerguard.analyzers.engine import SecurityHeaderAnalyzer
from headerguard.exceptions import RateLimitExceeded
from headerguard.utils.cache import AnalysisCache
from headerguard.utils.rate_limiter import SlidingWindowRateLimiter


def get_analyzer(request: Request) -> SecurityHeaderAnalyzer:
    return request.app.state.analyzer


def get_cache(request: Request) -> AnalysisCache:
    return request.app.state.cache


def get_publisher_factory(request: Request):
    """Callable building a GitHubPublisher from a token."""
    return request.app.state.publisher_factory


def client_id(request: Request) -> str:
    # Use client IP as identifier (in production, consider API keys)
    client_ip = request.client.host if request.client else "unknown"
    return f"ip:{client_ip}"


def _enforce(limiter: SlidingWindowRateLimiter, request: Request, scope: str) -> None:
    decision = limiter.check(client_id(request))
    if not decision.allowed:
        raise RateLimitExceeded(
            f"Rate limit exceeded: {limiter.max_requests} {scope} requests "
            f"per {limiter.window_seconds} seconds",
            retry_after=decision.retry_after,
        )


async def rate_limit_dependency(request: Request) -> None:
    """Rate limiting dependency for analysis endpoints."""
    _enforce(request.app.state.rate_limiter, request, "analysis")


async def github_rate_limit_dependency(request: Request) -> None:
    """Stricter limit for endpoints that write to GitHub."""
    _enforce(request.app.state.github_rate_limiter, request, "pull request")
