"""Main FastAPI application with middleware, exception handlers, and routing."""

import logging
import time
from collections.abc import AsyncGenerator, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest
from starlette.exceptions import HTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from headerguard import __version__
from headerguard.analyzers.engine import SecurityHeaderAnalyzer
from headerguard.api.metrics import REQUEST_COUNT, REQUEST_DURATION
from headerguard.api.routers import analyze, github, health
from headerguard.config import settings
from headerguard.exceptions import (
    HeaderFetchError,
    InvalidURLError,
    PublishError,
    RateLimitExceeded,
)
from headerguard.logging_config import configure_logging
from headerguard.services.github_publisher import GitHubPublisher
from headerguard.services.header_source import HttpHeaderSource
from headerguard.utils.cache import AnalysisCache
from headerguard.utils.rate_limiter import SlidingWindowRateLimiter

logger = logging.getLogger(__name__)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Middleware to collect Prometheus metrics."""

    async def dispatch(self, request: Request, call_next) -> Response:
        start_time = time.time()

        response = await call_next(request)

        duration = time.time() - start_time
        endpoint = request.url.path
        method = request.method
        status_code = str(response.status_code)

        REQUEST_COUNT.labels(method=method, endpoint=endpoint, status=status_code).inc()
        REQUEST_DURATION.labels(method=method, endpoint=endpoint).observe(duration)

        return response


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan context manager."""
    logger.info(f"Starting HeaderGuard API ({settings.environment})")

    yield

    logger.info("Shutting down HeaderGuard API")
    app.state.cache.clear()


def _error(code: int, message: str, error_type: str, **extra) -> dict:
    return {"error": {"code": code, "message": message, "type": error_type, **extra}}


def create_app(
    analyzer: SecurityHeaderAnalyzer | None = None,
    publisher_factory: Callable[[str], GitHubPublisher] | None = None,
    cache: AnalysisCache | None = None,
) -> FastAPI:
    """
    Create and configure FastAPI application.

    The analyzer, publisher factory and cache can be injected; the defaults
    fetch headers over HTTP and publish to the configured GitHub API.
    """
    configure_logging(settings.log_level)

    app = FastAPI(
        title="HeaderGuard API",
        description="HTTP security headers analyzer and remediation generator",
        version=__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    # Shared collaborators
    app.state.analyzer = analyzer or SecurityHeaderAnalyzer(HttpHeaderSource())
    app.state.publisher_factory = publisher_factory or GitHubPublisher
    if cache is None:
        cache = AnalysisCache(
            ttl_seconds=settings.cache_ttl_seconds,
            max_entries=settings.cache_max_entries,
        )
    app.state.cache = cache
    app.state.rate_limiter = SlidingWindowRateLimiter(
        settings.rate_limit_requests_per_minute, window_seconds=60
    )
    app.state.github_rate_limiter = SlidingWindowRateLimiter(
        settings.github_rate_limit_requests,
        window_seconds=settings.github_rate_limit_window,
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_hosts if not settings.debug else ["*"],
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    # Prometheus metrics
    app.add_middleware(PrometheusMiddleware)

    # Exception handlers
    @app.exception_handler(HTTPException)
    async def http_exception_handler(
        request: Request, exc: HTTPException
    ) -> JSONResponse:
        """Handle HTTP exceptions."""
        return JSONResponse(
            status_code=exc.status_code,
            content=_error(exc.status_code, exc.detail, "http_error"),
        )

    @app.exception_handler(InvalidURLError)
    async def invalid_url_handler(
        request: Request, exc: InvalidURLError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_error(400, str(exc), "invalid_url"),
        )

    @app.exception_handler(HeaderFetchError)
    async def header_fetch_handler(
        request: Request, exc: HeaderFetchError
    ) -> JSONResponse:
        logger.warning(f"Header fetch failed for {exc.url}: {exc}")
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content=_error(502, str(exc), "fetch_error"),
        )

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(
        request: Request, exc: RateLimitExceeded
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            content=_error(429, str(exc), "rate_limit_error"),
            headers={"Retry-After": str(exc.retry_after)},
        )

    @app.exception_handler(PublishError)
    async def publish_error_handler(
        request: Request, exc: PublishError
    ) -> JSONResponse:
        logger.error(f"Publishing fixes failed ({exc.status_code}): {exc}")
        return JSONResponse(
            status_code=exc.status_code,
            content=_error(exc.status_code, str(exc), "publish_error"),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle validation errors."""
        return JSONResponse(
            status_code=422,
            content=_error(
                422,
                "Validation error",
                "validation_error",
                details=jsonable_encoder(exc.errors()),
            ),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle general exceptions without exposing internals."""
        logger.exception("Unhandled exception: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error(500, "Internal server error", "internal_error"),
        )

    # Metrics endpoint
    @app.get(settings.metrics_endpoint)
    async def metrics() -> Response:
        """Prometheus metrics endpoint."""
        return Response(
            content=generate_latest(),
            media_type="text/plain; version=0.0.4; charset=utf-8",
        )

    # Include routers
    app.include_router(health.router, prefix=settings.api_prefix)
    app.include_router(analyze.router, prefix=settings.api_prefix)
    app.include_router(github.router, prefix=settings.api_prefix)

    return app


# Create app instance
app = create_app()
