"""Health check endpoint for service monitoring."""

import time
from datetime import UTC, datetime

from fastapi import APIRouter, Depends

from headerguard import __version__
from headerguard.analyzers.engine import SecurityHeaderAnalyzer
from headerguard.api.dependencies import get_analyzer
from headerguard.api.schemas import HealthResponse

router = APIRouter(tags=["health"])

# Track start time for uptime calculation
_start_time = time.time()


@router.get("/health", response_model=HealthResponse)
async def health_check(
    analyzer: SecurityHeaderAnalyzer = Depends(get_analyzer),
) -> HealthResponse:
    """Always OK while the process is serving; reports the loaded rule count."""
    return HealthResponse(
        status="ok",
        version=__version__,
        timestamp=datetime.now(UTC).isoformat().replace("+00:00", "Z"),
        uptime_seconds=time.time() - _start_time,
        rules=len(analyzer.rules),
    )
