"""Header analysis, validation and fix endpoints."""

import logging
import time

from fastapi import APIRouter, Depends

from headerguard.analyzers.csp import validate_csp
from headerguard.analyzers.engine import SecurityHeaderAnalyzer
from headerguard.analyzers.evaluator import evaluate_all
from headerguard.analyzers.hsts import check_hsts_preload
from headerguard.analyzers.models import AnalysisResult
from headerguard.api.dependencies import get_analyzer, get_cache, rate_limit_dependency
from headerguard.api.metrics import ANALYSIS_COUNT, PATCH_COUNT
from headerguard.api.schemas import (
    AnalysisResponse,
    CSPValidationRequest,
    CSPValidationResponse,
    FixesRequest,
    FixesResponse,
    HeaderAnalysisRequest,
    HSTSCheckRequest,
    HSTSCheckResponse,
    PlatformPatchSchema,
    UrlAnalysisRequest,
)
from headerguard.fixes.builder import build_fixes
from headerguard.fixes.generators import DEFAULT_PLATFORMS, platform_key
from headerguard.fixes.pull_request import prepare_patches
from headerguard.utils.cache import AnalysisCache
from headerguard.utils.url_normalizer import normalize_url

logger = logging.getLogger(__name__)

router = APIRouter(tags=["analysis"], dependencies=[Depends(rate_limit_dependency)])


def _response(
    result: AnalysisResult, start_time: float, cached: bool = False
) -> AnalysisResponse:
    return AnalysisResponse(
        **result.to_dict(),
        cached=cached,
        processing_time_ms=(time.time() - start_time) * 1000,
    )


def _record(result: AnalysisResult) -> None:
    ANALYSIS_COUNT.labels(grade=result.grade).inc()
    for platform in result.fixes:
        PATCH_COUNT.labels(platform=platform).inc()


@router.post("/analyze", response_model=AnalysisResponse)
async def analyze_url(
    request: UrlAnalysisRequest,
    analyzer: SecurityHeaderAnalyzer = Depends(get_analyzer),
    cache: AnalysisCache = Depends(get_cache),
) -> AnalysisResponse:
    """
    Fetch a URL's response headers and grade them.

    The response lists found, missing and misconfigured headers, ranked
    recommendations and a ready-to-apply patch for each requested platform.
    Results are cached per normalized URL and platform selection.
    """
    start_time = time.time()
    normalized_url = normalize_url(request.url)
    platform_names = tuple(platform_key(p) for p in request.platforms or ())

    cached = cache.get(normalized_url, platform_names)
    if cached:
        ANALYSIS_COUNT.labels(grade=cached.result.grade).inc()
        return _response(cached.result, start_time, cached=True)

    result = await analyzer.analyze(normalized_url, platforms=request.platforms)
    cache.store(normalized_url, result, platform_names)
    _record(result)

    return _response(result, start_time)


@router.post("/headers/analyze", response_model=AnalysisResponse)
async def analyze_headers(
    request: HeaderAnalysisRequest,
    analyzer: SecurityHeaderAnalyzer = Depends(get_analyzer),
) -> AnalysisResponse:
    """Grade a header map supplied by the caller; no network access."""
    start_time = time.time()
    result = analyzer.analyze_headers(
        normalize_url(request.url),
        request.headers,
        platforms=request.platforms,
        existing_configs=request.existing_configs,
    )
    _record(result)
    return _response(result, start_time)


@router.post("/csp/validate", response_model=CSPValidationResponse)
async def csp_validate(request: CSPValidationRequest) -> CSPValidationResponse:
    return CSPValidationResponse(**validate_csp(request.policy).to_dict())


@router.post("/hsts/check", response_model=HSTSCheckResponse)
async def hsts_check(request: HSTSCheckRequest) -> HSTSCheckResponse:
    return HSTSCheckResponse(**check_hsts_preload(request.header).to_dict())


@router.post("/fixes", response_model=FixesResponse)
async def generate_fixes(request: FixesRequest) -> FixesResponse:
    """Build the fix set for a header map and render it for each platform."""
    fixes = build_fixes(evaluate_all(request.headers))
    platforms = (
        request.platforms if request.platforms is not None else DEFAULT_PLATFORMS
    )
    patches = prepare_patches(fixes, platforms, request.existing_configs)

    for patch in patches:
        PATCH_COUNT.labels(platform=patch.name).inc()
        if not patch.validation.valid:
            logger.warning(
                f"Patch for {patch.name} failed validation: "
                f"{patch.validation.warnings}"
            )

    return FixesResponse(
        fixes=[fix.to_dict() for fix in fixes],
        patches={
            patch.name: PlatformPatchSchema(
                platform=patch.config.type.value,
                config_file=patch.path,
                content=patch.content,
                validation=patch.validation.to_dict(),
            )
            for patch in patches
        },
    )
