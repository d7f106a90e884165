"""Open pull requests carrying security header fixes."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from headerguard.analyzers.engine import SecurityHeaderAnalyzer, suggest_platform
from headerguard.api.dependencies import (
    get_analyzer,
    get_publisher_factory,
    github_rate_limit_dependency,
)
from headerguard.api.metrics import PULL_REQUEST_COUNT
from headerguard.api.schemas import PullRequestRequest, PullRequestResponse
from headerguard.exceptions import PublishError
from headerguard.fixes.builder import build_fixes
from headerguard.utils.url_normalizer import normalize_url
from headerguard.utils.validation import is_valid_github_token, is_valid_repository_url

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/github",
    tags=["github"],
    dependencies=[Depends(github_rate_limit_dependency)],
)


@router.post("/pull-request", response_model=PullRequestResponse)
async def create_pull_request(
    request: PullRequestRequest,
    analyzer: SecurityHeaderAnalyzer = Depends(get_analyzer),
    publisher_factory=Depends(get_publisher_factory),
) -> PullRequestResponse:
    """
    Analyze a site and open a pull request that fixes its headers.

    Existing configuration files in the repository are read first so the
    patches update them in place where the platform allows it. When no
    platforms are given, the one matching the detected server is used.
    """
    if not is_valid_github_token(request.github_token):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid GitHub token format",
        )
    if not is_valid_repository_url(request.repository_url):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid GitHub repository URL",
        )

    if request.headers is not None:
        result = analyzer.analyze_headers(
            normalize_url(request.url), request.headers, platforms=[]
        )
    else:
        result = await analyzer.analyze(request.url, platforms=[])

    fixes = build_fixes(result.evaluated())
    if not fixes:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No security header fixes needed",
        )

    platforms = request.platforms or [suggest_platform(result.framework)]

    try:
        async with publisher_factory(request.github_token) as publisher:
            published = await publisher.publish_fixes(
                request.repository_url,
                fixes,
                platforms,
                url=result.url,
                score=result.score,
                grade=result.grade,
                title=request.title,
            )
    except PublishError:
        PULL_REQUEST_COUNT.labels(result="failed").inc()
        raise

    PULL_REQUEST_COUNT.labels(result="created").inc()
    logger.info(
        f"Pull request for {result.url} opened on {request.repository_url}: "
        f"{published.pull_request_url}"
    )
    return PullRequestResponse(
        **published.to_dict(), score=result.score, grade=result.grade
    )
