"""Analysis engine: turns one header snapshot into an AnalysisResult."""

import logging
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from typing import Protocol, runtime_checkable

from headerguard.analyzers.evaluator import evaluate_all, normalize_headers
from headerguard.analyzers.framework import detect_framework
from headerguard.analyzers.models import AnalysisResult, HeaderRule
from headerguard.analyzers.rules import RULES
from headerguard.fixes.generators import DEFAULT_PLATFORMS, generate_fixes
from headerguard.fixes.models import FrameworkConfig, Platform
from headerguard.scorer.categorizer import categorize, recommend
from headerguard.scorer.grading import calculate_grade, calculate_score
from headerguard.utils.url_normalizer import normalize_url

logger = logging.getLogger(__name__)


@runtime_checkable
class HeaderSource(Protocol):
    """Anything that can fetch a URL's response headers."""

    async def fetch(self, url: str) -> dict[str, str]:
        """Return response headers keyed by lower-cased name."""
        ...


class SecurityHeaderAnalyzer:
    """
    Scores a site's security headers and renders remediation patches.

    The analyzer holds no mutable state: the rule table is shared read-only,
    so one instance can serve concurrent analyses. Fetching headers is
    delegated to the injected ``header_source``; retries, caching and rate
    limiting belong to the caller.
    """

    def __init__(
        self,
        header_source: HeaderSource | None = None,
        rules: Iterable[HeaderRule] = RULES,
        platforms: Iterable[str | Platform] = DEFAULT_PLATFORMS,
    ):
        self.header_source = header_source
        self.rules = tuple(rules)
        self.max_score = sum(rule.weight for rule in self.rules)
        self.platforms = tuple(platforms)

    async def analyze(
        self,
        url: str,
        platforms: Iterable[str | Platform] | None = None,
        existing_configs: Mapping[str, FrameworkConfig | str] | None = None,
    ) -> AnalysisResult:
        """
        Fetch headers for ``url`` and analyze them.

        Raises:
            InvalidURLError: If the URL is malformed or targets a private network.
            HeaderFetchError: If the header source fails; never retried here.
        """
        if self.header_source is None:
            raise RuntimeError("SecurityHeaderAnalyzer has no header source configured")

        normalized_url = normalize_url(url)
        logger.info(f"Starting header analysis of URL: {normalized_url}")

        headers = await self.header_source.fetch(normalized_url)
        return self.analyze_headers(
            normalized_url,
            headers,
            platforms=platforms,
            existing_configs=existing_configs,
        )

    def analyze_headers(
        self,
        url: str,
        headers: Mapping[str, str] | None,
        platforms: Iterable[str | Platform] | None = None,
        existing_configs: Mapping[str, FrameworkConfig | str] | None = None,
    ) -> AnalysisResult:
        """
        Analyze an already-fetched header map.

        Pure apart from the timestamp. An empty or missing map means every
        header is absent; it is not an error.
        """
        normalized = normalize_headers(headers)
        evaluated = evaluate_all(normalized, self.rules)

        score = calculate_score(evaluated, self.max_score)
        grade = calculate_grade(score)
        framework = detect_framework(normalized)

        result = AnalysisResult(
            url=url,
            timestamp=datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            score=score,
            grade=grade,
            headers=categorize(evaluated),
            recommendations=tuple(recommend(evaluated)),
            fixes=generate_fixes(
                evaluated,
                platforms if platforms is not None else self.platforms,
                existing_configs,
            ),
            framework=framework,
        )

        logger.info(
            f"Analysis complete for {url}: score={score} grade={grade} "
            f"missing={len(result.headers.missing)} "
            f"misconfigured={len(result.headers.misconfigured)}"
        )
        return result


# Detected server/framework -> platform whose patch fits it best
FRAMEWORK_PLATFORMS = {
    "nginx": Platform.NGINX,
    "apache": Platform.APACHE,
    "cloudflare": Platform.CLOUDFLARE,
    "express.js": Platform.EXPRESS,
    "next.js": Platform.NEXTJS,
    "vercel": Platform.VERCEL,
    "netlify": Platform.NETLIFY,
    "aws-cloudfront": Platform.AMPLIFY,
}


def suggest_platform(framework: str | None) -> Platform:
    """Platform to target for a detected framework (generic when unknown)."""
    return FRAMEWORK_PLATFORMS.get((framework or "").lower(), Platform.GENERIC)
