"""Partition evaluated headers and rank remediation recommendations."""

from collections.abc import Iterable

from headerguard.analyzers.models import EvaluatedHeader, HeaderBuckets, Recommendation


def categorize(evaluated: Iterable[EvaluatedHeader]) -> HeaderBuckets:
    """
    Split headers into found / missing / misconfigured.

    Missing means absent; misconfigured means present with less than full
    credit. Every header lands in exactly one bucket.
    """
    found: list[EvaluatedHeader] = []
    missing: list[EvaluatedHeader] = []
    misconfigured: list[EvaluatedHeader] = []

    for header in evaluated:
        if header.is_missing:
            missing.append(header)
        elif header.is_misconfigured:
            misconfigured.append(header)
        else:
            found.append(header)

    return HeaderBuckets(
        found=tuple(found),
        missing=tuple(missing),
        misconfigured=tuple(misconfigured),
    )


def recommend(evaluated: Iterable[EvaluatedHeader]) -> list[Recommendation]:
    """Recommendations for actionable headers, highest priority first.

    The sort is stable, so equal priorities keep rule-table order.
    """
    recommendations = [
        Recommendation(
            header=header.name,
            severity=header.severity,
            issue="Misconfigured" if header.present else "Missing",
            solution=header.recommendation,
            priority=header.severity.priority,
        )
        for header in evaluated
        if header.needs_fix
    ]
    return sorted(recommendations, key=lambda rec: rec.priority, reverse=True)
