"""Aggregate per-header scores into a 0-100 score and a letter grade."""

import math
from collections.abc import Iterable

from headerguard.analyzers.models import EvaluatedHeader
from headerguard.analyzers.rules import MAX_SCORE

# Inclusive lower bounds, highest first
GRADE_THRESHOLDS = (
    (95, "A+"),
    (85, "A"),
    (75, "B"),
    (65, "C"),
    (50, "D"),
)
FAILING_GRADE = "F"


def calculate_score(
    evaluated: Iterable[EvaluatedHeader], max_score: float = MAX_SCORE
) -> int:
    """
    Normalize the summed header scores to an integer in 0..100.

    Halves round up, so 84.5 becomes 85.
    """
    raw_score = sum(header.score for header in evaluated)
    if max_score <= 0:
        return 0

    percentage = 100 * raw_score / max_score
    # Guard against float noise such as 84.49999999 for an exact half
    score = math.floor(round(percentage, 6) + 0.5)
    return max(0, min(100, score))


def calculate_grade(score: int | float) -> str:
    """Map a 0-100 score to A+..F."""
    for threshold, grade in GRADE_THRESHOLDS:
        if score >= threshold:
            return grade
    return FAILING_GRADE
