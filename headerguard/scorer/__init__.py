"""Scoring, grading and categorization of evaluated headers."""

from headerguard.scorer.categorizer import categorize, recommend
from headerguard.scorer.grading import calculate_grade, calculate_score

__all__ = ["calculate_grade", "calculate_score", "categorize", "recommend"]
