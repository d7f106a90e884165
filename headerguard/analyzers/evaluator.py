"""Header evaluator: apply one rule to one observed header map."""

import logging
import re
from collections.abc import Iterable, Mapping

from headerguard.analyzers.models import EvaluatedHeader, HeaderRule
from headerguard.analyzers.rules import RULES

logger = logging.getLogger(__name__)

OPTIONAL_ABSENT_CREDIT = 0.3
MISMATCH_CREDIT = 0.5


def normalize_headers(headers: Mapping[str, str] | None) -> dict[str, str]:
    """Lower-case header names; None becomes an empty map."""
    if not headers:
        return {}
    return {str(key).lower(): str(value) for key, value in headers.items()}


def evaluate(rule: HeaderRule, headers: Mapping[str, str]) -> EvaluatedHeader:
    """
    Score one header against its rule.

    Absent required headers score 0, absent optional headers earn 30% of
    the weight. A present header that fails its validator or expected value
    still earns half the weight; present-but-wrong beats absent.
    """
    value = normalize_headers(headers).get(rule.key)
    present = bool(value)

    score = 0.0
    recommendation = rule.recommendation

    if present:
        if rule.validator is not None:
            if _safe_validate(rule, value):
                score = rule.weight
            else:
                score = rule.weight * MISMATCH_CREDIT
                recommendation = (
                    f'{rule.recommendation} (Current value may be insecure: "{value}")'
                )
        elif isinstance(rule.expected_value, str):
            score = (
                rule.weight
                if value == rule.expected_value
                else rule.weight * MISMATCH_CREDIT
            )
        elif isinstance(rule.expected_value, re.Pattern):
            score = (
                rule.weight
                if rule.expected_value.search(value)
                else rule.weight * MISMATCH_CREDIT
            )
        else:
            score = rule.weight
    elif not rule.required:
        score = rule.weight * OPTIONAL_ABSENT_CREDIT
        recommendation = f"Optional: {rule.recommendation}"

    return EvaluatedHeader(
        name=rule.name,
        present=present,
        value=value if present else None,
        score=score,
        weight=rule.weight,
        severity=rule.severity,
        recommendation=recommendation,
        description=rule.description,
    )


def evaluate_all(
    headers: Mapping[str, str] | None, rules: Iterable[HeaderRule] = RULES
) -> list[EvaluatedHeader]:
    """Evaluate every rule, in rule-table order."""
    normalized = normalize_headers(headers)
    return [evaluate(rule, normalized) for rule in rules]


def _safe_validate(rule: HeaderRule, value: str) -> bool:
    # A validator that blows up on odd input counts as a failed check
    try:
        return bool(rule.validator(value))
    except Exception as e:
        logger.warning(f"Validator for {rule.name} failed on {value!r}: {e}")
        return False
