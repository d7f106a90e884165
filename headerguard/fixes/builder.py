"""Fix-set builder: turn actionable evaluated headers into SecurityFix records."""

import logging
from collections.abc import Iterable

from headerguard.analyzers.models import EvaluatedHeader
from headerguard.fixes.catalog import get_canonical_fix, header_priority
from headerguard.fixes.models import FixAction, SecurityFix

logger = logging.getLogger(__name__)


def build_fixes(evaluated: Iterable[EvaluatedHeader]) -> list[SecurityFix]:
    """
    Build the fix set for one analysis.

    Only missing or misconfigured headers produce a fix. Headers without a
    canonical fix are skipped. The result is ordered by severity (highest
    first) and then by the fixed header priority table.
    """
    fixes: list[SecurityFix] = []
    seen: set[str] = set()

    for header in evaluated:
        if not header.needs_fix:
            continue

        canonical = get_canonical_fix(header.name)
        if canonical is None:
            logger.debug(f"No canonical fix for {header.name}, skipping")
            continue
        if canonical.header in seen:
            continue
        seen.add(canonical.header)

        action = FixAction.UPDATE if header.present else FixAction.ADD
        fixes.append(
            SecurityFix(
                header=canonical.header,
                value=canonical.value,
                description=(
                    canonical.update_description
                    if action is FixAction.UPDATE
                    else canonical.add_description
                ),
                action=action,
                severity=header.severity,
                reference=canonical.reference,
            )
        )

    return sorted(
        fixes, key=lambda fix: (-fix.severity.rank, header_priority(fix.header))
    )
