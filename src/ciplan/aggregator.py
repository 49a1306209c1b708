# Copyright (c) Syntropy Systems
"""Reduce partitioned test results to one verdict."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ciplan.config import CiplanConfig
from ciplan.errors import AggregationFailedError
from ciplan.models.result import AggregateOutcome, TestRunResult, Verdict

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ciplan.variables import VariableStore

logger = logging.getLogger(__name__)


def check_result(result: TestRunResult) -> str | None:
    """Return why a single result fails, or None if it passes.

    Failures are never tolerated. Zero executed tests also fails unless the
    run allows an empty result, which catches broken discovery or tagging.
    """
    if result.error is not None:
        return f"{result.label}: test run failed: {result.error}"
    if result.failed > 0:
        return f"{result.label}: {result.failed} test(s) failed"
    if result.passed == 0 and not result.allow_empty_result:
        return f"{result.label}: no tests were executed"
    return None


def aggregate(
    results: Iterable[TestRunResult],
    *,
    variables: VariableStore | None = None,
    config: CiplanConfig | None = None,
) -> AggregateOutcome:
    """Reduce every result to one verdict.

    All results are checked; every violation is kept in order. On a full
    pass the tests-passed build variable is set to "true". It is never set
    on failure.
    """
    cfg = config or CiplanConfig()
    reasons: list[str] = []
    count = 0

    for result in results:
        count += 1
        reason = check_result(result)
        if reason is None:
            logger.debug(
                "%s: %d passed, %d failed", result.label, result.passed, result.failed
            )
            continue
        logger.warning(reason)
        reasons.append(reason)

    if count == 0:
        reasons.append("no test runs were recorded")

    if reasons:
        logger.error("%d of %d test run(s) failed", len(reasons), count)
        return AggregateOutcome(verdict=Verdict.FAIL, reasons=tuple(reasons))

    logger.info("All %d test run(s) passed", count)
    if variables is not None:
        variables.set(cfg.tests_passed_variable, "true")
    return AggregateOutcome(verdict=Verdict.PASS)


def ensure_passed(outcome: AggregateOutcome) -> None:
    """Raise AggregationFailedError listing every violation."""
    if not outcome.passed:
        raise AggregationFailedError(outcome.reasons)
