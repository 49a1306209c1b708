# Copyright (c) Syntropy Systems
"""Tests for result aggregation."""

import pytest

from ciplan.aggregator import aggregate, check_result, ensure_passed
from ciplan.config import CiplanConfig
from ciplan.errors import AggregationFailedError
from ciplan.models.result import TestRunResult, Verdict
from ciplan.variables import MemoryVariables


def _result(label="run", passed=0, failed=0, allow_empty=False, error=None):
    return TestRunResult(
        label=label,
        passed=passed,
        failed=failed,
        allow_empty_result=allow_empty,
        error=error,
    )


class TestCheckResult:
    """Tests for the per-result rules."""

    def test_passing_run(self):
        assert check_result(_result(passed=12)) is None

    def test_zero_passed_not_allowed(self):
        """Zero executed tests fails when empty is not allowed."""
        assert check_result(_result(label="base")) == "base: no tests were executed"

    def test_zero_passed_allowed(self):
        """Experimental runs may execute nothing."""
        assert check_result(_result(allow_empty=True)) is None

    def test_failures_never_tolerated(self):
        """Failures fail even when empty results are allowed."""
        reason = check_result(_result(label="exp", passed=10, failed=2, allow_empty=True))

        assert reason == "exp: 2 test(s) failed"

    def test_error_always_fails(self):
        """A crashed run fails regardless of counts."""
        reason = check_result(_result(passed=5, allow_empty=True, error="exit 3"))

        assert reason is not None
        assert "exit 3" in reason


class TestAggregate:
    """Tests for the overall verdict."""

    def test_pass_with_empty_experimental_run(self):
        outcome = aggregate(
            [
                _result(passed=12),
                _result(allow_empty=True),
            ]
        )

        assert outcome.verdict is Verdict.PASS
        assert outcome.failure_reason is None

    def test_fail_on_zero_passed(self):
        outcome = aggregate([_result()])

        assert outcome.verdict is Verdict.FAIL

    def test_fail_on_failures_with_allow_empty(self):
        outcome = aggregate([_result(passed=10, failed=2, allow_empty=True)])

        assert outcome.verdict is Verdict.FAIL

    def test_all_reasons_collected_in_order(self):
        """Evaluation continues past the first violation."""
        outcome = aggregate(
            [
                _result(label="a", failed=1, passed=3),
                _result(label="b", passed=4),
                _result(label="c"),
                _result(label="d", error="results file not found"),
            ]
        )

        assert outcome.verdict is Verdict.FAIL
        assert len(outcome.reasons) == 3
        assert outcome.failure_reason == "a: 1 test(s) failed"
        assert outcome.reasons[1] == "c: no tests were executed"
        assert outcome.reasons[2].startswith("d:")

    def test_no_results_fails(self):
        """Nothing recorded is not a pass."""
        outcome = aggregate([])

        assert outcome.verdict is Verdict.FAIL
        assert outcome.reasons == ("no test runs were recorded",)


class TestCompletionFlag:
    """Tests for the tests-passed build variable."""

    def test_set_on_pass(self):
        variables = MemoryVariables()

        _ = aggregate([_result(passed=1)], variables=variables)

        assert variables.get("CIPLAN_TESTS_PASSED") == "true"

    def test_not_set_on_fail(self):
        variables = MemoryVariables()

        _ = aggregate(
            [_result(passed=1), _result(passed=1, failed=1)],
            variables=variables,
        )

        assert variables.values == {}

    def test_custom_name(self):
        variables = MemoryVariables()
        config = CiplanConfig(tests_passed_variable="TestPassed")

        _ = aggregate([_result(passed=1)], variables=variables, config=config)

        assert variables.values == {"TestPassed": "true"}


class TestEnsurePassed:
    """Tests for raising AggregationFailed."""

    def test_pass_does_not_raise(self):
        ensure_passed(aggregate([_result(passed=1)]))

    def test_fail_carries_every_reason(self):
        outcome = aggregate([_result(label="a"), _result(label="b", failed=1)])

        with pytest.raises(AggregationFailedError) as exc_info:
            ensure_passed(outcome)

        assert exc_info.value.reasons == list(outcome.reasons)
        assert "a: no tests were executed" in str(exc_info.value)
        assert "b: 1 test(s) failed" in str(exc_info.value)
