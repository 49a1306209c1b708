# Copyright (c) Syntropy Systems
"""Test result file parsing.

Understands NUnit 2.5 (as written by Pester), NUnit 3 and JUnit XML.
"""
from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import TYPE_CHECKING, NamedTuple

from ciplan.errors import TestPartitionFailedError

if TYPE_CHECKING:
    from pathlib import Path

_NUNIT2_NOT_PASSED = (
    "errors",
    "failures",
    "not-run",
    "inconclusive",
    "ignored",
    "skipped",
    "invalid",
)


class ResultCounts(NamedTuple):
    passed: int
    failed: int


def _int_attr(element: ET.Element, name: str) -> int:
    value = element.get(name)
    if value is None or value == "":
        return 0
    try:
        return int(float(value))
    except ValueError:
        msg = f"Non-numeric '{name}' attribute on <{element.tag}>: {value!r}"
        raise ValueError(msg) from None


def _nunit2_counts(root: ET.Element) -> ResultCounts:
    total = _int_attr(root, "total")
    not_passed = sum(_int_attr(root, name) for name in _NUNIT2_NOT_PASSED)
    failed = _int_attr(root, "failures") + _int_attr(root, "errors")
    return ResultCounts(passed=max(total - not_passed, 0), failed=failed)


def _nunit3_counts(root: ET.Element) -> ResultCounts:
    return ResultCounts(
        passed=_int_attr(root, "passed"),
        failed=_int_attr(root, "failed"),
    )


def _junit_suite_counts(suite: ET.Element) -> ResultCounts:
    tests = _int_attr(suite, "tests")
    failures = _int_attr(suite, "failures")
    errors = _int_attr(suite, "errors")
    skipped = _int_attr(suite, "skipped") + _int_attr(suite, "disabled")
    return ResultCounts(
        passed=max(tests - failures - errors - skipped, 0),
        failed=failures + errors,
    )


def _junit_counts(root: ET.Element) -> ResultCounts:
    if root.tag == "testsuite":
        return _junit_suite_counts(root)
    if root.get("tests") is not None:
        return _junit_suite_counts(root)
    passed = 0
    failed = 0
    for suite in root.iter("testsuite"):
        counts = _junit_suite_counts(suite)
        passed += counts.passed
        failed += counts.failed
    return ResultCounts(passed=passed, failed=failed)


def parse_result_xml(text: str | bytes) -> ResultCounts:
    """Count passed and failed tests in a result document.

    Raises ValueError for malformed or unrecognised documents.
    """
    try:
        root = ET.fromstring(text)  # noqa: S314
    except ET.ParseError as e:
        msg = f"Malformed result XML: {e}"
        raise ValueError(msg) from e

    if root.tag == "test-results":
        return _nunit2_counts(root)
    if root.tag == "test-run":
        return _nunit3_counts(root)
    if root.tag in ("testsuites", "testsuite"):
        return _junit_counts(root)

    msg = f"Unrecognised result format: <{root.tag}>"
    raise ValueError(msg)


def read_result_file(path: Path, label: str | None = None) -> ResultCounts:
    """Read counts from a result file.

    Raises TestPartitionFailedError if the file is missing or unreadable.
    """
    name = label or path.stem
    if not path.exists():
        raise TestPartitionFailedError(name, f"results file not found: {path}")
    try:
        return parse_result_xml(path.read_bytes())
    except (OSError, ValueError) as e:
        raise TestPartitionFailedError(name, str(e)) from e
