# Copyright (c) Syntropy Systems
"""Pydantic models for test results and verdicts."""

from __future__ import annotations

from enum import Enum
from typing import ClassVar, Optional

from pydantic import Field

from .base import CiplanBaseModel


class Verdict(str, Enum):
    """Overall outcome of a test pass."""

    PASS = "Pass"
    FAIL = "Fail"


class TestRunResult(CiplanBaseModel):
    """Summary of a single test invocation."""

    __test__: ClassVar[bool] = False

    label: str
    passed: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0)
    allow_empty_result: bool = False
    error: Optional[str] = None


class AggregateOutcome(CiplanBaseModel):
    """Verdict over every invocation, with all violations in order."""

    verdict: Verdict
    reasons: tuple[str, ...] = ()

    @property
    def passed(self) -> bool:
        return self.verdict is Verdict.PASS

    @property
    def failure_reason(self) -> str | None:
        """First violation encountered, if any."""
        return self.reasons[0] if self.reasons else None
