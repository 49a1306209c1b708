# Copyright (c) Syntropy Systems
"""Exception types for ciplan."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path


class CiplanError(Exception):
    """Base class for ciplan errors."""


class ConfigError(CiplanError):
    """Invalid configuration file contents."""


class ClassificationAmbiguousError(CiplanError):
    """Trigger metadata could not be interpreted.

    Never escapes ``classify``; the run is treated as a standard build.
    """


class MissingArtifactError(CiplanError):
    """The compiled test host required to run tests is absent."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path
        if path is None:
            msg = "Test host artifact not found: no path configured"
        else:
            msg = f"Test host artifact not found: {path}"
        super().__init__(msg)


class TestPartitionFailedError(CiplanError):
    """A single test invocation crashed or produced no readable results."""

    __test__ = False

    def __init__(self, label: str, detail: str) -> None:
        self.label = label
        self.detail = detail
        super().__init__(f"{label}: {detail}")


class AggregationFailedError(CiplanError):
    """One or more test invocations violated the pass rules."""

    def __init__(self, reasons: Sequence[str]) -> None:
        self.reasons = list(reasons)
        lines = "\n".join(f"  - {reason}" for reason in self.reasons)
        super().__init__(f"{len(self.reasons)} test run(s) failed:\n{lines}")
