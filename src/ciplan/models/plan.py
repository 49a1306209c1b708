# Copyright (c) Syntropy Systems
"""Pydantic models for test plans."""

from __future__ import annotations

import sys
from enum import Enum
from typing import ClassVar, Optional

from pydantic import Field, model_validator
from typing_extensions import Self, TypeAlias

from .base import CiplanBaseModel

# Ordered mapping: feature name -> test files. An empty tuple means the
# whole corpus runs with the feature enabled, not that nothing runs.
ExperimentalFeatures: TypeAlias = dict[str, tuple[str, ...]]


class Tag(str, Enum):
    """Test category tags understood by the test runner."""

    CI = "CI"
    FEATURE = "Feature"
    SCENARIO = "Scenario"
    SLOW = "Slow"
    REQUIRE_ADMIN_ON_WINDOWS = "RequireAdminOnWindows"
    REQUIRE_SUDO_ON_UNIX = "RequireSudoOnUnix"


class Platform(str, Enum):
    """Host operating system family."""

    WINDOWS = "windows"
    LINUX = "linux"
    MACOS = "macos"

    @classmethod
    def current(cls) -> Platform:
        """Detect the platform of the running interpreter."""
        if sys.platform.startswith("win"):
            return cls.WINDOWS
        if sys.platform == "darwin":
            return cls.MACOS
        return cls.LINUX

    @property
    def is_windows(self) -> bool:
        return self is Platform.WINDOWS

    @property
    def privilege_tag(self) -> Tag:
        """Tag marking tests that need admin (Windows) or sudo (Unix)."""
        if self.is_windows:
            return Tag.REQUIRE_ADMIN_ON_WINDOWS
        return Tag.REQUIRE_SUDO_ON_UNIX


class Partition(str, Enum):
    """Privilege partition a test invocation runs in."""

    UNELEVATED = "unelevated"
    ELEVATED = "elevated"

    def results_label(self, platform: Platform) -> str:
        """Base name of the results file for this partition."""
        if platform.is_windows:
            suffix = "Admin" if self is Partition.ELEVATED else "NonAdmin"
        else:
            suffix = "Sudo" if self is Partition.ELEVATED else "NonSudo"
        return f"TestsResults{suffix}"


class TestTagSet(CiplanBaseModel):
    """Include/exclude tag filter for one test invocation."""

    __test__: ClassVar[bool] = False

    include: frozenset[Tag] = Field(default_factory=frozenset)
    exclude: frozenset[Tag] = Field(default_factory=frozenset)

    @model_validator(mode="after")
    def _check_disjoint(self) -> Self:
        overlap = self.include & self.exclude
        if overlap:
            names = ", ".join(sorted(tag.value for tag in overlap))
            msg = f"Tags cannot be both included and excluded: {names}"
            raise ValueError(msg)
        return self

    def include_names(self) -> list[str]:
        return sorted(tag.value for tag in self.include)

    def exclude_names(self) -> list[str]:
        return sorted(tag.value for tag in self.exclude)


class TestInvocationSpec(CiplanBaseModel):
    """One planned run of the test corpus.

    ``paths`` of ``None`` means every discoverable test; otherwise the run is
    scoped to exactly those files.
    """

    __test__: ClassVar[bool] = False

    tag_set: TestTagSet
    output_label: str
    partition: Partition
    experimental_feature: Optional[str] = None
    paths: Optional[tuple[str, ...]] = None

    @property
    def allow_empty_result(self) -> bool:
        """Experimental sub-runs may legitimately match no tests."""
        return self.experimental_feature is not None

    @property
    def is_elevated(self) -> bool:
        return self.partition is Partition.ELEVATED
