# Copyright (c) Syntropy Systems
"""Pydantic models for build classification."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from .base import CiplanBaseModel


class BuildReason(str, Enum):
    """Why a run was (or was not) classified as a daily build."""

    SCHEDULED_TRIGGER = "ScheduledTrigger"
    COMMIT_TAG = "CommitTag"
    MANUAL_OVERRIDE = "ManualOverride"
    NONE = "None"


class EnvironmentSignals(CiplanBaseModel):
    """Pipeline signals that drive classification."""

    scheduled: bool = False
    force_feature: bool = False
    commit_id: Optional[str] = None


class BuildClassification(CiplanBaseModel):
    """Daily/full vs. standard CI build decision."""

    is_daily: bool
    reason: BuildReason = BuildReason.NONE

    @classmethod
    def standard(cls) -> BuildClassification:
        """Return the non-daily classification."""
        return cls(is_daily=False, reason=BuildReason.NONE)

    @property
    def label(self) -> str:
        """Short human label for the build type."""
        return "daily" if self.is_daily else "ci"
