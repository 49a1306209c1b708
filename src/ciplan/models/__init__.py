# Copyright (c) Syntropy Systems
"""Pydantic models for ciplan."""

from ciplan.models.build import BuildClassification, BuildReason, EnvironmentSignals
from ciplan.models.packaging import PackagePlan, PackageType
from ciplan.models.plan import (
    ExperimentalFeatures,
    Partition,
    Platform,
    Tag,
    TestInvocationSpec,
    TestTagSet,
)
from ciplan.models.result import AggregateOutcome, TestRunResult, Verdict

__all__ = [
    "AggregateOutcome",
    "BuildClassification",
    "BuildReason",
    "EnvironmentSignals",
    "ExperimentalFeatures",
    "PackagePlan",
    "PackageType",
    "Partition",
    "Platform",
    "Tag",
    "TestInvocationSpec",
    "TestRunResult",
    "TestTagSet",
    "Verdict",
]
