# Copyright (c) Syntropy Systems
"""Release package planning for the packaging stage."""
from __future__ import annotations

from typing import TYPE_CHECKING

from ciplan.models.packaging import PackagePlan, PackageType
from ciplan.models.plan import Platform

if TYPE_CHECKING:
    from ciplan.models.build import BuildClassification
    from ciplan.models.result import AggregateOutcome

_TYPES = {
    Platform.WINDOWS: {PackageType.MSI, PackageType.ZIP, PackageType.NUPKG},
    Platform.LINUX: {PackageType.TAR},
    Platform.MACOS: {PackageType.TAR},
}
_DAILY_TYPES = {
    Platform.WINDOWS: set(),
    Platform.LINUX: {PackageType.TAR_ARM},
    Platform.MACOS: set(),
}

_RUNTIMES = {
    Platform.WINDOWS: {"win-x64"},
    Platform.LINUX: {"linux-x64"},
    Platform.MACOS: {"osx-x64"},
}
_DAILY_RUNTIMES = {
    Platform.WINDOWS: {"win-x86", "win-arm64"},
    Platform.LINUX: {"linux-arm", "linux-arm64"},
    Platform.MACOS: {"osx-arm64"},
}


def release_tag_for(
    classification: BuildClassification,
    base_tag: str,
    build_id: str | None,
) -> str:
    """Release tag: ``<base>-daily.<id>`` or ``<base>-ci.<id>``."""
    if not build_id:
        return base_tag
    return f"{base_tag}-{classification.label}.{build_id}"


def should_publish(
    classification: BuildClassification,
    outcome: AggregateOutcome | None,
) -> bool:
    """Only daily builds with a full test pass reach the package feed."""
    return classification.is_daily and outcome is not None and outcome.passed


def plan_packages(
    classification: BuildClassification,
    platform: Platform,
    *,
    release_tag: str,
    build_id: str | None = None,
    outcome: AggregateOutcome | None = None,
) -> PackagePlan:
    """Derive what the packaging stage builds on this host."""
    types = set(_TYPES[platform])
    runtimes = set(_RUNTIMES[platform])
    if classification.is_daily:
        types |= _DAILY_TYPES[platform]
        runtimes |= _DAILY_RUNTIMES[platform]

    return PackagePlan(
        types=frozenset(types),
        release_tag=release_tag_for(classification, release_tag, build_id),
        platform_runtimes=frozenset(runtimes),
        publish=should_publish(classification, outcome),
    )
