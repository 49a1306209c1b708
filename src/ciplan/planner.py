# Copyright (c) Syntropy Systems
"""Test partition planning."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Optional

from ciplan.errors import MissingArtifactError
from ciplan.models.plan import (
    ExperimentalFeatures,
    Partition,
    Platform,
    Tag,
    TestInvocationSpec,
    TestTagSet,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from ciplan.models.build import BuildClassification

logger = logging.getLogger(__name__)

ArtifactLocator = Callable[[], Optional[Path]]

DEFAULT_PARTITIONS = (Partition.UNELEVATED, Partition.ELEVATED)

_DAILY_INCLUDE = frozenset({Tag.CI, Tag.FEATURE, Tag.SCENARIO})
_STANDARD_INCLUDE = frozenset({Tag.CI})
_STANDARD_EXCLUDE = frozenset({Tag.SLOW, Tag.FEATURE, Tag.SCENARIO})


def baseline_tags(classification: BuildClassification) -> TestTagSet:
    """Tag filter before privilege partitioning."""
    if classification.is_daily:
        return TestTagSet(include=_DAILY_INCLUDE)
    return TestTagSet(include=_STANDARD_INCLUDE, exclude=_STANDARD_EXCLUDE)


def partition_tags(
    baseline: TestTagSet,
    platform: Platform,
    partition: Partition,
) -> TestTagSet:
    """Split a baseline filter by privilege.

    The unelevated run skips privileged tests; the elevated run selects
    only them, keeping the baseline exclusions.
    """
    privileged = platform.privilege_tag
    if partition is Partition.ELEVATED:
        return TestTagSet(
            include=frozenset({privileged}),
            exclude=baseline.exclude - {privileged},
        )
    return TestTagSet(
        include=baseline.include - {privileged},
        exclude=baseline.exclude | {privileged},
    )


def normalize_features(
    features: Mapping[str, Sequence[str]] | None,
) -> ExperimentalFeatures:
    """Copy a feature mapping into an ordered mapping of tuples."""
    if not features:
        return {}
    return {name: tuple(files) for name, files in features.items()}


def _check_artifact(locate_artifact: ArtifactLocator) -> Path:
    path = locate_artifact()
    if path is None:
        raise MissingArtifactError
    if not path.exists():
        raise MissingArtifactError(path)
    return path


def plan(
    classification: BuildClassification,
    platform: Platform,
    partitions: Iterable[Partition] = DEFAULT_PARTITIONS,
    *,
    experimental_features: Mapping[str, Sequence[str]] | None = None,
    locate_artifact: ArtifactLocator,
) -> list[TestInvocationSpec]:
    """Plan every test invocation for this run, in execution order.

    Each partition contributes its baseline run followed by one sub-run per
    experimental feature. A feature mapped to no files runs the whole
    corpus; otherwise it runs exactly the listed files.

    Raises MissingArtifactError if the test host is absent.
    """
    host = _check_artifact(locate_artifact)
    logger.debug("Test host: %s", host)

    features = normalize_features(experimental_features)
    baseline = baseline_tags(classification)
    specs: list[TestInvocationSpec] = []

    for partition in partitions:
        tag_set = partition_tags(baseline, platform, partition)
        label = partition.results_label(platform)

        specs.append(
            TestInvocationSpec(
                tag_set=tag_set,
                output_label=label,
                partition=partition,
            )
        )

        for feature, files in features.items():
            specs.append(
                TestInvocationSpec(
                    tag_set=tag_set,
                    output_label=f"{label}-{feature}",
                    partition=partition,
                    experimental_feature=feature,
                    paths=files or None,
                )
            )

    logger.info(
        "Planned %d test invocation(s) for %s %s build",
        len(specs),
        platform.value,
        classification.label,
    )
    return specs
