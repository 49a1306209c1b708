# Copyright (c) Syntropy Systems
"""Sequential execution of planned test invocations."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ciplan.aggregator import aggregate
from ciplan.errors import TestPartitionFailedError
from ciplan.models.result import TestRunResult
from ciplan.planner import DEFAULT_PARTITIONS, plan

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from ciplan.config import CiplanConfig
    from ciplan.engine import TestEngine
    from ciplan.models.build import BuildClassification
    from ciplan.models.plan import Partition, Platform, TestInvocationSpec
    from ciplan.models.result import AggregateOutcome
    from ciplan.planner import ArtifactLocator
    from ciplan.variables import VariableStore

logger = logging.getLogger(__name__)


def run_plan(
    specs: Sequence[TestInvocationSpec],
    engine: TestEngine,
) -> list[TestRunResult]:
    """Run every spec in order, one at a time.

    A failing invocation is recorded and the remaining ones still run.
    """
    results: list[TestRunResult] = []
    for index, spec in enumerate(specs, start=1):
        logger.info("[%d/%d] %s", index, len(specs), spec.output_label)
        try:
            result = engine.run(spec)
        except TestPartitionFailedError as e:
            logger.error("Test partition failed: %s", e)
            result = TestRunResult(
                label=spec.output_label,
                allow_empty_result=spec.allow_empty_result,
                error=e.detail,
            )
        results.append(result)
    return results


def run_tests(
    classification: BuildClassification,
    platform: Platform,
    engine: TestEngine,
    *,
    partitions: Iterable[Partition] = DEFAULT_PARTITIONS,
    experimental_features: Mapping[str, Sequence[str]] | None = None,
    locate_artifact: ArtifactLocator,
    variables: VariableStore | None = None,
    config: CiplanConfig | None = None,
) -> tuple[list[TestRunResult], AggregateOutcome]:
    """Plan, run and aggregate a full test pass.

    Raises MissingArtifactError before anything runs if the test host is
    absent.
    """
    specs = plan(
        classification,
        platform,
        partitions,
        experimental_features=experimental_features,
        locate_artifact=locate_artifact,
    )
    results = run_plan(specs, engine)
    outcome = aggregate(results, variables=variables, config=config)
    return results, outcome
