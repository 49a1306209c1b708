# Copyright (c) Syntropy Systems
"""ciplan run command."""

from typing import List, Optional

import typer
from rich.console import Console

from ciplan.cli.common import (
    format_reason,
    load_config_or_exit,
    resolve_classification,
    resolve_partitions,
    resolve_platform,
    show_results,
    show_verdict,
)
from ciplan.engine import CommandTestEngine
from ciplan.errors import MissingArtifactError
from ciplan.models.plan import Partition, Platform
from ciplan.pipeline import run_tests
from ciplan.variables import detect_variables

console = Console()


def run(
    platform: Optional[Platform] = typer.Option(
        None,
        "--platform", "-p",
        case_sensitive=False,
        help="Target platform (default: this host)",
    ),
    partition: Optional[List[Partition]] = typer.Option(
        None,
        "--partition",
        case_sensitive=False,
        help="Privilege partition to run (repeatable; default: both)",
    ),
    daily: Optional[bool] = typer.Option(
        None,
        "--daily/--no-daily",
        help="Force the build type instead of classifying the environment",
    ),
) -> None:
    """Classify, plan and run the test partitions, then gate on the verdict.

    Invocations run one after another. A failing partition does not stop
    the ones after it; every problem is reported at the end.
    """
    config = load_config_or_exit()
    target = resolve_platform(platform)
    variables = detect_variables()
    classification = resolve_classification(config, variables, daily)

    console.print(f"Build type: {format_reason(classification)}")

    engine = CommandTestEngine(config, target, config.test_host_path())
    try:
        results, outcome = run_tests(
            classification,
            target,
            engine,
            partitions=resolve_partitions(partition),
            experimental_features=config.features_for(target),
            locate_artifact=config.test_host_path,
            variables=variables,
            config=config,
        )
    except MissingArtifactError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    show_results(results)
    show_verdict(outcome)
