# Copyright (c) Syntropy Systems
"""ciplan plan command."""

import json
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from ciplan.cli.common import (
    emit_json,
    format_reason,
    load_config_or_exit,
    resolve_classification,
    resolve_partitions,
    resolve_platform,
)
from ciplan.errors import MissingArtifactError
from ciplan.models.plan import Partition, Platform, TestInvocationSpec
from ciplan.planner import plan as plan_invocations
from ciplan.variables import detect_variables

console = Console()


def _scope(spec: TestInvocationSpec) -> str:
    if spec.paths is None:
        return "all tests"
    return ", ".join(spec.paths)


def _show_plan_table(specs: List[TestInvocationSpec]) -> None:
    table = Table(show_header=True, header_style="bold")
    table.add_column("#", style="dim")
    table.add_column("Label")
    table.add_column("Partition")
    table.add_column("Include")
    table.add_column("Exclude")
    table.add_column("Feature")
    table.add_column("Scope")

    for index, spec in enumerate(specs, start=1):
        partition_style = "yellow" if spec.is_elevated else "blue"
        table.add_row(
            str(index),
            spec.output_label,
            f"[{partition_style}]{spec.partition.value}[/{partition_style}]",
            ", ".join(spec.tag_set.include_names()) or "-",
            ", ".join(spec.tag_set.exclude_names()) or "-",
            spec.experimental_feature or "-",
            _scope(spec),
        )

    console.print(table)


def _spec_json(spec: TestInvocationSpec) -> dict:
    return {
        "output_label": spec.output_label,
        "partition": spec.partition.value,
        "include": spec.tag_set.include_names(),
        "exclude": spec.tag_set.exclude_names(),
        "experimental_feature": spec.experimental_feature,
        "paths": list(spec.paths) if spec.paths is not None else None,
        "allow_empty_result": spec.allow_empty_result,
    }


def plan(
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
        help="Privilege partition to plan (repeatable; default: both)",
    ),
    daily: Optional[bool] = typer.Option(
        None,
        "--daily/--no-daily",
        help="Force the build type instead of classifying the environment",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Print the plan as JSON",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output", "-o",
        help="Also write the plan as JSON to this file",
    ),
) -> None:
    """Show the test invocations this run would execute."""
    config = load_config_or_exit()
    target = resolve_platform(platform)
    classification = resolve_classification(config, detect_variables(), daily)

    try:
        specs = plan_invocations(
            classification,
            target,
            resolve_partitions(partition),
            experimental_features=config.features_for(target),
            locate_artifact=config.test_host_path,
        )
    except MissingArtifactError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    payload = {
        "platform": target.value,
        "classification": json.loads(classification.model_dump_json()),
        "invocations": [_spec_json(spec) for spec in specs],
    }
    emit_json(json.dumps(payload), json_output, output)
    if json_output:
        return

    console.print(f"Build type: {format_reason(classification)}")
    console.print(f"Platform: [bold]{target.value}[/bold]")
    _show_plan_table(specs)
