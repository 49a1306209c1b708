# Copyright (c) Syntropy Systems
"""ciplan package command."""

import json
import os
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from ciplan.cli.common import (
    emit_json,
    format_reason,
    load_config_or_exit,
    resolve_classification,
    resolve_platform,
)
from ciplan.models.plan import Platform
from ciplan.models.result import AggregateOutcome, Verdict
from ciplan.packaging import plan_packages
from ciplan.variables import detect_variables

console = Console()


def package(
    platform: Optional[Platform] = typer.Option(
        None,
        "--platform", "-p",
        case_sensitive=False,
        help="Target platform (default: this host)",
    ),
    daily: Optional[bool] = typer.Option(
        None,
        "--daily/--no-daily",
        help="Force the build type instead of classifying the environment",
    ),
    tests_passed: Optional[bool] = typer.Option(
        None,
        "--passed/--failed",
        help="Test verdict (default: read the tests-passed build variable)",
    ),
    build_id: Optional[str] = typer.Option(
        None,
        "--build-id",
        help="Build number for the release tag (default: from the environment)",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Print the package plan as JSON",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output", "-o",
        help="Also write the package plan as JSON to this file",
    ),
) -> None:
    """Show which release packages to build and whether to publish them."""
    config = load_config_or_exit()
    target = resolve_platform(platform)
    classification = resolve_classification(config, detect_variables(), daily)

    if tests_passed is None:
        flag = os.environ.get(config.tests_passed_variable, "")
        tests_passed = flag.lower() == "true"
    outcome = AggregateOutcome(verdict=Verdict.PASS if tests_passed else Verdict.FAIL)

    if build_id is None:
        build_id = os.environ.get(config.build_id_variable) or None

    package_plan = plan_packages(
        classification,
        target,
        release_tag=config.release_tag,
        build_id=build_id,
        outcome=outcome,
    )

    payload = {
        "platform": target.value,
        "types": sorted(t.value for t in package_plan.types),
        "release_tag": package_plan.release_tag,
        "platform_runtimes": sorted(package_plan.platform_runtimes),
        "publish": package_plan.publish,
    }
    emit_json(json.dumps(payload), json_output, output)
    if json_output:
        return

    console.print(f"Build type: {format_reason(classification)}")
    console.print(f"  [dim]release tag:[/dim] {package_plan.release_tag}")
    types = ", ".join(sorted(t.value for t in package_plan.types))
    console.print(f"  [dim]packages:[/dim] {types}")
    runtimes = ", ".join(sorted(package_plan.platform_runtimes))
    console.print(f"  [dim]runtimes:[/dim] {runtimes}")
    if package_plan.publish:
        console.print("  [dim]publish:[/dim] [green]yes[/green]")
    else:
        console.print("  [dim]publish:[/dim] no")
