# Copyright (c) Syntropy Systems
"""ciplan aggregate command."""

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console

from ciplan.aggregator import aggregate as aggregate_results
from ciplan.cli.common import load_config_or_exit, show_results, show_verdict
from ciplan.errors import TestPartitionFailedError
from ciplan.models.result import TestRunResult
from ciplan.results import read_result_file
from ciplan.variables import detect_variables

console = Console()


def _load_result(path: Path, allow_empty: bool) -> TestRunResult:
    label = path.stem
    try:
        counts = read_result_file(path, label)
    except TestPartitionFailedError as e:
        return TestRunResult(label=label, allow_empty_result=allow_empty, error=e.detail)
    return TestRunResult(
        label=label,
        passed=counts.passed,
        failed=counts.failed,
        allow_empty_result=allow_empty,
    )


def aggregate(
    files: Optional[List[Path]] = typer.Argument(
        None,
        help="Result files that must contain at least one passing test",
    ),
    allow_empty: Optional[List[Path]] = typer.Option(
        None,
        "--allow-empty", "-e",
        help="Result file that may contain zero tests (repeatable)",
    ),
) -> None:
    """Reduce existing NUnit/JUnit result files to a single verdict.

    Use --allow-empty for experimental feature runs, which may legitimately
    match no tests.
    """
    config = load_config_or_exit()

    results = [_load_result(path, allow_empty=False) for path in files or []]
    results.extend(_load_result(path, allow_empty=True) for path in allow_empty or [])

    if not results:
        console.print("[red]Error:[/red] No result files given")
        raise typer.Exit(1)

    outcome = aggregate_results(results, variables=detect_variables(), config=config)

    show_results(results)
    show_verdict(outcome)
