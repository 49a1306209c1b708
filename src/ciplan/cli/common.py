# Copyright (c) Syntropy Systems
"""Helpers shared by ciplan commands."""

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ciplan.aggregator import ensure_passed
from ciplan.classifier import classify as classify_build
from ciplan.classifier import signals_from_env
from ciplan.config import CiplanConfig, load_config
from ciplan.errors import AggregationFailedError, ConfigError
from ciplan.models.build import BuildClassification, BuildReason
from ciplan.models.plan import Partition, Platform
from ciplan.models.result import AggregateOutcome, TestRunResult
from ciplan.planner import DEFAULT_PARTITIONS
from ciplan.variables import VariableStore
from ciplan.vcs import commit_message

console = Console()


def configure_logging(verbose: bool = False) -> None:
    """Send log records to stderr through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def load_config_or_exit() -> CiplanConfig:
    """Load config, exiting with an error message if it is invalid."""
    try:
        return load_config()
    except ConfigError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e


def emit_json(payload: str, json_output: bool, output: Optional[Path]) -> None:
    """Print JSON to stdout and/or write it to a file.

    Azure Pipelines logging commands share stdout with the JSON, so
    pipelines should read the file written by --output.
    """
    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        _ = output.write_text(payload + "\n")
    if json_output:
        console.print_json(payload)


def resolve_platform(platform: Optional[Platform]) -> Platform:
    return platform if platform is not None else Platform.current()


def resolve_partitions(partitions: Optional[List[Partition]]) -> List[Partition]:
    if not partitions:
        return list(DEFAULT_PARTITIONS)
    # Keep the requested order, dropping repeats
    return list(dict.fromkeys(partitions))


def resolve_classification(
    config: CiplanConfig,
    variables: VariableStore,
    daily: Optional[bool] = None,
) -> BuildClassification:
    """Classify from the environment unless --daily/--no-daily forces it."""
    if daily is True:
        variables.set(config.daily_variable, "true")
        return BuildClassification(is_daily=True, reason=BuildReason.MANUAL_OVERRIDE)
    if daily is False:
        return BuildClassification.standard()

    signals = signals_from_env(config=config)
    return classify_build(
        signals,
        commit_log=lambda commit: commit_message(commit, cwd=config.root),
        variables=variables,
        config=config,
    )


def format_reason(classification: BuildClassification) -> str:
    kind = "[bold]daily[/bold]" if classification.is_daily else "[bold]ci[/bold]"
    return f"{kind} [dim]({classification.reason.value})[/dim]"


def show_results(results: List[TestRunResult]) -> None:
    """Display per-invocation results in a table."""
    table = Table(show_header=True, header_style="bold")
    table.add_column("Label")
    table.add_column("Passed", justify="right")
    table.add_column("Failed", justify="right")
    table.add_column("Status")

    for result in results:
        if result.error is not None:
            status = "[red]error[/red]"
        elif result.failed:
            status = "[red]failed[/red]"
        elif result.passed == 0 and result.allow_empty_result:
            status = "[dim]empty[/dim]"
        elif result.passed == 0:
            status = "[red]empty[/red]"
        else:
            status = "[green]passed[/green]"
        table.add_row(result.label, str(result.passed), str(result.failed), status)

    console.print(table)


def show_verdict(outcome: AggregateOutcome) -> None:
    """Print the verdict; on Fail list every reason and exit 1."""
    try:
        ensure_passed(outcome)
    except AggregationFailedError as e:
        console.print(f"[red]Verdict: Fail[/red] ({len(e.reasons)} problem(s))")
        for reason in e.reasons:
            console.print(f"  - {reason}")
        raise typer.Exit(1) from e

    console.print("[green]Verdict: Pass[/green]")
