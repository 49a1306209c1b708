# Copyright (c) Syntropy Systems
"""ciplan classify command."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from ciplan.cli.common import (
    emit_json,
    format_reason,
    load_config_or_exit,
    resolve_classification,
)
from ciplan.variables import detect_variables

console = Console()


def classify(
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Print the classification as JSON (may follow Azure logging commands)",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output", "-o",
        help="Also write the classification as JSON to this file",
    ),
) -> None:
    """Classify this run as a daily or standard CI build.

    Reads the schedule flag, force-feature override and commit message from
    the pipeline environment. A feature-tagged or forced daily build is also
    written to the pipeline's build variables for later stages.
    """
    config = load_config_or_exit()
    variables = detect_variables()
    classification = resolve_classification(config, variables)

    emit_json(classification.model_dump_json(), json_output, output)
    if json_output:
        return

    console.print(f"Build type: {format_reason(classification)}")
