# Copyright (c) Syntropy Systems
"""ciplan init command."""

from pathlib import Path

import typer
import yaml
from rich.console import Console

from ciplan.config import default_config_data

console = Console()


def init(
    path: Path = typer.Argument(
        Path(),
        help="Directory to initialize (default: current directory)",
    ),
) -> None:
    """Initialize ciplan in a repository.

    Creates a .ciplan directory with a default config.yaml.
    """
    target = path.resolve()
    ciplan_dir = target / ".ciplan"

    if ciplan_dir.exists():
        console.print(f"[yellow]Already initialized:[/yellow] {ciplan_dir}")
        return

    ciplan_dir.mkdir(parents=True)

    config_path = ciplan_dir / "config.yaml"
    with config_path.open("w") as f:
        yaml.dump(default_config_data(), f, default_flow_style=False, sort_keys=False)

    console.print(f"[green]Initialized ciplan:[/green] {ciplan_dir}")
    console.print(f"  [dim]config:[/dim] {config_path}")
    console.print("  [dim]next:[/dim] set test_host to the compiled test executable")
