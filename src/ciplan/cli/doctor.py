# Copyright (c) Syntropy Systems
"""ciplan doctor command."""

import re

from rich.console import Console

from ciplan.config import find_ciplan_dir, load_config
from ciplan.errors import ConfigError
from ciplan.models.plan import Platform
from ciplan.variables import (
    AzurePipelinesVariables,
    GitHubActionsVariables,
    detect_variables,
)
from ciplan.vcs import git_available

console = Console()


def doctor() -> None:
    """Check ciplan setup and diagnose issues.

    Verifies:
    - config is found and valid
    - feature tag pattern compiles
    - git is available for commit lookups
    - the test host artifact exists
    """
    issues: list[str] = []
    warnings: list[str] = []

    ciplan_dir = find_ciplan_dir()
    if ciplan_dir is None:
        console.print("[yellow]⚠[/yellow] No .ciplan directory found, using defaults")
        console.print("  Run [bold]ciplan init[/bold] to create a config")
        warnings.append("No config directory")
    else:
        console.print(f"[green]✓[/green] ciplan directory: {ciplan_dir}")

    try:
        config = load_config(ciplan_dir)
    except ConfigError as e:
        console.print(f"[red]✗[/red] Config error: {e}")
        console.print()
        console.print("[red]Found 1 issue(s)[/red]")
        return

    try:
        _ = config.compiled_feature_pattern()
        console.print(
            f"[green]✓[/green] Feature tag pattern: {config.feature_tag_pattern}"
        )
    except re.error as e:
        console.print(f"[red]✗[/red] Invalid feature tag pattern: {e}")
        issues.append(f"Invalid feature tag pattern: {e}")

    if git_available():
        console.print("[green]✓[/green] git found")
    else:
        console.print("[yellow]⚠[/yellow] git not found, commit tags are ignored")
        warnings.append("git not found")

    host = config.test_host_path()
    if host is None:
        console.print("[red]✗[/red] test_host is not configured")
        issues.append("test_host not configured")
    elif not host.exists():
        console.print(f"[red]✗[/red] Test host not found: {host}")
        issues.append("Test host missing")
    else:
        console.print(f"[green]✓[/green] Test host: {host}")

    platform = Platform.current()
    features = config.features_for(platform)
    console.print(
        f"[dim]•[/dim] {len(features)} experimental feature(s) on {platform.value}"
    )

    variables = detect_variables()
    if isinstance(variables, AzurePipelinesVariables):
        store = "Azure Pipelines"
    elif isinstance(variables, GitHubActionsVariables):
        store = "GitHub Actions"
    else:
        store = "in-memory (not running in CI)"
    console.print(f"[dim]•[/dim] Build variables: {store}")

    # Summary
    console.print()
    if issues:
        console.print(f"[red]Found {len(issues)} issue(s)[/red]")
        for issue in issues:
            console.print(f"  - {issue}")
    elif warnings:
        console.print(f"[yellow]Found {len(warnings)} warning(s)[/yellow]")
        for warning in warnings:
            console.print(f"  - {warning}")
    else:
        console.print("[green]All checks passed[/green]")
