# Copyright (c) Syntropy Systems
"""Main CLI entry point for ciplan."""

import typer

from ciplan.cli.aggregate import aggregate
from ciplan.cli.classify import classify
from ciplan.cli.common import configure_logging
from ciplan.cli.doctor import doctor
from ciplan.cli.init_cmd import init
from ciplan.cli.package import package
from ciplan.cli.plan import plan
from ciplan.cli.run import run

app = typer.Typer(
    name="ciplan",
    help=(
        "CI build classification and test partitioning. Decide the build "
        "type, plan the test runs, gate the release."
    ),
    no_args_is_help=True,
    add_completion=False,
)


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Show debug logging",
    ),
) -> None:
    """CI build classification and test partitioning."""
    configure_logging(verbose)


# Register commands
_ = app.command()(init)
_ = app.command()(classify)
_ = app.command()(plan)
_ = app.command()(run)
_ = app.command()(aggregate)
_ = app.command()(package)
_ = app.command()(doctor)


if __name__ == "__main__":
    app()
