"""
Main CLI entry point for the tunables package.

Combines all command modules into a single CLI interface.
"""

import typer
from typing import Optional

from ..utils.logging import setup_logging

# Create main CLI app
app = typer.Typer(
    name="tunables",
    help="Tunable parameter registry for modeling pipelines",
    add_completion=False
)

from .commands import (
    describe_pipeline,
    finalize_pipeline,
    show_catalog,
    show_stages
)

app.command("describe")(describe_pipeline)
app.command("finalize")(finalize_pipeline)
app.command("catalog")(show_catalog)
app.command("stages")(show_stages)


@app.command()
def version():
    """Show version information."""
    from .. import __version__
    typer.echo(f"tunables v{__version__}")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", envvar="TUNABLES_LOG_LEVEL", help="Explicit log level (overrides -v/--debug)"
    ),
    log_file: Optional[str] = typer.Option(None, "--log-file", envvar="TUNABLES_LOG_FILE", help="Log to file")
):
    """
    Tunable parameter registry

    Marks pipeline arguments for tuning, collects them into a parameter set
    and resolves data-dependent ranges against sample data.
    """
    if log_level:
        level = log_level.upper()
    elif debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    else:
        level = "WARNING"

    try:
        setup_logging(log_level=level, log_file=log_file)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--log-level")


if __name__ == "__main__":
    app()
