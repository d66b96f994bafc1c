"""Command-line interface for metalineage."""

import logging
from typing import Annotated

import typer

from metalineage import __version__
from metalineage.cli_modules.lineage import app as lineage_app

app = typer.Typer(
    name="metalineage",
    help="Table and field lineage for warehouse metadata catalogs",
    add_completion=False,
    no_args_is_help=True,
)
app.add_typer(lineage_app, name="lineage")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"metalineage {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    log_level: Annotated[
        str,
        typer.Option("--log-level", "-l", help="Log level (debug, info, warning, error)"),
    ] = "warning",
    version: Annotated[
        bool,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show version"),
    ] = False,
) -> None:
    """Table and field lineage for warehouse metadata catalogs."""
    level = getattr(logging, log_level.upper(), None)
    if not isinstance(level, int):
        typer.echo(f"Error: Unknown log level: {log_level}", err=True)
        raise typer.Exit(2)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


if __name__ == "__main__":
    app()
