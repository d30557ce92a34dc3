"""Codescribe CLI entry point."""

from __future__ import annotations

import importlib.metadata
import logging
from typing import Annotated

import typer
from rich.logging import RichHandler

from codescribe.cli.generate import generate_cmd
from codescribe.cli.key import key_app
from codescribe.cli.scan import scan_cmd


def _package_version() -> str:
    try:
        return importlib.metadata.version("codescribe")
    except importlib.metadata.PackageNotFoundError:
        return "dev"


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"codescribe {_package_version()}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )


app = typer.Typer(
    name="codescribe",
    help=(
        "Codescribe — turn a codebase into a technical document, then ask questions about it.\n\n"
        "  codescribe scan      Preview the files that would be sent.\n"
        "  codescribe generate  Generate the document (add --chat for the assistant)."
    ),
    add_completion=False,
)


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log debug output."),
    ] = False,
) -> None:
    """Codescribe — codebase-to-document CLI."""
    configure_logging(verbose)


app.command("scan")(scan_cmd)
app.command("generate")(generate_cmd)
app.add_typer(key_app, name="key")


@app.command("version")
def version_cmd() -> None:
    """Show the installed Codescribe version."""
    typer.echo(f"codescribe {_package_version()}")


if __name__ == "__main__":
    app()
