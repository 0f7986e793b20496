"""Root Typer application, mounts sub-commands."""

from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

app = typer.Typer(
    name="chart-import",
    help="Import Helm repository charts into the KubeSphere app store.",
    no_args_is_help=True,
)


@app.callback()
def root(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="%H:%M:%S",
        handlers=[RichHandler(console=Console(stderr=True), show_path=verbose)],
        force=True,
    )
    # urllib3 logs every connection at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def _register_commands() -> None:
    from chart_importer.cli.commands.import_cmd import app as import_app
    from chart_importer.cli.commands.plan_cmd import app as plan_app
    from chart_importer.cli.commands.publish_cmd import app as publish_app

    app.add_typer(import_app, name="import", help="Upload charts and publish them")
    app.add_typer(plan_app, name="plan", help="Show which chart versions would be uploaded")
    app.add_typer(publish_app, name="publish", help="Publish already imported applications")


_register_commands()


def main() -> None:
    app()
