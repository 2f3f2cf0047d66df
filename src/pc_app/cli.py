# src/pc_app/cli.py
from __future__ import annotations

import typer

from pc_app.commands.preview import app as preview_app
from pc_app.commands.scan import app as scan_app
from pc_app.commands.trash import app as trash_app
from pc_app.version import get_version

app = typer.Typer(help="Photo Cleaner CLI")

app.add_typer(scan_app, name="scan")
app.add_typer(trash_app, name="trash")
app.add_typer(preview_app, name="preview")


def _print_version(value: bool) -> None:
    if value:
        typer.echo(f"photo-cleaner {get_version()}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", callback=_print_version, is_eager=True, help="Show version and exit."
    ),
) -> None:
    """Find duplicate and blurry photos; trash them reversibly."""


if __name__ == "__main__":
    app()
