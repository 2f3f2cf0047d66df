# src/pc_app/commands/preview.py
from __future__ import annotations

from pathlib import Path

import typer

from pc_app.commands.common import setup_logging
from pc_app.core.config import get_settings
from pc_app.core.imaging import PillowDecoder
from pc_app.modules.preview.service import PreviewService

app = typer.Typer(help="RAW embedded previews")


@app.command("extract")
def extract_cmd(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    out: Path | None = typer.Option(
        None, "--out", "-o", help="Where to write the preview (default: <name>.preview.jpg)."
    ),
    min_size: int | None = typer.Option(None, "--min-size", min=0),
) -> None:
    """Extract the largest embedded JPEG preview from a RAW file."""
    setup_logging()
    svc = PreviewService(
        PillowDecoder(),
        min_size=get_settings().PREVIEW_MIN_BYTES if min_size is None else min_size,
    )
    dest = out or path.with_name(f"{path.stem}.preview.jpg")
    resp = svc.inspect(path, save_to=dest)

    if not resp.found:
        typer.echo(f"No embedded preview found in {path}")
        raise typer.Exit(code=1)
    if not resp.decodable:
        typer.echo(f"Preview at {resp.start}..{resp.end} in {path} does not decode")
        raise typer.Exit(code=1)
    typer.echo(
        f"{resp.format} preview {resp.width}x{resp.height} "
        f"({resp.length} bytes) -> {resp.saved_to}"
    )
