# src/pc_app/commands/trash.py
from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from pc_app.commands.common import prompt_existing_dir, setup_logging
from pc_app.core.config import get_settings
from pc_app.core.rich_progress import make_phase_progress
from pc_app.modules.trash.ledger import TrashLedger

app = typer.Typer(help="Inspect, restore or empty a project's trash")


def _ledger(root: Path | None) -> TrashLedger:
    root = prompt_existing_dir(root, "root")
    return TrashLedger(root, trash_dirname=get_settings().TRASH_DIRNAME)


@app.command("status")
def status_cmd(
    root: Path | None = typer.Argument(None, file_okay=False, dir_okay=True),
) -> None:
    """List trashed files with their original locations."""
    setup_logging()
    st = _ledger(root).get_status()
    console = Console()

    table = Table(title=f"Trash ({st.trash_dir})")
    table.add_column("Id", overflow="fold")
    table.add_column("Original path", overflow="fold")
    table.add_column("Size", justify="right")
    table.add_column("Deleted at")
    for e in st.entries:
        table.add_row(e.id, e.original_path, str(e.size), e.deleted_at)
    console.print(table)
    console.print(f"{st.file_count} file(s), {st.total_size} byte(s)")
    for inc in st.inconsistencies:
        console.print(f"[yellow]{inc.kind}[/yellow] {inc.path} {inc.detail}")


@app.command("restore")
def restore_cmd(
    ids: list[str] | None = typer.Argument(None, help="Ids to restore. Omit to restore everything."),
    root: Path | None = typer.Option(None, "--root", "-r", file_okay=False, dir_okay=True),
) -> None:
    """Move trashed files back to where they came from."""
    setup_logging()
    ledger = _ledger(root)
    if not ids:
        ids = [e.id for e in ledger.get_status().entries]
        if not ids:
            typer.echo("Trash is empty.")
            return
        if not typer.confirm(f"Restore all {len(ids)} file(s)?", default=True):
            return

    console = Console()
    progress, reporter = make_phase_progress(console)
    with progress:
        res = ledger.restore_from_trash(ids, reporter=reporter)
    typer.echo(
        f"[RESTORE] restored={res.success_count} skipped={len(res.skipped)} "
        f"failed={res.failure_count}"
    )
    for f in res.failed:
        console.print(f"  [red]failed[/red] {f.id}: {f.reason}")


@app.command("empty")
def empty_cmd(
    root: Path | None = typer.Argument(None, file_okay=False, dir_okay=True),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
) -> None:
    """Permanently delete everything in the trash."""
    setup_logging()
    ledger = _ledger(root)
    if not yes and not typer.confirm(
        f"Permanently delete the contents of {ledger.trash_dir}?", default=False
    ):
        raise typer.Abort()

    console = Console()
    progress, reporter = make_phase_progress(console)
    with progress:
        res = ledger.empty_trash(reporter=reporter)
    typer.echo(
        f"[EMPTY] deleted={res.deleted_count} orphaned={res.orphaned_count} "
        f"failed={res.failed_count}"
    )
