# src/pc_app/commands/scan.py
"""
Interactive 'scan' command.

`pc scan` prompts for a project folder and a similarity threshold, runs the
full pipeline with a Rich progress display, then prints duplicate groups and
blurry photos. Optionally moves every non-seed duplicate into the project's
trash (restorable with `pc trash restore`).
"""

from __future__ import annotations

import time
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from pc_app.commands.common import prompt_existing_dir, setup_logging
from pc_app.core.config import get_settings
from pc_app.core.errors import PcAppError
from pc_app.core.rich_progress import make_phase_progress
from pc_app.modules.scan.schemas import AnalysisResult, PhotoRecord
from pc_app.modules.scan.service import ScanOutcome, ScanPipeline

__all__ = ["app"]

app = typer.Typer(help="Find duplicate and blurry photos (interactive).")


def _prompt_threshold(default: float) -> float:
    value = typer.prompt("similarity threshold (0-100)", default=default, type=float)
    if not 0 <= value <= 100:
        raise typer.BadParameter("threshold must be between 0 and 100")
    return value


def _render_groups(console: Console, result: AnalysisResult, by_id: dict[str, PhotoRecord]) -> None:
    table = Table(title=f"Duplicate Groups (>= {result.threshold:g}%)", show_lines=False)
    table.add_column("Group")
    table.add_column("Keep", overflow="fold")
    table.add_column("# Duplicates", justify="right")
    table.add_column("Duplicates", overflow="fold")

    for g in result.groups:
        table.add_row(
            g.id,
            by_id[g.seed].path,
            str(len(g.photo_ids) - 1),
            "\n".join(by_id[pid].path for pid in g.photo_ids[1:]),
        )
    console.print(table)


def _render_blurry(console: Console, result: AnalysisResult, by_id: dict[str, PhotoRecord]) -> None:
    blurry = [a for a in result.analyses if a.is_blurry]
    if not blurry:
        return
    table = Table(title="Blurry Photos")
    table.add_column("Photo", overflow="fold")
    table.add_column("Sharpness", justify="right")
    table.add_column("Quality", justify="right")
    for a in sorted(blurry, key=lambda a: a.blur_score or 0.0):
        table.add_row(by_id[a.photo_id].path, f"{a.blur_score:.1f}", str(a.quality_score))
    console.print(table)


def _trash_duplicates(console: Console, outcome: ScanOutcome) -> None:
    by_id = {r.id: r for r in outcome.records}
    doomed = [by_id[pid] for g in outcome.result.groups for pid in g.photo_ids[1:]]
    # a trashed JPEG takes its paired RAW along
    doomed_ids = {d.id for d in doomed}
    doomed += [r for r in outcome.records if r.is_raw and r.pair_id in doomed_ids]
    if not doomed:
        return

    ledger = outcome.session.trash_ledger()
    progress, reporter = make_phase_progress(console)
    with progress:
        res = ledger.move_to_trash(doomed, reporter=reporter)
    typer.echo(
        f"[TRASH] moved={res.success_count} failed={res.failure_count} -> {ledger.trash_dir}"
    )
    for f in res.failed:
        console.print(f"  [red]failed[/red] {f.path}: {f.reason}")


@app.callback(invoke_without_command=True)
def interactive(
    root: Path | None = typer.Option(None, "--root", "-r", file_okay=False, dir_okay=True),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """
    Run the interactive scan flow.

    Steps:
      1) Prompt for the project folder and similarity threshold.
      2) Scan + analyze + cluster with a Rich progress bar.
      3) Show a summary, then duplicate groups and blurry photos.
      4) Optionally move duplicates (all but each group's first photo) to trash.
    """
    setup_logging(verbose)
    settings = get_settings()
    root = prompt_existing_dir(root, "root")
    threshold = _prompt_threshold(settings.SIMILARITY_THRESHOLD)

    console = Console()
    pipeline = ScanPipeline(settings)
    progress, reporter = make_phase_progress(console)

    t0 = time.perf_counter()
    try:
        with progress:
            outcome = pipeline.run(root, threshold=threshold, reporter=reporter)
    except PcAppError as err:
        raise typer.BadParameter(str(err)) from err
    elapsed = time.perf_counter() - t0

    result = outcome.result
    by_id = {r.id: r for r in outcome.records}
    dupes = sum(len(g.photo_ids) - 1 for g in result.groups)
    blurry = sum(1 for a in result.analyses if a.is_blurry)
    typer.echo(
        f"[SCAN] photos={len(outcome.records)} groups={len(result.groups)} "
        f"duplicates={dupes} blurry={blurry} failed={len(result.failures)} "
        f"checksum_fallbacks={result.fallback_count} in {elapsed:.2f}s"
    )

    if result.groups:
        _render_groups(console, result, by_id)
    _render_blurry(console, result, by_id)

    if result.groups and typer.confirm("Move duplicates to trash?", default=False):
        _trash_duplicates(console, outcome)
