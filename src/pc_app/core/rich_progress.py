# src/pc_app/core/rich_progress.py
from __future__ import annotations

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    TextColumn,
    TimeRemainingColumn,
)

from pc_app.core.progress import Phase, ProgressReporter

PHASE_LABELS: dict[str, str] = {
    "scan": "Scanning",
    "analyze": "Analyzing",
    "cluster": "Clustering",
    "trash": "Moving to trash",
    "restore": "Restoring",
    "purge": "Purging",
}


class RichPhaseProgressReporter(ProgressReporter):
    """Maps pipeline phases to Rich tasks; one task per phase."""

    def __init__(self, progress: Progress) -> None:
        self.progress = progress
        self.tasks: dict[str, int] = {}
        self.totals: dict[str, int | None] = {}

    def start(
        self, phase: Phase, total: int | None = None, text: str | None = None
    ) -> None:
        label = PHASE_LABELS.get(phase, str(phase).title())
        self.tasks[phase] = self.progress.add_task(
            label, total=total, detail=(text or "")
        )
        self.totals[phase] = total

    def update(self, phase: Phase, advance: int = 1, text: str | None = None) -> None:
        task_id = self.tasks.get(phase)
        if task_id is None:
            return
        if text is None:
            self.progress.update(task_id, advance=advance)
        else:
            self.progress.update(task_id, advance=advance, detail=text)

    def end(self, phase: Phase) -> None:
        task_id = self.tasks.pop(phase, None)
        if task_id is None:
            return
        total = self.totals.pop(phase, None)
        if total is None:
            # unknown-length phases (enumeration) just disappear
            self.progress.update(task_id, visible=False, detail="")
        else:
            self.progress.update(task_id, completed=total, detail="")


def make_phase_progress(
    console: Console, transient: bool = False
) -> tuple[Progress, RichPhaseProgressReporter]:
    """Standardized Rich progress layout + reporter instance."""
    progress = Progress(
        TextColumn("[bold]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TextColumn("•"),
        TimeRemainingColumn(),
        TextColumn("• {task.fields[detail]}"),
        console=console,
        transient=transient,
    )
    return progress, RichPhaseProgressReporter(progress)
