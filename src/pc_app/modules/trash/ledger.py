# src/pc_app/modules/trash/ledger.py
"""
Reversible deletion: Active -> Trashed -> (Restored | Purged).

The trash directory is the only state. Each trashed file `<ms>_<name>` has a
sidecar `<ms>_<name>.metadata.json`; every operation re-reads the directory,
so a restarted process (or a second one) sees the same ledger.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from pc_app.core.errors import Conflict, PcAppError, SidecarInconsistency, SourceMissing
from pc_app.core.logging import get_logger
from pc_app.core.paths import resolve_absolute, strip_decorations
from pc_app.core.progress import ProgressReporter

from .filesystem import FileSystem, LocalFileSystem
from .schemas import (
    SIDECAR_SUFFIX,
    PurgeResult,
    TrashBatchResult,
    TrashEntry,
    TrashFailure,
    TrashInconsistency,
    TrashItem,
    TrashStatus,
)

log = get_logger(__name__)


def sidecar_for(path: Path) -> Path:
    return path.with_name(path.name + SIDECAR_SUFFIX)


@dataclass(frozen=True)
class _Record:
    entry: TrashEntry
    sidecar: Path
    file: Path
    orphan: bool


def _as_item(obj: Any) -> TrashItem:
    if isinstance(obj, TrashItem):
        return obj
    return TrashItem(
        id=str(obj.id),
        path=str(obj.path),
        filename=getattr(obj, "filename", None),
        size=getattr(obj, "size", None),
    )


class TrashLedger:
    def __init__(
        self,
        project_root: Path,
        fs: FileSystem | None = None,
        trash_dirname: str = ".trash",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.project_root = Path(project_root).resolve()
        self.trash_dir = self.project_root / trash_dirname
        self.fs = fs or LocalFileSystem()
        self._clock = clock

    # ---- public API ----------------------------------------------------------
    def move_to_trash(
        self, items: Iterable[Any], reporter: ProgressReporter | None = None
    ) -> TrashBatchResult:
        """
        Move each item into the trash, then write its sidecar. Items fail
        independently; failures are reported, never rolled back batch-wide.
        """
        todo = [_as_item(i) for i in items]
        self._ensure_trash_dir()
        result = TrashBatchResult()

        if reporter:
            reporter.start("trash", total=len(todo), text="Moving to trash…")
        for item in todo:
            try:
                result.succeeded.append(self._trash_one(item))
            except SourceMissing as err:
                log.warning("Skipping %s: %s", item.id, err)
                result.failed.append(TrashFailure(id=item.id, path=item.path, reason=str(err)))
            except (OSError, PcAppError) as err:
                log.error("Failed to move %s to trash: %s", item.path, err)
                result.failed.append(TrashFailure(id=item.id, path=item.path, reason=str(err)))
            if reporter:
                reporter.update("trash", 1, text=Path(item.path).name)
        if reporter:
            reporter.end("trash")

        log.info(
            "Moved %d file(s) to %s, %d failed",
            result.success_count,
            self.trash_dir,
            result.failure_count,
        )
        return result

    def restore_from_trash(
        self, ids: Iterable[str], reporter: ProgressReporter | None = None
    ) -> TrashBatchResult:
        """Move trashed files back to their original paths. Unknown ids are no-ops."""
        ids = list(ids)
        records, _ = self._read()
        by_id: dict[str, list[_Record]] = {}
        for rec in records:
            by_id.setdefault(rec.entry.id, []).append(rec)

        result = TrashBatchResult()
        if reporter:
            reporter.start("restore", total=len(ids), text="Restoring…")
        for file_id in ids:
            matches = by_id.pop(file_id, None)
            if not matches:
                log.info("Nothing in trash for id %s", file_id)
                result.skipped.append(file_id)
            for rec in matches or ():
                try:
                    self._restore_one(rec)
                    result.succeeded.append(rec.entry)
                except (OSError, PcAppError) as err:
                    log.error("Failed to restore %s: %s", rec.entry.filename, err)
                    result.failed.append(
                        TrashFailure(id=file_id, path=rec.entry.original_path, reason=str(err))
                    )
            if reporter:
                reporter.update("restore", 1, text=file_id)
        if reporter:
            reporter.end("restore")

        log.info(
            "Restored %d file(s), %d skipped, %d failed",
            result.success_count,
            len(result.skipped),
            result.failure_count,
        )
        return result

    def empty_trash(self, reporter: ProgressReporter | None = None) -> PurgeResult:
        """Permanently delete every trashed file, then its sidecar."""
        records, inconsistencies = self._read()
        deleted = orphaned = failed = 0

        if reporter:
            reporter.start("purge", total=len(records), text="Emptying trash…")
        for rec in records:
            try:
                if rec.orphan:
                    self.fs.delete(rec.sidecar)
                    orphaned += 1
                else:
                    self.fs.delete(rec.file)
                    self.fs.delete(rec.sidecar)
                    deleted += 1
            except OSError as err:
                log.error("Failed to delete %s: %s", rec.entry.filename, err)
                failed += 1
            if reporter:
                reporter.update("purge", 1, text=rec.entry.filename)
        if reporter:
            reporter.end("purge")

        log.info(
            "Permanently deleted %d file(s); %d orphaned sidecar(s) cleared, %d failed",
            deleted,
            orphaned,
            failed,
        )
        return PurgeResult(
            deleted_count=deleted,
            orphaned_count=orphaned,
            failed_count=failed,
            inconsistencies=inconsistencies,
        )

    def get_status(self) -> TrashStatus:
        """Fresh view of the trash; never served from memory."""
        records, inconsistencies = self._read()
        entries = sorted(
            (r.entry for r in records if not r.orphan), key=lambda e: e.deleted_at
        )
        return TrashStatus(
            trash_dir=str(self.trash_dir),
            file_count=len(entries),
            total_size=sum(e.size for e in entries),
            entries=entries,
            inconsistencies=inconsistencies,
        )

    # ---- helpers -------------------------------------------------------------
    def _ensure_trash_dir(self) -> Path:
        try:
            self.fs.mkdir(self.trash_dir)
        except OSError as err:
            raise PcAppError(f"cannot create trash directory {self.trash_dir}: {err}") from err
        return self.trash_dir

    def _destination(self, filename: str, millis: int) -> Path:
        # bump the timestamp until both the file and its sidecar name are free
        while True:
            dest = self.trash_dir / f"{millis}_{filename}"
            if not self.fs.exists(dest) and not self.fs.exists(sidecar_for(dest)):
                return dest
            millis += 1

    def _trash_one(self, item: TrashItem) -> TrashEntry:
        src = resolve_absolute(item.path)
        if not self.fs.is_file(src):
            raise SourceMissing(f"file not found: {src}")

        now = self._clock()
        filename = strip_decorations(item.filename or src.name)
        size = item.size if item.size is not None else self.fs.size(src)
        dest = self._destination(filename, int(now * 1000))

        self.fs.move(src, dest)
        entry = TrashEntry(
            id=item.id,
            original_path=str(src),
            filename=filename,
            size=size,
            deleted_at=datetime.fromtimestamp(now, tz=timezone.utc).isoformat(
                timespec="milliseconds"
            ),
            temp_path=str(dest),
            trash_dir=str(self.trash_dir),
        )
        try:
            self.fs.write_text(sidecar_for(dest), entry.to_sidecar())
        except OSError:
            # without a sidecar the file would be unrecoverable; put it back
            self.fs.move(dest, src)
            raise
        log.debug("Trashed %s -> %s", src, dest)
        return entry

    def _restore_one(self, rec: _Record) -> None:
        if rec.orphan:
            raise SidecarInconsistency(f"trashed file is gone: {rec.file}")
        original = Path(rec.entry.original_path)
        if self.fs.exists(original):
            raise Conflict(f"original path is occupied: {original}")
        self.fs.mkdir(original.parent)
        self.fs.move(rec.file, original)
        try:
            self.fs.delete(rec.sidecar)
        except OSError as err:
            log.warning("Restored %s but could not remove %s: %s", original, rec.sidecar, err)

    def _read(self) -> tuple[list[_Record], list[TrashInconsistency]]:
        if not self.fs.exists(self.trash_dir):
            return [], []

        sidecars: list[Path] = []
        files: list[Path] = []
        for p in self.fs.listdir(self.trash_dir):
            if p.name.endswith(SIDECAR_SUFFIX):
                sidecars.append(p)
            elif self.fs.is_file(p):
                files.append(p)

        file_names = {p.name for p in files}
        sidecar_names = {p.name for p in sidecars}
        records: list[_Record] = []
        problems: list[TrashInconsistency] = []

        for sc in sidecars:
            try:
                entry = TrashEntry.model_validate_json(self.fs.read_text(sc))
            except (OSError, ValidationError) as err:
                problems.append(
                    TrashInconsistency(kind="unreadable_sidecar", path=str(sc), detail=str(err))
                )
                continue
            target = sc.with_name(sc.name[: -len(SIDECAR_SUFFIX)])
            orphan = target.name not in file_names
            if orphan:
                problems.append(
                    TrashInconsistency(
                        kind="orphan_sidecar",
                        path=str(sc),
                        detail=f"no trashed file {target.name}",
                    )
                )
            records.append(
                _Record(
                    entry=entry.model_copy(update={"trash_dir": str(self.trash_dir)}),
                    sidecar=sc,
                    file=target,
                    orphan=orphan,
                )
            )

        for f in files:
            if f.name + SIDECAR_SUFFIX not in sidecar_names:
                problems.append(
                    TrashInconsistency(
                        kind="missing_sidecar", path=str(f), detail="no metadata sidecar"
                    )
                )

        for p in problems:
            log.warning("%s", SidecarInconsistency(f"{p.kind}: {p.path} ({p.detail})"))
        return records, problems
