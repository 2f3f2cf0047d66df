# src/pc_app/modules/scan/service.py
"""
Scan orchestration: enumerate -> pair -> per-file analysis -> one clustering pass.

Per-file analysis (decode, fingerprint, sharpness, thumbnail) is independent
and runs in a thread pool. Clustering waits for the complete fingerprint set
and walks it in scan order, so group membership does not depend on which
worker finished first.
"""

from __future__ import annotations

import hashlib
import threading
from collections.abc import Callable, Iterable, Iterator
from concurrent.futures import ThreadPoolExecutor, as_completed
from contextlib import contextmanager
from dataclasses import dataclass
from functools import partial
from pathlib import Path

from pc_app.core.config import Settings, get_settings
from pc_app.core.errors import BadRequest, DecodeFailure, PreviewNotFound, ScanAlreadyInProgress
from pc_app.core.imaging import ImageDecoder, PillowDecoder, PixelGrid, write_thumbnail
from pc_app.core.logging import get_logger
from pc_app.core.progress import ProgressReporter
from pc_app.modules.dedup.cluster import membership, validate_threshold
from pc_app.modules.dedup.schemas import DuplicateGroup
from pc_app.modules.dedup.service import DedupService
from pc_app.modules.dedup.strategies.base import get_worker_count
from pc_app.modules.preview.service import PreviewService
from pc_app.modules.quality.eyes import FaceLandmarkDetector
from pc_app.modules.quality.schemas import QualitySettings
from pc_app.modules.quality.service import QualityService
from pc_app.modules.quality.sharpness import SharpnessScorer
from pc_app.modules.trash.filesystem import FileSystem
from pc_app.modules.trash.ledger import TrashLedger

from .files import SKIP_DIR_NAMES, build_record, iter_photo_files
from .pairing import pair_raw_jpeg, reuses_pair
from .schemas import AnalysisFailure, AnalysisResult, PhotoAnalysis, PhotoRecord, ScanProgress

log = get_logger(__name__)

Enumerator = Callable[[Path], Iterable[Path]]


def checksum_fingerprint(data: bytes) -> str:
    """Last-resort 64-bit fingerprint for undecodable files: exact bytes only."""
    return hashlib.md5(data, usedforsecurity=False).hexdigest()[:16]


def annotate(
    analyses: Iterable[PhotoAnalysis], groups: list[DuplicateGroup]
) -> list[PhotoAnalysis]:
    """
    Fresh copies with duplicate flags derived from `groups` only; any previous
    assignment is discarded. Paired RAWs follow their JPEG.
    """
    member_of = membership(groups)
    out: list[PhotoAnalysis] = []
    for a in analyses:
        gid = member_of.get(a.paired_with or a.photo_id)
        out.append(
            a.model_copy(update={"is_duplicate": gid is not None, "duplicate_group": gid})
        )
    return out


def fill_records(
    records: Iterable[PhotoRecord], analyses: Iterable[PhotoAnalysis]
) -> list[PhotoRecord]:
    """Copies of `records` carrying dimensions, fingerprint and thumbnail from their analysis."""
    by_id = {a.photo_id: a for a in analyses}
    out: list[PhotoRecord] = []
    for rec in records:
        a = by_id.get(rec.id)
        if a is None:
            out.append(rec)
            continue
        out.append(
            rec.model_copy(
                update={
                    "width": a.width,
                    "height": a.height,
                    "fingerprint": a.fingerprint,
                    "thumbnail_path": a.thumbnail_path,
                }
            )
        )
    return out


@dataclass(frozen=True)
class ScanSession:
    """Explicit per-project context; nothing is read from ambient state."""

    root: Path
    thumbnails_dirname: str = "_thumbnails"
    trash_dirname: str = ".trash"

    @property
    def thumbnails_dir(self) -> Path:
        return self.root / self.thumbnails_dirname

    @property
    def trash_dir(self) -> Path:
        return self.root / self.trash_dirname

    def ensure_thumbnails_dir(self) -> Path:
        self.thumbnails_dir.mkdir(parents=True, exist_ok=True)
        return self.thumbnails_dir

    def trash_ledger(self, fs: FileSystem | None = None) -> TrashLedger:
        return TrashLedger(self.root, fs=fs, trash_dirname=self.trash_dirname)


@dataclass(frozen=True)
class ScanOutcome:
    session: ScanSession
    records: list[PhotoRecord]
    result: AnalysisResult


class ScanPipeline:
    """
    Owns the analysis services for one process. Only one scan/analysis may run
    at a time; a concurrent call fails fast with ScanAlreadyInProgress.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        decoder: ImageDecoder | None = None,
        enumerator: Enumerator | None = None,
        face_detector: FaceLandmarkDetector | None = None,
        workers: int | None = None,
        write_thumbnails: bool = True,
    ) -> None:
        self.settings = settings or get_settings()
        s = self.settings
        self.decoder = decoder or PillowDecoder()
        self.enumerator = enumerator or partial(
            iter_photo_files, skip_dirs=SKIP_DIR_NAMES | {s.THUMBNAILS_DIRNAME}
        )
        self.dedup = DedupService()
        self.hasher = self.dedup.select(s.HASH_STRATEGY)
        self.previews = PreviewService(self.decoder, min_size=s.PREVIEW_MIN_BYTES)
        self.quality = QualityService(
            scorer=SharpnessScorer(stride=s.BLUR_STRIDE, max_side=s.BLUR_MAX_SIDE),
            detector=face_detector,
            closed_eye_threshold=s.CLOSED_EYE_THRESHOLD,
        )
        self.quality_settings = QualitySettings(
            blur_threshold=s.BLUR_THRESHOLD,
            enable_closed_eye_detection=face_detector is not None,
        )
        self.workers = workers or s.ANALYZE_WORKERS or get_worker_count(io_bound=True)
        self.write_thumbnails = write_thumbnails

        self._busy = threading.Lock()
        self._progress_lock = threading.Lock()
        self._progress = ScanProgress()

    # ---- sessions / progress -------------------------------------------------
    def session(self, root: Path) -> ScanSession:
        return ScanSession(
            root=Path(root).resolve(),
            thumbnails_dirname=self.settings.THUMBNAILS_DIRNAME,
            trash_dirname=self.settings.TRASH_DIRNAME,
        )

    def progress(self) -> ScanProgress:
        with self._progress_lock:
            return self._progress.model_copy()

    @property
    def busy(self) -> bool:
        return self._busy.locked()

    def _set_progress(self, **changes) -> None:
        with self._progress_lock:
            self._progress = self._progress.model_copy(update=changes)

    def _advance(self, current_file: str) -> None:
        with self._progress_lock:
            self._progress = self._progress.model_copy(
                update={
                    "processed_files": self._progress.processed_files + 1,
                    "current_file": current_file,
                }
            )

    @contextmanager
    def _exclusive(self) -> Iterator[None]:
        if not self._busy.acquire(blocking=False):
            raise ScanAlreadyInProgress("a scan is already in progress")
        try:
            yield
        finally:
            self._busy.release()

    # ---- public API ----------------------------------------------------------
    def scan(self, root: Path, reporter: ProgressReporter | None = None) -> list[PhotoRecord]:
        with self._exclusive():
            records = self._scan(Path(root), reporter)
            self._set_progress(phase="complete")
            return records

    def analyze(
        self,
        records: Iterable[PhotoRecord],
        session: ScanSession | None = None,
        threshold: float | None = None,
        reporter: ProgressReporter | None = None,
    ) -> AnalysisResult:
        with self._exclusive():
            return self._analyze(list(records), session, threshold, reporter)

    def run(
        self,
        root: Path,
        threshold: float | None = None,
        reporter: ProgressReporter | None = None,
    ) -> ScanOutcome:
        """Scan and analyze in one exclusive pass; thumbnails go to the project's folder."""
        with self._exclusive():
            session = self.session(root)
            records = self._scan(session.root, reporter)
            result = self._analyze(records, session, threshold, reporter)
            return ScanOutcome(
                session=session, records=fill_records(records, result.analyses), result=result
            )

    def recluster(self, result: AnalysisResult, threshold: float) -> AnalysisResult:
        """New result with groups rebuilt from scratch at `threshold`."""
        threshold = validate_threshold(threshold)
        groups = self.dedup.cluster(self._clusterable(result.analyses), threshold)
        return result.model_copy(
            update={
                "threshold": threshold,
                "groups": groups,
                "analyses": annotate(result.analyses, groups),
            }
        )

    # ---- scan ----------------------------------------------------------------
    def _scan(self, root: Path, reporter: ProgressReporter | None) -> list[PhotoRecord]:
        root = root.resolve()
        if not root.is_dir():
            raise BadRequest(f"not a directory: {root}")
        self._set_progress(
            total_files=0, processed_files=0, current_file="", phase="scanning"
        )
        log.info("Starting scan of directory: %s", root)

        if reporter:
            reporter.start("scan", total=None, text="Discovering photos…")
        records: list[PhotoRecord] = []
        for path in self.enumerator(root):
            try:
                records.append(build_record(path))
            except OSError as err:
                log.warning("Skipping %s: %s", path, err)
                continue
            self._set_progress(total_files=len(records), current_file=path.name)
            if reporter:
                reporter.update("scan", 1, text=path.name)
        if reporter:
            reporter.end("scan")

        records = pair_raw_jpeg(records)
        log.info(
            "Found %d photo file(s), %d RAW/JPEG pair(s)",
            len(records),
            sum(1 for r in records if r.is_raw and r.pair_id),
        )
        return records

    # ---- analysis ------------------------------------------------------------
    def _analyze(
        self,
        records: list[PhotoRecord],
        session: ScanSession | None,
        threshold: float | None,
        reporter: ProgressReporter | None,
    ) -> AnalysisResult:
        threshold = validate_threshold(
            self.settings.SIMILARITY_THRESHOLD if threshold is None else threshold
        )
        by_id = {r.id: r for r in records}
        independent = [r for r in records if not reuses_pair(r, by_id)]
        if session is not None and self.write_thumbnails:
            session.ensure_thumbnails_dir()
        else:
            session = None

        self._set_progress(
            total_files=len(independent),
            processed_files=0,
            current_file="",
            phase="analyzing",
        )
        if reporter:
            reporter.start(
                "analyze",
                total=len(independent),
                text=f"Fingerprinting… (workers={self.workers})",
            )

        done: dict[str, PhotoAnalysis] = {}
        failures: list[AnalysisFailure] = []
        with ThreadPoolExecutor(max_workers=self.workers) as ex:
            futs = {ex.submit(self._analyze_one, r, session): r for r in independent}
            for fut in as_completed(futs):
                rec = futs[fut]
                try:
                    done[rec.id] = fut.result()
                except Exception as err:
                    log.error("Error processing %s: %s", rec.path, err)
                    failures.append(
                        AnalysisFailure(photo_id=rec.id, path=rec.path, reason=str(err))
                    )
                self._advance(rec.filename)
                if reporter:
                    reporter.update("analyze", 1, text=rec.filename)
        if reporter:
            reporter.end("analyze")
        analyzed = len(done)

        # paired RAWs take over their JPEG's analysis
        for rec in records:
            if rec.id in done or not reuses_pair(rec, by_id):
                continue
            jpeg = done.get(rec.pair_id)
            if jpeg is None:
                failures.append(
                    AnalysisFailure(
                        photo_id=rec.id,
                        path=rec.path,
                        reason="paired JPEG could not be analyzed",
                    )
                )
                continue
            done[rec.id] = jpeg.model_copy(
                update={"photo_id": rec.id, "paired_with": jpeg.photo_id, "has_preview": None}
            )

        ordered = [done[r.id] for r in records if r.id in done]
        self._set_progress(phase="clustering")
        groups = self.dedup.cluster(self._clusterable(ordered), threshold, reporter)
        self._set_progress(phase="complete", current_file="")

        result = AnalysisResult(
            threshold=threshold,
            processed=analyzed,
            analyses=annotate(ordered, groups),
            groups=groups,
            failures=failures,
        )
        log.info(
            "Analysis complete: %d analyzed, %d failed, %d checksum fallback(s), %d group(s)",
            result.processed,
            len(failures),
            result.fallback_count,
            len(groups),
        )
        return result

    @staticmethod
    def _clusterable(analyses: Iterable[PhotoAnalysis]) -> dict[str, str]:
        # paired RAWs share the JPEG's hash and would always "match" it
        return {a.photo_id: a.fingerprint for a in analyses if a.paired_with is None}

    def _analyze_one(self, rec: PhotoRecord, session: ScanSession | None) -> PhotoAnalysis:
        path = Path(rec.path)
        data = path.read_bytes()

        grid: PixelGrid | None = None
        try:
            grid = self.previews.load(path, data) if rec.is_raw else self.decoder.decode(data)
        except (DecodeFailure, PreviewNotFound) as err:
            log.warning("Cannot decode %s (%s); falling back to content checksum", path, err)

        if grid is None:
            thumb = self.previews.placeholder(path) if rec.is_raw else None
            return PhotoAnalysis(
                photo_id=rec.id,
                fingerprint=checksum_fingerprint(data),
                fingerprint_source="checksum",
                has_preview=False if rec.is_raw else None,
                thumbnail_path=self._thumbnail(rec, thumb, session),
            )

        quality = self.quality.analyze(grid, self.quality_settings)
        return PhotoAnalysis(
            photo_id=rec.id,
            fingerprint=self.hasher.fingerprint(grid),
            fingerprint_source=self.hasher.name,
            blur_score=quality.blur_score,
            is_blurry=quality.is_blurry,
            eyes=quality.eyes,
            face_count=quality.face_count,
            quality_score=quality.quality_score,
            width=grid.width,
            height=grid.height,
            has_preview=True if rec.is_raw else None,
            thumbnail_path=self._thumbnail(rec, grid, session),
        )

    def _thumbnail(
        self, rec: PhotoRecord, grid: PixelGrid | None, session: ScanSession | None
    ) -> str | None:
        if session is None or grid is None:
            return None
        dest = session.thumbnails_dir / f"thumb_{rec.id}.jpg"
        try:
            write_thumbnail(
                grid,
                dest,
                max_side=self.settings.THUMBNAIL_MAX_SIDE,
                quality=self.settings.THUMBNAIL_QUALITY,
            )
        except OSError as err:
            log.warning("Failed to generate thumbnail for %s: %s", rec.path, err)
            return None
        return str(dest)
