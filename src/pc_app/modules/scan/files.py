# src/pc_app/modules/scan/files.py
from __future__ import annotations

import os
from collections.abc import Iterable, Iterator
from datetime import datetime, timezone
from pathlib import Path
from uuid import uuid4

from pc_app.core.logging import get_logger
from pc_app.core.media_types import IMAGE_EXTS, classify

from .schemas import PhotoRecord

log = get_logger(__name__)

SKIP_DIR_NAMES = {"node_modules", "thumbs", "_thumbnails"}


def iter_photo_files(
    root: Path,
    exts: Iterable[str] = IMAGE_EXTS,
    skip_dirs: Iterable[str] = SKIP_DIR_NAMES,
) -> Iterator[Path]:
    """
    Supported image files under root, depth-first in sorted order. Hidden
    directories (including .trash) and known cache folders are pruned.
    """
    exts = {e.lower() for e in exts}
    skip = {d.lower() for d in skip_dirs}

    def _on_error(err: OSError) -> None:
        log.error("Error scanning directory %s: %s", err.filename, err.strerror)

    for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error):
        # Prune excluded names so we don't descend into them
        dirnames[:] = sorted(
            d for d in dirnames if not d.startswith(".") and d.lower() not in skip
        )
        for name in sorted(filenames):
            if Path(name).suffix.lower() in exts:
                yield Path(dirpath) / name


def build_record(path: Path) -> PhotoRecord:
    stat = path.stat()
    birth = getattr(stat, "st_birthtime", None) or stat.st_ctime
    kind = classify(path)
    return PhotoRecord(
        id=uuid4().hex,
        path=str(path.resolve()),
        filename=path.name,
        size=stat.st_size,
        created_at=datetime.fromtimestamp(birth, tz=timezone.utc),
        modified_at=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
        format=path.suffix.lower().lstrip("."),
        is_raw=kind.is_raw,
    )
