# src/pc_app/modules/trash/router.py
from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Query

from pc_app.api.deps import SettingsDep
from pc_app.core.errors import to_http

from .ledger import TrashLedger
from .schemas import (
    MoveToTrashRequest,
    PurgeResult,
    RestoreRequest,
    TrashBatchResult,
    TrashStatus,
)

router = APIRouter(prefix="/trash", tags=["trash"])


@router.post(
    "/move",
    response_model=TrashBatchResult,
    summary="Move photos into the project's .trash directory",
    description=(
        "Each file is moved to `<root>/.trash/<epochMillis>_<filename>` and a "
        "`.metadata.json` sidecar is written after the move. Missing files are "
        "reported under `failed`; the rest of the batch still proceeds."
    ),
)
def move_to_trash(req: MoveToTrashRequest, settings: SettingsDep) -> TrashBatchResult:
    try:
        ledger = TrashLedger(Path(req.root), trash_dirname=settings.TRASH_DIRNAME)
        return ledger.move_to_trash(req.items)
    except Exception as err:
        raise to_http(err) from err


@router.post(
    "/restore",
    response_model=TrashBatchResult,
    summary="Restore trashed photos to their original paths",
)
def restore(req: RestoreRequest, settings: SettingsDep) -> TrashBatchResult:
    try:
        ledger = TrashLedger(Path(req.root), trash_dirname=settings.TRASH_DIRNAME)
        return ledger.restore_from_trash(req.ids)
    except Exception as err:
        raise to_http(err) from err


@router.delete(
    "",
    response_model=PurgeResult,
    summary="Permanently delete everything in the project's trash",
)
def empty_trash(settings: SettingsDep, root: Path = Query(...)) -> PurgeResult:
    try:
        ledger = TrashLedger(root, trash_dirname=settings.TRASH_DIRNAME)
        return ledger.empty_trash()
    except Exception as err:
        raise to_http(err) from err


@router.get(
    "/status",
    response_model=TrashStatus,
    summary="Trash contents and total size, read fresh from disk",
)
def status(settings: SettingsDep, root: Path = Query(...)) -> TrashStatus:
    try:
        ledger = TrashLedger(root, trash_dirname=settings.TRASH_DIRNAME)
        return ledger.get_status()
    except Exception as err:
        raise to_http(err) from err
