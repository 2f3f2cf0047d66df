# src/pc_app/modules/scan/pairing.py
from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from pc_app.core.media_types import is_jpeg

from .schemas import PhotoRecord


def pair_raw_jpeg(records: Iterable[PhotoRecord]) -> list[PhotoRecord]:
    """
    Link RAW and JPEG files that share a directory and a (case-insensitive)
    base name. Returns new records with `pair_id` set on both sides; the
    first RAW and first JPEG seen for a name win.
    """
    records = list(records)
    slots: dict[tuple[str, str], dict[str, PhotoRecord]] = {}
    for rec in records:
        p = Path(rec.path)
        if rec.is_raw:
            kind = "raw"
        elif is_jpeg(p):
            kind = "jpeg"
        else:
            continue
        slots.setdefault((str(p.parent), p.stem.lower()), {}).setdefault(kind, rec)

    partner: dict[str, str] = {}
    for slot in slots.values():
        if "raw" in slot and "jpeg" in slot:
            raw, jpeg = slot["raw"], slot["jpeg"]
            partner[raw.id] = jpeg.id
            partner[jpeg.id] = raw.id

    return [
        rec.model_copy(update={"pair_id": partner[rec.id]}) if rec.id in partner else rec
        for rec in records
    ]


def reuses_pair(rec: PhotoRecord, by_id: dict[str, PhotoRecord]) -> bool:
    """A RAW whose paired JPEG is present is analyzed through that JPEG."""
    if not rec.is_raw or rec.pair_id is None:
        return False
    partner = by_id.get(rec.pair_id)
    return partner is not None and not partner.is_raw
