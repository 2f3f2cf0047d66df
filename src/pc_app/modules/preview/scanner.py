# src/pc_app/modules/preview/scanner.py
"""
Embedded JPEG preview extraction from RAW containers.

Treats the file as an opaque byte stream: every SOI (FF D8) paired with the
nearest EOI (FF D9) after it is a candidate, and the largest candidate above
the size floor wins. No TIFF/IFD structure is interpreted; the per-maker
extractors below only route to the generic scan.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass

from pc_app.core.errors import PreviewNotFound
from pc_app.core.media_types import classify

SOI = b"\xff\xd8"
EOI = b"\xff\xd9"
MIN_PREVIEW_BYTES = 1024  # rejects EXIF icon-sized thumbnails


@dataclass(frozen=True)
class ExtractedPreview:
    data: bytes
    start: int
    end: int  # exclusive

    @property
    def length(self) -> int:
        return len(self.data)


def iter_marker_spans(buffer: bytes) -> Iterator[tuple[int, int]]:
    """Yield (start, end_exclusive) for each SOI and the first EOI following it."""
    pos = 0
    while True:
        start = buffer.find(SOI, pos)
        if start < 0:
            return
        eoi = buffer.find(EOI, start + 2)
        if eoi < 0:
            # no later SOI can close either
            return
        yield start, eoi + 2
        pos = start + 2


def extract_best_preview(
    buffer: bytes, min_size: int = MIN_PREVIEW_BYTES
) -> ExtractedPreview:
    """
    Largest marker-delimited span strictly longer than `min_size`; the first
    one wins on ties. The bytes are not validated here.
    """
    best: tuple[int, int] | None = None
    for start, end in iter_marker_spans(buffer):
        size = end - start
        if size <= min_size:
            continue
        if best is None or size > best[1] - best[0]:
            best = (start, end)
    if best is None:
        raise PreviewNotFound(f"no embedded preview larger than {min_size} bytes")
    start, end = best
    return ExtractedPreview(data=bytes(buffer[start:end]), start=start, end=end)


# ---- per-format routing -----------------------------------------------------
Extractor = Callable[[bytes, int], ExtractedPreview]


def _extract_generic(buffer: bytes, min_size: int) -> ExtractedPreview:
    return extract_best_preview(buffer, min_size)


def _extract_tiff_based(buffer: bytes, min_size: int) -> ExtractedPreview:
    # DNG must at least carry a TIFF byte-order mark
    if len(buffer) < 8 or buffer[:2] not in (b"II", b"MM"):
        raise PreviewNotFound("missing TIFF header")
    return extract_best_preview(buffer, min_size)


EXTRACTORS: dict[str, Extractor] = {
    "DNG": _extract_tiff_based,
    "CR2": _extract_generic,
    "CR3": _extract_generic,
    "NEF": _extract_generic,
    "ARW": _extract_generic,
    "RAF": _extract_generic,
    "ORF": _extract_generic,
    "RW2": _extract_generic,
    "PEF": _extract_generic,
    "SRW": _extract_generic,
    "X3F": _extract_generic,
}


def extract_preview(
    filename: str, buffer: bytes, min_size: int = MIN_PREVIEW_BYTES
) -> ExtractedPreview:
    """Route by RAW format; unknown formats use the generic scan."""
    kind = classify(filename)
    extractor = EXTRACTORS.get(kind.format, _extract_generic)
    return extractor(buffer, min_size)
