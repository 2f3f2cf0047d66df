# src/pc_app/core/media_types.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

JPEG_EXTS: set[str] = {".jpg", ".jpeg"}

# extension -> (manufacturer, format tag)
RAW_FORMATS: dict[str, tuple[str, str]] = {
    ".cr2": ("Canon", "CR2"),
    ".cr3": ("Canon", "CR3"),
    ".nef": ("Nikon", "NEF"),
    ".arw": ("Sony", "ARW"),
    ".dng": ("Adobe", "DNG"),
    ".raf": ("Fujifilm", "RAF"),
    ".orf": ("Olympus", "ORF"),
    ".rw2": ("Panasonic", "RW2"),
    ".pef": ("Pentax", "PEF"),
    ".srw": ("Samsung", "SRW"),
    ".x3f": ("Sigma", "X3F"),
}

RAW_EXTS: set[str] = set(RAW_FORMATS)

IMAGE_EXTS: set[str] = {
    *JPEG_EXTS,
    ".png",
    ".gif",
    ".bmp",
    ".tif",
    ".tiff",
    ".webp",
    ".heic",
    ".heif",
    ".avif",
    *RAW_EXTS,
}


@dataclass(frozen=True)
class FileKind:
    is_raw: bool
    format: str
    manufacturer: str | None = None


def classify(path: str | Path) -> FileKind:
    """Format tag (and camera maker for RAW containers) from the file name."""
    ext = Path(path).suffix.lower()
    if ext in RAW_FORMATS:
        manufacturer, fmt = RAW_FORMATS[ext]
        return FileKind(is_raw=True, format=fmt, manufacturer=manufacturer)
    return FileKind(is_raw=False, format=ext.lstrip(".").upper() or "UNKNOWN")


def is_raw(path: str | Path) -> bool:
    return Path(path).suffix.lower() in RAW_EXTS


def is_jpeg(path: str | Path) -> bool:
    return Path(path).suffix.lower() in JPEG_EXTS
