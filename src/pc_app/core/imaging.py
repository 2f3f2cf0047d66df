# src/pc_app/core/imaging.py
"""
Pixel-level plumbing shared by the fingerprint, quality and preview modules.

Everything downstream of decoding works on a `PixelGrid` (an RGB uint8 array),
so the analysis code never touches codecs directly. `PillowDecoder` is the
default `ImageDecoder`; anything exposing the same `decode(bytes)` method can
be injected instead.
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

import numpy as np
from PIL import Image, UnidentifiedImageError
from pillow_heif import register_heif_opener

from pc_app.core.errors import DecodeFailure

# ITU-R BT.601 luma weights
LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114], dtype=np.float64)


@dataclass(frozen=True)
class PixelGrid:
    """Decoded RGB pixels, shape (height, width, 3), dtype uint8."""

    pixels: np.ndarray

    def __post_init__(self) -> None:
        px = self.pixels
        if px.ndim != 3 or px.shape[2] != 3 or px.dtype != np.uint8:
            raise ValueError(f"expected (h, w, 3) uint8 pixels, got {px.shape} {px.dtype}")

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @classmethod
    def from_image(cls, im: Image.Image) -> PixelGrid:
        if im.mode in ("RGBA", "LA", "P"):
            im = im.convert("RGBA")
            background = Image.new("RGBA", im.size, (255, 255, 255, 255))
            im = Image.alpha_composite(background, im)
        return cls(np.asarray(im.convert("RGB"), dtype=np.uint8).copy())

    def to_image(self) -> Image.Image:
        return Image.fromarray(np.ascontiguousarray(self.pixels))


@runtime_checkable
class ImageDecoder(Protocol):
    def decode(self, data: bytes) -> PixelGrid: ...


class PillowDecoder:
    """Decode compressed image bytes with Pillow (+ HEIF/AVIF via pillow-heif)."""

    _HEIF_REGISTERED = False

    def __init__(self) -> None:
        self._ensure_heif_registered()

    @classmethod
    def _ensure_heif_registered(cls) -> None:
        if cls._HEIF_REGISTERED:
            return
        register_heif_opener()
        cls._HEIF_REGISTERED = True

    def decode(self, data: bytes) -> PixelGrid:
        try:
            with Image.open(io.BytesIO(data)) as im:
                if getattr(im, "is_animated", False):
                    im.seek(0)
                im.load()
                return PixelGrid.from_image(im)
        except (
            UnidentifiedImageError,
            Image.DecompressionBombError,
            OSError,
            ValueError,
            SyntaxError,
        ) as err:
            raise DecodeFailure(f"cannot decode image: {err}") from err


def as_pixels(pixels: np.ndarray | PixelGrid, width: int, height: int) -> np.ndarray:
    """Validate a raw (h, w, 3) array against the declared dimensions."""
    arr = pixels.pixels if isinstance(pixels, PixelGrid) else np.asarray(pixels)
    if arr.ndim != 3 or arr.shape[2] != 3:
        raise DecodeFailure(f"expected RGB pixel grid, got shape {arr.shape}")
    if arr.shape[0] != height or arr.shape[1] != width:
        raise DecodeFailure(
            f"pixel grid is {arr.shape[1]}x{arr.shape[0]}, declared {width}x{height}"
        )
    if width < 1 or height < 1:
        raise DecodeFailure("empty pixel grid")
    return arr.astype(np.uint8, copy=False)


def luminance(pixels: np.ndarray) -> np.ndarray:
    """Float luma plane, shape (h, w)."""
    return pixels[..., :3].astype(np.float64) @ LUMA_WEIGHTS


def resample(pixels: np.ndarray, width: int, height: int) -> np.ndarray:
    """Bilinear resize to exactly width x height."""
    im = Image.fromarray(np.ascontiguousarray(pixels, dtype=np.uint8))
    return np.asarray(im.resize((width, height), Image.Resampling.BILINEAR))


def fit_within(width: int, height: int, max_side: int) -> tuple[int, int]:
    """Dimensions scaled down (never up) so the longest side is <= max_side."""
    longest = max(width, height)
    if longest <= max_side:
        return width, height
    scale = max_side / longest
    return max(1, int(width * scale)), max(1, int(height * scale))


def write_thumbnail(
    grid: PixelGrid, dest: Path, max_side: int = 800, quality: int = 92
) -> Path:
    """Write an aspect-preserving JPEG thumbnail of `grid` to `dest`."""
    w, h = fit_within(grid.width, grid.height, max_side)
    im = grid.to_image()
    if (w, h) != (grid.width, grid.height):
        im = im.resize((w, h), Image.Resampling.LANCZOS)
    dest.parent.mkdir(parents=True, exist_ok=True)
    im.save(dest, format="JPEG", quality=quality, optimize=True)
    return dest
