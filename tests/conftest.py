"""
Shared fixtures: synthetic images written to isolated temp project folders.
"""
from __future__ import annotations

import io
from pathlib import Path
from typing import Callable, Dict

import numpy as np
import pytest
from PIL import Image

from pc_app.core.config import Settings
from pc_app.core.imaging import PixelGrid
from pc_app.modules.scan.service import ScanPipeline


def gradient(width: int = 90, height: int = 80, rising: bool = True) -> np.ndarray:
    """Horizontal grey ramp, brightening left to right when `rising`."""
    ramp = (np.arange(width) * (255 / (width - 1))).astype(np.uint8)
    if not rising:
        ramp = ramp[::-1]
    return np.repeat(np.repeat(ramp[None, :, None], height, axis=0), 3, axis=2)


def noise(width: int = 120, height: int = 100, seed: int = 0) -> np.ndarray:
    """Grey random noise; very high local contrast."""
    plane = np.random.default_rng(seed).integers(0, 256, size=(height, width), dtype=np.uint8)
    return np.repeat(plane[:, :, None], 3, axis=2)


def flat(width: int = 64, height: int = 48, value: int = 128) -> np.ndarray:
    return np.full((height, width, 3), value, dtype=np.uint8)


def encode(pixels: np.ndarray, fmt: str = "PNG", **kwargs) -> bytes:
    buf = io.BytesIO()
    Image.fromarray(pixels).save(buf, format=fmt, **kwargs)
    return buf.getvalue()


def fake_raw(preview: bytes | None, header: bytes = b"II*\x00") -> bytes:
    """Opaque container bytes with an optional embedded JPEG preview."""
    body = header + b"\x00" * 512
    if preview is not None:
        body += preview
    return body + b"\x00" * 256


@pytest.fixture
def project(tmp_path) -> Path:
    """Empty project root."""
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def write_image(project) -> Callable[..., Path]:
    def _write(name: str, pixels: np.ndarray, fmt: str = "PNG", **kwargs) -> Path:
        path = project / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(encode(pixels, fmt, **kwargs))
        return path

    return _write


@pytest.fixture
def settings() -> Settings:
    return Settings(ANALYZE_WORKERS=2, SIMILARITY_THRESHOLD=85)


@pytest.fixture
def pipeline(settings) -> ScanPipeline:
    return ScanPipeline(settings)


@pytest.fixture
def grids() -> Dict[str, PixelGrid]:
    return {
        "rising": PixelGrid(gradient(rising=True)),
        "falling": PixelGrid(gradient(rising=False)),
        "flat": PixelGrid(flat()),
        "noise": PixelGrid(noise()),
    }
