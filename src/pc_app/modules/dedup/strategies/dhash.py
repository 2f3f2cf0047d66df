# src/pc_app/modules/dedup/strategies/dhash.py
from __future__ import annotations

import numpy as np

from pc_app.core.imaging import PixelGrid, as_pixels, luminance, resample

from .base import FINGERPRINT_BITS, FingerprintStrategy

HASH_SIZE = 8  # 8 rows x (8 + 1) columns -> 64 comparisons


def fingerprint(pixels: np.ndarray | PixelGrid, width: int, height: int) -> str:
    """
    Difference hash of an RGB pixel grid as 16 lower-case hex chars.

    The grid is resampled to 9x8, converted to rounded luma, and each of the
    64 bits is 1 when a sample is strictly darker than its right neighbour
    (row-major, most significant bit first). Captures gradient direction, so
    it survives re-compression and exposure shifts but not rotation or crops.
    """
    arr = as_pixels(pixels, width, height)
    small = resample(arr, HASH_SIZE + 1, HASH_SIZE)
    # round half up, matching the usual luma quantisation
    luma = np.floor(luminance(small) + 0.5)
    bits = luma[:, :-1] < luma[:, 1:]

    value = 0
    for bit in bits.ravel():
        value = (value << 1) | int(bit)
    return f"{value:0{FINGERPRINT_BITS // 4}x}"


class DHashStrategy(FingerprintStrategy):
    """Gradient-direction hash computed directly from decoded pixels."""

    name = "dhash"

    def fingerprint(self, grid: PixelGrid) -> str:
        return fingerprint(grid.pixels, grid.width, grid.height)
