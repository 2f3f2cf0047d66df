# src/pc_app/modules/dedup/strategies/phash.py
from __future__ import annotations

import imagehash

from pc_app.core.imaging import PixelGrid

from .base import FINGERPRINT_BITS, FingerprintStrategy


class PHashStrategy(FingerprintStrategy):
    """
    DCT perceptual hash via `imagehash`, sized to the same 64 bits as dHash
    so both feed the same clusterer.
    """

    name = "phash"

    def __init__(self, hash_fn=imagehash.phash, hash_size: int = 8) -> None:
        if hash_size * hash_size != FINGERPRINT_BITS:
            raise ValueError(f"hash_size must yield {FINGERPRINT_BITS} bits")
        self.hash_fn = hash_fn
        self.hash_size = hash_size

    def fingerprint(self, grid: PixelGrid) -> str:
        h = self.hash_fn(grid.to_image(), hash_size=self.hash_size)
        return f"{int(str(h), 16):0{FINGERPRINT_BITS // 4}x}"
