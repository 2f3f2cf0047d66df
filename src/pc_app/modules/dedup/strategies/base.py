# src/pc_app/modules/dedup/strategies/base.py
from __future__ import annotations

import os
from abc import ABC, abstractmethod

from pc_app.core.imaging import PixelGrid

__all__ = [
    "FINGERPRINT_BITS",
    "FingerprintStrategy",
    "get_worker_count",
]

FINGERPRINT_BITS = 64


class FingerprintStrategy(ABC):
    """Strategy interface for 64-bit perceptual fingerprints (16 hex chars)."""

    name: str = ""

    @abstractmethod
    def fingerprint(self, grid: PixelGrid) -> str:
        raise NotImplementedError


def get_worker_count(
    *,
    env_var: str = "PC_ANALYZE_WORKERS",
    io_bound: bool = True,
    minimum: int = 4,
    cap: int = 64,
) -> int:
    """
    Decide a sensible default pool size. Override via env var `PC_ANALYZE_WORKERS`.

    io_bound=True  -> allow more threads (e.g., hashing/decoding + disk IO)
    io_bound=False -> closer to CPU count
    """
    # explicit override
    val = os.getenv(env_var)
    if val:
        try:
            n = int(val)
            if n > 0:
                return n
        except ValueError:
            pass

    cpu = os.cpu_count() or 4
    n = (cpu * 4) if io_bound else cpu
    n = max(minimum, min(cap, n))
    return n
