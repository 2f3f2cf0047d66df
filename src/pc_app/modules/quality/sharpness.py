# src/pc_app/modules/quality/sharpness.py
from __future__ import annotations

import math

import numpy as np

from pc_app.core.imaging import PixelGrid, as_pixels, fit_within, luminance, resample


class SharpnessScorer:
    """
    RMS gradient magnitude over a sparse sample of the luma plane.

    The image is first bounded to `max_side`; then every `stride`-th pixel in
    each axis (1 px border excluded) contributes dx = right - centre and
    dy = below - centre. Returns sqrt(mean(dx**2 + dy**2)); a flat image
    scores exactly 0.
    """

    def __init__(self, stride: int = 4, max_side: int = 800) -> None:
        if stride < 1:
            raise ValueError("stride must be >= 1")
        if max_side < 3:
            raise ValueError("max_side must be >= 3")
        self.stride = stride
        self.max_side = max_side

    def score(self, pixels: np.ndarray | PixelGrid, width: int, height: int) -> float:
        arr = as_pixels(pixels, width, height)
        w, h = fit_within(width, height, self.max_side)
        if (w, h) != (width, height):
            arr = resample(arr, w, h)

        luma = luminance(arr)
        ys = np.arange(1, h - 1, self.stride)
        xs = np.arange(1, w - 1, self.stride)
        if ys.size == 0 or xs.size == 0:
            return 0.0

        centre = luma[np.ix_(ys, xs)]
        dx = luma[np.ix_(ys, xs + 1)] - centre
        dy = luma[np.ix_(ys + 1, xs)] - centre
        return math.sqrt(float(np.mean(dx * dx + dy * dy)))

    def score_grid(self, grid: PixelGrid) -> float:
        return self.score(grid.pixels, grid.width, grid.height)
