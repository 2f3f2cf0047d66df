# src/pc_app/modules/quality/eyes.py
"""
Best-effort closed-eye signal on top of a caller-supplied landmark detector.

No detector ships with the package. Without one (or when it fails) the
signal is simply "unavailable" and never affects the blur score.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Literal, Protocol, runtime_checkable

import numpy as np

from pc_app.core.imaging import PixelGrid, luminance
from pc_app.core.logging import get_logger

log = get_logger(__name__)

EyeState = Literal["open", "closed", "no_faces", "unavailable"]

EYE_REGION_FRACTION = 0.15  # of the smaller face box side


@dataclass(frozen=True)
class Face:
    x: float
    y: float
    width: float
    height: float
    eyes: Sequence[tuple[float, float]] = field(default_factory=tuple)

    def eye_pair(self) -> tuple[tuple[float, float], tuple[float, float]] | None:
        mid = self.x + self.width / 2
        left = next((e for e in self.eyes if e[0] < mid), None)
        right = next((e for e in self.eyes if e[0] > mid), None)
        if left is None or right is None:
            return None
        return left, right


@runtime_checkable
class FaceLandmarkDetector(Protocol):
    def detect(self, grid: PixelGrid) -> Sequence[Face]: ...


@dataclass(frozen=True)
class EyeReport:
    state: EyeState
    face_count: int = 0
    openness: float | None = None


def region_stddev(luma: np.ndarray, cx: float, cy: float, side: float) -> float | None:
    h, w = luma.shape
    half = side / 2
    x0, y0 = max(0, int(cx - half)), max(0, int(cy - half))
    x1, y1 = min(w, int(cx + half) + 1), min(h, int(cy + half) + 1)
    region = luma[y0:y1, x0:x1]
    if region.size == 0:
        return None
    return float(region.std())


def eye_openness(luma: np.ndarray, face: Face) -> float | None:
    """Mean luma std-dev of both eye regions; low texture reads as a closed lid."""
    pair = face.eye_pair()
    if pair is None:
        return None
    side = max(1.0, min(face.width, face.height) * EYE_REGION_FRACTION)
    scores = [region_stddev(luma, ex, ey, side) for ex, ey in pair]
    if any(s is None for s in scores):
        return None
    return sum(scores) / 2


class EyeStateEstimator:
    def __init__(
        self, detector: FaceLandmarkDetector | None = None, threshold: float = 8.0
    ) -> None:
        self.detector = detector
        self.threshold = threshold

    @property
    def available(self) -> bool:
        return self.detector is not None

    def estimate(self, grid: PixelGrid) -> EyeReport:
        if self.detector is None:
            return EyeReport(state="unavailable")
        try:
            faces = list(self.detector.detect(grid))
        except Exception as err:
            log.warning("Face detection failed: %s", err)
            return EyeReport(state="unavailable")

        if not faces:
            return EyeReport(state="no_faces")

        luma = luminance(grid.pixels)
        measured: list[float] = []
        for face in faces:
            score = eye_openness(luma, face)
            if score is None:
                continue
            measured.append(score)
            if score < self.threshold:
                return EyeReport(state="closed", face_count=len(faces), openness=score)

        if not measured:
            return EyeReport(state="unavailable", face_count=len(faces))
        return EyeReport(state="open", face_count=len(faces), openness=min(measured))
