# src/pc_app/modules/quality/schemas.py
from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field, FilePath


class QualitySettings(BaseModel):
    enable_blur_detection: bool = True
    enable_closed_eye_detection: bool = False
    blur_threshold: float = Field(100.0, ge=0, description="Scores below this are blurry.")
    auto_select_blurry: bool = False
    auto_select_closed_eyes: bool = False


class QualityResult(BaseModel):
    blur_score: Optional[float] = Field(None, ge=0)  # noqa: UP045
    is_blurry: bool = False
    eyes: Literal["open", "closed", "no_faces", "unavailable"] = "unavailable"
    face_count: int = Field(0, ge=0)
    quality_score: int = Field(0, ge=0, le=100)

    @property
    def has_closed_eyes(self) -> bool:
        return self.eyes == "closed"


class ScoreRequest(BaseModel):
    path: FilePath = Field(..., examples=["/data/input/IMG_0001.jpg"])
    settings: QualitySettings = Field(default_factory=QualitySettings)


class ScoreResponse(BaseModel):
    path: str
    width: int
    height: int
    result: QualityResult
    auto_select: bool = Field(
        False, description="True when the settings' auto-select rules flag this photo."
    )
