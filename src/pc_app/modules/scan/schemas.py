# src/pc_app/modules/scan/schemas.py
from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, DirectoryPath, Field

from pc_app.modules.dedup.schemas import DuplicateGroup


class PhotoRecord(BaseModel):
    id: str = Field(..., examples=["9b2f0c4e5d..."])
    path: str = Field(..., examples=["/data/input/album/IMG_0001.jpg"])
    filename: str = Field(..., examples=["IMG_0001.jpg"])
    size: int = Field(..., ge=0)
    created_at: datetime
    modified_at: datetime
    format: str = Field(..., examples=["jpg", "nef"])
    is_raw: bool = False
    pair_id: Optional[str] = Field(  # noqa: UP045
        None, description="Id of the sibling RAW/JPEG sharing this file's base name."
    )
    width: Optional[int] = None  # noqa: UP045
    height: Optional[int] = None  # noqa: UP045
    fingerprint: Optional[str] = None  # noqa: UP045
    thumbnail_path: Optional[str] = None  # noqa: UP045


class PhotoAnalysis(BaseModel):
    photo_id: str
    fingerprint: str = Field(..., min_length=16, max_length=16)
    fingerprint_source: Literal["dhash", "phash", "checksum"] = "dhash"
    blur_score: Optional[float] = Field(None, ge=0)  # noqa: UP045
    is_blurry: bool = False
    eyes: Literal["open", "closed", "no_faces", "unavailable"] = "unavailable"
    face_count: int = 0
    quality_score: Optional[int] = None  # noqa: UP045
    width: Optional[int] = None  # noqa: UP045
    height: Optional[int] = None  # noqa: UP045
    has_preview: Optional[bool] = Field(  # noqa: UP045
        None, description="RAW only: an embedded preview decoded (false => placeholder)."
    )
    thumbnail_path: Optional[str] = None  # noqa: UP045
    paired_with: Optional[str] = Field(  # noqa: UP045
        None, description="Set on a RAW that reuses its paired JPEG's analysis."
    )
    is_duplicate: bool = False
    duplicate_group: Optional[str] = None  # noqa: UP045


class AnalysisFailure(BaseModel):
    photo_id: str
    path: str
    reason: str


class AnalysisResult(BaseModel):
    threshold: float
    processed: int = Field(0, ge=0, description="Files analyzed independently.")
    analyses: list[PhotoAnalysis] = Field(default_factory=list)
    groups: list[DuplicateGroup] = Field(default_factory=list)
    failures: list[AnalysisFailure] = Field(default_factory=list)

    @property
    def fingerprints(self) -> dict[str, str]:
        return {a.photo_id: a.fingerprint for a in self.analyses}

    @property
    def fallback_count(self) -> int:
        return sum(1 for a in self.analyses if a.fingerprint_source == "checksum")


class ScanProgress(BaseModel):
    total_files: int = 0
    processed_files: int = 0
    current_file: str = ""
    phase: Literal["idle", "scanning", "analyzing", "clustering", "complete"] = "idle"


# ---- HTTP payloads ------------------------------------------------------------
class ScanRequest(BaseModel):
    root: DirectoryPath = Field(..., examples=["/data/input"])


class ScanResponse(BaseModel):
    root: str
    photos_found: int = Field(..., ge=0)
    photos: list[PhotoRecord] = Field(default_factory=list)


class AnalyzeRequest(BaseModel):
    root: DirectoryPath = Field(..., examples=["/data/input"])
    threshold: Optional[float] = Field(  # noqa: UP045
        None, ge=0, le=100, description="Similarity percent; defaults to PC_SIMILARITY_THRESHOLD."
    )


class AnalyzeResponse(BaseModel):
    root: str
    photos: list[PhotoRecord] = Field(default_factory=list)
    result: AnalysisResult
    blurry_count: int = Field(0, ge=0)
    duplicates_count: int = Field(0, ge=0)
