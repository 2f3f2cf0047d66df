# src/pc_app/modules/dedup/schemas.py
from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

HEX64_PATTERN = r"^[0-9a-fA-F]{16}$"


class HashStrategy(str, Enum):
    dhash = "dhash"
    phash = "phash"


class DuplicateGroup(BaseModel):
    """A set of photos whose similarity to the group's seed meets the threshold."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., examples=["dup_group_1"])
    photo_ids: tuple[str, ...] = Field(
        ...,
        min_length=2,
        description="Member ids; the first one is the seed the others were compared to.",
    )
    threshold: float = Field(..., ge=0, le=100, examples=[85.0])

    @property
    def seed(self) -> str:
        return self.photo_ids[0]


class ClusterRequest(BaseModel):
    fingerprints: dict[str, str] = Field(
        ...,
        description="photo id -> 16 hex char fingerprint; iteration order is the clustering order.",
        examples=[{"a": "f0f0f0f0f0f0f0f0", "b": "f0f0f0f0f0f0f0f1"}],
    )
    threshold: float = Field(85.0, ge=0, le=100, description="Minimum similarity percent.")

    @field_validator("fingerprints")
    @classmethod
    def _hex64(cls, v: dict[str, str]) -> dict[str, str]:
        bad = [k for k, h in v.items() if len(h) != 16 or not all(c in "0123456789abcdefABCDEF" for c in h)]
        if bad:
            raise ValueError(f"fingerprints must be 16 hex chars: {', '.join(bad[:5])}")
        return {k: h.lower() for k, h in v.items()}


class ClusterResponse(BaseModel):
    threshold: float
    groups_count: int = Field(..., ge=0)
    duplicates_count: int = Field(
        ..., ge=0, description="Photos in a group beyond each group's seed."
    )
    groups: list[DuplicateGroup] = Field(default_factory=list)


class SimilarityResponse(BaseModel):
    distance: int = Field(..., ge=0, le=64)
    similarity: float = Field(..., ge=0, le=100)
