# src/pc_app/core/config.py
from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    App settings (12-factor). Override via env vars, e.g.
      PC_SIMILARITY_THRESHOLD=90  PC_BLUR_THRESHOLD=80
    """

    # App
    VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # Per-project directories, created beside the scanned root
    THUMBNAILS_DIRNAME: str = "_thumbnails"
    TRASH_DIRNAME: str = ".trash"

    # Duplicate detection
    HASH_STRATEGY: Literal["dhash", "phash"] = "dhash"
    SIMILARITY_THRESHOLD: float = Field(85.0, ge=0, le=100)

    # Quality
    BLUR_THRESHOLD: float = Field(100.0, ge=0)
    BLUR_STRIDE: int = Field(4, ge=1)
    BLUR_MAX_SIDE: int = Field(800, ge=16)
    CLOSED_EYE_THRESHOLD: float = Field(8.0, ge=0)

    # RAW previews / thumbnails
    PREVIEW_MIN_BYTES: int = Field(1024, ge=0)
    THUMBNAIL_MAX_SIDE: int = Field(800, ge=16)
    THUMBNAIL_QUALITY: int = Field(92, ge=1, le=100)

    # 0 = auto (see get_worker_count)
    ANALYZE_WORKERS: int = Field(0, ge=0)

    model_config = SettingsConfigDict(
        env_prefix="PC_",
        env_file=".env",
        extra="ignore",
    )

    @field_validator("THUMBNAILS_DIRNAME", "TRASH_DIRNAME")
    @classmethod
    def _plain_dirname(cls, name: str) -> str:
        if not name or "/" in name or "\\" in name or name in {".", ".."}:
            raise ValueError(f"not a plain directory name: {name!r}")
        return name


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    FastAPI-friendly cached getter. Use Depends(get_settings) where needed.
    """
    return Settings()
