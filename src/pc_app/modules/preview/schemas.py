# src/pc_app/modules/preview/schemas.py
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, FilePath


class ExtractPreviewRequest(BaseModel):
    path: FilePath = Field(..., examples=["/data/input/DSC_0001.NEF"])
    save_to: Optional[str] = Field(  # noqa: UP045
        None,
        description="Write the extracted JPEG here when a preview is found.",
        examples=["/data/output/DSC_0001.preview.jpg"],
    )
    min_size: int = Field(1024, ge=0, description="Size floor in bytes for candidates.")


class ExtractPreviewResponse(BaseModel):
    path: str
    format: str = Field(..., examples=["NEF"])
    manufacturer: Optional[str] = Field(None, examples=["Nikon"])  # noqa: UP045
    found: bool = Field(..., description="A candidate above the size floor exists.")
    decodable: bool = Field(
        False, description="The candidate decoded into pixels (false => placeholder)."
    )
    start: Optional[int] = Field(None, ge=0)  # noqa: UP045
    end: Optional[int] = Field(None, ge=0)  # noqa: UP045
    length: int = Field(0, ge=0)
    width: Optional[int] = None  # noqa: UP045
    height: Optional[int] = None  # noqa: UP045
    saved_to: Optional[str] = None  # noqa: UP045
