# src/pc_app/modules/trash/schemas.py
from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, DirectoryPath, Field
from pydantic.alias_generators import to_camel

SIDECAR_SUFFIX = ".metadata.json"


class TrashEntry(BaseModel):
    """
    One trashed file. Serialized (camelCase) as the sidecar
    `{tempName}.metadata.json` next to the file it describes.
    """

    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True
    )

    id: str = Field(..., examples=["4f1c2a..."])
    original_path: str = Field(..., examples=["/data/input/album/IMG_0001.jpg"])
    filename: str = Field(..., examples=["IMG_0001.jpg"])
    size: int = Field(0, ge=0)
    deleted_at: str = Field(..., description="ISO-8601 UTC timestamp.")
    temp_path: str = Field(
        ..., examples=["/data/input/.trash/1718000000000_IMG_0001.jpg"]
    )
    trash_dir: Optional[str] = Field(  # noqa: UP045
        None, description="Owning trash directory (not stored in the sidecar)."
    )

    def to_sidecar(self) -> str:
        return self.model_dump_json(by_alias=True, exclude={"trash_dir"}, indent=2)


class TrashItem(BaseModel):
    """What the ledger needs to know about a file it is asked to trash."""

    id: str
    path: str
    filename: Optional[str] = None  # noqa: UP045
    size: Optional[int] = Field(None, ge=0)  # noqa: UP045


class TrashFailure(BaseModel):
    id: str
    path: Optional[str] = None  # noqa: UP045
    reason: str


class TrashInconsistency(BaseModel):
    kind: Literal["orphan_sidecar", "missing_sidecar", "unreadable_sidecar"]
    path: str
    detail: str = ""


class TrashBatchResult(BaseModel):
    """Per-item outcome of a move or restore batch; never rolled back."""

    succeeded: list[TrashEntry] = Field(default_factory=list)
    skipped: list[str] = Field(
        default_factory=list, description="Ids that needed no action (e.g. unknown to the trash)."
    )
    failed: list[TrashFailure] = Field(default_factory=list)

    @property
    def success_count(self) -> int:
        return len(self.succeeded)

    @property
    def failure_count(self) -> int:
        return len(self.failed)


class PurgeResult(BaseModel):
    deleted_count: int = Field(0, ge=0, description="Trashed files actually deleted.")
    orphaned_count: int = Field(0, ge=0, description="Sidecars whose file was already gone.")
    failed_count: int = Field(0, ge=0)
    inconsistencies: list[TrashInconsistency] = Field(default_factory=list)


class TrashStatus(BaseModel):
    trash_dir: str
    file_count: int = Field(0, ge=0)
    total_size: int = Field(0, ge=0)
    entries: list[TrashEntry] = Field(default_factory=list)
    inconsistencies: list[TrashInconsistency] = Field(default_factory=list)


# ---- HTTP payloads ------------------------------------------------------------
class MoveToTrashRequest(BaseModel):
    root: DirectoryPath = Field(..., description="Scanned project root owning the trash.")
    items: list[TrashItem] = Field(default_factory=list)


class RestoreRequest(BaseModel):
    root: DirectoryPath
    ids: list[str] = Field(default_factory=list)
