# src/pc_app/modules/trash/filesystem.py
from __future__ import annotations

import errno
import shutil
from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class FileSystem(Protocol):
    """The filesystem operations the trash ledger relies on."""

    def exists(self, path: Path) -> bool: ...
    def is_file(self, path: Path) -> bool: ...
    def size(self, path: Path) -> int: ...
    def mkdir(self, path: Path) -> None: ...
    def listdir(self, path: Path) -> list[Path]: ...
    def move(self, src: Path, dst: Path) -> None: ...
    def read_text(self, path: Path) -> str: ...
    def write_text(self, path: Path, text: str) -> None: ...
    def delete(self, path: Path) -> None: ...


class LocalFileSystem:
    def exists(self, path: Path) -> bool:
        return path.exists()

    def is_file(self, path: Path) -> bool:
        return path.is_file()

    def size(self, path: Path) -> int:
        return path.stat().st_size

    def mkdir(self, path: Path) -> None:
        path.mkdir(parents=True, exist_ok=True)

    def listdir(self, path: Path) -> list[Path]:
        return sorted(path.iterdir())

    def move(self, src: Path, dst: Path) -> None:
        dst.parent.mkdir(parents=True, exist_ok=True)
        try:
            src.rename(dst)
        except OSError as e:
            if e.errno == errno.EXDEV:
                shutil.move(str(src), str(dst))
            else:
                raise

    def read_text(self, path: Path) -> str:
        return path.read_text(encoding="utf-8")

    def write_text(self, path: Path, text: str) -> None:
        tmp = path.with_name(path.name + ".tmp")
        tmp.write_text(text, encoding="utf-8")
        tmp.replace(path)

    def delete(self, path: Path) -> None:
        path.unlink()
