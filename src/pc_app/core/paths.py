from __future__ import annotations

import re
from pathlib import Path

# " (RAW+JPEG)" style labels added to display names by pairing
DECORATION_RE = re.compile(r"\s*\([^)]*\)")


def strip_decorations(name: str) -> str:
    """
    Drop parenthetical display suffixes, e.g. 'IMG_1 (RAW+JPEG).jpg' -> 'IMG_1.jpg'.
    """
    cleaned = DECORATION_RE.sub("", name).strip()
    return cleaned or name


def resolve_absolute(path: str | Path, base: Path | None = None) -> Path:
    """
    Absolute form of `path`; relative paths are taken against `base` (default: cwd).
    """
    p = Path(path).expanduser()
    if not p.is_absolute():
        p = (base or Path.cwd()) / p
    return p.resolve()

