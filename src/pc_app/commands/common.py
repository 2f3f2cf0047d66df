# src/pc_app/commands/common.py
from __future__ import annotations

from pathlib import Path

import typer

from pc_app.core.config import get_settings
from pc_app.core.logging import configure_logging


def prompt_existing_dir(maybe_root: Path | None, prompt_label: str = "root") -> Path:
    root = maybe_root or Path(typer.prompt(f"{prompt_label} (folder)")).expanduser()
    if not root.exists() or not root.is_dir():
        raise typer.BadParameter(
            f"{prompt_label} does not exist or is not a directory: {root}"
        )
    return root


def setup_logging(verbose: bool = False) -> None:
    settings = get_settings()
    configure_logging("DEBUG" if verbose else settings.LOG_LEVEL, json=settings.LOG_JSON)
