# src/pc_app/version.py
from importlib.metadata import PackageNotFoundError, version

from pc_app.core.config import get_settings

DIST_NAME = "photo-cleaner"


def get_version() -> str:
    try:
        return version(DIST_NAME)
    except PackageNotFoundError:
        # source checkout without installed metadata
        return get_settings().VERSION
