# src/pc_app/core/registry.py
from __future__ import annotations

from importlib import import_module
from importlib.metadata import entry_points

from fastapi import APIRouter

from pc_app.core.logging import get_logger

EP_GROUP = "pc_app.modules"

# Used when the distribution metadata is not installed (source checkout runs)
BUILTIN_MODULES: tuple[str, ...] = (
    "pc_app.modules.scan.router:router",
    "pc_app.modules.dedup.router:router",
    "pc_app.modules.preview.router:router",
    "pc_app.modules.quality.router:router",
    "pc_app.modules.trash.router:router",
)

log = get_logger(__name__)


def _load_ref(ref: str) -> object:
    module_name, _, attr = ref.partition(":")
    return getattr(import_module(module_name), attr)


def load_module_routers() -> list[APIRouter]:
    """
    Collect module routers from the `pc_app.modules` entry point group,
    ordered by entry point name.
    """
    eps = sorted(entry_points(group=EP_GROUP), key=lambda ep: ep.name)
    candidates = [ep.load() for ep in eps] or [_load_ref(r) for r in BUILTIN_MODULES]

    routers: list[APIRouter] = []
    for router in candidates:
        # Convention: each EP must load to a FastAPI APIRouter
        if isinstance(router, APIRouter):
            routers.append(router)
        else:
            log.warning("Ignoring module entry that is not an APIRouter: %r", router)
    return routers
