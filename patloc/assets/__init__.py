"""Helpers for discovering the Dagster asset modules."""

from __future__ import annotations

import importlib
import pkgutil
from types import ModuleType


def iter_asset_modules() -> list[ModuleType]:
    """Return all asset modules (excluding jobs)."""
    package = importlib.import_module(__name__)
    prefix = package.__name__ + "."
    return [
        importlib.import_module(info.name)
        for info in pkgutil.walk_packages(package.__path__, prefix=prefix)
        if not info.name.startswith(f"{__name__}.jobs")
    ]


__all__ = ["iter_asset_modules"]
