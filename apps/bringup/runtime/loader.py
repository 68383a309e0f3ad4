"""Collect module instances declared across a package's submodules."""

from __future__ import annotations

import importlib
import logging
import pkgutil
from types import ModuleType
from typing import TypeVar

from .modules import Module

logger = logging.getLogger(__name__)

ModuleT = TypeVar("ModuleT", bound=Module)


def collect_modules(package: str | ModuleType, module_type: type[ModuleT], *, deep: bool = False) -> list[ModuleT]:
    """Import ``package``'s submodules and return every top-level ``module_type`` instance.

    Only direct submodules are scanned unless ``deep`` is set, in which case
    nested packages are walked too. Results follow import-name order so the
    registration batch is stable across runs.
    """

    if isinstance(package, str):
        package = importlib.import_module(package)
    search_path = getattr(package, "__path__", None)
    if search_path is None:
        raise ValueError(f"{package.__name__} is not a package")

    prefix = f"{package.__name__}."
    if deep:
        found_infos = pkgutil.walk_packages(search_path, prefix)
    else:
        found_infos = pkgutil.iter_modules(search_path, prefix)

    collected: list[ModuleT] = []
    for info in sorted(found_infos, key=lambda item: item.name):
        imported = importlib.import_module(info.name)
        for value in vars(imported).values():
            if isinstance(value, module_type) and not any(value is seen for seen in collected):
                collected.append(value)

    logger.debug(
        "bringup_modules_collected",
        extra={"event": "modules_collected", "package": package.__name__, "count": len(collected)},
    )
    return collected
