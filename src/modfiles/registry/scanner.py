"""Modulepath scanner for discovering module directories."""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path

from modfiles.registry.types import DiscoveredModule

logger = logging.getLogger(__name__)

__all__ = ["MODULE_NAME_PATTERN", "is_valid_module_name", "scan_modulepath"]

MODULE_NAME_PATTERN = re.compile(r"[A-Za-z0-9][A-Za-z0-9_\-]*")

_SKIP_DIR_NAMES = {"__pycache__", "node_modules"}


def is_valid_module_name(name: str) -> bool:
    """Whether ``name`` can name a module directory.

    Rejects the empty string, hidden and underscore-prefixed names, and
    anything containing a path separator.
    """
    return bool(MODULE_NAME_PATTERN.fullmatch(name))


def scan_modulepath(
    roots: list[str], follow_symlinks: bool = True
) -> list[DiscoveredModule]:
    """List the module directories found on a modulepath.

    Roots are scanned in order. When two roots contain the same module name
    the first one wins and the later one is logged and skipped. Missing roots
    are skipped with a debug message, since a modulepath commonly names
    directories that only exist on some hosts.
    """
    results: list[DiscoveredModule] = []
    seen: dict[str, Path] = {}

    for root in roots:
        root_path = Path(root)
        if not root_path.is_dir():
            logger.debug("Modulepath entry %s is not a directory, skipping", root_path)
            continue

        try:
            entries = sorted(os.scandir(root_path), key=lambda e: e.name)
        except PermissionError as e:
            logger.error("Permission denied scanning %s: %s", root_path, e)
            continue
        except OSError as e:
            logger.error("OS error scanning %s: %s", root_path, e)
            continue

        for entry in entries:
            name = entry.name
            if name in _SKIP_DIR_NAMES or not is_valid_module_name(name):
                continue

            try:
                is_dir = entry.is_dir(follow_symlinks=follow_symlinks)
            except OSError as e:
                logger.error("OS error accessing %s: %s", entry.path, e)
                continue
            if not is_dir:
                continue

            if name in seen:
                logger.warning(
                    "Duplicate module '%s' at %s, already found at %s. Skipping.",
                    name,
                    entry.path,
                    seen[name],
                )
                continue

            seen[name] = Path(entry.path)
            results.append(
                DiscoveredModule(dir_path=Path(entry.path), name=name, root=root_path)
            )

    return results
