"""Registry types: Module, DiscoveredModule."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

__all__ = ["Module", "DiscoveredModule"]


@dataclass(frozen=True)
class Module:
    """A named module with a base directory on disk.

    Files served for the module live under ``<path>/files``.
    """

    name: str
    path: str
    environment: str | None = None


@dataclass
class DiscoveredModule:
    """A module directory found while scanning a modulepath."""

    dir_path: Path
    name: str
    root: Path
