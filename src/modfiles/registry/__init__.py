"""modfiles module registry.

Resolves module names to base directories, scoped by environment.

Usage::

    from modfiles.registry import ModuleRegistry

    registry = ModuleRegistry(modulepath=["/etc/modfiles/modules"])
    module = registry.find("ntp", "production")
"""

from __future__ import annotations

from modfiles.registry.registry import ModuleRegistry
from modfiles.registry.scanner import (
    MODULE_NAME_PATTERN,
    is_valid_module_name,
    scan_modulepath,
)
from modfiles.registry.types import DiscoveredModule, Module

__all__ = [
    "DiscoveredModule",
    "MODULE_NAME_PATTERN",
    "Module",
    "ModuleRegistry",
    "is_valid_module_name",
    "scan_modulepath",
]
