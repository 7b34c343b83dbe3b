"""Shared pytest fixtures for the registry test suite."""

from __future__ import annotations

from pathlib import Path

import pytest

from modfiles.config import Config
from modfiles.registry.registry import ModuleRegistry


@pytest.fixture
def module_roots(tmp_path: Path) -> dict[str, Path]:
    """Two modulepath roots plus a testing-only root.

    site/   ntp, apache
    base/   ntp, ssh
    testing/ ntp
    """
    roots = {name: tmp_path / name for name in ("site", "base", "testing")}
    for mod in ("ntp", "apache"):
        (roots["site"] / mod / "files").mkdir(parents=True)
    for mod in ("ntp", "ssh"):
        (roots["base"] / mod / "files").mkdir(parents=True)
    (roots["testing"] / "ntp" / "files").mkdir(parents=True)
    return roots


@pytest.fixture
def registry(module_roots: dict[str, Path]) -> ModuleRegistry:
    """A registry over site and base, with testing and feature.x overrides."""
    config = Config(
        {
            "modulepath": [str(module_roots["site"]), str(module_roots["base"])],
            "environments": {
                "testing": {"modulepath": [str(module_roots["testing"])]},
                "feature.x": {"modulepath": [str(module_roots["testing"])]},
            },
        }
    )
    return ModuleRegistry(config=config)
