"""Shared test fixtures for the module files test suite."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import pytest

from modfiles.nodes import Node
from modfiles.registry.types import Module
from modfiles.terminus import ModuleFiles


# === Collaborator doubles ===


@pytest.fixture
def module() -> Module:
    return Module(name="mymod", path="/module/path")


@pytest.fixture
def modules() -> MagicMock:
    """Module finder double; answers None unless a test says otherwise."""
    finder = MagicMock()
    finder.find.return_value = None
    return finder


@pytest.fixture
def nodes() -> MagicMock:
    finder = MagicMock()
    finder.find.return_value = Node(name="mynode", environment="testing")
    return finder


@pytest.fixture
def authorizer() -> MagicMock:
    auth = MagicMock()
    auth.authorized.return_value = True
    return auth


@pytest.fixture
def model() -> MagicMock:
    factory = MagicMock()
    factory.return_value = "myinstance"
    return factory


@pytest.fixture
def expander() -> MagicMock:
    expand = MagicMock()
    expand.return_value = ["one", "two"]
    return expand


@pytest.fixture
def exists() -> MagicMock:
    predicate = MagicMock()
    predicate.return_value = True
    return predicate


@pytest.fixture
def terminus_factory(
    modules: MagicMock,
    nodes: MagicMock,
    authorizer: MagicMock,
    model: MagicMock,
    expander: MagicMock,
    exists: MagicMock,
) -> Any:
    """Build a ModuleFiles wired to the doubles, with a chosen default environment."""

    def factory(environment: str = "") -> ModuleFiles:
        return ModuleFiles(
            modules=modules,
            authorizer=authorizer,
            nodes=nodes,
            environment=environment,
            model=model,
            expander=expander,
            exists=exists,
        )

    return factory


@pytest.fixture
def terminus(terminus_factory: Any) -> ModuleFiles:
    return terminus_factory()

