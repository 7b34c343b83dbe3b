"""Collaborator contracts consumed by the module files terminus."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from modfiles.nodes import Node
    from modfiles.registry.types import Module

__all__ = [
    "Authorizer",
    "DirectoryExpander",
    "ExistsPredicate",
    "ModelFactory",
    "ModuleFinder",
    "NodeFinder",
]


@runtime_checkable
class ModuleFinder(Protocol):
    """Resolves a module name within an environment to its base directory."""

    def find(self, name: str, environment: str | None = None) -> Module | None: ...


@runtime_checkable
class NodeFinder(Protocol):
    """Resolves a node name to a node descriptor exposing ``environment``."""

    def find(self, name: str) -> Node | None: ...


@runtime_checkable
class Authorizer(Protocol):
    """Holds the allow/deny policy for file server paths."""

    def authorized(
        self, path: str, node: str | None = None, ipaddress: str | None = None
    ) -> bool: ...


class ModelFactory(Protocol):
    """Builds the result object for a single resolved file."""

    def __call__(self, path: str, links: str | None = None) -> Any: ...


class DirectoryExpander(Protocol):
    """Builds the result sequence for a resolved search path."""

    def __call__(self, path: str, options: dict[str, Any]) -> list[Any]: ...


class ExistsPredicate(Protocol):
    def __call__(self, path: str) -> bool: ...
