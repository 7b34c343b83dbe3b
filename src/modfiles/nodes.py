"""Node descriptors and the node registry."""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass, field
from typing import Any

import yaml

from modfiles.errors import ConfigError, ConfigNotFoundError, InvalidInputError

logger = logging.getLogger(__name__)

__all__ = ["Node", "NodeRegistry"]


@dataclass(frozen=True)
class Node:
    """A client node and the environment it is assigned to."""

    name: str
    environment: str | None = None
    parameters: dict[str, Any] = field(default_factory=dict)


class NodeRegistry:
    """Maps node names to their assigned environment.

    Nodes registered without an environment get ``default_environment``.
    """

    def __init__(
        self,
        nodes: list[Node] | None = None,
        default_environment: str | None = None,
    ) -> None:
        self._nodes: dict[str, Node] = {}
        self._default_environment = default_environment
        self._lock = threading.Lock()
        for node in nodes or []:
            self.register(node)

    @classmethod
    def load(
        cls, yaml_path: str, default_environment: str | None = None
    ) -> NodeRegistry:
        """Load nodes from a YAML file.

        Expected shape::

            nodes:
              web01.example.com:
                environment: production
                parameters: {role: web}

        Raises:
            ConfigNotFoundError: If the file does not exist.
            ConfigError: If the YAML is invalid or malformed.
        """
        if not os.path.isfile(yaml_path):
            raise ConfigNotFoundError(config_path=yaml_path)

        with open(yaml_path, encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {yaml_path}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(
                f"Nodes file must be a mapping, got {type(data).__name__}"
            )

        raw_nodes = data.get("nodes") or {}
        if not isinstance(raw_nodes, dict):
            raise ConfigError(
                f"'nodes' must be a mapping, got {type(raw_nodes).__name__}"
            )

        nodes: list[Node] = []
        for name, entry in raw_nodes.items():
            entry = entry or {}
            if not isinstance(entry, dict):
                raise ConfigError(
                    f"Node '{name}' must be a mapping, got {type(entry).__name__}"
                )
            nodes.append(
                Node(
                    name=str(name),
                    environment=entry.get("environment"),
                    parameters=entry.get("parameters") or {},
                )
            )

        return cls(nodes=nodes, default_environment=default_environment)

    def register(self, node: Node) -> None:
        """Add or replace a node."""
        if not node.name:
            raise InvalidInputError(message="node name must be a non-empty string")
        if node.environment is None and self._default_environment is not None:
            node = Node(
                name=node.name,
                environment=self._default_environment,
                parameters=node.parameters,
            )
        with self._lock:
            self._nodes[node.name] = node

    def find(self, name: str) -> Node | None:
        """Look up a node by name. Returns None if unknown."""
        with self._lock:
            node = self._nodes.get(name)
        if node is None:
            logger.debug("Unknown node '%s'", name)
        return node

    @property
    def names(self) -> list[str]:
        with self._lock:
            return sorted(self._nodes)
