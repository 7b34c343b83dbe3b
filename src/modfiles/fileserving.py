"""File server authorization rules.

This module defines the MountRule dataclass and the FileServerConfig class
that decides whether a node or client address may read a file server path.
"""

from __future__ import annotations

import ipaddress
import logging
import os
import threading
from dataclasses import dataclass, field
from typing import Any

import yaml

from modfiles.errors import AuthRuleError, ConfigNotFoundError

__all__ = [
    "MountRule",
    "FileServerConfig",
    "match_address",
    "match_mount",
    "match_node",
    "mount_of",
]


def mount_of(path: str) -> str:
    """Return the mount name of a file server path (its first segment)."""
    return path.lstrip("/").split("/", 1)[0]


def match_mount(pattern: str, mount: str) -> bool:
    """Match a mount name against ``*`` or an exact mount name."""
    return pattern == "*" or pattern == mount


def match_node(pattern: str, node: str) -> bool:
    """Match a node name against a host pattern.

    Patterns are ``*`` (any node), ``*.example.com`` (any node inside the
    domain, at any depth) or an exact name. Comparison ignores case and a
    trailing dot on the node name.
    """
    if pattern == "*":
        return True
    name = node.lower().rstrip(".")
    pattern = pattern.lower()
    if pattern.startswith("*."):
        suffix = pattern[1:]
        return name.endswith(suffix) and len(name) > len(suffix)
    return name == pattern


def match_address(pattern: str, address: str) -> bool:
    """Match an address against ``*``, an exact address or a CIDR network."""
    if pattern == "*":
        return True
    try:
        addr = ipaddress.ip_address(address)
        network = ipaddress.ip_network(pattern, strict=False)
    except ValueError:
        return False
    return addr in network


@dataclass
class MountRule:
    """A single file server authorization rule.

    A rule matches a request when its mount matches one of ``mounts`` and the
    requester matches ``nodes`` or ``ips``. A rule listing neither nodes nor
    ips matches every requester.
    """

    mounts: list[str]
    effect: str
    nodes: list[str] = field(default_factory=list)
    ips: list[str] = field(default_factory=list)
    description: str = ""


class FileServerConfig:
    """File server authorization with first-match-wins rule evaluation.

    Thread safety:
        Internally synchronized. All public methods (authorized, add_rule,
        remove_rule, reload) are safe to call concurrently.
    """

    def __init__(self, rules: list[MountRule], default_effect: str = "deny") -> None:
        """Initialize with ordered rules and a default effect.

        Args:
            rules: Ordered list of rules (first match wins).
            default_effect: Effect when no rule matches ('allow' or 'deny').
        """
        self._rules: list[MountRule] = list(rules)
        self._default_effect: str = default_effect
        self._yaml_path: str | None = None
        self._logger: logging.Logger = logging.getLogger("modfiles.fileserving")
        self._lock = threading.Lock()

    @classmethod
    def load(cls, yaml_path: str) -> FileServerConfig:
        """Load authorization rules from a YAML file.

        Expected shape::

            default_effect: deny
            rules:
              - mounts: [modules]
                nodes: ["*.example.com"]
                ips: ["10.0.0.0/8"]
                effect: allow

        Raises:
            ConfigNotFoundError: If the file does not exist.
            AuthRuleError: If the YAML is invalid or has structural errors.
        """
        if not os.path.isfile(yaml_path):
            raise ConfigNotFoundError(config_path=yaml_path)

        with open(yaml_path, encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise AuthRuleError(f"Invalid YAML in {yaml_path}: {e}") from e

        if not isinstance(data, dict):
            raise AuthRuleError(
                f"File server config must be a mapping, got {type(data).__name__}"
            )

        if "rules" not in data:
            raise AuthRuleError("File server config missing required 'rules' key")

        raw_rules = data["rules"]
        if not isinstance(raw_rules, list):
            raise AuthRuleError(
                f"'rules' must be a list, got {type(raw_rules).__name__}"
            )

        default_effect = data.get("default_effect", "deny")
        if default_effect not in ("allow", "deny"):
            raise AuthRuleError(
                f"Invalid default_effect '{default_effect}', "
                "must be 'allow' or 'deny'"
            )

        rules = [_parse_rule(i, raw_rule) for i, raw_rule in enumerate(raw_rules)]

        config = cls(rules=rules, default_effect=default_effect)
        config._yaml_path = yaml_path
        return config

    def authorized(
        self,
        path: str,
        node: str | None = None,
        ipaddress: str | None = None,
    ) -> bool:
        """Check whether a requester may read ``path``.

        Args:
            path: File server path, e.g. ``/modules/ntp/ntp.conf``.
            node: Requesting node name, if known.
            ipaddress: Requesting client address, if known.

        Returns:
            True if allowed, False if denied.
        """
        mount = mount_of(path)

        with self._lock:
            rules = list(self._rules)
            default_effect = self._default_effect

        for rule in rules:
            if self._matches_rule(rule, mount, node, ipaddress):
                decision = rule.effect == "allow"
                self._logger.debug(
                    "Auth check: path=%s node=%s ip=%s decision=%s rule=%s",
                    path,
                    node,
                    ipaddress,
                    "allow" if decision else "deny",
                    rule.description or "(no description)",
                )
                return decision

        default_decision = default_effect == "allow"
        self._logger.debug(
            "Auth check: path=%s node=%s ip=%s decision=%s rule=default",
            path,
            node,
            ipaddress,
            "allow" if default_decision else "deny",
        )
        return default_decision

    def _matches_rule(
        self,
        rule: MountRule,
        mount: str,
        node: str | None,
        address: str | None,
    ) -> bool:
        """Check if a single rule matches the mount and requester.

        The mount must match one of the rule's mount patterns. When the rule
        names nodes or ips, at least one of them must match the requester.
        """
        if not any(match_mount(p, mount) for p in rule.mounts):
            return False

        if not rule.nodes and not rule.ips:
            return True

        if node is not None and any(match_node(p, node) for p in rule.nodes):
            return True

        if address is not None and any(match_address(p, address) for p in rule.ips):
            return True

        return False

    def add_rule(self, rule: MountRule) -> None:
        """Add a rule at position 0 (highest priority)."""
        with self._lock:
            self._rules.insert(0, rule)

    def remove_rule(
        self,
        mounts: list[str],
        nodes: list[str] | None = None,
        ips: list[str] | None = None,
    ) -> bool:
        """Remove the first rule with the given mounts, nodes and ips.

        Returns:
            True if a rule was found and removed, False otherwise.
        """
        nodes = nodes or []
        ips = ips or []
        with self._lock:
            for i, rule in enumerate(self._rules):
                if rule.mounts == mounts and rule.nodes == nodes and rule.ips == ips:
                    self._rules.pop(i)
                    return True
            return False

    def reload(self) -> None:
        """Re-read the rules from the original YAML file.

        Only works if the config was created via FileServerConfig.load().
        Raises AuthRuleError if no YAML path was stored.
        """
        with self._lock:
            yaml_path = self._yaml_path
        if yaml_path is None:
            raise AuthRuleError(
                "Cannot reload: file server config was not loaded from a YAML file"
            )
        reloaded = FileServerConfig.load(yaml_path)
        with self._lock:
            self._rules = reloaded._rules
            self._default_effect = reloaded._default_effect


def _parse_rule(index: int, raw_rule: Any) -> MountRule:
    if not isinstance(raw_rule, dict):
        raise AuthRuleError(
            f"Rule {index} must be a mapping, got {type(raw_rule).__name__}"
        )

    for key in ("mounts", "effect"):
        if key not in raw_rule:
            raise AuthRuleError(f"Rule {index} missing required key '{key}'")

    effect = raw_rule["effect"]
    if effect not in ("allow", "deny"):
        raise AuthRuleError(
            f"Rule {index} has invalid effect '{effect}', must be 'allow' or 'deny'"
        )

    lists: dict[str, list[str]] = {}
    for key in ("mounts", "nodes", "ips"):
        value = raw_rule.get(key, [])
        if not isinstance(value, list):
            raise AuthRuleError(
                f"Rule {index} '{key}' must be a list, got {type(value).__name__}"
            )
        lists[key] = [str(v) for v in value]

    for pattern in lists["nodes"]:
        if "*" in pattern and pattern != "*" and (
            not pattern.startswith("*.") or "*" in pattern[1:]
        ):
            raise AuthRuleError(
                f"Rule {index} has invalid node pattern '{pattern}', "
                "wildcards are only allowed as a leading '*.'"
            )

    for pattern in lists["ips"]:
        if pattern == "*":
            continue
        try:
            ipaddress.ip_network(pattern, strict=False)
        except ValueError as e:
            raise AuthRuleError(
                f"Rule {index} has invalid ip pattern '{pattern}'"
            ) from e

    return MountRule(
        mounts=lists["mounts"],
        effect=effect,
        nodes=lists["nodes"],
        ips=lists["ips"],
        description=raw_rule.get("description", ""),
    )
