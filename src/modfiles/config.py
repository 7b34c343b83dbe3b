"""Configuration loading and validation."""

from __future__ import annotations

import os
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from modfiles.errors import ConfigError, ConfigNotFoundError

__all__ = ["Config", "EnvironmentSettings", "SettingsDocument"]


class EnvironmentSettings(BaseModel):
    """Per-environment overrides."""

    model_config = ConfigDict(extra="allow")

    modulepath: list[str] | None = None


class SettingsDocument(BaseModel):
    """Schema of a modfiles YAML configuration file."""

    model_config = ConfigDict(extra="allow")

    environment: str | None = ""
    modulepath: list[str] = Field(default_factory=list)
    environments: dict[str, EnvironmentSettings] = Field(default_factory=dict)
    nodes_file: str | None = None
    fileserver_config: str | None = None


class Config:
    """Configuration accessor with dot-path key support.

    The ``environment`` key holds the default environment used when a
    request names no node. An empty string means "no environment".
    """

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = data or {}
        self._yaml_path: str | None = None

    @classmethod
    def load(cls, yaml_path: str) -> Config:
        """Load and validate a YAML configuration file.

        Relative paths inside the file (modulepath entries, ``nodes_file``,
        ``fileserver_config``) are resolved against the file's directory.

        Raises:
            ConfigNotFoundError: If the file does not exist.
            ConfigError: If the YAML is invalid or does not match the schema.
        """
        if not os.path.isfile(yaml_path):
            raise ConfigNotFoundError(config_path=yaml_path)

        with open(yaml_path, encoding="utf-8") as f:
            try:
                raw = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {yaml_path}: {e}") from e

        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise ConfigError(f"Config must be a mapping, got {type(raw).__name__}")

        try:
            document = SettingsDocument.model_validate(raw)
        except PydanticValidationError as e:
            errors = [
                {
                    "path": "/" + "/".join(str(part) for part in err.get("loc", ())),
                    "message": err.get("msg", ""),
                }
                for err in e.errors()
            ]
            raise ConfigError(
                f"Invalid configuration in {yaml_path}", errors=errors
            ) from e

        base_dir = os.path.dirname(os.path.abspath(yaml_path))
        data = document.model_dump(exclude_none=True)
        data["modulepath"] = [_absolute(base_dir, p) for p in document.modulepath]
        for name, env in document.environments.items():
            if env.modulepath is not None:
                data["environments"][name]["modulepath"] = [
                    _absolute(base_dir, p) for p in env.modulepath
                ]
        for key in ("nodes_file", "fileserver_config"):
            if data.get(key):
                data[key] = _absolute(base_dir, data[key])

        config = cls(data)
        config._yaml_path = yaml_path
        return config

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value by dot-path key."""
        parts = key.split(".")
        current: Any = self._data
        for part in parts:
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default
        return current

    @property
    def environment(self) -> str:
        """The default environment setting ('' when unset)."""
        value = self.get("environment", "")
        return "" if value is None else str(value)

    @property
    def path(self) -> str | None:
        """Path of the YAML file this config was loaded from, if any."""
        return self._yaml_path


def _absolute(base_dir: str, path: str) -> str:
    return os.path.normpath(os.path.join(base_dir, os.path.expanduser(path)))
