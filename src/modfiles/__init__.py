"""modfiles - module-relative file resolution and authorization."""

from __future__ import annotations

# Core
from modfiles.terminus import DENIED_METHODS, ModuleFiles
from modfiles.options import ResolutionOptions
from modfiles.uri import MOUNT_NAME, ModuleFileURI, authorization_key

# Config
from modfiles.config import Config

# Errors
from modfiles.errors import (
    AuthRuleError,
    ConfigError,
    ConfigNotFoundError,
    ErrorCodes,
    InvalidInputError,
    ModfilesError,
)

# Collaborators
from modfiles.fileserving import FileServerConfig, MountRule
from modfiles.fileset import Fileset, path2instances
from modfiles.metadata import FileMetadata
from modfiles.nodes import Node, NodeRegistry
from modfiles.registry import Module, ModuleRegistry

__version__ = "0.1.0"

__all__ = [
    # Core
    "ModuleFiles",
    "DENIED_METHODS",
    "ResolutionOptions",
    "ModuleFileURI",
    "MOUNT_NAME",
    "authorization_key",
    # Config
    "Config",
    # Errors
    "ErrorCodes",
    "ModfilesError",
    "ConfigNotFoundError",
    "ConfigError",
    "AuthRuleError",
    "InvalidInputError",
    # Collaborators
    "FileServerConfig",
    "MountRule",
    "Fileset",
    "path2instances",
    "FileMetadata",
    "Node",
    "NodeRegistry",
    "Module",
    "ModuleRegistry",
]
