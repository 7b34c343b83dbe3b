"""Error hierarchy for modfiles."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

__all__ = [
    "ModfilesError",
    "ConfigNotFoundError",
    "ConfigError",
    "AuthRuleError",
    "InvalidInputError",
    "ErrorCodes",
]


class ModfilesError(Exception):
    """Base error for all modfiles errors."""

    def __init__(
        self,
        code: str,
        message: str,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details: dict[str, Any] = details or {}
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc).isoformat()

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class ConfigNotFoundError(ModfilesError):
    """Raised when a configuration file cannot be found."""

    def __init__(self, config_path: str, **kwargs: Any) -> None:
        super().__init__(
            code="CONFIG_NOT_FOUND",
            message=f"Configuration file not found: {config_path}",
            details={"config_path": config_path},
            **kwargs,
        )

    @property
    def config_path(self) -> str:
        """The path that could not be found."""
        return self.details["config_path"]


class ConfigError(ModfilesError):
    """Raised when configuration is invalid."""

    def __init__(
        self,
        message: str,
        errors: list[dict[str, Any]] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            code="CONFIG_INVALID",
            message=message,
            details={"errors": errors or []},
            **kwargs,
        )


class AuthRuleError(ModfilesError):
    """Raised when a file server authorization rule is invalid."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(code="AUTH_RULE_ERROR", message=message, **kwargs)


class InvalidInputError(ModfilesError):
    """Raised for invalid arguments to registry and loader calls."""

    def __init__(self, message: str = "Invalid input", **kwargs: Any) -> None:
        super().__init__(code="GENERAL_INVALID_INPUT", message=message, **kwargs)


class ErrorCodes:
    """All modfiles error codes as constants.

    Example:
        if error.code == ErrorCodes.CONFIG_NOT_FOUND:
            use_defaults()
    """

    CONFIG_NOT_FOUND = "CONFIG_NOT_FOUND"
    CONFIG_INVALID = "CONFIG_INVALID"
    AUTH_RULE_ERROR = "AUTH_RULE_ERROR"
    GENERAL_INVALID_INPUT = "GENERAL_INVALID_INPUT"

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError("ErrorCodes is immutable")
