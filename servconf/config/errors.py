from __future__ import annotations


class ServconfError(Exception):
    """Base exception for this project."""


class ConfigError(ServconfError):
    """Raised when configuration is invalid, incomplete or cannot be located."""

    def __init__(self, message: str, *, path: str | None = None):
        super().__init__(f"{path}: {message}" if path else message)
        self.path = path


class ConfigReadError(ConfigError):
    """Raised when a config file exists in name only (missing or unreadable)."""


class ConfigParseError(ConfigError):
    """Raised when a config file is not valid YAML or not a mapping."""


class InvalidArgumentError(ServconfError, TypeError):
    """Raised when the configurator is called with an argument of the wrong type."""
