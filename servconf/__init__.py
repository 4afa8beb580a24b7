"""Service endpoint and predicate mapping configuration."""

from __future__ import annotations

from servconf.config import ConfigError, ConfigKind, InvalidArgumentError, ServconfError
from servconf.configurator import Configurator

__all__ = ["ConfigError", "ConfigKind", "Configurator", "InvalidArgumentError", "ServconfError"]
