"""Config resolution, loading and validation.

- YAML-first service configs keyed by environment
- Strict ${ENV_VAR} expansion (missing/empty env vars are errors)
- Deterministic path fallback: option > host root > cwd > bundled default
"""

from __future__ import annotations

from servconf.config.errors import (
    ConfigError,
    ConfigParseError,
    ConfigReadError,
    InvalidArgumentError,
    ServconfError,
)
from servconf.config.loader import load_yaml_document
from servconf.config.model import ConfigKind, ConfiguratorOptions
from servconf.config.paths import PathResolver, bundled_default_path
from servconf.config.predicates import build_predicate_config_path, valid_predicate_mapping
from servconf.config.urls import determine_url, get_url, strip_credentials

__all__ = [
    "ConfigError",
    "ConfigKind",
    "ConfigParseError",
    "ConfigReadError",
    "ConfiguratorOptions",
    "InvalidArgumentError",
    "PathResolver",
    "ServconfError",
    "build_predicate_config_path",
    "bundled_default_path",
    "determine_url",
    "get_url",
    "load_yaml_document",
    "strip_credentials",
    "valid_predicate_mapping",
]
