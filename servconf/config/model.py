from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from servconf.config.errors import InvalidArgumentError


DEFAULT_ENVIRONMENT = "development"
ENVIRONMENT_VAR = "environment"


def ambient_environment() -> str:
    """Environment name from the process, used when nothing more specific is set."""

    return os.environ.get(ENVIRONMENT_VAR) or DEFAULT_ENVIRONMENT


class ConfigKind(str, Enum):
    """The two service configurations resolved by the configurator."""

    PRIMARY = "primary"
    SECONDARY = "secondary"

    @property
    def filename(self) -> str:
        return f"{self.value}.yml"

    @property
    def option_key(self) -> str:
        return f"{self.value}_config_path"

    @classmethod
    def coerce(cls, value: ConfigKind | str) -> ConfigKind:
        try:
            return cls(value)
        except ValueError as exc:
            raise InvalidArgumentError(f"Unknown config kind: {value!r}") from exc


@dataclass(frozen=True, slots=True)
class ConfiguratorOptions:
    """Options accepted by `Configurator.init`.

    All fields are optional; unset fields fall back to the resolution chain.
    """

    primary_config_path: str | None = None
    secondary_config_path: str | None = None
    environment: str | None = None
    predicate_config_dir: str | None = None

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any] | None) -> ConfiguratorOptions:
        if options is None:
            return cls()
        if isinstance(options, str) or not isinstance(options, Mapping):
            raise InvalidArgumentError(
                "Configurator options must be a mapping such as "
                "{'primary_config_path': '/path/to/primary.yml'}, "
                f"got {type(options).__name__}"
            )

        def _opt(key: str) -> str | None:
            value = options.get(key)
            return None if value is None else str(value)

        return cls(
            primary_config_path=_opt("primary_config_path"),
            secondary_config_path=_opt("secondary_config_path"),
            environment=_opt("environment"),
            predicate_config_dir=_opt("predicate_config_dir"),
        )

    def path_for(self, kind: ConfigKind) -> str | None:
        if kind is ConfigKind.PRIMARY:
            return self.primary_config_path
        return self.secondary_config_path

