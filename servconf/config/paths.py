"""Config path resolution.

Resolution order for a kind (first match wins):

1. Explicit `<kind>_config_path` option (must exist, otherwise ConfigError).
2. Secondary only: `secondary.yml` next to the resolved primary config, or the
   primary config itself when it defines a `secondary` URL for the environment.
3. `<host root>/config/<kind>.yml` when a host root is available.
4. `<cwd>/config/<kind>.yml`.
5. The bundled default shipped with this package (logs a warning).
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable

from servconf.config.errors import ConfigError
from servconf.config.loader import load_yaml_document
from servconf.config.model import ConfigKind, ConfiguratorOptions, ambient_environment
from servconf.config.urls import embedded_secondary_url


logger = logging.getLogger(__name__)

DEFAULTS_DIR = Path(__file__).resolve().parent.parent / "defaults"

HostRoot = Callable[[], str | None]
WarnSink = Callable[[str], None]


def bundled_default_path(filename: str) -> str:
    return str(DEFAULTS_DIR / filename)


def _bundled_default_warning(kind: ConfigKind) -> str:
    return (
        f"Using the default {kind.filename} that comes with servconf. "
        f"If you want to override this, pass the path to {kind.filename} to servconf - "
        f"ie. Configurator().init({{'{kind.option_key}': '/path/to/{kind.filename}'}}) - "
        f"or provide a host root and put {kind.filename} into <host root>/config."
    )


class PathResolver:
    """Computes the filesystem path for a config kind.

    `host_root` is an optional accessor for the host application's root
    directory; it returns None when there is no host application.
    """

    def __init__(
        self,
        options: ConfiguratorOptions | None = None,
        *,
        host_root: HostRoot | None = None,
        cwd: Callable[[], str] = os.getcwd,
        warn: WarnSink | None = None,
        environment: Callable[[], str] = ambient_environment,
    ) -> None:
        self._options = options or ConfiguratorOptions()
        self._host_root = host_root
        self._cwd = cwd
        self._warn = warn or logger.warning
        self._environment = environment

    @property
    def options(self) -> ConfiguratorOptions:
        return self._options

    def host_root(self) -> str | None:
        if self._host_root is None:
            return None
        root = self._host_root()
        return None if root is None else os.fspath(root)

    def get_config_path(self, kind: ConfigKind | str, *, primary_path: str | None = None) -> str:
        kind = ConfigKind.coerce(kind)

        explicit = self._options.path_for(kind)
        if explicit is not None:
            if not Path(explicit).is_file():
                raise ConfigError(f"{kind.filename} file does not exist", path=explicit)
            return self._resolved(kind, explicit, source="option")

        if kind is ConfigKind.SECONDARY:
            if primary_path is None:
                primary_path = self.get_config_path(ConfigKind.PRIMARY)
            colocated = self.check_primary_path_for_secondary(primary_path)
            if colocated is not None:
                return self._resolved(kind, colocated, source="colocated")
            if self.primary_defines_secondary_url(primary_path):
                return self._resolved(kind, primary_path, source="embedded")

        root = self.host_root()
        if root is not None:
            candidate = os.path.join(root, "config", kind.filename)
            if Path(candidate).is_file():
                return self._resolved(kind, candidate, source="host_root")

        candidate = os.path.join(self._cwd(), "config", kind.filename)
        if Path(candidate).is_file():
            return self._resolved(kind, candidate, source="cwd")

        self._warn(_bundled_default_warning(kind))
        return self._resolved(kind, bundled_default_path(kind.filename), source="bundled")

    def check_primary_path_for_secondary(self, primary_path: str) -> str | None:
        """Return `secondary.yml` from the primary config's directory, if present."""

        candidate = os.path.join(os.path.dirname(primary_path), ConfigKind.SECONDARY.filename)
        return candidate if Path(candidate).is_file() else None

    def primary_defines_secondary_url(self, primary_path: str) -> bool:
        """True when the primary config carries a `secondary` URL for the current environment."""

        if not Path(primary_path).is_file():
            return False
        try:
            document = load_yaml_document(primary_path)
            return embedded_secondary_url(document, self._environment()) is not None
        except ConfigError as e:
            # Loading the primary config reports this error.
            logger.debug("embedded_secondary_unreadable", extra={"path": primary_path, "error": str(e)})
            return False

    def _resolved(self, kind: ConfigKind, path: str, *, source: str) -> str:
        logger.debug("config_path_resolved", extra={"kind": kind.value, "path": path, "source": source})
        return path
