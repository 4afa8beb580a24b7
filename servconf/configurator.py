"""Configurator: resolves, loads and caches service and predicate configs.

Typical use:

    configurator = Configurator(host_root=lambda: app.root_path)
    configurator.init({"environment": "production"})
    configurator.primary_config["url"]

State lives on the instance, so several configurators can coexist in one
process (tests rely on this).
"""

from __future__ import annotations

import logging
import os
import threading
from typing import Any, Callable, Mapping

from servconf.config.loader import load_yaml_document
from servconf.config.model import ConfigKind, ConfiguratorOptions, ambient_environment
from servconf.config.paths import HostRoot, PathResolver, WarnSink
from servconf.config.predicates import build_predicate_config_path
from servconf.config.urls import (
    credentials_from_url,
    determine_url,
    embedded_secondary_url,
    environment_section,
)


logger = logging.getLogger(__name__)


class Configurator:
    def __init__(
        self,
        *,
        host_root: HostRoot | None = None,
        host_environment: Callable[[], str | None] | None = None,
        warn: WarnSink | None = None,
        cwd: Callable[[], str] = os.getcwd,
    ) -> None:
        self._host_root = host_root
        self._host_environment = host_environment
        self._warn = warn
        self._cwd = cwd

        self._lock = threading.RLock()
        self._options = ConfiguratorOptions()
        self._resolver = self._build_resolver()
        self.reset()

    # ------------------------------------------------------------------
    # lifecycle

    def init(self, options: Mapping[str, Any] | None = None) -> None:
        """Reset state, apply `options` and load both service configs.

        Raises:
            InvalidArgumentError: If `options` is not a mapping (e.g. a path string).
            ConfigError: If an explicit config path does not exist.
        """

        parsed = ConfiguratorOptions.from_mapping(options)
        with self._lock:
            self.reset()
            self._options = parsed
            self._resolver = self._build_resolver()
        self.load_configs()

    def reset(self) -> None:
        with self._lock:
            self._config_loaded = False
            self._paths: dict[ConfigKind, str] = {}
            self._configs: dict[ConfigKind, dict[Any, Any]] = {}
            self._predicate_config_path: str | None = None
            self._predicate_config: dict[Any, Any] | None = None

    def _build_resolver(self) -> PathResolver:
        return PathResolver(
            self._options,
            host_root=self._host_root,
            cwd=self._cwd,
            warn=self._warn,
            environment=lambda: self.environment,
        )

    @property
    def options(self) -> ConfiguratorOptions:
        return self._options

    config_options = options

    @property
    def environment(self) -> str:
        if self._options.environment:
            return self._options.environment
        if self._host_environment is not None:
            host_env = self._host_environment()
            if host_env:
                return str(host_env)
        return ambient_environment()

    # ------------------------------------------------------------------
    # paths

    def get_config_path(self, kind: ConfigKind | str) -> str:
        kind = ConfigKind.coerce(kind)
        if kind is ConfigKind.SECONDARY:
            return self._resolver.get_config_path(kind, primary_path=self.primary_config_path)
        return self._resolver.get_config_path(kind)

    @property
    def primary_config_path(self) -> str:
        path = self._paths.get(ConfigKind.PRIMARY)
        return path if path is not None else self._resolver.get_config_path(ConfigKind.PRIMARY)

    @property
    def secondary_config_path(self) -> str:
        path = self._paths.get(ConfigKind.SECONDARY)
        return path if path is not None else self.get_config_path(ConfigKind.SECONDARY)

    def check_primary_path_for_secondary(self) -> str | None:
        return self._resolver.check_primary_path_for_secondary(self.primary_config_path)

    # ------------------------------------------------------------------
    # service configs

    def determine_url(self, kind: ConfigKind | str, document: Mapping[str, Any]) -> str:
        return determine_url(kind, document, self.environment)

    def load_config(self, kind: ConfigKind | str, *, primary_path: str | None = None) -> dict[Any, Any]:
        """Load one service config and remember it.

        Returns the whole document with a top-level `url` for the current
        environment. When the secondary kind resolves to the primary file, the
        URL comes from the primary's `secondary` entry. Read and parse errors
        propagate to the caller.
        """

        kind = ConfigKind.coerce(kind)
        if kind is ConfigKind.PRIMARY:
            path = primary_path or self._resolver.get_config_path(kind)
        else:
            primary_path = primary_path or self.primary_config_path
            path = self._resolver.get_config_path(kind, primary_path=primary_path)

        logger.info("config_loading", extra={"kind": kind.value, "path": os.path.abspath(path)})
        document = load_yaml_document(path)
        embedded = None
        if kind is ConfigKind.SECONDARY and path == primary_path:
            embedded = embedded_secondary_url(document, self.environment)
        url = embedded if embedded is not None else self.determine_url(kind, document)

        if kind is ConfigKind.PRIMARY:
            section = environment_section(document, self.environment)
            user, password = credentials_from_url(str(section["url"]))
            if user is not None:
                section = dict(section)
                section.setdefault("user", user)
                section.setdefault("password", password)
                document[self.environment] = section

        resolved = {**document, "url": url}
        with self._lock:
            self._paths[kind] = path
            self._configs[kind] = resolved
        return resolved

    def load_configs(self) -> None:
        """Load both service configs once; later calls are no-ops until reset()."""

        if self._config_loaded:
            return
        with self._lock:
            if self._config_loaded:
                return
            primary_path = self._resolver.get_config_path(ConfigKind.PRIMARY)
            self.load_config(ConfigKind.SECONDARY, primary_path=primary_path)
            self.load_config(ConfigKind.PRIMARY, primary_path=primary_path)
            self._config_loaded = True
            logger.info(
                "configs_loaded",
                extra={
                    "environment": self.environment,
                    "primary_config_path": self._paths.get(ConfigKind.PRIMARY),
                    "secondary_config_path": self._paths.get(ConfigKind.SECONDARY),
                },
            )

    @property
    def config_loaded(self) -> bool:
        return self._config_loaded

    @property
    def primary_config(self) -> dict[Any, Any]:
        self.load_configs()
        return self._configs[ConfigKind.PRIMARY]

    @property
    def secondary_config(self) -> dict[Any, Any]:
        self.load_configs()
        return self._configs[ConfigKind.SECONDARY]

    # ------------------------------------------------------------------
    # predicate mapping

    @property
    def predicate_config_path(self) -> str:
        with self._lock:
            if self._predicate_config_path is None:
                self._predicate_config_path = build_predicate_config_path(self._options.predicate_config_dir)
            return self._predicate_config_path

    def predicate_config(self) -> dict[Any, Any]:
        cached = self._predicate_config
        if cached is not None:
            return cached
        with self._lock:
            if self._predicate_config is None:
                path = self.predicate_config_path
                logger.info("predicate_config_loading", extra={"path": path})
                self._predicate_config = load_yaml_document(path, load_dotenv_file=False)
            return self._predicate_config
