from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml
from dotenv import load_dotenv

from servconf.config.errors import ConfigError, ConfigParseError, ConfigReadError


_ENV_PLACEHOLDER_RE = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")


@dataclass(frozen=True, slots=True)
class _UnresolvedEnvRef:
    """Tracks an unresolved ${ENV_VAR} reference for better error messages."""

    var_name: str
    key_path: str
    reason: str  # "missing" | "empty"


def read_config_text(path: str | Path) -> str:
    """Read a config file as UTF-8 text.

    Raises:
        ConfigReadError: If the file does not exist or cannot be read.
    """

    p = Path(path)
    try:
        return p.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ConfigReadError("Config file not found", path=str(p)) from e
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigReadError(f"Failed to read config file: {e}", path=str(p)) from e


def _expand_env_in_obj(obj: Any, *, key_path: str, unresolved: list[_UnresolvedEnvRef]) -> Any:
    if isinstance(obj, str):
        def repl(match: re.Match[str]) -> str:
            name = match.group(1)
            value = os.getenv(name)
            if value is None or value == "":
                unresolved.append(
                    _UnresolvedEnvRef(
                        var_name=name,
                        key_path=key_path,
                        reason="missing" if value is None else "empty",
                    )
                )
                return match.group(0)
            return value

        return _ENV_PLACEHOLDER_RE.sub(repl, obj)

    if isinstance(obj, Mapping):
        out: dict[Any, Any] = {}
        for k, v in obj.items():
            child_path = f"{key_path}.{k}" if key_path else str(k)
            out[k] = _expand_env_in_obj(v, key_path=child_path, unresolved=unresolved)
        return out

    if isinstance(obj, list):
        return [
            _expand_env_in_obj(
                v,
                key_path=f"{key_path}[{i}]" if key_path else f"[{i}]",
                unresolved=unresolved,
            )
            for i, v in enumerate(obj)
        ]

    return obj


def parse_config_text(text: str, *, source: str = "<string>") -> dict[Any, Any]:
    """Parse YAML config text and expand `${ENV_VAR}` placeholders.

    Empty text parses to an empty mapping.

    Raises:
        ConfigParseError: If the YAML is malformed or its root is not a mapping.
        ConfigError: If a placeholder references a missing or empty variable.
    """

    if not text.strip():
        return {}

    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigParseError(f"Failed to parse YAML: {e}", path=source) from e

    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise ConfigParseError("Top-level YAML must be a mapping/dict", path=source)

    unresolved: list[_UnresolvedEnvRef] = []
    expanded = _expand_env_in_obj(raw, key_path="", unresolved=unresolved)

    if unresolved:
        lines: list[str] = [f"Unresolved environment variables in config {source}:"]
        for ref in unresolved:
            lines.append(f"- {ref.var_name} ({ref.reason}) at {ref.key_path or '<root>'}")
        raise ConfigError("\n".join(lines))

    return expanded


def load_yaml_document(
    path: str | Path,
    *,
    load_dotenv_file: bool = True,
    dotenv_path: Path | None = None,
) -> dict[Any, Any]:
    """Read, parse and expand one YAML config file.

    Args:
        path: YAML file to load.
        load_dotenv_file: Whether to load a .env file before expansion.
        dotenv_path: Optional explicit .env path. When omitted, attempts to load
            a `.env` in the current working directory.
    """

    if load_dotenv_file:
        # Best-effort; strictness is enforced by the ${ENV_VAR} expansion step.
        load_dotenv(dotenv_path or Path.cwd() / ".env", override=False)

    return parse_config_text(read_config_text(path), source=str(path))
