from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, Sequence

from servconf.config.errors import ServconfError
from servconf.configurator import Configurator
from servconf.observability.logging import configure_logging


logger = logging.getLogger(__name__)

_SECRET_KEY_PARTS = ("api_key", "token", "secret", "password")
_COMMANDS = {"paths", "print-config", "predicates"}


def _redact_secrets(obj: Any) -> Any:
    """Best-effort redaction for human-facing config dumps."""

    if isinstance(obj, dict):
        out = {}
        for k, v in obj.items():
            if isinstance(k, str) and any(p in k.lower() for p in _SECRET_KEY_PARTS):
                out[k] = "<redacted>"
            else:
                out[k] = _redact_secrets(v)
        return out
    if isinstance(obj, list):
        return [_redact_secrets(x) for x in obj]
    return obj


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="servconf",
        description="Resolve and inspect primary/secondary service configuration",
    )

    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level (e.g. DEBUG, INFO, WARNING)",
    )
    parser.add_argument("--primary-config", help="Path to primary.yml (skips resolution)")
    parser.add_argument("--secondary-config", help="Path to secondary.yml (skips resolution)")
    parser.add_argument("--environment", help="Environment section to use (e.g. test, production)")
    parser.add_argument("--predicate-dir", help="Directory holding predicate_mappings.yml")

    sub = parser.add_subparsers(dest="command")

    paths_p = sub.add_parser("paths", help="Print the resolved config file paths")
    paths_p.set_defaults(command="paths")

    print_p = sub.add_parser("print-config", help="Load and print the resolved configs")
    print_p.set_defaults(command="print-config")

    pred_p = sub.add_parser("predicates", help="Print the predicate mapping document")
    pred_p.set_defaults(command="predicates")

    return parser


def _options_from_args(ns: argparse.Namespace) -> dict[str, str]:
    pairs = {
        "primary_config_path": ns.primary_config,
        "secondary_config_path": ns.secondary_config,
        "environment": ns.environment,
        "predicate_config_dir": ns.predicate_dir,
    }
    return {k: v for k, v in pairs.items() if v is not None}


def _dump(obj: Any) -> None:
    sys.stdout.write(json.dumps(obj, ensure_ascii=False, indent=2, default=str))
    sys.stdout.write("\n")


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entrypoint referenced by pyproject.toml."""

    argv_list = list(argv) if argv is not None else sys.argv[1:]

    # Default to `print-config` when no subcommand is given.
    if not any(tok in _COMMANDS for tok in argv_list) and not any(tok in ("-h", "--help") for tok in argv_list):
        argv_list = [*argv_list, "print-config"]

    parser = _build_parser()

    try:
        ns = parser.parse_args(argv_list)
    except SystemExit as e:
        code = e.code
        return int(code) if isinstance(code, int) else 1

    configure_logging(level=ns.log_level)

    configurator = Configurator()
    try:
        configurator.init(_options_from_args(ns))

        if ns.command == "paths":
            _dump(
                {
                    "environment": configurator.environment,
                    "primary": configurator.primary_config_path,
                    "secondary": configurator.secondary_config_path,
                    "predicate_mappings": configurator.predicate_config_path,
                }
            )
            return 0

        if ns.command == "predicates":
            _dump(configurator.predicate_config())
            return 0

        _dump(
            _redact_secrets(
                {
                    "environment": configurator.environment,
                    "primary": configurator.primary_config,
                    "secondary": configurator.secondary_config,
                }
            )
        )
        return 0

    except ServconfError as e:
        logger.error("config_error", extra={"error": str(e)})
        sys.stderr.write(f"ConfigError: {e}\n")
        return 2
    except Exception as e:  # noqa: BLE001
        logger.exception("fatal_error")
        sys.stderr.write(f"Fatal error: {e}\n")
        return 1
