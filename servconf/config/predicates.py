from __future__ import annotations

import logging
import os
from pathlib import Path

from typing import Any

from pydantic import StrictStr, TypeAdapter, ValidationError

from servconf.config.errors import ConfigError
from servconf.config.loader import load_yaml_document
from servconf.config.paths import bundled_default_path


logger = logging.getLogger(__name__)

PREDICATE_MAPPINGS_FILENAME = "predicate_mappings.yml"

# Required keys, checked in this order; other keys are ignored.
_REQUIRED_SHAPE: tuple[tuple[str, TypeAdapter[Any]], ...] = (
    ("default_namespace", TypeAdapter(StrictStr)),
    ("predicate_mapping", TypeAdapter(dict[Any, Any])),
)


def default_predicate_config_path() -> str:
    return bundled_default_path(PREDICATE_MAPPINGS_FILENAME)


def valid_predicate_mapping(path: str | Path) -> bool:
    """Check that a predicate mapping file has the required keys and types.

    `default_namespace` must be a string and `predicate_mapping` a mapping.
    Unreadable or malformed files are reported as invalid, never raised.
    """

    try:
        document = load_yaml_document(path, load_dotenv_file=False)
    except ConfigError as e:
        logger.debug("predicate_mapping_unreadable", extra={"path": str(path), "error": str(e)})
        return False

    for key, adapter in _REQUIRED_SHAPE:
        if key not in document:
            logger.debug("predicate_mapping_invalid", extra={"path": str(path), "field": key, "error": "missing"})
            return False
        try:
            adapter.validate_python(document[key])
        except ValidationError as e:
            logger.debug(
                "predicate_mapping_invalid",
                extra={"path": str(path), "field": key, "error": e.errors()[0]["msg"]},
            )
            return False
    return True


def build_predicate_config_path(supplied_dir: str | os.PathLike[str] | None) -> str:
    """Return `<supplied_dir>/predicate_mappings.yml` if usable, else the bundled default.

    Falling back is silent: a missing or invalid mapping is not an error.
    """

    if supplied_dir is None:
        return default_predicate_config_path()

    candidate = os.path.join(os.fspath(supplied_dir), PREDICATE_MAPPINGS_FILENAME)
    if Path(candidate).exists() and valid_predicate_mapping(candidate):
        return candidate
    return default_predicate_config_path()
