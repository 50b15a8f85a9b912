"""Loading collector configuration files.

Configuration files use the camelCase JSON shape of
:meth:`codebundle.models.CollectorConfig.from_dict` and are parsed with
json5, so comments and trailing commas are accepted.
"""

import logging
import pathlib
from typing import Any

import json5

from codebundle.models import CollectorConfig

logger = logging.getLogger(__name__)

BOOLEAN_KEYS = (
    "useRegex",
    "includeHidden",
    "respectGitignore",
    "showContents",
    "showMeta",
    "showProgress",
)


class ConfigError(Exception):
    """Raised when a configuration file is missing or malformed."""


def _expect_list_of_str(data: dict[str, Any], key: str) -> None:
    value = data.get(key)
    if value is None:
        return
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"'{key}' must be a list of strings")


def _expect_bool(data: dict[str, Any], key: str, allow_none: bool = False) -> None:
    if key not in data or (allow_none and data[key] is None):
        return
    if not isinstance(data[key], bool):
        raise ConfigError(f"'{key}' must be true or false, got {data[key]!r}")


def validate_config_dict(data: Any) -> dict[str, Any]:
    """Check the shape of a decoded configuration document."""
    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a JSON object")

    for key in ("includeFiles", "excludeFiles", "listOnlyFiles"):
        _expect_list_of_str(data, key)
    for key in BOOLEAN_KEYS:
        _expect_bool(data, key)

    if "name" in data and not isinstance(data["name"], str):
        raise ConfigError("'name' must be a string")

    workers = data.get("maxWorkers")
    if "maxWorkers" in data and (
        isinstance(workers, bool) or not isinstance(workers, int) or workers < 1
    ):
        raise ConfigError(f"'maxWorkers' must be a positive integer, got {workers!r}")

    dirs = data.get("includeDirs") or []
    if not isinstance(dirs, list):
        raise ConfigError("'includeDirs' must be a list")
    for index, entry in enumerate(dirs):
        if not isinstance(entry, dict) or not isinstance(entry.get("path"), str):
            raise ConfigError(f"includeDirs[{index}] must be an object with a 'path' string")
        try:
            for key in ("include", "exclude", "includePatterns", "excludePatterns"):
                _expect_list_of_str(entry, key)
            _expect_bool(entry, "recursive")
            _expect_bool(entry, "useRegex", allow_none=True)
        except ConfigError as e:
            raise ConfigError(f"includeDirs[{index}]: {e}") from None

    search = data.get("searchInFiles")
    if search is not None and (
        not isinstance(search, dict) or not isinstance(search.get("pattern"), str)
    ):
        raise ConfigError("'searchInFiles' must be an object with a 'pattern' string")
    if search is not None:
        try:
            _expect_bool(search, "isRegex")
        except ConfigError as e:
            raise ConfigError(f"searchInFiles: {e}") from None

    return data


def load_config(path: str | pathlib.Path) -> CollectorConfig:
    """Read and validate a configuration file.

    Raises:
        ConfigError: If the file cannot be read or does not describe a config
    """
    config_path = pathlib.Path(path)
    try:
        with config_path.open("r", encoding="utf-8") as f:
            data = json5.load(f)
    except FileNotFoundError:
        raise ConfigError(f"Config file not found: {config_path}") from None
    except OSError as e:
        raise ConfigError(f"Could not read config file {config_path}: {e}") from e
    except ValueError as e:
        raise ConfigError(f"Invalid config file {config_path}: {e}") from e

    config = CollectorConfig.from_dict(validate_config_dict(data))
    logger.debug(f"Loaded config from {config_path}")
    return config


def save_config(config: CollectorConfig, path: str | pathlib.Path) -> None:
    with pathlib.Path(path).open("w", encoding="utf-8") as f:
        json5.dump(config.to_dict(), f, indent=2, ensure_ascii=False, quote_keys=True)
