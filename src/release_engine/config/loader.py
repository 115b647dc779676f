"""Configuration discovery and loading.

Configuration lives either in a dedicated ``release-engine.toml`` or in the
``[tool.release-engine]`` table of ``pyproject.toml``. Both are searched from
the given directory upwards.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import tomlkit
from pydantic import ValidationError
from tomlkit.exceptions import ParseError

from release_engine.config.models import ReleaseEngineConfig
from release_engine.exceptions import ConfigNotFoundError, ConfigValidationError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "release-engine.toml"
PYPROJECT_FILENAME = "pyproject.toml"
TOOL_KEY = "release-engine"


def find_config_file(start: Path | None = None) -> Path:
    """Find the nearest configuration file.

    In each directory a ``release-engine.toml`` wins over a ``pyproject.toml``;
    a ``pyproject.toml`` only counts if it has a ``[tool.release-engine]``
    table.

    Raises:
        ConfigNotFoundError: If no configuration file is found.
    """
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        dedicated = directory / CONFIG_FILENAME
        if dedicated.is_file():
            return dedicated
        pyproject = directory / PYPROJECT_FILENAME
        if pyproject.is_file() and extract_tool_config(load_toml(pyproject)):
            return pyproject
    raise ConfigNotFoundError(
        f"No {CONFIG_FILENAME} or [tool.{TOOL_KEY}] in {PYPROJECT_FILENAME} found from {current}"
    )


def load_toml(path: Path) -> dict[str, Any]:
    """Load a TOML file into plain Python containers.

    Raises:
        ConfigNotFoundError: If the file does not exist.
        ConfigValidationError: If the file is not valid TOML.
    """
    if not path.is_file():
        raise ConfigNotFoundError(f"Configuration file not found: {path}")
    try:
        return tomlkit.parse(path.read_text(encoding="utf-8")).unwrap()
    except ParseError as e:
        raise ConfigValidationError(f"Invalid TOML in {path}: {e}") from e


def extract_tool_config(pyproject: dict[str, Any]) -> dict[str, Any]:
    """Return the ``[tool.release-engine]`` table, or an empty dict."""
    return dict(pyproject.get("tool", {}).get(TOOL_KEY, {}))


def load_config(path: Path | None = None) -> ReleaseEngineConfig:
    """Load and validate the configuration.

    Args:
        path: A configuration file, or a directory to search from.

    Raises:
        ConfigNotFoundError: If no configuration is found.
        ConfigValidationError: If the configuration is invalid.
    """
    config_path = path if path is not None and path.is_file() else find_config_file(path)
    data = load_toml(config_path)
    if config_path.name == PYPROJECT_FILENAME:
        data = extract_tool_config(data)

    logger.debug("Loading configuration from %s", config_path)
    try:
        return ReleaseEngineConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid configuration in {config_path}:\n{e}") from e
