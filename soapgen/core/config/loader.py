"""
Configuration loader — reads the generator config file into SoapOptions.

The config file lets the generator run without prompts.  It is a JSON
document (YAML is accepted too) with a top-level ``soap`` section:

    {
      "soap": {
        "datasource": "weatherDS",
        "service": "Weather",
        "binding": "WeatherSoap",
        "operations": "all"
      }
    }

Any key that is present replaces the matching prompt.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel

logger = logging.getLogger(__name__)

# Files that mark the root of a LoopBack project
PROJECT_MARKERS = ("server/model-config.json", "server/datasources.json")

ALL_OPERATIONS = "all"


class ConfigError(Exception):
    """Raised when the generator configuration is invalid or missing."""


class SoapOptions(BaseModel):
    """Answers supplied by the ``soap`` section of a config file."""

    datasource: str | None = None
    service: str | None = None
    binding: str | None = None
    # "all", a list of names, or anything else (rejected when operations are resolved)
    operations: Any = None

    @property
    def is_empty(self) -> bool:
        return not any(
            v is not None
            for v in (self.datasource, self.service, self.binding, self.operations)
        )


def find_project_root(start_dir: Path | None = None) -> Path | None:
    """Search for a LoopBack project root starting from a directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        The project directory, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        if any((current / marker).is_file() for marker in PROJECT_MARKERS):
            return current
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_generator_config(path: Path | str) -> SoapOptions:
    """Load the ``soap`` section of a generator config file.

    Args:
        path: Config file path; relative paths resolve against the cwd.

    Returns:
        SoapOptions. A file without a ``soap`` section yields empty options.

    Raises:
        ConfigError: If the file is missing, unreadable or malformed.
    """
    path = Path(path)
    if not path.is_absolute():
        path = Path.cwd() / path

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading generator config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    if path.suffix in (".yml", ".yaml"):
        try:
            data = yaml.safe_load(raw)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    else:
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Expected an object in {path}, got {type(data).__name__}")

    section = data.get("soap") or {}
    if not isinstance(section, dict):
        raise ConfigError(f"Expected 'soap' to be an object in {path}")

    try:
        options = SoapOptions.model_validate(section)
    except Exception as e:
        raise ConfigError(f"Invalid soap configuration in {path}: {e}") from e

    logger.info("Configuration file found, it will be used to supply answers")
    return options
