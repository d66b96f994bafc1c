"""Configuration loading for metalineage.

Configuration is merged from sources in priority order:

    defaults (LineageConfig)
         |
         +---> FileConfigSource (YAML or JSON)
         +---> EnvConfigSource (METALINEAGE_* variables)
         |
         v
    LineageConfig

Usage:
    >>> from metalineage.config import load_config
    >>> config = load_config("metalineage.yaml")
    >>> config.max_nodes
    500

A file may hold the settings at top level or under a ``lineage`` key:

    lineage:
      max_nodes: 500
      max_field_depth: 64
"""

from __future__ import annotations

import codecs
import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Mapping

import yaml

from metalineage.base import LineageConfig

logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigError(Exception):
    """Base configuration error."""

    pass


class ConfigValidationError(ConfigError):
    """Configuration validation error."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        super().__init__(f"Configuration validation failed: {', '.join(errors)}")


class ConfigSourceError(ConfigError):
    """Configuration source error."""

    pass


# =============================================================================
# Configuration Sources
# =============================================================================


class ConfigSource(ABC):
    """Abstract base class for configuration sources.

    Sources are merged in priority order; higher priorities override.
    """

    def __init__(self, priority: int = 0) -> None:
        self._priority = priority

    @property
    def priority(self) -> int:
        return self._priority

    @abstractmethod
    def load(self) -> dict[str, Any]:
        """Load configuration values from the source."""
        pass


class EnvConfigSource(ConfigSource):
    """Environment variable configuration source.

    Example:
        METALINEAGE_MAX_NODES=500
        METALINEAGE_JSON_INDENT=2

        Will produce:
        {"max_nodes": 500, "json_indent": 2}
    """

    def __init__(
        self,
        prefix: str = "METALINEAGE",
        environ: Mapping[str, str] | None = None,
        priority: int = 100,
    ) -> None:
        super().__init__(priority)
        self._prefix = f"{prefix}_"
        self._environ = environ

    def load(self) -> dict[str, Any]:
        environ = os.environ if self._environ is None else self._environ
        known = set(LineageConfig.field_names())
        result: dict[str, Any] = {}

        for key, value in environ.items():
            if not key.startswith(self._prefix):
                continue
            name = key[len(self._prefix):].lower()
            if name not in known:
                logger.debug("Ignoring unknown configuration variable %s", key)
                continue
            result[name] = self._parse_value(value)

        return result

    def _parse_value(self, value: str) -> Any:
        """Parse string value to appropriate type."""
        if value.lower() in ("null", "none", ""):
            return None

        try:
            return int(value)
        except ValueError:
            pass

        # escaped separators such as "\n"; non-ASCII text is taken as is
        if "\\" in value and value.isascii():
            return codecs.decode(value, "unicode_escape")
        return value


class FileConfigSource(ConfigSource):
    """YAML or JSON file configuration source."""

    def __init__(
        self,
        path: str | Path,
        *,
        required: bool = False,
        priority: int = 50,
    ) -> None:
        super().__init__(priority)
        self._path = Path(path)
        self._required = required

    def load(self) -> dict[str, Any]:
        if not self._path.exists():
            if self._required:
                raise ConfigSourceError(f"Configuration file not found: {self._path}")
            return {}

        content = self._path.read_text(encoding="utf-8")
        suffix = self._path.suffix.lower()

        try:
            if suffix in (".yaml", ".yml"):
                data = yaml.safe_load(content) or {}
            elif suffix == ".json":
                data = json.loads(content) if content.strip() else {}
            else:
                raise ConfigSourceError(f"Unsupported file format: {suffix}")
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigSourceError(f"Failed to load config {self._path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigSourceError(f"Configuration in {self._path} must be a mapping")
        section = data.get("lineage", data)
        if not isinstance(section, dict):
            raise ConfigSourceError(f"'lineage' section in {self._path} must be a mapping")
        return section


# =============================================================================
# Loading
# =============================================================================


def config_from_dict(values: Mapping[str, Any]) -> LineageConfig:
    """Build a validated LineageConfig from raw values.

    Raises:
        ConfigValidationError: On unknown keys or invalid values
    """
    known = LineageConfig.field_names()
    errors = [f"unknown key '{key}'" for key in values if key not in known]

    for key in ("max_nodes", "max_field_depth"):
        if key in values:
            value = values[key]
            if isinstance(value, bool) or not isinstance(value, int) or (value < 1 and value != -1):
                errors.append(f"{key} must be a positive integer or -1, got {value!r}")

    if "level_scale" in values:
        value = values["level_scale"]
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            errors.append(f"level_scale must be a positive integer, got {value!r}")

    if "json_indent" in values:
        value = values["json_indent"]
        if value is not None and (isinstance(value, bool) or not isinstance(value, int) or value < 0):
            errors.append(f"json_indent must be a non-negative integer or null, got {value!r}")

    for key in ("label_separator", "node_group"):
        if key in values and not isinstance(values[key], str):
            errors.append(f"{key} must be a string, got {values[key]!r}")

    if errors:
        raise ConfigValidationError(errors)

    return LineageConfig(**dict(values))


def load_config(
    path: str | Path | None = None,
    *,
    env_prefix: str = "METALINEAGE",
    environ: Mapping[str, str] | None = None,
) -> LineageConfig:
    """Load configuration from an optional file and the environment.

    Args:
        path: YAML or JSON file; required to exist when given
        env_prefix: Prefix of environment variables
        environ: Environment mapping (defaults to ``os.environ``)
    """
    sources: list[ConfigSource] = [EnvConfigSource(env_prefix, environ)]
    if path is not None:
        sources.append(FileConfigSource(path, required=True))

    merged: dict[str, Any] = {}
    for source in sorted(sources, key=lambda s: s.priority):
        merged.update(source.load())

    config = config_from_dict(merged)
    logger.debug("Loaded configuration: %s", config.to_dict())
    return config
