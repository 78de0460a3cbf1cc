"""Lint settings and the layers they are read from.

Settings use the editor's camelCase keys (``alintPro.maxWarn`` and so on).
Layers are merged as plain mappings, lowest precedence first, and validated
once into a frozen :class:`LintSettings`.
"""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from alintlsp.errors import (
    ConfigFileError,
    ConfigKeyMissingError,
    InvalidConfigValueError,
)

__all__ = [
    "CONFIG_SECTION",
    "DEFAULT_SETTINGS",
    "LintSettings",
    "load_settings_file",
    "merge_settings",
]

CONFIG_SECTION = "alintPro"

DEFAULT_SETTINGS: dict[str, Any] = {
    "alintProPath": "",
    "maxRuleWarn": 100,
    "maxWarn": 1000,
    "diagnosticLength": -1,
}


def _require(values: Mapping[str, Any], key: str) -> Any:
    value = values.get(key)
    if value is None:
        raise ConfigKeyMissingError(key)
    return value


def _positive_int(values: Mapping[str, Any], key: str) -> int:
    value = _require(values, key)
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidConfigValueError(key, value, "is not a positive integer")
    return value


def _diagnostic_length(values: Mapping[str, Any], key: str) -> int:
    value = _require(values, key)
    if isinstance(value, bool) or not isinstance(value, int) or value < -1:
        raise InvalidConfigValueError(
            key, value, "must be -1 or a non-negative integer"
        )
    return value


def _install_path(values: Mapping[str, Any], key: str) -> str:
    value = _require(values, key)
    if not isinstance(value, str):
        raise InvalidConfigValueError(key, value, "is not a string")
    value = value.strip()
    return os.path.expanduser(value) if value else value


@dataclasses.dataclass(frozen=True)
class LintSettings:
    """Validated settings for one lint invocation."""

    alint_pro_path: str
    max_rule_warn: int
    max_warn: int
    diagnostic_length: int  # -1 means "to the end of the line"

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> LintSettings:
        """
        Validate a merged ``alintPro`` settings mapping.

        Args:
            values: Mapping keyed by the camelCase setting names.

        Returns:
            Validated settings.

        Raises:
            ConfigKeyMissingError: A required key is absent or null.
            InvalidConfigValueError: A value has the wrong type or range.
        """
        return cls(
            alint_pro_path=_install_path(values, "alintProPath"),
            max_rule_warn=_positive_int(values, "maxRuleWarn"),
            max_warn=_positive_int(values, "maxWarn"),
            diagnostic_length=_diagnostic_length(values, "diagnosticLength"),
        )


def merge_settings(*layers: Mapping[str, Any] | None) -> dict[str, Any]:
    """Merge settings layers; later layers win, ``None`` values are skipped."""
    merged: dict[str, Any] = {}
    for layer in layers:
        if not layer:
            continue
        merged.update({key: value for key, value in layer.items() if value is not None})
    return merged


def load_settings_file(path: Path) -> dict[str, Any]:
    """
    Load settings from a YAML file.

    The file may either hold the keys at the top level or nest them under an
    ``alintPro`` mapping.

    Args:
        path: YAML file to read.

    Returns:
        Settings mapping (possibly empty).

    Raises:
        ConfigFileError: The file cannot be read, parsed, or is not a mapping.
    """
    try:
        content = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigFileError(path, e.strerror or str(e)) from e
    except yaml.YAMLError as e:
        raise ConfigFileError(path, str(e)) from e

    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ConfigFileError(path, "top level must be a mapping")

    section = content.get(CONFIG_SECTION, content)
    if not isinstance(section, dict):
        raise ConfigFileError(path, f"{CONFIG_SECTION} must be a mapping")
    return dict(section)
