"""Domain errors raised while linting a document with ALINT-PRO.

Every class here derives from :class:`AlintLspError`. The retry loop treats
that base class as the boundary between user-facing failures and programming
errors: anything else is left to propagate.
"""

from __future__ import annotations

from pathlib import Path

__all__ = [
    "AlintLspError",
    "ConfigFileError",
    "ConfigKeyMissingError",
    "InvalidConfigValueError",
    "NonZeroExitError",
    "OrphanedRelatedInformationError",
    "UnsupportedLanguageError",
]


class AlintLspError(Exception):
    """Base class for errors that can be reported to the user."""


class ConfigKeyMissingError(AlintLspError):
    """A required configuration key has no value."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Config key {key} doesn't exist")
        self.key = key


class InvalidConfigValueError(AlintLspError):
    """A configuration value has the wrong type or is out of range."""

    def __init__(self, key: str, value: object, reason: str) -> None:
        super().__init__(f"alintPro.{key} {reason} (got {value!r})")
        self.key = key
        self.value = value


class ConfigFileError(AlintLspError):
    """A settings file could not be read or has the wrong shape."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Invalid settings file {path}: {reason}")
        self.path = path


class NonZeroExitError(AlintLspError):
    """A spawned tool exited with a non-zero status."""

    def __init__(self, code: int | None) -> None:
        super().__init__(f"Non-zero exit code: {code}")
        self.code = code


class UnsupportedLanguageError(AlintLspError):
    """The document's language ID has no analysis mode."""

    def __init__(self, language_id: str | None) -> None:
        super().__init__(f"Unsupported language ID: {language_id}")
        self.language_id = language_id


class OrphanedRelatedInformationError(AlintLspError):
    """A ``Details:`` line appeared before any diagnostic it could belong to."""

    def __init__(self) -> None:
        super().__init__("Found diagnostic details without the diagnostic itself")
