"""Type definitions shared by the ALINT-PRO tool layer."""

from __future__ import annotations

import shlex
from collections.abc import Sequence
from enum import Enum
from typing import NamedTuple, Protocol


class _StrEnum(str, Enum):
    """String-valued enum that behaves like str at runtime."""

    def __str__(self) -> str:
        return str(self.value)


class AnalysisMode(_StrEnum):
    """Language-specific toolchain path used for analysis."""

    VERILOG = "verilog"
    VHDL = "vhdl"


class Command(NamedTuple):
    """An executable with its arguments and working directory."""

    executable: str
    args: tuple[str, ...]
    cwd: str

    @property
    def argv(self) -> list[str]:
        return [self.executable, *self.args]

    def __str__(self) -> str:
        return shlex.join(self.argv)


class SourceDocument(Protocol):
    """Document text split into lines; pygls ``TextDocument`` satisfies this."""

    @property
    def lines(self) -> Sequence[str]: ...


class LintTarget(NamedTuple):
    """A document to lint."""

    uri: str
    path: str  # Filesystem path handed to the analysis tool
    language_id: str | None
    document: SourceDocument  # Used only to clamp diagnostic ranges
