"""Command lines for the ALINT-PRO library and analysis steps."""

from __future__ import annotations

from alintlsp.alint.paths import bin_path
from alintlsp.alint.types import AnalysisMode, Command
from alintlsp.errors import UnsupportedLanguageError

__all__ = [
    "LIBRARY_NAME",
    "analysis_command",
    "analysis_mode_for",
    "library_command",
]

LIBRARY_NAME = "work"

_LANGUAGE_MODES: dict[str, AnalysisMode] = {
    "systemverilog": AnalysisMode.VERILOG,
    "verilog": AnalysisMode.VERILOG,
    "vhdl": AnalysisMode.VHDL,
}

# Binary and language-standard flag per mode
_MODE_TOOLS: dict[AnalysisMode, tuple[str, str]] = {
    AnalysisMode.VERILOG: ("vlog", "-sv2k9"),
    AnalysisMode.VHDL: ("vcom", "-2002"),
}


def analysis_mode_for(language_id: str | None) -> AnalysisMode:
    """
    Map an editor language ID to an analysis mode.

    Raises:
        UnsupportedLanguageError: The language has no analysis mode.
    """
    mode = _LANGUAGE_MODES.get(language_id or "")
    if mode is None:
        raise UnsupportedLanguageError(language_id)
    return mode


def library_command(install_path: str, cwd: str) -> Command:
    """Build ``vlib work``, which creates the working library in cwd."""
    return Command(bin_path(install_path, "vlib"), (LIBRARY_NAME,), cwd)


def analysis_command(
    mode: AnalysisMode,
    *,
    install_path: str,
    file_path: str,
    max_rule_warn: int,
    max_warn: int,
    cwd: str,
) -> Command:
    """
    Build the ALINT analysis command for one source file.

    Args:
        mode: Analysis mode selecting ``vlog`` or ``vcom``.
        install_path: ALINT-PRO installation root.
        file_path: Source file to analyse.
        max_rule_warn: Limit of warnings reported per rule.
        max_warn: Limit of warnings reported in total.
        cwd: Working directory holding the ``work`` library.

    Returns:
        The analysis command.
    """
    binary, mode_flag = _MODE_TOOLS[mode]
    args = (
        mode_flag,
        "-alint",
        "-alint_elabflatmode",
        "-alint_maxrulewarn",
        str(max_rule_warn),
        "-alint_maxwarn",
        str(max_warn),
        "-work",
        LIBRARY_NAME,
        file_path,
    )
    return Command(bin_path(install_path, binary), args, cwd)
