"""Library initialisation and analysis of one document."""

from __future__ import annotations

import logging
from typing import Protocol

from lsprotocol import types

from alintlsp.alint.commands import analysis_command, analysis_mode_for, library_command
from alintlsp.alint.types import Command, LintTarget
from alintlsp.config import LintSettings
from alintlsp.errors import NonZeroExitError
from alintlsp.logging import get_logger
from alintlsp.lsp.diagnostics import codes
from alintlsp.lsp.diagnostics.parser import parse_diagnostics

__all__ = [
    "PARSE_ABORT_CODE",
    "PARSE_ABORT_EXIT_CODE",
    "CommandRunner",
    "LintPipeline",
]

# When the analysis aborts parsing it exits with this status and reports
# PARSE_ABORT_CODE last; the diagnostics before it are still valid.
PARSE_ABORT_EXIT_CODE = 1
PARSE_ABORT_CODE = codes.PARSE_ABORTED


class CommandRunner(Protocol):
    async def run(
        self, command: Command, *, stdout_buffer: list[str] | None = None
    ) -> str: ...


class LintPipeline:
    """Runs ``vlib`` then ``vlog``/``vcom`` and parses the analysis output."""

    def __init__(
        self,
        runner: CommandRunner,
        settings: LintSettings,
        logger: logging.Logger | None = None,
    ) -> None:
        self._runner = runner
        self._settings = settings
        self._logger = logger or get_logger("lint.pipeline")

    async def run(
        self, target: LintTarget, install_path: str, cwd: str
    ) -> list[types.Diagnostic]:
        """
        Lint a document.

        Args:
            target: Document to lint.
            install_path: Validated ALINT-PRO installation root.
            cwd: Scratch directory that holds the working library.

        Returns:
            Diagnostics in tool output order.

        Raises:
            UnsupportedLanguageError: The document's language has no analysis mode.
            NonZeroExitError: A tool failed, except for a parse abort.
            OrphanedRelatedInformationError: The analysis output is malformed.
        """
        mode = analysis_mode_for(target.language_id)
        self._logger.info("Linting %s as %s", target.path, mode)

        # The analysis step needs the library, so a failure here is final
        await self._runner.run(library_command(install_path, cwd))

        command = analysis_command(
            mode,
            install_path=install_path,
            file_path=target.path,
            max_rule_warn=self._settings.max_rule_warn,
            max_warn=self._settings.max_warn,
            cwd=cwd,
        )
        captured: list[str] = []
        try:
            output = await self._runner.run(command, stdout_buffer=captured)
        except NonZeroExitError as e:
            if e.code != PARSE_ABORT_EXIT_CODE:
                raise
            diagnostics = self._parse("".join(captured), target, cwd)
            if not diagnostics or diagnostics[-1].code != PARSE_ABORT_CODE:
                raise
            self._logger.info(
                "Analysis of %s aborted parsing; keeping %d diagnostics",
                target.path,
                len(diagnostics) - 1,
            )
            return diagnostics[:-1]

        diagnostics = self._parse(output, target, cwd)
        self._logger.debug("Parsed %d diagnostics for %s", len(diagnostics), target.path)
        return diagnostics

    def _parse(
        self, output: str, target: LintTarget, cwd: str
    ) -> list[types.Diagnostic]:
        return parse_diagnostics(
            output,
            cwd=cwd,
            document=target.document,
            diagnostic_length=self._settings.diagnostic_length,
        )
