"""Top-level lint invocation with its corrective-retry loop."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Protocol

from lsprotocol import types

from alintlsp.alint.paths import required_binaries_exist
from alintlsp.alint.scratch import ScratchDirectory
from alintlsp.alint.types import LintTarget
from alintlsp.config import LintSettings
from alintlsp.errors import AlintLspError, NonZeroExitError, UnsupportedLanguageError
from alintlsp.lint.pipeline import CommandRunner, LintPipeline
from alintlsp.logging import get_logger

__all__ = [
    "DiagnosticPublisher",
    "LintRetryLoop",
    "Prompter",
    "SettingsProvider",
]

SettingsProvider = Callable[[str], Awaitable[LintSettings]]


class Prompter(Protocol):
    """User interaction needed to recover from a failed lint."""

    async def request_install_path(self, uri: str, current: str) -> str | None:
        """Return a validated installation path, or None if the user cancelled."""
        ...

    async def request_language(
        self, target: LintTarget, error: UnsupportedLanguageError
    ) -> str | None:
        """Return the corrected language ID, or None if the user cancelled."""
        ...

    async def show_error(self, message: str) -> None: ...


class DiagnosticPublisher(Protocol):
    def publish(self, uri: str, diagnostics: Sequence[types.Diagnostic]) -> None:
        """Replace every diagnostic previously published for the URI."""
        ...


class LintRetryLoop:
    """Runs the lint pipeline for a document until it succeeds or gives up.

    An unsupported language is the only recoverable failure: the user is
    asked to correct it and the pipeline runs again. A failed tool run is
    already visible in the output log and is dropped silently. Other domain
    errors are shown to the user. Anything else propagates.
    """

    def __init__(
        self,
        *,
        runner: CommandRunner,
        settings_provider: SettingsProvider,
        prompter: Prompter,
        publisher: DiagnosticPublisher,
        logger: logging.Logger | None = None,
    ) -> None:
        self._runner = runner
        self._settings_provider = settings_provider
        self._prompter = prompter
        self._publisher = publisher
        self._logger = logger or get_logger("lint.retry")

    async def execute(self, target: LintTarget) -> None:
        """Lint a document and publish its diagnostics."""
        try:
            await self._execute(target)
        except NonZeroExitError as e:
            self._logger.debug("Lint of %s stopped: %s", target.uri, e)
        except AlintLspError as e:
            self._logger.warning("Lint of %s failed: %s", target.uri, e)
            await self._prompter.show_error(str(e))

    async def _execute(self, target: LintTarget) -> None:
        settings = await self._settings_provider(target.uri)

        install_path: str | None = settings.alint_pro_path
        if not required_binaries_exist(install_path):
            install_path = await self._prompter.request_install_path(
                target.uri, install_path
            )
            if install_path is None:
                self._logger.debug("Install path request cancelled for %s", target.uri)
                return

        pipeline = LintPipeline(self._runner, settings)

        with ScratchDirectory() as cwd:
            self._publisher.publish(target.uri, [])

            while True:
                try:
                    diagnostics = await pipeline.run(target, install_path, cwd)
                except UnsupportedLanguageError as e:
                    language_id = await self._prompter.request_language(target, e)
                    if language_id is None:
                        self._logger.debug(
                            "Language change cancelled for %s", target.uri
                        )
                        return
                    target = target._replace(language_id=language_id)
                    continue

                self._publisher.publish(target.uri, diagnostics)
                self._logger.info(
                    "Published %d diagnostics for %s", len(diagnostics), target.uri
                )
                return
