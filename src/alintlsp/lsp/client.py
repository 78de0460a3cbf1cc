"""LSP implementations of the collaborators the lint loop talks to."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from lsprotocol import types
from pygls.exceptions import JsonRpcException
from pygls.lsp.server import LanguageServer

from alintlsp.alint.paths import missing_binaries_hint, required_binaries_exist
from alintlsp.alint.types import LintTarget
from alintlsp.errors import UnsupportedLanguageError
from alintlsp.lint.retry import SettingsProvider
from alintlsp.logging import get_logger

__all__ = [
    "CHANGE_LANGUAGE_REQUEST",
    "LspOutputSink",
    "LspPrompter",
    "LspPublisher",
]

# Custom request answered by the client extension with the new language ID
# (a string) or null when the user dismissed the language picker.
CHANGE_LANGUAGE_REQUEST = "alintPro/changeLanguageMode"

CHANGE_LANGUAGE_ACTION = "Change language"
RELOAD_SETTINGS_ACTION = "Reload settings"

SUPPORTED_LANGUAGES_HINT = (
    "Supported language modes are:"
    " 'System Verilog' (systemverilog), 'Verilog' (verilog)"
    " and 'VHDL' (vhdl)"
)


class LspOutputSink:
    """Forwards tool output to the client's log and to the Python logger."""

    def __init__(
        self, server: LanguageServer, logger: logging.Logger | None = None
    ) -> None:
        self._server = server
        self._logger = logger or get_logger("alint.output")

    def append(self, text: str) -> None:
        message = text.rstrip("\n")
        self._logger.debug("%s", message)
        self._server.window_log_message(
            types.LogMessageParams(type=types.MessageType.Log, message=message)
        )


class LspPublisher:
    """Publishes diagnostics, replacing the client's set for the document."""

    def __init__(self, server: LanguageServer) -> None:
        self._server = server

    def publish(self, uri: str, diagnostics: Sequence[types.Diagnostic]) -> None:
        self._server.text_document_publish_diagnostics(
            types.PublishDiagnosticsParams(
                uri=uri,
                diagnostics=list(diagnostics),
                version=None,
            )
        )


class LspPrompter:
    """Asks the user to fix the install path or the document language."""

    def __init__(
        self,
        server: LanguageServer,
        settings_provider: SettingsProvider,
        logger: logging.Logger | None = None,
    ) -> None:
        self._server = server
        self._settings_provider = settings_provider
        self._logger = logger or get_logger("lsp.client")

    async def _confirm(
        self, message_type: types.MessageType, message: str, action: str
    ) -> bool:
        response = await self._server.window_show_message_request_async(
            types.ShowMessageRequestParams(
                type=message_type,
                message=message,
                actions=[types.MessageActionItem(title=action)],
            )
        )
        return response is not None and response.title == action

    async def request_install_path(self, uri: str, current: str) -> str | None:
        """
        Prompt until the configured install path is valid.

        The user fixes ``alintPro.alintProPath`` in the editor settings and
        picks "Reload settings"; dismissing the prompt cancels.
        """
        while True:
            if current.strip():
                message_type = types.MessageType.Error
                message = (
                    "ALINT-PRO installation path does not contain required files. "
                    + missing_binaries_hint()
                )
            else:
                message_type = types.MessageType.Info
                message = "ALINT-PRO installation path is not set (alintPro.alintProPath)."

            if not await self._confirm(message_type, message, RELOAD_SETTINGS_ACTION):
                return None

            settings = await self._settings_provider(uri)
            current = settings.alint_pro_path
            if required_binaries_exist(current):
                return current
            self._logger.debug("Reloaded install path %r is still invalid", current)

    async def request_language(
        self, target: LintTarget, error: UnsupportedLanguageError
    ) -> str | None:
        message = f"{error}. {SUPPORTED_LANGUAGES_HINT}"
        if not await self._confirm(
            types.MessageType.Error, message, CHANGE_LANGUAGE_ACTION
        ):
            return None

        try:
            language_id = await self._server.protocol.send_request_async(
                CHANGE_LANGUAGE_REQUEST, {"uri": target.uri}
            )
        except JsonRpcException as e:
            self._logger.warning(
                "Client did not handle %s: %s", CHANGE_LANGUAGE_REQUEST, e
            )
            return None
        if not isinstance(language_id, str) or not language_id:
            return None
        self._logger.debug("Language of %s changed to %s", target.uri, language_id)
        return language_id

    async def show_error(self, message: str) -> None:
        self._server.window_show_message(
            types.ShowMessageParams(type=types.MessageType.Error, message=message)
        )
