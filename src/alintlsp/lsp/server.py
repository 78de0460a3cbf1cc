"""ALINT-PRO LSP server using pygls 2.0.

Lints Verilog, SystemVerilog and VHDL files with ALINT-PRO when they are
saved (and optionally opened), or when the ``alintPro.lintFile`` command
is executed, and publishes the findings as diagnostics.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from lsprotocol import types
from pygls.lsp.server import LanguageServer

from alintlsp.alint.process import ProcessRunner
from alintlsp.alint.types import LintTarget
from alintlsp.config import (
    CONFIG_SECTION,
    DEFAULT_SETTINGS,
    LintSettings,
    merge_settings,
)
from alintlsp.lint.pipeline import CommandRunner
from alintlsp.lint.retry import LintRetryLoop
from alintlsp.logging import get_logger
from alintlsp.lsp.client import LspOutputSink, LspPrompter, LspPublisher
from alintlsp.lsp.diagnostics.scheduler import RequestScheduler
from alintlsp.lsp.error_handling import guard_handler

LINT_FILE_COMMAND = "alintPro.lintFile"


def _command_uri(arguments: Sequence[Any]) -> str | None:
    """
    Extract the document URI from ``workspace/executeCommand`` arguments.

    Accepts ``[uri]``, ``[[uri]]`` and ``[{"uri": uri}]``.
    """
    if len(arguments) == 1 and isinstance(arguments[0], list):
        arguments = arguments[0]
    if not arguments:
        return None
    first = arguments[0]
    if isinstance(first, str):
        return first
    if isinstance(first, Mapping) and isinstance(first.get("uri"), str):
        return first["uri"]
    return None


def _section_from_options(options: Any) -> dict[str, Any]:
    """Pick the ``alintPro`` settings out of ``initializationOptions``."""
    if not isinstance(options, Mapping):
        return {}
    section = options.get(CONFIG_SECTION, options)
    return dict(section) if isinstance(section, Mapping) else {}


def _supports_workspace_configuration(server: LanguageServer) -> bool:
    capabilities = getattr(server.protocol, "client_capabilities", None)
    workspace = capabilities.workspace if capabilities is not None else None
    return bool(workspace is not None and workspace.configuration)


def create_server(
    *,
    settings_defaults: Mapping[str, Any] | None = None,
    lint_on_open: bool = False,
    lint_on_save: bool = True,
    runner: CommandRunner | None = None,
    logger: logging.Logger | None = None,
    debounce_ms: int = 200,
) -> LanguageServer:
    """
    Create and configure the LSP server.

    Args:
        settings_defaults: ``alintPro`` settings from the command line and
            settings file. Client settings take precedence over them.
        lint_on_open: Lint documents when they are opened.
        lint_on_save: Lint documents when they are saved.
        runner: Command runner; defaults to a ProcessRunner that logs tool
            output to the client.
        logger: Optional logger instance. If None, uses the alintlsp.lsp logger.
        debounce_ms: Delay before a save-triggered lint starts. Default 200.

    Returns:
        Configured LanguageServer instance.
    """
    if logger is None:
        logger = get_logger("lsp")

    server = LanguageServer("alint-lsp", "v0.1.0")
    scheduler = RequestScheduler()
    initialization_settings: dict[str, Any] = {}

    async def load_settings(uri: str) -> LintSettings:
        client_settings: Mapping[str, Any] | None = None
        if _supports_workspace_configuration(server):
            results = await server.workspace_configuration_async(
                types.ConfigurationParams(
                    items=[
                        types.ConfigurationItem(scope_uri=uri, section=CONFIG_SECTION)
                    ]
                )
            )
            if results and isinstance(results[0], Mapping):
                client_settings = results[0]

        return LintSettings.from_mapping(
            merge_settings(
                DEFAULT_SETTINGS,
                settings_defaults,
                initialization_settings,
                client_settings,
            )
        )

    retry_loop = LintRetryLoop(
        runner=runner or ProcessRunner(LspOutputSink(server)),
        settings_provider=load_settings,
        prompter=LspPrompter(server, load_settings),
        publisher=LspPublisher(server),
    )

    def lint_target(uri: str) -> LintTarget:
        document = server.workspace.get_text_document(uri)
        return LintTarget(
            uri=uri,
            path=document.path,
            language_id=document.language_id,
            document=document,
        )

    async def schedule_lint(uri: str, delay_ms: int) -> None:
        async def run() -> None:
            # Resolved when the run starts so the latest language ID is used
            await retry_loop.execute(lint_target(uri))

        logger.debug("Scheduling lint for %s", uri)
        await scheduler.schedule(uri, run, delay_ms=delay_ms)

    @server.feature(types.INITIALIZE)
    @guard_handler(logger=logger, feature_name="initialize")
    def initialize(params: types.InitializeParams) -> None:
        initialization_settings.update(
            _section_from_options(params.initialization_options)
        )
        logger.debug("Initialization settings: %s", initialization_settings)

    @server.command(LINT_FILE_COMMAND)
    @guard_handler(logger=logger, feature_name=LINT_FILE_COMMAND)
    async def lint_file(*arguments: Any) -> None:
        """Handle the lint command for an explicit document URI."""
        uri = _command_uri(arguments)
        if uri is None:
            server.window_show_message(
                types.ShowMessageParams(
                    type=types.MessageType.Error,
                    message="No file to lint was given",
                )
            )
            return
        await schedule_lint(uri, delay_ms=0)

    @server.feature(types.TEXT_DOCUMENT_DID_OPEN)
    @guard_handler(logger=logger, feature_name="textDocument/didOpen")
    async def did_open(params: types.DidOpenTextDocumentParams) -> None:
        """Handle textDocument/didOpen by linting when enabled."""
        if lint_on_open:
            await schedule_lint(params.text_document.uri, delay_ms=0)

    @server.feature(types.TEXT_DOCUMENT_DID_SAVE)
    @guard_handler(logger=logger, feature_name="textDocument/didSave")
    async def did_save(params: types.DidSaveTextDocumentParams) -> None:
        """Handle textDocument/didSave by linting the saved file."""
        if lint_on_save:
            await schedule_lint(params.text_document.uri, delay_ms=debounce_ms)

    @server.feature(types.TEXT_DOCUMENT_DID_CLOSE)
    @guard_handler(logger=logger, feature_name="textDocument/didClose")
    async def did_close(params: types.DidCloseTextDocumentParams) -> None:
        """Handle textDocument/didClose by cancelling the run and clearing diagnostics."""
        uri = params.text_document.uri
        logger.debug("Document closed: %s", uri)

        await scheduler.cancel(uri)
        server.text_document_publish_diagnostics(
            types.PublishDiagnosticsParams(uri=uri, diagnostics=[], version=None)
        )

    @server.feature(types.SHUTDOWN)
    @guard_handler(logger=logger, feature_name="shutdown")
    async def shutdown(params: None) -> None:
        await scheduler.cancel_all()

    return server
