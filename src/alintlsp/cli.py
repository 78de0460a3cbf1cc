"""Command-line interface for alint-lsp."""

from __future__ import annotations

import argparse
import dataclasses
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Literal

from alintlsp.config import load_settings_file, merge_settings
from alintlsp.errors import ConfigFileError
from alintlsp.logging import configure_logging, get_logger
from alintlsp.lsp.server import create_server


@dataclasses.dataclass(frozen=True)
class CliArgs:
    """Parsed command-line arguments."""

    transport: Literal["stdio", "tcp"]
    host: str
    port: int
    log_level: str
    log_file: Path | None
    debug: bool
    config_file: Path | None
    alint_pro_path: str | None
    max_rule_warn: int | None
    max_warn: int | None
    diagnostic_length: int | None
    lint_on_open: bool
    lint_on_save: bool

    def settings_overrides(self) -> dict[str, Any]:
        """Settings given on the command line, keyed like the editor settings."""
        return {
            "alintProPath": self.alint_pro_path,
            "maxRuleWarn": self.max_rule_warn,
            "maxWarn": self.max_warn,
            "diagnosticLength": self.diagnostic_length,
        }


def parse_args(argv: Sequence[str] | None = None) -> CliArgs:
    """
    Parse command-line arguments.

    Args:
        argv: Command-line arguments. If None, uses sys.argv[1:].

    Returns:
        Parsed arguments as CliArgs dataclass.
    """
    parser = argparse.ArgumentParser(
        prog="alint-lsp",
        description="Language server publishing ALINT-PRO lint results",
    )

    parser.add_argument(
        "--transport",
        choices=["stdio", "tcp"],
        default="stdio",
        help="Transport mode (default: stdio)",
    )
    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host for TCP transport (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=4389,
        help="Port for TCP transport (default: 4389)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Log level (default: INFO, or DEBUG if --debug is set)",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Log file path (default: stderr)",
    )
    parser.add_argument(
        "-v",
        "--debug",
        action="store_true",
        help="Enable debug mode (sets log level to DEBUG unless --log-level is specified)",
    )

    settings = parser.add_argument_group(
        "lint settings",
        "Defaults for the alintPro.* settings; client settings override them.",
    )
    settings.add_argument(
        "--config",
        dest="config_file",
        type=Path,
        default=None,
        help="YAML file with alintPro settings",
    )
    settings.add_argument(
        "--alint-pro-path",
        default=None,
        help="ALINT-PRO installation directory",
    )
    settings.add_argument(
        "--max-rule-warn",
        type=int,
        default=None,
        help="Maximum number of warnings reported per rule",
    )
    settings.add_argument(
        "--max-warn",
        type=int,
        default=None,
        help="Maximum number of warnings reported in total",
    )
    settings.add_argument(
        "--diagnostic-length",
        type=int,
        default=None,
        help="Columns highlighted per diagnostic (-1: to the end of the line)",
    )
    settings.add_argument(
        "--lint-on-open",
        action="store_true",
        help="Also lint documents when they are opened",
    )
    settings.add_argument(
        "--no-lint-on-save",
        dest="lint_on_save",
        action="store_false",
        help="Do not lint documents when they are saved",
    )

    args = parser.parse_args(argv)

    # Determine log level: explicit --log-level wins, otherwise --debug sets DEBUG
    if args.log_level is not None:
        log_level = args.log_level
    elif args.debug:
        log_level = "DEBUG"
    else:
        log_level = "INFO"

    return CliArgs(
        transport=args.transport,
        host=args.host,
        port=args.port,
        log_level=log_level,
        log_file=args.log_file,
        debug=args.debug,
        config_file=args.config_file,
        alint_pro_path=args.alint_pro_path,
        max_rule_warn=args.max_rule_warn,
        max_warn=args.max_warn,
        diagnostic_length=args.diagnostic_length,
        lint_on_open=args.lint_on_open,
        lint_on_save=args.lint_on_save,
    )


def resolve_settings_defaults(args: CliArgs) -> dict[str, Any]:
    """
    Merge the settings file and command-line settings.

    Raises:
        ConfigFileError: The settings file is unreadable or malformed.
    """
    file_settings = (
        load_settings_file(args.config_file) if args.config_file is not None else None
    )
    return merge_settings(file_settings, args.settings_overrides())


def run(argv: Sequence[str] | None = None) -> int:
    """
    Run the LSP server.

    Args:
        argv: Command-line arguments. If None, uses sys.argv[1:].

    Returns:
        Exit code (0 for success, 1 for error).
    """
    args = parse_args(argv)

    configure_logging(level=args.log_level, log_file=args.log_file)
    logger = get_logger("main")

    logger.info("Starting alint-lsp server")
    logger.debug("Configuration: %s", args)

    try:
        settings_defaults = resolve_settings_defaults(args)

        server = create_server(
            settings_defaults=settings_defaults,
            lint_on_open=args.lint_on_open,
            lint_on_save=args.lint_on_save,
        )

        if args.transport == "stdio":
            logger.info("Starting in stdio mode")
            server.start_io()
        else:
            logger.info("Starting in TCP mode on %s:%d", args.host, args.port)
            server.start_tcp(args.host, args.port)

        return 0

    except ConfigFileError as e:
        logger.critical("%s", e)
        return 1

    except KeyboardInterrupt:
        logger.info("Server stopped by user")
        return 0

    except Exception:
        logger.critical("Fatal error in server", exc_info=True)
        return 1
