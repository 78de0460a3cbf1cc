"""Parse ALINT-PRO console output into LSP diagnostics.

The tool reports one finding per line::

    ALINT_0001: Warning: design.v : (10, 4): Signal "x" is never used
    Details: include/defs.vh : (3, 1): "x" is declared here

Each line is matched against the primary patterns in order and the first
match wins. The order matters: the sentinel patterns overlap the generic
one. A line that matches no primary pattern may be a ``Details:`` line,
which adds related information to the diagnostic reported just before it.
Every other line is ignored.
"""

from __future__ import annotations

import os
import re
from collections.abc import Callable
from typing import NamedTuple

from lsprotocol import types
from pygls.uris import from_fs_path

from alintlsp.alint.types import SourceDocument
from alintlsp.lsp.diagnostics import codes
from alintlsp.lsp.diagnostics.collection import DiagnosticList

__all__ = ["parse_diagnostics"]


class _ParseContext(NamedTuple):
    cwd: str
    document: SourceDocument
    diagnostic_length: int


_Handler = Callable[[re.Match[str], _ParseContext], types.Diagnostic]

_FILE_IGNORED_PATTERN = re.compile(
    rf"^(?P<code>{re.escape(codes.FILE_IGNORED)}): VHDL file '(?P<path>.+?)'"
    r" is ignored due to errors$"
)
_PARSE_ABORTED_PATTERN = re.compile(
    rf"^(?P<code>{re.escape(codes.PARSE_ABORTED)}): (?P<severity>[^:]+):"
    r" (?P<message>.+)$"
)
_LOCATED_PATTERN = re.compile(
    r"^(?P<code>[^:]+): (?P<severity>[^:]+): (?P<path>.+?) :"
    r" \((?P<line>\d+), (?P<column>\d+)\): (?P<message>.+)$"
)
_DETAILS_PATTERN = re.compile(
    r"^Details: (?P<path>.+?) : \((?P<line>\d+), (?P<column>\d+)\):"
    r" (?P<message>.+)$"
)


def _line_length(document: SourceDocument, line: int) -> int:
    """Length of a document line without its terminator; 0 past the end."""
    lines = document.lines
    if line < 0 or line >= len(lines):
        return 0
    return len(lines[line].rstrip("\r\n"))


def _zero_based(match: re.Match[str], group: str) -> int:
    # Positions are 1-based; a reported 0 maps to the first line or column
    value = match.groupdict().get(group)
    return max(int(value) - 1, 0) if value else 0


def _resolve_severity(label: str | None) -> types.DiagnosticSeverity:
    if label is None:
        return codes.DEFAULT_SEVERITY
    return codes.SEVERITY_LABELS.get(label, codes.DEFAULT_SEVERITY)


def _diagnostic_range(line: int, column: int, ctx: _ParseContext) -> types.Range:
    line_length = _line_length(ctx.document, line)
    if ctx.diagnostic_length == -1:
        end_column = line_length
    else:
        end_column = min(column + ctx.diagnostic_length, line_length)
    return types.Range(
        start=types.Position(line=line, character=column),
        end=types.Position(line=line, character=end_column),
    )


def _new_diagnostic(
    match: re.Match[str],
    ctx: _ParseContext,
    *,
    message: str,
    severity: types.DiagnosticSeverity,
) -> types.Diagnostic:
    line = _zero_based(match, "line")
    column = _zero_based(match, "column")
    return types.Diagnostic(
        range=_diagnostic_range(line, column, ctx),
        message=message,
        severity=severity,
        source=codes.SOURCE,
        code=match.group("code"),
        related_information=[],
    )


def _file_ignored_diagnostic(
    match: re.Match[str], ctx: _ParseContext
) -> types.Diagnostic:
    return _new_diagnostic(
        match,
        ctx,
        message=codes.FILE_IGNORED_MESSAGE,
        severity=types.DiagnosticSeverity.Error,
    )


def _reported_diagnostic(match: re.Match[str], ctx: _ParseContext) -> types.Diagnostic:
    return _new_diagnostic(
        match,
        ctx,
        message=match.group("message"),
        severity=_resolve_severity(match.groupdict().get("severity")),
    )


# Ordered from most to least specific; the first match claims the line
_PRIMARY_PATTERNS: tuple[tuple[re.Pattern[str], _Handler], ...] = (
    (_FILE_IGNORED_PATTERN, _file_ignored_diagnostic),
    (_PARSE_ABORTED_PATTERN, _reported_diagnostic),
    (_LOCATED_PATTERN, _reported_diagnostic),
)


def _related_information(
    match: re.Match[str], ctx: _ParseContext
) -> types.DiagnosticRelatedInformation:
    path = os.path.abspath(os.path.join(ctx.cwd, match.group("path")))
    line = _zero_based(match, "line")
    column = _zero_based(match, "column")
    location = types.Location(
        uri=from_fs_path(path) or path,
        range=types.Range(
            start=types.Position(line=line, character=column),
            end=types.Position(line=line, character=column + 1),
        ),
    )
    return types.DiagnosticRelatedInformation(
        location=location, message=match.group("message")
    )


def parse_diagnostics(
    output: str,
    *,
    cwd: str,
    document: SourceDocument,
    diagnostic_length: int,
) -> list[types.Diagnostic]:
    """
    Parse tool output into diagnostics.

    Args:
        output: Console output of the analysis command.
        cwd: Directory the tool ran in; relative ``Details:`` paths resolve
            against it.
        document: The linted document, used to clamp ranges to line lengths.
        diagnostic_length: Columns a diagnostic spans from its start column,
            or -1 to span to the end of the line.

    Returns:
        Diagnostics in output order.

    Raises:
        OrphanedRelatedInformationError: A ``Details:`` line has no diagnostic
            before it, so the output does not follow the expected format.
    """
    ctx = _ParseContext(cwd=cwd, document=document, diagnostic_length=diagnostic_length)
    diagnostics = DiagnosticList()

    for output_line in output.splitlines():
        for pattern, handler in _PRIMARY_PATTERNS:
            match = pattern.match(output_line)
            if match is not None:
                diagnostics.append(handler(match, ctx))
                break
        else:
            details = _DETAILS_PATTERN.match(output_line)
            if details is not None:
                diagnostics.attach_to_last(_related_information(details, ctx))

    return diagnostics.to_list()
