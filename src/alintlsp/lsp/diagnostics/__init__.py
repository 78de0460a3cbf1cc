"""Diagnostics produced from ALINT-PRO output."""

from alintlsp.lsp.diagnostics.collection import DiagnosticList
from alintlsp.lsp.diagnostics.parser import parse_diagnostics
from alintlsp.lsp.diagnostics.scheduler import RequestScheduler

__all__ = [
    "DiagnosticList",
    "RequestScheduler",
    "parse_diagnostics",
]
