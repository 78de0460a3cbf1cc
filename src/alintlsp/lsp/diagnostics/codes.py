"""ALINT-PRO diagnostic codes and severity labels."""

from lsprotocol import types

SOURCE = "alint-pro"

# Emitted when a VHDL file is skipped because it failed to compile
FILE_IGNORED = "VHDL-1482"
FILE_IGNORED_MESSAGE = "VHDL file is ignored due to errors"

# Emitted when the analysis aborts parsing; the tool then exits with status 1
PARSE_ABORTED = "RUNM-1040"

SEVERITY_LABELS: dict[str, types.DiagnosticSeverity] = {
    "Error": types.DiagnosticSeverity.Error,
    "Info": types.DiagnosticSeverity.Information,
}

DEFAULT_SEVERITY: types.DiagnosticSeverity = types.DiagnosticSeverity.Warning
