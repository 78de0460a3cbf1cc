"""LSP front end for ALINT-PRO diagnostics."""
