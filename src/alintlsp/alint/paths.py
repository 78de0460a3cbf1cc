"""Location of the ALINT-PRO binaries inside an installation directory."""

from __future__ import annotations

import ntpath
import os
import posixpath
import sys
from types import ModuleType

__all__ = [
    "REQUIRED_BINARIES",
    "bin_dir",
    "bin_name",
    "bin_names",
    "bin_path",
    "missing_binaries_hint",
    "required_binaries_exist",
]

REQUIRED_BINARIES: tuple[str, ...] = ("vcom", "vlib", "vlog")


def _is_windows() -> bool:
    return sys.platform == "win32"


def _path_module() -> ModuleType:
    return ntpath if _is_windows() else posixpath


def bin_dir() -> str:
    """Return the binaries subdirectory relative to the installation root."""
    return "bin" if _is_windows() else _path_module().join("bin", "Linux64")


def bin_name(name: str) -> str:
    """Return the platform file name of a binary, e.g. ``vlog.exe`` on Windows."""
    return f"{name}.exe" if _is_windows() else name


def bin_names(first: str, *rest: str) -> str:
    """
    Format binary names as a human-readable list.

    Examples:
        >>> bin_names("vcom", "vlib", "vlog")  # on Linux
        'vcom, vlib and vlog'
    """
    head = ", ".join(bin_name(name) for name in (first, *rest[:-1]))
    if not rest:
        return head
    return f"{head} and {bin_name(rest[-1])}"


def bin_path(install_path: str, name: str) -> str:
    """
    Build the full path of a binary inside an installation.

    Args:
        install_path: ALINT-PRO installation root.
        name: Binary name without suffix (``vlib``, ``vlog`` or ``vcom``).

    Returns:
        Path of the executable for the current platform.
    """
    return _path_module().join(install_path, bin_dir(), bin_name(name))


def required_binaries_exist(install_path: str) -> bool:
    """Check that every binary in REQUIRED_BINARIES exists under install_path."""
    if not install_path.strip():
        return False
    return all(
        os.path.exists(bin_path(install_path, name)) for name in REQUIRED_BINARIES
    )


def missing_binaries_hint() -> str:
    return (
        f"Ensure that the {bin_dir()} subdirectory contains"
        f" {bin_names(*REQUIRED_BINARIES)} files."
    )
