"""Per-invocation scratch directory for the ALINT working library."""

from __future__ import annotations

import logging
import shutil
import tempfile
from types import TracebackType

from alintlsp.logging import get_logger

SCRATCH_PREFIX = "alint-lsp-"


class ScratchDirectory:
    """Temporary directory owned by one lint invocation.

    The directory is created on ``__enter__`` and removed recursively on
    ``__exit__``, whatever the exit path. A directory that is already gone
    is not an error.
    """

    def __init__(
        self, *, prefix: str = SCRATCH_PREFIX, logger: logging.Logger | None = None
    ) -> None:
        self._prefix = prefix
        self._logger = logger or get_logger("alint.scratch")
        self._path: str | None = None

    @property
    def path(self) -> str:
        if self._path is None:
            raise RuntimeError("scratch directory is not open")
        return self._path

    def __enter__(self) -> str:
        self._path = tempfile.mkdtemp(prefix=self._prefix)
        self._logger.debug("Created scratch directory %s", self._path)
        return self._path

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        path, self._path = self._path, None
        if path is None:
            return
        try:
            shutil.rmtree(path)
        except FileNotFoundError:
            pass
        except OSError:
            self._logger.warning(
                "Could not remove scratch directory %s", path, exc_info=True
            )
        else:
            self._logger.debug("Removed scratch directory %s", path)
