"""Run one external ALINT-PRO command and stream its output to a sink."""

from __future__ import annotations

import asyncio
import codecs
import logging
from typing import Protocol

from alintlsp.alint.types import Command
from alintlsp.errors import NonZeroExitError
from alintlsp.logging import get_logger

__all__ = [
    "OutputSink",
    "ProcessRunner",
]

_CHUNK_SIZE = 4096


class OutputSink(Protocol):
    """Receives tool output as it is produced."""

    def append(self, text: str) -> None: ...


class ProcessRunner:
    """Spawns commands one at a time per call and collects their stdout.

    Every stdout and stderr chunk is forwarded to the sink in arrival order
    before ``run`` returns or raises. The runner applies no timeout and no
    retry: one call is one process lifecycle.
    """

    def __init__(self, sink: OutputSink, logger: logging.Logger | None = None) -> None:
        self._sink = sink
        self._logger = logger or get_logger("alint.process")

    async def run(
        self, command: Command, *, stdout_buffer: list[str] | None = None
    ) -> str:
        """
        Run a command to completion.

        Args:
            command: Command to spawn, including its working directory.
            stdout_buffer: Optional caller-owned list that receives every stdout
                chunk. It keeps the partial output when the command fails.

        Returns:
            The complete stdout text when the command exits with status 0.

        Raises:
            NonZeroExitError: The command exited with any other status.
            OSError: The executable could not be started.
        """
        chunks: list[str] = [] if stdout_buffer is None else stdout_buffer
        start = len(chunks)

        self._sink.append(f"$ {command}")
        self._logger.debug("Spawning %s (cwd=%s)", command, command.cwd)

        process = await asyncio.create_subprocess_exec(
            command.executable,
            *command.args,
            cwd=command.cwd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        if process.stdout is None or process.stderr is None:
            raise RuntimeError(
                f"{command.executable} was started without output pipes"
            )

        try:
            await asyncio.gather(
                self._pump(process.stdout, chunks),
                self._pump(process.stderr, None),
            )
            code = await process.wait()
        except asyncio.CancelledError:
            if process.returncode is None:
                self._logger.debug("Killing %s after cancellation", command)
                process.kill()
                await process.wait()
            raise

        self._sink.append(f"Child process exited with code {code}\n")
        self._logger.debug("%s exited with code %s", command.executable, code)

        if code != 0:
            raise NonZeroExitError(code)
        return "".join(chunks[start:])

    async def _pump(
        self, stream: asyncio.StreamReader, collected: list[str] | None
    ) -> None:
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        while True:
            data = await stream.read(_CHUNK_SIZE)
            text = decoder.decode(data, final=not data)
            if text:
                self._sink.append(text)
                if collected is not None:
                    collected.append(text)
            if not data:
                break
