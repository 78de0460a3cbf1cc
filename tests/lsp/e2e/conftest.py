"""Fixtures for E2E tests."""

from __future__ import annotations

import asyncio
import os
import sys
from collections.abc import AsyncGenerator
from pathlib import Path

import pytest

from tests.helpers.fake_alint import write_fake_install
from tests.lsp.e2e.lsp_client import LspTestClient

REPO_ROOT = Path(__file__).resolve().parents[3]

FAKE_ANALYSIS_OUTPUT = (
    "ALINT-PRO fake analysis\n"
    "ALINT_0001: Warning: top.v : (2, 3): Signal 'unused' is never read\n"
    "Details: top.v : (1, 1): Declared in module 'top'\n"
    "ALINT_0002: Error: top.v : (3, 10): Output 'b' is undriven\n"
    "Errors: 1, Warnings: 1\n"
)


@pytest.fixture
def fake_install(tmp_path: Path) -> Path:
    if sys.platform == "win32":
        pytest.skip("fake ALINT-PRO binaries are POSIX scripts")
    return write_fake_install(tmp_path / "alint", analysis_output=FAKE_ANALYSIS_OUTPUT)


@pytest.fixture
async def lsp_server_process(
    fake_install: Path, tmp_path: Path
) -> AsyncGenerator[asyncio.subprocess.Process, None]:
    """Start the test LSP server as a subprocess."""
    python_path = [str(REPO_ROOT / "src"), str(REPO_ROOT)]
    if os.environ.get("PYTHONPATH"):
        python_path.append(os.environ["PYTHONPATH"])

    process = await asyncio.create_subprocess_exec(
        sys.executable,
        "-m",
        "tests.lsp.e2e.server_entry",
        "--alint-pro-path",
        str(fake_install),
        "--lint-on-open",
        "--log-file",
        str(tmp_path / "server.log"),
        stdin=asyncio.subprocess.PIPE,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        cwd=str(REPO_ROOT),
        env={**os.environ, "PYTHONPATH": os.pathsep.join(python_path)},
    )

    yield process

    # Cleanup
    if process.returncode is None:
        process.terminate()
        try:
            await asyncio.wait_for(process.wait(), timeout=5.0)
        except asyncio.TimeoutError:
            process.kill()


@pytest.fixture
async def lsp_client(
    lsp_server_process: asyncio.subprocess.Process,
) -> AsyncGenerator[LspTestClient, None]:
    """Create an LSP client connected to the test server."""
    assert lsp_server_process.stdin is not None
    assert lsp_server_process.stdout is not None

    reader = lsp_server_process.stdout
    writer = lsp_server_process.stdin

    # Wrap stdin in a StreamWriter-like interface
    class StdinWriter:
        def __init__(self, stdin: asyncio.StreamWriter) -> None:
            self._stdin = stdin

        def write(self, data: bytes) -> None:
            self._stdin.write(data)

        async def drain(self) -> None:
            await self._stdin.drain()

    client = LspTestClient(reader=reader, writer=StdinWriter(writer))  # type: ignore[arg-type]
    yield client
