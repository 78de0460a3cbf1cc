"""Tests for LintRetryLoop."""

from __future__ import annotations

import os
from pathlib import Path

import pytest
from pygls.workspace import TextDocument

from alintlsp.alint.types import LintTarget
from alintlsp.config import LintSettings
from alintlsp.errors import ConfigKeyMissingError
from alintlsp.lint.retry import LintRetryLoop
from tests.helpers.fakes import (
    RecordingPublisher,
    ScriptedPrompter,
    ScriptedRunner,
    touch_install,
)

URI = "file:///src/top.v"
WARNING_LINE = "ALINT_0001: Warning: top.v : (1, 1): Unused signal\n"


def make_target(language_id: str | None = "verilog") -> LintTarget:
    document = TextDocument(
        uri=URI, source="module top;\nendmodule\n", language_id=language_id
    )
    return LintTarget(
        uri=URI, path="/src/top.v", language_id=language_id, document=document
    )


def settings_for(install_path: str):
    async def provider(uri: str) -> LintSettings:
        return LintSettings(
            alint_pro_path=install_path,
            max_rule_warn=100,
            max_warn=1000,
            diagnostic_length=-1,
        )

    return provider


@pytest.fixture
def install(tmp_path: Path) -> str:
    return touch_install(tmp_path / "alint")


def make_loop(
    runner: ScriptedRunner,
    prompter: ScriptedPrompter,
    publisher: RecordingPublisher,
    install_path: str,
) -> LintRetryLoop:
    return LintRetryLoop(
        runner=runner,
        settings_provider=settings_for(install_path),
        prompter=prompter,
        publisher=publisher,
    )


class TestSuccess:
    async def test_clears_then_publishes(self, install: str) -> None:
        runner = ScriptedRunner({"vlog": (WARNING_LINE, 0)})
        publisher = RecordingPublisher()
        prompter = ScriptedPrompter()

        await make_loop(runner, prompter, publisher, install).execute(make_target())

        assert [uri for uri, _ in publisher.calls] == [URI, URI]
        assert publisher.calls[0][1] == []
        assert [d.code for d in publisher.calls[1][1]] == ["ALINT_0001"]
        assert prompter.errors == []

    async def test_commands_run_in_scratch_directory_that_is_removed(
        self, install: str
    ) -> None:
        runner = ScriptedRunner()

        await make_loop(
            runner, ScriptedPrompter(), RecordingPublisher(), install
        ).execute(make_target())

        cwd = runner.commands[0].cwd
        assert all(command.cwd == cwd for command in runner.commands)
        assert runner.cwd_existed == [True, True]
        assert not os.path.exists(cwd)

    async def test_each_run_gets_fresh_scratch_directory(self, install: str) -> None:
        runner = ScriptedRunner()
        loop = make_loop(runner, ScriptedPrompter(), RecordingPublisher(), install)

        await loop.execute(make_target())
        await loop.execute(make_target())

        assert runner.commands[0].cwd != runner.commands[2].cwd


class TestLanguageCorrection:
    async def test_retries_with_corrected_language(self, install: str) -> None:
        runner = ScriptedRunner({"vcom": (WARNING_LINE, 0)})
        publisher = RecordingPublisher()
        prompter = ScriptedPrompter(languages=["vhdl"])

        await make_loop(runner, prompter, publisher, install).execute(
            make_target("plaintext")
        )

        assert prompter.language_requests == [
            ("plaintext", "Unsupported language ID: plaintext")
        ]
        assert runner.binaries == ["vlib", "vcom"]
        assert len(publisher.calls[-1][1]) == 1

    async def test_asks_again_while_language_is_unsupported(
        self, install: str
    ) -> None:
        runner = ScriptedRunner()
        prompter = ScriptedPrompter(languages=["markdown", "verilog"])

        await make_loop(runner, prompter, RecordingPublisher(), install).execute(
            make_target("plaintext")
        )

        assert [language for language, _ in prompter.language_requests] == [
            "plaintext",
            "markdown",
        ]
        assert runner.binaries == ["vlib", "vlog"]

    async def test_cancelled_correction_stops(self, install: str) -> None:
        runner = ScriptedRunner()
        publisher = RecordingPublisher()
        prompter = ScriptedPrompter(languages=[None])

        await make_loop(runner, prompter, publisher, install).execute(
            make_target("plaintext")
        )

        assert runner.commands == []
        assert publisher.calls == [(URI, [])]
        assert prompter.errors == []


class TestInstallPath:
    async def test_missing_install_path_prompts(self) -> None:
        runner = ScriptedRunner()
        prompter = ScriptedPrompter(install_paths=[None])
        publisher = RecordingPublisher()

        await make_loop(runner, prompter, publisher, "").execute(make_target())

        assert prompter.install_path_requests == [(URI, "")]
        assert runner.commands == []
        assert publisher.calls == []

    async def test_corrected_install_path_is_used(
        self, tmp_path: Path, install: str
    ) -> None:
        runner = ScriptedRunner()
        prompter = ScriptedPrompter(install_paths=[install])
        broken = str(tmp_path / "nowhere")

        await make_loop(runner, prompter, RecordingPublisher(), broken).execute(
            make_target()
        )

        assert prompter.install_path_requests == [(URI, broken)]
        assert runner.commands[0].executable.startswith(install)


class TestFailures:
    async def test_tool_failure_is_not_shown(self, install: str) -> None:
        runner = ScriptedRunner({"vlib": ("", 2)})
        prompter = ScriptedPrompter()
        publisher = RecordingPublisher()

        await make_loop(runner, prompter, publisher, install).execute(make_target())

        assert prompter.errors == []
        assert publisher.calls == [(URI, [])]

    async def test_malformed_output_is_shown(self, install: str) -> None:
        runner = ScriptedRunner({"vlog": ("Details: top.v : (1, 1): here\n", 0)})
        prompter = ScriptedPrompter()

        await make_loop(runner, prompter, RecordingPublisher(), install).execute(
            make_target()
        )

        assert prompter.errors == [
            "Found diagnostic details without the diagnostic itself"
        ]

    async def test_settings_error_is_shown(self) -> None:
        async def provider(uri: str) -> LintSettings:
            raise ConfigKeyMissingError("maxWarn")

        prompter = ScriptedPrompter()
        loop = LintRetryLoop(
            runner=ScriptedRunner(),
            settings_provider=provider,
            prompter=prompter,
            publisher=RecordingPublisher(),
        )

        await loop.execute(make_target())

        assert prompter.errors == ["Config key maxWarn doesn't exist"]

    async def test_unexpected_error_propagates(self, install: str) -> None:
        runner = ScriptedRunner({"vlog": RuntimeError("boom")})

        with pytest.raises(RuntimeError, match="boom"):
            await make_loop(
                runner, ScriptedPrompter(), RecordingPublisher(), install
            ).execute(make_target())

    async def test_scratch_directory_removed_after_failure(
        self, install: str
    ) -> None:
        runner = ScriptedRunner({"vlog": ("", 5)})

        await make_loop(
            runner, ScriptedPrompter(), RecordingPublisher(), install
        ).execute(make_target())

        assert not os.path.exists(runner.commands[0].cwd)
