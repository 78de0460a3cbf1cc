"""Tests for LintPipeline."""

from __future__ import annotations

import pytest
from pygls.workspace import TextDocument

from alintlsp.alint.paths import bin_path
from alintlsp.alint.types import LintTarget
from alintlsp.config import LintSettings
from alintlsp.errors import (
    NonZeroExitError,
    OrphanedRelatedInformationError,
    UnsupportedLanguageError,
)
from alintlsp.lint.pipeline import LintPipeline
from tests.helpers.fakes import ScriptedRunner

INSTALL = "/opt/alint"
CWD = "/tmp/scratch"

WARNING_LINE = "ALINT_0001: Warning: top.v : (2, 3): Unused signal\n"
ERROR_LINE = "ALINT_0002: Error: top.v : (3, 1): Undriven output\n"
PARSE_ABORT_LINE = "RUNM-1040: Error: Parsing aborted due to errors\n"

SOURCE = "module top;\n  wire unused;\n  assign b = a;\nendmodule\n"


@pytest.fixture
def settings() -> LintSettings:
    return LintSettings(
        alint_pro_path=INSTALL,
        max_rule_warn=7,
        max_warn=70,
        diagnostic_length=-1,
    )


def make_target(language_id: str | None = "verilog") -> LintTarget:
    document = TextDocument(
        uri="file:///src/top.v", source=SOURCE, language_id=language_id, version=1
    )
    return LintTarget(
        uri=document.uri,
        path="/src/top.v",
        language_id=language_id,
        document=document,
    )


async def run_pipeline(
    runner: ScriptedRunner, settings: LintSettings, target: LintTarget | None = None
):
    pipeline = LintPipeline(runner, settings)
    return await pipeline.run(target or make_target(), INSTALL, CWD)


class TestCommands:
    async def test_library_then_analysis(self, settings: LintSettings) -> None:
        runner = ScriptedRunner()

        await run_pipeline(runner, settings)

        assert runner.binaries == ["vlib", "vlog"]
        library, analysis = runner.commands
        assert library.executable == bin_path(INSTALL, "vlib")
        assert library.args == ("work",)
        assert library.cwd == CWD
        assert analysis.cwd == CWD

    async def test_verilog_analysis_arguments(self, settings: LintSettings) -> None:
        runner = ScriptedRunner()

        await run_pipeline(runner, settings)

        assert runner.commands[1].args == (
            "-sv2k9",
            "-alint",
            "-alint_elabflatmode",
            "-alint_maxrulewarn",
            "7",
            "-alint_maxwarn",
            "70",
            "-work",
            "work",
            "/src/top.v",
        )

    async def test_systemverilog_uses_vlog(self, settings: LintSettings) -> None:
        runner = ScriptedRunner()

        await run_pipeline(runner, settings, make_target("systemverilog"))

        assert runner.binaries == ["vlib", "vlog"]

    async def test_vhdl_uses_vcom(self, settings: LintSettings) -> None:
        runner = ScriptedRunner()

        await run_pipeline(runner, settings, make_target("vhdl"))

        assert runner.binaries == ["vlib", "vcom"]
        assert runner.commands[1].args[0] == "-2002"

    async def test_unsupported_language_spawns_nothing(
        self, settings: LintSettings
    ) -> None:
        runner = ScriptedRunner()

        with pytest.raises(UnsupportedLanguageError) as exc_info:
            await run_pipeline(runner, settings, make_target("plaintext"))

        assert exc_info.value.language_id == "plaintext"
        assert runner.commands == []


class TestResults:
    async def test_parses_analysis_output(self, settings: LintSettings) -> None:
        runner = ScriptedRunner({"vlog": (WARNING_LINE + ERROR_LINE, 0)})

        diagnostics = await run_pipeline(runner, settings)

        assert [d.code for d in diagnostics] == ["ALINT_0001", "ALINT_0002"]
        assert diagnostics[0].range.start.line == 1

    async def test_clean_output_gives_no_diagnostics(
        self, settings: LintSettings
    ) -> None:
        runner = ScriptedRunner({"vlog": ("-- done\n", 0)})

        assert await run_pipeline(runner, settings) == []

    async def test_library_failure_stops_before_analysis(
        self, settings: LintSettings
    ) -> None:
        runner = ScriptedRunner({"vlib": ("", 3)})

        with pytest.raises(NonZeroExitError) as exc_info:
            await run_pipeline(runner, settings)

        assert exc_info.value.code == 3
        assert runner.binaries == ["vlib"]

    async def test_parse_abort_keeps_earlier_diagnostics(
        self, settings: LintSettings
    ) -> None:
        runner = ScriptedRunner(
            {"vlog": (WARNING_LINE + ERROR_LINE + PARSE_ABORT_LINE, 1)}
        )

        diagnostics = await run_pipeline(runner, settings)

        assert [d.code for d in diagnostics] == ["ALINT_0001", "ALINT_0002"]

    async def test_parse_abort_alone_gives_no_diagnostics(
        self, settings: LintSettings
    ) -> None:
        runner = ScriptedRunner({"vlog": (PARSE_ABORT_LINE, 1)})

        assert await run_pipeline(runner, settings) == []

    async def test_exit_code_one_without_parse_abort_raises(
        self, settings: LintSettings
    ) -> None:
        runner = ScriptedRunner({"vlog": (WARNING_LINE, 1)})

        with pytest.raises(NonZeroExitError) as exc_info:
            await run_pipeline(runner, settings)

        assert exc_info.value.code == 1

    async def test_parse_abort_not_last_raises(self, settings: LintSettings) -> None:
        runner = ScriptedRunner({"vlog": (PARSE_ABORT_LINE + WARNING_LINE, 1)})

        with pytest.raises(NonZeroExitError):
            await run_pipeline(runner, settings)

    async def test_other_exit_code_with_parse_abort_raises(
        self, settings: LintSettings
    ) -> None:
        runner = ScriptedRunner({"vlog": (WARNING_LINE + PARSE_ABORT_LINE, 2)})

        with pytest.raises(NonZeroExitError) as exc_info:
            await run_pipeline(runner, settings)

        assert exc_info.value.code == 2

    async def test_orphaned_details_raise(self, settings: LintSettings) -> None:
        runner = ScriptedRunner(
            {"vlog": ("Details: top.v : (1, 1): declared here\n", 0)}
        )

        with pytest.raises(OrphanedRelatedInformationError):
            await run_pipeline(runner, settings)

    async def test_diagnostic_length_setting_applies(
        self, settings: LintSettings
    ) -> None:
        runner = ScriptedRunner({"vlog": (WARNING_LINE, 0)})
        narrow = LintSettings(
            alint_pro_path=INSTALL,
            max_rule_warn=settings.max_rule_warn,
            max_warn=settings.max_warn,
            diagnostic_length=2,
        )

        diagnostics = await run_pipeline(runner, narrow)

        assert diagnostics[0].range.start.character == 2
        assert diagnostics[0].range.end.character == 4
