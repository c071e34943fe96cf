"""
Tests for the componentizer CLI.

Browser and pipeline are patched out; only argument handling and output
are exercised.
"""

import json
from unittest.mock import AsyncMock, patch

import pytest
from click.testing import CliRunner

from componentizer.cli.main import cli
from componentizer.services.models import (
    GenerationError,
    GenerationMetadata,
    GenerationPhase,
    GenerationResult,
    SectionType,
)
from componentizer.services.recovery import ErrorCode, FailedComponentStore, PipelineError


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def no_logfire():
    with patch("componentizer.cli.main.setup_logfire"):
        yield


def _seed(websites_dir, website_id="site"):
    store = FailedComponentStore(str(websites_dir))
    store.save(PipelineError(code=ErrorCode.SCREENSHOT_FAILED, message="Screenshot timeout",
                             component_type=SectionType.HERO, website_id=website_id))
    store.save(PipelineError(code=ErrorCode.DATABASE_FAILED, message="connection refused",
                             component_type=SectionType.FOOTER, website_id=website_id))
    return store


class TestErrorsCommands:
    def test_summary_empty(self, runner, tmp_path):
        result = runner.invoke(cli, ["errors", "summary", "--website-id", "site", "--websites-dir", str(tmp_path)])

        assert result.exit_code == 0
        assert "No failed components recorded for site" in result.output

    def test_summary(self, runner, tmp_path):
        _seed(tmp_path)

        result = runner.invoke(cli, ["errors", "summary", "--website-id", "site", "--websites-dir", str(tmp_path)])

        assert result.exit_code == 0
        assert "[RECOVERABLE] [MEDIUM] hero: Screenshot timeout" in result.output
        assert "[FATAL] [CRITICAL] footer: connection refused" in result.output
        assert "2 errors for site" in result.output

    def test_clear_one_type(self, runner, tmp_path):
        store = _seed(tmp_path)

        result = runner.invoke(
            cli, ["errors", "clear", "--website-id", "site", "--type", "hero", "--websites-dir", str(tmp_path)]
        )

        assert result.exit_code == 0
        assert "Cleared hero errors" in result.output
        assert [e.component_type for e in store.load("site")] == [SectionType.FOOTER]

    def test_clear_all(self, runner, tmp_path):
        store = _seed(tmp_path)

        result = runner.invoke(cli, ["errors", "clear", "--website-id", "site", "--websites-dir", str(tmp_path)])

        assert "Cleared 2 error files" in result.output
        assert store.load("site") == []

    def test_rejects_unknown_type(self, runner, tmp_path):
        result = runner.invoke(
            cli, ["errors", "clear", "--website-id", "site", "--type", "banner", "--websites-dir", str(tmp_path)]
        )
        assert result.exit_code != 0


class TestGenerateCommand:
    def test_success_and_json_export(self, runner, tmp_path):
        output = GenerationResult(success=True, metadata=GenerationMetadata(detected_count=0))
        export = tmp_path / "result.json"

        with patch("componentizer.cli.generate._execute_generation", AsyncMock(return_value=output)) as execute:
            result = runner.invoke(
                cli,
                ["generate", "https://example.com", "--website-id", "site", "--max-sections", "4",
                 "--output-json", str(export)],
            )

        assert result.exit_code == 0
        assert "Generation complete" in result.output
        assert json.loads(export.read_text())["success"] is True
        assert execute.call_args.kwargs["max_sections"] == 4

    def test_failure_exits_non_zero(self, runner):
        output = GenerationResult(
            success=False,
            errors=[GenerationError(phase=GenerationPhase.DETECTING, message="Component detection failed")],
        )

        with patch("componentizer.cli.generate._execute_generation", AsyncMock(return_value=output)):
            result = runner.invoke(cli, ["generate", "https://example.com", "--website-id", "site"])

        assert result.exit_code == 1
        assert "[detecting] page: Component detection failed" in result.output


class TestPipelineCommand:
    def test_lists_steps_in_order(self, runner):
        result = runner.invoke(cli, ["pipeline"])

        assert result.exit_code == 0
        lines = [line for line in result.output.splitlines() if line[:1].isdigit()]
        assert lines[0] == "1. InitializeNode [initializing]"
        assert lines[1] == "2. DetectNode [detecting]  (ends run on failure)"
        assert lines[-1] == "5. SaveNode [saving]"
