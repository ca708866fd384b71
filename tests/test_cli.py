"""Tests for the command line interface."""

from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from screentest.cli import cli
from screentest.errors import CheckFailure
from screentest.models.config import RunnerConfig
from screentest.models.test_result import CaseResult, RunResult, ScriptResult

SCRIPT = """\
windowsize 800x600
compare https://go.dev http://localhost:6060
test homepage
pathname /
capture viewport
capture element header
"""


@pytest.fixture
def runner(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return CliRunner()


def _run_result(result: str = "pass") -> RunResult:
    case = CaseResult(test_name="homepage", url_a="https://go.dev/", url_b="http://localhost:6060/",
                      result=result, failure_reason=None if result == "pass" else "x != y")
    return RunResult(
        pattern="*.txt", started_at="2026-01-01T00:00:00Z", total_tests=1,
        passed=int(result == "pass"), failed=int(result == "fail"),
        script_results=[ScriptResult(script="pages.txt", output_dir="/cache/pages-txt", case_results=[case])],
    )


class TestList:

    def test_lists_cases(self, runner, tmp_path):
        (tmp_path / "pages.txt").write_text(SCRIPT, encoding="utf-8")

        result = runner.invoke(cli, ["list", "*.txt"])

        assert result.exit_code == 0, result.output
        assert "homepage" in result.output
        assert "header" in result.output

    def test_compile_error(self, runner, tmp_path):
        (tmp_path / "pages.txt").write_text("nonsense\n", encoding="utf-8")

        result = runner.invoke(cli, ["list", "*.txt"])

        assert result.exit_code == 1
        assert "invalid syntax" in result.output

    def test_no_matches(self, runner):
        result = runner.invoke(cli, ["list", "*.txt"])

        assert result.exit_code == 1
        assert "no files match" in result.output


class TestCheck:

    def test_success(self, runner):
        with patch("screentest.cli.Coordinator.check", return_value=_run_result()):
            result = runner.invoke(cli, ["check", "*.txt"])

        assert result.exit_code == 0, result.output
        assert "All 1 tests passed" in result.output

    def test_failure_writes_json_report(self, runner, tmp_path):
        run = _run_result("fail")
        failure = CheckFailure("pages.txt\ninspect diffs at /cache/pages-txt\nhomepage: x != y", run)
        with patch("screentest.cli.Coordinator.check", side_effect=failure):
            result = runner.invoke(cli, ["check", "*.txt", "--json-report", "report.json"])

        assert result.exit_code == 1
        assert "inspect diffs at" in result.output
        assert (tmp_path / "report.json").exists()

    def test_missing_explicit_config(self, runner):
        result = runner.invoke(cli, ["check", "*.txt", "--config", "nope.json"])

        assert result.exit_code == 1
        assert "Config file not found" in result.output


class TestTestCommand:

    def test_failing_case_exits_nonzero(self, runner):
        with patch("screentest.cli.Coordinator.run_each", return_value=_run_result("fail")):
            result = runner.invoke(cli, ["test", "*.txt"])

        assert result.exit_code == 1


class TestInit:

    def test_creates_config(self, runner, tmp_path):
        result = runner.invoke(cli, ["init"])

        assert result.exit_code == 0
        assert RunnerConfig.load(tmp_path / "screentest.json").browser_width == 1536
