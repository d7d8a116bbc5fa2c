"""Unit tests for the CLI."""

import json
import logging

import pytest
from click.testing import CliRunner

from perfscope import __version__
from perfscope.cli import cli


@pytest.fixture(autouse=True)
def restore_logger():
    """Undo the logging setup each command performs."""
    yield
    logger = logging.getLogger("perfscope")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True


@pytest.fixture
def runner():
    return CliRunner()


class TestMainCLI:
    """Tests for the command group."""

    def test_help(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "compare" in result.output
        assert "memory" in result.output

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output


class TestCompareCommand:
    """Tests for the compare command."""

    def test_report_output(self, runner):
        result = runner.invoke(cli, ["compare", "-n", "3", "--size", "50", "-q"])

        assert result.exit_code == 0
        assert "# Benchmark Report" in result.output
        assert "## build_list" in result.output
        assert "## sum_values" in result.output
        assert "## Live ranking" in result.output
        assert "Fastest:" in result.output

    def test_json_output(self, runner):
        result = runner.invoke(cli, ["compare", "-n", "2", "--size", "10", "--json", "-q"])

        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert len(payload["benchmarks"]) == 6
        assert all(b["iterations"] == 2 for b in payload["benchmarks"])
        assert len(payload["aggregates"]) == 6
        assert payload["comparison"]["fastest"] is not None

    def test_invalid_iterations(self, runner):
        result = runner.invoke(cli, ["compare", "-n", "0", "-q"])

        assert result.exit_code == 1
        assert "Iterations must be a positive integer" in result.output

    def test_invalid_environment(self, runner, monkeypatch):
        """Test that a bad PERFSCOPE_* value is reported, not a traceback."""
        monkeypatch.setenv("PERFSCOPE_DEFAULT_ITERATIONS", "lots")

        result = runner.invoke(cli, ["compare", "-q"])

        assert result.exit_code == 1
        assert "Invalid perfscope configuration" in result.output
        assert "default_iterations" in result.output
        assert "Traceback" not in result.output

    def test_quiet_and_verbose_conflict(self, runner):
        result = runner.invoke(cli, ["compare", "-q", "-v"])
        assert result.exit_code != 0
        assert "mutually exclusive" in result.output


class TestMemoryCommand:
    """Tests for the memory command."""

    def test_snapshots(self, runner):
        result = runner.invoke(cli, ["memory", "--samples", "2", "-q"])

        assert result.exit_code == 0
        lines = [line for line in result.output.splitlines() if line]
        assert len(lines) == 2

    def test_disabled_probe(self, runner, monkeypatch):
        monkeypatch.setenv("PERFSCOPE_ENABLE_MEMORY_PROBE", "false")

        result = runner.invoke(cli, ["memory", "-q"])

        assert result.exit_code == 0
        assert "unavailable" in result.output
