"""Tests for the command-line interface."""

import json
import logging

import pytest
import structlog
from click.testing import CliRunner

from tradebuddy.cli import main

from ..conftest import raw_trade


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    root = logging.getLogger("tradebuddy")
    root.handlers.clear()
    root.setLevel(logging.NOTSET)
    structlog.reset_defaults()


@pytest.fixture
def trades_file(tmp_path, raw_trades):
    path = tmp_path / "trades.json"
    path.write_text(json.dumps(raw_trades))
    return path


class TestReportCommand:
    def test_summary_output(self, runner, trades_file):
        result = runner.invoke(main, ["report", str(trades_file), "--as-of", "2024-06-01T00:00:00Z"])
        assert result.exit_code == 0, result.output
        assert "Win rate:" in result.stdout
        assert "Breakout" in result.stdout

    def test_json_output(self, runner, trades_file):
        result = runner.invoke(main, [
            "report", str(trades_file), "--format", "json",
            "--as-of", "2024-06-01T00:00:00Z", "--initial-balance", "5000",
        ])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["balance_curve"]["initial_balance"] == 5000.0
        assert data["summary"]["total_trades"] == 6

    def test_window_option(self, runner, trades_file):
        result = runner.invoke(main, [
            "report", str(trades_file), "--format", "json", "--window", "3",
        ])
        assert result.exit_code == 0, result.output
        assert len(json.loads(result.stdout)["rolling"]["series"]) == 4

    def test_config_file(self, runner, trades_file, tmp_path):
        config = tmp_path / "tradebuddy.toml"
        config.write_text("[analytics]\ninitial_balance = 2500\nmonte_carlo_simulations = 0\n")
        result = runner.invoke(main, [
            "report", str(trades_file), "--format", "json", "--config", str(config),
        ])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["balance_curve"]["initial_balance"] == 2500.0
        assert data["monte_carlo"] is None

    def test_balance_csv(self, runner, trades_file, tmp_path):
        out = tmp_path / "curve.csv"
        result = runner.invoke(main, ["report", str(trades_file), "--balance-csv", str(out)])
        assert result.exit_code == 0, result.output
        assert out.read_text().startswith("index,timestamp,trade_id")

    def test_invalid_json(self, runner, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        result = runner.invoke(main, ["report", str(path)])
        assert result.exit_code != 0
        assert "not valid JSON" in result.output

    def test_non_utf8_file(self, runner, tmp_path):
        path = tmp_path / "latin1.json"
        path.write_bytes(b"\xff\xfe[")
        result = runner.invoke(main, ["report", str(path)])
        assert result.exit_code == 1
        assert "not valid JSON" in result.output

    def test_non_list_json(self, runner, tmp_path):
        path = tmp_path / "obj.json"
        path.write_text(json.dumps({"trades": [raw_trade(0, 10.0)]}))
        result = runner.invoke(main, ["report", str(path)])
        assert result.exit_code != 0
        assert "must be a list" in result.output

    def test_invalid_window(self, runner, trades_file):
        result = runner.invoke(main, ["report", str(trades_file), "--window", "0"])
        assert result.exit_code != 0


class TestReportLogging:
    def test_json_logs_on_stderr_carry_run_context(self, runner, trades_file):
        result = runner.invoke(
            main,
            ["report", str(trades_file), "--format", "json", "--window", "3"],
            env={"TRADEBUDDY_OBSERVABILITY__LOG_FORMAT": "json"},
        )
        assert result.exit_code == 0, result.output
        json.loads(result.stdout)

        entries = [json.loads(line) for line in result.stderr.splitlines() if line.strip()]
        built = next(e for e in entries if e["event"] == "report_built")
        assert built["trades_file"] == str(trades_file)
        assert built["window"] == 3
        assert built["closed_trades"] == 6
        assert built["run_id"]

        assembled = next(e for e in entries if e["event"].startswith("Report assembled"))
        assert assembled["run_id"] == built["run_id"]
        assert assembled["logger"] == "tradebuddy.journal.report"
