"""Tests for forecaster.cli.report and the command-line entry point."""

import json

import pytest

from forecaster.analysis.models import PricePoint
from forecaster.cli.report import format_report, print_report
from forecaster.config import Settings
from forecaster.main import _run_cli
from forecaster.pipeline import run_analysis
from forecaster.simulation.engine import DAY_MS
from forecaster.simulation.random_source import SeededRandomSource


def _make_report(forecast_seconds: int = 3 * 86400):
    history = [
        PricePoint(timestamp=i * DAY_MS, price=45000.0 + 500.0 * (i % 6) + 20.0 * i)
        for i in range(40)
    ]
    settings = Settings(forecast_window_seconds=forecast_seconds, strategy_key="trend")
    return run_analysis(history, settings, SeededRandomSource(42))


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for var in (
        "FORECASTER_STRATEGY",
        "FORECASTER_SIMULATION_SEED",
        "FORECASTER_HISTORICAL_WINDOW_SECONDS",
        "FORECASTER_FORECAST_WINDOW_SECONDS",
    ):
        monkeypatch.delenv(var, raising=False)


class TestFormatReport:
    def test_contains_signal_and_forecast(self):
        report = _make_report()
        output = format_report(report, "trend")
        signal_line = next(line for line in output.splitlines() if "Signal:" in line)
        assert signal_line.split() == ["Signal:", report.signal.value, "(trend)"]
        assert "(3 day(s))" in output
        assert "Fib 0.618" in output

    def test_without_forecast(self):
        output = format_report(_make_report(forecast_seconds=0), "trend")
        forecast_line = next(line for line in output.splitlines() if "Forecast:" in line)
        assert forecast_line.split() == ["Forecast:", "none"]

    def test_print_report(self, capsys):
        report = _make_report()
        returned = print_report(report, "trend")
        assert capsys.readouterr().out.strip() == returned.strip()


class TestCli:
    def _write_csv(self, tmp_path, n: int = 40):
        path = tmp_path / "prices.csv"
        rows = ["timestamp,price,volume"]
        for i in range(n):
            rows.append(f"{i * DAY_MS},{45000 + 300 * (i % 5) + 15 * i},{100 + i}")
        path.write_text("\n".join(rows) + "\n")
        return path

    def test_json_output(self, tmp_path, capsys):
        path = self._write_csv(tmp_path)
        code = _run_cli(
            ["--csv", str(path), "--history-seconds", str(60 * 86400), "--forecast-seconds", "172800", "--json"]
        )
        assert code == 0
        data = json.loads(capsys.readouterr().out)
        assert len(data["forecast"]) == 3
        assert data["signal"] in {"BUY", "SELL", "RIDE", "STAY", "HOLD"}

    def test_seeded_runs_match(self, tmp_path, capsys):
        path = self._write_csv(tmp_path)
        argv = ["--csv", str(path), "--history-seconds", str(60 * 86400), "--seed", "5", "--json"]
        _run_cli(argv)
        first = json.loads(capsys.readouterr().out)
        _run_cli(argv)
        second = json.loads(capsys.readouterr().out)
        assert first["forecast"] == second["forecast"]

    def test_synthetic_history(self, capsys):
        code = _run_cli(["--synthetic-days", "30", "--strategy", "vwap"])
        assert code == 0
        assert "(vwap)" in capsys.readouterr().out

    def test_empty_csv_fails(self, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_text("timestamp,price\n")
        assert _run_cli(["--csv", str(path)]) == 1
