"""Tests for forecaster.pipeline — the full analyse → forecast → signal recompute."""

import json
import math

import pytest

from forecaster.analysis.models import PricePoint
from forecaster.analysis.patterns import detect_advanced_patterns, detect_patterns
from forecaster.config import Settings
from forecaster.pipeline import run_analysis
from forecaster.simulation.engine import DAY_MS
from forecaster.simulation.random_source import SeededRandomSource
from forecaster.strategy.models import TradingSignal


def _make_history(n: int = 60) -> list[PricePoint]:
    return [
        PricePoint(
            timestamp=1_700_000_000_000 + i * DAY_MS,
            price=45000.0 + 2000.0 * math.sin(i / 5) + 10.0 * i,
            volume=100.0 + (i % 7) * 10.0,
        )
        for i in range(n)
    ]


def _settings(forecast_days: int = 5, strategy: str = "trend") -> Settings:
    return Settings(
        historical_window_seconds=60 * 86400,
        forecast_window_seconds=forecast_days * 86400,
        strategy_key=strategy,
    )


class TestRunAnalysis:
    def test_forecast_anchored_at_last_point(self):
        history = _make_history()
        report = run_analysis(history, _settings(5), SeededRandomSource(42))
        assert len(report.forecast) == 6
        assert report.forecast[0].price == history[-1].price
        assert report.forecast[0].timestamp == history[-1].timestamp
        assert report.forecast[-1].timestamp == history[-1].timestamp + 5 * DAY_MS
        assert all(p.price >= 1000.0 for p in report.forecast)

    def test_seeded_runs_are_reproducible(self):
        history = _make_history()
        first = run_analysis(history, _settings(10), SeededRandomSource(42))
        second = run_analysis(history, _settings(10), SeededRandomSource(42))
        assert first.forecast == second.forecast
        assert first.signal == second.signal

    def test_zero_forecast_window(self):
        report = run_analysis(_make_history(), _settings(0), SeededRandomSource(42))
        assert report.forecast == []
        assert report.signal in set(TradingSignal)
        assert report.signal != TradingSignal.HOLD

    def test_unknown_strategy_holds(self):
        report = run_analysis(_make_history(), _settings(5, "nope"), SeededRandomSource(42))
        assert report.signal == TradingSignal.HOLD

    def test_rising_history_trend_buys(self):
        history = [
            PricePoint(timestamp=i * DAY_MS, price=100.0 * 1.01 ** i) for i in range(30)
        ]
        report = run_analysis(history, _settings(0), SeededRandomSource(42))
        assert report.signal == TradingSignal.BUY

    def test_patterns_are_basic_then_advanced(self):
        history = _make_history()
        prices = [p.price for p in history]
        report = run_analysis(history, _settings(1), SeededRandomSource(1))
        assert report.patterns == detect_patterns(prices) + detect_advanced_patterns(prices).patterns

    def test_levels_split_by_type(self):
        report = run_analysis(_make_history(), _settings(1), SeededRandomSource(1))
        assert all(lv.level_type == "support" for lv in report.support_levels)
        assert all(lv.level_type == "resistance" for lv in report.resistance_levels)
        assert report.summary.support_levels == report.support_levels

    def test_flat_series(self):
        history = [PricePoint(timestamp=i * DAY_MS, price=45000.0) for i in range(30)]
        report = run_analysis(history, _settings(5), SeededRandomSource(42))
        assert report.volatility.current == 0.0
        assert all(math.isnan(v) for v in report.indicators.rsi)
        assert len(report.forecast) == 6
        assert all(p.price >= 1000.0 for p in report.forecast)

    def test_single_point(self):
        history = [PricePoint(timestamp=0, price=45000.0)]
        report = run_analysis(history, _settings(3), SeededRandomSource(42))
        assert report.indicators.rsi == [50.0]
        assert report.elliott_waves is None
        assert len(report.forecast) == 4

    def test_zero_last_price(self):
        history = [PricePoint(timestamp=i * DAY_MS, price=100.0 + i) for i in range(29)]
        history.append(PricePoint(timestamp=29 * DAY_MS, price=0.0))
        report = run_analysis(history, _settings(3), SeededRandomSource(42))
        assert len(report.forecast) == 4
        assert report.forecast[0].price == 0.0
        assert all(p.price >= 1000.0 for p in report.forecast[1:])
        json.dumps(report.to_dict(), allow_nan=False)

    def test_empty_raises(self):
        with pytest.raises(ValueError, match="empty"):
            run_analysis([], _settings(), SeededRandomSource(42))


class TestReportDict:
    def test_output_contract(self):
        report = run_analysis(_make_history(), _settings(3), SeededRandomSource(42))
        data = report.to_dict()
        for key in (
            "indicators", "patterns", "levels", "fibonacci", "elliott_waves",
            "forecast", "signal", "summary", "volatility", "volume", "chunks",
        ):
            assert key in data
        assert set(data["levels"]) == {"support", "resistance"}
        assert "support_levels" not in data
        assert data["signal"] == report.signal.value
        assert data["forecast"][0]["is_historical"] is False
        assert set(data["indicators"]) == {"macd", "rsi", "bollinger"}

    def test_json_serialisable(self):
        report = run_analysis(_make_history(), _settings(3), SeededRandomSource(42))
        decoded = json.loads(json.dumps(report.to_dict()))
        assert decoded["signal"] in {s.value for s in TradingSignal}
        assert len(decoded["forecast"]) == 4

    def test_non_finite_values_become_null(self):
        history = [PricePoint(timestamp=i * DAY_MS, price=45000.0) for i in range(30)]
        report = run_analysis(history, _settings(2), SeededRandomSource(42))
        data = report.to_dict()
        assert data["indicators"]["rsi"] == [None] * 16
        assert data["chunks"]["avg_trend"] is None
        decoded = json.loads(json.dumps(data, allow_nan=False))
        assert decoded["indicators"]["rsi"][0] is None
