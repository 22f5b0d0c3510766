"""Tests for forecaster.strategy — signal rules and the strategy registry."""

import pytest

from forecaster.strategy.models import TradingSignal
from forecaster.strategy.registry import STRATEGY_REGISTRY, evaluate_signal, get_strategy
from forecaster.strategy.strategies import (
    arbitrage,
    high_frequency,
    index_rebalancing,
    mean_reversion,
    trend_following,
    twap,
    vwap,
)


def _make_rising(n: int = 30, start: float = 100.0, rate: float = 0.01) -> list[float]:
    return [start * (1 + rate) ** i for i in range(n)]


FLAT = [100.0] * 30


class TestArbitrage:
    def test_short_above_long_sells(self):
        assert arbitrage([100.0] * 15 + [200.0] * 5) == TradingSignal.SELL

    def test_short_below_long_buys(self):
        assert arbitrage([200.0] * 15 + [100.0] * 5) == TradingSignal.BUY

    def test_flat_stays(self):
        assert arbitrage(FLAT) == TradingSignal.STAY


class TestMeanReversion:
    def test_far_above_mean_sells(self):
        assert mean_reversion([100.0] * 9 + [150.0]) == TradingSignal.SELL

    def test_far_below_mean_buys(self):
        assert mean_reversion([100.0] * 9 + [50.0]) == TradingSignal.BUY

    def test_near_mean_rides(self):
        assert mean_reversion(FLAT) == TradingSignal.RIDE


class TestTrendFollowing:
    def test_rising_one_percent_a_day_buys(self):
        assert trend_following(_make_rising()) == TradingSignal.BUY

    def test_falling_sells(self):
        assert trend_following(_make_rising(rate=-0.01)) == TradingSignal.SELL

    def test_flat_rides(self):
        assert trend_following(FLAT) == TradingSignal.RIDE


class TestHighFrequency:
    def test_rising(self):
        assert high_frequency([100.0 + i for i in range(10)]) == TradingSignal.BUY

    def test_falling(self):
        assert high_frequency([109.0 - i for i in range(10)]) == TradingSignal.SELL

    def test_flat_stays(self):
        assert high_frequency(FLAT) == TradingSignal.STAY


class TestVWAP:
    def test_below_average_buys(self):
        assert vwap([100.0] * 9 + [80.0]) == TradingSignal.BUY

    def test_above_average_sells(self):
        assert vwap([100.0] * 9 + [120.0]) == TradingSignal.SELL

    def test_flat_stays(self):
        assert vwap(FLAT) == TradingSignal.STAY


class TestIndexRebalancing:
    def test_on_target_stays(self):
        assert index_rebalancing([45000.0]) == TradingSignal.STAY

    def test_small_deviation_stays(self):
        assert index_rebalancing([46000.0]) == TradingSignal.STAY

    def test_large_deviation_rides(self):
        assert index_rebalancing([60000.0]) == TradingSignal.RIDE
        assert index_rebalancing([30000.0]) == TradingSignal.RIDE


class TestTWAP:
    def test_rising(self):
        assert twap([float(i) for i in range(1, 21)]) == TradingSignal.BUY

    def test_falling(self):
        assert twap([float(i) for i in range(20, 0, -1)]) == TradingSignal.SELL

    def test_flat_stays(self):
        assert twap(FLAT) == TradingSignal.STAY

    def test_short_series_divides_by_nominal_period(self):
        # averages 10, 5, 2.5: missing values count as zero
        assert twap([10.0] * 5) == TradingSignal.BUY


class TestRegistry:
    def test_registered_keys(self):
        assert set(STRATEGY_REGISTRY) == {
            "arbitrage", "meanReversion", "trend", "hft", "vwap", "indexRebalancing", "twap",
        }

    def test_get_strategy(self):
        spec = get_strategy("trend")
        assert spec.name == "Trend Following"
        assert spec.calculate is trend_following

    def test_get_unknown(self):
        assert get_strategy("nope") is None

    def test_unknown_key_holds(self):
        assert evaluate_signal("nope", _make_rising()) == TradingSignal.HOLD

    def test_empty_prices_hold(self):
        assert evaluate_signal("trend", []) == TradingSignal.HOLD

    def test_trend_scenario(self):
        assert evaluate_signal("trend", _make_rising()) == TradingSignal.BUY

    @pytest.mark.parametrize("key", sorted(STRATEGY_REGISTRY))
    def test_outputs_are_valid_signals(self, key):
        series = [
            FLAT,
            _make_rising(),
            _make_rising(rate=-0.02),
            [45000.0],
            [100.0, 250.0, 80.0, 300.0, 90.0],
        ]
        for prices in series:
            assert evaluate_signal(key, prices) in set(TradingSignal)
            assert evaluate_signal(key, prices) != TradingSignal.HOLD
