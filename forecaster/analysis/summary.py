"""Historical pattern summary — condenses indicators and levels into a bias profile."""

from typing import Sequence

from forecaster.analysis.levels import split_levels
from forecaster.analysis.models import (
    HistoricalPatternSummary,
    IndicatorSet,
    Level,
    VolatilityAnalysis,
)

DEFAULT_CYCLE_LENGTH_DAYS = 365

BULLISH_SCALE = 0.05
BEARISH_SCALE = -0.02

_LOOKBACK = 5


def _fraction(values: Sequence[float], predicate) -> float:
    # Always divided by the full lookback, even when fewer values exist.
    return sum(1 for v in values[-_LOOKBACK:] if predicate(v)) / _LOOKBACK


def calculate_bullish_trend(indicators: IndicatorSet, current_price: float) -> float:
    """Bullish strength in ``[0, 0.05]``.

    Averages three votes: share of the last 5 MACD histogram values above
    zero, share of the last 5 RSI values above 50, and whether the price is
    above the latest Bollinger middle band.
    """
    macd_strength = _fraction(indicators.macd.histogram, lambda h: h > 0)
    rsi_strength = _fraction(indicators.rsi, lambda r: r > 50)
    bands = indicators.bollinger
    above_middle = 1 if bands and current_price > bands[-1].middle else 0
    return (macd_strength + rsi_strength + above_middle) / 3 * BULLISH_SCALE


def calculate_bearish_trend(indicators: IndicatorSet, current_price: float) -> float:
    """Bearish strength in ``[-0.02, 0]`` (mirror votes, smaller scale)."""
    macd_strength = _fraction(indicators.macd.histogram, lambda h: h < 0)
    rsi_strength = _fraction(indicators.rsi, lambda r: r < 50)
    bands = indicators.bollinger
    below_middle = 1 if bands and current_price < bands[-1].middle else 0
    return (macd_strength + rsi_strength + below_middle) / 3 * BEARISH_SCALE


def summarize(
    current_price: float,
    indicators: IndicatorSet,
    volatility: VolatilityAnalysis,
    levels: Sequence[Level],
    cycle_length: int = DEFAULT_CYCLE_LENGTH_DAYS,
) -> HistoricalPatternSummary:
    """Build the bias profile from a completed analysis.

    *cycle_length* is a configured value, not derived from the data.
    """
    support, resistance = split_levels(levels)
    return HistoricalPatternSummary(
        daily_volatility=volatility.current,
        bullish_trend=calculate_bullish_trend(indicators, current_price),
        bearish_trend=calculate_bearish_trend(indicators, current_price),
        cycle_length=cycle_length,
        support_levels=support,
        resistance_levels=resistance,
    )


def default_summary(cycle_length: int = DEFAULT_CYCLE_LENGTH_DAYS) -> HistoricalPatternSummary:
    """Profile used before any history has been analysed."""
    return HistoricalPatternSummary(
        daily_volatility=0.03,
        bullish_trend=0.015,
        bearish_trend=-0.01,
        cycle_length=cycle_length,
        support_levels=[],
        resistance_levels=[],
    )
