"""Trading strategies — pure functions from a price list to a signal.

Each strategy reads trailing windows of the combined historical and
forecast prices (oldest first) and returns BUY, SELL, RIDE or STAY.
Callers guarantee a non-empty series.
"""

from typing import Sequence

from forecaster.analysis.mathutils import ieee_div, mean, pct_change, population_std
from forecaster.strategy.models import TradingSignal

INDEX_TARGET_PRICE = 45000.0


def arbitrage(prices: Sequence[float]) -> TradingSignal:
    """Short (5) vs long (20) average; a gap over 5% fades the short side."""
    short_avg = mean(prices[-5:])
    long_avg = mean(prices[-20:])
    diff = ieee_div(short_avg - long_avg, long_avg)

    if abs(diff) > 0.05:
        return TradingSignal.SELL if diff > 0 else TradingSignal.BUY
    return TradingSignal.STAY


def mean_reversion(prices: Sequence[float]) -> TradingSignal:
    """Fade a last price more than 10% away from the full-series mean."""
    deviation = pct_change(mean(prices), prices[-1])

    if deviation > 0.1:
        return TradingSignal.SELL
    if deviation < -0.1:
        return TradingSignal.BUY
    return TradingSignal.RIDE


def trend_following(prices: Sequence[float]) -> TradingSignal:
    """Follow a 20-point move larger than 10%."""
    window = prices[-20:]
    change = pct_change(window[0], window[-1])

    if change > 0.1:
        return TradingSignal.BUY
    if change < -0.1:
        return TradingSignal.SELL
    return TradingSignal.RIDE


def high_frequency(prices: Sequence[float]) -> TradingSignal:
    """Trade 10-point momentum when the price std-dev exceeds 0.02.

    The threshold applies to the raw price standard deviation, not to
    returns.
    """
    window = prices[-10:]
    volatility = population_std(window)
    momentum = pct_change(window[0], window[-1])

    if volatility > 0.02 and momentum > 0:
        return TradingSignal.BUY
    if volatility > 0.02 and momentum < 0:
        return TradingSignal.SELL
    return TradingSignal.STAY


def vwap(prices: Sequence[float]) -> TradingSignal:
    """Compare the last price with the plain average price.

    Volume is not weighted in; the name is kept for the registry key.
    """
    average = mean(prices)
    last = prices[-1]

    if last < average * 0.95:
        return TradingSignal.BUY
    if last > average * 1.05:
        return TradingSignal.SELL
    return TradingSignal.STAY


def index_rebalancing(prices: Sequence[float]) -> TradingSignal:
    """RIDE while more than 10% away from the fixed index target."""
    deviation = abs(pct_change(INDEX_TARGET_PRICE, prices[-1]))
    if deviation > 0.1:
        return TradingSignal.RIDE
    return TradingSignal.STAY


def twap(prices: Sequence[float]) -> TradingSignal:
    """Order the 5/10/20-period averages.

    Each average divides by its nominal period even when the series is
    shorter.
    """
    averages = [sum(prices[-period:]) / period for period in (5, 10, 20)]
    short, medium, long = averages

    if short > medium > long:
        return TradingSignal.BUY
    if short < medium < long:
        return TradingSignal.SELL
    return TradingSignal.STAY
