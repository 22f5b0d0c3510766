"""Technical indicators — SMA, EMA, MACD, RSI, Bollinger Bands. Pure functions, no I/O."""

from typing import Sequence

from forecaster.analysis.mathutils import ieee_div, population_std
from forecaster.analysis.models import (
    BollingerBand,
    IndicatorSet,
    MACDResult,
    PricePoint,
)


def calculate_sma(series: Sequence[float], period: int) -> list[float]:
    """Calculate a Simple Moving Average series.

    Returns ``len(series) - period + 1`` values; the first one is the mean
    of ``series[0:period]`` and aligns with input index ``period - 1``.

    Raises ``ValueError`` if *period* is not in ``1..len(series)``.
    """
    if period < 1:
        raise ValueError(f"SMA period must be positive, got {period}")
    if period > len(series):
        raise ValueError(
            f"Need at least {period} values for SMA({period}), "
            f"got {len(series)}"
        )

    sma: list[float] = []
    for i in range(period - 1, len(series)):
        window = series[i - period + 1 : i + 1]
        sma.append(sum(window) / period)
    return sma


def calculate_ema(series: Sequence[float], period: int) -> list[float]:
    """Calculate an Exponential Moving Average series.

    Uses the standard EMA formula:
        ``EMA_today = value × k + EMA_yesterday × (1 - k)``
    where ``k = 2 / (period + 1)``.

    The series is seeded with its first value, so the output has the same
    length as *series* (empty in, empty out).
    """
    if not series:
        return []

    k = 2.0 / (period + 1)
    ema: list[float] = [series[0]]
    for i in range(1, len(series)):
        ema.append(series[i] * k + ema[i - 1] * (1 - k))
    return ema


def calculate_macd(points: Sequence[PricePoint]) -> MACDResult:
    """Calculate MACD (EMA12 − EMA26), its EMA9 signal line and histogram.

    All three lists are as long as *points*; empty input gives empty lists.
    """
    if not points:
        return MACDResult(macd=[], signal=[], histogram=[])

    prices = [p.price for p in points]
    ema12 = calculate_ema(prices, 12)
    ema26 = calculate_ema(prices, 26)
    macd = [fast - slow for fast, slow in zip(ema12, ema26)]
    signal = calculate_ema(macd, 9)
    histogram = [m - s for m, s in zip(macd, signal)]

    return MACDResult(macd=macd, signal=signal, histogram=histogram)


# ── RSI ──────────────────────────────────────────────────────────────────


def _rsi_from_avgs(avg_gain: float, avg_loss: float) -> float:
    # No guard on avg_loss == 0: all-gain windows give 100.0, flat ones nan.
    rs = ieee_div(avg_gain, avg_loss)
    return 100.0 - ieee_div(100.0, 1.0 + rs)


def calculate_rsi(series: Sequence[float], period: int = 14) -> list[float]:
    """Calculate Wilder's Relative Strength Index.

    Algorithm (Wilder-smoothed):
        1. delta = value[i] - value[i-1]
        2. Separate gains (positive) and losses (|negative|).
        3. Seed average gain/loss = sum of first *period* deltas / *period*.
        4. Subsequent: avg = (prev_avg × (period-1) + current) / period
        5. RS = avg_gain / avg_loss
        6. RSI = 100 - 100 / (1 + RS)

    The first value corresponds to input index *period*. A series shorter
    than ``period + 1`` still yields one value from its partial seed.
    Fewer than two values return the neutral ``[50.0]``.

    A zero average loss is not special-cased: RS becomes ``inf`` (RSI 100)
    or ``nan`` when the average gain is zero as well.
    """
    if len(series) < 2:
        return [50.0]

    deltas = [series[i] - series[i - 1] for i in range(1, len(series))]
    gains = [d if d > 0 else 0.0 for d in deltas]
    losses = [abs(d) if d < 0 else 0.0 for d in deltas]

    avg_gain = sum(gains[:period]) / period
    avg_loss = sum(losses[:period]) / period

    rsi = [_rsi_from_avgs(avg_gain, avg_loss)]
    for i in range(period, len(deltas)):
        avg_gain = (avg_gain * (period - 1) + gains[i]) / period
        avg_loss = (avg_loss * (period - 1) + losses[i]) / period
        rsi.append(_rsi_from_avgs(avg_gain, avg_loss))

    return rsi


# ── Bollinger Bands ──────────────────────────────────────────────────────


def calculate_bollinger(
    points: Sequence[PricePoint],
    period: int = 20,
    multiplier: float = 2.0,
) -> list[BollingerBand]:
    """Calculate Bollinger Bands.

    Middle = SMA(price, *period*)
    Upper  = middle + *multiplier* × σ
    Lower  = middle − *multiplier* × σ

    σ is the population standard deviation of the trailing window.

    Returns one band per SMA value.  Empty input returns a single zero
    band; a series shorter than *period* returns no bands.
    """
    if not points:
        return [BollingerBand(upper=0.0, middle=0.0, lower=0.0)]
    if len(points) < period:
        return []

    prices = [p.price for p in points]
    bands: list[BollingerBand] = []
    for i, middle in enumerate(calculate_sma(prices, period)):
        window = prices[i : i + period]
        sigma = population_std(window)
        bands.append(
            BollingerBand(
                upper=middle + multiplier * sigma,
                middle=middle,
                lower=middle - multiplier * sigma,
            )
        )
    return bands


def calculate_indicators(points: Sequence[PricePoint]) -> IndicatorSet:
    """Compute MACD, RSI and Bollinger Bands for one series."""
    return IndicatorSet(
        macd=calculate_macd(points),
        rsi=calculate_rsi([p.price for p in points]),
        bollinger=calculate_bollinger(points),
    )
