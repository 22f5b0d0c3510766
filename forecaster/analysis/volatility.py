"""Volatility, volume and chunk statistics — pure functions, no I/O.

Annualisation uses 252 trading days regardless of the real sampling
interval of the series.
"""

import logging
import math
from typing import Optional, Sequence

from forecaster.analysis.indicators import calculate_sma
from forecaster.analysis.mathutils import ieee_div, mean, pct_change, pearson_correlation
from forecaster.analysis.models import (
    ChunkProfile,
    PricePoint,
    VolatilityAnalysis,
    VolatilityTrend,
    VolumeAnalysis,
    VolumeSpike,
)

logger = logging.getLogger("forecaster.analysis")

TRADING_DAYS_PER_YEAR = 252

_STABLE = VolatilityTrend(direction="stable", magnitude=0.0)


def calculate_returns(prices: Sequence[float]) -> list[float]:
    """Per-step fractional returns ``(p[i] - p[i-1]) / p[i-1]``."""
    return [ieee_div(prices[i] - prices[i - 1], prices[i - 1]) for i in range(1, len(prices))]


def annualized_volatility(returns: Sequence[float]) -> float:
    """Root-mean-square of *returns*, scaled by ``sqrt(252)``."""
    rms = math.sqrt(sum(r * r for r in returns) / len(returns))
    return rms * math.sqrt(TRADING_DAYS_PER_YEAR)


def rms_volatility(prices: Sequence[float]) -> float:
    """Un-annualised RMS of step returns; 0.0 below two prices."""
    if len(prices) < 2:
        return 0.0
    returns = calculate_returns(prices)
    return math.sqrt(sum(r * r for r in returns) / len(returns))


def volatility_trend(volatilities: Sequence[float]) -> VolatilityTrend:
    """Compare the mean of the last 5 values with the 5 before them.

    With fewer than 6 values the older window is empty and the direction
    is reported as ``decreasing`` with zero magnitude.
    """
    if not volatilities:
        return _STABLE

    recent = mean(volatilities[-5:])
    older_window = volatilities[-10:-5] if len(volatilities) > 5 else []
    older = mean(older_window)

    direction = "increasing" if recent > older else "decreasing"
    if not older_window or older == 0:
        magnitude = 0.0
    else:
        magnitude = abs(recent - older) / older

    return VolatilityTrend(direction=direction, magnitude=magnitude)


def analyze_volatility(points: Sequence[PricePoint], window: int = 20) -> VolatilityAnalysis:
    """Annualised volatility of the full series plus a rolling history.

    Rolling values cover ``returns[i - window:i]`` for
    ``i in range(window, len(returns))``.
    """
    if not points:
        return VolatilityAnalysis(current=0.0, historical=[], trend=_STABLE)

    prices = [p.price for p in points]
    returns = calculate_returns(prices)
    if not returns:
        return VolatilityAnalysis(current=0.0, historical=[], trend=_STABLE)

    current = annualized_volatility(returns)

    historical: list[float] = []
    for i in range(window, len(returns)):
        historical.append(annualized_volatility(returns[i - window : i]))

    return VolatilityAnalysis(
        current=current,
        historical=historical,
        trend=volatility_trend(historical),
    )


# ── Volume ───────────────────────────────────────────────────────────────


def volume_trend(volumes: Sequence[float], period: int = 20) -> VolatilityTrend:
    """Direction of the volume SMA from its first to its last value.

    Returns ``stable`` when there are fewer than *period* volumes.
    """
    if len(volumes) < period:
        return _STABLE

    sma = calculate_sma(volumes, period)
    direction = "increasing" if sma[-1] > sma[0] else "decreasing"
    return VolatilityTrend(
        direction=direction,
        magnitude=ieee_div(abs(sma[-1] - sma[0]), sma[0]),
    )


def price_volume_correlation(prices: Sequence[float], volumes: Sequence[float]) -> float:
    """Pearson correlation of price returns against volume changes."""
    price_returns = calculate_returns(prices)
    volume_changes = calculate_returns(volumes)
    return pearson_correlation(price_returns, volume_changes)


def _is_range_bound(prices: Sequence[float]) -> bool:
    change = pct_change(prices[0], prices[-1])
    return -0.05 < change < 0.05


def is_accumulation_phase(prices: Sequence[float], volumes: Sequence[float], period: int = 20) -> bool:
    """Range-bound price (within ±5%) on rising volume."""
    return _is_range_bound(prices) and volume_trend(volumes, period).direction == "increasing"


def is_distribution_phase(prices: Sequence[float], volumes: Sequence[float], period: int = 20) -> bool:
    """Range-bound price (within ±5%) on falling volume."""
    return _is_range_bound(prices) and volume_trend(volumes, period).direction == "decreasing"


def analyze_volume(
    prices: Sequence[float],
    volumes: Sequence[float],
    period: int = 20,
) -> Optional[VolumeAnalysis]:
    """Volume statistics for a price/volume series.

    Returns ``None`` if either sequence is empty.  Spikes are observations
    with more than twice the average volume.
    """
    if not prices or not volumes:
        return None

    average = sum(volumes) / len(volumes)
    if average == 0:
        logger.debug("Volume analysis on an all-zero volume series")

    spikes = []
    for i, vol in enumerate(volumes):
        ratio = ieee_div(vol, average)
        if ratio > 2:
            spikes.append(VolumeSpike(index=i, ratio=ratio))

    return VolumeAnalysis(
        average_volume=average,
        spikes=spikes,
        volume_trend=volume_trend(volumes, period),
        price_volume_correlation=price_volume_correlation(prices, volumes),
        is_accumulation=is_accumulation_phase(prices, volumes, period),
        is_distribution=is_distribution_phase(prices, volumes, period),
    )


# ── Chunks ───────────────────────────────────────────────────────────────


def analyze_chunks(points: Sequence[PricePoint], size: int = 30) -> ChunkProfile:
    """Average trend and mean absolute step change over fixed-size chunks.

    Chunks start every *size* points while ``start < len(points) - size``,
    so the trailing partial chunk is never included.  Without any chunk
    the averages are ``nan``.
    """
    trends: list[float] = []
    volatilities: list[float] = []
    price_ranges: list[float] = []

    for start in range(0, len(points) - size, size):
        chunk = [p.price for p in points[start : start + size]]
        steps = [abs(ieee_div(chunk[i] - chunk[i - 1], chunk[i - 1])) for i in range(1, len(chunk))]
        trends.append(pct_change(chunk[0], chunk[-1]))
        volatilities.append(sum(steps) / len(steps))
        price_ranges.append(sum(chunk) / len(chunk))

    return ChunkProfile(
        avg_trend=mean(trends),
        avg_volatility=mean(volatilities),
        price_ranges=price_ranges,
    )
