"""Price simulation — biased random walk over daily fractional returns.

Each simulated day combines five return components with a small growth
bias, clamps the total to an asymmetric daily cap, optionally snaps the
new price onto a nearby support/resistance level, and floors the result.

Days are strictly sequential: day *n* starts from day *n-1*'s price.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Optional, Sequence

import numpy as np

from forecaster.analysis.mathutils import ieee_div, pct_change
from forecaster.analysis.models import (
    ForecastPoint,
    HistoricalPatternSummary,
    IndicatorSet,
    Level,
    PricePoint,
)
from forecaster.simulation.random_source import RandomSource

logger = logging.getLogger("forecaster.simulation")

DAY_MS = 24 * 60 * 60 * 1000

DEFAULT_PRICE_FLOOR = 1000.0
DEFAULT_VOLATILITY = 0.02
DEFAULT_START_PRICE = 45000.0

GROWTH_BIAS = 0.0005
MAX_DAILY_UP = 0.15
MAX_DAILY_DOWN = -0.12
SNAP_PROBABILITY = 0.7
SNAP_BAND = 0.02


# ── Inputs ───────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class MarketBias:
    """Everything the daily return model reads, frozen before a run."""

    volatility: float = DEFAULT_VOLATILITY
    momentum: float = 0.0
    last_rsi: Optional[float] = None
    last_histogram: Optional[float] = None
    bollinger_middle: Optional[float] = None
    support_levels: list[Level] = field(default_factory=list)
    resistance_levels: list[Level] = field(default_factory=list)

    @classmethod
    def from_analysis(
        cls,
        history: Sequence[PricePoint],
        indicators: IndicatorSet,
        summary: HistoricalPatternSummary,
    ) -> MarketBias:
        """Build the bias from a finished analysis of *history*.

        Momentum is the relative change across the last 5 historical
        prices.  A zero or ``nan`` volatility falls back to 0.02.
        """
        recent = history[-5:]
        momentum = pct_change(recent[0].price, recent[-1].price) if len(recent) > 1 else 0.0

        volatility = summary.daily_volatility
        if not volatility or math.isnan(volatility):
            volatility = DEFAULT_VOLATILITY

        return cls(
            volatility=volatility,
            momentum=momentum,
            last_rsi=indicators.rsi[-1] if indicators.rsi else None,
            last_histogram=indicators.macd.histogram[-1] if indicators.macd.histogram else None,
            bollinger_middle=indicators.bollinger[-1].middle if indicators.bollinger else None,
            support_levels=list(summary.support_levels),
            resistance_levels=list(summary.resistance_levels),
        )


# ── Simulator ────────────────────────────────────────────────────────────


class PriceSimulator:
    """Simulates forward daily prices from a frozen ``MarketBias``.

    Args:
        bias: Inputs to the daily return model.
        price_floor: Minimum simulated price.
    """

    def __init__(self, bias: MarketBias, price_floor: float = DEFAULT_PRICE_FLOOR) -> None:
        self._bias = bias
        self._price_floor = price_floor

    @property
    def bias(self) -> MarketBias:
        return self._bias

    # ── Return components ────────────────────────────────────────────────

    def _technical_component(self) -> float:
        rsi = self._bias.last_rsi
        if rsi is None:
            return 0.0
        if rsi < 30:
            return 0.01
        if rsi > 70:
            return -0.01
        return 0.0

    def _macd_component(self) -> float:
        hist = self._bias.last_histogram
        if hist is None:
            return 0.0
        return max(-0.01, min(0.01, hist * 0.05))

    def _mean_reversion_component(self, price: float) -> float:
        middle = self._bias.bollinger_middle
        if middle is None:
            return 0.0
        return ieee_div(middle - price, price) * 0.1

    def daily_change(self, price: float, day: int, rng: np.random.Generator) -> float:
        """Total fractional change for *day*, clamped to the daily cap."""
        random_component = rng.uniform(-1.0, 1.0) * self._bias.volatility * 0.5
        trend_component = self._bias.momentum * math.exp(-day * 0.05) * 0.3

        total = (
            random_component
            + trend_component
            + self._technical_component()
            + self._macd_component()
            + self._mean_reversion_component(price)
            + GROWTH_BIAS
        )
        return max(min(total, MAX_DAILY_UP), MAX_DAILY_DOWN)

    # ── Level snapping ───────────────────────────────────────────────────

    def snap_to_levels(self, price: float, rng: np.random.Generator) -> float:
        """Occasionally pull *price* onto a nearby level.

        The strongest support below *price* wins with probability 0.3 and
        moves the price to ``support × (1 + U[0, 0.02))``.  Failing that,
        the strongest resistance above *price* may pull it to
        ``resistance × (1 - U[0, 0.02))``.  At most one rule applies.
        """
        support = next((lv for lv in self._bias.support_levels if lv.price < price), None)
        if support is not None and rng.random() > SNAP_PROBABILITY:
            return support.price * (1 + rng.random() * SNAP_BAND)

        resistance = next((lv for lv in self._bias.resistance_levels if lv.price > price), None)
        if resistance is not None and rng.random() > SNAP_PROBABILITY:
            return resistance.price * (1 - rng.random() * SNAP_BAND)

        return price

    # ── Runs ─────────────────────────────────────────────────────────────

    def predict_next_price(self, price: float, day: int, rng: np.random.Generator) -> float:
        """Advance one simulated day from *price*."""
        change = self.daily_change(price, day, rng)
        new_price = self.snap_to_levels(price * (1 + change), rng)
        return max(self._price_floor, new_price)

    def simulate(self, seed_price: float, days: int, random_source: RandomSource) -> list[float]:
        """Simulate *days* daily steps from *seed_price*.

        Returns ``days + 1`` prices; the first is *seed_price* itself.

        Raises ``ValueError`` if *days* is negative.
        """
        if days < 0:
            raise ValueError(f"days must be non-negative, got {days}")

        prices = [seed_price]
        price = seed_price
        for day in range(days):
            price = self.predict_next_price(price, day, random_source.generator_for_day(day))
            prices.append(price)

        logger.debug(
            "Simulated %d day(s) from %.2f to %.2f with %r",
            days, seed_price, price, random_source,
        )
        return prices

    def forecast(
        self,
        seed_price: float,
        days: int,
        random_source: RandomSource,
        start_timestamp: int,
    ) -> list[ForecastPoint]:
        """Simulated prices as ``ForecastPoint``s spaced one day apart."""
        prices = self.simulate(seed_price, days, random_source)
        return [
            ForecastPoint(timestamp=start_timestamp + i * DAY_MS, price=p, is_historical=False)
            for i, p in enumerate(prices)
        ]


# ── Synthetic history ────────────────────────────────────────────────────


def generate_synthetic_history(
    days: int,
    summary: HistoricalPatternSummary,
    random_source: RandomSource,
    end_timestamp: int,
    start_price: float = DEFAULT_START_PRICE,
    price_floor: float = DEFAULT_PRICE_FLOOR,
) -> list[PricePoint]:
    """Generate ``days + 1`` daily points ending at *end_timestamp*.

    Stand-in history for when the data provider has nothing.  The drift
    alternates between the bullish and bearish trend of *summary* every
    ``cycle_length`` days; the noise scales with its daily volatility.
    Stored prices are floored, the running walk is not.
    """
    if days < 0:
        raise ValueError(f"days must be non-negative, got {days}")

    snapper = PriceSimulator(
        MarketBias(
            support_levels=list(summary.support_levels),
            resistance_levels=list(summary.resistance_levels),
        ),
        price_floor=price_floor,
    )

    points: list[PricePoint] = []
    price = start_price
    trend = summary.bullish_trend
    last_cycle_change = 0.0

    for step, days_back in enumerate(range(days, -1, -1)):
        rng = random_source.generator_for_day(step)
        if days_back % summary.cycle_length == 0:
            trend = summary.bearish_trend if last_cycle_change > 0 else summary.bullish_trend
            last_cycle_change = trend

        noise = (rng.random() - 0.5) * summary.daily_volatility
        drift = trend * (1 + rng.random() * 0.5)
        price = snapper.snap_to_levels(price * (1 + noise + drift), rng)

        points.append(
            PricePoint(
                timestamp=end_timestamp - days_back * DAY_MS,
                price=max(price_floor, price),
            )
        )

    logger.info("Generated %d synthetic history point(s)", len(points))
    return points
