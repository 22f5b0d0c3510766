"""Analysis data models — typed value objects produced by the analysis modules."""

from dataclasses import dataclass, field
from typing import Literal, Optional


@dataclass(frozen=True)
class PricePoint:
    """A single price observation (epoch-ms timestamp)."""

    timestamp: int
    price: float
    volume: float = 0.0


# ── Indicators ───────────────────────────────────────────────────────────


@dataclass(frozen=True)
class MACDResult:
    """MACD line, signal line and histogram, each as long as the input."""

    macd: list[float]
    signal: list[float]
    histogram: list[float]


@dataclass(frozen=True)
class BollingerBand:
    upper: float
    middle: float
    lower: float


@dataclass(frozen=True)
class IndicatorSet:
    """Indicators computed together from one price series.

    ``rsi`` and ``bollinger`` are aligned against the tail of the input:
    RSI starts at input index ``period``, Bollinger at ``period - 1``.
    """

    macd: MACDResult
    rsi: list[float]
    bollinger: list[BollingerBand]


# ── Levels & patterns ────────────────────────────────────────────────────


@dataclass(frozen=True)
class Pivot:
    """A local extremum and its position in the price series."""

    value: float
    index: int


@dataclass(frozen=True)
class Level:
    """A support or resistance price level."""

    price: float
    level_type: Literal["support", "resistance"]
    strength: int  # number of pivots merged into this level


@dataclass(frozen=True)
class FibonacciLevel:
    level: float
    price: float


@dataclass(frozen=True)
class WaveSegment:
    """One directional leg of the Elliott segmentation."""

    wave: int
    direction: Literal["up", "down"]
    start_price: float
    end_price: float
    start_index: int
    end_index: int


@dataclass(frozen=True)
class PatternScan:
    """Result of the advanced pattern scan."""

    patterns: list[str]
    fibonacci: list[FibonacciLevel]
    elliott_waves: Optional[list[WaveSegment]]


# ── Volatility & volume ──────────────────────────────────────────────────


@dataclass(frozen=True)
class VolatilityTrend:
    direction: Literal["increasing", "decreasing", "stable"]
    magnitude: float


@dataclass(frozen=True)
class VolatilityAnalysis:
    """Annualised volatility of the whole series plus its rolling history."""

    current: float
    historical: list[float]
    trend: VolatilityTrend


@dataclass(frozen=True)
class VolumeSpike:
    index: int
    ratio: float  # volume / average volume


@dataclass(frozen=True)
class VolumeAnalysis:
    average_volume: float
    spikes: list[VolumeSpike]
    volume_trend: VolatilityTrend
    price_volume_correlation: float
    is_accumulation: bool
    is_distribution: bool


@dataclass(frozen=True)
class ChunkProfile:
    """Averages over consecutive fixed-size chunks of the history."""

    avg_trend: float
    avg_volatility: float
    price_ranges: list[float] = field(default_factory=list)


# ── Summary ──────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class HistoricalPatternSummary:
    """Compact bias profile consumed by the price simulator."""

    daily_volatility: float
    bullish_trend: float
    bearish_trend: float
    cycle_length: int
    support_levels: list[Level]
    resistance_levels: list[Level]


@dataclass(frozen=True)
class ForecastPoint:
    timestamp: int
    price: float
    is_historical: bool = False
