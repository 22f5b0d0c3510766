"""Analysis pipeline — one full recompute from a price series to a signal.

raw series → indicators + volatility + patterns → level clustering →
summary → simulated forecast → strategy signal.  Every field of the
report is produced together; there are no partial updates.
"""

import logging
import math
from dataclasses import asdict, dataclass
from typing import Optional, Sequence

from forecaster.analysis.indicators import calculate_indicators
from forecaster.analysis.levels import find_support_resistance_levels, split_levels
from forecaster.analysis.models import (
    ChunkProfile,
    FibonacciLevel,
    ForecastPoint,
    HistoricalPatternSummary,
    IndicatorSet,
    Level,
    PricePoint,
    VolatilityAnalysis,
    VolumeAnalysis,
    WaveSegment,
)
from forecaster.analysis.patterns import detect_advanced_patterns, detect_patterns
from forecaster.analysis.summary import DEFAULT_CYCLE_LENGTH_DAYS, summarize
from forecaster.analysis.volatility import analyze_chunks, analyze_volatility, analyze_volume
from forecaster.config import Settings
from forecaster.simulation.engine import DEFAULT_PRICE_FLOOR, MarketBias, PriceSimulator
from forecaster.simulation.random_source import RandomSource
from forecaster.strategy.models import TradingSignal
from forecaster.strategy.registry import evaluate_signal

logger = logging.getLogger("forecaster")


@dataclass(frozen=True)
class AnalysisReport:
    """Everything a presentation or persistence layer needs from one run."""

    indicators: IndicatorSet
    patterns: list[str]
    support_levels: list[Level]
    resistance_levels: list[Level]
    fibonacci: list[FibonacciLevel]
    elliott_waves: Optional[list[WaveSegment]]
    forecast: list[ForecastPoint]
    signal: TradingSignal
    summary: HistoricalPatternSummary
    volatility: VolatilityAnalysis
    volume: Optional[VolumeAnalysis]
    chunks: ChunkProfile

    def to_dict(self) -> dict:
        """Plain-dict form of the output contract.

        Non-finite floats (``nan`` RSI on a flat series, ``inf`` ratios) are
        mapped to ``None`` so the result serialises as strict JSON.
        """
        data = asdict(self)
        data["levels"] = {
            "support": data.pop("support_levels"),
            "resistance": data.pop("resistance_levels"),
        }
        data["signal"] = self.signal.value
        return _finite_or_none(data)


def _finite_or_none(value):
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, dict):
        return {key: _finite_or_none(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_finite_or_none(item) for item in value]
    return value


def run_analysis(
    points: Sequence[PricePoint],
    settings: Settings,
    random_source: RandomSource,
    cycle_length: int = DEFAULT_CYCLE_LENGTH_DAYS,
    price_floor: float = DEFAULT_PRICE_FLOOR,
) -> AnalysisReport:
    """Analyse *points* and forecast ``settings.forecast_days`` days ahead.

    The forecast is seeded with the last historical price and anchored at
    the last historical timestamp.  The signal is evaluated over the
    historical prices followed by the forecast prices.

    Raises ``ValueError`` if *points* is empty.
    """
    if not points:
        raise ValueError("Cannot analyse an empty price series")

    prices = [p.price for p in points]
    volumes = [p.volume for p in points]

    indicators = calculate_indicators(points)
    volatility = analyze_volatility(points)
    scan = detect_advanced_patterns(prices)
    patterns = detect_patterns(prices) + scan.patterns
    volume = analyze_volume(prices, volumes)
    chunks = analyze_chunks(points)
    levels = find_support_resistance_levels(points)
    logger.debug(
        "Analysed %d point(s): %d pattern(s), %d level(s)",
        len(points), len(patterns), len(levels),
    )

    summary = summarize(prices[-1], indicators, volatility, levels, cycle_length)

    forecast: list[ForecastPoint] = []
    if settings.forecast_days > 0:
        simulator = PriceSimulator(
            MarketBias.from_analysis(points, indicators, summary),
            price_floor=price_floor,
        )
        forecast = simulator.forecast(
            seed_price=prices[-1],
            days=settings.forecast_days,
            random_source=random_source,
            start_timestamp=points[-1].timestamp,
        )

    signal = evaluate_signal(settings.strategy_key, prices + [f.price for f in forecast])

    support, resistance = split_levels(levels)
    logger.info(
        "Analysis complete: %d point(s), %d forecast day(s), strategy=%s, signal=%s",
        len(points), settings.forecast_days, settings.strategy_key, signal.value,
    )

    return AnalysisReport(
        indicators=indicators,
        patterns=patterns,
        support_levels=support,
        resistance_levels=resistance,
        fibonacci=scan.fibonacci,
        elliott_waves=scan.elliott_waves,
        forecast=forecast,
        signal=signal,
        summary=summary,
        volatility=volatility,
        volume=volume,
        chunks=chunks,
    )
