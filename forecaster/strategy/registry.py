"""Strategy registry — maps strategy keys to their evaluators.

Used by the analysis pipeline to turn ``Settings.strategy_key`` into a
trading signal.
"""

import logging
from typing import Optional, Sequence

from forecaster.strategy import strategies
from forecaster.strategy.models import StrategySpec, TradingSignal

logger = logging.getLogger("forecaster.strategy")


STRATEGY_REGISTRY: dict[str, StrategySpec] = {
    spec.key: spec
    for spec in (
        StrategySpec(
            key="arbitrage",
            name="Arbitrage",
            description="Exploits price differences across different timeframes",
            calculate=strategies.arbitrage,
        ),
        StrategySpec(
            key="meanReversion",
            name="Mean Reversion",
            description="Assumes prices will return to their historical average",
            calculate=strategies.mean_reversion,
        ),
        StrategySpec(
            key="trend",
            name="Trend Following",
            description="Follows established price trends",
            calculate=strategies.trend_following,
        ),
        StrategySpec(
            key="hft",
            name="High-Frequency Trading",
            description="Rapid trading based on short-term price movements",
            calculate=strategies.high_frequency,
        ),
        StrategySpec(
            key="vwap",
            name="Volume-Weighted Average Price",
            description="Uses price and volume data for decision making",
            calculate=strategies.vwap,
        ),
        StrategySpec(
            key="indexRebalancing",
            name="Index Fund Rebalancing",
            description="Periodic portfolio rebalancing strategy",
            calculate=strategies.index_rebalancing,
        ),
        StrategySpec(
            key="twap",
            name="Time-Weighted Average Price",
            description="Executes trades based on time-weighted price averages",
            calculate=strategies.twap,
        ),
    )
}


def get_strategy(key: str) -> Optional[StrategySpec]:
    """Look up a strategy by registry key; ``None`` if it is not registered."""
    return STRATEGY_REGISTRY.get(key)


def evaluate_signal(key: str, prices: Sequence[float]) -> TradingSignal:
    """Run the strategy registered under *key* over *prices*.

    Returns ``TradingSignal.HOLD`` if *key* is unknown or *prices* is
    empty; never raises for either case.
    """
    spec = get_strategy(key)
    if spec is None:
        logger.warning(
            "Unknown strategy '%s', holding. Available: %s",
            key, ", ".join(STRATEGY_REGISTRY.keys()),
        )
        return TradingSignal.HOLD
    if not prices:
        logger.debug("Strategy '%s' called with no prices, holding", key)
        return TradingSignal.HOLD
    return spec.calculate(prices)
