"""Strategy data models — the discrete signal and registry entries."""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Sequence


class TradingSignal(str, Enum):
    BUY = "BUY"
    SELL = "SELL"
    RIDE = "RIDE"
    STAY = "STAY"
    HOLD = "HOLD"  # no strategy matched the requested key


@dataclass(frozen=True)
class StrategySpec:
    """A named strategy and the pure function that evaluates it."""

    key: str
    name: str
    description: str
    calculate: Callable[[Sequence[float]], TradingSignal]
