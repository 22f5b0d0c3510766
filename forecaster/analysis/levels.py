"""Support/Resistance level detection from pivot clustering — pure functions."""

from dataclasses import dataclass
from typing import Literal, Sequence

from forecaster.analysis.mathutils import ieee_div
from forecaster.analysis.models import Level, PricePoint


@dataclass(frozen=True)
class TaggedPivot:
    """A pivot price tagged with the level type it can form."""

    price: float
    level_type: Literal["support", "resistance"]


def find_pivots(prices: Sequence[float], window: int = 2) -> list[TaggedPivot]:
    """Identify strict swing highs (resistance) and swing lows (support).

    A swing high is a price strictly higher than the *window* prices on
    each side; a swing low is strictly lower.  Pivots are returned in
    series order.
    """
    pivots: list[TaggedPivot] = []
    for i in range(window, len(prices) - window):
        price = prices[i]
        neighbours = list(prices[i - window : i]) + list(prices[i + 1 : i + window + 1])
        if all(price > n for n in neighbours):
            pivots.append(TaggedPivot(price=price, level_type="resistance"))
        elif all(price < n for n in neighbours):
            pivots.append(TaggedPivot(price=price, level_type="support"))
    return pivots


def cluster_levels(pivots: Sequence[TaggedPivot], tolerance: float = 0.02) -> list[Level]:
    """Greedy single-pass clustering of pivot prices into levels.

    Each pivot joins the first existing cluster whose price is within
    *tolerance* (relative to the cluster price).  Joining bumps the
    strength and moves the cluster price to the midpoint of the old
    cluster price and the pivot, so the result depends on pivot order.
    A new cluster keeps the type of the pivot that opened it.

    Returns levels sorted by strength, strongest first (ties keep
    creation order).
    """
    clusters: list[dict] = []
    for pivot in pivots:
        match = next(
            (
                c for c in clusters
                if abs(ieee_div(c["price"] - pivot.price, c["price"])) < tolerance
            ),
            None,
        )
        if match is not None:
            match["strength"] += 1
            match["price"] = (match["price"] + pivot.price) / 2
        else:
            clusters.append(
                {"price": pivot.price, "level_type": pivot.level_type, "strength": 1}
            )

    clusters.sort(key=lambda c: c["strength"], reverse=True)
    return [
        Level(price=c["price"], level_type=c["level_type"], strength=c["strength"])
        for c in clusters
    ]


def find_support_resistance_levels(
    points: Sequence[PricePoint],
    pivot_window: int = 2,
    tolerance: float = 0.02,
) -> list[Level]:
    """Detect support and resistance levels from a price series.

    Args:
        points: Price history, oldest-first.
        pivot_window: Half-window size for swing detection.
        tolerance: Relative clustering tolerance.

    Returns:
        List of ``Level`` objects sorted by strength.
    """
    if not points:
        return []
    prices = [p.price for p in points]
    return cluster_levels(find_pivots(prices, pivot_window), tolerance)


def split_levels(levels: Sequence[Level]) -> tuple[list[Level], list[Level]]:
    """Split *levels* into ``(support, resistance)``, preserving order."""
    support = [lv for lv in levels if lv.level_type == "support"]
    resistance = [lv for lv in levels if lv.level_type == "resistance"]
    return support, resistance
