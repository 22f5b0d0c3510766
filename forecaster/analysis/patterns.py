"""Chart pattern detection — pivot geometry on a raw price list. Pure functions.

Every predicate is gated on a minimum series length and simply returns
``False`` below it.
"""

from typing import Optional, Sequence

from forecaster.analysis.mathutils import ieee_div, least_squares_slope, pct_change, sign
from forecaster.analysis.models import FibonacciLevel, PatternScan, Pivot, WaveSegment
from forecaster.analysis.volatility import rms_volatility

FIBONACCI_LEVELS = (0.236, 0.382, 0.5, 0.618, 0.786)

# Half-window used for the reversal patterns (H&S, double top/bottom).
_REVERSAL_WINDOW = 5


# ── Pivots ───────────────────────────────────────────────────────────────


def find_peaks(prices: Sequence[float], window: int = 2) -> list[Pivot]:
    """Identify peaks.

    A peak is a point equal to the maximum of the ``2 * window + 1``
    values centred on it, so flat tops yield several peaks.  The first
    and last *window* points are never pivots.
    """
    peaks: list[Pivot] = []
    for i in range(window, len(prices) - window):
        if prices[i] == max(prices[i - window : i + window + 1]):
            peaks.append(Pivot(value=prices[i], index=i))
    return peaks


def find_troughs(prices: Sequence[float], window: int = 2) -> list[Pivot]:
    """Identify troughs (mirror of :func:`find_peaks`)."""
    troughs: list[Pivot] = []
    for i in range(window, len(prices) - window):
        if prices[i] == min(prices[i - window : i + window + 1]):
            troughs.append(Pivot(value=prices[i], index=i))
    return troughs


def _pivot_slope(pivots: Sequence[Pivot]) -> float:
    return least_squares_slope([p.index for p in pivots], [p.value for p in pivots])


def _series_slope(prices: Sequence[float]) -> float:
    return least_squares_slope(list(range(len(prices))), prices)


# ── Reversal patterns ────────────────────────────────────────────────────


def _has_head_and_shoulders(pivots: Sequence[Pivot], inverted: bool) -> bool:
    for i in range(len(pivots) - 2):
        left, head, right = pivots[i : i + 3]
        if inverted:
            is_head = head.value < left.value and head.value < right.value
        else:
            is_head = head.value > left.value and head.value > right.value
        if is_head and ieee_div(abs(left.value - right.value), left.value) < 0.1:
            return True
    return False


def is_head_and_shoulders(prices: Sequence[float]) -> bool:
    """A peak above both neighbouring peaks, shoulders within 10%."""
    if len(prices) < 20:
        return False
    peaks = find_peaks(prices, _REVERSAL_WINDOW)
    if len(peaks) < 3:
        return False
    return _has_head_and_shoulders(peaks, inverted=False)


def is_inverse_head_and_shoulders(prices: Sequence[float]) -> bool:
    """A trough below both neighbouring troughs, shoulders within 10%."""
    if len(prices) < 20:
        return False
    troughs = find_troughs(prices, _REVERSAL_WINDOW)
    if len(troughs) < 3:
        return False
    return _has_head_and_shoulders(troughs, inverted=True)


def _has_double(pivots: Sequence[Pivot]) -> bool:
    for first, second in zip(pivots, pivots[1:]):
        if ieee_div(abs(first.value - second.value), first.value) < 0.02:
            if 5 <= second.index - first.index <= 30:
                return True
    return False


def is_double_top(prices: Sequence[float]) -> bool:
    """Two consecutive peaks within 2%, 5 to 30 steps apart."""
    if len(prices) < 15:
        return False
    return _has_double(find_peaks(prices, _REVERSAL_WINDOW))


def is_double_bottom(prices: Sequence[float]) -> bool:
    """Two consecutive troughs within 2%, 5 to 30 steps apart."""
    if len(prices) < 15:
        return False
    return _has_double(find_troughs(prices, _REVERSAL_WINDOW))


# ── Continuation patterns ────────────────────────────────────────────────


def _is_flag(prices: Sequence[float], bullish: bool) -> bool:
    if len(prices) < 10:
        return False

    pole = prices[:5]
    flag = prices[5:]
    pole_trend = pct_change(pole[0], pole[-1])
    consolidation = pct_change(flag[0], flag[-1])

    strong_pole = pole_trend > 0.02 if bullish else pole_trend < -0.02
    return (
        strong_pole
        and abs(consolidation) < 0.01
        and rms_volatility(flag) < rms_volatility(pole)
    )


def is_bullish_flag(prices: Sequence[float]) -> bool:
    """Sharp 5-point rise (>2%) followed by a quieter flat consolidation."""
    return _is_flag(prices, bullish=True)


def is_bearish_flag(prices: Sequence[float]) -> bool:
    """Sharp 5-point drop (<-2%) followed by a quieter flat consolidation."""
    return _is_flag(prices, bullish=False)


def _boundary_slopes(prices: Sequence[float]) -> Optional[tuple[float, float]]:
    peaks = find_peaks(prices)
    troughs = find_troughs(prices)
    if len(peaks) < 3 or len(troughs) < 3:
        return None
    return _pivot_slope(peaks), _pivot_slope(troughs)


def is_triangle(prices: Sequence[float]) -> bool:
    """Near-flat peak and trough lines sloping in opposite directions."""
    slopes = _boundary_slopes(prices)
    if slopes is None:
        return False
    high, low = slopes
    return abs(high) < 0.1 and abs(low) < 0.1 and sign(high) != sign(low)


def is_wedge(prices: Sequence[float]) -> bool:
    """Steep peak and trough lines sloping the same way."""
    slopes = _boundary_slopes(prices)
    if slopes is None:
        return False
    high, low = slopes
    return abs(high) > 0.1 and abs(low) > 0.1 and sign(high) == sign(low)


def is_channel(prices: Sequence[float]) -> bool:
    """Near-flat peak and trough lines sloping the same way."""
    slopes = _boundary_slopes(prices)
    if slopes is None:
        return False
    high, low = slopes
    return abs(high) < 0.1 and abs(low) < 0.1 and sign(high) == sign(low)


def _depth(prices: Sequence[float]) -> float:
    high = max(prices)
    return ieee_div(high - min(prices), high)


def is_cup_and_handle(prices: Sequence[float]) -> bool:
    """Cup 10-50% deep with a shallow (<10%) handle in the last third."""
    if len(prices) < 20:
        return False

    cup_depth = _depth(prices)
    if cup_depth < 0.1 or cup_depth > 0.5:
        return False

    handle = prices[-(len(prices) // 3) :]
    return _depth(handle) < 0.1


def is_rounding_bottom(prices: Sequence[float]) -> bool:
    """Left half sloping down, right half sloping up."""
    if len(prices) < 20:
        return False
    mid = len(prices) // 2
    return _series_slope(prices[:mid]) < 0 and _series_slope(prices[mid:]) > 0


# ── Levels & waves ───────────────────────────────────────────────────────


def calculate_fibonacci_levels(high: float, low: float) -> list[FibonacciLevel]:
    """Retracement prices ``high - (high - low) × level``."""
    return [
        FibonacciLevel(level=level, price=high - (high - low) * level)
        for level in FIBONACCI_LEVELS
    ]


def find_elliott_waves(prices: Sequence[float], min_points: int = 20) -> Optional[list[WaveSegment]]:
    """Split the series into directional legs at each reversal.

    A step is ``up`` when the price rises and ``down`` otherwise.  Each
    reversal closes the running leg, and the leg still open at the end of
    the series is closed on the last point.  Returns the first five legs,
    or ``None`` if the series is shorter than *min_points* or has fewer
    than five legs.  A heuristic, not a wave-count validation.
    """
    if len(prices) < min_points:
        return None

    waves: list[WaveSegment] = []
    start = 0
    direction: Optional[str] = None

    def close_leg(end: int) -> None:
        waves.append(
            WaveSegment(
                wave=len(waves) + 1,
                direction=direction,
                start_price=prices[start],
                end_price=prices[end],
                start_index=start,
                end_index=end,
            )
        )

    for i in range(1, len(prices)):
        step = "up" if prices[i] > prices[i - 1] else "down"
        if direction is not None and step != direction:
            close_leg(i - 1)
            if len(waves) == 5:
                return waves
            start = i - 1
        direction = step

    if direction is not None:
        close_leg(len(prices) - 1)
    return waves if len(waves) == 5 else None


# ── Scans ────────────────────────────────────────────────────────────────


def detect_patterns(prices: Sequence[float]) -> list[str]:
    """Names of the classic reversal and flag patterns present."""
    checks = [
        ("Head and Shoulders", is_head_and_shoulders),
        ("Double Top", is_double_top),
        ("Double Bottom", is_double_bottom),
        ("Bullish Flag", is_bullish_flag),
        ("Bearish Flag", is_bearish_flag),
    ]
    return [name for name, check in checks if check(prices)]


def detect_advanced_patterns(prices: Sequence[float]) -> PatternScan:
    """Geometric patterns plus Fibonacci levels and Elliott segmentation.

    Fibonacci levels are empty for an empty series.
    """
    checks = [
        ("Triangle", is_triangle),
        ("Wedge", is_wedge),
        ("Channel", is_channel),
        ("Cup and Handle", is_cup_and_handle),
        ("Inverse H&S", is_inverse_head_and_shoulders),
        ("Rounding Bottom", is_rounding_bottom),
    ]
    patterns = [name for name, check in checks if check(prices)]
    fibonacci = calculate_fibonacci_levels(max(prices), min(prices)) if prices else []

    return PatternScan(
        patterns=patterns,
        fibonacci=fibonacci,
        elliott_waves=find_elliott_waves(prices),
    )
