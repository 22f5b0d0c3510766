"""Price history helpers for the data-provider side of the core.

CSV ingestion, sampling-interval policy, resampling and window trimming.
The analysis modules never call these; they take whatever ordered series
they are given.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

import pandas as pd

from forecaster.analysis.models import PricePoint

logger = logging.getLogger("forecaster.history")

# (max window seconds, sampling interval seconds), checked in order.
_INTERVAL_POLICY = [
    (3600, 60),
    (7200, 300),
    (86400, 900),
    (604800, 3600),
]
_DAILY_INTERVAL = 86400


def minimum_interval(window_seconds: int) -> int:
    """Sampling interval (seconds) used for a historical window.

    ≤1h → 1 min, ≤2h → 5 min, ≤1 day → 15 min, ≤7 days → 1 h,
    anything longer → 1 day.
    """
    for max_window, interval in _INTERVAL_POLICY:
        if window_seconds <= max_window:
            return interval
    return _DAILY_INTERVAL


def should_append(history: Sequence[PricePoint], point: PricePoint, window_seconds: int) -> bool:
    """True if *point* is at least one sampling interval after the last point."""
    if not history:
        return True
    elapsed_ms = point.timestamp - history[-1].timestamp
    return elapsed_ms >= minimum_interval(window_seconds) * 1000


def resample_points(points: Sequence[PricePoint], interval_seconds: int) -> list[PricePoint]:
    """Bucket *points* into ``interval_seconds`` bins.

    Each bin is stamped with its start (``floor(ts / interval) * interval``),
    keeps the price of its first observation and sums volume.
    """
    if not points:
        return []

    interval_ms = interval_seconds * 1000
    df = pd.DataFrame(
        {
            "timestamp": [p.timestamp for p in points],
            "price": [p.price for p in points],
            "volume": [p.volume for p in points],
        }
    )
    df["bucket"] = (df["timestamp"] // interval_ms) * interval_ms
    grouped = df.groupby("bucket", sort=False).agg(price=("price", "first"), volume=("volume", "sum"))

    return [
        PricePoint(timestamp=int(bucket), price=float(row.price), volume=float(row.volume))
        for bucket, row in grouped.iterrows()
    ]


def trim_to_window(points: Sequence[PricePoint], window_seconds: int) -> list[PricePoint]:
    """Keep the points within *window_seconds* of the most recent one."""
    if not points:
        return []
    cutoff = points[-1].timestamp - window_seconds * 1000
    return [p for p in points if p.timestamp >= cutoff]


def load_price_csv(path: str | Path) -> list[PricePoint]:
    """Load a price series from a CSV file.

    Expects ``timestamp`` and ``price`` columns and an optional ``volume``
    column.  Timestamps may be epoch milliseconds or date strings (read as
    UTC).  Rows without a price are dropped; the result is sorted by
    timestamp.

    Raises ``ValueError`` if a required column is missing.
    """
    df = pd.read_csv(path)

    missing = [col for col in ("timestamp", "price") if col not in df.columns]
    if missing:
        raise ValueError(f"{path}: missing required column(s): {', '.join(missing)}")

    if not pd.api.types.is_numeric_dtype(df["timestamp"]):
        times = pd.to_datetime(df["timestamp"], utc=True)
        df["timestamp"] = (times - pd.Timestamp(0, tz="UTC")) // pd.Timedelta(milliseconds=1)

    if "volume" not in df.columns:
        df["volume"] = 0.0

    dropped = int(df["price"].isna().sum())
    if dropped:
        logger.warning("%s: dropping %d row(s) without a price", path, dropped)
    df = df.dropna(subset=["price"]).sort_values("timestamp", kind="stable")
    df["volume"] = df["volume"].fillna(0.0)

    points = [
        PricePoint(timestamp=int(ts), price=float(price), volume=float(volume))
        for ts, price, volume in zip(df["timestamp"], df["price"], df["volume"])
    ]
    logger.info("Loaded %d price point(s) from %s", len(points), path)
    return points
