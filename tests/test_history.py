"""Tests for forecaster.history — CSV ingestion, sampling policy and resampling."""

import pytest

from forecaster.analysis.models import PricePoint
from forecaster.history import (
    load_price_csv,
    minimum_interval,
    resample_points,
    should_append,
    trim_to_window,
)


class TestMinimumInterval:
    @pytest.mark.parametrize(
        "window, expected",
        [
            (60, 60),
            (3600, 60),
            (3601, 300),
            (7200, 300),
            (86400, 900),
            (604800, 3600),
            (604801, 86400),
            (31_536_000, 86400),
        ],
    )
    def test_policy(self, window, expected):
        assert minimum_interval(window) == expected


class TestShouldAppend:
    def test_empty_history(self):
        assert should_append([], PricePoint(timestamp=0, price=1.0), 3600) is True

    def test_compares_milliseconds(self):
        history = [PricePoint(timestamp=0, price=1.0)]
        # 1h window → 60 s interval
        assert should_append(history, PricePoint(timestamp=59_999, price=1.0), 3600) is False
        assert should_append(history, PricePoint(timestamp=60_000, price=1.0), 3600) is True


class TestResample:
    def test_buckets_keep_first_price_and_sum_volume(self):
        points = [
            PricePoint(timestamp=0, price=10.0, volume=1.0),
            PricePoint(timestamp=30_000, price=11.0, volume=2.0),
            PricePoint(timestamp=65_000, price=12.0, volume=3.0),
        ]
        assert resample_points(points, 60) == [
            PricePoint(timestamp=0, price=10.0, volume=3.0),
            PricePoint(timestamp=60_000, price=12.0, volume=3.0),
        ]

    def test_aligned_points_unchanged(self):
        points = [PricePoint(timestamp=i * 900_000, price=100.0 + i) for i in range(5)]
        assert resample_points(points, 900) == points

    def test_empty(self):
        assert resample_points([], 60) == []


class TestTrimToWindow:
    def test_keeps_recent_points(self):
        points = [PricePoint(timestamp=i * 1000, price=float(i)) for i in range(10)]
        trimmed = trim_to_window(points, 3)
        assert [p.timestamp for p in trimmed] == [6000, 7000, 8000, 9000]

    def test_empty(self):
        assert trim_to_window([], 60) == []


class TestLoadPriceCsv:
    def test_epoch_milliseconds(self, tmp_path):
        path = tmp_path / "prices.csv"
        path.write_text("timestamp,price,volume\n2000,102.5,7\n1000,101.0,5\n")
        points = load_price_csv(path)
        assert points == [
            PricePoint(timestamp=1000, price=101.0, volume=5.0),
            PricePoint(timestamp=2000, price=102.5, volume=7.0),
        ]

    def test_date_strings_without_volume(self, tmp_path):
        path = tmp_path / "prices.csv"
        path.write_text("timestamp,price\n2024-01-01,42000\n2024-01-02,42500\n")
        points = load_price_csv(str(path))
        assert [p.timestamp for p in points] == [1_704_067_200_000, 1_704_153_600_000]
        assert [p.volume for p in points] == [0.0, 0.0]

    def test_rows_without_price_dropped(self, tmp_path):
        path = tmp_path / "prices.csv"
        path.write_text("timestamp,price\n1000,100\n2000,\n3000,102\n")
        points = load_price_csv(path)
        assert [p.timestamp for p in points] == [1000, 3000]

    def test_missing_column(self, tmp_path):
        path = tmp_path / "prices.csv"
        path.write_text("time,close\n1000,100\n")
        with pytest.raises(ValueError, match="timestamp, price"):
            load_price_csv(path)
