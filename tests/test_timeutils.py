"""Tests for time helpers and trace overview."""

import csv

import pytest

from tests.conftest import T0_MS
from trip_analyze.inspect import export_route_csv, sampling_stats, summarize_trace
from trip_analyze.models import GeoPoint
from trip_analyze.timeutils import dt_from_epoch_ms, parse_timestamp_ms, tzinfo_from_name


class TestTimeutils:
    """Tests for timeutils."""

    def test_invalid_timezone(self):
        with pytest.raises(ValueError):
            tzinfo_from_name("Not/AZone")

    def test_dt_from_epoch_ms(self):
        dt = dt_from_epoch_ms(T0_MS, "Asia/Dubai")
        assert (dt.hour, dt.minute) == (12, 0)

    @pytest.mark.parametrize(
        "text",
        [
            str(T0_MS),
            f"{T0_MS}.0",
            " 2025-01-01T08:00:00 ",
            "2025-01-01 08:00:00",
            "2025-01-01 12:00:00+04:00",
        ],
    )
    def test_parse_timestamp_ms(self, text):
        assert parse_timestamp_ms(text, "UTC") == T0_MS

    def test_naive_text_uses_zone(self):
        assert parse_timestamp_ms("2025-01-01 12:00:00", "Asia/Dubai") == T0_MS

    @pytest.mark.parametrize("text", ["yesterday", "", "inf"])
    def test_parse_timestamp_invalid(self, text):
        with pytest.raises(ValueError):
            parse_timestamp_ms(text, "UTC")


class TestSamplingStats:
    """Tests for sampling_stats."""

    def test_intervals(self):
        stats = sampling_stats([6000, 0, 1000, 3000])
        assert stats.intervals == 3
        assert stats.shortest_s == 1.0
        assert stats.median_s == 2.0
        assert stats.longest_s == 3.0
        assert stats.rate_hz == pytest.approx(0.5)

    def test_too_short(self):
        assert sampling_stats([0]) is None
        assert sampling_stats([]) is None


class TestSummarizeTrace:
    """Tests for summarize_trace / export_route_csv."""

    def test_empty(self):
        trace = summarize_trace([])
        assert trace.points == 0
        assert trace.sampling is None
        assert trace.bounds is None

    def test_summary(self):
        pts = [
            GeoPoint(25.20, 55.27, T0_MS, {"accuracy": 5.0}),
            GeoPoint(25.201, 55.28, T0_MS + 30_000),
            GeoPoint(25.202, 55.26, T0_MS + 30_000, {"accuracy": -1}),
        ]
        trace = summarize_trace(pts)
        assert trace.points == 3
        assert trace.first_ms == T0_MS
        assert trace.last_ms == T0_MS + 30_000
        assert trace.duplicate_timestamps == 1
        assert trace.with_accuracy == 1
        assert trace.bounds == (25.20, 55.26, 25.202, 55.28)
        # the second sample at T0+30s jumps ~2 km in zero time
        assert trace.rejected == 1
        assert trace.raw_distance_km > 2.0

    def test_export_route_csv(self, tmp_path):
        out = tmp_path / "route.csv"
        export_route_csv([GeoPoint(25.2, 55.27, T0_MS, {"accuracy": 5.0, "speed": 3.0})], out, "Asia/Dubai")
        with out.open(encoding="utf-8", newline="") as f:
            rows = list(csv.DictReader(f))
        assert rows[0]["time_local"] == "2025-01-01 12:00:00+04:00"
        assert rows[0]["epoch_ms"] == str(T0_MS)
        assert rows[0]["accuracy_m"] == "5.0"
        assert rows[0]["speed"] == "3.0"
        assert rows[0]["heading"] == ""
