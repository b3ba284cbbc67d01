"""Tests for trip distance accumulation."""

import pytest

from trip_analyze.distance import UNFILTERED_DISTANCE, DistanceParams, trip_distance_km
from trip_analyze.models import GeoPoint


def _pt(lat, lon, t):
    return GeoPoint(latitude=lat, longitude=lon, timestamp_ms=t)


class TestTripDistance:
    """Tests for trip_distance_km."""

    def test_empty_and_single(self):
        assert trip_distance_km([]) == 0.0
        assert trip_distance_km([_pt(0.0, 0.0, 0)]) == 0.0

    def test_two_degrees_on_equator(self):
        pts = [_pt(0.0, 0.0, 0), _pt(0.0, 1.0, 1), _pt(0.0, 2.0, 2)]
        assert trip_distance_km(pts) == pytest.approx(222.39, rel=0.01)

    def test_additive_over_split(self):
        """Distance of a route equals the sum over any split at a shared point."""
        pts = [_pt(25.0 + 0.001 * k, 55.0 + 0.0005 * (k % 3), k * 1000) for k in range(12)]
        whole = trip_distance_km(pts)
        for k in (1, 5, 10):
            assert whole == pytest.approx(trip_distance_km(pts[: k + 1]) + trip_distance_km(pts[k:]))

    def test_uses_given_order(self):
        """Points are not re-sorted."""
        a, b, c = _pt(0.0, 0.0, 0), _pt(0.0, 1.0, 1), _pt(0.0, 2.0, 2)
        assert trip_distance_km([a, c, b]) > trip_distance_km([a, b, c])

    def test_segment_guard_rail(self):
        """Segments beyond max_segment_km are skipped."""
        pts = [_pt(0.0, 0.0, 0), _pt(0.0, 0.01, 1), _pt(1.0, 0.01, 2)]
        assert trip_distance_km(pts) > 100.0
        assert trip_distance_km(pts, UNFILTERED_DISTANCE) == pytest.approx(1.112, rel=0.01)

    def test_invalid_guard_rail(self):
        with pytest.raises(ValueError):
            DistanceParams(max_segment_km=0)
