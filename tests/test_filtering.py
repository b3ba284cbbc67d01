"""Tests for GPS anomaly filtering."""

import pytest

from trip_analyze.filtering import FilterParams, filter_location_points


class TestFilterParams:
    """Tests for FilterParams validation."""

    def test_defaults(self):
        params = FilterParams()
        assert params.max_speed_kmh == 180.0
        assert params.max_acceleration_ms2 == 5.0
        assert params.min_accuracy_m == 100.0

    @pytest.mark.parametrize(
        "kwargs",
        [{"max_speed_kmh": 0}, {"max_acceleration_ms2": -1}, {"min_accuracy_m": 0}],
    )
    def test_rejects_non_positive(self, kwargs):
        with pytest.raises(ValueError):
            FilterParams(**kwargs)


class TestFilterLocationPoints:
    """Tests for filter_location_points."""

    def test_empty(self):
        assert filter_location_points([]) == []

    def test_single_point_retained(self, point):
        p = point(0, 0)
        assert filter_location_points([p]) == [p]

    def test_clean_trace_unchanged(self, point):
        """100 m every 10 s (36 km/h) passes untouched."""
        pts = [point(100 * k, 10 * k, accuracy=8.0) for k in range(10)]
        assert filter_location_points(pts) == pts

    def test_output_is_subsequence_in_time_order(self, point):
        """Unsorted input comes back sorted."""
        pts = [point(100 * k, 10 * k) for k in range(5)]
        shuffled = [pts[3], pts[0], pts[4], pts[1], pts[2]]
        assert filter_location_points(shuffled) == pts

    def test_first_point_always_retained(self, point):
        """Even with poor accuracy, the first point is kept."""
        first = point(0, 0, accuracy=500.0)
        rest = [point(100 * k, 10 * k) for k in range(1, 4)]
        out = filter_location_points([first, *rest])
        assert out[0] == first
        assert len(out) == 4

    def test_speed_outlier_removed(self, point):
        """A 50 km jump in 10 s is dropped."""
        pts = [point(0, 0), point(100, 10), point(50_000, 20), point(300, 30)]
        out = filter_location_points(pts)
        assert out == [pts[0], pts[1], pts[3]]

    def test_compares_with_last_retained_point(self, point):
        """Two consistent outliers in a row cannot validate each other."""
        pts = [point(0, 0), point(50_000, 10), point(50_000, 20), point(100, 30)]
        out = filter_location_points(pts)
        assert out == [pts[0], pts[3]]

    def test_poor_accuracy_removed(self, point):
        pts = [point(0, 0), point(100, 10, accuracy=250.0), point(200, 20, accuracy=20.0)]
        out = filter_location_points(pts)
        assert out == [pts[0], pts[2]]

    def test_unknown_accuracy_is_not_rejected(self, point):
        """Devices report -1 when they have no accuracy estimate."""
        pts = [point(0, 0), point(100, 10, accuracy=-1.0), point(200, 20, accuracy=0.0)]
        assert filter_location_points(pts) == pts

    def test_accuracy_threshold_is_configurable(self, point):
        pts = [point(0, 0), point(100, 10, accuracy=30.0)]
        out = filter_location_points(pts, FilterParams(min_accuracy_m=20.0))
        assert out == [pts[0]]

    def test_zero_elapsed_time_same_place_kept(self, point):
        pts = [point(0, 0), point(0.2, 0)]
        assert filter_location_points(pts) == pts

    def test_zero_elapsed_time_jump_removed(self, point):
        pts = [point(0, 0), point(100, 0), point(200, 20)]
        out = filter_location_points(pts)
        assert out == [pts[0], pts[2]]

    def test_acceleration_outlier_removed(self, point):
        """36 km/h, then 150 km/h two seconds later: under max speed but ~15.8 m/s2."""
        pts = [point(0, 0), point(100, 10), point(100 + 150 / 3.6 * 2, 12)]
        out = filter_location_points(pts)
        assert out == pts[:2]

    def test_acceleration_not_checked_on_first_interval(self, point):
        """With a single retained point there is no previous speed yet."""
        pts = [point(0, 0), point(80, 2)]  # 144 km/h right away
        assert filter_location_points(pts) == pts

    def test_custom_speed_limit(self, point):
        pts = [point(0, 0), point(500, 10)]  # 180 km/h
        out = filter_location_points(pts, FilterParams(max_speed_kmh=120.0))
        assert out == [pts[0]]
