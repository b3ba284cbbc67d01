"""Trip-level analysis: filtered route, distance, stops and completion."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Sequence

from trip_analyze.distance import DistanceParams, trip_distance_km
from trip_analyze.filtering import FilterParams, filter_location_points
from trip_analyze.geo import haversine_km
from trip_analyze.models import ClassificationResult, CompletionStatus, GeoPoint, MovementType, StopPoint
from trip_analyze.stops import StopParams, detect_stop_points

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TripParams:
    """Everything :func:`analyze_trip` needs to know."""

    filter: FilterParams = field(default_factory=FilterParams)
    distance: DistanceParams = field(default_factory=DistanceParams)
    stops: StopParams = field(default_factory=StopParams)
    # A trip ending within this distance of its start/target counts as completed.
    near_km: float = 0.1
    # Looser radius around the start used for auto-completion.
    near_start_km: float = 0.3

    def __post_init__(self) -> None:
        if self.near_km <= 0 or self.near_start_km <= 0:
            raise ValueError("near_km and near_start_km must be positive")


@dataclass(frozen=True, slots=True)
class TripReport:
    """Result of analyzing one trip's trace."""

    distance_km: float
    route: tuple[GeoPoint, ...]
    stops: tuple[StopPoint, ...]
    total_points: int
    filtered_points: int
    # first to last retained point, the same span the distance covers
    duration_ms: int
    distance_to_start_km: float | None
    distance_to_target_km: float | None
    completion_status: CompletionStatus

    @property
    def average_speed_kmh(self) -> float:
        if self.duration_ms <= 0:
            return 0.0
        return self.distance_km / (self.duration_ms / 3_600_000.0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "distance": self.distance_km,
            "routePoints": [p.to_dict() for p in self.route],
            "stopPoints": [s.to_dict() for s in self.stops],
            "totalPointsCount": self.total_points,
            "filteredPointsCount": self.filtered_points,
            "durationMs": self.duration_ms,
            "averageSpeedKmh": self.average_speed_kmh,
            "distanceToStart": self.distance_to_start_km,
            "distanceToTargetEnd": self.distance_to_target_km,
            "completionStatus": self.completion_status.value,
        }


def analyze_trip(
    points: Sequence[GeoPoint],
    params: TripParams | None = None,
    start: tuple[float, float] | None = None,
    target_end: tuple[float, float] | None = None,
) -> TripReport:
    """Run the full trace pipeline for one trip.

    Distance and stops both come from the filtered route, so a single GPS
    outlier cannot split a stop in two.

    Args:
        points: Raw trace of the trip, including its end point.
        params: Pipeline parameters.
        start: Trip start (lat, lon); defaults to the first sample.
        target_end: Optional planned destination (lat, lon).

    Returns:
        TripReport.
    """

    if params is None:
        params = TripParams()

    raw = sorted(points, key=lambda p: p.timestamp_ms)
    route = filter_location_points(raw, params.filter)
    distance = trip_distance_km(route, params.distance)
    stops = detect_stop_points(route, params.stops)

    to_start: float | None = None
    to_target: float | None = None
    status = CompletionStatus.INCOMPLETE
    if route:
        end = route[-1]
        if start is None:
            start = (route[0].latitude, route[0].longitude)
        to_start = haversine_km(start[0], start[1], end.latitude, end.longitude)
        if target_end is not None:
            to_target = haversine_km(target_end[0], target_end[1], end.latitude, end.longitude)
        near_target = to_target is not None and to_target < params.near_km
        if to_start < params.near_km or near_target:
            status = CompletionStatus.COMPLETED

    duration_ms = route[-1].timestamp_ms - route[0].timestamp_ms if len(route) > 1 else 0
    report = TripReport(
        distance_km=distance,
        route=tuple(route),
        stops=tuple(stops),
        total_points=len(raw),
        filtered_points=len(route),
        duration_ms=duration_ms,
        distance_to_start_km=to_start,
        distance_to_target_km=to_target,
        completion_status=status,
    )
    logger.info(
        "trip: points=%s filtered=%s distance=%.3fkm stops=%s status=%s",
        report.total_points,
        report.filtered_points,
        report.distance_km,
        len(report.stops),
        report.completion_status.value,
    )
    return report


def should_auto_complete(
    report: TripReport,
    classification: ClassificationResult,
    params: TripParams | None = None,
) -> bool:
    """Decide whether an active trip can be closed without the driver.

    The device must have stopped moving (STATIONARY, or UNKNOWN) and the
    trip must end near its start (``near_start_km``) or near its target
    (``near_km``).
    """

    if params is None:
        params = TripParams()
    if classification.type not in (MovementType.STATIONARY, MovementType.UNKNOWN):
        return False
    if report.distance_to_start_km is not None and report.distance_to_start_km < params.near_start_km:
        return True
    return report.distance_to_target_km is not None and report.distance_to_target_km < params.near_km
