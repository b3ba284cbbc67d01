"""GPS anomaly filtering for raw location traces."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Final, Sequence

from trip_analyze.geo import haversine_km
from trip_analyze.models import GeoPoint

logger = logging.getLogger(__name__)

# Two samples with the same timestamp are only compatible if they are
# (almost) the same position.
DUPLICATE_RADIUS_M: Final[float] = 1.0


@dataclass(frozen=True, slots=True)
class FilterParams:
    """Plausibility limits for consecutive retained points."""

    max_speed_kmh: float = 180.0
    max_acceleration_ms2: float = 5.0
    # Points whose stated accuracy is numerically larger are dropped.
    min_accuracy_m: float = 100.0

    def __post_init__(self) -> None:
        if self.max_speed_kmh <= 0:
            raise ValueError(f"max_speed_kmh must be positive, got {self.max_speed_kmh!r}")
        if self.max_acceleration_ms2 <= 0:
            raise ValueError(f"max_acceleration_ms2 must be positive, got {self.max_acceleration_ms2!r}")
        if self.min_accuracy_m <= 0:
            raise ValueError(f"min_accuracy_m must be positive, got {self.min_accuracy_m!r}")


def filter_location_points(
    points: Sequence[GeoPoint],
    params: FilterParams | None = None,
) -> list[GeoPoint]:
    """Drop points implying impossible motion or poor accuracy.

    Each point is compared with the last *retained* point, so a burst of bad
    samples cannot validate one another. The first point (in time order) is
    always retained.

    Args:
        points: Raw trace (sorted by time if it is not already).
        params: Plausibility limits; defaults to :class:`FilterParams`.

    Returns:
        Ordered subsequence of the input.
    """

    if params is None:
        params = FilterParams()
    if not points:
        return []

    pts = sorted(points, key=lambda p: p.timestamp_ms)
    kept: list[GeoPoint] = [pts[0]]
    # Implied speed between the last two retained points (None until we have two).
    last_speed_kmh: float | None = None

    for cur in pts[1:]:
        prev = kept[-1]

        acc = cur.accuracy_m
        if acc is not None and acc > params.min_accuracy_m:
            logger.debug("drop t=%s: accuracy %.1fm > %.1fm", cur.timestamp_ms, acc, params.min_accuracy_m)
            continue

        dist_km = haversine_km(prev.latitude, prev.longitude, cur.latitude, cur.longitude)
        dt_s = (cur.timestamp_ms - prev.timestamp_ms) / 1000.0

        if dt_s <= 0:
            # Zero elapsed time: infinite implied speed unless it is the same place.
            if dist_km * 1000.0 <= DUPLICATE_RADIUS_M:
                kept.append(cur)
            else:
                logger.debug("drop t=%s: %.1fm jump with zero elapsed time", cur.timestamp_ms, dist_km * 1000.0)
            continue

        speed_kmh = dist_km / dt_s * 3600.0
        if speed_kmh > params.max_speed_kmh:
            logger.debug("drop t=%s: speed %.1fkm/h > %.1fkm/h", cur.timestamp_ms, speed_kmh, params.max_speed_kmh)
            continue

        if last_speed_kmh is not None:
            accel = abs(speed_kmh - last_speed_kmh) / 3.6 / dt_s
            if accel > params.max_acceleration_ms2:
                logger.debug(
                    "drop t=%s: acceleration %.2fm/s2 > %.2fm/s2",
                    cur.timestamp_ms,
                    accel,
                    params.max_acceleration_ms2,
                )
                continue

        kept.append(cur)
        last_speed_kmh = speed_kmh

    removed = len(pts) - len(kept)
    if removed:
        logger.info("location filter kept %s of %s points (%s removed)", len(kept), len(pts), removed)
    return kept
