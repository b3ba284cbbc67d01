"""Trip distance accumulation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from trip_analyze.geo import haversine_km
from trip_analyze.models import GeoPoint

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DistanceParams:
    """Accumulator options.

    ``max_segment_km`` is a guard rail for unfiltered traces: any single
    segment longer than this is treated as a GPS jump and skipped. None
    disables it.
    """

    max_segment_km: float | None = None

    def __post_init__(self) -> None:
        if self.max_segment_km is not None and self.max_segment_km <= 0:
            raise ValueError(f"max_segment_km must be positive or None, got {self.max_segment_km!r}")


# Guard rail used by callers that accumulate raw (unfiltered) traces.
UNFILTERED_DISTANCE = DistanceParams(max_segment_km=10.0)


def trip_distance_km(points: Sequence[GeoPoint], params: DistanceParams | None = None) -> float:
    """Sum haversine distances between consecutive points, in kilometers.

    Points are used in the given order; fewer than two points yield 0.
    """

    if params is None:
        params = DistanceParams()
    total = 0.0
    skipped = 0
    for prev, cur in zip(points, points[1:]):
        d = haversine_km(prev.latitude, prev.longitude, cur.latitude, cur.longitude)
        if params.max_segment_km is not None and d > params.max_segment_km:
            skipped += 1
            continue
        total += d
    if skipped:
        logger.info("skipped %s segment(s) longer than %.1fkm", skipped, params.max_segment_km)
    return total
