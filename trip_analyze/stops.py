"""Stop-point detection and reporting."""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Final, Iterable, Sequence

from trip_analyze.geo import haversine_m, is_inside_circle
from trip_analyze.models import DEFAULT_TZ, GeoPoint, StopPoint
from trip_analyze.timeutils import dt_from_epoch_ms

logger = logging.getLogger(__name__)

# Duration at which the duration term of the confidence saturates.
FULL_CONFIDENCE_MS: Final[int] = 10 * 60 * 1000
# Sample count at which the sample term of the confidence saturates.
FULL_CONFIDENCE_POINTS: Final[int] = 4


@dataclass(frozen=True, slots=True)
class StopParams:
    """Parameters controlling stop segmentation."""

    min_duration_ms: int = 3 * 60 * 1000
    # Samples farther than this from the cluster anchor end the cluster.
    max_radius_m: float = 50.0
    min_confidence: float = 0.6

    def __post_init__(self) -> None:
        if self.min_duration_ms < 0:
            raise ValueError(f"min_duration_ms must be >= 0, got {self.min_duration_ms!r}")
        if self.max_radius_m <= 0:
            raise ValueError(f"max_radius_m must be positive, got {self.max_radius_m!r}")
        if not 0.0 <= self.min_confidence <= 1.0:
            raise ValueError(f"min_confidence must be within [0, 1], got {self.min_confidence!r}")


def stop_confidence(duration_ms: int, spread_m: float, points: int, max_radius_m: float) -> float:
    """Score how likely a cluster is a real stop, in [0, 1].

    Longer dwell, more samples and a tighter spread around the centroid
    all increase the score. The sample term depends on the count alone, so
    the same samples spread over a longer dwell never score lower.

    Args:
        duration_ms: Time between first and last clustered sample.
        spread_m: Largest distance of a clustered sample from the centroid.
        points: Number of clustered samples.
        max_radius_m: Cluster radius the spread is normalized against.
    """

    if duration_ms <= 0 or points <= 0:
        return 0.0
    count_factor = min(1.0, (points - 1) / (FULL_CONFIDENCE_POINTS - 1))
    duration_factor = min(1.0, duration_ms / FULL_CONFIDENCE_MS)
    tightness = 1.0 - min(1.0, spread_m / max_radius_m) if max_radius_m > 0 else 0.0
    return min(1.0, count_factor * 0.3 + duration_factor * 0.6 + tightness * 0.1)


def detect_stop_points(
    points: Sequence[GeoPoint],
    params: StopParams | None = None,
) -> list[StopPoint]:
    """Find intervals where the trace stayed within a small radius.

    A candidate cluster is anchored at its first sample and grows while
    following samples stay within ``max_radius_m`` of the anchor. The first
    sample outside closes it and anchors the next candidate, so stops are
    never merged across a moving gap. A cluster still open at the end of the
    trace is closed as well.

    Args:
        points: Trace, filtered or raw (can be unsorted).
        params: Segmentation parameters.

    Returns:
        Stops in time order.
    """

    if params is None:
        params = StopParams()
    if len(points) < 2:
        return []

    pts = sorted(points, key=lambda p: p.timestamp_ms)
    stops: list[StopPoint] = []
    cluster: list[GeoPoint] = [pts[0]]

    for cur in pts[1:]:
        anchor = cluster[0]
        if is_inside_circle(cur.latitude, cur.longitude, anchor.latitude, anchor.longitude, params.max_radius_m):
            cluster.append(cur)
            continue
        _close_cluster(cluster, params, stops)
        cluster = [cur]

    _close_cluster(cluster, params, stops)
    return stops


def _close_cluster(cluster: Sequence[GeoPoint], params: StopParams, stops: list[StopPoint]) -> None:
    if len(cluster) < 2:
        return
    start_ms = cluster[0].timestamp_ms
    end_ms = cluster[-1].timestamp_ms
    duration_ms = end_ms - start_ms
    if duration_ms < params.min_duration_ms:
        return

    n = len(cluster)
    lat = sum(p.latitude for p in cluster) / n
    lon = sum(p.longitude for p in cluster) / n
    spread_m = max(haversine_m(lat, lon, p.latitude, p.longitude) for p in cluster)
    confidence = stop_confidence(duration_ms, spread_m, n, params.max_radius_m)
    if confidence < params.min_confidence:
        logger.debug(
            "discard stop candidate %s..%s: confidence %.2f < %.2f",
            start_ms,
            end_ms,
            confidence,
            params.min_confidence,
        )
        return

    stops.append(
        StopPoint(
            latitude=lat,
            longitude=lon,
            start_ms=start_ms,
            end_ms=end_ms,
            duration_ms=duration_ms,
            confidence=confidence,
            points=n,
        )
    )


def format_hhmmss(seconds: float) -> str:
    s = int(round(max(0.0, seconds)))
    h = s // 3600
    m = (s % 3600) // 60
    sec = s % 60
    return f"{h:02d}:{m:02d}:{sec:02d}"


def write_stops_csv(stops: Sequence[StopPoint], out_path: str | Path, tz_name: str = DEFAULT_TZ) -> None:
    """Write detected stops to CSV."""

    p = Path(out_path)
    with p.open("w", encoding="utf-8", newline="") as f:
        w = csv.DictWriter(
            f,
            fieldnames=[
                "stop_id",
                "start_time",
                "end_time",
                "duration_seconds",
                "duration_hhmmss",
                "latitude",
                "longitude",
                "confidence",
                "points",
                "start_epoch_ms",
                "end_epoch_ms",
            ],
        )
        w.writeheader()
        for i, s in enumerate(stops, start=1):
            w.writerow(
                {
                    "stop_id": i,
                    "start_time": dt_from_epoch_ms(s.start_ms, tz_name).isoformat(sep=" "),
                    "end_time": dt_from_epoch_ms(s.end_ms, tz_name).isoformat(sep=" "),
                    "duration_seconds": f"{s.duration_seconds:.3f}",
                    "duration_hhmmss": format_hhmmss(s.duration_seconds),
                    "latitude": f"{s.latitude:.7f}",
                    "longitude": f"{s.longitude:.7f}",
                    "confidence": f"{s.confidence:.3f}",
                    "points": s.points,
                    "start_epoch_ms": s.start_ms,
                    "end_epoch_ms": s.end_ms,
                }
            )


@dataclass(frozen=True, slots=True)
class StopsTotal:
    """Total dwell summary."""

    stops: int
    total_seconds: float

    @property
    def total_hhmmss(self) -> str:
        return format_hhmmss(self.total_seconds)


def sum_stops(stops: Iterable[StopPoint]) -> StopsTotal:
    """Sum stop durations."""

    total = 0.0
    count = 0
    for s in stops:
        total += s.duration_seconds
        count += 1
    return StopsTotal(stops=count, total_seconds=total)
