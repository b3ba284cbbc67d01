"""Trace overview (sampling, bounds, GPS jumps) and readable route export."""

from __future__ import annotations

import csv
import statistics
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

from trip_analyze.distance import trip_distance_km
from trip_analyze.filtering import filter_location_points
from trip_analyze.models import GeoPoint
from trip_analyze.timeutils import dt_from_epoch_ms


@dataclass(frozen=True, slots=True)
class SamplingStats:
    """Gaps between consecutive samples, in seconds."""

    intervals: int
    shortest_s: float
    median_s: float
    p95_s: float
    longest_s: float

    @property
    def rate_hz(self) -> float:
        return 1.0 / self.median_s if self.median_s > 0 else 0.0


def sampling_stats(timestamps_ms: Iterable[int]) -> SamplingStats | None:
    """Interval statistics of a set of timestamps (any order); None below two samples."""

    ts = sorted(timestamps_ms)
    gaps = sorted((b - a) / 1000.0 for a, b in zip(ts, ts[1:]))
    if not gaps:
        return None
    return SamplingStats(
        intervals=len(gaps),
        shortest_s=gaps[0],
        median_s=statistics.median(gaps),
        p95_s=gaps[int(0.95 * (len(gaps) - 1))],
        longest_s=gaps[-1],
    )


@dataclass(frozen=True, slots=True)
class TraceSummary:
    """What a raw trace looks like before analysis.

    Attributes:
        points: Number of samples.
        first_ms: Earliest timestamp, None for an empty trace.
        last_ms: Latest timestamp.
        sampling: Interval statistics, None below two samples.
        bounds: (min_lat, min_lon, max_lat, max_lon), None for an empty trace.
        duplicate_timestamps: Samples sharing a timestamp with an earlier one.
        with_accuracy: Samples carrying a usable accuracy value.
        rejected: Samples the default location filter would drop.
        raw_distance_km: Distance over the unfiltered trace, in time order.
    """

    points: int
    first_ms: int | None
    last_ms: int | None
    sampling: SamplingStats | None
    bounds: tuple[float, float, float, float] | None
    duplicate_timestamps: int
    with_accuracy: int
    rejected: int
    raw_distance_km: float


def summarize_trace(points: Sequence[GeoPoint]) -> TraceSummary:
    pts = sorted(points, key=lambda p: p.timestamp_ms)
    if not pts:
        return TraceSummary(
            points=0,
            first_ms=None,
            last_ms=None,
            sampling=None,
            bounds=None,
            duplicate_timestamps=0,
            with_accuracy=0,
            rejected=0,
            raw_distance_km=0.0,
        )

    lats = [p.latitude for p in pts]
    lons = [p.longitude for p in pts]
    return TraceSummary(
        points=len(pts),
        first_ms=pts[0].timestamp_ms,
        last_ms=pts[-1].timestamp_ms,
        sampling=sampling_stats(p.timestamp_ms for p in pts),
        bounds=(min(lats), min(lons), max(lats), max(lons)),
        duplicate_timestamps=len(pts) - len({p.timestamp_ms for p in pts}),
        with_accuracy=sum(1 for p in pts if p.accuracy_m is not None),
        rejected=len(pts) - len(filter_location_points(pts)),
        raw_distance_km=trip_distance_km(pts),
    )


def export_route_csv(points: Iterable[GeoPoint], out_path: str | Path, tz_name: str) -> None:
    """Write a route as a human-readable CSV.

    Columns: time_local (ISO, in ``tz_name``), epoch_ms, latitude, longitude,
    accuracy_m, speed, heading. Missing metadata is left empty.
    """

    def blank(value: float | None) -> float | str:
        return "" if value is None else value

    p = Path(out_path)
    with p.open("w", encoding="utf-8", newline="") as f:
        w = csv.writer(f)
        w.writerow(["time_local", "epoch_ms", "latitude", "longitude", "accuracy_m", "speed", "heading"])
        for pt in points:
            w.writerow(
                [
                    dt_from_epoch_ms(pt.timestamp_ms, tz_name).isoformat(sep=" "),
                    pt.timestamp_ms,
                    f"{pt.latitude:.7f}",
                    f"{pt.longitude:.7f}",
                    blank(pt.accuracy_m),
                    blank(pt.speed),
                    blank(pt.heading),
                ]
            )
