"""Compact encoding of trip routes for storage.

Two steps:
  - adaptive sampling drops samples that add nothing (close in time and place
    to the last kept one);
  - delta encoding stores time and coordinates relative to the first sample,
    coordinates rounded to 6 decimals (~10cm).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Final, Mapping, Sequence

from trip_analyze.models import GeoPoint

KEEP_ALL_MAX_POINTS: Final[int] = 10
MAX_GAP_MS: Final[int] = 30_000
MIN_MOVE_DEG: Final[float] = 0.0001
COORD_DECIMALS: Final[int] = 6


@dataclass(frozen=True, slots=True)
class CompressedTrace:
    """Delta-encoded route.

    Each entry of ``points`` is ``{"t": ms since base, "lat": dlat, "lng": dlng}``
    plus ``"m"`` with the point metadata when it is not empty.
    """

    base_timestamp_ms: int
    base_latitude: float
    base_longitude: float
    points: tuple[dict[str, Any], ...]
    original_point_count: int

    @property
    def compression_ratio(self) -> float:
        if not self.points:
            return 1.0
        return self.original_point_count / len(self.points)

    def to_dict(self) -> dict[str, Any]:
        return {
            "baseTimestamp": self.base_timestamp_ms,
            "baseLocation": {"latitude": self.base_latitude, "longitude": self.base_longitude},
            "compressedPoints": [dict(p) for p in self.points],
            "originalPointCount": self.original_point_count,
            "compressionRatio": self.compression_ratio,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CompressedTrace:
        """Rebuild from :meth:`to_dict` output (e.g. after a JSON round trip)."""

        try:
            base = data["baseLocation"]
            return cls(
                base_timestamp_ms=int(data["baseTimestamp"]),
                base_latitude=float(base["latitude"]),
                base_longitude=float(base["longitude"]),
                points=tuple(dict(p) for p in data["compressedPoints"]),
                original_point_count=int(data.get("originalPointCount", len(data["compressedPoints"]))),
            )
        except KeyError as exc:
            raise ValueError(f"compressed trace is missing field {exc}") from exc


def _moved(a: GeoPoint, b: GeoPoint) -> float:
    # Planar degrees are enough for a "did it move at all" check.
    d_lat = a.latitude - b.latitude
    d_lon = a.longitude - b.longitude
    return (d_lat * d_lat + d_lon * d_lon) ** 0.5


def adaptive_sample(points: Sequence[GeoPoint]) -> list[GeoPoint]:
    """Keep the first and last sample plus every sample that moved or is far in time.

    Traces of up to 10 samples are returned whole.
    """

    pts = sorted(points, key=lambda p: p.timestamp_ms)
    if len(pts) <= KEEP_ALL_MAX_POINTS:
        return pts

    kept = [pts[0]]
    last = pts[0]
    for cur in pts[1:-1]:
        if cur.timestamp_ms - last.timestamp_ms > MAX_GAP_MS or _moved(last, cur) > MIN_MOVE_DEG:
            kept.append(cur)
            last = cur
    kept.append(pts[-1])
    return kept


def compress_trace(points: Sequence[GeoPoint]) -> CompressedTrace:
    """Sample and delta-encode a route."""

    sampled = adaptive_sample(points)
    if not sampled:
        return CompressedTrace(
            base_timestamp_ms=0,
            base_latitude=0.0,
            base_longitude=0.0,
            points=(),
            original_point_count=0,
        )

    base = sampled[0]
    encoded: list[dict[str, Any]] = []
    for p in sampled:
        entry: dict[str, Any] = {
            "t": p.timestamp_ms - base.timestamp_ms,
            "lat": round(p.latitude - base.latitude, COORD_DECIMALS),
            "lng": round(p.longitude - base.longitude, COORD_DECIMALS),
        }
        if p.metadata:
            entry["m"] = dict(p.metadata)
        encoded.append(entry)

    return CompressedTrace(
        base_timestamp_ms=base.timestamp_ms,
        base_latitude=base.latitude,
        base_longitude=base.longitude,
        points=tuple(encoded),
        original_point_count=len(points),
    )


def decompress_trace(compressed: CompressedTrace) -> list[GeoPoint]:
    """Expand a :class:`CompressedTrace` back into points (sampled subset only)."""

    return [
        GeoPoint(
            latitude=compressed.base_latitude + e["lat"],
            longitude=compressed.base_longitude + e["lng"],
            timestamp_ms=compressed.base_timestamp_ms + int(e["t"]),
            metadata=e.get("m", {}),
        )
        for e in compressed.points
    ]
