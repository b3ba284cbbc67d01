"""Shared builders for trace and accelerometer tests."""

from __future__ import annotations

import math
from typing import Callable

import pytest

from trip_analyze.models import AccelerationSample, GeoPoint

T0_MS = 1_735_718_400_000  # 2025-01-01 08:00:00 UTC
M_PER_DEG = 6_371_000.0 * math.pi / 180.0  # along a meridian / the equator


def deg(meters: float) -> float:
    """Meters -> degrees along a meridian (or the equator)."""

    return meters / M_PER_DEG


@pytest.fixture
def point() -> Callable[..., GeoPoint]:
    """Build a GeoPoint ``north_m`` / ``east_m`` meters from (0, 0) at ``t_s`` seconds."""

    def _make(north_m: float, t_s: float, east_m: float = 0.0, **metadata) -> GeoPoint:
        return GeoPoint(
            latitude=deg(north_m),
            longitude=deg(east_m),
            timestamp_ms=T0_MS + int(round(t_s * 1000)),
            metadata=metadata,
        )

    return _make


@pytest.fixture
def sine_samples() -> Callable[..., list[AccelerationSample]]:
    """Vertical sine oscillation sampled at ``rate_hz``."""

    def _make(freq_hz: float, amplitude: float, n: int, rate_hz: float = 20.0) -> list[AccelerationSample]:
        out = []
        for k in range(n):
            t_s = k / rate_hz
            y = amplitude * math.sin(2 * math.pi * freq_hz * t_s + 0.3)
            out.append(AccelerationSample.from_xyz(0.0, y, 0.0, t_s * 1000.0))
        return out

    return _make
