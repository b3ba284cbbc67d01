"""Frequency-domain features of an acceleration window.

The estimate is based on zero crossings of the vertical axis rather than a
real FFT. Pattern thresholds in :mod:`trip_analyze.patterns` are tuned
against this estimator, so keep the two in sync.
"""

from __future__ import annotations

import logging
from typing import Final, Sequence

from trip_analyze.models import MIN_ACCEL_SAMPLES, AccelerationSample, FrequencyData

logger = logging.getLogger(__name__)

SEGMENT_SIZE: Final[int] = 10
MIN_SEGMENT_SAMPLES: Final[int] = 5
TOP_FREQUENCIES: Final[int] = 3


def _sign(value: float) -> int:
    if value > 0:
        return 1
    if value < 0:
        return -1
    return 0


def count_zero_crossings(values: Sequence[float]) -> int:
    """Count sign changes, stepping over exact zeros.

    A run like ``1, 0, -1`` counts as one crossing.
    """

    if not values:
        return 0
    crossings = 0
    prev_sign = _sign(values[0])
    for v in values[1:]:
        sign = _sign(v)
        if sign != 0 and prev_sign != 0 and sign != prev_sign:
            crossings += 1
        if sign != 0:
            prev_sign = sign
    return crossings


def estimate_sampling_rate(samples: Sequence[AccelerationSample]) -> float:
    """Average sampling rate in Hz, 0 when it cannot be estimated."""

    if len(samples) < 2:
        return 0.0
    avg_dt_ms = (samples[-1].timestamp_ms - samples[0].timestamp_ms) / (len(samples) - 1)
    return 1000.0 / avg_dt_ms if avg_dt_ms > 0 else 0.0


def _crossing_frequency(samples: Sequence[AccelerationSample]) -> float | None:
    duration_s = (samples[-1].timestamp_ms - samples[0].timestamp_ms) / 1000.0
    if duration_s <= 0:
        return None
    return count_zero_crossings([s.y for s in samples]) / (2.0 * duration_s)


def analyze_frequency_domain(samples: Sequence[AccelerationSample]) -> FrequencyData:
    """Extract a cheap spectral signature from an acceleration window.

    Args:
        samples: Time-ordered samples; the ``y`` component is treated as vertical.

    Returns:
        FrequencyData. Windows shorter than 10 samples yield
        :meth:`FrequencyData.empty`.
    """

    if len(samples) < MIN_ACCEL_SAMPLES:
        return FrequencyData.empty()

    logger.debug("analyzing %s samples at ~%.1fHz", len(samples), estimate_sampling_rate(samples))

    peak = _crossing_frequency(samples)
    energy = sum(abs(s.y) for s in samples) / len(samples)

    segment_freqs: list[float] = []
    for i in range(len(samples) // SEGMENT_SIZE):
        segment = samples[i * SEGMENT_SIZE : (i + 1) * SEGMENT_SIZE]
        if len(segment) < MIN_SEGMENT_SAMPLES:
            continue
        freq = _crossing_frequency(segment)
        if freq is not None and freq > 0:
            segment_freqs.append(freq)

    # Every segment is weighted equally.
    centroid = sum(segment_freqs) / len(segment_freqs) if segment_freqs else 0.0

    return FrequencyData(
        peak_frequency=peak if peak is not None else 0.0,
        spectral_energy=energy,
        dominant_frequencies=tuple(sorted(segment_freqs, reverse=True)[:TOP_FREQUENCIES]),
        spectral_centroid=centroid,
    )
