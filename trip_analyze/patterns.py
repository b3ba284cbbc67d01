"""Reference signal bands and frequency-signature matching."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Sequence

from trip_analyze.models import FrequencyData


@dataclass(frozen=True, slots=True)
class PatternBand:
    """A known frequency/energy band of a movement signature."""

    min_freq: float
    max_freq: float
    min_energy: float
    max_energy: float
    weight: float


VEHICLE_PATTERNS: Final[tuple[PatternBand, ...]] = (
    # engine idle
    PatternBand(min_freq=0.1, max_freq=0.6, min_energy=0.4, max_energy=3.5, weight=0.8),
    # road vibration
    PatternBand(min_freq=0.6, max_freq=1.2, min_energy=0.8, max_energy=6.0, weight=0.9),
    # bumps, hard acceleration
    PatternBand(min_freq=1.2, max_freq=2.5, min_energy=1.5, max_energy=10.0, weight=0.6),
    # sustained highway vibration
    PatternBand(min_freq=0.3, max_freq=0.9, min_energy=1.0, max_energy=4.0, weight=0.7),
)

WALKING_PATTERNS: Final[tuple[PatternBand, ...]] = (
    # slow cadence
    PatternBand(min_freq=1.2, max_freq=1.8, min_energy=0.6, max_energy=2.5, weight=0.8),
    # regular cadence
    PatternBand(min_freq=1.8, max_freq=2.2, min_energy=0.8, max_energy=3.5, weight=1.0),
    # fast walking / jogging
    PatternBand(min_freq=2.2, max_freq=3.5, min_energy=1.2, max_energy=5.0, weight=0.7),
    # step impacts
    PatternBand(min_freq=1.5, max_freq=2.8, min_energy=1.0, max_energy=4.0, weight=0.9),
)

FREQ_WEIGHT: Final[float] = 0.7
ENERGY_WEIGHT: Final[float] = 0.3


def band_match(value: float, low: float, high: float) -> float:
    """1 at the band midpoint, falling linearly to 0 at its edges and outside."""

    if value < low or value > high:
        return 0.0
    half_width = (high - low) / 2.0
    if half_width <= 0:
        return 1.0
    return 1.0 - min(1.0, abs(value - (low + high) / 2.0) / half_width)


def pattern_match_score(freq: FrequencyData, patterns: Sequence[PatternBand]) -> float:
    """Weighted similarity of a frequency signature to a band table, in [0, 1].

    A missing (or zero) peak frequency scores 0, as does a table whose
    weights sum to 0.
    """

    if not freq.peak_frequency:
        return 0.0

    total_match = 0.0
    total_weight = 0.0
    for band in patterns:
        freq_match = band_match(freq.peak_frequency, band.min_freq, band.max_freq)
        energy_match = band_match(freq.spectral_energy, band.min_energy, band.max_energy)
        total_match += (freq_match * FREQ_WEIGHT + energy_match * ENERGY_WEIGHT) * band.weight
        total_weight += band.weight

    return total_match / total_weight if total_weight > 0 else 0.0
