"""Movement classification from acceleration windows."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from trip_analyze.frequency import analyze_frequency_domain
from trip_analyze.models import (
    AccelerationSample,
    ClassificationDetails,
    ClassificationResult,
    MovementType,
    PatternMatches,
)
from trip_analyze.patterns import VEHICLE_PATTERNS, WALKING_PATTERNS, pattern_match_score

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ClassifierParams:
    """Decision thresholds for :func:`classify_movement`."""

    # Mean magnitude below which the device is considered (partly) at rest.
    stationary_magnitude: float = 0.3
    stationary_threshold: float = 0.8
    pattern_threshold: float = 0.6
    unknown_confidence: float = 0.3

    def __post_init__(self) -> None:
        if self.stationary_magnitude <= 0:
            raise ValueError(f"stationary_magnitude must be positive, got {self.stationary_magnitude!r}")
        for name in ("stationary_threshold", "pattern_threshold", "unknown_confidence"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be within [0, 1], got {value!r}")


def stationary_confidence(samples: Sequence[AccelerationSample], threshold: float = 0.3) -> float:
    """Confidence that the device is at rest, from its mean magnitude.

    0 at or above ``threshold``, rising linearly to 1 as the mean magnitude
    approaches 0. An empty window gives 0.
    """

    if not samples:
        return 0.0
    avg = sum(s.magnitude for s in samples) / len(samples)
    if avg >= threshold:
        return 0.0
    return 1.0 - min(1.0, avg / threshold)


def classify_movement(
    samples: Sequence[AccelerationSample],
    params: ClassifierParams | None = None,
) -> ClassificationResult:
    """Classify one acceleration window as stationary, walking or vehicle.

    Rules, first match wins:
      1. stationary confidence above ``stationary_threshold`` -> STATIONARY;
      2. vehicle match beats walking match and exceeds ``pattern_threshold`` -> VEHICLE;
      3. walking match exceeds ``pattern_threshold`` -> WALKING;
      4. otherwise UNKNOWN with ``unknown_confidence``.

    Args:
        samples: Time-ordered window, ideally 10 samples or more.
        params: Decision thresholds.

    Returns:
        ClassificationResult including all sub-scores.
    """

    if params is None:
        params = ClassifierParams()

    freq = analyze_frequency_domain(samples)
    vehicle_match = pattern_match_score(freq, VEHICLE_PATTERNS)
    walking_match = pattern_match_score(freq, WALKING_PATTERNS)
    still = stationary_confidence(samples, params.stationary_magnitude)

    if still > params.stationary_threshold:
        kind, confidence = MovementType.STATIONARY, still
    elif vehicle_match > walking_match and vehicle_match > params.pattern_threshold:
        kind, confidence = MovementType.VEHICLE, vehicle_match
    elif walking_match > params.pattern_threshold:
        kind, confidence = MovementType.WALKING, walking_match
    else:
        kind, confidence = MovementType.UNKNOWN, params.unknown_confidence

    logger.debug(
        "classified %s samples as %s (%.2f): vehicle=%.2f walking=%.2f stationary=%.2f",
        len(samples),
        kind.value,
        confidence,
        vehicle_match,
        walking_match,
        still,
    )
    return ClassificationResult(
        type=kind,
        confidence=confidence,
        details=ClassificationDetails(
            vehicle_confidence=vehicle_match,
            walking_confidence=walking_match,
            stationary_confidence=still,
            frequency_signature=freq,
            pattern_matches=PatternMatches(
                vehicle_pattern_match=vehicle_match,
                walking_pattern_match=walking_match,
            ),
        ),
    )
