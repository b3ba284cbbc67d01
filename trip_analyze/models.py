"""Data models for location traces, stops and movement classification."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Final, Mapping


class MovementType(str, Enum):
    """Detected device motion mode."""

    STATIONARY = "STATIONARY"
    WALKING = "WALKING"
    VEHICLE = "VEHICLE"
    UNKNOWN = "UNKNOWN"


class CompletionStatus(str, Enum):
    """Whether a trip ended where it was expected to end."""

    COMPLETED = "COMPLETED"
    INCOMPLETE = "INCOMPLETE"


def _metadata_number(metadata: Mapping[str, Any], key: str) -> float | None:
    value = metadata.get(key)
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True, slots=True)
class GeoPoint:
    """A single location sample.

    Attributes:
        latitude: Latitude in decimal degrees.
        longitude: Longitude in decimal degrees.
        timestamp_ms: Unix epoch milliseconds.
        metadata: Opaque per-point data (accuracy, speed, heading, source, ...).
            Only ``accuracy``, ``speed`` and ``heading`` are ever read.
    """

    latitude: float
    longitude: float
    timestamp_ms: int
    metadata: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        # Freeze the caller's dict so the point stays immutable.
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    @property
    def timestamp_s(self) -> float:
        """Unix epoch seconds as float."""

        return self.timestamp_ms / 1000.0

    @property
    def accuracy_m(self) -> float | None:
        """Horizontal accuracy in meters, or None when unknown.

        Devices report -1 (or 0) when they have no estimate; those values
        are treated as unknown.
        """

        acc = _metadata_number(self.metadata, "accuracy")
        if acc is None or acc <= 0:
            return None
        return acc

    @property
    def speed(self) -> float | None:
        return _metadata_number(self.metadata, "speed")

    @property
    def heading(self) -> float | None:
        return _metadata_number(self.metadata, "heading")

    def to_dict(self) -> dict[str, Any]:
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "timestamp": self.timestamp_ms,
            "metadata": dict(self.metadata),
        }


@dataclass(frozen=True, slots=True)
class StopPoint:
    """A dwell interval inferred from a trace.

    Note:
        ``latitude``/``longitude`` are the centroid of the clustered samples.
    """

    latitude: float
    longitude: float
    start_ms: int
    end_ms: int
    duration_ms: int
    confidence: float
    points: int

    @property
    def duration_seconds(self) -> float:
        return self.duration_ms / 1000.0

    @property
    def duration_minutes(self) -> float:
        """Duration in minutes (display unit)."""

        return self.duration_ms / 60_000.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "startTime": self.start_ms,
            "endTime": self.end_ms,
            "duration": self.duration_ms,
            "confidence": self.confidence,
        }


@dataclass(frozen=True, slots=True)
class AccelerationSample:
    """One reading of a 3-axis accelerometer plus its magnitude.

    Attributes:
        x: Lateral axis in m/s^2.
        y: Vertical axis in m/s^2 (used for frequency analysis).
        z: Longitudinal axis in m/s^2.
        magnitude: Vector magnitude in m/s^2.
        timestamp_ms: Sample time in milliseconds (any monotonic origin).
    """

    x: float
    y: float
    z: float
    magnitude: float
    timestamp_ms: float

    @classmethod
    def from_xyz(cls, x: float, y: float, z: float, timestamp_ms: float) -> AccelerationSample:
        """Build a sample, deriving the Euclidean magnitude."""

        return cls(x=x, y=y, z=z, magnitude=(x * x + y * y + z * z) ** 0.5, timestamp_ms=timestamp_ms)


@dataclass(frozen=True, slots=True)
class FrequencyData:
    """Cheap spectral summary of an acceleration window.

    Attributes:
        peak_frequency: Whole-window zero-crossing frequency in Hz, None when
            the window was too short to analyze.
        spectral_energy: Mean absolute vertical acceleration.
        dominant_frequencies: Up to 3 per-segment frequencies, descending.
        spectral_centroid: Mean of all per-segment frequencies.
    """

    peak_frequency: float | None
    spectral_energy: float
    dominant_frequencies: tuple[float, ...]
    spectral_centroid: float

    @classmethod
    def empty(cls) -> FrequencyData:
        return cls(peak_frequency=None, spectral_energy=0.0, dominant_frequencies=(), spectral_centroid=0.0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "peakFrequency": self.peak_frequency,
            "spectralEnergy": self.spectral_energy,
            "dominantFrequencies": list(self.dominant_frequencies),
            "spectralCentroid": self.spectral_centroid,
        }


@dataclass(frozen=True, slots=True)
class PatternMatches:
    vehicle_pattern_match: float
    walking_pattern_match: float


@dataclass(frozen=True, slots=True)
class ClassificationDetails:
    """Per-type confidences and the signals they were derived from."""

    vehicle_confidence: float
    walking_confidence: float
    stationary_confidence: float
    frequency_signature: FrequencyData
    pattern_matches: PatternMatches


@dataclass(frozen=True, slots=True)
class ClassificationResult:
    """Movement classification for one acceleration window."""

    type: MovementType
    confidence: float
    details: ClassificationDetails

    def to_dict(self) -> dict[str, Any]:
        d = self.details
        return {
            "type": self.type.value,
            "confidence": self.confidence,
            "details": {
                "vehicleConfidence": d.vehicle_confidence,
                "walkingConfidence": d.walking_confidence,
                "stationaryConfidence": d.stationary_confidence,
                "frequencySignature": d.frequency_signature.to_dict(),
                "patternMatches": {
                    "vehiclePatternMatch": d.pattern_matches.vehicle_pattern_match,
                    "walkingPatternMatch": d.pattern_matches.walking_pattern_match,
                },
            },
        }


DEFAULT_TZ: Final[str] = "UTC"

# Minimum number of acceleration samples for a meaningful window.
MIN_ACCEL_SAMPLES: Final[int] = 10
