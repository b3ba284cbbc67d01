"""Temporal consistency for consecutive movement classifications."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Sequence

from trip_analyze.models import ClassificationResult, MovementType

logger = logging.getLogger(__name__)

# Vote order doubles as the tie-break: earlier types win ties.
_VOTE_ORDER = (MovementType.VEHICLE, MovementType.WALKING, MovementType.STATIONARY, MovementType.UNKNOWN)


@dataclass(frozen=True, slots=True)
class SmoothingParams:
    """Parameters for :func:`analyze_movement_sequence`."""

    min_history: int = 3
    # Share of the total vote the dominant type needs to override.
    dominance_ratio: float = 0.6
    current_weight: float = 1.0
    max_confidence: float = 0.95
    # Factor applied to the sub-confidences of non-dominant types.
    damping: float = 0.7

    def __post_init__(self) -> None:
        if self.min_history < 1:
            raise ValueError(f"min_history must be >= 1, got {self.min_history!r}")
        if not 0.0 < self.dominance_ratio <= 1.0:
            raise ValueError(f"dominance_ratio must be within (0, 1], got {self.dominance_ratio!r}")
        if self.current_weight < 0:
            raise ValueError(f"current_weight must be >= 0, got {self.current_weight!r}")
        if not 0.0 <= self.max_confidence <= 1.0:
            raise ValueError(f"max_confidence must be within [0, 1], got {self.max_confidence!r}")
        if not 0.0 <= self.damping <= 1.0:
            raise ValueError(f"damping must be within [0, 1], got {self.damping!r}")


def movement_votes(
    history: Sequence[ClassificationResult],
    current: ClassificationResult,
    current_weight: float = 1.0,
) -> dict[MovementType, float]:
    """Recency-weighted vote per movement type.

    History entry ``i`` (oldest first) votes with ``(i + 1) / len(history)``;
    the current classification adds ``current_weight``.
    """

    votes = {t: 0.0 for t in _VOTE_ORDER}
    n = len(history)
    for i, past in enumerate(history):
        votes[past.type] += (i + 1) / n
    votes[current.type] += current_weight
    return votes


def analyze_movement_sequence(
    history: Sequence[ClassificationResult],
    current: ClassificationResult,
    params: SmoothingParams | None = None,
) -> ClassificationResult:
    """Pull a classification toward the recently dominant movement type.

    With fewer than ``min_history`` prior results the current one is returned
    as is. Otherwise the dominant type (see :func:`movement_votes`) replaces
    the current type when it differs and holds more than ``dominance_ratio``
    of the total vote. The overridden confidence blends the current
    confidence (30%) with the dominant vote share (70%), capped at
    ``max_confidence``.

    Args:
        history: Prior results, oldest first. Owned by the caller.
        current: Newest classification.
        params: Smoothing parameters.

    Returns:
        ``current`` itself, or a new, overridden result.
    """

    if params is None:
        params = SmoothingParams()
    if len(history) < params.min_history:
        return current

    votes = movement_votes(history, current, params.current_weight)
    dominant = MovementType.UNKNOWN
    best = 0.0
    for kind in _VOTE_ORDER:
        if votes[kind] > best:
            best = votes[kind]
            dominant = kind

    total = sum(votes.values())
    share = best / total if total > 0 else 0.0
    if dominant == current.type or share <= params.dominance_ratio:
        return current

    adjusted = min(params.max_confidence, current.confidence * 0.3 + share * 0.7)
    d = current.details

    def _sub(kind: MovementType, value: float) -> float:
        return max(value, adjusted) if kind == dominant else value * params.damping

    logger.debug(
        "temporal override %s -> %s (share %.2f, confidence %.2f -> %.2f)",
        current.type.value,
        dominant.value,
        share,
        current.confidence,
        adjusted,
    )
    return ClassificationResult(
        type=dominant,
        confidence=adjusted,
        details=replace(
            d,
            vehicle_confidence=_sub(MovementType.VEHICLE, d.vehicle_confidence),
            walking_confidence=_sub(MovementType.WALKING, d.walking_confidence),
            stationary_confidence=_sub(MovementType.STATIONARY, d.stationary_confidence),
        ),
    )
