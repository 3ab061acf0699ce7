"""
Compatibility scoring between two survey answer sets.

Each survey field is compared independently and weighted:

    distance   = |viewer[field] - candidate[field]|          (0..4)
    similarity = (5 - distance) / 5, and 0.0 at distance 4
    raw        = 100 * sum(weight[field] * similarity[field])
    score      = round_half_up(raw)

Per-field linear distance keeps every axis separately weighted and
auditable (see score_breakdown). Cosine similarity over the raw answer
vector is not used.

Rounding is half up: 92.5 -> 93, 98.6 -> 99. The raw value is first
rounded to 9 decimals so float noise cannot turn an exact .5 into .4999.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np

from ..configs.weights import DEFAULT_FIELD_WEIGHTS, FieldWeights
from ..schema import AnswerSet, SCALE_MAX, SCALE_MIN, SURVEY_FIELDS

logger = logging.getLogger(__name__)

MAX_DISTANCE = SCALE_MAX - SCALE_MIN
ROUNDING_DECIMALS = 9


def round_half_up(value: float) -> int:
    """Round a non-negative percentage to the nearest integer, halves upward."""
    return int(math.floor(round(value, ROUNDING_DECIMALS) + 0.5))


def similarity_from_distance(distance: np.ndarray) -> np.ndarray:
    """
    Map per-field answer distances to similarities in [0, 1].

    Opposite ends of the scale (distance 4) share nothing.
    """
    distance = np.asarray(distance, dtype=np.float64)
    similarity = (SCALE_MAX - distance) / SCALE_MAX
    return np.where(distance >= MAX_DISTANCE, 0.0, similarity)


def _weighted_similarity(viewer: AnswerSet, candidate: AnswerSet, weights: FieldWeights):
    distance = np.abs(viewer.to_vector() - candidate.to_vector())
    similarity = similarity_from_distance(distance)
    raw = float(np.dot(weights.as_vector(), similarity)) * 100
    return distance, similarity, raw


def score(
    viewer: Any,
    candidate: Any,
    weights: Optional[FieldWeights] = None
) -> int:
    """
    Compute the compatibility score between two answer sets.

    The score is symmetric, deterministic and bounded to [0, 100].

    Args:
        viewer: AnswerSet (or mapping) of the person viewing matches
        candidate: AnswerSet (or mapping) of the prospective roommate
        weights: Field weight table (default: DEFAULT_FIELD_WEIGHTS)

    Returns:
        Integer compatibility score

    Raises:
        MalformedAnswerSet: If either answer set is missing a field or out of range
    """
    viewer = AnswerSet.coerce(viewer)
    candidate = AnswerSet.coerce(candidate)
    weights = weights or DEFAULT_FIELD_WEIGHTS

    _, _, raw = _weighted_similarity(viewer, candidate, weights)
    return round_half_up(raw)


def weighted_distance(
    viewer: Any,
    candidate: Any,
    weights: Optional[FieldWeights] = None
) -> float:
    """
    Weighted mean of normalized answer distances, in [0, 1].

    Independent of the similarity curve; used to audit that scores fall as
    answers drift apart.
    """
    viewer = AnswerSet.coerce(viewer)
    candidate = AnswerSet.coerce(candidate)
    weights = weights or DEFAULT_FIELD_WEIGHTS

    distance = np.abs(viewer.to_vector() - candidate.to_vector()) / MAX_DISTANCE
    return float(np.dot(weights.as_vector(), distance))


@dataclass(frozen=True)
class FieldContribution:
    """How one survey field contributed to a score."""
    field: str
    viewer_value: int
    candidate_value: int
    distance: int
    similarity: float
    weight: float
    points: float  # Score points earned by this field
    points_lost: float  # Score points this field could have added

    def to_dict(self) -> Dict[str, Any]:
        return {
            "field": self.field,
            "viewer_value": self.viewer_value,
            "candidate_value": self.candidate_value,
            "distance": self.distance,
            "similarity": self.similarity,
            "weight": self.weight,
            "points": self.points,
            "points_lost": self.points_lost,
        }


@dataclass(frozen=True)
class ScoreBreakdown:
    """
    Per-field explanation of a compatibility score.

    Attributes:
        contributions: One entry per survey field, in survey order
        raw_score: Unrounded score in [0, 100]
        score: Rounded score, identical to score()
    """
    contributions: List[FieldContribution] = field(default_factory=list)
    raw_score: float = 0.0
    score: int = 0

    def top_agreements(self, n: int = 3) -> List[FieldContribution]:
        """Fields earning the most points."""
        ranked = sorted(self.contributions, key=lambda c: c.points, reverse=True)
        return ranked[:n]

    def top_conflicts(self, n: int = 3) -> List[FieldContribution]:
        """Fields losing the most points; fields that lost nothing are left out."""
        ranked = sorted(
            (c for c in self.contributions if c.points_lost > 0),
            key=lambda c: c.points_lost,
            reverse=True
        )
        return ranked[:n]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "raw_score": self.raw_score,
            "contributions": [c.to_dict() for c in self.contributions],
        }


def score_breakdown(
    viewer: Any,
    candidate: Any,
    weights: Optional[FieldWeights] = None
) -> ScoreBreakdown:
    """
    Explain a compatibility score field by field.

    Args:
        viewer: AnswerSet (or mapping) of the person viewing matches
        candidate: AnswerSet (or mapping) of the prospective roommate
        weights: Field weight table (default: DEFAULT_FIELD_WEIGHTS)

    Returns:
        ScoreBreakdown whose score equals score(viewer, candidate, weights)
    """
    viewer = AnswerSet.coerce(viewer)
    candidate = AnswerSet.coerce(candidate)
    weights = weights or DEFAULT_FIELD_WEIGHTS

    distance, similarity, raw = _weighted_similarity(viewer, candidate, weights)
    weight_vector = weights.as_vector()

    contributions = [
        FieldContribution(
            field=name,
            viewer_value=viewer[name],
            candidate_value=candidate[name],
            distance=int(distance[i]),
            similarity=float(similarity[i]),
            weight=float(weight_vector[i]),
            points=float(weight_vector[i] * similarity[i] * 100),
            points_lost=float(weight_vector[i] * (1 - similarity[i]) * 100),
        )
        for i, name in enumerate(SURVEY_FIELDS)
    ]

    return ScoreBreakdown(contributions=contributions, raw_score=raw, score=round_half_up(raw))
