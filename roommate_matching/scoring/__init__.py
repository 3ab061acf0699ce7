"""Compatibility scoring and tag derivation."""

from .scorer import (
    score,
    score_breakdown,
    weighted_distance,
    round_half_up,
    ScoreBreakdown,
    FieldContribution,
)
from .tags import derive_tags, TAG_RULES, MAX_TAGS

__all__ = [
    "score",
    "score_breakdown",
    "weighted_distance",
    "round_half_up",
    "ScoreBreakdown",
    "FieldContribution",
    "derive_tags",
    "TAG_RULES",
    "MAX_TAGS",
]
