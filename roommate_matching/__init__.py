"""
Roommate Matching Engine

This package ranks prospective roommates for a viewer by comparing
ten-question lifestyle survey answers.

Key Design Decisions:
- Per-field linear distance with fixed, auditable field weights
- Integer scores 0-100, rounded half up
- Tags derived from fixed threshold rules, first three in field order
- Stateless ranking: viewer and candidate pool are explicit inputs
- Malformed candidates are reported per candidate, never fatal to a ranking
"""

from .exceptions import (
    RoommateMatchingError,
    MalformedAnswerSet,
    InvalidWeightConfiguration,
    FetchError,
)
from .schema import AnswerSet, Candidate, MatchResult, RankingResult, SortKey, SURVEY_FIELDS
from .configs.weights import FieldWeights, DEFAULT_FIELD_WEIGHTS
from .scoring import score, score_breakdown, derive_tags
from .ranking import Ranker, RankingConfig, rank

__version__ = "1.0.0"

__all__ = [
    "RoommateMatchingError",
    "MalformedAnswerSet",
    "InvalidWeightConfiguration",
    "FetchError",
    "AnswerSet",
    "Candidate",
    "MatchResult",
    "RankingResult",
    "SortKey",
    "SURVEY_FIELDS",
    "FieldWeights",
    "DEFAULT_FIELD_WEIGHTS",
    "score",
    "score_breakdown",
    "derive_tags",
    "Ranker",
    "RankingConfig",
    "rank",
]
