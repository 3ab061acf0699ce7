"""
Ranking of a candidate pool for one viewer.

For each candidate the ranker computes the compatibility score and the
descriptive tags, then orders the results:

- SCORE: highest score first
- AGE: youngest first, candidates without an age last
- ARRIVAL: input order

Both sorts are stable, so candidates that tie keep their input order.

Candidates are independent of each other, so scoring can run on a
joblib thread pool. Results are collected in input order before the
single final sort.

A candidate whose answers are malformed is left out of the matches and
reported in RankingResult.errors; the rest of the pool is still ranked.
"""

import json
import logging
from dataclasses import dataclass, asdict, replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from joblib import Parallel, delayed

from ..configs.weights import DEFAULT_FIELD_WEIGHTS, FieldWeights
from ..exceptions import MalformedAnswerSet
from ..schema import (
    AnswerSet,
    Candidate,
    CandidateError,
    MatchResult,
    RankingResult,
    SortKey,
)
from ..scoring.scorer import score
from ..scoring.tags import derive_tags

logger = logging.getLogger(__name__)


@dataclass
class RankingConfig:
    """
    Configuration for ranking.

    Attributes:
        default_sort: Sort key used when a call does not name one
        n_jobs: Scoring threads (1 = sequential, -1 = one per CPU)
    """
    default_sort: str = "score"
    n_jobs: int = 1

    def validate(self) -> None:
        """Validate configuration values."""
        SortKey.parse(self.default_sort)
        if isinstance(self.n_jobs, bool) or not isinstance(self.n_jobs, int):
            raise ValueError(f"n_jobs must be an integer, got {self.n_jobs!r}")
        if self.n_jobs == 0 or self.n_jobs < -1:
            raise ValueError(f"n_jobs must be a positive integer or -1, got {self.n_jobs}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "RankingConfig":
        """Create from dictionary."""
        return cls(**d)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "RankingConfig":
        """Create from main config dictionary."""
        ranking_config = config.get("ranking", {}) or {}

        return cls(
            default_sort=ranking_config.get("default_sort", "score"),
            n_jobs=ranking_config.get("n_jobs", 1)
        )

    def save(self, filepath: str) -> None:
        """Save to JSON file."""
        with open(filepath, "w") as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.info(f"Saved ranking config to {filepath}")

    @classmethod
    def load(cls, filepath: str) -> "RankingConfig":
        """Load from JSON file."""
        with open(filepath, "r") as f:
            d = json.load(f)
        return cls.from_dict(d)


class Ranker:
    """
    Scores, tags and orders candidates for a viewer.

    The ranker holds only read-only configuration; every rank() call is
    independent and the viewer is always passed explicitly.

    Attributes:
        weights: Field weight table used for scoring
        config: RankingConfig with sort and parallelism settings
    """

    def __init__(
        self,
        weights: Optional[FieldWeights] = None,
        config: Optional[RankingConfig] = None
    ):
        """
        Initialize the ranker.

        Args:
            weights: Field weight table (default: DEFAULT_FIELD_WEIGHTS)
            config: RankingConfig instance (default: RankingConfig())
        """
        self.weights = weights or DEFAULT_FIELD_WEIGHTS
        self.config = config or RankingConfig()
        self.config.validate()
        logger.debug(f"Initialized Ranker with default_sort={self.config.default_sort}, "
                     f"n_jobs={self.config.n_jobs}")

    def rank(
        self,
        viewer: Any,
        candidates: Iterable[Union[Candidate, Dict[str, Any]]],
        sort_key: Union[SortKey, str, None] = None
    ) -> RankingResult:
        """
        Rank a candidate pool for a viewer.

        Args:
            viewer: The viewer's AnswerSet (or mapping)
            candidates: Candidates (or candidate records) in arrival order
            sort_key: SortKey or its name; defaults to config.default_sort

        Returns:
            RankingResult with ordered matches and per-candidate errors

        Raises:
            MalformedAnswerSet: If the viewer's own answers are malformed
            ValueError: If the sort key is unknown
        """
        key = SortKey.parse(sort_key if sort_key is not None else self.config.default_sort)
        viewer = AnswerSet.coerce(viewer)
        candidates = list(candidates)

        if not candidates:
            logger.debug("Empty candidate pool, nothing to rank")
            return RankingResult(sort_key=key)

        outcomes = Parallel(n_jobs=self.config.n_jobs, prefer="threads")(
            delayed(self._evaluate)(viewer, index, candidate)
            for index, candidate in enumerate(candidates)
        )

        matches = [match for match, _ in outcomes if match is not None]
        errors = [error for _, error in outcomes if error is not None]

        for error in errors:
            logger.warning(f"Excluded candidate {error.candidate_id} (position {error.index}): "
                           f"{error.message}")

        ordered = self._sort(matches, key)
        logger.info(f"Ranked {len(ordered)} candidates by {key.value}, excluded {len(errors)}")

        return RankingResult(matches=ordered, errors=errors, sort_key=key)

    def _evaluate(
        self,
        viewer: AnswerSet,
        index: int,
        candidate: Union[Candidate, Dict[str, Any]]
    ) -> Tuple[Optional[MatchResult], Optional[CandidateError]]:
        """Score and tag one candidate, or describe why it cannot be."""
        if not isinstance(candidate, Candidate):
            try:
                candidate = Candidate.from_dict(candidate)
            except (TypeError, ValueError) as e:
                raw_id = None
                if isinstance(candidate, Mapping):
                    raw_id = candidate.get("candidate_id", candidate.get("id"))
                candidate_id = None if raw_id is None else str(raw_id)
                return None, CandidateError(candidate_id=candidate_id, index=index, message=str(e))

        try:
            answers = AnswerSet.coerce(candidate.answers)
        except MalformedAnswerSet as e:
            return None, CandidateError(
                candidate_id=candidate.candidate_id, index=index, message=str(e), field=e.field
            )

        match = MatchResult(
            candidate=replace(candidate, answers=answers),
            score=score(viewer, answers, self.weights),
            tags=derive_tags(answers),
        )
        return match, None

    @staticmethod
    def _sort(matches: List[MatchResult], key: SortKey) -> List[MatchResult]:
        if key is SortKey.SCORE:
            return sorted(matches, key=lambda m: -m.score)
        if key is SortKey.AGE:
            return sorted(matches, key=lambda m: (m.age is None, m.age or 0))
        return list(matches)


def rank(
    viewer: Any,
    candidates: Iterable[Union[Candidate, Dict[str, Any]]],
    sort_key: Union[SortKey, str] = SortKey.SCORE,
    weights: Optional[FieldWeights] = None,
    n_jobs: int = 1
) -> RankingResult:
    """
    Rank a candidate pool for a viewer.

    Convenience wrapper around Ranker for one-off calls.

    Args:
        viewer: The viewer's AnswerSet (or mapping)
        candidates: Candidates in arrival order
        sort_key: SCORE, AGE or ARRIVAL
        weights: Field weight table (default: DEFAULT_FIELD_WEIGHTS)
        n_jobs: Scoring threads

    Returns:
        RankingResult with ordered matches and per-candidate errors
    """
    ranker = Ranker(weights=weights, config=RankingConfig(n_jobs=n_jobs))
    return ranker.rank(viewer, candidates, sort_key)


def create_ranker_from_config(config: Dict[str, Any]) -> Ranker:
    """
    Factory function to create a Ranker from config.

    Args:
        config: Main configuration dictionary

    Returns:
        Configured Ranker instance

    Raises:
        InvalidWeightConfiguration: If the weights section is invalid
    """
    weights = FieldWeights.from_config(config)
    ranking_config = RankingConfig.from_config(config)
    return Ranker(weights=weights, config=ranking_config)
