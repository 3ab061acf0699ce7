"""
Reporting on a ranked candidate pool.

A match report summarizes one ranking call for auditing and display:
1. Score distribution across the ranked pool
2. Monotonicity sanity check: scores should fall as answers drift apart
3. Match tiers and tag frequencies

Scores are deterministic, so there is no stability analysis; the
monotonicity check guards against a miswired weight table.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd
from scipy.stats import spearmanr

from ..configs.weights import FieldWeights
from ..schema import AnswerSet, RankingResult
from ..scoring.scorer import weighted_distance

logger = logging.getLogger(__name__)

# Lower bound of each tier, highest first
MATCH_TIERS = (
    (90, "excellent"),
    (80, "great"),
    (70, "good"),
    (0, "fair"),
)


def match_tier(score: int) -> str:
    """Bucket a compatibility score into a display tier."""
    for lower_bound, tier in MATCH_TIERS:
        if score >= lower_bound:
            return tier
    return MATCH_TIERS[-1][1]


@dataclass
class ScoreDistributionStats:
    """Statistics about score distribution."""
    mean: float
    std: float
    min: float
    max: float
    quantiles: Dict[str, float]  # e.g., {"p10": 62.0, "p50": 75.0, "p90": 88.0}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mean": float(self.mean),
            "std": float(self.std),
            "min": float(self.min),
            "max": float(self.max),
            "quantiles": {k: float(v) for k, v in self.quantiles.items()}
        }


@dataclass
class MonotonicityCheck:
    """Results of monotonicity sanity check."""
    correlation_with_distance: float
    is_monotonic: bool
    n_violations: int
    violation_rate: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "correlation_with_distance": float(self.correlation_with_distance),
            "is_monotonic": bool(self.is_monotonic),
            "n_violations": int(self.n_violations),
            "violation_rate": float(self.violation_rate)
        }


@dataclass
class MatchReport:
    """
    Summary of one ranking call.

    Attributes:
        n_ranked: Candidates that were scored
        n_excluded: Candidates left out for malformed answers
        distribution_stats: Score distribution (None for an empty ranking)
        monotonicity_check: Score vs. answer distance check (None if not computable)
        tier_counts: Matches per tier
        tag_counts: Occurrences of each tag among matches
    """
    n_ranked: int
    n_excluded: int
    distribution_stats: Optional[ScoreDistributionStats] = None
    monotonicity_check: Optional[MonotonicityCheck] = None
    tier_counts: Dict[str, int] = field(default_factory=dict)
    tag_counts: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "n_ranked": self.n_ranked,
            "n_excluded": self.n_excluded,
            "tier_counts": self.tier_counts,
            "tag_counts": self.tag_counts,
        }
        if self.distribution_stats:
            result["distribution_stats"] = self.distribution_stats.to_dict()
        if self.monotonicity_check:
            result["monotonicity_check"] = self.monotonicity_check.to_dict()
        return result

    def save(self, filepath: str) -> None:
        """Save report to JSON file."""
        with open(filepath, "w") as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.info(f"Saved match report to {filepath}")

    def summary(self) -> str:
        """Generate text summary of the report."""
        lines = [
            "Match Report",
            "=" * 50,
            f"  Ranked:   {self.n_ranked}",
            f"  Excluded: {self.n_excluded}",
        ]

        if self.distribution_stats:
            lines.extend([
                "",
                "Score Distribution:",
                f"  Mean: {self.distribution_stats.mean:.2f}",
                f"  Std:  {self.distribution_stats.std:.2f}",
                f"  Min:  {self.distribution_stats.min:.0f}",
                f"  Max:  {self.distribution_stats.max:.0f}",
            ])
            for q_name, q_value in self.distribution_stats.quantiles.items():
                lines.append(f"  {q_name}: {q_value:.2f}")

        if self.tier_counts:
            lines.extend(["", "Match Tiers:"])
            for tier, count in self.tier_counts.items():
                lines.append(f"  {tier}: {count}")

        if self.monotonicity_check:
            lines.extend([
                "",
                "Monotonicity Check:",
                f"  Correlation with distance: {self.monotonicity_check.correlation_with_distance:.4f}",
                f"  Is monotonic: {self.monotonicity_check.is_monotonic}",
                f"  Violation rate: {self.monotonicity_check.violation_rate:.2%}",
            ])

        return "\n".join(lines)


def ranking_to_frame(ranking: RankingResult) -> pd.DataFrame:
    """
    Tabulate a ranking, one row per match in ranking order.

    Columns: rank, candidate_id, name, age, location, budget, score, tier, tags.
    """
    rows = [
        {
            "rank": position + 1,
            "candidate_id": match.candidate_id,
            "name": match.name,
            "age": match.age,
            "location": match.candidate.location,
            "budget": match.candidate.budget,
            "score": match.score,
            "tier": match_tier(match.score),
            "tags": ", ".join(match.tags),
        }
        for position, match in enumerate(ranking)
    ]
    columns = ["rank", "candidate_id", "name", "age", "location", "budget", "score", "tier", "tags"]
    return pd.DataFrame(rows, columns=columns)


def compute_score_distribution_stats(
    scores: np.ndarray,
    quantiles: List[float] = [0.1, 0.25, 0.5, 0.75, 0.9]
) -> ScoreDistributionStats:
    """
    Compute distribution statistics for scores.

    Args:
        scores: Array of compatibility scores
        quantiles: Quantile values to compute (default: p10, p25, p50, p75, p90)

    Returns:
        ScoreDistributionStats instance
    """
    scores = np.asarray(scores, dtype=np.float64)
    if scores.size == 0:
        raise ValueError("Cannot compute distribution of an empty score array")

    quantile_dict = {
        f"p{int(q * 100)}": float(np.percentile(scores, q * 100))
        for q in quantiles
    }

    return ScoreDistributionStats(
        mean=float(np.mean(scores)),
        std=float(np.std(scores)),
        min=float(np.min(scores)),
        max=float(np.max(scores)),
        quantiles=quantile_dict
    )


def sanity_check_monotonicity(
    scores: np.ndarray,
    distances: np.ndarray,
    threshold: float = 0.5
) -> Optional[MonotonicityCheck]:
    """
    Check that scores fall as answer distance grows.

    Args:
        scores: Compatibility scores
        distances: Weighted answer distances for the same pairs
        threshold: Minimum negative rank correlation for "is_monotonic"

    Returns:
        MonotonicityCheck instance, or None if fewer than two distinct
        distances make the correlation undefined
    """
    scores = np.asarray(scores, dtype=np.float64)
    distances = np.asarray(distances, dtype=np.float64)
    if len(scores) != len(distances):
        raise ValueError(
            f"Score and distance arrays must have same length: {len(scores)} vs {len(distances)}"
        )
    if len(np.unique(distances)) < 2 or len(np.unique(scores)) < 2:
        return None

    # Spearman correlation (rank-based monotonicity)
    correlation, _ = spearmanr(distances, scores)

    # Violations: distance strictly grows but score strictly grows too
    order = np.argsort(distances, kind="stable")
    sorted_distances = distances[order]
    sorted_scores = scores[order]
    n = len(scores)
    n_comparisons = n * (n - 1) // 2
    n_violations = 0
    for i in range(n):
        later = slice(i + 1, n)
        n_violations += int(np.sum(
            (sorted_distances[later] > sorted_distances[i]) & (sorted_scores[later] > sorted_scores[i])
        ))

    return MonotonicityCheck(
        correlation_with_distance=float(correlation),
        is_monotonic=bool(correlation <= -threshold),
        n_violations=n_violations,
        violation_rate=n_violations / n_comparisons if n_comparisons > 0 else 0.0
    )


def create_match_report(
    ranking: RankingResult,
    viewer: Any,
    weights: Optional[FieldWeights] = None,
    quantiles: List[float] = [0.1, 0.25, 0.5, 0.75, 0.9]
) -> MatchReport:
    """
    Create a match report for one ranking call.

    Args:
        ranking: Result of Ranker.rank
        viewer: The viewer's AnswerSet (or mapping) used for the ranking
        weights: Field weights used for the ranking
        quantiles: Quantiles to compute

    Returns:
        MatchReport instance
    """
    viewer = AnswerSet.coerce(viewer)
    report = MatchReport(n_ranked=len(ranking), n_excluded=len(ranking.errors))
    if len(ranking) == 0:
        return report

    scores = np.array(ranking.scores, dtype=np.float64)
    distances = np.array([
        weighted_distance(viewer, match.candidate.answers, weights) for match in ranking
    ])

    report.distribution_stats = compute_score_distribution_stats(scores, quantiles)
    report.monotonicity_check = sanity_check_monotonicity(scores, distances)

    frame = ranking_to_frame(ranking)
    tiers = frame["tier"].value_counts()
    report.tier_counts = {tier: int(tiers.get(tier, 0)) for _, tier in MATCH_TIERS}

    tags = pd.Series([tag for match in ranking for tag in match.tags], dtype=object)
    report.tag_counts = {str(tag): int(count) for tag, count in tags.value_counts().items()}

    return report
