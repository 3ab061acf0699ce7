"""Reporting on ranked candidate pools."""

from .metrics import (
    compute_score_distribution_stats,
    sanity_check_monotonicity,
    create_match_report,
    ranking_to_frame,
    match_tier,
    MatchReport,
)

__all__ = [
    "compute_score_distribution_stats",
    "sanity_check_monotonicity",
    "create_match_report",
    "ranking_to_frame",
    "match_tier",
    "MatchReport",
]
