"""Candidate ranking for a viewer."""

from .ranker import Ranker, RankingConfig, rank, create_ranker_from_config

__all__ = ["Ranker", "RankingConfig", "rank", "create_ranker_from_config"]
