"""Candidate pool sources and viewer answer loading."""

from .loaders import (
    CandidatePoolSource,
    InMemoryCandidatePoolSource,
    CsvCandidatePoolSource,
    JsonCandidatePoolSource,
    create_pool_source,
    create_synthetic_candidates,
    load_viewer_answers,
)

__all__ = [
    "CandidatePoolSource",
    "InMemoryCandidatePoolSource",
    "CsvCandidatePoolSource",
    "JsonCandidatePoolSource",
    "create_pool_source",
    "create_synthetic_candidates",
    "load_viewer_answers",
]
