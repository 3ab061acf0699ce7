"""
Candidate pool sources and viewer answer loading.

The ranking engine never fetches data itself. Callers obtain the pool from
a CandidatePoolSource and pass it in; any failure to read the pool is
reported as FetchError before ranking starts.

Sources:
- InMemoryCandidatePoolSource: records already held by the caller
- CsvCandidatePoolSource: one row per candidate, answers as columns
- JsonCandidatePoolSource: list of candidate objects with nested answers

Malformed survey answers, ages and identities are not a fetch failure: they
are kept as supplied so the ranker can report them per candidate.
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Union

import numpy as np
import pandas as pd
import yaml

from ..exceptions import FetchError
from ..schema import AnswerSet, Candidate, SCALE_MAX, SCALE_MIN, SURVEY_FIELDS

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("name",) + SURVEY_FIELDS

# A Candidate, or the raw record of one whose identity or age is unreadable
PoolEntry = Union[Candidate, Dict[str, Any]]


class CandidatePoolSource(ABC):
    """Supplies the candidates to be ranked for a viewer."""

    @abstractmethod
    def fetch(self) -> List[PoolEntry]:
        """
        Return the candidate pool in arrival order.

        Raises:
            FetchError: If the pool cannot be read
        """


class InMemoryCandidatePoolSource(CandidatePoolSource):
    """Candidate pool from Candidate objects or candidate records."""

    def __init__(self, records: Iterable[Union[Candidate, Mapping[str, Any]]]):
        self.records = list(records)

    def fetch(self) -> List[PoolEntry]:
        return _to_candidates(self.records, source="memory")


class CsvCandidatePoolSource(CandidatePoolSource):
    """
    Candidate pool from a CSV export.

    Expected columns: candidate_id (optional, row number used otherwise),
    name, the ten survey fields, and any of age, location, avatar_url, bio,
    gender, college_workplace, budget. Other columns are kept as metadata.
    """

    def __init__(self, filepath: Union[str, Path], delimiter: str = ","):
        self.filepath = Path(filepath)
        self.delimiter = delimiter

    def fetch(self) -> List[PoolEntry]:
        if not self.filepath.exists():
            raise FetchError(f"Candidate file not found: {self.filepath}")

        logger.info(f"Loading candidates from {self.filepath} (delimiter: {repr(self.delimiter)})")
        try:
            df = pd.read_csv(self.filepath, sep=self.delimiter)
        except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
            raise FetchError(f"Could not parse candidate file {self.filepath}: {e}") from e

        missing = validate_candidate_columns(df)
        if missing:
            raise FetchError(f"Candidate file {self.filepath} is missing columns: {missing}")

        if "candidate_id" not in df.columns and "id" not in df.columns:
            df.insert(0, "candidate_id", [str(i + 1) for i in range(len(df))])

        # NaN cells become None so missing answers are reported, not scored
        df = df.astype(object).where(pd.notna(df), None)
        records = df.to_dict(orient="records")

        candidates = _to_candidates(records, source=str(self.filepath))
        logger.info(f"Loaded {len(candidates)} candidates with {len(df.columns)} columns")
        return candidates


class JsonCandidatePoolSource(CandidatePoolSource):
    """
    Candidate pool from a JSON file.

    The file holds either a list of candidate objects or an object with a
    "candidates" list. Each candidate carries its survey under "answers".
    """

    def __init__(self, filepath: Union[str, Path]):
        self.filepath = Path(filepath)

    def fetch(self) -> List[PoolEntry]:
        if not self.filepath.exists():
            raise FetchError(f"Candidate file not found: {self.filepath}")

        logger.info(f"Loading candidates from {self.filepath}")
        try:
            with open(self.filepath, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise FetchError(f"Could not parse candidate file {self.filepath}: {e}") from e

        if isinstance(data, dict):
            data = data.get("candidates")
        if not isinstance(data, list):
            raise FetchError(f"Candidate file {self.filepath} must contain a list of candidates")

        candidates = _to_candidates(data, source=str(self.filepath))
        logger.info(f"Loaded {len(candidates)} candidates")
        return candidates


def create_pool_source(filepath: Union[str, Path], delimiter: str = ",") -> CandidatePoolSource:
    """
    Pick a file-backed source by extension (.json, otherwise CSV).

    Args:
        filepath: Path to the candidate file
        delimiter: CSV field delimiter

    Returns:
        CandidatePoolSource for the file
    """
    path = Path(filepath)
    if path.suffix.lower() == ".json":
        return JsonCandidatePoolSource(path)
    return CsvCandidatePoolSource(path, delimiter=delimiter)


def validate_candidate_columns(df: pd.DataFrame) -> List[str]:
    """
    Validate that the required candidate columns exist in the DataFrame.

    "full_name" is accepted in place of "name".

    Args:
        df: Candidate DataFrame

    Returns:
        List of missing column names (empty if all present)
    """
    columns = set(df.columns)
    if "full_name" in columns:
        columns.add("name")
    return [c for c in REQUIRED_COLUMNS if c not in columns]


def _to_candidates(records: Iterable[Any], source: str) -> List[PoolEntry]:
    """
    Build Candidates from records.

    A record whose identity or age cannot be read is kept as a raw mapping,
    so the ranker excludes that one candidate instead of the pool failing.
    """
    candidates: List[PoolEntry] = []
    for position, record in enumerate(records):
        if isinstance(record, Candidate):
            candidates.append(record)
            continue
        if not isinstance(record, Mapping):
            raise FetchError(f"Candidate record {position} from {source} is not an object")
        try:
            candidates.append(Candidate.from_dict(record))
        except ValueError as e:
            logger.warning(f"Candidate record {position} from {source} kept unparsed: {e}")
            candidates.append(dict(record))
    return candidates


def load_viewer_answers(filepath: Union[str, Path]) -> AnswerSet:
    """
    Load the viewer's survey answers from YAML or JSON.

    The file holds the ten survey fields, either at top level or under an
    "answers" key.

    Args:
        filepath: Path to the answers file

    Returns:
        Validated AnswerSet

    Raises:
        FileNotFoundError: If the file doesn't exist
        MalformedAnswerSet: If the answers are incomplete or out of range
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Viewer answers file not found: {filepath}")

    logger.info(f"Loading viewer answers from {filepath}")
    with open(path, "r") as f:
        data = yaml.safe_load(f)

    if isinstance(data, dict) and isinstance(data.get("answers"), dict):
        data = data["answers"]
    return AnswerSet.from_dict(data if data is not None else {})


FIRST_NAMES = [
    "Sarah", "Emily", "Jessica", "Ashley", "Amanda", "Lauren", "Priya", "Maya",
    "Olivia", "Chloe", "Hannah", "Grace", "Zoe", "Nina", "Leah", "Aisha",
]
LAST_NAMES = [
    "Johnson", "Chen", "Martinez", "Williams", "Brown", "Davis", "Patel", "Kim",
    "Nguyen", "Garcia", "Lee", "Okafor", "Rossi", "Cohen", "Silva", "Khan",
]
CITIES = ["New York", "Boston", "Chicago", "Austin", "Seattle", "San Francisco"]
BUDGETS = ["$700-1000", "$750-1100", "$800-1200", "$850-1300", "$900-1400", "$900-1500"]


def create_synthetic_candidates(n_candidates: int = 24, random_seed: int = 42) -> List[Candidate]:
    """
    Create a reproducible synthetic candidate pool for demonstration.

    Args:
        n_candidates: Number of candidates to generate
        random_seed: Seed for the random generator

    Returns:
        List of valid Candidates
    """
    rng = np.random.RandomState(random_seed)
    answers = rng.randint(SCALE_MIN, SCALE_MAX + 1, size=(n_candidates, len(SURVEY_FIELDS)))
    ages = rng.randint(18, 36, size=n_candidates)

    candidates = []
    for i in range(n_candidates):
        first = FIRST_NAMES[rng.randint(len(FIRST_NAMES))]
        last = LAST_NAMES[rng.randint(len(LAST_NAMES))]
        candidates.append(Candidate(
            candidate_id=f"synthetic-{i + 1}",
            name=f"{first} {last}",
            answers=AnswerSet(**{name: int(v) for name, v in zip(SURVEY_FIELDS, answers[i])}),
            age=int(ages[i]),
            location=CITIES[rng.randint(len(CITIES))],
            avatar_url=f"https://api.dicebear.com/7.x/avataaars/svg?seed={first}{i + 1}",
            budget=BUDGETS[rng.randint(len(BUDGETS))],
        ))

    logger.info(f"Created synthetic candidate pool: {n_candidates} candidates")
    return candidates
