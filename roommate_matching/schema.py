"""
Data structures for survey answers, candidates and match results.

The lifestyle survey has ten questions, each answered on a 1-5 scale:

    cleanliness_level    1 = Very Messy            5 = Very Clean
    introvert_extrovert  1 = Very Introverted      5 = Very Extroverted
    sleep_schedule       1 = Very Early (8-10 PM)  5 = Very Late (After 4 AM)
    noise_tolerance      1 = Very Low              5 = Very High
    food_preference      1 = Strictly Vegan        5 = No Restrictions
    smoking_habits       1 = Strongly Against      5 = Regular Smoker
    pets_preference      1 = No Pets               5 = Love Pets
    guest_comfort        1 = Never                 5 = Very Often
    study_habits         1 = Total Silence         5 = Can Focus Anywhere
    budget_flexibility   1 = Very Tight            5 = Very Flexible

SURVEY_FIELDS fixes the canonical field order used for vectors, weights
and tag evaluation.
"""

import math
import numbers
from dataclasses import dataclass, field, fields, asdict
from enum import Enum
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

import numpy as np

from .exceptions import MalformedAnswerSet

SCALE_MIN = 1
SCALE_MAX = 5

SURVEY_FIELDS: Tuple[str, ...] = (
    "cleanliness_level",
    "introvert_extrovert",
    "sleep_schedule",
    "noise_tolerance",
    "food_preference",
    "smoking_habits",
    "pets_preference",
    "guest_comfort",
    "study_habits",
    "budget_flexibility",
)

# Question text and option labels as shown on the survey form
SURVEY_QUESTIONS: Dict[str, Dict[str, Any]] = {
    "cleanliness_level": {
        "label": "Cleanliness Level",
        "description": "How important is cleanliness to you?",
        "options": ["Very Messy", "Somewhat Messy", "Moderate", "Somewhat Clean", "Very Clean"],
    },
    "introvert_extrovert": {
        "label": "Introvert - Extrovert",
        "description": "How social are you?",
        "options": ["Very Introverted", "Somewhat Introverted", "Balanced",
                    "Somewhat Extroverted", "Very Extroverted"],
    },
    "sleep_schedule": {
        "label": "Sleep Schedule",
        "description": "When do you typically sleep?",
        "options": ["Very Early (8-10 PM)", "Early (10-12 AM)", "Moderate (12-2 AM)",
                    "Late (2-4 AM)", "Very Late (After 4 AM)"],
    },
    "noise_tolerance": {
        "label": "Noise Tolerance",
        "description": "How much noise can you handle?",
        "options": ["Very Low", "Low", "Moderate", "High", "Very High"],
    },
    "food_preference": {
        "label": "Food Preference",
        "description": "What are your dietary preferences?",
        "options": ["Strictly Vegan", "Vegetarian", "Flexible", "Omnivore", "No Restrictions"],
    },
    "smoking_habits": {
        "label": "Smoking Habits",
        "description": "What's your stance on smoking?",
        "options": ["Strongly Against", "Prefer No Smoking", "Neutral",
                    "Occasional Smoker", "Regular Smoker"],
    },
    "pets_preference": {
        "label": "Pets Preference",
        "description": "How do you feel about pets?",
        "options": ["No Pets", "Prefer No Pets", "Neutral", "Like Pets", "Love Pets"],
    },
    "guest_comfort": {
        "label": "Guest Comfort",
        "description": "How often do you have guests over?",
        "options": ["Never", "Rarely", "Sometimes", "Often", "Very Often"],
    },
    "study_habits": {
        "label": "Study Habits",
        "description": "How do you prefer to study/work?",
        "options": ["Total Silence", "Quiet", "Background Noise OK",
                    "Music/Sounds Preferred", "Can Focus Anywhere"],
    },
    "budget_flexibility": {
        "label": "Budget Flexibility",
        "description": "How flexible is your budget?",
        "options": ["Very Tight", "Tight", "Moderate", "Flexible", "Very Flexible"],
    },
}


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, float) and math.isnan(value)


def _check_answer(name: str, value: Any) -> int:
    """Return value as a plain int, or raise if it is not an integer in [1, 5]."""
    if _is_missing(value):
        raise MalformedAnswerSet(f"{name} is missing", field=name, value=value)
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise MalformedAnswerSet(
            f"{name} must be an integer between {SCALE_MIN} and {SCALE_MAX}, got {value!r}",
            field=name, value=value
        )
    if not SCALE_MIN <= value <= SCALE_MAX:
        raise MalformedAnswerSet(
            f"{name} must be between {SCALE_MIN} and {SCALE_MAX}, got {value}",
            field=name, value=value
        )
    return int(value)


def _parse_answer(name: str, raw: Any) -> Any:
    """
    Convert a submitted value (form string, CSV float) to an int where lossless.

    Anything that cannot be converted exactly is returned unchanged so that
    _check_answer reports it.
    """
    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            return None
        try:
            return int(text)
        except ValueError:
            return raw
    if isinstance(raw, (float, np.floating)) and not math.isnan(raw) and float(raw).is_integer():
        return int(raw)
    return raw


@dataclass(frozen=True)
class AnswerSet:
    """
    One person's lifestyle survey answers.

    All ten answers are integers on the 1-5 scale. Construction fails with
    MalformedAnswerSet if any answer is missing, non-integer or out of range;
    values are never clamped.
    """
    cleanliness_level: int
    introvert_extrovert: int
    sleep_schedule: int
    noise_tolerance: int
    food_preference: int
    smoking_habits: int
    pets_preference: int
    guest_comfort: int
    study_habits: int
    budget_flexibility: int

    def __post_init__(self):
        """Validate Likert scale bounds."""
        for name in SURVEY_FIELDS:
            object.__setattr__(self, name, _check_answer(name, getattr(self, name)))

    def __getitem__(self, name: str) -> int:
        if name not in SURVEY_FIELDS:
            raise KeyError(name)
        return getattr(self, name)

    def __iter__(self) -> Iterator[Tuple[str, int]]:
        for name in SURVEY_FIELDS:
            yield name, getattr(self, name)

    def to_dict(self) -> Dict[str, int]:
        """Convert to dictionary in survey order."""
        return {name: getattr(self, name) for name in SURVEY_FIELDS}

    def to_vector(self) -> np.ndarray:
        """Answers as a float vector in SURVEY_FIELDS order."""
        return np.array([getattr(self, name) for name in SURVEY_FIELDS], dtype=np.float64)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AnswerSet":
        """
        Create from a mapping of field name to answer.

        Keys other than the ten survey fields (ids, timestamps) are ignored.
        Integral strings and integral floats are accepted, since form
        submissions and CSV columns deliver them that way.

        Raises:
            MalformedAnswerSet: If a field is missing or invalid
        """
        if not isinstance(data, Mapping):
            raise MalformedAnswerSet(f"Survey answers must be a mapping, got {type(data).__name__}")

        missing = [name for name in SURVEY_FIELDS if name not in data]
        if missing:
            raise MalformedAnswerSet(
                f"Missing survey fields: {', '.join(missing)}",
                field=missing[0] if len(missing) == 1 else None
            )

        return cls(**{name: _parse_answer(name, data[name]) for name in SURVEY_FIELDS})

    @classmethod
    def coerce(cls, value: Any) -> "AnswerSet":
        """Return value as an AnswerSet, validating mappings on the way."""
        if isinstance(value, cls):
            return value
        return cls.from_dict(value)


class SortKey(Enum):
    """Orderings supported by the ranker."""
    SCORE = "score"
    AGE = "age"
    ARRIVAL = "arrival"

    @classmethod
    def parse(cls, value: Any) -> "SortKey":
        """
        Parse a sort key from an enum member or its string value.

        "newest" is accepted as an alias of ARRIVAL.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            text = value.strip().lower()
            if text == "newest":
                return cls.ARRIVAL
            for member in cls:
                if member.value == text:
                    return member
        raise ValueError(
            f"Unknown sort key: {value!r} (expected one of {[m.value for m in cls]})"
        )


def _parse_age(raw: Any) -> Optional[int]:
    if _is_missing(raw):
        return None
    if isinstance(raw, str):
        if not raw.strip():
            return None
        raw = raw.strip()
        try:
            return int(raw)
        except ValueError:
            raise ValueError(f"age must be an integer, got {raw!r}")
    if isinstance(raw, bool):
        raise ValueError(f"age must be an integer, got {raw!r}")
    if isinstance(raw, numbers.Integral):
        return int(raw)
    if isinstance(raw, numbers.Real) and float(raw).is_integer():
        return int(raw)
    raise ValueError(f"age must be an integer, got {raw!r}")


def _optional_str(raw: Any) -> Optional[str]:
    if _is_missing(raw):
        return None
    return str(raw)


@dataclass(frozen=True)
class Candidate:
    """
    A prospective roommate supplied to a ranking call.

    Identity and display fields are opaque to the engine except for age,
    which the AGE ordering reads. Answers are kept as supplied and are only
    validated when the candidate is scored, so a pool with one malformed
    survey still loads.

    Attributes:
        candidate_id: Caller's identifier for the candidate
        name: Display name
        answers: AnswerSet or raw mapping of survey answers
        age: Age in years, if known
        location: City or area
        avatar_url: Avatar image reference
        bio: Free-text bio
        gender: Self-reported gender
        college_workplace: College or workplace
        budget: Budget range as displayed (e.g. "$800-1200")
        metadata: Any further caller data, passed through untouched
    """
    candidate_id: str
    name: str
    answers: Any = field(default_factory=dict)
    age: Optional[int] = None
    location: Optional[str] = None
    avatar_url: Optional[str] = None
    bio: Optional[str] = None
    gender: Optional[str] = None
    college_workplace: Optional[str] = None
    budget: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "candidate_id", str(self.candidate_id))
        object.__setattr__(self, "age", _parse_age(self.age))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary with answers as a plain mapping."""
        result = {f.name: getattr(self, f.name) for f in fields(self)}
        if isinstance(self.answers, AnswerSet):
            result["answers"] = self.answers.to_dict()
        else:
            result["answers"] = dict(self.answers) if isinstance(self.answers, Mapping) else self.answers
        result["metadata"] = dict(self.metadata)
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Candidate":
        """
        Create from a candidate record.

        Answers may be nested under "answers" or given as top-level columns
        (one row per candidate, as in a CSV export). Unknown keys go to
        metadata. "id", "full_name", "city" and "profile_photo_url" are read
        as aliases of candidate_id, name, location and avatar_url.

        Raises:
            ValueError: If identity fields are missing or age is not an integer
        """
        record = dict(data)

        aliases = {
            "id": "candidate_id",
            "full_name": "name",
            "city": "location",
            "profile_photo_url": "avatar_url",
        }
        for alias, canonical in aliases.items():
            if alias in record and _is_missing(record.get(canonical)):
                record[canonical] = record.pop(alias)

        if _is_missing(record.get("candidate_id")):
            raise ValueError("Candidate record has no candidate_id")
        if _is_missing(record.get("name")):
            raise ValueError(f"Candidate {record['candidate_id']} has no name")

        if "answers" in record:
            answers = record.pop("answers")
            if isinstance(answers, Mapping):
                answers = dict(answers)
        else:
            answers = {name: record.pop(name) for name in SURVEY_FIELDS if name in record}

        known = {f.name for f in fields(cls)} - {"answers", "metadata"}
        kwargs = {key: record.pop(key) for key in list(record) if key in known}
        for key in ("location", "avatar_url", "bio", "gender", "college_workplace", "budget"):
            if key in kwargs:
                kwargs[key] = _optional_str(kwargs[key])

        metadata = dict(record.pop("metadata", None) or {})
        metadata.update(record)

        return cls(answers=answers, metadata=metadata, **kwargs)


@dataclass(frozen=True)
class MatchResult:
    """
    A candidate enriched with a compatibility score and descriptive tags.

    Attributes:
        candidate: The candidate that was scored
        score: Compatibility with the viewer, 0-100
        tags: At most three descriptors of the candidate's answers
    """
    candidate: Candidate
    score: int
    tags: Tuple[str, ...] = ()

    @property
    def candidate_id(self) -> str:
        return self.candidate.candidate_id

    @property
    def name(self) -> str:
        return self.candidate.name

    @property
    def age(self) -> Optional[int]:
        return self.candidate.age

    def to_dict(self) -> Dict[str, Any]:
        """Flatten to a presentable record (display fields, score, tags)."""
        result = self.candidate.to_dict()
        result["score"] = self.score
        result["tags"] = list(self.tags)
        return result


@dataclass(frozen=True)
class CandidateError:
    """A candidate that was excluded from a ranking, and why."""
    candidate_id: Optional[str]
    index: int
    message: str
    field: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class RankingResult:
    """
    Outcome of one ranking call.

    Iterating, indexing and len() operate on the ordered matches; excluded
    candidates are reported in errors.

    Attributes:
        matches: MatchResults in the requested order
        errors: Candidates that could not be scored
        sort_key: Ordering that was applied
    """
    matches: List[MatchResult] = field(default_factory=list)
    errors: List[CandidateError] = field(default_factory=list)
    sort_key: SortKey = SortKey.SCORE

    def __iter__(self) -> Iterator[MatchResult]:
        return iter(self.matches)

    def __len__(self) -> int:
        return len(self.matches)

    def __getitem__(self, index):
        return self.matches[index]

    @property
    def scores(self) -> List[int]:
        return [match.score for match in self.matches]

    def top(self, n: int) -> List[MatchResult]:
        """First n matches in ranking order."""
        return self.matches[:n]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "sort_key": self.sort_key.value,
            "matches": [match.to_dict() for match in self.matches],
            "errors": [error.to_dict() for error in self.errors],
        }
