"""
Pytest configuration and shared fixtures.
"""

import json
from pathlib import Path
from typing import Any, Dict, List

import pytest

from roommate_matching.schema import AnswerSet, Candidate, SURVEY_FIELDS


@pytest.fixture
def viewer_answers() -> Dict[str, int]:
    """Viewer survey answers shared across the suite."""
    return {
        "cleanliness_level": 5,
        "introvert_extrovert": 3,
        "sleep_schedule": 2,
        "noise_tolerance": 3,
        "food_preference": 4,
        "smoking_habits": 1,
        "pets_preference": 5,
        "guest_comfort": 3,
        "study_habits": 4,
        "budget_flexibility": 3,
    }


@pytest.fixture
def viewer(viewer_answers) -> AnswerSet:
    """Viewer answers as an AnswerSet."""
    return AnswerSet(**viewer_answers)


@pytest.fixture
def neutral_answers() -> Dict[str, int]:
    """Answers in the middle of every scale (no tags)."""
    return {name: 3 for name in SURVEY_FIELDS}


@pytest.fixture
def candidate_pool(viewer_answers) -> List[Candidate]:
    """Small pool with distinct scores and ages, in arrival order."""
    close = dict(viewer_answers, guest_comfort=2)                   # score 99
    far = dict(viewer_answers, smoking_habits=5, cleanliness_level=1)  # score 77
    middle = dict(viewer_answers, pets_preference=3, study_habits=2)   # score 92
    return [
        Candidate(candidate_id="far", name="Chloe Kim", answers=far, age=21),
        Candidate(candidate_id="close", name="Sarah Johnson", answers=close, age=24),
        Candidate(candidate_id="middle", name="Amanda Brown", answers=middle, age=26),
    ]


@pytest.fixture
def candidates_csv(tmp_path, viewer_answers) -> Path:
    """CSV export with one complete and one incomplete survey."""
    header = ["candidate_id", "name", "age", "city", "budget"] + list(SURVEY_FIELDS)
    complete = ["1", "Sarah Johnson", "24", "New York", "$800-1200"] + [
        str(viewer_answers[name]) for name in SURVEY_FIELDS
    ]
    incomplete = ["2", "Maya Patel", "27", "Brooklyn", "$800-1100"] + [
        "" if name == "sleep_schedule" else str(viewer_answers[name]) for name in SURVEY_FIELDS
    ]
    path = tmp_path / "candidates.csv"
    path.write_text("\n".join(",".join(row) for row in [header, complete, incomplete]) + "\n")
    return path


@pytest.fixture
def candidates_json(tmp_path, viewer_answers) -> Path:
    """JSON candidate file with nested answers."""
    data: Dict[str, Any] = {
        "candidates": [
            {"candidate_id": "a", "name": "Emily Chen", "age": 23, "answers": viewer_answers},
            {"candidate_id": "b", "name": "Lauren Davis", "age": 24,
             "answers": dict(viewer_answers, noise_tolerance=9)},
        ]
    }
    path = tmp_path / "candidates.json"
    path.write_text(json.dumps(data, indent=2))
    return path


@pytest.fixture
def viewer_file(tmp_path, viewer_answers) -> Path:
    """Viewer answers file in YAML."""
    path = tmp_path / "viewer.yaml"
    lines = ["answers:"] + [f"  {name}: {value}" for name, value in viewer_answers.items()]
    path.write_text("\n".join(lines) + "\n")
    return path
