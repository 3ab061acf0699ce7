"""
Field weight table for compatibility scoring.

Each survey field carries a fixed importance weight. The ten weights
must sum to 1.0 so that a perfect match scores exactly 100.

The table is process-wide configuration: DEFAULT_FIELD_WEIGHTS is built
and validated once at import time, and FieldWeights instances are
read-only after construction.
"""

import json
import logging
import math
import numbers
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Tuple

import numpy as np

from ..exceptions import InvalidWeightConfiguration
from ..schema import SURVEY_FIELDS

logger = logging.getLogger(__name__)

WEIGHT_SUM_TOLERANCE = 1e-6

DEFAULT_WEIGHTS: Dict[str, float] = {
    "cleanliness_level": 0.15,
    "introvert_extrovert": 0.10,
    "sleep_schedule": 0.10,
    "noise_tolerance": 0.10,
    "food_preference": 0.10,
    "smoking_habits": 0.08,
    "pets_preference": 0.10,
    "guest_comfort": 0.07,
    "study_habits": 0.10,
    "budget_flexibility": 0.10,
}


@dataclass(frozen=True)
class FieldWeights:
    """
    Read-only mapping of survey field to scoring weight.

    Attributes:
        weights: Weight per survey field, each in (0, 1), summing to 1.0
        tolerance: Allowed deviation of the sum from 1.0

    Raises:
        InvalidWeightConfiguration: On construction, if the table is invalid
    """
    weights: Mapping[str, float]
    tolerance: float = WEIGHT_SUM_TOLERANCE
    _vector: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if not isinstance(self.weights, Mapping):
            raise InvalidWeightConfiguration(
                f"Field weights must be a mapping, got {type(self.weights).__name__}"
            )
        object.__setattr__(self, "weights", MappingProxyType(dict(self.weights)))
        self.validate()

        vector = np.array([float(self.weights[name]) for name in SURVEY_FIELDS], dtype=np.float64)
        vector.setflags(write=False)
        object.__setattr__(self, "_vector", vector)

    def validate(self) -> None:
        """Validate that all ten fields are weighted in (0, 1) and sum to 1."""
        unknown = sorted(set(self.weights) - set(SURVEY_FIELDS))
        if unknown:
            raise InvalidWeightConfiguration(f"Unknown weight fields: {unknown}")

        missing = [name for name in SURVEY_FIELDS if name not in self.weights]
        if missing:
            raise InvalidWeightConfiguration(f"Missing weight fields: {missing}")

        for name in SURVEY_FIELDS:
            weight = self.weights[name]
            if isinstance(weight, bool) or not isinstance(weight, numbers.Real):
                raise InvalidWeightConfiguration(f"Weight for {name} must be a number, got {weight!r}")
            if math.isnan(weight) or not 0 < weight < 1:
                raise InvalidWeightConfiguration(f"Weight for {name} must be in (0, 1), got {weight}")

        total = math.fsum(float(w) for w in self.weights.values())
        if abs(total - 1.0) > self.tolerance:
            raise InvalidWeightConfiguration(
                f"Field weights must sum to 1.0 (tolerance {self.tolerance}), got {total}"
            )

    def __getitem__(self, name: str) -> float:
        return self.weights[name]

    def as_vector(self) -> np.ndarray:
        """Weights as a read-only vector in SURVEY_FIELDS order."""
        return self._vector

    def to_dict(self) -> Dict[str, float]:
        """Convert to dictionary in survey order."""
        return {name: float(self.weights[name]) for name in SURVEY_FIELDS}

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "FieldWeights":
        """Create from dictionary."""
        return cls(weights=dict(d))

    @classmethod
    def from_items(cls, items: Iterable[Tuple[str, float]]) -> "FieldWeights":
        """
        Create from (field, weight) pairs, rejecting repeated fields.

        Raises:
            InvalidWeightConfiguration: If a field appears more than once
        """
        weights: Dict[str, float] = {}
        for name, weight in items:
            if name in weights:
                raise InvalidWeightConfiguration(f"Duplicate weight field: {name}")
            weights[name] = weight
        return cls(weights=weights)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "FieldWeights":
        """
        Create from main config dictionary.

        Falls back to DEFAULT_FIELD_WEIGHTS when the config has no weights
        section.
        """
        weights_config = config.get("weights")
        if weights_config is None:
            logger.info("No weights section in config, using default field weights")
            return DEFAULT_FIELD_WEIGHTS

        fw = cls(weights=weights_config)
        logger.info(f"Loaded field weights: {fw.to_dict()}")
        return fw

    def save(self, filepath: str) -> None:
        """Save to JSON file."""
        with open(filepath, "w") as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.info(f"Saved field weights to {filepath}")

    @classmethod
    def load(cls, filepath: str) -> "FieldWeights":
        """Load from JSON file, rejecting repeated fields."""
        with open(filepath, "r") as f:
            pairs = json.load(f, object_pairs_hook=list)
        if not isinstance(pairs, list):
            raise InvalidWeightConfiguration(f"Field weights file must contain an object: {filepath}")
        return cls.from_items(pairs)


DEFAULT_FIELD_WEIGHTS = FieldWeights(DEFAULT_WEIGHTS)
