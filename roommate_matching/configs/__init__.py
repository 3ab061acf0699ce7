"""Configuration loading and the field weight table."""

from .loader import load_config, validate_config, get_config_value
from .weights import FieldWeights, DEFAULT_FIELD_WEIGHTS, DEFAULT_WEIGHTS

__all__ = [
    "load_config",
    "validate_config",
    "get_config_value",
    "FieldWeights",
    "DEFAULT_FIELD_WEIGHTS",
    "DEFAULT_WEIGHTS",
]
