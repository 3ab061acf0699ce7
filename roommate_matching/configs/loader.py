"""
Configuration loading and validation.

This module handles loading of YAML configuration files and
reports configuration issues that do not prevent startup.
Weight table problems are fatal and are raised by FieldWeights instead.
"""

import logging
from pathlib import Path
from typing import Dict, Any, List

import yaml

from ..schema import SURVEY_FIELDS, SortKey

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class _UniqueKeyLoader(yaml.SafeLoader):
    """SafeLoader that rejects duplicate mapping keys instead of keeping the last."""

    def construct_mapping(self, node, deep=False):
        seen = set()
        for key_node, _ in node.value:
            key = self.construct_object(key_node, deep=deep)
            if key in seen:
                raise yaml.constructor.ConstructorError(
                    "while constructing a mapping", node.start_mark,
                    f"found duplicate key {key!r}", key_node.start_mark
                )
            seen.add(key)
        return super().construct_mapping(node, deep=deep)


def load_config(filepath: str) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        filepath: Path to the YAML configuration file

    Returns:
        Configuration dictionary

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid or repeats a key
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {filepath}")

    logger.info(f"Loading configuration from {filepath}")
    with open(filepath, "r") as f:
        config = yaml.load(f, Loader=_UniqueKeyLoader)

    if config is None:
        raise ValueError(f"Configuration file is empty: {filepath}")
    if not isinstance(config, dict):
        raise ValueError(f"Configuration file must contain a mapping: {filepath}")

    return config


def validate_config(config: Dict[str, Any]) -> List[str]:
    """
    Validate configuration and return list of warnings/errors.

    Args:
        config: Configuration dictionary

    Returns:
        List of warning/error messages (empty if valid)
    """
    issues = []

    if "weights" not in config:
        issues.append("Missing weights section, default field weights will be used")
    else:
        weights = config["weights"]
        if not isinstance(weights, dict):
            issues.append("weights must be a mapping of survey field to weight")
        else:
            unknown = sorted(set(weights) - set(SURVEY_FIELDS))
            missing = [name for name in SURVEY_FIELDS if name not in weights]
            if unknown:
                issues.append(f"Unknown weight fields: {unknown}")
            if missing:
                issues.append(f"Missing weight fields: {missing}")
            try:
                total = sum(float(w) for w in weights.values())
            except (TypeError, ValueError):
                issues.append("Field weights must be numbers")
            else:
                if abs(total - 1.0) > 1e-6:
                    issues.append(f"Field weights don't sum to 1: {total}")

    ranking = config.get("ranking", {}) or {}
    if "default_sort" in ranking:
        try:
            SortKey.parse(ranking["default_sort"])
        except ValueError as e:
            issues.append(str(e))
    n_jobs = ranking.get("n_jobs", 1)
    if isinstance(n_jobs, bool) or not isinstance(n_jobs, int) or n_jobs == 0 or n_jobs < -1:
        issues.append(f"ranking.n_jobs must be a positive integer or -1, got {n_jobs!r}")

    log_level = get_config_value(config, "global.log_level", "INFO")
    if str(log_level).upper() not in LOG_LEVELS:
        issues.append(f"Unknown global.log_level: {log_level}")

    return issues


def get_config_value(config: Dict[str, Any], path: str, default: Any = None) -> Any:
    """
    Get a nested configuration value using dot notation.

    Args:
        config: Configuration dictionary
        path: Dot-separated path (e.g., "data.candidates.path")
        default: Default value if path doesn't exist

    Returns:
        Configuration value or default
    """
    keys = path.split(".")
    value = config
    for key in keys:
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default
    return value
