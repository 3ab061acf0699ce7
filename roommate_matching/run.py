"""
Command-line runner for roommate matching.

Ranks a candidate pool for one viewer and writes the ordered matches.

Usage:
    python -m roommate_matching.run --config configs/config.yaml \
        --viewer data/viewer.yaml --candidates data/candidates.csv --sort score

The runner performs the following steps:
1. Load and validate configuration (field weights are fatal if invalid)
2. Load the viewer's survey answers
3. Fetch the candidate pool (synthetic pool if the file is missing)
4. Rank candidates
5. Print the top matches and write results / report
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def setup_logging(log_level: str) -> None:
    """Configure logging level from config."""
    level = getattr(logging, str(log_level).upper(), logging.INFO)
    logging.getLogger().setLevel(level)


def non_negative_int(value: str) -> int:
    """argparse type for counts that must be 0 or more."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}")
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be 0 or more, got {number}")
    return number


def run_matching(
    config_path: str,
    viewer_path: Optional[str] = None,
    candidates_path: Optional[str] = None,
    sort_key: Optional[str] = None,
    limit: Optional[int] = None,
    output_path: Optional[str] = None,
    with_report: bool = False
) -> Dict[str, Any]:
    """
    Rank a candidate pool for a viewer.

    Args:
        config_path: Path to the configuration YAML file
        viewer_path: Viewer answers file (overrides data.viewer.path)
        candidates_path: Candidate pool file (overrides data.candidates.path)
        sort_key: score, age or arrival (overrides ranking.default_sort)
        limit: Keep only the first N matches in the output
        output_path: If provided, write ranked results as JSON here
        with_report: Whether to build a match report

    Returns:
        Dictionary with the ranking, optional report and output path

    Raises:
        InvalidWeightConfiguration: If the field weights are invalid
        FetchError: If the candidate file exists but cannot be read
        MalformedAnswerSet: If the viewer's answers are malformed
        ValueError: If limit is negative
    """
    from .configs import load_config, validate_config, get_config_value
    from .data_loading import create_pool_source, create_synthetic_candidates, load_viewer_answers
    from .evaluation import create_match_report, ranking_to_frame
    from .ranking import create_ranker_from_config

    if limit is not None and limit < 0:
        raise ValueError(f"limit must be 0 or more, got {limit}")

    config = load_config(config_path)
    issues = validate_config(config)
    for issue in issues:
        logger.warning(f"Config issue: {issue}")

    setup_logging(get_config_value(config, "global.log_level", "INFO"))

    ranker = create_ranker_from_config(config)

    viewer_path = viewer_path or get_config_value(config, "data.viewer.path")
    if viewer_path is None:
        raise ValueError("No viewer answers file given (--viewer or data.viewer.path)")
    viewer = load_viewer_answers(viewer_path)

    candidates_path = candidates_path or get_config_value(config, "data.candidates.path")
    if candidates_path and Path(candidates_path).exists():
        delimiter = get_config_value(config, "data.candidates.delimiter", ",")
        candidates = create_pool_source(candidates_path, delimiter=delimiter).fetch()
    else:
        logger.error(f"Candidate file not found: {candidates_path}")
        logger.info("Creating synthetic candidate pool for demonstration...")
        candidates = create_synthetic_candidates(
            n_candidates=get_config_value(config, "data.synthetic.n_candidates", 24),
            random_seed=get_config_value(config, "data.synthetic.random_seed", 42)
        )

    ranking = ranker.rank(viewer, candidates, sort_key)

    result = {
        "success": True,
        "ranking": ranking,
        "report": None,
        "output_path": None,
    }

    frame = ranking_to_frame(ranking)
    if limit is not None:
        frame = frame.head(limit)
    if not frame.empty:
        logger.info("Top matches:\n" + frame.to_string(index=False))

    if with_report:
        report = create_match_report(ranking, viewer, ranker.weights)
        logger.info("\n" + report.summary())
        result["report"] = report

    if output_path:
        payload = ranking.to_dict()
        if limit is not None:
            payload["matches"] = payload["matches"][:limit]
        if result["report"] is not None:
            payload["report"] = result["report"].to_dict()
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w") as f:
            json.dump(payload, f, indent=2)
        logger.info(f"Saved ranked matches to {output_path}")
        result["output_path"] = output_path

    return result


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the runner."""
    import yaml

    from .exceptions import RoommateMatchingError

    parser = argparse.ArgumentParser(
        description="Rank roommate candidates for a viewer by survey compatibility"
    )
    parser.add_argument(
        "--config",
        type=str,
        default="configs/config.yaml",
        help="Path to configuration file"
    )
    parser.add_argument(
        "--viewer",
        type=str,
        default=None,
        help="Viewer survey answers (YAML or JSON, overrides config)"
    )
    parser.add_argument(
        "--candidates",
        type=str,
        default=None,
        help="Candidate pool (CSV or JSON, overrides config)"
    )
    parser.add_argument(
        "--sort",
        type=str,
        default=None,
        choices=["score", "age", "arrival", "newest"],
        help="Ordering of the matches (overrides config)"
    )
    parser.add_argument(
        "--limit",
        type=non_negative_int,
        default=None,
        help="Only output the first N matches"
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Write ranked matches as JSON to this path"
    )
    parser.add_argument(
        "--report",
        action="store_true",
        help="Print and save a match report"
    )

    args = parser.parse_args(argv)

    try:
        run_matching(
            args.config,
            viewer_path=args.viewer,
            candidates_path=args.candidates,
            sort_key=args.sort,
            limit=args.limit,
            output_path=args.output,
            with_report=args.report
        )
    except (RoommateMatchingError, FileNotFoundError, ValueError, yaml.YAMLError) as e:
        logger.error(f"Matching failed: {e}")
        return 1

    logger.info("Matching completed successfully!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
