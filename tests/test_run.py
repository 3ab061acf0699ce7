"""
Tests for the command-line runner.
"""

import json

import pytest
import yaml

from roommate_matching.configs.weights import DEFAULT_WEIGHTS
from roommate_matching.run import main, run_matching


@pytest.fixture
def config_file(tmp_path):
    """Minimal runner config with a small synthetic fallback pool."""
    config = {
        "global": {"log_level": "WARNING"},
        "weights": dict(DEFAULT_WEIGHTS),
        "ranking": {"default_sort": "score", "n_jobs": 1},
        "data": {"synthetic": {"n_candidates": 6, "random_seed": 3}},
    }
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(config))
    return path


class TestRunMatching:
    """Test run_matching."""

    def test_ranks_csv_pool(self, config_file, viewer_file, candidates_csv, tmp_path):
        """The CSV pool is ranked and written as JSON."""
        output = tmp_path / "out" / "matches.json"
        result = run_matching(
            str(config_file),
            viewer_path=str(viewer_file),
            candidates_path=str(candidates_csv),
            output_path=str(output),
            with_report=True
        )

        assert result["success"]
        assert [m.candidate_id for m in result["ranking"]] == ["1"]
        payload = json.loads(output.read_text())
        assert payload["matches"][0]["score"] == 100
        assert payload["errors"][0]["field"] == "sleep_schedule"
        assert payload["report"]["n_excluded"] == 1

    def test_limit_and_sort(self, config_file, viewer_file, candidates_json, tmp_path):
        """--limit truncates written matches; the sort key is honored."""
        output = tmp_path / "matches.json"
        result = run_matching(
            str(config_file),
            viewer_path=str(viewer_file),
            candidates_path=str(candidates_json),
            sort_key="arrival",
            limit=0,
            output_path=str(output)
        )
        payload = json.loads(output.read_text())
        assert payload["sort_key"] == "arrival"
        assert payload["matches"] == []
        assert len(result["ranking"]) == 1

    def test_synthetic_fallback(self, config_file, viewer_file, tmp_path):
        """A missing candidate file falls back to the synthetic pool."""
        result = run_matching(
            str(config_file),
            viewer_path=str(viewer_file),
            candidates_path=str(tmp_path / "missing.csv")
        )
        assert len(result["ranking"]) == 6


class TestLimit:
    """Test match limits."""

    def test_negative_limit(self, config_file, viewer_file, candidates_csv):
        """run_matching rejects a negative limit."""
        with pytest.raises(ValueError, match="limit"):
            run_matching(
                str(config_file),
                viewer_path=str(viewer_file),
                candidates_path=str(candidates_csv),
                limit=-1
            )


class TestMain:
    """Test the CLI entry point."""

    def test_success(self, config_file, viewer_file, candidates_csv, tmp_path):
        """A good run exits 0."""
        output = tmp_path / "matches.json"
        code = main([
            "--config", str(config_file),
            "--viewer", str(viewer_file),
            "--candidates", str(candidates_csv),
            "--sort", "age",
            "--output", str(output),
        ])
        assert code == 0
        assert output.exists()

    def test_invalid_weights(self, tmp_path, viewer_file, candidates_csv):
        """Invalid field weights are fatal."""
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({"weights": dict(DEFAULT_WEIGHTS, cleanliness_level=0.5)}))
        code = main([
            "--config", str(path),
            "--viewer", str(viewer_file),
            "--candidates", str(candidates_csv),
        ])
        assert code == 1

    def test_missing_config(self, tmp_path):
        """A missing config file exits 1."""
        assert main(["--config", str(tmp_path / "nope.yaml")]) == 1

    def test_malformed_viewer(self, tmp_path, config_file, candidates_csv):
        """Malformed viewer answers exit 1."""
        viewer = tmp_path / "viewer.yaml"
        viewer.write_text("answers:\n  cleanliness_level: 9\n")
        code = main([
            "--config", str(config_file),
            "--viewer", str(viewer),
            "--candidates", str(candidates_csv),
        ])
        assert code == 1

    def test_negative_limit_rejected(self, config_file, viewer_file, candidates_csv):
        """A negative --limit is a usage error, not a silent truncation."""
        with pytest.raises(SystemExit) as exc_info:
            main([
                "--config", str(config_file),
                "--viewer", str(viewer_file),
                "--candidates", str(candidates_csv),
                "--limit", "-1",
            ])
        assert exc_info.value.code == 2

    def test_zero_limit_accepted(self, config_file, viewer_file, candidates_csv):
        """--limit 0 is allowed."""
        code = main([
            "--config", str(config_file),
            "--viewer", str(viewer_file),
            "--candidates", str(candidates_csv),
            "--limit", "0",
        ])
        assert code == 0
