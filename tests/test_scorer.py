"""
Tests for compatibility scoring.
"""

import numpy as np
import pytest

from roommate_matching.configs import FieldWeights
from roommate_matching.configs.weights import DEFAULT_WEIGHTS
from roommate_matching.exceptions import MalformedAnswerSet
from roommate_matching.schema import AnswerSet, SURVEY_FIELDS
from roommate_matching.scoring import (
    round_half_up,
    score,
    score_breakdown,
    weighted_distance,
)
from roommate_matching.scoring.scorer import similarity_from_distance


class TestRoundHalfUp:
    """Test percentage rounding."""

    @pytest.mark.parametrize("value,expected", [
        (92.5, 93),
        (98.6, 99),
        (0.4, 0),
        (0.5, 1),
        (99.49, 99),
        (100.0, 100),
    ])
    def test_rounding(self, value, expected):
        """Halves round upward, everything else to nearest."""
        assert round_half_up(value) == expected

    def test_float_noise_at_half(self):
        """A .5 computed with float error still rounds up."""
        assert round_half_up(92.49999999999999) == 93


class TestSimilarity:
    """Test the per-field similarity curve."""

    def test_curve(self):
        """Similarity falls with distance and is zero at opposite ends."""
        similarity = similarity_from_distance(np.array([0, 1, 2, 3, 4]))
        np.testing.assert_allclose(similarity, [1.0, 0.8, 0.6, 0.4, 0.0])


class TestScore:
    """Test the score function."""

    def test_identical_answers_score_100(self, viewer):
        """A perfect match scores exactly 100."""
        assert score(viewer, viewer) == 100

    def test_opposite_answers_score_0(self):
        """All-1 against all-5 shares nothing."""
        low = {name: 1 for name in SURVEY_FIELDS}
        high = {name: 5 for name in SURVEY_FIELDS}
        assert score(low, high) == 0

    def test_guest_comfort_one_apart(self, viewer_answers):
        """Differing by one on guest comfort scores 99."""
        candidate = dict(viewer_answers, guest_comfort=2)
        assert score(viewer_answers, candidate) == 99

    def test_smoking_opposite(self, viewer_answers):
        """Opposite smoking answers cost the whole smoking weight."""
        candidate = dict(viewer_answers, smoking_habits=5)
        assert score(viewer_answers, candidate) == 92

    def test_cleanliness_two_apart(self, viewer_answers):
        """Differing by two on cleanliness scores 94."""
        candidate = dict(viewer_answers, cleanliness_level=3)
        assert score(viewer_answers, candidate) == 94

    def test_symmetric(self, viewer_answers):
        """score(a, b) == score(b, a)."""
        candidate = dict(viewer_answers, cleanliness_level=2, sleep_schedule=5, guest_comfort=1)
        assert score(viewer_answers, candidate) == score(candidate, viewer_answers)

    def test_deterministic(self, viewer, neutral_answers):
        """Repeated calls give the same result."""
        results = {score(viewer, neutral_answers) for _ in range(5)}
        assert len(results) == 1

    def test_bounds(self, viewer_answers):
        """Scores stay in [0, 100] across a sweep of candidates."""
        rng = np.random.RandomState(0)
        for _ in range(50):
            candidate = {name: int(rng.randint(1, 6)) for name in SURVEY_FIELDS}
            assert 0 <= score(viewer_answers, candidate) <= 100

    @pytest.mark.parametrize("name", SURVEY_FIELDS)
    def test_monotonic_per_field(self, name):
        """Moving one answer further away never raises the score."""
        viewer = {field: 1 for field in SURVEY_FIELDS}
        previous = 101
        for value in range(1, 6):
            current = score(viewer, dict(viewer, **{name: value}))
            assert current <= previous
            previous = current

    def test_accepts_answer_sets_and_mappings(self, viewer, viewer_answers):
        """AnswerSets and plain mappings score identically."""
        candidate = dict(viewer_answers, noise_tolerance=5)
        assert score(viewer, AnswerSet(**candidate)) == score(viewer_answers, candidate)

    def test_malformed_candidate(self, viewer, viewer_answers):
        """Out-of-range answers raise instead of being clamped."""
        with pytest.raises(MalformedAnswerSet):
            score(viewer, dict(viewer_answers, budget_flexibility=6))

    def test_missing_field(self, viewer, viewer_answers):
        """A missing field raises MalformedAnswerSet."""
        candidate = dict(viewer_answers)
        del candidate["food_preference"]
        with pytest.raises(MalformedAnswerSet):
            score(viewer, candidate)

    def test_custom_weights_half_rounds_up(self, viewer_answers):
        """A raw 92.5 rounds to 93."""
        weights = FieldWeights(dict(
            DEFAULT_WEIGHTS, cleanliness_level=0.175, introvert_extrovert=0.075
        ))
        viewer = dict(viewer_answers, introvert_extrovert=1)
        candidate = dict(viewer_answers, introvert_extrovert=5)
        assert score(viewer, candidate, weights) == 93


class TestWeightedDistance:
    """Test the weighted distance audit measure."""

    def test_identical(self, viewer):
        """Identical answers have distance 0."""
        assert weighted_distance(viewer, viewer) == 0.0

    def test_opposite(self):
        """Opposite ends on every field have distance 1."""
        low = {name: 1 for name in SURVEY_FIELDS}
        high = {name: 5 for name in SURVEY_FIELDS}
        assert weighted_distance(low, high) == pytest.approx(1.0)


class TestScoreBreakdown:
    """Test per-field score explanations."""

    def test_score_matches(self, viewer_answers):
        """The breakdown score equals score()."""
        candidate = dict(viewer_answers, smoking_habits=5, guest_comfort=2)
        breakdown = score_breakdown(viewer_answers, candidate)
        assert breakdown.score == score(viewer_answers, candidate)
        assert breakdown.raw_score == pytest.approx(90.6)

    def test_contributions_sum_to_raw(self, viewer_answers, neutral_answers):
        """Points earned add up to the raw score, and earned plus lost to 100."""
        breakdown = score_breakdown(viewer_answers, neutral_answers)
        points = sum(c.points for c in breakdown.contributions)
        lost = sum(c.points_lost for c in breakdown.contributions)
        assert points == pytest.approx(breakdown.raw_score)
        assert points + lost == pytest.approx(100.0)

    def test_top_conflict(self, viewer_answers):
        """The smoking disagreement is the biggest conflict."""
        candidate = dict(viewer_answers, smoking_habits=5, guest_comfort=2)
        conflicts = score_breakdown(viewer_answers, candidate).top_conflicts()
        assert [c.field for c in conflicts] == ["smoking_habits", "guest_comfort"]
        assert conflicts[0].points_lost == pytest.approx(8.0)
        assert conflicts[0].distance == 4

    def test_no_conflicts_for_perfect_match(self, viewer):
        """A perfect match has no conflicts."""
        breakdown = score_breakdown(viewer, viewer)
        assert breakdown.top_conflicts() == []
        assert breakdown.top_agreements(1)[0].field == "cleanliness_level"

    def test_to_dict(self, viewer, neutral_answers):
        """to_dict lists one contribution per field in survey order."""
        record = score_breakdown(viewer, neutral_answers).to_dict()
        assert [c["field"] for c in record["contributions"]] == list(SURVEY_FIELDS)
