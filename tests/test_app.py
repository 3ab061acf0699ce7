"""
Tests for the dashboard's match card markup.
"""

import importlib.util
from pathlib import Path

import pytest

pytest.importorskip("streamlit")

from roommate_matching.schema import Candidate, MatchResult

APP_PATH = Path(__file__).parent.parent / "ui" / "app.py"


@pytest.fixture(scope="module")
def app():
    """The dashboard module, loaded without running it."""
    spec = importlib.util.spec_from_file_location("roommate_dashboard", APP_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class TestMatchCardHtml:
    """Test match card rendering."""

    def test_candidate_text_is_escaped(self, app, viewer):
        """Markup in uploaded candidate fields is shown as text."""
        candidate = Candidate(
            candidate_id="x",
            name="<img src=x onerror=alert(1)>",
            answers=viewer,
            location="Boston <b>",
            budget="$800 & up",
            avatar_url='https://example.com/a.svg" onload="alert(1)',
        )
        card = app.match_card_html(MatchResult(candidate=candidate, score=95, tags=("Clean",)))

        assert "<img src=x" not in card
        assert "&lt;img src=x onerror=alert(1)&gt;" in card
        assert "Boston &lt;b&gt;" in card
        assert "$800 &amp; up" in card
        assert '" onload="' not in card
        assert "&quot; onload=&quot;" in card

    def test_card_content(self, app, viewer):
        """Score, tags and placeholders for missing details appear on the card."""
        candidate = Candidate(candidate_id="y", name="Grace Lee", answers=viewer, age=22)
        card = app.match_card_html(
            MatchResult(candidate=candidate, score=88, tags=("Clean", "Early Bird"))
        )

        assert "Grace Lee" in card
        assert "88%" in card
        assert "22 years old" in card
        assert '<span class="tag">Early Bird</span>' in card
        assert "Location: Not shared" in card
        assert app.TIER_COLORS["great"] in card
