"""
Roommate Matches UI

A Streamlit dashboard that ranks a candidate pool against the viewer's
lifestyle survey answers.

Design: calm housing-platform aesthetic
- Soft neutral palette (off-white, charcoal, subtle teal accent)
- Match cards with score, tags, location and budget
- Sort controls: Highest Match / Newest Users / Age Nearby

Run with: streamlit run ui/app.py
"""

import html
import sys
import tempfile
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import streamlit as st

from roommate_matching.configs import load_config
from roommate_matching.data_loading import CsvCandidatePoolSource, create_synthetic_candidates
from roommate_matching.evaluation import match_tier
from roommate_matching.exceptions import FetchError, InvalidWeightConfiguration
from roommate_matching.ranking import create_ranker_from_config
from roommate_matching.schema import AnswerSet, SortKey, SURVEY_FIELDS, SURVEY_QUESTIONS
from roommate_matching.scoring import score_breakdown

# =============================================================================
# CONSTANTS
# =============================================================================

CONFIG_PATH = project_root / "configs" / "config.yaml"
SAMPLE_POOL_PATH = project_root / "data" / "candidates.csv"
CARDS_PER_ROW = 3

SORT_OPTIONS = {
    "Highest Match": SortKey.SCORE,
    "Newest Users": SortKey.ARRIVAL,
    "Age Nearby": SortKey.AGE,
}

# =============================================================================
# DESIGN SYSTEM - Colors & Styles
# =============================================================================

COLORS = {
    "background": "#FAFAFA",
    "card_bg": "#FFFFFF",
    "text_primary": "#2D3748",
    "text_secondary": "#718096",
    "text_muted": "#A0AEC0",
    "accent": "#319795",  # Subtle teal
    "accent_light": "#E6FFFA",
    "border": "#E2E8F0",
    "error": "#F56565",
}

TIER_COLORS = {
    "excellent": "#38A169",
    "great": "#3182CE",
    "good": "#D69E2E",
    "fair": "#A0AEC0",
}

# =============================================================================
# CUSTOM CSS
# =============================================================================

def inject_custom_css():
    """Inject custom CSS for the match dashboard."""
    st.markdown(f"""
    <style>
        .stApp {{
            background-color: {COLORS['background']};
        }}

        h1, h2, h3 {{
            color: {COLORS['text_primary']} !important;
            font-weight: 600 !important;
        }}

        .match-card {{
            background: {COLORS['card_bg']};
            border: 1px solid {COLORS['border']};
            border-radius: 12px;
            padding: 1.25rem;
            margin-bottom: 0.5rem;
        }}

        .match-header {{
            display: flex;
            justify-content: space-between;
            align-items: flex-start;
        }}

        .match-person {{
            display: flex;
            gap: 0.75rem;
            align-items: center;
        }}

        .match-avatar {{
            width: 56px;
            height: 56px;
            border-radius: 50%;
            border: 2px solid {COLORS['accent_light']};
        }}

        .match-name {{
            color: {COLORS['text_primary']};
            font-weight: 600;
            font-size: 1.05rem;
        }}

        .match-meta {{
            color: {COLORS['text_secondary']};
            font-size: 0.85rem;
        }}

        .match-score {{
            font-size: 2rem;
            font-weight: 700;
            line-height: 1;
            text-align: right;
        }}

        .match-score-label {{
            color: {COLORS['text_muted']};
            font-size: 0.75rem;
            text-align: right;
        }}

        .tag {{
            display: inline-block;
            padding: 0.2rem 0.6rem;
            margin: 0.6rem 0.3rem 0.2rem 0;
            border-radius: 20px;
            font-size: 0.75rem;
            background: {COLORS['accent_light']};
            color: {COLORS['accent']};
        }}

        .match-details {{
            border-top: 1px solid {COLORS['border']};
            margin-top: 0.75rem;
            padding-top: 0.5rem;
            color: {COLORS['text_secondary']};
            font-size: 0.85rem;
        }}

        #MainMenu {{visibility: hidden;}}
        footer {{visibility: hidden;}}
    </style>
    """, unsafe_allow_html=True)

# =============================================================================
# COMPONENT FUNCTIONS
# =============================================================================

@st.cache_resource
def load_ranker():
    """Load and cache the ranker (field weights are validated once here)."""
    config = load_config(str(CONFIG_PATH)) if CONFIG_PATH.exists() else {}
    return create_ranker_from_config(config)


def render_header():
    """Render the page header with title and description."""
    st.markdown("""
    <div style="text-align: center; margin-bottom: 2rem;">
        <h1 style="font-size: 2.2rem; margin-bottom: 0.5rem;">Your Roommate Matches</h1>
        <p style="font-size: 1.1rem; color: #718096;">
            Based on your compatibility survey responses
        </p>
    </div>
    """, unsafe_allow_html=True)


def render_survey_sidebar() -> dict:
    """Render the ten survey questions in the sidebar and return the answers."""
    st.sidebar.header("Your Survey")
    st.sidebar.caption("Answer every question on a 1-5 scale")

    answers = {}
    for name in SURVEY_FIELDS:
        question = SURVEY_QUESTIONS[name]
        options = question["options"]
        answers[name] = st.sidebar.select_slider(
            question["label"],
            options=[1, 2, 3, 4, 5],
            value=3,
            format_func=lambda value, options=options: f"{value} - {options[value - 1]}",
            help=question["description"],
            key=f"survey_{name}",
        )
    return answers


def load_candidate_pool():
    """Load the pool from an uploaded CSV, the sample file, or a synthetic pool."""
    st.sidebar.header("Candidate Pool")
    uploaded = st.sidebar.file_uploader("Upload candidates (CSV)", type=["csv"])
    use_synthetic = st.sidebar.checkbox("Use synthetic demo pool", value=not SAMPLE_POOL_PATH.exists())

    if uploaded is not None:
        with tempfile.NamedTemporaryFile(suffix=".csv", delete=False) as f:
            f.write(uploaded.getvalue())
            upload_path = f.name
        try:
            return CsvCandidatePoolSource(upload_path).fetch()
        finally:
            Path(upload_path).unlink(missing_ok=True)

    if use_synthetic:
        size = st.sidebar.slider("Pool size", min_value=6, max_value=60, value=24, step=6)
        return create_synthetic_candidates(n_candidates=size)

    return CsvCandidatePoolSource(SAMPLE_POOL_PATH).fetch()


def match_card_html(match) -> str:
    """Build the card markup for one match; candidate text is HTML-escaped."""
    candidate = match.candidate
    color = TIER_COLORS[match_tier(match.score)]
    name = html.escape(str(candidate.name))
    age_text = f"{candidate.age} years old" if candidate.age is not None else "Age not shared"
    avatar = (
        f'<img class="match-avatar" src="{html.escape(candidate.avatar_url, quote=True)}" '
        f'alt="{html.escape(str(candidate.name), quote=True)}">'
        if candidate.avatar_url else ""
    )
    tags = "".join(f'<span class="tag">{html.escape(tag)}</span>' for tag in match.tags)
    location = html.escape(candidate.location or "Not shared")
    budget = html.escape(candidate.budget or "Not shared")

    return f"""
    <div class="match-card">
        <div class="match-header">
            <div class="match-person">
                {avatar}
                <div>
                    <div class="match-name">{name}</div>
                    <div class="match-meta">{age_text}</div>
                </div>
            </div>
            <div>
                <div class="match-score" style="color: {color};">{match.score}%</div>
                <div class="match-score-label">Match</div>
            </div>
        </div>
        <div>{tags}</div>
        <div class="match-details">
            <div>Location: {location}</div>
            <div>Budget: {budget}</div>
        </div>
    </div>
    """


def render_match_card(match, viewer: AnswerSet, weights):
    """Render one match card with an expandable score explanation."""
    candidate = match.candidate
    st.markdown(match_card_html(match), unsafe_allow_html=True)

    with st.expander("Why this score?"):
        breakdown = score_breakdown(viewer, candidate.answers, weights)
        agreements = breakdown.top_agreements(3)
        conflicts = breakdown.top_conflicts(3)
        st.markdown("**Strongest agreements**")
        for c in agreements:
            st.markdown(f"- {SURVEY_QUESTIONS[c.field]['label']}: +{c.points:.1f} pts")
        if conflicts:
            st.markdown("**Biggest differences**")
            for c in conflicts:
                st.markdown(
                    f"- {SURVEY_QUESTIONS[c.field]['label']}: you {c.viewer_value}, "
                    f"them {c.candidate_value} (-{c.points_lost:.1f} pts)"
                )
        if candidate.bio:
            st.caption(candidate.bio)


def render_matches(ranking, viewer: AnswerSet, weights):
    """Render the ranked matches as a card grid."""
    matches = list(ranking)
    if not matches:
        st.markdown("""
        <div style="text-align: center; padding: 3rem 0;">
            <p style="font-size: 1.2rem; color: #718096;">No matches found yet</p>
        </div>
        """, unsafe_allow_html=True)
        return

    for row_start in range(0, len(matches), CARDS_PER_ROW):
        columns = st.columns(CARDS_PER_ROW)
        for column, match in zip(columns, matches[row_start:row_start + CARDS_PER_ROW]):
            with column:
                render_match_card(match, viewer, weights)


def render_excluded(ranking):
    """List candidates that could not be scored."""
    if not ranking.errors:
        return
    with st.expander(f"{len(ranking.errors)} candidate(s) excluded"):
        for error in ranking.errors:
            st.markdown(f"- **{error.candidate_id}** (row {error.index + 1}): {error.message}")

# =============================================================================
# MAIN
# =============================================================================

def main():
    st.set_page_config(page_title="Roommate Matches", layout="wide")
    inject_custom_css()

    try:
        ranker = load_ranker()
    except InvalidWeightConfiguration as e:
        st.error(f"Field weight configuration is invalid: {e}")
        st.stop()

    render_header()

    viewer = AnswerSet.from_dict(render_survey_sidebar())

    try:
        candidates = load_candidate_pool()
    except FetchError as e:
        st.error(f"Could not load candidates: {e}")
        st.stop()

    sort_label = st.radio(
        "Sort by",
        options=list(SORT_OPTIONS.keys()),
        horizontal=True,
        label_visibility="collapsed",
    )

    ranking = ranker.rank(viewer, candidates, SORT_OPTIONS[sort_label])

    render_matches(ranking, viewer, ranker.weights)
    render_excluded(ranking)


if __name__ == "__main__":
    main()
