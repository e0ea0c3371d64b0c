"""Unit tests for freshness scoring and staleness detection."""

import math

import pytest

from src.config.schemas.freshness import FreshnessConfig
from src.freshness.analyzer import (
    FreshnessAnalyzer,
    calculate_freshness_scores_pure,
    novelty_score,
    recency_score,
)
from src.freshness.models import FreshnessAction, FreshnessFactor, StalenessReason
from src.providers.memory import StaticTrendingProvider
from tests.helpers.content import make_content, make_entry, make_history
from tests.helpers.time import FIXED_NOW


class _FailingTrendingProvider:
    def get_score(self, content_id: str) -> float:
        msg = f"trending backend unavailable for {content_id}"
        raise RuntimeError(msg)


def _make_analyzer(
    trending: dict[str, float] | None = None, **overrides: object
) -> FreshnessAnalyzer:
    provider = StaticTrendingProvider(trending) if trending is not None else None
    return FreshnessAnalyzer(FreshnessConfig(**overrides), provider, now=FIXED_NOW)


class TestRecencyAndNovelty:
    """Tests for the module-level scoring helpers."""

    @pytest.mark.unit
    def test_recency_is_one_at_age_zero(self) -> None:
        """Test that brand new content has recency 1.0."""
        assert recency_score(0.0) == 1.0

    @pytest.mark.unit
    def test_recency_strictly_decreases(self) -> None:
        """Test that recency decays strictly with age."""
        scores = [recency_score(age) for age in (0, 1, 6, 24, 72, 168)]
        assert all(a > b for a, b in zip(scores, scores[1:], strict=False))
        assert recency_score(24.0) == pytest.approx(math.exp(-1.2))

    @pytest.mark.unit
    def test_novelty_ordering(self) -> None:
        """Test reply < shared link < original."""
        reply = make_content("r", reply_to_id="p1", link_url="https://x.org")
        link = make_content("l", link_url="https://x.org")
        original = make_content("o")

        assert novelty_score(reply) == 0.3
        assert novelty_score(link) == 0.7
        assert novelty_score(original) == 1.0


class TestCalculateFreshnessScores:
    """Tests for FreshnessAnalyzer.calculate_freshness_scores."""

    @pytest.mark.unit
    def test_new_original_content_is_boosted(self) -> None:
        """Test that fresh original content is clamped to 1.0 and boosted."""
        [analysis] = _make_analyzer().calculate_freshness_scores(
            [make_content("a", age_hours=0.0)]
        )

        assert analysis.raw_score == pytest.approx(1.1)
        assert analysis.freshness_score == 1.0
        assert analysis.recommended_action == FreshnessAction.BOOST
        assert analysis.staleness_reason is None
        assert analysis.factors[FreshnessFactor.RECENCY] == 1.0
        assert analysis.factors[FreshnessFactor.ORIGINAL_CONTENT] == 1.0
        assert FreshnessFactor.TRENDING_TOPIC not in analysis.factors

    @pytest.mark.unit
    def test_very_old_content_is_stale(self) -> None:
        """Test that content older than a week is demoted as too old."""
        [analysis] = _make_analyzer().calculate_freshness_scores(
            [make_content("a", age_hours=200.0)]
        )

        assert analysis.recommended_action == FreshnessAction.DEMOTE
        assert analysis.staleness_reason == "Content is too old (200h)"

    @pytest.mark.unit
    def test_untimely_content_lacks_signals(self) -> None:
        """Test the staleness reason for old-ish content with no signals."""
        [analysis] = _make_analyzer().calculate_freshness_scores(
            [make_content("a", age_hours=40.0)]
        )

        assert analysis.freshness_score == pytest.approx(math.exp(-2.0) * 1.1)
        assert analysis.staleness_reason == (
            "Content lacks timeliness and trending signals"
        )

    @pytest.mark.unit
    def test_middling_old_content_is_replaced(self) -> None:
        """Test the REPLACE action for mid scores older than two days."""
        [analysis] = _make_analyzer(recency_decay_rate=0.01).calculate_freshness_scores(
            [make_content("a", age_hours=80.0)]
        )

        assert 0.3 <= analysis.freshness_score < 0.5
        assert analysis.recommended_action == FreshnessAction.REPLACE

    @pytest.mark.unit
    def test_trending_score_is_clipped(self) -> None:
        """Test that trending scores outside [0, 1] are clipped."""
        analyzer = _make_analyzer({"hot": 3.0, "cold": -2.0})

        hot, cold = analyzer.calculate_freshness_scores(
            [make_content("hot", age_hours=10.0), make_content("cold", age_hours=10.0)]
        )

        assert analyzer.get_trending_boost("hot") == 1.0
        assert analyzer.get_trending_boost("cold") == 0.0
        assert hot.factors[FreshnessFactor.TRENDING_TOPIC] == 1.0
        assert hot.raw_score == pytest.approx(cold.raw_score * 1.5)

    @pytest.mark.unit
    def test_trending_provider_errors_propagate(self) -> None:
        """Test that a failing trending provider raises to the caller."""
        analyzer = FreshnessAnalyzer(
            FreshnessConfig(), _FailingTrendingProvider(), now=FIXED_NOW
        )

        with pytest.raises(RuntimeError, match="trending backend unavailable"):
            analyzer.calculate_freshness_scores([make_content("a")])

    @pytest.mark.unit
    def test_timely_content_gets_relevance_factor(self) -> None:
        """Test that breaking news text adds the timely reference factor."""
        plain, timely = _make_analyzer().calculate_freshness_scores(
            [
                make_content("plain", age_hours=10.0, text="A quiet essay"),
                make_content("timely", age_hours=10.0, text="Breaking: markets fall"),
            ]
        )

        assert FreshnessFactor.TIMELY_REFERENCE not in plain.factors
        assert timely.factors[FreshnessFactor.TIMELY_REFERENCE] == pytest.approx(0.3)
        assert timely.raw_score == pytest.approx(plain.raw_score * 1.06)

    @pytest.mark.unit
    def test_scores_are_bounded_and_ordered(self) -> None:
        """Test that scores lie in [0, 1] and preserve input order."""
        contents = [make_content(f"c{i}", age_hours=i * 12.0) for i in range(6)]

        results = calculate_freshness_scores_pure(contents, now=FIXED_NOW)

        assert [r.content_id for r in results] == [c.id for c in contents]
        assert all(0.0 <= r.freshness_score <= 1.0 for r in results)


class TestIdentifyStaleContent:
    """Tests for FreshnessAnalyzer.identify_stale_content."""

    @pytest.mark.unit
    def test_overexposed_history_is_stale(self) -> None:
        """Test that repetitive topic, author and type are flagged."""
        stale = _make_analyzer().identify_stale_content(make_history(10))

        assert len(stale) == 10
        first = stale[0]
        assert first.staleness_score == pytest.approx(0.6)
        assert first.reasons == [
            StalenessReason.OVEREXPOSED_TOPIC,
            StalenessReason.OVEREXPOSED_AUTHOR,
            StalenessReason.REPETITIVE_TYPE,
        ]
        assert first.recommended_action == FreshnessAction.SCHEDULE
        assert first.overexposure_metrics == {"topic": 1.0, "author": 1.0, "type": 1.0}

    @pytest.mark.unit
    def test_varied_history_is_not_stale(self) -> None:
        """Test that distinct topics and authors are not stale."""
        history = make_history(10, author_id=None, topic=None)
        assert _make_analyzer().identify_stale_content(history) == []

    @pytest.mark.unit
    def test_window_excludes_old_entries(self) -> None:
        """Test that entries served outside the window are ignored."""
        old = make_entry(make_content("old"), served_hours_ago=100.0)

        assert _make_analyzer().identify_stale_content([old]) == []
        assert _make_analyzer().identify_stale_content(make_history(5), 0.5) == []

    @pytest.mark.unit
    def test_old_content_adds_age_staleness(self) -> None:
        """Test that very old content is flagged as OLD_CONTENT."""
        entry = make_entry(make_content("old", age_hours=100.0))

        [stale] = _make_analyzer().identify_stale_content([entry])

        assert StalenessReason.OLD_CONTENT in stale.reasons
        assert stale.staleness_score == pytest.approx(
            (1.0 - math.exp(-5.0)) * 0.4 + 0.2 + 0.1
        )
        assert stale.recommended_action == FreshnessAction.DEMOTE
