"""Unit tests for the diversity analyzer."""

import pytest

from src.config.schemas.base import DiversityDimension, RecommendationPriority
from src.config.schemas.diversity import DiversityConfig
from src.content.models import ContentType, EngagementType
from src.diversity.analyzer import DiversityAnalyzer, calculate_diversity_scores_pure
from src.diversity.models import EchoChamberSeverity, RecommendationType
from tests.helpers.content import make_content, make_entry, make_history
from tests.helpers.time import FIXED_NOW


def _make_analyzer(**overrides: object) -> DiversityAnalyzer:
    return DiversityAnalyzer(DiversityConfig(**overrides), now=FIXED_NOW)


class TestCalculateDiversityScores:
    """Tests for DiversityAnalyzer.calculate_diversity_scores."""

    @pytest.mark.unit
    def test_short_history_is_neutral(self) -> None:
        """Test that history below the minimum yields neutral results."""
        analyzer = _make_analyzer()
        candidates = [make_content("a"), make_content("b", "author-2")]

        results = analyzer.calculate_diversity_scores(candidates, make_history(19))

        assert [r.content_id for r in results] == ["a", "b"]
        for result in results:
            assert result.overall_diversity_score == 0.5
            assert result.recommendations == []
            assert set(result.dimension_scores) == set(DiversityDimension)
            assert all(s == 0.5 for s in result.dimension_scores.values())

    @pytest.mark.unit
    def test_repeated_content_scores_low(self) -> None:
        """Test that a candidate matching history on every axis scores low."""
        analyzer = _make_analyzer()
        history = make_history(25)
        candidate = make_content("c", "author-1", tags=["tech"], age_hours=1.0)

        [result] = analyzer.calculate_diversity_scores([candidate], history)

        scores = result.dimension_scores
        assert scores[DiversityDimension.TOPIC] == 0.0
        assert scores[DiversityDimension.SOURCE] == 0.0
        assert scores[DiversityDimension.PERSPECTIVE] == 0.0
        assert scores[DiversityDimension.CONTENT_TYPE] == 0.0
        # Unknown sentiment, language and engagement stay neutral
        assert scores[DiversityDimension.SENTIMENT] == 0.5
        assert scores[DiversityDimension.LANGUAGE] == 0.5
        assert scores[DiversityDimension.ENGAGEMENT_TYPE] == 0.5
        assert result.overall_diversity_score < 0.1

    @pytest.mark.unit
    def test_novel_content_scores_high(self) -> None:
        """Test that a novel candidate beats a repeated one."""
        analyzer = _make_analyzer()
        history = make_history(25)
        repeated = make_content("r", "author-1", tags=["tech"])
        novel = make_content(
            "n",
            "author-new",
            tags=["cooking"],
            content_type=ContentType.VIDEO,
            engagement=EngagementType.VIRAL,
        )

        repeated_result, novel_result = analyzer.calculate_diversity_scores(
            [repeated, novel], history
        )

        assert novel_result.dimension_scores[DiversityDimension.TOPIC] == 1.0
        assert novel_result.dimension_scores[DiversityDimension.SOURCE] == 1.0
        assert novel_result.dimension_scores[DiversityDimension.CONTENT_TYPE] == 1.0
        assert novel_result.dimension_scores[DiversityDimension.ENGAGEMENT_TYPE] == 1.0
        assert (
            novel_result.overall_diversity_score
            > repeated_result.overall_diversity_score
        )

    @pytest.mark.unit
    def test_scores_are_bounded_and_convex(self) -> None:
        """Test that scores lie in [0, 1] and overall is the weighted sum."""
        analyzer = _make_analyzer()
        history = make_history(30, author_id=None, topic=None)
        candidates = [
            make_content("a", "author-3", tags=["topic-3", "other"]),
            make_content("b", "someone", tags=[]),
        ]

        results = analyzer.calculate_diversity_scores(candidates, history)

        weights = analyzer.config.dimension_weights
        for result in results:
            assert 0.0 <= result.overall_diversity_score <= 1.0
            for score in result.dimension_scores.values():
                assert 0.0 <= score <= 1.0
            expected = sum(
                weights[d] * s for d, s in result.dimension_scores.items()
            )
            assert result.overall_diversity_score == pytest.approx(expected)

    @pytest.mark.unit
    def test_recommendations_for_low_dimensions(self) -> None:
        """Test recommendation types and priorities for weak dimensions."""
        analyzer = _make_analyzer()
        history = make_history(25)
        candidate = make_content("c", "author-1", tags=["tech"])

        [result] = analyzer.calculate_diversity_scores([candidate], history)

        by_dimension = {r.dimension: r for r in result.recommendations}
        source = by_dimension[DiversityDimension.SOURCE]
        assert source.type == RecommendationType.DIVERSIFY_SOURCES
        assert source.priority == RecommendationPriority.HIGH
        assert source.impact_score == pytest.approx(1.0)
        assert (
            by_dimension[DiversityDimension.PERSPECTIVE].type
            == RecommendationType.BALANCE_PERSPECTIVES
        )
        assert (
            by_dimension[DiversityDimension.TOPIC].type
            == RecommendationType.INCREASE_VARIETY
        )
        # Neutral 0.5 scores fall in the LOW priority band
        assert (
            by_dimension[DiversityDimension.SENTIMENT].priority
            == RecommendationPriority.LOW
        )

    @pytest.mark.unit
    def test_pure_wrapper_matches_method(self) -> None:
        """Test that the pure function gives the same scores."""
        history = make_history(25)
        candidate = make_content("c", "author-9", tags=["space"])

        via_pure = calculate_diversity_scores_pure(
            [candidate], history, DiversityConfig(), now=FIXED_NOW
        )
        via_method = _make_analyzer().calculate_diversity_scores([candidate], history)

        assert via_pure[0].overall_diversity_score == pytest.approx(
            via_method[0].overall_diversity_score
        )


class TestBuildContentDistribution:
    """Tests for DiversityAnalyzer.build_content_distribution."""

    @pytest.mark.unit
    def test_maps_are_normalized(self) -> None:
        """Test that every non-empty map sums to 1.0."""
        history = [
            make_entry(make_content("a", "x", tags=["t1", "t2"])),
            make_entry(
                make_content("b", "y", tags=["t1"], content_type=ContentType.LINK)
            ),
            make_entry(make_content("c", "x", tags=[])),
        ]

        distribution = _make_analyzer().build_content_distribution("u1", history)

        assert distribution.total_items == 3
        assert distribution.source_distribution["x"] == pytest.approx(2 / 3)
        assert distribution.topic_distribution["t1"] == pytest.approx(2 / 3)
        for mapping in (
            distribution.topic_distribution,
            distribution.source_distribution,
            distribution.content_type_distribution,
            distribution.temporal_distribution,
        ):
            assert sum(mapping.values()) == pytest.approx(1.0)
        assert distribution.sentiment_distribution == {}
        assert distribution.engagement_type_distribution == {}

    @pytest.mark.unit
    def test_default_window_ends_now(self) -> None:
        """Test the configured time window."""
        distribution = _make_analyzer(time_window_days=3).build_content_distribution(
            "u1", []
        )
        assert distribution.time_window.end_time == FIXED_NOW
        assert distribution.time_window.duration_seconds == 3 * 24 * 3600


class TestAnalyzeEchoChamber:
    """Tests for DiversityAnalyzer.analyze_echo_chamber."""

    @pytest.mark.unit
    def test_single_author_single_topic_is_echo_chamber(self) -> None:
        """Test a fully concentrated history."""
        analysis = _make_analyzer().analyze_echo_chamber("u1", make_history(25))

        assert analysis.is_echo_chamber is True
        assert analysis.topic_concentration == pytest.approx(1.0)
        assert analysis.source_concentration == pytest.approx(1.0)
        assert analysis.severity == EchoChamberSeverity.SEVERE
        assert analysis.dominant_perspectives == ["neutral"]
        assert "neutral" not in analysis.missing_perspectives
        assert "liberal" in analysis.missing_perspectives
        assert analysis.recommendations[0] == (
            "Diversify content sources to include different perspectives"
        )

    @pytest.mark.unit
    def test_empty_history_is_not_echo_chamber(self) -> None:
        """Test that no history is never an echo chamber."""
        analysis = _make_analyzer().analyze_echo_chamber("u1", [])
        assert analysis.is_echo_chamber is False
        assert analysis.severity == EchoChamberSeverity.NONE
        assert analysis.recommendations == []

    @pytest.mark.unit
    def test_varied_history_is_not_echo_chamber(self) -> None:
        """Test that a spread-out history is not flagged."""
        history = make_history(30, author_id=None, topic=None)
        analysis = _make_analyzer().analyze_echo_chamber("u1", history)
        # Topic and source HHI are tiny; perspective is uniformly neutral
        assert analysis.concentration_index == pytest.approx((2 / 30 + 1.0) / 3)
        assert analysis.severity == EchoChamberSeverity.NONE

    @pytest.mark.unit
    def test_severity_is_monotonic(self) -> None:
        """Test that severity never decreases as concentration grows."""
        analyzer = _make_analyzer()
        order = list(EchoChamberSeverity)
        ranks = [
            order.index(analyzer.severity_for(i / 100)) for i in range(0, 101)
        ]
        assert ranks == sorted(ranks)
