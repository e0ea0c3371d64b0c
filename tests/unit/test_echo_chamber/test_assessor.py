"""Unit tests for echo chamber risk assessment and prevention."""

import pytest

from src.config.schemas.base import (
    DiversityDimension,
    EchoChamberRiskFactor,
    EchoChamberRiskLevel,
)
from src.config.schemas.echo_chamber import EchoChamberPreventionConfig
from src.content.models import UserEngagement
from src.diversity.analyzer import DiversityAnalyzer
from src.diversity.models import EchoChamberAnalysis, EchoChamberSeverity
from src.echo_chamber.assessor import (
    EchoChamberRiskAssessor,
    calculate_echo_chamber_risk_pure,
)
from src.echo_chamber.models import BreakoutRecommendationType
from tests.helpers.content import make_history, make_scored
from tests.helpers.time import FIXED_NOW


def _make_assessor(**overrides: object) -> EchoChamberRiskAssessor:
    return EchoChamberRiskAssessor(
        EchoChamberPreventionConfig(**overrides),
        DiversityAnalyzer(now=FIXED_NOW),
        now=FIXED_NOW,
    )


def _make_analysis(
    topic: float = 0.0,
    source: float = 0.0,
    dominant: list[str] | None = None,
) -> EchoChamberAnalysis:
    return EchoChamberAnalysis(
        is_echo_chamber=True,
        severity=EchoChamberSeverity.MODERATE,
        dominant_perspectives=dominant or [],
        topic_concentration=topic,
        source_concentration=source,
    )


class TestCalculateEchoChamberRisk:
    """Tests for EchoChamberRiskAssessor.calculate_echo_chamber_risk."""

    @pytest.mark.unit
    def test_short_history_is_low_risk(self) -> None:
        """Test that fewer than ten entries yields LOW with score 0."""
        assessment = _make_assessor().calculate_echo_chamber_risk(
            "u1", make_history(9)
        )

        assert assessment.risk_level == EchoChamberRiskLevel.LOW
        assert assessment.overall_risk_score == 0.0
        assert assessment.risk_factors == {}
        assert assessment.assessed_at == FIXED_NOW

    @pytest.mark.unit
    def test_concentrated_history_is_elevated(self) -> None:
        """Test that a single author and topic history is high risk."""
        assessment = _make_assessor().calculate_echo_chamber_risk(
            "u1", make_history(25)
        )

        factors = assessment.risk_factors
        assert factors[EchoChamberRiskFactor.TOPIC_CONCENTRATION] == pytest.approx(1.0)
        assert factors[EchoChamberRiskFactor.SOURCE_CONCENTRATION] == pytest.approx(
            1.0
        )
        assert factors[EchoChamberRiskFactor.PERSPECTIVE_BIAS] == pytest.approx(1.0)
        assert factors[EchoChamberRiskFactor.SOCIAL_HOMOGENEITY] == pytest.approx(0.96)
        assert assessment.overall_risk_score > 0.6
        assert assessment.risk_level in (
            EchoChamberRiskLevel.HIGH,
            EchoChamberRiskLevel.CRITICAL,
        )

    @pytest.mark.unit
    def test_varied_history_is_lower_risk(self) -> None:
        """Test that distinct authors and topics lower the risk score."""
        assessor = _make_assessor()
        concentrated = assessor.calculate_echo_chamber_risk("u1", make_history(25))
        varied = assessor.calculate_echo_chamber_risk(
            "u1", make_history(25, author_id=None, topic=None)
        )

        assert varied.overall_risk_score < concentrated.overall_risk_score
        assert 0.0 <= varied.overall_risk_score <= 1.0

    @pytest.mark.unit
    def test_engagement_inequality(self) -> None:
        """Test that uneven engagement counts raise engagement selectivity."""
        engagements = [UserEngagement(content_id="h0") for _ in range(9)]
        engagements.append(UserEngagement(content_id="h1"))

        assessment = _make_assessor().calculate_echo_chamber_risk(
            "u1", make_history(12), engagements
        )

        inequality = assessment.concentration_metrics.engagement_inequality
        assert 0.0 < inequality <= 1.0
        assert (
            assessment.risk_factors[EchoChamberRiskFactor.ENGAGEMENT_SELECTIVITY]
            == inequality
        )

    @pytest.mark.unit
    def test_risk_level_is_monotonic(self) -> None:
        """Test the level boundaries and their ordering."""
        assessor = _make_assessor()

        assert assessor.risk_level_for(0.29) == EchoChamberRiskLevel.LOW
        assert assessor.risk_level_for(0.3) == EchoChamberRiskLevel.MODERATE
        assert assessor.risk_level_for(0.6) == EchoChamberRiskLevel.HIGH
        assert assessor.risk_level_for(0.8) == EchoChamberRiskLevel.CRITICAL

        order = list(EchoChamberRiskLevel)
        ranks = [order.index(assessor.risk_level_for(i / 100)) for i in range(101)]
        assert ranks == sorted(ranks)

    @pytest.mark.unit
    def test_pure_wrapper(self) -> None:
        """Test the pure function matches the assessor."""
        history = make_history(25)
        via_pure = calculate_echo_chamber_risk_pure("u1", history, now=FIXED_NOW)
        via_method = _make_assessor().calculate_echo_chamber_risk("u1", history)

        assert via_pure.overall_risk_score == pytest.approx(
            via_method.overall_risk_score
        )


class TestApplyEchoChamberPrevention:
    """Tests for EchoChamberRiskAssessor.apply_echo_chamber_prevention."""

    @pytest.mark.unit
    def test_low_risk_leaves_candidates_unchanged(self) -> None:
        """Test that LOW risk returns the candidates untouched."""
        candidates = [make_scored("a", 1.0), make_scored("b", 0.5, "author-2")]

        adjusted = _make_assessor().apply_echo_chamber_prevention(
            "u1", candidates, make_history(5)
        )

        assert [c.score for c in adjusted] == [1.0, 0.5]
        assert all(not c.contributions for c in adjusted)

    @pytest.mark.unit
    def test_elevated_risk_boosts_without_mutating_inputs(self) -> None:
        """Test that boosts land on copies and never decrease scores."""
        candidates = [
            make_scored("same", 1.0, "author-1", tags=["tech"]),
            make_scored("novel", 1.0, "author-new", tags=["gardening"]),
        ]

        adjusted = _make_assessor().apply_echo_chamber_prevention(
            "u1", candidates, make_history(25)
        )

        assert [c.score for c in candidates] == [1.0, 1.0]
        assert all(not c.contributions for c in candidates)
        assert [c.content_id for c in adjusted] == ["same", "novel"]
        for item in adjusted:
            assert item.score >= 1.0
            assert all(c.stage == "echo_chamber" for c in item.contributions)
            assert all(c.factor >= 1.0 for c in item.contributions)
        assert adjusted[1].score > adjusted[0].score

    @pytest.mark.unit
    def test_critical_risk_boost_factors(self) -> None:
        """Test the exact level, dimension and critical factors at CRITICAL risk."""
        candidates = [
            make_scored("same", 1.0, "author-1", tags=["tech"]),
            make_scored("novel", 1.0, "author-new", tags=["gardening"]),
        ]

        same, novel = _make_assessor().apply_echo_chamber_prevention(
            "u1", candidates, make_history(25)
        )

        # novel: overall 0.527 (topic 1, source 1, recency 0.04, unknowns 0.5)
        assert [c.factor for c in novel.contributions] == pytest.approx(
            [1.0 + 0.527 * 0.8, 1.3, 1.3, 1.2]
        )
        assert [c.reason for c in novel.contributions] == [
            "Diversity boost for critical echo chamber risk",
            "Boosted for topic diversity",
            "Boosted for source diversity",
            "Critical echo chamber prevention boost",
        ]
        assert novel.score == pytest.approx(1.4216 * 1.3 * 1.3 * 1.2)
        # same: overall 0.077 and no dimension above the score gate
        assert [c.factor for c in same.contributions] == pytest.approx(
            [1.0 + 0.077 * 0.8, 1.2]
        )

    @pytest.mark.unit
    def test_high_risk_uses_high_multiplier_without_critical_boost(self) -> None:
        """Test that HIGH risk applies the 0.5 multiplier and no flat boost."""
        assessor = _make_assessor(
            risk_thresholds={
                EchoChamberRiskLevel.MODERATE: 0.3,
                EchoChamberRiskLevel.HIGH: 0.6,
                EchoChamberRiskLevel.CRITICAL: 0.9,
            }
        )
        candidates = [make_scored("novel", 1.0, "author-new", tags=["gardening"])]

        (novel,) = assessor.apply_echo_chamber_prevention(
            "u1", candidates, make_history(25)
        )

        assert [c.factor for c in novel.contributions] == pytest.approx(
            [1.0 + 0.527 * 0.5, 1.3, 1.3]
        )

    @pytest.mark.unit
    def test_precomputed_assessment_is_used(self) -> None:
        """Test that a supplied LOW assessment skips prevention."""
        assessor = _make_assessor()
        low = assessor.calculate_echo_chamber_risk("u1", [])
        candidates = [make_scored("a", 1.0)]

        adjusted = assessor.apply_echo_chamber_prevention(
            "u1", candidates, make_history(25), assessment=low
        )

        assert adjusted[0].contributions == []


class TestBreakoutRecommendations:
    """Tests for EchoChamberRiskAssessor.generate_breakout_recommendations."""

    @pytest.mark.unit
    def test_all_recommendations_sorted_by_impact(self) -> None:
        """Test that concentrated topics and sources yield three suggestions."""
        analysis = _make_analysis(topic=0.9, source=0.9, dominant=["neutral"])

        recommendations = _make_assessor().generate_breakout_recommendations(analysis)

        assert [r.type for r in recommendations] == [
            BreakoutRecommendationType.SEEK_OPPOSING_VIEWS,
            BreakoutRecommendationType.EXPLORE_NEW_TOPICS,
            BreakoutRecommendationType.DIVERSIFY_SOURCES,
        ]
        impacts = [r.expected_impact for r in recommendations]
        assert impacts == sorted(impacts, reverse=True)
        assert recommendations[1].target_dimension == DiversityDimension.TOPIC

    @pytest.mark.unit
    def test_many_dominant_perspectives_skip_opposing_views(self) -> None:
        """Test that three dominant perspectives suppress the opposing views hint."""
        analysis = _make_analysis(dominant=["a", "b", "c"])

        recommendations = _make_assessor().generate_breakout_recommendations(analysis)

        assert recommendations == []


class TestIdentifyMissingPerspectives:
    """Tests for EchoChamberRiskAssessor.identify_missing_perspectives."""

    @pytest.mark.unit
    def test_no_engagements_reports_every_perspective(self) -> None:
        """Test that zero exposure marks all reference perspectives missing."""
        missing = _make_assessor().identify_missing_perspectives([])

        assert [m.perspective for m in missing] == [
            "liberal",
            "conservative",
            "centrist",
            "progressive",
            "libertarian",
        ]
        assert all(m.gap == pytest.approx(0.15) for m in missing)
        assert missing[0].sample_topics[0] == "social justice"

    @pytest.mark.unit
    def test_engaged_perspectives_are_not_missing(self) -> None:
        """Test that well covered perspectives are excluded."""
        engagements = [
            UserEngagement(content_id=f"c{i}", perspective="liberal") for i in range(5)
        ] + [
            UserEngagement(content_id=f"d{i}", perspective="conservative")
            for i in range(5)
        ]

        missing = _make_assessor().identify_missing_perspectives(engagements)

        assert {m.perspective for m in missing} == {
            "centrist",
            "progressive",
            "libertarian",
        }
        assert missing[0].reasoning == "Currently only 0% exposure, recommended 15%"
