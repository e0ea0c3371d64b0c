"""Echo chamber risk assessment and prevention.

The assessor measures how concentrated a user's recent history is along
topics, sources, perspectives, engagement and time of day, and converts the
resulting risk into multiplicative diversity boosts for candidates.
"""

from collections import Counter
from collections.abc import Sequence
from datetime import UTC, datetime

import structlog

from src.config.schemas.base import (
    DiversityDimension,
    EchoChamberRiskFactor,
    EchoChamberRiskLevel,
    RecommendationPriority,
)
from src.config.schemas.diversity import DiversityConfig
from src.config.schemas.echo_chamber import EchoChamberPreventionConfig
from src.content.models import FeedEntry, ScoredContent, UserEngagement
from src.diversity.analyzer import DiversityAnalyzer
from src.diversity.constants import UNKNOWN_TOPIC
from src.diversity.features import FeatureExtractor
from src.diversity.models import DiversityAnalysisResult, EchoChamberAnalysis
from src.diversity.stats import (
    coefficient_of_variation,
    herfindahl_index,
    normalized_shannon_entropy,
)
from src.echo_chamber.constants import (
    BREAKOUT_CONCENTRATION_THRESHOLD,
    BREAKOUT_MAX_DOMINANT_PERSPECTIVES,
    DEFAULT_DIMENSION_RISK_FACTOR,
    DEFAULT_SAMPLE_TOPICS,
    DIMENSION_RISK_FACTORS,
    PERSPECTIVE_SAMPLE_TOPICS,
    PREVENTION_STAGE,
)
from src.echo_chamber.models import (
    BreakoutRecommendation,
    BreakoutRecommendationType,
    ConcentrationMetrics,
    EchoChamberRiskAssessment,
    MissingPerspective,
)


logger = structlog.get_logger()


class EchoChamberRiskAssessor:
    """Assesses echo chamber risk and boosts diverse candidates.

    Args:
        config: Prevention configuration.
        diversity_analyzer: Analyzer used for per-candidate novelty.
        now: Assessment time.
    """

    def __init__(
        self,
        config: EchoChamberPreventionConfig | None = None,
        diversity_analyzer: DiversityAnalyzer | None = None,
        now: datetime | None = None,
    ) -> None:
        self._config = config or EchoChamberPreventionConfig()
        self._now = now or datetime.now(UTC)
        self._analyzer = diversity_analyzer or DiversityAnalyzer(
            DiversityConfig(), now=self._now
        )
        self._extractor = FeatureExtractor(self._analyzer.config.perspective_keywords)
        self._log = logger.bind(component="echo_chamber", subcomponent="assessor")

    def calculate_echo_chamber_risk(
        self,
        user_id: str,
        history: Sequence[FeedEntry],
        engagements: Sequence[UserEngagement] = (),
    ) -> EchoChamberRiskAssessment:
        """Compute the echo chamber risk for a user.

        Args:
            user_id: User to assess.
            history: Recent feed history.
            engagements: Recent engagement events.

        Returns:
            EchoChamberRiskAssessment. Short history yields LOW with score 0.
        """
        if len(history) < self._config.minimum_history_size:
            return EchoChamberRiskAssessment(
                user_id=user_id,
                overall_risk_score=0.0,
                risk_level=EchoChamberRiskLevel.LOW,
                risk_factors={},
                concentration_metrics=ConcentrationMetrics(),
                assessed_at=self._now,
            )

        features = self._extractor.extract_all(entry.content for entry in history)

        topic_hhi = herfindahl_index(
            topic for f in features for topic in (f.topics or [UNKNOWN_TOPIC])
        )
        source_hhi = herfindahl_index(f.author_id for f in features)
        entropy = normalized_shannon_entropy(f.perspective for f in features)
        if engagements:
            per_content = Counter(e.content_id for e in engagements)
            counts = [float(c) for c in per_content.values()]
            inequality = min(coefficient_of_variation(counts) / 2.0, 1.0)
        else:
            inequality = 0.0
        temporal = herfindahl_index(f.created_at.astimezone(UTC).hour for f in features)
        deficit = (
            topic_hhi + source_hhi + (1.0 - entropy) + inequality + temporal
        ) / 5.0

        metrics = ConcentrationMetrics(
            topic_herfindahl_index=topic_hhi,
            source_herfindahl_index=source_hhi,
            perspective_entropy=entropy,
            engagement_inequality=inequality,
            temporal_concentration=temporal,
            diversity_deficit=deficit,
        )

        unique_authors = len({f.author_id for f in features})
        risk_factors = {
            EchoChamberRiskFactor.TOPIC_CONCENTRATION: topic_hhi,
            EchoChamberRiskFactor.SOURCE_CONCENTRATION: source_hhi,
            EchoChamberRiskFactor.PERSPECTIVE_BIAS: 1.0 - entropy,
            EchoChamberRiskFactor.TEMPORAL_CLUSTERING: temporal,
            EchoChamberRiskFactor.ENGAGEMENT_SELECTIVITY: inequality,
            EchoChamberRiskFactor.SOCIAL_HOMOGENEITY: 1.0
            - min(unique_authors / len(features), 1.0),
        }

        weights = self._config.risk_factor_weights
        weighted = sum(
            score * weights.get(factor, 0.0) for factor, score in risk_factors.items()
        )
        overall = min(max(weighted, 0.0), 1.0)
        level = self.risk_level_for(overall)

        self._log.info(
            "echo_chamber_risk_assessed",
            user_id=user_id,
            history_count=len(history),
            engagement_count=len(engagements),
            risk_score=round(overall, 4),
            risk_level=level.value,
        )

        return EchoChamberRiskAssessment(
            user_id=user_id,
            overall_risk_score=overall,
            risk_level=level,
            risk_factors=risk_factors,
            concentration_metrics=metrics,
            assessed_at=self._now,
        )

    def risk_level_for(self, score: float) -> EchoChamberRiskLevel:
        """Map a risk score to a level (monotonic in the score)."""
        thresholds = self._config.risk_thresholds
        for level in (
            EchoChamberRiskLevel.CRITICAL,
            EchoChamberRiskLevel.HIGH,
            EchoChamberRiskLevel.MODERATE,
        ):
            if level in thresholds and score >= thresholds[level]:
                return level
        return EchoChamberRiskLevel.LOW

    def apply_echo_chamber_prevention(
        self,
        user_id: str,
        candidates: Sequence[ScoredContent],
        history: Sequence[FeedEntry],
        assessment: EchoChamberRiskAssessment | None = None,
    ) -> list[ScoredContent]:
        """Boost diverse candidates in proportion to the user's risk.

        Inputs are not mutated; boosted copies are returned in input order.

        Args:
            user_id: User the feed is for.
            candidates: Scored candidates.
            history: Recent feed history.
            assessment: Precomputed risk assessment, computed if None.

        Returns:
            Candidates with prevention boosts applied. Unchanged at LOW risk.
        """
        if assessment is None:
            assessment = self.calculate_echo_chamber_risk(user_id, history)

        if assessment.risk_level == EchoChamberRiskLevel.LOW:
            return list(candidates)

        analyses = self._analyzer.calculate_diversity_scores(
            [c.content for c in candidates], history, user_id
        )
        adjusted = [
            self._boost(candidate, analysis, assessment)
            for candidate, analysis in zip(candidates, analyses, strict=True)
        ]

        self._log.info(
            "echo_chamber_prevention_applied",
            user_id=user_id,
            risk_level=assessment.risk_level.value,
            candidate_count=len(candidates),
            boosted_count=sum(1 for c in adjusted if c.contributions),
        )
        return adjusted

    def _boost(
        self,
        candidate: ScoredContent,
        analysis: DiversityAnalysisResult,
        assessment: EchoChamberRiskAssessment,
    ) -> ScoredContent:
        cfg = self._config
        item = candidate.copy()
        level = assessment.risk_level

        multiplier = cfg.diversity_boost_multipliers.get(level, 0.0)
        item.apply(
            PREVENTION_STAGE,
            1.0 + analysis.overall_diversity_score * multiplier,
            f"Diversity boost for {level.value.lower()} echo chamber risk",
        )

        for dimension, score in analysis.dimension_scores.items():
            factor = DIMENSION_RISK_FACTORS.get(
                dimension, DEFAULT_DIMENSION_RISK_FACTOR
            )
            risk = assessment.risk_factors.get(factor, 0.0)
            if (
                risk > cfg.dimension_risk_threshold
                and score > cfg.dimension_score_threshold
            ):
                item.apply(
                    PREVENTION_STAGE,
                    1.0 + score * risk * cfg.dimension_boost_weight,
                    f"Boosted for {dimension.value} diversity",
                )

        if level == EchoChamberRiskLevel.CRITICAL:
            item.apply(
                PREVENTION_STAGE,
                1.0 + cfg.critical_boost,
                "Critical echo chamber prevention boost",
            )
        return item

    def generate_breakout_recommendations(
        self, analysis: EchoChamberAnalysis
    ) -> list[BreakoutRecommendation]:
        """Suggest ways out of an echo chamber, highest expected impact first.

        Args:
            analysis: Descriptive echo chamber analysis.

        Returns:
            Breakout recommendations sorted by expected impact.
        """
        recommendations: list[BreakoutRecommendation] = []

        if analysis.topic_concentration > BREAKOUT_CONCENTRATION_THRESHOLD:
            recommendations.append(
                BreakoutRecommendation(
                    type=BreakoutRecommendationType.EXPLORE_NEW_TOPICS,
                    title="Explore New Topic Areas",
                    description=(
                        "Your content is heavily concentrated in specific topics. "
                        "Try exploring related or completely different subject areas."
                    ),
                    priority=RecommendationPriority.HIGH,
                    suggested_actions=[
                        "Follow accounts that post about different topics",
                        "Search for content in unfamiliar categories",
                        "Use topic discovery features to find new interests",
                    ],
                    expected_impact=0.4,
                    target_dimension=DiversityDimension.TOPIC,
                )
            )

        if analysis.source_concentration > BREAKOUT_CONCENTRATION_THRESHOLD:
            recommendations.append(
                BreakoutRecommendation(
                    type=BreakoutRecommendationType.DIVERSIFY_SOURCES,
                    title="Diversify Your Content Sources",
                    description=(
                        "You're getting most content from a limited set of sources. "
                        "Branch out to different authors and publishers."
                    ),
                    priority=RecommendationPriority.HIGH,
                    suggested_actions=[
                        "Follow new authors in your areas of interest",
                        "Explore content from different regions or cultures",
                        "Subscribe to publications with different editorial perspectives",
                    ],
                    expected_impact=0.35,
                    target_dimension=DiversityDimension.SOURCE,
                )
            )

        if len(analysis.dominant_perspectives) <= BREAKOUT_MAX_DOMINANT_PERSPECTIVES:
            recommendations.append(
                BreakoutRecommendation(
                    type=BreakoutRecommendationType.SEEK_OPPOSING_VIEWS,
                    title="Seek Different Perspectives",
                    description=(
                        "Your feed shows limited viewpoint diversity. Consider "
                        "exploring content that challenges your assumptions."
                    ),
                    priority=RecommendationPriority.HIGH,
                    suggested_actions=[
                        "Read opinion pieces from different political perspectives",
                        "Follow thought leaders with different backgrounds",
                        "Engage with content that presents alternative viewpoints",
                    ],
                    expected_impact=0.5,
                    target_dimension=DiversityDimension.PERSPECTIVE,
                )
            )

        return sorted(recommendations, key=lambda r: r.expected_impact, reverse=True)

    def identify_missing_perspectives(
        self, engagements: Sequence[UserEngagement]
    ) -> list[MissingPerspective]:
        """Find reference perspectives the user rarely engages with.

        Args:
            engagements: Recent engagement events.

        Returns:
            Missing perspectives, largest exposure gap first. With no
            engagements every reference perspective has zero exposure.
        """
        cfg = self._config
        counts = Counter(e.perspective for e in engagements)
        total = len(engagements)
        target = cfg.recommended_perspective_exposure

        missing: list[MissingPerspective] = []
        for perspective in cfg.engagement_perspectives:
            exposure = counts.get(perspective, 0) / total if total else 0.0
            gap = target - exposure
            if gap <= cfg.perspective_gap_threshold:
                continue
            missing.append(
                MissingPerspective(
                    perspective=perspective,
                    current_exposure=exposure,
                    recommended_exposure=target,
                    gap=gap,
                    sample_topics=list(
                        PERSPECTIVE_SAMPLE_TOPICS.get(
                            perspective, DEFAULT_SAMPLE_TOPICS
                        )
                    ),
                    reasoning=(
                        f"Currently only {int(exposure * 100)}% exposure, "
                        f"recommended {int(target * 100)}%"
                    ),
                )
            )
        return sorted(missing, key=lambda m: m.gap, reverse=True)


def calculate_echo_chamber_risk_pure(
    user_id: str,
    history: Sequence[FeedEntry],
    engagements: Sequence[UserEngagement] = (),
    config: EchoChamberPreventionConfig | None = None,
    now: datetime | None = None,
) -> EchoChamberRiskAssessment:
    """Pure function wrapper for risk assessment.

    Args:
        user_id: User to assess.
        history: Recent feed history.
        engagements: Recent engagement events.
        config: Prevention configuration.
        now: Assessment time.

    Returns:
        EchoChamberRiskAssessment.
    """
    return EchoChamberRiskAssessor(config, now=now).calculate_echo_chamber_risk(
        user_id, history, engagements
    )
