"""Multi-dimensional diversity analysis of candidates against history."""

from collections import Counter
from collections.abc import Sequence
from datetime import UTC, datetime, timedelta

import structlog

from src.config.schemas.base import DiversityDimension, RecommendationPriority
from src.config.schemas.diversity import DiversityConfig
from src.content.models import FeedEntry, StoredContent
from src.diversity.constants import NEUTRAL_SCORE
from src.diversity.features import FeatureExtractor
from src.diversity.models import (
    ContentDistribution,
    ContentFeatures,
    DiversityAnalysisResult,
    DiversityRecommendation,
    EchoChamberAnalysis,
    EchoChamberSeverity,
    RecommendationType,
    TimeWindow,
)
from src.diversity.stats import clamp, herfindahl_index, normalized_distribution


logger = structlog.get_logger()


_RECOMMENDATION_TYPES: dict[DiversityDimension, RecommendationType] = {
    DiversityDimension.SOURCE: RecommendationType.DIVERSIFY_SOURCES,
    DiversityDimension.PERSPECTIVE: RecommendationType.BALANCE_PERSPECTIVES,
    DiversityDimension.RECENCY: RecommendationType.TEMPORAL_SPACING,
}


def _novelty(value: str | None, distribution: dict[str, float]) -> float:
    """Novelty of a single value: 1 - min(historical share, 1)."""
    if value is None:
        return NEUTRAL_SCORE
    return 1.0 - min(distribution.get(value, 0.0), 1.0)


def _hour_bucket(moment: datetime) -> int:
    return moment.astimezone(UTC).hour


class DiversityAnalyzer:
    """Scores candidate novelty and describes history concentration.

    The analyzer is stateless apart from its configuration and clock.
    """

    def __init__(
        self,
        config: DiversityConfig | None = None,
        now: datetime | None = None,
    ) -> None:
        """Initialize the analyzer.

        Args:
            config: Diversity configuration. Defaults are used if None.
            now: Reference time for the analysis window.
        """
        self._config = config or DiversityConfig()
        self._now = now or datetime.now(UTC)
        self._extractor = FeatureExtractor(self._config.perspective_keywords)
        self._log = logger.bind(component="diversity", subcomponent="analyzer")

    @property
    def config(self) -> DiversityConfig:
        """Active diversity configuration."""
        return self._config

    def calculate_diversity_scores(
        self,
        candidates: Sequence[StoredContent],
        history: Sequence[FeedEntry],
        user_id: str = "",
    ) -> list[DiversityAnalysisResult]:
        """Score each candidate's novelty relative to history.

        History shorter than the configured minimum yields a neutral result
        (0.5 on every dimension, no recommendations) for every candidate.

        Args:
            candidates: Items to score.
            history: Recent feed history of the user.
            user_id: User identifier for the distribution.

        Returns:
            One result per candidate, in input order.
        """
        if len(history) < self._config.minimum_history_size:
            self._log.debug(
                "diversity_history_insufficient",
                history_count=len(history),
                minimum=self._config.minimum_history_size,
            )
            return [self._neutral_result(c.id) for c in candidates]

        historical = self._extractor.extract_all(entry.content for entry in history)
        distribution = self._build_distribution(user_id, historical, self._window())
        perspective_counts = Counter(f.perspective for f in historical)
        hour_counts = Counter(_hour_bucket(f.created_at) for f in historical)

        results = [
            self._score_candidate(
                self._extractor.extract(candidate),
                distribution,
                perspective_counts,
                hour_counts,
                len(historical),
            )
            for candidate in candidates
        ]

        self._log.debug(
            "diversity_scores_computed",
            candidate_count=len(candidates),
            history_count=len(history),
        )
        return results

    def build_content_distribution(
        self,
        user_id: str,
        history: Sequence[FeedEntry],
        time_window: TimeWindow | None = None,
    ) -> ContentDistribution:
        """Build normalized frequency maps from history.

        Args:
            user_id: User the history belongs to.
            history: Feed history entries.
            time_window: Window to record; defaults to the configured window.

        Returns:
            ContentDistribution whose maps each sum to 1.0 or are empty.
        """
        features = self._extractor.extract_all(entry.content for entry in history)
        window = time_window or self._window()
        return self._build_distribution(user_id, features, window)

    def analyze_echo_chamber(
        self,
        user_id: str,
        history: Sequence[FeedEntry],
    ) -> EchoChamberAnalysis:
        """Describe how concentrated a user's history is.

        Args:
            user_id: User the history belongs to.
            history: Feed history entries.

        Returns:
            EchoChamberAnalysis; empty history is never an echo chamber.
        """
        if not history:
            return EchoChamberAnalysis(
                is_echo_chamber=False, severity=EchoChamberSeverity.NONE
            )

        cfg = self._config
        features = self._extractor.extract_all(entry.content for entry in history)

        topic_hhi = herfindahl_index(t for f in features for t in f.topics)
        source_hhi = herfindahl_index(f.author_id for f in features)
        perspective_hhi = herfindahl_index(f.perspective for f in features)
        index = (topic_hhi + source_hhi + perspective_hhi) / 3
        severity = self.severity_for(index)

        shares = normalized_distribution(f.perspective for f in features)
        dominant = [
            p for p, share in shares.items() if share > cfg.dominant_perspective_share
        ]
        missing = [
            p
            for p in cfg.reference_perspectives
            if shares.get(p, 0.0) < cfg.missing_perspective_share
        ]

        analysis = EchoChamberAnalysis(
            is_echo_chamber=severity != EchoChamberSeverity.NONE,
            severity=severity,
            dominant_perspectives=dominant,
            missing_perspectives=missing,
            topic_concentration=topic_hhi,
            source_concentration=source_hhi,
            perspective_concentration=perspective_hhi,
            concentration_index=index,
            recommendations=self._echo_chamber_guidance(
                severity, missing, topic_hhi, source_hhi
            ),
        )

        self._log.info(
            "echo_chamber_analyzed",
            user_id=user_id,
            history_count=len(history),
            severity=severity.value,
            concentration_index=round(index, 4),
        )
        return analysis

    def severity_for(self, concentration_index: float) -> EchoChamberSeverity:
        """Map a concentration index to a severity (monotonic)."""
        cfg = self._config
        if concentration_index > cfg.severe_concentration:
            return EchoChamberSeverity.SEVERE
        if concentration_index > cfg.moderate_concentration:
            return EchoChamberSeverity.MODERATE
        if concentration_index > cfg.mild_concentration:
            return EchoChamberSeverity.MILD
        return EchoChamberSeverity.NONE

    def _window(self) -> TimeWindow:
        return TimeWindow(
            start_time=self._now - timedelta(days=self._config.time_window_days),
            end_time=self._now,
        )

    def _build_distribution(
        self,
        user_id: str,
        features: Sequence[ContentFeatures],
        time_window: TimeWindow,
    ) -> ContentDistribution:
        return ContentDistribution(
            user_id=user_id,
            topic_distribution=normalized_distribution(
                t for f in features for t in f.topics
            ),
            category_distribution=normalized_distribution(
                c for f in features for c in f.topic_categories
            ),
            source_distribution=normalized_distribution(f.author_id for f in features),
            content_type_distribution=normalized_distribution(
                f.content_type for f in features
            ),
            sentiment_distribution=normalized_distribution(
                f.sentiment for f in features if f.sentiment is not None
            ),
            language_distribution=normalized_distribution(
                f.language for f in features if f.language is not None
            ),
            temporal_distribution=normalized_distribution(
                str(_hour_bucket(f.created_at)) for f in features
            ),
            engagement_type_distribution=normalized_distribution(
                f.engagement_type for f in features if f.engagement_type is not None
            ),
            total_items=len(features),
            time_window=time_window,
        )

    def _score_candidate(
        self,
        candidate: ContentFeatures,
        distribution: ContentDistribution,
        perspective_counts: Counter[str],
        hour_counts: Counter[int],
        history_size: int,
    ) -> DiversityAnalysisResult:
        if candidate.topics:
            topic_score = sum(
                _novelty(t, distribution.topic_distribution) for t in candidate.topics
            ) / len(candidate.topics)
        else:
            topic_score = NEUTRAL_SCORE

        perspective_share = (
            perspective_counts.get(candidate.perspective, 0) / history_size
            if history_size
            else 0.0
        )

        if hour_counts:
            avg_bucket = sum(hour_counts.values()) / len(hour_counts)
            bucket = hour_counts.get(_hour_bucket(candidate.created_at), 0)
            recency_score = 1.0 - min(bucket / avg_bucket, 1.0)
        else:
            recency_score = 1.0

        scores: dict[DiversityDimension, float] = {
            DiversityDimension.TOPIC: topic_score,
            DiversityDimension.SOURCE: _novelty(
                candidate.author_id, distribution.source_distribution
            ),
            DiversityDimension.PERSPECTIVE: 1.0 - min(perspective_share, 1.0),
            DiversityDimension.CONTENT_TYPE: _novelty(
                candidate.content_type, distribution.content_type_distribution
            ),
            DiversityDimension.RECENCY: recency_score,
            DiversityDimension.SENTIMENT: _novelty(
                candidate.sentiment, distribution.sentiment_distribution
            ),
            DiversityDimension.LANGUAGE: _novelty(
                candidate.language, distribution.language_distribution
            ),
            DiversityDimension.ENGAGEMENT_TYPE: _novelty(
                candidate.engagement_type, distribution.engagement_type_distribution
            ),
        }

        overall = sum(
            score * self._config.dimension_weights.get(dimension, 0.0)
            for dimension, score in scores.items()
        )

        return DiversityAnalysisResult(
            content_id=candidate.content_id,
            overall_diversity_score=clamp(overall),
            dimension_scores=scores,
            recommendations=self._recommendations(scores),
        )

    def _recommendations(
        self, scores: dict[DiversityDimension, float]
    ) -> list[DiversityRecommendation]:
        cfg = self._config
        recommendations: list[DiversityRecommendation] = []
        for dimension, score in scores.items():
            if score >= cfg.diversity_threshold:
                continue
            if score < cfg.high_priority_threshold:
                priority = RecommendationPriority.HIGH
            elif score < cfg.medium_priority_threshold:
                priority = RecommendationPriority.MEDIUM
            else:
                priority = RecommendationPriority.LOW
            name = dimension.value.replace("_", " ")
            recommendations.append(
                DiversityRecommendation(
                    dimension=dimension,
                    type=_RECOMMENDATION_TYPES.get(
                        dimension, RecommendationType.INCREASE_VARIETY
                    ),
                    description=f"Low diversity in {name} dimension",
                    priority=priority,
                    suggested_action=(
                        f"Include content from different {name} categories"
                    ),
                    impact_score=1.0 - score,
                )
            )
        return recommendations

    def _echo_chamber_guidance(
        self,
        severity: EchoChamberSeverity,
        missing: list[str],
        topic_hhi: float,
        source_hhi: float,
    ) -> list[str]:
        if severity == EchoChamberSeverity.NONE:
            return []
        advice_level = self._config.specific_advice_concentration
        guidance = ["Diversify content sources to include different perspectives"]
        if topic_hhi > advice_level:
            guidance.append("Explore content from different topic categories")
        if source_hhi > advice_level:
            guidance.append("Follow more authors with different viewpoints")
        if missing:
            guidance.append(
                f"Consider content representing {', '.join(missing)} perspectives"
            )
        if severity == EchoChamberSeverity.SEVERE:
            guidance.append(
                "Your content consumption shows very limited diversity; "
                "consider actively seeking opposing viewpoints"
            )
        return guidance

    @staticmethod
    def _neutral_result(content_id: str) -> DiversityAnalysisResult:
        return DiversityAnalysisResult(
            content_id=content_id,
            overall_diversity_score=NEUTRAL_SCORE,
            dimension_scores=dict.fromkeys(DiversityDimension, NEUTRAL_SCORE),
            recommendations=[],
        )


def calculate_diversity_scores_pure(
    candidates: Sequence[StoredContent],
    history: Sequence[FeedEntry],
    config: DiversityConfig | None = None,
    user_id: str = "",
    now: datetime | None = None,
) -> list[DiversityAnalysisResult]:
    """Pure function wrapper for diversity scoring.

    Args:
        candidates: Items to score.
        history: Recent feed history.
        config: Diversity configuration.
        user_id: User identifier.
        now: Reference time.

    Returns:
        One DiversityAnalysisResult per candidate.
    """
    return DiversityAnalyzer(config, now).calculate_diversity_scores(
        candidates, history, user_id
    )
