"""Data models for echo chamber risk assessment."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from src.config.schemas.base import (
    DiversityDimension,
    EchoChamberRiskFactor,
    EchoChamberRiskLevel,
    RecommendationPriority,
)


@dataclass(frozen=True)
class ConcentrationMetrics:
    """Concentration measures over a user's history.

    Attributes:
        topic_herfindahl_index: Topic HHI (topicless items count as "unknown").
        source_herfindahl_index: Author HHI.
        perspective_entropy: Normalized Shannon entropy of perspectives.
        engagement_inequality: Coefficient of variation of engagement counts,
            halved and capped at 1.
        temporal_concentration: Hour-of-day HHI.
        diversity_deficit: Mean of the five concentration signals.
    """

    topic_herfindahl_index: float = 0.0
    source_herfindahl_index: float = 0.0
    perspective_entropy: float = 0.0
    engagement_inequality: float = 0.0
    temporal_concentration: float = 0.0
    diversity_deficit: float = 0.0

    def to_dict(self) -> dict[str, float]:
        """Convert to dictionary for serialization."""
        return {
            "topic_herfindahl_index": self.topic_herfindahl_index,
            "source_herfindahl_index": self.source_herfindahl_index,
            "perspective_entropy": self.perspective_entropy,
            "engagement_inequality": self.engagement_inequality,
            "temporal_concentration": self.temporal_concentration,
            "diversity_deficit": self.diversity_deficit,
        }


@dataclass(frozen=True)
class EchoChamberRiskAssessment:
    """Echo chamber risk for one user.

    Attributes:
        user_id: Assessed user.
        overall_risk_score: Weighted risk in [0, 1].
        risk_level: Level derived monotonically from the score.
        risk_factors: Score per risk factor (empty when history is too short).
        concentration_metrics: Underlying concentration measures.
        assessed_at: Assessment time.
    """

    user_id: str
    overall_risk_score: float
    risk_level: EchoChamberRiskLevel
    risk_factors: dict[EchoChamberRiskFactor, float]
    concentration_metrics: ConcentrationMetrics
    assessed_at: datetime

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for serialization."""
        return {
            "user_id": self.user_id,
            "overall_risk_score": self.overall_risk_score,
            "risk_level": self.risk_level.value,
            "risk_factors": {k.value: v for k, v in self.risk_factors.items()},
            "concentration_metrics": self.concentration_metrics.to_dict(),
            "assessed_at": self.assessed_at.isoformat(),
        }


class BreakoutRecommendationType(str, Enum):
    """Types of echo chamber breakout recommendations."""

    EXPLORE_NEW_TOPICS = "explore_new_topics"
    DIVERSIFY_SOURCES = "diversify_sources"
    SEEK_OPPOSING_VIEWS = "seek_opposing_views"
    VARY_CONTENT_TYPES = "vary_content_types"
    EXPAND_TIME_PATTERNS = "expand_time_patterns"
    FOLLOW_DIVERSE_USERS = "follow_diverse_users"


@dataclass(frozen=True)
class BreakoutRecommendation:
    """User-facing advice for leaving an echo chamber."""

    type: BreakoutRecommendationType
    title: str
    description: str
    priority: RecommendationPriority
    suggested_actions: list[str] = field(default_factory=list)
    expected_impact: float = 0.0
    target_dimension: DiversityDimension = DiversityDimension.TOPIC


@dataclass(frozen=True)
class MissingPerspective:
    """A perspective the user is under-exposed to.

    Attributes:
        perspective: Perspective label.
        current_exposure: Share of engagements with this perspective.
        recommended_exposure: Target share.
        gap: recommended_exposure - current_exposure.
        sample_topics: Example topics to explore.
        reasoning: Human-readable explanation.
    """

    perspective: str
    current_exposure: float
    recommended_exposure: float
    gap: float
    sample_topics: list[str]
    reasoning: str
