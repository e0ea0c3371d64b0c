"""Data models for diversity analysis."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from src.config.schemas.base import DiversityDimension, RecommendationPriority
from src.content.models import EngagementPattern, TopicCategory


@dataclass(frozen=True)
class ContentFeatures:
    """Flat feature record derived from one content item.

    Attributes:
        content_id: Content identifier.
        author_id: Author identifier.
        topics: Topic names.
        topic_categories: Topic categories.
        content_type: Lower-cased content type.
        sentiment: Lower-cased sentiment, if known.
        language: Detected or declared language, if known.
        source: Link host, or "internal".
        perspective: Inferred perspective label.
        created_at: Content creation time.
        engagement_pattern: Engagement classification, if known.
    """

    content_id: str
    author_id: str
    topics: list[str]
    topic_categories: list[TopicCategory]
    content_type: str
    sentiment: str | None
    language: str | None
    source: str
    perspective: str
    created_at: datetime
    engagement_pattern: EngagementPattern | None = None

    @property
    def engagement_type(self) -> str | None:
        """Engagement type value, if an engagement pattern is present."""
        if self.engagement_pattern is None:
            return None
        return self.engagement_pattern.type.value


@dataclass(frozen=True)
class TimeWindow:
    """Interval described by a content distribution."""

    start_time: datetime
    end_time: datetime

    @property
    def duration_seconds(self) -> float:
        """Window length in seconds."""
        return (self.end_time - self.start_time).total_seconds()


@dataclass(frozen=True)
class ContentDistribution:
    """Normalized frequency maps over a user's recent history.

    Every map's values sum to 1.0 or the map is empty.

    Attributes:
        user_id: User the distribution describes.
        topic_distribution: Share per topic name.
        category_distribution: Share per topic category.
        source_distribution: Share per author id.
        content_type_distribution: Share per content type.
        sentiment_distribution: Share per sentiment.
        language_distribution: Share per language.
        temporal_distribution: Share per hour of day (UTC, "0" to "23").
        engagement_type_distribution: Share per engagement type.
        total_items: Number of history entries described.
        time_window: Window the history covers.
    """

    user_id: str
    topic_distribution: dict[str, float]
    category_distribution: dict[TopicCategory, float]
    source_distribution: dict[str, float]
    content_type_distribution: dict[str, float]
    sentiment_distribution: dict[str, float]
    language_distribution: dict[str, float]
    temporal_distribution: dict[str, float]
    engagement_type_distribution: dict[str, float]
    total_items: int
    time_window: TimeWindow


class RecommendationType(str, Enum):
    """Type of diversity recommendation."""

    INCREASE_VARIETY = "increase_variety"
    REDUCE_CLUSTERING = "reduce_clustering"
    BALANCE_PERSPECTIVES = "balance_perspectives"
    DIVERSIFY_SOURCES = "diversify_sources"
    TEMPORAL_SPACING = "temporal_spacing"


@dataclass(frozen=True)
class DiversityRecommendation:
    """Recommendation for improving diversity along one dimension."""

    dimension: DiversityDimension
    type: RecommendationType
    description: str
    priority: RecommendationPriority
    suggested_action: str
    impact_score: float

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for serialization."""
        return {
            "dimension": self.dimension.value,
            "type": self.type.value,
            "description": self.description,
            "priority": self.priority.value,
            "suggested_action": self.suggested_action,
            "impact_score": self.impact_score,
        }


@dataclass(frozen=True)
class DiversityAnalysisResult:
    """Per-candidate novelty relative to history.

    Attributes:
        content_id: Candidate identifier.
        overall_diversity_score: Weighted sum of dimension scores, in [0, 1].
        dimension_scores: Novelty per dimension, each in [0, 1].
        recommendations: Suggestions for low-scoring dimensions.
    """

    content_id: str
    overall_diversity_score: float
    dimension_scores: dict[DiversityDimension, float]
    recommendations: list[DiversityRecommendation] = field(default_factory=list)


class EchoChamberSeverity(str, Enum):
    """Severity levels for an echo chamber description."""

    NONE = "NONE"
    MILD = "MILD"
    MODERATE = "MODERATE"
    SEVERE = "SEVERE"


@dataclass(frozen=True)
class EchoChamberAnalysis:
    """Descriptive snapshot of history concentration.

    Attributes:
        is_echo_chamber: Whether severity is above NONE.
        severity: Severity derived from the concentration index.
        dominant_perspectives: Perspectives above the dominance share.
        missing_perspectives: Reference perspectives below the missing share.
        topic_concentration: Topic HHI.
        source_concentration: Author HHI.
        perspective_concentration: Perspective HHI.
        concentration_index: Mean of the three HHIs.
        recommendations: Guidance strings.
    """

    is_echo_chamber: bool
    severity: EchoChamberSeverity
    dominant_perspectives: list[str] = field(default_factory=list)
    missing_perspectives: list[str] = field(default_factory=list)
    topic_concentration: float = 0.0
    source_concentration: float = 0.0
    perspective_concentration: float = 0.0
    concentration_index: float = 0.0
    recommendations: list[str] = field(default_factory=list)
