"""Data models for the diversification pipeline output."""

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from src.balancer.models import BalancedContentDistribution, QualityMetrics
from src.config.schemas.base import EchoChamberRiskLevel, RecommendationPriority
from src.content.models import ScoreContribution, StoredContent


@dataclass
class ScoringBreakdown:
    """Base score plus the ordered multiplicative factors applied to it.

    Attributes:
        base_score: Score supplied by the relevance engine.
        contributions: Factors in the order they were applied.
    """

    base_score: float
    contributions: list[ScoreContribution] = field(default_factory=list)

    def apply(self, stage: str, factor: float, reason: str) -> None:
        """Append a multiplicative factor."""
        self.contributions.append(ScoreContribution(stage, factor, reason))

    @property
    def final_multiplier(self) -> float:
        """Product of all factors."""
        return math.prod(c.factor for c in self.contributions)

    @property
    def final_score(self) -> float:
        """Base score times every factor, in application order."""
        score = self.base_score
        for contribution in self.contributions:
            score *= contribution.factor
        return score

    def stage_multipliers(self) -> dict[str, float]:
        """Combined multiplier per stage."""
        result: dict[str, float] = {}
        for contribution in self.contributions:
            stage = contribution.stage
            result[stage] = result.get(stage, 1.0) * contribution.factor
        return result

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for serialization."""
        return {
            "base_score": self.base_score,
            "contributions": [c.to_dict() for c in self.contributions],
            "final_multiplier": self.final_multiplier,
            "final_score": self.final_score,
        }


@dataclass
class EnhancedScoredContent:
    """A feed item with its full scoring explanation.

    ``final_score`` is always derived from the breakdown.

    Attributes:
        content: The content item.
        original_score: Base relevance score.
        diversity_score: Overall diversity score.
        freshness_score: Freshness score.
        diversity_boost: Diversity multiplier (1.0 when disabled).
        freshness_boost: Freshness multiplier (1.0 when disabled).
        breakdown: Base score and ordered contributions.
        metadata: Additional diagnostic values.
    """

    content: StoredContent
    original_score: float
    diversity_score: float = 0.0
    freshness_score: float = 0.0
    diversity_boost: float = 1.0
    freshness_boost: float = 1.0
    breakdown: ScoringBreakdown | None = None
    metadata: dict[str, object] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.breakdown is None:
            self.breakdown = ScoringBreakdown(base_score=self.original_score)

    @property
    def content_id(self) -> str:
        """Identifier of the wrapped content."""
        return self.content.id

    @property
    def final_score(self) -> float:
        """Score after every applied factor."""
        return self.breakdown.final_score

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for serialization."""
        return {
            "content_id": self.content.id,
            "author_id": self.content.author_id,
            "original_score": self.original_score,
            "final_score": self.final_score,
            "diversity_score": self.diversity_score,
            "freshness_score": self.freshness_score,
            "diversity_boost": self.diversity_boost,
            "freshness_boost": self.freshness_boost,
            "breakdown": self.breakdown.to_dict(),
            "metadata": dict(self.metadata),
        }


@dataclass(frozen=True)
class FeedDiversityMetrics:
    """Diversity summary of a final feed.

    Attributes:
        overall_diversity_score: Mean item diversity score.
        freshness_index: Mean item freshness score.
        source_distribution: Share per author.
        topic_distribution: Share per topic.
        content_type_distribution: Share per content type.
        echo_chamber_risk_level: Risk level from the assessment.
        balance_metrics: Observed category composition.
        quality_metrics: Quality summary.
    """

    overall_diversity_score: float = 0.0
    freshness_index: float = 0.0
    source_distribution: dict[str, float] = field(default_factory=dict)
    topic_distribution: dict[str, float] = field(default_factory=dict)
    content_type_distribution: dict[str, float] = field(default_factory=dict)
    echo_chamber_risk_level: EchoChamberRiskLevel = EchoChamberRiskLevel.LOW
    balance_metrics: BalancedContentDistribution = field(
        default_factory=BalancedContentDistribution
    )
    quality_metrics: QualityMetrics = field(default_factory=QualityMetrics)

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for serialization."""
        return {
            "overall_diversity_score": self.overall_diversity_score,
            "freshness_index": self.freshness_index,
            "source_distribution": dict(self.source_distribution),
            "topic_distribution": dict(self.topic_distribution),
            "content_type_distribution": dict(self.content_type_distribution),
            "echo_chamber_risk_level": self.echo_chamber_risk_level.value,
            "balance_metrics": self.balance_metrics.to_dict(),
            "quality_metrics": self.quality_metrics.to_dict(),
        }


@dataclass(frozen=True)
class ProcessingStats:
    """Timing and volume statistics for one call."""

    total_processing_time_ms: float = 0.0
    items_processed: int = 0
    items_filtered: int = 0
    history_fetch_time_ms: float = 0.0
    diversity_analysis_time_ms: float = 0.0
    freshness_analysis_time_ms: float = 0.0
    echo_chamber_analysis_time_ms: float = 0.0
    balancing_time_ms: float = 0.0

    def to_dict(self) -> dict[str, float | int]:
        """Convert to dictionary for serialization."""
        return {
            "total_processing_time_ms": self.total_processing_time_ms,
            "items_processed": self.items_processed,
            "items_filtered": self.items_filtered,
            "history_fetch_time_ms": self.history_fetch_time_ms,
            "diversity_analysis_time_ms": self.diversity_analysis_time_ms,
            "freshness_analysis_time_ms": self.freshness_analysis_time_ms,
            "echo_chamber_analysis_time_ms": self.echo_chamber_analysis_time_ms,
            "balancing_time_ms": self.balancing_time_ms,
        }


class SystemRecommendationType(str, Enum):
    """Operator-facing recommendation kinds."""

    INCREASE_CONTENT_POOL = "increase_content_pool"
    DIVERSIFY_CONTENT_SOURCES = "diversify_content_sources"
    ADJUST_FRESHNESS_WEIGHTS = "adjust_freshness_weights"
    IMPROVE_ECHO_CHAMBER_DETECTION = "improve_echo_chamber_detection"
    OPTIMIZE_BALANCING_QUOTAS = "optimize_balancing_quotas"
    ENHANCE_USER_PREFERENCES = "enhance_user_preferences"


@dataclass(frozen=True)
class SystemRecommendation:
    """Operator-facing recommendation about feed health."""

    type: SystemRecommendationType
    priority: RecommendationPriority
    description: str
    expected_impact: float
    action_required: str

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for serialization."""
        return {
            "type": self.type.value,
            "priority": self.priority.value,
            "description": self.description,
            "expected_impact": self.expected_impact,
            "action_required": self.action_required,
        }


@dataclass
class DiversifiedFeedResult:
    """Output of a diversification call.

    Attributes:
        diversified_feed: Ranked feed items, at most the requested size.
        diversity_metrics: Diversity summary of the feed.
        processing_stats: Timing and volume statistics.
        recommendations: Operator-facing recommendations.
    """

    diversified_feed: list[EnhancedScoredContent]
    diversity_metrics: FeedDiversityMetrics = field(
        default_factory=FeedDiversityMetrics
    )
    processing_stats: ProcessingStats = field(default_factory=ProcessingStats)
    recommendations: list[SystemRecommendation] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for serialization."""
        return {
            "diversified_feed": [item.to_dict() for item in self.diversified_feed],
            "diversity_metrics": self.diversity_metrics.to_dict(),
            "processing_stats": self.processing_stats.to_dict(),
            "recommendations": [r.to_dict() for r in self.recommendations],
        }


@dataclass(frozen=True)
class DiversityMetricsRecord:
    """Diagnostic record sent to the metrics sink after each call."""

    user_id: str
    generated_at: datetime
    feed_size: int
    avg_diversity_score: float
    avg_freshness_score: float
    unique_sources: int
    unique_topics: int
    echo_chamber_risk_level: EchoChamberRiskLevel
    used_fallback: bool = False

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for serialization."""
        return {
            "user_id": self.user_id,
            "generated_at": self.generated_at.isoformat(),
            "feed_size": self.feed_size,
            "avg_diversity_score": self.avg_diversity_score,
            "avg_freshness_score": self.avg_freshness_score,
            "unique_sources": self.unique_sources,
            "unique_topics": self.unique_topics,
            "echo_chamber_risk_level": self.echo_chamber_risk_level.value,
            "used_fallback": self.used_fallback,
        }
