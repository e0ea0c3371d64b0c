"""Data models for content balancing."""

from dataclasses import dataclass, field
from enum import Enum

from src.config.schemas.balancing import ContentQuotas
from src.content.models import ScoredContent


@dataclass(frozen=True)
class CategoryMembership:
    """Independent category predicates for one item, with their inputs.

    Attributes:
        content_id: Item identifier.
        fresh: Recency above the fresh threshold.
        familiar: Familiarity above the familiar threshold.
        discovery: Discovery score above the discovery threshold.
        trending: Trending score above the trending threshold.
        diverse: Local diversity above the diverse threshold.
        low_quality: Score below the low quality threshold.
        recency_score: Recency of the item.
        familiarity_score: Familiarity of the item to the user.
        discovery_score: Discovery potential of the item.
        trending_score: Trending score of the item.
        diversity_score: Local diversity versus recent history.
    """

    content_id: str
    fresh: bool
    familiar: bool
    discovery: bool
    trending: bool
    diverse: bool
    low_quality: bool
    recency_score: float = 0.0
    familiarity_score: float = 0.0
    discovery_score: float = 0.0
    trending_score: float = 0.0
    diversity_score: float = 0.0


@dataclass
class CategorizedContent:
    """Non-exclusive category sets; an item may appear in several.

    Attributes:
        fresh: Fresh items.
        familiar: Familiar items.
        discovery: Discovery items.
        trending: Trending items.
        diverse: Diverse items.
        low_quality: Low quality items.
        memberships: Membership record per content id.
    """

    fresh: list[ScoredContent] = field(default_factory=list)
    familiar: list[ScoredContent] = field(default_factory=list)
    discovery: list[ScoredContent] = field(default_factory=list)
    trending: list[ScoredContent] = field(default_factory=list)
    diverse: list[ScoredContent] = field(default_factory=list)
    low_quality: list[ScoredContent] = field(default_factory=list)
    memberships: dict[str, CategoryMembership] = field(default_factory=dict)

    def union(self) -> list[ScoredContent]:
        """Items in any selectable category, one per id.

        A repeated id keeps its highest-scoring item at the position where
        the id was first seen.
        """
        best: dict[str, ScoredContent] = {}
        for group in (
            self.fresh,
            self.familiar,
            self.discovery,
            self.trending,
            self.diverse,
        ):
            for item in group:
                current = best.get(item.content_id)
                if current is None or item.score > current.score:
                    best[item.content_id] = item
        return list(best.values())


@dataclass(frozen=True)
class BalancedContentDistribution:
    """Observed composition of a balanced feed."""

    fresh_ratio: float = 0.0
    familiar_ratio: float = 0.0
    discovery_ratio: float = 0.0
    trending_ratio: float = 0.0
    diverse_ratio: float = 0.0
    source_count: int = 0
    topic_count: int = 0
    avg_quality_score: float = 0.0

    def to_dict(self) -> dict[str, float | int]:
        """Convert to dictionary for serialization."""
        return {
            "fresh_ratio": self.fresh_ratio,
            "familiar_ratio": self.familiar_ratio,
            "discovery_ratio": self.discovery_ratio,
            "trending_ratio": self.trending_ratio,
            "diverse_ratio": self.diverse_ratio,
            "source_count": self.source_count,
            "topic_count": self.topic_count,
            "avg_quality_score": self.avg_quality_score,
        }


@dataclass(frozen=True)
class QualityMetrics:
    """Quality summary of a feed.

    Attributes:
        average_score: Mean item score.
        score_variance: Population variance of item scores.
        diversity_index: Mean of normalized source and topic entropies.
        freshness_index: exp(-average age in hours / 24).
        engagement_prediction: Expected engagement (average score * 0.8).
    """

    average_score: float = 0.0
    score_variance: float = 0.0
    diversity_index: float = 0.0
    freshness_index: float = 0.0
    engagement_prediction: float = 0.0

    def to_dict(self) -> dict[str, float]:
        """Convert to dictionary for serialization."""
        return {
            "average_score": self.average_score,
            "score_variance": self.score_variance,
            "diversity_index": self.diversity_index,
            "freshness_index": self.freshness_index,
            "engagement_prediction": self.engagement_prediction,
        }


class BalancingReasonType(str, Enum):
    """Kinds of balancing adjustments."""

    QUOTA_ENFORCEMENT = "QUOTA_ENFORCEMENT"
    SOURCE_DIVERSITY = "SOURCE_DIVERSITY"
    FRESHNESS_BALANCE = "FRESHNESS_BALANCE"
    DISCOVERY_BOOST = "DISCOVERY_BOOST"
    QUALITY_FILTER = "QUALITY_FILTER"
    FEED_PADDING = "FEED_PADDING"


@dataclass(frozen=True)
class BalancingReason:
    """Explanation of one balancing adjustment."""

    type: BalancingReasonType
    description: str
    affected_items: int
    impact: float

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for serialization."""
        return {
            "type": self.type.value,
            "description": self.description,
            "affected_items": self.affected_items,
            "impact": self.impact,
        }


@dataclass
class BalancedFeedResult:
    """Output of content balancing.

    Attributes:
        balanced_feed: Ordered feed items.
        applied_quotas: Quotas used for selection.
        actual_distribution: Observed composition of the feed.
        quality_metrics: Quality summary of the feed.
        balancing_reasons: Adjustments that were made.
    """

    balanced_feed: list[ScoredContent]
    applied_quotas: ContentQuotas
    actual_distribution: BalancedContentDistribution = field(
        default_factory=BalancedContentDistribution
    )
    quality_metrics: QualityMetrics = field(default_factory=QualityMetrics)
    balancing_reasons: list[BalancingReason] = field(default_factory=list)
