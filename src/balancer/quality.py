"""Feed-level quality and composition metrics."""

import math
from collections.abc import Sequence
from datetime import datetime

from src.balancer.models import (
    BalancedContentDistribution,
    CategorizedContent,
    QualityMetrics,
)
from src.content.models import ScoredContent
from src.diversity.stats import mean, normalized_shannon_entropy, variance


ENGAGEMENT_PREDICTION_FACTOR = 0.8
FRESHNESS_INDEX_HOURS = 24.0


def diversity_index(items: Sequence[ScoredContent]) -> float:
    """Mean of normalized source and topic entropies."""
    source_entropy = normalized_shannon_entropy(i.content.author_id for i in items)
    topic_entropy = normalized_shannon_entropy(
        t for i in items for t in i.content.topic_names
    )
    return (source_entropy + topic_entropy) / 2.0


def freshness_index(items: Sequence[ScoredContent], now: datetime) -> float:
    """exp(-average age in hours / 24), clipped to [0, 1]; 0.0 when empty."""
    if not items:
        return 0.0
    avg_age = mean([i.content.age_hours(now) for i in items])
    return min(max(math.exp(-avg_age / FRESHNESS_INDEX_HOURS), 0.0), 1.0)


def compute_quality_metrics(
    items: Sequence[ScoredContent], now: datetime
) -> QualityMetrics:
    """Summarize the quality of a feed.

    Args:
        items: Feed items.
        now: Reference time for ages.

    Returns:
        QualityMetrics; all zero for an empty feed.
    """
    if not items:
        return QualityMetrics()
    scores = [i.score for i in items]
    avg = mean(scores)
    return QualityMetrics(
        average_score=avg,
        score_variance=variance(scores),
        diversity_index=diversity_index(items),
        freshness_index=freshness_index(items, now),
        engagement_prediction=avg * ENGAGEMENT_PREDICTION_FACTOR,
    )


def compute_distribution(
    items: Sequence[ScoredContent], categorized: CategorizedContent
) -> BalancedContentDistribution:
    """Observed category ratios and source/topic counts of a feed.

    Args:
        items: Feed items.
        categorized: Categorization containing every feed item's membership.

    Returns:
        BalancedContentDistribution; all zero for an empty feed.
    """
    if not items:
        return BalancedContentDistribution()

    total = len(items)
    memberships = [categorized.memberships.get(i.content_id) for i in items]

    def ratio(flag: str) -> float:
        return sum(1 for m in memberships if m is not None and getattr(m, flag)) / total

    return BalancedContentDistribution(
        fresh_ratio=ratio("fresh"),
        familiar_ratio=ratio("familiar"),
        discovery_ratio=ratio("discovery"),
        trending_ratio=ratio("trending"),
        diverse_ratio=ratio("diverse"),
        source_count=len({i.content.author_id for i in items}),
        topic_count=len({t for i in items for t in i.content.topic_names}),
        avg_quality_score=mean([i.score for i in items]),
    )
