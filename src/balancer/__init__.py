"""Content categorization, quota enforcement and freshness balancing."""

from src.balancer.balancer import (
    ContentBalancer,
    apply_content_quotas_pure,
    balance_freshness,
    ensure_minimum_source_diversity,
)
from src.balancer.categorizer import ContentCategorizer, categorize_items
from src.balancer.models import (
    BalancedContentDistribution,
    BalancedFeedResult,
    BalancingReason,
    BalancingReasonType,
    CategorizedContent,
    CategoryMembership,
    QualityMetrics,
)
from src.balancer.quality import compute_distribution, compute_quality_metrics


__all__ = [
    "BalancedContentDistribution",
    "BalancedFeedResult",
    "BalancingReason",
    "BalancingReasonType",
    "CategorizedContent",
    "CategoryMembership",
    "ContentBalancer",
    "ContentCategorizer",
    "QualityMetrics",
    "apply_content_quotas_pure",
    "balance_freshness",
    "categorize_items",
    "compute_distribution",
    "compute_quality_metrics",
    "ensure_minimum_source_diversity",
]
