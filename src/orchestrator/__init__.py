"""Diversification pipeline orchestration."""

from src.orchestrator.boosts import diversity_boost, freshness_boost
from src.orchestrator.metrics import PipelineMetrics
from src.orchestrator.models import (
    DiversifiedFeedResult,
    DiversityMetricsRecord,
    EnhancedScoredContent,
    FeedDiversityMetrics,
    ProcessingStats,
    ScoringBreakdown,
    SystemRecommendation,
    SystemRecommendationType,
)
from src.orchestrator.orchestrator import (
    DiversificationOrchestrator,
    diversify_feed_pure,
)
from src.orchestrator.state_machine import (
    PipelineState,
    PipelineStateMachine,
    PipelineStateTransitionError,
)


__all__ = [
    "DiversificationOrchestrator",
    "DiversifiedFeedResult",
    "DiversityMetricsRecord",
    "EnhancedScoredContent",
    "FeedDiversityMetrics",
    "PipelineMetrics",
    "PipelineState",
    "PipelineStateMachine",
    "PipelineStateTransitionError",
    "ProcessingStats",
    "ScoringBreakdown",
    "SystemRecommendation",
    "SystemRecommendationType",
    "diversify_feed_pure",
    "diversity_boost",
    "freshness_boost",
]
