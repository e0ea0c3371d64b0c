"""Freshness analysis: recency decay, timeliness and staleness."""

from src.freshness.analyzer import (
    FreshnessAnalyzer,
    calculate_freshness_scores_pure,
    novelty_score,
    recency_score,
)
from src.freshness.models import (
    FreshnessAction,
    FreshnessAnalysis,
    FreshnessFactor,
    Season,
    SeasonalRelevance,
    StaleContentAnalysis,
    StalenessReason,
    TimelinessAnalysis,
    TimelyFactor,
)
from src.freshness.timeliness import current_season, identify_timely_content


__all__ = [
    "FreshnessAction",
    "FreshnessAnalysis",
    "FreshnessAnalyzer",
    "FreshnessFactor",
    "Season",
    "SeasonalRelevance",
    "StaleContentAnalysis",
    "StalenessReason",
    "TimelinessAnalysis",
    "TimelyFactor",
    "calculate_freshness_scores_pure",
    "current_season",
    "identify_timely_content",
    "novelty_score",
    "recency_score",
]
