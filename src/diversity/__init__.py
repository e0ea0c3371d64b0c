"""Feature extraction and multi-dimensional diversity analysis."""

from src.diversity.analyzer import DiversityAnalyzer, calculate_diversity_scores_pure
from src.diversity.features import FeatureExtractor, extract_features
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


__all__ = [
    "ContentDistribution",
    "ContentFeatures",
    "DiversityAnalysisResult",
    "DiversityAnalyzer",
    "DiversityRecommendation",
    "EchoChamberAnalysis",
    "EchoChamberSeverity",
    "FeatureExtractor",
    "RecommendationType",
    "TimeWindow",
    "calculate_diversity_scores_pure",
    "extract_features",
]
