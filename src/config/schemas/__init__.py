"""Configuration schema definitions."""

from src.config.schemas.balancing import (
    CategoryThresholds,
    ContentBalancingConfig,
    ContentQuotas,
    FreshnessBalancingConfig,
)
from src.config.schemas.base import (
    DiversityDimension,
    EchoChamberRiskFactor,
    EchoChamberRiskLevel,
    RecommendationPriority,
)
from src.config.schemas.diversity import DiversityConfig
from src.config.schemas.echo_chamber import EchoChamberPreventionConfig
from src.config.schemas.freshness import FreshnessConfig, TimelinessKeywords
from src.config.schemas.pipeline import DiversificationConfig


__all__ = [
    "CategoryThresholds",
    "ContentBalancingConfig",
    "ContentQuotas",
    "DiversificationConfig",
    "DiversityConfig",
    "DiversityDimension",
    "EchoChamberPreventionConfig",
    "EchoChamberRiskFactor",
    "EchoChamberRiskLevel",
    "FreshnessBalancingConfig",
    "FreshnessConfig",
    "RecommendationPriority",
    "TimelinessKeywords",
]
