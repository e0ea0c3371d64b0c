"""Base schema types for configuration."""

from enum import Enum


class DiversityDimension(str, Enum):
    """Dimensions along which candidate novelty is measured.

    - TOPIC: Topic/category diversity
    - SOURCE: Author/source diversity
    - PERSPECTIVE: Viewpoint diversity
    - CONTENT_TYPE: Text/image/video diversity
    - RECENCY: Time-of-day diversity
    - SENTIMENT: Emotional tone diversity
    - LANGUAGE: Language diversity
    - ENGAGEMENT_TYPE: Engagement pattern diversity
    """

    TOPIC = "topic"
    SOURCE = "source"
    PERSPECTIVE = "perspective"
    CONTENT_TYPE = "content_type"
    RECENCY = "recency"
    SENTIMENT = "sentiment"
    LANGUAGE = "language"
    ENGAGEMENT_TYPE = "engagement_type"


class EchoChamberRiskLevel(str, Enum):
    """Risk levels for echo chamber formation, ordered by severity."""

    LOW = "LOW"
    MODERATE = "MODERATE"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class EchoChamberRiskFactor(str, Enum):
    """Factors contributing to echo chamber risk."""

    TOPIC_CONCENTRATION = "topic_concentration"
    SOURCE_CONCENTRATION = "source_concentration"
    PERSPECTIVE_BIAS = "perspective_bias"
    TEMPORAL_CLUSTERING = "temporal_clustering"
    ENGAGEMENT_SELECTIVITY = "engagement_selectivity"
    SOCIAL_HOMOGENEITY = "social_homogeneity"


class RecommendationPriority(str, Enum):
    """Priority level for recommendations."""

    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"
