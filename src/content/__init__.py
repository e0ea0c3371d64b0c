"""Content, feed history, and user signal models consumed by the engine."""

from src.content.models import (
    ContentTopic,
    ContentType,
    EngagementIntensity,
    EngagementPattern,
    EngagementType,
    ExtractedMetadata,
    FeedEntry,
    LanguageInfo,
    ScoreContribution,
    ScoredContent,
    Sentiment,
    SentimentInfo,
    StoredContent,
    TopicCategory,
    UserEngagement,
    UserPreferences,
)


__all__ = [
    "ContentTopic",
    "ContentType",
    "EngagementIntensity",
    "EngagementPattern",
    "EngagementType",
    "ExtractedMetadata",
    "FeedEntry",
    "LanguageInfo",
    "ScoreContribution",
    "ScoredContent",
    "Sentiment",
    "SentimentInfo",
    "StoredContent",
    "TopicCategory",
    "UserEngagement",
    "UserPreferences",
]
