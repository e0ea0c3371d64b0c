"""Data models for content items, feed history, and user signals."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.config.schemas.balancing import ContentQuotas


def ensure_aware(value: Any) -> Any:
    """Treat naive datetimes as UTC; other values pass through."""
    if isinstance(value, datetime) and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class ContentType(str, Enum):
    """Kind of stored content."""

    TEXT = "text"
    IMAGE = "image"
    VIDEO = "video"
    LINK = "link"
    POLL = "poll"


class TopicCategory(str, Enum):
    """Coarse topic classification produced by metadata extraction."""

    TECHNOLOGY = "technology"
    POLITICS = "politics"
    SPORTS = "sports"
    ENTERTAINMENT = "entertainment"
    BUSINESS = "business"
    SCIENCE = "science"
    HEALTH = "health"
    EDUCATION = "education"
    LIFESTYLE = "lifestyle"
    NEWS = "news"
    OPINION = "opinion"
    OTHER = "other"


class Sentiment(str, Enum):
    """Overall sentiment of a content item."""

    VERY_POSITIVE = "very_positive"
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"
    VERY_NEGATIVE = "very_negative"
    MIXED = "mixed"


class EngagementType(str, Enum):
    """Engagement pattern classification."""

    HIGH_LIKES = "high_likes"
    HIGH_SHARES = "high_shares"
    HIGH_COMMENTS = "high_comments"
    VIRAL = "viral"
    STEADY = "steady"
    DECLINING = "declining"
    POLARIZING = "polarizing"


class EngagementIntensity(str, Enum):
    """Engagement intensity levels."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ContentTopic(BaseModel):
    """Topic classification result from metadata extraction."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: Annotated[str, Field(min_length=1)]
    category: TopicCategory = TopicCategory.OTHER
    confidence: Annotated[float, Field(ge=0.0, le=1.0)] = 1.0


class SentimentInfo(BaseModel):
    """Sentiment analysis result."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    overall_sentiment: Sentiment


class LanguageInfo(BaseModel):
    """Language detection result."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    detected_language: Annotated[str, Field(min_length=1)]


class ExtractedMetadata(BaseModel):
    """Metadata extracted from content during ingestion.

    Attributes:
        topics: Classified topics.
        sentiment: Overall sentiment if analyzed.
        language: Detected language if analyzed.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    topics: list[ContentTopic] = Field(default_factory=list)
    sentiment: SentimentInfo | None = None
    language: LanguageInfo | None = None


class EngagementPattern(BaseModel):
    """Observed engagement pattern for a content item."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: EngagementType
    intensity: EngagementIntensity = EngagementIntensity.MEDIUM
    primary_action: str = "likes"


class StoredContent(BaseModel):
    """A content item as supplied by the content store.

    Attributes:
        id: Unique content identifier.
        author_id: Identifier of the author.
        content_type: Kind of content.
        text_content: Body text, if any.
        link_url: Shared link, if any.
        reply_to_id: Parent content when this is a reply.
        language_code: Declared language code.
        created_at: Creation timestamp (naive values are treated as UTC).
        tags: Raw author-supplied tags.
        extracted_metadata: Metadata from the extraction pipeline.
        engagement_pattern: Engagement classification from analytics.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: Annotated[str, Field(min_length=1)]
    author_id: Annotated[str, Field(min_length=1)]
    content_type: ContentType = ContentType.TEXT
    text_content: str | None = None
    link_url: str | None = None
    reply_to_id: str | None = None
    language_code: str | None = None
    created_at: datetime
    tags: list[str] = Field(default_factory=list)
    extracted_metadata: ExtractedMetadata | None = None
    engagement_pattern: EngagementPattern | None = None

    @field_validator("created_at", mode="after")
    @classmethod
    def ensure_timezone(cls, v: datetime) -> datetime:
        """Normalize created_at to a timezone-aware value."""
        return ensure_aware(v)

    @property
    def topic_names(self) -> list[str]:
        """Topic names from metadata, falling back to raw tags."""
        if self.extracted_metadata is not None:
            return [t.name for t in self.extracted_metadata.topics]
        return list(self.tags)

    def age_hours(self, now: datetime) -> float:
        """Age of the content in fractional hours at ``now``."""
        return (now - self.created_at).total_seconds() / 3600.0


class FeedEntry(BaseModel):
    """A previously served feed item (one history record).

    Attributes:
        content: The content that was served.
        score: Score it was served with.
        generated_at: When the feed containing it was generated.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    content: StoredContent
    score: float = 0.0
    generated_at: datetime

    @field_validator("generated_at", mode="after")
    @classmethod
    def ensure_timezone(cls, v: datetime) -> datetime:
        """Normalize generated_at to a timezone-aware value."""
        return ensure_aware(v)


class UserEngagement(BaseModel):
    """A single user engagement event.

    Attributes:
        content_id: Content that was engaged with.
        engagement_type: Kind of engagement (like, share, comment, ...).
        occurred_at: When the engagement happened.
        perspective: Perspective of the engaged content, if known.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    content_id: Annotated[str, Field(min_length=1)]
    engagement_type: str = "view"
    occurred_at: datetime | None = None
    perspective: str = "neutral"


class UserPreferences(BaseModel):
    """Persisted user preferences relevant to balancing.

    Attributes:
        preferred_topics: Topic name to affinity weight (0-1).
        preferred_sources: Author id to affinity weight (0-1).
        quota_override: Personalized content quotas.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    preferred_topics: dict[str, float] = Field(default_factory=dict)
    preferred_sources: dict[str, float] = Field(default_factory=dict)
    quota_override: ContentQuotas | None = None


@dataclass(frozen=True)
class ScoreContribution:
    """One multiplicative factor applied to a score.

    Attributes:
        stage: Pipeline stage that applied the factor.
        factor: Multiplier (1.0 means no change).
        reason: Human-readable explanation.
    """

    stage: str
    factor: float
    reason: str

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for serialization."""
        return {"stage": self.stage, "factor": self.factor, "reason": self.reason}


@dataclass
class ScoredContent:
    """A content item with its working score.

    Attributes:
        content: The scored content.
        score: Current (possibly boosted) score.
        original_score: Score before any adjustment in the current stage chain.
        contributions: Ordered factors applied to reach ``score``.
        reasons: Human-readable reasons attached by adjustment stages.
    """

    content: StoredContent
    score: float
    original_score: float | None = None
    contributions: list[ScoreContribution] = field(default_factory=list)
    reasons: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.original_score is None:
            self.original_score = self.score

    @property
    def content_id(self) -> str:
        """Identifier of the wrapped content."""
        return self.content.id

    def copy(self) -> "ScoredContent":
        """Return an independent copy safe to adjust."""
        return ScoredContent(
            content=self.content,
            score=self.score,
            original_score=self.original_score,
            contributions=list(self.contributions),
            reasons=list(self.reasons),
        )

    def apply(self, stage: str, factor: float, reason: str) -> None:
        """Multiply the score by ``factor`` and record why."""
        self.score *= factor
        self.contributions.append(ScoreContribution(stage, factor, reason))
        self.reasons.append(reason)
