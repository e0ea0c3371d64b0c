"""Data models for freshness analysis."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class FreshnessAction(str, Enum):
    """Action recommended for a content item based on its freshness."""

    BOOST = "BOOST"
    DEMOTE = "DEMOTE"
    REPLACE = "REPLACE"
    SCHEDULE = "SCHEDULE"


class FreshnessFactor(str, Enum):
    """Factors that contribute to a freshness score."""

    RECENCY = "recency"
    NOVELTY = "novelty"
    TRENDING_TOPIC = "trending_topic"
    ORIGINAL_CONTENT = "original_content"
    TIMELY_REFERENCE = "timely_reference"
    UPDATE_FREQUENCY = "update_frequency"


@dataclass(frozen=True)
class FreshnessAnalysis:
    """Freshness of one candidate.

    Attributes:
        content_id: Candidate identifier.
        freshness_score: Score clamped to [0, 1].
        raw_score: Unclamped score (boosts may push it above 1).
        factors: Value of each contributing factor.
        staleness_reason: Why the item is stale, if it is.
        recommended_action: Suggested handling.
        age_hours: Age of the item at analysis time.
    """

    content_id: str
    freshness_score: float
    raw_score: float
    factors: dict[FreshnessFactor, float]
    staleness_reason: str | None
    recommended_action: FreshnessAction
    age_hours: float = 0.0


class StalenessReason(str, Enum):
    """Reasons a served item is considered stale."""

    OLD_CONTENT = "old_content"
    OVEREXPOSED_TOPIC = "overexposed_topic"
    OVEREXPOSED_AUTHOR = "overexposed_author"
    DECLINING_ENGAGEMENT = "declining_engagement"
    REPETITIVE_TYPE = "repetitive_type"
    OUTDATED_REFERENCE = "outdated_reference"
    SEASONAL_MISMATCH = "seasonal_mismatch"


@dataclass(frozen=True)
class StaleContentAnalysis:
    """Staleness of one history entry.

    Attributes:
        content_id: History item identifier.
        staleness_score: Weighted staleness in [0, 1].
        reasons: Contributing reasons.
        overexposure_metrics: Exposure share per overexposed aspect.
        recommended_action: Suggested handling.
    """

    content_id: str
    staleness_score: float
    reasons: list[StalenessReason]
    overexposure_metrics: dict[str, float]
    recommended_action: FreshnessAction


class TimelyFactor(str, Enum):
    """Lexical signals of time relevance."""

    BREAKING_NEWS = "breaking_news"
    CURRENT_EVENT = "current_event"
    SEASONAL_TOPIC = "seasonal_topic"
    TREND_REFERENCE = "trend_reference"
    HOLIDAY_RELATED = "holiday_related"


class Season(str, Enum):
    """Meteorological seasons (northern hemisphere)."""

    WINTER = "winter"
    SPRING = "spring"
    SUMMER = "summer"
    AUTUMN = "autumn"


@dataclass(frozen=True)
class SeasonalRelevance:
    """Relevance of content to the current season."""

    season: Season
    relevance_score: float
    match_count: int
    is_currently_relevant: bool = True


@dataclass(frozen=True)
class TimelinessAnalysis:
    """Lexical timeliness of one content item.

    Attributes:
        is_timely: Whether the score exceeds the timely threshold.
        time_relevance_score: Summed factor contributions, capped at 1.
        timely_factors: Detected factors, in detection order.
        expiration_prediction: When the content is expected to go stale.
        seasonal_relevance: Seasonal match, if any.
    """

    is_timely: bool
    time_relevance_score: float
    timely_factors: list[TimelyFactor] = field(default_factory=list)
    expiration_prediction: datetime | None = None
    seasonal_relevance: SeasonalRelevance | None = None
