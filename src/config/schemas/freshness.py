"""Freshness analyzer configuration schema."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field


def default_seasonal_keywords() -> dict[str, list[str]]:
    """Return keywords that indicate relevance to each season."""
    return {
        "winter": ["winter", "snow", "cold", "holiday", "christmas", "new year"],
        "spring": ["spring", "bloom", "easter", "renewal", "fresh"],
        "summer": ["summer", "vacation", "beach", "hot", "travel"],
        "autumn": ["fall", "autumn", "harvest", "thanksgiving", "leaves"],
    }


class TimelinessKeywords(BaseModel):
    """Keyword lists driving the lexical timeliness heuristic.

    Attributes:
        breaking_news: Indicators of breaking news.
        current_event: Indicators of current events.
        holiday: Holiday references.
        trend_reference: References to trends.
        seasonal: Keywords per season name.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    breaking_news: list[str] = Field(
        default_factory=lambda: ["breaking", "urgent", "just in", "developing"]
    )
    current_event: list[str] = Field(
        default_factory=lambda: ["today", "now", "current", "latest"]
    )
    holiday: list[str] = Field(
        default_factory=lambda: [
            "holiday",
            "christmas",
            "thanksgiving",
            "easter",
            "valentine",
            "halloween",
            "new year",
            "independence day",
            "memorial day",
        ]
    )
    trend_reference: list[str] = Field(
        default_factory=lambda: [
            "viral",
            "trending",
            "#",
            "meme",
            "challenge",
            "latest trend",
        ]
    )
    seasonal: dict[str, list[str]] = Field(default_factory=default_seasonal_keywords)


class FreshnessConfig(BaseModel):
    """Freshness scoring configuration.

    Attributes:
        recency_decay_rate: Hourly exponential decay rate.
        trending_boost_multiplier: Maximum boost from the trending signal.
        time_relevance_multiplier: Weight of the timeliness score.
        novelty_multiplier: Weight of the originality term.
        stale_threshold_score: Scores below this are considered stale.
        max_content_age_hours: Age above which content is "too old".
        overexposure_threshold: Share above which a topic/author/type is overexposed.
        stale_window_hours: Default history window for staleness detection.
        replace_age_hours: Minimum age for the REPLACE action.
        timely_threshold: Timeliness score above which content is timely.
        keywords: Lexical timeliness keyword lists.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    recency_decay_rate: Annotated[float, Field(gt=0.0, le=5.0)] = 0.05
    trending_boost_multiplier: Annotated[float, Field(ge=0.0, le=5.0)] = 0.5
    time_relevance_multiplier: Annotated[float, Field(ge=0.0, le=5.0)] = 0.2
    novelty_multiplier: Annotated[float, Field(ge=0.0, le=5.0)] = 0.1
    stale_threshold_score: Annotated[float, Field(ge=0.0, le=1.0)] = 0.3
    max_content_age_hours: Annotated[float, Field(gt=0.0)] = 168.0
    overexposure_threshold: Annotated[float, Field(ge=0.0, le=1.0)] = 0.4
    stale_window_hours: Annotated[float, Field(gt=0.0)] = 72.0
    replace_age_hours: Annotated[float, Field(ge=0.0)] = 48.0
    timely_threshold: Annotated[float, Field(ge=0.0, le=1.0)] = 0.1
    keywords: TimelinessKeywords = Field(default_factory=TimelinessKeywords)
