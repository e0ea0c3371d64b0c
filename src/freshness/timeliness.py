"""Lexical timeliness detection."""

from datetime import UTC, datetime, timedelta

from src.config.schemas.freshness import TimelinessKeywords
from src.content.models import StoredContent
from src.freshness.models import (
    Season,
    SeasonalRelevance,
    TimelinessAnalysis,
    TimelyFactor,
)


BREAKING_NEWS_WEIGHT = 0.3
CURRENT_EVENT_WEIGHT = 0.2
SEASONAL_WEIGHT = 0.15
SEASONAL_MATCH_WEIGHT = 0.2
HOLIDAY_WEIGHT = 0.25
TREND_REFERENCE_WEIGHT = 0.2

# Expiration horizons keyed on the strongest detected factor
_EXPIRATIONS: tuple[tuple[TimelyFactor, timedelta], ...] = (
    (TimelyFactor.BREAKING_NEWS, timedelta(hours=6)),
    (TimelyFactor.CURRENT_EVENT, timedelta(hours=24)),
    (TimelyFactor.SEASONAL_TOPIC, timedelta(days=30)),
)
DEFAULT_EXPIRATION = timedelta(days=7)

_MONTH_SEASONS: dict[int, Season] = {
    12: Season.WINTER,
    1: Season.WINTER,
    2: Season.WINTER,
    3: Season.SPRING,
    4: Season.SPRING,
    5: Season.SPRING,
    6: Season.SUMMER,
    7: Season.SUMMER,
    8: Season.SUMMER,
    9: Season.AUTUMN,
    10: Season.AUTUMN,
    11: Season.AUTUMN,
}


def current_season(now: datetime) -> Season:
    """Return the meteorological season of ``now`` (UTC)."""
    return _MONTH_SEASONS[now.astimezone(UTC).month]


def content_text(content: StoredContent) -> str:
    """Lower-cased text and tags used for keyword matching."""
    return f"{content.text_content or ''} {' '.join(content.tags)}".lower()


def _contains_any(text: str, keywords: list[str]) -> bool:
    return any(keyword.lower() in text for keyword in keywords)


def detect_seasonal_relevance(
    text: str,
    now: datetime,
    keywords: TimelinessKeywords,
) -> SeasonalRelevance | None:
    """Match text against the current season's keywords.

    Args:
        text: Lower-cased text.
        now: Reference time determining the season.
        keywords: Keyword configuration.

    Returns:
        SeasonalRelevance when at least one keyword matches, else None.
    """
    season = current_season(now)
    season_keywords = keywords.seasonal.get(season.value, [])
    matches = sum(1 for keyword in season_keywords if keyword.lower() in text)
    if matches == 0:
        return None
    return SeasonalRelevance(
        season=season,
        relevance_score=min(matches * SEASONAL_MATCH_WEIGHT, 1.0),
        match_count=matches,
    )


def identify_timely_content(
    content: StoredContent,
    now: datetime,
    keywords: TimelinessKeywords | None = None,
    timely_threshold: float = 0.1,
) -> TimelinessAnalysis:
    """Score how time-relevant a content item is from its text.

    Args:
        content: Item to analyze.
        now: Reference time (determines the current season).
        keywords: Keyword lists; defaults are used if None.
        timely_threshold: Score above which the item is timely.

    Returns:
        TimelinessAnalysis with an expiration prediction when timely.
    """
    keywords = keywords or TimelinessKeywords()
    text = content_text(content)
    factors: list[TimelyFactor] = []
    score = 0.0

    if _contains_any(text, keywords.breaking_news):
        factors.append(TimelyFactor.BREAKING_NEWS)
        score += BREAKING_NEWS_WEIGHT

    if _contains_any(text, keywords.current_event):
        factors.append(TimelyFactor.CURRENT_EVENT)
        score += CURRENT_EVENT_WEIGHT

    seasonal = detect_seasonal_relevance(text, now, keywords)
    if seasonal is not None:
        factors.append(TimelyFactor.SEASONAL_TOPIC)
        score += seasonal.relevance_score * SEASONAL_WEIGHT

    if _contains_any(text, keywords.holiday):
        factors.append(TimelyFactor.HOLIDAY_RELATED)
        score += HOLIDAY_WEIGHT

    if _contains_any(text, keywords.trend_reference):
        factors.append(TimelyFactor.TREND_REFERENCE)
        score += TREND_REFERENCE_WEIGHT

    is_timely = score > timely_threshold
    expiration = None
    if is_timely:
        horizon = next(
            (delta for factor, delta in _EXPIRATIONS if factor in factors),
            DEFAULT_EXPIRATION,
        )
        expiration = content.created_at + horizon

    return TimelinessAnalysis(
        is_timely=is_timely,
        time_relevance_score=min(score, 1.0),
        timely_factors=factors,
        expiration_prediction=expiration,
        seasonal_relevance=seasonal,
    )
