"""Freshness analysis: recency decay, timeliness and staleness."""

import math
from collections import Counter
from collections.abc import Sequence
from datetime import UTC, datetime

import structlog

from src.config.schemas.freshness import FreshnessConfig
from src.content.models import ContentType, FeedEntry, StoredContent
from src.freshness.models import (
    FreshnessAction,
    FreshnessAnalysis,
    FreshnessFactor,
    StaleContentAnalysis,
    StalenessReason,
    TimelinessAnalysis,
)
from src.freshness.timeliness import identify_timely_content
from src.providers.protocols import TrendingScoreProvider


logger = structlog.get_logger()

# Originality of content kinds
REPLY_NOVELTY = 0.3
LINK_NOVELTY = 0.7
ORIGINAL_NOVELTY = 1.0

# Freshness action tiers
BOOST_ABOVE = 0.8
DEMOTE_BELOW = 0.3
REPLACE_BELOW = 0.5

# Staleness weights and tiers
AGE_STALENESS_THRESHOLD = 0.7
AGE_STALENESS_WEIGHT = 0.4
TOPIC_EXPOSURE_WEIGHT = 0.3
AUTHOR_EXPOSURE_WEIGHT = 0.2
TYPE_EXPOSURE_WEIGHT = 0.1
STALE_REPLACE_ABOVE = 0.8
STALE_DEMOTE_ABOVE = 0.6
STALE_SCHEDULE_ABOVE = 0.4


def recency_score(age_hours: float, decay_rate: float = 0.05) -> float:
    """Exponential recency decay.

    Args:
        age_hours: Content age in hours.
        decay_rate: Hourly decay rate.

    Returns:
        exp(-decay_rate * age_hours); 1.0 at age 0 and strictly decreasing.
    """
    return math.exp(-decay_rate * age_hours)


def novelty_score(content: StoredContent) -> float:
    """Originality of a content item: reply < shared link < original."""
    if content.reply_to_id is not None:
        return REPLY_NOVELTY
    if content.link_url is not None:
        return LINK_NOVELTY
    return ORIGINAL_NOVELTY


class FreshnessAnalyzer:
    """Scores candidate freshness and detects stale history.

    Args:
        config: Freshness configuration.
        trending_provider: Source of trending scores. Without one every
            item has a trending score of 0.
        now: Reference time.
    """

    def __init__(
        self,
        config: FreshnessConfig | None = None,
        trending_provider: TrendingScoreProvider | None = None,
        now: datetime | None = None,
    ) -> None:
        self._config = config or FreshnessConfig()
        self._trending = trending_provider
        self._now = now or datetime.now(UTC)
        self._log = logger.bind(component="freshness", subcomponent="analyzer")

    def recency_score(self, age_hours: float) -> float:
        """Recency with the configured decay rate."""
        return recency_score(age_hours, self._config.recency_decay_rate)

    def get_trending_boost(self, content_id: str) -> float:
        """Trending score for an item, clipped to [0, 1].

        Provider exceptions propagate to the caller.
        """
        if self._trending is None:
            return 0.0
        return min(max(self._trending.get_score(content_id), 0.0), 1.0)

    def identify_timely_content(self, content: StoredContent) -> TimelinessAnalysis:
        """Lexical timeliness of one item at the analyzer's reference time."""
        return identify_timely_content(
            content,
            self._now,
            self._config.keywords,
            self._config.timely_threshold,
        )

    def calculate_freshness_scores(
        self, candidates: Sequence[StoredContent]
    ) -> list[FreshnessAnalysis]:
        """Score the freshness of each candidate.

        Args:
            candidates: Items to score.

        Returns:
            One FreshnessAnalysis per candidate, in input order.
        """
        results = [self._analyze(content) for content in candidates]
        self._log.debug(
            "freshness_scores_computed",
            candidate_count=len(candidates),
            stale_count=sum(1 for r in results if r.staleness_reason is not None),
        )
        return results

    def _analyze(self, content: StoredContent) -> FreshnessAnalysis:
        cfg = self._config
        age_hours = max(content.age_hours(self._now), 0.0)
        score = self.recency_score(age_hours)
        factors: dict[FreshnessFactor, float] = {FreshnessFactor.RECENCY: score}

        trending = self.get_trending_boost(content.id)
        if trending > 0:
            score *= 1 + trending * cfg.trending_boost_multiplier
            factors[FreshnessFactor.TRENDING_TOPIC] = trending

        timeliness = self.identify_timely_content(content)
        if timeliness.is_timely:
            score *= 1 + timeliness.time_relevance_score * cfg.time_relevance_multiplier
            factors[FreshnessFactor.TIMELY_REFERENCE] = timeliness.time_relevance_score

        novelty = novelty_score(content)
        score *= 1 + novelty * cfg.novelty_multiplier
        factors[FreshnessFactor.ORIGINAL_CONTENT] = novelty

        if score > BOOST_ABOVE:
            action = FreshnessAction.BOOST
        elif score < DEMOTE_BELOW:
            action = FreshnessAction.DEMOTE
        elif score < REPLACE_BELOW and age_hours > cfg.replace_age_hours:
            action = FreshnessAction.REPLACE
        else:
            action = FreshnessAction.SCHEDULE

        reason = None
        if score < cfg.stale_threshold_score:
            if age_hours > cfg.max_content_age_hours:
                reason = f"Content is too old ({age_hours:.0f}h)"
            elif not timeliness.is_timely and trending == 0.0:
                reason = "Content lacks timeliness and trending signals"
            else:
                reason = "Low overall freshness score"

        return FreshnessAnalysis(
            content_id=content.id,
            freshness_score=min(score, 1.0),
            raw_score=score,
            factors=factors,
            staleness_reason=reason,
            recommended_action=action,
            age_hours=age_hours,
        )

    def identify_stale_content(
        self,
        history: Sequence[FeedEntry],
        threshold_hours: float | None = None,
    ) -> list[StaleContentAnalysis]:
        """Find served items that have become stale through age or overexposure.

        Args:
            history: Feed history entries.
            threshold_hours: Window of history to consider; defaults to the
                configured stale window (72h).

        Returns:
            Entries within the window whose staleness exceeds the stale threshold.
        """
        cfg = self._config
        window = (
            cfg.stale_window_hours if threshold_hours is None else threshold_hours
        )
        recent = [
            entry
            for entry in history
            if (self._now - entry.generated_at).total_seconds() / 3600.0 <= window
        ]
        if not recent:
            return []

        total = len(recent)
        topic_share = {
            topic: count / total
            for topic, count in Counter(
                topic for entry in recent for topic in set(entry.content.topic_names)
            ).items()
        }
        author_share = {
            author: count / total
            for author, count in Counter(e.content.author_id for e in recent).items()
        }
        type_share = {
            kind: count / total
            for kind, count in Counter(e.content.content_type for e in recent).items()
        }

        stale: list[StaleContentAnalysis] = []
        for entry in recent:
            analysis = self._staleness(
                entry.content, topic_share, author_share, type_share
            )
            if analysis.staleness_score > cfg.stale_threshold_score:
                stale.append(analysis)

        self._log.info(
            "stale_content_identified",
            window_hours=window,
            window_count=total,
            stale_count=len(stale),
        )
        return stale

    def _staleness(
        self,
        content: StoredContent,
        topic_share: dict[str, float],
        author_share: dict[str, float],
        type_share: dict[ContentType, float],
    ) -> StaleContentAnalysis:
        threshold = self._config.overexposure_threshold
        score = 0.0
        reasons: list[StalenessReason] = []
        metrics: dict[str, float] = {}

        age_staleness = 1.0 - self.recency_score(max(content.age_hours(self._now), 0.0))
        if age_staleness > AGE_STALENESS_THRESHOLD:
            score += age_staleness * AGE_STALENESS_WEIGHT
            reasons.append(StalenessReason.OLD_CONTENT)

        topic_exposure = max(
            (topic_share.get(t, 0.0) for t in content.topic_names), default=0.0
        )
        if topic_exposure > threshold:
            score += topic_exposure * TOPIC_EXPOSURE_WEIGHT
            reasons.append(StalenessReason.OVEREXPOSED_TOPIC)
            metrics["topic"] = topic_exposure

        author_exposure = author_share.get(content.author_id, 0.0)
        if author_exposure > threshold:
            score += author_exposure * AUTHOR_EXPOSURE_WEIGHT
            reasons.append(StalenessReason.OVEREXPOSED_AUTHOR)
            metrics["author"] = author_exposure

        type_exposure = type_share.get(content.content_type, 0.0)
        if type_exposure > threshold:
            score += type_exposure * TYPE_EXPOSURE_WEIGHT
            reasons.append(StalenessReason.REPETITIVE_TYPE)
            metrics["type"] = type_exposure

        score = min(score, 1.0)
        if score > STALE_REPLACE_ABOVE:
            action = FreshnessAction.REPLACE
        elif score > STALE_DEMOTE_ABOVE:
            action = FreshnessAction.DEMOTE
        elif score > STALE_SCHEDULE_ABOVE:
            action = FreshnessAction.SCHEDULE
        else:
            action = FreshnessAction.BOOST

        return StaleContentAnalysis(
            content_id=content.id,
            staleness_score=score,
            reasons=reasons,
            overexposure_metrics=metrics,
            recommended_action=action,
        )


def calculate_freshness_scores_pure(
    candidates: Sequence[StoredContent],
    config: FreshnessConfig | None = None,
    trending_provider: TrendingScoreProvider | None = None,
    now: datetime | None = None,
) -> list[FreshnessAnalysis]:
    """Pure function wrapper for freshness scoring.

    Args:
        candidates: Items to score.
        config: Freshness configuration.
        trending_provider: Source of trending scores.
        now: Reference time.

    Returns:
        One FreshnessAnalysis per candidate.
    """
    return FreshnessAnalyzer(config, trending_provider, now).calculate_freshness_scores(
        candidates
    )
