"""Non-exclusive content categorization for quota balancing."""

import math
from collections.abc import Sequence
from datetime import UTC, datetime

from src.balancer.models import CategorizedContent, CategoryMembership
from src.config.schemas.balancing import ContentBalancingConfig
from src.content.models import FeedEntry, ScoredContent, UserPreferences
from src.freshness.analyzer import recency_score


# Familiarity composition
TOPIC_PREFERENCE_WEIGHT = 0.4
SOURCE_PREFERENCE_WEIGHT = 0.3
HISTORY_SIMILARITY_WEIGHT = 0.3
FAMILIARITY_WITHOUT_PREFERENCES = 0.5

# Discovery novelty bonuses
NEW_TOPIC_AND_SOURCE_BONUS = 0.3
NEW_TOPIC_OR_SOURCE_BONUS = 0.2

# Trending composition
TRENDING_RECENCY_WEIGHT = 0.4
TRENDING_SCORE_WEIGHT = 0.6

# Local diversity composition
TOPIC_NOVELTY_WEIGHT = 0.7
SOURCE_NOVELTY_WEIGHT = 0.3
NEW_SOURCE_NOVELTY = 1.0
KNOWN_SOURCE_NOVELTY = 0.3
TOPICLESS_DIVERSITY = 0.5


def _clip(value: float) -> float:
    return min(max(value, 0.0), 1.0)


class ContentCategorizer:
    """Assigns items to overlapping categories.

    Args:
        config: Balancing configuration (category thresholds, trending decay).
        preferences: User preferences; None means no stored preferences.
        recent_history: Recent feed history used for similarity and novelty.
        recency_decay_rate: Hourly decay used for the fresh predicate.
        now: Reference time.
    """

    def __init__(
        self,
        config: ContentBalancingConfig,
        preferences: UserPreferences | None = None,
        recent_history: Sequence[FeedEntry] = (),
        recency_decay_rate: float = 0.05,
        now: datetime | None = None,
    ) -> None:
        self._config = config
        self._preferences = preferences
        self._now = now or datetime.now(UTC)
        self._decay = recency_decay_rate
        self._has_history = bool(recent_history)
        self._recent_topics = {
            topic for entry in recent_history for topic in entry.content.topic_names
        }
        self._recent_sources = {entry.content.author_id for entry in recent_history}

    def categorize(self, items: Sequence[ScoredContent]) -> CategorizedContent:
        """Categorize items; each predicate is evaluated independently.

        Args:
            items: Scored items.

        Returns:
            CategorizedContent with per-item membership records.
        """
        result = CategorizedContent()
        for item in items:
            membership = self.membership(item)
            result.memberships[item.content_id] = membership
            if membership.fresh:
                result.fresh.append(item)
            if membership.familiar:
                result.familiar.append(item)
            if membership.discovery:
                result.discovery.append(item)
            if membership.trending:
                result.trending.append(item)
            if membership.diverse:
                result.diverse.append(item)
            if membership.low_quality:
                result.low_quality.append(item)
        return result

    def membership(self, item: ScoredContent) -> CategoryMembership:
        """Compute the category predicates for one item."""
        thresholds = self._config.category_thresholds
        age_hours = max(item.content.age_hours(self._now), 0.0)

        recency = recency_score(age_hours, self._decay)
        familiarity = self.familiarity_score(item)
        discovery = self.discovery_score(item, familiarity)
        trending = self.trending_score(item, age_hours)
        diversity = self.diversity_score(item)

        return CategoryMembership(
            content_id=item.content_id,
            fresh=recency > thresholds.fresh,
            familiar=familiarity > thresholds.familiar,
            discovery=discovery > thresholds.discovery,
            trending=trending > thresholds.trending,
            diverse=diversity > thresholds.diverse,
            low_quality=item.score < thresholds.low_quality,
            recency_score=recency,
            familiarity_score=familiarity,
            discovery_score=discovery,
            trending_score=trending,
            diversity_score=diversity,
        )

    def familiarity_score(self, item: ScoredContent) -> float:
        """How familiar an item is from preferences and recent topics."""
        prefs = self._preferences
        if prefs is None:
            return FAMILIARITY_WITHOUT_PREFERENCES

        topics = item.content.topic_names
        topic_affinity = max(
            (prefs.preferred_topics[t] for t in topics if t in prefs.preferred_topics),
            default=0.0,
        )
        source_affinity = prefs.preferred_sources.get(item.content.author_id, 0.0)
        return _clip(
            topic_affinity * TOPIC_PREFERENCE_WEIGHT
            + source_affinity * SOURCE_PREFERENCE_WEIGHT
            + self._history_similarity(topics) * HISTORY_SIMILARITY_WEIGHT
        )

    def discovery_score(
        self, item: ScoredContent, familiarity: float | None = None
    ) -> float:
        """Discovery potential: unfamiliarity plus a novelty bonus."""
        if familiarity is None:
            familiarity = self.familiarity_score(item)

        prefs = self._preferences
        preferred_topics = prefs.preferred_topics if prefs else {}
        preferred_sources = prefs.preferred_sources if prefs else {}
        new_topics = not any(t in preferred_topics for t in item.content.topic_names)
        new_source = item.content.author_id not in preferred_sources

        if new_topics and new_source:
            bonus = NEW_TOPIC_AND_SOURCE_BONUS
        elif new_topics or new_source:
            bonus = NEW_TOPIC_OR_SOURCE_BONUS
        else:
            bonus = 0.0
        return _clip(1.0 - familiarity + bonus)

    def trending_score(self, item: ScoredContent, age_hours: float) -> float:
        """Blend of a fast recency bonus and the item's score."""
        recency_bonus = math.exp(-self._config.trending_recency_decay * age_hours)
        return _clip(
            recency_bonus * TRENDING_RECENCY_WEIGHT + item.score * TRENDING_SCORE_WEIGHT
        )

    def diversity_score(self, item: ScoredContent) -> float:
        """Local diversity versus recent history topics and authors."""
        if not self._has_history:
            return 1.0

        topics = set(item.content.topic_names)
        if not self._recent_topics:
            topic_novelty = 1.0
        elif not topics:
            topic_novelty = TOPICLESS_DIVERSITY
        else:
            topic_novelty = 1.0 - len(topics & self._recent_topics) / len(topics)

        source_novelty = (
            KNOWN_SOURCE_NOVELTY
            if item.content.author_id in self._recent_sources
            else NEW_SOURCE_NOVELTY
        )
        return _clip(
            topic_novelty * TOPIC_NOVELTY_WEIGHT
            + source_novelty * SOURCE_NOVELTY_WEIGHT
        )

    def _history_similarity(self, topics: list[str]) -> float:
        item_topics = set(topics)
        if not item_topics or not self._recent_topics:
            return 0.0
        union = item_topics | self._recent_topics
        return len(item_topics & self._recent_topics) / len(union)


def categorize_items(
    items: Sequence[ScoredContent],
    config: ContentBalancingConfig | None = None,
    preferences: UserPreferences | None = None,
    recent_history: Sequence[FeedEntry] = (),
    now: datetime | None = None,
) -> CategorizedContent:
    """Pure function wrapper for categorization.

    Args:
        items: Scored items.
        config: Balancing configuration.
        preferences: User preferences.
        recent_history: Recent feed history.
        now: Reference time.

    Returns:
        CategorizedContent.
    """
    categorizer = ContentCategorizer(
        config or ContentBalancingConfig(),
        preferences=preferences,
        recent_history=recent_history,
        now=now,
    )
    return categorizer.categorize(items)
