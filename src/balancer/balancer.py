"""Quota-based content balancing.

Selects a feed of the requested size from scored candidates so that fresh,
familiar and discovery content each get their quota, then enforces a
minimum number of distinct authors and re-weights items by freshness. A
feed left short by the quotas is padded, so candidates always yield items.
"""

from collections.abc import Mapping, Sequence
from datetime import UTC, datetime

import structlog

from src.balancer.categorizer import ContentCategorizer
from src.balancer.models import (
    BalancedFeedResult,
    BalancingReason,
    BalancingReasonType,
    CategorizedContent,
)
from src.balancer.quality import compute_distribution, compute_quality_metrics
from src.config.schemas.balancing import (
    ContentBalancingConfig,
    ContentQuotas,
    FreshnessBalancingConfig,
)
from src.content.models import FeedEntry, ScoredContent, UserPreferences
from src.providers.protocols import PreferenceProvider


logger = structlog.get_logger()

# Stage label recorded on score contributions
BALANCING_STAGE = "balancing"

QUALITY_FILTER_IMPACT = 0.7
QUOTA_ENFORCEMENT_IMPACT = 0.8
SOURCE_DIVERSITY_IMPACT = 0.6
FRESHNESS_BALANCE_IMPACT = 0.5
FEED_PADDING_IMPACT = 0.4


def _sort_key(item: ScoredContent) -> tuple[float, str]:
    # Score descending, content id ascending for ties
    return (-item.score, item.content_id)


def _sorted(items: Sequence[ScoredContent]) -> list[ScoredContent]:
    return sorted(items, key=_sort_key)


def _top(items: Sequence[ScoredContent], count: int) -> list[ScoredContent]:
    if count <= 0:
        return []
    return _sorted(items)[:count]


def ensure_minimum_source_diversity(
    feed: Sequence[ScoredContent],
    min_sources: int,
    candidate_pool: Sequence[ScoredContent] = (),
    replacement_score_ratio: float = 0.8,
) -> list[ScoredContent]:
    """Swap in items from unrepresented authors until enough authors appear.

    The best candidate of each unrepresented author replaces the feed's
    lowest-scoring items, in ascending score order, and only when its score
    exceeds ``replacement_score_ratio`` times the replaced score.

    Args:
        feed: Current feed.
        min_sources: Required number of distinct authors.
        candidate_pool: Items eligible for swapping in.
        replacement_score_ratio: Minimum replacement/replaced score ratio.

    Returns:
        New feed list of the same length.
    """
    result = list(feed)
    sources = {item.content.author_id for item in result}
    if len(sources) >= min_sources:
        return result

    feed_ids = {item.content_id for item in result}
    best_per_author: dict[str, ScoredContent] = {}
    for candidate in _sorted(candidate_pool):
        author = candidate.content.author_id
        if candidate.content_id in feed_ids or author in sources:
            continue
        best_per_author.setdefault(author, candidate)

    replacements = _sorted(list(best_per_author.values()))[: min_sources - len(sources)]
    lowest_first = sorted(
        range(len(result)), key=lambda i: (result[i].score, result[i].content_id)
    )

    for position, replacement in zip(lowest_first, replacements, strict=False):
        if replacement.score > result[position].score * replacement_score_ratio:
            result[position] = replacement

    return result


def pad_feed(
    feed: Sequence[ScoredContent],
    target_size: int,
    *pools: Sequence[ScoredContent],
) -> list[ScoredContent]:
    """Top up a short feed from the given pools, in pool order.

    Each pool is drained by descending score. The feed grows to
    ``target_size`` or until every pool is exhausted, so candidates that
    fall outside every category still reach the feed.

    Args:
        feed: Current feed.
        target_size: Requested feed size.
        pools: Candidate pools, most preferred first.

    Returns:
        New feed list sorted by score.
    """
    padded = list(feed)
    seen = {item.content_id for item in padded}
    for pool in pools:
        for item in _sorted(pool):
            if len(padded) >= target_size:
                return _sorted(padded)
            if item.content_id not in seen:
                seen.add(item.content_id)
                padded.append(item)
    return _sorted(padded)


def balance_freshness(
    items: Sequence[ScoredContent],
    freshness_scores: Mapping[str, float],
    config: FreshnessBalancingConfig | None = None,
) -> list[ScoredContent]:
    """Re-weight items by freshness and re-sort.

    Items are split into a fresh head, a stale tail and a middle, each
    scaled by ``1 + freshness * weight``. The result is a permutation of the
    input sorted by adjusted score; inputs are not mutated.

    Args:
        items: Feed items.
        freshness_scores: Freshness per content id (missing ids count as 0).
        config: Freshness balancing configuration.

    Returns:
        Adjusted copies sorted by descending score.
    """
    config = config or FreshnessBalancingConfig()
    total = len(items)
    fresh_count = int(total * config.minimum_fresh_ratio)
    stale_count = int(total * config.maximum_stale_ratio)

    by_freshness = sorted(
        items,
        key=lambda item: (-freshness_scores.get(item.content_id, 0.0), item.content_id),
    )
    fresh = by_freshness[:fresh_count]
    remaining = by_freshness[fresh_count:]
    stale_count = min(stale_count, len(remaining))
    middle = remaining[: len(remaining) - stale_count]
    stale = remaining[len(remaining) - stale_count :]

    adjusted: list[ScoredContent] = []
    for item in fresh + middle + stale:
        freshness = freshness_scores.get(item.content_id, 0.0)
        copy = item.copy()
        copy.apply(
            BALANCING_STAGE,
            1.0 + freshness * config.freshness_weight,
            f"Freshness balancing (freshness {freshness:.2f})",
        )
        adjusted.append(copy)
    return _sorted(adjusted)


class ContentBalancer:
    """Applies content quotas, a source diversity floor and freshness balancing.

    Args:
        config: Balancing configuration.
        preference_provider: Source of user preferences. Provider exceptions
            propagate to the caller.
        recency_decay_rate: Hourly decay used for the fresh predicate.
        now: Reference time.
    """

    def __init__(
        self,
        config: ContentBalancingConfig | None = None,
        preference_provider: PreferenceProvider | None = None,
        recency_decay_rate: float = 0.05,
        now: datetime | None = None,
    ) -> None:
        self._config = config or ContentBalancingConfig()
        self._preferences = preference_provider
        self._decay = recency_decay_rate
        self._now = now or datetime.now(UTC)
        self._log = logger.bind(component="balancer", subcomponent="quota")

    def resolve_quotas(self, preferences: UserPreferences | None) -> ContentQuotas:
        """Personalized quotas when enabled and present, else the defaults."""
        if (
            self._config.enable_personalization
            and preferences is not None
            and preferences.quota_override is not None
        ):
            return preferences.quota_override
        return self._config.default_quotas

    def categorize_items(
        self,
        items: Sequence[ScoredContent],
        user_id: str,
        recent_history: Sequence[FeedEntry] = (),
    ) -> CategorizedContent:
        """Categorize items using the user's stored preferences."""
        preferences = self._load_preferences(user_id)
        return self._categorizer(preferences, recent_history).categorize(items)

    def apply_content_quotas(
        self,
        user_id: str,
        items: Sequence[ScoredContent],
        target_size: int = 20,
        recent_history: Sequence[FeedEntry] = (),
        freshness_scores: Mapping[str, float] | None = None,
    ) -> BalancedFeedResult:
        """Build a quota-balanced feed.

        Args:
            user_id: User the feed is for.
            items: Scored candidates.
            target_size: Requested feed size.
            recent_history: Recent feed history for categorization.
            freshness_scores: Freshness per content id for freshness
                balancing; recency is used when None.

        Returns:
            BalancedFeedResult holding min(target_size, len(items)) items.
            Empty input yields an empty result.
        """
        cfg = self._config
        if not items:
            return BalancedFeedResult(
                balanced_feed=[], applied_quotas=cfg.default_quotas
            )

        preferences = self._load_preferences(user_id)
        quotas = self.resolve_quotas(preferences)
        reasons: list[BalancingReason] = []

        qualified = [item for item in items if item.score >= cfg.quality_threshold]
        below_threshold = [
            item for item in items if item.score < cfg.quality_threshold
        ]
        filtered_out = len(below_threshold)
        if filtered_out > 0:
            reasons.append(
                BalancingReason(
                    type=BalancingReasonType.QUALITY_FILTER,
                    description=(
                        f"Filtered out {filtered_out} items below quality "
                        f"threshold ({cfg.quality_threshold})"
                    ),
                    affected_items=filtered_out,
                    impact=QUALITY_FILTER_IMPACT,
                )
            )

        categorizer = self._categorizer(preferences, recent_history)
        categorized = categorizer.categorize(qualified)
        feed = self._select_by_quota(categorized, quotas, target_size)
        if qualified:
            reasons.append(
                BalancingReason(
                    type=BalancingReasonType.QUOTA_ENFORCEMENT,
                    description=(
                        f"Applied content quotas: {int(quotas.fresh * 100)}% fresh, "
                        f"{int(quotas.familiar * 100)}% familiar, "
                        f"{int(quotas.discovery * 100)}% discovery"
                    ),
                    affected_items=len(feed),
                    impact=QUOTA_ENFORCEMENT_IMPACT,
                )
            )

        # Qualified items first; filtered ones only when nothing else is left
        padded = pad_feed(feed, target_size, qualified, below_threshold)
        padding = len(padded) - len(feed)
        if padding > 0:
            reasons.append(
                BalancingReason(
                    type=BalancingReasonType.FEED_PADDING,
                    description=(
                        f"Padded feed with {padding} items outside the quotas"
                    ),
                    affected_items=padding,
                    impact=FEED_PADDING_IMPACT,
                )
            )
            feed = padded

        feed = ensure_minimum_source_diversity(
            feed,
            cfg.minimum_source_diversity,
            qualified,
            cfg.replacement_score_ratio,
        )
        unique_sources = len({item.content.author_id for item in feed})
        if feed and unique_sources >= cfg.minimum_source_diversity:
            reasons.append(
                BalancingReason(
                    type=BalancingReasonType.SOURCE_DIVERSITY,
                    description=(
                        f"Ensured content from {unique_sources} different sources"
                    ),
                    affected_items=unique_sources,
                    impact=SOURCE_DIVERSITY_IMPACT,
                )
            )

        if cfg.enable_freshness_balancing and feed:
            scores = (
                freshness_scores
                if freshness_scores is not None
                else {
                    cid: m.recency_score for cid, m in categorized.memberships.items()
                }
            )
            feed = balance_freshness(feed, scores, cfg.freshness_balancing)
            reasons.append(
                BalancingReason(
                    type=BalancingReasonType.FRESHNESS_BALANCE,
                    description=(
                        "Re-weighted items by freshness "
                        f"(weight {cfg.freshness_balancing.freshness_weight})"
                    ),
                    affected_items=len(feed),
                    impact=FRESHNESS_BALANCE_IMPACT,
                )
            )
        else:
            feed = _sorted(feed)

        self._log.info(
            "quota_balancing_complete",
            user_id=user_id,
            input_count=len(items),
            output_count=len(feed),
            filtered_count=filtered_out,
            source_count=unique_sources,
        )

        return BalancedFeedResult(
            balanced_feed=feed,
            applied_quotas=quotas,
            actual_distribution=compute_distribution(feed, categorized),
            quality_metrics=compute_quality_metrics(feed, self._now),
            balancing_reasons=reasons,
        )

    def ensure_minimum_source_diversity(
        self,
        feed: Sequence[ScoredContent],
        min_sources: int | None = None,
        candidate_pool: Sequence[ScoredContent] = (),
    ) -> list[ScoredContent]:
        """Enforce the source floor with the configured replacement ratio."""
        return ensure_minimum_source_diversity(
            feed,
            (
                self._config.minimum_source_diversity
                if min_sources is None
                else min_sources
            ),
            candidate_pool,
            self._config.replacement_score_ratio,
        )

    def balance_freshness(
        self,
        items: Sequence[ScoredContent],
        freshness_scores: Mapping[str, float],
    ) -> list[ScoredContent]:
        """Freshness balancing with the configured weights."""
        return balance_freshness(
            items, freshness_scores, self._config.freshness_balancing
        )

    def _load_preferences(self, user_id: str) -> UserPreferences | None:
        if self._preferences is None:
            return None
        return self._preferences.get_preferences(user_id)

    def _categorizer(
        self,
        preferences: UserPreferences | None,
        recent_history: Sequence[FeedEntry],
    ) -> ContentCategorizer:
        return ContentCategorizer(
            self._config,
            preferences=preferences,
            recent_history=recent_history,
            recency_decay_rate=self._decay,
            now=self._now,
        )

    def _select_by_quota(
        self,
        categorized: CategorizedContent,
        quotas: ContentQuotas,
        target_size: int,
    ) -> list[ScoredContent]:
        if target_size <= 0:
            return []

        chosen: dict[str, ScoredContent] = {}
        for group, quota in (
            (categorized.fresh, quotas.fresh),
            (categorized.familiar, quotas.familiar),
            (categorized.discovery, quotas.discovery),
        ):
            for item in _top(group, int(target_size * quota)):
                current = chosen.get(item.content_id)
                if current is None or item.score > current.score:
                    chosen[item.content_id] = item

        selected = _sorted(list(chosen.values()))
        remaining = target_size - len(selected)
        if remaining <= 0:
            return selected[:target_size]

        fill = [item for item in categorized.union() if item.content_id not in chosen]
        return _sorted(selected + _top(fill, remaining))


def apply_content_quotas_pure(
    user_id: str,
    items: Sequence[ScoredContent],
    target_size: int = 20,
    config: ContentBalancingConfig | None = None,
    preference_provider: PreferenceProvider | None = None,
    recent_history: Sequence[FeedEntry] = (),
    freshness_scores: Mapping[str, float] | None = None,
    now: datetime | None = None,
) -> BalancedFeedResult:
    """Pure function API for content balancing.

    Args:
        user_id: User the feed is for.
        items: Scored candidates.
        target_size: Requested feed size.
        config: Balancing configuration.
        preference_provider: Source of user preferences.
        recent_history: Recent feed history.
        freshness_scores: Freshness per content id.
        now: Reference time.

    Returns:
        BalancedFeedResult.
    """
    balancer = ContentBalancer(config, preference_provider, now=now)
    return balancer.apply_content_quotas(
        user_id, items, target_size, recent_history, freshness_scores
    )
