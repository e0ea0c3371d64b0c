"""Diversification pipeline orchestrator."""

import time
from collections.abc import Sequence
from datetime import UTC, datetime

import structlog

from src.balancer.balancer import ContentBalancer
from src.balancer.models import BalancedContentDistribution, BalancedFeedResult
from src.balancer.quality import compute_quality_metrics
from src.config.schemas.base import EchoChamberRiskLevel, RecommendationPriority
from src.config.schemas.pipeline import DiversificationConfig
from src.content.models import FeedEntry, ScoredContent, ensure_aware
from src.diversity.analyzer import DiversityAnalyzer
from src.diversity.stats import clamp, mean, normalized_distribution
from src.echo_chamber.assessor import EchoChamberRiskAssessor
from src.echo_chamber.models import EchoChamberRiskAssessment
from src.freshness.analyzer import FreshnessAnalyzer
from src.orchestrator.boosts import diversity_boost, freshness_boost
from src.orchestrator.metrics import PipelineMetrics
from src.orchestrator.models import (
    DiversifiedFeedResult,
    DiversityMetricsRecord,
    EnhancedScoredContent,
    FeedDiversityMetrics,
    ProcessingStats,
    ScoringBreakdown,
    SystemRecommendation,
    SystemRecommendationType,
)
from src.orchestrator.state_machine import PipelineState, PipelineStateMachine
from src.providers.protocols import (
    HistoryProvider,
    MetricsSink,
    PreferenceProvider,
    TrendingScoreProvider,
)


logger = structlog.get_logger()

DIVERSITY_STAGE = "diversity_boost"
FRESHNESS_STAGE = "freshness_boost"

# Stage names used for timings
STAGE_HISTORY = "history_fetch"
STAGE_DIVERSITY = "diversity_analysis"
STAGE_FRESHNESS = "freshness_analysis"
STAGE_ECHO_CHAMBER = "echo_chamber_analysis"
STAGE_BALANCING = "balancing"

UNKNOWN_ERROR = "Unknown error"


def _rank_key(item: EnhancedScoredContent) -> tuple[float, str]:
    return (-item.final_score, item.content_id)


class DiversificationOrchestrator:
    """Runs the diversification pipeline for one user at a time.

    The orchestrator holds only collaborator references and a default
    configuration. Analyzers, metrics and the state machine are created per
    call, so one instance can serve concurrent callers.

    Args:
        history_provider: Source of the user's recent feed history.
        preference_provider: Source of user preferences for balancing.
        trending_provider: Source of trending scores for freshness.
        metrics_sink: Receiver of the per-call diagnostic record.
        config: Default configuration, overridable per call.
    """

    def __init__(
        self,
        history_provider: HistoryProvider,
        preference_provider: PreferenceProvider | None = None,
        trending_provider: TrendingScoreProvider | None = None,
        metrics_sink: MetricsSink | None = None,
        config: DiversificationConfig | None = None,
    ) -> None:
        self._history = history_provider
        self._preferences = preference_provider
        self._trending = trending_provider
        self._sink = metrics_sink
        self._config = config or DiversificationConfig()
        self._log = logger.bind(component="orchestrator")

    def diversify_feed(
        self,
        user_id: str,
        candidates: Sequence[ScoredContent],
        feed_size: int = 20,
        config: DiversificationConfig | None = None,
        now: datetime | None = None,
    ) -> DiversifiedFeedResult:
        """Produce a diversified, freshness-aware, balanced feed.

        Any exception raised inside the pipeline results in the fallback
        feed: the first ``feed_size`` candidates with their original scores.

        Args:
            user_id: User the feed is for.
            candidates: Candidates with base relevance scores.
            feed_size: Maximum number of items to return.
            config: Per-call configuration; the instance default if None.
            now: Reference time; current UTC time if None. Naive values are
                treated as UTC.

        Returns:
            DiversifiedFeedResult with at most ``feed_size`` items.
        """
        cfg = config or self._config
        now = ensure_aware(now) if now is not None else datetime.now(UTC)
        metrics = PipelineMetrics()
        state = PipelineStateMachine(user_id)
        log = self._log.bind(user_id=user_id)

        log.info(
            "diversification_started",
            candidates_in=len(candidates),
            feed_size=feed_size,
        )

        if not candidates:
            log.info("diversification_skipped", reason="no_candidates")
            return DiversifiedFeedResult(diversified_feed=[])

        try:
            result = self._run(user_id, candidates, feed_size, cfg, now, metrics, state)
        except Exception as e:
            state.fail()
            log.exception("diversification_failed", error=str(e))
            result = self._fallback(candidates, feed_size, e, metrics)
            if cfg.enable_metrics_logging:
                self._record_metrics(
                    user_id,
                    result.diversified_feed,
                    result.diversity_metrics,
                    now,
                    used_fallback=True,
                )
            return result

        log.info(
            "diversification_complete",
            candidates_in=len(candidates),
            feed_out=len(result.diversified_feed),
            duration_ms=round(result.processing_stats.total_processing_time_ms, 2),
            risk_level=result.diversity_metrics.echo_chamber_risk_level.value,
            recommendation_count=len(result.recommendations),
        )
        return result

    def _run(
        self,
        user_id: str,
        candidates: Sequence[ScoredContent],
        feed_size: int,
        cfg: DiversificationConfig,
        now: datetime,
        metrics: PipelineMetrics,
        state: PipelineStateMachine,
    ) -> DiversifiedFeedResult:
        start = time.perf_counter()
        history = self._history.get_recent_history(user_id, cfg.max_history_size)
        metrics.record_stage_duration(
            STAGE_HISTORY, (time.perf_counter() - start) * 1000
        )
        metrics.history_size = len(history)
        state.transition(PipelineState.HISTORY_LOADED)

        items = self.calculate_enhanced_scores(
            user_id, candidates, history, cfg, now, metrics
        )
        state.transition(PipelineState.SCORED)

        start = time.perf_counter()
        diversity = DiversityAnalyzer(cfg.diversity, now=now)
        assessor = EchoChamberRiskAssessor(cfg.echo_chamber, diversity, now=now)
        assessment = assessor.calculate_echo_chamber_risk(user_id, history)
        if cfg.enable_echo_chamber_prevention:
            items = self._apply_echo_chamber_prevention(
                user_id, items, history, assessor, assessment
            )
            state.transition(PipelineState.ECHO_CHAMBER_ADJUSTED)
        metrics.record_stage_duration(
            STAGE_ECHO_CHAMBER, (time.perf_counter() - start) * 1000
        )

        balanced: BalancedFeedResult | None = None
        if cfg.enable_content_balancing:
            start = time.perf_counter()
            items, balanced = self._apply_content_balancing(
                user_id, items, feed_size, history, cfg, now
            )
            metrics.record_stage_duration(
                STAGE_BALANCING, (time.perf_counter() - start) * 1000
            )
            state.transition(PipelineState.BALANCED)

        feed = sorted(items, key=_rank_key)[: max(feed_size, 0)]
        state.transition(PipelineState.RANKED)

        diversity_metrics = self.calculate_feed_metrics(feed, assessment, balanced, now)
        recommendations = self.generate_system_recommendations(
            diversity_metrics, feed, cfg
        )
        metrics.record_items(len(candidates), len(feed))

        if cfg.enable_metrics_logging:
            self._record_metrics(user_id, feed, diversity_metrics, now)

        state.transition(PipelineState.COMPLETED)
        return DiversifiedFeedResult(
            diversified_feed=feed,
            diversity_metrics=diversity_metrics,
            processing_stats=self._processing_stats(metrics),
            recommendations=recommendations,
        )

    def calculate_enhanced_scores(
        self,
        user_id: str,
        candidates: Sequence[ScoredContent],
        history: Sequence[FeedEntry],
        config: DiversificationConfig | None = None,
        now: datetime | None = None,
        metrics: PipelineMetrics | None = None,
    ) -> list[EnhancedScoredContent]:
        """Combine diversity and freshness into boosted scores.

        Each candidate's breakdown starts at its base score and receives a
        diversity and a freshness factor (1.0 when the boost is disabled).

        Args:
            user_id: User the feed is for.
            candidates: Candidates with base scores.
            history: Recent feed history.
            config: Configuration; the instance default if None.
            now: Reference time.
            metrics: Per-call metrics receiving the stage timings.

        Returns:
            One EnhancedScoredContent per candidate, in input order.
        """
        cfg = config or self._config
        now = ensure_aware(now) if now is not None else datetime.now(UTC)
        contents = [c.content for c in candidates]

        start = time.perf_counter()
        analyses = DiversityAnalyzer(cfg.diversity, now=now).calculate_diversity_scores(
            contents, history, user_id
        )
        diversity_ms = (time.perf_counter() - start) * 1000

        start = time.perf_counter()
        freshness = FreshnessAnalyzer(
            cfg.freshness, self._trending, now=now
        ).calculate_freshness_scores(contents)
        freshness_ms = (time.perf_counter() - start) * 1000

        if metrics is not None:
            metrics.record_stage_duration(STAGE_DIVERSITY, diversity_ms)
            metrics.record_stage_duration(STAGE_FRESHNESS, freshness_ms)

        enhanced: list[EnhancedScoredContent] = []
        rows = zip(candidates, analyses, freshness, strict=True)
        for candidate, analysis, fresh in rows:
            d_score = clamp(analysis.overall_diversity_score)
            f_score = clamp(fresh.freshness_score)
            d_boost = (
                diversity_boost(d_score, cfg.diversity_boost_multiplier)
                if cfg.enable_diversity_boosts
                else 1.0
            )
            f_boost = (
                freshness_boost(f_score, cfg.freshness_boost_multiplier)
                if cfg.enable_freshness_boosts
                else 1.0
            )

            breakdown = ScoringBreakdown(base_score=candidate.score)
            breakdown.apply(DIVERSITY_STAGE, d_boost, f"Diversity score {d_score:.2f}")
            breakdown.apply(FRESHNESS_STAGE, f_boost, f"Freshness score {f_score:.2f}")

            enhanced.append(
                EnhancedScoredContent(
                    content=candidate.content,
                    original_score=candidate.score,
                    diversity_score=d_score,
                    freshness_score=f_score,
                    diversity_boost=d_boost,
                    freshness_boost=f_boost,
                    breakdown=breakdown,
                    metadata={
                        "diversity_analysis_time_ms": diversity_ms,
                        "freshness_analysis_time_ms": freshness_ms,
                        "freshness_action": fresh.recommended_action.value,
                    },
                )
            )
        return enhanced

    def _apply_echo_chamber_prevention(
        self,
        user_id: str,
        items: list[EnhancedScoredContent],
        history: Sequence[FeedEntry],
        assessor: EchoChamberRiskAssessor,
        assessment: EchoChamberRiskAssessment,
    ) -> list[EnhancedScoredContent]:
        adjusted = assessor.apply_echo_chamber_prevention(
            user_id, [self._to_scored(item) for item in items], history, assessment
        )
        for item, scored in zip(items, adjusted, strict=True):
            for contribution in scored.contributions:
                item.breakdown.contributions.append(contribution)
        return items

    def _apply_content_balancing(
        self,
        user_id: str,
        items: list[EnhancedScoredContent],
        feed_size: int,
        history: Sequence[FeedEntry],
        cfg: DiversificationConfig,
        now: datetime,
    ) -> tuple[list[EnhancedScoredContent], BalancedFeedResult]:
        balancer = ContentBalancer(
            cfg.balancing,
            self._preferences,
            recency_decay_rate=cfg.freshness.recency_decay_rate,
            now=now,
        )
        result = balancer.apply_content_quotas(
            user_id,
            [self._to_scored(item) for item in items],
            target_size=feed_size,
            recent_history=history,
            freshness_scores={item.content_id: item.freshness_score for item in items},
        )

        by_id = {item.content_id: item for item in items}
        balanced: list[EnhancedScoredContent] = []
        for scored in result.balanced_feed:
            item = by_id[scored.content_id]
            for contribution in scored.contributions:
                item.breakdown.contributions.append(contribution)
            balanced.append(item)
        return balanced, result

    @staticmethod
    def _to_scored(item: EnhancedScoredContent) -> ScoredContent:
        """Working record carrying the current score and no prior factors."""
        return ScoredContent(
            content=item.content,
            score=item.final_score,
            original_score=item.original_score,
        )

    def calculate_feed_metrics(
        self,
        feed: Sequence[EnhancedScoredContent],
        assessment: EchoChamberRiskAssessment | None = None,
        balanced: BalancedFeedResult | None = None,
        now: datetime | None = None,
    ) -> FeedDiversityMetrics:
        """Summarize the diversity of a final feed.

        Args:
            feed: Final feed items.
            assessment: Echo chamber assessment of the user, if computed.
            balanced: Balancing result, if balancing ran.
            now: Reference time for quality ages.

        Returns:
            FeedDiversityMetrics; defaults for an empty feed.
        """
        if not feed:
            return FeedDiversityMetrics()

        now = ensure_aware(now) if now is not None else datetime.now(UTC)
        source_distribution = normalized_distribution(i.content.author_id for i in feed)
        topic_distribution = normalized_distribution(
            t for i in feed for t in i.content.topic_names
        )
        content_type_distribution = normalized_distribution(
            i.content.content_type.value for i in feed
        )

        risk_level = EchoChamberRiskLevel.LOW
        if assessment is not None:
            risk_level = assessment.risk_level

        if balanced is not None:
            balance_metrics = balanced.actual_distribution
        else:
            balance_metrics = BalancedContentDistribution(
                source_count=len(source_distribution),
                topic_count=len(topic_distribution),
                avg_quality_score=mean([i.final_score for i in feed]),
            )

        return FeedDiversityMetrics(
            overall_diversity_score=mean([i.diversity_score for i in feed]),
            freshness_index=mean([i.freshness_score for i in feed]),
            source_distribution=source_distribution,
            topic_distribution=topic_distribution,
            content_type_distribution=content_type_distribution,
            echo_chamber_risk_level=risk_level,
            balance_metrics=balance_metrics,
            quality_metrics=compute_quality_metrics(
                [self._to_scored(item) for item in feed], now
            ),
        )

    def generate_system_recommendations(
        self,
        metrics: FeedDiversityMetrics,
        feed: Sequence[EnhancedScoredContent],
        config: DiversificationConfig | None = None,
    ) -> list[SystemRecommendation]:
        """Operator-facing recommendations for an unhealthy feed.

        Args:
            metrics: Diversity metrics of the feed.
            feed: Final feed items.
            config: Thresholds; the instance default if None.

        Returns:
            Recommendations in check order (diversity, freshness, sources).
        """
        cfg = config or self._config
        recommendations: list[SystemRecommendation] = []
        if not feed:
            return recommendations

        if metrics.overall_diversity_score < cfg.low_diversity_threshold:
            recommendations.append(
                SystemRecommendation(
                    type=SystemRecommendationType.DIVERSIFY_CONTENT_SOURCES,
                    priority=RecommendationPriority.HIGH,
                    description=(
                        "Overall feed diversity is low "
                        f"({int(metrics.overall_diversity_score * 100)}%)"
                    ),
                    expected_impact=0.6,
                    action_required=(
                        "Expand content source pool or adjust diversity weights"
                    ),
                )
            )

        if metrics.freshness_index < cfg.low_freshness_threshold:
            recommendations.append(
                SystemRecommendation(
                    type=SystemRecommendationType.ADJUST_FRESHNESS_WEIGHTS,
                    priority=RecommendationPriority.MEDIUM,
                    description=(
                        "Feed freshness is below optimal level "
                        f"({int(metrics.freshness_index * 100)}%)"
                    ),
                    expected_impact=0.4,
                    action_required=(
                        "Increase freshness boost multipliers "
                        "or improve content ingestion"
                    ),
                )
            )

        source_count = len(metrics.source_distribution)
        if (
            source_count < cfg.min_feed_sources
            and len(feed) >= cfg.source_check_min_feed_size
        ):
            recommendations.append(
                SystemRecommendation(
                    type=SystemRecommendationType.INCREASE_CONTENT_POOL,
                    priority=RecommendationPriority.MEDIUM,
                    description=(
                        f"Limited source diversity ({source_count} unique sources)"
                    ),
                    expected_impact=0.5,
                    action_required="Onboard more content creators or sources",
                )
            )

        return recommendations

    def _record_metrics(
        self,
        user_id: str,
        feed: Sequence[EnhancedScoredContent],
        diversity_metrics: FeedDiversityMetrics,
        now: datetime,
        *,
        used_fallback: bool = False,
    ) -> None:
        """Send the diagnostic record; sink failures never affect the feed."""
        if self._sink is None:
            return
        record = DiversityMetricsRecord(
            user_id=user_id,
            generated_at=now,
            feed_size=len(feed),
            avg_diversity_score=mean([i.diversity_score for i in feed]),
            avg_freshness_score=mean([i.freshness_score for i in feed]),
            unique_sources=len({i.content.author_id for i in feed}),
            unique_topics=len({t for i in feed for t in i.content.topic_names}),
            echo_chamber_risk_level=diversity_metrics.echo_chamber_risk_level,
            used_fallback=used_fallback,
        )
        try:
            self._sink.record(record)
        except Exception as e:
            self._log.warning("metrics_sink_failed", user_id=user_id, error=str(e))

    @staticmethod
    def _processing_stats(metrics: PipelineMetrics) -> ProcessingStats:
        return ProcessingStats(
            total_processing_time_ms=metrics.total_ms(),
            items_processed=metrics.items_in,
            items_filtered=metrics.items_filtered,
            history_fetch_time_ms=metrics.stage_ms(STAGE_HISTORY),
            diversity_analysis_time_ms=metrics.stage_ms(STAGE_DIVERSITY),
            freshness_analysis_time_ms=metrics.stage_ms(STAGE_FRESHNESS),
            echo_chamber_analysis_time_ms=metrics.stage_ms(STAGE_ECHO_CHAMBER),
            balancing_time_ms=metrics.stage_ms(STAGE_BALANCING),
        )

    def _fallback(
        self,
        candidates: Sequence[ScoredContent],
        feed_size: int,
        error: Exception,
        metrics: PipelineMetrics,
    ) -> DiversifiedFeedResult:
        """Serve the candidates unmodified when the pipeline fails."""
        message = str(error) or UNKNOWN_ERROR
        feed = [
            EnhancedScoredContent(
                content=candidate.content,
                original_score=candidate.score,
                metadata={"error": message},
            )
            for candidate in candidates[: max(feed_size, 0)]
        ]
        metrics.used_fallback = True
        metrics.record_items(len(candidates), len(feed))
        return DiversifiedFeedResult(
            diversified_feed=feed,
            processing_stats=self._processing_stats(metrics),
            recommendations=[
                SystemRecommendation(
                    type=SystemRecommendationType.IMPROVE_ECHO_CHAMBER_DETECTION,
                    priority=RecommendationPriority.HIGH,
                    description=f"Error occurred during diversification: {message}",
                    expected_impact=0.0,
                    action_required="Investigation and bug fix required",
                )
            ],
        )


def diversify_feed_pure(
    user_id: str,
    candidates: Sequence[ScoredContent],
    history_provider: HistoryProvider,
    feed_size: int = 20,
    config: DiversificationConfig | None = None,
    preference_provider: PreferenceProvider | None = None,
    trending_provider: TrendingScoreProvider | None = None,
    metrics_sink: MetricsSink | None = None,
    now: datetime | None = None,
) -> DiversifiedFeedResult:
    """Pure function API for feed diversification.

    Args:
        user_id: User the feed is for.
        candidates: Candidates with base relevance scores.
        history_provider: Source of recent feed history.
        feed_size: Maximum number of items to return.
        config: Pipeline configuration.
        preference_provider: Source of user preferences.
        trending_provider: Source of trending scores.
        metrics_sink: Receiver of the diagnostic record.
        now: Reference time.

    Returns:
        DiversifiedFeedResult.
    """
    orchestrator = DiversificationOrchestrator(
        history_provider,
        preference_provider=preference_provider,
        trending_provider=trending_provider,
        metrics_sink=metrics_sink,
        config=config,
    )
    return orchestrator.diversify_feed(user_id, candidates, feed_size, now=now)
