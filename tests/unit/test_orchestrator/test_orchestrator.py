"""Unit tests for the diversification orchestrator."""

import math

import pytest

from src.config.schemas.base import EchoChamberRiskLevel, RecommendationPriority
from src.config.schemas.pipeline import DiversificationConfig
from src.content.models import FeedEntry, ScoredContent, UserPreferences
from src.orchestrator.models import (
    EnhancedScoredContent,
    FeedDiversityMetrics,
    SystemRecommendationType,
)
from src.orchestrator.orchestrator import (
    DiversificationOrchestrator,
    diversify_feed_pure,
)
from src.providers.memory import CollectingMetricsSink, InMemoryHistoryProvider
from src.providers.protocols import HistoryProvider
from tests.helpers.content import make_content, make_history, make_scored
from tests.helpers.time import FIXED_NOW


STAGES_DISABLED = DiversificationConfig(
    enable_diversity_boosts=False,
    enable_freshness_boosts=False,
    enable_echo_chamber_prevention=False,
    enable_content_balancing=False,
)


class _FailingHistoryProvider:
    def get_recent_history(self, user_id: str, max_items: int) -> list[FeedEntry]:
        msg = f"history store timed out for {user_id}"
        raise TimeoutError(msg)


class _RecordingHistoryProvider:
    def __init__(self, history: list[FeedEntry]) -> None:
        self.calls: list[tuple[str, int]] = []
        self._history = history

    def get_recent_history(self, user_id: str, max_items: int) -> list[FeedEntry]:
        self.calls.append((user_id, max_items))
        return self._history[:max_items]


class _FailingPreferenceProvider:
    def get_preferences(self, user_id: str) -> UserPreferences | None:
        msg = "preference service unavailable"
        raise ConnectionError(msg)


class _FailingMetricsSink:
    def record(self, record: object) -> None:
        msg = "sink is down"
        raise RuntimeError(msg)


def _make_candidates(count: int) -> list[ScoredContent]:
    return [
        make_scored(f"c{i:02d}", round(1.0 - i * 0.02, 2), f"author-{i}")
        for i in range(count)
    ]


def _make_orchestrator(
    history_provider: HistoryProvider | None = None, **kwargs: object
) -> DiversificationOrchestrator:
    return DiversificationOrchestrator(
        history_provider or InMemoryHistoryProvider(),
        **kwargs,  # type: ignore[arg-type]
    )


def _make_feed_item(content_id: str, author_id: str) -> EnhancedScoredContent:
    return EnhancedScoredContent(
        content=make_content(content_id, author_id), original_score=1.0
    )


class TestDiversifyFeed:
    """Tests for DiversificationOrchestrator.diversify_feed."""

    @pytest.mark.unit
    def test_empty_candidates(self) -> None:
        """Test that no candidates yield an empty result without history access."""
        provider = _RecordingHistoryProvider([])

        result = _make_orchestrator(provider).diversify_feed("u1", [], now=FIXED_NOW)

        assert result.diversified_feed == []
        assert result.processing_stats.items_processed == 0
        assert result.recommendations == []
        assert provider.calls == []

    @pytest.mark.unit
    def test_feed_is_bounded_and_ranked(self) -> None:
        """Test that the feed respects feed_size and is sorted by final score."""
        result = _make_orchestrator().diversify_feed(
            "u1", _make_candidates(30), feed_size=10, now=FIXED_NOW
        )

        feed = result.diversified_feed
        assert len(feed) == 10
        finals = [item.final_score for item in feed]
        assert finals == sorted(finals, reverse=True)
        assert len({item.content_id for item in feed}) == 10
        assert result.processing_stats.items_processed == 30
        assert result.processing_stats.items_filtered == 20

    @pytest.mark.unit
    def test_final_score_is_explained_by_breakdown(self) -> None:
        """Test that every final score equals base times its contributions."""
        result = _make_orchestrator().diversify_feed(
            "u1", _make_candidates(5), feed_size=5, now=FIXED_NOW
        )

        for item in result.diversified_feed:
            assert item.breakdown is not None
            expected = item.original_score * math.prod(
                c.factor for c in item.breakdown.contributions
            )
            assert item.final_score == pytest.approx(expected)
            stages = [c.stage for c in item.breakdown.contributions]
            assert stages[:2] == ["diversity_boost", "freshness_boost"]
            assert "balancing" in stages

    @pytest.mark.unit
    def test_short_history_uses_neutral_diversity(self) -> None:
        """Test the boosts for a user without enough history."""
        result = _make_orchestrator().diversify_feed(
            "u1", [make_scored("a", 1.0, age_hours=0.0)], feed_size=1, now=FIXED_NOW
        )

        [item] = result.diversified_feed
        assert item.diversity_score == 0.5
        assert item.freshness_score == 1.0
        assert item.diversity_boost == pytest.approx(
            1.0 + 0.5 * 0.2 * (1.0 - math.exp(-1.0))
        )
        assert item.freshness_boost == pytest.approx(1.3)
        assert result.diversity_metrics.echo_chamber_risk_level == (
            EchoChamberRiskLevel.LOW
        )

    @pytest.mark.unit
    def test_all_stages_disabled_keeps_original_scores(self) -> None:
        """Test that disabling every stage ranks by original score."""
        candidates = list(reversed(_make_candidates(6)))

        result = _make_orchestrator(config=STAGES_DISABLED).diversify_feed(
            "u1", candidates, feed_size=4, now=FIXED_NOW
        )

        feed = result.diversified_feed
        assert [item.content_id for item in feed] == ["c00", "c01", "c02", "c03"]
        assert all(item.final_score == item.original_score for item in feed)
        assert all(item.diversity_boost == 1.0 for item in feed)
        assert result.processing_stats.balancing_time_ms == 0.0

    @pytest.mark.unit
    def test_per_call_config_overrides_default(self) -> None:
        """Test that a config passed to the call wins over the instance default."""
        orchestrator = _make_orchestrator()

        result = orchestrator.diversify_feed(
            "u1", _make_candidates(3), 3, config=STAGES_DISABLED, now=FIXED_NOW
        )

        assert all(
            item.final_score == item.original_score for item in result.diversified_feed
        )

    @pytest.mark.unit
    def test_history_is_requested_with_configured_size(self) -> None:
        """Test that the history provider receives max_history_size."""
        provider = _RecordingHistoryProvider(make_history(30))
        config = DiversificationConfig(max_history_size=25)

        result = _make_orchestrator(provider, config=config).diversify_feed(
            "u1", _make_candidates(3), now=FIXED_NOW
        )

        assert provider.calls == [("u1", 25)]
        assert len(result.diversified_feed) == 3

    @pytest.mark.unit
    def test_low_quality_candidates_still_fill_the_feed(self) -> None:
        """Test that candidates below the quality threshold still make a feed."""
        history = InMemoryHistoryProvider({"u1": make_history(25)})
        candidates = [
            make_scored(f"low{i}", 0.1, f"author-{i}", tags=["tech"]) for i in range(5)
        ]

        result = _make_orchestrator(history).diversify_feed(
            "u1", candidates, feed_size=10, now=FIXED_NOW
        )

        feed = result.diversified_feed
        assert {item.content_id for item in feed} == {f"low{i}" for i in range(5)}
        assert all("error" not in item.metadata for item in feed)
        assert result.processing_stats.items_filtered == 0

    @pytest.mark.unit
    def test_naive_now_is_treated_as_utc(self) -> None:
        """Test that a naive reference time ranks like its UTC equivalent."""
        history = InMemoryHistoryProvider({"u1": make_history(25)})
        candidates = _make_candidates(5)

        aware = _make_orchestrator(history).diversify_feed(
            "u1", candidates, feed_size=5, now=FIXED_NOW
        )
        naive = _make_orchestrator(history).diversify_feed(
            "u1", candidates, feed_size=5, now=FIXED_NOW.replace(tzinfo=None)
        )

        assert all("error" not in item.metadata for item in naive.diversified_feed)
        assert [item.content_id for item in naive.diversified_feed] == [
            item.content_id for item in aware.diversified_feed
        ]
        assert [item.final_score for item in naive.diversified_feed] == pytest.approx(
            [item.final_score for item in aware.diversified_feed]
        )


class TestFallback:
    """Tests for the fallback path."""

    @pytest.mark.unit
    def test_history_failure_serves_original_candidates(self) -> None:
        """Test that a failing history provider yields the fallback feed."""
        candidates = _make_candidates(8)
        sink = CollectingMetricsSink()

        result = _make_orchestrator(
            _FailingHistoryProvider(), metrics_sink=sink
        ).diversify_feed("u1", candidates, feed_size=5, now=FIXED_NOW)

        feed = result.diversified_feed
        assert [item.content_id for item in feed] == [
            c.content_id for c in candidates[:5]
        ]
        assert all(item.final_score == item.original_score for item in feed)
        assert feed[0].metadata["error"] == "history store timed out for u1"
        [recommendation] = result.recommendations
        assert recommendation.type == (
            SystemRecommendationType.IMPROVE_ECHO_CHAMBER_DETECTION
        )
        assert recommendation.priority == RecommendationPriority.HIGH
        assert recommendation.action_required == "Investigation and bug fix required"
        assert [record.used_fallback for record in sink.records] == [True]

    @pytest.mark.unit
    def test_fallback_never_exceeds_candidate_count(self) -> None:
        """Test that the fallback feed is min(feed_size, candidates) long."""
        result = _make_orchestrator(_FailingHistoryProvider()).diversify_feed(
            "u1", _make_candidates(3), feed_size=10, now=FIXED_NOW
        )
        assert len(result.diversified_feed) == 3

    @pytest.mark.unit
    def test_preference_failure_falls_back(self) -> None:
        """Test that a failing preference provider triggers the fallback."""
        result = _make_orchestrator(
            preference_provider=_FailingPreferenceProvider()
        ).diversify_feed("u1", _make_candidates(4), feed_size=4, now=FIXED_NOW)

        assert result.recommendations[0].description == (
            "Error occurred during diversification: preference service unavailable"
        )

    @pytest.mark.unit
    def test_metrics_sink_failure_is_ignored(self) -> None:
        """Test that a failing sink does not affect the feed."""
        result = _make_orchestrator(metrics_sink=_FailingMetricsSink()).diversify_feed(
            "u1", _make_candidates(4), feed_size=4, now=FIXED_NOW
        )

        assert len(result.diversified_feed) == 4
        assert all("error" not in item.metadata for item in result.diversified_feed)


class TestMetricsSink:
    """Tests for diagnostic records."""

    @pytest.mark.unit
    def test_record_sent_per_call(self) -> None:
        """Test that one record describing the feed is sent."""
        sink = CollectingMetricsSink()

        result = _make_orchestrator(metrics_sink=sink).diversify_feed(
            "u1", _make_candidates(4), feed_size=3, now=FIXED_NOW
        )

        [record] = sink.records
        assert record.user_id == "u1"
        assert record.generated_at == FIXED_NOW
        assert record.feed_size == len(result.diversified_feed)
        assert record.unique_sources == 3
        assert record.used_fallback is False

    @pytest.mark.unit
    def test_metrics_logging_disabled(self) -> None:
        """Test that no record is sent when metrics logging is off."""
        sink = CollectingMetricsSink()
        config = DiversificationConfig(enable_metrics_logging=False)

        _make_orchestrator(metrics_sink=sink, config=config).diversify_feed(
            "u1", _make_candidates(4), now=FIXED_NOW
        )

        assert sink.records == []


class TestFeedMetricsAndRecommendations:
    """Tests for calculate_feed_metrics and generate_system_recommendations."""

    @pytest.mark.unit
    def test_empty_feed_metrics(self) -> None:
        """Test that an empty feed yields default metrics."""
        metrics = _make_orchestrator().calculate_feed_metrics([])
        assert metrics == FeedDiversityMetrics()

    @pytest.mark.unit
    def test_feed_metrics_without_balancing(self) -> None:
        """Test distributions and fallback balance metrics."""
        feed = [
            _make_feed_item("a", "x"),
            _make_feed_item("b", "x"),
            _make_feed_item("c", "y"),
            _make_feed_item("d", "z"),
        ]

        metrics = _make_orchestrator().calculate_feed_metrics(feed, now=FIXED_NOW)

        assert metrics.source_distribution == {"x": 0.5, "y": 0.25, "z": 0.25}
        assert metrics.content_type_distribution == {"text": 1.0}
        assert metrics.echo_chamber_risk_level == EchoChamberRiskLevel.LOW
        assert metrics.balance_metrics.source_count == 3
        assert metrics.quality_metrics.average_score == pytest.approx(1.0)

    @pytest.mark.unit
    def test_unhealthy_feed_recommendations(self) -> None:
        """Test the three checks in order."""
        feed = [_make_feed_item(f"c{i}", "x") for i in range(10)]
        metrics = FeedDiversityMetrics(
            overall_diversity_score=0.2,
            freshness_index=0.1,
            source_distribution={"x": 1.0},
        )

        recommendations = _make_orchestrator().generate_system_recommendations(
            metrics, feed
        )

        assert [r.type for r in recommendations] == [
            SystemRecommendationType.DIVERSIFY_CONTENT_SOURCES,
            SystemRecommendationType.ADJUST_FRESHNESS_WEIGHTS,
            SystemRecommendationType.INCREASE_CONTENT_POOL,
        ]
        assert [r.priority for r in recommendations] == [
            RecommendationPriority.HIGH,
            RecommendationPriority.MEDIUM,
            RecommendationPriority.MEDIUM,
        ]
        assert recommendations[0].description == "Overall feed diversity is low (20%)"
        assert recommendations[2].description == (
            "Limited source diversity (1 unique sources)"
        )

    @pytest.mark.unit
    def test_small_feed_skips_source_check(self) -> None:
        """Test that feeds under ten items are not checked for sources."""
        feed = [_make_feed_item(f"c{i}", "x") for i in range(9)]
        metrics = FeedDiversityMetrics(
            overall_diversity_score=0.9,
            freshness_index=0.9,
            source_distribution={"x": 1.0},
        )

        assert _make_orchestrator().generate_system_recommendations(metrics, feed) == []

    @pytest.mark.unit
    def test_empty_feed_has_no_recommendations(self) -> None:
        """Test that an empty feed is not judged."""
        recommendations = _make_orchestrator().generate_system_recommendations(
            FeedDiversityMetrics(), []
        )
        assert recommendations == []


class TestDiversifyFeedPure:
    """Tests for diversify_feed_pure."""

    @pytest.mark.unit
    def test_matches_orchestrator(self) -> None:
        """Test that the pure API ranks like the orchestrator."""
        candidates = _make_candidates(6)

        via_pure = diversify_feed_pure(
            "u1", candidates, InMemoryHistoryProvider(), feed_size=4, now=FIXED_NOW
        )
        via_method = _make_orchestrator().diversify_feed(
            "u1", candidates, feed_size=4, now=FIXED_NOW
        )

        assert [i.content_id for i in via_pure.diversified_feed] == [
            i.content_id for i in via_method.diversified_feed
        ]
