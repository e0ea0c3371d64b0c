"""In-memory collaborator implementations.

Used by the CLI and tests; production deployments supply their own
providers backed by the content store and analytics services.
"""

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING

import structlog

from src.content.models import FeedEntry, UserPreferences


if TYPE_CHECKING:
    from src.orchestrator.models import DiversityMetricsRecord


logger = structlog.get_logger()


class InMemoryHistoryProvider:
    """Serves feed history from a per-user mapping.

    Entries are returned newest first, by ``generated_at``.
    """

    def __init__(
        self, histories: Mapping[str, Iterable[FeedEntry]] | None = None
    ) -> None:
        self._histories: dict[str, list[FeedEntry]] = {
            user_id: list(entries) for user_id, entries in (histories or {}).items()
        }

    def add(self, user_id: str, entry: FeedEntry) -> None:
        """Append one history entry for a user."""
        self._histories.setdefault(user_id, []).append(entry)

    def get_recent_history(self, user_id: str, max_items: int) -> list[FeedEntry]:
        """Return up to ``max_items`` entries, newest first."""
        entries = sorted(
            self._histories.get(user_id, []),
            key=lambda e: e.generated_at,
            reverse=True,
        )
        return entries[: max(max_items, 0)]


class StaticPreferenceProvider:
    """Serves fixed preferences per user."""

    def __init__(
        self, preferences: Mapping[str, UserPreferences] | None = None
    ) -> None:
        self._preferences = dict(preferences or {})

    def get_preferences(self, user_id: str) -> UserPreferences | None:
        """Return the stored preferences, or None."""
        return self._preferences.get(user_id)


class StaticTrendingProvider:
    """Serves fixed trending scores; unknown content scores 0.0."""

    def __init__(self, scores: Mapping[str, float] | None = None) -> None:
        self._scores = dict(scores or {})

    def get_score(self, content_id: str) -> float:
        """Return the trending score for ``content_id``."""
        return self._scores.get(content_id, 0.0)


class LoggingMetricsSink:
    """Emits each diagnostic record as a structured log event."""

    def __init__(self) -> None:
        self._log = logger.bind(component="providers", subcomponent="metrics_sink")

    def record(self, record: "DiversityMetricsRecord") -> None:
        """Log the record."""
        self._log.info("diversity_metrics", **record.to_dict())


class CollectingMetricsSink:
    """Keeps every diagnostic record in memory."""

    def __init__(self) -> None:
        self.records: list["DiversityMetricsRecord"] = []

    def record(self, record: "DiversityMetricsRecord") -> None:
        """Store the record."""
        self.records.append(record)
