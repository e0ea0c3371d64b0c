"""Protocol interfaces for the engine's external collaborators.

Collaborators own their own timeouts. Any exception they raise propagates
through the pipeline stages and triggers the orchestrator fallback.
"""

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from src.content.models import FeedEntry, UserPreferences


if TYPE_CHECKING:
    from src.orchestrator.models import DiversityMetricsRecord


@runtime_checkable
class HistoryProvider(Protocol):
    """Supplies a user's recent feed history."""

    def get_recent_history(self, user_id: str, max_items: int) -> list[FeedEntry]:
        """Return up to ``max_items`` recent history entries, newest first.

        Args:
            user_id: User whose history is requested.
            max_items: Maximum number of entries.

        Returns:
            Recent feed entries.
        """
        ...


@runtime_checkable
class PreferenceProvider(Protocol):
    """Supplies persisted user preferences."""

    def get_preferences(self, user_id: str) -> UserPreferences | None:
        """Return the user's preferences, or None if none are stored."""
        ...


@runtime_checkable
class TrendingScoreProvider(Protocol):
    """Supplies a trending signal per content item."""

    def get_score(self, content_id: str) -> float:
        """Return a trending score in [0, 1]; 0.0 when unknown."""
        ...


@runtime_checkable
class MetricsSink(Protocol):
    """Receives one diagnostic record per diversification call."""

    def record(self, record: "DiversityMetricsRecord") -> None:
        """Store or emit the record.

        Failures are logged by the caller and never affect the feed.
        """
        ...
