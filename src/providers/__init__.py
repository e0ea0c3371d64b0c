"""Collaborator protocols and in-memory implementations."""

from src.providers.memory import (
    CollectingMetricsSink,
    InMemoryHistoryProvider,
    LoggingMetricsSink,
    StaticPreferenceProvider,
    StaticTrendingProvider,
)
from src.providers.protocols import (
    HistoryProvider,
    MetricsSink,
    PreferenceProvider,
    TrendingScoreProvider,
)


__all__ = [
    "CollectingMetricsSink",
    "HistoryProvider",
    "InMemoryHistoryProvider",
    "LoggingMetricsSink",
    "MetricsSink",
    "PreferenceProvider",
    "StaticPreferenceProvider",
    "StaticTrendingProvider",
    "TrendingScoreProvider",
]
