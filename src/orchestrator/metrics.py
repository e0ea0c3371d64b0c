"""Per-call metrics for the diversification pipeline."""

import time
from dataclasses import dataclass, field


@dataclass
class PipelineMetrics:
    """Timings and counters for one diversification call.

    A fresh instance is created per call; nothing is shared between calls.

    Attributes:
        items_in: Number of candidates received.
        items_out: Number of items in the final feed.
        items_filtered: Candidates that did not make the final feed.
        history_size: History entries fetched.
        stage_durations_ms: Wall time per stage in milliseconds.
        used_fallback: Whether the fallback path produced the result.
    """

    items_in: int = 0
    items_out: int = 0
    items_filtered: int = 0
    history_size: int = 0
    stage_durations_ms: dict[str, float] = field(default_factory=dict)
    used_fallback: bool = False
    _started: float = field(default_factory=time.perf_counter, repr=False)

    def record_stage_duration(self, stage: str, duration_ms: float) -> None:
        """Record the duration of a pipeline stage.

        Args:
            stage: Stage name.
            duration_ms: Duration in milliseconds.
        """
        self.stage_durations_ms[stage] = duration_ms

    def stage_ms(self, stage: str) -> float:
        """Duration of a stage, 0.0 if it did not run."""
        return self.stage_durations_ms.get(stage, 0.0)

    def record_items(self, items_in: int, items_out: int) -> None:
        """Record input and output counts.

        Args:
            items_in: Number of candidates.
            items_out: Number of feed items.
        """
        self.items_in = items_in
        self.items_out = items_out
        self.items_filtered = max(items_in - items_out, 0)

    def total_ms(self) -> float:
        """Milliseconds elapsed since the metrics were created."""
        return (time.perf_counter() - self._started) * 1000

    def to_dict(self) -> dict[str, object]:
        """Export metrics as a dictionary."""
        return {
            "items_in": self.items_in,
            "items_out": self.items_out,
            "items_filtered": self.items_filtered,
            "history_size": self.history_size,
            "stage_durations_ms": dict(self.stage_durations_ms),
            "used_fallback": self.used_fallback,
        }
