"""Diversity analyzer configuration schema."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.config.schemas.base import DiversityDimension


# Tolerance for floating point drift when validating weight sums
WEIGHT_SUM_TOLERANCE = 1e-9


def default_dimension_weights() -> dict[DiversityDimension, float]:
    """Return the default per-dimension weights (sum to 1.0)."""
    return {
        DiversityDimension.TOPIC: 0.25,
        DiversityDimension.SOURCE: 0.20,
        DiversityDimension.PERSPECTIVE: 0.20,
        DiversityDimension.CONTENT_TYPE: 0.15,
        DiversityDimension.SENTIMENT: 0.10,
        DiversityDimension.RECENCY: 0.05,
        DiversityDimension.LANGUAGE: 0.03,
        DiversityDimension.ENGAGEMENT_TYPE: 0.02,
    }


class DiversityConfig(BaseModel):
    """Diversity scoring and echo chamber description configuration.

    Attributes:
        dimension_weights: Weight per diversity dimension.
        minimum_history_size: History entries required for a confident score.
        time_window_days: Window described by the historical distribution.
        diversity_threshold: Dimension scores below this emit recommendations.
        high_priority_threshold: Dimension scores below this are HIGH priority.
        medium_priority_threshold: Dimension scores below this are MEDIUM priority.
        severe_concentration: Concentration index above this is SEVERE.
        moderate_concentration: Concentration index above this is MODERATE.
        mild_concentration: Concentration index above this is MILD.
        specific_advice_concentration: Topic/source HHI that triggers targeted advice.
        dominant_perspective_share: Share above which a perspective dominates.
        missing_perspective_share: Share below which a perspective is missing.
        reference_perspectives: Perspectives expected in a balanced history.
        perspective_keywords: Topic keywords mapped to a perspective, by precedence.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    dimension_weights: dict[DiversityDimension, float] = Field(
        default_factory=default_dimension_weights
    )
    minimum_history_size: Annotated[int, Field(ge=0)] = 20
    time_window_days: Annotated[int, Field(ge=1)] = 7
    diversity_threshold: Annotated[float, Field(ge=0.0, le=1.0)] = 0.6
    high_priority_threshold: Annotated[float, Field(ge=0.0, le=1.0)] = 0.3
    medium_priority_threshold: Annotated[float, Field(ge=0.0, le=1.0)] = 0.5
    severe_concentration: Annotated[float, Field(ge=0.0, le=1.0)] = 0.8
    moderate_concentration: Annotated[float, Field(ge=0.0, le=1.0)] = 0.6
    mild_concentration: Annotated[float, Field(ge=0.0, le=1.0)] = 0.4
    specific_advice_concentration: Annotated[float, Field(ge=0.0, le=1.0)] = 0.7
    dominant_perspective_share: Annotated[float, Field(ge=0.0, le=1.0)] = 0.4
    missing_perspective_share: Annotated[float, Field(ge=0.0, le=1.0)] = 0.1
    reference_perspectives: list[str] = Field(
        default_factory=lambda: [
            "liberal",
            "conservative",
            "centrist",
            "neutral",
            "progressive",
        ]
    )
    perspective_keywords: list[str] = Field(
        default_factory=lambda: ["conservative", "liberal", "progressive"]
    )

    @model_validator(mode="after")
    def validate_weights(self) -> "DiversityConfig":
        """Ensure dimension weights form a convex combination."""
        if any(weight < 0.0 for weight in self.dimension_weights.values()):
            msg = "Dimension weights must be non-negative"
            raise ValueError(msg)
        total = sum(self.dimension_weights.values())
        if total > 1.0 + WEIGHT_SUM_TOLERANCE:
            msg = f"Dimension weights cannot sum above 1.0 (got {total:.4f})"
            raise ValueError(msg)
        return self

    @model_validator(mode="after")
    def validate_severity_order(self) -> "DiversityConfig":
        """Ensure severity thresholds are strictly ordered."""
        if not (
            self.mild_concentration
            < self.moderate_concentration
            < self.severe_concentration
        ):
            msg = "Concentration thresholds must satisfy mild < moderate < severe"
            raise ValueError(msg)
        return self
