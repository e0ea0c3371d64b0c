"""Content balancing configuration schema."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, model_validator


# fresh + familiar + discovery may overlap slightly
MAX_PRIMARY_QUOTA_SUM = 1.10


class ContentQuotas(BaseModel):
    """Target feed proportions per content category.

    Trending and diverse quotas may overlap the primary categories, so only
    fresh + familiar + discovery is bounded.

    Attributes:
        fresh: Share of fresh/recent content.
        familiar: Share of familiar/preferred content.
        discovery: Share of discovery/new content.
        trending: Share of trending content.
        diverse: Share of content unlike the user's typical consumption.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    fresh: float = 0.3
    familiar: float = 0.5
    discovery: float = 0.2
    trending: float = 0.15
    diverse: float = 0.25

    @model_validator(mode="after")
    def validate_quotas(self) -> "ContentQuotas":
        """Reject negative quotas and primary quotas above 110%."""
        values = (
            self.fresh,
            self.familiar,
            self.discovery,
            self.trending,
            self.diverse,
        )
        if any(value < 0.0 for value in values):
            msg = "Content quotas must be non-negative"
            raise ValueError(msg)
        primary = self.fresh + self.familiar + self.discovery
        if primary > MAX_PRIMARY_QUOTA_SUM + 1e-9:
            msg = (
                "Content quotas cannot exceed 110% "
                f"(fresh: {self.fresh}, familiar: {self.familiar}, "
                f"discovery: {self.discovery})"
            )
            raise ValueError(msg)
        return self


class FreshnessBalancingConfig(BaseModel):
    """Freshness re-balancing configuration.

    Attributes:
        freshness_weight: Score multiplier weight for freshness.
        minimum_fresh_ratio: Share of items placed in the fresh head.
        maximum_stale_ratio: Share of items placed in the stale tail.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    freshness_weight: Annotated[float, Field(ge=0.0, le=5.0)] = 0.3
    minimum_fresh_ratio: Annotated[float, Field(ge=0.0, le=1.0)] = 0.2
    maximum_stale_ratio: Annotated[float, Field(ge=0.0, le=1.0)] = 0.3


class CategoryThresholds(BaseModel):
    """Membership thresholds for content categorization."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    fresh: Annotated[float, Field(ge=0.0, le=1.0)] = 0.7
    familiar: Annotated[float, Field(ge=0.0, le=1.0)] = 0.6
    discovery: Annotated[float, Field(ge=0.0, le=1.0)] = 0.6
    trending: Annotated[float, Field(ge=0.0, le=1.0)] = 0.7
    diverse: Annotated[float, Field(ge=0.0, le=1.0)] = 0.6
    low_quality: Annotated[float, Field(ge=0.0)] = 0.3


class ContentBalancingConfig(BaseModel):
    """Content balancing configuration.

    Attributes:
        default_quotas: Quotas used when no personalized override applies.
        enable_personalization: Whether user quota overrides are honored.
        minimum_source_diversity: Minimum distinct authors in a balanced feed.
        enable_freshness_balancing: Whether freshness re-balancing runs.
        quality_threshold: Items scoring below this are dropped.
        replacement_score_ratio: Minimum replacement/replaced score ratio.
        trending_recency_decay: Hourly decay of the trending recency bonus.
        category_thresholds: Membership thresholds per category.
        freshness_balancing: Freshness re-balancing configuration.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    default_quotas: ContentQuotas = Field(default_factory=ContentQuotas)
    enable_personalization: bool = True
    minimum_source_diversity: Annotated[int, Field(ge=0)] = 3
    enable_freshness_balancing: bool = True
    quality_threshold: Annotated[float, Field(ge=0.0)] = 0.3
    replacement_score_ratio: Annotated[float, Field(ge=0.0, le=1.0)] = 0.8
    trending_recency_decay: Annotated[float, Field(gt=0.0, le=5.0)] = 0.1
    category_thresholds: CategoryThresholds = Field(default_factory=CategoryThresholds)
    freshness_balancing: FreshnessBalancingConfig = Field(
        default_factory=FreshnessBalancingConfig
    )
