"""Root configuration for the diversification pipeline."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from src.config.schemas.balancing import ContentBalancingConfig
from src.config.schemas.diversity import DiversityConfig
from src.config.schemas.echo_chamber import EchoChamberPreventionConfig
from src.config.schemas.freshness import FreshnessConfig


class DiversificationConfig(BaseModel):
    """Immutable per-call configuration for feed diversification.

    Attributes:
        version: Schema version.
        enable_diversity_boosts: Apply the diversity boost to final scores.
        enable_freshness_boosts: Apply the freshness boost to final scores.
        enable_echo_chamber_prevention: Run the echo chamber adjustment stage.
        enable_content_balancing: Run the content balancing stage.
        enable_metrics_logging: Send a diagnostic record to the metrics sink.
        diversity_boost_multiplier: Maximum diversity boost (20%).
        freshness_boost_multiplier: Maximum freshness boost (30%).
        max_history_size: History entries requested from the history provider.
        low_diversity_threshold: Feed diversity below this triggers a recommendation.
        low_freshness_threshold: Feed freshness below this triggers a recommendation.
        min_feed_sources: Distinct sources expected in a large feed.
        source_check_min_feed_size: Feed size from which source count is checked.
        diversity: Diversity analyzer configuration.
        echo_chamber: Echo chamber prevention configuration.
        freshness: Freshness analyzer configuration.
        balancing: Content balancing configuration.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    version: Annotated[str, Field(pattern=r"^\d+\.\d+$")] = "1.0"
    enable_diversity_boosts: bool = True
    enable_freshness_boosts: bool = True
    enable_echo_chamber_prevention: bool = True
    enable_content_balancing: bool = True
    enable_metrics_logging: bool = True
    diversity_boost_multiplier: Annotated[float, Field(ge=0.0, le=5.0)] = 0.2
    freshness_boost_multiplier: Annotated[float, Field(ge=0.0, le=5.0)] = 0.3
    max_history_size: Annotated[int, Field(ge=0)] = 100
    low_diversity_threshold: Annotated[float, Field(ge=0.0, le=1.0)] = 0.4
    low_freshness_threshold: Annotated[float, Field(ge=0.0, le=1.0)] = 0.3
    min_feed_sources: Annotated[int, Field(ge=0)] = 5
    source_check_min_feed_size: Annotated[int, Field(ge=0)] = 10
    diversity: DiversityConfig = Field(default_factory=DiversityConfig)
    echo_chamber: EchoChamberPreventionConfig = Field(
        default_factory=EchoChamberPreventionConfig
    )
    freshness: FreshnessConfig = Field(default_factory=FreshnessConfig)
    balancing: ContentBalancingConfig = Field(default_factory=ContentBalancingConfig)
