"""Echo chamber prevention configuration schema."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.config.schemas.base import EchoChamberRiskFactor, EchoChamberRiskLevel


def default_risk_thresholds() -> dict[EchoChamberRiskLevel, float]:
    """Return the lower score bound for each elevated risk level."""
    return {
        EchoChamberRiskLevel.MODERATE: 0.3,
        EchoChamberRiskLevel.HIGH: 0.6,
        EchoChamberRiskLevel.CRITICAL: 0.8,
    }


def default_boost_multipliers() -> dict[EchoChamberRiskLevel, float]:
    """Return the diversity boost multiplier per risk level."""
    return {
        EchoChamberRiskLevel.LOW: 0.1,
        EchoChamberRiskLevel.MODERATE: 0.25,
        EchoChamberRiskLevel.HIGH: 0.5,
        EchoChamberRiskLevel.CRITICAL: 0.8,
    }


def default_risk_factor_weights() -> dict[EchoChamberRiskFactor, float]:
    """Return the weight of each risk factor in the overall risk score."""
    return {
        EchoChamberRiskFactor.TOPIC_CONCENTRATION: 0.25,
        EchoChamberRiskFactor.SOURCE_CONCENTRATION: 0.20,
        EchoChamberRiskFactor.PERSPECTIVE_BIAS: 0.25,
        EchoChamberRiskFactor.TEMPORAL_CLUSTERING: 0.10,
        EchoChamberRiskFactor.ENGAGEMENT_SELECTIVITY: 0.10,
        EchoChamberRiskFactor.SOCIAL_HOMOGENEITY: 0.10,
    }


class EchoChamberPreventionConfig(BaseModel):
    """Echo chamber risk assessment and prevention configuration.

    Attributes:
        minimum_history_size: History entries required for a risk assessment.
        risk_thresholds: Lower score bound per elevated risk level.
        diversity_boost_multipliers: Boost multiplier per risk level.
        risk_factor_weights: Weight of each factor in the overall risk.
        dimension_risk_threshold: Risk factor above which dimension boosts apply.
        dimension_score_threshold: Dimension score above which boosts apply.
        dimension_boost_weight: Scale of the per-dimension boost.
        critical_boost: Flat boost applied at CRITICAL risk.
        recommended_perspective_exposure: Target share per reference perspective.
        perspective_gap_threshold: Minimum exposure gap reported as missing.
        engagement_perspectives: Reference set for missing-perspective detection.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    minimum_history_size: Annotated[int, Field(ge=0)] = 10
    risk_thresholds: dict[EchoChamberRiskLevel, float] = Field(
        default_factory=default_risk_thresholds
    )
    diversity_boost_multipliers: dict[EchoChamberRiskLevel, float] = Field(
        default_factory=default_boost_multipliers
    )
    risk_factor_weights: dict[EchoChamberRiskFactor, float] = Field(
        default_factory=default_risk_factor_weights
    )
    dimension_risk_threshold: Annotated[float, Field(ge=0.0, le=1.0)] = 0.6
    dimension_score_threshold: Annotated[float, Field(ge=0.0, le=1.0)] = 0.7
    dimension_boost_weight: Annotated[float, Field(ge=0.0, le=5.0)] = 0.3
    critical_boost: Annotated[float, Field(ge=0.0, le=5.0)] = 0.2
    recommended_perspective_exposure: Annotated[float, Field(ge=0.0, le=1.0)] = 0.15
    perspective_gap_threshold: Annotated[float, Field(ge=0.0, le=1.0)] = 0.05
    engagement_perspectives: list[str] = Field(
        default_factory=lambda: [
            "liberal",
            "conservative",
            "centrist",
            "progressive",
            "libertarian",
        ]
    )

    @model_validator(mode="after")
    def validate_thresholds(self) -> "EchoChamberPreventionConfig":
        """Ensure risk thresholds are ascending so level assignment is monotonic."""
        ordered = [
            self.risk_thresholds.get(EchoChamberRiskLevel.MODERATE, 0.3),
            self.risk_thresholds.get(EchoChamberRiskLevel.HIGH, 0.6),
            self.risk_thresholds.get(EchoChamberRiskLevel.CRITICAL, 0.8),
        ]
        if ordered != sorted(ordered):
            msg = "Risk thresholds must be ascending: MODERATE <= HIGH <= CRITICAL"
            raise ValueError(msg)
        if any(m < 0.0 for m in self.diversity_boost_multipliers.values()):
            msg = "Diversity boost multipliers must be non-negative"
            raise ValueError(msg)
        return self
