"""Echo chamber risk assessment and prevention."""

from src.echo_chamber.assessor import (
    EchoChamberRiskAssessor,
    calculate_echo_chamber_risk_pure,
)
from src.echo_chamber.models import (
    BreakoutRecommendation,
    BreakoutRecommendationType,
    ConcentrationMetrics,
    EchoChamberRiskAssessment,
    MissingPerspective,
)


__all__ = [
    "BreakoutRecommendation",
    "BreakoutRecommendationType",
    "ConcentrationMetrics",
    "EchoChamberRiskAssessment",
    "EchoChamberRiskAssessor",
    "MissingPerspective",
    "calculate_echo_chamber_risk_pure",
]
