"""Constants for the echo chamber module."""

from src.config.schemas.base import DiversityDimension, EchoChamberRiskFactor


# Stage label recorded on score contributions
PREVENTION_STAGE: str = "echo_chamber"

# Concentration above which breakout advice is given
BREAKOUT_CONCENTRATION_THRESHOLD: float = 0.6

# Dominant perspective count at or below which opposing views are suggested
BREAKOUT_MAX_DOMINANT_PERSPECTIVES: int = 2

# Risk factor consulted for each diversity dimension
DIMENSION_RISK_FACTORS: dict[DiversityDimension, EchoChamberRiskFactor] = {
    DiversityDimension.TOPIC: EchoChamberRiskFactor.TOPIC_CONCENTRATION,
    DiversityDimension.SOURCE: EchoChamberRiskFactor.SOURCE_CONCENTRATION,
    DiversityDimension.PERSPECTIVE: EchoChamberRiskFactor.PERSPECTIVE_BIAS,
    DiversityDimension.RECENCY: EchoChamberRiskFactor.TEMPORAL_CLUSTERING,
}
DEFAULT_DIMENSION_RISK_FACTOR: EchoChamberRiskFactor = (
    EchoChamberRiskFactor.ENGAGEMENT_SELECTIVITY
)

# Example topics suggested for each perspective
PERSPECTIVE_SAMPLE_TOPICS: dict[str, list[str]] = {
    "liberal": ["social justice", "climate action", "progressive policies"],
    "conservative": ["traditional values", "free market", "constitutional rights"],
    "centrist": ["bipartisan solutions", "moderate policies", "pragmatic approaches"],
    "progressive": ["systemic reform", "economic equality", "social transformation"],
    "libertarian": ["individual liberty", "limited government", "free markets"],
}
DEFAULT_SAMPLE_TOPICS: list[str] = [
    "balanced perspectives",
    "diverse viewpoints",
    "multiple angles",
]
