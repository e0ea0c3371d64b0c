"""Score boost functions for diversity and freshness."""

import math


def diversity_boost(diversity_score: float, multiplier: float = 0.2) -> float:
    """Diversity multiplier that saturates for highly diverse items.

    Args:
        diversity_score: Overall diversity score in [0, 1].
        multiplier: Maximum boost scale.

    Returns:
        1 + d * multiplier * (1 - exp(-2d)).
    """
    return 1.0 + diversity_score * multiplier * (1.0 - math.exp(-2.0 * diversity_score))


def freshness_boost(freshness_score: float, multiplier: float = 0.3) -> float:
    """Freshness multiplier that favors very fresh items.

    Args:
        freshness_score: Freshness score in [0, 1].
        multiplier: Maximum boost scale.

    Returns:
        1 + f * multiplier * sqrt(f).
    """
    freshness_score = max(freshness_score, 0.0)
    return 1.0 + freshness_score * multiplier * math.sqrt(freshness_score)
