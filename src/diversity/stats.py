"""Statistical helpers shared by the analyzers.

All helpers operate on plain iterables of hashable labels or numbers and
return 0.0 for empty input.
"""

import math
from collections import Counter
from collections.abc import Hashable, Iterable, Sequence
from typing import TypeVar


K = TypeVar("K", bound=Hashable)


def normalized_distribution(values: Iterable[K]) -> dict[K, float]:
    """Compute the share of each distinct value.

    Args:
        values: Labels to count.

    Returns:
        Mapping of value to share. Shares sum to 1.0, or the map is empty.
    """
    counts = Counter(values)
    total = sum(counts.values())
    if total == 0:
        return {}
    return {value: count / total for value, count in counts.items()}


def herfindahl_index(values: Iterable[Hashable]) -> float:
    """Herfindahl-Hirschman index (sum of squared shares).

    Args:
        values: Labels to measure.

    Returns:
        Concentration in [0, 1]; 1.0 means a single value.
    """
    return sum(share * share for share in normalized_distribution(values).values())


def normalized_shannon_entropy(values: Iterable[Hashable]) -> float:
    """Shannon entropy normalized by ln(distinct count).

    Args:
        values: Labels to measure.

    Returns:
        Evenness in [0, 1]. Zero when there is at most one distinct value.
    """
    shares = normalized_distribution(values)
    if len(shares) <= 1:
        return 0.0
    entropy = -sum(p * math.log(p) for p in shares.values() if p > 0)
    return min(max(entropy / math.log(len(shares)), 0.0), 1.0)


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean, 0.0 for an empty sequence."""
    if not values:
        return 0.0
    return sum(values) / len(values)


def variance(values: Sequence[float]) -> float:
    """Population variance, 0.0 for an empty sequence."""
    if not values:
        return 0.0
    avg = mean(values)
    return sum((v - avg) ** 2 for v in values) / len(values)


def coefficient_of_variation(values: Sequence[float]) -> float:
    """Standard deviation divided by the mean.

    Returns:
        0.0 for empty input or a zero mean.
    """
    avg = mean(values)
    if avg == 0.0:
        return 0.0
    return math.sqrt(variance(values)) / avg


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    """Clip value into [low, high]."""
    return min(max(value, low), high)
