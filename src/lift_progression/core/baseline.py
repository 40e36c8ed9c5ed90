"""
Recency-weighted baseline estimation.

Summarises a noisy run of per-session maxima into one working-weight
estimate that favours recent sessions without discarding older ones.
"""

import math
from collections.abc import Callable, Sequence
from typing import TypeVar

from .config import (
    BASELINE_DECAY,
    OUTLIER_MIN_ITEMS,
    OUTLIER_STDDEV_THRESHOLD,
    RECENT_SESSION_LIMIT,
)
from .models import LoggedSet

T = TypeVar("T")


def exponential_decay_baseline(
    values: Sequence[float],
    decay: float = BASELINE_DECAY,
) -> float:
    """
    Exponentially weighted mean of observations, most recent first.

    baseline = sum(decay^i * x_i) / sum(decay^i)

    Args:
        values: Observations ordered most recent first (e.g. session max weights)
        decay: Decay constant in (0, 1); smaller values favour recent data more

    Returns:
        Weighted mean, 0.0 for an empty sequence
    """
    if not 0 < decay < 1:
        raise ValueError("decay must be in (0, 1)")
    if not values:
        return 0.0
    first = values[0]
    if all(v == first for v in values):
        return float(first)

    weighted_sum = 0.0
    weight_sum = 0.0
    for i, value in enumerate(values):
        w = decay ** i
        weighted_sum += value * w
        weight_sum += w
    return weighted_sum / weight_sum


def filter_outliers(
    items: Sequence[T],
    key: Callable[[T], float],
    threshold: float = OUTLIER_STDDEV_THRESHOLD,
) -> list[T]:
    """
    Drop items whose key lies more than threshold standard deviations from the mean.

    Sequences shorter than OUTLIER_MIN_ITEMS, or with no spread at all, are
    returned unchanged.
    """
    if len(items) < OUTLIER_MIN_ITEMS:
        return list(items)

    values = [key(item) for item in items]
    mean = sum(values) / len(values)
    std = math.sqrt(sum((v - mean) ** 2 for v in values) / len(values))
    if std == 0:
        return list(items)

    return [item for item, v in zip(items, values) if abs(v - mean) <= threshold * std]


def session_max_weights(
    recent_session_sets: Sequence[Sequence[LoggedSet]],
    limit: int = RECENT_SESSION_LIMIT,
) -> list[float]:
    """
    Outlier-filtered max weight of each recent session, most recent first.

    Sessions with no loaded sets (max of 0) are skipped.

    Args:
        recent_session_sets: Sets grouped per session, most recent session first
        limit: Number of sessions to consider

    Returns:
        List of session max weights
    """
    maxima: list[float] = []
    for sets in recent_session_sets[:limit]:
        kept = filter_outliers(sets, lambda s: s.weight)
        top = max((s.weight for s in kept), default=0.0)
        if top > 0:
            maxima.append(top)
    return maxima
