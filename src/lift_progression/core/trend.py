"""
Load-trend detection from weekly performance.

Fits a least-squares line of weekly max weight against time and only trusts
its slope when the fit explains enough of the variance.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from .config import (
    TREND_MAX_INCREMENT_RATIO,
    TREND_MIN_INCREMENT_RATIO,
    TREND_MIN_POINTS,
    TREND_R_SQUARED_MIN,
)
from .models import WeeklyPerformance

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdaptiveIncrement:
    """Per-week load increment and whether it came from a trusted trend."""

    increment: float
    is_adaptive: bool
    slope: float = 0.0
    r_squared: float = 0.0


def linear_fit(points: Sequence[tuple[float, float]]) -> tuple[float, float, float] | None:
    """
    Ordinary least-squares fit y = a + b*x.

    R^2 = 1 - SS_res / SS_tot

    Args:
        points: (x, y) pairs

    Returns:
        (intercept, slope, r_squared), or None when the fit is degenerate
        (fewer than 2 points, no spread in x, or no variance in y to explain)
    """
    n = len(points)
    if n < 2:
        return None

    mean_x = sum(x for x, _ in points) / n
    mean_y = sum(y for _, y in points) / n
    sxx = sum((x - mean_x) ** 2 for x, _ in points)
    syy = sum((y - mean_y) ** 2 for _, y in points)
    if sxx == 0 or syy == 0:
        return None

    sxy = sum((x - mean_x) * (y - mean_y) for x, y in points)
    slope = sxy / sxx
    intercept = mean_y - slope * mean_x
    ss_res = sum((y - (intercept + slope * x)) ** 2 for x, y in points)
    return intercept, slope, 1.0 - ss_res / syy


def adaptive_increment(
    weekly_performance: Sequence[WeeklyPerformance],
    default_increment: float,
) -> AdaptiveIncrement:
    """
    Per-week load increment derived from the lifter's own trend.

    Falls back to default_increment when there are fewer than
    TREND_MIN_POINTS weeks, when max weight never changes, when the fit is
    noisy (R^2 below TREND_R_SQUARED_MIN) or when the slope is too flat to
    matter.  A trusted slope keeps its sign (negative suggests a deload) and
    is clamped to TREND_MAX_INCREMENT_RATIO times the default in magnitude.

    Args:
        weekly_performance: Weekly aggregates, any order
        default_increment: Fixed increment for the lifter's level and unit

    Returns:
        AdaptiveIncrement
    """
    fallback = AdaptiveIncrement(increment=default_increment, is_adaptive=False)
    if len(weekly_performance) < TREND_MIN_POINTS:
        return fallback

    # x grows toward the present
    oldest = max(w.weeks_ago for w in weekly_performance)
    points = [(float(oldest - w.weeks_ago), w.max_weight) for w in weekly_performance]

    fit = linear_fit(points)
    if fit is None:
        logger.debug("Trend fit degenerate over %d weeks; using default", len(points))
        return fallback

    _, slope, r_squared = fit
    if r_squared < TREND_R_SQUARED_MIN:
        logger.debug("Trend R^2 %.2f below %.2f; using default", r_squared, TREND_R_SQUARED_MIN)
        return AdaptiveIncrement(default_increment, False, slope, r_squared)

    magnitude = abs(slope)
    if magnitude < default_increment * TREND_MIN_INCREMENT_RATIO:
        return AdaptiveIncrement(default_increment, False, slope, r_squared)

    clamped = min(magnitude, default_increment * TREND_MAX_INCREMENT_RATIO)
    increment = clamped if slope > 0 else -clamped
    return AdaptiveIncrement(increment, True, slope, r_squared)
