"""
Personalized progression orchestrator.

Combines the recency-weighted baseline, the adaptive trend increment and the
personalization factors into one PersonalizedProgressionConfig per exercise.

Every invocation is a pure function of its ProgressionContext: no state is
shared between calls, so exercises may be evaluated in any order or in
parallel.
"""

import dataclasses
import logging
from collections.abc import Iterable, Sequence
from datetime import datetime

from .baseline import exponential_decay_baseline, session_max_weights
from .config import (
    COMPOSITE_MAX,
    COMPOSITE_MIN,
    CONFIDENCE_HIGH_SESSIONS,
    CONFIDENCE_HIGH_WEEKS,
    CONFIDENCE_MEDIUM_SESSIONS,
    DEFAULT_INCREMENTS,
    NEUTRAL_MULTIPLIER,
)
from .factors import FACTOR_RULES, FactorRule, evaluate_factors
from .models import (
    Confidence,
    ExperienceLevel,
    Factor,
    PersonalizedProgressionConfig,
    ProgressionContext,
    WeightUnit,
)
from .trend import adaptive_increment

logger = logging.getLogger(__name__)


def default_increment(experience_level: ExperienceLevel, weight_unit: WeightUnit) -> float:
    """
    Fixed per-session load increment for a lifter's level and unit.

    Beginners and pound-based units step in coarser increments.
    """
    return DEFAULT_INCREMENTS[weight_unit][experience_level]


def confidence_for(recent_sessions: int, weekly_points: int) -> Confidence:
    """
    Confidence tier from the amount of supporting history.

    Args:
        recent_sessions: Recent sessions with a logged working weight
        weekly_points: Weeks of aggregated performance

    Returns:
        LOW without weekly history or with fewer than
        CONFIDENCE_MEDIUM_SESSIONS sessions; HIGH with
        CONFIDENCE_HIGH_SESSIONS sessions and CONFIDENCE_HIGH_WEEKS weeks;
        MEDIUM otherwise
    """
    if weekly_points == 0 or recent_sessions < CONFIDENCE_MEDIUM_SESSIONS:
        return Confidence.LOW
    if recent_sessions >= CONFIDENCE_HIGH_SESSIONS and weekly_points >= CONFIDENCE_HIGH_WEEKS:
        return Confidence.HIGH
    return Confidence.MEDIUM


def blend_increment(
    confidence: Confidence,
    default: float,
    adaptive: float,
    is_adaptive: bool,
) -> float:
    """
    Interpolate between the default and adaptive increments.

    increment = default * (1 - w) + adaptive * w, w = confidence.adaptive_weight

    An untrusted trend (is_adaptive False) always yields the default.
    """
    if not is_adaptive:
        return default
    w = confidence.adaptive_weight
    return default * (1 - w) + adaptive * w


def composite_multiplier(factors: Iterable[Factor]) -> float:
    """Product of all factor multipliers, clamped to [COMPOSITE_MIN, COMPOSITE_MAX]."""
    product = NEUTRAL_MULTIPLIER
    for f in factors:
        product *= f.multiplier
    return max(COMPOSITE_MIN, min(COMPOSITE_MAX, product))


def calculate_personalized_progression(
    ctx: ProgressionContext,
    rules: Sequence[FactorRule] = FACTOR_RULES,
) -> PersonalizedProgressionConfig:
    """
    Compute the progression recommendation for one exercise.

    Steps:
    1. Baseline from recent session max weights (0 without sets)
    2. Default increment for experience level and unit
    3. Adaptive increment from the weekly trend
    4. Confidence from the amount of history
    5. Increment blended by confidence
    6. Composite multiplier from every factor, clamped
    7. Only non-neutral factors are reported

    With no weekly performance and no recent sets at all, the result is
    neutral: composite 1.0, no factors, low confidence.

    Args:
        ctx: Inputs for one exercise
        rules: Factor rules to apply

    Returns:
        PersonalizedProgressionConfig
    """
    if ctx.now is None:
        ctx = dataclasses.replace(ctx, now=datetime.now())

    weekly = ctx.analysis.weekly_performance
    maxima = session_max_weights(ctx.recent_session_sets)
    baseline = exponential_decay_baseline(maxima)
    base_increment = default_increment(ctx.experience_level, ctx.weight_unit)

    has_sets = any(len(sets) > 0 for sets in ctx.recent_session_sets)
    if not weekly and not has_sets:
        logger.debug("%s: no history, returning neutral progression", ctx.exercise_id)
        return PersonalizedProgressionConfig(
            baseline=baseline,
            increment=base_increment,
            composite_multiplier=NEUTRAL_MULTIPLIER,
            factors=(),
            confidence=Confidence.LOW,
        )

    trend = adaptive_increment(weekly, base_increment)
    confidence = confidence_for(len(maxima), len(weekly))
    increment = blend_increment(confidence, base_increment, trend.increment, trend.is_adaptive)

    factors = evaluate_factors(ctx, rules)
    composite = composite_multiplier(factors)

    logger.debug(
        "%s: baseline=%.2f increment=%.2f composite=%.3f confidence=%s",
        ctx.exercise_id,
        baseline,
        increment,
        composite,
        confidence,
    )
    return PersonalizedProgressionConfig(
        baseline=baseline,
        increment=increment,
        composite_multiplier=composite,
        factors=tuple(f for f in factors if f.is_active),
        confidence=confidence,
    )


def calculate_progressions(
    contexts: Iterable[ProgressionContext],
) -> dict[str, PersonalizedProgressionConfig]:
    """Progression for several exercises, keyed by exercise id."""
    return {ctx.exercise_id: calculate_personalized_progression(ctx) for ctx in contexts}
