"""
Personalization factors.

Each factor turns one slice of the lifter's history into an independent
multiplier around neutral 1.0.  Factors never consult one another; the
orchestrator multiplies them together.

FACTOR_RULES adapts every calculator to the uniform signature
(ProgressionContext) -> Factor so new rules can be appended without
touching the orchestrator.
"""

import logging
from collections.abc import Callable, Iterable, Sequence
from datetime import datetime, timedelta

from .config import (
    BODY_WEIGHT_MULTIPLIERS,
    BODY_WEIGHT_STABLE_PERCENT,
    BODY_WEIGHT_WINDOW_DAYS,
    CONSISTENCY_FLOOR,
    CONSISTENCY_TIERS,
    CONSISTENCY_WINDOW_DAYS,
    MOOD_FLOOR,
    MOOD_SESSION_LIMIT,
    MOOD_TIERS,
    NEUTRAL_MULTIPLIER,
    RECENT_SESSION_LIMIT,
    RECOVERY_OPTIMAL_MAX_DAYS,
    RECOVERY_OPTIMAL_MIN_DAYS,
    RECOVERY_OPTIMAL_MULTIPLIER,
    RECOVERY_SHORT_DAYS,
    RECOVERY_SHORT_MULTIPLIER,
    SUCCESS_RATE_FLOOR,
    SUCCESS_RATE_TIERS,
    WARMUP_WEIGHT_FRACTION,
)
from .exercises import ExerciseDefinition, find_exercise
from .models import (
    BodyWeightTrend,
    Factor,
    LoggedSet,
    ProgressionContext,
    WeightEntry,
    WorkoutGoal,
    WorkoutSession,
)

logger = logging.getLogger(__name__)

SUCCESS_RATE = "Success Rate"
CONSISTENCY = "Workout Consistency"
RECOVERY = "Recovery"
BODY_WEIGHT = "Body Weight Trend"
MOOD = "Mood Trend"

FactorRule = Callable[[ProgressionContext], Factor]

_SECONDS_PER_DAY = 86400.0


def tiered_multiplier(
    value: float,
    tiers: Sequence[tuple[float, float]],
    floor: float,
) -> float:
    """
    Multiplier of the first tier whose threshold value meets, else floor.

    Args:
        value: Observed metric
        tiers: (threshold, multiplier) pairs, highest threshold first
        floor: Multiplier below the lowest threshold

    Returns:
        Multiplier
    """
    for threshold, multiplier in tiers:
        if value >= threshold:
            return multiplier
    return floor


def _most_recent_first(sessions: Iterable[WorkoutSession]) -> list[WorkoutSession]:
    return sorted(sessions, key=lambda s: s.started_at, reverse=True)


# =============================================================================
# SUCCESS RATE
# =============================================================================


def working_sets(sets: Sequence[LoggedSet]) -> list[LoggedSet]:
    """Sets at or above WARMUP_WEIGHT_FRACTION of the session's own max weight."""
    if not sets:
        return []
    top = max(s.weight for s in sets)
    return [s for s in sets if s.weight >= top * WARMUP_WEIGHT_FRACTION]


def success_rate_factor(
    recent_session_sets: Sequence[Sequence[LoggedSet]],
    target_reps: int,
    limit: int = RECENT_SESSION_LIMIT,
) -> Factor:
    """
    How often the lifter hits the rep target on working sets.

    Warm-ups are discarded per session before judging, so a light first set
    does not count against (or for) the lifter.

    Args:
        recent_session_sets: Sets grouped per session, most recent first
        target_reps: Rep count a set must reach to succeed
        limit: Number of sessions to consider

    Returns:
        Factor with raw_metric = success rate in [0, 1]
    """
    considered = [s for sets in recent_session_sets[:limit] for s in working_sets(sets)]
    if not considered:
        return Factor(SUCCESS_RATE, NEUTRAL_MULTIPLIER, 0.0)

    rate = sum(1 for s in considered if s.reps >= target_reps) / len(considered)
    multiplier = tiered_multiplier(rate, SUCCESS_RATE_TIERS, SUCCESS_RATE_FLOOR)
    verdict = "pushing harder" if multiplier > 1 else "easing off"
    return Factor(
        SUCCESS_RATE,
        multiplier,
        rate,
        f"Hit target reps {rate * 100:.0f}% of the time → {verdict}",
    )


# =============================================================================
# CONSISTENCY
# =============================================================================


def consistency_factor(
    sessions: Iterable[WorkoutSession],
    weekly_goal: int | None,
    now: datetime,
) -> Factor:
    """
    Completed sessions over the trailing window versus the weekly goal.

    adherence = completed_in_window / (weekly_goal * window_weeks)

    Sessions never completed, or completed before the window, do not count.
    """
    if not weekly_goal or weekly_goal <= 0:
        return Factor(CONSISTENCY, NEUTRAL_MULTIPLIER, 0.0)

    cutoff = now - timedelta(days=CONSISTENCY_WINDOW_DAYS)
    completed = sum(
        1 for s in sessions if s.completed_at is not None and cutoff <= s.completed_at <= now
    )
    expected = weekly_goal * CONSISTENCY_WINDOW_DAYS / 7
    adherence = completed / expected

    multiplier = tiered_multiplier(adherence, CONSISTENCY_TIERS, CONSISTENCY_FLOOR)
    verdict = "consistent training" if multiplier > 1 else "reduced expectations"
    return Factor(
        CONSISTENCY,
        multiplier,
        adherence,
        f"{adherence * 100:.0f}% of target sessions completed → {verdict}",
    )


# =============================================================================
# RECOVERY
# =============================================================================


def _trains_overlapping(
    session: WorkoutSession,
    target: ExerciseDefinition,
    custom_exercises: Sequence[ExerciseDefinition],
) -> bool:
    for ex in session.exercises:
        other = find_exercise(ex.exercise_id, custom_exercises)
        if other is not None and target.shares_muscles_with(other):
            return True
    return False


def recovery_factor(
    exercise_id: str,
    sessions: Iterable[WorkoutSession],
    now: datetime,
    custom_exercises: Sequence[ExerciseDefinition] = (),
) -> Factor:
    """
    Days since any muscle group of the exercise was last trained.

    Looks for the most recent completed session containing a strength
    exercise that shares a muscle group with exercise_id (the exercise
    itself included).  Cardio and unknown exercises are always neutral.

    Returns:
        Factor with raw_metric = days since last trained, or None
    """
    target = find_exercise(exercise_id, custom_exercises)
    if target is None or not target.is_strength:
        return Factor(RECOVERY, NEUTRAL_MULTIPLIER, None)

    for session in _most_recent_first(s for s in sessions if s.is_completed):
        if session.started_at > now:
            continue
        if not _trains_overlapping(session, target, custom_exercises):
            continue

        days = (now - session.started_at).total_seconds() / _SECONDS_PER_DAY
        if days < RECOVERY_SHORT_DAYS:
            multiplier = RECOVERY_SHORT_MULTIPLIER
        elif RECOVERY_OPTIMAL_MIN_DAYS <= days <= RECOVERY_OPTIMAL_MAX_DAYS:
            multiplier = RECOVERY_OPTIMAL_MULTIPLIER
        else:
            multiplier = NEUTRAL_MULTIPLIER
        verdict = "well rested" if multiplier > 1 else "tight recovery"
        return Factor(
            RECOVERY,
            multiplier,
            days,
            f"{days:.1f} days since muscle group trained → {verdict}",
        )

    return Factor(RECOVERY, NEUTRAL_MULTIPLIER, None)


# =============================================================================
# BODY WEIGHT
# =============================================================================


def body_weight_trend(entries: Sequence[WeightEntry]) -> BodyWeightTrend:
    """
    Classify chronologically ordered entries as gaining, losing or stable.

    Compares the mean of the earlier half with the mean of the later half
    (in kg, so mixed units compare); a change within
    BODY_WEIGHT_STABLE_PERCENT is stable.
    """
    if len(entries) < 2:
        return "unknown"
    mid = len(entries) // 2
    first = [e.weight_kg() for e in entries[:mid]]
    second = [e.weight_kg() for e in entries[mid:]]
    avg_first = sum(first) / len(first)
    avg_second = sum(second) / len(second)
    if avg_first == 0:
        return "unknown"

    change_percent = (avg_second - avg_first) / avg_first * 100
    if change_percent > BODY_WEIGHT_STABLE_PERCENT:
        return "gaining"
    if change_percent < -BODY_WEIGHT_STABLE_PERCENT:
        return "losing"
    return "stable"


def body_weight_factor(
    entries: Iterable[WeightEntry],
    goal: WorkoutGoal,
    now: datetime,
) -> Factor:
    """
    Body-weight trend over the trailing window, judged against the goal.

    Entries older than BODY_WEIGHT_WINDOW_DAYS are excluded entirely.

    Returns:
        Factor with raw_metric = trend label
    """
    cutoff = now - timedelta(days=BODY_WEIGHT_WINDOW_DAYS)
    recent = sorted((e for e in entries if cutoff <= e.date <= now), key=lambda e: e.date)
    trend = body_weight_trend(recent)
    if trend == "unknown":
        return Factor(BODY_WEIGHT, NEUTRAL_MULTIPLIER, trend)

    multiplier = BODY_WEIGHT_MULTIPLIERS.get((goal, trend), NEUTRAL_MULTIPLIER)
    return Factor(
        BODY_WEIGHT,
        multiplier,
        trend,
        f"Weight trend: {trend} while goal is {goal}",
    )


# =============================================================================
# MOOD
# =============================================================================


def mood_factor(
    sessions: Iterable[WorkoutSession],
    now: datetime,
    limit: int = MOOD_SESSION_LIMIT,
) -> Factor:
    """
    Average self-rated mood over the most recent rated sessions.

    Only completed sessions started by `now` and carrying a mood count, and
    only the latest `limit` of them.

    Returns:
        Factor with raw_metric = average mood, or None
    """
    rated = [
        s
        for s in _most_recent_first(sessions)
        if s.is_completed and s.mood is not None and s.started_at <= now
    ]
    rated = rated[:limit]
    if not rated:
        return Factor(MOOD, NEUTRAL_MULTIPLIER, None)

    avg = sum(s.mood for s in rated) / len(rated)  # type: ignore[misc]
    multiplier = tiered_multiplier(avg, MOOD_TIERS, MOOD_FLOOR)
    verdict = "feeling strong" if multiplier > 1 else "lower energy"
    return Factor(MOOD, multiplier, avg, f"Average mood: {avg:.1f}/5 → {verdict}")


# =============================================================================
# UNIFORM RULES
# =============================================================================

FACTOR_RULES: tuple[FactorRule, ...] = (
    lambda ctx: success_rate_factor(ctx.recent_session_sets, ctx.target_reps),
    lambda ctx: consistency_factor(ctx.all_sessions, ctx.weekly_workout_goal, ctx.reference_time()),
    lambda ctx: recovery_factor(
        ctx.exercise_id, ctx.all_sessions, ctx.reference_time(), ctx.custom_exercises
    ),
    lambda ctx: body_weight_factor(ctx.weight_entries, ctx.workout_goal, ctx.reference_time()),
    lambda ctx: mood_factor(ctx.all_sessions, ctx.reference_time()),
)


def evaluate_factors(
    ctx: ProgressionContext,
    rules: Sequence[FactorRule] = FACTOR_RULES,
) -> list[Factor]:
    """Run every rule against ctx; each rule sees the same, unshared inputs."""
    factors = [rule(ctx) for rule in rules]
    for f in factors:
        logger.debug("%s: x%.2f (metric=%r)", f.name, f.multiplier, f.raw_metric)
    return factors
