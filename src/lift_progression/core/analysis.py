"""
Weekly performance analysis.

Groups an exercise's completed sessions into calendar-week aggregates,
detects plateau signals and classifies overall progress.  The output is the
ExerciseAnalysis consumed by the progression engine.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta

from .config import (
    ANALYSIS_MIN_SESSIONS,
    ANALYSIS_WINDOW_WEEKS,
    DECLINING_1RM_TREND_PERCENT,
    FAILED_REPS_BUFFER,
    FAILED_REPS_LOOKBACK_SESSIONS,
    PLATEAU_1RM_TOLERANCE,
    PLATEAU_1RM_TREND_PERCENT,
    PLATEAU_LOOKBACK_SESSIONS,
    PLATEAU_SESSIONS,
    PLATEAU_WEIGHT_TOLERANCE,
)
from .exercises import ExerciseDefinition, find_exercise
from .models import (
    ExerciseAnalysis,
    LoggedSet,
    PlateauSignals,
    ProgressStatus,
    WeeklyPerformance,
    WorkoutSession,
)


@dataclass(frozen=True)
class SessionSnapshot:
    """One completed session's sets for the analyzed exercise."""

    started_at: datetime
    sets: list[LoggedSet]

    @property
    def max_weight(self) -> float:
        return max(s.weight for s in self.sets)

    @property
    def avg_reps(self) -> float:
        return sum(s.reps for s in self.sets) / len(self.sets)

    @property
    def estimated_1rm(self) -> float:
        return epley_1rm(self.max_weight, round(self.avg_reps))


def epley_1rm(weight: float, reps: int) -> float:
    """
    Estimated one-rep max using the Epley formula.

    1RM = weight * (1 + reps / 30)

    Args:
        weight: Weight lifted
        reps: Reps completed

    Returns:
        Estimated 1RM; the weight itself for a single, 0 without load or reps
    """
    if weight <= 0 or reps <= 0:
        return 0.0
    if reps == 1:
        return float(weight)
    return weight * (1 + reps / 30)


def collect_recent_session_sets(
    exercise_id: str,
    sessions: Iterable[WorkoutSession],
    now: datetime,
    limit: int = 10,
) -> list[list[LoggedSet]]:
    """
    Sets of exercise_id grouped per completed session, most recent first.

    Sessions started after `now`, and sessions without a logged set for the
    exercise, are skipped.
    """
    completed = sorted(
        (s for s in sessions if s.is_completed and s.started_at <= now),
        key=lambda s: s.started_at,
        reverse=True,
    )
    grouped: list[list[LoggedSet]] = []
    for session in completed:
        sets = session.sets_for(exercise_id)
        if sets:
            grouped.append(sets)
        if len(grouped) == limit:
            break
    return grouped


def _percent_change(new: float, old: float) -> float:
    return (new - old) / old * 100 if old > 0 else 0.0


def _count_within(values: Sequence[float], tolerance: float) -> int:
    anchor = values[0]
    return sum(1 for v in values if abs(v - anchor) <= anchor * tolerance)


def detect_plateau_signals(
    snapshots: Sequence[SessionSnapshot],
    target_reps: int | None = None,
) -> PlateauSignals:
    """
    Stall indicators over the most recent sessions (most recent first).

    - same weight: PLATEAU_SESSIONS of the last PLATEAU_LOOKBACK_SESSIONS
      within PLATEAU_WEIGHT_TOLERANCE of the latest max weight
    - failed reps: 2+ of the last FAILED_REPS_LOOKBACK_SESSIONS averaging
      more than FAILED_REPS_BUFFER reps under target
    - stalled 1RM: as same weight, on estimated 1RM
    """
    same_weight = False
    stalled = False
    if len(snapshots) >= PLATEAU_SESSIONS:
        window = snapshots[:PLATEAU_LOOKBACK_SESSIONS]
        same_weight = (
            _count_within([s.max_weight for s in window], PLATEAU_WEIGHT_TOLERANCE)
            >= PLATEAU_SESSIONS
        )
        stalled = (
            _count_within([s.estimated_1rm for s in window], PLATEAU_1RM_TOLERANCE)
            >= PLATEAU_SESSIONS
        )

    failed = False
    if target_reps and len(snapshots) >= 2:
        misses = [
            s
            for s in snapshots[:FAILED_REPS_LOOKBACK_SESSIONS]
            if s.avg_reps < target_reps - FAILED_REPS_BUFFER
        ]
        failed = len(misses) >= 2

    return PlateauSignals(
        same_weight_sessions=same_weight,
        failed_rep_targets=failed,
        stalled_1rm=stalled,
    )


def classify_progress(
    signals: PlateauSignals,
    estimated_1rm_trend: float,
    session_count: int,
) -> ProgressStatus:
    """
    Overall progress status from plateau signals and the 1RM trend.

    A clearly falling 1RM is declining; any rise is improving; a flat or
    falling trend with enough stall signals is a plateau.  Otherwise the
    lifter gets the benefit of the doubt.
    """
    if session_count < ANALYSIS_MIN_SESSIONS:
        return "insufficient_data"
    if estimated_1rm_trend < DECLINING_1RM_TREND_PERCENT:
        return "declining"
    if estimated_1rm_trend > 0:
        return "improving"
    signal_count = signals.count()
    if signal_count >= 2:
        return "plateau"
    if signal_count == 1 and estimated_1rm_trend < PLATEAU_1RM_TREND_PERCENT:
        return "plateau"
    return "improving"


def weekly_performance(
    snapshots: Iterable[SessionSnapshot],
    now: datetime,
) -> list[WeeklyPerformance]:
    """Aggregate snapshots into weeks, most recent week first."""
    by_week: dict[int, list[SessionSnapshot]] = {}
    for snap in snapshots:
        weeks_ago = (now - snap.started_at).days // 7
        if 0 <= weeks_ago <= ANALYSIS_WINDOW_WEEKS:
            by_week.setdefault(weeks_ago, []).append(snap)

    weeks: list[WeeklyPerformance] = []
    for weeks_ago in sorted(by_week):
        all_sets = [s for snap in by_week[weeks_ago] for s in snap.sets]
        avg_reps = sum(s.reps for s in all_sets) / len(all_sets)
        max_weight = max(s.weight for s in all_sets)
        weeks.append(
            WeeklyPerformance(
                weeks_ago=weeks_ago,
                sessions=len(by_week[weeks_ago]),
                avg_weight=sum(s.weight for s in all_sets) / len(all_sets),
                avg_reps=avg_reps,
                max_weight=max_weight,
                total_sets=len(all_sets),
                estimated_1rm=epley_1rm(max_weight, round(avg_reps)),
            )
        )
    return weeks


def analyze_exercise(
    exercise_id: str,
    sessions: Iterable[WorkoutSession],
    now: datetime,
    target_reps: int | None = None,
    custom_exercises: Sequence[ExerciseDefinition] = (),
) -> ExerciseAnalysis:
    """
    Analyze the trailing ANALYSIS_WINDOW_WEEKS of one exercise.

    Args:
        exercise_id: Exercise to analyze
        sessions: Full session history (in-progress sessions are ignored)
        now: Reference instant; week 0 is the 7 days before it
        target_reps: Rep target used for the failed-reps signal
        custom_exercises: Lifter-defined exercises for name lookup

    Returns:
        ExerciseAnalysis
    """
    definition = find_exercise(exercise_id, custom_exercises)
    name = definition.display_name if definition else exercise_id

    cutoff = now - timedelta(weeks=ANALYSIS_WINDOW_WEEKS)
    snapshots = [
        SessionSnapshot(s.started_at, s.sets_for(exercise_id))
        for s in sessions
        if s.is_completed and cutoff <= s.started_at <= now and s.sets_for(exercise_id)
    ]
    snapshots.sort(key=lambda snap: snap.started_at, reverse=True)

    if len(snapshots) < 2:
        return ExerciseAnalysis(exercise_id=exercise_id, exercise_name=name)

    weeks = weekly_performance(snapshots, now)
    weight_trend = reps_trend = rm_trend = 0.0
    if len(weeks) >= 2:
        newest, oldest = weeks[0], weeks[-1]
        weight_trend = _percent_change(newest.avg_weight, oldest.avg_weight)
        reps_trend = _percent_change(newest.avg_reps, oldest.avg_reps)
        rm_trend = _percent_change(newest.estimated_1rm, oldest.estimated_1rm)

    signals = detect_plateau_signals(snapshots, target_reps)
    status = classify_progress(signals, rm_trend, len(snapshots))

    return ExerciseAnalysis(
        exercise_id=exercise_id,
        exercise_name=name,
        weekly_performance=tuple(weeks),
        progress_status=status,
        plateau_signals=signals,
        weight_trend=weight_trend,
        reps_trend=reps_trend,
        estimated_1rm_trend=rm_trend,
    )
