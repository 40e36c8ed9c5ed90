"""
Data models for lift-progression.

Input records (sets, sessions, body-weight entries, weekly aggregates) are
read-only snapshots handed over by the session and body-weight stores.
They validate themselves on construction so malformed data fails fast
instead of being coerced into a plausible-looking recommendation.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Literal

from .config import LBS_PER_KG, MOOD_MAX, MOOD_MIN, NEUTRAL_MULTIPLIER
from .exercises.base import ExerciseDefinition

WeightUnit = Literal["lbs", "kg"]
ExperienceLevel = Literal["beginner", "intermediate", "advanced"]
WorkoutGoal = Literal["build", "lose", "maintain"]
ProgressStatus = Literal["improving", "plateau", "declining", "insufficient_data"]
BodyWeightTrend = Literal["gaining", "losing", "stable", "unknown"]

WEIGHT_UNITS: tuple[str, ...] = ("lbs", "kg")
EXPERIENCE_LEVELS: tuple[str, ...] = ("beginner", "intermediate", "advanced")
WORKOUT_GOALS: tuple[str, ...] = ("build", "lose", "maintain")
PROGRESS_STATUSES: tuple[str, ...] = ("improving", "plateau", "declining", "insufficient_data")


def _require_non_negative(value: float, name: str) -> None:
    if not math.isfinite(value):
        raise ValueError(f"{name} must be a finite number, got {value!r}")
    if value < 0:
        raise ValueError(f"{name} must be non-negative")


def _require_choice(value: str, choices: tuple[str, ...], name: str) -> None:
    if value not in choices:
        raise ValueError(f"{name} must be one of {', '.join(choices)}; got {value!r}")


@dataclass(frozen=True)
class LoggedSet:
    """A single completed strength set."""

    weight: float
    reps: int

    def __post_init__(self) -> None:
        _require_non_negative(self.weight, "weight")
        _require_non_negative(self.reps, "reps")


@dataclass
class SessionExercise:
    """An exercise as performed within one workout session."""

    exercise_id: str
    sets: list[LoggedSet] = field(default_factory=list)
    target_reps: int | None = None

    def __post_init__(self) -> None:
        if not self.exercise_id:
            raise ValueError("exercise_id must be a non-empty string")
        if self.target_reps is not None:
            _require_non_negative(self.target_reps, "target_reps")


@dataclass
class WorkoutSession:
    """
    A workout session, completed or still in progress.

    mood is the lifter's optional 1-5 self-rating given at the end of the
    session.
    """

    session_id: str
    started_at: datetime
    completed_at: datetime | None = None
    exercises: list[SessionExercise] = field(default_factory=list)
    mood: int | None = None
    name: str = ""

    def __post_init__(self) -> None:
        if self.mood is not None and not MOOD_MIN <= self.mood <= MOOD_MAX:
            raise ValueError(f"mood must be between {MOOD_MIN} and {MOOD_MAX}")
        if self.completed_at is not None and self.completed_at < self.started_at:
            raise ValueError("completed_at must not precede started_at")

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    def sets_for(self, exercise_id: str) -> list[LoggedSet]:
        """All sets logged for exercise_id in this session."""
        return [s for ex in self.exercises if ex.exercise_id == exercise_id for s in ex.sets]


@dataclass(frozen=True)
class WeightEntry:
    """A body-weight measurement."""

    date: datetime
    weight: float
    unit: WeightUnit = "lbs"

    def __post_init__(self) -> None:
        _require_non_negative(self.weight, "weight")
        _require_choice(self.unit, WEIGHT_UNITS, "unit")

    def weight_kg(self) -> float:
        return self.weight if self.unit == "kg" else self.weight / LBS_PER_KG


@dataclass
class UserPreferences:
    """Lifter settings read from the preference store."""

    weight_unit: WeightUnit = "lbs"
    experience_level: ExperienceLevel = "intermediate"
    workout_goal: WorkoutGoal = "build"
    weekly_workout_goal: int | None = None

    def __post_init__(self) -> None:
        _require_choice(self.weight_unit, WEIGHT_UNITS, "weight_unit")
        _require_choice(self.experience_level, EXPERIENCE_LEVELS, "experience_level")
        _require_choice(self.workout_goal, WORKOUT_GOALS, "workout_goal")
        if self.weekly_workout_goal is not None:
            _require_non_negative(self.weekly_workout_goal, "weekly_workout_goal")


@dataclass(frozen=True)
class WeeklyPerformance:
    """
    Aggregated performance for one exercise over one calendar week.

    weeks_ago is 0 for the current week, 1 for last week, and so on.
    """

    weeks_ago: int
    sessions: int
    avg_weight: float
    avg_reps: float
    max_weight: float
    total_sets: int
    estimated_1rm: float

    def __post_init__(self) -> None:
        for name in ("weeks_ago", "sessions", "avg_weight", "avg_reps",
                     "max_weight", "total_sets", "estimated_1rm"):
            _require_non_negative(getattr(self, name), name)


@dataclass(frozen=True)
class PlateauSignals:
    """Independent stall indicators computed by the weekly analyzer."""

    same_weight_sessions: bool = False
    failed_rep_targets: bool = False
    stalled_1rm: bool = False

    def count(self) -> int:
        return sum((self.same_weight_sessions, self.failed_rep_targets, self.stalled_1rm))


@dataclass(frozen=True)
class ExerciseAnalysis:
    """
    Multi-week summary of one exercise.

    weekly_performance is ordered most recent first. Trends are percent
    changes from the oldest to the newest week with data.
    """

    exercise_id: str
    exercise_name: str = ""
    weekly_performance: tuple[WeeklyPerformance, ...] = ()
    progress_status: ProgressStatus = "insufficient_data"
    plateau_signals: PlateauSignals = field(default_factory=PlateauSignals)
    weight_trend: float = 0.0
    reps_trend: float = 0.0
    estimated_1rm_trend: float = 0.0

    def __post_init__(self) -> None:
        _require_choice(self.progress_status, PROGRESS_STATUSES, "progress_status")
        # accept any sequence, store an immutable one
        object.__setattr__(self, "weekly_performance", tuple(self.weekly_performance))


@dataclass(frozen=True)
class Factor:
    """
    One personalization rule's verdict.

    raw_metric is the observation behind the multiplier (a rate, a number of
    days, a trend label) or None when nothing could be observed.
    """

    name: str
    multiplier: float
    raw_metric: float | str | None = None
    reasoning: str = ""

    @property
    def is_active(self) -> bool:
        return self.multiplier != NEUTRAL_MULTIPLIER


class Confidence(Enum):
    """
    How much history supports a recommendation.

    Each tier carries the share of the adaptive (trend-derived) increment it
    trusts when blending against the default increment.
    """

    LOW = ("low", 0.0)
    MEDIUM = ("medium", 0.3)
    HIGH = ("high", 1.0)

    def __init__(self, label: str, adaptive_weight: float) -> None:
        self.label = label
        self.adaptive_weight = adaptive_weight

    def __str__(self) -> str:
        return self.label


@dataclass
class ProgressionContext:
    """Everything the engine needs to compute one exercise's progression."""

    exercise_id: str
    analysis: ExerciseAnalysis
    recent_session_sets: list[list[LoggedSet]]
    target_reps: int
    experience_level: ExperienceLevel = "intermediate"
    weight_unit: WeightUnit = "lbs"
    workout_goal: WorkoutGoal = "build"
    all_sessions: list[WorkoutSession] = field(default_factory=list)
    weekly_workout_goal: int | None = None
    weight_entries: list[WeightEntry] = field(default_factory=list)
    custom_exercises: list[ExerciseDefinition] = field(default_factory=list)
    now: datetime | None = None

    def __post_init__(self) -> None:
        _require_non_negative(self.target_reps, "target_reps")
        _require_choice(self.experience_level, EXPERIENCE_LEVELS, "experience_level")
        _require_choice(self.weight_unit, WEIGHT_UNITS, "weight_unit")
        _require_choice(self.workout_goal, WORKOUT_GOALS, "workout_goal")
        if self.weekly_workout_goal is not None:
            _require_non_negative(self.weekly_workout_goal, "weekly_workout_goal")

    def reference_time(self) -> datetime:
        """The instant factor windows are measured back from."""
        return self.now if self.now is not None else datetime.now()


@dataclass(frozen=True)
class PersonalizedProgressionConfig:
    """
    The engine's recommendation for the next session of one exercise.

    increment may be negative (a suggested deload); composite_multiplier is
    always within [COMPOSITE_MIN, COMPOSITE_MAX].
    """

    baseline: float
    increment: float
    composite_multiplier: float
    factors: tuple[Factor, ...]
    confidence: Confidence

    def to_dict(self) -> dict[str, Any]:
        return {
            "baseline": self.baseline,
            "increment": self.increment,
            "composite_multiplier": self.composite_multiplier,
            "factors": [
                {
                    "name": f.name,
                    "multiplier": f.multiplier,
                    "raw_metric": f.raw_metric,
                    "reasoning": f.reasoning,
                }
                for f in self.factors
            ],
            "confidence": self.confidence.label,
        }
