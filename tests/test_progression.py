"""
Tests for the progression orchestrator, weekly analyzer and suggestion presenter.

The full-pipeline scenarios build a short training history and check that
baseline, increment, composite multiplier and confidence agree with the
hand-computed values.
"""

from datetime import datetime, timedelta

import pytest

from lift_progression.core.analysis import (
    analyze_exercise,
    classify_progress,
    collect_recent_session_sets,
    epley_1rm,
)
from lift_progression.core.models import (
    Confidence,
    ExerciseAnalysis,
    Factor,
    LoggedSet,
    PersonalizedProgressionConfig,
    PlateauSignals,
    ProgressionContext,
    SessionExercise,
    WorkoutSession,
)
from lift_progression.core.progression import (
    blend_increment,
    calculate_personalized_progression,
    calculate_progressions,
    composite_multiplier,
    confidence_for,
    default_increment,
)
from lift_progression.core.suggestion import round_to_plate, suggest_next_session

NOW = datetime(2026, 3, 1, 12, 0)


def _session(
    days_ago: float,
    weight: float,
    reps: int = 8,
    n_sets: int = 3,
    exercise_id: str = "bench-press",
    mood: int | None = None,
) -> WorkoutSession:
    started = NOW - timedelta(days=days_ago)
    return WorkoutSession(
        session_id=f"s-{days_ago}",
        started_at=started,
        completed_at=started + timedelta(hours=1),
        exercises=[
            SessionExercise(exercise_id, [LoggedSet(weight, reps) for _ in range(n_sets)], 8)
        ],
        mood=mood,
    )


def _weekly_history(weights: list[float], reps: int = 8) -> list[WorkoutSession]:
    """One session per week, oldest weight first, the latest one day ago."""
    n = len(weights)
    return [
        _session(days_ago=1 + 7 * (n - 1 - i), weight=w, reps=reps)
        for i, w in enumerate(weights)
    ]


def _ctx(sessions: list[WorkoutSession], exercise_id: str = "bench-press", **kwargs) -> ProgressionContext:
    target = kwargs.pop("target_reps", 8)
    return ProgressionContext(
        exercise_id=exercise_id,
        analysis=analyze_exercise(exercise_id, sessions, now=NOW, target_reps=target),
        recent_session_sets=collect_recent_session_sets(exercise_id, sessions, NOW),
        target_reps=target,
        all_sessions=sessions,
        now=NOW,
        **kwargs,
    )


def _fixed(*multipliers: float):
    return tuple(
        (lambda ctx, m=m, i=i: Factor(f"f{i}", m, None, f"factor {i}"))
        for i, m in enumerate(multipliers)
    )


class TestBuildingBlocks:

    @pytest.mark.parametrize(
        "level, unit, expected",
        [
            ("beginner", "lbs", 5.0),
            ("intermediate", "lbs", 2.5),
            ("advanced", "lbs", 2.0),
            ("beginner", "kg", 2.5),
            ("intermediate", "kg", 1.25),
            ("advanced", "kg", 1.0),
        ],
    )
    def test_default_increment(self, level, unit, expected):
        assert default_increment(level, unit) == expected

    @pytest.mark.parametrize(
        "sessions, weeks, expected",
        [
            (5, 0, Confidence.LOW),
            (2, 6, Confidence.LOW),
            (3, 1, Confidence.MEDIUM),
            (5, 2, Confidence.MEDIUM),
            (5, 3, Confidence.HIGH),
        ],
    )
    def test_confidence_tiers(self, sessions, weeks, expected):
        assert confidence_for(sessions, weeks) is expected

    def test_blend_by_confidence(self):
        assert blend_increment(Confidence.LOW, 2.5, 5.0, True) == 2.5
        assert blend_increment(Confidence.MEDIUM, 2.5, 5.0, True) == pytest.approx(3.25)
        assert blend_increment(Confidence.HIGH, 2.5, 5.0, True) == 5.0

    def test_untrusted_trend_keeps_default(self):
        assert blend_increment(Confidence.HIGH, 2.5, 5.0, False) == 2.5

    def test_composite_clamped(self):
        assert composite_multiplier([Factor("a", 1.2), Factor("b", 1.1), Factor("c", 1.2)]) == 1.5
        assert composite_multiplier([Factor("a", 0.5), Factor("b", 0.7)]) == 0.5
        assert composite_multiplier([Factor("a", 1.2), Factor("b", 0.9)]) == pytest.approx(1.08)
        assert composite_multiplier([]) == 1.0

    def test_confidence_labels(self):
        assert str(Confidence.MEDIUM) == "medium"
        assert Confidence.HIGH.adaptive_weight == 1.0


class TestCalculatePersonalizedProgression:

    def test_no_history_is_neutral(self):
        ctx = ProgressionContext(
            exercise_id="bench-press",
            analysis=ExerciseAnalysis("bench-press"),
            recent_session_sets=[],
            target_reps=8,
            now=NOW,
        )
        config = calculate_personalized_progression(ctx)
        assert config.baseline == 0.0
        assert config.increment == 2.5
        assert config.composite_multiplier == 1.0
        assert config.factors == ()
        assert config.confidence is Confidence.LOW

    def test_composite_upper_clamp(self):
        config = calculate_personalized_progression(_ctx([_session(1, 100)]), _fixed(1.5, 1.5))
        assert config.composite_multiplier == 1.5

    def test_composite_lower_clamp(self):
        config = calculate_personalized_progression(_ctx([_session(1, 100)]), _fixed(0.5, 0.7))
        assert config.composite_multiplier == 0.5

    def test_only_active_factors_reported(self):
        config = calculate_personalized_progression(_ctx([_session(1, 100)]), _fixed(1.0, 0.9))
        assert [f.name for f in config.factors] == ["f1"]

    def test_rising_history_full_pipeline(self):
        sessions = _weekly_history([100, 102.5, 105, 107.5, 110, 112.5])
        config = calculate_personalized_progression(_ctx(sessions, experience_level="beginner"))

        assert config.confidence is Confidence.HIGH
        # 2.5/week trend replaces the 5 lbs beginner default at high confidence
        assert config.increment == pytest.approx(2.5)
        assert 107.5 < config.baseline < 112.5
        # all targets hit (x1.2), trained yesterday (x0.9)
        assert config.composite_multiplier == pytest.approx(1.08)
        assert {f.name for f in config.factors} == {"Success Rate", "Recovery"}

    def test_medium_confidence_blends(self):
        sessions = _weekly_history([100, 110, 120])
        ctx = _ctx(sessions)
        config = calculate_personalized_progression(ctx)
        assert config.confidence is Confidence.MEDIUM
        # slope 10 clamped to 5, blended 0.7 * 2.5 + 0.3 * 5
        assert config.increment == pytest.approx(3.25)

    def test_declining_history_deloads(self):
        sessions = _weekly_history([120, 115, 110, 105, 100])
        config = calculate_personalized_progression(_ctx(sessions))
        assert config.increment < 0

    def test_kg_lifter(self):
        sessions = [_session(1, 60), _session(4, 60)]
        config = calculate_personalized_progression(_ctx(sessions, weight_unit="kg"))
        assert config.increment == 1.25
        assert config.baseline == 60

    def test_fills_in_now_when_missing(self):
        ctx = _ctx([_session(1, 100)])
        ctx.now = None
        config = calculate_personalized_progression(ctx)
        assert config.baseline == 100

    def test_sessions_after_now_ignored(self):
        past = [_session(d, 100, mood=5) for d in (1, 2, 3, 4, 5)]
        future = [_session(-d, 300, mood=1) for d in (1, 2, 3, 4, 5)]
        config = calculate_personalized_progression(_ctx(past + future))
        multipliers = {f.name: f.multiplier for f in config.factors}
        assert multipliers["Mood Trend"] == 1.1
        assert config.baseline == 100

    def test_deterministic(self):
        sessions = _weekly_history([100, 105, 110, 115])
        ctx = _ctx(sessions, weekly_workout_goal=2)
        assert calculate_personalized_progression(ctx) == calculate_personalized_progression(ctx)

    def test_many_exercises_independent(self):
        bench = _weekly_history([100, 105, 110, 115])
        squat = [_session(3, 200, exercise_id="squat")]
        everything = bench + squat
        configs = calculate_progressions(
            [_ctx(everything, "bench-press"), _ctx(everything, "squat")]
        )
        assert set(configs) == {"bench-press", "squat"}
        assert configs["squat"].baseline == 200
        assert configs["bench-press"].baseline > 100

    def test_to_dict(self):
        config = calculate_personalized_progression(_ctx([_session(1, 100)]), _fixed(0.9))
        d = config.to_dict()
        assert d["confidence"] == "low"
        assert d["factors"][0]["multiplier"] == 0.9


class TestAnalysis:

    def test_epley(self):
        assert epley_1rm(100, 1) == 100
        assert epley_1rm(100, 10) == pytest.approx(133.333, rel=1e-4)
        assert epley_1rm(100, 0) == 0.0

    def test_single_session_is_insufficient(self):
        analysis = analyze_exercise("bench-press", [_session(1, 100)], now=NOW)
        assert analysis.progress_status == "insufficient_data"
        assert analysis.weekly_performance == ()
        assert analysis.exercise_name == "Barbell Bench Press"

    def test_weekly_grouping(self):
        sessions = [_session(1, 110), _session(3, 100), _session(8, 95)]
        analysis = analyze_exercise("bench-press", sessions, now=NOW)
        weeks = analysis.weekly_performance
        assert [w.weeks_ago for w in weeks] == [0, 1]
        assert weeks[0].sessions == 2
        assert weeks[0].max_weight == 110
        assert weeks[0].avg_weight == pytest.approx(105)
        assert weeks[0].total_sets == 6

    def test_rising_is_improving(self):
        analysis = analyze_exercise("bench-press", _weekly_history([100, 105, 110, 115]), now=NOW)
        assert analysis.progress_status == "improving"
        assert analysis.estimated_1rm_trend > 0

    def test_flat_is_plateau(self):
        analysis = analyze_exercise("bench-press", _weekly_history([100] * 6), now=NOW)
        assert analysis.plateau_signals.same_weight_sessions
        assert analysis.plateau_signals.stalled_1rm
        assert analysis.progress_status == "plateau"

    def test_falling_is_declining(self):
        analysis = analyze_exercise("bench-press", _weekly_history([120, 110, 100]), now=NOW)
        assert analysis.progress_status == "declining"

    def test_failed_reps_signal(self):
        sessions = _weekly_history([100, 100, 100], reps=5)
        analysis = analyze_exercise("bench-press", sessions, now=NOW, target_reps=8)
        assert analysis.plateau_signals.failed_rep_targets

    def test_classify_needs_sessions(self):
        assert classify_progress(PlateauSignals(), 10.0, 2) == "insufficient_data"

    def test_recent_sets_most_recent_first(self):
        sessions = [_session(10, 90), _session(1, 100), _session(5, 95)]
        grouped = collect_recent_session_sets("bench-press", sessions, NOW)
        assert [g[0].weight for g in grouped] == [100, 95, 90]

    def test_recent_sets_stop_at_now(self):
        sessions = [_session(3, 100), _session(-3, 300)]
        grouped = collect_recent_session_sets("bench-press", sessions, NOW)
        assert [g[0].weight for g in grouped] == [100]


class TestSuggestion:

    def _config(self, baseline: float, increment: float, composite: float = 1.0, factors=()):
        return PersonalizedProgressionConfig(
            baseline=baseline,
            increment=increment,
            composite_multiplier=composite,
            factors=tuple(factors),
            confidence=Confidence.MEDIUM,
        )

    def test_round_to_plate(self):
        assert round_to_plate(101.3, "lbs") == 102.5
        assert round_to_plate(101.3, "kg") == 101.25

    def test_add_weight(self):
        result = suggest_next_session("bench-press", self._config(100, 2.5), 8, "lbs", "Bench")
        assert result.suggested_weight == 102.5
        assert result.suggested_reps == 8
        assert result.reasoning.startswith("Add 2.5 lbs to Bench")
        assert result.reasoning.endswith("medium confidence")

    def test_factor_reasoning_included(self):
        factor = Factor("Recovery", 0.9, 1.0, "1.0 days since muscle group trained → tight recovery")
        result = suggest_next_session("bench-press", self._config(100, 5, 0.9, [factor]), 8, "lbs")
        assert "tight recovery" in result.reasoning

    def test_deload(self):
        result = suggest_next_session("bench-press", self._config(100, -5), 8, "lbs")
        assert result.suggested_weight == 95
        assert result.reasoning.startswith("Deload bench-press by 5 lbs")

    def test_hold(self):
        result = suggest_next_session("bench-press", self._config(100, 1.0), 8, "lbs")
        assert result.suggested_weight == 100
        assert result.reasoning.startswith("Hold")

    def test_no_baseline(self):
        result = suggest_next_session("squat", self._config(0, 2.5), 5, "kg", "Back Squat")
        assert result.suggested_weight == 0
        assert "establish your working weight" in result.reasoning

    def test_no_baseline_reps_at_least_one(self):
        result = suggest_next_session("squat", self._config(0, 2.5), 0, "kg")
        assert result.suggested_reps == 1
