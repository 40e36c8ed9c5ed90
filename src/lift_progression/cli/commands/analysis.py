"""Analysis commands: suggest, analyze, exercises."""

import json
from datetime import datetime
from typing import Annotated, Optional

import typer

from ...core.analysis import analyze_exercise, collect_recent_session_sets
from ...core.exercises import EXERCISE_REGISTRY, find_exercise
from ...core.models import ProgressionContext, WorkoutSession
from ...core.progression import calculate_personalized_progression
from ...core.suggestion import suggest_next_session
from ...io.serializers import ValidationError, parse_timestamp
from .. import views
from ..app import HistoryPathOption, app, get_store

DEFAULT_TARGET_REPS = 8

NowOption = Annotated[
    Optional[str],
    typer.Option("--now", help="Reference time (ISO 8601), default current time"),
]


def _last_target_reps(exercise_id: str, sessions: list[WorkoutSession]) -> int | None:
    for session in reversed(sessions):
        for ex in session.exercises:
            if ex.exercise_id == exercise_id and ex.target_reps:
                return ex.target_reps
    return None


@app.command()
def suggest(
    exercise_id: Annotated[str, typer.Argument(help="Exercise ID, e.g. bench-press")],
    history_path: HistoryPathOption = None,
    target_reps: Annotated[
        Optional[int],
        typer.Option(
            "--target-reps",
            "-r",
            min=1,
            help=f"Rep target (default: last logged target or {DEFAULT_TARGET_REPS})",
        ),
    ] = None,
    now: NowOption = None,
    json_out: Annotated[
        bool,
        typer.Option("--json", "-j", help="Output as JSON instead of tables"),
    ] = False,
) -> None:
    """
    Suggest the next session's weight and reps for one exercise.
    """
    store = get_store(history_path)

    try:
        ref = parse_timestamp(now, "--now") if now else datetime.now()
        sessions = store.load_history()
        prefs = store.load_preferences()
        weight_entries = store.load_weight_entries()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    reps = target_reps or _last_target_reps(exercise_id, sessions) or DEFAULT_TARGET_REPS
    analysis = analyze_exercise(exercise_id, sessions, now=ref, target_reps=reps)
    ctx = ProgressionContext(
        exercise_id=exercise_id,
        analysis=analysis,
        recent_session_sets=collect_recent_session_sets(exercise_id, sessions, ref),
        target_reps=reps,
        experience_level=prefs.experience_level,
        weight_unit=prefs.weight_unit,
        workout_goal=prefs.workout_goal,
        all_sessions=sessions,
        weekly_workout_goal=prefs.weekly_workout_goal,
        weight_entries=weight_entries,
        now=ref,
    )
    config = calculate_personalized_progression(ctx)
    result = suggest_next_session(
        exercise_id, config, reps, prefs.weight_unit, exercise_name=analysis.exercise_name
    )

    if json_out:
        print(
            json.dumps(
                {
                    "exercise_id": exercise_id,
                    "suggested_weight": result.suggested_weight,
                    "suggested_reps": result.suggested_reps,
                    "weight_unit": prefs.weight_unit,
                    "reasoning": result.reasoning,
                    "config": config.to_dict(),
                },
                indent=2,
            )
        )
        return

    views.console.print(
        views.format_progression_table(
            analysis.exercise_name or exercise_id, config, result, prefs.weight_unit
        )
    )
    if config.factors:
        views.console.print(views.format_factor_table(config))
    views.console.print(result.reasoning)


@app.command()
def analyze(
    exercise_id: Annotated[str, typer.Argument(help="Exercise ID, e.g. bench-press")],
    history_path: HistoryPathOption = None,
    now: NowOption = None,
) -> None:
    """
    Show weekly performance and progress status for one exercise.
    """
    store = get_store(history_path)

    try:
        ref = parse_timestamp(now, "--now") if now else datetime.now()
        sessions = store.load_history()
        unit = store.load_preferences().weight_unit
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    analysis = analyze_exercise(
        exercise_id, sessions, now=ref, target_reps=_last_target_reps(exercise_id, sessions)
    )
    if not analysis.weekly_performance:
        views.print_warning(
            f"Not enough completed sessions of {analysis.exercise_name} to analyze"
        )
        return

    views.console.print(views.format_weekly_table(analysis, unit))
    views.console.print(
        f"1RM trend: {analysis.estimated_1rm_trend:+.1f}%  "
        f"weight trend: {analysis.weight_trend:+.1f}%  "
        f"plateau signals: {analysis.plateau_signals.count()}"
    )


@app.command()
def exercises(
    exercise_id: Annotated[
        Optional[str],
        typer.Argument(help="Show a single exercise"),
    ] = None,
) -> None:
    """
    List the exercise catalog.
    """
    if exercise_id is None:
        views.console.print(views.format_exercise_table(EXERCISE_REGISTRY.values()))
        return

    definition = find_exercise(exercise_id)
    if definition is None:
        views.print_error(
            f"Unknown exercise '{exercise_id}'. Available: {', '.join(sorted(EXERCISE_REGISTRY))}"
        )
        raise typer.Exit(1)
    views.console.print(views.format_exercise_table([definition]))
