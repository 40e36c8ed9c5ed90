"""Session and profile commands: init, log-session, log-weight, show-history."""

from datetime import datetime
from typing import Annotated, Optional

import typer

from ...core.exercises import find_exercise
from ...core.models import (
    EXPERIENCE_LEVELS,
    WEIGHT_UNITS,
    WORKOUT_GOALS,
    SessionExercise,
    UserPreferences,
    WeightEntry,
    WorkoutSession,
)
from ...io.serializers import (
    ValidationError,
    format_timestamp,
    parse_sets_string,
    parse_timestamp,
    validate_choice,
)
from .. import views
from ..app import HistoryPathOption, app, get_store


def _parse_when(value: str | None, name: str) -> datetime:
    if value is None:
        return datetime.now().replace(microsecond=0)
    return parse_timestamp(value, name)


@app.command()
def init(
    history_path: HistoryPathOption = None,
    weight_unit: Annotated[
        str,
        typer.Option("--weight-unit", "-u", help="Weight unit (lbs/kg)"),
    ] = "lbs",
    experience_level: Annotated[
        str,
        typer.Option("--experience-level", "-e", help="beginner/intermediate/advanced"),
    ] = "intermediate",
    goal: Annotated[
        str,
        typer.Option("--goal", "-g", help="Workout goal (build/maintain/lose)"),
    ] = "build",
    weekly_goal: Annotated[
        Optional[int],
        typer.Option("--weekly-goal", "-w", help="Target workouts per week"),
    ] = None,
) -> None:
    """
    Initialize history file and training preferences.
    """
    try:
        prefs = UserPreferences(
            weight_unit=validate_choice(weight_unit, WEIGHT_UNITS, "weight unit"),  # type: ignore[arg-type]
            experience_level=validate_choice(  # type: ignore[arg-type]
                experience_level, EXPERIENCE_LEVELS, "experience level"
            ),
            workout_goal=validate_choice(goal, WORKOUT_GOALS, "goal"),  # type: ignore[arg-type]
            weekly_workout_goal=weekly_goal,
        )
    except (ValidationError, ValueError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    store = get_store(history_path)
    store.init(prefs)

    views.print_success(f"Initialized history at {store.history_path}")
    views.print_info(
        f"{prefs.experience_level}, {prefs.weight_unit}, goal: {prefs.workout_goal}"
        + (f", {prefs.weekly_workout_goal} workouts/week" if prefs.weekly_workout_goal else "")
    )


@app.command("log-session")
def log_session(
    exercise_id: Annotated[str, typer.Argument(help="Exercise ID, e.g. bench-press")],
    sets: Annotated[
        str,
        typer.Option("--sets", "-s", help="Sets as WEIGHTxREPS, e.g. '135x8, 135x8, 140x6'"),
    ],
    history_path: HistoryPathOption = None,
    date: Annotated[
        Optional[str],
        typer.Option("--date", "-d", help="Session start (ISO 8601), default now"),
    ] = None,
    mood: Annotated[
        Optional[int],
        typer.Option("--mood", "-m", min=1, max=5, help="How the session felt, 1-5"),
    ] = None,
    target_reps: Annotated[
        Optional[int],
        typer.Option("--target-reps", "-r", min=1, help="Planned reps per set"),
    ] = None,
) -> None:
    """
    Log a completed single-exercise session.
    """
    store = get_store(history_path)

    if find_exercise(exercise_id) is None:
        views.print_warning(f"'{exercise_id}' is not in the exercise catalog")

    try:
        started_at = _parse_when(date, "date")
        session = WorkoutSession(
            session_id=f"{exercise_id}-{format_timestamp(started_at)}",
            started_at=started_at,
            completed_at=started_at,
            exercises=[
                SessionExercise(
                    exercise_id=exercise_id,
                    sets=parse_sets_string(sets),
                    target_reps=target_reps,
                )
            ],
            mood=mood,
        )
        store.append_session(session)
    except (FileNotFoundError, ValidationError, ValueError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.print_success(
        f"Logged {len(session.exercises[0].sets)} sets of {exercise_id} "
        f"on {started_at:%Y-%m-%d}"
    )


@app.command("log-weight")
def log_weight(
    weight: Annotated[float, typer.Argument(help="Body weight")],
    history_path: HistoryPathOption = None,
    unit: Annotated[
        Optional[str],
        typer.Option("--unit", "-u", help="lbs/kg, default from preferences"),
    ] = None,
    date: Annotated[
        Optional[str],
        typer.Option("--date", "-d", help="Measurement date (ISO 8601), default now"),
    ] = None,
) -> None:
    """
    Record a body-weight measurement.
    """
    store = get_store(history_path)

    if not store.profile_path.exists():
        views.print_error(f"Profile not found: {store.profile_path}")
        views.print_info("Run 'init' first to create profile.")
        raise typer.Exit(1)

    try:
        if unit is None:
            unit = store.load_preferences().weight_unit
        entry = WeightEntry(
            date=_parse_when(date, "date"),
            weight=weight,
            unit=validate_choice(unit, WEIGHT_UNITS, "unit"),  # type: ignore[arg-type]
        )
        store.add_weight_entry(entry)
    except (ValidationError, ValueError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.print_success(f"Recorded body weight {entry.weight:g} {entry.unit}")


@app.command("show-history")
def show_history(
    history_path: HistoryPathOption = None,
    limit: Annotated[
        Optional[int],
        typer.Option("--limit", "-l", min=1, help="Show only the last N sessions"),
    ] = None,
) -> None:
    """
    Display logged sessions.
    """
    store = get_store(history_path)

    try:
        sessions = store.load_history()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if not sessions:
        views.print_info("No sessions logged yet.")
        return

    if limit is not None:
        sessions = sessions[-limit:]
    views.console.print(views.format_session_table(sessions))
