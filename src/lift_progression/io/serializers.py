"""
JSON serialization for training data models.

Handles conversion between dataclasses and JSON-compatible dicts.
Timestamps are stored as ISO 8601 strings; aware timestamps are
normalised to naive UTC so every datetime the engine sees is comparable.
"""

import json
import math
import re
from datetime import datetime, timezone
from typing import Any

from ..core.models import (
    EXPERIENCE_LEVELS,
    WEIGHT_UNITS,
    WORKOUT_GOALS,
    LoggedSet,
    SessionExercise,
    UserPreferences,
    WeightEntry,
    WorkoutSession,
)


class ValidationError(Exception):
    """Raised when data validation fails."""

    pass


def parse_timestamp(value: str, name: str = "timestamp") -> datetime:
    """
    Parse an ISO 8601 date or datetime string.

    Args:
        value: e.g. "2026-02-16", "2026-02-16T18:30:00", "2026-02-16T18:30:00Z"
        name: Field name for error messages

    Returns:
        Naive datetime (UTC if the input carried an offset)

    Raises:
        ValidationError: If the string is not a valid ISO timestamp
    """
    if not isinstance(value, str):
        raise ValidationError(f"Invalid {name}: {value!r}. Expected an ISO 8601 string")
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as e:
        raise ValidationError(f"Invalid {name}: {value!r}. Expected ISO 8601") from e

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def format_timestamp(value: datetime) -> str:
    return value.isoformat(timespec="seconds")


def validate_choice(value: Any, choices: tuple[str, ...], name: str) -> str:
    """
    Validate that value is one of choices.

    Raises:
        ValidationError: If it is not
    """
    if value not in choices:
        raise ValidationError(f"Invalid {name}: {value!r}. Must be one of {choices}")
    return value


def validate_non_negative(value: int | float, name: str) -> int | float:
    """
    Validate that a value is a non-negative number.

    Raises:
        ValidationError: If value is not a number or is negative
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value) or value < 0:
        raise ValidationError(f"{name} must be non-negative, got {value}")
    return value


def validate_records(value: Any, name: str) -> list[dict[str, Any]]:
    """
    Validate that value is a list of JSON objects.

    Raises:
        ValidationError: If it is not
    """
    if not isinstance(value, list) or not all(isinstance(v, dict) for v in value):
        raise ValidationError(f"{name} must be a list of objects, got {value!r}")
    return value


def _require(data: dict[str, Any], key: str, record: str) -> Any:
    if key not in data:
        raise ValidationError(f"{record} is missing '{key}'")
    return data[key]


def logged_set_to_dict(s: LoggedSet) -> dict[str, Any]:
    return {"weight": s.weight, "reps": s.reps}


def dict_to_logged_set(data: dict[str, Any]) -> LoggedSet:
    """
    Convert dict to LoggedSet.

    Raises:
        ValidationError: If weight or reps are missing or negative
    """
    weight = validate_non_negative(_require(data, "weight", "set"), "weight")
    reps = validate_non_negative(_require(data, "reps", "set"), "reps")
    if int(reps) != reps:
        raise ValidationError(f"reps must be a whole number, got {reps}")
    return LoggedSet(weight=float(weight), reps=int(reps))


def session_to_dict(session: WorkoutSession) -> dict[str, Any]:
    """
    Convert WorkoutSession to JSON-compatible dict.

    Optional fields are omitted when unset.
    """
    d: dict[str, Any] = {
        "id": session.session_id,
        "started_at": format_timestamp(session.started_at),
        "exercises": [
            {
                "exercise_id": ex.exercise_id,
                "sets": [logged_set_to_dict(s) for s in ex.sets],
                **({"target_reps": ex.target_reps} if ex.target_reps is not None else {}),
            }
            for ex in session.exercises
        ],
    }
    if session.completed_at is not None:
        d["completed_at"] = format_timestamp(session.completed_at)
    if session.mood is not None:
        d["mood"] = session.mood
    if session.name:
        d["name"] = session.name
    return d


def dict_to_session(data: dict[str, Any]) -> WorkoutSession:
    """
    Convert dict to WorkoutSession.

    Raises:
        ValidationError: If data is invalid
    """
    started_at = parse_timestamp(_require(data, "started_at", "session"), "started_at")
    completed_raw = data.get("completed_at")
    completed_at = (
        parse_timestamp(completed_raw, "completed_at") if completed_raw is not None else None
    )

    exercises: list[SessionExercise] = []
    for raw_ex in validate_records(data.get("exercises", []), "exercises"):
        target = raw_ex.get("target_reps")
        if target is not None:
            validate_non_negative(target, "target_reps")
        exercises.append(
            SessionExercise(
                exercise_id=str(_require(raw_ex, "exercise_id", "session exercise")),
                sets=[
                    dict_to_logged_set(s)
                    for s in validate_records(raw_ex.get("sets", []), "sets")
                ],
                target_reps=int(target) if target is not None else None,
            )
        )

    mood = data.get("mood")
    if mood is not None and (
        isinstance(mood, bool) or not isinstance(mood, int) or not 1 <= mood <= 5
    ):
        raise ValidationError(f"mood must be an integer 1-5, got {mood!r}")

    try:
        return WorkoutSession(
            session_id=str(data.get("id") or format_timestamp(started_at)),
            started_at=started_at,
            completed_at=completed_at,
            exercises=exercises,
            mood=mood,
            name=str(data.get("name", "")),
        )
    except ValueError as e:
        raise ValidationError(str(e)) from e


def weight_entry_to_dict(entry: WeightEntry) -> dict[str, Any]:
    return {"date": format_timestamp(entry.date), "weight": entry.weight, "unit": entry.unit}


def dict_to_weight_entry(data: dict[str, Any]) -> WeightEntry:
    """
    Convert dict to WeightEntry.

    Raises:
        ValidationError: If data is invalid
    """
    return WeightEntry(
        date=parse_timestamp(_require(data, "date", "weight entry"), "date"),
        weight=float(validate_non_negative(_require(data, "weight", "weight entry"), "weight")),
        unit=validate_choice(data.get("unit", "lbs"), WEIGHT_UNITS, "unit"),  # type: ignore[arg-type]
    )


def preferences_to_dict(prefs: UserPreferences) -> dict[str, Any]:
    d: dict[str, Any] = {
        "weight_unit": prefs.weight_unit,
        "experience_level": prefs.experience_level,
        "workout_goal": prefs.workout_goal,
    }
    if prefs.weekly_workout_goal is not None:
        d["weekly_workout_goal"] = prefs.weekly_workout_goal
    return d


def dict_to_preferences(data: dict[str, Any]) -> UserPreferences:
    """
    Convert dict to UserPreferences; absent keys take their defaults.

    Raises:
        ValidationError: If data is invalid
    """
    if not isinstance(data, dict):
        raise ValidationError(f"preferences must be an object, got {data!r}")
    weekly_goal = data.get("weekly_workout_goal")
    if weekly_goal is not None:
        validate_non_negative(weekly_goal, "weekly_workout_goal")
    return UserPreferences(
        weight_unit=validate_choice(data.get("weight_unit", "lbs"), WEIGHT_UNITS, "weight_unit"),  # type: ignore[arg-type]
        experience_level=validate_choice(  # type: ignore[arg-type]
            data.get("experience_level", "intermediate"), EXPERIENCE_LEVELS, "experience_level"
        ),
        workout_goal=validate_choice(data.get("workout_goal", "build"), WORKOUT_GOALS, "workout_goal"),  # type: ignore[arg-type]
        weekly_workout_goal=int(weekly_goal) if weekly_goal is not None else None,
    )


def session_to_json_line(session: WorkoutSession) -> str:
    """Serialize a session to a single JSON line (no trailing newline)."""
    return json.dumps(session_to_dict(session), separators=(",", ":"))


def json_line_to_session(line: str) -> WorkoutSession:
    """
    Deserialize a JSON line to a WorkoutSession.

    Raises:
        ValidationError: If JSON is invalid or data validation fails
    """
    try:
        data = json.loads(line.strip())
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ValidationError("Each history line must be a JSON object")
    return dict_to_session(data)


_SET_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*[xX×]\s*(\d+)\s*$")


def parse_sets_string(sets_str: str) -> list[LoggedSet]:
    """
    Parse a comma-separated sets string.

    Format: WEIGHTxREPS per set, e.g. "135x8, 135x8, 140x6".

    Args:
        sets_str: Sets string

    Returns:
        List of LoggedSet

    Raises:
        ValidationError: If any set is malformed or the string is empty
    """
    parts = [p for p in sets_str.split(",") if p.strip()]
    if not parts:
        raise ValidationError("No sets given. Expected e.g. '135x8, 135x8'")

    sets: list[LoggedSet] = []
    for part in parts:
        m = _SET_RE.match(part)
        if m is None:
            raise ValidationError(f"Invalid set {part.strip()!r}. Expected WEIGHTxREPS, e.g. 135x8")
        sets.append(LoggedSet(weight=float(m.group(1)), reps=int(m.group(2))))
    return sets
