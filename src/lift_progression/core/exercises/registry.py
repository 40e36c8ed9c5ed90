"""
Exercise registry.

The catalog is loaded once from the per-exercise YAML files (see loader.py)
at import time.  If nothing can be loaded a RuntimeError is raised; the
engine cannot resolve muscle groups without a catalog.

Lifters may also define custom exercises; lookups consult those first.
"""

from collections.abc import Iterable

from .base import ExerciseDefinition


def _build_registry() -> dict[str, ExerciseDefinition]:
    from .loader import load_exercises_from_yaml

    loaded = load_exercises_from_yaml()
    if not loaded:
        raise RuntimeError(
            "lift-progression: no exercise definitions could be loaded from YAML. "
            "Check that src/lift_progression/exercises/*.yaml files are present and valid."
        )
    return loaded


EXERCISE_REGISTRY: dict[str, ExerciseDefinition] = _build_registry()


def find_exercise(
    exercise_id: str,
    custom_exercises: Iterable[ExerciseDefinition] = (),
) -> ExerciseDefinition | None:
    """Return the definition for exercise_id, custom entries first, or None."""
    for ex in custom_exercises:
        if ex.exercise_id == exercise_id:
            return ex
    return EXERCISE_REGISTRY.get(exercise_id)


def get_exercise(exercise_id: str) -> ExerciseDefinition:
    """
    Return the ExerciseDefinition for the given exercise_id.

    Raises:
        ValueError: If exercise_id is not in the registry
    """
    if exercise_id not in EXERCISE_REGISTRY:
        valid = ", ".join(sorted(EXERCISE_REGISTRY))
        raise ValueError(f"Unknown exercise '{exercise_id}'. Valid IDs: {valid}")
    return EXERCISE_REGISTRY[exercise_id]
