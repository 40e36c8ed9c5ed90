"""
YAML → ExerciseDefinition loader.

Loads exercise definitions from individual YAML files in the bundled
``src/lift_progression/exercises/`` directory.  Each file (e.g.
bench-press.yaml) holds one flat exercise definition.

User overrides: place matching files in ``~/.lift-progression/exercises/``.
A user file is deep-merged over the bundled definition, so only changed
keys need to be listed.  A user file whose stem does not match any bundled
file is treated as a new exercise and added to the catalog.
"""

from __future__ import annotations

import os
import warnings
from pathlib import Path

import yaml

from .base import MUSCLE_GROUPS, ExerciseDefinition

_REQUIRED_FIELDS: frozenset[str] = frozenset({"exercise_id", "display_name", "exercise_type"})
_EXERCISE_TYPES: frozenset[str] = frozenset({"strength", "cardio"})


def exercise_from_dict(d: dict) -> ExerciseDefinition:
    """Convert a raw dict (from YAML) to an ExerciseDefinition.

    Raises ValueError if a required field is absent or a value is unknown.
    """
    missing = _REQUIRED_FIELDS - set(d)
    if missing:
        raise ValueError(f"ExerciseDefinition missing fields: {sorted(missing)}")

    exercise_type = str(d["exercise_type"])
    if exercise_type not in _EXERCISE_TYPES:
        raise ValueError(f"Unknown exercise_type {exercise_type!r}")

    muscles = frozenset(str(m) for m in d.get("muscle_groups") or ())
    unknown = muscles - MUSCLE_GROUPS
    if unknown:
        raise ValueError(f"Unknown muscle groups: {sorted(unknown)}")
    if exercise_type == "strength" and not muscles:
        raise ValueError("Strength exercises need at least one muscle group")

    return ExerciseDefinition(
        exercise_id=str(d["exercise_id"]),
        display_name=str(d["display_name"]),
        exercise_type=exercise_type,  # type: ignore[arg-type]
        muscle_groups=muscles if exercise_type == "strength" else frozenset(),
        equipment=str(d.get("equipment", "other")),
    )


def _load_yaml_file(path: Path) -> dict:
    """Load a YAML file; warn and return {} if it cannot be parsed."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as exc:
        warnings.warn(f"lift-progression: cannot read {path} ({exc})", stacklevel=2)
        return {}
    return data if isinstance(data, dict) else {}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def get_bundled_exercises_dir() -> Path | None:
    """Return path to the bundled exercises/ data directory, or None if not found."""
    # loader.py lives at src/lift_progression/core/exercises/loader.py
    candidate = Path(__file__).parent.parent.parent / "exercises"
    return candidate if candidate.is_dir() else None


def get_user_exercises_dir() -> Path | None:
    """Return ~/.lift-progression/exercises/ if it exists, else None."""
    home = Path(os.environ.get("HOME", "~")).expanduser()
    p = home / ".lift-progression" / "exercises"
    return p if p.is_dir() else None


def load_exercises_from_yaml(
    bundled_dir: Path | None = None,
    user_dir: Path | None = None,
) -> dict[str, ExerciseDefinition]:
    """Return {exercise_id: ExerciseDefinition} loaded from per-exercise YAML files.

    Directories default to the bundled catalog and the user override
    directory.  Files that fail validation are skipped with a warning.
    """
    if bundled_dir is None:
        bundled_dir = get_bundled_exercises_dir()
    if user_dir is None:
        user_dir = get_user_exercises_dir()

    stems: dict[str, Path] = {}
    if bundled_dir is not None:
        for p in sorted(bundled_dir.glob("*.yaml")):
            stems[p.stem] = p

    user_only: list[Path] = []
    if user_dir is not None:
        user_only = [p for p in sorted(user_dir.glob("*.yaml")) if p.stem not in stems]

    raw_defs: list[tuple[str, dict]] = []
    for stem, bundled_path in stems.items():
        raw = _load_yaml_file(bundled_path)
        if user_dir is not None and (user_dir / f"{stem}.yaml").exists():
            raw = _deep_merge(raw, _load_yaml_file(user_dir / f"{stem}.yaml"))
        raw_defs.append((stem, raw))
    raw_defs.extend((p.stem, _load_yaml_file(p)) for p in user_only)

    result: dict[str, ExerciseDefinition] = {}
    for stem, raw in raw_defs:
        if not raw:
            continue
        try:
            ex = exercise_from_dict(raw)
        except ValueError as exc:
            warnings.warn(f"lift-progression: skipping exercise '{stem}' ({exc})", stacklevel=2)
            continue
        result[ex.exercise_id] = ex
    return result
