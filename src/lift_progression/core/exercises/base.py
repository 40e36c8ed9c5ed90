"""
Base types for exercise definitions.

ExerciseDefinition is the catalog's view of one exercise: whether it is a
strength or cardio movement and, for strength movements, which muscle
groups it loads.
"""

from dataclasses import dataclass, field
from typing import Literal

ExerciseType = Literal["strength", "cardio"]

MUSCLE_GROUPS: frozenset[str] = frozenset(
    {
        "chest",
        "back",
        "shoulders",
        "biceps",
        "triceps",
        "forearms",
        "core",
        "quadriceps",
        "hamstrings",
        "glutes",
        "calves",
        "traps",
        "lats",
    }
)


@dataclass(frozen=True)
class ExerciseDefinition:
    """
    Catalog entry for one exercise.

    Cardio exercises carry no muscle groups; muscular recovery does not
    apply to them.
    """

    exercise_id: str          # e.g. "bench-press"
    display_name: str         # e.g. "Barbell Bench Press"
    exercise_type: ExerciseType
    muscle_groups: frozenset[str] = field(default_factory=frozenset)
    equipment: str = "other"

    @property
    def is_strength(self) -> bool:
        return self.exercise_type == "strength"

    def shares_muscles_with(self, other: "ExerciseDefinition") -> bool:
        """True when both are strength exercises loading a common muscle group."""
        if not (self.is_strength and other.is_strength):
            return False
        return not self.muscle_groups.isdisjoint(other.muscle_groups)
