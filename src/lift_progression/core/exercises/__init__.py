"""
Exercise catalog for lift-progression.

Resolves an exercise id to its type and muscle groups.
"""

from .base import MUSCLE_GROUPS, ExerciseDefinition
from .registry import EXERCISE_REGISTRY, find_exercise, get_exercise

__all__ = [
    "ExerciseDefinition",
    "MUSCLE_GROUPS",
    "EXERCISE_REGISTRY",
    "find_exercise",
    "get_exercise",
]
