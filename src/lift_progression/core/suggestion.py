"""
Turn a progression config into a concrete next-session suggestion.

suggested weight = round_to_plate(baseline + increment * composite_multiplier)
"""

from dataclasses import dataclass

from .config import PLATE_INCREMENTS
from .models import PersonalizedProgressionConfig, WeightUnit


@dataclass(frozen=True)
class ExerciseSuggestion:
    """Recommended load and reps for the next session of one exercise."""

    exercise_id: str
    suggested_weight: float
    suggested_reps: int
    reasoning: str
    confidence: str


def round_to_plate(weight: float, unit: WeightUnit) -> float:
    """Round to the smallest loadable step for the unit (2.5 lbs / 1.25 kg)."""
    step = PLATE_INCREMENTS[unit]
    return round(weight / step) * step


def suggest_next_session(
    exercise_id: str,
    config: PersonalizedProgressionConfig,
    target_reps: int,
    weight_unit: WeightUnit,
    exercise_name: str | None = None,
) -> ExerciseSuggestion:
    """
    Map a PersonalizedProgressionConfig to a user-facing suggestion.

    Without a baseline (no loaded sets yet) the lifter is told to establish a
    working weight.  The reasoning lists each active factor and ends with the
    confidence tier.

    Args:
        exercise_id: Exercise the config was computed for
        config: Engine output
        target_reps: Rep target for the next session
        weight_unit: Unit of baseline and increment
        exercise_name: Display name, defaults to exercise_id

    Returns:
        ExerciseSuggestion with a non-negative, plate-rounded weight
    """
    name = exercise_name or exercise_id
    if config.baseline <= 0:
        return ExerciseSuggestion(
            exercise_id=exercise_id,
            suggested_weight=0.0,
            suggested_reps=max(1, target_reps),
            reasoning=f"Start light and establish your working weight for {name}",
            confidence=config.confidence.label,
        )

    change = config.increment * config.composite_multiplier
    weight = max(0.0, round_to_plate(config.baseline + change, weight_unit))
    delta = weight - round_to_plate(config.baseline, weight_unit)

    if delta > 0:
        headline = f"Add {delta:g} {weight_unit} to {name}"
    elif delta < 0:
        headline = f"Deload {name} by {-delta:g} {weight_unit}"
    else:
        headline = f"Hold your current weight on {name}"

    parts = [headline]
    parts.extend(f.reasoning for f in config.factors if f.reasoning)
    parts.append(f"{config.confidence.label} confidence")
    return ExerciseSuggestion(
        exercise_id=exercise_id,
        suggested_weight=weight,
        suggested_reps=max(1, target_reps),
        reasoning="; ".join(parts),
        confidence=config.confidence.label,
    )
