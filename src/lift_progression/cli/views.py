"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of progression data.
"""

from collections.abc import Iterable

from rich.console import Console
from rich.table import Table

from ..core.exercises import ExerciseDefinition
from ..core.models import ExerciseAnalysis, PersonalizedProgressionConfig, WorkoutSession
from ..core.suggestion import ExerciseSuggestion

console = Console()
err_console = Console(stderr=True)

_CONFIDENCE_STYLES = {"low": "red", "medium": "yellow", "high": "green"}
_STATUS_STYLES = {
    "improving": "green",
    "plateau": "yellow",
    "declining": "red",
    "insufficient_data": "dim",
}


def _fmt_multiplier(value: float) -> str:
    if value > 1:
        return f"[green]x{value:.2f}[/green]"
    if value < 1:
        return f"[red]x{value:.2f}[/red]"
    return f"x{value:.2f}"


def format_progression_table(
    exercise_name: str,
    config: PersonalizedProgressionConfig,
    suggestion: ExerciseSuggestion,
    weight_unit: str,
) -> Table:
    """Key/value table of one exercise's progression config and suggestion."""
    table = Table(title=f"Next session: {exercise_name}", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    style = _CONFIDENCE_STYLES.get(config.confidence.label, "white")
    table.add_row("Baseline", f"{config.baseline:.1f} {weight_unit}")
    table.add_row("Increment", f"{config.increment:+.2f} {weight_unit}")
    table.add_row("Composite", _fmt_multiplier(config.composite_multiplier))
    table.add_row("Confidence", f"[{style}]{config.confidence.label}[/{style}]")
    table.add_row(
        "Suggested",
        f"[bold]{suggestion.suggested_weight:g} {weight_unit} x {suggestion.suggested_reps}[/bold]",
    )
    return table


def format_factor_table(config: PersonalizedProgressionConfig) -> Table:
    """Table of the active personalization factors."""
    table = Table(title="Active factors")
    table.add_column("Factor", style="cyan")
    table.add_column("Multiplier", justify="right")
    table.add_column("Why")
    for f in config.factors:
        table.add_row(f.name, _fmt_multiplier(f.multiplier), f.reasoning)
    return table


def format_weekly_table(analysis: ExerciseAnalysis, weight_unit: str) -> Table:
    """Table of weekly performance, most recent week first."""
    style = _STATUS_STYLES.get(analysis.progress_status, "white")
    table = Table(
        title=f"{analysis.exercise_name or analysis.exercise_id}: "
        f"[{style}]{analysis.progress_status}[/{style}]"
    )
    table.add_column("Week", justify="right", style="cyan")
    table.add_column("Sessions", justify="right")
    table.add_column("Sets", justify="right")
    table.add_column(f"Avg ({weight_unit})", justify="right")
    table.add_column(f"Max ({weight_unit})", justify="right")
    table.add_column("Avg reps", justify="right")
    table.add_column("e1RM", justify="right")

    for w in analysis.weekly_performance:
        table.add_row(
            "this" if w.weeks_ago == 0 else f"-{w.weeks_ago}",
            str(w.sessions),
            str(w.total_sets),
            f"{w.avg_weight:.1f}",
            f"{w.max_weight:g}",
            f"{w.avg_reps:.1f}",
            f"{w.estimated_1rm:.0f}",
        )
    return table


def format_exercise_table(exercises: Iterable[ExerciseDefinition]) -> Table:
    """Table of catalog exercises."""
    table = Table(title="Exercises")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Type")
    table.add_column("Muscle groups")
    for ex in sorted(exercises, key=lambda e: e.exercise_id):
        table.add_row(
            ex.exercise_id,
            ex.display_name,
            ex.exercise_type,
            ", ".join(sorted(ex.muscle_groups)) or "-",
        )
    return table


def format_session_table(sessions: list[WorkoutSession]) -> Table:
    """Table of logged sessions, oldest first."""
    table = Table(title="Workout History")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Started", style="cyan")
    table.add_column("Done")
    table.add_column("Mood", justify="right")
    table.add_column("Exercises")
    for i, s in enumerate(sessions, 1):
        summary = ", ".join(
            f"{ex.exercise_id} ({len(ex.sets)})" for ex in s.exercises
        )
        table.add_row(
            str(i),
            s.started_at.strftime("%Y-%m-%d %H:%M"),
            "yes" if s.is_completed else "[yellow]no[/yellow]",
            str(s.mood) if s.mood is not None else "-",
            summary or "-",
        )
    return table


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[red]Error: {message}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {message}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")
