"""
CLI entry point using Typer.

Provides commands for personalized progression:
- init: Initialize preferences and history
- log-session: Log a completed session
- log-weight: Record body weight
- show-history: Display training history
- suggest: Recommend the next session's weight and reps
- analyze: Weekly performance and progress status
- exercises: List the exercise catalog
"""

from .app import app

# Import command modules so their @app.command() decorators register
from .commands import analysis, sessions  # noqa: F401

if __name__ == "__main__":
    app()
