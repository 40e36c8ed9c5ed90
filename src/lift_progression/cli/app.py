"""Shared Typer app object, shared option types, and store utility."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.logging import RichHandler

from ..io.history_store import HistoryStore, get_default_history_path
from . import views

# Shared --history-path option type used across all commands
HistoryPathOption = Annotated[
    Optional[Path],
    typer.Option("--history-path", "-p", help="Path to history JSONL file"),
]

app = typer.Typer(
    name="lift-progression",
    help="Personalized progressive-overload suggestions from your training history.",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log engine decisions to stderr"),
    ] = False,
) -> None:
    """
    Personalized progression engine for strength training.
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=views.err_console, show_path=False)],
            force=True,
        )


def get_store(history_path: Path | None) -> HistoryStore:
    """Get history store from path or default location."""
    if history_path is None:
        history_path = get_default_history_path()
    return HistoryStore(history_path)
