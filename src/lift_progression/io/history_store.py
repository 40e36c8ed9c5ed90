"""
JSONL-based history storage for workout sessions.

The history file holds one session per line.  A sibling profile.json holds
the lifter's preferences and body-weight log.
"""

import json
import os
from pathlib import Path
from typing import Any

from ..core.models import UserPreferences, WeightEntry, WorkoutSession
from .serializers import (
    ValidationError,
    dict_to_preferences,
    dict_to_weight_entry,
    json_line_to_session,
    preferences_to_dict,
    session_to_json_line,
    validate_records,
    weight_entry_to_dict,
)


class HistoryStore:
    """
    Manages workout history stored in JSONL format plus profile.json.

    profile.json layout:
        {"preferences": {...}, "weight_entries": [{"date", "weight", "unit"}, ...]}
    """

    def __init__(self, history_path: str | Path):
        """
        Initialize the history store.

        Args:
            history_path: Path to the JSONL history file
        """
        self.history_path = Path(history_path)
        self.profile_path = self.history_path.parent / "profile.json"

    def exists(self) -> bool:
        """Check if the history file exists."""
        return self.history_path.exists()

    def init(self, preferences: UserPreferences) -> None:
        """
        Create the history file if missing and write preferences.

        Existing body-weight entries are preserved.
        """
        self.history_path.parent.mkdir(parents=True, exist_ok=True)
        if not self.history_path.exists():
            self.history_path.touch()

        data = self._read_profile() if self.profile_path.exists() else {}
        data["preferences"] = preferences_to_dict(preferences)
        data.setdefault("weight_entries", [])
        self._write_profile(data)

    def _read_profile(self) -> dict[str, Any]:
        if not self.profile_path.exists():
            raise FileNotFoundError(
                f"Profile not found: {self.profile_path}. Run 'init' first."
            )
        try:
            with open(self.profile_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Invalid JSON in {self.profile_path}: {e}") from e
        if not isinstance(data, dict):
            raise ValidationError(f"{self.profile_path} must contain a JSON object")
        return data

    def _write_profile(self, data: dict[str, Any]) -> None:
        tmp = self.profile_path.with_suffix(".json.tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        os.replace(tmp, self.profile_path)

    def load_preferences(self) -> UserPreferences:
        """
        Load preferences from profile.json.

        Returns:
            UserPreferences (defaults when the profile has none)

        Raises:
            FileNotFoundError: If profile.json doesn't exist
            ValidationError: If the stored preferences are invalid
        """
        return dict_to_preferences(self._read_profile().get("preferences") or {})

    def load_weight_entries(self) -> list[WeightEntry]:
        """
        Load body-weight entries, oldest first.

        Returns an empty list when there is no profile yet.
        """
        if not self.profile_path.exists():
            return []
        raw = validate_records(self._read_profile().get("weight_entries", []), "weight_entries")
        entries = [dict_to_weight_entry(e) for e in raw]
        entries.sort(key=lambda e: e.date)
        return entries

    def add_weight_entry(self, entry: WeightEntry) -> None:
        """Append a body-weight entry to profile.json."""
        data = self._read_profile()
        data.setdefault("weight_entries", []).append(weight_entry_to_dict(entry))
        self._write_profile(data)

    def load_history(self) -> list[WorkoutSession]:
        """
        Load all sessions from the history file.

        Returns:
            List of WorkoutSession, sorted by start time

        Raises:
            FileNotFoundError: If history file doesn't exist
            ValidationError: If a line cannot be parsed
        """
        if not self.history_path.exists():
            raise FileNotFoundError(
                f"History file not found: {self.history_path}. Run 'init' first."
            )

        sessions: list[WorkoutSession] = []
        with open(self.history_path, "r", encoding="utf-8") as f:
            for line_num, line in enumerate(f, 1):
                if not line.strip():
                    continue
                try:
                    sessions.append(json_line_to_session(line))
                except ValidationError as e:
                    raise ValidationError(
                        f"Error parsing line {line_num} in {self.history_path}: {e}"
                    ) from e

        sessions.sort(key=lambda s: s.started_at)
        return sessions

    def append_session(self, session: WorkoutSession) -> None:
        """
        Append a session to the history file.

        Raises:
            FileNotFoundError: If history file doesn't exist
        """
        if not self.history_path.exists():
            raise FileNotFoundError(
                f"History file not found: {self.history_path}. Run 'init' first."
            )
        with open(self.history_path, "a", encoding="utf-8") as f:
            f.write(session_to_json_line(session) + "\n")


def get_default_history_path() -> Path:
    """
    Get the default history file path.

    Uses LIFT_PROGRESSION_HOME if set, else ~/.lift-progression/history.jsonl.
    """
    home = os.environ.get("LIFT_PROGRESSION_HOME")
    base = Path(home) if home else Path.home() / ".lift-progression"
    return base / "history.jsonl"
