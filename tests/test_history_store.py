"""
Tests for JSON serialization, the JSONL history store and the YAML exercise catalog.
"""

import json
from datetime import datetime

import pytest

from lift_progression.core.exercises import EXERCISE_REGISTRY, find_exercise, get_exercise
from lift_progression.core.exercises.loader import exercise_from_dict, load_exercises_from_yaml
from lift_progression.core.models import (
    LoggedSet,
    SessionExercise,
    UserPreferences,
    WeightEntry,
    WorkoutSession,
)
from lift_progression.io.history_store import HistoryStore, get_default_history_path
from lift_progression.io.serializers import (
    ValidationError,
    dict_to_preferences,
    dict_to_session,
    json_line_to_session,
    parse_sets_string,
    parse_timestamp,
    session_to_json_line,
)


def _session(day: int, weight: float = 100.0, mood: int | None = None) -> WorkoutSession:
    started = datetime(2026, 2, day, 18, 0)
    return WorkoutSession(
        session_id=f"bench-{day}",
        started_at=started,
        completed_at=started.replace(hour=19),
        exercises=[SessionExercise("bench-press", [LoggedSet(weight, 8), LoggedSet(weight, 7)], 8)],
        mood=mood,
    )


@pytest.fixture
def store(tmp_path):
    s = HistoryStore(tmp_path / "history.jsonl")
    s.init(UserPreferences(weight_unit="kg", experience_level="beginner", weekly_workout_goal=3))
    return s


class TestSerializers:

    def test_parse_sets_string(self):
        assert parse_sets_string("135x8, 140X6,142.5×5") == [
            LoggedSet(135, 8),
            LoggedSet(140, 6),
            LoggedSet(142.5, 5),
        ]

    @pytest.mark.parametrize("text", ["", " , ", "135", "135x", "x8", "-5x8", "135x8.5"])
    def test_parse_sets_string_invalid(self, text):
        with pytest.raises(ValidationError):
            parse_sets_string(text)

    def test_parse_timestamp_normalises_utc(self):
        assert parse_timestamp("2026-02-16T18:30:00Z") == datetime(2026, 2, 16, 18, 30)
        assert parse_timestamp("2026-02-16T20:30:00+02:00") == datetime(2026, 2, 16, 18, 30)
        assert parse_timestamp("2026-02-16") == datetime(2026, 2, 16)

    def test_parse_timestamp_invalid(self):
        with pytest.raises(ValidationError):
            parse_timestamp("16/02/2026")

    def test_session_json_line(self):
        session = _session(3, mood=4)
        line = session_to_json_line(session)
        assert "\n" not in line
        assert json.loads(line)["exercises"][0]["target_reps"] == 8
        assert json_line_to_session(line) == session

    def test_optional_fields_omitted(self):
        session = WorkoutSession("x", started_at=datetime(2026, 2, 1))
        data = json.loads(session_to_json_line(session))
        assert "completed_at" not in data
        assert "mood" not in data

    @pytest.mark.parametrize(
        "data",
        [
            {"exercises": []},
            {"started_at": "2026-02-01", "mood": 9},
            {"started_at": "2026-02-01", "exercises": [{"sets": []}]},
            {"started_at": "2026-02-01", "exercises": [{"exercise_id": "x", "sets": [{"weight": -1, "reps": 5}]}]},
            {"started_at": "2026-02-01", "exercises": [{"exercise_id": "x", "sets": [{"weight": "100", "reps": 5}]}]},
            {"started_at": "2026-02-02", "completed_at": "2026-02-01"},
            {"started_at": "2026-02-01", "mood": True},
            {"started_at": "2026-02-01", "exercises": [5]},
            {"started_at": "2026-02-01", "exercises": {"a": 1}},
            {"started_at": "2026-02-01", "exercises": [{"exercise_id": "x", "sets": [3]}]},
        ],
    )
    def test_invalid_session(self, data):
        with pytest.raises(ValidationError):
            dict_to_session(data)

    def test_preferences_defaults(self):
        prefs = dict_to_preferences({})
        assert prefs.weight_unit == "lbs"
        assert prefs.experience_level == "intermediate"
        assert prefs.workout_goal == "build"
        assert prefs.weekly_workout_goal is None

    def test_preferences_bad_literal(self):
        with pytest.raises(ValidationError):
            dict_to_preferences({"workout_goal": "bulk"})


class TestHistoryStore:

    def test_init_creates_files(self, store):
        assert store.exists()
        assert store.profile_path.exists()
        prefs = store.load_preferences()
        assert prefs.weight_unit == "kg"
        assert prefs.weekly_workout_goal == 3
        assert store.load_history() == []

    def test_append_and_load_sorted(self, store):
        store.append_session(_session(10))
        store.append_session(_session(3))
        assert [s.session_id for s in store.load_history()] == ["bench-3", "bench-10"]

    def test_bad_line_reports_line_number(self, store):
        store.append_session(_session(3))
        with open(store.history_path, "a", encoding="utf-8") as f:
            f.write("{not json}\n")
        with pytest.raises(ValidationError, match="line 2"):
            store.load_history()

    def test_missing_history(self, tmp_path):
        s = HistoryStore(tmp_path / "nope" / "history.jsonl")
        with pytest.raises(FileNotFoundError):
            s.load_history()
        with pytest.raises(FileNotFoundError):
            s.append_session(_session(3))
        assert s.load_weight_entries() == []

    def test_weight_entries(self, store):
        store.add_weight_entry(WeightEntry(datetime(2026, 2, 10), 81.0, "kg"))
        store.add_weight_entry(WeightEntry(datetime(2026, 2, 1), 80.0, "kg"))
        assert [e.weight for e in store.load_weight_entries()] == [80.0, 81.0]

    def test_reinit_keeps_weight_entries(self, store):
        store.add_weight_entry(WeightEntry(datetime(2026, 2, 1), 180.0))
        store.init(UserPreferences(workout_goal="lose"))
        assert store.load_preferences().workout_goal == "lose"
        assert len(store.load_weight_entries()) == 1

    def test_corrupt_profile(self, store):
        store.profile_path.write_text("[]", encoding="utf-8")
        with pytest.raises(ValidationError):
            store.load_preferences()

    def test_malformed_profile_sections(self, store):
        store.profile_path.write_text(
            '{"preferences": [1], "weight_entries": [5]}', encoding="utf-8"
        )
        with pytest.raises(ValidationError):
            store.load_preferences()
        with pytest.raises(ValidationError):
            store.load_weight_entries()

    def test_default_path_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LIFT_PROGRESSION_HOME", str(tmp_path))
        assert get_default_history_path() == tmp_path / "history.jsonl"


class TestExerciseCatalog:

    def test_bundled_catalog(self):
        bench = get_exercise("bench-press")
        assert bench.is_strength
        assert "chest" in bench.muscle_groups
        assert not EXERCISE_REGISTRY["running"].is_strength

    def test_unknown_exercise(self):
        assert find_exercise("no-such-lift") is None
        with pytest.raises(ValueError, match="Unknown exercise"):
            get_exercise("no-such-lift")

    def test_shared_muscles(self):
        bench = get_exercise("bench-press")
        assert bench.shares_muscles_with(get_exercise("overhead-press"))
        assert not bench.shares_muscles_with(get_exercise("squat"))
        assert not bench.shares_muscles_with(get_exercise("running"))

    def test_exercise_from_dict_rejects_unknown_muscle(self):
        with pytest.raises(ValueError):
            exercise_from_dict(
                {"exercise_id": "x", "display_name": "X", "exercise_type": "strength",
                 "muscle_groups": ["wings"]}
            )

    def test_user_override_merged(self, tmp_path):
        bundled = tmp_path / "bundled"
        user = tmp_path / "user"
        bundled.mkdir()
        user.mkdir()
        (bundled / "press.yaml").write_text(
            "exercise_id: press\ndisplay_name: Press\nexercise_type: strength\n"
            "muscle_groups: [shoulders]\n",
            encoding="utf-8",
        )
        (user / "press.yaml").write_text("display_name: Strict Press\n", encoding="utf-8")
        (user / "dip.yaml").write_text(
            "exercise_id: dip\ndisplay_name: Dip\nexercise_type: strength\n"
            "muscle_groups: [triceps, chest]\n",
            encoding="utf-8",
        )

        loaded = load_exercises_from_yaml(bundled, user)
        assert loaded["press"].display_name == "Strict Press"
        assert loaded["press"].muscle_groups == frozenset({"shoulders"})
        assert "dip" in loaded

    def test_bad_file_skipped_with_warning(self, tmp_path):
        (tmp_path / "broken.yaml").write_text("exercise_id: broken\n", encoding="utf-8")
        (tmp_path / "ok.yaml").write_text(
            "exercise_id: ok\ndisplay_name: Ok\nexercise_type: cardio\n", encoding="utf-8"
        )
        with pytest.warns(UserWarning, match="broken"):
            loaded = load_exercises_from_yaml(tmp_path, tmp_path / "missing")
        assert list(loaded) == ["ok"]
