"""
Tests for JSON serialization and the library file store.
"""

import json
from datetime import datetime

import pytest

from exercise_timer.core.exercises import get_default_exercises
from exercise_timer.core.generator import generate_session
from exercise_timer.core.library import ExerciseLibrary
from exercise_timer.core.models import Exercise, SessionConfig
from exercise_timer.io.library_store import LibraryStore
from exercise_timer.io.serializers import (
    ValidationError,
    dict_to_exercise,
    dict_to_session_plan,
    exercise_to_dict,
    export_filename,
    library_to_json,
    parse_library_json,
    session_plan_to_dict,
)


def _doc(exercises, **extra) -> str:
    return json.dumps({"version": 1, "exercises": exercises, **extra})


class TestSerializers:
    """Record conversion."""

    def test_exercise_dict_shape(self):
        ex = Exercise("Wall Sit", 1.4, ["Wall", "None"], enabled=False)
        assert exercise_to_dict(ex) == {
            "name": "Wall Sit",
            "difficulty": 1.4,
            "equipment": ["None", "Wall"],
            "enabled": False,
        }
        assert dict_to_exercise(exercise_to_dict(ex)) == ex

    def test_missing_optional_fields(self):
        ex = dict_to_exercise({"name": "Plank", "difficulty": 1.5})
        assert ex.equipment == frozenset()
        assert ex.enabled is True

    def test_session_plan_round_trip(self):
        plan = generate_session(SessionConfig(300), get_default_exercises())
        data = json.loads(json.dumps(session_plan_to_dict(plan)))
        assert dict_to_session_plan(data) == plan

    def test_session_plan_total_mismatch(self):
        plan = generate_session(SessionConfig(300), get_default_exercises())
        data = session_plan_to_dict(plan)
        data["total_duration_seconds"] = 299
        with pytest.raises(ValidationError):
            dict_to_session_plan(data)

    def test_export_filename(self):
        assert (
            export_filename(datetime(2026, 1, 2, 3, 4, 5))
            == "exercise-library-20260102-030405.json"
        )


class TestLibraryDocument:
    """parse_library_json() validation."""

    def test_round_trip(self):
        exercises = get_default_exercises()
        assert parse_library_json(library_to_json(exercises)) == exercises

    def test_missing_version_is_v1(self):
        text = json.dumps({"exercises": [{"name": "Plank", "difficulty": 1.5}]})
        assert [ex.name for ex in parse_library_json(text)] == ["Plank"]

    @pytest.mark.parametrize(
        "text, message",
        [
            ("not json", "Failed to parse JSON"),
            ("[]", "must be a JSON object"),
            ('{"version": 2, "exercises": []}', "newer than supported"),
            ('{"version": "1", "exercises": []}', "Invalid library version"),
            ('{"version": 1}', "missing required field: exercises"),
            ('{"version": 1, "exercises": {}}', "must be an array"),
            ('{"version": 1, "exercises": []}', "contains no exercises"),
        ],
    )
    def test_document_errors(self, text, message):
        with pytest.raises(ValidationError, match=message):
            parse_library_json(text)

    def test_empty_allowed_on_request(self):
        assert parse_library_json(_doc([]), allow_empty=True) == []

    def test_record_errors_aggregated(self):
        text = _doc([
            {"name": "", "difficulty": 1.0},
            {"name": "Plank", "difficulty": 1.5},
            {"name": "Row", "difficulty": 5},
            {"name": "Plank", "difficulty": 1.2},
        ])
        with pytest.raises(ValidationError) as exc_info:
            parse_library_json(text)

        message = str(exc_info.value)
        assert message.startswith("Invalid exercises: ")
        assert "#1:" in message
        assert "#2:" not in message
        assert "#3:" in message
        assert "#4: duplicate exercise name 'Plank'" in message


class TestLibraryStore:
    """File-backed persistence."""

    def test_first_load_seeds_defaults(self, tmp_path):
        path = tmp_path / "data" / "library.json"
        store = LibraryStore(path)

        exercises = store.load_library()
        assert len(exercises) == 10
        assert path.exists()
        assert json.loads(path.read_text())["version"] == 1

    def test_save_and_load(self, tmp_path):
        store = LibraryStore(tmp_path / "library.json")
        library = ExerciseLibrary([Exercise("Squats", 1.0), Exercise("Bear Crawl", 1.6, ["None"])])
        assert store.save(library) is True

        loaded = LibraryStore(tmp_path / "library.json").load()
        assert loaded.names() == ["Bear Crawl", "Squats"]
        assert loaded.get("Bear Crawl").equipment == frozenset({"None"})

    def test_empty_document_seeds_defaults(self, tmp_path):
        path = tmp_path / "library.json"
        path.write_text(_doc([]))
        assert len(LibraryStore(path).load_library()) == 10

    def test_invalid_file_falls_back(self, tmp_path):
        path = tmp_path / "library.json"
        path.write_text("{ broken")
        store = LibraryStore(path)

        with pytest.warns(UserWarning, match="ignoring invalid library"):
            exercises = store.load_library()
        assert exercises == get_default_exercises()
        # The broken file is left for the user to inspect
        assert path.read_text() == "{ broken"

    def test_invalid_file_uses_last_good_copy(self, tmp_path):
        path = tmp_path / "library.json"
        store = LibraryStore(path)
        store.save_library([Exercise("Plank", 1.5)])
        assert [ex.name for ex in store.load_library()] == ["Plank"]

        path.write_text('{"version": 9, "exercises": []}')
        with pytest.warns(UserWarning):
            exercises = store.load_library()
        assert [ex.name for ex in exercises] == ["Plank"]

    def test_export_json(self, tmp_path):
        store = LibraryStore(tmp_path / "library.json")
        store.save_library([Exercise("Plank", 1.5)])
        assert parse_library_json(store.export_json()) == [Exercise("Plank", 1.5)]
