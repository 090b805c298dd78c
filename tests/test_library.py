"""
Tests for the exercise model and the in-memory ExerciseLibrary.

Covers validation of exercise records, CRUD operations, and the import
merge with conflict resolution.
"""

import pytest

from exercise_timer.core.config import clamp_difficulty
from exercise_timer.core.errors import InvalidExerciseData
from exercise_timer.core.exercises import DEFAULT_EXERCISES, get_default_exercise
from exercise_timer.core.library import ExerciseLibrary, ImportConflict
from exercise_timer.core.models import Exercise, ScheduledExercise, SessionConfig, SessionPlan


class TestExerciseValidation:
    """Exercise construction rules."""

    def test_name_is_trimmed(self):
        assert Exercise("  Plank ", 1.5).name == "Plank"

    @pytest.mark.parametrize("name", ["", "   "])
    def test_empty_name_rejected(self, name):
        with pytest.raises(InvalidExerciseData):
            Exercise(name, 1.0)

    @pytest.mark.parametrize("difficulty", [0.4, 2.1, "hard", True, None])
    def test_bad_difficulty_rejected(self, difficulty):
        with pytest.raises(InvalidExerciseData):
            Exercise("Plank", difficulty)

    def test_difficulty_bounds_inclusive(self):
        assert Exercise("Easy", 0.5).difficulty == 0.5
        assert Exercise("Hard", 2).difficulty == 2.0

    def test_equipment_normalized(self):
        ex = Exercise("Row", 1.0, [" Band ", "Band"])
        assert ex.equipment == frozenset({"Band"})

    def test_equipment_string_rejected(self):
        with pytest.raises(InvalidExerciseData):
            Exercise("Row", 1.0, "Band")

    def test_errors_are_value_errors(self):
        with pytest.raises(ValueError):
            Exercise("Plank", 3.0)

    def test_clamp_difficulty_rounds(self):
        assert clamp_difficulty(1.2 + 0.1) == 1.3
        assert clamp_difficulty(0.1) == 0.5
        assert clamp_difficulty(9) == 2.0


class TestPlanModels:
    """SessionConfig and SessionPlan consistency."""

    def test_from_minutes(self):
        config = SessionConfig.from_minutes(5, ["None"])
        assert config.duration_seconds == 300
        assert config.equipment_filter == frozenset({"None"})

    def test_total_must_match_entries(self):
        entry = ScheduledExercise(Exercise("Plank", 1.5), 30)
        with pytest.raises(ValueError):
            SessionPlan((entry,), 31)

    def test_empty_plan_rejected(self):
        with pytest.raises(ValueError):
            SessionPlan.from_entries([])

    def test_scheduled_duration_positive(self):
        with pytest.raises(ValueError):
            ScheduledExercise(Exercise("Plank", 1.5), 0)


class TestDefaults:
    """Bundled default exercises."""

    def test_ten_defaults(self):
        assert len(DEFAULT_EXERCISES) == 10
        assert get_default_exercise("Burpees").difficulty == 1.8
        assert get_default_exercise("Wall Sit").equipment == frozenset({"Wall"})

    def test_unknown_default(self):
        with pytest.raises(KeyError):
            get_default_exercise("Handstand")

    def test_with_defaults_sorted(self):
        library = ExerciseLibrary.with_defaults()
        assert library.names() == sorted(library.names())
        assert library.names()[0] == "Burpees"


class TestLibraryOperations:
    """CRUD and toggle."""

    def test_add_and_get(self):
        library = ExerciseLibrary()
        library.add(Exercise("Plank", 1.5))
        assert "Plank" in library
        assert " Plank " in library
        assert library.get("Plank").difficulty == 1.5
        assert len(library) == 1

    def test_duplicate_rejected(self):
        library = ExerciseLibrary([Exercise("Plank", 1.5)])
        with pytest.raises(InvalidExerciseData, match="already exists"):
            library.add(Exercise("Plank", 1.0))

    def test_enumerated_alphabetically(self):
        library = ExerciseLibrary([Exercise("Squats", 1.0), Exercise("Burpees", 1.8)])
        assert [ex.name for ex in library] == ["Burpees", "Squats"]

    def test_update_difficulty(self):
        library = ExerciseLibrary([Exercise("Plank", 1.5)])
        assert library.update_difficulty("Plank", 1.7).difficulty == 1.7
        with pytest.raises(InvalidExerciseData):
            library.update_difficulty("Plank", 2.5)
        with pytest.raises(KeyError):
            library.update_difficulty("Missing", 1.0)

    def test_toggle_enabled(self):
        library = ExerciseLibrary([Exercise("Plank", 1.5)])
        assert library.toggle_enabled("Plank").enabled is False
        assert library.enabled_exercises() == []
        assert library.toggle_enabled("Plank").enabled is True

    def test_delete(self):
        library = ExerciseLibrary([Exercise("Plank", 1.5)])
        library.delete("Plank")
        assert len(library) == 0
        with pytest.raises(KeyError, match="not found"):
            library.delete("Plank")


class TestImportMerge:
    """detect_conflicts() and merge()."""

    @pytest.fixture
    def library(self):
        return ExerciseLibrary([Exercise("Plank", 1.5), Exercise("Squats", 1.0)])

    def test_detect_conflicts(self, library):
        imported = [Exercise("Plank", 1.8), Exercise("Squats", 1.0), Exercise("Row", 1.1)]
        assert library.detect_conflicts(imported) == [ImportConflict("Plank", 1.5, 1.8)]

    def test_merge_keeps_existing_by_default(self, library):
        imported = [Exercise("Plank", 1.8), Exercise("Squats", 1.0), Exercise("Row", 1.1)]
        result = library.merge(imported)

        assert result.added == ["Row"]
        assert result.updated == []
        assert sorted(result.skipped) == ["Plank", "Squats"]
        assert library.get("Plank").difficulty == 1.5

    def test_merge_use_imported(self, library):
        result = library.merge([Exercise("Plank", 1.8)], {"Plank": "use-imported"})
        assert result.updated == ["Plank"]
        assert library.get("Plank").difficulty == 1.8
