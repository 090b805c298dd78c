"""
JSON serialization for exercise-timer models.

Handles conversion between dataclasses and JSON-compatible dicts, and
validation of library documents read from disk or imported by the user.

Library document format (version 1):

    {"version": 1,
     "exercises": [{"name": "Plank", "difficulty": 1.5,
                    "equipment": ["None"], "enabled": true}, ...]}
"""

import json
from datetime import datetime
from typing import Any, Iterable

from ..core.config import STORAGE_VERSION
from ..core.errors import InvalidExerciseData
from ..core.exercises.loader import exercise_from_dict
from ..core.models import Exercise, ScheduledExercise, SessionPlan


class ValidationError(Exception):
    """Raised when a library document fails validation."""

    pass


def exercise_to_dict(exercise: Exercise) -> dict[str, Any]:
    """
    Convert Exercise to a JSON-compatible dict.

    Equipment is written as a sorted list so output is stable.
    """
    return {
        "name": exercise.name,
        "difficulty": exercise.difficulty,
        "equipment": sorted(exercise.equipment),
        "enabled": exercise.enabled,
    }


def dict_to_exercise(data: dict[str, Any]) -> Exercise:
    """
    Convert a dict to an Exercise.

    Raises:
        InvalidExerciseData: If the record is malformed
    """
    return exercise_from_dict(data)


def scheduled_exercise_to_dict(entry: ScheduledExercise) -> dict[str, Any]:
    """Convert ScheduledExercise to dict."""
    return {
        "exercise": exercise_to_dict(entry.exercise),
        "duration_seconds": entry.duration_seconds,
    }


def dict_to_scheduled_exercise(data: dict[str, Any]) -> ScheduledExercise:
    """Convert dict to ScheduledExercise."""
    try:
        return ScheduledExercise(
            exercise=dict_to_exercise(data["exercise"]),
            duration_seconds=data["duration_seconds"],
        )
    except KeyError as e:
        raise ValidationError(f"Scheduled exercise missing field: {e.args[0]}") from e
    except ValueError as e:
        raise ValidationError(str(e)) from e


def session_plan_to_dict(plan: SessionPlan) -> dict[str, Any]:
    """Convert SessionPlan to dict."""
    return {
        "total_duration_seconds": plan.total_duration_seconds,
        "entries": [scheduled_exercise_to_dict(e) for e in plan.entries],
    }


def dict_to_session_plan(data: dict[str, Any]) -> SessionPlan:
    """Convert dict to SessionPlan."""
    try:
        entries = [dict_to_scheduled_exercise(e) for e in data["entries"]]
        return SessionPlan(tuple(entries), data["total_duration_seconds"])
    except KeyError as e:
        raise ValidationError(f"Session plan missing field: {e.args[0]}") from e
    except ValueError as e:
        raise ValidationError(str(e)) from e


def library_to_document(exercises: Iterable[Exercise]) -> dict[str, Any]:
    """Wrap exercises in the versioned library document."""
    return {
        "version": STORAGE_VERSION,
        "exercises": [exercise_to_dict(ex) for ex in exercises],
    }


def library_to_json(exercises: Iterable[Exercise], indent: int | None = 2) -> str:
    """Serialize exercises as a versioned JSON document."""
    return json.dumps(library_to_document(exercises), indent=indent)


def parse_library_document(data: Any, allow_empty: bool = False) -> list[Exercise]:
    """
    Validate a decoded library document and return its exercises.

    Every record is checked; all record errors are reported together.

    Args:
        data: Decoded JSON value
        allow_empty: Accept a document with no exercises

    Returns:
        Exercises in document order

    Raises:
        ValidationError: If the document or any record is invalid
    """
    if not isinstance(data, dict):
        raise ValidationError("Library data must be a JSON object")

    version = data.get("version", STORAGE_VERSION)
    if isinstance(version, bool) or not isinstance(version, int) or version < 1:
        raise ValidationError(f"Invalid library version: {version!r}")
    if version > STORAGE_VERSION:
        raise ValidationError(
            f"Library version {version} is newer than supported version {STORAGE_VERSION}"
        )

    if "exercises" not in data:
        raise ValidationError("Library data missing required field: exercises")
    records = data["exercises"]
    if not isinstance(records, list):
        raise ValidationError("Exercises field must be an array")
    if not records and not allow_empty:
        raise ValidationError("Library data contains no exercises")

    exercises: list[Exercise] = []
    errors: list[str] = []
    seen: set[str] = set()
    for i, raw in enumerate(records, start=1):
        try:
            ex = dict_to_exercise(raw)
        except InvalidExerciseData as e:
            errors.append(f"#{i}: {e}")
            continue
        if ex.name in seen:
            errors.append(f"#{i}: duplicate exercise name '{ex.name}'")
            continue
        seen.add(ex.name)
        exercises.append(ex)

    if errors:
        raise ValidationError("Invalid exercises: " + "; ".join(errors))
    return exercises


def parse_library_json(text: str, allow_empty: bool = False) -> list[Exercise]:
    """
    Parse and validate a JSON library document.

    Raises:
        ValidationError: If the text is not valid JSON or fails validation
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Failed to parse JSON: {e}") from e
    return parse_library_document(data, allow_empty=allow_empty)


def export_filename(now: datetime | None = None) -> str:
    """Suggested export file name: exercise-library-YYYYMMDD-HHMMSS.json."""
    now = now or datetime.now()
    return f"exercise-library-{now.strftime('%Y%m%d-%H%M%S')}.json"
