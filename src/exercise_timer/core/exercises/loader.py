"""
YAML → Exercise loader.

Loads the default exercise library from the bundled
``src/exercise_timer/exercises/default_library.yaml`` file. The file
holds a list of flat exercise records matching the Exercise schema.

Usage (internal, called by registry.py):
    from .loader import load_exercises_from_yaml
    exercises = load_exercises_from_yaml()   # list, possibly empty
"""

from __future__ import annotations

import warnings
from pathlib import Path

import yaml

from ..errors import InvalidExerciseData
from ..models import Exercise

_REQUIRED_EXERCISE_FIELDS: frozenset[str] = frozenset({"name", "difficulty"})


def exercise_from_dict(d: dict) -> Exercise:
    """Convert a raw dict (from YAML) to an Exercise.

    Raises InvalidExerciseData if a required field is absent or invalid.
    """
    if not isinstance(d, dict):
        raise InvalidExerciseData(f"Exercise record must be a mapping, got {type(d).__name__}")
    missing = _REQUIRED_EXERCISE_FIELDS - set(d)
    if missing:
        raise InvalidExerciseData(f"Exercise missing fields: {sorted(missing)}")

    return Exercise(
        name=d["name"],
        difficulty=d["difficulty"],
        equipment=d.get("equipment") or (),
        enabled=bool(d.get("enabled", True)),
    )


def _get_bundled_library_path() -> Path | None:
    """Return path to the bundled default_library.yaml, or None if not found."""
    # loader.py lives at src/exercise_timer/core/exercises/loader.py
    # three levels up → src/exercise_timer/
    candidate = Path(__file__).parent.parent.parent / "exercises" / "default_library.yaml"
    return candidate if candidate.is_file() else None


def load_exercises_from_yaml(path: Path | None = None) -> list[Exercise]:
    """Return the exercises defined in a library YAML file.

    Defaults to the bundled library. Malformed records are skipped with a
    warning; a missing or unparsable file yields an empty list so the
    registry can decide how to fail.
    """
    if path is None:
        path = _get_bundled_library_path()
        if path is None:
            return []

    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as exc:
        warnings.warn(f"exercise-timer: cannot load {path} ({exc}).", stacklevel=2)
        return []

    records = data.get("exercises") if isinstance(data, dict) else None
    if not isinstance(records, list):
        warnings.warn(f"exercise-timer: {path} has no 'exercises' list.", stacklevel=2)
        return []

    result: list[Exercise] = []
    seen: set[str] = set()
    for raw in records:
        try:
            ex = exercise_from_dict(raw)
        except InvalidExerciseData as exc:
            warnings.warn(f"exercise-timer: skipping exercise record ({exc})", stacklevel=2)
            continue
        if ex.name in seen:
            warnings.warn(
                f"exercise-timer: skipping duplicate exercise '{ex.name}'", stacklevel=2
            )
            continue
        seen.add(ex.name)
        result.append(ex)
    return result
