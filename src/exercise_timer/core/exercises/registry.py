"""
Default exercise registry.

The default library is loaded from the bundled YAML file at import time.
If no exercise can be loaded a RuntimeError is raised: the application
cannot seed a first-run library without it.
"""

from ..models import Exercise


def _build_registry() -> dict[str, Exercise]:
    from .loader import load_exercises_from_yaml

    loaded = load_exercises_from_yaml()
    if not loaded:
        raise RuntimeError(
            "exercise-timer: no default exercises could be loaded. "
            "Check that src/exercise_timer/exercises/default_library.yaml is present and valid."
        )
    return {ex.name: ex for ex in sorted(loaded, key=lambda e: e.name)}


DEFAULT_EXERCISES: dict[str, Exercise] = _build_registry()


def get_default_exercises() -> list[Exercise]:
    """Return the default exercises sorted by name."""
    return list(DEFAULT_EXERCISES.values())


def get_default_exercise(name: str) -> Exercise:
    """
    Return the default Exercise with the given name.

    Raises:
        KeyError: If the name is not a default exercise
    """
    if name not in DEFAULT_EXERCISES:
        valid = ", ".join(DEFAULT_EXERCISES)
        raise KeyError(f"Unknown default exercise '{name}'. Valid names: {valid}")
    return DEFAULT_EXERCISES[name]
