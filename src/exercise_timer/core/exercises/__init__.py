"""
Default exercise library for exercise-timer.

The bundled YAML defines the exercises seeded into a new library.
"""

from .loader import exercise_from_dict, load_exercises_from_yaml
from .registry import DEFAULT_EXERCISES, get_default_exercise, get_default_exercises

__all__ = [
    "DEFAULT_EXERCISES",
    "exercise_from_dict",
    "get_default_exercise",
    "get_default_exercises",
    "load_exercises_from_yaml",
]
