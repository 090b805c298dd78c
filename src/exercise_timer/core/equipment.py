"""
Equipment filtering.

An exercise is available when everything it needs is in the user's
equipment filter. Bodyweight exercises list no equipment, or only the
"None" marker, and are always available.

Examples
--------
  equipment {}                 filter {"None"}          → available
  equipment {"None"}           filter {"Dumbbell"}      → available
  equipment {"Wall"}           filter {"None"}          → not available
  equipment {"Wall"}           filter None (all types)  → available
"""

from __future__ import annotations

from typing import Iterable

from .config import NO_EQUIPMENT
from .models import Exercise


def is_available(exercise: Exercise, equipment_filter: frozenset[str] | None) -> bool:
    """
    Return True if the exercise can be done with the filtered equipment.

    Args:
        exercise: Exercise to check
        equipment_filter: Equipment the user has; None means all types

    Returns:
        True if every required item is in the filter
    """
    if equipment_filter is None:
        return True
    return exercise.required_equipment <= equipment_filter


def filter_by_equipment(
    exercises: Iterable[Exercise],
    equipment_filter: frozenset[str] | None,
) -> list[Exercise]:
    """Return exercises satisfiable by the filter, in input order."""
    return [ex for ex in exercises if is_available(ex, equipment_filter)]


def known_equipment(exercises: Iterable[Exercise]) -> list[str]:
    """
    Return every equipment type referenced by the exercises.

    Always includes the "None" marker first so a bodyweight-only filter
    can be offered even for libraries that never mention it.
    """
    seen: set[str] = set()
    for ex in exercises:
        seen.update(ex.required_equipment)
    return [NO_EQUIPMENT] + sorted(seen)
