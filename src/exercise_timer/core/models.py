"""
Data models for exercise-timer.

All core dataclasses representing exercises, session configuration,
generated plans and the timer state. Records are frozen: the generator
and controller build new instances instead of mutating existing ones.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from .config import (
    DEFAULT_SESSION_MINUTES,
    MAX_DIFFICULTY,
    MIN_DIFFICULTY,
    NO_EQUIPMENT,
)
from .errors import InvalidConfiguration, InvalidExerciseData


def _normalize_equipment(equipment: object) -> frozenset[str]:
    """Coerce an equipment collection to a frozenset of trimmed names."""
    if isinstance(equipment, (str, bytes)) or not isinstance(equipment, Iterable):
        raise InvalidExerciseData(
            f"equipment must be a collection of strings, got {equipment!r}"
        )
    items: set[str] = set()
    for item in equipment:
        if not isinstance(item, str) or not item.strip():
            raise InvalidExerciseData(f"Invalid equipment item: {item!r}")
        items.add(item.strip())
    return frozenset(items)


def _normalize_filter(equipment_filter: object) -> frozenset[str] | None:
    """Coerce an equipment filter; None means "all equipment types"."""
    if equipment_filter is None:
        return None
    if isinstance(equipment_filter, (str, bytes)) or not isinstance(equipment_filter, Iterable):
        raise InvalidConfiguration(
            f"equipment_filter must be a collection of strings, got {equipment_filter!r}"
        )
    return frozenset(str(item).strip() for item in equipment_filter if str(item).strip())


@dataclass(frozen=True)
class Exercise:
    """
    A single exercise in the library.

    Identity is the name. ``equipment`` is empty (or {"None"}) for
    bodyweight exercises. Disabled exercises stay in the library but are
    never scheduled.
    """

    name: str
    difficulty: float
    equipment: frozenset[str] = field(default_factory=frozenset)
    enabled: bool = True

    def __post_init__(self) -> None:
        """Validate and normalize exercise data."""
        if not isinstance(self.name, str) or not self.name.strip():
            raise InvalidExerciseData("Exercise name must be a non-empty string")
        object.__setattr__(self, "name", self.name.strip())

        if isinstance(self.difficulty, bool) or not isinstance(self.difficulty, (int, float)):
            raise InvalidExerciseData(
                f"Invalid difficulty for {self.name!r}: {self.difficulty!r}"
            )
        if not MIN_DIFFICULTY <= self.difficulty <= MAX_DIFFICULTY:
            raise InvalidExerciseData(
                f"Exercise difficulty must be between {MIN_DIFFICULTY} and "
                f"{MAX_DIFFICULTY}, got {self.difficulty} for {self.name!r}"
            )
        object.__setattr__(self, "difficulty", float(self.difficulty))
        object.__setattr__(self, "equipment", _normalize_equipment(self.equipment))
        object.__setattr__(self, "enabled", bool(self.enabled))

    @property
    def required_equipment(self) -> frozenset[str]:
        """Equipment actually needed, ignoring the "None" marker."""
        return self.equipment - {NO_EQUIPMENT}

    def with_difficulty(self, difficulty: float) -> "Exercise":
        """Return a copy with a new difficulty (validated)."""
        return Exercise(self.name, difficulty, self.equipment, self.enabled)

    def with_enabled(self, enabled: bool) -> "Exercise":
        """Return a copy with the enabled flag set."""
        return Exercise(self.name, self.difficulty, self.equipment, enabled)


@dataclass(frozen=True)
class SessionConfig:
    """
    What the user asked for: a time budget and the equipment at hand.

    ``equipment_filter=None`` admits every exercise.
    """

    duration_seconds: int
    equipment_filter: frozenset[str] | None = None

    def __post_init__(self) -> None:
        """Validate configuration."""
        if isinstance(self.duration_seconds, bool) or not isinstance(self.duration_seconds, int):
            raise InvalidConfiguration(
                f"duration_seconds must be an integer, got {self.duration_seconds!r}"
            )
        if self.duration_seconds <= 0:
            raise InvalidConfiguration(
                f"duration_seconds must be positive, got {self.duration_seconds}"
            )
        object.__setattr__(self, "equipment_filter", _normalize_filter(self.equipment_filter))

    @classmethod
    def from_minutes(
        cls,
        minutes: int = DEFAULT_SESSION_MINUTES,
        equipment_filter: Iterable[str] | None = None,
    ) -> "SessionConfig":
        """Build a configuration from a duration in whole minutes."""
        if isinstance(minutes, bool) or not isinstance(minutes, int) or minutes <= 0:
            raise InvalidConfiguration(f"minutes must be a positive integer, got {minutes!r}")
        return cls(minutes * 60, None if equipment_filter is None else frozenset(equipment_filter))


@dataclass(frozen=True)
class ScheduledExercise:
    """One entry of a session plan: an exercise and its allotted time."""

    exercise: Exercise
    duration_seconds: int

    def __post_init__(self) -> None:
        """Validate scheduled duration."""
        if isinstance(self.duration_seconds, bool) or not isinstance(self.duration_seconds, int):
            raise ValueError(f"duration_seconds must be an integer, got {self.duration_seconds!r}")
        if self.duration_seconds <= 0:
            raise ValueError("duration_seconds must be positive")

    @property
    def name(self) -> str:
        return self.exercise.name

    @property
    def difficulty(self) -> float:
        return self.exercise.difficulty


@dataclass(frozen=True)
class SessionPlan:
    """
    An ordered, time-bounded sequence of scheduled exercises.

    Immutable once built; the controller's skip produces a new plan.
    """

    entries: tuple[ScheduledExercise, ...]
    total_duration_seconds: int

    def __post_init__(self) -> None:
        """Validate plan consistency."""
        object.__setattr__(self, "entries", tuple(self.entries))
        if not self.entries:
            raise ValueError("A session plan needs at least one entry")
        actual = sum(e.duration_seconds for e in self.entries)
        if actual != self.total_duration_seconds:
            raise ValueError(
                f"Plan durations sum to {actual}s but total_duration_seconds "
                f"is {self.total_duration_seconds}s"
            )

    @classmethod
    def from_entries(cls, entries: Iterable[ScheduledExercise]) -> "SessionPlan":
        """Build a plan whose total is the sum of its entries."""
        entries = tuple(entries)
        return cls(entries, sum(e.duration_seconds for e in entries))

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def names(self) -> list[str]:
        """Exercise names in plan order."""
        return [e.name for e in self.entries]

    @property
    def durations(self) -> list[int]:
        """Entry durations in plan order."""
        return [e.duration_seconds for e in self.entries]


class Phase(str, Enum):
    """Lifecycle phase of the session controller."""

    NOT_STARTED = "not_started"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"


@dataclass(frozen=True)
class TimerState:
    """Snapshot of the controller's progression state."""

    plan: SessionPlan
    current_index: int
    remaining_seconds: int
    total_elapsed_seconds: int
    phase: Phase


@dataclass(frozen=True)
class TickEvent:
    """Emitted on every tick while running."""

    current_index: int
    remaining_seconds: int
    total_elapsed_seconds: int


@dataclass(frozen=True)
class ExerciseChangeEvent:
    """Emitted when a new entry becomes current (start, advance, skip)."""

    current_index: int
    entry: ScheduledExercise
    remaining_seconds: int


@dataclass(frozen=True)
class CompletionEvent:
    """Emitted once when the last entry finishes."""

    total_elapsed_seconds: int
    plan: SessionPlan
