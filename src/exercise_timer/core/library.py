"""
In-memory exercise library.

Holds the user's exercises keyed by name and provides the CRUD, toggle
and import-merge operations. Persistence is handled separately by
io/library_store.py; the library itself never touches the disk.
"""

from dataclasses import dataclass, field
from typing import Iterable, Iterator, Literal

from .errors import InvalidExerciseData
from .exercises.registry import get_default_exercises
from .models import Exercise

Resolution = Literal["keep-existing", "use-imported"]


@dataclass(frozen=True)
class ImportConflict:
    """An imported exercise whose name exists with a different difficulty."""

    name: str
    existing_difficulty: float
    imported_difficulty: float


@dataclass
class MergeResult:
    """Names affected by an import merge."""

    added: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)


class ExerciseLibrary:
    """
    Name-keyed exercise collection, always enumerated alphabetically.

    Exercises are immutable; updates replace the stored record.
    """

    def __init__(self, exercises: Iterable[Exercise] = ()):
        self._exercises: dict[str, Exercise] = {}
        for ex in exercises:
            self.add(ex)

    @classmethod
    def with_defaults(cls) -> "ExerciseLibrary":
        """Return a library seeded with the bundled default exercises."""
        return cls(get_default_exercises())

    def __len__(self) -> int:
        return len(self._exercises)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.strip() in self._exercises

    def __iter__(self) -> Iterator[Exercise]:
        return iter(self.exercises())

    def get(self, name: str) -> Exercise:
        """
        Return the exercise with the given name.

        Raises:
            KeyError: If no exercise has that name
        """
        key = name.strip()
        if key not in self._exercises:
            raise KeyError(f"Exercise '{key}' not found")
        return self._exercises[key]

    def exercises(self) -> list[Exercise]:
        """Snapshot of all exercises sorted by name."""
        return [self._exercises[n] for n in sorted(self._exercises)]

    def names(self) -> list[str]:
        return sorted(self._exercises)

    def enabled_exercises(self) -> list[Exercise]:
        """Snapshot of enabled exercises sorted by name."""
        return [ex for ex in self.exercises() if ex.enabled]

    def add(self, exercise: Exercise) -> Exercise:
        """
        Add a new exercise.

        Raises:
            InvalidExerciseData: If an exercise with the same name exists
        """
        if exercise.name in self._exercises:
            raise InvalidExerciseData(f"Exercise with name '{exercise.name}' already exists")
        self._exercises[exercise.name] = exercise
        return exercise

    def update_difficulty(self, name: str, difficulty: float) -> Exercise:
        """
        Replace an exercise's difficulty.

        Raises:
            KeyError: If the exercise does not exist
            InvalidExerciseData: If the difficulty is out of range
        """
        updated = self.get(name).with_difficulty(difficulty)
        self._exercises[updated.name] = updated
        return updated

    def toggle_enabled(self, name: str) -> Exercise:
        """Flip the enabled flag; disabled exercises are never scheduled."""
        current = self.get(name)
        updated = current.with_enabled(not current.enabled)
        self._exercises[updated.name] = updated
        return updated

    def delete(self, name: str) -> Exercise:
        """Remove and return an exercise. Raises KeyError if absent."""
        removed = self.get(name)
        del self._exercises[removed.name]
        return removed

    # ------------------------------------------------------------------
    # Import
    # ------------------------------------------------------------------

    def detect_conflicts(self, imported: Iterable[Exercise]) -> list[ImportConflict]:
        """
        Find imported exercises that clash with existing ones.

        A conflict is the same name with a different difficulty.
        """
        conflicts: list[ImportConflict] = []
        for ex in imported:
            existing = self._exercises.get(ex.name)
            if existing is not None and existing.difficulty != ex.difficulty:
                conflicts.append(ImportConflict(ex.name, existing.difficulty, ex.difficulty))
        return conflicts

    def merge(
        self,
        imported: Iterable[Exercise],
        resolutions: dict[str, Resolution] | None = None,
    ) -> MergeResult:
        """
        Merge imported exercises into the library.

        Identical difficulties are skipped, new names are added, and
        conflicts follow ``resolutions`` (default "keep-existing").

        Args:
            imported: Exercises from an import file
            resolutions: {name: "keep-existing" | "use-imported"}

        Returns:
            MergeResult listing added, skipped and updated names
        """
        resolutions = resolutions or {}
        result = MergeResult()
        for ex in imported:
            existing = self._exercises.get(ex.name)
            if existing is None:
                self._exercises[ex.name] = ex
                result.added.append(ex.name)
            elif existing.difficulty == ex.difficulty:
                result.skipped.append(ex.name)
            elif resolutions.get(ex.name, "keep-existing") == "use-imported":
                self._exercises[ex.name] = ex
                result.updated.append(ex.name)
            else:
                result.skipped.append(ex.name)
        return result
