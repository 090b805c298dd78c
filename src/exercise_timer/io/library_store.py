"""
JSON file storage for the exercise library.

Storage is best-effort: the core runs purely in memory, and a store that
cannot read or write degrades to defaults / the last good copy with a
warning instead of raising.
"""

import os
import warnings
from pathlib import Path
from typing import Iterable

from ..core.config import LIBRARY_FILE_NAME
from ..core.engine.config_loader import get_app_dir
from ..core.exercises.registry import get_default_exercises
from ..core.library import ExerciseLibrary
from ..core.models import Exercise
from .serializers import ValidationError, library_to_json, parse_library_json


def get_default_library_path() -> Path:
    """Return the default library file (app dir / library.json)."""
    return get_app_dir() / LIBRARY_FILE_NAME


class LibraryStore:
    """
    Manages the exercise library stored as one versioned JSON document.

    The first load of a missing or empty file seeds the default
    exercises and writes them back.
    """

    def __init__(self, library_path: str | Path):
        """
        Initialize the library store.

        Args:
            library_path: Path to the JSON library file
        """
        self.library_path = Path(library_path)
        self._last_good: list[Exercise] | None = None

    def load_library(self) -> list[Exercise]:
        """
        Load exercises sorted by name.

        Returns:
            Stored exercises; defaults on first run; the last successfully
            loaded exercises (or defaults) if the file is unreadable
        """
        try:
            text = self.library_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return self._seed_defaults()
        except OSError as e:
            warnings.warn(f"exercise-timer: cannot read {self.library_path} ({e})", stacklevel=2)
            return self._fallback()

        try:
            exercises = parse_library_json(text, allow_empty=True)
        except ValidationError as e:
            warnings.warn(
                f"exercise-timer: ignoring invalid library {self.library_path} ({e})",
                stacklevel=2,
            )
            return self._fallback()

        if not exercises:
            return self._seed_defaults()

        exercises = sorted(exercises, key=lambda ex: ex.name)
        self._last_good = exercises
        return list(exercises)

    def save_library(self, exercises: Iterable[Exercise]) -> bool:
        """
        Write exercises to disk, replacing the file atomically.

        Returns:
            True on success, False if the file could not be written
        """
        exercises = sorted(exercises, key=lambda ex: ex.name)
        tmp_path = self.library_path.with_name(self.library_path.name + ".tmp")
        try:
            self.library_path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(library_to_json(exercises), encoding="utf-8")
            os.replace(tmp_path, self.library_path)
        except OSError as e:
            warnings.warn(f"exercise-timer: cannot save {self.library_path} ({e})", stacklevel=2)
            return False
        self._last_good = exercises
        return True

    def load(self) -> ExerciseLibrary:
        """Load the library as an ExerciseLibrary."""
        return ExerciseLibrary(self.load_library())

    def save(self, library: ExerciseLibrary) -> bool:
        """Persist an ExerciseLibrary."""
        return self.save_library(library.exercises())

    def export_json(self) -> str:
        """Return the current library as an indented JSON document."""
        return library_to_json(self.load_library())

    def _seed_defaults(self) -> list[Exercise]:
        defaults = get_default_exercises()
        self.save_library(defaults)
        self._last_good = defaults
        return list(defaults)

    def _fallback(self) -> list[Exercise]:
        if self._last_good is not None:
            return list(self._last_good)
        return get_default_exercises()
