"""
Exception types raised by the core.

Each also derives from ValueError so callers that validate dataclass
input with ``except ValueError`` keep working.
"""


class ExerciseTimerError(Exception):
    """Base class for all exercise-timer errors."""

    pass


class InvalidConfiguration(ExerciseTimerError, ValueError):
    """Raised when a session configuration cannot be generated (e.g. duration <= 0)."""

    pass


class EmptyLibrary(ExerciseTimerError, ValueError):
    """Raised when no exercise survives equipment filtering."""

    pass


class InvalidExerciseData(ExerciseTimerError, ValueError):
    """Raised for a malformed exercise record (empty name, bad difficulty, bad equipment)."""

    pass
