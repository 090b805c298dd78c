"""exercise-timer: deterministic workout session generator and countdown timer."""

__version__ = "0.1.0"
