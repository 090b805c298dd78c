"""
Configuration constants for session generation and the timer.

All adjustable parameters are centralized here. Values that users may
override live in settings.yaml (see core/engine/config_loader.py); the
constants below are the defaults used when no YAML value is present.
"""

from typing import Final

# =============================================================================
# PER-EXERCISE DURATION BOUNDS
# =============================================================================

MIN_EXERCISE_SECONDS: Final[int] = 20  # Shortest slot any exercise may get
MAX_EXERCISE_SECONDS: Final[int] = 120  # Longest slot before the exercise repeats

# Raw time one instance of difficulty 1.0 contributes while selecting
# exercises (round-robin stops once the selection covers the session).
NOMINAL_EXERCISE_SECONDS: Final[int] = 60

# =============================================================================
# DIFFICULTY
# =============================================================================

MIN_DIFFICULTY: Final[float] = 0.5
MAX_DIFFICULTY: Final[float] = 2.0
DIFFICULTY_STEP: Final[float] = 0.1  # Increment used by "harder"/"easier" controls

# =============================================================================
# SESSION DEFAULTS
# =============================================================================

DEFAULT_SESSION_MINUTES: Final[int] = 5

# A request shorter than MIN_EXERCISE_SECONDS still yields one 20 s entry.
# Set to False to reject such requests with InvalidConfiguration instead.
ALLOW_SHORT_SESSIONS: Final[bool] = True

# =============================================================================
# EQUIPMENT
# =============================================================================

NO_EQUIPMENT: Final[str] = "None"  # Marker for "no equipment needed"

# =============================================================================
# PERSISTENCE
# =============================================================================

STORAGE_VERSION: Final[int] = 1
APP_DIR_NAME: Final[str] = ".exercise-timer"
LIBRARY_FILE_NAME: Final[str] = "library.json"
HOME_ENV_VAR: Final[str] = "EXERCISE_TIMER_HOME"


def clamp_difficulty(value: float) -> float:
    """
    Clamp a difficulty into the valid range and round to 0.01.

    Rounding keeps repeated +/- DIFFICULTY_STEP adjustments from
    accumulating float noise (1.2 + 0.1 → 1.3, not 1.3000000000000003).

    Args:
        value: Proposed difficulty

    Returns:
        Difficulty within [MIN_DIFFICULTY, MAX_DIFFICULTY]
    """
    return round(min(MAX_DIFFICULTY, max(MIN_DIFFICULTY, value)), 2)
