"""
YAML → typed settings loader.

Loads generator settings from settings.yaml (bundled with the package) and
optionally merges user overrides from ~/.exercise-timer/settings.yaml.

Usage:
    from exercise_timer.core.engine.config_loader import load_generator_settings
    settings = load_generator_settings()
    settings.max_exercise_seconds  # 120 unless overridden

If the bundled YAML cannot be parsed, all values fall back to the Python
defaults from config.py (no crash). If the user override file exists but
has parse errors or invalid values, a warning is issued and the file is
ignored.
"""

from __future__ import annotations

import importlib.resources
import os
import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from ..config import (
    ALLOW_SHORT_SESSIONS,
    APP_DIR_NAME,
    DEFAULT_SESSION_MINUTES,
    HOME_ENV_VAR,
    MAX_EXERCISE_SECONDS,
    MIN_EXERCISE_SECONDS,
    NOMINAL_EXERCISE_SECONDS,
)


@dataclass(frozen=True)
class GeneratorSettings:
    """Tunable parameters of the session generator."""

    min_exercise_seconds: int = MIN_EXERCISE_SECONDS
    max_exercise_seconds: int = MAX_EXERCISE_SECONDS
    nominal_exercise_seconds: int = NOMINAL_EXERCISE_SECONDS
    default_session_minutes: int = DEFAULT_SESSION_MINUTES
    allow_short_sessions: bool = ALLOW_SHORT_SESSIONS

    def __post_init__(self) -> None:
        if self.min_exercise_seconds <= 0:
            raise ValueError("min_exercise_seconds must be positive")
        if self.max_exercise_seconds < self.min_exercise_seconds:
            raise ValueError("max_exercise_seconds must be >= min_exercise_seconds")
        if self.nominal_exercise_seconds <= 0:
            raise ValueError("nominal_exercise_seconds must be positive")
        if self.default_session_minutes <= 0:
            raise ValueError("default_session_minutes must be positive")


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML file; return {} if it is unreadable or not a mapping."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as exc:
        warnings.warn(f"exercise-timer: cannot read {path} ({exc}); ignoring it.", stacklevel=3)
        return {}
    return data if isinstance(data, dict) else {}


def _deep_merge(base: dict, override: dict) -> dict:
    """Merge *override* over *base* section by section; *base* is not modified."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def _settings_from_dict(cfg: dict[str, Any]) -> GeneratorSettings:
    """Convert the merged ``generator`` section to GeneratorSettings."""
    section = cfg.get("generator", {}) or {}
    if not isinstance(section, dict):
        raise ValueError("'generator' section must be a mapping")
    return GeneratorSettings(
        min_exercise_seconds=int(section.get("min_exercise_seconds", MIN_EXERCISE_SECONDS)),
        max_exercise_seconds=int(section.get("max_exercise_seconds", MAX_EXERCISE_SECONDS)),
        nominal_exercise_seconds=int(
            section.get("nominal_exercise_seconds", NOMINAL_EXERCISE_SECONDS)
        ),
        default_session_minutes=int(
            section.get("default_session_minutes", DEFAULT_SESSION_MINUTES)
        ),
        allow_short_sessions=bool(section.get("allow_short_sessions", ALLOW_SHORT_SESSIONS)),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def get_app_dir() -> Path:
    """Return the per-user data directory (EXERCISE_TIMER_HOME or ~/.exercise-timer)."""
    override = os.environ.get(HOME_ENV_VAR)
    if override:
        return Path(override).expanduser()
    home = Path(os.environ.get("HOME", "~")).expanduser()
    return home / APP_DIR_NAME


def get_bundled_yaml_path() -> Path | None:
    """Return the path to the bundled settings.yaml, or None if not found."""
    ref = importlib.resources.files("exercise_timer").joinpath("settings.yaml")
    if ref.is_file():
        with importlib.resources.as_file(ref) as p:
            return p
    return None


def get_user_yaml_path() -> Path | None:
    """Return the user's settings.yaml if it exists, else None."""
    p = get_app_dir() / "settings.yaml"
    return p if p.exists() else None


def load_settings_dict() -> dict[str, Any]:
    """
    Load and merge raw settings from YAML sources.

    Load order (later overrides earlier):
    1. Bundled src/exercise_timer/settings.yaml
    2. User override in the app directory

    Returns:
        Merged dict of settings sections. Empty dict if no YAML available.
    """
    config: dict[str, Any] = {}

    bundled = get_bundled_yaml_path()
    if bundled is not None:
        config = _deep_merge(config, _load_yaml_file(bundled))

    user = get_user_yaml_path()
    if user is not None:
        user_cfg = _load_yaml_file(user)
        if user_cfg:
            try:
                _settings_from_dict(_deep_merge(config, user_cfg))
            except (TypeError, ValueError) as exc:
                warnings.warn(
                    f"exercise-timer: ignoring invalid user settings {user} ({exc}).",
                    stacklevel=2,
                )
            else:
                config = _deep_merge(config, user_cfg)

    return config


def load_generator_settings() -> GeneratorSettings:
    """Return GeneratorSettings built from the merged YAML settings."""
    try:
        return _settings_from_dict(load_settings_dict())
    except (TypeError, ValueError) as exc:
        warnings.warn(
            f"exercise-timer: invalid bundled settings ({exc}); using defaults.",
            stacklevel=2,
        )
        return GeneratorSettings()
