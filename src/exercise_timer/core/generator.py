"""
Session generation for exercise-timer.

Turns a library snapshot and a SessionConfig into a deterministic
SessionPlan. The same inputs always produce the same plan: there is no
randomness, and ties in difficulty keep library order.

Pipeline
--------
  1. filter        keep enabled exercises the equipment filter allows
  2. sort          difficulty ascending (stable)
  3. select        round-robin passes until the nominal time covers the session
  4. allocate      raw = total / sum(difficulty) * difficulty
  5. clamp         floor, then clamp into [min, max] seconds
  6. split         overflow above max → extend the round-robin
  7. reconcile     ±1 s steps, easiest first, until the sum is exact
  8. shape         easiest opens, next-easiest closes the plan; the count
                  from step 3 is nudged when the closing entry would not
                  be easier than the interior
"""

from __future__ import annotations

import math
from typing import Iterable, Sequence

from .engine.config_loader import GeneratorSettings
from .equipment import filter_by_equipment
from .errors import EmptyLibrary, InvalidConfiguration
from .models import Exercise, ScheduledExercise, SessionConfig, SessionPlan


def eligible_exercises(
    exercises: Iterable[Exercise],
    equipment_filter: frozenset[str] | None,
) -> list[Exercise]:
    """
    Return the exercises a session may use, in library order.

    Args:
        exercises: Library snapshot
        equipment_filter: Available equipment; None means all types

    Returns:
        Enabled exercises whose equipment the filter satisfies
    """
    return [ex for ex in filter_by_equipment(exercises, equipment_filter) if ex.enabled]


def sort_by_difficulty(exercises: Iterable[Exercise]) -> list[Exercise]:
    """Sort ascending by difficulty; equal difficulties keep their input order."""
    return sorted(exercises, key=lambda ex: ex.difficulty)


def _max_instances(total_seconds: int, settings: GeneratorSettings) -> int:
    """Largest instance count whose minimum durations still fit the session."""
    return max(1, total_seconds // settings.min_exercise_seconds)


def _select_count(
    ordered: Sequence[Exercise],
    total_seconds: int,
    settings: GeneratorSettings,
) -> int:
    """
    Count round-robin instances needed to cover the session.

    Walks ``ordered`` start to end, repeatedly, adding each instance's
    nominal time (difficulty * nominal seconds) until the cumulative time
    meets the total or one more instance would break the minimum bound.
    """
    limit = _max_instances(total_seconds, settings)
    cumulative = 0.0
    count = 0
    while True:
        cumulative += ordered[count % len(ordered)].difficulty * settings.nominal_exercise_seconds
        count += 1
        if cumulative >= total_seconds or count >= limit:
            return count


def raw_allocation(difficulties: Sequence[float], total_seconds: int) -> list[float]:
    """
    Split ``total_seconds`` proportionally to difficulty.

    base_time = total / sum(difficulties); raw_i = base_time * difficulty_i
    """
    weight_sum = sum(difficulties)
    base_time = total_seconds / weight_sum
    return [base_time * d for d in difficulties]


def clamp_durations(raw: Iterable[float], min_seconds: int, max_seconds: int) -> list[int]:
    """Floor each raw duration and clamp it into [min_seconds, max_seconds]."""
    return [min(max_seconds, max(min_seconds, math.floor(r))) for r in raw]


def reconcile_durations(
    durations: Sequence[int],
    difficulties: Sequence[float],
    target_seconds: int,
    min_seconds: int,
    max_seconds: int,
) -> list[int]:
    """
    Nudge durations one second at a time until they sum to the target.

    Entries are visited in difficulty-ascending order (ties by position),
    wrapping around as often as needed. An entry already at the bound in
    the direction of travel is skipped. When no entry can move, the
    remaining difference is left in place (the target is infeasible).

    Args:
        durations: Clamped integer durations
        difficulties: Difficulty of each entry (same length)
        target_seconds: Required sum
        min_seconds: Lower bound per entry
        max_seconds: Upper bound per entry

    Returns:
        New list of durations
    """
    result = list(durations)
    delta = target_seconds - sum(result)
    if delta == 0:
        return result

    order = sorted(range(len(result)), key=lambda i: difficulties[i])
    step = 1 if delta > 0 else -1
    while delta != 0:
        moved = False
        for i in order:
            if delta == 0:
                break
            candidate = result[i] + step
            if min_seconds <= candidate <= max_seconds:
                result[i] = candidate
                delta -= step
                moved = True
        if not moved:
            break
    return result


def progressive_cycle(cycle_length: int, entry_count: int) -> list[int]:
    """
    Order of the sorted exercises within one round-robin pass.

    Slot 0 holds the easiest exercise. The next-easiest is moved to the
    slot that ends the plan ((entry_count - 1) % cycle_length) so the plan
    also closes on an easy exercise; the rest stay ascending. Applying the
    same order to every pass keeps each pass a permutation of the cycle.

    Returns:
        List mapping slot → index into the difficulty-sorted exercises
    """
    cycle = list(range(cycle_length))
    if entry_count < 3 or cycle_length < 3:
        return cycle
    closing = (entry_count - 1) % cycle_length
    if closing > 1:
        cycle.pop(1)
        cycle.insert(closing, 1)
    return cycle


def is_progressive(difficulties: Sequence[float]) -> bool:
    """
    True if the first and last entries are both strictly easier than the
    hardest interior entry. Plans under 3 entries, or with a single
    difficulty throughout, always pass.
    """
    if len(difficulties) < 3 or len(set(difficulties)) == 1:
        return True
    peak = max(difficulties[1:-1])
    return difficulties[0] < peak and difficulties[-1] < peak


def _shaped_difficulties(ordered: Sequence[Exercise], count: int) -> list[float]:
    """Difficulties of a ``count``-instance plan after _shape(), in plan order."""
    cycle = progressive_cycle(len(ordered), count)
    return [ordered[cycle[p % len(ordered)]].difficulty for p in range(count)]


def _fits(ordered: Sequence[Exercise], count: int, total_seconds: int, max_seconds: int) -> bool:
    difficulties = [ordered[i % len(ordered)].difficulty for i in range(count)]
    return max(raw_allocation(difficulties, total_seconds)) <= max_seconds


def _closing_count(
    ordered: Sequence[Exercise],
    count: int,
    total_seconds: int,
    settings: GeneratorSettings,
) -> int:
    """
    Move the instance count so the shaped plan closes on an easy exercise.

    Two exercises alternating an even number of times (A B A B) end on
    the harder one; A B A B A does not. Larger counts are tried first,
    then smaller ones; a candidate must keep every raw allocation within
    the upper bound. ``count`` is returned unchanged when nothing works.
    """
    if is_progressive(_shaped_difficulties(ordered, count)):
        return count
    limit = _max_instances(total_seconds, settings)
    for candidate in [*range(count + 1, limit + 1), *range(count - 1, 0, -1)]:
        if not _fits(ordered, candidate, total_seconds, settings.max_exercise_seconds):
            continue
        if is_progressive(_shaped_difficulties(ordered, candidate)):
            return candidate
    return count


def _shape(entries: list[ScheduledExercise], cycle_length: int) -> list[ScheduledExercise]:
    """Reorder round-robin entries pass by pass using progressive_cycle()."""
    cycle = progressive_cycle(cycle_length, len(entries))
    shaped: list[ScheduledExercise] = []
    for position in range(len(entries)):
        pass_start = (position // cycle_length) * cycle_length
        shaped.append(entries[pass_start + cycle[position % cycle_length]])
    return shaped


def generate_session(
    config: SessionConfig,
    library_exercises: Iterable[Exercise],
    settings: GeneratorSettings | None = None,
) -> SessionPlan:
    """
    Generate a complete session plan from a configuration and a library.

    Args:
        config: Duration and equipment filter
        library_exercises: Library snapshot (alphabetical order expected)
        settings: Duration bounds and policies; defaults from config.py

    Returns:
        SessionPlan whose durations sum to config.duration_seconds (or to
        the minimum bound when the request is shorter than one exercise)

    Raises:
        InvalidConfiguration: If duration is not positive, or shorter than
            one exercise while short sessions are disallowed
        EmptyLibrary: If no exercise survives filtering
    """
    if settings is None:
        settings = GeneratorSettings()

    total = config.duration_seconds
    if total <= 0:
        raise InvalidConfiguration(f"duration_seconds must be positive, got {total}")
    if total < settings.min_exercise_seconds and not settings.allow_short_sessions:
        raise InvalidConfiguration(
            f"Session of {total}s is shorter than one exercise "
            f"({settings.min_exercise_seconds}s)"
        )

    pool = eligible_exercises(library_exercises, config.equipment_filter)
    if not pool:
        raise EmptyLibrary("No exercise in the library matches the equipment filter")

    ordered = sort_by_difficulty(pool)
    count = _select_count(ordered, total, settings)
    limit = _max_instances(total, settings)

    # Overflow beyond the cap is spread over extra round-robin instances.
    while count < limit and not _fits(ordered, count, total, settings.max_exercise_seconds):
        count += 1
    count = _closing_count(ordered, count, total, settings)

    instances = [ordered[i % len(ordered)] for i in range(count)]
    difficulties = [ex.difficulty for ex in instances]
    raw = raw_allocation(difficulties, total)

    durations = clamp_durations(raw, settings.min_exercise_seconds, settings.max_exercise_seconds)
    durations = reconcile_durations(
        durations,
        difficulties,
        total,
        settings.min_exercise_seconds,
        settings.max_exercise_seconds,
    )

    entries = [ScheduledExercise(ex, secs) for ex, secs in zip(instances, durations)]
    entries = _shape(entries, len(ordered))
    return SessionPlan.from_entries(entries)
