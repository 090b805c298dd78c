"""
Countdown timer and session controller.

SessionController owns the progression state for one SessionPlan:

  NOT_STARTED ──start──▶ RUNNING ◀──start/pause──▶ PAUSED
                            │
                        last tick
                            ▼
                        COMPLETED          (restart → NOT_STARTED from anywhere)

The controller is driven by an external clock calling tick() about once
per second. Every operation is synchronous and runs to completion, so the
state has a single mutator. Calls that do not apply to the current phase
are ignored rather than raising: the clock may tick unconditionally.
"""

from __future__ import annotations

from typing import Callable, TypeVar

from .config import clamp_difficulty
from .engine.config_loader import GeneratorSettings
from .generator import (
    clamp_durations,
    eligible_exercises,
    reconcile_durations,
    sort_by_difficulty,
)
from .library import ExerciseLibrary
from .models import (
    CompletionEvent,
    Exercise,
    ExerciseChangeEvent,
    Phase,
    ScheduledExercise,
    SessionPlan,
    TickEvent,
    TimerState,
)

E = TypeVar("E")
Listener = Callable[[E], None]


class SessionController:
    """
    State machine that runs one session plan.

    Skipping replaces the plan with a new SessionPlan; the plan passed to
    the constructor stays available as ``original_plan`` and is restored by
    restart().
    """

    def __init__(
        self,
        plan: SessionPlan,
        library: ExerciseLibrary | None = None,
        equipment_filter: frozenset[str] | None = None,
        settings: GeneratorSettings | None = None,
    ):
        """
        Args:
            plan: Plan to run
            library: Library used for skip replacements and difficulty
                adjustments; without one, adjust_difficulty() is a no-op
            equipment_filter: Filter the plan was generated with
            settings: Duration bounds used when redistributing skipped time
        """
        self._original_plan = plan
        self._library = library
        self._equipment_filter = equipment_filter
        self._settings = settings or GeneratorSettings()

        self._tick_listeners: list[Listener[TickEvent]] = []
        self._change_listeners: list[Listener[ExerciseChangeEvent]] = []
        self._complete_listeners: list[Listener[CompletionEvent]] = []

        self._reset()

    def _reset(self) -> None:
        self._plan = self._original_plan
        self._index = 0
        self._remaining = self._plan.entries[0].duration_seconds
        self._elapsed = 0
        self._session_total = self._plan.total_duration_seconds
        self._phase = Phase.NOT_STARTED

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def plan(self) -> SessionPlan:
        return self._plan

    @property
    def original_plan(self) -> SessionPlan:
        return self._original_plan

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def remaining_seconds(self) -> int:
        return self._remaining

    @property
    def total_elapsed_seconds(self) -> int:
        return self._elapsed

    @property
    def session_total_seconds(self) -> int:
        """Elapsed time plus all time still scheduled."""
        return self._session_total

    @property
    def current_entry(self) -> ScheduledExercise:
        return self._plan.entries[self._index]

    @property
    def state(self) -> TimerState:
        """Snapshot of the current state."""
        return TimerState(
            plan=self._plan,
            current_index=self._index,
            remaining_seconds=self._remaining,
            total_elapsed_seconds=self._elapsed,
            phase=self._phase,
        )

    def progress_percentage(self) -> int:
        """Whole-session progress, 0–100, rounded half up."""
        if self._session_total <= 0:
            return 0
        pct = (200 * self._elapsed + self._session_total) // (2 * self._session_total)
        return min(100, max(0, pct))

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def on_tick(self, listener: Listener[TickEvent]) -> Listener[TickEvent]:
        """Register a listener called after every tick."""
        self._tick_listeners.append(listener)
        return listener

    def on_exercise_change(
        self, listener: Listener[ExerciseChangeEvent]
    ) -> Listener[ExerciseChangeEvent]:
        """Register a listener called when a new entry becomes current."""
        self._change_listeners.append(listener)
        return listener

    def on_complete(self, listener: Listener[CompletionEvent]) -> Listener[CompletionEvent]:
        """Register a listener called once the last entry finishes."""
        self._complete_listeners.append(listener)
        return listener

    def clear_listeners(self) -> None:
        self._tick_listeners.clear()
        self._change_listeners.clear()
        self._complete_listeners.clear()

    def _emit_change(self) -> None:
        event = ExerciseChangeEvent(self._index, self.current_entry, self._remaining)
        for listener in list(self._change_listeners):
            listener(event)

    # ------------------------------------------------------------------
    # Control
    # ------------------------------------------------------------------

    def start(self) -> bool:
        """
        Start or resume.

        Returns:
            True if the phase changed to RUNNING
        """
        if self._phase not in (Phase.NOT_STARTED, Phase.PAUSED):
            return False
        first_start = self._phase is Phase.NOT_STARTED
        self._phase = Phase.RUNNING
        if first_start:
            self._emit_change()
        return True

    def resume(self) -> bool:
        """Alias of start() for a paused session."""
        if self._phase is not Phase.PAUSED:
            return False
        return self.start()

    def pause(self) -> bool:
        """Pause a running session; index and remaining time are kept as-is."""
        if self._phase is not Phase.RUNNING:
            return False
        self._phase = Phase.PAUSED
        return True

    def restart(self) -> None:
        """Return to the first entry of the original plan, not started."""
        self._reset()

    def tick(self) -> bool:
        """
        Advance the clock by one second.

        Returns:
            True if the tick was applied (the session was running)
        """
        if self._phase is not Phase.RUNNING:
            return False

        self._remaining -= 1
        self._elapsed += 1
        tick_event = TickEvent(self._index, self._remaining, self._elapsed)
        for listener in list(self._tick_listeners):
            listener(tick_event)

        if self._remaining <= 0:
            if self._index >= len(self._plan.entries) - 1:
                self._remaining = 0
                self._phase = Phase.COMPLETED
                done = CompletionEvent(self._elapsed, self._plan)
                for listener in list(self._complete_listeners):
                    listener(done)
            else:
                self._index += 1
                self._remaining = self.current_entry.duration_seconds
                self._emit_change()
        return True

    def skip_current(self) -> bool:
        """
        Drop the current entry and hand its remaining time to later entries.

        The time left on the skipped entry is spread over the future
        entries in proportion to their durations, within the per-exercise
        bounds. A future entry that would directly repeat the previous
        exercise is dropped and its time redistributed too. If there are no
        future entries, or they cannot absorb the time under the upper
        bound, replacement entries are appended from the library. The plan
        is replaced by a new SessionPlan.

        Returns:
            True if an entry was skipped
        """
        if self._phase not in (Phase.RUNNING, Phase.PAUSED):
            return False

        entries = list(self._plan.entries)
        skipped = entries[self._index]
        past = entries[: self._index]
        upcoming = entries[self._index + 1:]
        leftover = self._remaining

        # An upcoming entry that would follow the same exercise is folded
        # into the leftover rather than run twice in a row.
        while past and upcoming and upcoming[0].name == past[-1].name:
            leftover += upcoming.pop(0).duration_seconds

        future = self._redistribute(
            previous=past[-1].exercise if past else None,
            skipped=skipped.exercise,
            future=upcoming,
            leftover=leftover,
        )

        self._plan = SessionPlan.from_entries(past + future)
        self._remaining = self.current_entry.duration_seconds
        self._session_total = self._elapsed + sum(e.duration_seconds for e in future)
        self._emit_change()
        return True

    def adjust_difficulty(self, delta: float) -> Exercise | None:
        """
        Change the library difficulty of the current exercise.

        Only future plans see the new value; the running entry keeps its
        remaining time.

        Returns:
            The updated Exercise, or None if nothing is current or the
            exercise is not in the library
        """
        if self._phase not in (Phase.RUNNING, Phase.PAUSED) or self._library is None:
            return None
        name = self.current_entry.name
        if name not in self._library:
            return None
        current = self._library.get(name)
        return self._library.update_difficulty(name, clamp_difficulty(current.difficulty + delta))

    # ------------------------------------------------------------------
    # Skip helpers
    # ------------------------------------------------------------------

    def _replacement(self, avoid: Exercise | None, skipped: Exercise) -> Exercise:
        """
        Choose an exercise to append after a skip.

        Easiest eligible exercise that differs from both the preceding
        entry and the skipped one; relaxed step by step when the library
        offers nothing else.
        """
        candidates: list[Exercise] = []
        if self._library is not None:
            candidates = sort_by_difficulty(
                eligible_exercises(self._library.exercises(), self._equipment_filter)
            )
        avoid_name = avoid.name if avoid is not None else None
        for excluded in ({avoid_name, skipped.name}, {avoid_name}):
            for ex in candidates:
                if ex.name not in excluded:
                    return ex
        return candidates[0] if candidates else skipped

    def _redistribute(
        self,
        previous: Exercise | None,
        skipped: Exercise,
        future: list[ScheduledExercise],
        leftover: int,
    ) -> list[ScheduledExercise]:
        low = self._settings.min_exercise_seconds
        high = self._settings.max_exercise_seconds
        target = leftover + sum(e.duration_seconds for e in future)

        future = list(future)
        while not future or len(future) * high < target:
            avoid = future[-1].exercise if future else previous
            future.append(ScheduledExercise(self._replacement(avoid, skipped), low))

        current_sum = sum(e.duration_seconds for e in future)
        scaled = [e.duration_seconds * target / current_sum for e in future]
        durations = reconcile_durations(
            clamp_durations(scaled, low, high),
            [e.difficulty for e in future],
            target,
            low,
            high,
        )
        return [ScheduledExercise(e.exercise, d) for e, d in zip(future, durations)]
