"""
Tests for the SessionController state machine.

Plan used throughout (total 120 s):
  A (1.0) 30 s → B (1.2) 40 s → C (0.8) 50 s
"""

import pytest

from exercise_timer.core.library import ExerciseLibrary
from exercise_timer.core.models import (
    CompletionEvent,
    Exercise,
    ExerciseChangeEvent,
    Phase,
    ScheduledExercise,
    SessionPlan,
    TickEvent,
)
from exercise_timer.core.timer import SessionController

A = Exercise("A", 1.0)
B = Exercise("B", 1.2)
C = Exercise("C", 0.8)


def _plan(*items: tuple[Exercise, int]) -> SessionPlan:
    return SessionPlan.from_entries(ScheduledExercise(ex, secs) for ex, secs in items)


@pytest.fixture
def plan():
    return _plan((A, 30), (B, 40), (C, 50))


@pytest.fixture
def library():
    return ExerciseLibrary([A, B, C])


def _ticks(controller: SessionController, n: int) -> None:
    for _ in range(n):
        controller.tick()


class TestLifecycle:
    """start / pause / resume / restart / completion."""

    def test_initial_state(self, plan):
        controller = SessionController(plan)
        state = controller.state
        assert state.phase is Phase.NOT_STARTED
        assert state.current_index == 0
        assert state.remaining_seconds == 30
        assert state.total_elapsed_seconds == 0
        assert state.plan is plan

    def test_start_emits_first_exercise(self, plan):
        controller = SessionController(plan)
        changes: list[ExerciseChangeEvent] = []
        controller.on_exercise_change(changes.append)

        assert controller.start() is True
        assert controller.phase is Phase.RUNNING
        assert changes == [ExerciseChangeEvent(0, plan.entries[0], 30)]

        # Already running: ignored, no second event
        assert controller.start() is False
        assert len(changes) == 1

    def test_tick_ignored_unless_running(self, plan):
        controller = SessionController(plan)
        assert controller.tick() is False
        assert controller.remaining_seconds == 30
        assert controller.total_elapsed_seconds == 0

    def test_pause_freezes_progress(self, plan):
        controller = SessionController(plan)
        controller.start()
        _ticks(controller, 5)

        assert controller.pause() is True
        assert controller.phase is Phase.PAUSED
        _ticks(controller, 10)
        assert controller.remaining_seconds == 25
        assert controller.total_elapsed_seconds == 5

        assert controller.pause() is False
        assert controller.resume() is True
        assert controller.phase is Phase.RUNNING
        assert controller.resume() is False

    def test_advance_to_next_exercise(self, plan):
        controller = SessionController(plan)
        changes: list[int] = []
        controller.on_exercise_change(lambda e: changes.append(e.current_index))
        controller.start()
        _ticks(controller, 30)

        assert controller.current_index == 1
        assert controller.remaining_seconds == 40
        assert controller.total_elapsed_seconds == 30
        assert changes == [0, 1]

    def test_run_to_completion(self, plan):
        controller = SessionController(plan)
        ticks: list[TickEvent] = []
        done: list[CompletionEvent] = []
        controller.on_tick(ticks.append)
        controller.on_complete(done.append)
        controller.start()
        _ticks(controller, 120)

        assert controller.phase is Phase.COMPLETED
        assert len(ticks) == 120
        assert ticks[0] == TickEvent(0, 29, 1)
        assert ticks[-1] == TickEvent(2, 0, 120)
        assert done == [CompletionEvent(120, plan)]
        assert controller.progress_percentage() == 100

        # Completed: further ticks and starts are ignored
        assert controller.tick() is False
        assert controller.start() is False
        assert len(done) == 1

    def test_restart_from_any_state(self, plan):
        controller = SessionController(plan)
        controller.start()
        _ticks(controller, 45)
        controller.restart()

        assert controller.phase is Phase.NOT_STARTED
        assert controller.current_index == 0
        assert controller.remaining_seconds == 30
        assert controller.total_elapsed_seconds == 0

    def test_progress_percentage(self, plan):
        controller = SessionController(plan)
        assert controller.progress_percentage() == 0
        controller.start()
        _ticks(controller, 30)
        # 30 / 120
        assert controller.progress_percentage() == 25

    def test_progress_rounds_half_up(self):
        controller = SessionController(_plan((A, 40)))
        controller.start()
        controller.tick()
        # 1 / 40 = 2.5 %
        assert controller.progress_percentage() == 3

    def test_listener_decorator_and_clear(self, plan):
        controller = SessionController(plan)
        seen = []

        @controller.on_tick
        def _record(event):
            seen.append(event.remaining_seconds)

        assert callable(_record)
        controller.start()
        controller.tick()
        controller.clear_listeners()
        controller.tick()
        assert seen == [29]


class TestSkip:
    """skip_current() redistributes the skipped entry's remaining time."""

    def test_skip_requires_active_session(self, plan):
        controller = SessionController(plan)
        assert controller.skip_current() is False
        assert controller.plan is plan

    def test_skip_first_entry(self, plan):
        """
        10 s into A: leftover 20, future B 40 + C 50 → target 110.
        scaled: 48.89, 61.11 → 48 + 61 = 109 → +1 to C (easiest) → 48, 62.
        """
        controller = SessionController(plan)
        changes: list[ExerciseChangeEvent] = []
        controller.on_exercise_change(changes.append)
        controller.start()
        _ticks(controller, 10)

        assert controller.skip_current() is True
        new_plan = controller.plan
        assert new_plan is not plan
        assert new_plan.names == ["B", "C"]
        assert new_plan.durations == [48, 62]
        assert controller.current_index == 0
        assert controller.remaining_seconds == 48
        assert changes[-1].entry.name == "B"

        # Remaining time conserved: 20 + 90 == 110
        assert controller.session_total_seconds == 120
        # Original plan untouched
        assert controller.original_plan is plan
        assert plan.durations == [30, 40, 50]

    def test_skip_middle_entry(self, plan):
        """35 s in: B has 35 left, C absorbs it → C 85."""
        controller = SessionController(plan)
        controller.start()
        _ticks(controller, 35)
        controller.skip_current()

        assert controller.plan.names == ["A", "C"]
        assert controller.plan.durations == [30, 85]
        assert controller.current_index == 1
        assert controller.remaining_seconds == 85
        assert controller.session_total_seconds == 120

    def test_skip_last_entry_appends_replacement(self, plan, library):
        """
        80 s in: C has 40 left and nothing follows.
        Replacement: easiest exercise that is neither B (previous) nor C → A.
        """
        controller = SessionController(plan, library)
        controller.start()
        _ticks(controller, 80)
        controller.skip_current()

        assert controller.plan.names == ["A", "B", "A"]
        assert controller.plan.durations == [30, 40, 40]
        assert controller.current_index == 2
        assert controller.remaining_seconds == 40
        assert controller.session_total_seconds == 120

    def test_skip_last_entry_without_library_repeats(self, plan):
        controller = SessionController(plan)
        controller.start()
        _ticks(controller, 80)
        controller.skip_current()
        assert controller.plan.names == ["A", "B", "C"]
        assert controller.plan.durations == [30, 40, 40]

    def test_skip_appends_when_future_is_full(self):
        """
        A 120 → B 120, skip A at once: leftover 120 + B 120 = 240 > one slot.
        Append A at 20 → scaled 205.7, 34.3 → 120, 34 → reconcile +86 onto A.
        """
        full = _plan((A, 120), (B, 120))
        controller = SessionController(full)
        controller.start()
        controller.skip_current()

        assert controller.plan.names == ["B", "A"]
        assert controller.plan.durations == [120, 120]
        assert controller.session_total_seconds == 240

    def test_skip_never_repeats_previous_exercise(self):
        """
        A 30 → B 40 → A 30 → B 40, skip B right after A finishes.
        Joining A to A is not allowed: the second A is folded in,
        leftover 40 + 30 = 70, B absorbs it → A 30, B 110.
        """
        alternating = _plan((A, 30), (B, 40), (A, 30), (B, 40))
        controller = SessionController(alternating)
        controller.start()
        _ticks(controller, 30)
        controller.skip_current()

        names = controller.plan.names
        assert names == ["A", "B"]
        assert all(a != b for a, b in zip(names, names[1:]))
        assert controller.plan.durations == [30, 110]
        assert controller.current_index == 1
        assert controller.session_total_seconds == 140

    def test_skip_fold_then_append(self, library):
        """
        A 30 → C 50 → A 30, skip C at once after A: the last A is folded in,
        nothing follows, so a replacement that is not A is appended.
        Candidates by difficulty: C 0.8, A 1.0, B 1.2; C is excluded as the
        skipped one, A as the previous one → B.
        """
        short = _plan((A, 30), (C, 50), (A, 30))
        controller = SessionController(short, library)
        controller.start()
        _ticks(controller, 30)
        controller.skip_current()

        assert controller.plan.names == ["A", "B"]
        assert controller.plan.durations == [30, 80]
        assert controller.session_total_seconds == 110

    def test_skip_while_paused_keeps_paused(self, plan):
        controller = SessionController(plan)
        controller.start()
        controller.pause()
        assert controller.skip_current() is True
        assert controller.phase is Phase.PAUSED

    def test_restart_restores_original_plan(self, plan):
        controller = SessionController(plan)
        controller.start()
        controller.skip_current()
        controller.restart()
        assert controller.plan is plan
        assert controller.session_total_seconds == 120


class TestAdjustDifficulty:
    """adjust_difficulty() updates the library, not the running plan."""

    def test_updates_library(self, plan, library):
        controller = SessionController(plan, library)
        controller.start()
        _ticks(controller, 3)

        updated = controller.adjust_difficulty(0.1)
        assert updated == Exercise("A", 1.1)
        assert library.get("A").difficulty == 1.1
        # In-progress entry untouched
        assert controller.remaining_seconds == 27
        assert controller.current_entry.difficulty == 1.0

    def test_clamped_to_range(self, plan, library):
        controller = SessionController(plan, library)
        controller.start()
        assert controller.adjust_difficulty(5).difficulty == 2.0
        assert controller.adjust_difficulty(-5).difficulty == 0.5

    def test_noop_when_not_active(self, plan, library):
        controller = SessionController(plan, library)
        assert controller.adjust_difficulty(0.1) is None
        assert library.get("A").difficulty == 1.0

    def test_noop_without_library(self, plan):
        controller = SessionController(plan)
        controller.start()
        assert controller.adjust_difficulty(0.1) is None
