"""Session commands: plan, run, and the pause menu used while running."""

import json
import time
from typing import Annotated, Optional

import typer

from ...core.config import DIFFICULTY_STEP
from ...core.engine.config_loader import GeneratorSettings, load_generator_settings
from ...core.errors import EmptyLibrary, InvalidConfiguration
from ...core.generator import generate_session
from ...core.library import ExerciseLibrary
from ...core.models import Phase, SessionConfig, SessionPlan
from ...core.timer import SessionController
from ...io.serializers import session_plan_to_dict
from .. import views
from ..app import EquipmentOption, LibraryPathOption, app, equipment_filter, get_store

MinutesOption = Annotated[
    Optional[int],
    typer.Option("--minutes", "-m", help="Session length in minutes (default from settings: 5)"),
]
SecondsOption = Annotated[
    Optional[int],
    typer.Option("--seconds", "-s", help="Session length in seconds (overrides --minutes)"),
]


def _build_config(
    minutes: int | None,
    seconds: int | None,
    equipment: list[str] | None,
    settings: GeneratorSettings,
) -> SessionConfig:
    """Resolve CLI duration options into a SessionConfig."""
    if seconds is not None:
        return SessionConfig(seconds, equipment_filter(equipment))
    if minutes is None:
        minutes = settings.default_session_minutes
    return SessionConfig.from_minutes(minutes, equipment_filter(equipment))


def _generate(
    library: ExerciseLibrary,
    minutes: int | None,
    seconds: int | None,
    equipment: list[str] | None,
    settings: GeneratorSettings,
) -> tuple[SessionConfig, SessionPlan]:
    """Generate a plan, turning core errors into a clean CLI exit."""
    try:
        config = _build_config(minutes, seconds, equipment, settings)
        plan = generate_session(config, library.exercises(), settings)
    except InvalidConfiguration as e:
        views.print_error(str(e))
        raise typer.Exit(1)
    except EmptyLibrary as e:
        views.print_error(str(e))
        views.print_info("Add exercises with 'library add' or widen --equipment.")
        raise typer.Exit(1)
    if plan.total_duration_seconds != config.duration_seconds:
        views.print_warning(
            f"Requested {config.duration_seconds}s is shorter than one exercise; "
            f"the session lasts {plan.total_duration_seconds}s."
        )
    return config, plan


@app.command()
def plan(
    minutes: MinutesOption = None,
    seconds: SecondsOption = None,
    equipment: EquipmentOption = None,
    library_path: LibraryPathOption = None,
    json_out: Annotated[
        bool,
        typer.Option("--json", "-j", help="Output as JSON for machine processing"),
    ] = False,
) -> None:
    """
    Generate and show a session plan without starting the timer.

    The same library and options always produce the same plan.
    """
    settings = load_generator_settings()
    library = get_store(library_path).load()
    _, session_plan = _generate(library, minutes, seconds, equipment, settings)

    if json_out:
        print(json.dumps(session_plan_to_dict(session_plan), indent=2))
        return

    views.print_plan(session_plan)


def _pause_menu(controller: SessionController) -> bool:
    """
    Interactive controls shown after Ctrl-C.

    Returns:
        True to keep running, False to stop the session
    """
    while True:
        entry = controller.current_entry
        views.console.print()
        views.console.print(
            f"[bold yellow]Paused[/bold yellow] — {entry.name} "
            f"{views.format_mm_ss(controller.remaining_seconds)} left, "
            f"{controller.progress_percentage()}% done"
        )
        views.console.print(
            "  [r] Resume   [s] Skip exercise   [+] Harder next time   "
            "[-] Easier next time   [0] Restart   [q] Quit"
        )
        choice = views.console.input("Choose [r]: ").strip().lower() or "r"

        if choice == "r":
            controller.resume()
            return True
        if choice == "s":
            controller.skip_current()
            controller.resume()
            return True
        if choice in ("+", "-"):
            delta = DIFFICULTY_STEP if choice == "+" else -DIFFICULTY_STEP
            updated = controller.adjust_difficulty(delta)
            if updated is not None:
                views.print_info(f"{updated.name} difficulty → {updated.difficulty:.2f}")
            continue
        if choice == "0":
            controller.restart()
            controller.start()
            return True
        if choice == "q":
            return False
        views.print_error(f"Unknown choice: {choice}")


@app.command()
def run(
    minutes: MinutesOption = None,
    seconds: SecondsOption = None,
    equipment: EquipmentOption = None,
    library_path: LibraryPathOption = None,
    tick_interval: Annotated[
        float,
        typer.Option("--tick-interval", help="Seconds between timer ticks (0 = as fast as possible)"),
    ] = 1.0,
) -> None:
    """
    Generate a session and run the countdown timer.

    Press Ctrl-C to pause: from the pause menu you can resume, skip the
    current exercise, or make it harder/easier for future sessions.
    """
    settings = load_generator_settings()
    store = get_store(library_path)
    library = store.load()
    config, session_plan = _generate(library, minutes, seconds, equipment, settings)
    before = {ex.name: ex.difficulty for ex in library.exercises()}

    controller = SessionController(session_plan, library, config.equipment_filter, settings)

    @controller.on_exercise_change
    def _announce(event):
        views.print_exercise_change(event, controller.plan)

    @controller.on_tick
    def _countdown(event):
        if event.remaining_seconds > 0 and (
            event.remaining_seconds % 10 == 0 or event.remaining_seconds <= 3
        ):
            views.print_countdown(event.remaining_seconds, controller.progress_percentage())

    @controller.on_complete
    def _done(event):
        views.console.print()
        views.print_success(
            f"Session complete — {views.format_mm_ss(event.total_elapsed_seconds)} of work."
        )

    views.print_plan(session_plan)
    controller.start()
    while controller.phase is Phase.RUNNING:
        try:
            if tick_interval > 0:
                time.sleep(tick_interval)
            controller.tick()
        except KeyboardInterrupt:
            controller.pause()
            if not _pause_menu(controller):
                break

    if controller.phase is not Phase.COMPLETED:
        views.print_info(f"Stopped at {controller.progress_percentage()}%.")

    changed = [ex for ex in library.exercises() if before.get(ex.name) != ex.difficulty]
    if changed:
        if store.save(library):
            for ex in changed:
                views.print_info(f"Saved {ex.name} difficulty {ex.difficulty:.2f}")
        else:
            views.print_warning("Difficulty changes could not be saved.")
