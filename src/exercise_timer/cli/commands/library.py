"""Library commands: list, equipment, add, set-difficulty, toggle, delete, export, import, reset."""

from pathlib import Path
from typing import Annotated, Optional

import typer

from ...core.equipment import known_equipment
from ...core.errors import InvalidExerciseData
from ...core.library import ExerciseLibrary
from ...core.models import Exercise
from ...io.library_store import LibraryStore
from ...io.serializers import ValidationError, export_filename, library_to_json, parse_library_json
from .. import views
from ..app import EquipmentOption, LibraryPathOption, get_store, library_app

NameArgument = Annotated[str, typer.Argument(help="Exercise name")]
ForceOption = Annotated[bool, typer.Option("--force", "-f", help="Skip confirmation")]


def _save(store: LibraryStore, library: ExerciseLibrary) -> None:
    """Persist the library; a failed write is reported, not fatal."""
    if not store.save(library):
        views.print_warning(f"Could not write {store.library_path}; changes are not saved.")


def _lookup(library: ExerciseLibrary, name: str) -> Exercise:
    try:
        return library.get(name)
    except KeyError:
        views.print_error(f"Exercise '{name.strip()}' not found")
        raise typer.Exit(1)


@library_app.command("list")
def list_exercises(
    library_path: LibraryPathOption = None,
    json_out: Annotated[
        bool,
        typer.Option("--json", "-j", help="Output as JSON for machine processing"),
    ] = False,
) -> None:
    """Show all exercises, alphabetically."""
    library = get_store(library_path).load()
    if json_out:
        print(library_to_json(library.exercises()))
        return
    views.print_library(library.exercises())


@library_app.command()
def equipment(library_path: LibraryPathOption = None) -> None:
    """Show the equipment types usable with --equipment."""
    library = get_store(library_path).load()
    for item in known_equipment(library.exercises()):
        views.console.print(item)


@library_app.command()
def add(
    name: NameArgument,
    difficulty: Annotated[
        float,
        typer.Option("--difficulty", "-d", help="Difficulty 0.5 (easy) to 2.0 (hard)"),
    ] = 1.0,
    equipment: EquipmentOption = None,
    library_path: LibraryPathOption = None,
) -> None:
    """Add a new exercise to the library."""
    store = get_store(library_path)
    library = store.load()
    try:
        exercise = library.add(Exercise(name, difficulty, equipment or ()))
    except InvalidExerciseData as e:
        views.print_error(str(e))
        raise typer.Exit(1)
    _save(store, library)
    views.print_success(f"Added {exercise.name} (difficulty {exercise.difficulty:.2f})")


@library_app.command("set-difficulty")
def set_difficulty(
    name: NameArgument,
    difficulty: Annotated[float, typer.Argument(help="New difficulty, 0.5 to 2.0")],
    library_path: LibraryPathOption = None,
) -> None:
    """Change an exercise's difficulty."""
    store = get_store(library_path)
    library = store.load()
    _lookup(library, name)
    try:
        updated = library.update_difficulty(name, difficulty)
    except InvalidExerciseData as e:
        views.print_error(str(e))
        raise typer.Exit(1)
    _save(store, library)
    views.print_success(f"{updated.name} difficulty → {updated.difficulty:.2f}")


@library_app.command()
def toggle(
    name: NameArgument,
    library_path: LibraryPathOption = None,
) -> None:
    """Enable or disable an exercise. Disabled exercises are never scheduled."""
    store = get_store(library_path)
    library = store.load()
    _lookup(library, name)
    updated = library.toggle_enabled(name)
    _save(store, library)
    state = "enabled" if updated.enabled else "disabled"
    views.print_success(f"{updated.name} {state}")


@library_app.command()
def delete(
    name: NameArgument,
    force: ForceOption = False,
    library_path: LibraryPathOption = None,
) -> None:
    """Remove an exercise from the library."""
    store = get_store(library_path)
    library = store.load()
    exercise = _lookup(library, name)

    if not force and not views.confirm_action(f"Delete {exercise.name}?"):
        views.print_info("Cancelled.")
        raise typer.Exit(0)

    library.delete(exercise.name)
    _save(store, library)
    views.print_success(f"Deleted {exercise.name}")


@library_app.command("export")
def export_library(
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Output file (default: exercise-library-<timestamp>.json)"),
    ] = None,
    library_path: LibraryPathOption = None,
) -> None:
    """Export the library as a versioned JSON file."""
    store = get_store(library_path)
    if output is None:
        output = Path(export_filename())
    try:
        output.write_text(store.export_json(), encoding="utf-8")
    except OSError as e:
        views.print_error(f"Failed to export library: {e}")
        raise typer.Exit(1)
    views.print_success(f"Exported library to {output}")


@library_app.command("import")
def import_library(
    file: Annotated[Path, typer.Argument(help="JSON file produced by 'library export'")],
    use_imported: Annotated[
        bool,
        typer.Option("--use-imported", help="Resolve conflicts with the imported difficulty"),
    ] = False,
    library_path: LibraryPathOption = None,
) -> None:
    """
    Import exercises from a JSON file.

    New exercises are added and identical ones skipped. When an imported
    exercise has a different difficulty, the existing value is kept
    unless --use-imported is given.
    """
    try:
        text = file.read_text(encoding="utf-8")
    except OSError as e:
        views.print_error(f"Cannot read {file}: {e}")
        raise typer.Exit(1)
    try:
        imported = parse_library_json(text)
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    store = get_store(library_path)
    library = store.load()
    conflicts = library.detect_conflicts(imported)
    if conflicts:
        views.print_conflicts(conflicts)
        choice = "use-imported" if use_imported else "keep-existing"
        views.print_info(f"Resolving {len(conflicts)} conflict(s): {choice}")
        resolutions = {c.name: choice for c in conflicts}
    else:
        resolutions = {}

    result = library.merge(imported, resolutions)
    _save(store, library)
    views.print_merge_result(result)


@library_app.command()
def reset(
    force: ForceOption = False,
    library_path: LibraryPathOption = None,
) -> None:
    """Replace the library with the default exercises."""
    store = get_store(library_path)
    if not force and not views.confirm_action("Replace the library with the defaults?"):
        views.print_info("Cancelled.")
        raise typer.Exit(0)
    library = ExerciseLibrary.with_defaults()
    _save(store, library)
    views.print_success(f"Library reset to {len(library)} default exercises")
