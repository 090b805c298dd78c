"""Shared Typer app objects, shared option types, and store utility."""

from pathlib import Path
from typing import Annotated, Optional

import typer

from ..io.library_store import LibraryStore, get_default_library_path

# Shared --library-path option type used across all commands
LibraryPathOption = Annotated[
    Optional[Path],
    typer.Option("--library-path", "-p", help="Path to the library JSON file"),
]

# Shared --equipment option; repeat for several items, omit for all equipment
EquipmentOption = Annotated[
    Optional[list[str]],
    typer.Option(
        "--equipment",
        "-q",
        help="Available equipment (repeatable). Use 'None' for bodyweight only; omit for all.",
    ),
]

app = typer.Typer(
    name="exercise-timer",
    help="Generate time-boxed workout sessions from your exercise library and run them.",
    no_args_is_help=False,
    invoke_without_command=True,
)

library_app = typer.Typer(
    name="library",
    help="Manage the exercise library.",
    no_args_is_help=True,
)
app.add_typer(library_app, name="library")


def get_store(library_path: Path | None) -> LibraryStore:
    """Get library store from path or default location."""
    if library_path is None:
        library_path = get_default_library_path()
    return LibraryStore(library_path)


def equipment_filter(equipment: list[str] | None) -> frozenset[str] | None:
    """Convert the --equipment option to a filter (None = all equipment)."""
    if not equipment:
        return None
    return frozenset(item.strip() for item in equipment if item.strip())
