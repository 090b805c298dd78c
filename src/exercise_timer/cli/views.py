"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of libraries, plans and the
running timer.
"""

from rich.console import Console
from rich.table import Table

from ..core.config import NO_EQUIPMENT
from ..core.library import ImportConflict, MergeResult
from ..core.models import Exercise, ExerciseChangeEvent, SessionPlan

console = Console()


def format_mm_ss(seconds: int) -> str:
    """
    Convert seconds to zero-padded MM:SS.

    Minutes are not wrapped into hours: 3661 → "61:01".

    Raises:
        ValueError: If seconds is negative
    """
    if seconds < 0:
        raise ValueError(f"seconds must be non-negative, got {seconds}")
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes:02d}:{secs:02d}"


def _fmt_equipment(exercise: Exercise) -> str:
    required = sorted(exercise.required_equipment)
    return ", ".join(required) if required else NO_EQUIPMENT


def _difficulty_bar(difficulty: float) -> str:
    """Five-step bar: 0.5 → ▮, 2.0 → ▮▮▮▮▮."""
    steps = max(1, min(5, round((difficulty - 0.5) / 0.375) + 1))
    return "▮" * steps


def print_library(exercises: list[Exercise]) -> None:
    """
    Print the exercise library as a table.

    Args:
        exercises: Exercises to display (already sorted)
    """
    if not exercises:
        console.print("[yellow]The library is empty.[/yellow]")
        return

    table = Table(title="Exercise Library")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Exercise", style="bold")
    table.add_column("Difficulty", justify="right")
    table.add_column("", style="cyan")
    table.add_column("Equipment")
    table.add_column("Enabled", justify="center")

    for i, ex in enumerate(exercises, 1):
        table.add_row(
            str(i),
            ex.name if ex.enabled else f"[dim]{ex.name}[/dim]",
            f"{ex.difficulty:.2f}",
            _difficulty_bar(ex.difficulty),
            _fmt_equipment(ex),
            "✓" if ex.enabled else "—",
        )

    console.print(table)


def print_plan(plan: SessionPlan, title: str = "Session Plan") -> None:
    """Print a generated plan with per-entry and cumulative times."""
    table = Table(title=title)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Exercise", style="bold")
    table.add_column("Difficulty", justify="right")
    table.add_column("Time", justify="right", style="green")
    table.add_column("Starts at", justify="right", style="dim")

    elapsed = 0
    for i, entry in enumerate(plan.entries, 1):
        table.add_row(
            str(i),
            entry.name,
            f"{entry.difficulty:.2f}",
            format_mm_ss(entry.duration_seconds),
            format_mm_ss(elapsed),
        )
        elapsed += entry.duration_seconds

    console.print(table)
    console.print(
        f"[bold]Total:[/bold] {format_mm_ss(plan.total_duration_seconds)} "
        f"across {len(plan.entries)} exercises"
    )


def print_exercise_change(event: ExerciseChangeEvent, plan: SessionPlan) -> None:
    """Announce the new current exercise and what follows it."""
    index = event.current_index
    console.print()
    console.print(
        f"[bold cyan]▶ {event.entry.name}[/bold cyan]  "
        f"{format_mm_ss(event.remaining_seconds)}  "
        f"[dim]({index + 1}/{len(plan.entries)})[/dim]"
    )
    if index + 1 < len(plan.entries):
        console.print(f"[dim]  Next: {plan.entries[index + 1].name}[/dim]")


def print_countdown(remaining_seconds: int, progress: int) -> None:
    """Print one countdown line."""
    console.print(f"  {format_mm_ss(remaining_seconds)}  [dim]{progress}%[/dim]")


def print_conflicts(conflicts: list[ImportConflict]) -> None:
    """List import conflicts (same name, different difficulty)."""
    table = Table(title="Import Conflicts")
    table.add_column("Exercise", style="bold")
    table.add_column("Existing", justify="right")
    table.add_column("Imported", justify="right")
    for c in conflicts:
        table.add_row(c.name, f"{c.existing_difficulty:.2f}", f"{c.imported_difficulty:.2f}")
    console.print(table)


def print_merge_result(result: MergeResult) -> None:
    """Summarize an import merge."""
    console.print(
        f"[green]Added {len(result.added)}[/green], "
        f"[blue]updated {len(result.updated)}[/blue], "
        f"[dim]skipped {len(result.skipped)}[/dim]"
    )
    for name in result.added:
        console.print(f"  [green]+ {name}[/green]")
    for name in result.updated:
        console.print(f"  [blue]~ {name}[/blue]")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {message}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {message}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")


def confirm_action(message: str) -> bool:
    """
    Prompt user for confirmation.

    Args:
        message: Confirmation message

    Returns:
        True if confirmed, False otherwise
    """
    response = console.input(f"{message} [y/N]: ")
    return response.lower() in ("y", "yes")
