"""
CLI entry point using Typer.

Provides commands for workout sessions and the exercise library:
- plan: Generate and display a session plan
- run: Generate a session and run the countdown timer
- library list/add/set-difficulty/toggle/delete/export/import/reset
"""

import typer

from . import views
from .app import app
from .commands import library, session  # importing registers the commands


@app.callback(invoke_without_command=True)
def main_callback(ctx: typer.Context) -> None:
    """
    Workout session generator and timer. Run without a command for interactive mode.
    """
    if ctx.invoked_subcommand is not None:
        return

    # ── Interactive main menu ───────────────────────────────────────────────
    views.console.print()
    views.console.print("[bold cyan]exercise-timer[/bold cyan] — workout session timer")
    views.console.print()

    menu = {
        "1": ("run",     "Start a session"),
        "2": ("plan",    "Preview a session plan"),
        "3": ("library", "Show exercise library"),
        "0": ("quit",    "Quit"),
    }

    for key, (_, desc) in menu.items():
        views.console.print(f"  \\[{key}] {desc}")

    views.console.print()
    choice = views.console.input("Choose [1]: ").strip() or "1"

    if choice == "0":
        raise typer.Exit(0)

    chosen = menu.get(choice, (None,))[0]
    if chosen is None:
        views.print_error(f"Unknown choice: {choice}")
        raise typer.Exit(1)

    if chosen == "run":
        ctx.invoke(session.run)
    elif chosen == "plan":
        ctx.invoke(session.plan)
    elif chosen == "library":
        ctx.invoke(library.list_exercises)


if __name__ == "__main__":
    app()
