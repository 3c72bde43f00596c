"""
CLI entry point using Typer.

Provides commands for rotation management:
- init / show: create and display the rotation
- add-day, rename-day, remove-day, select-day: edit days
- add-exercise, edit-exercise, remove-exercise, toggle: edit exercises
- complete / preview: finish a workout and progress it
- priority, growth, strategy: progression settings
- catalog, catalog-add, catalog-remove: exercise library
- log-workout, show-workouts, delete-workout: workout history
"""

import typer

from . import views
from .app import app, get_store, load_rotation_or_exit

# Importing the command modules registers them on the shared app
from .commands.progress import complete, preview
from .commands.rotation import add_exercise_cmd, init, select_day_cmd, show
from .commands.settings import growth, priority
from .commands.workouts import log_workout, show_workouts


@app.callback(invoke_without_command=True)
def main_callback(ctx: typer.Context) -> None:
    """
    Rotating workout planner. Run without a command for interactive mode.
    """
    if ctx.invoked_subcommand is not None:
        return

    views.console.print()
    views.console.print("[bold cyan]lift-rotation[/bold cyan]: rotating workout planner")
    views.console.print()

    menu = {
        "1": ("today",         "Show today's workout"),
        "2": ("complete",      "Complete today's workout"),
        "3": ("preview",       "Preview next progression"),
        "4": ("show",          "Show the whole rotation"),
        "5": ("add-exercise",  "Add an exercise to a day"),
        "6": ("select-day",    "Jump to another day"),
        "7": ("show-workouts", "Show workout history"),
        "8": ("log-workout",   "Log a workout"),
        "p": ("priority",      "Priority rules"),
        "g": ("growth",        "Growth settings"),
        "i": ("init",          "Create a new rotation"),
        "0": ("quit",          "Quit"),
    }

    for key, (_, desc) in menu.items():
        views.console.print(f"  \\[{key}] {desc}")

    views.console.print()
    choice = views.console.input("Choose [1]: ").strip() or "1"

    if choice == "0":
        raise typer.Exit(0)

    chosen = {k: v[0] for k, v in menu.items()}.get(choice)
    if chosen is None:
        views.print_error(f"Unknown choice: {choice}")
        raise typer.Exit(1)

    if chosen == "today":
        ctx.invoke(show, today=True)
    elif chosen == "complete":
        ctx.invoke(complete)
    elif chosen == "preview":
        ctx.invoke(preview)
    elif chosen == "show":
        ctx.invoke(show)
    elif chosen == "add-exercise":
        _menu_add_exercise(ctx)
    elif chosen == "select-day":
        _menu_select_day(ctx)
    elif chosen == "show-workouts":
        ctx.invoke(show_workouts)
    elif chosen == "log-workout":
        ctx.invoke(log_workout)
    elif chosen == "priority":
        ctx.invoke(priority)
    elif chosen == "growth":
        ctx.invoke(growth)
    elif chosen == "init":
        ctx.invoke(init)


def _prompt_int(label: str, low: int, high: int | None = None, default: int | None = None) -> int:
    """Ask for a whole number in [low, high], re-prompting on bad input."""
    hint = f" [{default}]" if default is not None else ""
    while True:
        raw = views.console.input(f"{label}{hint}: ").strip()
        if not raw and default is not None:
            return default
        try:
            value = int(raw)
        except ValueError:
            views.print_error("Enter a whole number")
            continue
        if value < low or (high is not None and value > high):
            upper = f"–{high}" if high is not None else " or more"
            views.print_error(f"Enter a number {low}{upper}")
            continue
        return value


def _prompt_weight(label: str) -> float:
    while True:
        raw = views.console.input(f"{label}: ").strip()
        try:
            value = float(raw)
            if value <= 0:
                raise ValueError
            return value
        except ValueError:
            views.print_error("Enter a positive number, e.g. 42.5")


def _pick_day(rotation) -> int:
    """List the days and ask for one (1-based)."""
    for i, day in enumerate(rotation.days, 1):
        views.console.print(f"  \\[{i}] {day.name} ({len(day.exercises)} exercises)")
    return _prompt_int(
        "Day", 1, len(rotation.days), default=rotation.current_day_index + 1
    )


def _menu_add_exercise(ctx: typer.Context) -> None:
    """Interactive add-exercise helper called from the main menu."""
    rotation = load_rotation_or_exit(get_store(None))
    if not rotation.days:
        views.print_error("Rotation has no days. Use 'add-day' first.")
        raise typer.Exit(1)

    day = _pick_day(rotation)
    name = ""
    while not name:
        name = views.console.input("Exercise name: ").strip()
    weight = _prompt_weight("Weight")
    reps = _prompt_int("Reps per set", 1, default=10)
    sets = _prompt_int("Sets", 1, default=3)

    ctx.invoke(add_exercise_cmd, day=day, name=name, weight=weight, reps=reps, sets=sets)


def _menu_select_day(ctx: typer.Context) -> None:
    """Interactive select-day helper called from the main menu."""
    rotation = load_rotation_or_exit(get_store(None))
    if not rotation.days:
        views.print_error("Rotation has no days. Use 'add-day' first.")
        raise typer.Exit(1)

    ctx.invoke(select_day_cmd, day=_pick_day(rotation))


if __name__ == "__main__":
    app()
