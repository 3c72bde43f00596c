"""Exercise catalog and workout history commands."""

import json
from datetime import datetime
from typing import Annotated, Optional

import typer

from ...core.models import CatalogExercise, WorkoutSession
from ...io.serializers import (
    ValidationError,
    catalog_exercise_to_dict,
    parse_log_entry,
    validate_date,
    workout_session_to_dict,
)
from .. import views
from ..app import JsonOption, RotationPathOption, app, get_store


@app.command()
def catalog(
    rotation_path: RotationPathOption = None,
    category: Annotated[
        Optional[str],
        typer.Option("--category", "-c", help="Only show this category"),
    ] = None,
    json_out: JsonOption = False,
) -> None:
    """List the exercises in the catalog."""
    store = get_store(rotation_path)
    try:
        exercises = store.load_catalog()
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if category is not None:
        exercises = [e for e in exercises if (e.category or "").lower() == category.lower()]

    if json_out:
        print(json.dumps([catalog_exercise_to_dict(e) for e in exercises], indent=2))
        return

    views.print_catalog(exercises)


@app.command("catalog-add")
def catalog_add(
    name: Annotated[str, typer.Argument(help="Exercise name")],
    rotation_path: RotationPathOption = None,
    description: Annotated[
        Optional[str],
        typer.Option("--description", "-d", help="Short description"),
    ] = None,
    category: Annotated[
        Optional[str],
        typer.Option("--category", "-c", help="Category, e.g. push, pull, legs"),
    ] = None,
) -> None:
    """Add an exercise to the catalog."""
    store = get_store(rotation_path)
    try:
        store.add_catalog_exercise(
            CatalogExercise(name=name.strip(), description=description, category=category)
        )
    except (ValueError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.print_success(f"Added '{name.strip()}' to the catalog")


@app.command("catalog-remove")
def catalog_remove(
    name: Annotated[str, typer.Argument(help="Exercise name (case-insensitive)")],
    rotation_path: RotationPathOption = None,
) -> None:
    """Remove an exercise from the catalog."""
    store = get_store(rotation_path)
    try:
        removed = store.remove_catalog_exercise(name)
    except KeyError:
        views.print_error(f"Exercise '{name}' not found")
        raise typer.Exit(1)
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.print_success(f"Removed '{removed.name}' from the catalog")


def _interactive_entries() -> list[str]:
    """Prompt for exercise entries one per line until an empty line."""
    views.console.print()
    views.console.print("[bold]Enter exercises one per line.[/bold]")
    views.console.print(
        "  Format: [cyan]NAME @ WEIGHT x REPS x SETS [+ PARTIALS][/cyan]"
        "  e.g. [green]Bench Press @ 135 x 10 x 3[/green]"
    )
    views.console.print("  Press [bold]Enter[/bold] on an empty line when done.\n")

    entries: list[str] = []
    while True:
        raw = views.console.input(f"  Exercise {len(entries) + 1}: ").strip()
        if not raw:
            if entries:
                return entries
            views.print_warning("Enter at least one exercise.")
            continue
        try:
            parse_log_entry(raw)
        except ValidationError as e:
            views.print_error(str(e))
            continue
        entries.append(raw)


@app.command("log-workout")
def log_workout(
    rotation_path: RotationPathOption = None,
    date: Annotated[
        Optional[str],
        typer.Option("--date", "-d", help="Workout date (YYYY-MM-DD, default: today)"),
    ] = None,
    entry: Annotated[
        Optional[list[str]],
        typer.Option("--entry", "-e", help="NAME @ WEIGHT x REPS x SETS [+ PARTIALS]; repeatable"),
    ] = None,
    notes: Annotated[
        Optional[str],
        typer.Option("--notes", "-n", help="Workout notes"),
    ] = None,
) -> None:
    """
    Record a workout in history, independent of the rotation.

    Run without --entry for interactive entry, or supply entries directly:

      lift-rotation log-workout --date 2026-03-02 \\
        -e "Bench Press @ 135 x 10 x 3" -e "Squat @ 185 x 8 x 4 + 2"

    A workout on a date that already has one is merged into it.
    """
    store = get_store(rotation_path)

    if date is None:
        date = datetime.now().strftime("%Y-%m-%d")

    entries = entry or _interactive_entries()

    try:
        validate_date(date)
        logs = [parse_log_entry(e) for e in entries]
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    session = WorkoutSession(date=date, logs=logs, notes=notes)
    store.append_workout(session)

    views.print_success(f"Logged workout for {date}: {len(logs)} exercises")
    views.print_info(f"Total load: {session.total_load:,.0f}")


@app.command("show-workouts")
def show_workouts(
    rotation_path: RotationPathOption = None,
    limit: Annotated[
        Optional[int],
        typer.Option("--limit", "-l", help="Only show the most recent N workouts"),
    ] = None,
    json_out: JsonOption = False,
) -> None:
    """Display workout history as a table."""
    store = get_store(rotation_path)
    try:
        sessions = store.load_workouts()
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if limit is not None:
        sessions = sessions[-limit:] if limit > 0 else []

    if json_out:
        output = []
        for s in sessions:
            d = workout_session_to_dict(s)
            d["total_load"] = s.total_load
            output.append(d)
        print(json.dumps(output, indent=2))
        return

    views.print_workouts(sessions)


@app.command("delete-workout")
def delete_workout(
    workout_id: Annotated[
        int,
        typer.Argument(help="Workout ID to delete (see # column in show-workouts)"),
    ],
    rotation_path: RotationPathOption = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Skip confirmation prompt"),
    ] = False,
) -> None:
    """
    Remove a workout by its ID.

    Use 'show-workouts' to see workout IDs in the # column.
    """
    store = get_store(rotation_path)
    try:
        sessions = store.load_workouts()
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if not sessions:
        views.print_error("No workouts in history.")
        raise typer.Exit(1)

    if workout_id < 1 or workout_id > len(sessions):
        views.print_error(f"Workout ID must be between 1 and {len(sessions)}")
        raise typer.Exit(1)

    target = sessions[workout_id - 1]
    views.console.print(
        f"Workout to delete: [bold]{target.date}[/bold] ({len(target.logs)} exercises)"
    )

    if not force and not views.confirm_action("Delete this workout?"):
        views.print_info("Cancelled.")
        raise typer.Exit(0)

    store.delete_workout_at(workout_id - 1)
    views.print_success(f"Deleted workout #{workout_id}: {target.date}")
