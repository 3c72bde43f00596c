"""Rotation commands: init, show, and day / exercise editing."""

import json
from typing import Annotated, Optional

import typer

from ...core.engine.config_loader import load_defaults
from ...core.models import DayExercise, Rotation
from ...core.progression import total_load
from ...core.rotation import (
    RotationError,
    add_day,
    add_exercise,
    new_rotation,
    remove_day,
    remove_exercise,
    rename_day,
    select_day,
    toggle_exercise,
    update_exercise,
)
from ...io.serializers import ValidationError, parse_strategy, rotation_to_dict
from .. import views
from ..app import JsonOption, RotationPathOption, app, get_store, load_rotation_or_exit

DayArgument = Annotated[int, typer.Argument(help="Day number (1-based)")]
ExerciseArgument = Annotated[int, typer.Argument(help="Exercise number within the day (1-based)")]


def _apply(store, edit, *args, **kwargs) -> Rotation:
    """Run a rotation edit; on RotationError/ValueError print it and exit 1."""
    rotation = load_rotation_or_exit(store)
    try:
        updated = edit(rotation, *args, **kwargs)
    except (RotationError, ValueError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)
    store.save_rotation(updated)
    return updated


@app.command()
def init(
    rotation_path: RotationPathOption = None,
    name: Annotated[
        Optional[str],
        typer.Option("--name", "-n", help="Rotation name"),
    ] = None,
    days: Annotated[
        Optional[int],
        typer.Option("--days", "-d", help="Number of (empty) days to create"),
    ] = None,
    strategy: Annotated[
        Optional[str],
        typer.Option("--strategy", "-s", help="Progression strategy: cascade | optimize"),
    ] = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing rotation without prompting"),
    ] = False,
) -> None:
    """
    Create a new rotation with default priority rules and growth settings.

    Defaults come from the bundled defaults.yaml, overridable in
    ~/.lift-rotation/defaults.yaml.
    """
    store = get_store(rotation_path)

    if days is not None and days < 0:
        views.print_error("Days must be non-negative")
        raise typer.Exit(1)

    if strategy is not None:
        try:
            strategy = parse_strategy(strategy)
        except ValidationError as e:
            views.print_error(str(e))
            raise typer.Exit(1)

    if store.exists() and not force:
        views.print_warning(f"A rotation already exists at {store.rotation_path}.")
        if not views.confirm_action("Replace it? Workout history and catalog are kept."):
            views.print_info("Cancelled.")
            raise typer.Exit(0)

    rotation = new_rotation(load_defaults(), name=name, day_count=days, strategy=strategy)
    store.init(rotation)

    views.print_success(f"Created rotation '{rotation.name}' with {len(rotation.days)} days")
    views.print_info(f"Saved to {store.rotation_path}")


@app.command()
def show(
    rotation_path: RotationPathOption = None,
    day: Annotated[
        Optional[int],
        typer.Option("--day", "-d", help="Show only this day (1-based)"),
    ] = None,
    today: Annotated[
        bool,
        typer.Option("--today", "-t", help="Show only the current day"),
    ] = False,
    json_out: JsonOption = False,
) -> None:
    """
    Display the rotation: days, exercises, prescriptions and total load.
    """
    store = get_store(rotation_path)
    rotation = load_rotation_or_exit(store)

    day_index: int | None = None
    if today:
        day_index = rotation.current_day_index if rotation.days else None
    elif day is not None:
        if day < 1 or day > len(rotation.days):
            views.print_error(f"Day must be between 1 and {len(rotation.days)}")
            raise typer.Exit(1)
        day_index = day - 1

    if json_out:
        data = rotation_to_dict(rotation)
        for d_dict, d in zip(data["days"], rotation.days):
            for e_dict, e in zip(d_dict["exercises"], d.exercises):
                e_dict["total_load"] = total_load(e)
        if day_index is not None:
            data["days"] = [data["days"][day_index]]
        print(json.dumps(data, indent=2))
        return

    views.print_rotation(rotation, day_index)


@app.command("add-day")
def add_day_cmd(
    rotation_path: RotationPathOption = None,
    name: Annotated[
        Optional[str],
        typer.Option("--name", "-n", help="Day name (default: 'Day N')"),
    ] = None,
) -> None:
    """Append an empty day to the rotation."""
    store = get_store(rotation_path)
    rotation = _apply(store, add_day, name)
    views.print_success(f"Added Day {len(rotation.days)}: {rotation.days[-1].name}")


@app.command("rename-day")
def rename_day_cmd(
    day: DayArgument,
    name: Annotated[str, typer.Argument(help="New day name")],
    rotation_path: RotationPathOption = None,
) -> None:
    """Rename a day."""
    store = get_store(rotation_path)
    _apply(store, rename_day, day - 1, name)
    views.print_success(f"Renamed Day {day} to '{name}'")


@app.command("remove-day")
def remove_day_cmd(
    day: DayArgument,
    rotation_path: RotationPathOption = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Delete without confirmation"),
    ] = False,
) -> None:
    """Delete a day and its exercises."""
    store = get_store(rotation_path)
    rotation = load_rotation_or_exit(store)

    if day < 1 or day > len(rotation.days):
        views.print_error(f"Day must be between 1 and {len(rotation.days)}")
        raise typer.Exit(1)

    target = rotation.days[day - 1]
    if not force and not views.confirm_action(
        f"Delete Day {day}: {target.name} ({len(target.exercises)} exercises)?"
    ):
        views.print_info("Cancelled.")
        raise typer.Exit(0)

    _apply(store, remove_day, day - 1)
    views.print_success(f"Deleted Day {day}: {target.name}")


@app.command("add-exercise")
def add_exercise_cmd(
    day: DayArgument,
    name: Annotated[str, typer.Option("--name", "-n", help="Exercise name")],
    weight: Annotated[float, typer.Option("--weight", "-w", help="Working weight")],
    reps: Annotated[int, typer.Option("--reps", "-r", help="Reps per set")] = 10,
    sets: Annotated[int, typer.Option("--sets", "-s", help="Number of sets")] = 3,
    partial_reps: Annotated[
        int,
        typer.Option("--partial-reps", help="Extra partial reps"),
    ] = 0,
    rotation_path: RotationPathOption = None,
) -> None:
    """
    Add an exercise with its starting prescription to a day.

      lift-rotation add-exercise 1 --name "Bench Press" --weight 135 --reps 10 --sets 3
    """
    store = get_store(rotation_path)
    try:
        exercise = DayExercise(
            name=name, weight=weight, reps=reps, sets=sets, partial_reps=partial_reps
        )
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    rotation = _apply(store, add_exercise, day - 1, exercise)

    rules = rotation.priority_rules
    if not exercise.reps > rules.reps_to_sets_multiplier * exercise.sets:
        views.print_warning(
            f"{exercise.reps} reps ≤ {rules.reps_to_sets_multiplier:g} × {exercise.sets} sets; "
            "the rep lever stays blocked until reps exceed that ratio."
        )
    views.print_success(f"Added {name} to Day {day}: {views.format_exercise(exercise)}")


@app.command("edit-exercise")
def edit_exercise_cmd(
    day: DayArgument,
    exercise: ExerciseArgument,
    name: Annotated[Optional[str], typer.Option("--name", "-n", help="New name")] = None,
    weight: Annotated[Optional[float], typer.Option("--weight", "-w", help="Weight")] = None,
    reps: Annotated[Optional[int], typer.Option("--reps", "-r", help="Reps per set")] = None,
    sets: Annotated[Optional[int], typer.Option("--sets", "-s", help="Sets")] = None,
    partial_reps: Annotated[
        Optional[int],
        typer.Option("--partial-reps", help="Partial reps"),
    ] = None,
    rotation_path: RotationPathOption = None,
) -> None:
    """Change an exercise's name or prescription."""
    changes = {
        k: v
        for k, v in {
            "name": name,
            "weight": weight,
            "reps": reps,
            "sets": sets,
            "partial_reps": partial_reps,
        }.items()
        if v is not None
    }
    if not changes:
        views.print_error(
            "Nothing to change. Pass at least one of --name/--weight/--reps/--sets/--partial-reps."
        )
        raise typer.Exit(1)

    store = get_store(rotation_path)
    rotation = _apply(store, update_exercise, day - 1, exercise - 1, **changes)
    updated = rotation.days[day - 1].exercises[exercise - 1]
    views.print_success(f"Updated {updated.name}: {views.format_exercise(updated)}")


@app.command("remove-exercise")
def remove_exercise_cmd(
    day: DayArgument,
    exercise: ExerciseArgument,
    rotation_path: RotationPathOption = None,
) -> None:
    """Delete an exercise from a day."""
    store = get_store(rotation_path)
    before = load_rotation_or_exit(store)
    _apply(store, remove_exercise, day - 1, exercise - 1)
    removed = before.days[day - 1].exercises[exercise - 1]
    views.print_success(f"Removed {removed.name} from Day {day}")


@app.command()
def toggle(
    exercise: ExerciseArgument,
    rotation_path: RotationPathOption = None,
    day: Annotated[
        Optional[int],
        typer.Option("--day", "-d", help="Day number (default: current day)"),
    ] = None,
) -> None:
    """Mark an exercise of the current day done / not done."""
    store = get_store(rotation_path)
    rotation = load_rotation_or_exit(store)
    day_index = rotation.current_day_index if day is None else day - 1

    rotation = _apply(store, toggle_exercise, day_index, exercise - 1)
    target = rotation.days[day_index].exercises[exercise - 1]
    state = "done" if target.completed else "not done"
    views.print_success(f"{target.name}: {state}")


@app.command("select-day")
def select_day_cmd(
    day: DayArgument,
    rotation_path: RotationPathOption = None,
) -> None:
    """Jump to a specific day of the rotation."""
    store = get_store(rotation_path)
    rotation = _apply(store, select_day, day - 1)
    views.print_success(f"Current day is now Day {day}: {rotation.days[day - 1].name}")
