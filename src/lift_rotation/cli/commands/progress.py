"""Workout flow commands: complete, preview."""

import json
from datetime import datetime
from typing import Annotated, Optional

import typer

from ...core.models import WorkoutSession
from ...core.progression import total_load
from ...core.rotation import (
    RotationError,
    complete_workout,
    day_to_workout_logs,
    preview_day,
)
from ...io.serializers import ValidationError, day_exercise_to_dict, validate_date
from .. import views
from ..app import JsonOption, RotationPathOption, app, get_store, load_rotation_or_exit


def _change_to_dict(change) -> dict:
    return {
        "lever": change.lever,
        "before": day_exercise_to_dict(change.before),
        "after": day_exercise_to_dict(change.after),
        "load_before": total_load(change.before),
        "load_after": total_load(change.after),
    }


@app.command()
def complete(
    rotation_path: RotationPathOption = None,
    date: Annotated[
        Optional[str],
        typer.Option("--date", "-d", help="Workout date (YYYY-MM-DD, default: today)"),
    ] = None,
    log: Annotated[
        bool,
        typer.Option("--log/--no-log", help="Record the finished day in workout history"),
    ] = True,
    notes: Annotated[
        Optional[str],
        typer.Option("--notes", "-n", help="Notes for the logged workout"),
    ] = None,
    json_out: JsonOption = False,
) -> None:
    """
    Finish the current day and move on to the next one.

    When the growth frequency says it is time (every day, after the last day
    of the rotation, or weekly), each exercise of the finished day gets one
    progression step.

      lift-rotation complete
      lift-rotation complete --date 2026-03-02 --no-log
    """
    store = get_store(rotation_path)
    rotation = load_rotation_or_exit(store)

    try:
        if date is not None:
            validate_date(date)
        workout_date = datetime.strptime(date, "%Y-%m-%d") if date else datetime.now()
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    try:
        result = complete_workout(rotation, today=workout_date)
    except RotationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    finished_day = rotation.days[result.completed_day_index]
    store.save_rotation(result.rotation)

    if log and finished_day.exercises:
        store.append_workout(
            WorkoutSession(
                date=workout_date.strftime("%Y-%m-%d"),
                logs=day_to_workout_logs(finished_day),
                notes=notes,
            )
        )

    if json_out:
        print(json.dumps({
            "completed_day": result.completed_day_index + 1,
            "next_day": result.next_day_index + 1,
            "progressed": result.progressed,
            "date": result.rotation.last_workout_date,
            "changes": [_change_to_dict(c) for c in result.changes],
        }, indent=2))
        return

    views.print_completion(result)


@app.command()
def preview(
    rotation_path: RotationPathOption = None,
    day: Annotated[
        Optional[int],
        typer.Option("--day", "-d", help="Day to preview (1-based, default: current day)"),
    ] = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show what the next progression step would be, without applying it.
    """
    store = get_store(rotation_path)
    rotation = load_rotation_or_exit(store)

    day_index = None if day is None else day - 1
    try:
        changes = preview_day(rotation, day_index)
    except RotationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    shown = rotation.current_day_index if day_index is None else day_index

    if json_out:
        print(json.dumps({
            "day": shown + 1,
            "strategy": rotation.strategy,
            "changes": [_change_to_dict(c) for c in changes],
        }, indent=2))
        return

    if not changes:
        views.print_info(f"Day {shown + 1} has no exercises.")
        return

    views.console.print(
        views.format_changes_table(
            changes, title=f"Next step for Day {shown + 1}: {rotation.days[shown].name}"
        )
    )
