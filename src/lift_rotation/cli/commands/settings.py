"""Progression settings commands: priority, growth, strategy."""

import json
from dataclasses import replace
from typing import Annotated, Optional

import typer

from ...io.serializers import (
    ValidationError,
    growth_settings_to_dict,
    parse_frequency,
    parse_growth_type,
    parse_strategy,
    priority_rules_to_dict,
    validate_non_negative,
    validate_positive,
    validate_priorities,
)
from .. import views
from ..app import JsonOption, RotationPathOption, app, get_store, load_rotation_or_exit


def _given(**values) -> dict:
    return {k: v for k, v in values.items() if v is not None}


@app.command()
def priority(
    rotation_path: RotationPathOption = None,
    rep_priority: Annotated[Optional[int], typer.Option("--rep-priority", help="Rank of the rep lever (1-3)")] = None,
    set_priority: Annotated[Optional[int], typer.Option("--set-priority", help="Rank of the set lever (1-3)")] = None,
    weight_priority: Annotated[Optional[int], typer.Option("--weight-priority", help="Rank of the weight lever (1-3)")] = None,
    rep_min: Annotated[Optional[int], typer.Option("--rep-min", help="Reps after a set/weight step")] = None,
    rep_max: Annotated[Optional[int], typer.Option("--rep-max", help="Most reps per set")] = None,
    set_min: Annotated[Optional[int], typer.Option("--set-min", help="Sets after a weight step")] = None,
    set_max: Annotated[Optional[int], typer.Option("--set-max", help="Most sets")] = None,
    multiplier: Annotated[
        Optional[float],
        typer.Option("--multiplier", help="Reps must stay above multiplier × sets"),
    ] = None,
    weight_range: Annotated[
        Optional[float],
        typer.Option("--weight-range", help="Largest allowed single weight change"),
    ] = None,
    weight_increment: Annotated[
        Optional[float],
        typer.Option("--weight-increment", help="Smallest loadable weight step"),
    ] = None,
    tolerance: Annotated[
        Optional[float],
        typer.Option("--tolerance", help="Allowed overshoot of the target load (optimize strategy)"),
    ] = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show or change the lever ranking and bounds.

    Without options the current rules are printed.  Priorities must end up
    as a permutation of 1, 2, 3:

      lift-rotation priority --rep-priority 2 --set-priority 3 --weight-priority 1
    """
    store = get_store(rotation_path)
    rotation = load_rotation_or_exit(store)

    changes = _given(
        rep_priority=rep_priority,
        set_priority=set_priority,
        weight_priority=weight_priority,
        rep_min=rep_min,
        rep_max=rep_max,
        set_min=set_min,
        set_max=set_max,
        reps_to_sets_multiplier=multiplier,
        weight_range=weight_range,
        weight_increment=weight_increment,
        over_estimate_tolerance=tolerance,
    )

    rules = rotation.priority_rules
    if changes:
        try:
            for key in ("rep_min", "rep_max", "set_min", "set_max", "weight_range", "weight_increment"):
                if key in changes:
                    validate_positive(changes[key], key)
            for key in ("reps_to_sets_multiplier", "over_estimate_tolerance"):
                if key in changes:
                    validate_non_negative(changes[key], key)
            rules = validate_priorities(replace(rules, **changes))
        except ValidationError as e:
            views.print_error(str(e))
            raise typer.Exit(1)

        rotation = replace(rotation, priority_rules=rules)
        store.save_rotation(rotation)

    if json_out:
        print(json.dumps(priority_rules_to_dict(rules), indent=2))
        return

    if changes:
        views.print_success("Priority rules updated")
    views.print_priority_rules(rules)


@app.command()
def growth(
    rotation_path: RotationPathOption = None,
    growth_type: Annotated[
        Optional[str],
        typer.Option("--type", "-t", help="Growth type: linear | percent | sigmoid"),
    ] = None,
    amount: Annotated[
        Optional[float],
        typer.Option("--amount", "-a", help="Weight units (linear) or percent (percent, sigmoid)"),
    ] = None,
    frequency: Annotated[
        Optional[str],
        typer.Option("--frequency", "-f", help="When to progress: day | rotation | week"),
    ] = None,
    decay_rate: Annotated[
        Optional[float],
        typer.Option("--decay-rate", help="Sigmoid decay in percent per iteration"),
    ] = None,
    reset_iterations: Annotated[
        bool,
        typer.Option("--reset-iterations", help="Restart the sigmoid curve from zero"),
    ] = False,
    json_out: JsonOption = False,
) -> None:
    """
    Show or change how fast and how often weight grows.

      lift-rotation growth --type sigmoid --amount 5 --decay-rate 0.01 --frequency rotation
    """
    store = get_store(rotation_path)
    rotation = load_rotation_or_exit(store)

    settings = rotation.growth_settings
    try:
        changes = _given(
            growth_type=parse_growth_type(growth_type) if growth_type is not None else None,
            frequency=parse_frequency(frequency) if frequency is not None else None,
            amount=validate_non_negative(amount, "amount") if amount is not None else None,
            decay_rate=(
                validate_non_negative(decay_rate, "decay rate") if decay_rate is not None else None
            ),
        )
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if reset_iterations:
        changes["iteration_count"] = 0

    if changes:
        settings = replace(settings, **changes)
        rotation = replace(rotation, growth_settings=settings)
        store.save_rotation(rotation)

    if json_out:
        print(json.dumps(growth_settings_to_dict(settings), indent=2))
        return

    if changes:
        views.print_success("Growth settings updated")
    views.print_growth_settings(settings)


@app.command()
def strategy(
    name: Annotated[
        Optional[str],
        typer.Argument(help="cascade (one lever per step) | optimize (closest load match)"),
    ] = None,
    rotation_path: RotationPathOption = None,
) -> None:
    """Show or change the progression strategy."""
    store = get_store(rotation_path)
    rotation = load_rotation_or_exit(store)

    if name is None:
        views.console.print(f"Strategy: [bold]{rotation.strategy}[/bold]")
        return

    try:
        chosen = parse_strategy(name)
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    store.save_rotation(replace(rotation, strategy=chosen))
    views.print_success(f"Strategy set to {chosen}")
