"""
Progression engine: priority cascade over the rep/set/weight/partial levers.

Given an exercise's current prescription, the rotation's PriorityRules and
GrowthSettings, compute the next prescription.  Levers are tried in the
configured priority order; the first one that can legally advance wins.
Partial reps are always last and always eligible, so the cascade always
produces a change.

Everything here is pure: inputs are never mutated, results are new
instances.  Malformed rules degrade (inverted bounds → partial reps only,
non-positive increment → 1) rather than raise.
"""

import math
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Literal

from .config import (
    FALLBACK_WEIGHT_INCREMENT,
    LEVERS,
    WEEK_DAYS,
    WEIGHT_ROUND_DIGITS,
)
from .models import DayExercise, GrowthSettings, PriorityRules

Lever = Literal["rep", "set", "weight", "partial"]


@dataclass(frozen=True)
class ProgressionStep:
    """The lever the engine pulled and the resulting prescription."""

    lever: Lever
    exercise: DayExercise


# =============================================================================
# HELPER FORMULAS
# =============================================================================


def total_load(exercise: DayExercise) -> float:
    """
    Volume of one prescription.

        load = weight × reps × sets + weight × partial_reps

    Args:
        exercise: Prescription to measure

    Returns:
        Total load in weight units × reps
    """
    return exercise.weight * exercise.reps * exercise.sets + exercise.weight * exercise.partial_reps


def effective_increment(increment: float) -> float:
    """Return a usable rounding unit; non-positive increments become 1."""
    return increment if increment > 0 else FALLBACK_WEIGHT_INCREMENT


def round_weight(weight: float, increment: float) -> float:
    """
    Round a weight to the nearest multiple of the plate increment.

    Halves round up (102.5 → 105 at a 5 lb increment).

    Args:
        weight: Raw weight
        increment: Rounding unit (e.g. 2.5 lb); <= 0 is treated as 1

    Returns:
        Rounded weight
    """
    step = effective_increment(increment)
    return round(math.floor(weight / step + 0.5) * step, WEIGHT_ROUND_DIGITS)


def weight_increase(weight: float, growth: GrowthSettings) -> float:
    """
    Raw weight delta for one progression step.

    linear:  delta = amount
    percent: delta = weight × amount / 100
    sigmoid: p = max(0, amount − decay_rate × iteration_count)
             delta = weight × p / 100

    The sigmoid form gives monotonically shrinking percentage growth as
    iteration_count rises, floored at zero.  Unknown growth types fall back
    to the linear delta.

    Args:
        weight: Current weight
        growth: Growth settings

    Returns:
        Unrounded weight delta
    """
    if growth.growth_type == "percent":
        return weight * (growth.amount / 100)
    if growth.growth_type == "sigmoid":
        percent = max(0.0, growth.amount - growth.decay_rate * growth.iteration_count)
        return weight * (percent / 100)
    return growth.amount


def lever_order(rules: PriorityRules) -> list[Lever]:
    """
    Levers sorted by configured priority, partial reps last.

    Equal priorities keep the canonical rep → set → weight order.
    """
    priorities = {
        "rep": rules.rep_priority,
        "set": rules.set_priority,
        "weight": rules.weight_priority,
    }
    ordered: list[Lever] = sorted(LEVERS, key=lambda lever: priorities[lever])  # type: ignore[arg-type]
    ordered.append("partial")
    return ordered


# =============================================================================
# LEVERS
# =============================================================================


def _try_rep(exercise: DayExercise, rules: PriorityRules) -> DayExercise | None:
    reps = exercise.reps + 1
    if reps > rules.rep_max:
        return None
    if reps <= rules.reps_to_sets_multiplier * exercise.sets:
        return None
    return replace(exercise, reps=reps)


def _try_set(exercise: DayExercise, rules: PriorityRules) -> DayExercise | None:
    sets = exercise.sets + 1
    if sets > rules.set_max:
        return None
    if exercise.reps <= rules.reps_to_sets_multiplier * sets:
        return None
    # New set count restarts the rep ladder from the bottom
    return replace(exercise, sets=sets, reps=max(1, rules.rep_min))


def _try_weight(
    exercise: DayExercise,
    rules: PriorityRules,
    growth: GrowthSettings,
) -> DayExercise | None:
    delta = weight_increase(exercise.weight, growth)
    if abs(delta) > rules.weight_range:
        return None
    new_weight = round_weight(exercise.weight + delta, rules.weight_increment)
    # A delta that rounds away to nothing is not a weight progression
    if new_weight == exercise.weight or new_weight <= 0:
        return None
    return replace(
        exercise,
        weight=new_weight,
        reps=max(1, rules.rep_min),
        sets=max(1, rules.set_min),
        partial_reps=0,
    )


def _try_partial(exercise: DayExercise) -> DayExercise:
    return replace(exercise, partial_reps=exercise.partial_reps + 1)


# =============================================================================
# PUBLIC API
# =============================================================================


def next_step(
    exercise: DayExercise,
    rules: PriorityRules,
    growth: GrowthSettings,
) -> ProgressionStep:
    """
    Run the priority cascade and report which lever advanced.

    Eligibility per lever:
      rep:     reps+1 <= rep_max and reps+1 > multiplier × sets
      set:     sets+1 <= set_max and reps > multiplier × (sets+1);
               result resets reps to rep_min
      weight:  |delta| <= weight_range and the rounded weight changes;
               result resets reps/sets to rep_min/set_min, partials to 0
      partial: always

    With inverted rep or set bounds only the partial lever is tried.

    Args:
        exercise: Current prescription
        rules: Rotation priority rules
        growth: Rotation growth settings

    Returns:
        ProgressionStep with the winning lever and new prescription
    """
    if rules.bounds_inverted:
        return ProgressionStep("partial", _try_partial(exercise))

    for lever in lever_order(rules):
        if lever == "rep":
            result = _try_rep(exercise, rules)
        elif lever == "set":
            result = _try_set(exercise, rules)
        elif lever == "weight":
            result = _try_weight(exercise, rules, growth)
        else:
            result = _try_partial(exercise)
        if result is not None:
            return ProgressionStep(lever, result)

    # Unreachable: partial is always in the order and always eligible
    return ProgressionStep("partial", _try_partial(exercise))


def progress(
    exercise: DayExercise,
    rules: PriorityRules,
    growth: GrowthSettings,
) -> DayExercise:
    """Return the next prescribed state for an exercise (priority cascade)."""
    return next_step(exercise, rules, growth).exercise


def _as_date(value: date | datetime | str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(value[:10], "%Y-%m-%d").date()


def should_progress(
    last_workout_date: date | datetime | str | None,
    current_day_index: int,
    total_days: int,
    frequency: str,
    today: date | datetime | None = None,
) -> bool:
    """
    Decide whether completing the current day triggers a progression.

    day:      always
    rotation: only when the last day of the cycle is completed
    week:     when at least 7 whole days have passed since the last workout
              (never on the very first workout)
    other:    treated as "day"

    Args:
        last_workout_date: Date of the previous completed workout, or None
        current_day_index: 0-based index of the day being completed
        total_days: Number of days in the rotation
        frequency: Growth frequency setting
        today: Reference date (default: now)

    Returns:
        True if the current day's exercises should progress
    """
    if frequency == "rotation":
        return current_day_index == total_days - 1

    if frequency == "week":
        if last_workout_date is None:
            return False
        reference = _as_date(today if today is not None else datetime.now())
        elapsed = (reference - _as_date(last_workout_date)).days
        return elapsed >= WEEK_DAYS

    return True