"""
Rotation operations: completing a workout, previewing progression, and
editing days and exercises.

All functions return new Rotation instances; the caller persists them.
complete_workout owns the sigmoid iteration counter: it is bumped exactly
once per progression event, never once per exercise.
"""

from dataclasses import dataclass, replace
from datetime import date, datetime

from .engine.config_loader import RotationDefaults
from .models import (
    DayExercise,
    GrowthSettings,
    PriorityRules,
    Rotation,
    RotationDay,
    WorkoutLog,
)
from .optimizer import optimize
from .progression import next_step, should_progress


class RotationError(ValueError):
    """Raised for operations that do not fit the rotation (bad index, no days)."""


@dataclass(frozen=True)
class ExerciseChange:
    """One exercise before and after a progression step."""

    before: DayExercise
    after: DayExercise
    lever: str  # "rep" | "set" | "weight" | "partial" | "optimize" | "none"


@dataclass(frozen=True)
class CompletionResult:
    """Outcome of completing the current day."""

    rotation: Rotation
    progressed: bool
    completed_day_index: int
    next_day_index: int
    changes: list[ExerciseChange]


def progress_exercise(
    exercise: DayExercise,
    rules: PriorityRules,
    growth: GrowthSettings,
    strategy: str = "cascade",
) -> ExerciseChange:
    """
    Advance one exercise with the rotation's selected strategy.

    Unknown strategies use the priority cascade.
    """
    if strategy == "optimize":
        after = optimize(exercise, rules, growth)
        lever = "optimize" if after != exercise else "none"
        return ExerciseChange(exercise, after, lever)

    step = next_step(exercise, rules, growth)
    return ExerciseChange(exercise, step.exercise, step.lever)


def _today_iso(today: date | datetime | None) -> str:
    if today is None:
        today = datetime.now()
    if isinstance(today, datetime):
        today = today.date()
    return today.isoformat()


def _check_day(rotation: Rotation, day_index: int) -> RotationDay:
    if day_index < 0 or day_index >= len(rotation.days):
        raise RotationError(
            f"Day {day_index + 1} out of range (rotation has {len(rotation.days)} days)"
        )
    return rotation.days[day_index]


def _check_exercise(day: RotationDay, exercise_index: int) -> DayExercise:
    if exercise_index < 0 or exercise_index >= len(day.exercises):
        raise RotationError(
            f"Exercise {exercise_index + 1} out of range "
            f"('{day.name}' has {len(day.exercises)} exercises)"
        )
    return day.exercises[exercise_index]


def _with_day(rotation: Rotation, day_index: int, day: RotationDay) -> Rotation:
    days = list(rotation.days)
    days[day_index] = day
    return replace(rotation, days=days)


# =============================================================================
# WORKOUT FLOW
# =============================================================================


def preview_day(rotation: Rotation, day_index: int | None = None) -> list[ExerciseChange]:
    """
    Show what progression would do to a day's exercises, without applying it.

    Args:
        rotation: Rotation to inspect
        day_index: 0-based day (default: current day)

    Returns:
        One ExerciseChange per exercise, in day order
    """
    index = rotation.current_day_index if day_index is None else day_index
    day = _check_day(rotation, index)
    return [
        progress_exercise(
            exercise,
            rotation.priority_rules,
            rotation.growth_settings,
            rotation.strategy,
        )
        for exercise in day.exercises
    ]


def complete_workout(
    rotation: Rotation,
    today: date | datetime | None = None,
) -> CompletionResult:
    """
    Complete the current day and move the rotation to the next one.

    If the growth frequency says it is time, every exercise of the current
    day is progressed; otherwise only the completed flags are reset.  For
    sigmoid growth the iteration counter goes up by one when (and only
    when) a progression happened.

    Args:
        rotation: Current rotation
        today: Completion date (default: now)

    Returns:
        CompletionResult with the updated rotation

    Raises:
        RotationError: If the rotation has no days
    """
    if not rotation.days:
        raise RotationError("Rotation has no days. Add a day first.")

    index = rotation.current_day_index
    day = rotation.days[index]
    total_days = len(rotation.days)
    growth = rotation.growth_settings

    due = should_progress(
        rotation.last_workout_date,
        index,
        total_days,
        growth.frequency,
        today=today,
    )
    progressed = due and bool(day.exercises)

    changes: list[ExerciseChange] = []
    if progressed:
        for exercise in day.exercises:
            change = progress_exercise(
                exercise, rotation.priority_rules, growth, rotation.strategy
            )
            changes.append(replace(change, after=replace(change.after, completed=False)))
        new_exercises = [c.after for c in changes]
        if growth.growth_type == "sigmoid":
            growth = replace(growth, iteration_count=growth.iteration_count + 1)
    else:
        new_exercises = [replace(e, completed=False) for e in day.exercises]

    next_index = (index + 1) % total_days
    updated = _with_day(rotation, index, replace(day, exercises=new_exercises))
    updated = replace(
        updated,
        current_day_index=next_index,
        last_workout_date=_today_iso(today),
        growth_settings=growth,
    )

    return CompletionResult(
        rotation=updated,
        progressed=progressed,
        completed_day_index=index,
        next_day_index=next_index,
        changes=changes,
    )


def select_day(rotation: Rotation, day_index: int) -> Rotation:
    """Manually jump to a day (0-based)."""
    _check_day(rotation, day_index)
    return replace(rotation, current_day_index=day_index)


def toggle_exercise(rotation: Rotation, day_index: int, exercise_index: int) -> Rotation:
    """Flip the completed flag of one exercise."""
    day = _check_day(rotation, day_index)
    exercise = _check_exercise(day, exercise_index)
    exercises = list(day.exercises)
    exercises[exercise_index] = replace(exercise, completed=not exercise.completed)
    return _with_day(rotation, day_index, replace(day, exercises=exercises))


# =============================================================================
# EDITING
# =============================================================================


def new_rotation(
    defaults: RotationDefaults,
    name: str | None = None,
    day_count: int | None = None,
    strategy: str | None = None,
) -> Rotation:
    """
    Build a fresh rotation from configured defaults.

    Days are named "Day 1" .. "Day N" and start empty.
    """
    count = defaults.day_count if day_count is None else day_count
    if count < 0:
        raise RotationError("Day count must be non-negative")
    return Rotation(
        name=name or defaults.rotation_name,
        days=[RotationDay(name=f"Day {i}") for i in range(1, count + 1)],
        priority_rules=replace(defaults.priority_rules),
        growth_settings=replace(defaults.growth_settings),
        strategy=strategy or defaults.strategy,
    )


def add_day(rotation: Rotation, name: str | None = None) -> Rotation:
    """Append an empty day (named "Day N" unless given)."""
    day = RotationDay(name=name or f"Day {len(rotation.days) + 1}")
    return replace(rotation, days=[*rotation.days, day])


def rename_day(rotation: Rotation, day_index: int, name: str) -> Rotation:
    """Give a day a new display name."""
    day = _check_day(rotation, day_index)
    if not name.strip():
        raise RotationError("Day name cannot be empty")
    return _with_day(rotation, day_index, replace(day, name=name))


def remove_day(rotation: Rotation, day_index: int) -> Rotation:
    """
    Delete a day.

    The current-day pointer keeps pointing at the same day when possible,
    and is clamped into range otherwise.
    """
    _check_day(rotation, day_index)
    days = [d for i, d in enumerate(rotation.days) if i != day_index]

    current = rotation.current_day_index
    if day_index < current:
        current -= 1
    if current >= len(days):
        current = 0

    return replace(rotation, days=days, current_day_index=current)


def add_exercise(rotation: Rotation, day_index: int, exercise: DayExercise) -> Rotation:
    """Append an exercise to a day."""
    day = _check_day(rotation, day_index)
    return _with_day(rotation, day_index, replace(day, exercises=[*day.exercises, exercise]))


def update_exercise(
    rotation: Rotation,
    day_index: int,
    exercise_index: int,
    **changes,
) -> Rotation:
    """
    Edit fields of one exercise (name, weight, reps, sets, partial_reps, completed).

    Raises:
        RotationError: On a bad index or unknown field
        ValueError: If the edited values are invalid
    """
    allowed = {"name", "weight", "reps", "sets", "partial_reps", "completed"}
    unknown = set(changes) - allowed
    if unknown:
        raise RotationError(f"Unknown exercise fields: {sorted(unknown)}")

    day = _check_day(rotation, day_index)
    exercise = _check_exercise(day, exercise_index)
    exercises = list(day.exercises)
    exercises[exercise_index] = replace(exercise, **changes)
    return _with_day(rotation, day_index, replace(day, exercises=exercises))


def remove_exercise(rotation: Rotation, day_index: int, exercise_index: int) -> Rotation:
    """Delete one exercise from a day."""
    day = _check_day(rotation, day_index)
    _check_exercise(day, exercise_index)
    exercises = [e for i, e in enumerate(day.exercises) if i != exercise_index]
    return _with_day(rotation, day_index, replace(day, exercises=exercises))


def day_to_workout_logs(day: RotationDay) -> list[WorkoutLog]:
    """Convert a day's prescriptions into workout log entries."""
    return [
        WorkoutLog(
            exercise=e.name,
            weight=e.weight,
            reps=e.reps,
            sets=e.sets,
            partial_reps=e.partial_reps,
            completed=e.completed,
        )
        for e in day.exercises
    ]
