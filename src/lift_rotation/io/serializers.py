"""
JSON serialization for rotation and workout data models.

Handles conversion between dataclasses and JSON-compatible dicts, plus
validation and parsing of user-entered values.
"""

import json
import re
from datetime import datetime
from typing import Any

from ..core.config import FREQUENCIES, GROWTH_TYPES, STRATEGIES
from ..core.models import (
    CatalogExercise,
    DayExercise,
    GrowthSettings,
    PriorityRules,
    Rotation,
    RotationDay,
    WorkoutLog,
    WorkoutSession,
)


class ValidationError(Exception):
    """Raised when data validation fails."""

    pass


def validate_date(date_str: str) -> str:
    """
    Validate and normalize date string to ISO format.

    Args:
        date_str: Date string to validate

    Returns:
        Normalized YYYY-MM-DD string

    Raises:
        ValidationError: If date format is invalid
    """
    if not isinstance(date_str, str) or not re.match(r"^\d{4}-\d{2}-\d{2}$", date_str):
        raise ValidationError(f"Invalid date format: {date_str}. Expected YYYY-MM-DD")

    try:
        datetime.strptime(date_str, "%Y-%m-%d")
    except ValueError as e:
        raise ValidationError(f"Invalid date: {date_str}") from e

    return date_str


def validate_non_negative(value: int | float, name: str) -> int | float:
    """
    Validate that a value is non-negative.

    Raises:
        ValidationError: If value is negative
    """
    if value < 0:
        raise ValidationError(f"{name} must be non-negative, got {value}")
    return value


def validate_positive(value: int | float, name: str) -> int | float:
    """
    Validate that a value is positive.

    Raises:
        ValidationError: If value is not positive
    """
    if value <= 0:
        raise ValidationError(f"{name} must be positive, got {value}")
    return value


def validate_choice(value: str, choices: tuple[str, ...], name: str) -> str:
    """
    Validate that a value is one of the allowed names.

    Raises:
        ValidationError: If value is not in choices
    """
    if value not in choices:
        raise ValidationError(f"Invalid {name}: {value}. Must be one of {choices}")
    return value


def validate_priorities(rules: PriorityRules) -> PriorityRules:
    """
    Check that rep/set/weight priorities are a permutation of 1, 2, 3.

    Bounds are not checked here: inverted min/max is tolerated by the
    engine (only partial reps progress), so callers decide whether to warn.

    Raises:
        ValidationError: If priorities are not distinct values 1..3
    """
    priorities = sorted([rules.rep_priority, rules.set_priority, rules.weight_priority])
    if priorities != [1, 2, 3]:
        raise ValidationError(
            "Priorities must be distinct values 1..3 "
            f"(rep={rules.rep_priority}, set={rules.set_priority}, weight={rules.weight_priority})"
        )
    return rules


def _mapping(data: Any, what: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ValidationError(f"Invalid {what}: expected an object, got {type(data).__name__}")
    return data


def _list_field(data: dict[str, Any], key: str) -> list[Any]:
    value = data.get(key, [])
    if not isinstance(value, list):
        raise ValidationError(f"Invalid {key}: expected a list, got {type(value).__name__}")
    return value


def _require(data: dict[str, Any], key: str) -> Any:
    if key not in data:
        raise ValidationError(f"Missing field: {key}")
    return data[key]


# =============================================================================
# DAY EXERCISES AND DAYS
# =============================================================================


def day_exercise_to_dict(exercise: DayExercise) -> dict[str, Any]:
    """Convert DayExercise to JSON-compatible dict."""
    return {
        "name": exercise.name,
        "weight": exercise.weight,
        "reps": exercise.reps,
        "sets": exercise.sets,
        "partial_reps": exercise.partial_reps,
        "completed": exercise.completed,
    }


def dict_to_day_exercise(data: dict[str, Any]) -> DayExercise:
    """
    Convert dict to DayExercise.

    Raises:
        ValidationError: If data is invalid
    """
    _mapping(data, "exercise")
    try:
        return DayExercise(
            name=str(_require(data, "name")),
            weight=float(_require(data, "weight")),
            reps=int(_require(data, "reps")),
            sets=int(_require(data, "sets")),
            partial_reps=int(data.get("partial_reps", 0)),
            completed=bool(data.get("completed", False)),
        )
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid exercise {data.get('name')!r}: {e}") from e


def rotation_day_to_dict(day: RotationDay) -> dict[str, Any]:
    """Convert RotationDay to JSON-compatible dict."""
    return {
        "name": day.name,
        "exercises": [day_exercise_to_dict(e) for e in day.exercises],
    }


def dict_to_rotation_day(data: dict[str, Any]) -> RotationDay:
    """Convert dict to RotationDay."""
    _mapping(data, "day")
    return RotationDay(
        name=str(_require(data, "name")),
        exercises=[dict_to_day_exercise(e) for e in _list_field(data, "exercises")],
    )


# =============================================================================
# PROGRESSION SETTINGS
# =============================================================================


def priority_rules_to_dict(rules: PriorityRules) -> dict[str, Any]:
    """Convert PriorityRules to JSON-compatible dict."""
    return {
        "rep_priority": rules.rep_priority,
        "set_priority": rules.set_priority,
        "weight_priority": rules.weight_priority,
        "rep_min": rules.rep_min,
        "rep_max": rules.rep_max,
        "set_min": rules.set_min,
        "set_max": rules.set_max,
        "reps_to_sets_multiplier": rules.reps_to_sets_multiplier,
        "weight_range": rules.weight_range,
        "weight_increment": rules.weight_increment,
        "over_estimate_tolerance": rules.over_estimate_tolerance,
    }


def dict_to_priority_rules(data: dict[str, Any]) -> PriorityRules:
    """
    Convert dict to PriorityRules.

    Missing keys take the PriorityRules defaults.

    Raises:
        ValidationError: If a value has the wrong type
    """
    _mapping(data, "priority rules")
    defaults = PriorityRules()
    try:
        return PriorityRules(
            rep_priority=int(data.get("rep_priority", defaults.rep_priority)),
            set_priority=int(data.get("set_priority", defaults.set_priority)),
            weight_priority=int(data.get("weight_priority", defaults.weight_priority)),
            rep_min=int(data.get("rep_min", defaults.rep_min)),
            rep_max=int(data.get("rep_max", defaults.rep_max)),
            set_min=int(data.get("set_min", defaults.set_min)),
            set_max=int(data.get("set_max", defaults.set_max)),
            reps_to_sets_multiplier=float(
                data.get("reps_to_sets_multiplier", defaults.reps_to_sets_multiplier)
            ),
            weight_range=float(data.get("weight_range", defaults.weight_range)),
            weight_increment=float(data.get("weight_increment", defaults.weight_increment)),
            over_estimate_tolerance=float(
                data.get("over_estimate_tolerance", defaults.over_estimate_tolerance)
            ),
        )
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid priority rules: {e}") from e


def growth_settings_to_dict(growth: GrowthSettings) -> dict[str, Any]:
    """Convert GrowthSettings to JSON-compatible dict."""
    return {
        "growth_type": growth.growth_type,
        "amount": growth.amount,
        "frequency": growth.frequency,
        "decay_rate": growth.decay_rate,
        "iteration_count": growth.iteration_count,
    }


def dict_to_growth_settings(data: dict[str, Any]) -> GrowthSettings:
    """
    Convert dict to GrowthSettings.

    Unknown growth_type / frequency strings are kept as-is; the engine
    treats them as linear / "day".

    Raises:
        ValidationError: If a value has the wrong type
    """
    _mapping(data, "growth settings")
    defaults = GrowthSettings()
    try:
        return GrowthSettings(
            growth_type=str(data.get("growth_type", defaults.growth_type)),
            amount=float(data.get("amount", defaults.amount)),
            frequency=str(data.get("frequency", defaults.frequency)),
            decay_rate=float(data.get("decay_rate", defaults.decay_rate)),
            iteration_count=int(data.get("iteration_count", defaults.iteration_count)),
        )
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid growth settings: {e}") from e


# =============================================================================
# ROTATION
# =============================================================================


def rotation_to_dict(rotation: Rotation) -> dict[str, Any]:
    """Convert Rotation to JSON-compatible dict."""
    return {
        "name": rotation.name,
        "strategy": rotation.strategy,
        "current_day_index": rotation.current_day_index,
        "last_workout_date": rotation.last_workout_date,
        "priority_rules": priority_rules_to_dict(rotation.priority_rules),
        "growth_settings": growth_settings_to_dict(rotation.growth_settings),
        "days": [rotation_day_to_dict(d) for d in rotation.days],
    }


def dict_to_rotation(data: dict[str, Any]) -> Rotation:
    """
    Convert dict to Rotation.

    Raises:
        ValidationError: If data is invalid
    """
    _mapping(data, "rotation")
    last = data.get("last_workout_date")
    if last is not None:
        validate_date(last)

    strategy = data.get("strategy", "cascade")
    validate_choice(strategy, STRATEGIES, "strategy")

    try:
        return Rotation(
            name=str(_require(data, "name")),
            days=[dict_to_rotation_day(d) for d in _list_field(data, "days")],
            current_day_index=int(data.get("current_day_index", 0)),
            last_workout_date=last,
            priority_rules=dict_to_priority_rules(data.get("priority_rules") or {}),
            growth_settings=dict_to_growth_settings(data.get("growth_settings") or {}),
            strategy=strategy,
        )
    except ValueError as e:
        raise ValidationError(f"Invalid rotation: {e}") from e


# =============================================================================
# CATALOG AND WORKOUT LOG
# =============================================================================


def catalog_exercise_to_dict(exercise: CatalogExercise) -> dict[str, Any]:
    """Convert CatalogExercise to JSON-compatible dict."""
    return {
        "name": exercise.name,
        "description": exercise.description,
        "category": exercise.category,
    }


def dict_to_catalog_exercise(data: dict[str, Any]) -> CatalogExercise:
    """
    Convert dict to CatalogExercise.

    Raises:
        ValidationError: If name is missing
    """
    _mapping(data, "catalog entry")
    try:
        return CatalogExercise(
            name=str(data.get("name") or ""),
            description=data.get("description"),
            category=data.get("category"),
        )
    except ValueError as e:
        raise ValidationError(str(e)) from e


def workout_log_to_dict(log: WorkoutLog) -> dict[str, Any]:
    """Convert WorkoutLog to JSON-compatible dict (compact: omits defaults)."""
    d: dict[str, Any] = {
        "exercise": log.exercise,
        "weight": log.weight,
        "reps": log.reps,
        "sets": log.sets,
    }
    if log.partial_reps:
        d["partial_reps"] = log.partial_reps
    if not log.completed:
        d["completed"] = False
    if log.notes:
        d["notes"] = log.notes
    return d


def dict_to_workout_log(data: dict[str, Any]) -> WorkoutLog:
    """
    Convert dict to WorkoutLog.

    Raises:
        ValidationError: If required fields are missing or invalid
    """
    _mapping(data, "workout log")
    try:
        return WorkoutLog(
            exercise=str(_require(data, "exercise")),
            weight=float(_require(data, "weight")),
            reps=int(_require(data, "reps")),
            sets=int(_require(data, "sets")),
            partial_reps=int(data.get("partial_reps", 0)),
            completed=bool(data.get("completed", True)),
            notes=data.get("notes"),
        )
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid workout log: {e}") from e


def workout_session_to_dict(session: WorkoutSession) -> dict[str, Any]:
    """Convert WorkoutSession to JSON-compatible dict."""
    return {
        "date": session.date,
        "notes": session.notes,
        "logs": [workout_log_to_dict(log) for log in session.logs],
    }


def dict_to_workout_session(data: dict[str, Any]) -> WorkoutSession:
    """
    Convert dict to WorkoutSession.

    Raises:
        ValidationError: If data is invalid
    """
    _mapping(data, "workout session")
    validate_date(_require(data, "date"))
    return WorkoutSession(
        date=data["date"],
        logs=[dict_to_workout_log(log) for log in _list_field(data, "logs")],
        notes=data.get("notes"),
    )


def session_to_json_line(session: WorkoutSession) -> str:
    """
    Serialize a workout session to a single JSON line.

    Returns:
        JSON string (single line, no trailing newline)
    """
    return json.dumps(workout_session_to_dict(session), separators=(",", ":"))


def json_line_to_session(line: str) -> WorkoutSession:
    """
    Deserialize a JSON line to a WorkoutSession.

    Raises:
        ValidationError: If JSON is invalid or data validation fails
    """
    try:
        data = json.loads(line.strip())
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON: {e}") from e

    return dict_to_workout_session(data)


# =============================================================================
# USER INPUT PARSING
# =============================================================================


def parse_log_entry(entry: str) -> WorkoutLog:
    """
    Parse one exercise entry for a logged workout.

    Format: NAME @ WEIGHT x REPS x SETS [+ PARTIALS]
    ('x', 'X' and '×' are accepted; spaces are optional)

    Examples:
        "Bench Press @ 135 x 10 x 3"      → 135 lb, 10 reps, 3 sets
        "Squat@185x8x4+2"                 → 185 lb, 8 reps, 4 sets, 2 partials
        "Pull-up @ 0 x 6 x 3"             → bodyweight, 6 reps, 3 sets

    Args:
        entry: Entry string

    Returns:
        WorkoutLog instance

    Raises:
        ValidationError: If format is invalid
    """
    if not entry or not entry.strip():
        raise ValidationError("Workout entry cannot be empty")

    m = re.fullmatch(
        r"\s*(.+?)\s*@\s*(\d+(?:\.\d+)?)\s*[xX×]\s*(\d+)\s*[xX×]\s*(\d+)\s*(?:\+\s*(\d+))?\s*",
        entry,
    )
    if m is None:
        raise ValidationError(
            f"Invalid workout entry: '{entry}'.\n"
            "Use: NAME @ WEIGHT x REPS x SETS [+ PARTIALS] (e.g. 'Bench Press @ 135 x 10 x 3')."
        )

    name, weight, reps, sets, partials = m.groups()
    try:
        return WorkoutLog(
            exercise=name,
            weight=float(weight),
            reps=int(reps),
            sets=int(sets),
            partial_reps=int(partials) if partials else 0,
        )
    except ValueError as e:
        raise ValidationError(str(e)) from e


def parse_growth_type(value: str) -> str:
    """Validate a user-entered growth type."""
    return validate_choice(value.strip().lower(), GROWTH_TYPES, "growth type")


def parse_frequency(value: str) -> str:
    """Validate a user-entered progression frequency."""
    return validate_choice(value.strip().lower(), FREQUENCIES, "frequency")


def parse_strategy(value: str) -> str:
    """Validate a user-entered progression strategy."""
    return validate_choice(value.strip().lower(), STRATEGIES, "strategy")
