"""
Data models for lift-rotation.

All core dataclasses describing the rotation, its days and exercises, the
progression settings that drive the engine, and the workout log.

PriorityRules and GrowthSettings deliberately accept inverted bounds,
non-positive increments and unknown growth/frequency names: the engine
degrades on those instead of refusing them.
"""

from dataclasses import dataclass, field
from typing import Literal

from .config import (
    DEFAULT_DECAY_RATE,
    DEFAULT_FREQUENCY,
    DEFAULT_GROWTH_AMOUNT,
    DEFAULT_GROWTH_TYPE,
    DEFAULT_OVER_ESTIMATE_TOLERANCE,
    DEFAULT_REP_MAX,
    DEFAULT_REP_MIN,
    DEFAULT_REP_PRIORITY,
    DEFAULT_REPS_TO_SETS_MULTIPLIER,
    DEFAULT_SET_MAX,
    DEFAULT_SET_MIN,
    DEFAULT_SET_PRIORITY,
    DEFAULT_STRATEGY,
    DEFAULT_WEIGHT_INCREMENT,
    DEFAULT_WEIGHT_PRIORITY,
    DEFAULT_WEIGHT_RANGE,
)

GrowthType = Literal["linear", "percent", "sigmoid"]
Frequency = Literal["day", "rotation", "week"]
Strategy = Literal["cascade", "optimize"]


@dataclass
class DayExercise:
    """
    One exercise slot inside a rotation day, with its current prescription.
    """

    name: str
    weight: float
    reps: int
    sets: int
    partial_reps: int = 0
    completed: bool = False

    def __post_init__(self) -> None:
        """Validate prescription values."""
        if not self.name or not self.name.strip():
            raise ValueError("name must be a non-empty string")
        if self.weight <= 0:
            raise ValueError("weight must be positive")
        if self.reps <= 0:
            raise ValueError("reps must be positive")
        if self.sets <= 0:
            raise ValueError("sets must be positive")
        if self.partial_reps < 0:
            raise ValueError("partial_reps must be non-negative")


@dataclass
class PriorityRules:
    """
    Lever ranking and bounds shared by every exercise in a rotation.

    The three priorities rank rep/set/weight (1 = tried first); partial reps
    are implicitly priority 4.  over_estimate_tolerance is only read by the
    optimizer strategy.
    """

    rep_priority: int = DEFAULT_REP_PRIORITY
    set_priority: int = DEFAULT_SET_PRIORITY
    weight_priority: int = DEFAULT_WEIGHT_PRIORITY
    rep_min: int = DEFAULT_REP_MIN
    rep_max: int = DEFAULT_REP_MAX
    set_min: int = DEFAULT_SET_MIN
    set_max: int = DEFAULT_SET_MAX
    reps_to_sets_multiplier: float = DEFAULT_REPS_TO_SETS_MULTIPLIER
    weight_range: float = DEFAULT_WEIGHT_RANGE
    weight_increment: float = DEFAULT_WEIGHT_INCREMENT
    over_estimate_tolerance: float = DEFAULT_OVER_ESTIMATE_TOLERANCE

    @property
    def bounds_inverted(self) -> bool:
        """True when rep or set bounds are misconfigured (min > max)."""
        return self.rep_min > self.rep_max or self.set_min > self.set_max


@dataclass
class GrowthSettings:
    """
    Shape and cadence of weight growth.

    iteration_count is the only mutable engine input; the caller bumps it
    once per progression event when growth_type is "sigmoid".
    """

    growth_type: str = DEFAULT_GROWTH_TYPE  # GrowthType, unknown values fail open
    amount: float = DEFAULT_GROWTH_AMOUNT
    frequency: str = DEFAULT_FREQUENCY  # Frequency, unknown values fail open
    decay_rate: float = DEFAULT_DECAY_RATE
    iteration_count: int = 0

    def __post_init__(self) -> None:
        if self.iteration_count < 0:
            raise ValueError("iteration_count must be non-negative")


@dataclass
class RotationDay:
    """A workout session template: an ordered list of exercises."""

    name: str
    exercises: list[DayExercise] = field(default_factory=list)


@dataclass
class Rotation:
    """
    A repeating cycle of workout days plus its progression configuration.
    """

    name: str
    days: list[RotationDay] = field(default_factory=list)
    current_day_index: int = 0
    last_workout_date: str | None = None  # ISO format: YYYY-MM-DD
    priority_rules: PriorityRules = field(default_factory=PriorityRules)
    growth_settings: GrowthSettings = field(default_factory=GrowthSettings)
    strategy: str = DEFAULT_STRATEGY  # Strategy

    def __post_init__(self) -> None:
        """Validate rotation data."""
        if self.current_day_index < 0:
            raise ValueError("current_day_index must be non-negative")
        if self.days and self.current_day_index >= len(self.days):
            raise ValueError(
                f"current_day_index {self.current_day_index} out of range "
                f"for {len(self.days)} days"
            )

    @property
    def current_day(self) -> RotationDay | None:
        """The day the next workout will use, or None for an empty rotation."""
        if not self.days:
            return None
        return self.days[self.current_day_index]


@dataclass
class CatalogExercise:
    """An exercise in the user's library (independent of any rotation)."""

    name: str
    description: str | None = None
    category: str | None = None

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("Exercise name is required")


@dataclass
class WorkoutLog:
    """What was actually done for one exercise in a logged session."""

    exercise: str
    weight: float
    reps: int
    sets: int
    partial_reps: int = 0
    completed: bool = True
    notes: str | None = None

    def __post_init__(self) -> None:
        """Validate log entry."""
        if not self.exercise or not self.exercise.strip():
            raise ValueError("exercise must be a non-empty string")
        if self.weight < 0:
            raise ValueError("weight must be non-negative")
        if self.reps <= 0:
            raise ValueError("reps must be positive")
        if self.sets <= 0:
            raise ValueError("sets must be positive")
        if self.partial_reps < 0:
            raise ValueError("partial_reps must be non-negative")

    @property
    def total_load(self) -> float:
        """weight × reps × sets + weight × partial_reps"""
        return self.weight * self.reps * self.sets + self.weight * self.partial_reps


@dataclass
class WorkoutSession:
    """
    A logged workout on one date.
    """

    date: str  # ISO format: YYYY-MM-DD
    logs: list[WorkoutLog] = field(default_factory=list)
    notes: str | None = None

    def __post_init__(self) -> None:
        """Validate session date."""
        self._validate_date(self.date)

    @staticmethod
    def _validate_date(date_str: str) -> None:
        """Validate date string is ISO format YYYY-MM-DD."""
        import re

        if not re.match(r"^\d{4}-\d{2}-\d{2}$", date_str):
            raise ValueError(f"Invalid date format: {date_str}. Expected YYYY-MM-DD")

        from datetime import datetime

        try:
            datetime.strptime(date_str, "%Y-%m-%d")
        except ValueError as e:
            raise ValueError(f"Invalid date: {date_str}") from e

    @property
    def total_load(self) -> float:
        """Sum of total load over all logged exercises."""
        return sum(log.total_load for log in self.logs)
