"""
Closest-load optimizer: an alternative progression strategy.

Instead of pulling one lever at a time, compute a target total load from
the growth settings and search the legal (reps, sets, weight, partials)
combinations for the one whose load lands closest to it, preferring a
small overshoot over any undershoot.

Only used when a rotation's strategy is "optimize"; never blended with the
priority cascade.

Search space (bounded):
    reps     rep_min .. rep_max, a window of at most OPTIMIZER_MAX_REP_SPAN
             values around the current reps
    sets     set_min .. set_max, a window of at most OPTIMIZER_MAX_SET_SPAN
             values around the current sets
    weight   current ± k × increment, |k × increment| <= weight_range,
             at most OPTIMIZER_MAX_WEIGHT_STEPS per side
    partials 0 .. PARTIAL_REPS_SEARCH_CAP, solved per (reps, sets, weight)
             rather than enumerated
"""

import math
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, replace

from .config import (
    OPTIMIZER_MAX_REP_SPAN,
    OPTIMIZER_MAX_SET_SPAN,
    OPTIMIZER_MAX_WEIGHT_STEPS,
    PARTIAL_REPS_SEARCH_CAP,
)
from .models import DayExercise, GrowthSettings, PriorityRules
from .progression import effective_increment, round_weight, total_load, weight_increase


@dataclass(frozen=True)
class Candidate:
    """One legal prescription considered by the search."""

    reps: int
    sets: int
    weight: float
    partials: int
    load: float


def target_load(exercise: DayExercise, growth: GrowthSettings) -> float:
    """
    Load the next session should reach.

    linear:  current + amount × (reps × sets + partial_reps)
             (the fixed delta applied to every rep performed)
    other:   current × (1 + weight_increase / weight)

    Args:
        exercise: Current prescription
        growth: Growth settings

    Returns:
        Target total load
    """
    current = total_load(exercise)
    if growth.growth_type == "linear":
        total_reps = exercise.reps * exercise.sets + exercise.partial_reps
        return current + growth.amount * total_reps
    growth_fraction = weight_increase(exercise.weight, growth) / exercise.weight
    return current * (1 + growth_fraction)


def candidate_weights(weight: float, rules: PriorityRules) -> list[float]:
    """Positive, de-duplicated plate-rounded weights within weight_range of current."""
    step = effective_increment(rules.weight_increment)
    max_steps = min(int(abs(rules.weight_range) // step), OPTIMIZER_MAX_WEIGHT_STEPS)

    weights: list[float] = []
    for k in range(-max_steps, max_steps + 1):
        w = round_weight(weight + k * step, step)
        if w > 0 and w not in weights:
            weights.append(w)
    return weights


def search_range(current: int, low: int, high: int, span: int) -> range:
    """
    Values low..high, narrowed to `span` values around current when wider.

    Empty when the bounds are inverted.
    """
    low = max(1, low)
    if high - low + 1 <= span:
        return range(low, high + 1)
    start = min(max(low, current - span // 2), high - span + 1)
    return range(start, start + span)


def best_partials(base_load: float, weight: float, target: float) -> int:
    """
    Fewest partial reps that lift base_load to target, capped.

    Each partial adds one weight.  When even the cap falls short the cap
    is returned, as it is the closest undershoot.
    """
    if base_load >= target:
        return 0
    partials = min(math.ceil((target - base_load) / weight), PARTIAL_REPS_SEARCH_CAP)
    # float division can land one off in either direction
    if partials > 0 and base_load + weight * (partials - 1) >= target:
        partials -= 1
    elif partials < PARTIAL_REPS_SEARCH_CAP and base_load + weight * partials < target:
        partials += 1
    return partials


def enumerate_candidates(
    exercise: DayExercise,
    rules: PriorityRules,
    target: float,
) -> Iterator[Candidate]:
    """
    Yield one candidate per (reps, sets, weight) satisfying reps > multiplier × sets.

    Each carries the partial count best suited to reach target, so no other
    partial count for the same combination could be selected over it.
    """
    weights = candidate_weights(exercise.weight, rules)
    for reps in search_range(exercise.reps, rules.rep_min, rules.rep_max, OPTIMIZER_MAX_REP_SPAN):
        for sets in search_range(exercise.sets, rules.set_min, rules.set_max, OPTIMIZER_MAX_SET_SPAN):
            if reps <= rules.reps_to_sets_multiplier * sets:
                continue
            for weight in weights:
                base_load = weight * reps * sets
                partials = best_partials(base_load, weight, target)
                yield Candidate(reps, sets, weight, partials, base_load + weight * partials)


def select_candidate(
    candidates: Iterable[Candidate],
    target: float,
    current_weight: float,
    tolerance: float,
) -> Candidate | None:
    """
    Pick the candidate closest to target in a single pass.

    Pool preference: loads in [target, target × (1 + tolerance)], then any
    load >= target, then everything.  Ties: fewer partials, weight nearest
    the current weight, fewer reps, fewer sets.
    """
    ceiling = target * (1 + max(0.0, tolerance))

    def pool(c: Candidate) -> int:
        if target <= c.load <= ceiling:
            return 0
        if c.load >= target:
            return 1
        return 2

    return min(
        candidates,
        key=lambda c: (
            pool(c),
            abs(c.load - target),
            c.partials,
            abs(c.weight - current_weight),
            c.reps,
            c.sets,
        ),
        default=None,
    )


def consolidate_partials(
    reps: int,
    sets: int,
    partials: int,
    rules: PriorityRules,
) -> tuple[int, int]:
    """
    Fold whole sets' worth of partial reps into extra sets.

    10 reps × 3 sets + 12 partials → 10 reps × 4 sets + 2 partials,
    as long as set_max and the reps/sets ratio allow it.
    """
    while (
        partials >= reps
        and sets < rules.set_max
        and reps > rules.reps_to_sets_multiplier * (sets + 1)
    ):
        sets += 1
        partials -= reps
    return sets, partials


def optimize(
    exercise: DayExercise,
    rules: PriorityRules,
    growth: GrowthSettings,
) -> DayExercise:
    """
    Return the legal prescription whose total load best matches the target.

    Returns the exercise unchanged when no combination satisfies the bounds
    (e.g. inverted min/max).

    Args:
        exercise: Current prescription
        rules: Rotation priority rules
        growth: Rotation growth settings

    Returns:
        New DayExercise
    """
    target = target_load(exercise, growth)
    best = select_candidate(
        enumerate_candidates(exercise, rules, target),
        target,
        exercise.weight,
        rules.over_estimate_tolerance,
    )
    if best is None:
        return exercise

    sets, partials = consolidate_partials(best.reps, best.sets, best.partials, rules)
    return replace(
        exercise,
        reps=best.reps,
        sets=sets,
        weight=best.weight,
        partial_reps=partials,
    )
