"""
Configuration constants for the progression engine.

Python-side defaults mirror the bundled defaults.yaml; the YAML file wins
when it can be loaded (see core/engine/config_loader.py).
"""

from typing import Final

# =============================================================================
# LEVERS
# =============================================================================

LEVERS: Final[tuple[str, ...]] = ("rep", "set", "weight")  # canonical tie-break order
PARTIAL_PRIORITY: Final[int] = 4  # Partial reps are always tried last

# =============================================================================
# ENGINE BOUNDS
# =============================================================================

FALLBACK_WEIGHT_INCREMENT: Final[float] = 1.0  # Used when weight_increment <= 0
WEIGHT_ROUND_DIGITS: Final[int] = 6  # Strips float noise after rounding to plates

PARTIAL_REPS_SEARCH_CAP: Final[int] = 20  # Optimizer considers partials 0..cap
OPTIMIZER_MAX_WEIGHT_STEPS: Final[int] = 20  # Max weight candidates per side of current
OPTIMIZER_MAX_REP_SPAN: Final[int] = 20  # Rep values searched around the current reps
OPTIMIZER_MAX_SET_SPAN: Final[int] = 10  # Set values searched around the current sets

# =============================================================================
# TRIGGER GATING
# =============================================================================

WEEK_DAYS: Final[int] = 7

GROWTH_TYPES: Final[tuple[str, ...]] = ("linear", "percent", "sigmoid")
FREQUENCIES: Final[tuple[str, ...]] = ("day", "rotation", "week")
STRATEGIES: Final[tuple[str, ...]] = ("cascade", "optimize")

# =============================================================================
# DEFAULTS FOR NEW ROTATIONS
# =============================================================================

DEFAULT_ROTATION_NAME: Final[str] = "My Rotation"
DEFAULT_STRATEGY: Final[str] = "cascade"
DEFAULT_DAY_COUNT: Final[int] = 3

DEFAULT_REP_PRIORITY: Final[int] = 1
DEFAULT_SET_PRIORITY: Final[int] = 2
DEFAULT_WEIGHT_PRIORITY: Final[int] = 3
DEFAULT_REP_MIN: Final[int] = 8
DEFAULT_REP_MAX: Final[int] = 15
DEFAULT_SET_MIN: Final[int] = 3
DEFAULT_SET_MAX: Final[int] = 5
DEFAULT_REPS_TO_SETS_MULTIPLIER: Final[float] = 2.0
DEFAULT_WEIGHT_RANGE: Final[float] = 10.0
DEFAULT_WEIGHT_INCREMENT: Final[float] = 2.5
DEFAULT_OVER_ESTIMATE_TOLERANCE: Final[float] = 0.5

DEFAULT_GROWTH_TYPE: Final[str] = "percent"
DEFAULT_GROWTH_AMOUNT: Final[float] = 5.0
DEFAULT_FREQUENCY: Final[str] = "rotation"
DEFAULT_DECAY_RATE: Final[float] = 0.01

# =============================================================================
# DISPLAY
# =============================================================================

WEIGHT_UNIT: Final[str] = "lb"
