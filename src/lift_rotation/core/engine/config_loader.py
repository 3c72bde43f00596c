"""
YAML → typed defaults loader.

Loads the defaults used for new rotations from defaults.yaml (bundled with
the package) and optionally merges user overrides from
~/.lift-rotation/defaults.yaml.

Usage:
    from lift_rotation.core.engine.config_loader import load_defaults
    defaults = load_defaults()
    rules = defaults.priority_rules

If the bundled YAML cannot be parsed, the Python defaults from config.py
are used (no crash).  If the user override file exists but has parse
errors or bad values, a warning is issued and the file is ignored.
"""

from __future__ import annotations

import importlib.resources
import os
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from ..config import DEFAULT_DAY_COUNT, DEFAULT_ROTATION_NAME, DEFAULT_STRATEGY
from ..models import GrowthSettings, PriorityRules

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML file; raise ValueError on parse errors."""
    with open(path, "r", encoding="utf-8") as fh:
        try:
            data = yaml.safe_load(fh)
        except yaml.YAMLError as exc:
            raise ValueError(f"cannot parse {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a mapping at top level")
    return data


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


_RULE_FIELDS: dict[str, type] = {
    "rep_priority": int,
    "set_priority": int,
    "weight_priority": int,
    "rep_min": int,
    "rep_max": int,
    "set_min": int,
    "set_max": int,
    "reps_to_sets_multiplier": float,
    "weight_range": float,
    "weight_increment": float,
    "over_estimate_tolerance": float,
}

_GROWTH_FIELDS: dict[str, type] = {
    "growth_type": str,
    "amount": float,
    "frequency": str,
    "decay_rate": float,
    "iteration_count": int,
}


def _typed_section(raw: Any, fields: dict[str, type], section: str) -> dict[str, Any]:
    """Coerce known keys of one YAML section; unknown keys raise ValueError."""
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValueError(f"'{section}' must be a mapping")
    unknown = set(raw) - set(fields)
    if unknown:
        raise ValueError(f"'{section}' has unknown keys: {sorted(unknown)}")
    try:
        return {k: fields[k](v) for k, v in raw.items()}
    except (TypeError, ValueError) as exc:
        raise ValueError(f"'{section}' has a bad value: {exc}") from exc


@dataclass
class RotationDefaults:
    """Settings applied when a new rotation is created."""

    priority_rules: PriorityRules = field(default_factory=PriorityRules)
    growth_settings: GrowthSettings = field(default_factory=GrowthSettings)
    rotation_name: str = DEFAULT_ROTATION_NAME
    strategy: str = DEFAULT_STRATEGY
    day_count: int = DEFAULT_DAY_COUNT


def defaults_from_dict(data: dict[str, Any]) -> RotationDefaults:
    """
    Build RotationDefaults from a merged config dict.

    Raises:
        ValueError: If a section is malformed
    """
    rotation = data.get("rotation") or {}
    if not isinstance(rotation, dict):
        raise ValueError("'rotation' must be a mapping")

    return RotationDefaults(
        priority_rules=PriorityRules(
            **_typed_section(data.get("priority_rules"), _RULE_FIELDS, "priority_rules")
        ),
        growth_settings=GrowthSettings(
            **_typed_section(data.get("growth_settings"), _GROWTH_FIELDS, "growth_settings")
        ),
        rotation_name=str(rotation.get("name", DEFAULT_ROTATION_NAME)),
        strategy=str(rotation.get("strategy", DEFAULT_STRATEGY)),
        day_count=int(rotation.get("day_count", DEFAULT_DAY_COUNT)),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def get_bundled_yaml_path() -> Path | None:
    """Return the path to the bundled defaults.yaml, or None if not found."""
    ref = importlib.resources.files("lift_rotation").joinpath("defaults.yaml")
    if ref.is_file():
        return Path(str(ref))
    candidate = Path(__file__).parent.parent.parent / "defaults.yaml"
    return candidate if candidate.exists() else None


def get_user_yaml_path() -> Path | None:
    """Return ~/.lift-rotation/defaults.yaml if it exists, else None."""
    home = Path(os.environ.get("HOME", "~")).expanduser()
    p = home / ".lift-rotation" / "defaults.yaml"
    return p if p.exists() else None


def load_model_config(user_path: Path | None = None) -> dict[str, Any]:
    """
    Load and merge defaults configuration from YAML sources.

    Load order (later overrides earlier):
    1. Bundled src/lift_rotation/defaults.yaml
    2. User override at ~/.lift-rotation/defaults.yaml (or *user_path*)

    Returns:
        Merged dict of config sections.  Empty dict if no YAML available.
    """
    config: dict[str, Any] = {}

    bundled = get_bundled_yaml_path()
    if bundled is not None:
        try:
            config = _load_yaml_file(bundled)
        except (OSError, ValueError) as exc:
            warnings.warn(
                f"lift-rotation: bundled defaults unreadable ({exc}); using Python defaults.",
                stacklevel=2,
            )
            config = {}

    user = user_path if user_path is not None else get_user_yaml_path()
    if user is not None and user.exists():
        try:
            user_cfg = _load_yaml_file(user)
            defaults_from_dict(_deep_merge(config, user_cfg))
        except (OSError, ValueError) as exc:
            warnings.warn(
                f"lift-rotation: ignoring user defaults {user}: {exc}",
                stacklevel=2,
            )
        else:
            config = _deep_merge(config, user_cfg)

    return config


def load_defaults(user_path: Path | None = None) -> RotationDefaults:
    """
    Return the effective defaults for a new rotation.

    Falls back to the Python defaults if the merged config cannot be
    turned into typed settings.
    """
    config = load_model_config(user_path)
    try:
        return defaults_from_dict(config)
    except ValueError as exc:
        warnings.warn(
            f"lift-rotation: invalid defaults ({exc}); using Python defaults.",
            stacklevel=2,
        )
        return RotationDefaults()
