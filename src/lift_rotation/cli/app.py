"""Shared Typer app object, shared option types, and store utilities."""

from pathlib import Path
from typing import Annotated, Optional

import typer

from ..core.models import Rotation
from ..io.rotation_store import RotationStore, get_default_rotation_path
from ..io.serializers import ValidationError
from . import views

# Shared --rotation-path option type used across all commands
RotationPathOption = Annotated[
    Optional[Path],
    typer.Option("--rotation-path", "-p", help="Path to rotation JSON file"),
]

JsonOption = Annotated[
    bool,
    typer.Option("--json", "-j", help="Output as JSON for machine processing"),
]

app = typer.Typer(
    name="lift-rotation",
    help="Rotating workout plan tracker with rule-driven progressive overload.",
    no_args_is_help=False,
    invoke_without_command=True,
)


def get_store(rotation_path: Path | None) -> RotationStore:
    """Get rotation store from path or the default location."""
    if rotation_path is None:
        rotation_path = get_default_rotation_path()
    return RotationStore(rotation_path)


def load_rotation_or_exit(store: RotationStore) -> Rotation:
    """Load the rotation; print the problem and exit with code 1 on failure."""
    try:
        return store.load_rotation()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)
