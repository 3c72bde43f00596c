"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of rotation and workout data.
"""

from rich.console import Console
from rich.table import Table

from ..core.config import PARTIAL_PRIORITY, WEIGHT_UNIT
from ..core.models import (
    CatalogExercise,
    DayExercise,
    GrowthSettings,
    PriorityRules,
    Rotation,
    RotationDay,
    WorkoutSession,
)
from ..core.progression import lever_order, total_load, weight_increase
from ..core.rotation import CompletionResult, ExerciseChange

console = Console()

_LEVER_LABELS = {
    "rep": "+1 rep",
    "set": "+1 set",
    "weight": "weight up",
    "partial": "+1 partial",
    "optimize": "closest load",
    "none": "no change",
}


def _fmt_weight(weight: float) -> str:
    """40.0 → '40', 42.5 → '42.5', 1000000.0 → '1000000'"""
    return f"{weight:.0f}" if weight == int(weight) else f"{weight:.1f}"


def format_exercise(exercise: DayExercise) -> str:
    """
    One-line prescription, e.g. "40 lb, 13 reps, 4 sets + 1 rep".
    """
    base = (
        f"{_fmt_weight(exercise.weight)} {WEIGHT_UNIT}, "
        f"{exercise.reps} reps, {exercise.sets} sets"
    )
    if exercise.partial_reps > 0:
        plural = "s" if exercise.partial_reps > 1 else ""
        return f"{base} + {exercise.partial_reps} rep{plural}"
    return base


def _fmt_load(load: float) -> str:
    return f"{load:,.0f}"


def format_day_table(day: RotationDay, title: str | None = None) -> Table:
    """
    Create a Rich table of one day's exercises.

    Args:
        day: Day to display
        title: Table title (default: day name)

    Returns:
        Rich Table object
    """
    table = Table(title=title or day.name)

    table.add_column("#", justify="right", style="dim", width=3)
    table.add_column("Done", justify="center", width=4)
    table.add_column("Exercise", style="cyan")
    table.add_column("Prescription")
    table.add_column("Load", justify="right", style="bold")

    for i, exercise in enumerate(day.exercises, 1):
        table.add_row(
            str(i),
            "[green]✓[/green]" if exercise.completed else "",
            exercise.name,
            format_exercise(exercise),
            _fmt_load(total_load(exercise)),
        )

    return table


def print_rotation(rotation: Rotation, day_index: int | None = None) -> None:
    """
    Print the rotation overview, or a single day.

    Args:
        rotation: Rotation to display
        day_index: 0-based day to show alone (default: all days)
    """
    console.print(
        f"[bold cyan]{rotation.name}[/bold cyan]  "
        f"[dim]({len(rotation.days)} days, strategy: {rotation.strategy}, "
        f"last workout: {rotation.last_workout_date or 'never'})[/dim]"
    )

    if not rotation.days:
        console.print("[yellow]No days yet. Use 'add-day' to create one.[/yellow]")
        return

    indexes = range(len(rotation.days)) if day_index is None else [day_index]
    for i in indexes:
        day = rotation.days[i]
        marker = "  [bold green]← today[/bold green]" if i == rotation.current_day_index else ""
        title = f"Day {i + 1}: {day.name}{marker}"
        if not day.exercises:
            console.print(f"\n{title}\n  [dim](no exercises)[/dim]")
            continue
        console.print(format_day_table(day, title=title))


def format_changes_table(changes: list[ExerciseChange], title: str) -> Table:
    """Create a Rich table comparing prescriptions before/after progression."""
    table = Table(title=title)

    table.add_column("Exercise", style="cyan")
    table.add_column("Lever", style="magenta")
    table.add_column("Before")
    table.add_column("After", style="bold")
    table.add_column("Load Δ", justify="right")

    for change in changes:
        delta = total_load(change.after) - total_load(change.before)
        table.add_row(
            change.before.name,
            _LEVER_LABELS.get(change.lever, change.lever),
            format_exercise(change.before),
            format_exercise(change.after),
            f"{delta:+,.0f}",
        )

    return table


def print_completion(result: CompletionResult) -> None:
    """Summarize a completed workout."""
    rotation = result.rotation
    done_day = rotation.days[result.completed_day_index]
    next_day = rotation.days[result.next_day_index]

    print_success(f"Completed Day {result.completed_day_index + 1}: {done_day.name}")
    if result.progressed:
        console.print(format_changes_table(result.changes, title="Progression applied"))
    else:
        print_info("No progression this time (frequency not reached).")
    console.print(f"Next up: [bold]Day {result.next_day_index + 1}: {next_day.name}[/bold]")


def print_priority_rules(rules: PriorityRules) -> None:
    """Print lever order and bounds."""
    table = Table(title="Priority rules")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", justify="right")

    priorities = {
        "rep": rules.rep_priority,
        "set": rules.set_priority,
        "weight": rules.weight_priority,
        "partial": PARTIAL_PRIORITY,
    }
    order = " → ".join(f"{lever} ({priorities[lever]})" for lever in lever_order(rules))

    table.add_row("Lever order", order)
    table.add_row("Reps", f"{rules.rep_min}–{rules.rep_max}")
    table.add_row("Sets", f"{rules.set_min}–{rules.set_max}")
    table.add_row("Reps > multiplier × sets", f"{rules.reps_to_sets_multiplier:g}")
    table.add_row("Weight increment", f"{rules.weight_increment:g} {WEIGHT_UNIT}")
    table.add_row("Max weight step", f"{rules.weight_range:g} {WEIGHT_UNIT}")
    table.add_row("Over-estimate tolerance", f"{rules.over_estimate_tolerance:.0%}")
    console.print(table)

    if rules.bounds_inverted:
        print_warning("Min exceeds max for reps or sets: only partial reps will progress.")


def print_growth_settings(growth: GrowthSettings, sample_weight: float = 100.0) -> None:
    """Print growth settings with the delta they would give at a sample weight."""
    table = Table(title="Growth settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Growth type", growth.growth_type)
    unit = WEIGHT_UNIT if growth.growth_type == "linear" else "%"
    table.add_row("Amount", f"{growth.amount:g} {unit}")
    table.add_row("Frequency", growth.frequency)
    if growth.growth_type == "sigmoid":
        table.add_row("Decay rate", f"{growth.decay_rate:g} %/step")
        table.add_row("Iterations so far", str(growth.iteration_count))
    delta = weight_increase(sample_weight, growth)
    table.add_row(
        f"Next step at {_fmt_weight(sample_weight)} {WEIGHT_UNIT}",
        f"{delta:+.2f} {WEIGHT_UNIT}",
    )
    console.print(table)


def format_workouts_table(sessions: list[WorkoutSession]) -> Table:
    """
    Create a Rich table displaying workout history.

    Args:
        sessions: Sessions to display

    Returns:
        Rich Table object
    """
    table = Table(title="Workout History")

    table.add_column("#", justify="right", style="dim", width=3)
    table.add_column("Date", style="cyan")
    table.add_column("Exercises")
    table.add_column("Total load", justify="right", style="bold")
    table.add_column("Notes", style="dim")

    for i, session in enumerate(sessions, 1):
        lines = []
        for log in session.logs:
            mark = "" if log.completed else " [red](skipped)[/red]"
            partial = f" +{log.partial_reps}" if log.partial_reps else ""
            lines.append(
                f"{log.exercise}: {_fmt_weight(log.weight)}×{log.reps}×{log.sets}{partial}{mark}"
            )
        table.add_row(
            str(i),
            session.date,
            "\n".join(lines) or "-",
            _fmt_load(session.total_load),
            session.notes or "",
        )

    return table


def print_workouts(sessions: list[WorkoutSession]) -> None:
    """Print workout history to console."""
    if not sessions:
        console.print("[yellow]No workouts recorded yet.[/yellow]")
        return
    console.print(format_workouts_table(sessions))


def print_catalog(exercises: list[CatalogExercise]) -> None:
    """Print the exercise catalog."""
    if not exercises:
        console.print("[yellow]No exercises in the catalog yet.[/yellow]")
        return

    table = Table(title="Exercises")
    table.add_column("Name", style="cyan")
    table.add_column("Category", style="magenta")
    table.add_column("Description")
    for e in exercises:
        table.add_row(e.name, e.category or "", e.description or "")
    console.print(table)


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {message}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {message}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")


def confirm_action(message: str) -> bool:
    """
    Prompt user for confirmation.

    Args:
        message: Confirmation message

    Returns:
        True if confirmed, False otherwise
    """
    response = console.input(f"{message} [y/N]: ")
    return response.lower() in ("y", "yes")
