"""
CLI view formatters using Rich for pretty console output.

Handles table formatting, progress display, and status messages.
"""

from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn, TimeElapsedColumn
from rich.table import Table

from ..core.models import ExerciseSpec, GenerationSummary, ProgramDay, ProgramExercise, SetLog, WorkoutLog

console = Console()


def make_progress() -> Progress:
    """Two-bar progress display used by `generate` (days and exercises)."""
    return Progress(
        TextColumn("[bold]{task.description:<10}"),
        BarColumn(),
        MofNCompleteColumn(),
        TextColumn("[dim]{task.fields[message]}"),
        TimeElapsedColumn(),
        console=console,
    )


def _fmt_notes(notes: str | None) -> str:
    return notes or ""


def format_spec_table(
    specs: list[ExerciseSpec],
    title: str = "",
    ids: list[str | None] | None = None,
) -> Table:
    """Table of exercise prescriptions in template order; ``ids`` adds a store-id column."""
    table = Table(title=title or None, show_lines=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Exercise")
    table.add_column("Type", style="cyan")
    table.add_column("Sets", justify="right")
    table.add_column("Reps", justify="right")
    table.add_column("RIR", justify="right")
    table.add_column("Notes", style="dim")
    if ids is not None:
        table.add_column("Exercise ID", style="dim")

    for idx, spec in enumerate(specs, 1):
        row = [
            str(idx),
            spec.name,
            spec.category.value,
            str(spec.sets),
            spec.rep_range,
            str(spec.rir_target),
            _fmt_notes(spec.notes),
        ]
        if ids is not None:
            row.append(ids[idx - 1] or "")
        table.add_row(*row)
    return table


def format_day_title(day: ProgramDay) -> str:
    parts = [f"Week {day.week_number}", day.day_label]
    if day.movement_variant is not None:
        parts.append(day.movement_variant.value)
    if day.is_deload:
        parts.append("[yellow]DELOAD[/yellow]")
    return " · ".join(parts)


def print_program_day(day: ProgramDay, exercises: list[ProgramExercise]) -> None:
    """Print one generated day with its stored exercises."""
    ordered = sorted(exercises, key=lambda e: e.order_index)
    table = format_spec_table(
        [e.spec for e in ordered],
        title=format_day_title(day),
        ids=[e.id for e in ordered],
    )
    console.print(table)


def print_summary(summary: GenerationSummary) -> None:
    """Print the outcome of a generation run."""
    table = Table(show_header=False, box=None)
    table.add_column(style="bold")
    table.add_column(justify="right")
    table.add_row("Days created", str(summary.created_days))
    table.add_row("Exercises created", str(summary.created_exercises))
    table.add_row("Rate-limit retries", str(summary.retries))
    console.print(table)
    if summary.cancelled:
        print_warning("Generation was cancelled; the program is incomplete.")


def print_set_logs(workout: WorkoutLog, sets: list[SetLog]) -> None:
    """Print the sets logged for one workout."""
    table = Table(title=f"{workout.date} · {workout.status} · workout {workout.id}")
    table.add_column("Exercise ID", style="dim")
    table.add_column("Set", justify="right")
    table.add_column("Reps", justify="right")
    table.add_column("Weight", justify="right")
    table.add_column("RIR", justify="right")
    table.add_column("Notes", style="dim")

    for s in sets:
        table.add_row(
            s.program_exercise_id,
            str(s.set_number),
            "" if s.reps is None else str(s.reps),
            "" if s.weight_kg is None else f"{s.weight_kg:.1f} kg",
            "" if s.rir is None else str(s.rir),
            _fmt_notes(s.notes),
        )
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
