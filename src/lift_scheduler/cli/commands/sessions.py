"""Workout logging commands: log-sets, show-sets, complete-workout."""

from typing import Annotated, Optional

import typer

from ...core.models import SetLog
from ...io.serializers import ValidationError, parse_set_entries
from ...io.store import StoreError
from ...io.workout_logs import (
    get_or_create_workout_log,
    get_workout_log,
    list_set_logs,
    update_workout_log,
    upsert_set_logs,
)
from .. import views
from ..app import (
    ConfigOption,
    DataDirOption,
    StoreOption,
    VerboseOption,
    app,
    configure_logging,
    get_settings,
    get_store,
)

WorkoutIdOption = Annotated[
    str,
    typer.Option("--workout-log-id", "-w", help="Workout log identifier"),
]


@app.command("log-sets")
def log_sets(
    program_id: Annotated[str, typer.Option("--program-id", "-p", help="Program identifier")],
    day_id: Annotated[str, typer.Option("--day-id", help="Generated program day identifier")],
    sets: Annotated[
        str,
        typer.Option(
            "--sets",
            help="Comma-separated EXERCISE_ID#SET=REPS@KG/RIR entries, e.g. 'ex1#1=8@60/2,ex1#2=7@60/1'",
        ),
    ],
    user_id: Annotated[str, typer.Option("--user-id", "-u", help="User identifier")] = "local",
    date: Annotated[
        Optional[str],
        typer.Option("--date", help="Workout date YYYY-MM-DD (default: today)"),
    ] = None,
    notes: Annotated[Optional[str], typer.Option("--notes", help="Notes stored on every logged set")] = None,
    store_backend: StoreOption = None,
    data_dir: DataDirOption = None,
    config_path: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """
    Log sets for a program day.

    Re-logging the same exercise and set number updates the existing record
    instead of adding a duplicate.
    """
    configure_logging(verbose)
    settings = get_settings(config_path)
    store = get_store(settings, store_backend, data_dir)

    try:
        entries = parse_set_entries(sets)
        workout = get_or_create_workout_log(
            store,
            user_id=user_id,
            program_id=program_id,
            program_day_id=day_id,
            date=date,
            collections=settings.collections,
        )
        set_logs = [
            SetLog(
                workout_log_id=workout.id,
                program_exercise_id=exercise_id,
                set_number=set_number,
                reps=reps,
                weight_kg=weight,
                rir=rir,
                notes=notes,
            )
            for exercise_id, set_number, reps, weight, rir in entries
        ]
        results = upsert_set_logs(store, workout.id, set_logs, collections=settings.collections)
    except (ValidationError, ValueError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)
    except StoreError as e:
        views.print_error(f"Could not save sets: {e}")
        raise typer.Exit(1)

    created = sum(1 for r in results if r.created)
    updated = len(results) - created
    views.print_success(
        f"Logged {len(results)} set(s) to workout {workout.id} ({created} new, {updated} updated)."
    )


@app.command("show-sets")
def show_sets(
    workout_log_id: WorkoutIdOption,
    store_backend: StoreOption = None,
    data_dir: DataDirOption = None,
    config_path: ConfigOption = None,
) -> None:
    """Show the sets logged for a workout."""
    settings = get_settings(config_path)
    store = get_store(settings, store_backend, data_dir)

    try:
        workout = get_workout_log(store, workout_log_id, collections=settings.collections)
        logged = list_set_logs(store, workout_log_id, collections=settings.collections)
    except (StoreError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if not logged:
        views.print_info("No sets logged yet.")
        return
    views.print_set_logs(workout, logged)


@app.command("complete-workout")
def complete_workout(
    workout_log_id: WorkoutIdOption,
    notes: Annotated[Optional[str], typer.Option("--notes", help="Workout notes")] = None,
    store_backend: StoreOption = None,
    data_dir: DataDirOption = None,
    config_path: ConfigOption = None,
) -> None:
    """Mark a workout as complete."""
    settings = get_settings(config_path)
    store = get_store(settings, store_backend, data_dir)

    try:
        update_workout_log(
            store,
            workout_log_id,
            status="complete",
            notes=notes,
            collections=settings.collections,
        )
    except (StoreError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)
    views.print_success(f"Workout {workout_log_id} marked complete.")
