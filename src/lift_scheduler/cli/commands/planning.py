"""Planning commands: generate, show-plan, templates."""

import threading
from typing import Annotated, Optional

import typer

from ...core.deload import deload
from ...core.exercises.registry import day_label, seed
from ...core.models import DAY_CYCLE, DayType, GenerationSummary, MovementVariant, ProgressEvent
from ...core.planner import PlanAlreadyExistsError, generate_plan
from ...io.bulk_writer import BulkWriter
from ...io.serializers import ValidationError
from ...io.store import StoreError
from ...io.workout_logs import list_program_days, list_program_exercises
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

ProgramIdOption = Annotated[
    str,
    typer.Option("--program-id", "-p", help="Program identifier owning the generated days"),
]


@app.command()
def generate(
    program_id: ProgramIdOption,
    concurrency: Annotated[
        Optional[int],
        typer.Option("--concurrency", "-c", help="Parallel exercise writes per day, 1-5 (default from config)"),
    ] = None,
    force: Annotated[
        bool,
        typer.Option("--force", help="Generate even if the program already has days (creates duplicates)"),
    ] = False,
    store_backend: StoreOption = None,
    data_dir: DataDirOption = None,
    config_path: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """
    Generate the 12-week program: 48 days and their exercises.

    Writes go through the rate-limited bulk writer; progress is shown as
    each day and exercise is created.  An interrupted run leaves the
    records already written in place.
    """
    configure_logging(verbose)
    settings = get_settings(config_path)
    store = get_store(settings, store_backend, data_dir)
    writer = BulkWriter.from_settings(store, settings.writer)
    workers = concurrency if concurrency is not None else settings.writer.concurrency

    cancel = threading.Event()

    with views.make_progress() as progress:
        day_task = progress.add_task("Days", total=None, message="")
        exercise_task = progress.add_task("Exercises", total=None, message="")
        created = {"day": 0, "exercise": 0}

        def on_progress(event: ProgressEvent) -> None:
            created[event.phase] = event.created
            task = day_task if event.phase == "day" else exercise_task
            progress.update(task, completed=event.created, total=event.total, message=event.message)

        try:
            summary = generate_plan(
                store,
                program_id,
                concurrency=workers,
                on_progress=on_progress,
                writer=writer,
                collections=settings.collections,
                cancel=cancel,
                allow_existing=force,
            )
        except KeyboardInterrupt:
            cancel.set()
            progress.stop()
            views.print_summary(GenerationSummary(
                created_days=created["day"],
                created_exercises=created["exercise"],
                retries=writer.stats.retries,
                cancelled=True,
            ))
            views.print_warning("Interrupted; records written so far were kept.")
            raise typer.Exit(130)
        except PlanAlreadyExistsError as e:
            progress.stop()
            views.print_error(str(e))
            raise typer.Exit(1)
        except (StoreError, ValueError) as e:
            progress.stop()
            views.print_error(f"Generation aborted: {e}")
            views.print_info("Days and exercises written before the failure were kept.")
            raise typer.Exit(1)

    views.print_summary(summary)
    views.print_success(f"Program {program_id} generated.")


@app.command("show-plan")
def show_plan(
    program_id: ProgramIdOption,
    week: Annotated[
        Optional[int],
        typer.Option("--week", "-w", help="Only show this week (1-12)"),
    ] = None,
    store_backend: StoreOption = None,
    data_dir: DataDirOption = None,
    config_path: ConfigOption = None,
) -> None:
    """Show generated days and their exercises as stored."""
    settings = get_settings(config_path)
    store = get_store(settings, store_backend, data_dir)

    try:
        days = list_program_days(store, program_id, week=week, collections=settings.collections)
        if not days:
            views.print_info(f"No generated days for program {program_id}.")
            return
        for day in days:
            exercises = list_program_exercises(store, day.id, collections=settings.collections)
            views.print_program_day(day, exercises)
    except (StoreError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)


@app.command()
def templates(
    day_type: Annotated[
        Optional[str],
        typer.Option("--day-type", "-t", help="upper-strength, lower-strength, upper-hypertrophy, lower-hypertrophy"),
    ] = None,
    variant: Annotated[
        str,
        typer.Option("--variant", help="Hinge variant: primary-hinge or paused-hinge"),
    ] = MovementVariant.PRIMARY_HINGE.value,
    deloaded: Annotated[
        bool,
        typer.Option("--deload", help="Show the deload-week version"),
    ] = False,
) -> None:
    """Print the exercise template of one or all day-types."""
    try:
        day_types = [DayType(day_type)] if day_type else list(DAY_CYCLE)
        hinge = MovementVariant(variant)
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    for dt in day_types:
        specs = seed(dt, hinge)
        if deloaded:
            specs = [deload(s) for s in specs]
        title = day_label(dt)
        if dt == DayType.LOWER_STRENGTH:
            title += f" · {hinge.value}"
        if deloaded:
            title += " · DELOAD"
        views.console.print(views.format_spec_table(specs, title=title))
