"""
Plan generation for lift-scheduler.

Expands the 12-week × 4-day template into ProgramDay and ProgramExercise
records and writes them through the BulkWriter.

A day's exercises reference the day's store id, so each day is created
and acknowledged before its exercises are submitted.  Exercises of one
day are independent of each other and are written concurrently.  Days
are processed in program order (week ascending, then DAY_CYCLE).
"""

import logging
import threading
from collections.abc import Callable, Iterator
from dataclasses import dataclass

from ..io.bulk_writer import BulkWriter, WriteRequest, WriteResult, clamp_concurrency
from ..io.serializers import program_day_to_dict, program_exercise_to_dict
from ..io.store import DocumentStore
from .config import PROGRAM_WEEKS
from .deload import deload, is_deload_week
from .engine.config_loader import Collections
from .exercises.registry import day_label, seed
from .models import (
    DAY_CYCLE,
    DayType,
    ExerciseSpec,
    GenerationSummary,
    ProgramDay,
    ProgramExercise,
    ProgressEvent,
    variant_for_week,
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ProgressEvent], None]


class PlanAlreadyExistsError(Exception):
    """Raised when a program already has generated days and duplicates were not allowed."""

    def __init__(self, program_id: str):
        super().__init__(
            f"Program '{program_id}' already has generated days. "
            "Re-running generation would duplicate them; pass allow_existing to force."
        )
        self.program_id = program_id


@dataclass
class PlannedDay:
    """A day to be created, with the exercise prescriptions that follow it."""

    day: ProgramDay
    exercises: list[ExerciseSpec]


def iter_program(program_id: str = "") -> Iterator[PlannedDay]:
    """
    Yield every day of the block in program order.

    The lower-strength hinge alternates by week parity and every exercise
    of the deload week is passed through deload().
    """
    for week in range(1, PROGRAM_WEEKS + 1):
        deload_week = is_deload_week(week)
        variant = variant_for_week(week)
        for position, day_type in enumerate(DAY_CYCLE, 1):
            specs = seed(day_type, variant)
            if deload_week:
                specs = [deload(s) for s in specs]
            yield PlannedDay(
                day=ProgramDay(
                    program_id=program_id,
                    week_number=week,
                    day_label=day_label(day_type),
                    day_type=day_type,
                    is_deload=deload_week,
                    movement_variant=variant if day_type == DayType.LOWER_STRENGTH else None,
                    order_index=position,
                ),
                exercises=specs,
            )


def plan_totals() -> tuple[int, int]:
    """Return (total days, total exercises) by running the loop without writes."""
    days = 0
    exercises = 0
    for planned in iter_program():
        days += 1
        exercises += len(planned.exercises)
    return days, exercises


def exercise_payloads(program_day_id: str, specs: list[ExerciseSpec]) -> list[dict]:
    """Store payloads for one day's exercises, with order_index 1..N."""
    return [
        program_exercise_to_dict(ProgramExercise(program_day_id=program_day_id, spec=spec, order_index=idx))
        for idx, spec in enumerate(specs, 1)
    ]


class ProgressTracker:
    """
    Counts created records and forwards ProgressEvents.

    Increments and callbacks happen under one lock, so the ``created``
    values a callback sees are strictly increasing per phase even when
    exercise writes complete on several worker threads.
    """

    def __init__(self, total_days: int, total_exercises: int, callback: ProgressCallback | None = None):
        self.total_days = total_days
        self.total_exercises = total_exercises
        self.callback = callback
        self.days = 0
        self.exercises = 0
        self._lock = threading.Lock()

    def day_created(self, day: ProgramDay) -> None:
        with self._lock:
            self.days += 1
            if self.callback:
                self.callback(ProgressEvent(
                    phase="day",
                    created=self.days,
                    total=self.total_days,
                    message=f"Created {day.day_label} (Week {day.week_number})",
                ))

    def exercise_created(self, _result: WriteResult | None = None) -> None:
        with self._lock:
            self.exercises += 1
            if self.callback:
                self.callback(ProgressEvent(
                    phase="exercise",
                    created=self.exercises,
                    total=self.total_exercises,
                    message=f"Created exercise {self.exercises}/{self.total_exercises}",
                ))


def has_existing_plan(
    store: DocumentStore,
    program_id: str,
    collections: Collections | None = None,
    writer: BulkWriter | None = None,
) -> bool:
    """True if any day of ``program_id`` is already stored.  Rate limits are retried by ``writer``."""
    collections = collections or Collections()
    writer = writer or BulkWriter(store)
    docs, _ = writer.with_backoff(
        lambda: store.list_documents(collections.program_days, filters={"program_id": program_id}, limit=1),
        label=f"lookup {collections.program_days}",
    )
    return bool(docs)


def generate_plan(
    store: DocumentStore,
    program_id: str,
    *,
    concurrency: int | None = None,
    on_progress: ProgressCallback | None = None,
    writer: BulkWriter | None = None,
    collections: Collections | None = None,
    cancel: threading.Event | None = None,
    allow_existing: bool = False,
) -> GenerationSummary:
    """
    Generate and persist the full 12-week program.

    Args:
        store: Destination DocumentStore
        program_id: Owning program identifier
        concurrency: Exercise-write workers per day (clamped to 1..5)
        on_progress: Optional callback receiving a ProgressEvent after each write
        writer: BulkWriter to use; a default one over ``store`` if omitted
        collections: Collection names (defaults from config)
        cancel: When set, no new day is started and the current day's
            remaining exercise writes are skipped; a partial summary is returned
        allow_existing: Skip the guard against generating a program twice

    Returns:
        GenerationSummary with created counts and the writer's retry count

    Raises:
        PlanAlreadyExistsError: If days already exist and allow_existing is False
        StoreError: First permanent store failure; records written before
            it are left in place
    """
    if not program_id:
        raise ValueError("program_id must be non-empty")
    collections = collections or Collections()
    writer = writer or BulkWriter(store)
    workers = clamp_concurrency(concurrency)
    retries_before = writer.stats.retries

    if not allow_existing and has_existing_plan(store, program_id, collections, writer):
        raise PlanAlreadyExistsError(program_id)

    total_days, total_exercises = plan_totals()
    progress = ProgressTracker(total_days, total_exercises, on_progress)
    summary = GenerationSummary()

    logger.info(
        "Generating program %s: %d days, %d exercises, concurrency %d",
        program_id, total_days, total_exercises, workers,
    )

    for planned in iter_program(program_id):
        if cancel is not None and cancel.is_set():
            summary.cancelled = True
            break

        day = planned.day
        result = writer.execute(WriteRequest.create(collections.program_days, program_day_to_dict(day)))
        day.id = result.document_id
        summary.created_days += 1
        summary.day_ids.append(day.id)
        progress.day_created(day)
        logger.debug("Created day %s (week %d, %s)", day.id, day.week_number, day.day_type.value)

        requests = [
            WriteRequest.create(collections.program_exercises, payload)
            for payload in exercise_payloads(day.id, planned.exercises)
        ]
        results = writer.run(
            requests,
            workers,
            cancel=cancel,
            on_result=progress.exercise_created,
        )
        summary.created_exercises += sum(1 for r in results if r.ok)
        if any(r.skipped for r in results):
            summary.cancelled = True
            break

    summary.retries = writer.stats.retries - retries_before
    logger.info(
        "Program %s: created %d days, %d exercises (%d retries%s)",
        program_id, summary.created_days, summary.created_exercises, summary.retries,
        ", cancelled" if summary.cancelled else "",
    )
    return summary
