"""
Workout logging and plan read-back.

Set logs are written as keyed upserts through the BulkWriter, so saving
the same set twice (a retry, a double submit, a replayed request) leaves
exactly one record holding the latest values.
"""

from datetime import datetime

from ..core.config import (
    SET_LOG_BASE_DELAY_SECONDS,
    SET_LOG_CONCURRENCY,
    SET_LOG_JITTER_SECONDS,
    SET_LOG_LIST_LIMIT,
    SET_LOG_MAX_DELAY_SECONDS,
    SET_LOG_MAX_RETRIES,
)
from ..core.engine.config_loader import Collections
from ..core.models import CompositeKey, ProgramDay, ProgramExercise, SetLog, WorkoutLog
from .bulk_writer import BulkWriter, WriteRequest, WriteResult
from .serializers import (
    ValidationError,
    dict_to_program_day,
    dict_to_program_exercise,
    dict_to_set_log,
    dict_to_workout_log,
    set_log_to_dict,
    validate_date,
    workout_log_to_dict,
)
from .store import DocumentStore


def set_log_writer(store: DocumentStore, **kwargs) -> BulkWriter:
    """BulkWriter tuned for interactive set logging (short waits, 5 attempts)."""
    options = dict(
        base_delay=SET_LOG_BASE_DELAY_SECONDS,
        max_retries=SET_LOG_MAX_RETRIES,
        jitter=SET_LOG_JITTER_SECONDS,
        max_delay=SET_LOG_MAX_DELAY_SECONDS,
    )
    options.update(kwargs)
    return BulkWriter(store, **options)


def _list(store: DocumentStore, writer: BulkWriter | None, collection: str, **query) -> list[dict]:
    """list_documents with rate limits retried by ``writer``."""
    writer = writer or set_log_writer(store)
    docs, _ = writer.with_backoff(
        lambda: store.list_documents(collection, **query),
        label=f"lookup {collection}",
    )
    return docs


def workout_log_key(user_id: str, program_id: str, program_day_id: str, date: str) -> CompositeKey:
    return CompositeKey.of(
        user_id=user_id,
        program_id=program_id,
        program_day_id=program_day_id,
        date=date,
    )


def get_or_create_workout_log(
    store: DocumentStore,
    *,
    user_id: str,
    program_id: str,
    program_day_id: str,
    date: str | None = None,
    writer: BulkWriter | None = None,
    collections: Collections | None = None,
) -> WorkoutLog:
    """
    Return the workout log for (user, program, day, date), creating it
    with status "in_progress" if none exists.

    Args:
        date: ISO date (default: today)
    """
    collections = collections or Collections()
    writer = writer or set_log_writer(store)
    date = validate_date(date or datetime.now().strftime("%Y-%m-%d"))

    log = WorkoutLog(
        user_id=user_id,
        program_id=program_id,
        program_day_id=program_day_id,
        date=date,
    )
    result = writer.execute(WriteRequest.get_or_create(
        collections.workout_logs,
        workout_log_key(user_id, program_id, program_day_id, date),
        workout_log_to_dict(log),
    ))
    if result.created:
        log.id = result.document_id
        return log
    return get_workout_log(store, result.document_id, writer=writer, collections=collections)


def get_workout_log(
    store: DocumentStore,
    workout_log_id: str,
    *,
    writer: BulkWriter | None = None,
    collections: Collections | None = None,
) -> WorkoutLog:
    """
    Raises:
        ValidationError: If no such workout log exists
    """
    collections = collections or Collections()
    docs = _list(store, writer, collections.workout_logs, filters={"id": workout_log_id}, limit=1)
    if not docs:
        raise ValidationError(f"Workout log '{workout_log_id}' not found")
    return dict_to_workout_log(docs[0])


def update_workout_log(
    store: DocumentStore,
    workout_log_id: str,
    *,
    status: str | None = None,
    notes: str | None = None,
    writer: BulkWriter | None = None,
    collections: Collections | None = None,
) -> None:
    """Patch status and/or notes of a workout log."""
    collections = collections or Collections()
    writer = writer or set_log_writer(store)
    patch: dict = {}
    if status is not None:
        if status not in ("in_progress", "complete"):
            raise ValidationError(f"Invalid status: {status}")
        patch["status"] = status
    if notes is not None:
        patch["notes"] = notes
    if not patch:
        return
    writer.with_backoff(
        lambda: store.update_document(collections.workout_logs, workout_log_id, patch),
        label=f"update {collections.workout_logs}",
    )


def list_set_logs(
    store: DocumentStore,
    workout_log_id: str,
    *,
    writer: BulkWriter | None = None,
    collections: Collections | None = None,
) -> list[SetLog]:
    """Return the set logs of one workout, ordered by exercise then set number."""
    collections = collections or Collections()
    docs = _list(
        store,
        writer,
        collections.set_logs,
        filters={"workout_log_id": workout_log_id},
        order=["program_exercise_id", "set_number"],
        limit=SET_LOG_LIST_LIMIT,
    )
    return [dict_to_set_log(d) for d in docs]


def upsert_set_logs(
    store: DocumentStore,
    workout_log_id: str,
    sets: list[SetLog],
    *,
    writer: BulkWriter | None = None,
    concurrency: int = SET_LOG_CONCURRENCY,
    collections: Collections | None = None,
) -> list[WriteResult]:
    """
    Save ``sets`` for a workout, one keyed upsert per
    (workout_log_id, program_exercise_id, set_number).

    Raises:
        ValidationError: If a set belongs to a different workout
        StoreError: First permanent store failure
    """
    collections = collections or Collections()
    writer = writer or set_log_writer(store)
    requests = []
    for s in sets:
        if s.workout_log_id != workout_log_id:
            raise ValidationError(
                f"Set {s.set_number} of '{s.program_exercise_id}' belongs to workout "
                f"'{s.workout_log_id}', not '{workout_log_id}'"
            )
        requests.append(WriteRequest.upsert(collections.set_logs, s.key, set_log_to_dict(s)))
    return writer.run(requests, concurrency)


def list_program_days(
    store: DocumentStore,
    program_id: str,
    *,
    week: int | None = None,
    writer: BulkWriter | None = None,
    collections: Collections | None = None,
) -> list[ProgramDay]:
    """Generated days of a program, ordered by week then day position."""
    collections = collections or Collections()
    filters: dict = {"program_id": program_id}
    if week is not None:
        filters["week_number"] = week
    docs = _list(
        store,
        writer,
        collections.program_days,
        filters=filters,
        order=["week_number", "order_index"],
    )
    return [dict_to_program_day(d) for d in docs]


def list_program_exercises(
    store: DocumentStore,
    program_day_id: str,
    *,
    writer: BulkWriter | None = None,
    collections: Collections | None = None,
) -> list[ProgramExercise]:
    """Exercises of one generated day, in order_index order."""
    collections = collections or Collections()
    docs = _list(
        store,
        writer,
        collections.program_exercises,
        filters={"program_day_id": program_day_id},
        order=["order_index"],
    )
    return [dict_to_program_exercise(d) for d in docs]
