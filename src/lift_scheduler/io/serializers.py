"""
JSON serialization for program and logging models.

Handles conversion between dataclasses and the flat dict payloads sent to
and read from a DocumentStore.
"""

import re
from datetime import datetime
from typing import Any

from ..core.models import (
    DayType,
    ExerciseCategory,
    ExerciseSpec,
    MovementVariant,
    ProgramDay,
    ProgramExercise,
    SetLog,
    WorkoutLog,
)


class ValidationError(Exception):
    """Raised when data validation fails."""

    pass


def validate_date(date_str: str) -> str:
    """
    Validate and normalize date string to ISO format.

    Args:
        date_str: Date string to validate

    Returns:
        Normalized YYYY-MM-DD string

    Raises:
        ValidationError: If date format is invalid
    """
    if not re.match(r"^\d{4}-\d{2}-\d{2}$", date_str):
        raise ValidationError(f"Invalid date format: {date_str}. Expected YYYY-MM-DD")

    try:
        datetime.strptime(date_str, "%Y-%m-%d")
    except ValueError as e:
        raise ValidationError(f"Invalid date: {date_str}") from e

    return date_str


def _require(data: dict[str, Any], *names: str) -> None:
    missing = [n for n in names if n not in data]
    if missing:
        raise ValidationError(f"Document missing fields: {missing}")


def _opt_int(value: Any) -> int | None:
    return int(value) if value is not None else None


def _opt_float(value: Any) -> float | None:
    return float(value) if value is not None else None


# =============================================================================
# Program days / exercises
# =============================================================================


def program_day_to_dict(day: ProgramDay) -> dict[str, Any]:
    """Convert ProgramDay to a store payload (without its id)."""
    return {
        "program_id": day.program_id,
        "week_number": day.week_number,
        "day_label": day.day_label,
        "day_type": day.day_type.value,
        "is_deload": day.is_deload,
        "movement_variant": day.movement_variant.value if day.movement_variant else None,
        "order_index": day.order_index,
    }


def dict_to_program_day(data: dict[str, Any]) -> ProgramDay:
    """
    Convert a stored document to ProgramDay.

    Raises:
        ValidationError: If data is invalid
    """
    _require(data, "program_id", "week_number", "day_type", "order_index")
    try:
        variant = data.get("movement_variant")
        return ProgramDay(
            id=data.get("id"),
            program_id=str(data["program_id"]),
            week_number=int(data["week_number"]),
            day_label=str(data.get("day_label", "")),
            day_type=DayType(data["day_type"]),
            is_deload=bool(data.get("is_deload", False)),
            movement_variant=MovementVariant(variant) if variant else None,
            order_index=int(data["order_index"]),
        )
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid program day: {e}") from e


def exercise_spec_to_dict(spec: ExerciseSpec) -> dict[str, Any]:
    return {
        "name": spec.name,
        "category": spec.category.value,
        "sets": spec.sets,
        "rep_min": spec.rep_min,
        "rep_max": spec.rep_max,
        "rir_target": spec.rir_target,
        "notes": spec.notes,
        "substitutions": list(spec.substitutions),
    }


def dict_to_exercise_spec(data: dict[str, Any]) -> ExerciseSpec:
    """
    Convert dict to ExerciseSpec.

    Raises:
        ValidationError: If data is invalid
    """
    _require(data, "name", "category", "sets", "rep_min", "rep_max", "rir_target")
    try:
        return ExerciseSpec(
            name=str(data["name"]),
            category=ExerciseCategory(data["category"]),
            sets=int(data["sets"]),
            rep_min=int(data["rep_min"]),
            rep_max=int(data["rep_max"]),
            rir_target=int(data["rir_target"]),
            notes=data.get("notes"),
            substitutions=tuple(data.get("substitutions") or ()),
        )
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid exercise: {e}") from e


def program_exercise_to_dict(exercise: ProgramExercise) -> dict[str, Any]:
    """Convert ProgramExercise to a store payload (without its id)."""
    return {
        "program_day_id": exercise.program_day_id,
        **exercise_spec_to_dict(exercise.spec),
        "order_index": exercise.order_index,
    }


def dict_to_program_exercise(data: dict[str, Any]) -> ProgramExercise:
    """
    Convert a stored document to ProgramExercise.

    Raises:
        ValidationError: If data is invalid
    """
    _require(data, "program_day_id", "order_index")
    spec = dict_to_exercise_spec(data)
    try:
        return ProgramExercise(
            id=data.get("id"),
            program_day_id=str(data["program_day_id"]),
            spec=spec,
            order_index=int(data["order_index"]),
        )
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid program exercise: {e}") from e


# =============================================================================
# Workout and set logs
# =============================================================================


def workout_log_to_dict(log: WorkoutLog) -> dict[str, Any]:
    return {
        "user_id": log.user_id,
        "program_id": log.program_id,
        "program_day_id": log.program_day_id,
        "date": log.date,
        "status": log.status,
        "notes": log.notes,
    }


def dict_to_workout_log(data: dict[str, Any]) -> WorkoutLog:
    """
    Convert a stored document to WorkoutLog.

    Raises:
        ValidationError: If data is invalid
    """
    _require(data, "user_id", "program_id", "program_day_id", "date")
    try:
        return WorkoutLog(
            id=data.get("id"),
            user_id=str(data["user_id"]),
            program_id=str(data["program_id"]),
            program_day_id=str(data["program_day_id"]),
            date=validate_date(str(data["date"])),
            status=data.get("status", "in_progress"),
            notes=data.get("notes"),
        )
    except ValueError as e:
        raise ValidationError(f"Invalid workout log: {e}") from e


def set_log_to_dict(set_log: SetLog) -> dict[str, Any]:
    return {
        "workout_log_id": set_log.workout_log_id,
        "program_exercise_id": set_log.program_exercise_id,
        "set_number": set_log.set_number,
        "reps": set_log.reps,
        "weight_kg": set_log.weight_kg,
        "rir": set_log.rir,
        "notes": set_log.notes,
    }


def dict_to_set_log(data: dict[str, Any]) -> SetLog:
    """
    Convert a stored document to SetLog.

    Raises:
        ValidationError: If data is invalid
    """
    _require(data, "workout_log_id", "program_exercise_id", "set_number")
    try:
        return SetLog(
            id=data.get("id"),
            workout_log_id=str(data["workout_log_id"]),
            program_exercise_id=str(data["program_exercise_id"]),
            set_number=int(data["set_number"]),
            reps=_opt_int(data.get("reps")),
            weight_kg=_opt_float(data.get("weight_kg")),
            rir=_opt_int(data.get("rir")),
            notes=data.get("notes"),
        )
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid set log: {e}") from e


# =============================================================================
# CLI set entry parsing
# =============================================================================

_SET_ENTRY = re.compile(
    r"^(?P<exercise>[^#=\s]+)#(?P<set>\d+)="
    r"(?P<reps>\d+)"
    r"(?:@\+?(?P<weight>\d+(?:\.\d+)?))?"
    r"(?:/(?P<rir>\d+))?$"
)


def parse_set_entries(entries: str) -> list[tuple[str, int, int, float | None, int | None]]:
    """
    Parse a comma-separated list of logged sets.

    Format per entry:
        EXERCISE_ID#SET=REPS[@KG][/RIR]

    Examples:
        "abc#1=8@60/2"        set 1 of exercise abc, 8 reps at 60 kg, 2 RIR
        "abc#2=6, abc#3=5@62.5"

    Returns:
        List of (program_exercise_id, set_number, reps, weight_kg, rir)

    Raises:
        ValidationError: If an entry does not match the format
    """
    if not entries or not entries.strip():
        raise ValidationError("Sets string cannot be empty")

    parsed: list[tuple[str, int, int, float | None, int | None]] = []
    for part in (p.strip() for p in entries.split(",")):
        if not part:
            continue
        m = _SET_ENTRY.match(part)
        if m is None:
            raise ValidationError(
                f"Invalid set entry: '{part}'.\n"
                "Use: EXERCISE_ID#SET=REPS@KG/RIR (e.g. ex42#1=8@60/2); weight and RIR are optional."
            )
        set_number = int(m.group("set"))
        if set_number < 1:
            raise ValidationError(f"Set number must be >= 1: '{part}'")
        parsed.append((
            m.group("exercise"),
            set_number,
            int(m.group("reps")),
            float(m.group("weight")) if m.group("weight") is not None else None,
            int(m.group("rir")) if m.group("rir") is not None else None,
        ))

    if not parsed:
        raise ValidationError("No valid sets found in sets string")
    return parsed
