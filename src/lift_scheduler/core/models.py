"""
Data models for lift-scheduler.

All core dataclasses representing the program template, persisted plan
records, workout logs, and generation bookkeeping.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Literal

ProgressPhase = Literal["day", "exercise"]
WorkoutStatus = Literal["in_progress", "complete"]


class DayType(str, Enum):
    """Training-session category.  Each week cycles through all four."""

    UPPER_STRENGTH = "upper-strength"
    LOWER_STRENGTH = "lower-strength"
    UPPER_HYPERTROPHY = "upper-hypertrophy"
    LOWER_HYPERTROPHY = "lower-hypertrophy"


# Fixed weekly order; order_index of a day is its position here (1-based).
DAY_CYCLE: tuple[DayType, ...] = (
    DayType.UPPER_STRENGTH,
    DayType.LOWER_STRENGTH,
    DayType.UPPER_HYPERTROPHY,
    DayType.LOWER_HYPERTROPHY,
)


class MovementVariant(str, Enum):
    """Hinge-pattern choice for the lower-strength day, alternating weekly."""

    PRIMARY_HINGE = "primary-hinge"
    PAUSED_HINGE = "paused-hinge"


class ExerciseCategory(str, Enum):
    COMPOUND = "compound"
    ACCESSORY = "accessory"
    CORE = "core"


def variant_for_week(week: int) -> MovementVariant:
    """Odd weeks use the primary hinge, even weeks the paused variant."""
    return MovementVariant.PRIMARY_HINGE if week % 2 == 1 else MovementVariant.PAUSED_HINGE


def _validate_date(date_str: str) -> None:
    """Validate date string is ISO format YYYY-MM-DD."""
    if not re.match(r"^\d{4}-\d{2}-\d{2}$", date_str):
        raise ValueError(f"Invalid date format: {date_str}. Expected YYYY-MM-DD")
    try:
        datetime.strptime(date_str, "%Y-%m-%d")
    except ValueError as e:
        raise ValueError(f"Invalid date: {date_str}") from e


@dataclass(frozen=True)
class ExerciseSpec:
    """
    Prescription for one exercise slot in a day template.

    Immutable: the deload transform returns a modified copy rather than
    mutating a template entry.
    """

    name: str
    category: ExerciseCategory
    sets: int
    rep_min: int
    rep_max: int
    rir_target: int
    notes: str | None = None
    substitutions: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        """Validate prescription."""
        if not self.name.strip():
            raise ValueError("name must be non-empty")
        if self.sets <= 0:
            raise ValueError("sets must be positive")
        if self.rep_min <= 0 or self.rep_max <= 0:
            raise ValueError("rep range bounds must be positive")
        if self.rep_min > self.rep_max:
            raise ValueError(f"rep_min ({self.rep_min}) exceeds rep_max ({self.rep_max})")
        if self.rir_target < 0:
            raise ValueError("rir_target must be non-negative")

    @property
    def rep_range(self) -> str:
        if self.rep_min == self.rep_max:
            return str(self.rep_min)
        return f"{self.rep_min}–{self.rep_max}"


@dataclass
class ProgramDay:
    """
    One training day of the 12-week block.

    ``id`` is None until the store acknowledges creation.
    ``movement_variant`` is only set on lower-strength days.
    """

    program_id: str
    week_number: int
    day_label: str
    day_type: DayType
    is_deload: bool
    order_index: int
    movement_variant: MovementVariant | None = None
    id: str | None = None

    def __post_init__(self) -> None:
        """Validate day data."""
        if not 1 <= self.week_number <= 12:
            raise ValueError(f"week_number must be in 1..12, got {self.week_number}")
        if not 1 <= self.order_index <= 4:
            raise ValueError(f"order_index must be in 1..4, got {self.order_index}")
        if self.movement_variant is not None and self.day_type != DayType.LOWER_STRENGTH:
            raise ValueError("movement_variant only applies to lower-strength days")


@dataclass
class ProgramExercise:
    """An ExerciseSpec bound to a persisted day, with its position in that day."""

    program_day_id: str
    spec: ExerciseSpec
    order_index: int
    id: str | None = None

    def __post_init__(self) -> None:
        if not self.program_day_id:
            raise ValueError("program_day_id must be set before creating exercises")
        if self.order_index < 1:
            raise ValueError("order_index must be >= 1")


@dataclass
class WorkoutLog:
    """A performed (or in-progress) session of one program day on one date."""

    user_id: str
    program_id: str
    program_day_id: str
    date: str  # ISO format: YYYY-MM-DD
    status: WorkoutStatus = "in_progress"
    notes: str | None = None
    id: str | None = None

    def __post_init__(self) -> None:
        _validate_date(self.date)
        if self.status not in ("in_progress", "complete"):
            raise ValueError(f"Invalid status: {self.status}")


@dataclass(frozen=True)
class CompositeKey:
    """
    Multi-field identity of a logical record, e.g. (workout, exercise, set).

    Field order is significant.  Encoding into store filters or a document
    id is the store adapter's job (see io/store.py: encode_key).
    """

    fields: tuple[str, ...]
    values: tuple[Any, ...]

    def __post_init__(self) -> None:
        if not self.fields:
            raise ValueError("CompositeKey needs at least one field")
        if len(self.fields) != len(self.values):
            raise ValueError("CompositeKey fields and values differ in length")
        if any(v is None for v in self.values):
            raise ValueError("CompositeKey values must not be None")

    @classmethod
    def of(cls, **parts: Any) -> "CompositeKey":
        """Build a key from keyword arguments, preserving their order."""
        return cls(fields=tuple(parts), values=tuple(parts.values()))

    def as_filters(self) -> dict[str, Any]:
        return dict(zip(self.fields, self.values))


@dataclass
class SetLog:
    """
    One logged set.  At most one record exists per
    (workout_log_id, program_exercise_id, set_number).
    """

    workout_log_id: str
    program_exercise_id: str
    set_number: int
    reps: int | None = None
    weight_kg: float | None = None
    rir: int | None = None
    notes: str | None = None
    id: str | None = None

    def __post_init__(self) -> None:
        """Validate set data."""
        if self.set_number < 1:
            raise ValueError("set_number must be >= 1")
        if self.reps is not None and self.reps < 0:
            raise ValueError("reps must be non-negative")
        if self.weight_kg is not None and self.weight_kg < 0:
            raise ValueError("weight_kg must be non-negative")
        if self.rir is not None and self.rir < 0:
            raise ValueError("rir must be non-negative")

    @property
    def key(self) -> CompositeKey:
        return CompositeKey.of(
            workout_log_id=self.workout_log_id,
            program_exercise_id=self.program_exercise_id,
            set_number=self.set_number,
        )


@dataclass(frozen=True)
class ProgressEvent:
    """Emitted after each successful write during plan generation."""

    phase: ProgressPhase
    created: int
    total: int
    message: str = ""


@dataclass
class GenerationSummary:
    """Outcome of a plan generation run."""

    created_days: int = 0
    created_exercises: int = 0
    retries: int = 0
    cancelled: bool = False
    day_ids: list[str] = field(default_factory=list)
