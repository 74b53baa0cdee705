"""
Exercise template registry.

Maps each DayType to its hand-authored exercise list.  Use seed() to get
the ordered prescriptions for one training day.  The lists are plain
Python constants, so seed() performs no I/O and always returns the same
entries in the same order.
"""

from collections.abc import Callable

from ..models import DayType, ExerciseSpec, MovementVariant
from .lower_hypertrophy import LOWER_HYPERTROPHY
from .lower_strength import lower_strength
from .upper_hypertrophy import UPPER_HYPERTROPHY
from .upper_strength import UPPER_STRENGTH

TEMPLATE_REGISTRY: dict[DayType, Callable[[MovementVariant], tuple[ExerciseSpec, ...]]] = {
    DayType.UPPER_STRENGTH: lambda _variant: UPPER_STRENGTH,
    DayType.LOWER_STRENGTH: lower_strength,
    DayType.UPPER_HYPERTROPHY: lambda _variant: UPPER_HYPERTROPHY,
    DayType.LOWER_HYPERTROPHY: lambda _variant: LOWER_HYPERTROPHY,
}

DAY_LABELS: dict[DayType, str] = {
    DayType.UPPER_STRENGTH: "Day 1 – Upper Strength",
    DayType.LOWER_STRENGTH: "Day 2 – Lower Strength",
    DayType.UPPER_HYPERTROPHY: "Day 3 – Upper Hypertrophy",
    DayType.LOWER_HYPERTROPHY: "Day 4 – Lower Hypertrophy",
}


def _resolve_day_type(day_type: DayType | str) -> DayType:
    try:
        return DayType(day_type)
    except ValueError:
        valid = ", ".join(d.value for d in DayType)
        raise ValueError(f"Unknown day type '{day_type}'. Valid types: {valid}") from None


def seed(
    day_type: DayType | str,
    variant: MovementVariant | str = MovementVariant.PRIMARY_HINGE,
) -> list[ExerciseSpec]:
    """
    Return the ordered exercise prescriptions for one day.

    Args:
        day_type: Which of the four sessions
        variant: Hinge variant; only consulted for lower-strength

    Returns:
        New list of ExerciseSpec (the entries themselves are immutable)

    Raises:
        ValueError: If day_type or variant is not a known value
    """
    builder = TEMPLATE_REGISTRY[_resolve_day_type(day_type)]
    return list(builder(MovementVariant(variant)))


def day_label(day_type: DayType | str) -> str:
    """Human-readable label, e.g. "Day 2 – Lower Strength"."""
    return DAY_LABELS[_resolve_day_type(day_type)]
