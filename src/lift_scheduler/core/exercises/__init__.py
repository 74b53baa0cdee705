"""
Exercise templates for lift-scheduler.

Each day-type's exercise list lives in its own module; the registry
dispatches on DayType and MovementVariant.
"""

from .registry import DAY_LABELS, TEMPLATE_REGISTRY, day_label, seed

__all__ = [
    "DAY_LABELS",
    "TEMPLATE_REGISTRY",
    "day_label",
    "seed",
]
