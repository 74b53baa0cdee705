"""
Deload transform.

Week 6 of the block is a reduced-intensity week: roughly half the sets
and a higher reps-in-reserve target on every exercise.
"""

import math
from dataclasses import replace

from .config import DELOAD_MARKER, DELOAD_MIN_RIR, DELOAD_MIN_SETS, DELOAD_WEEK
from .models import ExerciseSpec


def is_deload_week(week: int) -> bool:
    return week == DELOAD_WEEK


def deload(spec: ExerciseSpec) -> ExerciseSpec:
    """
    Return a deload copy of ``spec``.

    sets  → max(1, ceil(sets / 2))
    RIR   → max(rir_target, 4)
    notes → "<notes> (DELOAD)", or "DELOAD" when there were none
    """
    sets = max(DELOAD_MIN_SETS, math.ceil(spec.sets / 2))
    notes = f"{spec.notes} ({DELOAD_MARKER})" if spec.notes else DELOAD_MARKER
    return replace(
        spec,
        sets=sets,
        rir_target=max(spec.rir_target, DELOAD_MIN_RIR),
        notes=notes,
    )
