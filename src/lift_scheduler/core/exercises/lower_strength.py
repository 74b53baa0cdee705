"""
Lower Strength day template (Day 2).

The second slot is the hinge pattern.  It alternates week to week between
a conventional deadlift (top set plus back-offs) and a paused RDL, which
trains the same pattern at lower spinal load and a higher rep range.
"""

from ..models import ExerciseCategory, ExerciseSpec, MovementVariant

PRIMARY_HINGE = ExerciseSpec(
    name="Conventional Deadlift (top set + 2 backoffs)",
    category=ExerciseCategory.COMPOUND,
    sets=3,
    rep_min=3,
    rep_max=5,
    rir_target=2,
    notes="Top set 1×3–5 @ 1–2 RIR, then 2 backoffs @ 2–3 RIR",
)

PAUSED_HINGE = ExerciseSpec(
    name="Paused RDL (2-sec pause mid-shin)",
    category=ExerciseCategory.COMPOUND,
    sets=3,
    rep_min=5,
    rep_max=8,
    rir_target=2,
)

HINGE_BY_VARIANT: dict[MovementVariant, ExerciseSpec] = {
    MovementVariant.PRIMARY_HINGE: PRIMARY_HINGE,
    MovementVariant.PAUSED_HINGE: PAUSED_HINGE,
}

_SQUAT = ExerciseSpec(
    name="Back Squat",
    category=ExerciseCategory.COMPOUND,
    sets=4,
    rep_min=4,
    rep_max=6,
    rir_target=2,
)

_ACCESSORIES: tuple[ExerciseSpec, ...] = (
    ExerciseSpec(
        name="Leg Press",
        category=ExerciseCategory.COMPOUND,
        sets=3,
        rep_min=6,
        rep_max=10,
        rir_target=2,
    ),
    ExerciseSpec(
        name="Hamstring Curl",
        category=ExerciseCategory.ACCESSORY,
        sets=3,
        rep_min=8,
        rep_max=12,
        rir_target=1,
    ),
    ExerciseSpec(
        name="Calves",
        category=ExerciseCategory.ACCESSORY,
        sets=4,
        rep_min=8,
        rep_max=12,
        rir_target=1,
    ),
    ExerciseSpec(
        name="Ab Wheel",
        category=ExerciseCategory.CORE,
        sets=3,
        rep_min=6,
        rep_max=12,
        rir_target=2,
    ),
    ExerciseSpec(
        name="Back Extensions (45°/GHD)",
        category=ExerciseCategory.CORE,
        sets=2,
        rep_min=10,
        rep_max=15,
        rir_target=2,
    ),
)


def lower_strength(variant: MovementVariant) -> tuple[ExerciseSpec, ...]:
    """Return the Lower Strength list with the hinge slot chosen by ``variant``."""
    return (_SQUAT, HINGE_BY_VARIANT[MovementVariant(variant)], *_ACCESSORIES)
