"""
Upper Strength day template (Day 1).

Heavy presses and pulls in the 4–8 rep range, followed by shoulder and
arm accessories closer to failure.
"""

from ..models import ExerciseCategory, ExerciseSpec

UPPER_STRENGTH: tuple[ExerciseSpec, ...] = (
    ExerciseSpec(
        name="Incline Press (BB or DB)",
        category=ExerciseCategory.COMPOUND,
        sets=4,
        rep_min=4,
        rep_max=6,
        rir_target=2,
    ),
    ExerciseSpec(
        name="Pull-ups (weighted if able)",
        category=ExerciseCategory.COMPOUND,
        sets=4,
        rep_min=4,
        rep_max=6,
        rir_target=2,
    ),
    ExerciseSpec(
        name="Bench Press (or machine press)",
        category=ExerciseCategory.COMPOUND,
        sets=3,
        rep_min=5,
        rep_max=8,
        rir_target=2,
    ),
    ExerciseSpec(
        name="Chest-supported Row",
        category=ExerciseCategory.COMPOUND,
        sets=3,
        rep_min=5,
        rep_max=8,
        rir_target=2,
    ),
    ExerciseSpec(
        name="Lateral Raise",
        category=ExerciseCategory.ACCESSORY,
        sets=3,
        rep_min=10,
        rep_max=15,
        rir_target=1,
    ),
    ExerciseSpec(
        name="Triceps Pressdown",
        category=ExerciseCategory.ACCESSORY,
        sets=2,
        rep_min=8,
        rep_max=12,
        rir_target=1,
    ),
    ExerciseSpec(
        name="Curl (optional)",
        category=ExerciseCategory.ACCESSORY,
        sets=2,
        rep_min=8,
        rep_max=12,
        rir_target=1,
    ),
)
