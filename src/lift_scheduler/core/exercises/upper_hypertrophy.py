"""Upper Hypertrophy day template (Day 3): moderate loads, 8–20 reps."""

from ..models import ExerciseCategory, ExerciseSpec

UPPER_HYPERTROPHY: tuple[ExerciseSpec, ...] = (
    ExerciseSpec(
        name="DB Bench or Machine Press",
        category=ExerciseCategory.COMPOUND,
        sets=3,
        rep_min=8,
        rep_max=12,
        rir_target=2,
    ),
    ExerciseSpec(
        name="Lat Pulldown",
        category=ExerciseCategory.COMPOUND,
        sets=3,
        rep_min=10,
        rep_max=15,
        rir_target=2,
    ),
    ExerciseSpec(
        name="Cable Row / Machine Row",
        category=ExerciseCategory.COMPOUND,
        sets=3,
        rep_min=8,
        rep_max=12,
        rir_target=2,
    ),
    ExerciseSpec(
        name="Seated DB Shoulder Press",
        category=ExerciseCategory.COMPOUND,
        sets=3,
        rep_min=8,
        rep_max=12,
        rir_target=2,
    ),
    ExerciseSpec(
        name="Pec Deck / Cable Fly",
        category=ExerciseCategory.ACCESSORY,
        sets=2,
        rep_min=12,
        rep_max=15,
        rir_target=1,
    ),
    ExerciseSpec(
        name="Lateral Raise",
        category=ExerciseCategory.ACCESSORY,
        sets=3,
        rep_min=12,
        rep_max=20,
        rir_target=1,
    ),
    ExerciseSpec(
        name="Curl",
        category=ExerciseCategory.ACCESSORY,
        sets=3,
        rep_min=10,
        rep_max=15,
        rir_target=1,
    ),
    ExerciseSpec(
        name="Overhead Rope Triceps",
        category=ExerciseCategory.ACCESSORY,
        sets=3,
        rep_min=10,
        rep_max=15,
        rir_target=1,
    ),
)
