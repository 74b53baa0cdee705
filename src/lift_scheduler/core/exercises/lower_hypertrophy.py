"""
Lower Hypertrophy day template (Day 4).

The good morning is the only hinge here and is deliberately kept at
2–3 RIR; progress reps before load.
"""

from ..models import ExerciseCategory, ExerciseSpec

LOWER_HYPERTROPHY: tuple[ExerciseSpec, ...] = (
    ExerciseSpec(
        name="Hack Squat or Leg Press",
        category=ExerciseCategory.COMPOUND,
        sets=4,
        rep_min=10,
        rep_max=15,
        rir_target=2,
    ),
    ExerciseSpec(
        name="Good Morning",
        category=ExerciseCategory.COMPOUND,
        sets=3,
        rep_min=8,
        rep_max=12,
        rir_target=3,
        notes="Always leave 2–3 RIR; progress reps before load",
    ),
    ExerciseSpec(
        name="Walking Lunge or Bulgarian Split Squat",
        category=ExerciseCategory.COMPOUND,
        sets=3,
        rep_min=10,
        rep_max=12,
        rir_target=2,
    ),
    ExerciseSpec(
        name="Hamstring Curl",
        category=ExerciseCategory.ACCESSORY,
        sets=3,
        rep_min=10,
        rep_max=15,
        rir_target=1,
    ),
    ExerciseSpec(
        name="Calves",
        category=ExerciseCategory.ACCESSORY,
        sets=4,
        rep_min=10,
        rep_max=15,
        rir_target=1,
    ),
    ExerciseSpec(
        name="Pallof Press",
        category=ExerciseCategory.CORE,
        sets=3,
        rep_min=12,
        rep_max=15,
        rir_target=2,
        notes="Per side",
    ),
    ExerciseSpec(
        name="Farmer Carry (or DB holds)",
        category=ExerciseCategory.CORE,
        sets=3,
        rep_min=40,
        rep_max=60,
        rir_target=2,
        notes="Meters OR 30–45 sec holds",
    ),
)
