"""
Tests for the exercise template library and the deload transform.

Expected counts come straight from the hand-authored day lists:
  upper-strength 7, lower-strength 7, upper-hypertrophy 8, lower-hypertrophy 7
"""

import math
from dataclasses import replace

import pytest

from lift_scheduler.core.deload import deload, is_deload_week
from lift_scheduler.core.exercises import day_label, seed
from lift_scheduler.core.models import (
    DAY_CYCLE,
    DayType,
    ExerciseCategory,
    ExerciseSpec,
    MovementVariant,
    variant_for_week,
)
from lift_scheduler.io.serializers import exercise_spec_to_dict

EXPECTED_COUNTS = {
    DayType.UPPER_STRENGTH: 7,
    DayType.LOWER_STRENGTH: 7,
    DayType.UPPER_HYPERTROPHY: 8,
    DayType.LOWER_HYPERTROPHY: 7,
}


def _spec(sets: int = 3, rir: int = 2, notes: str | None = None) -> ExerciseSpec:
    return ExerciseSpec(
        name="Test Press",
        category=ExerciseCategory.COMPOUND,
        sets=sets,
        rep_min=5,
        rep_max=8,
        rir_target=rir,
        notes=notes,
    )


class TestSeed:
    """seed() is pure, total over DayType, and deterministic."""

    @pytest.mark.parametrize("day_type", list(DayType))
    @pytest.mark.parametrize("variant", list(MovementVariant))
    def test_same_inputs_same_output(self, day_type, variant):
        first = [exercise_spec_to_dict(s) for s in seed(day_type, variant)]
        second = [exercise_spec_to_dict(s) for s in seed(day_type, variant)]
        assert first == second

    @pytest.mark.parametrize("day_type,count", list(EXPECTED_COUNTS.items()))
    def test_list_lengths(self, day_type, count):
        assert len(seed(day_type, MovementVariant.PRIMARY_HINGE)) == count
        assert 6 <= count <= 8

    def test_returns_fresh_list(self):
        a = seed(DayType.UPPER_STRENGTH)
        a.clear()
        assert len(seed(DayType.UPPER_STRENGTH)) == 7

    @pytest.mark.parametrize("day_type", list(DayType))
    @pytest.mark.parametrize("variant", list(MovementVariant))
    def test_templates_carry_no_substitutions(self, day_type, variant):
        for spec in seed(day_type, variant):
            assert spec.substitutions == ()
            assert exercise_spec_to_dict(spec)["substitutions"] == []

    def test_accepts_string_values(self):
        assert seed("upper-hypertrophy", "paused-hinge") == seed(
            DayType.UPPER_HYPERTROPHY, MovementVariant.PAUSED_HINGE
        )

    def test_unknown_day_type_fails_fast(self):
        with pytest.raises(ValueError, match="Unknown day type"):
            seed("full-body")

    def test_unknown_variant_fails_fast(self):
        with pytest.raises(ValueError):
            seed(DayType.LOWER_STRENGTH, "sumo")

    def test_first_exercise_of_each_day(self):
        assert seed(DayType.UPPER_STRENGTH)[0].name == "Incline Press (BB or DB)"
        assert seed(DayType.LOWER_STRENGTH)[0].name == "Back Squat"
        assert seed(DayType.UPPER_HYPERTROPHY)[0].name == "DB Bench or Machine Press"
        assert seed(DayType.LOWER_HYPERTROPHY)[0].name == "Hack Squat or Leg Press"


class TestHingeVariant:
    """The variant swaps exactly one lower-strength slot."""

    def test_primary_hinge_is_deadlift(self):
        hinge = seed(DayType.LOWER_STRENGTH, MovementVariant.PRIMARY_HINGE)[1]
        assert hinge.name.startswith("Conventional Deadlift")
        assert (hinge.rep_min, hinge.rep_max) == (3, 5)
        assert hinge.notes is not None

    def test_paused_hinge_is_paused_rdl(self):
        hinge = seed(DayType.LOWER_STRENGTH, MovementVariant.PAUSED_HINGE)[1]
        assert hinge.name.startswith("Paused RDL")
        assert (hinge.rep_min, hinge.rep_max) == (5, 8)

    def test_only_the_hinge_slot_differs(self):
        primary = seed(DayType.LOWER_STRENGTH, MovementVariant.PRIMARY_HINGE)
        paused = seed(DayType.LOWER_STRENGTH, MovementVariant.PAUSED_HINGE)
        diffs = [i for i, (a, b) in enumerate(zip(primary, paused)) if a != b]
        assert diffs == [1]

    @pytest.mark.parametrize(
        "day_type",
        [DayType.UPPER_STRENGTH, DayType.UPPER_HYPERTROPHY, DayType.LOWER_HYPERTROPHY],
    )
    def test_other_days_ignore_variant(self, day_type):
        assert seed(day_type, MovementVariant.PRIMARY_HINGE) == seed(day_type, MovementVariant.PAUSED_HINGE)

    def test_variant_by_week_parity(self):
        assert [variant_for_week(w) for w in (1, 2, 3, 12)] == [
            MovementVariant.PRIMARY_HINGE,
            MovementVariant.PAUSED_HINGE,
            MovementVariant.PRIMARY_HINGE,
            MovementVariant.PAUSED_HINGE,
        ]


class TestDayLabels:
    def test_labels_follow_cycle(self):
        labels = [day_label(dt) for dt in DAY_CYCLE]
        assert labels == [
            "Day 1 – Upper Strength",
            "Day 2 – Lower Strength",
            "Day 3 – Upper Hypertrophy",
            "Day 4 – Lower Hypertrophy",
        ]


class TestExerciseSpecValidation:
    def test_rep_min_above_max_rejected(self):
        with pytest.raises(ValueError, match="exceeds"):
            ExerciseSpec(name="X", category=ExerciseCategory.CORE, sets=1, rep_min=9, rep_max=8, rir_target=0)

    def test_zero_sets_rejected(self):
        with pytest.raises(ValueError):
            _spec(sets=0)

    def test_negative_rir_rejected(self):
        with pytest.raises(ValueError):
            _spec(rir=-1)

    def test_frozen(self):
        spec = _spec()
        with pytest.raises(AttributeError):
            spec.sets = 10  # type: ignore[misc]


class TestDeload:
    """sets → max(1, ceil(sets/2)); RIR → max(RIR, 4); notes get a DELOAD marker."""

    @pytest.mark.parametrize("sets,expected", [(1, 1), (2, 1), (3, 2), (4, 2), (5, 3), (8, 4)])
    def test_sets_halved_rounding_up(self, sets, expected):
        assert deload(_spec(sets=sets)).sets == expected

    @pytest.mark.parametrize("rir,expected", [(0, 4), (2, 4), (4, 4), (5, 5)])
    def test_rir_raised_to_four(self, rir, expected):
        assert deload(_spec(rir=rir)).rir_target == expected

    def test_notes_marker_appended(self):
        assert deload(_spec(notes="Per side")).notes == "Per side (DELOAD)"

    def test_notes_marker_set_when_absent(self):
        assert deload(_spec()).notes == "DELOAD"

    def test_input_not_mutated(self):
        original = _spec(sets=4, rir=1)
        deload(original)
        assert original == replace(original)
        assert (original.sets, original.rir_target, original.notes) == (4, 1, None)

    def test_other_fields_unchanged(self):
        original = _spec(sets=4)
        result = deload(original)
        assert (result.name, result.category, result.rep_min, result.rep_max) == (
            original.name, original.category, original.rep_min, original.rep_max,
        )

    @pytest.mark.parametrize("day_type", list(DayType))
    def test_invariant_over_all_templates(self, day_type):
        for variant in MovementVariant:
            for spec in seed(day_type, variant):
                d = deload(spec)
                assert d.sets == max(1, math.ceil(spec.sets / 2))
                assert d.rir_target >= max(4, spec.rir_target)

    def test_only_week_six(self):
        assert [w for w in range(1, 13) if is_deload_week(w)] == [6]
