"""Unit tests for the score calculator."""

import pytest

from cams.engine.calculator import compute_score, derive_level, round_half_up, tier_multiplier
from cams.engine.rules import max_possible_points
from cams.schemas.assessment import AssessmentRecord


def test_high_tier_reaches_level_five(rules, record_a):
    """Tier B doubles experience: (20 + 10) * 2.0 + 40 + 1 = 101, level 5."""
    score = compute_score(record_a, rules)
    assert score.multiplier == 2.0
    assert score.experience_points == 60
    assert score.education_points == 40
    assert score.extra_course_points == 0
    assert score.subjective_points == 1
    assert score.total_points == 101
    assert score.level == 5
    assert score.level_title == "HV, EL & MEC: PiC + LOTO + TR"


def test_mid_tier_level_four(rules, record_a):
    """Tier C: (20 + 10) * 1.5 + 40 + 1 = 86, level 4."""
    record = record_a.model_copy(update={"certification_tier": "C"})
    score = compute_score(record, rules)
    assert score.experience_points == 45
    assert score.total_points == 86
    assert score.level == 4


def test_empty_record_is_level_one(rules):
    """Nothing selected scores zero and lands in the lowest band."""
    score = compute_score(AssessmentRecord(technician_id="t"), rules)
    assert score.total_points == 0
    assert score.level == 1
    assert score.level_title == "Supervised Worker"


def test_blank_selection_counts_as_unset(rules):
    """The UI sends '' for an unselected experience group."""
    record = AssessmentRecord(technician_id="t", internal_experience="", external_experience="")
    assert record.internal_experience is None
    assert compute_score(record, rules).total_points == 0


def test_rounds_once_after_summing(rules):
    """(27 + 5) * 1.5 = 48; rounding each term first would give 41 + 8 = 49."""
    record = AssessmentRecord(
        technician_id="t",
        certification_tier="C",
        internal_experience="4years",
        external_experience="0.5-2",
    )
    assert compute_score(record, rules).experience_points == 48


def test_half_points_round_up(rules):
    """15 * 1.5 = 22.5 rounds up to 23, not to the even 22."""
    record = AssessmentRecord(technician_id="t", certification_tier="C", external_experience="3+")
    assert compute_score(record, rules).experience_points == 23


@pytest.mark.parametrize("value,expected", [(0.5, 1), (1.5, 2), (2.5, 3), (22.5, 23), (22.4, 22), (0.0, 0)])
def test_round_half_up(value, expected):
    """Half values always round up."""
    assert round_half_up(value) == expected


def test_unknown_keys_score_zero(rules):
    """Keys missing from the table contribute nothing instead of failing."""
    record = AssessmentRecord(
        technician_id="t",
        internal_experience="10years",
        external_experience="retired",
        education=("phd", "electrical"),
        extra_courses=("basket-weaving",),
    )
    score = compute_score(record, rules)
    assert score.internal_points == 0
    assert score.external_points == 0
    assert score.education_points == 40
    assert score.extra_course_points == 0


def test_unknown_tier_uses_lowest_multiplier(rules):
    """An unrecognised tier falls back to the lowest multiplier."""
    assert tier_multiplier("Apprentice", rules) == 1.0
    record = AssessmentRecord(technician_id="t", certification_tier="Apprentice", internal_experience="5years")
    assert compute_score(record, rules).experience_points == 30


def test_field_trainer_multiplier(rules):
    """Field Trainer has the highest multiplier; A and B share 2.0."""
    assert tier_multiplier("Field Trainer", rules) == 2.5
    assert tier_multiplier("A", rules) == tier_multiplier("B", rules) == 2.0


def test_duplicate_keys_counted_once(rules):
    """Repeated selections are de-duplicated by the record."""
    record = AssessmentRecord(
        technician_id="t",
        education=["electrical", "electrical", "wind"],
        extra_courses=["eks", "eks"],
    )
    assert record.education == ("electrical", "wind")
    score = compute_score(record, rules)
    assert score.education_points == 65
    assert score.extra_course_points == 15


def test_out_of_range_subjective_added_as_given(rules):
    """Range checks belong to the caller; the calculator just adds the value."""
    assert compute_score(AssessmentRecord(technician_id="t", subjective_score=9), rules).total_points == 9


def test_negative_total_falls_into_lowest_level(rules):
    """A total below every threshold still yields a level."""
    score = compute_score(AssessmentRecord(technician_id="t", subjective_score=-3), rules)
    assert score.total_points == -3
    assert score.level == 1


@pytest.mark.parametrize(
    "total,level",
    [(0, 1), (14, 1), (15, 2), (43, 2), (44, 3), (79, 3), (80, 4), (99, 4), (100, 5), (250, 5)],
)
def test_level_thresholds(rules, total, level):
    """Level boundaries match the competency matrix."""
    assert derive_level(total, rules) == level


def test_every_total_has_exactly_one_level(rules):
    """Scanning 0..max finds one matching band per total and never skips a level."""
    top = max_possible_points(rules)
    thresholds = sorted(band.min_points for band in rules.levels)
    previous = 1
    for total in range(top + 1):
        matching = [t for t in thresholds if t <= total]
        level = derive_level(total, rules)
        assert matching, total
        assert 1 <= level <= rules.max_level
        assert level in (previous, previous + 1)
        previous = level
    assert previous == rules.max_level


def test_deterministic(rules, record_a):
    """Same inputs, same result."""
    assert compute_score(record_a, rules) == compute_score(record_a, rules)


@pytest.mark.parametrize("tier", ["D", "C", "B", "A", "Field Trainer"])
def test_upgrading_experience_never_lowers_total(rules, record_a, tier):
    """Walking internal experience bands upward never decreases the total."""
    bands = sorted(rules.internal_experience, key=lambda b: b.points)
    totals = [
        compute_score(
            record_a.model_copy(update={"certification_tier": tier, "internal_experience": band.key}), rules
        ).total_points
        for band in bands
    ]
    assert totals == sorted(totals)


def test_adding_course_never_lowers_total(rules, record_a):
    """Adding a multi-select option never decreases the total."""
    base = compute_score(record_a, rules).total_points
    for band in rules.extra_courses:
        record = record_a.model_copy(update={"extra_courses": (band.key,)})
        assert compute_score(record, rules).total_points >= base


def test_null_fields_score_zero(rules):
    """Every field may arrive as null; nulls read as unset and score nothing."""
    record = AssessmentRecord(
        technician_id="t",
        certification_tier=None,
        internal_experience=None,
        external_experience=None,
        education=None,
        extra_courses=None,
        subjective_score=None,
    )
    assert record == AssessmentRecord(technician_id="t")
    assert record.certification_tier == "D"
    assert record.subjective_score == 0
    score = compute_score(record, rules)
    assert score.total_points == 0
    assert score.level == 1


def test_blank_tier_and_subjective_read_as_unset(rules):
    """Empty strings from the dashboard are treated like nulls."""
    record = AssessmentRecord(technician_id="t", certification_tier="", subjective_score="")
    assert record.certification_tier == "D"
    assert compute_score(record, rules).total_points == 0
