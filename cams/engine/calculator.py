"""Score calculator - points and competency level for an assessment record."""

import math

from cams.schemas.assessment import AssessmentRecord, ScoreResult
from cams.schemas.rules import Band, RuleTable


def _band_points(bands: tuple[Band, ...], key: str | None) -> int:
    """Points for a single selection; unset or unknown keys score 0."""
    if key is None:
        return 0
    for band in bands:
        if band.key == key:
            return band.points
    return 0


def _multi_points(bands: tuple[Band, ...], keys: tuple[str, ...]) -> int:
    return sum(_band_points(bands, key) for key in set(keys))


def round_half_up(value: float) -> int:
    """Round x.5 away from zero for positives, matching the dashboard's Math.round."""
    return math.floor(value + 0.5)


def tier_multiplier(tier: str, rules: RuleTable) -> float:
    """Experience multiplier for a tier; unknown tiers get the lowest one."""
    return rules.tier_multipliers.get(tier, rules.lowest_multiplier)


def derive_level(total_points: int, rules: RuleTable) -> int:
    """
    Scan level bands from the highest threshold down and return the first
    band reached. Totals below every band (only possible with a negative
    subjective score) fall into the lowest band.
    """
    ordered = sorted(rules.levels, key=lambda b: b.min_points, reverse=True)
    for band in ordered:
        if band.min_points <= total_points:
            return band.level
    return ordered[-1].level


def compute_score(record: AssessmentRecord, rules: RuleTable) -> ScoreResult:
    """
    Compute subtotals, total and level for a record.
    Pure; never raises for any record the schema accepts.
    """
    internal = _band_points(rules.internal_experience, record.internal_experience)
    external = _band_points(rules.external_experience, record.external_experience)
    multiplier = tier_multiplier(record.certification_tier, rules)
    # Round once, after summing both experience terms
    experience = round_half_up((internal + external) * multiplier)
    education = _multi_points(rules.education, record.education)
    courses = _multi_points(rules.extra_courses, record.extra_courses)
    subjective = record.subjective_score

    total = education + courses + experience + subjective
    level = derive_level(total, rules)
    band = rules.level_band(level)

    return ScoreResult(
        internal_points=internal,
        external_points=external,
        multiplier=multiplier,
        experience_points=experience,
        education_points=education,
        extra_course_points=courses,
        subjective_points=subjective,
        total_points=total,
        level=level,
        level_title=band.title if band else "",
    )
