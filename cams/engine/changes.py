"""Change detector - field-level diff between two assessment snapshots."""

from cams.schemas.assessment import AssessmentRecord, ScoreResult
from cams.schemas.rules import RuleTable

ARROW = "→"
NONE_LABEL = "None"


def _selection_label(rules: RuleTable, category: str, key: str | None) -> str:
    if key is None:
        return NONE_LABEL
    return rules.label_for(category, key) or key


def _added(before: tuple[str, ...], after: tuple[str, ...]) -> list[str]:
    """Keys in `after` but not in `before`, in the order of `after`."""
    old = set(before)
    return [k for k in after if k not in old]


def detect_changes(
    previous: AssessmentRecord,
    next: AssessmentRecord,
    previous_score: ScoreResult,
    next_score: ScoreResult,
    rules: RuleTable,
) -> list[str]:
    """
    Describe what changed between two snapshots, one line per change.

    Order is fixed: tier, internal experience, external experience,
    education added/removed, courses added/removed, subjective score,
    total points. Total points is reported only when the number differs.
    """
    changes: list[str] = []

    if previous.certification_tier != next.certification_tier:
        changes.append(
            f"Vestas Level: {previous.certification_tier} {ARROW} {next.certification_tier}"
        )

    for category, title in (
        ("internal_experience", "Internal Experience"),
        ("external_experience", "External Experience"),
    ):
        old_key = getattr(previous, category)
        new_key = getattr(next, category)
        if old_key != new_key:
            old_label = _selection_label(rules, category, old_key)
            new_label = _selection_label(rules, category, new_key)
            changes.append(f"{title}: {old_label} {ARROW} {new_label}")

    for category, noun in (("education", "Education"), ("extra_courses", "Course")):
        old_keys = getattr(previous, category)
        new_keys = getattr(next, category)
        for key in _added(old_keys, new_keys):
            changes.append(f"Added {noun}: {_selection_label(rules, category, key)}")
        for key in _added(new_keys, old_keys):
            changes.append(f"Removed {noun}: {_selection_label(rules, category, key)}")

    if previous.subjective_score != next.subjective_score:
        changes.append(
            f"Subjective Score: {previous.subjective_score} {ARROW} {next.subjective_score}"
        )

    if previous_score.total_points != next_score.total_points:
        changes.append(
            f"Total Points: {previous_score.total_points} {ARROW} {next_score.total_points}"
        )

    return changes
