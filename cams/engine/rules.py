"""Built-in competency matrix rule table and loading helpers."""

import json
import logging
from pathlib import Path

from cams.engine.calculator import round_half_up
from cams.schemas.rules import Band, LevelBand, RuleTable

logger = logging.getLogger(__name__)

SUBJECTIVE_MAX = 5

DEFAULT_RULES = RuleTable(
    version="2024.1",
    internal_experience=(
        Band(label="Electrical Works 6 months", key="6months", points=8),
        Band(label="1 Year", key="1year", points=20),
        Band(label="2 Years", key="2years", points=22),
        Band(label="3 Years", key="3years", points=25),
        Band(label="4 Years", key="4years", points=27),
        Band(label="5+ Years", key="5years", points=30),
    ),
    external_experience=(
        Band(label="0.5-2 Years as Electrician", key="0.5-2", points=5),
        Band(label="2-3 Years as Electrician", key="2-3", points=10),
        Band(label="3+ Years as Electrician", key="3+", points=15),
    ),
    education=(
        Band(label="Electrical Education", key="electrical", points=40),
        Band(label="EN50110 Training (Vestas Internal)", key="en50110", points=35),
        Band(label="Wind Turbine Education", key="wind", points=25),
        Band(label="Technical Education (incl. electrical modules)", key="technical", points=20),
        Band(label="No relevant Training", key="none", points=0),
    ),
    extra_courses=(
        Band(label="Electrical Knowledge Sweden", key="eks", points=15),
        Band(label="Electrical Safety for Qualified", key="esq", points=10),
        Band(label="Add on C-Level HV", key="hv", points=8),
    ),
    tier_multipliers={
        "D": 1.0,
        "C": 1.5,
        "B": 2.0,
        "A": 2.0,
        "Field Trainer": 2.5,
    },
    levels=(
        LevelBand(
            min_points=0,
            level=1,
            title="Supervised Worker",
            description="Only allowed to work under another Person in Charge",
        ),
        LevelBand(
            min_points=15,
            level=2,
            title="Mechanical: PiC + LOTO",
            description=(
                "Person in Charge of mechanical work activity which does not include "
                "electrical Lockouts (only Mec. LOTOs)"
            ),
        ),
        LevelBand(
            min_points=44,
            level=3,
            title="LV, EL & MEC: PiC + LOTO",
            description=(
                "Person in charge of both Mech and Low Voltage Electrical LOTOs "
                "but no troubleshooting"
            ),
        ),
        LevelBand(
            min_points=80,
            level=4,
            title="LV, EL & MEC: PiC + LOTO + TR",
            description=(
                "Person in charge of both Mech and Electrical LOTOs including "
                "troubleshooting on Low Voltage"
            ),
        ),
        LevelBand(
            min_points=100,
            level=5,
            title="HV, EL & MEC: PiC + LOTO + TR",
            description=(
                "Person in charge of both Mech and High Voltage Electrical LOTOs "
                "including troubleshooting"
            ),
        ),
    ),
)


def load_rule_table(path: str | Path) -> RuleTable:
    """Read a rule table from a JSON file. Raises ValidationError on a malformed table."""
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    table = RuleTable.model_validate(raw)
    logger.info("Loaded rule table %s (%s) from %s", table.version, table.table_hash[:12], path)
    return table


def get_rule_table(path: str | Path | None = None) -> RuleTable:
    """Rule table from `path` when given, otherwise the built-in one."""
    if path:
        return load_rule_table(path)
    return DEFAULT_RULES


def max_possible_points(rules: RuleTable, subjective_max: int = SUBJECTIVE_MAX) -> int:
    """
    Highest total the table can produce: best single-select bands, every
    multi-select option, the highest multiplier and the top subjective score.
    """
    best_internal = max((b.points for b in rules.internal_experience), default=0)
    best_external = max((b.points for b in rules.external_experience), default=0)
    experience = round_half_up((best_internal + best_external) * max(rules.tier_multipliers.values()))
    education = sum(max(b.points, 0) for b in rules.education)
    courses = sum(max(b.points, 0) for b in rules.extra_courses)
    return experience + education + courses + subjective_max


def level_point_ranges(rules: RuleTable) -> list[tuple[LevelBand, str]]:
    """Level bands low to high with a human-readable point range ("15-43 points", "100+ points")."""
    ordered = sorted(rules.levels, key=lambda b: b.min_points)
    ranges = []
    for i, band in enumerate(ordered):
        if i + 1 < len(ordered):
            ranges.append((band, f"{band.min_points}-{ordered[i + 1].min_points - 1} points"))
        else:
            ranges.append((band, f"{band.min_points}+ points"))
    return ranges
