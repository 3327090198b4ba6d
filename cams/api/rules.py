"""Rule table, level and live scoring endpoints."""

from functools import lru_cache
from typing import Annotated

from fastapi import APIRouter, Depends

from cams.config import settings
from cams.engine.calculator import compute_score
from cams.engine.rules import get_rule_table, level_point_ranges
from cams.schemas.assessment import ScoreRequest, ScoreResult
from cams.schemas.rules import LevelInfo, RuleTable, RuleTableResponse

router = APIRouter()


@lru_cache
def get_active_rules() -> RuleTable:
    """Rule table configured for this process (RULES_PATH or the built-in one)."""
    return get_rule_table(settings.rules_path)


RulesDep = Annotated[RuleTable, Depends(get_active_rules)]


@router.get("/rules", response_model=RuleTableResponse)
async def get_rules(rules: RulesDep):
    """Active rule table and its content hash."""
    return RuleTableResponse(version=rules.version, table_hash=rules.table_hash, rules=rules)


@router.get("/levels", response_model=list[LevelInfo])
async def get_levels(rules: RulesDep):
    """Competency level descriptions, lowest first."""
    return [
        LevelInfo(
            level=band.level,
            title=band.title,
            description=band.description,
            point_range=point_range,
        )
        for band, point_range in level_point_ranges(rules)
    ]


@router.post("/score", response_model=ScoreResult)
async def score_record(body: ScoreRequest, rules: RulesDep):
    """
    Live preview: score an unsaved record.
    Nothing is stored and no history is written.
    """
    return compute_score(body.to_record(body.technician_id), rules)
