"""Technician assessment endpoints - read, commit, history."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from cams.api.rules import RulesDep
from cams.auth.middleware import ActorDep
from cams.config import settings
from cams.database import get_db
from cams.engine.calculator import compute_score
from cams.engine.session import EDITABLE_FIELDS
from cams.engine.store import StaleSnapshotError
from cams.schemas.assessment import (
    AssessmentRecord,
    AssessmentResponse,
    CommitRequest,
    CommitResponse,
    HistoryEntryResponse,
)
from cams.storage.repositories import commit_assessment, get_assessment, list_history

logger = logging.getLogger(__name__)

router = APIRouter()


def _conflict(exc: StaleSnapshotError) -> HTTPException:
    logger.info("Rejecting commit: %s", exc)
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail={
            "message": "Assessment was changed by someone else; reload and retry",
            "expected_version": exc.expected_version,
            "current_version": exc.actual_version,
        },
    )


@router.get("/technicians/{technician_id}/assessment", response_model=AssessmentResponse)
async def get_technician_assessment(
    technician_id: str,
    rules: RulesDep,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Committed assessment for a technician, scored with the active rule table."""
    row = await get_assessment(db, technician_id)
    if not row:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No assessment committed for this technician",
        )
    record = AssessmentRecord.model_validate(row.record_json)
    return AssessmentResponse(
        record=record,
        score=compute_score(record, rules),
        version=row.version,
        rules_version=rules.version,
        updated_at=row.updated_at,
        updated_by=row.updated_by,
    )


@router.put("/technicians/{technician_id}/assessment", response_model=CommitResponse)
async def commit_technician_assessment(
    technician_id: str,
    body: CommitRequest,
    actor: ActorDep,
    rules: RulesDep,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """
    Commit an edited assessment.
    Writes a history entry when anything changed; the first commit for a
    technician only stores the record. `expected_version` must match the
    stored version (0 when nothing is stored yet).
    """
    try:
        session, entry = await commit_assessment(
            db,
            rules,
            technician_id,
            body.model_dump(include=set(EDITABLE_FIELDS)),
            actor,
            cap=settings.history_cap,
            expected_version=body.expected_version,
        )
    except StaleSnapshotError as exc:
        raise _conflict(exc) from exc

    saved = await get_assessment(db, technician_id)
    return CommitResponse(
        record=session.draft,
        score=session.score,
        version=session.version,
        rules_version=rules.version,
        updated_at=saved.updated_at if saved else None,
        updated_by=saved.updated_by if saved else None,
        history_entry=HistoryEntryResponse.from_entry(entry) if entry else None,
    )


@router.get(
    "/technicians/{technician_id}/assessment/history",
    response_model=list[HistoryEntryResponse],
)
async def get_assessment_history(
    technician_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    limit: Annotated[int | None, Query(ge=1)] = None,
):
    """Assessment history, most recent first."""
    entries = await list_history(db, technician_id, limit=limit or settings.history_cap)
    return [HistoryEntryResponse.from_entry(e) for e in entries]
