"""Repository functions for committed assessments and their history."""

import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from cams.engine.session import AssessmentSession
from cams.engine.store import MemoryTechnicianStore, StaleSnapshotError
from cams.models import Assessment, AssessmentHistory
from cams.schemas.assessment import AssessmentRecord, HistoryEntry
from cams.schemas.rules import RuleTable

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


async def get_assessment(db: AsyncSession, technician_id: str) -> Assessment | None:
    """Committed assessment row for a technician."""
    result = await db.execute(
        select(Assessment).where(Assessment.technician_id == technician_id)
    )
    return result.scalar_one_or_none()


async def list_history(
    db: AsyncSession, technician_id: str, limit: int | None = None
) -> list[HistoryEntry]:
    """History entries most-recent-first."""
    query = (
        select(AssessmentHistory)
        .where(AssessmentHistory.technician_id == technician_id)
        .order_by(AssessmentHistory.seq.desc())
    )
    if limit is not None:
        query = query.limit(limit)
    result = await db.execute(query)
    return [HistoryEntry.model_validate(row.entry_json) for row in result.scalars().all()]


async def save_assessment(
    db: AsyncSession,
    record: AssessmentRecord,
    expected_version: int,
    actor: str,
    rules_version: str,
) -> int:
    """
    Compare-and-swap the committed record. Version 0 means "nothing stored yet".
    Returns the new version; raises StaleSnapshotError if the row moved on.
    """
    technician_id = record.technician_id
    values = {
        "record_json": record.model_dump(mode="json"),
        "rules_version": rules_version,
        "updated_by": actor,
        "updated_at": _now_iso(),
    }
    if expected_version == 0:
        stmt = (
            insert(Assessment)
            .values(technician_id=technician_id, version=1, **values)
            .on_conflict_do_nothing(index_elements=[Assessment.technician_id])
        )
    else:
        stmt = (
            update(Assessment)
            .where(
                Assessment.technician_id == technician_id,
                Assessment.version == expected_version,
            )
            .values(version=expected_version + 1, **values)
        )
    result = await db.execute(stmt)
    if result.rowcount != 1:
        current = await get_assessment(db, technician_id)
        actual = current.version if current else 0
        logger.warning(
            "Stale commit for %s: expected version %d, found %d", technician_id, expected_version, actual
        )
        raise StaleSnapshotError(technician_id, expected_version, actual)
    return expected_version + 1


async def append_history(
    db: AsyncSession, entry: HistoryEntry, seq: int, cap: int
) -> AssessmentHistory:
    """Insert a history entry, then drop everything older than the newest `cap`."""
    row = AssessmentHistory(
        entry_id=entry.id,
        technician_id=entry.technician_id,
        seq=seq,
        actor=entry.actor,
        previous_level=entry.previous_level,
        new_level=entry.new_level,
        previous_points=entry.previous_points,
        new_points=entry.new_points,
        entry_json=entry.model_dump(mode="json"),
        created_at=entry.timestamp.strftime("%Y-%m-%dT%H:%M:%SZ"),
    )
    db.add(row)
    await db.flush()

    keep = (
        select(AssessmentHistory.seq)
        .where(AssessmentHistory.technician_id == entry.technician_id)
        .order_by(AssessmentHistory.seq.desc())
        .limit(cap)
    )
    result = await db.execute(
        delete(AssessmentHistory).where(
            AssessmentHistory.technician_id == entry.technician_id,
            AssessmentHistory.seq.not_in(keep),
        )
    )
    if result.rowcount:
        logger.debug("Evicted %d history entries for %s", result.rowcount, entry.technician_id)
    return row


async def commit_assessment(
    db: AsyncSession,
    rules: RuleTable,
    technician_id: str,
    fields: dict[str, Any],
    actor: str,
    cap: int,
    expected_version: int | None = None,
) -> tuple[AssessmentSession, HistoryEntry | None]:
    """
    Load the technician's committed state, apply `fields` in a session,
    commit it and write the result back.

    Raises StaleSnapshotError when `expected_version` (if given) is not the
    stored version, or when another commit wins the race.
    """
    row = await get_assessment(db, technician_id)
    committed = AssessmentRecord.model_validate(row.record_json) if row else None
    loaded_version = row.version if row else 0
    if expected_version is not None and expected_version != loaded_version:
        raise StaleSnapshotError(technician_id, expected_version, loaded_version)

    history = await list_history(db, technician_id, limit=cap)
    store = MemoryTechnicianStore(
        technician_id, committed=committed, version=loaded_version, history=history, cap=cap
    )
    session = AssessmentSession(store, rules)
    for field, value in fields.items():
        session.edit(field, value)
    entry = session.commit(actor)

    if session.version != loaded_version:
        new_version = await save_assessment(db, session.draft, loaded_version, actor, rules.version)
        if entry is not None:
            await append_history(db, entry, seq=new_version, cap=cap)
    return session, entry
