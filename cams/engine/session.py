"""Assessment session - editable draft, live scoring, commit with audit."""

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import uuid4

from cams.engine.calculator import compute_score
from cams.engine.changes import detect_changes
from cams.engine.store import TechnicianStore
from cams.schemas.assessment import AssessmentRecord, HistoryEntry, ScoreResult, Snapshot
from cams.schemas.rules import RuleTable

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset(
    {
        "certification_tier",
        "internal_experience",
        "external_experience",
        "education",
        "extra_courses",
        "subjective_score",
    }
)


class SessionState(str, Enum):
    CLEAN = "clean"
    DIRTY = "dirty"


class UnknownFieldError(ValueError):
    """Edit targeted a field that is not part of the assessment."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AssessmentSession:
    """
    Holds the draft assessment for one technician.

    Every edit re-scores the draft so the UI can show points and level
    before saving. commit() diffs the draft against the last committed
    snapshot and, when something changed, records a HistoryEntry in the
    store's ledger. A technician with nothing committed starts DIRTY with
    an empty draft; that first commit stores the snapshot without an entry.
    """

    def __init__(
        self,
        store: TechnicianStore,
        rules: RuleTable,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.rules = rules
        self._clock = clock
        stored = store.load()
        if stored is None:
            self._committed: AssessmentRecord | None = None
            self._version = 0
            self._draft = AssessmentRecord(technician_id=store.technician_id)
            self._state = SessionState.DIRTY
        else:
            self._committed = stored.record
            self._version = stored.version
            self._draft = stored.record
            self._state = SessionState.CLEAN
        self._score = compute_score(self._draft, rules)

    @property
    def technician_id(self) -> str:
        return self.store.technician_id

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def draft(self) -> AssessmentRecord:
        return self._draft

    @property
    def score(self) -> ScoreResult:
        """Live score of the draft."""
        return self._score

    @property
    def committed(self) -> AssessmentRecord | None:
        return self._committed

    @property
    def version(self) -> int:
        return self._version

    def edit(self, field: str, value: Any) -> ScoreResult:
        """Set one draft field and return the recomputed score."""
        if field not in EDITABLE_FIELDS:
            raise UnknownFieldError(f"Unknown assessment field: {field}")
        data = self._draft.model_dump()
        data[field] = value
        self._draft = AssessmentRecord.model_validate(data)
        self._state = SessionState.DIRTY
        self._score = compute_score(self._draft, self.rules)
        return self._score

    def toggle_education(self, key: str) -> ScoreResult:
        return self._toggle("education", key)

    def toggle_course(self, key: str) -> ScoreResult:
        return self._toggle("extra_courses", key)

    def _toggle(self, field: str, key: str) -> ScoreResult:
        current = getattr(self._draft, field)
        if key in current:
            updated = tuple(k for k in current if k != key)
        else:
            updated = current + (key,)
        return self.edit(field, updated)

    def commit(self, actor: str) -> HistoryEntry | None:
        """
        Finalize the draft. Returns the HistoryEntry appended to the ledger,
        or None when nothing was recorded (clean session, first commit, or
        a draft edited back to the committed values).

        Raises StaleSnapshotError if another commit landed first.
        """
        if self._state is SessionState.CLEAN:
            return None

        record = self._draft
        if self._committed is not None and record == self._committed:
            self._state = SessionState.CLEAN
            return None

        entry = None
        if self._committed is not None:
            previous_score = compute_score(self._committed, self.rules)
            changes = detect_changes(self._committed, record, previous_score, self._score, self.rules)
            if changes:
                entry = HistoryEntry(
                    id=str(uuid4()),
                    technician_id=self.technician_id,
                    timestamp=self._clock(),
                    actor=actor,
                    previous=Snapshot(record=self._committed, score=previous_score),
                    new=Snapshot(record=record, score=self._score),
                    changes=tuple(changes),
                )

        first_commit = self._committed is None
        self._version = self.store.compare_and_swap(record, self._version, entry)
        self._committed = record
        self._state = SessionState.CLEAN

        if first_commit:
            logger.info("Stored first assessment for %s (version %d)", self.technician_id, self._version)
        elif entry is None:
            logger.info(
                "Stored reordered selections for %s (version %d), nothing to record",
                self.technician_id,
                self._version,
            )
        else:
            logger.info(
                "Committed assessment for %s by %s: %d change(s), level %d -> %d",
                self.technician_id,
                actor,
                len(entry.changes),
                entry.previous_level,
                entry.new_level,
            )
        return entry

    def cancel(self) -> None:
        """Discard the draft. With nothing committed the draft resets to empty and stays DIRTY."""
        if self._committed is None:
            self._draft = AssessmentRecord(technician_id=self.technician_id)
            self._state = SessionState.DIRTY
        else:
            self._draft = self._committed
            self._state = SessionState.CLEAN
        self._score = compute_score(self._draft, self.rules)
