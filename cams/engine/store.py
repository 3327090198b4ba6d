"""Technician-scoped storage handles for assessment sessions."""

import threading
from dataclasses import dataclass
from typing import Protocol

from cams.engine.ledger import DEFAULT_CAP, HistoryLedger
from cams.schemas.assessment import AssessmentRecord, HistoryEntry


class StaleSnapshotError(Exception):
    """The committed snapshot moved on since the session loaded it."""

    def __init__(self, technician_id: str, expected_version: int, actual_version: int):
        super().__init__(
            f"Assessment for {technician_id} is at version {actual_version}, "
            f"expected {expected_version}"
        )
        self.technician_id = technician_id
        self.expected_version = expected_version
        self.actual_version = actual_version


@dataclass(frozen=True)
class StoredAssessment:
    """Last committed record and its version (1 after the first commit)."""

    record: AssessmentRecord
    version: int


class TechnicianStore(Protocol):
    """What a session needs from the host's persistence for one technician."""

    technician_id: str
    ledger: HistoryLedger

    def load(self) -> StoredAssessment | None: ...

    def compare_and_swap(
        self,
        record: AssessmentRecord,
        expected_version: int,
        entry: HistoryEntry | None = None,
    ) -> int:
        """
        Store `record` and append `entry` to the ledger as one step, only if
        the current version is `expected_version`. Returns the new version.
        """
        ...


class MemoryTechnicianStore:
    """
    In-process store for one technician.

    The host can preload it from its own persistence, run a session against
    it, then write the result back.
    """

    def __init__(
        self,
        technician_id: str,
        committed: AssessmentRecord | None = None,
        version: int = 0,
        history: list[HistoryEntry] | None = None,
        cap: int = DEFAULT_CAP,
    ):
        if committed is None and version != 0:
            raise ValueError("version must be 0 when nothing is committed")
        self.technician_id = technician_id
        self.ledger = HistoryLedger(technician_id, history or (), cap=cap)
        self._committed = committed
        self._version = version if committed is not None else 0
        self._lock = threading.Lock()

    @property
    def version(self) -> int:
        return self._version

    def load(self) -> StoredAssessment | None:
        with self._lock:
            if self._committed is None:
                return None
            return StoredAssessment(record=self._committed, version=self._version)

    def compare_and_swap(
        self,
        record: AssessmentRecord,
        expected_version: int,
        entry: HistoryEntry | None = None,
    ) -> int:
        with self._lock:
            if self._version != expected_version:
                raise StaleSnapshotError(self.technician_id, expected_version, self._version)
            if entry is not None:
                self.ledger.append(entry)
            self._committed = record
            self._version += 1
            return self._version


class MemoryAssessmentStore:
    """Keeps one MemoryTechnicianStore per technician."""

    def __init__(self, cap: int = DEFAULT_CAP):
        self.cap = cap
        self._stores: dict[str, MemoryTechnicianStore] = {}
        self._lock = threading.Lock()

    def for_technician(self, technician_id: str) -> MemoryTechnicianStore:
        with self._lock:
            store = self._stores.get(technician_id)
            if store is None:
                store = MemoryTechnicianStore(technician_id, cap=self.cap)
                self._stores[technician_id] = store
            return store

    def technician_ids(self) -> list[str]:
        with self._lock:
            return sorted(self._stores)
