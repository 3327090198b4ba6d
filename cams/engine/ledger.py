"""Append-only, size-bounded assessment history for one technician."""

import logging
from collections import deque
from collections.abc import Iterable, Iterator

from cams.schemas.assessment import HistoryEntry

logger = logging.getLogger(__name__)

DEFAULT_CAP = 50


class HistoryLedger:
    """
    Most-recent-first log of HistoryEntry objects.

    There is no update or delete: corrections are new entries. Once the cap
    is reached each append evicts the oldest entry.
    """

    def __init__(
        self,
        technician_id: str,
        entries: Iterable[HistoryEntry] = (),
        cap: int = DEFAULT_CAP,
    ):
        if cap < 1:
            raise ValueError("cap must be at least 1")
        self.technician_id = technician_id
        self.cap = cap
        # `entries` is expected most-recent-first, as list() returns them
        self._entries: deque[HistoryEntry] = deque(list(entries)[:cap], maxlen=cap)

    def append(self, entry: HistoryEntry) -> HistoryEntry | None:
        """Insert at the head. Returns the evicted entry when the cap was exceeded."""
        evicted = self._entries[-1] if len(self._entries) == self.cap else None
        self._entries.appendleft(entry)
        if evicted is not None:
            logger.debug(
                "History for %s at cap %d, evicted entry %s", self.technician_id, self.cap, evicted.id
            )
        return evicted

    def list(self, limit: int | None = None) -> tuple[HistoryEntry, ...]:
        """Entries most-recent-first, optionally only the first `limit`."""
        entries = tuple(self._entries)
        if limit is not None:
            return entries[: max(limit, 0)]
        return entries

    def latest(self) -> HistoryEntry | None:
        return self._entries[0] if self._entries else None

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[HistoryEntry]:
        return iter(tuple(self._entries))
