"""Unit tests for the history ledger."""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from cams.engine.calculator import compute_score
from cams.engine.ledger import HistoryLedger
from cams.engine.rules import DEFAULT_RULES
from cams.schemas.assessment import AssessmentRecord, HistoryEntry, Snapshot

START = datetime(2025, 1, 1, tzinfo=timezone.utc)


def _entry(n: int) -> HistoryEntry:
    old = AssessmentRecord(technician_id="tech-1", subjective_score=n - 1)
    new = AssessmentRecord(technician_id="tech-1", subjective_score=n)
    return HistoryEntry(
        id=f"entry-{n}",
        technician_id="tech-1",
        timestamp=START + timedelta(minutes=n),
        actor="lead",
        previous=Snapshot(record=old, score=compute_score(old, DEFAULT_RULES)),
        new=Snapshot(record=new, score=compute_score(new, DEFAULT_RULES)),
        changes=(f"Subjective Score: {n - 1} → {n}",),
    )


def test_most_recent_first():
    """list() returns the newest entry first."""
    ledger = HistoryLedger("tech-1")
    for n in range(1, 4):
        ledger.append(_entry(n))
    assert [e.id for e in ledger.list()] == ["entry-3", "entry-2", "entry-1"]
    assert ledger.latest().id == "entry-3"


def test_cap_evicts_oldest():
    """51 appends keep the 50 newest: #51 first, #2 last."""
    ledger = HistoryLedger("tech-1")
    evicted = [ledger.append(_entry(n)) for n in range(1, 52)]
    entries = ledger.list()
    assert len(entries) == 50
    assert entries[0].id == "entry-51"
    assert entries[-1].id == "entry-2"
    assert evicted[-1].id == "entry-1"
    assert all(e is None for e in evicted[:-1])


def test_length_never_exceeds_cap():
    """A small cap holds at steady state."""
    ledger = HistoryLedger("tech-1", cap=3)
    for n in range(1, 10):
        ledger.append(_entry(n))
        assert len(ledger) <= 3
    assert [e.id for e in ledger] == ["entry-9", "entry-8", "entry-7"]


def test_list_limit():
    """limit returns only the newest entries."""
    ledger = HistoryLedger("tech-1")
    for n in range(1, 6):
        ledger.append(_entry(n))
    assert [e.id for e in ledger.list(limit=2)] == ["entry-5", "entry-4"]
    assert ledger.list(limit=0) == ()


def test_preloaded_entries_trimmed_to_newest():
    """Entries passed in most-recent-first keep their head when over the cap."""
    loaded = [_entry(n) for n in range(10, 0, -1)]
    ledger = HistoryLedger("tech-1", loaded, cap=4)
    assert [e.id for e in ledger.list()] == ["entry-10", "entry-9", "entry-8", "entry-7"]


def test_list_is_a_snapshot():
    """The returned sequence is immutable and unaffected by later appends."""
    ledger = HistoryLedger("tech-1")
    ledger.append(_entry(1))
    listed = ledger.list()
    ledger.append(_entry(2))
    assert isinstance(listed, tuple)
    assert len(listed) == 1


def test_entries_are_immutable():
    """Appended entries cannot be rewritten."""
    entry = _entry(1)
    with pytest.raises(ValidationError):
        entry.changes = ("rewritten",)


def test_cap_must_be_positive():
    with pytest.raises(ValueError):
        HistoryLedger("tech-1", cap=0)


def test_entry_projections():
    """Level, points and trend derive from the snapshots."""
    entry = _entry(3)
    assert entry.previous_points == 2
    assert entry.new_points == 3
    assert entry.previous_level == entry.new_level == 1
    assert entry.trend == "unchanged"
    assert entry.previous_tier == entry.new_tier == "D"
