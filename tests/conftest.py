"""Shared fixtures."""

from datetime import datetime, timedelta, timezone

import pytest

from cams.engine.rules import DEFAULT_RULES
from cams.schemas.assessment import AssessmentRecord


@pytest.fixture
def rules():
    return DEFAULT_RULES


@pytest.fixture
def record_a():
    """Tier B, 1 year internal, 2-3 years external, electrical education, subjective 1: 101 points."""
    return AssessmentRecord(
        technician_id="tech-1",
        certification_tier="B",
        internal_experience="1year",
        external_experience="2-3",
        education=("electrical",),
        subjective_score=1,
    )


@pytest.fixture
def clock():
    """Deterministic clock advancing one minute per call."""
    start = datetime(2025, 3, 1, 8, 0, tzinfo=timezone.utc)
    calls = {"n": 0}

    def _now():
        calls["n"] += 1
        return start + timedelta(minutes=calls["n"])

    return _now
