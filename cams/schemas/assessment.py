"""Assessment record, score and history schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from cams.schemas.rules import CertificationTier


def _dedupe(keys) -> tuple[str, ...]:
    """Drop repeated keys, keeping first-seen order."""
    if keys is None:
        return ()
    if isinstance(keys, str):
        keys = [keys]
    return tuple(dict.fromkeys(keys))


class AssessmentRecord(BaseModel):
    """
    Editable competency matrix for one technician.
    Keys are not checked against the rule table; unknown keys score zero.
    """

    model_config = ConfigDict(frozen=True)

    technician_id: str
    certification_tier: str = CertificationTier.D.value
    internal_experience: str | None = None
    external_experience: str | None = None
    education: tuple[str, ...] = ()
    extra_courses: tuple[str, ...] = ()
    subjective_score: int = 0

    @field_validator("certification_tier", mode="before")
    @classmethod
    def tier_value(cls, v):
        if v is None or v == "":
            return CertificationTier.D.value
        if isinstance(v, CertificationTier):
            return v.value
        return v

    @field_validator("subjective_score", mode="before")
    @classmethod
    def unset_subjective_is_zero(cls, v):
        if v is None or v == "":
            return 0
        return v

    @field_validator("internal_experience", "external_experience", mode="before")
    @classmethod
    def blank_is_unset(cls, v):
        """The dashboard stores an unselected radio group as ''."""
        if v == "":
            return None
        return v

    @field_validator("education", "extra_courses", mode="before")
    @classmethod
    def dedupe_keys(cls, v):
        return _dedupe(v)


class ScoreResult(BaseModel):
    """Derived points and level for a record. Always recomputed, never stored alone."""

    model_config = ConfigDict(frozen=True)

    internal_points: int
    external_points: int
    multiplier: float
    experience_points: int
    education_points: int
    extra_course_points: int
    subjective_points: int
    total_points: int
    level: int
    level_title: str = ""


class Snapshot(BaseModel):
    """A record together with its score at one point in time."""

    model_config = ConfigDict(frozen=True)

    record: AssessmentRecord
    score: ScoreResult


class HistoryEntry(BaseModel):
    """Audit entry written when a commit changes a technician's assessment."""

    model_config = ConfigDict(frozen=True)

    id: str
    technician_id: str
    timestamp: datetime
    actor: str
    previous: Snapshot
    new: Snapshot
    changes: tuple[str, ...]

    @property
    def previous_level(self) -> int:
        return self.previous.score.level

    @property
    def new_level(self) -> int:
        return self.new.score.level

    @property
    def previous_points(self) -> int:
        return self.previous.score.total_points

    @property
    def new_points(self) -> int:
        return self.new.score.total_points

    @property
    def previous_tier(self) -> str:
        return self.previous.record.certification_tier

    @property
    def new_tier(self) -> str:
        return self.new.record.certification_tier

    @property
    def trend(self) -> Literal["up", "down", "unchanged"]:
        if self.new_level > self.previous_level:
            return "up"
        if self.new_level < self.previous_level:
            return "down"
        return "unchanged"


class AssessmentInput(BaseModel):
    """
    Record fields as sent by the UI (technician id comes from the path).
    Any field may be null; AssessmentRecord turns nulls into their unset values.
    """

    certification_tier: str | None = CertificationTier.D.value
    internal_experience: str | None = None
    external_experience: str | None = None
    education: list[str] | None = Field(default_factory=list)
    extra_courses: list[str] | None = Field(default_factory=list)
    subjective_score: int | None = 0

    def to_record(self, technician_id: str) -> AssessmentRecord:
        fields = self.model_dump(include=set(AssessmentInput.model_fields))
        return AssessmentRecord(technician_id=technician_id, **fields)


class ScoreRequest(AssessmentInput):
    """POST /v1/score request."""

    technician_id: str = ""


class CommitRequest(AssessmentInput):
    """PUT /v1/technicians/{id}/assessment request."""

    expected_version: int = Field(default=0, ge=0)


class HistoryEntryResponse(BaseModel):
    """One row of the assessment history view."""

    id: str
    technician_id: str
    timestamp: datetime
    actor: str
    previous_level: int
    new_level: int
    previous_points: int
    new_points: int
    previous_tier: str
    new_tier: str
    trend: str
    changes: list[str]
    previous: Snapshot
    new: Snapshot

    @classmethod
    def from_entry(cls, entry: HistoryEntry) -> "HistoryEntryResponse":
        return cls(
            id=entry.id,
            technician_id=entry.technician_id,
            timestamp=entry.timestamp,
            actor=entry.actor,
            previous_level=entry.previous_level,
            new_level=entry.new_level,
            previous_points=entry.previous_points,
            new_points=entry.new_points,
            previous_tier=entry.previous_tier,
            new_tier=entry.new_tier,
            trend=entry.trend,
            changes=list(entry.changes),
            previous=entry.previous,
            new=entry.new,
        )


class AssessmentResponse(BaseModel):
    """Committed assessment with its live score."""

    record: AssessmentRecord
    score: ScoreResult
    version: int
    rules_version: str
    updated_at: str | None = None
    updated_by: str | None = None


class CommitResponse(AssessmentResponse):
    """PUT /v1/technicians/{id}/assessment response."""

    history_entry: HistoryEntryResponse | None = None
