"""Database models."""

from cams.models.assessment import Assessment
from cams.models.history import AssessmentHistory

__all__ = ["Assessment", "AssessmentHistory"]
