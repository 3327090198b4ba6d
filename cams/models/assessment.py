"""Committed assessment per technician."""

from sqlalchemy import Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from cams.database import Base


class Assessment(Base):
    """Last committed assessment record - one row per technician, versioned for compare-and-swap."""

    __tablename__ = "assessments"

    technician_id: Mapped[str] = mapped_column(Text, primary_key=True)
    record_json: Mapped[dict] = mapped_column(JSONB, nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    rules_version: Mapped[str] = mapped_column(Text, nullable=False)
    updated_by: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[str] = mapped_column(String(50), nullable=False)
