"""Assessment history/audit model."""

from sqlalchemy import Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from cams.database import Base


class AssessmentHistory(Base):
    """Assessment history entries - append-only, trimmed to the newest N per technician."""

    __tablename__ = "assessment_history"

    entry_id: Mapped[str] = mapped_column(UUID(as_uuid=False), primary_key=True)
    technician_id: Mapped[str] = mapped_column(Text, nullable=False)
    seq: Mapped[int] = mapped_column(Integer, nullable=False)  # assessment version the entry produced
    actor: Mapped[str] = mapped_column(Text, nullable=False)
    previous_level: Mapped[int] = mapped_column(Integer, nullable=False)
    new_level: Mapped[int] = mapped_column(Integer, nullable=False)
    previous_points: Mapped[int] = mapped_column(Integer, nullable=False)
    new_points: Mapped[int] = mapped_column(Integer, nullable=False)
    entry_json: Mapped[dict] = mapped_column(JSONB, nullable=False)
    created_at: Mapped[str] = mapped_column(String(50), nullable=False)

    __table_args__ = (Index("ix_assessment_history_technician_seq", "technician_id", "seq", unique=True),)
