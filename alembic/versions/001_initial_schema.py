"""Initial schema - assessments, assessment_history.

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "assessments",
        sa.Column("technician_id", sa.Text(), primary_key=True),
        sa.Column("record_json", postgresql.JSONB(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("rules_version", sa.Text(), nullable=False),
        sa.Column("updated_by", sa.Text(), nullable=False),
        sa.Column("updated_at", sa.String(50), nullable=False),
    )

    op.create_table(
        "assessment_history",
        sa.Column("entry_id", sa.UUID(), primary_key=True),
        sa.Column("technician_id", sa.Text(), nullable=False),
        sa.Column("seq", sa.Integer(), nullable=False),
        sa.Column("actor", sa.Text(), nullable=False),
        sa.Column("previous_level", sa.Integer(), nullable=False),
        sa.Column("new_level", sa.Integer(), nullable=False),
        sa.Column("previous_points", sa.Integer(), nullable=False),
        sa.Column("new_points", sa.Integer(), nullable=False),
        sa.Column("entry_json", postgresql.JSONB(), nullable=False),
        sa.Column("created_at", sa.String(50), nullable=False),
    )
    # One entry per assessment version
    op.create_index(
        "ix_assessment_history_technician_seq",
        "assessment_history",
        ["technician_id", "seq"],
        unique=True,
    )


def downgrade() -> None:
    op.drop_index("ix_assessment_history_technician_seq", table_name="assessment_history")
    op.drop_table("assessment_history")
    op.drop_table("assessments")
