"""Initial schema: health_assessments and assessment_drafts.

Revision ID: 20261001_initial
Revises:
Create Date: 2026-10-01
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID

revision = "20261001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # --- Submitted assessments ---
    op.create_table(
        "health_assessments",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("member_id", sa.String(50), nullable=False),
        sa.Column("gender", sa.String(10), nullable=True),
        sa.Column("birth_year", sa.SmallInteger(), nullable=True),
        sa.Column("mobility_level", sa.SmallInteger(), nullable=False),
        sa.Column("eating_level", sa.SmallInteger(), nullable=False),
        sa.Column("toilet_level", sa.SmallInteger(), nullable=False),
        sa.Column("communication_level", sa.SmallInteger(), nullable=False),
        sa.Column("ltci_grade", sa.SmallInteger(), nullable=True),
        sa.Column("care_target_status", sa.SmallInteger(), nullable=False, server_default="4"),
        sa.Column("meal_type", sa.SmallInteger(), nullable=False, server_default="1"),
        sa.Column("disease_types", sa.String(200), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("assessor_name", sa.String(100), nullable=True),
        sa.Column("assessor_relation", sa.String(50), nullable=True),
        sa.Column("created_at", TIMESTAMP(timezone=True), nullable=False),
        sa.CheckConstraint("gender IS NULL OR gender IN ('M', 'F')", name="ck_gender"),
        sa.CheckConstraint("mobility_level BETWEEN 1 AND 3", name="ck_mobility_range"),
        sa.CheckConstraint("eating_level BETWEEN 1 AND 3", name="ck_eating_range"),
        sa.CheckConstraint("toilet_level BETWEEN 1 AND 3", name="ck_toilet_range"),
        sa.CheckConstraint("communication_level BETWEEN 1 AND 3", name="ck_communication_range"),
        sa.CheckConstraint("ltci_grade IS NULL OR ltci_grade BETWEEN 1 AND 8", name="ck_ltci_range"),
        sa.CheckConstraint("care_target_status BETWEEN 1 AND 4", name="ck_care_target_range"),
        sa.CheckConstraint("meal_type BETWEEN 1 AND 3", name="ck_meal_type_range"),
    )
    op.create_index("ix_health_assessments_member_id", "health_assessments", ["member_id"])
    op.create_index("ix_member_created", "health_assessments", ["member_id", "created_at"])

    # --- Server-side drafts ---
    op.create_table(
        "assessment_drafts",
        sa.Column("key", sa.String(200), primary_key=True),
        sa.Column("value", sa.Text(), nullable=False),
        sa.Column("updated_at", TIMESTAMP(timezone=True), nullable=False),
    )
    op.create_index("ix_assessment_drafts_updated_at", "assessment_drafts", ["updated_at"])


def downgrade() -> None:
    op.drop_index("ix_assessment_drafts_updated_at", table_name="assessment_drafts")
    op.drop_table("assessment_drafts")
    op.drop_index("ix_member_created", table_name="health_assessments")
    op.drop_index("ix_health_assessments_member_id", table_name="health_assessments")
    op.drop_table("health_assessments")
