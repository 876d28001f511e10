"""HealthAssessment ORM model — one row per submitted assessment.

Rows are written once by ``POST /api/v1/assessments`` and never edited;
a member re-assessing produces a new row, so a member's history is the
set of rows with their ``member_id`` ordered by ``created_at``.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Index, SmallInteger, String, Text
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column

from care_assessment_db.models.base import Base


class HealthAssessment(Base):
    """A completed ADL-based care assessment."""

    __tablename__ = "health_assessments"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    # External member identifier supplied by the host application
    member_id: Mapped[str] = mapped_column(String(50), nullable=False, index=True)

    # --- Basic info ---
    gender: Mapped[str | None] = mapped_column(String(10), nullable=True)
    birth_year: Mapped[int | None] = mapped_column(SmallInteger, nullable=True)

    # --- ADL levels (1 independent .. 3 full assistance) ---
    mobility_level: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    eating_level: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    toilet_level: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    communication_level: Mapped[int] = mapped_column(SmallInteger, nullable=False)

    # --- Long-term care insurance and care context ---
    ltci_grade: Mapped[int | None] = mapped_column(SmallInteger, nullable=True)
    care_target_status: Mapped[int] = mapped_column(SmallInteger, nullable=False, default=4)
    meal_type: Mapped[int] = mapped_column(SmallInteger, nullable=False, default=1)
    # Comma-separated disease codes as entered
    disease_types: Mapped[str | None] = mapped_column(String(200), nullable=True)

    # --- Free text ---
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    assessor_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    assessor_relation: Mapped[str | None] = mapped_column(String(50), nullable=True)

    # --- Timestamps ---
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        CheckConstraint("gender IS NULL OR gender IN ('M', 'F')", name="ck_gender"),
        CheckConstraint("mobility_level BETWEEN 1 AND 3", name="ck_mobility_range"),
        CheckConstraint("eating_level BETWEEN 1 AND 3", name="ck_eating_range"),
        CheckConstraint("toilet_level BETWEEN 1 AND 3", name="ck_toilet_range"),
        CheckConstraint("communication_level BETWEEN 1 AND 3", name="ck_communication_range"),
        CheckConstraint("ltci_grade IS NULL OR ltci_grade BETWEEN 1 AND 8", name="ck_ltci_range"),
        CheckConstraint("care_target_status BETWEEN 1 AND 4", name="ck_care_target_range"),
        CheckConstraint("meal_type BETWEEN 1 AND 3", name="ck_meal_type_range"),
        # History lookups: newest first per member
        Index("ix_member_created", "member_id", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<HealthAssessment(id={self.id!s}, member={self.member_id!r}, "
            f"adl=({self.mobility_level}, {self.eating_level}, "
            f"{self.toilet_level}, {self.communication_level}))>"
        )
