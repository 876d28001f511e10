"""StoredDraft ORM model — server-side key/value storage for drafts.

The value is the opaque JSON envelope written by the SDK's
``DraftPersistence``; the server never parses it.
"""

from datetime import datetime, timezone

from sqlalchemy import String, Text
from sqlalchemy.dialects.postgresql import TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column

from care_assessment_db.models.base import Base


class StoredDraft(Base):
    __tablename__ = "assessment_drafts"

    key: Mapped[str] = mapped_column(String(200), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        index=True,
    )

    def __repr__(self) -> str:
        return f"<StoredDraft(key={self.key!r}, updated_at={self.updated_at!s})>"
