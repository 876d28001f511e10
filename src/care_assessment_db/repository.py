"""Async repositories for submitted assessments and server-side drafts.

All public methods accept an ``AsyncSession`` so the caller controls
transaction boundaries: methods ``flush()`` but never ``commit()``.

Range checks on ADL levels and the other ordinal fields live in the API
schema and in table CHECK constraints, not here.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from care_assessment_db.models.assessment import HealthAssessment
from care_assessment_db.models.draft import StoredDraft


class AssessmentRepository:
    """Read/write operations on the ``health_assessments`` table."""

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    async def create_assessment(
        self, db: AsyncSession, *, member_id: str, values: dict[str, Any]
    ) -> HealthAssessment:
        """Insert a new assessment row and return it.

        ``values`` holds the draft fields other than ``member_id``.
        """
        row = HealthAssessment(member_id=member_id, **values)
        db.add(row)
        await db.flush()  # populate id / created_at defaults
        return row

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def get_by_id(
        self, db: AsyncSession, assessment_id: uuid.UUID
    ) -> HealthAssessment | None:
        return await db.get(HealthAssessment, assessment_id)

    async def list_by_member(
        self,
        db: AsyncSession,
        member_id: str,
        *,
        limit: int = 20,
        offset: int = 0,
    ) -> list[HealthAssessment]:
        """List a member's assessments, most recent first."""
        stmt = (
            select(HealthAssessment)
            .where(HealthAssessment.member_id == member_id)
            .order_by(HealthAssessment.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def get_latest_for_member(
        self, db: AsyncSession, member_id: str
    ) -> HealthAssessment | None:
        rows = await self.list_by_member(db, member_id, limit=1)
        return rows[0] if rows else None

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    async def delete_assessment(self, db: AsyncSession, assessment_id: uuid.UUID) -> bool:
        """Delete one assessment.  Returns ``False`` if it did not exist."""
        row = await db.get(HealthAssessment, assessment_id)
        if row is None:
            return False
        await db.delete(row)
        await db.flush()
        return True


class DraftRepository:
    """Key/value operations on the ``assessment_drafts`` table."""

    async def get_draft(self, db: AsyncSession, key: str) -> StoredDraft | None:
        return await db.get(StoredDraft, key)

    async def put_draft(self, db: AsyncSession, key: str, value: str) -> StoredDraft:
        """Insert or overwrite the draft stored under ``key``."""
        row = await db.get(StoredDraft, key)
        now = datetime.now(timezone.utc)
        if row is None:
            row = StoredDraft(key=key, value=value, updated_at=now)
            db.add(row)
        else:
            row.value = value
            row.updated_at = now
        await db.flush()
        return row

    async def delete_draft(self, db: AsyncSession, key: str) -> bool:
        row = await db.get(StoredDraft, key)
        if row is None:
            return False
        await db.delete(row)
        await db.flush()
        return True

    async def purge_stale_drafts(self, db: AsyncSession, *, older_than_days: int) -> int:
        """Delete drafts not written for ``older_than_days`` days.

        ``0`` deletes every draft.  Returns the number of rows removed.
        """
        stmt = delete(StoredDraft)
        if older_than_days > 0:
            cutoff = datetime.now(timezone.utc) - timedelta(days=older_than_days)
            stmt = stmt.where(StoredDraft.updated_at < cutoff)
        result = await db.execute(stmt)
        await db.flush()
        return result.rowcount or 0
