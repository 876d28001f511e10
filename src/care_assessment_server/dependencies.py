"""FastAPI dependency injection — DB sessions, repositories, catalog, API key.

Each request that touches the database gets a fresh ``AsyncSession`` via
``get_db()``.  The session is committed on success and rolled back on
error; repositories only ``flush()``.
"""

import hmac
from typing import AsyncGenerator

from fastapi import Header, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from care_assessment.catalog import StepCatalog
from care_assessment_db.engine import get_session_factory
from care_assessment_db.repository import AssessmentRepository, DraftRepository


# ------------------------------------------------------------------
# Database session (transaction boundary)
# ------------------------------------------------------------------

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield an async DB session; commit on success, rollback on error."""
    factory = get_session_factory()
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


# ------------------------------------------------------------------
# Repositories & catalog
# ------------------------------------------------------------------

_assessment_repo = AssessmentRepository()
_draft_repo = DraftRepository()


def get_assessment_repository() -> AssessmentRepository:
    return _assessment_repo


def get_draft_repository() -> DraftRepository:
    return _draft_repo


def get_catalog(request: Request) -> StepCatalog:
    """Return the StepCatalog loaded during lifespan."""
    return request.app.state.catalog


# ------------------------------------------------------------------
# API key, opt-in via SERVER_API_KEY
# ------------------------------------------------------------------

async def verify_api_key(
    request: Request,
    x_api_key: str | None = Header(None, alias="X-API-Key"),
) -> None:
    """Require a matching ``X-API-Key`` header when an API key is configured.

    401 if the header is missing, 403 if it does not match.
    """
    expected: str | None = request.app.state.settings.api_key
    if not expected:
        return
    if not x_api_key:
        raise HTTPException(status_code=401, detail="X-API-Key header is required")
    # Constant-time comparison
    if not hmac.compare_digest(x_api_key, expected):
        raise HTTPException(status_code=403, detail="Invalid API key")
