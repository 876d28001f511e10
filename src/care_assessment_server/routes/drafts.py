"""Draft endpoints — key/value storage behind the SDK's ``HttpDraftStore``.

Values are opaque strings; the server does not parse the envelope inside.
"""

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from care_assessment_db.repository import DraftRepository

from care_assessment_server.dependencies import get_db, get_draft_repository, verify_api_key

router = APIRouter(prefix="/drafts", tags=["drafts"], dependencies=[Depends(verify_api_key)])

_MAX_KEY_LENGTH = 200


class DraftValue(BaseModel):
    value: str = Field(max_length=65536)


def _check_key(key: str) -> None:
    if not key or len(key) > _MAX_KEY_LENGTH:
        raise ValueError(f"Invalid draft key length: {len(key)}")


@router.get("/{key}")
async def get_draft(
    key: str,
    db: AsyncSession = Depends(get_db),
    repo: DraftRepository = Depends(get_draft_repository),
) -> DraftValue:
    _check_key(key)
    row = await repo.get_draft(db, key)
    if row is None:
        raise ValueError(f"Draft not found: {key}")
    return DraftValue(value=row.value)


@router.put("/{key}", status_code=204)
async def put_draft(
    key: str,
    body: DraftValue,
    db: AsyncSession = Depends(get_db),
    repo: DraftRepository = Depends(get_draft_repository),
) -> Response:
    _check_key(key)
    await repo.put_draft(db, key, body.value)
    return Response(status_code=204)


@router.delete("/{key}", status_code=204)
async def delete_draft(
    key: str,
    db: AsyncSession = Depends(get_db),
    repo: DraftRepository = Depends(get_draft_repository),
) -> Response:
    """Delete a draft.  Deleting an absent key is not an error."""
    _check_key(key)
    await repo.delete_draft(db, key)
    return Response(status_code=204)
