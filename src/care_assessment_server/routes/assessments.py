"""Assessment endpoints — store submissions and serve member history.

Submissions are immutable: re-assessing a member creates a new row.  The
request schema enforces the same ranges as the SDK's step catalog, so a
payload that slipped past client-side validation is rejected with 422.
"""

import uuid
from datetime import date, datetime

from fastapi import APIRouter, Depends, Query, Response
from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy.ext.asyncio import AsyncSession

from care_assessment.constants import BIRTH_YEAR_MIN
from care_assessment.models.draft import Gender
from care_assessment_db.repository import AssessmentRepository

from care_assessment_server.config import (
    DEFAULT_CARE_TARGET_STATUS,
    DEFAULT_MEAL_TYPE,
    DEFAULT_PAGE_LIMIT,
    MAX_PAGE_LIMIT,
)
from care_assessment_server.dependencies import (
    get_assessment_repository,
    get_db,
    verify_api_key,
)

router = APIRouter(tags=["assessments"], dependencies=[Depends(verify_api_key)])


# ------------------------------------------------------------------
# Request / response models
# ------------------------------------------------------------------

class AssessmentCreate(BaseModel):
    """Body of ``POST /assessments`` — the SDK's draft, fully answered."""

    member_id: str = Field(min_length=1, max_length=50)
    gender: Gender | None = None
    birth_year: int | None = Field(None, ge=BIRTH_YEAR_MIN)

    mobility_level: int = Field(ge=1, le=3)
    eating_level: int = Field(ge=1, le=3)
    toilet_level: int = Field(ge=1, le=3)
    communication_level: int = Field(ge=1, le=3)

    ltci_grade: int | None = Field(None, ge=1, le=8)
    care_target_status: int | None = Field(None, ge=1, le=4)
    meal_type: int | None = Field(None, ge=1, le=3)
    disease_types: str | None = Field(None, max_length=200)

    notes: str | None = None
    assessor_name: str | None = Field(None, max_length=100)
    assessor_relation: str | None = Field(None, max_length=50)

    @field_validator("birth_year")
    @classmethod
    def _not_in_future(cls, value: int | None) -> int | None:
        if value is not None and value > date.today().year:
            raise ValueError("birth_year cannot be in the future")
        return value


class AssessmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    member_id: str
    gender: str | None
    birth_year: int | None
    mobility_level: int
    eating_level: int
    toilet_level: int
    communication_level: int
    ltci_grade: int | None
    care_target_status: int
    meal_type: int
    disease_types: str | None
    notes: str | None
    assessor_name: str | None
    assessor_relation: str | None
    created_at: datetime


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.post("/assessments", status_code=201)
async def create_assessment(
    body: AssessmentCreate,
    db: AsyncSession = Depends(get_db),
    repo: AssessmentRepository = Depends(get_assessment_repository),
) -> AssessmentOut:
    """Store a submitted assessment and return it with its new id."""
    values = body.model_dump(mode="json", exclude={"member_id"})
    if values["care_target_status"] is None:
        values["care_target_status"] = DEFAULT_CARE_TARGET_STATUS
    if values["meal_type"] is None:
        values["meal_type"] = DEFAULT_MEAL_TYPE

    row = await repo.create_assessment(db, member_id=body.member_id, values=values)
    return AssessmentOut.model_validate(row)


@router.get("/assessments/{assessment_id}")
async def get_assessment(
    assessment_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    repo: AssessmentRepository = Depends(get_assessment_repository),
) -> AssessmentOut:
    row = await repo.get_by_id(db, assessment_id)
    if row is None:
        raise ValueError(f"Assessment not found: {assessment_id}")
    return AssessmentOut.model_validate(row)


@router.delete("/assessments/{assessment_id}", status_code=204)
async def delete_assessment(
    assessment_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    repo: AssessmentRepository = Depends(get_assessment_repository),
) -> Response:
    if not await repo.delete_assessment(db, assessment_id):
        raise ValueError(f"Assessment not found: {assessment_id}")
    return Response(status_code=204)


@router.get("/members/{member_id}/assessments")
async def list_member_assessments(
    member_id: str,
    limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    repo: AssessmentRepository = Depends(get_assessment_repository),
) -> list[AssessmentOut]:
    """A member's assessments, newest first."""
    rows = await repo.list_by_member(db, member_id, limit=limit, offset=offset)
    return [AssessmentOut.model_validate(r) for r in rows]


@router.get("/members/{member_id}/assessments/latest")
async def get_latest_assessment(
    member_id: str,
    db: AsyncSession = Depends(get_db),
    repo: AssessmentRepository = Depends(get_assessment_repository),
) -> AssessmentOut:
    row = await repo.get_latest_for_member(db, member_id)
    if row is None:
        raise ValueError(f"No assessment found for member {member_id}")
    return AssessmentOut.model_validate(row)
