"""FastAPI routes with the database layer mocked out.

Mock strategy mirrors the SDK tests: ``MockAssessmentRow`` is a plain
dataclass with the ORM model's attributes, the mock repositories keep rows
in dicts, and ``get_db`` yields an ``AsyncMock`` in place of AsyncSession.
"""

import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest
from fastapi import Request
from fastapi.testclient import TestClient

from care_assessment_server.app import create_app
from care_assessment_server.config import ServerSettings
from care_assessment_server.dependencies import (
    get_assessment_repository,
    get_db,
    get_draft_repository,
)
from care_assessment_server.errors import value_error_handler

from conftest import MEMBER_ID

VALID_BODY = {
    "member_id": MEMBER_ID,
    "gender": "F",
    "birth_year": 1941,
    "mobility_level": 1,
    "eating_level": 2,
    "toilet_level": 3,
    "communication_level": 1,
}


# =====================================================================
# Mock infrastructure
# =====================================================================


@dataclass
class MockAssessmentRow:
    member_id: str
    mobility_level: int
    eating_level: int
    toilet_level: int
    communication_level: int
    gender: str | None = None
    birth_year: int | None = None
    ltci_grade: int | None = None
    care_target_status: int = 4
    meal_type: int = 1
    disease_types: str | None = None
    notes: str | None = None
    assessor_name: str | None = None
    assessor_relation: str | None = None
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class MockDraftRow:
    key: str
    value: str
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class MockAssessmentRepository:
    def __init__(self):
        self.rows: dict[uuid.UUID, MockAssessmentRow] = {}

    async def create_assessment(self, db, *, member_id, values):
        row = MockAssessmentRow(member_id=member_id, **values)
        self.rows[row.id] = row
        return row

    async def get_by_id(self, db, assessment_id):
        return self.rows.get(assessment_id)

    async def list_by_member(self, db, member_id, *, limit=20, offset=0):
        rows = sorted(
            (r for r in self.rows.values() if r.member_id == member_id),
            key=lambda r: r.created_at,
            reverse=True,
        )
        return rows[offset:offset + limit]

    async def get_latest_for_member(self, db, member_id):
        rows = await self.list_by_member(db, member_id, limit=1)
        return rows[0] if rows else None

    async def delete_assessment(self, db, assessment_id):
        return self.rows.pop(assessment_id, None) is not None


class MockDraftRepository:
    def __init__(self):
        self.rows: dict[str, MockDraftRow] = {}

    async def get_draft(self, db, key):
        return self.rows.get(key)

    async def put_draft(self, db, key, value):
        self.rows[key] = MockDraftRow(key=key, value=value)
        return self.rows[key]

    async def delete_draft(self, db, key):
        return self.rows.pop(key, None) is not None


# =====================================================================
# Fixtures
# =====================================================================


@pytest.fixture
def assessment_repo():
    return MockAssessmentRepository()


@pytest.fixture
def draft_repo():
    return MockDraftRepository()


def _build_client(settings, assessment_repo, draft_repo):
    app = create_app(settings)

    async def fake_db():
        yield AsyncMock()

    app.dependency_overrides[get_db] = fake_db
    app.dependency_overrides[get_assessment_repository] = lambda: assessment_repo
    app.dependency_overrides[get_draft_repository] = lambda: draft_repo
    return TestClient(app)


@pytest.fixture
def client(assessment_repo, draft_repo):
    with _build_client(ServerSettings(), assessment_repo, draft_repo) as c:
        yield c


@pytest.fixture
def keyed_client(assessment_repo, draft_repo):
    with _build_client(ServerSettings(api_key="s3cret"), assessment_repo, draft_repo) as c:
        yield c


# =====================================================================
# Assessments
# =====================================================================


class TestCreateAssessment:

    def test_created_with_defaults(self, client, assessment_repo):
        resp = client.post("/api/v1/assessments", json=VALID_BODY)
        assert resp.status_code == 201, resp.text
        body = resp.json()
        assert body["member_id"] == MEMBER_ID
        assert body["care_target_status"] == 4
        assert body["meal_type"] == 1
        assert uuid.UUID(body["id"]) in assessment_repo.rows

    def test_explicit_nulls_get_defaults(self, client):
        resp = client.post(
            "/api/v1/assessments",
            json={**VALID_BODY, "care_target_status": None, "meal_type": None},
        )
        assert resp.status_code == 201
        assert resp.json()["care_target_status"] == 4

    def test_full_draft_payload_accepted(self, client):
        # Exactly what AssessmentDraft.model_dump(mode="json") produces
        payload = {
            **VALID_BODY,
            "ltci_grade": 6,
            "care_target_status": 2,
            "meal_type": 3,
            "disease_types": "DEMENTIA,STROKE",
            "notes": None,
            "assessor_name": "Kim",
            "assessor_relation": "daughter",
        }
        resp = client.post("/api/v1/assessments", json=payload)
        assert resp.status_code == 201, resp.text
        assert resp.json()["ltci_grade"] == 6

    @pytest.mark.parametrize("level", [0, 4])
    def test_adl_out_of_range(self, client, level):
        resp = client.post("/api/v1/assessments", json={**VALID_BODY, "eating_level": level})
        assert resp.status_code == 422
        locs = [tuple(d["loc"]) for d in resp.json()["detail"]]
        assert ("body", "eating_level") in locs

    def test_missing_adl(self, client):
        body = {k: v for k, v in VALID_BODY.items() if k != "toilet_level"}
        assert client.post("/api/v1/assessments", json=body).status_code == 422

    def test_bad_gender(self, client):
        resp = client.post("/api/v1/assessments", json={**VALID_BODY, "gender": "X"})
        assert resp.status_code == 422

    def test_future_birth_year(self, client):
        year = datetime.now(timezone.utc).year + 1
        resp = client.post("/api/v1/assessments", json={**VALID_BODY, "birth_year": year})
        assert resp.status_code == 422


class TestReadAssessments:

    def test_get_by_id(self, client):
        created = client.post("/api/v1/assessments", json=VALID_BODY).json()
        resp = client.get(f"/api/v1/assessments/{created['id']}")
        assert resp.status_code == 200
        assert resp.json()["id"] == created["id"]

    def test_get_unknown_is_404(self, client):
        resp = client.get(f"/api/v1/assessments/{uuid.uuid4()}")
        assert resp.status_code == 404
        assert resp.json() == {"detail": "Resource not found"}

    def test_history_newest_first(self, client, assessment_repo):
        first = client.post("/api/v1/assessments", json=VALID_BODY).json()
        second = client.post("/api/v1/assessments", json=VALID_BODY).json()
        # Make ordering deterministic regardless of clock resolution
        assessment_repo.rows[uuid.UUID(first["id"])].created_at -= timedelta(minutes=5)
        client.post("/api/v1/assessments", json={**VALID_BODY, "member_id": "other"})

        resp = client.get(f"/api/v1/members/{MEMBER_ID}/assessments")
        ids = [a["id"] for a in resp.json()]
        assert ids == [second["id"], first["id"]]

        latest = client.get(f"/api/v1/members/{MEMBER_ID}/assessments/latest").json()
        assert latest["id"] == second["id"]

    def test_history_pagination_limits(self, client):
        assert client.get(f"/api/v1/members/{MEMBER_ID}/assessments?limit=0").status_code == 422

    def test_latest_without_history_is_404(self, client):
        assert client.get("/api/v1/members/nobody/assessments/latest").status_code == 404

    def test_delete(self, client):
        created = client.post("/api/v1/assessments", json=VALID_BODY).json()
        assert client.delete(f"/api/v1/assessments/{created['id']}").status_code == 204
        assert client.delete(f"/api/v1/assessments/{created['id']}").status_code == 404


# =====================================================================
# Drafts
# =====================================================================


class TestDrafts:

    def test_put_get_delete(self, client):
        key = "assessment-draft%3Av1%3Amember-42"
        assert client.get(f"/api/v1/drafts/{key}").status_code == 404

        assert client.put(f"/api/v1/drafts/{key}", json={"value": "{}"}).status_code == 204
        resp = client.get(f"/api/v1/drafts/{key}")
        assert resp.status_code == 200
        assert resp.json() == {"value": "{}"}

        assert client.delete(f"/api/v1/drafts/{key}").status_code == 204
        assert client.get(f"/api/v1/drafts/{key}").status_code == 404

    def test_key_is_decoded(self, client, draft_repo):
        client.put("/api/v1/drafts/assessment-draft%3Av1%3Am-1", json={"value": "x"})
        assert "assessment-draft:v1:m-1" in draft_repo.rows

    def test_delete_absent_is_ok(self, client):
        assert client.delete("/api/v1/drafts/none").status_code == 204

    def test_overlong_key(self, client):
        resp = client.put(f"/api/v1/drafts/{'k' * 201}", json={"value": "x"})
        assert resp.status_code == 400


# =====================================================================
# API key, reference data, health
# =====================================================================


class TestApiKey:

    def test_missing_key(self, keyed_client):
        assert keyed_client.post("/api/v1/assessments", json=VALID_BODY).status_code == 401

    def test_wrong_key(self, keyed_client):
        resp = keyed_client.get("/api/v1/drafts/k", headers={"X-API-Key": "nope"})
        assert resp.status_code == 403

    def test_right_key(self, keyed_client):
        resp = keyed_client.post(
            "/api/v1/assessments", json=VALID_BODY, headers={"X-API-Key": "s3cret"},
        )
        assert resp.status_code == 201

    def test_steps_need_no_key(self, keyed_client):
        assert keyed_client.get("/api/v1/steps").status_code == 200


class TestSteps:

    def test_lists_catalog(self, client):
        steps = client.get("/api/v1/steps").json()
        assert [s["id"] for s in steps][0] == "basic-info"
        assert steps[-1]["terminal"] is True
        mobility = steps[1]
        assert mobility["required_fields"] == ["mobility_level"]
        assert mobility["fields"]["mobility_level"]["min"] == 1
        assert mobility["fields"]["mobility_level"]["max"] == 3


class TestErrorHandlers:

    @staticmethod
    def _request():
        return Request({
            "type": "http",
            "method": "GET",
            "scheme": "http",
            "server": ("testserver", 80),
            "path": "/api/v1/assessments",
            "root_path": "",
            "query_string": b"",
            "headers": [],
        })

    @pytest.mark.asyncio
    async def test_not_found_maps_to_404(self):
        resp = await value_error_handler(self._request(), ValueError("Assessment not found"))
        assert resp.status_code == 404
        assert json.loads(resp.body) == {"detail": "Resource not found"}

    @pytest.mark.asyncio
    async def test_other_value_errors_map_to_400(self):
        resp = await value_error_handler(self._request(), ValueError("Draft already exists"))
        assert resp.status_code == 400
        assert json.loads(resp.body) == {"detail": "Invalid request"}
