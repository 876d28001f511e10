"""Shared fixtures: catalog, fake clock, in-memory store, fake submitter."""

from datetime import datetime, timezone

import pytest

from care_assessment.catalog import StepCatalog
from care_assessment.clock import ManualScheduler
from care_assessment.interfaces import Submitter
from care_assessment.models import AssessmentDraft, SubmissionResult
from care_assessment.storage import InMemoryKeyValueStore
from care_assessment.validation import ValidationEngine

MEMBER_ID = "member-42"

# Fixed "current year" so birth-year bounds do not drift with the wall clock
CURRENT_YEAR = 2024

BASIC_INFO = {"gender": "F", "birth_year": 1941}
ALL_ADL_ONE = {
    "mobility_level": 1,
    "eating_level": 1,
    "toilet_level": 1,
    "communication_level": 1,
}


class FakeSubmitter(Submitter):
    """Records submitted drafts; raises ``error`` instead when one is set."""

    def __init__(self, error: Exception | None = None):
        self.error = error
        self.submitted: list[AssessmentDraft] = []

    async def submit(self, draft):
        self.submitted.append(draft)
        if self.error is not None:
            raise self.error
        return SubmissionResult(
            assessment_id=f"a-{len(self.submitted)}",
            member_id=draft.member_id,
            submitted_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        )


@pytest.fixture(scope="session")
def catalog():
    """Bundled v1 catalog, loaded once for the whole run."""
    c = StepCatalog()
    c.load()
    return c


@pytest.fixture
def validator(catalog):
    return ValidationEngine(catalog, current_year=lambda: CURRENT_YEAR)


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def store():
    return InMemoryKeyValueStore()


@pytest.fixture
def submitter():
    return FakeSubmitter()
