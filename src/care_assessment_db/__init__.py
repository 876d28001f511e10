"""care_assessment_db — PostgreSQL persistence for submitted assessments.

This package provides the ORM models, async engine factory, and
repositories for storing submitted health assessments and server-side
drafts.  It is consumed by the FastAPI server and the cleanup CLI.
"""

from care_assessment_db.engine import get_engine, get_session_factory
from care_assessment_db.models.assessment import HealthAssessment
from care_assessment_db.models.draft import StoredDraft
from care_assessment_db.repository import AssessmentRepository, DraftRepository

__all__ = [
    "HealthAssessment",
    "StoredDraft",
    "get_engine",
    "get_session_factory",
    "AssessmentRepository",
    "DraftRepository",
]
