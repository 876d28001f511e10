"""ORM models for care_assessment_db."""

from care_assessment_db.models.assessment import HealthAssessment
from care_assessment_db.models.base import Base
from care_assessment_db.models.draft import StoredDraft

__all__ = ["Base", "HealthAssessment", "StoredDraft"]
