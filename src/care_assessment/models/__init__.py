"""Public model re-exports for care_assessment.

Consumers should import from ``care_assessment.models`` rather than
reaching into sub-modules directly.
"""

# --- Draft ---
from care_assessment.models.draft import (
    EDITABLE_FIELDS,
    AssessmentDraft,
    DraftEnvelope,
    Gender,
)

# --- Catalog ---
from care_assessment.models.step import FieldRule, StepDefinition, ValidationResult

# --- Session ---
from care_assessment.models.session import SessionState, SubmissionResult

__all__ = [
    # Draft
    "AssessmentDraft",
    "DraftEnvelope",
    "EDITABLE_FIELDS",
    "Gender",
    # Catalog
    "FieldRule",
    "StepDefinition",
    "ValidationResult",
    # Session
    "SessionState",
    "SubmissionResult",
]
