"""Session snapshot models — the contract between the session and its host.

The host never mutates these; every command on
:class:`~care_assessment.session.AssessmentSession` produces a fresh
``SessionState`` and the host re-reads it (or receives it through
``subscribe``).
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from care_assessment.models.draft import AssessmentDraft


class SessionState(BaseModel):
    """Immutable view of an assessment session after a command."""

    model_config = ConfigDict(frozen=True)

    draft: AssessmentDraft
    current_step_index: int = 0
    dirty: bool = False
    last_saved_at: datetime | None = None
    errors: dict[str, str] = Field(default_factory=dict)
    submitting: bool = False
    autosave_enabled: bool = True


class SubmissionResult(BaseModel):
    """What the submission collaborator returns on success."""

    assessment_id: str
    member_id: str
    submitted_at: datetime | None = None
