"""Draft models — the record under edit and its persisted envelope.

``AssessmentDraft`` is immutable: the session produces a new, re-validated
instance on every edit, so snapshots handed to callers never change
underneath them.

Ordinal fields are plain ``int``: the draft may transiently hold an
out-of-range value the user just typed.  Range checks belong to
:class:`~care_assessment.validation.ValidationEngine`, which reports them
as data rather than raising.
"""

import enum
from typing import Any

from pydantic import AwareDatetime, BaseModel, ConfigDict, field_validator


class Gender(str, enum.Enum):
    """Gender codes accepted by the basic-info step."""

    MALE = "M"
    FEMALE = "F"


class AssessmentDraft(BaseModel):
    """The in-progress, unsubmitted assessment for one member."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    # --- Identity (host supplied, never edited through the session) ---
    member_id: str

    # --- Basic info ---
    gender: str | None = None
    birth_year: int | None = None

    # --- ADL sub-scores: 1 independent, 2 partial, 3 full assistance ---
    mobility_level: int | None = None
    eating_level: int | None = None
    toilet_level: int | None = None
    communication_level: int | None = None

    # --- Long-term-care insurance grade (1-8), absent = not yet graded ---
    ltci_grade: int | None = None

    # --- Additional info ---
    care_target_status: int | None = None
    meal_type: int | None = None
    disease_types: str | None = None
    notes: str | None = None
    assessor_name: str | None = None
    assessor_relation: str | None = None

    @field_validator(
        "birth_year", "mobility_level", "eating_level", "toilet_level",
        "communication_level", "ltci_grade", "care_target_status", "meal_type",
        mode="before",
    )
    @classmethod
    def _reject_bool(cls, value: Any) -> Any:
        # bool is an int subclass; lax mode would store True as 1
        if isinstance(value, bool):
            raise ValueError("expected an integer, got a boolean")
        return value


# Every field a caller may write through the session.
EDITABLE_FIELDS: frozenset[str] = frozenset(
    name for name in AssessmentDraft.model_fields if name != "member_id"
)


class DraftEnvelope(BaseModel):
    """Persisted form of a draft, serialised as JSON into the key/value store.

    ``schema_version`` repeats the version tag embedded in the storage key so
    a payload copied under the wrong key is still rejected on load.
    """

    schema_version: str
    member_id: str
    draft: AssessmentDraft
    current_step_index: int = 0
    saved_at: AwareDatetime
