"""Step catalog models — mirror ``definitions/v1/steps.yaml``.

  - FieldRule: per-field check applied once a value is present
  - StepDefinition: one wizard step and the fields it owns
  - ValidationResult: outcome of validating one step against a draft
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class FieldRule(BaseModel):
    """Validation rule for a single draft field.

    ``type`` is one of:
      - ``text``: free text, optional ``max_length``
      - ``choice``: value must be one of ``values``
      - ``ordinal``: integer in ``[min, max]``
      - ``year``: integer in ``[min, current year]`` (``max`` overrides)
    """

    model_config = ConfigDict(frozen=True)

    label: str
    type: Literal["text", "choice", "ordinal", "year"]
    values: tuple[str, ...] | None = None
    min: int | None = None
    max: int | None = None
    max_length: int | None = None


class StepDefinition(BaseModel):
    """One step of the assessment wizard.

    ``required_fields`` must be present (and valid) before the step gate
    opens.  ``optional_fields`` are owned by the step but only checked when
    a value is present.  On a step with ``is_required_step`` false, absence
    of any field is legal.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: str = ""
    order_index: int
    required_fields: tuple[str, ...] = ()
    optional_fields: tuple[str, ...] = ()
    is_required_step: bool = True
    terminal: bool = False

    @property
    def fields(self) -> tuple[str, ...]:
        """All fields owned by the step, required first."""
        return self.required_fields + self.optional_fields


class ValidationResult(BaseModel):
    """Validation outcome for one step, cached by step index."""

    model_config = ConfigDict(frozen=True)

    step: int
    is_valid: bool
    errors: dict[str, str] = Field(default_factory=dict)
