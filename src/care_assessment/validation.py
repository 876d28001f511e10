"""ValidationEngine — evaluates a step's field rules against a draft.

Rule order per field:

  1. **presence**: ``None`` or a blank string is "missing".  A missing
     required field yields the "required" message and no further rule runs
     for that field.  A missing optional field is simply skipped.
  2. **type check**: once present, the field's rule from the catalog runs
     (ordinal range, year range, choice membership, text length).

Only the first failing message is kept per field.  Fields the step does not
own are never evaluated.

Results are data: ``validate`` never raises for bad user input.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Callable, Iterable

from care_assessment.catalog import StepCatalog
from care_assessment.constants import BIRTH_YEAR_MIN
from care_assessment.models.draft import AssessmentDraft
from care_assessment.models.step import FieldRule, StepDefinition, ValidationResult

logger = logging.getLogger(__name__)

REQUIRED_MESSAGE = "{label} is required"
RANGE_MESSAGE = "{label} must be between {low} and {high}"
CHOICE_MESSAGE = "{label} must be one of: {choices}"
LENGTH_MESSAGE = "{label} must be at most {limit} characters"
INVALID_MESSAGE = "{label} has an invalid value"


def is_missing(value: Any) -> bool:
    """True for values that do not count as an answer."""
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


class ValidationEngine:
    """Evaluates field rules from a :class:`StepCatalog`.

    Args:
        catalog: the loaded step catalog supplying field rules
        current_year: returns the upper bound for ``year`` fields; injectable
            so tests do not depend on the wall clock
    """

    def __init__(
        self,
        catalog: StepCatalog,
        *,
        current_year: Callable[[], int] | None = None,
    ) -> None:
        self._catalog = catalog
        self._current_year = current_year or (lambda: date.today().year)

    def validate(self, step: StepDefinition, draft: AssessmentDraft) -> ValidationResult:
        """Validate every field owned by ``step``."""
        errors: dict[str, str] = {}

        for name in step.required_fields:
            message = self._check_field(name, getattr(draft, name), required=step.is_required_step)
            if message is not None:
                errors[name] = message

        for name in step.optional_fields:
            message = self._check_field(name, getattr(draft, name), required=False)
            if message is not None:
                errors[name] = message

        return ValidationResult(step=step.order_index, is_valid=not errors, errors=errors)

    def validate_all(
        self, steps: Iterable[StepDefinition], draft: AssessmentDraft
    ) -> list[ValidationResult]:
        """Validate each step in ``steps``; used as the pre-submission check."""
        return [self.validate(step, draft) for step in steps]

    def invalid_value_message(self, name: str) -> str:
        """Message for a value that cannot even be coerced to the field type."""
        return INVALID_MESSAGE.format(label=self._label(name))

    # ------------------------------------------------------------------
    # Field checks
    # ------------------------------------------------------------------

    def _check_field(self, name: str, value: Any, *, required: bool) -> str | None:
        if is_missing(value):
            if required:
                return REQUIRED_MESSAGE.format(label=self._label(name))
            return None

        rule = self._catalog.field_rule(name)
        if rule is None:
            return None
        return self._check_rule(rule, value)

    def _check_rule(self, rule: FieldRule, value: Any) -> str | None:
        if rule.type == "text":
            if not isinstance(value, str):
                return INVALID_MESSAGE.format(label=rule.label)
            if rule.max_length is not None and len(value) > rule.max_length:
                return LENGTH_MESSAGE.format(label=rule.label, limit=rule.max_length)
            return None

        if rule.type == "choice":
            choices = rule.values or ()
            if getattr(value, "value", value) not in choices:
                return CHOICE_MESSAGE.format(label=rule.label, choices=", ".join(choices))
            return None

        # ordinal / year: integers within bounds
        if rule.type == "year":
            low = rule.min if rule.min is not None else BIRTH_YEAR_MIN
            high = rule.max if rule.max is not None else self._current_year()
        else:
            low, high = rule.min, rule.max

        # bool is an int subclass but never a valid score
        if isinstance(value, bool) or not isinstance(value, int):
            return INVALID_MESSAGE.format(label=rule.label)
        if not low <= value <= high:
            return RANGE_MESSAGE.format(label=rule.label, low=low, high=high)
        return None

    def _label(self, name: str) -> str:
        rule = self._catalog.field_rule(name)
        return rule.label if rule is not None else name


class ValidationCache:
    """Per-step cache of :class:`ValidationResult`.

    A cached result is only trustworthy until one of the step's fields
    changes, so every write goes through :meth:`invalidate_field`.
    """

    def __init__(self, catalog: StepCatalog) -> None:
        self._catalog = catalog
        self._results: dict[int, ValidationResult] = {}

    def get(self, step_index: int) -> ValidationResult | None:
        return self._results.get(step_index)

    def put(self, result: ValidationResult) -> None:
        self._results[result.step] = result

    def invalidate_field(self, name: str) -> None:
        """Drop the cached result of every step that owns ``name``."""
        for index in self._catalog.steps_owning(name):
            if self._results.pop(index, None) is not None:
                logger.debug("Validation cache invalidated for step %d (field %s)", index, name)

    def clear(self) -> None:
        self._results.clear()

    def __contains__(self, step_index: int) -> bool:
        return step_index in self._results
