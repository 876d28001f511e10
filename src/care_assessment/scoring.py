"""ScoreAggregator — derived values computed from the draft.

Two values the wizard shows are easy to conflate and are kept
apart:

  - ``completion_percentage`` is a progress indicator tied to navigation
    position: it only counts steps the user has reached.
  - ``can_submit`` ignores position entirely: a user who filled every
    mandatory field can submit from any step.

Both only look at presence, not range validity.
"""

from __future__ import annotations

import math
from typing import Iterable, Sequence

from care_assessment.catalog import StepCatalog
from care_assessment.constants import ADL_FIELDS
from care_assessment.interfaces import CareTierClassifier
from care_assessment.models.draft import AssessmentDraft
from care_assessment.models.step import StepDefinition
from care_assessment.validation import is_missing


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def step_has_required_fields(step: StepDefinition, draft: AssessmentDraft) -> bool:
    """True when every required field of ``step`` is present."""
    return all(not is_missing(getattr(draft, name)) for name in step.required_fields)


def completion_percentage(
    steps: Sequence[StepDefinition], draft: AssessmentDraft, current_step_index: int
) -> int:
    """Percentage of all steps that are reached and complete."""
    if not steps:
        return 0
    last = min(current_step_index, len(steps) - 1)
    complete = sum(1 for step in steps[: last + 1] if step_has_required_fields(step, draft))
    return _round_half_up(100 * complete / len(steps))


def can_submit(mandatory_steps: Iterable[StepDefinition], draft: AssessmentDraft) -> bool:
    """True when every required field across the mandatory steps is present."""
    return all(step_has_required_fields(step, draft) for step in mandatory_steps)


def adl_levels(draft: AssessmentDraft) -> tuple[int, int, int, int] | None:
    """The four ADL levels in catalog order, or ``None`` if any is missing."""
    values = tuple(getattr(draft, name) for name in ADL_FIELDS)
    if any(v is None for v in values):
        return None
    return values  # type: ignore[return-value]


def adl_total(draft: AssessmentDraft) -> int | None:
    """Sum of the ADL levels (4-12 when in range), ``None`` if incomplete."""
    levels = adl_levels(draft)
    return sum(levels) if levels is not None else None


class ThresholdCareTierClassifier(CareTierClassifier):
    """Classifies by ADL total using caller-supplied thresholds.

    ``thresholds`` is a list of ``(upper_bound, tier)`` pairs; the first pair
    whose bound is >= the total wins.  A total above every bound falls into
    the last tier.

    Example::

        ThresholdCareTierClassifier([(5, "light"), (8, "moderate"), (12, "heavy")])
    """

    def __init__(self, thresholds: Sequence[tuple[int, str]]) -> None:
        if not thresholds:
            raise ValueError("thresholds must not be empty")
        bounds = [bound for bound, _ in thresholds]
        if bounds != sorted(bounds):
            raise ValueError(f"thresholds must be sorted by upper bound, got {bounds}")
        self._thresholds = list(thresholds)

    def classify(self, levels: tuple[int, int, int, int]) -> str:
        total = sum(levels)
        for bound, tier in self._thresholds:
            if total <= bound:
                return tier
        return self._thresholds[-1][1]


class ScoreAggregator:
    """Catalog-bound front for the derived-value functions.

    Args:
        catalog: the step catalog the session runs on
        classifier: optional care-tier classifier; without one
            :meth:`care_tier` always returns ``None``
    """

    def __init__(
        self, catalog: StepCatalog, classifier: CareTierClassifier | None = None
    ) -> None:
        self._catalog = catalog
        self._classifier = classifier

    def completion_percentage(self, draft: AssessmentDraft, current_step_index: int) -> int:
        return completion_percentage(self._catalog.steps, draft, current_step_index)

    def can_submit(self, draft: AssessmentDraft) -> bool:
        return can_submit(self._catalog.mandatory_steps, draft)

    def can_complete_step(self, step_index: int, draft: AssessmentDraft) -> bool:
        return step_has_required_fields(self._catalog.get_step(step_index), draft)

    def adl_total(self, draft: AssessmentDraft) -> int | None:
        return adl_total(draft)

    def care_tier(self, draft: AssessmentDraft) -> str | None:
        """Tier from the injected classifier, once all ADL levels are present."""
        if self._classifier is None:
            return None
        levels = adl_levels(draft)
        if levels is None:
            return None
        return self._classifier.classify(levels)
