"""AssessmentSession — the handle a host holds while a member fills the form.

Composes the step catalog, :class:`ValidationEngine`, :class:`ScoreAggregator`,
:class:`DraftPersistence` and :class:`StepSequencer` behind one command set.

Every synchronous command runs to completion against in-memory state and
returns the resulting immutable :class:`SessionState`; listeners registered
with :meth:`AssessmentSession.subscribe` receive the same snapshot.  The
only asynchronous work is the autosave timer (on the injected scheduler)
and :meth:`AssessmentSession.submit`.

Usage::

    session = AssessmentSession("member-42", store=store, scheduler=scheduler,
                                submitter=submitter)
    session.update_field("gender", "F")
    session.update_field("birth_year", 1941)
    state = session.next_step()
    if state.errors:
        ...  # render errors, the index did not move
    result = await session.submit()
"""

from __future__ import annotations

import enum
import logging
from typing import Any, Callable, Mapping

from pydantic import ValidationError

from care_assessment.catalog import StepCatalog, default_catalog
from care_assessment.clock import LoopScheduler, Scheduler
from care_assessment.constants import (
    ADL_FIELDS,
    AUTOSAVE_INTERVAL_SECONDS,
    DRAFT_MAX_AGE_HOURS,
    SUBMIT_ERROR_KEY,
)
from care_assessment.errors import (
    StepCatalogError,
    SubmissionError,
    ServerValidationError,
)
from care_assessment.interfaces import CareTierClassifier, Submitter
from care_assessment.models.draft import EDITABLE_FIELDS, AssessmentDraft
from care_assessment.models.session import SessionState, SubmissionResult
from care_assessment.models.step import StepDefinition, ValidationResult
from care_assessment.persistence import DraftPersistence
from care_assessment.scoring import ScoreAggregator
from care_assessment.sequencer import StepSequencer
from care_assessment.storage import InMemoryKeyValueStore, KeyValueStore
from care_assessment.validation import ValidationCache, ValidationEngine

logger = logging.getLogger(__name__)

INCOMPLETE_MESSAGE = "Please complete all required answers before submitting."

Listener = Callable[[SessionState], None]


class AssessmentSession:
    """One member's assessment wizard.

    Args:
        member_id: identity supplied by the host; never overwritten by a
            restored draft or by ``update_field``
        catalog: step catalog (defaults to the bundled v1 catalog)
        store: draft store (defaults to an in-memory store)
        scheduler: clock/timer source (defaults to the asyncio loop)
        submitter: submission collaborator; required only for :meth:`submit`
        validator: rule engine (defaults to one built on ``catalog``)
        classifier: optional care-tier classifier for :attr:`care_tier`
        initial: host overrides applied over the built-in defaults; a
            restored draft's values win over these
        autosave_interval: seconds from the first unsaved edit to autosave
        max_draft_age_hours: ignore persisted drafts older than this
        restore_position: resume the step index stored with the draft
            instead of starting at step 0
    """

    def __init__(
        self,
        member_id: str,
        *,
        catalog: StepCatalog | None = None,
        store: KeyValueStore | None = None,
        scheduler: Scheduler | None = None,
        submitter: Submitter | None = None,
        validator: ValidationEngine | None = None,
        classifier: CareTierClassifier | None = None,
        initial: Mapping[str, Any] | None = None,
        autosave_interval: float = AUTOSAVE_INTERVAL_SECONDS,
        max_draft_age_hours: float = DRAFT_MAX_AGE_HOURS,
        restore_position: bool = False,
    ) -> None:
        if not member_id or not member_id.strip():
            raise ValueError("member_id is required")

        self._member_id = member_id
        self._catalog = catalog if catalog is not None else default_catalog()
        if self._catalog.total_steps == 0:
            raise StepCatalogError("Step catalog has no steps; was load() called?")

        self._validator = validator or ValidationEngine(self._catalog)
        self._aggregator = ScoreAggregator(self._catalog, classifier)
        self._cache = ValidationCache(self._catalog)
        self._submitter = submitter

        self._draft = self._defaults()
        self._errors: dict[str, str] = {}
        self._submitting = False
        self._listeners: list[Listener] = []

        self._persistence = DraftPersistence(
            member_id,
            store if store is not None else InMemoryKeyValueStore(),
            scheduler if scheduler is not None else LoopScheduler(),
            snapshot=lambda: (self._draft, self._sequencer.current_index),
            interval=autosave_interval,
            max_age_hours=max_draft_age_hours,
            on_autosave=self._publish,
        )

        # --- Merge: defaults < host overrides < persisted draft ---
        if initial:
            self._check_fields(initial)
            for name, value in initial.items():
                try:
                    self._draft = self._coerce(name, value)
                except ValidationError as exc:
                    raise ValueError(f"Invalid initial value for {name}: {value!r}") from exc

        start = 0
        envelope = self._persistence.load()
        if envelope is not None:
            persisted = envelope.draft.model_dump(exclude={"member_id"}, exclude_none=True)
            self._draft = self._draft.model_copy(update=persisted)
            if restore_position:
                start = envelope.current_step_index

        self._sequencer = StepSequencer(self._catalog.total_steps, start=start)
        self._state = self._build_state()

    # ==================================================================
    # Reads
    # ==================================================================

    @property
    def member_id(self) -> str:
        return self._member_id

    @property
    def state(self) -> SessionState:
        """The latest snapshot.  Never mutated; replaced after each command."""
        return self._state

    def snapshot(self) -> SessionState:
        return self._state

    @property
    def steps(self) -> list[StepDefinition]:
        return list(self._catalog.steps)

    @property
    def total_steps(self) -> int:
        return self._catalog.total_steps

    @property
    def current_step(self) -> StepDefinition:
        return self._catalog.get_step(self._sequencer.current_index)

    @property
    def progress(self) -> int:
        """Completion percentage up to and including the current step."""
        return self._aggregator.completion_percentage(self._draft, self._sequencer.current_index)

    @property
    def can_submit(self) -> bool:
        """Every mandatory field is present, regardless of position."""
        return self._aggregator.can_submit(self._draft)

    @property
    def can_complete_current_step(self) -> bool:
        """Presence-only check for the current step's required fields."""
        return self._aggregator.can_complete_step(self._sequencer.current_index, self._draft)

    @property
    def has_unsaved_changes(self) -> bool:
        return self._persistence.has_unsaved_changes

    @property
    def adl_total(self) -> int | None:
        return self._aggregator.adl_total(self._draft)

    @property
    def care_tier(self) -> str | None:
        return self._aggregator.care_tier(self._draft)

    @property
    def storage_key(self) -> str:
        return self._persistence.key

    def step_validation(self, step_index: int) -> ValidationResult | None:
        """Cached validation result for a step, if one is still valid."""
        return self._cache.get(step_index)

    # ==================================================================
    # Subscription
    # ==================================================================

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` with every new snapshot.  Returns an unsubscribe."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ==================================================================
    # Editing
    # ==================================================================

    def update_field(self, field: str, value: Any) -> SessionState:
        """Write one draft field.

        A value that cannot be coerced to the field type is not stored; the
        field gets an "invalid value" entry in ``errors`` instead.  Range
        problems are left for the step gate to report.

        Raises ``RuntimeError`` while a submission is in flight.
        """
        self._write({field: value})
        return self._publish()

    def update_fields(self, values: Mapping[str, Any]) -> SessionState:
        """Write several fields as one command (one snapshot, one dirty mark)."""
        self._write(values)
        return self._publish()

    def set_adl_level(self, field: str, level: Any) -> SessionState:
        if field not in ADL_FIELDS:
            raise ValueError(f"Not an ADL field: {field}")
        return self.update_field(field, level)

    def set_basic_info(self, *, gender: Any = None, birth_year: Any = None) -> SessionState:
        return self.update_fields({"gender": gender, "birth_year": birth_year})

    def _write(self, values: Mapping[str, Any]) -> None:
        if self._submitting:
            raise RuntimeError("Cannot edit the draft while a submission is in flight")
        self._check_fields(values)
        for name, value in values.items():
            try:
                candidate = self._coerce(name, value)
            except ValidationError:
                logger.debug("Rejected value %r for field %s", value, name)
                self._errors[name] = self._validator.invalid_value_message(name)
                continue
            self._draft = candidate
            self._cache.invalidate_field(name)
            self._errors.pop(name, None)
            self._persistence.mark_dirty()

    def _coerce(self, name: str, value: Any) -> AssessmentDraft:
        if isinstance(value, enum.Enum):
            value = value.value
        return AssessmentDraft.model_validate({**self._draft.model_dump(), name: value})

    @staticmethod
    def _check_fields(values: Mapping[str, Any]) -> None:
        for name in values:
            if name == "member_id":
                raise ValueError("member_id is supplied by the host and cannot be edited")
            if name not in EDITABLE_FIELDS:
                raise ValueError(f"Unknown draft field: {name}")

    # ==================================================================
    # Navigation
    # ==================================================================

    def next_step(self) -> SessionState:
        """Advance if the current step validates; otherwise show its errors."""
        index = self._sequencer.current_index
        result = self._validate_step(index)
        if not result.is_valid:
            self._errors = dict(result.errors)
            logger.debug("Step %d blocked: %s", index, sorted(result.errors))
            return self._publish()

        moved = self._sequencer.advance()
        self._errors = {}
        if moved and self._persistence.dirty:
            # best effort; failures are logged inside save()
            self._persistence.save()
        return self._publish()

    def previous_step(self) -> SessionState:
        self._sequencer.retreat()
        self._errors = {}
        return self._publish()

    def go_to_step(self, step_index: int) -> SessionState:
        """Jump to any step; re-shows errors cached from an earlier failure."""
        if not self._sequencer.go_to(step_index):
            return self._state
        self._errors = {}
        cached = self._cache.get(step_index)
        if cached is not None and not cached.is_valid:
            self._errors = dict(cached.errors)
        return self._publish()

    def validate_current_step(self) -> ValidationResult:
        """Validate the current step and surface any errors without moving."""
        result = self._validate_step(self._sequencer.current_index)
        if not result.is_valid:
            self._errors.update(result.errors)
            self._publish()
        return result

    def _validate_step(self, index: int) -> ValidationResult:
        cached = self._cache.get(index)
        if cached is not None:
            return cached
        result = self._validator.validate(self._catalog.get_step(index), self._draft)
        self._cache.put(result)
        return result

    # ==================================================================
    # Persistence
    # ==================================================================

    def save_draft(self) -> bool:
        """Write the draft now.  Returns ``False`` when there was nothing to save."""
        saved = self._persistence.save()
        if saved:
            self._publish()
        return saved

    def set_autosave_enabled(self, enabled: bool) -> SessionState:
        self._persistence.set_autosave_enabled(enabled)
        return self._publish()

    def close(self) -> None:
        """Flush unsaved edits and stop the autosave timer."""
        self._persistence.save()
        self._persistence.cancel_pending()

    def reset(self) -> SessionState:
        """Drop the draft: cancel autosave, clear memory and the persisted copy."""
        self._persistence.discard()
        self._draft = self._defaults()
        self._sequencer.reset()
        self._cache.clear()
        self._errors = {}
        logger.info("Assessment session reset for member %s", self._member_id)
        return self._publish()

    # ==================================================================
    # Submission
    # ==================================================================

    async def submit(self) -> SubmissionResult | None:
        """Send the draft to the submission collaborator.

        Returns the collaborator's result on success, after which the draft,
        position and persisted copy are cleared.  Returns ``None`` when the
        call was ignored (already submitting), blocked by validation, or
        failed; failures leave the draft untouched and set
        ``errors["submit"]``.
        """
        if self._submitting:
            logger.info("Submission already in flight for member %s, ignoring", self._member_id)
            return None
        if self._submitter is None:
            raise RuntimeError("AssessmentSession has no submitter configured")

        results = self._validator.validate_all(self._catalog.steps, self._draft)
        invalid: dict[str, str] = {}
        for result in results:
            self._cache.put(result)
            invalid.update(result.errors)
        if invalid:
            self._errors = {**invalid, SUBMIT_ERROR_KEY: INCOMPLETE_MESSAGE}
            self._publish()
            return None

        draft = self._draft
        self._submitting = True
        self._errors.pop(SUBMIT_ERROR_KEY, None)
        self._publish()

        try:
            outcome = await self._submitter.submit(draft)
        except SubmissionError as exc:
            logger.warning("Submission failed for member %s: %s", self._member_id, exc)
            self._submitting = False
            errors: dict[str, str] = {}
            if isinstance(exc, ServerValidationError):
                errors = {k: v for k, v in exc.field_errors.items() if k in EDITABLE_FIELDS}
            self._errors = {**errors, SUBMIT_ERROR_KEY: exc.user_message}
            self._publish()
            return None
        except BaseException:
            self._submitting = False
            self._publish()
            raise

        self._submitting = False
        self._persistence.discard()
        self._draft = self._defaults()
        self._sequencer.reset()
        self._cache.clear()
        self._errors = {}
        logger.info(
            "Assessment %s submitted for member %s", outcome.assessment_id, self._member_id,
        )
        self._publish()
        return outcome

    # ==================================================================
    # Internal
    # ==================================================================

    def _defaults(self) -> AssessmentDraft:
        return AssessmentDraft(member_id=self._member_id)

    def _build_state(self) -> SessionState:
        return SessionState(
            draft=self._draft,
            current_step_index=self._sequencer.current_index,
            dirty=self._persistence.dirty,
            last_saved_at=self._persistence.last_saved_at,
            errors=dict(self._errors),
            submitting=self._submitting,
            autosave_enabled=self._persistence.autosave_enabled,
        )

    def _publish(self) -> SessionState:
        self._state = self._build_state()
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception:
                logger.exception("Session listener %r failed", listener)
        return self._state
