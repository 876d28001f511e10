"""DraftPersistence — dirty tracking, coalesced autosave, restore-on-load.

Owns the only two shared resources the engine uses: the key/value store
and the scheduler.  Every failure talking to the store is logged and
absorbed here; an edit or a navigation command never fails because a draft
could not be written.

Autosave contract:

  - the first edit after a clean state arms one timer
    (``AUTOSAVE_INTERVAL_SECONDS``); further edits coalesce into it
  - when the timer fires, the draft is written only if still dirty
  - a successful write (timer, manual, or post-navigation) clears ``dirty``,
    stamps ``last_saved_at`` from the scheduler clock, and cancels any
    pending timer
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable

from pydantic import ValidationError

from care_assessment.clock import Scheduler, TimerHandle
from care_assessment.constants import (
    AUTOSAVE_INTERVAL_SECONDS,
    DRAFT_KEY_NAMESPACE,
    DRAFT_MAX_AGE_HOURS,
    DRAFT_SCHEMA_VERSION,
)
from care_assessment.models.draft import AssessmentDraft, DraftEnvelope
from care_assessment.storage import KeyValueStore

logger = logging.getLogger(__name__)


def draft_key(
    member_id: str,
    *,
    namespace: str = DRAFT_KEY_NAMESPACE,
    version: str = DRAFT_SCHEMA_VERSION,
) -> str:
    """Storage key for a member's draft, e.g. ``assessment-draft:v1:m-42``."""
    return f"{namespace}:{version}:{member_id}"


class DraftPersistence:
    """Persists one member's draft through a :class:`KeyValueStore`.

    Args:
        member_id: whose draft this is; part of the storage key
        store: where envelopes are written
        scheduler: clock and timer source for autosave
        snapshot: returns the current ``(draft, current_step_index)``;
            called at write time so a delayed autosave writes the latest edit
        interval: autosave delay in seconds
        max_age_hours: persisted drafts older than this are not restored
            (0 disables the check)
        on_autosave: called after a timer-driven write so the owner can
            publish the new ``dirty`` / ``last_saved_at`` values
        schema_version: version tag embedded in key and envelope
    """

    def __init__(
        self,
        member_id: str,
        store: KeyValueStore,
        scheduler: Scheduler,
        snapshot: Callable[[], tuple[AssessmentDraft, int]],
        *,
        interval: float = AUTOSAVE_INTERVAL_SECONDS,
        max_age_hours: float = DRAFT_MAX_AGE_HOURS,
        on_autosave: Callable[[], None] | None = None,
        schema_version: str = DRAFT_SCHEMA_VERSION,
    ) -> None:
        self._member_id = member_id
        self._store = store
        self._scheduler = scheduler
        self._snapshot = snapshot
        self._interval = interval
        self._max_age = timedelta(hours=max_age_hours) if max_age_hours > 0 else None
        self._on_autosave = on_autosave
        self._version = schema_version
        self._key = draft_key(member_id, version=schema_version)

        self._dirty = False
        self._last_saved_at: datetime | None = None
        self._timer: TimerHandle | None = None
        self._autosave_enabled = True

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def key(self) -> str:
        return self._key

    @property
    def dirty(self) -> bool:
        return self._dirty

    @property
    def has_unsaved_changes(self) -> bool:
        return self._dirty

    @property
    def last_saved_at(self) -> datetime | None:
        return self._last_saved_at

    @property
    def autosave_enabled(self) -> bool:
        return self._autosave_enabled

    @property
    def autosave_pending(self) -> bool:
        return self._timer is not None

    # ------------------------------------------------------------------
    # Restore
    # ------------------------------------------------------------------

    def load(self) -> DraftEnvelope | None:
        """Return the persisted envelope for this member, if usable."""
        try:
            raw = self._store.get(self._key)
        except Exception as exc:
            logger.warning("Draft load failed for %s: %s", self._key, exc)
            return None
        if raw is None:
            return None

        try:
            envelope = DraftEnvelope.model_validate_json(raw)
        except ValidationError as exc:
            logger.warning("Ignoring unreadable draft at %s: %s", self._key, exc)
            return None

        if envelope.schema_version != self._version:
            logger.warning(
                "Ignoring draft at %s: schema %s, expected %s",
                self._key, envelope.schema_version, self._version,
            )
            return None
        if envelope.member_id != self._member_id:
            logger.warning(
                "Ignoring draft at %s: belongs to member %s", self._key, envelope.member_id,
            )
            return None
        if self._max_age is not None and self._scheduler.now() - envelope.saved_at > self._max_age:
            logger.info("Ignoring expired draft at %s (saved %s)", self._key, envelope.saved_at)
            return None

        self._last_saved_at = envelope.saved_at
        logger.info("Restored draft for member %s saved at %s", self._member_id, envelope.saved_at)
        return envelope

    # ------------------------------------------------------------------
    # Dirty tracking & autosave
    # ------------------------------------------------------------------

    def mark_dirty(self) -> None:
        """Record an unsaved edit and arm autosave if none is pending."""
        self._dirty = True
        if self._autosave_enabled and self._timer is None:
            self._arm()

    def set_autosave_enabled(self, enabled: bool) -> None:
        self._autosave_enabled = enabled
        if not enabled:
            self.cancel_pending()
        elif self._dirty and self._timer is None:
            self._arm()

    def _arm(self) -> None:
        try:
            self._timer = self._scheduler.call_later(self._interval, self._on_timer)
        except RuntimeError as exc:
            # e.g. LoopScheduler used outside a running event loop
            logger.warning("Could not schedule autosave for %s: %s", self._key, exc)
            self._timer = None

    def _on_timer(self) -> None:
        self._timer = None
        if not self._dirty:
            return
        if self.save() and self._on_autosave is not None:
            self._on_autosave()

    def cancel_pending(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    # ------------------------------------------------------------------
    # Write / discard
    # ------------------------------------------------------------------

    def save(self) -> bool:
        """Write the current draft if dirty.

        Returns ``True`` when a write happened.  Not dirty → no-op.  A store
        failure is logged, leaves ``dirty`` set, and returns ``False``.
        """
        if not self._dirty:
            logger.debug("Draft %s not dirty, skipping save", self._key)
            return False

        draft, step_index = self._snapshot()
        envelope = DraftEnvelope(
            schema_version=self._version,
            member_id=self._member_id,
            draft=draft,
            current_step_index=step_index,
            saved_at=self._scheduler.now(),
        )
        try:
            self._store.set(self._key, envelope.model_dump_json())
        except Exception as exc:
            logger.warning("Draft save failed for %s: %s", self._key, exc)
            return False

        self._dirty = False
        self._last_saved_at = envelope.saved_at
        self.cancel_pending()
        logger.debug("Draft %s saved at %s", self._key, envelope.saved_at)
        return True

    def discard(self) -> None:
        """Cancel autosave and remove the persisted copy."""
        self.cancel_pending()
        try:
            self._store.remove(self._key)
        except Exception as exc:
            logger.warning("Draft removal failed for %s: %s", self._key, exc)
        self._dirty = False
        self._last_saved_at = None
