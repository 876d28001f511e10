"""StepSequencer — current step index and the legal moves between steps.

The sequencer only knows positions.  Whether the step gate is open is
decided by the caller (the session validates before calling
:meth:`advance`), which keeps the transition rules here trivially testable.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class StepSequencer:
    """Tracks the current index within ``[0, total_steps)``."""

    def __init__(self, total_steps: int, start: int = 0) -> None:
        if total_steps < 1:
            raise ValueError(f"total_steps must be >= 1, got {total_steps}")
        self._total = total_steps
        self._index = min(max(start, 0), total_steps - 1)

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def total_steps(self) -> int:
        return self._total

    @property
    def at_first(self) -> bool:
        return self._index == 0

    @property
    def at_last(self) -> bool:
        return self._index == self._total - 1

    def can_go_to(self, index: int) -> bool:
        return 0 <= index < self._total

    def advance(self) -> bool:
        """Move forward one step.  Returns ``False`` at the last step."""
        if self.at_last:
            return False
        self._index += 1
        return True

    def retreat(self) -> bool:
        """Move back one step.  Returns ``False`` at the first step."""
        if self.at_first:
            return False
        self._index -= 1
        return True

    def go_to(self, index: int) -> bool:
        """Jump to ``index``.  Out-of-range targets are refused."""
        if not self.can_go_to(index):
            logger.warning("Refusing jump to step %d (total %d)", index, self._total)
            return False
        self._index = index
        return True

    def reset(self) -> None:
        self._index = 0
