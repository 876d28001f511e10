"""Schedulers — the only source of time and deferred work for the engine.

The session never touches a platform timer directly.  It is handed a
:class:`Scheduler` and asks it for ``now()`` and ``call_later()``:

  - :class:`LoopScheduler` runs callbacks on the running asyncio loop and
    reads the wall clock.  Use it in real hosts.
  - :class:`ManualScheduler` only moves when :meth:`ManualScheduler.advance`
    is called, which makes autosave timing deterministic in tests and in
    hosts that drive time themselves.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Callable, Protocol

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    """Anything with ``cancel()``; ``asyncio.TimerHandle`` qualifies."""

    def cancel(self) -> None: ...


class Scheduler(ABC):
    """Clock plus deferred, cancellable callbacks."""

    @abstractmethod
    def now(self) -> datetime:
        """Current time as a timezone-aware datetime."""
        ...

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Run ``callback`` after ``delay`` seconds unless cancelled first."""
        ...


class LoopScheduler(Scheduler):
    """Scheduler backed by the asyncio event loop.

    ``call_later`` must be called from code running on the loop (every
    session command is).  Pass ``loop`` explicitly to schedule onto a loop
    from outside it.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay, callback)


class _ManualTimer:
    def __init__(self, due: datetime, callback: Callable[[], None]) -> None:
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler(Scheduler):
    """Deterministic scheduler whose clock only moves on :meth:`advance`.

    Timers due at the same instant fire in the order they were scheduled.
    A callback that schedules a new timer inside the advanced window sees
    it fire during the same :meth:`advance` call.
    """

    def __init__(self, start: datetime | None = None) -> None:
        self._now = start or datetime(2024, 1, 1, tzinfo=timezone.utc)
        self._queue: list[tuple[datetime, int, _ManualTimer]] = []
        self._counter = itertools.count()

    def now(self) -> datetime:
        return self._now

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        timer = _ManualTimer(self._now + timedelta(seconds=delay), callback)
        heapq.heappush(self._queue, (timer.due, next(self._counter), timer))
        return timer

    @property
    def pending(self) -> int:
        """Number of scheduled, uncancelled timers."""
        return sum(1 for _, _, t in self._queue if not t.cancelled)

    def advance(self, seconds: float) -> int:
        """Move the clock forward, firing every timer that comes due.

        Returns the number of callbacks fired.
        """
        target = self._now + timedelta(seconds=seconds)
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self._now = due
            timer.callback()
            fired += 1
        self._now = target
        logger.debug("ManualScheduler advanced to %s, fired %d timer(s)", target, fired)
        return fired
