"""Cancellable delayed actions on an injectable clock.

Everything in the engine that waits (word timeouts, restart delays, the
settle delay after an advance) goes through a ``Scheduler``. Production code
runs on ``AsyncioScheduler``; tests and replays run on ``VirtualScheduler``,
whose clock only moves when ``advance`` is called.
"""

import asyncio
import heapq
import itertools
import logging
from collections.abc import Callable
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    """Handle returned by ``Scheduler.call_later``."""

    def cancel(self) -> None: ...

    def cancelled(self) -> bool: ...


class Scheduler(Protocol):
    """Clock plus one-shot delayed callbacks, all on one logical task queue."""

    def now(self) -> float:
        """Return the current time in seconds on a monotonic clock."""
        ...

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle:
        """Run ``callback(*args)`` after ``delay`` seconds unless cancelled."""
        ...


class VirtualTimer:
    """Timer entry of a ``VirtualScheduler``."""

    def __init__(self, when: float, callback: Callable[..., Any], args: tuple[Any, ...]):
        self.when = when
        self._callback = callback
        self._args = args
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    def cancelled(self) -> bool:
        return self._cancelled

    def _run(self) -> None:
        self._callback(*self._args)


class VirtualScheduler:
    """Deterministic scheduler driven by explicit clock advances.

    Callbacks due at the same instant run in the order they were scheduled.
    A callback that schedules another one inside the advanced window sees it
    run within the same ``advance`` call.
    """

    def __init__(self, start: float = 0.0):
        self._now = start
        self._queue: list[tuple[float, int, VirtualTimer]] = []
        self._counter = itertools.count()

    def now(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> VirtualTimer:
        if delay < 0:
            raise ValueError(f"delay must be non-negative, got {delay}")
        timer = VirtualTimer(self._now + delay, callback, args)
        heapq.heappush(self._queue, (timer.when, next(self._counter), timer))
        return timer

    @property
    def pending(self) -> int:
        """Number of live (not cancelled) timers."""
        return sum(1 for _, _, timer in self._queue if not timer.cancelled())

    def advance(self, seconds: float) -> int:
        """Move the clock forward, firing every timer that falls due.

        Returns:
            Number of callbacks that ran.
        """
        if seconds < 0:
            raise ValueError(f"cannot move the clock backwards by {seconds}")
        target = self._now + seconds
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            when, _, timer = heapq.heappop(self._queue)
            if timer.cancelled():
                continue
            self._now = when
            timer._run()
            fired += 1
        self._now = target
        return fired

    def run_until_idle(self, limit: int = 10_000) -> int:
        """Advance until no live timers remain."""
        fired = 0
        while self.pending:
            if fired >= limit:
                raise RuntimeError(f"scheduler still busy after {limit} callbacks")
            next_due = min(timer.when for _, _, timer in self._queue if not timer.cancelled())
            fired += self.advance(next_due - self._now)
        return fired


class AsyncioScheduler:
    """Scheduler backed by an asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def now(self) -> float:
        return self.loop.time()

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> asyncio.TimerHandle:
        return self.loop.call_later(delay, callback, *args)


class ScheduledTask:
    """A single slot holding at most one live delayed action.

    Arming replaces whatever was armed before. The slot is empty again
    before the callback runs, so the callback may re-arm it.
    """

    def __init__(self, scheduler: Scheduler, name: str = "task"):
        self._scheduler = scheduler
        self._name = name
        self._handle: TimerHandle | None = None

    @property
    def armed(self) -> bool:
        return self._handle is not None and not self._handle.cancelled()

    def arm(self, delay: float, callback: Callable[..., Any], *args: Any) -> None:
        self.cancel()

        def fire() -> None:
            self._handle = None
            callback(*args)

        self._handle = self._scheduler.call_later(delay, fire)
        logger.debug(f"{self._name} armed for {delay:.3f}s")

    def cancel(self) -> bool:
        """Cancel the pending action. Returns True if one was pending."""
        if self._handle is None:
            return False
        was_live = not self._handle.cancelled()
        self._handle.cancel()
        self._handle = None
        if was_live:
            logger.debug(f"{self._name} cancelled")
        return was_live
