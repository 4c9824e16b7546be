"""
timers.py
=========
Time primitives for a single-threaded, frame-driven game.

Nothing here ever blocks.  "Do X later" means registering a callback on the
Scheduler, which the game polls once per frame with the current game clock:

    sched = Scheduler()
    h = sched.call_later(1000, lambda: print("one second later"))
    sched.advance(999)     # nothing fires
    sched.advance(1000)    # fires, h.fired is True

All times are milliseconds of game clock.
"""

from __future__ import annotations

import heapq
import itertools
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Cooldown
# ─────────────────────────────────────────────────────────────────────────────

class CooldownTimer:
    """
    Minimum spacing between two triggers.

    Parameters
    ----------
    min_interval : float
        Milliseconds that must elapse between triggers.
    last_trigger : float | None
        Time of the previous trigger.  None means "never triggered", so the
        first attempt is always allowed.  Pass 0.0 to make the first trigger
        wait a full interval from the start of the level.
    """

    def __init__(self, min_interval: float, last_trigger: Optional[float] = None) -> None:
        if min_interval < 0:
            raise ValueError(f"min_interval must be >= 0, got {min_interval}")
        self.min_interval = float(min_interval)
        self.last_trigger = last_trigger

    def ready(self, now: float) -> bool:
        if self.last_trigger is None:
            return True
        return now - self.last_trigger >= self.min_interval

    def try_trigger(self, now: float) -> bool:
        """Trigger if allowed. Returns True and restarts the interval, else False."""
        if not self.ready(now):
            return False
        self.last_trigger = now
        return True

    def reset(self, now: float) -> None:
        self.last_trigger = now

    def remaining(self, now: float) -> float:
        if self.last_trigger is None:
            return 0.0
        return max(0.0, self.min_interval - (now - self.last_trigger))


# ─────────────────────────────────────────────────────────────────────────────
# Scheduler
# ─────────────────────────────────────────────────────────────────────────────

class TimerHandle:
    __slots__ = ("deadline", "callback", "cancelled", "fired")

    def __init__(self, deadline: float, callback: Callable[[], None]) -> None:
        self.deadline  = deadline
        self.callback  = callback
        self.cancelled = False
        self.fired     = False

    @property
    def pending(self) -> bool:
        return not (self.cancelled or self.fired)

    def cancel(self) -> None:
        self.cancelled = True

    def __repr__(self) -> str:
        state = "fired" if self.fired else "cancelled" if self.cancelled else "pending"
        return f"<TimerHandle @{self.deadline:.0f}ms {state}>"


class Scheduler:
    """
    Priority queue of (deadline, seq, handle) polled once per frame.

    Handles due at the same deadline fire in registration order, so the
    outcome of a frame never depends on dict or set ordering.
    """

    def __init__(self, now: float = 0.0) -> None:
        self.now    : float = float(now)
        self._queue : list[tuple[float, int, TimerHandle]] = []
        self._seq   = itertools.count()

    def call_at(self, deadline: float, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle(float(deadline), callback)
        heapq.heappush(self._queue, (handle.deadline, next(self._seq), handle))
        return handle

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        if delay < 0:
            raise ValueError(f"delay must be >= 0, got {delay}")
        return self.call_at(self.now + delay, callback)

    def advance(self, now: float) -> int:
        """Move the clock to `now` and fire everything that is due. Returns count fired."""
        if now > self.now:
            self.now = float(now)
        fired = 0
        while self._queue and self._queue[0][0] <= self.now:
            _, _, handle = heapq.heappop(self._queue)
            if not handle.pending:
                continue
            handle.fired = True
            handle.callback()
            fired += 1
        return fired

    def pending(self) -> int:
        return sum(1 for _, _, h in self._queue if h.pending)

    def clear(self) -> None:
        for _, _, h in self._queue:
            h.cancel()
        self._queue.clear()

    def scope(self, name: str = "") -> "TimerScope":
        return TimerScope(self, name)

    def __len__(self) -> int:
        return self.pending()


class TimerScope:
    """
    Structured lifetime for timers owned by one subsystem.

    Everything scheduled through the scope is cancelled when the scope is
    closed, so tearing a level down never leaves a callback pointing at
    objects from the old level.

        with sched.scope("drive") as scope:
            scope.call_later(4000, undo)
        # undo is cancelled here if it had not fired yet
    """

    def __init__(self, scheduler: Scheduler, name: str = "") -> None:
        self.scheduler = scheduler
        self.name      = name
        self.closed    = False
        self._handles  : list[TimerHandle] = []

    @property
    def now(self) -> float:
        return self.scheduler.now

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        if self.closed:
            logger.debug("scope %r closed, dropping timer", self.name)
            handle = TimerHandle(self.scheduler.now + delay, callback)
            handle.cancel()
            return handle
        # drop finished handles so long-lived scopes don't grow forever
        self._handles = [h for h in self._handles if h.pending]
        handle = self.scheduler.call_later(delay, callback)
        self._handles.append(handle)
        return handle

    def pending(self) -> int:
        return sum(1 for h in self._handles if h.pending)

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        cancelled = 0
        for h in self._handles:
            if h.pending:
                h.cancel()
                cancelled += 1
        self._handles.clear()
        if cancelled:
            logger.debug("scope %r closed, cancelled %d timer(s)", self.name, cancelled)

    def __enter__(self) -> "TimerScope":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
