"""
Cancellable scheduled callbacks for turn timeouts.

The match session only depends on the ``Scheduler`` protocol. Tests and
simulations use ``ManualScheduler`` (virtual clock, advanced explicitly);
a live server can use ``ThreadingScheduler`` (wall clock).
"""
from __future__ import annotations

import heapq
import itertools
import threading
from typing import Callable, Protocol


class ScheduledTask(Protocol):
    def cancel(self) -> None:
        """Prevent the callback from running. Safe to call more than once."""

    @property
    def active(self) -> bool:
        """True until the task fires or is cancelled."""


class Scheduler(Protocol):
    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> ScheduledTask:
        """Run ``callback`` once after ``delay_ms`` milliseconds."""


class ManualTask:
    __slots__ = ("due_ms", "callback", "_cancelled", "_fired")

    def __init__(self, due_ms: int, callback: Callable[[], None]):
        self.due_ms = due_ms
        self.callback = callback
        self._cancelled = False
        self._fired = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def active(self) -> bool:
        return not (self._cancelled or self._fired)


class ManualScheduler:
    """
    Deterministic scheduler driven by ``advance``. Tasks due at the same time
    fire in the order they were scheduled.
    """

    def __init__(self) -> None:
        self.now_ms = 0
        self._queue: list[tuple[int, int, ManualTask]] = []
        self._seq = itertools.count()

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> ManualTask:
        task = ManualTask(self.now_ms + max(0, int(delay_ms)), callback)
        heapq.heappush(self._queue, (task.due_ms, next(self._seq), task))
        return task

    def pending(self) -> list[ManualTask]:
        return [t for _, _, t in sorted(self._queue) if t.active]

    def next_due_ms(self) -> int | None:
        pending = self.pending()
        return pending[0].due_ms if pending else None

    def advance(self, ms: int) -> int:
        """
        Move the clock forward by ``ms`` and run every active task that falls due,
        including tasks scheduled by callbacks within the window. Returns how many fired.
        """
        target = self.now_ms + ms
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, task = heapq.heappop(self._queue)
            if not task.active:
                continue
            self.now_ms = due
            task._fired = True
            task.callback()
            fired += 1
        self.now_ms = target
        return fired

    def run_next(self) -> bool:
        """Jump straight to the next active task and run it. False if none is pending."""
        due = self.next_due_ms()
        if due is None:
            return False
        self.advance(due - self.now_ms)
        return True


class ThreadingTask:
    def __init__(self, timer: threading.Timer):
        self._timer = timer
        self._done = threading.Event()

    def cancel(self) -> None:
        self._timer.cancel()
        self._done.set()

    @property
    def active(self) -> bool:
        return not self._done.is_set()


class ThreadingScheduler:
    """Wall-clock scheduler backed by ``threading.Timer`` (daemon threads)."""

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> ThreadingTask:
        holder: list[ThreadingTask] = []

        def _run() -> None:
            task = holder[0]
            if not task.active:
                return
            task._done.set()
            callback()

        timer = threading.Timer(max(0, delay_ms) / 1000.0, _run)
        timer.daemon = True
        task = ThreadingTask(timer)
        holder.append(task)
        timer.start()
        return task


__all__ = [
    "ScheduledTask",
    "Scheduler",
    "ManualScheduler",
    "ManualTask",
    "ThreadingScheduler",
    "ThreadingTask",
]
