"""Timer scheduling used by the capture phases.

Simulated biometric steps are plain delays. Sessions receive a scheduler so
production code runs on real timers while tests advance a virtual clock.
"""

from __future__ import annotations

import heapq
import itertools
import threading
from dataclasses import dataclass, field
from typing import Callable, Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None:
        raise NotImplementedError


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        raise NotImplementedError


class ThreadingScheduler:
    """Real-time scheduler backed by daemon `threading.Timer` objects."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        timer = threading.Timer(float(delay), callback)
        timer.daemon = True
        timer.start()
        return timer


@dataclass(order=True)
class _ManualTimer:
    due: float
    seq: int
    callback: Callable[[], None] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Virtual clock: callbacks run only inside `advance()`, in due order."""

    def __init__(self) -> None:
        self._now = 0.0
        self._queue: list[_ManualTimer] = []
        self._seq = itertools.count()

    @property
    def now(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        timer = _ManualTimer(due=self._now + float(delay), seq=next(self._seq), callback=callback)
        heapq.heappush(self._queue, timer)
        return timer

    def advance(self, seconds: float) -> None:
        target = self._now + float(seconds)
        # Callbacks may schedule further timers; those run too if due in the window.
        while self._queue and self._queue[0].due <= target:
            timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self._now = timer.due
            timer.callback()
        self._now = target

    def pending(self) -> int:
        return sum(1 for t in self._queue if not t.cancelled)
