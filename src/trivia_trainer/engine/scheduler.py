"""
Module: engine.scheduler

Purpose:
    Cancellable timer abstraction used by the clue session. The engine
    never touches an event loop directly; it asks a Scheduler for one-shot
    and repeating callbacks and cancels them through their handles.

Key Classes:
    - Scheduler: Abstract timer source
    - TimerHandle: Cancellable timer
    - ManualScheduler: Virtual clock advanced explicitly (tests, headless)
    - QtScheduler: QTimer-backed scheduler on the Qt event loop

Dependencies:
    - PySide6.QtCore (QtScheduler only)

Used By:
    - engine.completion: Narration ceiling and idle poll
    - engine.session: Countdown ticker, deadline, blank delay
    - gui.main_window: Creates the QtScheduler
"""

from __future__ import annotations

import heapq
import itertools
import logging
import threading
from abc import ABC, abstractmethod
from collections import deque
from typing import Callable, Deque, List, Optional, Set, Tuple

from PySide6.QtCore import QElapsedTimer, QObject, Qt, QTimer, Signal, Slot

logger = logging.getLogger(__name__)

Callback = Callable[[], None]


class TimerHandle(ABC):
    """A scheduled callback that can be cancelled."""

    @abstractmethod
    def cancel(self) -> None:
        """Stop the timer. Safe to call more than once."""

    @property
    @abstractmethod
    def active(self) -> bool:
        """True until the timer has fired (one-shot) or been cancelled."""


class Scheduler(ABC):
    """Source of time and timers for the engine."""

    @abstractmethod
    def now_ms(self) -> float:
        """Monotonic time in milliseconds."""

    @abstractmethod
    def call_later(self, delay_ms: float, callback: Callback) -> TimerHandle:
        """Run ``callback`` once after ``delay_ms``."""

    @abstractmethod
    def call_repeating(self, interval_ms: float, callback: Callback) -> TimerHandle:
        """Run ``callback`` every ``interval_ms`` until cancelled."""

    @abstractmethod
    def call_soon_threadsafe(self, callback: Callback) -> None:
        """Run ``callback`` on the scheduler's thread as soon as possible."""


# ─────────────────────────────────────────────────────────────────────────────
# Manual (virtual clock) scheduler
# ─────────────────────────────────────────────────────────────────────────────


class _ManualHandle(TimerHandle):
    def __init__(self, callback: Callback, interval_ms: Optional[float]) -> None:
        self.callback = callback
        self.interval_ms = interval_ms
        self._active = True

    def cancel(self) -> None:
        self._active = False

    @property
    def active(self) -> bool:
        return self._active


class ManualScheduler(Scheduler):
    """
    Scheduler driven by a virtual clock.

    Nothing fires until ``advance()`` is called. Timers due within the
    advanced span fire in due-time order (ties in scheduling order), with
    the clock set to each timer's due time while its callback runs.

    Example:
        >>> s = ManualScheduler()
        >>> fired = []
        >>> _ = s.call_later(100, lambda: fired.append(s.now_ms()))
        >>> s.advance(250)
        >>> fired
        [100.0]
    """

    def __init__(self, start_ms: float = 0.0) -> None:
        self._now = float(start_ms)
        self._seq = itertools.count()
        self._queue: List[Tuple[float, int, _ManualHandle]] = []
        self._soon: Deque[Callback] = deque()
        self._lock = threading.Lock()

    def now_ms(self) -> float:
        return self._now

    def call_later(self, delay_ms: float, callback: Callback) -> TimerHandle:
        handle = _ManualHandle(callback, None)
        heapq.heappush(self._queue, (self._now + max(0.0, delay_ms), next(self._seq), handle))
        return handle

    def call_repeating(self, interval_ms: float, callback: Callback) -> TimerHandle:
        if interval_ms <= 0:
            raise ValueError(f"interval_ms must be positive: {interval_ms}")
        handle = _ManualHandle(callback, interval_ms)
        heapq.heappush(self._queue, (self._now + interval_ms, next(self._seq), handle))
        return handle

    def call_soon_threadsafe(self, callback: Callback) -> None:
        with self._lock:
            self._soon.append(callback)

    def run_pending(self) -> int:
        """Run callbacks posted through call_soon_threadsafe. Returns how many ran."""
        ran = 0
        while True:
            with self._lock:
                if not self._soon:
                    return ran
                callback = self._soon.popleft()
            callback()
            ran += 1

    def advance(self, delta_ms: float) -> None:
        """Move the clock forward, firing every timer that comes due."""
        target = self._now + max(0.0, delta_ms)
        self.run_pending()
        while self._queue and self._queue[0][0] <= target:
            due, _, handle = heapq.heappop(self._queue)
            if not handle.active:
                continue
            self._now = max(self._now, due)
            if handle.interval_ms is not None:
                heapq.heappush(self._queue, (due + handle.interval_ms, next(self._seq), handle))
            else:
                handle.cancel()
            handle.callback()
            self.run_pending()
        self._now = target

    def advance_to(self, time_ms: float) -> None:
        self.advance(time_ms - self._now)

    @property
    def pending_timers(self) -> int:
        return sum(1 for _, _, handle in self._queue if handle.active)


# ─────────────────────────────────────────────────────────────────────────────
# Qt scheduler
# ─────────────────────────────────────────────────────────────────────────────


class _Dispatcher(QObject):
    posted = Signal(object)

    @Slot(object)
    def run(self, callback: Callback) -> None:
        callback()


class _QtTimerHandle(TimerHandle):
    def __init__(self, owner: "QtScheduler", timer: QTimer) -> None:
        self._owner = owner
        self._timer = timer
        self._active = True

    def cancel(self) -> None:
        if not self._active:
            return
        self._active = False
        self._timer.stop()
        self._owner._release(self._timer)

    def _fired_once(self) -> None:
        self._active = False
        self._owner._release(self._timer)

    @property
    def active(self) -> bool:
        return self._active


class QtScheduler(Scheduler):
    """
    Scheduler backed by QTimer on the thread that created it.

    Cross-thread callbacks (narration backends finishing on a worker
    thread) are marshalled through a queued signal.
    """

    def __init__(self) -> None:
        self._clock = QElapsedTimer()
        self._clock.start()
        self._dispatcher = _Dispatcher()
        self._dispatcher.posted.connect(self._dispatcher.run, Qt.ConnectionType.QueuedConnection)
        self._timers: Set[QTimer] = set()

    def now_ms(self) -> float:
        return self._clock.nsecsElapsed() / 1_000_000

    def _make_timer(self, interval_ms: float, single_shot: bool) -> QTimer:
        timer = QTimer()
        timer.setTimerType(Qt.TimerType.PreciseTimer)
        timer.setSingleShot(single_shot)
        timer.setInterval(max(0, int(round(interval_ms))))
        self._timers.add(timer)
        return timer

    def _release(self, timer: QTimer) -> None:
        self._timers.discard(timer)
        timer.deleteLater()

    def call_later(self, delay_ms: float, callback: Callback) -> TimerHandle:
        timer = self._make_timer(delay_ms, single_shot=True)
        handle = _QtTimerHandle(self, timer)

        def fire() -> None:
            if not handle.active:
                return
            handle._fired_once()
            callback()

        timer.timeout.connect(fire)
        timer.start()
        return handle

    def call_repeating(self, interval_ms: float, callback: Callback) -> TimerHandle:
        timer = self._make_timer(interval_ms, single_shot=False)
        handle = _QtTimerHandle(self, timer)

        def fire() -> None:
            if handle.active:
                callback()

        timer.timeout.connect(fire)
        timer.start()
        return handle

    def call_soon_threadsafe(self, callback: Callback) -> None:
        self._dispatcher.posted.emit(callback)
