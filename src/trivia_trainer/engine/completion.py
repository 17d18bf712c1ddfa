"""
Module: engine.completion

Purpose:
    Single-resolution completion gate for narration. Speech backends do not
    reliably report when they finish, so the gate resolves on whichever of
    three signals arrives first:

    1. the backend's own finished / failed callback
    2. an activity poll that has seen the backend speaking and now sees it idle
    3. a ceiling timeout derived from the estimated speech duration

Key Functions:
    - estimate_speech_ms(): Word-count based narration estimate

Key Classes:
    - CompletionGate: Awaitable-style gate with timeout and secondary confirmation
    - Completion: How and when the gate resolved

Dependencies:
    - engine.scheduler: Timers and cross-thread dispatch

Used By:
    - engine.session: Gates the NARRATING → COUNTDOWN transition
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from .scheduler import Scheduler, TimerHandle

logger = logging.getLogger(__name__)


class CompletionReason(str, Enum):
    FINISHED = "finished"
    FAILED = "failed"
    IDLE = "idle"
    CEILING = "ceiling"


@dataclass(frozen=True)
class Completion:
    """
    Resolution of a CompletionGate.

    Attributes:
        reason: Which signal resolved the gate
        elapsed_ms: Time from start() to resolution
        error: Backend error for FAILED resolutions
    """

    reason: CompletionReason
    elapsed_ms: float
    error: Optional[BaseException] = None

    @property
    def succeeded(self) -> bool:
        return self.reason in (CompletionReason.FINISHED, CompletionReason.IDLE)


def estimate_speech_ms(
    text: str,
    *,
    ms_per_word: int = 400,
    min_ms: int = 1200,
    max_ms: int = 12000,
) -> int:
    """
    Estimate how long narrating ``text`` takes.

    400 ms per word is roughly 150 words per minute.

    Example:
        >>> estimate_speech_ms("one two three four five")
        2000
    """
    words = len(str(text or "").split())
    return max(min_ms, min(max_ms, words * ms_per_word))


class CompletionGate:
    """
    Resolves exactly once, from the first of finished signal, idle poll or ceiling.

    ``on_complete`` always runs on the scheduler's thread. ``signal_finished``
    may be called from any thread. After resolution (or cancel) every other
    signal is a no-op.

    Example:
        >>> gate = CompletionGate(scheduler, on_done, ceiling_ms=2500, probe=narrator.is_speaking)
        >>> gate.start()
        >>> narrator.speak(text, gate.signal_finished)
    """

    def __init__(
        self,
        scheduler: Scheduler,
        on_complete: Callable[[Completion], None],
        *,
        ceiling_ms: float,
        probe: Optional[Callable[[], bool]] = None,
        poll_interval_ms: float = 250,
    ) -> None:
        self._scheduler = scheduler
        self._on_complete = on_complete
        self._ceiling_ms = ceiling_ms
        self._probe = probe
        self._poll_interval_ms = poll_interval_ms
        self._started_ms = 0.0
        self._seen_active = False
        self._resolved = False
        self._ceiling: Optional[TimerHandle] = None
        self._poll: Optional[TimerHandle] = None

    @property
    def resolved(self) -> bool:
        return self._resolved

    def start(self) -> None:
        self._started_ms = self._scheduler.now_ms()
        self._ceiling = self._scheduler.call_later(
            self._ceiling_ms, lambda: self._resolve(CompletionReason.CEILING)
        )
        if self._probe is not None:
            self._poll = self._scheduler.call_repeating(self._poll_interval_ms, self._check_activity)

    def signal_finished(self, error: Optional[BaseException] = None) -> None:
        """Backend callback; safe to call from any thread."""
        reason = CompletionReason.FAILED if error is not None else CompletionReason.FINISHED
        self._scheduler.call_soon_threadsafe(lambda: self._resolve(reason, error))

    def cancel(self) -> None:
        """Resolve silently; on_complete will never run."""
        self._resolved = True
        self._stop_timers()

    def _check_activity(self) -> None:
        if self._resolved or self._probe is None:
            return
        try:
            speaking = self._probe()
        except Exception as exc:
            logger.debug(f"Narration activity probe failed, relying on ceiling: {exc}")
            if self._poll is not None:
                self._poll.cancel()
            return
        if speaking:
            self._seen_active = True
        elif self._seen_active:
            self._resolve(CompletionReason.IDLE)

    def _resolve(self, reason: CompletionReason, error: Optional[BaseException] = None) -> None:
        if self._resolved:
            return
        self._resolved = True
        self._stop_timers()
        completion = Completion(reason, self._scheduler.now_ms() - self._started_ms, error)
        logger.debug(f"Narration gate resolved: {reason.value} after {completion.elapsed_ms:.0f} ms")
        self._on_complete(completion)

    def _stop_timers(self) -> None:
        for handle in (self._ceiling, self._poll):
            if handle is not None:
                handle.cancel()
