"""
Module: engine.session

Purpose:
    Clue lifecycle state machine. Drives one board cell through
    display → narrate → countdown → buzz / timeout → blank delay →
    reveal → score, gated on an asynchronous narration step.

Key Functions:
    - transition(): Pure phase transition function

Key Classes:
    - CluePhase / ClueEvent: Explicit states and events
    - RevealMode: Which actions the reveal offers
    - ClueSession: One live clue, driven by a Scheduler
    - TrainerListener: Presentation hooks (all no-ops by default)

Phase graph:
    INIT → NARRATING → COUNTDOWN → BLANK_DELAY → REVEALED → TERMINAL
                                 ↘ EXPIRED   ↗
    any non-terminal phase → ABANDONED → TERMINAL

Invariants:
    - the countdown never starts before narration has resolved
    - buzz and expiry are mutually exclusive; expiry wins at the boundary
    - a session finalizes exactly once

Dependencies:
    - engine.scheduler: Timers
    - engine.completion: Narration gate
    - engine.narration: Narrator interface

Used By:
    - engine.game: Creates and tears down sessions
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Callable, Dict, Optional, Tuple

from trivia_trainer.core.models import ClueRecord, Outcome, OutcomeStatus

from .completion import Completion, CompletionGate, CompletionReason, estimate_speech_ms
from .config import TrainerConfig
from .narration import NarrationFailure, Narrator
from .scheduler import Scheduler, TimerHandle

if TYPE_CHECKING:
    from trivia_trainer.core.models import Board

    from .stats import BoardSummary

logger = logging.getLogger(__name__)


class CluePhase(str, Enum):
    INIT = "init"
    NARRATING = "narrating"
    COUNTDOWN = "countdown"
    BLANK_DELAY = "blank_delay"
    EXPIRED = "expired"
    REVEALED = "revealed"
    ABANDONED = "abandoned"
    TERMINAL = "terminal"


class ClueEvent(str, Enum):
    SELECT = "select"
    NARRATION_DONE = "narration_done"
    BUZZ = "buzz"
    EXPIRE = "expire"
    BLANK_ELAPSED = "blank_elapsed"
    REVEAL = "reveal"
    MARK_CORRECT = "mark_correct"
    MARK_WRONG = "mark_wrong"
    ACKNOWLEDGE = "acknowledge"
    ABANDON = "abandon"
    FINALIZE = "finalize"


class RevealMode(str, Enum):
    SCORE = "score"              # buzzed: mark correct / mark wrong
    ACKNOWLEDGE = "acknowledge"  # timed out: continue, no score change


_TRANSITIONS: Dict[Tuple[CluePhase, ClueEvent], CluePhase] = {
    (CluePhase.INIT, ClueEvent.SELECT): CluePhase.NARRATING,
    (CluePhase.NARRATING, ClueEvent.NARRATION_DONE): CluePhase.COUNTDOWN,
    (CluePhase.COUNTDOWN, ClueEvent.BUZZ): CluePhase.BLANK_DELAY,
    (CluePhase.COUNTDOWN, ClueEvent.EXPIRE): CluePhase.EXPIRED,
    (CluePhase.BLANK_DELAY, ClueEvent.BLANK_ELAPSED): CluePhase.REVEALED,
    (CluePhase.EXPIRED, ClueEvent.REVEAL): CluePhase.REVEALED,
    (CluePhase.REVEALED, ClueEvent.MARK_CORRECT): CluePhase.TERMINAL,
    (CluePhase.REVEALED, ClueEvent.MARK_WRONG): CluePhase.TERMINAL,
    (CluePhase.REVEALED, ClueEvent.ACKNOWLEDGE): CluePhase.TERMINAL,
    (CluePhase.ABANDONED, ClueEvent.FINALIZE): CluePhase.TERMINAL,
}

_SCORING_EVENTS = {ClueEvent.MARK_CORRECT, ClueEvent.MARK_WRONG}


def transition(phase: CluePhase, event: ClueEvent, *, buzzed: bool = False) -> Optional[CluePhase]:
    """
    Next phase for ``event`` in ``phase``, or None if the event is ignored.

    ``buzzed`` selects the reveal actions: scoring events are only valid
    after a buzz, acknowledge only after a timeout.

    Example:
        >>> transition(CluePhase.COUNTDOWN, ClueEvent.BUZZ)
        <CluePhase.BLANK_DELAY: 'blank_delay'>
        >>> transition(CluePhase.NARRATING, ClueEvent.BUZZ) is None
        True
    """
    if event is ClueEvent.ABANDON:
        if phase in (CluePhase.TERMINAL, CluePhase.ABANDONED):
            return None
        return CluePhase.ABANDONED
    if phase is CluePhase.REVEALED:
        if event in _SCORING_EVENTS and not buzzed:
            return None
        if event is ClueEvent.ACKNOWLEDGE and buzzed:
            return None
    return _TRANSITIONS.get((phase, event))


class TrainerListener:
    """
    Presentation hooks. Subclass and override what the UI needs.

    Every method is a no-op here so the engine runs headless.
    """

    def board_ready(self, board: "Board") -> None:
        pass

    def phase_changed(self, session: "ClueSession", phase: CluePhase) -> None:
        pass

    def clue_shown(self, session: "ClueSession") -> None:
        pass

    def narration_warning(self, session: "ClueSession", completion: Completion) -> None:
        pass

    def countdown_started(self, session: "ClueSession", window_ms: int) -> None:
        pass

    def countdown_progress(self, session: "ClueSession", fraction: float) -> None:
        pass

    def blank_started(self, session: "ClueSession", delay_ms: int) -> None:
        pass

    def revealed(self, session: "ClueSession", response_text: str, mode: RevealMode) -> None:
        pass

    def outcome_recorded(self, outcome: Outcome) -> None:
        pass

    def score_changed(self, score: int) -> None:
        pass

    def board_finished(self, summary: "BoardSummary") -> None:
        pass


class ClueSession:
    """
    One live clue on the board.

    Created by TrainerGame; at most one is active at a time. Every deferred
    callback (narration, ticks, deadline, blank delay) checks that this
    session is still the active one and unresolved before acting, so a
    superseded session can never mutate state.

    Attributes:
        session_id: Unique id assigned by the game
        category_index / category_name / value: The board cell
        clue: ClueRecord bound to the cell
        phase: Current CluePhase
        buzzed: True once a buzz has been accepted
        resolved: True once finalized (single use)
    """

    def __init__(
        self,
        session_id: int,
        category_index: int,
        category_name: str,
        value: int,
        clue: ClueRecord,
        *,
        config: TrainerConfig,
        scheduler: Scheduler,
        narrator: Narrator,
        listener: TrainerListener,
        on_finalize: Callable[["ClueSession", Outcome], None],
        is_current: Callable[[int], bool],
    ) -> None:
        self.session_id = session_id
        self.category_index = category_index
        self.category_name = category_name
        self.value = value
        self.clue = clue
        self._config = config
        self._scheduler = scheduler
        self._narrator = narrator
        self._listener = listener
        self._on_finalize = on_finalize
        self._is_current = is_current

        self.phase = CluePhase.INIT
        self.buzzed = False
        self.resolved = False
        self.outcome: Optional[Outcome] = None
        self.narration: Optional[Completion] = None
        self.countdown_started_ms: Optional[float] = None
        self.buzz_accepted_ms: Optional[float] = None
        self.progress = 0.0

        self._gate: Optional[CompletionGate] = None
        self._ticker: Optional[TimerHandle] = None
        self._deadline: Optional[TimerHandle] = None
        self._blank: Optional[TimerHandle] = None

    def __repr__(self) -> str:
        return (
            f"ClueSession(id={self.session_id}, cell=({self.category_name!r}, {self.value}), "
            f"phase={self.phase.value})"
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Properties
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def label(self) -> str:
        return f"{self.category_name} • ${self.value}"

    @property
    def reveal_mode(self) -> Optional[RevealMode]:
        if self.phase is not CluePhase.REVEALED:
            return None
        return RevealMode.SCORE if self.buzzed else RevealMode.ACKNOWLEDGE

    @property
    def window_ms(self) -> int:
        return self._config.buzz_window_ms

    def _live(self) -> bool:
        return not self.resolved and self._is_current(self.session_id)

    def _guarded(self, callback: Callable[[], None]) -> Callable[[], None]:
        def run() -> None:
            if self._live():
                callback()
            else:
                logger.debug(f"Dropping stale callback for session {self.session_id}")
        return run

    def _apply(self, event: ClueEvent) -> bool:
        nxt = transition(self.phase, event, buzzed=self.buzzed)
        if nxt is None:
            logger.debug(f"Session {self.session_id}: {event.value} ignored in {self.phase.value}")
            return False
        logger.debug(f"Session {self.session_id}: {self.phase.value} -> {nxt.value} ({event.value})")
        self.phase = nxt
        self._listener.phase_changed(self, nxt)
        return True

    # ─────────────────────────────────────────────────────────────────────────
    # Narration
    # ─────────────────────────────────────────────────────────────────────────

    def start(self) -> None:
        """Show the clue and start narrating it (clue text only)."""
        if not self._apply(ClueEvent.SELECT):
            return
        self._listener.clue_shown(self)

        config = self._config
        ceiling = estimate_speech_ms(
            self.clue.clue_text,
            ms_per_word=config.speech_ms_per_word,
            min_ms=config.speech_min_ms,
            max_ms=config.speech_max_ms,
        ) + config.speech_margin_ms
        probe = self._narrator.is_speaking if self._narrator.supports_activity_probe else None
        self._gate = CompletionGate(
            self._scheduler,
            self._guarded_completion,
            ceiling_ms=ceiling,
            probe=probe,
            poll_interval_ms=config.narration_poll_ms,
        )
        self._gate.start()
        try:
            self._narrator.speak(self.clue.clue_text, self._gate.signal_finished)
        except Exception as exc:
            self._gate.signal_finished(NarrationFailure(f"{self._narrator.name} narration failed: {exc}"))

    def _guarded_completion(self, completion: Completion) -> None:
        if self._live():
            self._on_narration_complete(completion)

    def _on_narration_complete(self, completion: Completion) -> None:
        self.narration = completion
        if not completion.succeeded:
            detail = f": {completion.error}" if completion.error else ""
            logger.warning(
                f"Narration for {self.label} did not confirm completion "
                f"({completion.reason.value}{detail}); starting countdown"
            )
            self._listener.narration_warning(self, completion)
        if completion.reason is CompletionReason.CEILING:
            self._narrator.stop()
        if self._apply(ClueEvent.NARRATION_DONE):
            self._start_countdown()

    # ─────────────────────────────────────────────────────────────────────────
    # Countdown
    # ─────────────────────────────────────────────────────────────────────────

    def _start_countdown(self) -> None:
        self.countdown_started_ms = self._scheduler.now_ms()
        self.progress = 0.0
        self._listener.countdown_started(self, self.window_ms)
        self._listener.countdown_progress(self, 0.0)
        self._ticker = self._scheduler.call_repeating(
            self._config.tick_interval_ms, self._guarded(self._tick)
        )
        self._deadline = self._scheduler.call_later(self.window_ms, self._guarded(self._expire))

    def _elapsed_ms(self) -> float:
        if self.countdown_started_ms is None:
            return 0.0
        return self._scheduler.now_ms() - self.countdown_started_ms

    def _tick(self) -> None:
        if self.phase is not CluePhase.COUNTDOWN:
            return
        elapsed = self._elapsed_ms()
        self.progress = min(1.0, elapsed / self.window_ms)
        self._listener.countdown_progress(self, self.progress)
        if elapsed >= self.window_ms:
            self._expire()

    def _stop_countdown(self) -> None:
        for handle in (self._ticker, self._deadline):
            if handle is not None:
                handle.cancel()
        self._ticker = self._deadline = None

    def buzz(self) -> bool:
        """
        Player buzzes in.

        Returns:
            True if the buzz was accepted. A buzz at or after the end of
            the window is rejected and the clue expires instead.
        """
        if not self._live() or self.phase is not CluePhase.COUNTDOWN:
            return False
        if self._elapsed_ms() >= self.window_ms:
            self._expire()
            return False

        self._stop_countdown()
        self.buzzed = True
        self.buzz_accepted_ms = self._scheduler.now_ms()
        self._apply(ClueEvent.BUZZ)
        self.progress = 1.0
        self._listener.countdown_progress(self, 1.0)
        self._listener.blank_started(self, self._config.blank_delay_ms)
        self._blank = self._scheduler.call_later(
            self._config.blank_delay_ms, self._guarded(self._blank_elapsed)
        )
        return True

    def _expire(self) -> None:
        if self.phase is not CluePhase.COUNTDOWN:
            return
        self._stop_countdown()
        self.progress = 1.0
        self._listener.countdown_progress(self, 1.0)
        self._apply(ClueEvent.EXPIRE)
        self._apply(ClueEvent.REVEAL)
        self._listener.revealed(self, self.clue.response_text, RevealMode.ACKNOWLEDGE)

    def _blank_elapsed(self) -> None:
        self._blank = None
        if self._apply(ClueEvent.BLANK_ELAPSED):
            self._listener.revealed(self, self.clue.response_text, RevealMode.SCORE)

    # ─────────────────────────────────────────────────────────────────────────
    # Scoring / teardown
    # ─────────────────────────────────────────────────────────────────────────

    def mark_correct(self) -> bool:
        return self._score(ClueEvent.MARK_CORRECT, OutcomeStatus.CORRECT)

    def mark_wrong(self) -> bool:
        return self._score(ClueEvent.MARK_WRONG, OutcomeStatus.WRONG)

    def acknowledge(self) -> bool:
        return self._score(ClueEvent.ACKNOWLEDGE, OutcomeStatus.SKIPPED)

    def _score(self, event: ClueEvent, status: OutcomeStatus) -> bool:
        if not self._live():
            return False
        if not self._apply(event):
            return False
        return self._finalize(status)

    def abandon(self) -> bool:
        """
        Tear the session down before it was scored.

        Cancels narration and all timers and finalizes as SKIPPED.
        Returns False if the session was already finalized.
        """
        if self.resolved:
            return False
        self._cancel_pending()
        self._narrator.stop()
        self._apply(ClueEvent.ABANDON)
        self._apply(ClueEvent.FINALIZE)
        return self._finalize(OutcomeStatus.SKIPPED)

    def _cancel_pending(self) -> None:
        if self._gate is not None:
            self._gate.cancel()
        self._stop_countdown()
        if self._blank is not None:
            self._blank.cancel()
            self._blank = None

    def _finalize(self, status: OutcomeStatus) -> bool:
        if self.resolved:
            return False
        self.resolved = True
        self._cancel_pending()
        self.outcome = Outcome(
            category=self.category_name,
            value=self.value,
            clue_text=self.clue.clue_text,
            response_text=self.clue.response_text,
            status=status,
            category_index=self.category_index,
            clue_id=self.clue.id,
        )
        logger.debug(f"Session {self.session_id} finalized as {status.value}")
        self._on_finalize(self, self.outcome)
        return True
