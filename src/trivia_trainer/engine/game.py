"""
Module: engine.game

Purpose:
    Application context for one player. Owns the clue pool, the current
    board, the running score, the outcome log and the single active clue
    session. There is no ambient global state: each TrainerGame is
    independent and testable on its own.

Key Classes:
    - TrainerGame: Board lifecycle and user intents

User intents:
    new_board, open_clue, buzz, mark_correct, mark_wrong, acknowledge, abandon

Dependencies:
    - engine.board_builder: Board generation
    - engine.session: Clue lifecycle
    - engine.stats / engine.review: Summary and review rounds

Used By:
    - gui.main_window: Qt shell
"""

from __future__ import annotations

import itertools
import logging
import random
from typing import List, Optional, Sequence, Tuple

from trivia_trainer.core.models import Board, CellUnavailableError, ClueRecord, Outcome

from .board_builder import build_board
from .config import TrainerConfig
from .narration import Narrator, SilentNarrator
from .review import build_review_round, review_items
from .scheduler import Scheduler
from .session import ClueSession, TrainerListener
from .stats import BoardSummary, compute_stats, summarize, weak_categories

logger = logging.getLogger(__name__)


class TrainerGame:
    """
    One player's trainer state.

    Attributes:
        config: Active configuration (replaceable between clues)
        board: Current board, or None before the first successful build
        score: Running score for the current board
        outcomes: Outcome log for the current board (chronological)
        active_session: The live ClueSession, if any

    Invariants:
        - at most one active session; opening a clue or a board tears it down
        - score and outcome log change only when a session finalizes
        - score == Σ CORRECT values − Σ WRONG values

    Example:
        >>> game = TrainerGame(TrainerConfig(), scheduler=ManualScheduler())
        >>> game.load_pool(clues)
        >>> board = game.new_board()
        >>> session = game.open_clue(0, 200)
    """

    def __init__(
        self,
        config: Optional[TrainerConfig] = None,
        *,
        scheduler: Scheduler,
        narrator: Optional[Narrator] = None,
        listener: Optional[TrainerListener] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.config = config or TrainerConfig()
        self.scheduler = scheduler
        self.narrator = narrator or SilentNarrator()
        self.listener = listener or TrainerListener()
        self._rng = rng or random.Random(self.config.seed)
        self._session_ids = itertools.count(1)

        self._pool: Tuple[ClueRecord, ...] = ()
        self.board: Optional[Board] = None
        self.score = 0
        self._outcomes: List[Outcome] = []
        self.active_session: Optional[ClueSession] = None

    # ─────────────────────────────────────────────────────────────────────────
    # Pool / configuration
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def pool(self) -> Tuple[ClueRecord, ...]:
        return self._pool

    def load_pool(self, clues: Sequence[ClueRecord]) -> None:
        """Replace the clue pool. The current board (if any) stays playable."""
        self._pool = tuple(clues)
        logger.info(f"Loaded {len(self._pool)} clues")

    def update_config(self, config: TrainerConfig) -> None:
        """Use ``config`` for subsequent boards and clues."""
        self.config = config

    def set_narrator(self, narrator: Narrator) -> None:
        if self.active_session is not None:
            self.abandon()
        self.narrator.stop()
        self.narrator = narrator

    @property
    def outcomes(self) -> Tuple[Outcome, ...]:
        return tuple(self._outcomes)

    # ─────────────────────────────────────────────────────────────────────────
    # Board lifecycle
    # ─────────────────────────────────────────────────────────────────────────

    def new_board(self, category_count: Optional[int] = None) -> Board:
        """
        Build a fresh board and reset score and outcome log.

        Raises:
            EmptyDatasetError / InsufficientCategoriesError: On failure the
                previous board, score and outcome log are left untouched.
        """
        count = self.config.category_count if category_count is None else category_count
        board = build_board(
            self._pool,
            count,
            self.config.value_ladder,
            eligible_rounds=self.config.eligible_rounds,
            rng=self._rng,
        )
        if self.active_session is not None:
            self.abandon()
        self.board = board
        self._outcomes = []
        self.score = 0
        self.listener.score_changed(self.score)
        self.listener.board_ready(board)
        return board

    def summary(self) -> BoardSummary:
        total = self.board.total_cells if self.board is not None else 0
        return summarize(
            self._outcomes,
            score=self.score,
            total_cells=total,
            weak_limit=self.config.weak_category_limit,
            weak_min_attempts=self.config.weak_min_attempts,
        )

    def review_items(self) -> List[Outcome]:
        return review_items(self._outcomes)

    def review_round(self, round_length: int) -> List[ClueRecord]:
        """Clue list for a follow-up round biased toward this board's weak categories."""
        weak = weak_categories(
            compute_stats(self._outcomes),
            limit=self.config.weak_category_limit,
            min_attempts=self.config.weak_min_attempts,
        )
        return build_review_round(
            self._pool,
            [s.category for s in weak],
            round_length=round_length,
            review_ratio=self.config.review_ratio,
            rng=self._rng,
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Clue sessions
    # ─────────────────────────────────────────────────────────────────────────

    def _is_current(self, session_id: int) -> bool:
        return self.active_session is not None and self.active_session.session_id == session_id

    def open_clue(self, category_index: int, value: int) -> ClueSession:
        """
        Open a board cell and start its clue session.

        Any active session is abandoned first.

        Raises:
            CellUnavailableError: No board, no such cell, or cell already played
        """
        if self.board is None:
            raise CellUnavailableError("No board. Build a new board first.")
        clue = self.board.clue_at(category_index, value)
        if self.board.is_used(category_index, value):
            raise CellUnavailableError(
                f"${value} in {self.board.categories[category_index].name!r} was already played"
            )
        if self.active_session is not None:
            self.abandon()

        session = ClueSession(
            next(self._session_ids),
            category_index,
            self.board.categories[category_index].name,
            value,
            clue,
            config=self.config,
            scheduler=self.scheduler,
            narrator=self.narrator,
            listener=self.listener,
            on_finalize=self._on_session_finalized,
            is_current=self._is_current,
        )
        self.active_session = session
        logger.debug(f"Opened {session!r}")
        session.start()
        return session

    def buzz(self) -> bool:
        return self.active_session is not None and self.active_session.buzz()

    def mark_correct(self) -> bool:
        return self.active_session is not None and self.active_session.mark_correct()

    def mark_wrong(self) -> bool:
        return self.active_session is not None and self.active_session.mark_wrong()

    def acknowledge(self) -> bool:
        return self.active_session is not None and self.active_session.acknowledge()

    def abandon(self) -> bool:
        """Tear down the active session, recording it as SKIPPED."""
        return self.active_session is not None and self.active_session.abandon()

    def _on_session_finalized(self, session: ClueSession, outcome: Outcome) -> None:
        if not self._is_current(session.session_id) or self.board is None:
            logger.debug(f"Ignoring finalize from superseded session {session.session_id}")
            return
        self.active_session = None
        self._outcomes.append(outcome)
        self.board.mark_used(session.category_index, session.value)
        if outcome.score_delta:
            self.score += outcome.score_delta
        logger.info(
            f"{session.label}: {outcome.status.value} "
            f"(score {self.score}, {self.board.used_count}/{self.board.total_cells} played)"
        )
        self.listener.outcome_recorded(outcome)
        self.listener.score_changed(self.score)
        if self.board.is_exhausted:
            self.listener.board_finished(self.summary())
