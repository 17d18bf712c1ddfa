"""
Module: outcomes

Purpose:
    Provides the Outcome record appended once per resolved board cell and
    the derived CategoryStat used by the summary and weak-topic selection.

Key Functions:
    - Outcome.score_delta: Score contribution of an outcome
    - CategoryStat.attempted / CategoryStat.accuracy: Calculated, never stored

Dependencies:
    - dataclasses (std)
    - enum (std)

Used By:
    - engine.session: Creates outcomes on finalize
    - engine.stats: Aggregates outcomes
    - engine.review: Filters outcomes for review
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class OutcomeStatus(str, Enum):
    """Terminal result of one clue."""

    CORRECT = "correct"
    WRONG = "wrong"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class Outcome:
    """
    Terminal result of one board cell (immutable).

    Attributes:
        category: Display name of the category
        value: Point value of the cell
        clue_text: Clue that was shown
        response_text: Correct response
        status: CORRECT, WRONG or SKIPPED
        category_index: Column of the cell on its board
        clue_id: Id of the ClueRecord bound to the cell

    Example:
        >>> Outcome("Science", 400, "H2O", "What is water?", OutcomeStatus.WRONG).score_delta
        -400
    """

    category: str
    value: int
    clue_text: str
    response_text: str
    status: OutcomeStatus
    category_index: int = -1
    clue_id: str = ""

    @property
    def score_delta(self) -> int:
        if self.status is OutcomeStatus.CORRECT:
            return self.value
        if self.status is OutcomeStatus.WRONG:
            return -self.value
        return 0

    @property
    def cell(self) -> tuple[int, int]:
        return (self.category_index, self.value)

    @property
    def needs_review(self) -> bool:
        return self.status in (OutcomeStatus.WRONG, OutcomeStatus.SKIPPED)


@dataclass(frozen=True)
class CategoryStat:
    """
    Per-category aggregate over an outcome log (immutable, derived).

    Invariants:
        - attempted == correct_count + wrong_count
        - accuracy == correct_count / attempted, or 0.0 when attempted == 0
    """

    category: str
    correct_count: int = 0
    wrong_count: int = 0
    skipped_count: int = 0

    @property
    def attempted(self) -> int:
        return self.correct_count + self.wrong_count

    @property
    def total(self) -> int:
        return self.attempted + self.skipped_count

    @property
    def accuracy(self) -> float:
        if self.attempted == 0:
            return 0.0
        return self.correct_count / self.attempted
