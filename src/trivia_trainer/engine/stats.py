"""
Module: engine.stats

Purpose:
    Outcome aggregation. Per-category statistics are recomputed from the
    outcome log on demand and never maintained incrementally.

Key Functions:
    - compute_stats(): Outcome log → {category: CategoryStat}
    - weak_categories(): Lowest-accuracy categories with enough signal
    - summarize(): End-of-board summary
    - format_percent(): "NN%" display helper

Dependencies:
    - trivia_trainer.core.models: Outcome, CategoryStat

Used By:
    - engine.game: Board summary and weak categories
    - gui.widgets.results_view: Summary display
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence, Tuple

from trivia_trainer.core.models import CategoryStat, Outcome, OutcomeStatus, normalize_category_key

from .review import review_items


def compute_stats(outcomes: Iterable[Outcome]) -> Dict[str, CategoryStat]:
    """
    Aggregate outcomes per category.

    Categories are grouped case-insensitively and reported under the first
    spelling seen, in order of first appearance.

    Example:
        >>> stats = compute_stats(outcomes)
        >>> stats["Science"].accuracy
        0.5
    """
    counts: Dict[str, List[int]] = {}
    names: Dict[str, str] = {}
    for outcome in outcomes:
        key = normalize_category_key(outcome.category)
        names.setdefault(key, outcome.category)
        bucket = counts.setdefault(key, [0, 0, 0])
        if outcome.status is OutcomeStatus.CORRECT:
            bucket[0] += 1
        elif outcome.status is OutcomeStatus.WRONG:
            bucket[1] += 1
        else:
            bucket[2] += 1
    return {
        names[key]: CategoryStat(names[key], correct, wrong, skipped)
        for key, (correct, wrong, skipped) in counts.items()
    }


def rank_by_accuracy(stats: Iterable[CategoryStat]) -> List[CategoryStat]:
    """Ascending accuracy; ties broken by more attempts first, then name."""
    return sorted(stats, key=lambda s: (s.accuracy, -s.attempted, s.category.casefold()))


def weak_categories(
    stats: Dict[str, CategoryStat],
    *,
    limit: int = 4,
    min_attempts: int = 2,
) -> List[CategoryStat]:
    """
    Select the weakest categories for review.

    Only categories with at least ``min_attempts`` buzzed attempts are
    ranked. When none qualifies, every category with at least one attempt
    is ranked instead. Categories that were only ever skipped carry no
    accuracy signal and are never ranked.
    """
    candidates = [s for s in stats.values() if s.attempted >= min_attempts]
    if not candidates:
        candidates = [s for s in stats.values() if s.attempted >= 1]
    return rank_by_accuracy(candidates)[:max(0, limit)]


def format_percent(numerator: int, denominator: int) -> str:
    if not denominator:
        return "0%"
    return f"{int(numerator / denominator * 100 + 0.5)}%"


@dataclass(frozen=True)
class BoardSummary:
    """
    Performance summary for one finished (or abandoned) board.

    Attributes:
        score: Final running score
        total_cells: Cells on the board
        correct / wrong / skipped: Outcome counts
        categories: Per-category stats, ascending accuracy
        weak: Weak categories selected for review
        review: WRONG and SKIPPED outcomes in chronological order
    """

    score: int
    total_cells: int
    correct: int
    wrong: int
    skipped: int
    categories: Tuple[CategoryStat, ...]
    weak: Tuple[CategoryStat, ...]
    review: Tuple[Outcome, ...]

    @property
    def buzzed(self) -> int:
        return self.correct + self.wrong

    @property
    def accuracy(self) -> float:
        return self.correct / self.buzzed if self.buzzed else 0.0

    @property
    def played(self) -> int:
        return self.buzzed + self.skipped


def summarize(
    outcomes: Sequence[Outcome],
    *,
    score: int,
    total_cells: int,
    weak_limit: int = 4,
    weak_min_attempts: int = 2,
) -> BoardSummary:
    stats = compute_stats(outcomes)
    return BoardSummary(
        score=score,
        total_cells=total_cells,
        correct=sum(1 for o in outcomes if o.status is OutcomeStatus.CORRECT),
        wrong=sum(1 for o in outcomes if o.status is OutcomeStatus.WRONG),
        skipped=sum(1 for o in outcomes if o.status is OutcomeStatus.SKIPPED),
        categories=tuple(rank_by_accuracy(stats.values())),
        weak=tuple(weak_categories(stats, limit=weak_limit, min_attempts=weak_min_attempts)),
        review=tuple(review_items(outcomes)),
    )
