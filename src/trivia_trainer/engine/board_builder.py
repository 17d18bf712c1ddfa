"""
Module: engine.board_builder

Purpose:
    Build a randomized board from a normalized clue pool. Only categories
    whose value ladder is fully populated are eligible, and one clue is
    drawn per (category, value) cell.

Key Functions:
    - build_board(): Main entry point for board generation
    - group_by_category(): Bucket clues by category key and value
    - complete_categories(): Categories covering every ladder value

Algorithm:
    1. Filter pool to eligible rounds and ladder values
    2. Group by normalized category key into value buckets
    3. Keep categories with at least one candidate per value
    4. Sample the requested number of categories uniformly without replacement
    5. Draw one candidate per cell uniformly at random

Dependencies:
    - random (std)
    - trivia_trainer.core.models: ClueRecord, Board, BoardCategory

Used By:
    - engine.game: New board requests
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import AbstractSet, Dict, Iterable, List, Optional, Sequence

from trivia_trainer.core.models import Board, BoardCategory, ClueRecord, Round

from .config import CATEGORY_COUNT_RANGE, clamp_number

logger = logging.getLogger(__name__)


class BoardBuildError(Exception):
    """Error during board generation."""
    pass


class EmptyDatasetError(BoardBuildError):
    """No clues are loaded; import a dataset first."""
    pass


class InsufficientCategoriesError(BoardBuildError):
    """Fewer complete categories than the board needs."""

    def __init__(self, requested: int, available: int) -> None:
        self.requested = requested
        self.available = available
        super().__init__(
            f"Not enough complete categories for a {requested}-category board. "
            f"Found {available}."
        )


@dataclass
class CategoryBucket:
    """Candidate clues of one category, grouped by value."""

    display_name: str
    by_value: Dict[int, List[ClueRecord]] = field(default_factory=dict)

    def is_complete(self, value_ladder: Sequence[int]) -> bool:
        return all(self.by_value.get(v) for v in value_ladder)


def is_board_eligible(
    clue: ClueRecord,
    value_ladder: Sequence[int],
    eligible_rounds: AbstractSet[Round],
) -> bool:
    return clue.round in eligible_rounds and clue.value in value_ladder


def group_by_category(clues: Iterable[ClueRecord]) -> Dict[str, CategoryBucket]:
    """
    Bucket clues by normalized category key, then by value.

    The first spelling seen for a key becomes the display name. Insertion
    order of the returned dict follows first appearance in ``clues``.
    """
    groups: Dict[str, CategoryBucket] = {}
    for clue in clues:
        bucket = groups.get(clue.category_key)
        if bucket is None:
            bucket = groups[clue.category_key] = CategoryBucket(clue.category)
        bucket.by_value.setdefault(clue.value, []).append(clue)
    return groups


def complete_categories(
    groups: Dict[str, CategoryBucket],
    value_ladder: Sequence[int],
) -> List[str]:
    """Keys of the categories that have a candidate for every ladder value."""
    return [key for key, bucket in groups.items() if bucket.is_complete(value_ladder)]


def build_board(
    pool: Sequence[ClueRecord],
    category_count: int,
    value_ladder: Sequence[int],
    *,
    eligible_rounds: AbstractSet[Round] = frozenset({Round.FIRST}),
    rng: Optional[random.Random] = None,
) -> Board:
    """
    Build a randomized board.

    Args:
        pool: Normalized clues to draw from
        category_count: Requested number of categories (clamped to [3, 6])
        value_ladder: Point values, one row per value
        eligible_rounds: Rounds whose clues may appear
        rng: Random source (a fresh unseeded one if omitted)

    Returns:
        A complete Board with no cells used

    Raises:
        EmptyDatasetError: If the pool is empty
        InsufficientCategoriesError: If too few categories are complete

    Invariants:
        - every category has exactly one clue per ladder value
        - no two categories share a normalized name

    Example:
        >>> board = build_board(clues, 4, (200, 400, 600, 800, 1000))
        >>> board.total_cells
        20
    """
    if not pool:
        raise EmptyDatasetError("No dataset loaded. Import a dataset first.")

    lo, hi = CATEGORY_COUNT_RANGE
    count = int(clamp_number("category_count", category_count, lo, hi, 4))
    rng = rng or random.Random()
    ladder = tuple(value_ladder)

    eligible = [c for c in pool if is_board_eligible(c, ladder, eligible_rounds)]
    groups = group_by_category(eligible)
    complete = complete_categories(groups, ladder)
    logger.debug(
        f"{len(eligible)}/{len(pool)} clues eligible, "
        f"{len(complete)}/{len(groups)} categories complete"
    )

    if len(complete) < count:
        raise InsufficientCategoriesError(count, len(complete))

    picked = rng.sample(complete, count)
    categories = []
    for key in picked:
        bucket = groups[key]
        cells = {value: rng.choice(bucket.by_value[value]) for value in ladder}
        categories.append(BoardCategory(bucket.display_name, cells))

    board = Board(tuple(categories), ladder)
    logger.info(f"Built {count}-category board: {', '.join(board.category_names)}")
    return board
