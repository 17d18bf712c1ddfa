"""
Module: board

Purpose:
    Provides BoardCategory and Board - the grid of categories × values
    for one round. The clue assignment of a board is fixed at creation;
    only the set of used cells changes, and it only ever grows.

Key Functions:
    - Board.clue_at(index, value): Clue bound to a cell
    - Board.mark_used(index, value): Retire a cell
    - Board.used_count / Board.is_exhausted: Progress through the board

Dependencies:
    - dataclasses (std)
    - .clues.ClueRecord

Used By:
    - engine.board_builder: Creates boards
    - engine.game: Tracks cell usage
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, Set, Tuple

from .clues import ClueRecord, normalize_category_key


class CellUnavailableError(LookupError):
    """Cell does not exist on the board or has already been played."""
    pass


@dataclass
class BoardCategory:
    """
    One column of the board.

    Attributes:
        name: Display name (first-seen raw spelling)
        cells_by_value: Exactly one clue per ladder value
        used_values: Values whose cell has been played
    """

    name: str
    cells_by_value: Dict[int, ClueRecord]
    used_values: Set[int] = field(default_factory=set)

    @property
    def key(self) -> str:
        return normalize_category_key(self.name)

    def is_used(self, value: int) -> bool:
        return value in self.used_values


@dataclass
class Board:
    """
    Full grid of categories × values for one round.

    Attributes:
        categories: Categories in display order
        value_ladder: Values in display order (one row per value)
        total_cells: len(categories) × len(value_ladder), fixed at creation

    Invariants:
        - every category has exactly one cell per ladder value
        - no two categories share a normalized name
        - used_count never exceeds total_cells and never decreases

    Example:
        >>> board.total_cells
        20
        >>> board.mark_used(0, 200)
        True
        >>> board.used_count
        1
    """

    categories: Tuple[BoardCategory, ...]
    value_ladder: Tuple[int, ...]
    total_cells: int = field(init=False)

    def __post_init__(self) -> None:
        """Validate completeness on construction."""
        self.categories = tuple(self.categories)
        self.value_ladder = tuple(self.value_ladder)
        ladder = set(self.value_ladder)
        seen: Set[str] = set()
        for category in self.categories:
            if set(category.cells_by_value) != ladder:
                raise ValueError(
                    f"Category {category.name!r} does not cover the value ladder: "
                    f"{sorted(category.cells_by_value)} != {sorted(ladder)}"
                )
            if category.key in seen:
                raise ValueError(f"Duplicate category on board: {category.name!r}")
            seen.add(category.key)
        self.total_cells = len(self.categories) * len(self.value_ladder)

    # ─────────────────────────────────────────────────────────────────────────
    # Calculated Properties
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def used_count(self) -> int:
        return sum(len(c.used_values) for c in self.categories)

    @property
    def remaining_count(self) -> int:
        return self.total_cells - self.used_count

    @property
    def is_exhausted(self) -> bool:
        return self.used_count >= self.total_cells

    @property
    def category_names(self) -> Tuple[str, ...]:
        return tuple(c.name for c in self.categories)

    # ─────────────────────────────────────────────────────────────────────────
    # Cell access
    # ─────────────────────────────────────────────────────────────────────────

    def _category(self, index: int) -> BoardCategory:
        if not 0 <= index < len(self.categories):
            raise CellUnavailableError(f"No category at index {index}")
        return self.categories[index]

    def clue_at(self, index: int, value: int) -> ClueRecord:
        """
        Get the clue bound to a cell.

        Raises:
            CellUnavailableError: If the cell does not exist
        """
        category = self._category(index)
        try:
            return category.cells_by_value[value]
        except KeyError:
            raise CellUnavailableError(f"No ${value} cell in {category.name!r}") from None

    def is_used(self, index: int, value: int) -> bool:
        return self._category(index).is_used(value)

    def mark_used(self, index: int, value: int) -> bool:
        """
        Retire a cell.

        Returns:
            True if the cell was newly marked, False if it was already used
        """
        self.clue_at(index, value)
        category = self.categories[index]
        if value in category.used_values:
            return False
        category.used_values.add(value)
        return True

    def open_cells(self) -> Iterator[Tuple[int, int]]:
        """Yield (category index, value) for every unplayed cell, row by row."""
        for value in self.value_ladder:
            for index, category in enumerate(self.categories):
                if not category.is_used(value):
                    yield index, value
