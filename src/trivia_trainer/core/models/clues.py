"""
Module: clues

Purpose:
    Provides the ClueRecord dataclass - the normalized, immutable form of
    one clue/response pair as produced by the dataset loaders and consumed
    by the board builder.

Key Functions:
    - Round.parse(raw): Map dataset round spellings to a Round
    - normalize_category_key(name): Grouping key for category names
    - ClueRecord.category_key: Grouping key for this record

Dependencies:
    - dataclasses (std)
    - enum (std)

Used By:
    - core.models.board.BoardCategory
    - engine.board_builder
    - loading.loader
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet


class Round(str, Enum):
    """Round a clue was played in."""

    FIRST = "first"
    SECOND = "second"
    FINAL = "final"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, raw: object) -> Round:
        """
        Map a raw round value from a dataset to a Round.

        Accepts numeric ("1", "2", "3"), short ("J", "DJ", "FJ") and long
        ("Jeopardy", "Double Jeopardy", "Final Jeopardy") spellings as well
        as the enum values themselves. Anything else is UNKNOWN.

        Example:
            >>> Round.parse(" j ")
            <Round.FIRST: 'first'>
        """
        key = " ".join(str(raw or "").split()).upper()
        return _ROUND_ALIASES.get(key, cls.UNKNOWN)


_ROUND_ALIASES = {
    "1": Round.FIRST,
    "J": Round.FIRST,
    "JEOPARDY": Round.FIRST,
    "JEOPARDY!": Round.FIRST,
    "FIRST": Round.FIRST,
    "2": Round.SECOND,
    "DJ": Round.SECOND,
    "DOUBLE JEOPARDY": Round.SECOND,
    "DOUBLE JEOPARDY!": Round.SECOND,
    "SECOND": Round.SECOND,
    "3": Round.FINAL,
    "FJ": Round.FINAL,
    "FINAL JEOPARDY": Round.FINAL,
    "FINAL JEOPARDY!": Round.FINAL,
    "FINAL": Round.FINAL,
}


def normalize_category_key(name: str) -> str:
    """
    Grouping key for a category name.

    Collapses internal whitespace, trims and case-folds, so "Science" and
    "SCIENCE " land in the same bucket.
    """
    return " ".join(str(name or "").split()).casefold()


@dataclass(frozen=True)
class ClueRecord:
    """
    One normalized clue/response pair (immutable).

    Attributes:
        id: Unique identifier within the imported dataset
        round: Round the clue belongs to
        category: Trimmed display form of the category (case preserved)
        value: Point value of the clue
        clue_text: Text read to the player
        response_text: Expected response
        tags: Optional subject tags
        air_date: Optional air date carried through from the source
        source_url: Optional link to the source

    Invariants:
        - clue_text and response_text are non-empty after trimming
        - category is non-empty and trimmed
        - value >= 0

    Example:
        >>> c = ClueRecord("c1", Round.FIRST, "Science", 200, "H2O", "What is water?")
        >>> c.category_key
        'science'
    """

    id: str
    round: Round
    category: str
    value: int
    clue_text: str
    response_text: str
    tags: FrozenSet[str] = field(default_factory=frozenset)
    air_date: str = ""
    source_url: str = ""

    def __post_init__(self) -> None:
        """Validate record on construction."""
        if not self.clue_text or not self.clue_text.strip():
            raise ValueError(f"Clue {self.id!r} has empty clue text")
        if not self.response_text or not self.response_text.strip():
            raise ValueError(f"Clue {self.id!r} has empty response text")
        if not self.category or self.category != self.category.strip():
            raise ValueError(f"Clue {self.id!r} category must be trimmed and non-empty: {self.category!r}")
        if self.value < 0:
            raise ValueError(f"Clue {self.id!r} has negative value: {self.value}")

    @property
    def category_key(self) -> str:
        """Normalized grouping key for this record's category."""
        return normalize_category_key(self.category)
