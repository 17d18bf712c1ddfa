"""
Core Models Package

Immutable, validated data models shared by the engine, the loaders and the GUI.

**DESIGN RATIONALE:**

Clue records and outcomes are frozen dataclasses. The board is the one
mutable model, and only its set of used cells changes:
1. Clue assignment is fixed when the board is built
2. Used cells only ever grow
3. Statistics are calculated from the outcome log, never stored
"""

from .clues import ClueRecord, Round, normalize_category_key
from .board import Board, BoardCategory, CellUnavailableError
from .outcomes import CategoryStat, Outcome, OutcomeStatus

__all__ = [
    "ClueRecord",
    "Round",
    "normalize_category_key",
    "Board",
    "BoardCategory",
    "CellUnavailableError",
    "CategoryStat",
    "Outcome",
    "OutcomeStatus",
]
