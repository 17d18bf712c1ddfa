"""
Trivia Trainer Core Package

Shared data models that serve as the single source of truth for the engine,
the dataset loaders and the GUI.
"""

from .models import (
    Board,
    BoardCategory,
    CategoryStat,
    CellUnavailableError,
    ClueRecord,
    Outcome,
    OutcomeStatus,
    Round,
)

__all__ = [
    "Board",
    "BoardCategory",
    "CategoryStat",
    "CellUnavailableError",
    "ClueRecord",
    "Outcome",
    "OutcomeStatus",
    "Round",
]
