"""
Module: engine

Purpose:
    Board generation, the clue lifecycle state machine, outcome
    aggregation and review selection. UI-free: time comes from a
    Scheduler, speech from a Narrator and presentation through a
    TrainerListener.

Key Functions:
    - build_board(): Random complete board from a clue pool
    - transition(): Pure clue phase transition function
    - compute_stats() / weak_categories(): Outcome aggregation
    - review_items() / build_review_round(): Review selection

Key Classes:
    - TrainerConfig: Engine configuration (clamped)
    - TrainerGame: Application context
    - ClueSession: One live clue
    - ManualScheduler / QtScheduler: Timer sources
    - CompletionGate: Narration completion gate

Used By:
    - gui.main_window: Qt shell
"""

from .config import InvalidConfigValue, TrainerConfig
from .board_builder import (
    BoardBuildError,
    EmptyDatasetError,
    InsufficientCategoriesError,
    build_board,
)
from .scheduler import ManualScheduler, QtScheduler, Scheduler, TimerHandle
from .completion import Completion, CompletionGate, CompletionReason, estimate_speech_ms
from .narration import NarrationFailure, Narrator, SilentNarrator, create_narrator
from .session import ClueEvent, CluePhase, ClueSession, RevealMode, TrainerListener, transition
from .stats import BoardSummary, compute_stats, format_percent, summarize, weak_categories
from .review import ReviewCard, build_review_round, make_review_card, review_items
from .game import TrainerGame

__all__ = [
    # Config
    "TrainerConfig",
    "InvalidConfigValue",
    # Board
    "build_board",
    "BoardBuildError",
    "EmptyDatasetError",
    "InsufficientCategoriesError",
    # Timing
    "Scheduler",
    "TimerHandle",
    "ManualScheduler",
    "QtScheduler",
    "Completion",
    "CompletionGate",
    "CompletionReason",
    "estimate_speech_ms",
    # Narration
    "Narrator",
    "SilentNarrator",
    "NarrationFailure",
    "create_narrator",
    # Session
    "CluePhase",
    "ClueEvent",
    "ClueSession",
    "RevealMode",
    "TrainerListener",
    "transition",
    # Stats / review
    "BoardSummary",
    "compute_stats",
    "format_percent",
    "summarize",
    "weak_categories",
    "ReviewCard",
    "build_review_round",
    "make_review_card",
    "review_items",
    # Context
    "TrainerGame",
]
