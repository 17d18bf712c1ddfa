"""
Qt signal bridge for the engine's TrainerListener hooks.

The engine calls plain Python methods; widgets connect to Qt signals.
GameSignals owns the signals and SignalListener forwards each hook to
the matching signal.
"""
from PySide6.QtCore import QObject, Signal

from trivia_trainer.engine.session import TrainerListener


class GameSignals(QObject):
    boardReady = Signal(object)             # Board
    clueShown = Signal(object)              # ClueSession
    narrationWarning = Signal(object, object)  # ClueSession, Completion
    countdownStarted = Signal(object, int)  # ClueSession, window_ms
    countdownProgress = Signal(object, float)  # ClueSession, fraction
    blankStarted = Signal(object, int)      # ClueSession, delay_ms
    revealed = Signal(object, str, str)     # ClueSession, response, RevealMode value
    outcomeRecorded = Signal(object)        # Outcome
    scoreChanged = Signal(int)
    boardFinished = Signal(object)          # BoardSummary


class SignalListener(TrainerListener):
    def __init__(self, signals: GameSignals) -> None:
        self.signals = signals

    def board_ready(self, board):
        self.signals.boardReady.emit(board)

    def clue_shown(self, session):
        self.signals.clueShown.emit(session)

    def narration_warning(self, session, completion):
        self.signals.narrationWarning.emit(session, completion)

    def countdown_started(self, session, window_ms):
        self.signals.countdownStarted.emit(session, window_ms)

    def countdown_progress(self, session, fraction):
        self.signals.countdownProgress.emit(session, fraction)

    def blank_started(self, session, delay_ms):
        self.signals.blankStarted.emit(session, delay_ms)

    def revealed(self, session, response_text, mode):
        self.signals.revealed.emit(session, response_text, mode.value)

    def outcome_recorded(self, outcome):
        self.signals.outcomeRecorded.emit(outcome)

    def score_changed(self, score):
        self.signals.scoreChanged.emit(score)

    def board_finished(self, summary):
        self.signals.boardFinished.emit(summary)
