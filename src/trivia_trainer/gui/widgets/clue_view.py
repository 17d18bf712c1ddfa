"""
Clue screen: clue text, countdown bar, buzz button, blank screen and reveal.

The view never changes game state itself. Buttons emit intents; the
main window forwards them to TrainerGame, and engine events flow back
through the slots below.
"""
from PySide6.QtCore import Qt, Signal, Slot
from PySide6.QtWidgets import (
    QHBoxLayout, QLabel, QProgressBar, QPushButton, QSizePolicy, QVBoxLayout, QWidget
)

from trivia_trainer.gui.styles.theme import clue_panel_style

PROGRESS_STEPS = 1000


class ClueView(QWidget):
    buzzRequested = Signal()
    correctRequested = Signal()
    wrongRequested = Signal()
    acknowledgeRequested = Signal()
    backRequested = Signal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setStyleSheet(clue_panel_style())
        self._clue_text = ""

        layout = QVBoxLayout(self)
        layout.setContentsMargins(24, 16, 24, 16)
        layout.setSpacing(12)

        self.header_label = QLabel()
        self.header_label.setObjectName("clueHeader")
        self.header_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self.header_label)

        self.clue_label = QLabel()
        self.clue_label.setObjectName("clueText")
        self.clue_label.setWordWrap(True)
        self.clue_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.clue_label.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
        layout.addWidget(self.clue_label, stretch=1)

        self.progress = QProgressBar()
        self.progress.setRange(0, PROGRESS_STEPS)
        self.progress.setTextVisible(False)
        layout.addWidget(self.progress)

        self.hint_label = QLabel()
        self.hint_label.setObjectName("statusLine")
        self.hint_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self.hint_label)

        self.response_label = QLabel()
        self.response_label.setObjectName("responseText")
        self.response_label.setWordWrap(True)
        self.response_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self.response_label)

        buttons = QHBoxLayout()
        self.buzz_btn = QPushButton("Buzz (Space)")
        self.buzz_btn.setObjectName("primaryButton")
        self.buzz_btn.clicked.connect(self.buzzRequested.emit)
        self.correct_btn = QPushButton("Got it")
        self.correct_btn.clicked.connect(self.correctRequested.emit)
        self.wrong_btn = QPushButton("Missed")
        self.wrong_btn.clicked.connect(self.wrongRequested.emit)
        self.continue_btn = QPushButton("Continue")
        self.continue_btn.clicked.connect(self.acknowledgeRequested.emit)
        self.back_btn = QPushButton("Back to board")
        self.back_btn.clicked.connect(self.backRequested.emit)
        for btn in (self.buzz_btn, self.correct_btn, self.wrong_btn, self.continue_btn):
            btn.setCursor(Qt.CursorShape.PointingHandCursor)
            buttons.addWidget(btn)
        buttons.addStretch()
        buttons.addWidget(self.back_btn)
        layout.addLayout(buttons)

        self._show_actions()

    def _show_actions(self, *, buzz=False, score=False, acknowledge=False) -> None:
        self.buzz_btn.setVisible(True)
        self.buzz_btn.setEnabled(buzz)
        self.correct_btn.setVisible(score)
        self.wrong_btn.setVisible(score)
        self.continue_btn.setVisible(acknowledge)

    # ─────────────────────────────────────────────────────────────────────────
    # Engine events
    # ─────────────────────────────────────────────────────────────────────────

    def show_clue(self, session) -> None:
        self._clue_text = session.clue.clue_text
        self.header_label.setText(session.label)
        self.clue_label.setText(self._clue_text)
        self.response_label.clear()
        self.progress.setValue(0)
        self.hint_label.setText("Listen…")
        self._show_actions()

    @Slot(int)
    def on_countdown_started(self, window_ms: int) -> None:
        self.hint_label.setText(f"Buzz within {window_ms / 1000:g}s")
        self._show_actions(buzz=True)

    @Slot(float)
    def set_progress(self, fraction: float) -> None:
        self.progress.setValue(int(max(0.0, min(1.0, fraction)) * PROGRESS_STEPS))

    @Slot(int)
    def on_blank_started(self, delay_ms: int) -> None:
        self.clue_label.setText("")
        self.hint_label.setText("Say your response…")
        self._show_actions()

    @Slot(str, str)
    def on_revealed(self, response_text: str, mode: str) -> None:
        self.clue_label.setText(self._clue_text)
        self.response_label.setText(response_text)
        if mode == "score":
            self.hint_label.setText("Were you right?")
            self._show_actions(score=True)
        else:
            self.hint_label.setText("Time's up.")
            self._show_actions(acknowledge=True)
