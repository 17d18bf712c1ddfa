"""
Results screen: board summary, per-category accuracy and the review feed.
"""
from html import escape
from typing import List

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import (
    QFrame, QHBoxLayout, QLabel, QPushButton, QScrollArea, QVBoxLayout, QWidget
)

from trivia_trainer.engine.review import ReviewCard, make_review_card
from trivia_trainer.engine.stats import BoardSummary, format_percent
from trivia_trainer.gui.styles.theme import Fonts, apply_shadow, get_colors


def summary_lines(summary: BoardSummary) -> List[str]:
    """Plain-text summary rows shown at the top of the results screen."""
    lines = [
        f"Score: {summary.score}",
        f"Played: {summary.played}/{summary.total_cells}",
        f"Correct: {summary.correct}  Missed: {summary.wrong}  Skipped: {summary.skipped}",
        f"Buzz accuracy: {format_percent(summary.correct, summary.buzzed)}",
    ]
    if summary.weak:
        lines.append("Weak categories: " + ", ".join(s.category for s in summary.weak))
    return lines


def card_html(card: ReviewCard) -> str:
    o = card.outcome
    return (
        f"<b>{escape(card.title)}</b><br>"
        f"<i>{escape(o.clue_text)}</i><br>"
        f"Response: <b>{escape(o.response_text)}</b><br>"
        f"{escape(card.explanation)}<br>"
        f"Drill: {escape(card.drill)}<br>"
        f'<a href="{card.wikipedia_url}">Wikipedia</a> · '
        f'<a href="{card.youtube_url}">YouTube</a>'
    )


class ResultsView(QWidget):
    newBoardRequested = Signal()

    def __init__(self, parent=None):
        super().__init__(parent)
        layout = QVBoxLayout(self)
        layout.setContentsMargins(24, 16, 24, 16)

        title = QLabel("Board complete")
        title.setStyleSheet(f"font-size: {Fonts.H1}; font-weight: {Fonts.WEIGHT_BOLD};")
        layout.addWidget(title)

        self.summary_label = QLabel()
        self.summary_label.setTextFormat(Qt.TextFormat.PlainText)
        layout.addWidget(self.summary_label)

        self.category_label = QLabel()
        self.category_label.setTextFormat(Qt.TextFormat.PlainText)
        layout.addWidget(self.category_label)

        review_title = QLabel("Review")
        review_title.setStyleSheet(f"font-size: {Fonts.H2}; font-weight: {Fonts.WEIGHT_BOLD};")
        layout.addWidget(review_title)

        self.scroll = QScrollArea()
        self.scroll.setWidgetResizable(True)
        self.cards_host = QWidget()
        self.cards_layout = QVBoxLayout(self.cards_host)
        self.cards_layout.setAlignment(Qt.AlignmentFlag.AlignTop)
        self.scroll.setWidget(self.cards_host)
        layout.addWidget(self.scroll, stretch=1)

        buttons = QHBoxLayout()
        buttons.addStretch()
        self.new_board_btn = QPushButton("New Board")
        self.new_board_btn.setObjectName("primaryButton")
        self.new_board_btn.clicked.connect(self.newBoardRequested.emit)
        apply_shadow(self.new_board_btn, blur_radius=12, y_offset=4)
        buttons.addWidget(self.new_board_btn)
        layout.addLayout(buttons)

        self.card_labels: List[QLabel] = []

    def show_summary(self, summary: BoardSummary) -> None:
        self.summary_label.setText("\n".join(summary_lines(summary)))
        self.category_label.setText("\n".join(
            f"{s.category}: {format_percent(s.correct_count, s.attempted)} "
            f"({s.correct_count}/{s.attempted}, {s.skipped_count} skipped)"
            for s in summary.categories
        ))
        self._set_cards([make_review_card(o) for o in summary.review])

    def _set_cards(self, cards: List[ReviewCard]) -> None:
        for label in self.card_labels:
            label.deleteLater()
        self.card_labels = []

        if not cards:
            cards_text = ["Nothing to review. Clean board."]
        else:
            cards_text = [card_html(c) for c in cards]

        C = get_colors()
        for text in cards_text:
            label = QLabel(text)
            label.setWordWrap(True)
            label.setTextFormat(Qt.TextFormat.RichText)
            label.setOpenExternalLinks(True)
            label.setFrameShape(QFrame.Shape.StyledPanel)
            label.setStyleSheet(
                f"QLabel {{ background-color: {C.SURFACE}; border: 1px solid {C.BORDER};"
                f" border-radius: 6px; padding: 10px; }}"
            )
            self.cards_layout.addWidget(label)
            self.card_labels.append(label)
