"""Widget tests for the board, clue and results screens."""

import random

import pytest
from PySide6.QtCore import Qt
from PySide6.QtTest import QTest

from trivia_trainer.core.models import Outcome, OutcomeStatus
from trivia_trainer.engine import build_board, summarize
from trivia_trainer.gui.models.settings import TrainerSettings
from trivia_trainer.gui.widgets.board_view import BoardView
from trivia_trainer.gui.widgets.clue_view import PROGRESS_STEPS, ClueView
from trivia_trainer.gui.widgets.results_view import ResultsView, summary_lines
from trivia_trainer.gui.widgets.settings_dialog import DEFAULT_VOICE_LABEL, SettingsDialog

LADDER = (200, 400, 600, 800, 1000)


@pytest.fixture
def board(complete_pool):
    return build_board(complete_pool, 4, LADDER, rng=random.Random(2))


class FakeSession:
    """Just enough of a ClueSession for the clue view."""

    def __init__(self, clue):
        self.clue = clue
        self.label = f"{clue.category} • ${clue.value}"


class TestBoardView:
    """Tests for BoardView grid and click handling."""

    def test_set_board_creates_one_button_per_cell(self, qtbot, board):
        view = BoardView()
        qtbot.addWidget(view)

        view.set_board(board)

        assert view.button_at(0, 200).text() == "$200"
        assert view.button_at(3, 1000) is not None
        assert view.button_at(4, 200) is None

    def test_click_emits_cell(self, qtbot, board):
        view = BoardView()
        qtbot.addWidget(view)
        view.set_board(board)
        view.show()

        with qtbot.waitSignal(view.cellClicked, timeout=1000) as blocker:
            QTest.mouseClick(view.button_at(2, 600), Qt.MouseButton.LeftButton)

        assert blocker.args == [2, 600]

    def test_refresh_disables_used_cells(self, qtbot, board):
        view = BoardView()
        qtbot.addWidget(view)
        view.set_board(board)

        board.mark_used(1, 400)
        view.refresh()

        btn = view.button_at(1, 400)
        assert not btn.isEnabled()
        assert btn.text() == ""
        assert view.button_at(1, 200).isEnabled()


class TestClueView:
    """Tests for ClueView reveal modes and countdown display."""

    def _view(self, qtbot, make_clue):
        view = ClueView()
        qtbot.addWidget(view)
        view.show_clue(FakeSession(make_clue(clue_text="This liquid is H2O", response_text="What is water?")))
        return view

    def test_show_clue_starts_without_buzz(self, qtbot, make_clue):
        view = self._view(qtbot, make_clue)

        assert view.clue_label.text() == "This liquid is H2O"
        assert not view.buzz_btn.isEnabled()
        assert view.progress.value() == 0

    def test_countdown_enables_buzz(self, qtbot, make_clue):
        view = self._view(qtbot, make_clue)

        view.on_countdown_started(5000)
        view.set_progress(0.25)

        assert view.buzz_btn.isEnabled()
        assert view.progress.value() == PROGRESS_STEPS // 4

    def test_buzz_click_emits_request(self, qtbot, make_clue):
        view = self._view(qtbot, make_clue)
        view.on_countdown_started(5000)

        with qtbot.waitSignal(view.buzzRequested, timeout=1000):
            view.buzz_btn.click()

    def test_blank_hides_clue_then_score_reveal(self, qtbot, make_clue):
        view = self._view(qtbot, make_clue)
        view.on_countdown_started(5000)

        view.on_blank_started(2000)
        assert view.clue_label.text() == ""
        assert not view.buzz_btn.isEnabled()

        view.on_revealed("What is water?", "score")
        assert view.response_label.text() == "What is water?"
        assert view.clue_label.text() == "This liquid is H2O"
        assert not view.correct_btn.isHidden()
        assert not view.wrong_btn.isHidden()
        assert view.continue_btn.isHidden()

    def test_expired_reveal_offers_continue_only(self, qtbot, make_clue):
        view = self._view(qtbot, make_clue)

        view.on_revealed("What is water?", "acknowledge")

        assert view.correct_btn.isHidden()
        assert view.wrong_btn.isHidden()
        assert not view.continue_btn.isHidden()


class TestResultsView:
    def _outcome(self, category, status, value=200):
        return Outcome(category, value, f"{category} clue", "What is the Nile?", status)

    def test_clean_board_shows_nothing_to_review(self, qtbot):
        view = ResultsView()
        qtbot.addWidget(view)
        outcomes = [self._outcome("Rivers", OutcomeStatus.CORRECT)]

        view.show_summary(summarize(outcomes, score=200, total_cells=20))

        assert len(view.card_labels) == 1
        assert "Nothing to review" in view.card_labels[0].text()

    def test_review_cards_for_missed_and_skipped(self, qtbot):
        view = ResultsView()
        qtbot.addWidget(view)
        outcomes = [
            self._outcome("Rivers", OutcomeStatus.WRONG),
            self._outcome("Art", OutcomeStatus.CORRECT),
            self._outcome("Art", OutcomeStatus.SKIPPED),
        ]

        view.show_summary(summarize(outcomes, score=0, total_cells=20))

        assert len(view.card_labels) == 2
        assert "MISSED" in view.card_labels[0].text()
        assert "SKIPPED" in view.card_labels[1].text()

    def test_summary_lines_include_accuracy_and_weak(self):
        outcomes = [
            self._outcome("Rivers", OutcomeStatus.WRONG),
            self._outcome("Rivers", OutcomeStatus.WRONG),
            self._outcome("Art", OutcomeStatus.CORRECT),
        ]

        lines = summary_lines(summarize(outcomes, score=-200, total_cells=20))

        assert "Score: -200" in lines
        assert "Played: 3/20" in lines
        assert "Buzz accuracy: 33%" in lines
        assert lines[-1] == "Weak categories: Rivers"

    def test_new_board_button_emits(self, qtbot):
        view = ResultsView()
        qtbot.addWidget(view)
        with qtbot.waitSignal(view.newBoardRequested, timeout=1000):
            view.new_board_btn.click()


class TestSettingsDialog:
    def test_round_trips_settings(self, qtbot):
        settings = TrainerSettings(
            category_count=5,
            buzz_window_seconds=7.5,
            blank_delay_ms=1500,
            narration_enabled=True,
            narrator_backend="pyttsx3",
            voice="Samantha",
            include_double_round=True,
        )
        dialog = SettingsDialog(settings, voices=["Alex", "Samantha"])
        qtbot.addWidget(dialog)

        assert dialog.settings() == settings

    def test_unknown_voice_is_kept(self, qtbot):
        dialog = SettingsDialog(TrainerSettings(voice="Retired Voice"), voices=["Alex"])
        qtbot.addWidget(dialog)
        assert dialog.settings().voice == "Retired Voice"

    def test_default_voice_maps_to_none(self, qtbot):
        dialog = SettingsDialog(TrainerSettings(), voices=["Alex"])
        qtbot.addWidget(dialog)
        assert dialog.voice_combo.currentText() == DEFAULT_VOICE_LABEL
        assert dialog.settings().voice is None

    def test_disabling_narration_disables_voice_controls(self, qtbot):
        dialog = SettingsDialog(TrainerSettings())
        qtbot.addWidget(dialog)

        dialog.narration_check.setChecked(False)

        assert not dialog.backend_combo.isEnabled()
        assert not dialog.voice_combo.isEnabled()
        assert dialog.settings().narration_enabled is False
