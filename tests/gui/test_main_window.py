"""
Integration tests for MainWindow.

Narration is disabled so each clue goes straight to its countdown; the
shortest buzz window and blank delay keep the real timers quick.
"""

import json

import pytest

from trivia_trainer.gui.main_window import PAGE_BOARD, PAGE_CLUE, PAGE_RESULTS, MainWindow
from trivia_trainer.gui.models.settings import SettingsStore, TrainerSettings

LADDER = (200, 400, 600, 800, 1000)


def write_dataset(path, categories=4):
    rows = [
        {
            "id": f"{c}-{value}",
            "round": "J",
            "category": f"Category {c}",
            "value": value,
            "clue": f"Clue for category {c} at {value}",
            "response": f"What is {c}-{value}?",
        }
        for c in range(categories)
        for value in LADDER
    ]
    path.write_text(json.dumps(rows), encoding="utf-8")
    return path


@pytest.fixture
def store(tmp_path):
    s = SettingsStore(tmp_path / "settings.json")
    s.set_trainer_settings(TrainerSettings(
        category_count=4,
        buzz_window_seconds=1.0,
        blank_delay_ms=250,
        narration_enabled=False,
        narrator_backend="none",
    ))
    return s


@pytest.fixture
def window(qtbot, store):
    w = MainWindow(store, load_last_dataset=False)
    qtbot.addWidget(w)
    return w


class TestImport:
    def test_import_valid_dataset_loads_pool_and_remembers_path(self, window, store, tmp_path):
        path = write_dataset(tmp_path / "clues.json")

        assert window.import_dataset(str(path)) is True

        assert len(window.game.pool) == 20
        assert store.get_last_dataset() == str(path)

    def test_import_invalid_dataset_reports_in_status_bar(self, window, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("[{", encoding="utf-8")

        assert window.import_dataset(str(path)) is False

        assert "Import failed" in window.status_bar.currentMessage()
        assert window.game.pool == ()

    def test_new_board_without_dataset_reports_error(self, window):
        assert window.new_board() is False
        assert "Import a dataset" in window.status_bar.currentMessage()


class TestPlay:
    """Full clue flow on real timers."""

    def test_buzz_and_mark_correct_updates_score_and_board(self, qtbot, window, tmp_path):
        # Arrange
        window.import_dataset(str(write_dataset(tmp_path / "clues.json")))
        assert window.new_board() is True
        assert window.stack.currentIndex() == PAGE_BOARD

        # Act
        window.open_clue(0, 200)
        assert window.stack.currentIndex() == PAGE_CLUE
        qtbot.waitUntil(lambda: window.clue_view.buzz_btn.isEnabled(), timeout=2000)
        window.clue_view.buzz_btn.click()
        qtbot.waitUntil(lambda: not window.clue_view.correct_btn.isHidden(), timeout=2000)
        window.clue_view.correct_btn.click()

        # Assert
        assert window.game.score == 200
        assert window.score_label.text() == "Score: 200"
        assert window.stack.currentIndex() == PAGE_BOARD
        assert not window.board_view.button_at(0, 200).isEnabled()

    def test_expired_clue_is_acknowledged_as_skipped(self, qtbot, window, tmp_path):
        window.import_dataset(str(write_dataset(tmp_path / "clues.json")))
        window.new_board()

        window.open_clue(1, 400)
        qtbot.waitUntil(lambda: not window.clue_view.continue_btn.isHidden(), timeout=3000)
        window.clue_view.continue_btn.click()

        assert window.game.score == 0
        assert window.game.outcomes[-1].status.value == "skipped"

    def test_back_abandons_clue(self, qtbot, window, tmp_path):
        window.import_dataset(str(write_dataset(tmp_path / "clues.json")))
        window.new_board()

        window.open_clue(2, 600)
        window.clue_view.back_btn.click()

        assert window.game.active_session is None
        assert window.stack.currentIndex() == PAGE_BOARD

    def test_played_cell_reports_unavailable(self, qtbot, window, tmp_path):
        window.import_dataset(str(write_dataset(tmp_path / "clues.json")))
        window.new_board()
        window.open_clue(2, 600)
        window.clue_view.back_btn.click()

        window.open_clue(2, 600)

        assert "already played" in window.status_bar.currentMessage()

    def test_recorded_outcome_reports_clues_left(self, qtbot, window, tmp_path):
        window.import_dataset(str(write_dataset(tmp_path / "clues.json")))
        window.new_board()

        window.open_clue(3, 800)
        window.clue_view.back_btn.click()

        assert window.status_bar.currentMessage() == "19 clues left"

    def test_finished_board_shows_results(self, qtbot, window, tmp_path):
        window.import_dataset(str(write_dataset(tmp_path / "clues.json")))
        window.new_board()
        board = window.game.board

        for index, value in list(board.open_cells()):
            window.open_clue(index, value)
            window.game.abandon()

        assert window.stack.currentIndex() == PAGE_RESULTS
        assert len(window.results_view.card_labels) == board.total_cells


class TestSettings:
    def test_apply_config_updates_engine(self, window, store):
        store.set_trainer_settings(TrainerSettings(
            category_count=3, buzz_window_seconds=2.0, narration_enabled=False, narrator_backend="none",
        ))

        window.apply_config()

        assert window.game.config.category_count == 3
        assert window.game.config.buzz_window_ms == 2000
        assert window.game.narrator.name == "none"

    def test_saved_settings_reach_engine_without_apply(self, window, store):
        store.set_trainer_settings(TrainerSettings(
            category_count=5, buzz_window_seconds=3.0, narration_enabled=False, narrator_backend="none",
        ))

        assert window.game.config.category_count == 5
        assert window.game.config.buzz_window_ms == 3000

    def test_close_saves_geometry(self, qtbot, window, store):
        window.show()
        qtbot.waitExposed(window)
        window.close()
        assert store.get_window_geometry()
