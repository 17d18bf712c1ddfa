"""
Main Window for the Trivia Trainer GUI.
"""
import logging
import queue
from pathlib import Path
from typing import Optional

from PySide6.QtCore import QByteArray, Qt, QTimer
from PySide6.QtGui import QAction, QKeySequence, QShortcut
from PySide6.QtWidgets import (
    QApplication, QFileDialog, QHBoxLayout, QLabel, QMainWindow, QMessageBox,
    QStackedWidget, QStatusBar, QVBoxLayout, QWidget
)

from trivia_trainer import __version__
from trivia_trainer.core.models import CellUnavailableError
from trivia_trainer.engine import (
    BoardBuildError, QtScheduler, TrainerGame, create_narrator
)
from trivia_trainer.gui.bridge import GameSignals, SignalListener
from trivia_trainer.gui.models.settings import SettingsStore
from trivia_trainer.gui.styles.theme import apply_theme
from trivia_trainer.gui.utils.logging_utils import attach_queue_handler, detach_queue_handler, drain_queue
from trivia_trainer.gui.utils.paths import get_datasets_dir, get_settings_path
from trivia_trainer.gui.widgets.board_view import BoardView
from trivia_trainer.gui.widgets.clue_view import ClueView
from trivia_trainer.gui.widgets.results_view import ResultsView
from trivia_trainer.gui.widgets.settings_dialog import SettingsDialog
from trivia_trainer.loading import DatasetError, load_dataset

logger = logging.getLogger(__name__)

PAGE_BOARD, PAGE_CLUE, PAGE_RESULTS = range(3)
STATUS_TIMEOUT_MS = 6000


class MainWindow(QMainWindow):
    def __init__(self, settings: Optional[SettingsStore] = None, *, load_last_dataset: bool = True):
        super().__init__()
        self.setWindowTitle("Trivia Trainer")
        self.resize(1100, 760)
        self.setMinimumSize(800, 560)

        self.settings = settings or SettingsStore(get_settings_path())

        # Logging
        self.log_queue: queue.Queue = queue.Queue()
        self.log_handler = attach_queue_handler(self.log_queue, "trivia_trainer")
        self.log_timer = QTimer(self)
        self.log_timer.timeout.connect(self._drain_log_queue)
        self.log_timer.start(100)

        # Engine
        config = self.settings.to_config()
        self.scheduler = QtScheduler()
        self.signals = GameSignals(self)
        self.game = TrainerGame(
            config,
            scheduler=self.scheduler,
            narrator=create_narrator(config.narrator_backend, config.voice, enabled=config.narration_enabled),
            listener=SignalListener(self.signals),
        )

        self._build_menu()
        self._build_ui()
        self._connect_signals()

        geometry = self.settings.get_window_geometry()
        if geometry:
            self.restoreGeometry(QByteArray.fromHex(geometry.encode("ascii")))

        if load_last_dataset:
            last = self.settings.get_last_dataset()
            if last and Path(last).exists():
                self.import_dataset(last)

    # ─────────────────────────────────────────────────────────────────────────
    # Layout
    # ─────────────────────────────────────────────────────────────────────────

    def _build_menu(self) -> None:
        file_menu = self.menuBar().addMenu("File")

        import_action = QAction("Import Dataset…", self)
        import_action.setShortcut(QKeySequence.StandardKey.Open)
        import_action.triggered.connect(self._choose_dataset)
        file_menu.addAction(import_action)

        self.new_board_action = QAction("New Board", self)
        self.new_board_action.setShortcut(QKeySequence.StandardKey.New)
        self.new_board_action.triggered.connect(self.new_board)
        file_menu.addAction(self.new_board_action)

        file_menu.addSeparator()
        settings_action = QAction("Settings…", self)
        settings_action.triggered.connect(self._open_settings)
        file_menu.addAction(settings_action)

        file_menu.addSeparator()
        exit_action = QAction("Quit", self)
        exit_action.triggered.connect(self.close)
        file_menu.addAction(exit_action)

        view_menu = self.menuBar().addMenu("View")
        self.dark_mode_action = QAction("Dark Mode", self)
        self.dark_mode_action.setCheckable(True)
        self.dark_mode_action.setChecked(self.settings.get_dark_mode())
        self.dark_mode_action.triggered.connect(self._toggle_theme)
        view_menu.addAction(self.dark_mode_action)

        help_menu = self.menuBar().addMenu("Help")
        about_action = QAction("About", self)
        about_action.triggered.connect(self._show_about)
        help_menu.addAction(about_action)

    def _build_ui(self) -> None:
        central = QWidget()
        self.setCentralWidget(central)
        layout = QVBoxLayout(central)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        header = QWidget()
        header_layout = QHBoxLayout(header)
        header_layout.setContentsMargins(24, 12, 24, 12)
        self.title_label = QLabel("Trivia Trainer")
        self.title_label.setObjectName("scoreLabel")
        header_layout.addWidget(self.title_label)
        header_layout.addStretch()
        self.score_label = QLabel("Score: 0")
        self.score_label.setObjectName("scoreLabel")
        header_layout.addWidget(self.score_label)
        layout.addWidget(header)

        self.stack = QStackedWidget()
        self.board_view = BoardView()
        self.clue_view = ClueView()
        self.results_view = ResultsView()
        self.stack.addWidget(self.board_view)
        self.stack.addWidget(self.clue_view)
        self.stack.addWidget(self.results_view)
        layout.addWidget(self.stack, stretch=1)

        self.status_bar = QStatusBar()
        self.setStatusBar(self.status_bar)
        self.status_bar.showMessage("Import a dataset to begin.")

        self.buzz_shortcut = QShortcut(QKeySequence(Qt.Key.Key_Space), self)
        self.buzz_shortcut.activated.connect(self.game.buzz)

    def _connect_signals(self) -> None:
        s = self.signals
        s.boardReady.connect(self._on_board_ready)
        s.clueShown.connect(self._on_clue_shown)
        s.countdownStarted.connect(lambda _session, ms: self.clue_view.on_countdown_started(ms))
        s.countdownProgress.connect(lambda _session, fraction: self.clue_view.set_progress(fraction))
        s.blankStarted.connect(lambda _session, ms: self.clue_view.on_blank_started(ms))
        s.revealed.connect(lambda _session, text, mode: self.clue_view.on_revealed(text, mode))
        s.narrationWarning.connect(self._on_narration_warning)
        s.outcomeRecorded.connect(self._on_outcome_recorded)
        s.scoreChanged.connect(lambda score: self.score_label.setText(f"Score: {score}"))
        s.boardFinished.connect(self._on_board_finished)

        self.board_view.cellClicked.connect(self.open_clue)
        self.clue_view.buzzRequested.connect(self.game.buzz)
        self.clue_view.correctRequested.connect(self.game.mark_correct)
        self.clue_view.wrongRequested.connect(self.game.mark_wrong)
        self.clue_view.acknowledgeRequested.connect(self.game.acknowledge)
        self.clue_view.backRequested.connect(self.game.abandon)
        self.results_view.newBoardRequested.connect(self.new_board)
        self.settings.settingsChanged.connect(self.apply_config)

    # ─────────────────────────────────────────────────────────────────────────
    # Actions
    # ─────────────────────────────────────────────────────────────────────────

    def _choose_dataset(self) -> None:
        start_dir = get_datasets_dir()
        path, _ = QFileDialog.getOpenFileName(
            self,
            "Import Dataset",
            str(start_dir if start_dir.exists() else Path.home()),
            "Clue datasets (*.tsv *.csv *.json);;All files (*)",
        )
        if path:
            self.import_dataset(path)

    def import_dataset(self, path: str) -> bool:
        try:
            clues = load_dataset(path)
        except DatasetError as e:
            logger.error(f"Import failed: {e}")
            self.status_bar.showMessage(f"Import failed: {e}", STATUS_TIMEOUT_MS)
            return False
        self.game.load_pool(clues)
        self.settings.add_recent_dataset(str(path))
        self.status_bar.showMessage(
            f"Imported {len(clues)} clues from {Path(path).name}. Choose File ▸ New Board.",
            STATUS_TIMEOUT_MS,
        )
        return True

    def new_board(self) -> bool:
        try:
            self.game.new_board()
        except BoardBuildError as e:
            logger.error(f"New board failed: {e}")
            self.status_bar.showMessage(str(e), STATUS_TIMEOUT_MS)
            return False
        return True

    def open_clue(self, category_index: int, value: int) -> None:
        try:
            self.game.open_clue(category_index, value)
        except CellUnavailableError as e:
            self.status_bar.showMessage(str(e), STATUS_TIMEOUT_MS)

    def _open_settings(self) -> None:
        dialog = SettingsDialog(
            self.settings.get_trainer_settings(),
            voices=self.game.narrator.available_voices(),
            parent=self,
        )
        if dialog.exec() != SettingsDialog.DialogCode.Accepted:
            return
        self.settings.set_trainer_settings(dialog.settings())

    def apply_config(self) -> None:
        """Push stored preferences into the engine; the narrator is rebuilt if it changed."""
        old = self.game.config
        config = self.settings.to_config()
        self.game.update_config(config)
        narration_changed = (
            (old.narration_enabled, old.narrator_backend, old.voice)
            != (config.narration_enabled, config.narrator_backend, config.voice)
        )
        if narration_changed:
            self.game.set_narrator(
                create_narrator(config.narrator_backend, config.voice, enabled=config.narration_enabled)
            )
            logger.info(f"Narrator: {self.game.narrator.name}")

    def _toggle_theme(self, checked: bool) -> None:
        self.settings.set_dark_mode(checked)
        app = QApplication.instance()
        if app is not None:
            apply_theme(app, checked)

    def _show_about(self) -> None:
        QMessageBox.about(
            self,
            "About Trivia Trainer",
            f"Trivia Trainer v{__version__}\n\n"
            "Read a clue, buzz before the clock runs out, say your response, "
            "then check it against the reveal.",
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Engine events
    # ─────────────────────────────────────────────────────────────────────────

    def _on_board_ready(self, board) -> None:
        self.board_view.set_board(board)
        self.stack.setCurrentIndex(PAGE_BOARD)
        self.status_bar.showMessage(
            f"New board: {', '.join(board.category_names)}", STATUS_TIMEOUT_MS
        )

    def _on_clue_shown(self, session) -> None:
        self.clue_view.show_clue(session)
        self.stack.setCurrentIndex(PAGE_CLUE)

    def _on_narration_warning(self, session, completion) -> None:
        self.status_bar.showMessage(
            f"Narration did not confirm completion ({completion.reason.value}); countdown started.",
            STATUS_TIMEOUT_MS,
        )

    def _on_outcome_recorded(self, outcome) -> None:
        self.board_view.refresh()
        self.stack.setCurrentIndex(PAGE_BOARD)
        board = self.game.board
        if board is not None and not board.is_exhausted:
            self.status_bar.showMessage(f"{board.remaining_count} clues left", STATUS_TIMEOUT_MS)

    def _on_board_finished(self, summary) -> None:
        self.results_view.show_summary(summary)
        self.stack.setCurrentIndex(PAGE_RESULTS)

    def _drain_log_queue(self) -> None:
        items = drain_queue(self.log_queue)
        if not items:
            return
        message, level = items[-1]
        if level in ("WARNING", "ERROR", "CRITICAL"):
            self.status_bar.showMessage(message, STATUS_TIMEOUT_MS)

    def closeEvent(self, event) -> None:
        self.game.abandon()
        self.game.narrator.stop()
        self.log_timer.stop()
        detach_queue_handler(self.log_handler, "trivia_trainer")
        self.settings.set_window_geometry(bytes(self.saveGeometry().toHex()).decode("ascii"))
        super().closeEvent(event)
