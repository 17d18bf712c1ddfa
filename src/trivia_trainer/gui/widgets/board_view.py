"""
Board grid: category headers over one row of value buttons per ladder value.
"""
from typing import Dict, Optional, Tuple

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import (
    QGridLayout, QLabel, QPushButton, QSizePolicy, QVBoxLayout, QWidget
)

from trivia_trainer.core.models import Board
from trivia_trainer.gui.styles.theme import board_cell_style, board_header_style, get_colors


class BoardView(QWidget):
    """Clickable board. Played cells are disabled and blank."""

    cellClicked = Signal(int, int)  # category index, value

    def __init__(self, parent=None):
        super().__init__(parent)
        self.board: Optional[Board] = None
        self._buttons: Dict[Tuple[int, int], QPushButton] = {}

        self.layout = QVBoxLayout(self)
        self.layout.setContentsMargins(12, 12, 12, 12)

        self.grid_host = QWidget()
        self.grid_host.setObjectName("boardGrid")
        self.grid_host.setStyleSheet(
            f"QWidget#boardGrid {{ background-color: {get_colors().BOARD_BG}; }}"
        )
        self.grid = QGridLayout(self.grid_host)
        self.grid.setSpacing(4)
        self.grid.setContentsMargins(4, 4, 4, 4)
        self.layout.addWidget(self.grid_host, stretch=1)

        self.empty_label = QLabel("Import a dataset, then choose File ▸ New Board.")
        self.empty_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.layout.addWidget(self.empty_label)
        self.grid_host.hide()

    def _clear(self) -> None:
        while self.grid.count():
            item = self.grid.takeAt(0)
            widget = item.widget()
            if widget is not None:
                widget.deleteLater()
        self._buttons.clear()

    def set_board(self, board: Board) -> None:
        """Rebuild the grid for a new board."""
        self._clear()
        self.board = board

        header_style = board_header_style()
        for col, name in enumerate(board.category_names):
            header = QLabel(name.upper())
            header.setWordWrap(True)
            header.setAlignment(Qt.AlignmentFlag.AlignCenter)
            header.setStyleSheet(header_style)
            header.setMinimumHeight(64)
            self.grid.addWidget(header, 0, col)

        cell_style = board_cell_style()
        for row, value in enumerate(board.value_ladder, start=1):
            for col in range(len(board.categories)):
                btn = QPushButton(f"${value}")
                btn.setStyleSheet(cell_style)
                btn.setCursor(Qt.CursorShape.PointingHandCursor)
                btn.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
                btn.setMinimumHeight(56)
                btn.clicked.connect(lambda _=False, c=col, v=value: self.cellClicked.emit(c, v))
                self.grid.addWidget(btn, row, col)
                self._buttons[(col, value)] = btn

        self.empty_label.hide()
        self.grid_host.show()
        self.refresh()

    def refresh(self) -> None:
        """Sync button state with the board's used cells."""
        if self.board is None:
            return
        for (col, value), btn in self._buttons.items():
            used = self.board.is_used(col, value)
            btn.setEnabled(not used)
            btn.setText("" if used else f"${value}")

    def button_at(self, category_index: int, value: int) -> Optional[QPushButton]:
        return self._buttons.get((category_index, value))
