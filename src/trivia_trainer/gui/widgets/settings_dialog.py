"""
Settings dialog for board size, timing and narration.
"""
from typing import Iterable, Optional

from PySide6.QtWidgets import (
    QCheckBox, QComboBox, QDialog, QDialogButtonBox, QDoubleSpinBox, QFormLayout,
    QSpinBox, QVBoxLayout
)

from trivia_trainer.engine.config import (
    BLANK_DELAY_RANGE, BUZZ_WINDOW_RANGE, CATEGORY_COUNT_RANGE, NARRATOR_BACKENDS
)
from trivia_trainer.gui.models.settings import TrainerSettings

DEFAULT_VOICE_LABEL = "(default voice)"

BACKEND_LABELS = {
    "qt": "Qt Text-to-Speech",
    "pyttsx3": "pyttsx3 (system voices)",
    "none": "Silent",
}


class SettingsDialog(QDialog):
    def __init__(self, settings: TrainerSettings, voices: Iterable[str] = (), parent=None):
        super().__init__(parent)
        self.setWindowTitle("Settings")
        self.setMinimumWidth(380)

        layout = QVBoxLayout(self)
        form = QFormLayout()

        self.category_spin = QSpinBox()
        self.category_spin.setRange(*CATEGORY_COUNT_RANGE)
        self.category_spin.setValue(settings.category_count)
        form.addRow("Categories per board", self.category_spin)

        self.window_spin = QDoubleSpinBox()
        self.window_spin.setRange(*BUZZ_WINDOW_RANGE)
        self.window_spin.setSingleStep(0.5)
        self.window_spin.setDecimals(1)
        self.window_spin.setSuffix(" s")
        self.window_spin.setValue(settings.buzz_window_seconds)
        form.addRow("Buzz window", self.window_spin)

        self.blank_spin = QSpinBox()
        self.blank_spin.setRange(*BLANK_DELAY_RANGE)
        self.blank_spin.setSingleStep(250)
        self.blank_spin.setSuffix(" ms")
        self.blank_spin.setValue(settings.blank_delay_ms)
        form.addRow("Blank delay", self.blank_spin)

        self.double_round_check = QCheckBox("Include Double Jeopardy clues")
        self.double_round_check.setChecked(settings.include_double_round)
        form.addRow("", self.double_round_check)

        self.narration_check = QCheckBox("Read clues aloud")
        self.narration_check.setChecked(settings.narration_enabled)
        form.addRow("Narration", self.narration_check)

        self.backend_combo = QComboBox()
        for backend in NARRATOR_BACKENDS:
            self.backend_combo.addItem(BACKEND_LABELS.get(backend, backend), backend)
        index = self.backend_combo.findData(settings.narrator_backend)
        self.backend_combo.setCurrentIndex(max(0, index))
        form.addRow("Voice engine", self.backend_combo)

        self.voice_combo = QComboBox()
        self.voice_combo.addItem(DEFAULT_VOICE_LABEL, None)
        for voice in voices:
            self.voice_combo.addItem(voice, voice)
        if settings.voice:
            index = self.voice_combo.findData(settings.voice)
            if index < 0:
                self.voice_combo.addItem(settings.voice, settings.voice)
                index = self.voice_combo.count() - 1
            self.voice_combo.setCurrentIndex(index)
        form.addRow("Voice", self.voice_combo)

        self.narration_check.toggled.connect(self._sync_enabled)
        self._sync_enabled(settings.narration_enabled)

        layout.addLayout(form)
        buttons = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel
        )
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)

    def _sync_enabled(self, enabled: bool) -> None:
        self.backend_combo.setEnabled(enabled)
        self.voice_combo.setEnabled(enabled)

    def settings(self) -> TrainerSettings:
        """Settings as currently entered in the dialog."""
        voice: Optional[str] = self.voice_combo.currentData()
        return TrainerSettings(
            category_count=self.category_spin.value(),
            buzz_window_seconds=self.window_spin.value(),
            blank_delay_ms=self.blank_spin.value(),
            narration_enabled=self.narration_check.isChecked(),
            narrator_backend=self.backend_combo.currentData() or "none",
            voice=voice or None,
            include_double_round=self.double_round_check.isChecked(),
        )
