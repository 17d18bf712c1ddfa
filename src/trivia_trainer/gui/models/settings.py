"""
Settings persistence model for the Trivia Trainer GUI.

This module handles all persistent GUI state with robust error handling.
Any malformed data should result in graceful fallback to defaults, never CTD.
"""
import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from PySide6.QtCore import QObject, Signal

from trivia_trainer.core.models import Round
from trivia_trainer.engine.config import DEFAULT_VALUE_LADDER, NARRATOR_BACKENDS, TrainerConfig

logger = logging.getLogger(__name__)


@dataclass
class TrainerSettings:
    """User-editable trainer preferences (the subset exposed in the settings dialog)."""
    category_count: int = 4
    buzz_window_seconds: float = 5.0
    blank_delay_ms: int = 2000
    narration_enabled: bool = True
    narrator_backend: str = "qt"
    voice: Optional[str] = None
    include_double_round: bool = False


class SettingsStore(QObject):
    """Lightweight JSON-backed store for persisting GUI preferences."""

    settingsChanged = Signal()
    CURRENT_VERSION = 1

    def __init__(self, path: Path) -> None:
        super().__init__()
        self.path = path
        self.data: Dict[str, object] = {}
        self._load_error: Optional[str] = None

        if self.path.exists():
            try:
                self.data = json.loads(self.path.read_text(encoding="utf-8"))
            except json.JSONDecodeError as e:
                self._load_error = f"Settings file is corrupted:\n{e}"
                self.data = {}
            except (OSError, UnicodeDecodeError) as e:
                self._load_error = f"Failed to read settings:\n{e}"
                self.data = {}

        if not isinstance(self.data, dict):
            self._load_error = "Settings file does not contain an object"
            self.data = {}
        if "version" not in self.data:
            self.data["version"] = self.CURRENT_VERSION

    @property
    def load_error(self) -> Optional[str]:
        return self._load_error

    def check_load_error(self) -> bool:
        """
        Tell the user their settings file was unreadable and reset it.

        Returns True if app should continue, False if app should exit.
        Call this after QApplication is created.
        """
        if not self._load_error:
            return True

        from PySide6.QtWidgets import QMessageBox

        msg = QMessageBox()
        msg.setIcon(QMessageBox.Icon.Warning)
        msg.setWindowTitle("Settings Error")
        msg.setText("Your settings file could not be loaded.")
        msg.setInformativeText(
            f"{self._load_error}\n\n"
            "Would you like to reset settings to defaults and continue?"
        )
        msg.setStandardButtons(
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No
        )
        msg.setDefaultButton(QMessageBox.StandardButton.Yes)

        if msg.exec() == QMessageBox.StandardButton.Yes:
            self._save()
            self._load_error = None
            return True
        return False

    # ─────────────────────────────────────────────────────────────────────────
    # Trainer preferences
    # ─────────────────────────────────────────────────────────────────────────

    def get_trainer_settings(self) -> TrainerSettings:
        """Get trainer settings; malformed entries fall back to defaults."""
        raw = self._get_dict().get("trainer")
        defaults = TrainerSettings()
        if not isinstance(raw, dict):
            return defaults

        backend = raw.get("narrator_backend")
        voice = raw.get("voice")
        return TrainerSettings(
            category_count=self._safe_int(raw.get("category_count"), defaults.category_count),
            buzz_window_seconds=self._safe_float(raw.get("buzz_window_seconds"), defaults.buzz_window_seconds),
            blank_delay_ms=self._safe_int(raw.get("blank_delay_ms"), defaults.blank_delay_ms),
            narration_enabled=bool(raw.get("narration_enabled", defaults.narration_enabled)),
            narrator_backend=backend if backend in NARRATOR_BACKENDS else defaults.narrator_backend,
            voice=voice if isinstance(voice, str) and voice else None,
            include_double_round=bool(raw.get("include_double_round", defaults.include_double_round)),
        )

    def set_trainer_settings(self, settings: TrainerSettings) -> None:
        self._get_dict()["trainer"] = asdict(settings)
        self._save()
        self.settingsChanged.emit()

    def to_config(self, **overrides: Any) -> TrainerConfig:
        """
        Build an engine TrainerConfig from the stored preferences.

        Out-of-range values are clamped by TrainerConfig itself.
        """
        s = self.get_trainer_settings()
        rounds = {Round.FIRST, Round.SECOND} if s.include_double_round else {Round.FIRST}
        kwargs: Dict[str, Any] = dict(
            category_count=s.category_count,
            buzz_window_seconds=s.buzz_window_seconds,
            blank_delay_ms=s.blank_delay_ms,
            value_ladder=DEFAULT_VALUE_LADDER,
            eligible_rounds=frozenset(rounds),
            narration_enabled=s.narration_enabled,
            narrator_backend=s.narrator_backend,
            voice=s.voice,
        )
        kwargs.update(overrides)
        return TrainerConfig(**kwargs)

    # ─────────────────────────────────────────────────────────────────────────
    # UI state
    # ─────────────────────────────────────────────────────────────────────────

    def get_last_dataset(self) -> Optional[str]:
        val = self._get_dict().get("last_dataset")
        return val if isinstance(val, str) and val else None

    def set_last_dataset(self, path: str) -> None:
        self._get_dict()["last_dataset"] = path
        self._save()

    def get_recent_datasets(self) -> List[str]:
        raw = self._get_dict().get("recent_datasets")
        if not isinstance(raw, list):
            return []
        return [p for p in raw if isinstance(p, str) and p]

    def add_recent_dataset(self, path: str, limit: int = 5) -> None:
        recent = [p for p in self.get_recent_datasets() if p != path]
        self._get_dict()["recent_datasets"] = [path] + recent[:limit - 1]
        self.set_last_dataset(path)

    def get_window_geometry(self) -> Optional[str]:
        """Get saved window geometry with hex validation.

        Returns None if geometry is missing or invalid hex.
        """
        geo = self._get_dict().get("window_geometry")
        if not isinstance(geo, str):
            return None
        try:
            bytes.fromhex(geo)
            return geo
        except ValueError:
            logger.warning("Invalid geometry string in settings, ignoring")
            return None

    def set_window_geometry(self, geometry: str) -> None:
        self._get_dict()["window_geometry"] = geometry
        self._save()

    def get_dark_mode(self) -> bool:
        ui = self._get_dict().setdefault("ui", {})  # type: ignore[assignment]
        if not isinstance(ui, dict):
            return False
        return bool(ui.get("dark_mode", False))

    def set_dark_mode(self, enabled: bool) -> None:
        ui = self._get_dict().get("ui")
        if not isinstance(ui, dict):
            ui = {}
            self._get_dict()["ui"] = ui
        ui["dark_mode"] = enabled
        self._save()

    # ─────────────────────────────────────────────────────────────────────────
    # Internals
    # ─────────────────────────────────────────────────────────────────────────

    def _safe_int(self, value: Any, default: int) -> int:
        """Safely convert a value to int, returning default on failure."""
        if value is None or isinstance(value, bool):
            return default
        try:
            return int(value)
        except (ValueError, TypeError, OverflowError):
            return default

    def _safe_float(self, value: Any, default: float) -> float:
        if value is None or isinstance(value, bool):
            return default
        try:
            return float(value)
        except (ValueError, TypeError):
            return default

    def _get_dict(self) -> Dict[str, object]:
        if not isinstance(self.data, dict):
            self.data = {}
        return self.data

    def _save(self) -> None:
        """Safely write settings with atomic replacement.

        Uses a temp file to prevent corruption if write is interrupted.
        """
        temp_path = self.path.with_suffix('.tmp')
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            temp_path.write_text(json.dumps(self.data, indent=2), encoding="utf-8")
            temp_path.replace(self.path)
        except OSError as e:
            logger.warning(f"Failed to save settings: {e}")
            try:
                if temp_path.exists():
                    temp_path.unlink()
            except OSError:
                pass
