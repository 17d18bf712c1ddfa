"""
Path utilities for handling dev vs production (frozen) file locations.

Dev mode: Uses local workspace/ directory
Frozen mode: Uses system-standard paths (AppData, Documents)
"""
from __future__ import annotations

import sys
from pathlib import Path

from PySide6.QtCore import QStandardPaths


def is_frozen() -> bool:
    """Check if running as a frozen (PyInstaller) application."""
    return getattr(sys, 'frozen', False) or hasattr(sys, '_MEIPASS')


def get_app_data_dir() -> Path:
    """
    Get the application data directory for internal state files.

    Frozen: Qt AppLocalDataLocation (e.g. %LOCALAPPDATA%/Trivia Trainer)
    Dev: workspace/
    """
    if is_frozen():
        app_data = Path(QStandardPaths.writableLocation(
            QStandardPaths.StandardLocation.AppLocalDataLocation
        ))
        app_data.mkdir(parents=True, exist_ok=True)
        return app_data
    return Path.cwd() / "workspace"


def get_datasets_dir() -> Path:
    """
    Default folder offered by the import dialog.

    Frozen: ~/Documents/Trivia Trainer/Datasets
    Dev: workspace/datasets
    """
    if is_frozen():
        docs = Path(QStandardPaths.writableLocation(
            QStandardPaths.StandardLocation.DocumentsLocation
        ))
        return docs / "Trivia Trainer" / "Datasets"
    return Path.cwd() / "workspace" / "datasets"


def get_settings_path() -> Path:
    """Get the path for storing GUI settings."""
    return get_app_data_dir() / "settings.json"
