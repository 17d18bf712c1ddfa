"""
Entry point for the PySide6 GUI.
"""
import logging
import sys


def _configure_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def run():
    """
    Main entry point for the GUI application.
    """
    from PySide6.QtWidgets import QApplication

    from trivia_trainer.gui.main_window import MainWindow
    from trivia_trainer.gui.models.settings import SettingsStore
    from trivia_trainer.gui.styles.theme import apply_theme
    from trivia_trainer.gui.utils.paths import get_settings_path

    _configure_logging()

    app = QApplication(sys.argv)
    app.setApplicationName("Trivia Trainer")
    app.setApplicationDisplayName("Trivia Trainer")
    app.setOrganizationName("Trivia Trainer")

    settings = SettingsStore(get_settings_path())

    # Malformed settings: offer to reset, or exit
    if not settings.check_load_error():
        sys.exit(1)

    apply_theme(app, settings.get_dark_mode())

    window = MainWindow(settings)
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    run()
