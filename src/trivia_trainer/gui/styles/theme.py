"""
Theme definitions for the Trivia Trainer GUI.
"""


class Colors:
    # Primary Colors
    PRIMARY_BLUE = "#0364B8"
    PRIMARY_BLUE_HOVER = "#0A2767"

    # Board
    BOARD_BG = "#060CE9"
    BOARD_CELL = "#0A1BB5"
    BOARD_CELL_HOVER = "#1E2FD6"
    BOARD_VALUE = "#FFCC00"
    BOARD_USED = "#05096B"
    BOARD_TEXT = "#ffffff"

    # Backgrounds
    BACKGROUND = "#f5f5f5"
    SURFACE = "#ffffff"
    HOVER = "#f0f0f0"
    DISABLED_BG = "#e0e0e0"

    # Text
    TEXT_PRIMARY = "#1f1f1f"
    TEXT_SECONDARY = "#666666"
    TEXT_DISABLED = "#757575"
    TEXT_ON_PRIMARY = "#ffffff"

    # Borders
    BORDER = "#e0e0e0"

    # Status
    ERROR = "#d32f2f"
    SUCCESS = "#388e3c"
    WARNING = "#f57c00"

    # Countdown
    PROGRESS = "#FFCC00"
    PROGRESS_TRACK = "#dcdcdc"


class ColorsDark:
    """Dark palette. Board colours stay the same; chrome darkens."""

    PRIMARY_BLUE = "#4DA3FF"
    PRIMARY_BLUE_HOVER = "#79BAFF"

    BOARD_BG = "#060CE9"
    BOARD_CELL = "#0A1BB5"
    BOARD_CELL_HOVER = "#1E2FD6"
    BOARD_VALUE = "#FFCC00"
    BOARD_USED = "#03054A"
    BOARD_TEXT = "#ffffff"

    BACKGROUND = "#0d1117"
    SURFACE = "#161b22"
    HOVER = "#21262d"
    DISABLED_BG = "#21262d"

    TEXT_PRIMARY = "#e6edf3"
    TEXT_SECONDARY = "#8b949e"
    TEXT_DISABLED = "#6e7681"
    TEXT_ON_PRIMARY = "#0d1117"

    BORDER = "#30363d"

    ERROR = "#f85149"
    SUCCESS = "#3fb950"
    WARNING = "#d29922"

    PROGRESS = "#FFCC00"
    PROGRESS_TRACK = "#30363d"


class Fonts:
    UI_FONT = "-apple-system, 'SF Pro Text', 'Segoe UI', Roboto, Helvetica, Arial, sans-serif"
    CLUE_FONT = "Georgia, 'Times New Roman', serif"

    H1 = "18pt"
    H2 = "16pt"
    BODY = "14pt"
    SMALL = "12pt"
    CLUE = "26pt"
    VALUE = "22pt"

    WEIGHT_REGULAR = "400"
    WEIGHT_MEDIUM = "500"
    WEIGHT_BOLD = "600"


def _stylesheet(C) -> str:
    return f"""
    QMainWindow, QDialog {{
        background-color: {C.BACKGROUND};
        color: {C.TEXT_PRIMARY};
    }}
    QLabel {{
        color: {C.TEXT_PRIMARY};
        font-size: {Fonts.BODY};
    }}
    QLabel#scoreLabel {{
        font-size: {Fonts.H1};
        font-weight: {Fonts.WEIGHT_BOLD};
    }}
    QLabel#statusLine {{
        color: {C.TEXT_SECONDARY};
        font-size: {Fonts.SMALL};
    }}
    QPushButton {{
        background-color: {C.SURFACE};
        color: {C.TEXT_PRIMARY};
        border: 1px solid {C.BORDER};
        border-radius: 6px;
        padding: 8px 16px;
        font-size: {Fonts.BODY};
    }}
    QPushButton:hover {{
        background-color: {C.HOVER};
    }}
    QPushButton:disabled {{
        background-color: {C.DISABLED_BG};
        color: {C.TEXT_DISABLED};
    }}
    QPushButton#primaryButton {{
        background-color: {C.PRIMARY_BLUE};
        color: {C.TEXT_ON_PRIMARY};
        border: none;
        font-weight: {Fonts.WEIGHT_BOLD};
    }}
    QPushButton#primaryButton:hover {{
        background-color: {C.PRIMARY_BLUE_HOVER};
    }}
    QProgressBar {{
        background-color: {C.PROGRESS_TRACK};
        border: none;
        border-radius: 4px;
        max-height: 8px;
    }}
    QProgressBar::chunk {{
        background-color: {C.PROGRESS};
        border-radius: 4px;
    }}
    """


GLOBAL_STYLESHEET = _stylesheet(Colors)
GLOBAL_STYLESHEET_DARK = _stylesheet(ColorsDark)


def board_cell_style() -> str:
    """Stylesheet for value buttons on the board grid."""
    C = get_colors()
    return f"""
        QPushButton {{
            background-color: {C.BOARD_CELL};
            color: {C.BOARD_VALUE};
            border: 2px solid {C.BOARD_BG};
            border-radius: 0px;
            font-family: {Fonts.CLUE_FONT.split(',')[0]};
            font-size: {Fonts.VALUE};
            font-weight: {Fonts.WEIGHT_BOLD};
        }}
        QPushButton:hover {{
            background-color: {C.BOARD_CELL_HOVER};
        }}
        QPushButton:disabled {{
            background-color: {C.BOARD_USED};
            color: {C.BOARD_USED};
        }}
    """


def board_header_style() -> str:
    C = get_colors()
    return f"""
        QLabel {{
            background-color: {C.BOARD_CELL};
            color: {C.BOARD_TEXT};
            border: 2px solid {C.BOARD_BG};
            font-size: {Fonts.BODY};
            font-weight: {Fonts.WEIGHT_BOLD};
            padding: 8px;
        }}
    """


def clue_panel_style() -> str:
    C = get_colors()
    return f"""
        QLabel#clueText {{
            background-color: {C.BOARD_BG};
            color: {C.BOARD_TEXT};
            font-family: {Fonts.CLUE_FONT.split(',')[0]};
            font-size: {Fonts.CLUE};
            padding: 32px;
        }}
        QLabel#responseText {{
            color: {C.BOARD_VALUE};
            background-color: {C.BOARD_BG};
            font-family: {Fonts.CLUE_FONT.split(',')[0]};
            font-size: {Fonts.H1};
            padding: 16px;
        }}
    """


def apply_theme(app, is_dark: bool = False) -> None:
    """Apply the light or dark stylesheet to the QApplication."""
    set_dark_mode(is_dark)
    app.setStyleSheet(GLOBAL_STYLESHEET_DARK if is_dark else GLOBAL_STYLESHEET)


# Module-level dark mode state (set explicitly when theme changes)
_is_dark_mode = False


def set_dark_mode(is_dark: bool):
    global _is_dark_mode
    _is_dark_mode = is_dark


def get_colors():
    """Get the colour palette for the current theme."""
    return ColorsDark if _is_dark_mode else Colors


def apply_shadow(widget, blur_radius=20, x_offset=2, y_offset=4, color=None):
    """Apply a soft shadow to a widget."""
    from PySide6.QtWidgets import QGraphicsDropShadowEffect
    from PySide6.QtGui import QColor

    if color is None:
        color = QColor(0, 0, 0, 45)

    shadow = QGraphicsDropShadowEffect(widget)
    shadow.setBlurRadius(blur_radius)
    shadow.setXOffset(x_offset)
    shadow.setYOffset(y_offset)
    shadow.setColor(color)
    widget.setGraphicsEffect(shadow)
