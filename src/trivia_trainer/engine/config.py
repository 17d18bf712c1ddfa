"""
Module: engine.config

Purpose:
    Configuration dataclass for the trainer engine. Immutable
    configuration, corrected on construction: out-of-range values are
    clamped to the nearest valid bound instead of being rejected.

Key Classes:
    - TrainerConfig: Board, timing, narration and review settings
    - InvalidConfigValue: Warning issued when a value is clamped

Dependencies:
    - dataclasses (std)
    - warnings (std)

Used By:
    - engine.game: Application context
    - engine.session: Buzz window, blank delay, narration ceiling
    - gui.models.settings: Builds a config from stored preferences
"""

from __future__ import annotations

import logging
import math
import warnings
from dataclasses import dataclass, field
from typing import Any, FrozenSet, Optional, Tuple

from trivia_trainer.core.models import Round

logger = logging.getLogger(__name__)


CATEGORY_COUNT_RANGE: Tuple[int, int] = (3, 6)
BUZZ_WINDOW_RANGE: Tuple[float, float] = (1.0, 15.0)
BLANK_DELAY_RANGE: Tuple[int, int] = (250, 5000)
TICK_INTERVAL_RANGE: Tuple[int, int] = (10, 1000)
DEFAULT_VALUE_LADDER: Tuple[int, ...] = (200, 400, 600, 800, 1000)
NARRATOR_BACKENDS: Tuple[str, ...] = ("qt", "pyttsx3", "none")


class InvalidConfigValue(UserWarning):
    """A configuration value was out of range and has been clamped."""
    pass


def clamp_number(
    name: str,
    value: Any,
    low: float,
    high: float,
    default: float,
) -> float:
    """
    Clamp a numeric setting into [low, high].

    Non-numeric values (and NaN) fall back to ``default``. Any correction
    issues an InvalidConfigValue warning.

    Example:
        >>> clamp_number("buzz_window_seconds", 30, 1, 15, 5)
        15
    """
    try:
        number = float(value)
    except (TypeError, ValueError):
        number = math.nan
    if math.isnan(number):
        _report(name, value, default)
        return default
    if number < low:
        _report(name, value, low)
        return low
    if number > high:
        _report(name, value, high)
        return high
    return value if isinstance(value, (int, float)) and not isinstance(value, bool) else number


def _report(name: str, given: Any, used: Any) -> None:
    message = f"{name}={given!r} is out of range; using {used!r}"
    logger.warning(message)
    warnings.warn(message, InvalidConfigValue, stacklevel=4)


@dataclass(frozen=True)
class TrainerConfig:
    """
    Configuration for the trainer engine (immutable).

    Attributes:
        category_count: Categories per board, clamped to [3, 6]
        buzz_window_seconds: Time to buzz after narration ends, clamped to [1, 15]
        blank_delay_ms: Blank screen between buzz and reveal, clamped to [250, 5000]
        value_ladder: Point values, one board row per value
        eligible_rounds: Rounds whose clues may appear on a board
        tick_interval_ms: Countdown progress cadence
        narration_enabled: Whether clues are read aloud
        narrator_backend: "qt", "pyttsx3" or "none"
        voice: Backend-specific voice name (None = backend default)
        speech_ms_per_word: Estimated narration rate for the ceiling timeout
        speech_min_ms / speech_max_ms: Bounds on the estimated narration duration
        speech_margin_ms: Added to the estimate to form the ceiling timeout
        narration_poll_ms: Cadence of the "still speaking" poll
        weak_category_limit: How many weak categories to report
        weak_min_attempts: Attempts needed before a category counts as signal
        review_ratio: Share of a review round drawn from weak categories
        seed: Random seed (None = nondeterministic)

    Example:
        >>> config = TrainerConfig(buzz_window_seconds=30)
        >>> config.buzz_window_ms
        15000
    """

    # Board
    category_count: int = 4
    value_ladder: Tuple[int, ...] = DEFAULT_VALUE_LADDER
    eligible_rounds: FrozenSet[Round] = field(default_factory=lambda: frozenset({Round.FIRST}))

    # Timing
    buzz_window_seconds: float = 5.0
    blank_delay_ms: int = 2000
    tick_interval_ms: int = 50

    # Narration
    narration_enabled: bool = True
    narrator_backend: str = "qt"
    voice: Optional[str] = None
    speech_ms_per_word: int = 400
    speech_min_ms: int = 1200
    speech_max_ms: int = 12000
    speech_margin_ms: int = 500
    narration_poll_ms: int = 250

    # Review
    weak_category_limit: int = 4
    weak_min_attempts: int = 2
    review_ratio: float = 0.5

    seed: Optional[int] = None

    def __post_init__(self) -> None:
        """Clamp out-of-range values on construction."""
        lo, hi = CATEGORY_COUNT_RANGE
        self._set("category_count", int(clamp_number("category_count", self.category_count, lo, hi, 4)))
        lo, hi = BUZZ_WINDOW_RANGE
        self._set("buzz_window_seconds", float(clamp_number("buzz_window_seconds", self.buzz_window_seconds, lo, hi, 5.0)))
        lo, hi = BLANK_DELAY_RANGE
        self._set("blank_delay_ms", int(round(clamp_number("blank_delay_ms", self.blank_delay_ms, lo, hi, 2000))))
        lo, hi = TICK_INTERVAL_RANGE
        self._set("tick_interval_ms", int(clamp_number("tick_interval_ms", self.tick_interval_ms, lo, hi, 50)))
        self._set("review_ratio", float(clamp_number("review_ratio", self.review_ratio, 0.0, 1.0, 0.5)))

        ladder = tuple(dict.fromkeys(int(v) for v in self.value_ladder if int(v) > 0))
        if not ladder:
            _report("value_ladder", self.value_ladder, DEFAULT_VALUE_LADDER)
            ladder = DEFAULT_VALUE_LADDER
        self._set("value_ladder", ladder)
        self._set("eligible_rounds", frozenset(self.eligible_rounds))

        if self.narrator_backend not in NARRATOR_BACKENDS:
            _report("narrator_backend", self.narrator_backend, "none")
            self._set("narrator_backend", "none")
        if self.speech_min_ms > self.speech_max_ms:
            _report("speech_min_ms", self.speech_min_ms, self.speech_max_ms)
            self._set("speech_min_ms", self.speech_max_ms)

    def _set(self, name: str, value: Any) -> None:
        object.__setattr__(self, name, value)

    # ─────────────────────────────────────────────────────────────────────────
    # Calculated Properties
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def buzz_window_ms(self) -> int:
        return int(round(self.buzz_window_seconds * 1000))
