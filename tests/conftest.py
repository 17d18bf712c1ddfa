import os
import random
import sys
from pathlib import Path
from typing import List, Optional

import pytest

# Widgets are created in tests; no display is needed.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

# Add src to sys.path so we can import trivia_trainer
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from trivia_trainer.core.models import ClueRecord, Round  # noqa: E402
from trivia_trainer.engine import (  # noqa: E402
    ManualScheduler,
    Narrator,
    TrainerConfig,
    TrainerGame,
    TrainerListener,
)

LADDER = (200, 400, 600, 800, 1000)


# ─────────────────────────────────────────────────────────────────────────────
# Test doubles
# ─────────────────────────────────────────────────────────────────────────────


class RecordingListener(TrainerListener):
    """Records every hook call as (name, payload) in order."""

    def __init__(self) -> None:
        self.events: List[tuple] = []

    def names(self) -> List[str]:
        return [name for name, _ in self.events]

    def payloads(self, name: str) -> list:
        return [payload for n, payload in self.events if n == name]

    def board_ready(self, board):
        self.events.append(("board_ready", board))

    def phase_changed(self, session, phase):
        self.events.append(("phase_changed", phase))

    def clue_shown(self, session):
        self.events.append(("clue_shown", session.session_id))

    def narration_warning(self, session, completion):
        self.events.append(("narration_warning", completion))

    def countdown_started(self, session, window_ms):
        self.events.append(("countdown_started", window_ms))

    def countdown_progress(self, session, fraction):
        self.events.append(("countdown_progress", fraction))

    def blank_started(self, session, delay_ms):
        self.events.append(("blank_started", delay_ms))

    def revealed(self, session, response_text, mode):
        self.events.append(("revealed", (response_text, mode)))

    def outcome_recorded(self, outcome):
        self.events.append(("outcome_recorded", outcome))

    def score_changed(self, score):
        self.events.append(("score_changed", score))

    def board_finished(self, summary):
        self.events.append(("board_finished", summary))


class ScriptedNarrator(Narrator):
    """
    Narrator whose playback is simulated on a ManualScheduler.

    ``duration_ms`` None means the backend never reports completion.
    ``report`` False keeps the probe working but suppresses the callback.
    """

    name = "scripted"

    def __init__(
        self,
        scheduler: ManualScheduler,
        duration_ms: Optional[float] = 2000,
        *,
        error: Optional[BaseException] = None,
        report: bool = True,
        probe: bool = False,
        raise_on_speak: Optional[BaseException] = None,
    ) -> None:
        self.scheduler = scheduler
        self.duration_ms = duration_ms
        self.error = error
        self.report = report
        self.supports_activity_probe = probe
        self.raise_on_speak = raise_on_speak
        self.spoken: List[str] = []
        self.stop_calls = 0
        self._speaking = False
        self._handle = None

    def speak(self, text, on_finished):
        if self.raise_on_speak is not None:
            raise self.raise_on_speak
        self.spoken.append(text)
        self._speaking = True
        if self.duration_ms is None:
            return

        def done():
            self._speaking = False
            if self.report:
                on_finished(self.error)

        self._handle = self.scheduler.call_later(self.duration_ms, done)

    def stop(self):
        self.stop_calls += 1
        self._speaking = False
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def is_speaking(self):
        return self._speaking


# ─────────────────────────────────────────────────────────────────────────────
# Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def make_clue():
    """Factory for ClueRecords with sensible defaults."""
    counter = iter(range(1, 1_000_000))

    def _make(
        category: str = "Science",
        value: int = 200,
        clue_text: Optional[str] = None,
        response_text: str = "What is water?",
        round: Round = Round.FIRST,
        **kwargs,
    ) -> ClueRecord:
        n = next(counter)
        return ClueRecord(
            id=kwargs.pop("id", f"c{n}"),
            round=round,
            category=category,
            value=value,
            clue_text=clue_text or f"{category} clue number {n} for {value}",
            response_text=response_text,
            **kwargs,
        )

    return _make


@pytest.fixture
def make_pool(make_clue):
    """Factory for pools of complete categories (``per_value`` candidates per cell)."""

    def _make(categories: int = 6, per_value: int = 2, ladder=LADDER) -> List[ClueRecord]:
        pool = []
        for c in range(categories):
            for value in ladder:
                for k in range(per_value):
                    pool.append(make_clue(
                        category=f"Category {c}",
                        value=value,
                        response_text=f"What is answer {c}-{value}-{k}?",
                    ))
        return pool

    return _make


@pytest.fixture
def complete_pool(make_pool) -> List[ClueRecord]:
    return make_pool()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def listener() -> RecordingListener:
    return RecordingListener()


@pytest.fixture
def narrator(scheduler) -> ScriptedNarrator:
    """Narrator that finishes 2 s after speak()."""
    return ScriptedNarrator(scheduler, duration_ms=2000)


@pytest.fixture
def config() -> TrainerConfig:
    return TrainerConfig(
        category_count=4,
        buzz_window_seconds=5.0,
        blank_delay_ms=2000,
        narrator_backend="none",
        seed=7,
    )


@pytest.fixture
def game(config, scheduler, narrator, listener, complete_pool) -> TrainerGame:
    g = TrainerGame(
        config,
        scheduler=scheduler,
        narrator=narrator,
        listener=listener,
        rng=random.Random(7),
    )
    g.load_pool(complete_pool)
    return g
