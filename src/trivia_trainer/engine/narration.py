"""
Module: engine.narration

Purpose:
    Pluggable text-to-speech behind one interface. The clue session only
    needs "speak this text and tell me when you are done"; which backend
    does the speaking is a configuration choice.

Key Functions:
    - create_narrator(): Build the backend named in the configuration

Key Classes:
    - Narrator: Abstract narration backend
    - SilentNarrator: Narration disabled; finishes immediately
    - QtNarrator: System voices through PySide6.QtTextToSpeech
    - Pyttsx3Narrator: System voices through pyttsx3 on a worker thread
    - NarrationFailure: Backend could not speak (non-fatal)

Dependencies:
    - PySide6.QtTextToSpeech (QtNarrator)
    - pyttsx3 (Pyttsx3Narrator)

Used By:
    - engine.session: Narrates clue text
    - gui.main_window: Backend and voice selection
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Set

logger = logging.getLogger(__name__)

FinishedCallback = Callable[[Optional[BaseException]], None]


class NarrationFailure(Exception):
    """Narration backend failed. Never fatal to the clue flow."""
    pass


class Narrator(ABC):
    """
    Abstract narration backend.

    ``speak`` starts playback and returns immediately. ``on_finished`` is
    called once, from any thread, with None on success or the error on
    failure. Backends that cannot tell whether they are speaking leave
    ``supports_activity_probe`` False.
    """

    name: str = "abstract"
    supports_activity_probe: bool = False

    @abstractmethod
    def speak(self, text: str, on_finished: FinishedCallback) -> None:
        ...

    @abstractmethod
    def stop(self) -> None:
        ...

    def is_speaking(self) -> bool:
        return False

    def available_voices(self) -> List[str]:
        return []

    def set_voice(self, voice: Optional[str]) -> None:
        pass


class SilentNarrator(Narrator):
    """Narration disabled: every clue finishes immediately."""

    name = "none"

    def speak(self, text: str, on_finished: FinishedCallback) -> None:
        on_finished(None)

    def stop(self) -> None:
        pass


class QtNarrator(Narrator):
    """
    Narrator backed by QTextToSpeech.

    Must be created and used on the Qt main thread. Completion is taken
    from ``stateChanged``: Speaking → Ready means finished, Error means
    failed. A Ready seen before this utterance started speaking belongs to
    the previous, stopped utterance and is ignored.
    """

    name = "qt"
    supports_activity_probe = True

    def __init__(self, engine: Optional[str] = None, voice: Optional[str] = None) -> None:
        from PySide6.QtTextToSpeech import QTextToSpeech

        engines = QTextToSpeech.availableEngines()
        if not engines:
            raise NarrationFailure("No Qt text-to-speech engines are installed")
        self._State = QTextToSpeech.State
        self._tts = QTextToSpeech(engine) if engine else QTextToSpeech()
        self._tts.stateChanged.connect(self._on_state_changed)
        self._pending: Optional[FinishedCallback] = None
        self._started = False
        self.set_voice(voice)
        logger.debug(f"Qt narration ready (engines: {', '.join(engines)})")

    def speak(self, text: str, on_finished: FinishedCallback) -> None:
        self.stop()
        self._pending = on_finished
        self._started = False
        self._tts.say(text)

    def stop(self) -> None:
        self._pending = None
        self._started = False
        if self._tts.state() != self._State.Ready:
            self._tts.stop()

    def is_speaking(self) -> bool:
        return self._is_active(self._tts.state())

    def _is_active(self, state) -> bool:
        synthesizing = getattr(self._State, "Synthesizing", None)
        return state == self._State.Speaking or (synthesizing is not None and state == synthesizing)

    def available_voices(self) -> List[str]:
        return [voice.name() for voice in self._tts.availableVoices()]

    def set_voice(self, voice: Optional[str]) -> None:
        if not voice:
            return
        for candidate in self._tts.availableVoices():
            if candidate.name() == voice:
                self._tts.setVoice(candidate)
                return
        logger.warning(f"Voice {voice!r} not found; using the default voice")

    def _on_state_changed(self, state) -> None:
        if self._pending is None:
            return
        if self._is_active(state):
            self._started = True
        elif state == self._State.Ready and self._started:
            callback, self._pending = self._pending, None
            callback(None)
        elif state == self._State.Error:
            callback, self._pending = self._pending, None
            callback(NarrationFailure(self._tts.errorString() or "Qt text-to-speech error"))


class Pyttsx3Narrator(Narrator):
    """
    Narrator backed by pyttsx3 (SAPI5 / NSSpeechSynthesizer / eSpeak).

    ``runAndWait`` blocks, so each clue is spoken on a daemon thread. A
    generation counter drops completions of utterances that were stopped,
    and only the current generation counts as speaking.
    """

    name = "pyttsx3"
    supports_activity_probe = True

    def __init__(self, voice: Optional[str] = None, rate: int = 180) -> None:
        import pyttsx3

        try:
            self._engine = pyttsx3.init()
        except RuntimeError as exc:
            raise NarrationFailure(f"pyttsx3 could not start a speech driver: {exc}") from exc
        self._engine.setProperty("rate", rate)
        self._engine.setProperty("volume", 1.0)
        self._lock = threading.Lock()
        self._active: Set[int] = set()
        self._generation = 0
        self.set_voice(voice)

    def speak(self, text: str, on_finished: FinishedCallback) -> None:
        self.stop()
        with self._lock:
            self._generation += 1
            generation = self._generation

        def run() -> None:
            error: Optional[BaseException] = None
            with self._lock:
                self._active.add(generation)
            try:
                self._engine.say(text)
                self._engine.runAndWait()
            except RuntimeError as exc:
                error = NarrationFailure(str(exc))
            finally:
                with self._lock:
                    self._active.discard(generation)
            with self._lock:
                current = generation == self._generation
            if current:
                on_finished(error)

        threading.Thread(target=run, name="pyttsx3-narration", daemon=True).start()

    def stop(self) -> None:
        with self._lock:
            self._generation += 1
            running = bool(self._active)
        if running:
            self._engine.stop()

    def is_speaking(self) -> bool:
        with self._lock:
            return self._generation in self._active

    def available_voices(self) -> List[str]:
        return [voice.name for voice in self._engine.getProperty("voices")]

    def set_voice(self, voice: Optional[str]) -> None:
        if not voice:
            return
        for candidate in self._engine.getProperty("voices"):
            if voice in (candidate.name, candidate.id):
                self._engine.setProperty("voice", candidate.id)
                return
        logger.warning(f"Voice {voice!r} not found; using the default voice")


def create_narrator(backend: str, voice: Optional[str] = None, *, enabled: bool = True) -> Narrator:
    """
    Build the narration backend named by ``backend``.

    A backend that cannot start (no speech engines, no driver) is logged
    and replaced by SilentNarrator so the trainer keeps working.

    Example:
        >>> create_narrator("none").name
        'none'
    """
    if not enabled or backend == "none":
        return SilentNarrator()
    try:
        if backend == "qt":
            return QtNarrator(voice=voice)
        if backend == "pyttsx3":
            return Pyttsx3Narrator(voice=voice)
    except NarrationFailure as exc:
        logger.warning(f"Narration backend {backend!r} unavailable, continuing silently: {exc}")
        return SilentNarrator()
    logger.warning(f"Unknown narration backend {backend!r}, continuing silently")
    return SilentNarrator()
