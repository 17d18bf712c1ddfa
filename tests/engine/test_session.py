"""
Unit Tests for the Clue Session State Machine

Pure transition() tests plus ClueSession behaviour under a manual clock:
narration gating, countdown, buzz, blank delay, reveal and teardown.
"""

import pytest

from trivia_trainer.core.models import OutcomeStatus
from trivia_trainer.engine.completion import CompletionReason
from trivia_trainer.engine.narration import Narrator
from trivia_trainer.engine.session import ClueEvent, CluePhase, RevealMode, transition


class TestTransition:
    """Tests for the pure transition function."""

    @pytest.mark.parametrize("phase, event, buzzed, expected", [
        (CluePhase.INIT, ClueEvent.SELECT, False, CluePhase.NARRATING),
        (CluePhase.NARRATING, ClueEvent.NARRATION_DONE, False, CluePhase.COUNTDOWN),
        (CluePhase.COUNTDOWN, ClueEvent.BUZZ, False, CluePhase.BLANK_DELAY),
        (CluePhase.COUNTDOWN, ClueEvent.EXPIRE, False, CluePhase.EXPIRED),
        (CluePhase.BLANK_DELAY, ClueEvent.BLANK_ELAPSED, True, CluePhase.REVEALED),
        (CluePhase.EXPIRED, ClueEvent.REVEAL, False, CluePhase.REVEALED),
        (CluePhase.REVEALED, ClueEvent.MARK_CORRECT, True, CluePhase.TERMINAL),
        (CluePhase.REVEALED, ClueEvent.MARK_WRONG, True, CluePhase.TERMINAL),
        (CluePhase.REVEALED, ClueEvent.ACKNOWLEDGE, False, CluePhase.TERMINAL),
        (CluePhase.ABANDONED, ClueEvent.FINALIZE, False, CluePhase.TERMINAL),
    ])
    def test_transition_when_valid_event_then_next_phase(self, phase, event, buzzed, expected):
        assert transition(phase, event, buzzed=buzzed) is expected

    @pytest.mark.parametrize("phase, event", [
        (CluePhase.NARRATING, ClueEvent.BUZZ),
        (CluePhase.INIT, ClueEvent.BUZZ),
        (CluePhase.BLANK_DELAY, ClueEvent.EXPIRE),
        (CluePhase.EXPIRED, ClueEvent.BUZZ),
        (CluePhase.TERMINAL, ClueEvent.MARK_CORRECT),
    ])
    def test_transition_when_event_not_allowed_then_none(self, phase, event):
        assert transition(phase, event) is None

    def test_transition_when_not_buzzed_then_scoring_ignored(self):
        assert transition(CluePhase.REVEALED, ClueEvent.MARK_CORRECT, buzzed=False) is None
        assert transition(CluePhase.REVEALED, ClueEvent.MARK_WRONG, buzzed=False) is None

    def test_transition_when_buzzed_then_acknowledge_ignored(self):
        assert transition(CluePhase.REVEALED, ClueEvent.ACKNOWLEDGE, buzzed=True) is None

    @pytest.mark.parametrize("phase", [
        CluePhase.INIT, CluePhase.NARRATING, CluePhase.COUNTDOWN,
        CluePhase.BLANK_DELAY, CluePhase.EXPIRED, CluePhase.REVEALED,
    ])
    def test_transition_when_abandon_from_live_phase_then_abandoned(self, phase):
        assert transition(phase, ClueEvent.ABANDON) is CluePhase.ABANDONED

    @pytest.mark.parametrize("phase", [CluePhase.TERMINAL, CluePhase.ABANDONED])
    def test_transition_when_abandon_after_end_then_none(self, phase):
        assert transition(phase, ClueEvent.ABANDON) is None


class TestNarrationGate:
    """The countdown never starts before narration resolves."""

    def test_session_when_narrating_then_buzz_rejected(self, game, scheduler):
        game.new_board()
        session = game.open_clue(0, 200)

        scheduler.advance(1500)

        assert session.phase is CluePhase.NARRATING
        assert game.buzz() is False

    def test_session_when_narration_finishes_then_countdown_starts(self, game, scheduler, listener, narrator):
        game.new_board()
        session = game.open_clue(0, 200)

        scheduler.advance(2000)

        assert session.phase is CluePhase.COUNTDOWN
        assert session.countdown_started_ms == 2000
        assert session.narration.reason is CompletionReason.FINISHED
        assert listener.payloads("countdown_started") == [5000]
        assert narrator.spoken == [session.clue.clue_text]

    def test_session_when_backend_never_reports_then_ceiling_and_stop(
        self, game, scheduler, listener, narrator
    ):
        # Arrange
        narrator.duration_ms = None
        game.new_board()
        session = game.open_clue(0, 200)
        words = len(session.clue.clue_text.split())
        ceiling = max(1200, min(12000, words * 400)) + 500

        # Act
        scheduler.advance(ceiling)

        # Assert
        assert session.phase is CluePhase.COUNTDOWN
        assert session.narration.reason is CompletionReason.CEILING
        assert narrator.stop_calls >= 1
        assert [c.reason for c in listener.payloads("narration_warning")] == [CompletionReason.CEILING]

    def test_session_when_backend_fails_then_warns_and_proceeds(self, game, scheduler, listener, narrator):
        narrator.error = RuntimeError("device lost")
        game.new_board()
        session = game.open_clue(0, 200)

        scheduler.advance(2000)

        assert session.phase is CluePhase.COUNTDOWN
        assert session.narration.reason is CompletionReason.FAILED
        assert len(listener.payloads("narration_warning")) == 1

    def test_session_when_speak_raises_then_countdown_starts_immediately(self, game, scheduler, narrator):
        narrator.raise_on_speak = OSError("no audio")
        game.new_board()
        session = game.open_clue(0, 200)

        scheduler.advance(0)

        assert session.phase is CluePhase.COUNTDOWN
        assert session.countdown_started_ms == 0
        assert session.narration.reason is CompletionReason.FAILED

    def test_session_when_backend_goes_idle_then_resolves_idle(self, game, scheduler, narrator):
        narrator.report = False
        narrator.supports_activity_probe = True
        game.new_board()
        session = game.open_clue(0, 200)

        scheduler.advance(2000)

        assert session.phase is CluePhase.COUNTDOWN
        assert session.narration.reason is CompletionReason.IDLE


class TestCountdown:
    """Countdown, buzz, blank delay and reveal."""

    def test_countdown_when_ticking_then_progress_rises_to_one(self, game, scheduler, listener):
        game.new_board()
        game.open_clue(0, 200)
        scheduler.advance(2000)

        scheduler.advance(2500)
        progress = listener.payloads("countdown_progress")

        assert progress[0] == 0.0
        assert progress[-1] == pytest.approx(0.5)
        assert progress == sorted(progress)

    def test_countdown_when_no_buzz_then_expires_and_reveals_for_acknowledge(self, game, scheduler, listener):
        game.new_board()
        session = game.open_clue(0, 200)

        scheduler.advance_to(6999)
        assert session.phase is CluePhase.COUNTDOWN
        scheduler.advance_to(7000)

        assert session.phase is CluePhase.REVEALED
        assert session.reveal_mode is RevealMode.ACKNOWLEDGE
        assert listener.payloads("revealed") == [(session.clue.response_text, RevealMode.ACKNOWLEDGE)]
        assert CluePhase.EXPIRED in listener.payloads("phase_changed")

    def test_buzz_when_in_window_then_blank_delay_then_reveal_for_scoring(self, game, scheduler, listener):
        game.new_board()
        session = game.open_clue(0, 200)
        scheduler.advance(3000)

        assert game.buzz() is True
        assert session.phase is CluePhase.BLANK_DELAY
        assert listener.payloads("blank_started") == [2000]

        scheduler.advance(1999)
        assert session.phase is CluePhase.BLANK_DELAY
        scheduler.advance(1)
        assert session.phase is CluePhase.REVEALED
        assert session.reveal_mode is RevealMode.SCORE

    def test_buzz_when_accepted_then_deadline_never_fires(self, game, scheduler, listener):
        game.new_board()
        session = game.open_clue(0, 200)
        scheduler.advance(3000)
        game.buzz()

        scheduler.advance(20000)

        assert CluePhase.EXPIRED not in listener.payloads("phase_changed")
        assert session.reveal_mode is RevealMode.SCORE

    def test_buzz_when_expired_then_rejected(self, game, scheduler):
        game.new_board()
        session = game.open_clue(0, 200)
        scheduler.advance_to(7000)

        assert game.buzz() is False
        assert session.buzzed is False

    def test_buzz_when_due_with_deadline_then_expiry_wins(self, game, scheduler, listener):
        # Arrange: a buzz queued for the exact end of the window, ahead of the deadline timer
        game.new_board()
        session = game.open_clue(0, 200)
        results = []
        scheduler.call_later(7000, lambda: results.append(game.buzz()))

        # Act
        scheduler.advance_to(7000)

        # Assert
        assert results == [False]
        assert session.buzzed is False
        assert session.phase is CluePhase.REVEALED
        assert session.reveal_mode is RevealMode.ACKNOWLEDGE
        assert listener.payloads("phase_changed").count(CluePhase.EXPIRED) == 1
        assert listener.payloads("blank_started") == []

    def test_buzz_when_twice_then_second_ignored(self, game, scheduler, listener):
        game.new_board()
        game.open_clue(0, 200)
        scheduler.advance(3000)

        assert game.buzz() is True
        assert game.buzz() is False
        assert len(listener.payloads("blank_started")) == 1


class TestScoringAndTeardown:
    """Scoring actions, abandon and stale callbacks."""

    def _reveal_after_buzz(self, game, scheduler, index=0, value=200):
        session = game.open_clue(index, value)
        scheduler.advance(3000)
        game.buzz()
        scheduler.advance(2000)
        return session

    def test_mark_correct_when_buzzed_then_terminal_correct(self, game, scheduler):
        game.new_board()
        session = self._reveal_after_buzz(game, scheduler)

        assert game.mark_correct() is True
        assert session.phase is CluePhase.TERMINAL
        assert session.outcome.status is OutcomeStatus.CORRECT

    def test_acknowledge_when_buzzed_then_ignored(self, game, scheduler):
        game.new_board()
        session = self._reveal_after_buzz(game, scheduler)

        assert game.acknowledge() is False
        assert session.phase is CluePhase.REVEALED

    def test_mark_correct_when_expired_then_ignored(self, game, scheduler):
        game.new_board()
        session = game.open_clue(0, 200)
        scheduler.advance_to(7000)

        assert game.mark_correct() is False
        assert game.acknowledge() is True
        assert session.outcome.status is OutcomeStatus.SKIPPED

    def test_finalize_when_called_twice_then_single_outcome(self, game, scheduler):
        game.new_board()
        session = self._reveal_after_buzz(game, scheduler)

        assert session.mark_correct() is True
        assert session.mark_wrong() is False
        assert session.abandon() is False
        assert len(game.outcomes) == 1

    def test_abandon_when_counting_down_then_skipped_and_timers_cancelled(self, game, scheduler, narrator):
        game.new_board()
        session = game.open_clue(0, 200)
        scheduler.advance(3000)

        assert game.abandon() is True

        assert session.phase is CluePhase.TERMINAL
        assert session.outcome.status is OutcomeStatus.SKIPPED
        assert scheduler.pending_timers == 0
        assert narrator.stop_calls >= 1
        assert game.board.is_used(0, 200)
        assert game.score == 0

    def test_abandon_when_narrating_then_narration_cancelled(self, game, scheduler, listener):
        game.new_board()
        game.open_clue(0, 200)
        scheduler.advance(500)

        game.abandon()
        scheduler.advance(10000)

        assert "countdown_started" not in listener.names()

    def test_late_narration_callback_when_session_abandoned_then_dropped(
        self, config, scheduler, listener, complete_pool
    ):
        # Arrange: a backend that hands its callback back to the test
        class LateNarrator(Narrator):
            name = "late"

            def __init__(self):
                self.callbacks = []

            def speak(self, text, on_finished):
                self.callbacks.append(on_finished)

            def stop(self):
                pass

        from trivia_trainer.engine import TrainerGame

        late = LateNarrator()
        game = TrainerGame(config, scheduler=scheduler, narrator=late, listener=listener)
        game.load_pool(complete_pool)
        game.new_board()
        session = game.open_clue(0, 200)
        game.abandon()
        before = list(listener.events)

        # Act
        late.callbacks[0](None)
        scheduler.advance(20000)

        # Assert
        assert listener.events == before
        assert session.phase is CluePhase.TERMINAL
