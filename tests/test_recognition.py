"""Tests for RecognitionSupervisor."""

import pytest

from telugu_grader.config import RecognitionConfig
from telugu_grader.errors import ErrorKind
from telugu_grader.recognition import RecognitionSupervisor
from telugu_grader.types import RecognitionEvent, ResultFragment

from .conftest import final, interim


@pytest.fixture
def received():
    return []


@pytest.fixture
def failures():
    return []


@pytest.fixture
def supervisor(source, scheduler, received, failures):
    return RecognitionSupervisor(
        source,
        scheduler,
        RecognitionConfig(),
        on_transcript=received.append,
        on_failure=failures.append,
    )


class TestStartStop:
    """Lifecycle of a recognition turn."""

    def test_start_listens_and_arms_guard(self, supervisor, source, scheduler):
        scheduler.advance(1.0)
        supervisor.start()

        assert supervisor.is_listening
        assert source.starts == 1
        assert supervisor.accept_after == pytest.approx(1.2)

    def test_start_stops_running_turn_first(self, supervisor, source):
        supervisor.start()
        supervisor.start()

        assert source.stops == 1
        assert source.starts == 2

    def test_stop(self, supervisor, source):
        supervisor.start()
        supervisor.stop()

        assert not supervisor.is_listening
        assert source.stops == 1

    def test_start_failure_is_reported(self, supervisor, source, failures):
        source.failures = 1
        supervisor.start()

        assert not supervisor.is_listening
        assert len(failures) == 1
        assert failures[0].kind is ErrorKind.AUDIO_CAPTURE


class TestResults:
    """Transcript extraction and filtering."""

    def test_final_preferred_over_interim(self, supervisor, scheduler, received):
        supervisor.start()
        scheduler.advance(0.5)
        event = RecognitionEvent(
            results=(
                ResultFragment("ab", is_final=False),
                ResultFragment("cd", is_final=True),
                ResultFragment("ef", is_final=False),
            )
        )
        supervisor.on_result(event)

        assert len(received) == 1
        assert received[0].text == "cd"
        assert received[0].is_final
        assert received[0].received_at == 0.5

    def test_interim_fragments_concatenated(self, supervisor, scheduler, received):
        supervisor.start()
        scheduler.advance(0.5)
        event = RecognitionEvent(
            results=(ResultFragment("నే", is_final=False), ResultFragment("ను", is_final=False))
        )
        supervisor.on_result(event)

        assert received[0].text == "నేను"
        assert not received[0].is_final

    def test_only_new_results_read(self, supervisor, scheduler, received):
        supervisor.start()
        scheduler.advance(0.5)
        event = RecognitionEvent(
            results=(ResultFragment("old", is_final=True), ResultFragment("new", is_final=True)),
            result_index=1,
        )
        supervisor.on_result(event)

        assert received[0].text == "new"

    def test_stale_result_dropped(self, supervisor, received):
        supervisor.start()
        supervisor.on_result(final("నేను", at=0.1))

        assert received == []

    def test_result_at_cutoff_accepted(self, supervisor, received):
        supervisor.start()
        supervisor.on_result(final("నేను", at=0.2))

        assert len(received) == 1

    def test_rearm_guard_moves_cutoff(self, supervisor, scheduler, received):
        supervisor.start()
        scheduler.advance(1.0)
        supervisor.rearm_guard()
        supervisor.on_result(interim("x", at=1.1))
        supervisor.on_result(interim("y", at=1.25))

        assert [t.text for t in received] == ["y"]

    def test_empty_transcript_dropped(self, supervisor, scheduler, received):
        supervisor.start()
        scheduler.advance(0.5)
        supervisor.on_result(final("   "))

        assert received == []

    def test_result_after_stop_dropped(self, supervisor, scheduler, received):
        supervisor.start()
        scheduler.advance(0.5)
        supervisor.stop()
        supervisor.on_result(final("నేను"))

        assert received == []


class TestErrors:
    """Benign and reported recognizer errors."""

    def test_aborted_is_benign(self, supervisor, source, failures):
        supervisor.start()
        supervisor.on_error("aborted")

        assert failures == []
        assert supervisor.is_listening
        assert source.stops == 0

    def test_network_error_reported_and_stops(self, supervisor, source, failures):
        supervisor.start()
        supervisor.on_error("network")

        assert len(failures) == 1
        assert failures[0].kind is ErrorKind.NETWORK
        assert failures[0].detail
        assert not supervisor.is_listening
        assert source.stops == 1

    def test_unknown_code(self, supervisor, failures):
        supervisor.start()
        supervisor.on_error("something-new")

        assert failures[0].kind is ErrorKind.UNKNOWN
        assert failures[0].code == "something-new"

    def test_configured_benign_codes(self, source, scheduler, failures):
        config = RecognitionConfig(benign_errors=("aborted", "no-speech"))
        supervisor = RecognitionSupervisor(source, scheduler, config, on_failure=failures.append)
        supervisor.start()
        supervisor.on_error("no-speech")

        assert failures == []
        assert supervisor.is_listening


class TestRestart:
    """Automatic restart after an unexpected end."""

    def test_unexpected_end_restarts(self, supervisor, source, scheduler):
        supervisor.start()
        scheduler.advance(3.0)
        supervisor.on_session_ended()

        assert supervisor.restart_pending
        scheduler.advance(0.5)
        assert source.starts == 2
        assert supervisor.is_listening

    def test_restart_rearms_guard(self, supervisor, scheduler):
        supervisor.start()
        scheduler.advance(3.0)
        supervisor.on_session_ended()
        scheduler.advance(0.5)

        assert supervisor.accept_after == pytest.approx(3.7)

    def test_no_restart_after_stop(self, supervisor, source, scheduler):
        supervisor.start()
        supervisor.stop()
        supervisor.on_session_ended()
        scheduler.advance(5.0)

        assert source.starts == 1
        assert not supervisor.restart_pending

    def test_stop_cancels_pending_restart(self, supervisor, source, scheduler):
        supervisor.start()
        scheduler.advance(3.0)
        supervisor.on_session_ended()
        supervisor.stop()
        scheduler.advance(5.0)

        assert source.starts == 1
        assert scheduler.pending == 0

    def test_gives_up_on_restart_storm(self, supervisor, source, scheduler, failures):
        supervisor.start()
        scheduler.advance(3.0)
        supervisor.on_session_ended()  # long-lived turn, normal restart
        scheduler.run_until_idle()
        for _ in range(3):
            supervisor.on_session_ended()  # dies immediately
            scheduler.run_until_idle()

        assert source.starts == 4
        assert not supervisor.is_listening
        assert len(failures) == 1
        assert failures[0].kind is ErrorKind.RESTART_FAILED

    def test_gives_up_when_source_refuses(self, supervisor, source, scheduler, failures):
        supervisor.start()
        source.failures = 3
        scheduler.advance(3.0)
        supervisor.on_session_ended()
        scheduler.run_until_idle()

        assert source.starts == 1
        assert not supervisor.is_listening
        assert [f.kind for f in failures] == [ErrorKind.RESTART_FAILED]

    def test_recovers_after_one_refusal(self, supervisor, source, scheduler, received, failures):
        supervisor.start()
        source.failures = 1
        scheduler.advance(3.0)
        supervisor.on_session_ended()
        scheduler.run_until_idle()

        assert source.starts == 2
        assert supervisor.is_listening
        assert supervisor.consecutive_failures == 1
        assert failures == []

        scheduler.advance(1.0)
        supervisor.on_result(final("నేను"))
        assert supervisor.consecutive_failures == 0
        assert len(received) == 1


class TestLateEnds:
    """An ``end`` from a stopped turn arriving after the next turn began."""

    @pytest.fixture(autouse=True)
    def live_source(self, supervisor, source, scheduler):
        source.bind(supervisor, scheduler)

    def test_end_of_replaced_turn_is_ignored(self, supervisor, source, scheduler, failures):
        supervisor.start()
        scheduler.advance(3.0)
        supervisor.start()
        scheduler.advance(2.0)

        assert source.starts == 2
        assert source.running
        assert supervisor.is_listening
        assert not supervisor.restart_pending
        assert supervisor.consecutive_failures == 0
        assert failures == []

    def test_quick_restarts_never_give_up(self, supervisor, source, scheduler, failures):
        supervisor.start()
        for _ in range(4):
            supervisor.start()
            scheduler.advance(0.1)

        assert source.starts == 5
        assert supervisor.is_listening
        assert failures == []

    def test_end_after_stop_then_start(self, supervisor, source, scheduler, failures):
        supervisor.start()
        scheduler.advance(3.0)
        supervisor.stop()
        supervisor.start()
        scheduler.advance(2.0)

        assert source.starts == 2
        assert source.running
        assert not supervisor.restart_pending
        assert failures == []

    def test_unexpected_end_still_restarts(self, supervisor, source, scheduler):
        supervisor.start()
        scheduler.advance(3.0)
        supervisor.start()
        scheduler.advance(3.0)
        supervisor.on_session_ended()

        assert supervisor.restart_pending
        scheduler.advance(0.5)
        assert source.starts == 3
        assert supervisor.is_listening
