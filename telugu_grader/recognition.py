"""Recognition session supervision.

``RecognitionSupervisor`` wraps one continuous, interim-emitting recognition
source. It owns start/stop, restarts the source when it ends on its own,
and drops results that arrive before the accept-after timestamp so that a
just-superseded turn cannot leak into the current target.

The adapter around the concrete recognizer forwards its events to
``on_result``, ``on_error``, ``on_session_started`` and ``on_session_ended``.
Every turn stopped through the supervisor is expected to report its own
``end`` later; those ends are consumed without touching the current turn.
"""

import logging
from collections.abc import Callable
from typing import Protocol

from .config import RecognitionConfig
from .errors import RecognitionFailure, RecognitionUnavailable, make_failure
from .scheduling import ScheduledTask, Scheduler
from .types import RecognitionEvent, Transcript

logger = logging.getLogger(__name__)

TranscriptCallback = Callable[[Transcript], None]
FailureCallback = Callable[[RecognitionFailure], None]


class RecognitionSource(Protocol):
    """A continuous speech recognizer.

    ``start`` raises ``RecognitionUnavailable`` when a turn cannot begin.
    Both calls return immediately; results arrive later as events.
    """

    def start(self) -> None: ...

    def stop(self) -> None: ...


class RecognitionSupervisor:
    """Lifecycle owner and staleness filter for one recognition source."""

    def __init__(
        self,
        source: RecognitionSource,
        scheduler: Scheduler,
        config: RecognitionConfig | None = None,
        on_transcript: TranscriptCallback | None = None,
        on_failure: FailureCallback | None = None,
    ):
        self.source = source
        self.scheduler = scheduler
        self.config = config or RecognitionConfig()
        self.on_transcript = on_transcript
        self.on_failure = on_failure

        self.is_listening = False
        self.accept_after = float("-inf")
        self.consecutive_failures = 0
        self._source_active = False
        # `end` events still due from turns stopped on request
        self._owed_ends = 0
        self._turn_started_at = float("-inf")
        self._restart = ScheduledTask(scheduler, name="recognition restart")

    @property
    def restart_pending(self) -> bool:
        return self._restart.armed

    def start(self) -> None:
        """Begin a recognition turn, stopping any turn still running."""
        if self._source_active:
            logger.debug("Stopping previous recognition turn before starting")
            self._stop_source()
        self._restart.cancel()
        self.consecutive_failures = 0
        self.is_listening = True
        self.rearm_guard()
        try:
            self._start_source()
        except RecognitionUnavailable as e:
            self.is_listening = False
            logger.warning(f"Recognition could not start: {e}")
            self._report(make_failure(e.code, str(e)))
            return
        logger.info(f"Listening ({self.config.language_tag})")

    def stop(self) -> None:
        """End the turn on request; accepted results are left untouched."""
        self.is_listening = False
        self._restart.cancel()
        if self._source_active:
            self._stop_source()
            logger.info("Stopped listening")

    def rearm_guard(self) -> None:
        """Ignore anything that arrives within the guard delay from now."""
        self.accept_after = self.scheduler.now() + self.config.guard_delay

    def on_session_started(self) -> None:
        self._source_active = True
        self._turn_started_at = self.scheduler.now()

    def on_result(self, event: RecognitionEvent) -> None:
        if not self.is_listening:
            logger.debug("Result after stop dropped")
            return

        received_at = event.received_at
        if received_at is None:
            received_at = self.scheduler.now()
        if received_at < self.accept_after:
            logger.debug(f"Stale result dropped ({self.accept_after - received_at:.3f}s early)")
            return

        final_text = ""
        interim_text = ""
        for fragment in event.results[event.result_index:]:
            if fragment.is_final:
                final_text += fragment.transcript
            else:
                interim_text += fragment.transcript

        text = final_text or interim_text
        if not text.strip():
            logger.debug("Empty transcript dropped")
            return

        self.consecutive_failures = 0
        if self.on_transcript is not None:
            self.on_transcript(Transcript(text=text, is_final=bool(final_text), received_at=received_at))

    def on_error(self, code: str) -> None:
        """Handle a recognizer error event."""
        if code in self.config.benign_errors:
            logger.debug(f"Benign recognition error: {code}")
            return
        failure = make_failure(code)
        logger.warning(f"Recognition error {failure}")
        self.stop()
        self._report(failure)

    def on_session_ended(self) -> None:
        """Handle the source ending, restarting it if nobody asked it to stop."""
        if self._owed_ends:
            self._owed_ends -= 1
            logger.debug("End of a stopped turn")
            return
        self._source_active = False
        if not self.is_listening:
            logger.debug("Recognition ended after stop")
            return

        lifetime = self.scheduler.now() - self._turn_started_at
        if lifetime < self.config.storm_window:
            self.consecutive_failures += 1
        else:
            self.consecutive_failures = 0
        logger.info(f"Recognition ended unexpectedly after {lifetime:.2f}s, restarting")
        self._schedule_restart()

    def _schedule_restart(self) -> None:
        delays = self.config.restart_delays
        if self.consecutive_failures >= len(delays):
            self._give_up()
            return
        self._restart.arm(delays[self.consecutive_failures], self._restart_turn)

    def _restart_turn(self) -> None:
        if not self.is_listening:
            return
        try:
            self._start_source()
        except RecognitionUnavailable as e:
            self.consecutive_failures += 1
            logger.warning(f"Restart attempt {self.consecutive_failures} failed: {e}")
            self._schedule_restart()
            return
        self.rearm_guard()
        logger.info("Recognition restarted")

    def _give_up(self) -> None:
        logger.warning(f"Giving up after {self.consecutive_failures} failed restarts")
        self.is_listening = False
        self._restart.cancel()
        self._report(make_failure("restart-failed"))

    def _start_source(self) -> None:
        self.source.start()
        self.on_session_started()

    def _stop_source(self) -> None:
        self._source_active = False
        self._owed_ends += 1
        self.source.stop()

    def _report(self, failure: RecognitionFailure) -> None:
        if self.on_failure is not None:
            self.on_failure(failure)
