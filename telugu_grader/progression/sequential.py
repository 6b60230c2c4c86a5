"""Sequential progression for continuous paragraph reading.

Targets are consumed strictly left to right. A transcript is only ever
scored against the current target, so a clearly spoken later word never
skips the ones before it. Only the word timeout marks a token incorrect;
live transcripts can advance but never penalise, since interim results are
often partial.

States::

    IDLE -> LISTENING -> (per token: PENDING -> CORRECT | INCORRECT) -> COMPLETED
              |   ^
              v   |
             STOPPED
"""

import logging
from collections.abc import Callable, Sequence

from ..normalize import split_candidates
from ..scheduling import ScheduledTask, Scheduler
from ..scorer import score
from ..types import ProgressKind, RunState, ScoreTally, TokenResult
from .base import ProgressionMachine

logger = logging.getLogger(__name__)


class TimeoutSupervisor:
    """One cancellable word timeout, bound to the index it was armed for."""

    def __init__(self, scheduler: Scheduler, duration: float, on_expire: Callable[[int], None]):
        self.duration = duration
        self.on_expire = on_expire
        self.armed_index: int | None = None
        self._task = ScheduledTask(scheduler, name="word timeout")

    @property
    def armed(self) -> bool:
        return self._task.armed

    def arm(self, index: int) -> None:
        self.armed_index = index
        self._task.arm(self.duration, self._fire, index)

    def cancel(self) -> None:
        self.armed_index = None
        self._task.cancel()

    def _fire(self, index: int) -> None:
        self.armed_index = None
        self.on_expire(index)


class SequentialReader(ProgressionMachine):
    """Progression over a whole target sequence with a silence timeout."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._targets: tuple[str, ...] = ()
        self._timeout = TimeoutSupervisor(self.scheduler, self.config.word_timeout, self._on_timeout)
        self._settle = ScheduledTask(self.scheduler, name="settle")

    @property
    def name(self) -> str:
        return "sequential"

    @property
    def threshold(self) -> float:
        return self.config.sequential_threshold

    @property
    def targets(self) -> tuple[str, ...]:
        return self._targets

    @property
    def current_target(self) -> str | None:
        if self._current_index < len(self._targets):
            return self._targets[self._current_index]
        return None

    @property
    def timeout(self) -> TimeoutSupervisor:
        return self._timeout

    def start(self, sequence: Sequence[str]) -> None:
        """Begin a run over ``sequence`` from its first token."""
        self._cancel_pending()
        self._targets = tuple(sequence)
        self._current_index = 0
        self._results = {}
        self._tally = ScoreTally()
        self._processing = False

        if not self._targets:
            self._state = RunState.COMPLETED
            logger.info("Empty sequence, nothing to read")
            self._emit(ProgressKind.COMPLETED, 0)
            return

        self._state = RunState.LISTENING
        self._timeout.arm(0)
        logger.info(f"Reading {len(self._targets)} words, starting with {self._targets[0]!r}")
        self._emit(ProgressKind.STARTED, 0, self._targets[0])

    def on_transcript(self, text: str, is_final: bool = True) -> bool:
        if self._state is not RunState.LISTENING:
            logger.debug("Transcript ignored: reader is not listening")
            return False
        if self._processing:
            logger.debug("Transcript ignored: still settling after the last advance")
            return False

        expected = self._targets[self._current_index]
        for candidate in split_candidates(text):
            value = score(candidate, expected, self.scorer_config)
            logger.debug(f"{candidate!r} vs {expected!r} = {value:.2f}")
            if self.accepts(value):
                self._processing = True
                self._advance(TokenResult.CORRECT, value)
                if self._state is RunState.LISTENING:
                    self._settle.arm(self.config.settle_delay, self._settled)
                else:
                    self._processing = False
                return True
        return False

    def stop(self) -> None:
        """Pause: no timeouts fire while stopped; progress is kept."""
        if self._state is not RunState.LISTENING:
            return
        self._cancel_pending()
        self._processing = False
        self._state = RunState.STOPPED
        logger.info(f"Reading paused at index {self._current_index}")

    def resume(self) -> None:
        if self._state is not RunState.STOPPED:
            return
        self._state = RunState.LISTENING
        self._timeout.arm(self._current_index)
        logger.info(f"Reading resumed at index {self._current_index}")

    def reset(self) -> None:
        self._cancel_pending()
        self._targets = ()
        self._current_index = 0
        self._results = {}
        self._tally = ScoreTally()
        self._processing = False
        self._state = RunState.IDLE
        self._emit(ProgressKind.RESET, 0)

    def _advance(self, result: TokenResult, value: float | None) -> None:
        # The old timeout must be gone before the index moves.
        self._timeout.cancel()
        index = self._current_index
        token = self._targets[index]
        self._results[index] = result
        self._tally = self._tally.record(result is TokenResult.CORRECT)
        self._current_index = index + 1

        kind = ProgressKind.ADVANCED if result is TokenResult.CORRECT else ProgressKind.TIMED_OUT
        logger.info(f"{token!r} {result.value}, {self._tally.correct}/{self._tally.total}")

        if self._current_index < len(self._targets):
            self._timeout.arm(self._current_index)
            self._emit(kind, self._current_index, token, value)
            return

        self._state = RunState.COMPLETED
        self._emit(kind, self._current_index, token, value)
        logger.info(f"Reading complete: {self._tally.correct}/{self._tally.total}")
        self._emit(ProgressKind.COMPLETED, self._current_index)

    def _on_timeout(self, index: int) -> None:
        if self._state is not RunState.LISTENING or index != self._current_index:
            logger.warning(f"Stale timeout for index {index} ignored (current {self._current_index})")
            return
        logger.info(f"No match for {self._targets[index]!r} within {self._timeout.duration:.1f}s")
        self._advance(TokenResult.INCORRECT, None)

    def _settled(self) -> None:
        self._processing = False

    def _cancel_pending(self) -> None:
        self._timeout.cancel()
        self._settle.cancel()
