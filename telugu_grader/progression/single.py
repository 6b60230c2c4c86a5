"""Single-target progression for word-at-a-time dictation drills.

One expected token is current at a time. A good enough transcript marks it
correct and tells the caller it may advance; advancing is always the
caller's decision. A poor final transcript marks it incorrect and leaves it
current so the learner can retry.
"""

import logging

from ..scorer import score
from ..types import ProgressKind, RunState, ScoreTally, TokenResult
from .base import ProgressionMachine

logger = logging.getLogger(__name__)


class SingleTargetDrill(ProgressionMachine):
    """Progression over externally supplied targets, one at a time."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._target: str | None = None
        self._armed = False

    @property
    def name(self) -> str:
        return "single"

    @property
    def threshold(self) -> float:
        return self.config.single_threshold

    @property
    def current_target(self) -> str | None:
        return self._target

    @property
    def armed(self) -> bool:
        """Whether the current target can still be resolved as correct."""
        return self._armed

    def start(self, target: str) -> None:
        """Begin a new run with ``target`` at index 0."""
        self._target = target
        self._current_index = 0
        self._results = {}
        self._tally = ScoreTally()
        self._processing = False
        self._armed = True
        self._state = RunState.LISTENING
        logger.info(f"Drill started with {target!r}")
        self._emit(ProgressKind.STARTED, 0, target)

    def on_transcript(self, text: str, is_final: bool = True) -> bool:
        if self._state is not RunState.LISTENING or self._target is None:
            logger.debug("Transcript ignored: drill is not listening")
            return False
        if self._processing or not self._armed:
            logger.debug(f"Transcript ignored: index {self._current_index} already resolved")
            return False

        index = self._current_index
        value = score(text, self._target, self.scorer_config)
        logger.debug(f"{text!r} vs {self._target!r} = {value:.2f}")

        if self.accepts(value):
            self._processing = True
            self._armed = False
            self._results[index] = TokenResult.CORRECT
            self._tally = self._tally.record(True)
            logger.info(f"Correct: {self._target!r} ({value:.2f})")
            self._emit(ProgressKind.READY_TO_ADVANCE, index, self._target, value)
            self._processing = False
            return True

        if is_final:
            self._results[index] = TokenResult.INCORRECT
            logger.info(f"Incorrect: heard {text!r} for {self._target!r} ({value:.2f})")
            self._emit(ProgressKind.MARKED_INCORRECT, index, self._target, value)
        return False

    def advance_to_next_target(self, token: str) -> None:
        """Make ``token`` current at the next index."""
        if self._state in (RunState.IDLE, RunState.COMPLETED):
            raise ValueError(f"cannot advance a drill in state {self._state.value}")
        self._current_index += 1
        self._target = token
        self._armed = True
        self._processing = False
        logger.info(f"Next target {token!r} at index {self._current_index}")
        self._emit(ProgressKind.ADVANCED, self._current_index, token)

    def finish(self) -> None:
        """End the run after the last target."""
        if self._state is RunState.COMPLETED:
            return
        self._state = RunState.COMPLETED
        self._armed = False
        self._processing = False
        logger.info(f"Drill complete: {self._tally.correct}/{self._tally.total}")
        self._emit(ProgressKind.COMPLETED, self._current_index, self._target)

    def stop(self) -> None:
        if self._state is RunState.LISTENING:
            self._state = RunState.STOPPED
            self._processing = False

    def resume(self) -> None:
        if self._state is RunState.STOPPED:
            self._state = RunState.LISTENING

    def reset(self) -> None:
        """Clear results and tally; the current target stays."""
        self._current_index = 0
        self._results = {}
        self._tally = ScoreTally()
        self._processing = False
        self._armed = self._target is not None
        if self._state is RunState.COMPLETED:
            self._state = RunState.STOPPED
        self._emit(ProgressKind.RESET, 0, self._target)
