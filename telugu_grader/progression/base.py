"""Base class for progression state machines."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable

from ..config import ProgressionConfig
from ..scheduling import Scheduler
from ..scorer import DEFAULT_CONFIG, ScorerConfig
from ..types import ProgressEvent, ProgressKind, RunState, ScoreTally, SessionSnapshot, TokenResult

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ProgressEvent], None]


class ProgressionMachine(ABC):
    """Turns transcripts into per-token results and drives progression.

    Subclasses own the transitions; this class owns the session state and
    exposes it read-only through ``snapshot``. Every entry point re-reads the
    current state instead of relying on values captured earlier.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        config: ProgressionConfig | None = None,
        scorer_config: ScorerConfig = DEFAULT_CONFIG,
        on_progress: ProgressCallback | None = None,
    ):
        self.scheduler = scheduler
        self.config = config or ProgressionConfig()
        self.scorer_config = scorer_config
        self.on_progress = on_progress

        self._state = RunState.IDLE
        self._current_index = 0
        self._results: dict[int, TokenResult] = {}
        self._tally = ScoreTally()
        self._processing = False

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the mode name for logging."""
        pass

    @property
    @abstractmethod
    def threshold(self) -> float:
        """Score a fragment must exceed to count as correct."""
        pass

    @property
    @abstractmethod
    def current_target(self) -> str | None:
        pass

    @abstractmethod
    def on_transcript(self, text: str, is_final: bool = True) -> bool:
        """Feed one transcript.

        Returns:
            True if the transcript resolved the current target as correct.
        """
        pass

    @abstractmethod
    def stop(self) -> None:
        """Pause the run, keeping progress."""
        pass

    @abstractmethod
    def resume(self) -> None:
        """Continue a paused run."""
        pass

    @abstractmethod
    def reset(self) -> None:
        pass

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def tally(self) -> ScoreTally:
        return self._tally

    @property
    def is_processing(self) -> bool:
        return self._processing

    def accepts(self, score: float) -> bool:
        """Strictly above the threshold; a score equal to it is not correct."""
        return score > self.threshold

    def snapshot(self, is_listening: bool | None = None) -> SessionSnapshot:
        if is_listening is None:
            is_listening = self._state is RunState.LISTENING
        return SessionSnapshot(
            state=self._state,
            current_index=self._current_index,
            current_target=self.current_target,
            results=dict(self._results),
            is_listening=is_listening,
            is_processing=self._processing,
            tally=self._tally,
        )

    def _emit(self, kind: ProgressKind, index: int, token: str | None = None, score: float | None = None) -> None:
        logger.debug(f"[{self.name}] {kind.value} index={index} token={token!r}")
        if self.on_progress is not None:
            self.on_progress(ProgressEvent(kind=kind, index=index, token=token, score=score))
