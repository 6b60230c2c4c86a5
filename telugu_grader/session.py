"""Practice sessions: a recognition supervisor wired to a progression machine.

A session is the surface the UI talks to. It accepts commands (start, stop,
resume, reset and, for drills, advance/finish), exposes a read-only
``snapshot`` and reports recognizer failures on a separate error channel.
Nothing raised inside a recognizer callback is caught here; the engine
itself never raises across this boundary.

The recognizer adapter forwards its events to ``session.supervisor``.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence

from .config import Config
from .errors import RecognitionFailure
from .progression import ProgressCallback, ProgressionMachine, SequentialReader, SingleTargetDrill
from .recognition import RecognitionSource, RecognitionSupervisor
from .scheduling import Scheduler
from .scorer import DEFAULT_CONFIG, ScorerConfig
from .speech import SpeakOptions, SpeechSynthesizer, speak_target
from .types import ProgressEvent, ProgressKind, RunState, SessionSnapshot, Transcript

logger = logging.getLogger(__name__)

ErrorCallback = Callable[[RecognitionFailure], None]

# Transitions after which the previous turn's words must not count
_GUARDED = (ProgressKind.ADVANCED, ProgressKind.TIMED_OUT, ProgressKind.RESET)


class PracticeSession(ABC):
    """Shared wiring for drill and reading sessions."""

    machine: ProgressionMachine

    def __init__(
        self,
        source: RecognitionSource,
        scheduler: Scheduler,
        config: Config | None = None,
        scorer_config: ScorerConfig = DEFAULT_CONFIG,
        on_progress: ProgressCallback | None = None,
        on_error: ErrorCallback | None = None,
        synthesizer: SpeechSynthesizer | None = None,
    ):
        self.config = config or Config()
        self.scheduler = scheduler
        self.on_progress = on_progress
        self.on_error = on_error
        self.synthesizer = synthesizer
        self.last_error: RecognitionFailure | None = None

        self.supervisor = RecognitionSupervisor(
            source,
            scheduler,
            self.config.recognition,
            on_transcript=self._handle_transcript,
            on_failure=self._handle_failure,
        )
        self.machine = self._build_machine(scorer_config)

    @abstractmethod
    def _build_machine(self, scorer_config: ScorerConfig) -> ProgressionMachine:
        pass

    @abstractmethod
    def reset(self) -> None:
        pass

    @property
    def snapshot(self) -> SessionSnapshot:
        return self.machine.snapshot(is_listening=self.supervisor.is_listening)

    def stop(self) -> None:
        """Stop listening and pause the run; progress is kept."""
        self.supervisor.stop()
        self.machine.stop()

    def resume(self) -> None:
        """Retry after a stop or a reported failure."""
        if self.machine.state is not RunState.STOPPED:
            return
        self.last_error = None
        self.machine.resume()
        self.supervisor.start()

    def play_target(self) -> None:
        """Speak the current target through the synthesizer, if one is set."""
        token = self.machine.current_target
        if self.synthesizer is None or token is None:
            return
        speak_target(self.synthesizer, token, SpeakOptions.from_config(self.config.speech))

    def _handle_transcript(self, transcript: Transcript) -> None:
        self.machine.on_transcript(transcript.text, transcript.is_final)

    def _handle_progress(self, event: ProgressEvent) -> None:
        if event.kind in _GUARDED:
            self.supervisor.rearm_guard()
        elif event.kind is ProgressKind.COMPLETED:
            self.supervisor.stop()
        if self.on_progress is not None:
            self.on_progress(event)

    def _handle_failure(self, failure: RecognitionFailure) -> None:
        self.last_error = failure
        self.machine.stop()
        if self.on_error is not None:
            self.on_error(failure)


class DrillSession(PracticeSession):
    """Word-at-a-time dictation drill."""

    machine: SingleTargetDrill

    def _build_machine(self, scorer_config: ScorerConfig) -> SingleTargetDrill:
        return SingleTargetDrill(
            self.scheduler,
            self.config.progression,
            scorer_config,
            on_progress=self._handle_progress,
        )

    def start(self, target: str) -> None:
        self.last_error = None
        self.machine.start(target)
        self.supervisor.start()

    def advance_to_next_target(self, token: str) -> None:
        self.machine.advance_to_next_target(token)

    def finish(self) -> None:
        self.machine.finish()

    def reset(self) -> None:
        """Clear results and tally, keep the current target and listening state."""
        self.last_error = None
        self.machine.reset()


class ReadingSession(PracticeSession):
    """Continuous paragraph reading over a whole target sequence."""

    machine: SequentialReader

    def _build_machine(self, scorer_config: ScorerConfig) -> SequentialReader:
        return SequentialReader(
            self.scheduler,
            self.config.progression,
            scorer_config,
            on_progress=self._handle_progress,
        )

    def start(self, sequence: Sequence[str]) -> None:
        self.last_error = None
        self.supervisor.stop()
        self.machine.start(sequence)
        if self.machine.state is RunState.LISTENING:
            self.supervisor.start()

    def reset(self) -> None:
        """Stop listening and discard the run."""
        self.last_error = None
        self.supervisor.stop()
        self.machine.reset()
