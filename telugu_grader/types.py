"""Type definitions and data structures for Telugu pronunciation matching."""

from dataclasses import dataclass, field
from enum import Enum


class TokenResult(str, Enum):
    """Outcome recorded for one target token."""

    PENDING = "pending"
    CORRECT = "correct"
    INCORRECT = "incorrect"


class RunState(str, Enum):
    """Lifecycle state of a practice run."""

    IDLE = "idle"
    LISTENING = "listening"
    STOPPED = "stopped"
    COMPLETED = "completed"


class ProgressKind(str, Enum):
    """Kinds of notifications emitted by a progression machine."""

    STARTED = "started"
    READY_TO_ADVANCE = "ready_to_advance"
    MARKED_INCORRECT = "marked_incorrect"
    ADVANCED = "advanced"
    TIMED_OUT = "timed_out"
    COMPLETED = "completed"
    RESET = "reset"


@dataclass(frozen=True)
class ScoreTally:
    """Running count of resolved tokens."""

    correct: int = 0
    total: int = 0

    def record(self, correct: bool) -> "ScoreTally":
        return ScoreTally(
            correct=self.correct + (1 if correct else 0),
            total=self.total + 1,
        )


@dataclass(frozen=True)
class ResultFragment:
    """One recognizer result: its best transcript and whether it is final."""

    transcript: str
    is_final: bool = False


@dataclass(frozen=True)
class RecognitionEvent:
    """A `result` event as emitted by a continuous recognizer.

    Only fragments from ``result_index`` onward are new in this event.
    ``received_at`` is the arrival time on the scheduler clock; None means
    "now".
    """

    results: tuple[ResultFragment, ...]
    result_index: int = 0
    received_at: float | None = None


@dataclass(frozen=True)
class Transcript:
    """A filtered transcript handed to a progression machine."""

    text: str
    is_final: bool
    received_at: float


@dataclass(frozen=True)
class ProgressEvent:
    """Notification emitted on every progression transition."""

    kind: ProgressKind
    index: int
    token: str | None = None
    score: float | None = None


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of a practice run for the UI layer."""

    state: RunState
    current_index: int
    current_target: str | None
    results: dict[int, TokenResult] = field(default_factory=dict)
    is_listening: bool = False
    is_processing: bool = False
    tally: ScoreTally = field(default_factory=ScoreTally)

    def result_for(self, index: int) -> TokenResult:
        """Return the recorded result, PENDING for tokens not yet resolved."""
        return self.results.get(index, TokenResult.PENDING)

    @property
    def is_completed(self) -> bool:
        return self.state is RunState.COMPLETED
