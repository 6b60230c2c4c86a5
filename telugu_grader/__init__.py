"""
Telugu Grader - real-time pronunciation matching for Telugu practice.

This library turns a stream of speech recognition events into pass/fail
decisions and drives exercise progression for word drills and continuous
paragraph reading.

Modules:
    types: Type definitions and data structures
    normalize: Text normalization and target extraction
    scorer: Tiered similarity scoring
    scheduling: Cancellable delayed actions on an injectable clock
    recognition: Recognition session supervision
    progression: Single-target and sequential state machines
    session: Supervisor and machine wired together for the UI
"""

from .config import Config, ProgressionConfig, RecognitionConfig, SpeechConfig, load_config
from .errors import (
    ErrorKind,
    RecognitionFailure,
    RecognitionUnavailable,
    TeluguGraderError,
    classify_error,
)
from .normalize import TELUGU_BLOCK, extract_targets, normalize, split_candidates
from .progression import ProgressionMachine, SequentialReader, SingleTargetDrill, TimeoutSupervisor
from .recognition import RecognitionSource, RecognitionSupervisor
from .scheduling import AsyncioScheduler, ScheduledTask, Scheduler, VirtualScheduler
from .scorer import ScorerConfig, best_score, score
from .session import DrillSession, PracticeSession, ReadingSession
from .speech import SpeakOptions, SpeechSynthesizer, speak_target
from .types import (
    ProgressEvent,
    ProgressKind,
    RecognitionEvent,
    ResultFragment,
    RunState,
    ScoreTally,
    SessionSnapshot,
    TokenResult,
    Transcript,
)

__version__ = "0.1.0"

__all__ = [
    # Types
    "TokenResult",
    "RunState",
    "ProgressKind",
    "ProgressEvent",
    "ScoreTally",
    "ResultFragment",
    "RecognitionEvent",
    "Transcript",
    "SessionSnapshot",
    # Config
    "Config",
    "RecognitionConfig",
    "ProgressionConfig",
    "SpeechConfig",
    "load_config",
    # Errors
    "ErrorKind",
    "RecognitionFailure",
    "RecognitionUnavailable",
    "TeluguGraderError",
    "classify_error",
    # Normalize
    "TELUGU_BLOCK",
    "normalize",
    "split_candidates",
    "extract_targets",
    # Scorer
    "ScorerConfig",
    "score",
    "best_score",
    # Scheduling
    "Scheduler",
    "ScheduledTask",
    "VirtualScheduler",
    "AsyncioScheduler",
    # Recognition
    "RecognitionSource",
    "RecognitionSupervisor",
    # Progression
    "ProgressionMachine",
    "SingleTargetDrill",
    "SequentialReader",
    "TimeoutSupervisor",
    # Sessions
    "PracticeSession",
    "DrillSession",
    "ReadingSession",
    # Speech
    "SpeakOptions",
    "SpeechSynthesizer",
    "speak_target",
]
