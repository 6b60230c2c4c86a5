"""Error taxonomy for recognition failures."""

from dataclasses import dataclass
from enum import Enum


class TeluguGraderError(Exception):
    """Base class for errors raised by telugu_grader."""


class RecognitionUnavailable(TeluguGraderError):
    """Raised by a recognition source that cannot start a turn."""

    def __init__(self, message: str, code: str = "unknown"):
        super().__init__(message)
        self.code = code


class ErrorKind(str, Enum):
    """Recognizer error codes plus engine-level failures."""

    NO_SPEECH = "no-speech"
    ABORTED = "aborted"
    AUDIO_CAPTURE = "audio-capture"
    NETWORK = "network"
    NOT_ALLOWED = "not-allowed"
    SERVICE_NOT_ALLOWED = "service-not-allowed"
    BAD_GRAMMAR = "bad-grammar"
    LANGUAGE_NOT_SUPPORTED = "language-not-supported"
    RESTART_FAILED = "restart-failed"
    UNKNOWN = "unknown"


_DETAILS = {
    ErrorKind.NO_SPEECH: "No speech was detected. Please speak clearly and try again.",
    ErrorKind.ABORTED: "Speech recognition was aborted.",
    ErrorKind.AUDIO_CAPTURE: "No microphone was found or it could not be opened.",
    ErrorKind.NETWORK: "Speech recognition needs a network connection.",
    ErrorKind.NOT_ALLOWED: "Microphone permission was denied.",
    ErrorKind.SERVICE_NOT_ALLOWED: "The speech recognition service is not allowed.",
    ErrorKind.BAD_GRAMMAR: "The recognition grammar was rejected.",
    ErrorKind.LANGUAGE_NOT_SUPPORTED: "The recognition language is not supported.",
    ErrorKind.RESTART_FAILED: "Speech recognition stopped and could not be restarted.",
    ErrorKind.UNKNOWN: "Speech recognition failed.",
}


@dataclass(frozen=True)
class RecognitionFailure:
    """Reported failure delivered on the session's error channel."""

    kind: ErrorKind
    detail: str
    code: str

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.detail}"


def classify_error(code: str) -> ErrorKind:
    """Map a raw recognizer error code to an ErrorKind."""
    try:
        return ErrorKind(code.strip().lower())
    except ValueError:
        return ErrorKind.UNKNOWN


def make_failure(code: str, detail: str | None = None) -> RecognitionFailure:
    """Build a failure notification with a human-readable detail."""
    kind = classify_error(code)
    return RecognitionFailure(kind=kind, detail=detail or _DETAILS[kind], code=code)
