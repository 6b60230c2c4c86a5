"""Pytest configuration and fixtures for telugu_grader tests."""

import pytest

from telugu_grader.config import Config
from telugu_grader.replay import ScriptedSource
from telugu_grader.scheduling import VirtualScheduler
from telugu_grader.speech import SpeakOptions
from telugu_grader.types import ProgressEvent, RecognitionEvent, ResultFragment


def final(text: str, at: float | None = None) -> RecognitionEvent:
    """A result event carrying one final fragment."""
    return RecognitionEvent(results=(ResultFragment(text, is_final=True),), received_at=at)


def interim(text: str, at: float | None = None) -> RecognitionEvent:
    """A result event carrying one interim fragment."""
    return RecognitionEvent(results=(ResultFragment(text, is_final=False),), received_at=at)


class RecordingSynthesizer:
    """Synthesizer that remembers what it was asked to say."""

    def __init__(self) -> None:
        self.spoken: list[tuple[str, SpeakOptions]] = []

    def speak(self, text: str, options: SpeakOptions) -> None:
        self.spoken.append((text, options))


@pytest.fixture
def scheduler() -> VirtualScheduler:
    """A virtual clock starting at t=0."""
    return VirtualScheduler()


@pytest.fixture
def source() -> ScriptedSource:
    """A recognition source that always starts."""
    return ScriptedSource()


@pytest.fixture
def config() -> Config:
    """Default configuration, independent of the environment."""
    return Config(_env_file=None)


@pytest.fixture
def progress_log() -> list[ProgressEvent]:
    """List to collect progress notifications into."""
    return []


@pytest.fixture
def telugu_sentence() -> list[str]:
    """"I am going to school" as a target sequence."""
    return ["నేను", "బడికి", "వెళ్తున్నాను"]


@pytest.fixture
def synthesizer() -> RecordingSynthesizer:
    return RecordingSynthesizer()
