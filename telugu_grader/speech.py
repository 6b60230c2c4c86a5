"""Text-to-speech collaborator interface."""

import logging
from dataclasses import dataclass
from typing import Protocol

from .config import SpeechConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SpeakOptions:
    language_tag: str = "te-IN"
    rate: float = 0.75
    pitch: float = 1.1

    @classmethod
    def from_config(cls, config: SpeechConfig) -> "SpeakOptions":
        return cls(language_tag=config.language_tag, rate=config.rate, pitch=config.pitch)


class SpeechSynthesizer(Protocol):
    """Plays text aloud. Fire-and-forget; nothing is returned."""

    def speak(self, text: str, options: SpeakOptions) -> None: ...


def speak_target(synthesizer: SpeechSynthesizer, token: str, options: SpeakOptions | None = None) -> None:
    """Play a target token with the configured voice settings."""
    options = options or SpeakOptions()
    logger.info(f"Speaking {token!r} ({options.language_tag}, rate {options.rate})")
    synthesizer.speak(token, options)
