"""Configuration loading for telugu-grader."""

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings


class RecognitionConfig(BaseModel):
    """Speech recognition source and supervisor settings.

    Only ``aborted`` is ignored by default, so ``no-speech`` stops listening and
    pauses a reading run until it is resumed. Add ``"no-speech"`` to
    ``benign_errors`` to let a silent reader be timed forward word by word
    instead, as the browser reading screen does.
    """

    continuous: bool = True
    interim_results: bool = True
    language_tag: str = "te-IN"
    max_alternatives: int = 3
    guard_delay: float = Field(default=0.2, ge=0.0)  # seconds
    # Delay before the n-th consecutive restart attempt; its length bounds retries
    restart_delays: tuple[float, ...] = (0.5, 1.0, 2.0)
    storm_window: float = Field(default=1.0, ge=0.0)
    benign_errors: tuple[str, ...] = ("aborted",)

    @field_validator("restart_delays")
    @classmethod
    def _non_negative_delays(cls, value: tuple[float, ...]) -> tuple[float, ...]:
        if any(delay < 0 for delay in value):
            raise ValueError("restart delays must be non-negative")
        return value


class ProgressionConfig(BaseModel):
    """Acceptance thresholds and timings for the progression machines."""

    # Word drills are lenient; paragraph reading is strict because false
    # positives compound over a long sequence.
    single_threshold: float = Field(default=0.2, ge=0.0, le=1.0)
    sequential_threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    word_timeout: float = Field(default=5.0, gt=0.0)
    settle_delay: float = Field(default=0.5, ge=0.0)

    @model_validator(mode="after")
    def _settle_before_timeout(self) -> "ProgressionConfig":
        # A word timeout must never fire while an advance is still settling
        if self.settle_delay >= self.word_timeout:
            raise ValueError("settle_delay must be shorter than word_timeout")
        return self


class SpeechConfig(BaseModel):
    """Text-to-speech settings for target playback."""

    language_tag: str = "te-IN"
    rate: float = 0.75
    pitch: float = 1.1


class Config(BaseSettings):
    """Application configuration."""

    recognition: RecognitionConfig = Field(default_factory=RecognitionConfig)
    progression: ProgressionConfig = Field(default_factory=ProgressionConfig)
    speech: SpeechConfig = Field(default_factory=SpeechConfig)
    log_level: str = "INFO"

    model_config = {
        "env_file": ".env",
        "env_prefix": "TELUGU_GRADER_",
        "env_nested_delimiter": "__",
        "extra": "ignore",
    }


def load_config() -> Config:
    """Load configuration from environment."""
    return Config()
