"""Replay recorded recognizer events against a session on a virtual clock.

A replay script is a JSON document::

    {
      "mode": "sequential",
      "text": "నేను బడికి వెళ్తున్నాను",
      "steps": [
        {"at": 0.5, "action": "result", "results": [{"transcript": "నేను", "is_final": true}]},
        {"at": 1.5, "action": "result", "results": [{"transcript": "బడికి", "is_final": true}]}
      ],
      "tail": 6.0
    }

Steps are applied in time order; ``tail`` keeps the clock running after the
last step so pending timeouts can fire.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, model_validator

from .config import Config
from .errors import RecognitionFailure, RecognitionUnavailable
from .normalize import extract_targets
from .recognition import RecognitionSupervisor
from .scheduling import Scheduler, VirtualScheduler
from .session import DrillSession, PracticeSession, ReadingSession
from .types import ProgressEvent, RecognitionEvent, ResultFragment, SessionSnapshot

logger = logging.getLogger(__name__)

Action = Literal["result", "error", "end", "advance", "finish", "stop", "resume", "reset"]


class ReplayFragment(BaseModel):
    transcript: str
    is_final: bool = False


class ReplayStep(BaseModel):
    """One recognizer event or operator command."""

    at: float = Field(ge=0.0)  # seconds since the run started
    action: Action
    results: list[ReplayFragment] = Field(default_factory=list)
    result_index: int = Field(default=0, ge=0)
    code: str | None = None
    token: str | None = None

    @model_validator(mode="after")
    def _check_payload(self) -> "ReplayStep":
        if self.action == "error" and not self.code:
            raise ValueError("error steps need a code")
        if self.action == "advance" and not self.token:
            raise ValueError("advance steps need a token")
        return self


class ReplayScript(BaseModel):
    """A recorded practice run."""

    mode: Literal["single", "sequential"]
    targets: list[str] = Field(default_factory=list)
    text: str | None = None  # paragraph to extract targets from (sequential)
    steps: list[ReplayStep] = Field(default_factory=list)
    tail: float = Field(default=0.0, ge=0.0)

    @model_validator(mode="after")
    def _check_targets(self) -> "ReplayScript":
        if self.mode == "single" and not self.targets:
            raise ValueError("single mode needs a first target")
        return self

    @classmethod
    def from_json_file(cls, path: Path) -> "ReplayScript":
        """Load a replay script from a JSON file."""
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        return cls.model_validate(data)

    def resolve_targets(self) -> list[str]:
        if self.targets:
            return list(self.targets)
        if self.text:
            return extract_targets(self.text)
        return []


class ScriptedSource:
    """Recognition source that records calls and can refuse to start.

    Once bound to a supervisor, every ``stop`` is followed by an ``end`` event
    on the next scheduler tick, the order a live recognizer reports them in.
    """

    def __init__(self, failures: int = 0):
        self.failures = failures
        self.starts = 0
        self.stops = 0
        self.running = False
        self._listener: RecognitionSupervisor | None = None
        self._scheduler: Scheduler | None = None

    def bind(self, supervisor: RecognitionSupervisor, scheduler: Scheduler) -> None:
        self._listener = supervisor
        self._scheduler = scheduler

    def start(self) -> None:
        if self.failures > 0:
            self.failures -= 1
            raise RecognitionUnavailable("recognizer busy", code="audio-capture")
        self.starts += 1
        self.running = True

    def stop(self) -> None:
        self.stops += 1
        self.running = False
        if self._listener is not None and self._scheduler is not None:
            self._scheduler.call_later(0.0, self._listener.on_session_ended)


@dataclass
class ReplayOutcome:
    """What happened during a replay."""

    targets: list[str]
    snapshot: SessionSnapshot
    events: list[ProgressEvent] = field(default_factory=list)
    errors: list[RecognitionFailure] = field(default_factory=list)


def run_replay(script: ReplayScript, config: Config | None = None) -> ReplayOutcome:
    """Drive a fresh session through ``script`` and return the final state."""
    scheduler = VirtualScheduler()
    source = ScriptedSource()
    events: list[ProgressEvent] = []
    errors: list[RecognitionFailure] = []
    targets = script.resolve_targets()

    session: PracticeSession
    if script.mode == "single":
        session = DrillSession(source, scheduler, config, on_progress=events.append, on_error=errors.append)
    else:
        session = ReadingSession(source, scheduler, config, on_progress=events.append, on_error=errors.append)
    source.bind(session.supervisor, scheduler)

    if isinstance(session, DrillSession):
        session.start(targets[0])
    else:
        session.start(targets)

    for step in sorted(script.steps, key=lambda s: s.at):
        scheduler.advance(max(0.0, step.at - scheduler.now()))
        _apply(session, step)
    scheduler.advance(script.tail)

    return ReplayOutcome(targets=targets, snapshot=session.snapshot, events=events, errors=errors)


def _apply(session: PracticeSession, step: ReplayStep) -> None:
    logger.debug(f"t={step.at:.2f} {step.action}")
    supervisor = session.supervisor
    if step.action == "result":
        fragments = tuple(ResultFragment(f.transcript, f.is_final) for f in step.results)
        supervisor.on_result(RecognitionEvent(results=fragments, result_index=step.result_index))
    elif step.action == "error":
        supervisor.on_error(step.code or "unknown")
    elif step.action == "end":
        supervisor.on_session_ended()
    elif step.action == "stop":
        session.stop()
    elif step.action == "resume":
        session.resume()
    elif step.action == "reset":
        session.reset()
    elif isinstance(session, DrillSession):
        if step.action == "advance":
            session.advance_to_next_target(step.token or "")
        else:
            session.finish()
    else:
        raise ValueError(f"{step.action!r} is only valid in single mode")
