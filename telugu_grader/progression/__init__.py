"""Progression state machines for single-target and sequential practice."""

from .base import ProgressCallback, ProgressionMachine
from .sequential import SequentialReader, TimeoutSupervisor
from .single import SingleTargetDrill

__all__ = [
    "ProgressCallback",
    "ProgressionMachine",
    "SequentialReader",
    "SingleTargetDrill",
    "TimeoutSupervisor",
]
