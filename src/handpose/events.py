"""
Feedback cues emitted by the engine.
The engine only reports what happened; a FeedbackSink decides what to do
with it (play a tone, flash a widget, log it).
"""
from collections import Counter
from dataclasses import dataclass
from enum import Enum, auto
import logging
from typing import Protocol, runtime_checkable

from .skeleton import HandSide

logger = logging.getLogger(__name__)


class CueKind(Enum):
    """Kinds of one-shot feedback events."""
    GESTURE_ACTIVATED = auto()  # detail = gesture name
    PINCH = auto()              # detail = finger id
    THROW = auto()


@dataclass(frozen=True)
class Cue:
    kind: CueKind
    side: HandSide
    detail: str = ""

    def __str__(self) -> str:
        suffix = f" ({self.detail})" if self.detail else ""
        return f"{self.side.value} {self.kind.name.lower()}{suffix}"


@runtime_checkable
class FeedbackSink(Protocol):
    """Collaborator that turns cues into user feedback."""

    def on_cue(self, cue: Cue) -> None:
        ...


class LoggingFeedback:
    """Feedback sink that logs cues instead of playing them."""

    def __init__(self, level: int = logging.INFO):
        self._level = level
        self.counts: Counter = Counter()

    def on_cue(self, cue: Cue) -> None:
        self.counts[cue.kind] += 1
        logger.log(self._level, "Cue: %s (#%d)", cue, self.counts[cue.kind])

    def reset_counters(self) -> None:
        self.counts.clear()
