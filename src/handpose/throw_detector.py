"""
Wrist-velocity throw detection.

While the Spider pose is held the wrist position is sampled every tick into a
small FIFO. When the wrist speed over the most recent samples crosses a
threshold a throw fires, and the hand is locked out for a cooldown so one
continuous flick does not re-trigger on consecutive ticks.

The estimate is a plain finite difference between the oldest and newest
sample of the window; no filtering.
"""
from collections import deque
from dataclasses import dataclass
from typing import Deque, List, NamedTuple, Optional

import numpy as np

from .config import ThrowConfig
from .skeleton import Vector, as_vector


@dataclass(frozen=True, eq=False)
class MotionSample:
    """Wrist position at a point in time."""
    position: np.ndarray
    timestamp: float


class ThrowResult(NamedTuple):
    is_throw: bool
    velocity: np.ndarray

    @property
    def speed(self) -> float:
        return float(np.linalg.norm(self.velocity))


def _no_throw() -> ThrowResult:
    return ThrowResult(False, np.zeros(3))


class ThrowDetector:
    """
    Per-hand throw detector.

    Holds at most ``buffer_size`` samples (oldest evicted first) and the
    timestamp of the last throw.
    """

    def __init__(self, config: Optional[ThrowConfig] = None):
        self._config = config or ThrowConfig()
        self._samples: Deque[MotionSample] = deque(maxlen=self._config.buffer_size)
        self._last_throw_time: Optional[float] = None

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def add_sample(self, position: Vector, time: float) -> None:
        """Append a wrist sample; the oldest one drops out past capacity."""
        self._samples.append(MotionSample(as_vector(position), float(time)))

    def reset(self) -> None:
        """Forget buffered motion. The cooldown timestamp survives."""
        self._samples.clear()

    # ------------------------------------------------------------------
    # Detection
    # ------------------------------------------------------------------

    def in_cooldown(self, now: float) -> bool:
        if self._last_throw_time is None:
            return False
        return now - self._last_throw_time <= self._config.cooldown

    def estimate_velocity(self) -> Optional[np.ndarray]:
        """
        Finite-difference velocity over the most recent window.

        Returns:
            Velocity in m/s, or None if there are too few samples or the
            window spans no measurable time.
        """
        window = self._config.min_samples
        if len(self._samples) < window:
            return None

        recent = list(self._samples)[-window:]
        oldest, newest = recent[0], recent[-1]
        dt = newest.timestamp - oldest.timestamp
        if dt <= self._config.min_time_delta:
            return None

        return (newest.position - oldest.position) / dt

    def detect_throw(self, now: float) -> ThrowResult:
        """
        Check whether the buffered motion is a throw.

        Args:
            now: Current clock time, used for the cooldown.

        Returns:
            ThrowResult(True, velocity) when the wrist speed exceeds the
            threshold, else ThrowResult(False, zero vector).
        """
        if self.in_cooldown(now):
            return _no_throw()

        velocity = self.estimate_velocity()
        if velocity is None:
            return _no_throw()

        if float(np.linalg.norm(velocity)) > self._config.speed_threshold:
            self._last_throw_time = now
            return ThrowResult(True, velocity)

        return _no_throw()

    # ------------------------------------------------------------------
    # Reading helpers
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._samples)

    @property
    def samples(self) -> List[MotionSample]:
        """Buffered samples, oldest first."""
        return list(self._samples)

    @property
    def last_throw_time(self) -> Optional[float]:
        return self._last_throw_time
