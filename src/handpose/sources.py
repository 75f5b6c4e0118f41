"""
Skeleton sources: the tracking side of the engine.

The engine pulls ``latest_skeleton(side)`` once per hand per tick. Real
tracking back ends implement the same one-method protocol; the sources here
cover debugging and demos without hardware:

- StaticSource: frames assigned by hand
- ScriptedSource: a timeline of named poses with optional wrist motion
- ReplaySource: a YAML recording played back against the clock
"""
from bisect import bisect_right
from dataclasses import dataclass
import logging
from pathlib import Path
import time
from typing import Callable, Dict, List, Optional, Protocol, Sequence, Tuple, runtime_checkable

import numpy as np
import yaml

from .poses import DEFAULT_ORIGINS, make_pose
from .skeleton import HandSide, JointFrame

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


@runtime_checkable
class SkeletonSource(Protocol):
    """Tracking collaborator."""

    def latest_skeleton(self, side: HandSide) -> Optional[JointFrame]:
        """Most recent skeleton for a hand, or None when it is not tracked."""
        ...


class StaticSource:
    """Source whose frames are set explicitly."""

    def __init__(self, left: Optional[JointFrame] = None, right: Optional[JointFrame] = None):
        self._frames: Dict[HandSide, Optional[JointFrame]] = {
            HandSide.LEFT: left,
            HandSide.RIGHT: right,
        }

    def set(self, side: HandSide, frame: Optional[JointFrame]) -> None:
        self._frames[side] = frame

    def clear(self) -> None:
        for side in HandSide:
            self._frames[side] = None

    def latest_skeleton(self, side: HandSide) -> Optional[JointFrame]:
        return self._frames[side]


class _TimelineSource:
    """Shared clock handling for sources that play back over time."""

    def __init__(self, clock: Optional[Clock] = None):
        self._clock = clock or time.perf_counter
        self._t0: Optional[float] = None

    def restart(self) -> None:
        self._t0 = self._clock()

    def elapsed(self) -> float:
        if self._t0 is None:
            self.restart()
        return self._clock() - self._t0

    def latest_skeleton(self, side: HandSide) -> Optional[JointFrame]:
        return self.frame_at(side, self.elapsed())

    def frame_at(self, side: HandSide, t: float) -> Optional[JointFrame]:
        raise NotImplementedError

    @property
    def duration(self) -> float:
        raise NotImplementedError


@dataclass(frozen=True)
class ScriptStep:
    """
    From ``start`` seconds on, ``side`` holds ``pose`` (None = not tracked)
    while the wrist drifts at ``velocity`` m/s from ``origin``.
    """
    start: float
    side: HandSide
    pose: Optional[str]
    velocity: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    origin: Optional[Tuple[float, float, float]] = None


class ScriptedSource(_TimelineSource):
    """Plays a list of ScriptSteps."""

    def __init__(self, steps: Sequence[ScriptStep], clock: Optional[Clock] = None, end: Optional[float] = None):
        super().__init__(clock)
        self._steps: Dict[HandSide, List[ScriptStep]] = {side: [] for side in HandSide}
        for step in sorted(steps, key=lambda s: s.start):
            self._steps[step.side].append(step)
        last_start = max((s.start for s in steps), default=0.0)
        self._end = end if end is not None else last_start + 1.0

    @property
    def duration(self) -> float:
        return self._end

    def frame_at(self, side: HandSide, t: float) -> Optional[JointFrame]:
        steps = self._steps[side]
        idx = bisect_right([s.start for s in steps], t) - 1
        if idx < 0 or t > self._end:
            return None
        step = steps[idx]
        if step.pose is None:
            return None
        origin = np.asarray(step.origin or DEFAULT_ORIGINS[side], dtype=float)
        origin = origin + np.asarray(step.velocity, dtype=float) * (t - step.start)
        return make_pose(step.pose, side=side, origin=origin)


def demo_script() -> List[ScriptStep]:
    """
    A short routine exercising every gesture:
    right hand makes a Spider, flicks it forward twice, then signs peace;
    left hand shows a closed and an open V sign and briefly leaves view.
    """
    right, left = HandSide.RIGHT, HandSide.LEFT
    flick = (0.3, 0.6, -2.5)
    # Drift back to the start over 0.8 s, well under the throw speed
    recover = (-0.075, -0.15, 0.625)
    flick_end = (0.26, 1.32, -0.9)
    return [
        ScriptStep(0.0, right, "open"),
        ScriptStep(0.8, right, "spider"),
        ScriptStep(1.5, right, "spider", velocity=flick),
        ScriptStep(1.7, right, "spider", velocity=recover, origin=flick_end),
        ScriptStep(2.5, right, "spider", velocity=flick),
        ScriptStep(2.7, right, "spider", velocity=recover, origin=flick_end),
        ScriptStep(3.2, right, "fist"),
        ScriptStep(3.8, right, "peace"),
        ScriptStep(0.0, left, None),
        ScriptStep(0.5, left, "relaxed"),
        ScriptStep(1.2, left, "peace_closed"),
        ScriptStep(2.0, left, "peace"),
        ScriptStep(3.0, left, None),
        ScriptStep(3.6, left, "fist"),
    ]


class ReplaySource(_TimelineSource):
    """
    Plays back a YAML recording.

    Format::

        rate_hz: 90
        frames:
          - time: 0.0
            left: null
            right: {joints: {wrist: [x, y, z], ...}, origin: [[...4x4...]]}
    """

    def __init__(self, frames: Sequence[Dict], clock: Optional[Clock] = None):
        super().__init__(clock)
        ordered = sorted(frames, key=lambda f: float(f.get("time", 0.0)))
        self._times = [float(f.get("time", 0.0)) for f in ordered]
        self._frames: List[Dict[HandSide, Optional[JointFrame]]] = []
        for entry in ordered:
            self._frames.append({
                side: JointFrame.from_dict(entry[side.value]) if entry.get(side.value) else None
                for side in HandSide
            })

    @classmethod
    def from_file(cls, path: Path, clock: Optional[Clock] = None) -> "ReplaySource":
        with open(path, 'r') as f:
            data = yaml.safe_load(f) or {}
        frames = data.get("frames") or []
        logger.info("Loaded %d recorded frames from %s", len(frames), path)
        return cls(frames, clock=clock)

    @property
    def duration(self) -> float:
        return self._times[-1] if self._times else 0.0

    def __len__(self) -> int:
        return len(self._frames)

    def frame_at(self, side: HandSide, t: float) -> Optional[JointFrame]:
        idx = bisect_right(self._times, t) - 1
        if idx < 0:
            return None
        return self._frames[idx][side]


def record_frames(source: _TimelineSource, path: Path, rate_hz: float = 90.0) -> int:
    """
    Sample a timeline source at ``rate_hz`` and write a replay recording.

    Returns:
        Number of frames written.
    """
    step = 1.0 / rate_hz
    count = int(round(source.duration * rate_hz, 6)) + 1
    frames = []
    for i in range(count):
        t = round(i * step, 6)
        entry = {"time": t}
        for side in HandSide:
            frame = source.frame_at(side, t)
            entry[side.value] = frame.to_dict() if frame is not None else None
        frames.append(entry)

    with open(path, 'w') as f:
        yaml.safe_dump({"rate_hz": rate_hz, "frames": frames}, f, sort_keys=False)
    logger.info("Recorded %d frames to %s", len(frames), path)
    return len(frames)
