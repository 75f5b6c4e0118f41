"""
Per-tick orchestration of the gesture pipeline.

Each tick reads the latest skeleton of both hands, classifies them,
derives one-shot cues from state transitions, feeds the throw detector while
the Spider pose is held and advances the projectiles. Left and right hands
keep completely separate state.
"""
from dataclasses import dataclass, field
import logging
import threading
import time
from typing import Callable, Dict, List, Mapping, Optional

import numpy as np

from .classifier import (
    FingerMetric,
    GestureFlags,
    GestureState,
    classify_gestures,
    default_finger_metrics,
    detect_pinch_edges,
)
from .config import Config
from .events import Cue, CueKind, FeedbackSink
from .features import orb_anchor
from .projectile import ProjectileSimulator, ProjectileView
from .skeleton import HandSide, Joint, JointFrame
from .sources import SkeletonSource
from .throw_detector import ThrowDetector

logger = logging.getLogger(__name__)


@dataclass
class HandState:
    """Everything the engine remembers about one hand between ticks."""
    side: HandSide
    throw_detector: ThrowDetector = field(default_factory=ThrowDetector)
    metrics: List[FingerMetric] = field(default_factory=default_finger_metrics)
    gesture: GestureState = field(default_factory=GestureState)
    pinching: Dict[str, bool] = field(default_factory=dict)
    orb_position: Optional[np.ndarray] = None
    tracked: bool = False

    def mark_lost(self) -> None:
        """Missing skeleton: neutral metrics, no gestures, no orb, empty throw buffer."""
        self.gesture.update(GestureFlags())
        self.metrics = default_finger_metrics()
        self.pinching = {}
        self.orb_position = None
        self.throw_detector.reset()
        self.tracked = False


@dataclass(frozen=True, eq=False)
class HandReport:
    side: HandSide
    tracked: bool
    finger_metrics: List[FingerMetric]
    gesture_state: GestureState
    orb_position: Optional[np.ndarray] = None
    throw_velocity: Optional[np.ndarray] = None


@dataclass(frozen=True, eq=False)
class FrameResult:
    """Output of one tick."""
    timestamp: float
    hands: Dict[HandSide, HandReport]
    cues: List[Cue]
    projectiles: List[ProjectileView]


class GestureEngine:
    """
    Frame orchestrator.

    Call ``tick()`` once per frame from a single driver (render loop, timer
    or the GestureWorker). Concurrent callers are serialized.
    """

    def __init__(
        self,
        config: Config,
        source: SkeletonSource,
        clock: Callable[[], float] = time.perf_counter,
        feedback: Optional[FeedbackSink] = None,
        hands: Optional[Mapping[HandSide, HandState]] = None,
    ):
        self._config = config
        self._source = source
        self._clock = clock
        self._feedback = feedback
        self._lock = threading.Lock()
        self._projectiles = ProjectileSimulator(config.projectile)
        if hands is None:
            hands = {side: self._new_hand(side) for side in HandSide}
        self._hands: Dict[HandSide, HandState] = dict(hands)
        self.show_joints = config.display.show_joints

    def _new_hand(self, side: HandSide) -> HandState:
        return HandState(side=side, throw_detector=ThrowDetector(self._config.throw))

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def tick(self, now: Optional[float] = None) -> FrameResult:
        """Run the pipeline for both hands and advance projectiles."""
        with self._lock:
            if now is None:
                now = self._clock()

            cues: List[Cue] = []
            reports = {}
            for side, hand in self._hands.items():
                reports[side] = self._update_hand(hand, now, cues)

            projectiles = self._projectiles.advance(now)

        for cue in cues:
            self._notify(cue)

        return FrameResult(timestamp=now, hands=reports, cues=cues, projectiles=projectiles)

    def _read_skeleton(self, side: HandSide) -> Optional[JointFrame]:
        try:
            return self._source.latest_skeleton(side)
        except Exception:
            logger.warning("Skeleton source failed for %s hand", side.value, exc_info=True)
            return None

    def _update_hand(self, hand: HandState, now: float, cues: List[Cue]) -> HandReport:
        side = hand.side
        frame = self._read_skeleton(side)

        if frame is None:
            if hand.tracked:
                logger.debug("%s hand lost", side.value)
            hand.mark_lost()
            return HandReport(side, False, list(hand.metrics), hand.gesture.snapshot())

        if not hand.tracked:
            logger.debug("%s hand tracked", side.value)
        hand.tracked = True

        reading = classify_gestures(frame, self._config.classifier)

        for gesture in hand.gesture.update(reading.flags):
            logger.debug("%s hand: %s activated", side.value, gesture.value)
            cues.append(Cue(CueKind.GESTURE_ACTIVATED, side, gesture.value))

        for finger_id in detect_pinch_edges(hand.pinching, reading.metrics):
            logger.debug("%s hand: %s pinch", side.value, finger_id)
            cues.append(Cue(CueKind.PINCH, side, finger_id))
        hand.pinching = {m.id: m.is_pinching for m in reading.metrics}
        hand.metrics = reading.metrics

        throw_velocity = None
        if hand.gesture.spider_active:
            hand.orb_position = orb_anchor(frame, side, self._config.projectile.orb_offset)
            hand.throw_detector.add_sample(frame.world_position(Joint.WRIST), now)
            result = hand.throw_detector.detect_throw(now)
            if result.is_throw:
                logger.info("%s hand throw at %.2f m/s", side.value, result.speed)
                self._projectiles.launch(hand.orb_position, result.velocity, now, side=side)
                cues.append(Cue(CueKind.THROW, side))
                throw_velocity = result.velocity
                # The orb leaves with the projectile; it is re-anchored next tick
                hand.orb_position = None
        else:
            hand.throw_detector.reset()
            hand.orb_position = None

        return HandReport(
            side=side,
            tracked=True,
            finger_metrics=list(hand.metrics),
            gesture_state=hand.gesture.snapshot(),
            orb_position=hand.orb_position,
            throw_velocity=throw_velocity,
        )

    def _notify(self, cue: Cue) -> None:
        if self._feedback is None:
            return
        try:
            self._feedback.on_cue(cue)
        except Exception:
            logger.exception("Feedback sink failed on cue %s", cue)

    # ------------------------------------------------------------------
    # Published state
    # ------------------------------------------------------------------
    # Accessors take the tick lock; readers may be on another thread.

    def finger_metrics(self, side: HandSide) -> List[FingerMetric]:
        with self._lock:
            return list(self._hands[side].metrics)

    def gesture_state(self, side: HandSide) -> GestureState:
        with self._lock:
            return self._hands[side].gesture.snapshot()

    @property
    def any_spider_active(self) -> bool:
        with self._lock:
            return any(h.gesture.spider_active for h in self._hands.values())

    @property
    def any_peace_active(self) -> bool:
        with self._lock:
            return any(h.gesture.peace_active for h in self._hands.values())

    def active_projectiles(self) -> List[ProjectileView]:
        with self._lock:
            return self._projectiles.active_projectiles()

    def orb_position(self, side: HandSide) -> Optional[np.ndarray]:
        with self._lock:
            return self._hands[side].orb_position

    def hand(self, side: HandSide) -> HandState:
        """Live per-hand state; only safe to inspect from the tick thread."""
        return self._hands[side]

    def reset(self) -> None:
        """Drop all per-hand state and live projectiles."""
        with self._lock:
            self._hands = {side: self._new_hand(side) for side in self._hands}
            self._projectiles.clear()
