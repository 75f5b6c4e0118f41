"""
Background worker driving the gesture engine.
Runs in a separate QThread and publishes results through Qt signals.
"""
import logging
import time
from typing import Dict, Optional

from PyQt5.QtCore import QObject, pyqtSignal

from .engine import FrameResult, GestureEngine
from .events import CueKind
from .skeleton import HandSide

logger = logging.getLogger(__name__)


class GestureWorker(QObject):
    """
    Worker class that ticks the engine at a fixed rate.
    Emits signals for UI / audio updates.
    """
    # Signals
    frame_processed = pyqtSignal(object)      # Emits FrameResult
    gesture_activated = pyqtSignal(object)    # Emits Cue
    throw_detected = pyqtSignal(object)       # Emits Cue
    projectiles_updated = pyqtSignal(object)  # Emits list of ProjectileView
    hand_lost = pyqtSignal(object)            # Emits HandSide
    error = pyqtSignal(str)
    finished = pyqtSignal()                   # Tick loop has exited

    def __init__(
        self,
        engine: GestureEngine,
        tick_rate_hz: float = 90.0,
        duration: Optional[float] = None,
        parent=None,
    ):
        super().__init__(parent)
        self._engine = engine
        self._tick_rate_hz = tick_rate_hz
        self._duration = duration
        self._is_running = False
        self._tracked: Dict[HandSide, bool] = {side: False for side in HandSide}
        self._had_projectiles = False
        self.tick_count = 0

    @property
    def is_running(self) -> bool:
        return self._is_running

    def step(self, now: Optional[float] = None) -> FrameResult:
        """Run one engine tick and emit its signals."""
        result = self._engine.tick(now)
        self.tick_count += 1

        for side, report in result.hands.items():
            if self._tracked[side] and not report.tracked:
                self.hand_lost.emit(side)
            self._tracked[side] = report.tracked

        for cue in result.cues:
            if cue.kind == CueKind.GESTURE_ACTIVATED:
                self.gesture_activated.emit(cue)
            elif cue.kind == CueKind.THROW:
                self.throw_detected.emit(cue)

        # Also emit the empty list once so renderers can clear the last projectile
        if result.projectiles or self._had_projectiles:
            self.projectiles_updated.emit(result.projectiles)
        self._had_projectiles = bool(result.projectiles)
        self.frame_processed.emit(result)
        return result

    def start_process(self):
        """
        Main processing loop. Runs in worker thread at tick_rate_hz until
        stop_process() or until the optional duration has elapsed.
        """
        duration = self._duration
        self._is_running = True
        min_interval = 1.0 / self._tick_rate_hz
        started = time.perf_counter()
        logger.info("Gesture worker started at %.0f Hz", self._tick_rate_hz)

        try:
            while self._is_running:
                loop_start = time.perf_counter()
                if duration is not None and loop_start - started >= duration:
                    break

                self.step()

                # Precise timing to hit the tick rate
                elapsed = time.perf_counter() - loop_start
                sleep_time = min_interval - elapsed
                if sleep_time > 0:
                    time.sleep(sleep_time)

        except Exception as e:
            logger.exception("Gesture worker failed")
            self.error.emit(f"Worker Exception: {str(e)}")
        finally:
            self._is_running = False
            logger.info("Gesture worker stopped after %d ticks", self.tick_count)
            self.finished.emit()

    def stop_process(self):
        """Signal the loop to stop."""
        self._is_running = False
