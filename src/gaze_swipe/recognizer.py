"""
Gaze-swipe gesture recognizer.

Consumes a stream of normalized eye-position samples and detects the
gaze-swipe gesture: the gaze enters the right-edge trigger zone and then
moves upward by more than a threshold within a bounded time window,
while still inside the zone.

The recognizer is purely reactive. Timeouts are checked lazily when the
next sample arrives, so no timer is involved; an integrator needing
wall-clock expiry calls expire_if_stale() from its own timer.

Not thread-safe: feed() must be called from a single thread, and never
from inside one of the recognizer's own signal handlers.
"""

import logging
from typing import Optional, Dict, Any, List, Tuple, Union
from enum import Enum
from PyQt6.QtCore import QObject, pyqtSignal

from .config import GestureConfig
from .eye_position import EyePosition, Sample

logger = logging.getLogger(__name__)


class RecognizerState(Enum):
    """Gesture recognizer states."""
    IDLE = "idle"
    TRACKING = "tracking"


class ResetReason(Enum):
    """Reasons a gesture attempt ends."""
    TIMEOUT = "timeout"
    MATCH = "match"
    MANUAL = "manual"


class TrajectoryBuffer:
    """
    Ordered samples collected since the current attempt began.

    Unbounded; the attempt timeout keeps it short in practice.
    """

    def __init__(self):
        self._samples: List[Sample] = []

    def add_sample(self, sample: Sample):
        self._samples.append(sample)

    def clear(self):
        self._samples.clear()

    @property
    def first(self) -> Optional[Sample]:
        return self._samples[0] if self._samples else None

    @property
    def last(self) -> Optional[Sample]:
        return self._samples[-1] if self._samples else None

    @property
    def size(self) -> int:
        return len(self._samples)

    def snapshot(self) -> Tuple[Sample, ...]:
        return tuple(self._samples)

    def vertical_movement(self) -> float:
        """
        Upward displacement from the first to the last sample.

        Positive means the gaze moved up, since y grows downward.
        """
        if not self._samples:
            return 0.0
        return self._samples[0].position.y - self._samples[-1].position.y

    def __len__(self) -> int:
        return len(self._samples)


class GazeSwipeRecognizer(QObject):
    """
    Streaming state machine for the gaze-swipe gesture.

    Signals are delivered synchronously on the calling thread.
    eye_position_changed is always emitted before any state change
    caused by the same sample.
    """

    eye_position_changed = pyqtSignal(object)  # EyePosition
    tracking_state_changed = pyqtSignal(bool)  # Entered / left Tracking
    gesture_detected = pyqtSignal()

    def __init__(self, config: Optional[GestureConfig] = None):
        """
        Initialize recognizer.

        Args:
            config: Gesture thresholds, defaults if omitted
        """
        super().__init__()

        self.config = config or GestureConfig()
        self._state = RecognizerState.IDLE
        self._attempt_start: Optional[float] = None
        self._buffer = TrajectoryBuffer()
        self._feeding = False

        self.stats = self._empty_stats()

        logger.info(f"GazeSwipeRecognizer initialized: edge>{self.config.edge_threshold}, "
                    f"rise>{self.config.vertical_threshold}, "
                    f"min_samples={self.config.min_samples_for_match}, "
                    f"timeout={self.config.attempt_timeout}s")

    @staticmethod
    def _empty_stats() -> Dict[str, int]:
        return {
            'samples_fed': 0,
            'attempts_started': 0,
            'match_evaluations': 0,
            'gestures_detected': 0,
            'timeouts': 0,
            'manual_resets': 0
        }

    @property
    def state(self) -> RecognizerState:
        return self._state

    @property
    def is_tracking(self) -> bool:
        return self._state is RecognizerState.TRACKING

    @property
    def attempt_start(self) -> Optional[float]:
        return self._attempt_start

    @property
    def buffer(self) -> Tuple[Sample, ...]:
        return self._buffer.snapshot()

    def in_trigger_zone(self, position: EyePosition) -> bool:
        return position.in_trigger_zone(self.config.edge_threshold)

    def vertical_movement(self) -> float:
        """Upward displacement of the current attempt, 0.0 when Idle."""
        return self._buffer.vertical_movement()

    def feed(self, sample: Sample):
        """
        Process the next eye-position sample.

        Samples must arrive in non-decreasing timestamp order.

        Args:
            sample: New eye-position sample
        """
        if self._feeding:
            raise RuntimeError("GazeSwipeRecognizer.feed() called from inside a recognizer signal handler")

        self._feeding = True
        try:
            self._process_sample(sample)
        finally:
            self._feeding = False

    def _process_sample(self, sample: Sample):
        self.stats['samples_fed'] += 1
        self.eye_position_changed.emit(sample.position)

        if self._state is RecognizerState.IDLE:
            if self.in_trigger_zone(sample.position):
                self._start_attempt(sample)
            return

        if sample.timestamp - self._attempt_start > self.config.attempt_timeout:
            self.stats['timeouts'] += 1
            self._reset_attempt(ResetReason.TIMEOUT)
            return

        self._buffer.add_sample(sample)

        if self._buffer.size >= self.config.min_samples_for_match and self._check_match():
            self.stats['gestures_detected'] += 1
            logger.info(f"Gaze swipe detected: rise={self.vertical_movement():.3f} "
                        f"over {self._buffer.size} samples")
            self.gesture_detected.emit()
            if self.is_tracking:
                self._reset_attempt(ResetReason.MATCH)

    def _start_attempt(self, sample: Sample):
        self._state = RecognizerState.TRACKING
        self._buffer.clear()
        self._buffer.add_sample(sample)
        self._attempt_start = sample.timestamp
        self.stats['attempts_started'] += 1

        logger.debug(f"Gesture attempt started at ({sample.position.x:.3f}, {sample.position.y:.3f})")
        self.tracking_state_changed.emit(True)

    def _check_match(self) -> bool:
        """
        Match test over the current trajectory.

        The last sample must still be inside the trigger zone, so a swipe
        that drifts away from the edge before completing does not count.
        """
        self.stats['match_evaluations'] += 1
        end = self._buffer.last
        return (self.vertical_movement() > self.config.vertical_threshold and
                self.in_trigger_zone(end.position))

    def _reset_attempt(self, reason: ResetReason):
        self._state = RecognizerState.IDLE
        self._buffer.clear()
        self._attempt_start = None

        logger.debug(f"Gesture attempt reset ({reason.value})")
        self.tracking_state_changed.emit(False)

    def reset(self):
        """
        Abandon any in-progress attempt and return to Idle.

        Emits tracking_state_changed(False) only if an attempt was open.
        """
        if self._state is RecognizerState.IDLE:
            return

        self.stats['manual_resets'] += 1
        self._reset_attempt(ResetReason.MANUAL)

    def expire_if_stale(self, now: float) -> bool:
        """
        Time out the open attempt without waiting for the next sample.

        Intended for an integrator's timer. Never evaluates a match and
        emits no eye_position_changed.

        Args:
            now: Current time on the same clock as sample timestamps

        Returns:
            True if an attempt was expired
        """
        if self._state is not RecognizerState.TRACKING:
            return False

        if now - self._attempt_start <= self.config.attempt_timeout:
            return False

        self.stats['timeouts'] += 1
        self._reset_attempt(ResetReason.TIMEOUT)
        return True

    def configure(self, config: Union[GestureConfig, Dict[str, Any]]):
        """
        Replace the gesture thresholds.

        An attempt already in progress is kept and judged by the new
        thresholds from its next sample on.

        Args:
            config: New configuration or settings dictionary
        """
        if isinstance(config, dict):
            config = GestureConfig.from_dict(config)

        self.config = config
        if self.is_tracking:
            logger.warning("Gesture thresholds changed while an attempt is in progress")
        logger.info(f"Gesture configuration updated: {config.to_dict()}")

    def get_statistics(self) -> Dict[str, Any]:
        """
        Get recognition statistics.

        Returns:
            Dictionary with statistics
        """
        stats = self.stats.copy()
        stats.update({
            'state': self._state.value,
            'buffer_size': self._buffer.size,
            'attempt_start': self._attempt_start
        })
        return stats

    def reset_statistics(self):
        self.stats = self._empty_stats()
