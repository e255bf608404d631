"""
Eye-position samples and sample sources.

Defines the normalized eye-position data structures consumed by the
gesture recognizer, helpers that reduce eye landmarks to a single
position estimate, and a mock source for running without a camera.

The landmark pipeline itself (camera capture, face detection, landmark
inference) lives upstream; this module only covers its output contract.
"""

import time
import random
import logging
from typing import Optional, Callable, Sequence, Tuple, Dict, Any
from dataclasses import dataclass

import numpy as np
from PyQt6.QtCore import QObject, pyqtSignal, QTimer

from .config import DEFAULT_SAMPLE_RATE_HZ, DEFAULT_EDGE_THRESHOLD

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EyePosition:
    """Normalized screen position of the gaze."""
    x: float  # Fraction of screen width (0-1, may overshoot)
    y: float  # Fraction of screen height (0-1, grows downward)

    def in_trigger_zone(self, edge_threshold: float = DEFAULT_EDGE_THRESHOLD) -> bool:
        """Check if the position lies strictly past the edge threshold."""
        return self.x > edge_threshold


@dataclass(frozen=True)
class Sample:
    """A timestamped eye-position estimate."""
    position: EyePosition
    timestamp: float  # Seconds, monotonic within a session

    @classmethod
    def at(cls, x: float, y: float, timestamp: float) -> 'Sample':
        return cls(EyePosition(x, y), timestamp)


def eye_center(points: Sequence[Tuple[float, float]]) -> Tuple[float, float]:
    """
    Calculate the center of one eye from its landmark points.

    Args:
        points: Normalized (x, y) or (x, y, z) landmark points outlining the eye

    Returns:
        Mean (x, y) of the points

    Raises:
        ValueError: If points is empty or not a list of points
    """
    coords = np.asarray(points, dtype=float)
    if coords.size == 0:
        raise ValueError("Cannot compute eye center from empty landmark list")
    if coords.ndim != 2 or coords.shape[1] < 2:
        raise ValueError(f"Eye landmarks must be a list of (x, y[, z]) points, got shape {coords.shape}")

    # Extra coordinates such as landmark depth are ignored
    center = coords[:, :2].mean(axis=0)
    return float(center[0]), float(center[1])


def average_eye_position(left_points: Sequence[Tuple[float, float]],
                         right_points: Sequence[Tuple[float, float]]) -> EyePosition:
    """
    Derive a single eye position from both eyes' landmarks.

    Args:
        left_points: Left eye landmark points
        right_points: Right eye landmark points

    Returns:
        Average of the two eye centers
    """
    left_x, left_y = eye_center(left_points)
    right_x, right_y = eye_center(right_points)
    return EyePosition(x=(left_x + right_x) / 2, y=(left_y + right_y) / 2)


class EyePositionCallback:
    """Adapts landmark payloads from the vision pipeline into samples."""

    def __init__(self, callback_func: Callable[[Sample], None],
                 clock: Callable[[], float] = time.monotonic):
        """
        Initialize callback with processing function.

        Args:
            callback_func: Function to call with each sample
            clock: Timestamp source used when a payload carries none
        """
        self.callback_func = callback_func
        self.clock = clock

    def __call__(self, landmarks: Optional[Dict[str, Any]]):
        """Process one frame's landmark payload."""
        if not landmarks:
            logger.debug("No face detected")
            return

        left_eye = landmarks.get('left_eye')
        right_eye = landmarks.get('right_eye')

        try:
            # Landmarks may be numpy arrays, so no truth tests
            if left_eye is None or right_eye is None or len(left_eye) == 0 or len(right_eye) == 0:
                logger.debug("No eye landmarks detected")
                return

            position = average_eye_position(left_eye, right_eye)
            timestamp = landmarks.get('timestamp')
            if timestamp is None:
                timestamp = self.clock()
        except (ValueError, TypeError) as e:
            logger.error(f"Error processing eye landmarks: {e}")
            return

        self.callback_func(Sample(position, timestamp))


class MockEyePositionSource(QObject):
    """
    Timer-driven sample source for running without a camera.

    'idle' mode wanders around the screen center and never reaches
    the trigger zone. 'swipe' mode repeats the calibration path: the
    gaze looks away, dwells at the right edge, then sweeps upward.
    """

    sample_ready = pyqtSignal(object)  # Sample
    status_changed = pyqtSignal(bool)  # Source available / unavailable
    error_occurred = pyqtSignal(str)  # Error message

    MODES = ('idle', 'swipe')

    # Calibration path: look away, dwell at (0.97, 0.5), then sweep up to y=0.1
    SWIPE_X = 0.97
    SWIPE_START_Y = 0.5
    SWIPE_END_Y = 0.1
    SWIPE_AWAY_SAMPLES = 35
    SWIPE_DWELL_SAMPLES = 5
    SWIPE_SWEEP_SAMPLES = 15

    def __init__(self, mode: str = 'swipe', sample_rate: int = DEFAULT_SAMPLE_RATE_HZ,
                 noise: float = 0.005, clock: Callable[[], float] = time.monotonic,
                 rng: Optional[random.Random] = None):
        super().__init__()
        if mode not in self.MODES:
            raise ValueError(f"Unknown mock mode: {mode}")
        if sample_rate <= 0:
            raise ValueError(f"Sample rate must be positive, got {sample_rate}")

        self.mode = mode
        self.sample_rate = sample_rate
        self.noise = noise
        self.clock = clock
        self.rng = rng or random.Random()
        self.is_running = False
        self._step = 0

        self.timer = QTimer()
        self.timer.timeout.connect(self.generate_sample)

    def start(self) -> bool:
        """Start emitting samples at the configured rate."""
        self._step = 0
        self.is_running = True
        self.timer.start(max(1, int(1000 / self.sample_rate)))
        self.status_changed.emit(True)
        logger.info(f"Mock eye-position source started ({self.mode}, {self.sample_rate} Hz)")
        return True

    def stop(self):
        self.timer.stop()
        self.is_running = False
        logger.info("Mock eye-position source stopped")

    def simulate_failure(self, message: str = "Front camera not available"):
        """Stop producing samples and report the source as unavailable."""
        self.stop()
        logger.error(f"Mock source failure: {message}")
        self.status_changed.emit(False)
        self.error_occurred.emit(message)

    def generate_sample(self) -> Sample:
        """Produce and emit the next sample of the current mode."""
        if self.mode == 'swipe':
            x, y = self._swipe_position(self._step)
        else:
            x, y = self.rng.uniform(0.2, 0.8), self.rng.uniform(0.2, 0.8)

        x += self.rng.gauss(0.0, self.noise)
        y += self.rng.gauss(0.0, self.noise)
        self._step += 1

        sample = Sample.at(x, y, self.clock())
        self.sample_ready.emit(sample)
        return sample

    def _swipe_position(self, step: int) -> Tuple[float, float]:
        rest = self.SWIPE_AWAY_SAMPLES + self.SWIPE_DWELL_SAMPLES
        phase = step % (rest + self.SWIPE_SWEEP_SAMPLES)

        # Looking away long enough lets a leftover attempt time out
        if phase < self.SWIPE_AWAY_SAMPLES:
            return 0.5, self.SWIPE_START_Y
        if phase < rest:
            return self.SWIPE_X, self.SWIPE_START_Y

        progress = (phase - rest + 1) / self.SWIPE_SWEEP_SAMPLES
        y = self.SWIPE_START_Y + (self.SWIPE_END_Y - self.SWIPE_START_Y) * progress
        return self.SWIPE_X, y
