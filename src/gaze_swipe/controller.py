"""
Gaze-swipe session controller.

Connects an eye-position source to a GazeSwipeRecognizer and exposes the
session-level controls a UI needs: start/stop consuming samples,
calibration reset, gesture counters and source status.

Sources are any QObject providing sample_ready(object),
status_changed(bool) and error_occurred(str) signals, such as
MockEyePositionSource or a camera/landmark pipeline adapter. Sources
running on a worker thread must deliver sample_ready through a queued
connection so that all feed() calls land on this object's thread.
"""

import time
import logging
from typing import Optional, Callable
from dataclasses import dataclass, asdict
from PyQt6.QtCore import QObject, pyqtSignal, QTimer

from .config import GestureConfig, STALE_ATTEMPT_CHECK_INTERVAL_MS
from .eye_position import Sample
from .recognizer import GazeSwipeRecognizer

logger = logging.getLogger(__name__)


@dataclass
class SessionStats:
    """Counters for one gaze-swipe session."""
    samples_consumed: int = 0
    successful_gestures: int = 0
    attempts_started: int = 0
    attempts_abandoned: int = 0
    last_gesture_time: Optional[float] = None
    source_available: bool = True


class GazeSwipeController(QObject):
    """
    Session wiring between an eye-position source and the recognizer.

    Re-emits the recognizer's events and adds a human-readable status
    message stream for the UI.
    """

    eye_position_changed = pyqtSignal(object)  # EyePosition
    tracking_state_changed = pyqtSignal(bool)
    gesture_detected = pyqtSignal()
    status_changed = pyqtSignal(str)  # Status message
    statistics_updated = pyqtSignal(object)  # SessionStats

    def __init__(self, recognizer: Optional[GazeSwipeRecognizer] = None,
                 config: Optional[GestureConfig] = None,
                 clock: Callable[[], float] = time.monotonic,
                 enable_watchdog: bool = False):
        """
        Initialize controller.

        Args:
            recognizer: Recognizer to drive, created from config if omitted
            config: Gesture thresholds for a newly created recognizer
            clock: Time source, must match the sample timestamps
            enable_watchdog: Expire stale attempts on a timer instead of
                waiting for the next sample
        """
        super().__init__()

        self.recognizer = recognizer or GazeSwipeRecognizer(config)
        self.source = None
        self.clock = clock
        self.is_active = False
        self.stats = SessionStats()
        self.status_message = "Initializing..."
        self._matched = False

        self.recognizer.eye_position_changed.connect(self.eye_position_changed)
        self.recognizer.tracking_state_changed.connect(self._on_tracking_state_changed)
        self.recognizer.gesture_detected.connect(self._on_gesture_detected)

        self.watchdog_enabled = enable_watchdog
        self.watchdog_timer = QTimer()
        self.watchdog_timer.timeout.connect(self.check_stale_attempt)

        logger.info("GazeSwipeController initialized")

    def set_source(self, source: QObject):
        """
        Attach the eye-position source.

        Args:
            source: Object emitting sample_ready, status_changed and error_occurred
        """
        if self.source is not None:
            self.source.sample_ready.disconnect(self.consume_sample)
            self.source.status_changed.disconnect(self._on_source_status)
            self.source.error_occurred.disconnect(self._on_source_error)

        self.source = source
        source.sample_ready.connect(self.consume_sample)
        source.status_changed.connect(self._on_source_status)
        source.error_occurred.connect(self._on_source_error)

        logger.info(f"Eye-position source set: {type(source).__name__}")

    def start(self) -> bool:
        """
        Start consuming samples.

        Returns:
            True if the controller is consuming afterwards
        """
        if self.is_active:
            return True

        self.is_active = True
        if self.watchdog_enabled:
            self.watchdog_timer.start(STALE_ATTEMPT_CHECK_INTERVAL_MS)

        self._set_status("Tracking Started")
        return True

    def stop(self):
        """Stop consuming samples and abandon any open attempt."""
        if not self.is_active:
            return

        self.is_active = False
        self.watchdog_timer.stop()
        self.recognizer.reset()
        self._set_status("Tracking Stopped")

    def toggle_tracking(self) -> bool:
        """
        Flip between consuming and not consuming samples.

        Returns:
            New active state
        """
        if self.is_active:
            self.stop()
        else:
            self.start()
        return self.is_active

    def start_calibration(self):
        """Clear any in-progress attempt before a calibration run."""
        logger.info("Starting calibration")
        self.recognizer.reset()
        self._set_status("Calibrating")

    def reset_counters(self):
        """Zero the session counters and abandon any open attempt."""
        available = self.stats.source_available
        self.recognizer.reset()
        self.stats = SessionStats(source_available=available)
        self.statistics_updated.emit(self.stats)
        self._set_status("Counters Reset")

    def consume_sample(self, sample: Sample):
        """
        Forward one sample to the recognizer if the session is active.

        Args:
            sample: Eye-position sample from the source
        """
        if not self.is_active:
            return

        self.stats.samples_consumed += 1
        self.recognizer.feed(sample)

    def check_stale_attempt(self) -> bool:
        """
        Expire an attempt whose time window has passed.

        Returns:
            True if an attempt was expired
        """
        return self.recognizer.expire_if_stale(self.clock())

    def get_statistics(self) -> dict:
        stats = asdict(self.stats)
        stats['is_active'] = self.is_active
        stats['recognizer'] = self.recognizer.get_statistics()
        return stats

    def _on_tracking_state_changed(self, is_tracking: bool):
        if is_tracking:
            self.stats.attempts_started += 1
        elif self._matched:
            self._matched = False
        else:
            self.stats.attempts_abandoned += 1
        self.tracking_state_changed.emit(is_tracking)

    def _on_gesture_detected(self):
        self.stats.successful_gestures += 1
        self.stats.last_gesture_time = self.clock()
        self._matched = True
        logger.info(f"Gesture #{self.stats.successful_gestures} detected")

        self.gesture_detected.emit()
        self.statistics_updated.emit(self.stats)

    def _on_source_status(self, available: bool):
        self.stats.source_available = available
        if available:
            self._set_status("Tracking available")
        else:
            self.recognizer.reset()
            self._set_status("Tracking unavailable")

    def _on_source_error(self, message: str):
        logger.error(f"Eye-position source error: {message}")
        self._set_status(f"Tracking unavailable: {message}")

    def _set_status(self, message: str):
        self.status_message = message
        logger.info(f"Status: {message}")
        self.status_changed.emit(message)
