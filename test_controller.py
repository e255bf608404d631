#!/usr/bin/env python3
"""
Test script for the gaze-swipe session controller.

Tests session wiring between an eye-position source and the recognizer:
- Start/stop consumption and tracking toggles
- Gesture counters and counter reset
- Source status and error reporting
- Stale-attempt watchdog
"""

import sys
import os

# Add src directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))

from PyQt6.QtCore import QCoreApplication, QObject, pyqtSignal

from gaze_swipe.config import GestureConfig
from gaze_swipe.controller import GazeSwipeController, SessionStats
from gaze_swipe.eye_position import Sample, MockEyePositionSource

SWIPE_PATH = [
    (0.0, 0.96, 0.50),
    (0.1, 0.97, 0.45),
    (0.2, 0.97, 0.40),
    (0.3, 0.96, 0.32),
    (0.4, 0.97, 0.28),
]


class ScriptedSource(QObject):
    """Eye-position source that emits exactly the samples it is given."""

    sample_ready = pyqtSignal(object)
    status_changed = pyqtSignal(bool)
    error_occurred = pyqtSignal(str)

    def emit_path(self, path):
        for t, x, y in path:
            self.sample_ready.emit(Sample.at(x, y, t))


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


_APP = None


def _ensure_app():
    global _APP
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    _APP = app
    return app


def _make_controller(**kwargs):
    _ensure_app()
    clock = kwargs.pop('clock', FakeClock())
    controller = GazeSwipeController(clock=clock, **kwargs)
    source = ScriptedSource()
    controller.set_source(source)

    events = []
    controller.eye_position_changed.connect(lambda pos: events.append('position'))
    controller.tracking_state_changed.connect(lambda tracking: events.append(('tracking', tracking)))
    controller.gesture_detected.connect(lambda: events.append('gesture'))
    controller.status_changed.connect(lambda message: events.append(('status', message)))
    return controller, source, events


def test_inactive_controller_ignores_samples():
    print("Testing inactive controller...")
    controller, source, events = _make_controller()

    source.emit_path(SWIPE_PATH)

    assert events == []
    assert controller.stats.samples_consumed == 0
    assert not controller.recognizer.is_tracking
    print("✓ Samples before start() are dropped")


def test_gesture_counted():
    print("Testing gesture counting...")
    clock = FakeClock(12.5)
    controller, source, events = _make_controller(clock=clock)

    controller.start()
    source.emit_path(SWIPE_PATH)

    assert events.count('gesture') == 1
    assert events.count('position') == 5
    assert controller.stats.successful_gestures == 1
    assert controller.stats.attempts_started == 1
    assert controller.stats.attempts_abandoned == 0
    assert controller.stats.samples_consumed == 5
    assert controller.stats.last_gesture_time == 12.5
    print("✓ Gesture forwarded and counted")


def test_abandoned_attempt_counted():
    controller, source, _ = _make_controller()

    controller.start()
    source.emit_path([(0.0, 0.96, 0.5), (2.0, 0.5, 0.5)])

    assert controller.stats.attempts_started == 1
    assert controller.stats.attempts_abandoned == 1
    assert controller.stats.successful_gestures == 0


def test_stop_resets_attempt():
    print("Testing stop during an attempt...")
    controller, source, events = _make_controller()

    controller.start()
    source.emit_path(SWIPE_PATH[:3])
    assert controller.recognizer.is_tracking

    controller.stop()

    assert not controller.is_active
    assert not controller.recognizer.is_tracking
    assert ('tracking', False) in events
    assert events[-1] == ('status', "Tracking Stopped")

    source.emit_path(SWIPE_PATH[3:])
    assert controller.stats.samples_consumed == 3
    print("✓ Stopping abandons the attempt and stops consumption")


def test_toggle_tracking():
    controller, _, events = _make_controller()

    assert controller.toggle_tracking() is True
    assert controller.toggle_tracking() is False
    assert [e for e in events if e[0] == 'status'] == [
        ('status', "Tracking Started"),
        ('status', "Tracking Stopped")
    ]


def test_reset_counters():
    print("Testing counter reset...")
    controller, source, events = _make_controller()

    controller.start()
    source.emit_path(SWIPE_PATH)
    source.emit_path([(0.5, 0.97, 0.5)])
    assert controller.recognizer.is_tracking

    controller.reset_counters()

    assert controller.stats == SessionStats()
    assert not controller.recognizer.is_tracking
    assert controller.status_message == "Counters Reset"
    assert controller.is_active
    print("✓ Counters zeroed and open attempt abandoned")


def test_start_calibration_resets_attempt():
    controller, source, _ = _make_controller()

    controller.start()
    source.emit_path(SWIPE_PATH[:2])
    controller.start_calibration()

    assert not controller.recognizer.is_tracking
    assert controller.status_message == "Calibrating"


def test_source_unavailable():
    print("Testing source failure reporting...")
    controller, source, _ = _make_controller()

    controller.start()
    source.emit_path(SWIPE_PATH[:2])
    source.status_changed.emit(False)
    source.error_occurred.emit("Front camera not available")

    assert not controller.stats.source_available
    assert not controller.recognizer.is_tracking
    assert controller.status_message == "Tracking unavailable: Front camera not available"

    source.status_changed.emit(True)
    assert controller.stats.source_available
    print("✓ Source failure surfaced as tracking unavailable")


def test_mock_source_failure_through_controller():
    controller, _, _ = _make_controller()
    mock = MockEyePositionSource()
    controller.set_source(mock)

    controller.start()
    mock.start()
    mock.simulate_failure("No face detected")

    assert controller.status_message == "Tracking unavailable: No face detected"
    assert not controller.stats.source_available


def test_watchdog_expires_stale_attempt():
    print("Testing stale-attempt watchdog...")
    clock = FakeClock()
    controller, source, events = _make_controller(clock=clock, enable_watchdog=True)

    controller.start()
    assert controller.watchdog_timer.isActive()

    source.emit_path([(0.0, 0.96, 0.5)])
    clock.now = 0.8
    assert controller.check_stale_attempt() is False

    clock.now = 1.3
    assert controller.check_stale_attempt() is True
    assert events[-1] == ('tracking', False)
    assert controller.stats.attempts_abandoned == 1

    controller.stop()
    assert not controller.watchdog_timer.isActive()
    print("✓ Watchdog expires the attempt without new samples")


def test_watchdog_disabled_by_default():
    controller, _, _ = _make_controller()
    controller.start()
    assert not controller.watchdog_timer.isActive()


def test_custom_config_and_statistics():
    config = GestureConfig(min_samples_for_match=3)
    controller, source, _ = _make_controller(config=config)

    controller.start()
    source.emit_path([(0.0, 0.96, 0.5), (0.1, 0.96, 0.4), (0.2, 0.96, 0.2)])

    stats = controller.get_statistics()
    assert stats['successful_gestures'] == 1
    assert stats['is_active'] is True
    assert stats['recognizer']['gestures_detected'] == 1
    assert stats['recognizer']['samples_fed'] == 3


def run_all_tests():
    """Run all controller tests."""
    print("=" * 50)
    print("GAZE SWIPE CONTROLLER TESTS")
    print("=" * 50)

    tests = [
        test_inactive_controller_ignores_samples,
        test_gesture_counted,
        test_abandoned_attempt_counted,
        test_stop_resets_attempt,
        test_toggle_tracking,
        test_reset_counters,
        test_start_calibration_resets_attempt,
        test_source_unavailable,
        test_mock_source_failure_through_controller,
        test_watchdog_expires_stale_attempt,
        test_watchdog_disabled_by_default,
        test_custom_config_and_statistics,
    ]

    passed = 0
    for test_func in tests:
        print(f"\n{test_func.__name__}:")
        try:
            test_func()
            passed += 1
        except AssertionError as e:
            print(f"✗ Test failed: {e}")

    print("\n" + "=" * 50)
    print(f"RESULTS: {passed}/{len(tests)} tests passed")
    print("=" * 50)

    return passed == len(tests)


if __name__ == "__main__":
    success = run_all_tests()
    sys.exit(0 if success else 1)
