#!/usr/bin/env python3
"""
Console demo for the gaze-swipe recognizer.

Drives a GazeSwipeController from the mock eye-position source inside a
Qt event loop and logs every gesture and tracking change.

Usage:
    python -m gaze_swipe.demo --mode swipe --duration 10
"""

import sys
import logging
import argparse
from PyQt6.QtCore import QCoreApplication, QTimer

from .config import (
    APP_NAME, APP_VERSION, DEFAULT_SAMPLE_RATE_HZ, DEFAULT_EDGE_THRESHOLD,
    DEFAULT_VERTICAL_THRESHOLD, DEFAULT_MIN_SAMPLES_FOR_MATCH, DEFAULT_ATTEMPT_TIMEOUT,
    GestureConfig, setup_logging
)
from .controller import GazeSwipeController
from .eye_position import MockEyePositionSource

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='gaze-swipe-demo', description=f"{APP_NAME} {APP_VERSION} demo")
    parser.add_argument('--mode', choices=MockEyePositionSource.MODES, default='swipe',
                        help="mock gaze pattern to generate")
    parser.add_argument('--duration', type=float, default=10.0,
                        help="seconds to run before exiting")
    parser.add_argument('--rate', type=int, default=DEFAULT_SAMPLE_RATE_HZ,
                        help="samples per second")
    parser.add_argument('--edge-threshold', type=float, default=DEFAULT_EDGE_THRESHOLD)
    parser.add_argument('--vertical-threshold', type=float, default=DEFAULT_VERTICAL_THRESHOLD)
    parser.add_argument('--min-samples', type=int, default=DEFAULT_MIN_SAMPLES_FOR_MATCH)
    parser.add_argument('--timeout', type=float, default=DEFAULT_ATTEMPT_TIMEOUT)
    parser.add_argument('--watchdog', action='store_true',
                        help="expire stale attempts without waiting for the next sample")
    parser.add_argument('--verbose', action='store_true')
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    try:
        config = GestureConfig(
            edge_threshold=args.edge_threshold,
            vertical_threshold=args.vertical_threshold,
            min_samples_for_match=args.min_samples,
            attempt_timeout=args.timeout
        )
    except ValueError as e:
        logger.error(f"Invalid gesture configuration: {e}")
        return 2

    if args.rate <= 0:
        logger.error(f"Invalid sample rate: {args.rate}")
        return 2

    app = QCoreApplication.instance() or QCoreApplication(sys.argv[:1])
    app.setApplicationName(APP_NAME)

    source = MockEyePositionSource(mode=args.mode, sample_rate=args.rate)
    controller = GazeSwipeController(config=config, enable_watchdog=args.watchdog)
    controller.set_source(source)

    controller.tracking_state_changed.connect(
        lambda tracking: logger.info("In gesture zone" if tracking else "Left gesture attempt"))
    controller.gesture_detected.connect(lambda: logger.info("Gesture detected!"))

    controller.start()
    source.start()
    QTimer.singleShot(int(args.duration * 1000), app.quit)
    app.exec()

    source.stop()
    controller.stop()

    stats = controller.get_statistics()
    logger.info(f"Session finished: {stats['successful_gestures']} gestures, "
                f"{stats['attempts_started']} attempts, {stats['samples_consumed']} samples")
    return 0


if __name__ == "__main__":
    sys.exit(main())
