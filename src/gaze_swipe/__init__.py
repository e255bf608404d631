"""
Gaze swipe: hands-free input by looking at the screen edge and glancing up.

Core: streaming gesture recognizer over normalized eye-position samples
Integration: sample sources and the session controller
"""

from .config import GestureConfig, setup_logging
from .eye_position import (
    EyePosition, Sample, EyePositionCallback, MockEyePositionSource,
    eye_center, average_eye_position
)
from .recognizer import GazeSwipeRecognizer, RecognizerState, TrajectoryBuffer
from .controller import GazeSwipeController, SessionStats

__all__ = [
    # Core components
    'GestureConfig', 'setup_logging',
    'EyePosition', 'Sample',
    'GazeSwipeRecognizer', 'RecognizerState', 'TrajectoryBuffer',
    # Integration components
    'EyePositionCallback', 'MockEyePositionSource', 'eye_center', 'average_eye_position',
    'GazeSwipeController', 'SessionStats'
]
