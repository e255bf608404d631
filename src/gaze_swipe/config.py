"""
Gaze Swipe Configuration Module
Contains application constants, gesture thresholds and logging setup.
"""

import math
import logging
from dataclasses import dataclass, asdict, fields
from typing import Dict, Any, Optional

# Application constants
APP_NAME = "Gaze Swipe"
APP_VERSION = "1.0.0"
DEFAULT_SAMPLE_RATE_HZ = 30
STALE_ATTEMPT_CHECK_INTERVAL_MS = 250
LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'

# Gesture defaults
DEFAULT_EDGE_THRESHOLD = 0.95  # x-fraction of the trigger zone
DEFAULT_VERTICAL_THRESHOLD = 0.2  # normalized upward displacement
DEFAULT_MIN_SAMPLES_FOR_MATCH = 5
DEFAULT_ATTEMPT_TIMEOUT = 1.0  # seconds


@dataclass(frozen=True)
class GestureConfig:
    """Thresholds for gaze-swipe recognition."""
    edge_threshold: float = DEFAULT_EDGE_THRESHOLD
    vertical_threshold: float = DEFAULT_VERTICAL_THRESHOLD
    min_samples_for_match: int = DEFAULT_MIN_SAMPLES_FOR_MATCH
    attempt_timeout: float = DEFAULT_ATTEMPT_TIMEOUT

    def __post_init__(self):
        for name in ('edge_threshold', 'vertical_threshold', 'attempt_timeout'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"{name} must be a number, got {value!r}")
            if not math.isfinite(value):
                raise ValueError(f"{name} must be finite, got {value}")

        if isinstance(self.min_samples_for_match, bool) or not isinstance(self.min_samples_for_match, int):
            raise ValueError(f"min_samples_for_match must be an integer, got {self.min_samples_for_match!r}")
        if self.min_samples_for_match < 1:
            raise ValueError(f"min_samples_for_match must be at least 1, got {self.min_samples_for_match}")
        if self.attempt_timeout <= 0:
            raise ValueError(f"attempt_timeout must be positive, got {self.attempt_timeout}")
        if self.vertical_threshold < 0:
            raise ValueError(f"vertical_threshold must not be negative, got {self.vertical_threshold}")

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> 'GestureConfig':
        """
        Build a configuration from a settings dictionary.

        Accepts either the nested form used by setup dialogs
        ({'gesture_detection': {...}}) or a flat dictionary.
        Unknown keys are ignored and missing keys take defaults.

        Args:
            config: Settings dictionary

        Returns:
            GestureConfig instance
        """
        section = config.get('gesture_detection', config)
        known = {f.name for f in fields(cls)}
        values = {key: value for key, value in section.items() if key in known}
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None):
    """
    Configure application-wide logging.

    Args:
        level: Root logging level
        log_file: Optional file to log into instead of stderr
    """
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        filename=log_file
    )
    logging.getLogger(__name__).debug(f"{APP_NAME} {APP_VERSION} logging configured")
