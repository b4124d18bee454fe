from .constants import (
    CYCLE_DEBOUNCE_MS,
    CYCLE_THRESHOLD,
    FREQUENCY_WINDOW_MS,
    MS_PER_SECOND,
    NO_HEART_RATE_BPM,
)
from .cycle_detection import CycleDetector, CycleEvent, MotionSample, exceeds_threshold
from .frequency import FrequencyTracker, FrequencyWindow
from .heart_rate import HeartRateAggregator, HeartRateSample, time_weighted_average

__all__ = [
    "CYCLE_DEBOUNCE_MS",
    "CYCLE_THRESHOLD",
    "FREQUENCY_WINDOW_MS",
    "MS_PER_SECOND",
    "NO_HEART_RATE_BPM",
    "CycleDetector",
    "CycleEvent",
    "FrequencyTracker",
    "FrequencyWindow",
    "HeartRateAggregator",
    "HeartRateSample",
    "MotionSample",
    "exceeds_threshold",
    "time_weighted_average",
]
