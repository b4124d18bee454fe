"""Threshold-and-debounce cycle detection on angular-velocity samples."""

from __future__ import annotations

from dataclasses import dataclass

from .constants import CYCLE_DEBOUNCE_MS, CYCLE_THRESHOLD


@dataclass(frozen=True, slots=True)
class MotionSample:
    x: float
    y: float
    z: float
    timestamp_ms: int

    @property
    def axis_values(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)


@dataclass(frozen=True, slots=True)
class CycleEvent:
    timestamp_ms: int


def exceeds_threshold(axis_values: tuple[float, ...], threshold: float) -> bool:
    """True when any single axis magnitude is strictly above *threshold*.

    Axes are tested independently (no vector magnitude).  NaN compares
    false against everything, so a NaN axis never triggers.
    """
    return any(abs(value) > threshold for value in axis_values)


class CycleDetector:
    """Counts cycles from a stream of gyroscope samples.

    A cycle is emitted when any axis crosses *threshold* and more than
    *debounce_ms* have passed since the previous counted cycle.  The
    detector never raises; malformed axis values simply do not count.
    """

    def __init__(
        self,
        threshold: float = CYCLE_THRESHOLD,
        debounce_ms: int = CYCLE_DEBOUNCE_MS,
    ) -> None:
        self.threshold = float(threshold)
        self.debounce_ms = int(debounce_ms)
        self.cycle_count = 0
        self.last_cycle_ms = 0

    def reset(self) -> None:
        self.cycle_count = 0
        self.last_cycle_ms = 0

    def on_motion_sample(self, sample: MotionSample) -> CycleEvent | None:
        if not exceeds_threshold(sample.axis_values, self.threshold):
            return None
        if sample.timestamp_ms - self.last_cycle_ms <= self.debounce_ms:
            return None
        self.last_cycle_ms = sample.timestamp_ms
        self.cycle_count += 1
        return CycleEvent(timestamp_ms=sample.timestamp_ms)
