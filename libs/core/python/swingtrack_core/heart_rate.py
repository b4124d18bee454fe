"""Heart-rate accumulation with a time-weighted session average.

Optical heart-rate sensors report irregularly, so a plain arithmetic mean
over-weights bursts of dense readings.  Each reading is instead weighted by
how long it stayed in effect: until the next reading arrived, or for the
last one, until the session closed.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from .constants import NO_HEART_RATE_BPM


@dataclass(frozen=True, slots=True)
class HeartRateSample:
    bpm: float
    timestamp_ms: int

    @property
    def is_valid(self) -> bool:
        """Zero means "no reading"; non-finite and negative values are junk."""
        return math.isfinite(self.bpm) and self.bpm > NO_HEART_RATE_BPM


def time_weighted_average(
    timestamps_ms: list[int] | np.ndarray,
    values_bpm: list[float] | np.ndarray,
    session_end_ms: int,
) -> float:
    """Average *values_bpm* weighted by how long each one was in effect.

    Consecutive readings weigh ``t[i+1] - t[i]``.  The last reading weighs
    ``session_end_ms - t[-1]`` and is only counted when that is positive.
    Returns ``0.0`` for an empty log or a zero total duration.
    """
    ts = np.asarray(timestamps_ms, dtype=np.int64)
    hr = np.asarray(values_bpm, dtype=np.float64)
    if ts.size == 0:
        return 0.0
    gaps = np.diff(ts)
    weighted_sum = float(np.sum(hr[:-1] * gaps))
    total_ms = int(np.sum(gaps))
    tail_ms = int(session_end_ms) - int(ts[-1])
    if tail_ms > 0:
        weighted_sum += float(hr[-1]) * tail_ms
        total_ms += tail_ms
    if total_ms <= 0:
        return 0.0
    return weighted_sum / total_ms


class HeartRateAggregator:
    """Collects valid heart-rate readings for one session.

    Readings are assumed to arrive in timestamp order; out-of-order input is
    not re-sorted.  ``last_bpm`` keeps the latest raw reading (zeros
    included) for the live display.
    """

    def __init__(self) -> None:
        self._timestamps_ms: list[int] = []
        self._values_bpm: list[float] = []
        self.last_bpm: float | None = None

    def reset(self) -> None:
        self._timestamps_ms.clear()
        self._values_bpm.clear()
        self.last_bpm = None

    @property
    def sample_count(self) -> int:
        return len(self._values_bpm)

    def samples(self) -> list[HeartRateSample]:
        return [
            HeartRateSample(bpm=bpm, timestamp_ms=ts)
            for ts, bpm in zip(self._timestamps_ms, self._values_bpm, strict=True)
        ]

    def on_heart_rate_sample(self, sample: HeartRateSample) -> bool:
        """Record *sample*; returns whether it entered the aggregation log."""
        self.last_bpm = float(sample.bpm)
        if not sample.is_valid:
            return False
        self._timestamps_ms.append(int(sample.timestamp_ms))
        self._values_bpm.append(float(sample.bpm))
        return True

    def finalize(self, session_end_ms: int) -> tuple[float, float]:
        if not self._values_bpm:
            return 0.0, 0.0
        average = time_weighted_average(self._timestamps_ms, self._values_bpm, session_end_ms)
        return average, max(self._values_bpm)
