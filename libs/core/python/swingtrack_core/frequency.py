"""Per-second cycle frequency windows and the session maximum."""

from __future__ import annotations

from dataclasses import dataclass

from .cycle_detection import CycleEvent


@dataclass(slots=True)
class FrequencyWindow:
    window_start_ms: int = 0
    count: int = 0


class FrequencyTracker:
    """Buckets cycle events into windows flushed by an external timer.

    ``flush_window`` reports the number of cycles seen since the previous
    flush.  With the nominal 1 s tick that count *is* cycles per second; if
    the tick drifts, the value silently covers whatever interval elapsed.
    """

    def __init__(self, start_ms: int = 0) -> None:
        self.window = FrequencyWindow(window_start_ms=start_ms)
        self.max_frequency = 0.0
        self.last_frequency = 0.0

    def reset(self, start_ms: int = 0) -> None:
        self.window = FrequencyWindow(window_start_ms=start_ms)
        self.max_frequency = 0.0
        self.last_frequency = 0.0

    def on_cycle_event(self, event: CycleEvent) -> None:
        self.window.count += 1

    def flush_window(self, now_ms: int) -> float:
        frequency = float(self.window.count)
        if frequency > self.max_frequency:
            self.max_frequency = frequency
        self.last_frequency = frequency
        self.window = FrequencyWindow(window_start_ms=now_ms)
        return frequency
