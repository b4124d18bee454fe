"""Domain model objects for the SwingTrack backend.

Typed dataclasses for the session summary and the live read model, while
keeping the persisted history JSON contract stable.
"""

from __future__ import annotations

import enum
import math
import time
from dataclasses import dataclass
from typing import Any

from swingtrack_core.constants import MS_PER_SECOND

# Interchange keys of one persisted history record.  Existing stored history
# depends on these exact names.
HISTORY_FIELDS: tuple[str, ...] = (
    "duration",
    "averageFrequency",
    "maxFrequency",
    "cycleCount",
    "startTime",
    "endTime",
    "averageHeartRate",
    "maxHeartRate",
)


class SessionStateError(RuntimeError):
    """Raised when the recorder lifecycle is driven out of order."""


class SessionPhase(enum.StrEnum):
    idle = "idle"
    running = "running"
    stopped = "stopped"


def wall_clock_ms() -> int:
    return int(time.time() * 1000)


def _as_float_or_none(value: object) -> float | None:
    if value in (None, ""):
        return None
    try:
        out = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if math.isnan(out) or math.isinf(out):
        return None
    return out


def _as_int_or_none(value: object) -> int | None:
    out = _as_float_or_none(value)
    if out is None:
        return None
    return int(round(out))


def _non_negative(value: float) -> float:
    return value if value > 0.0 else 0.0


def average_frequency(cycle_count: int, duration_ms: int) -> float:
    """Cycles per second over the whole session; ``0.0`` for empty sessions."""
    if duration_ms <= 0:
        return 0.0
    return cycle_count / (duration_ms / MS_PER_SECOND)


# ---------------------------------------------------------------------------
# SessionSummary
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SessionSummary:
    duration_ms: int
    average_frequency: float
    max_frequency: float
    cycle_count: int
    start_time_ms: int
    end_time_ms: int
    average_heart_rate: float
    max_heart_rate: float

    @classmethod
    def build(
        cls,
        *,
        start_time_ms: int,
        end_time_ms: int,
        cycle_count: int,
        max_frequency: float,
        average_heart_rate: float,
        max_heart_rate: float,
    ) -> SessionSummary:
        """Derive duration and average frequency from the raw session totals."""
        duration_ms = max(0, int(end_time_ms) - int(start_time_ms))
        return cls(
            duration_ms=duration_ms,
            average_frequency=average_frequency(int(cycle_count), duration_ms),
            max_frequency=_non_negative(float(max_frequency)),
            cycle_count=int(cycle_count),
            start_time_ms=int(start_time_ms),
            end_time_ms=int(start_time_ms) + duration_ms,
            average_heart_rate=_non_negative(float(average_heart_rate)),
            max_heart_rate=_non_negative(float(max_heart_rate)),
        )

    # -- serialization ---------------------------------------------------------

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SessionSummary:
        """Parse one persisted record.  Missing or junk numbers read as 0."""
        return cls(
            duration_ms=_as_int_or_none(data.get("duration")) or 0,
            average_frequency=_as_float_or_none(data.get("averageFrequency")) or 0.0,
            max_frequency=_as_float_or_none(data.get("maxFrequency")) or 0.0,
            cycle_count=_as_int_or_none(data.get("cycleCount")) or 0,
            start_time_ms=_as_int_or_none(data.get("startTime")) or 0,
            end_time_ms=_as_int_or_none(data.get("endTime")) or 0,
            average_heart_rate=_as_float_or_none(data.get("averageHeartRate")) or 0.0,
            max_heart_rate=_as_float_or_none(data.get("maxHeartRate")) or 0.0,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "duration": self.duration_ms,
            "averageFrequency": self.average_frequency,
            "maxFrequency": self.max_frequency,
            "cycleCount": self.cycle_count,
            "startTime": self.start_time_ms,
            "endTime": self.end_time_ms,
            "averageHeartRate": self.average_heart_rate,
            "maxHeartRate": self.max_heart_rate,
        }


# ---------------------------------------------------------------------------
# Recorder read models
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SessionState:
    """Point-in-time copy of the recorder's internal session state."""

    start_time_ms: int
    cycle_count: int
    last_cycle_ms: int
    max_frequency_seen: float
    heart_rate_log: tuple[tuple[int, float], ...]
    running: bool


@dataclass(frozen=True, slots=True)
class LiveStatus:
    phase: SessionPhase
    start_time_ms: int | None
    elapsed_ms: int
    cycle_count: int
    frequency: float
    max_frequency: float
    window_start_ms: int | None
    last_heart_rate: float | None
    heart_rate_samples: int
    dropped_events: int

    @classmethod
    def idle(cls) -> LiveStatus:
        return cls(
            phase=SessionPhase.idle,
            start_time_ms=None,
            elapsed_ms=0,
            cycle_count=0,
            frequency=0.0,
            max_frequency=0.0,
            window_start_ms=None,
            last_heart_rate=None,
            heart_rate_samples=0,
            dropped_events=0,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "phase": str(self.phase),
            "start_time_ms": self.start_time_ms,
            "elapsed_ms": self.elapsed_ms,
            "cycle_count": self.cycle_count,
            "frequency": self.frequency,
            "max_frequency": self.max_frequency,
            "window_start_ms": self.window_start_ms,
            "last_heart_rate": self.last_heart_rate,
            "heart_rate_samples": self.heart_rate_samples,
            "dropped_events": self.dropped_events,
        }
