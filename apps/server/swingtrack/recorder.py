"""Session recording state machine.

``SessionRecorder`` owns one session from ``start`` to ``stop``.  It routes
motion samples to the cycle detector (and detected cycles on to the
frequency tracker), heart-rate samples to the aggregator, and turns the
totals into a :class:`~swingtrack.domain_models.SessionSummary` on stop.

Sensor callbacks and the 1 s timer arrive from independent sources, so
every entry point takes the same lock.  A recorder is single-use:
``Idle -> Running -> Stopped``; start a new recorder for the next session.
"""

from __future__ import annotations

import logging
from threading import RLock

from swingtrack_core import (
    CYCLE_DEBOUNCE_MS,
    CYCLE_THRESHOLD,
    CycleDetector,
    CycleEvent,
    FrequencyTracker,
    HeartRateAggregator,
    HeartRateSample,
    MotionSample,
)

from .domain_models import (
    LiveStatus,
    SessionPhase,
    SessionState,
    SessionStateError,
    SessionSummary,
)

LOGGER = logging.getLogger(__name__)


class SessionRecorder:
    def __init__(
        self,
        *,
        threshold: float = CYCLE_THRESHOLD,
        debounce_ms: int = CYCLE_DEBOUNCE_MS,
    ) -> None:
        self._lock = RLock()
        self._phase = SessionPhase.idle
        self._detector = CycleDetector(threshold=threshold, debounce_ms=debounce_ms)
        self._frequency = FrequencyTracker()
        self._heart_rate = HeartRateAggregator()
        self._start_time_ms: int | None = None
        self._last_event_ms: int | None = None
        self._dropped_events = 0
        self._summary: SessionSummary | None = None

    # -- lifecycle ------------------------------------------------------------

    @property
    def phase(self) -> SessionPhase:
        with self._lock:
            return self._phase

    @property
    def summary(self) -> SessionSummary | None:
        with self._lock:
            return self._summary

    def start(self, now_ms: int) -> None:
        with self._lock:
            if self._phase is not SessionPhase.idle:
                raise SessionStateError(f"cannot start a session that is {self._phase}")
            self._detector.reset()
            self._frequency.reset(start_ms=now_ms)
            self._heart_rate.reset()
            self._start_time_ms = int(now_ms)
            self._last_event_ms = int(now_ms)
            self._dropped_events = 0
            self._phase = SessionPhase.running
        LOGGER.info("Session started at %d", now_ms)

    def stop(self, now_ms: int) -> SessionSummary:
        with self._lock:
            if self._phase is not SessionPhase.running or self._start_time_ms is None:
                raise SessionStateError(f"cannot stop a session that is {self._phase}")
            self._phase = SessionPhase.stopped
            average_hr, max_hr = self._heart_rate.finalize(now_ms)
            summary = SessionSummary.build(
                start_time_ms=self._start_time_ms,
                end_time_ms=now_ms,
                cycle_count=self._detector.cycle_count,
                max_frequency=self._frequency.max_frequency,
                average_heart_rate=average_hr,
                max_heart_rate=max_hr,
            )
            self._summary = summary
            dropped = self._dropped_events
        if now_ms < summary.start_time_ms:
            LOGGER.warning(
                "Session stop time %d precedes start %d; duration clamped to 0",
                now_ms,
                summary.start_time_ms,
            )
        LOGGER.info(
            "Session stopped: cycles=%d duration_ms=%d avg_hr=%.1f dropped=%d",
            summary.cycle_count,
            summary.duration_ms,
            summary.average_heart_rate,
            dropped,
        )
        return summary

    # -- event routing --------------------------------------------------------

    def _drop_locked(self, kind: str) -> None:
        self._dropped_events += 1
        LOGGER.debug("Dropping %s delivered while session is %s", kind, self._phase)

    def on_motion_sample(self, sample: MotionSample) -> CycleEvent | None:
        with self._lock:
            if self._phase is not SessionPhase.running:
                self._drop_locked("motion sample")
                return None
            self._last_event_ms = max(self._last_event_ms or 0, sample.timestamp_ms)
            event = self._detector.on_motion_sample(sample)
            if event is not None:
                self._frequency.on_cycle_event(event)
            return event

    def on_heart_rate_sample(self, sample: HeartRateSample) -> None:
        with self._lock:
            if self._phase is not SessionPhase.running:
                self._drop_locked("heart-rate sample")
                return
            self._last_event_ms = max(self._last_event_ms or 0, sample.timestamp_ms)
            self._heart_rate.on_heart_rate_sample(sample)

    def tick(self, now_ms: int) -> float | None:
        """Close the current frequency window; ``None`` when not running."""
        with self._lock:
            if self._phase is not SessionPhase.running:
                self._drop_locked("timer tick")
                return None
            self._last_event_ms = max(self._last_event_ms or 0, now_ms)
            return self._frequency.flush_window(now_ms)

    # -- read models ----------------------------------------------------------

    def session_state(self) -> SessionState:
        with self._lock:
            return SessionState(
                start_time_ms=self._start_time_ms or 0,
                cycle_count=self._detector.cycle_count,
                last_cycle_ms=self._detector.last_cycle_ms,
                max_frequency_seen=self._frequency.max_frequency,
                heart_rate_log=tuple(
                    (s.timestamp_ms, s.bpm) for s in self._heart_rate.samples()
                ),
                running=self._phase is SessionPhase.running,
            )

    def live_status(self, now_ms: int | None = None) -> LiveStatus:
        with self._lock:
            if self._phase is SessionPhase.idle:
                return LiveStatus.idle()
            start = self._start_time_ms or 0
            if self._summary is not None:
                elapsed = self._summary.duration_ms
            else:
                reference = now_ms if now_ms is not None else (self._last_event_ms or start)
                elapsed = max(0, int(reference) - start)
            return LiveStatus(
                phase=self._phase,
                start_time_ms=start,
                elapsed_ms=elapsed,
                cycle_count=self._detector.cycle_count,
                frequency=self._frequency.last_frequency,
                max_frequency=self._frequency.max_frequency,
                window_start_ms=(
                    self._frequency.window.window_start_ms
                    if self._phase is SessionPhase.running
                    else None
                ),
                last_heart_rate=self._heart_rate.last_bpm,
                heart_rate_samples=self._heart_rate.sample_count,
                dropped_events=self._dropped_events,
            )
