"""Session orchestration for the running server.

``SessionService`` ties one :class:`SessionRecorder` at a time to the
sensor hub, the periodic frequency tick and the history store:

- ``start`` builds a fresh recorder and registers it for sensor streams.
- ``stop`` unregisters it first, so no late sample slips in, then finalizes
  the summary and appends it to history.
- ``run`` is the async tick loop that closes one frequency window per
  interval.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from threading import RLock

from swingtrack_core import CYCLE_DEBOUNCE_MS, CYCLE_THRESHOLD

from .domain_models import (
    LiveStatus,
    SessionPhase,
    SessionStateError,
    SessionSummary,
    wall_clock_ms,
)
from .history_store import HistoryStore
from .recorder import SessionRecorder
from .sensors import SensorHub, SensorRegistration

LOGGER = logging.getLogger(__name__)


class SessionService:
    def __init__(
        self,
        *,
        hub: SensorHub,
        history: HistoryStore,
        threshold: float = CYCLE_THRESHOLD,
        debounce_ms: int = CYCLE_DEBOUNCE_MS,
        heart_rate_enabled: bool = True,
        clock: Callable[[], int] = wall_clock_ms,
    ) -> None:
        self.hub = hub
        self.history = history
        self.threshold = float(threshold)
        self.debounce_ms = int(debounce_ms)
        self.heart_rate_enabled = bool(heart_rate_enabled)
        self._clock = clock
        self._lock = RLock()
        self._recorder: SessionRecorder | None = None
        self._registration: SensorRegistration | None = None
        self._last_summary: SessionSummary | None = None
        self.tick_failure_count = 0

    def now_ms(self) -> int:
        return int(self._clock())

    @property
    def phase(self) -> SessionPhase:
        with self._lock:
            if self._recorder is None:
                return SessionPhase.idle
            return self._recorder.phase

    @property
    def last_summary(self) -> SessionSummary | None:
        with self._lock:
            return self._last_summary

    def status(self) -> LiveStatus:
        with self._lock:
            recorder = self._recorder
        if recorder is None:
            return LiveStatus.idle()
        now = self.now_ms() if recorder.phase is SessionPhase.running else None
        return recorder.live_status(now)

    def start(self, now_ms: int | None = None) -> LiveStatus:
        with self._lock:
            if self._recorder is not None and self._recorder.phase is SessionPhase.running:
                raise SessionStateError("a session is already running")
            started_at = self.now_ms() if now_ms is None else int(now_ms)
            recorder = SessionRecorder(threshold=self.threshold, debounce_ms=self.debounce_ms)
            recorder.start(started_at)
            self._recorder = recorder
            self._registration = self.hub.register(
                recorder,
                motion=True,
                heart_rate=self.heart_rate_enabled,
            )
            if not self.heart_rate_enabled:
                LOGGER.info("Heart-rate sensing disabled; session heart rate will read 0")
        return recorder.live_status(started_at)

    def stop(self, now_ms: int | None = None) -> SessionSummary:
        """Finish the running session and persist it.

        A storage error propagates to the caller, but only after the session
        is closed; the summary stays readable through ``last_summary``.
        """
        with self._lock:
            recorder = self._recorder
            if recorder is None or recorder.phase is not SessionPhase.running:
                raise SessionStateError("no session is running")
            if self._registration is not None:
                self._registration.unregister()
                self._registration = None
            stopped_at = self.now_ms() if now_ms is None else int(now_ms)
            summary = recorder.stop(stopped_at)
            self._last_summary = summary
        self.history.append(summary)
        return summary

    def tick(self, now_ms: int | None = None) -> float | None:
        with self._lock:
            recorder = self._recorder
        if recorder is None or recorder.phase is not SessionPhase.running:
            return None
        return recorder.tick(self.now_ms() if now_ms is None else int(now_ms))

    # -- main async loop ------------------------------------------------------

    async def run(self, interval_s: float = 1.0) -> None:
        interval = max(0.01, float(interval_s))
        while True:
            await asyncio.sleep(interval)
            try:
                self.tick()
            except Exception:
                self.tick_failure_count += 1
                LOGGER.warning("Frequency tick failed; will retry next interval.", exc_info=True)
