"""Push interface between sensor sources and the recording engine.

Sources publish samples to a :class:`SensorHub`; sinks (normally a
:class:`~swingtrack.recorder.SessionRecorder`) register for the streams they
want and get called back synchronously.  Unregistering is a hard stop:
anything published afterwards never reaches that sink.
"""

from __future__ import annotations

import logging
from threading import RLock
from typing import Protocol

from swingtrack_core import CycleEvent, HeartRateSample, MotionSample

LOGGER = logging.getLogger(__name__)


class SampleSink(Protocol):
    def on_motion_sample(self, sample: MotionSample) -> CycleEvent | None: ...

    def on_heart_rate_sample(self, sample: HeartRateSample) -> None: ...


class SensorRegistration:
    """Handle returned by :meth:`SensorHub.register`."""

    def __init__(self, hub: SensorHub, sink: SampleSink, *, motion: bool, heart_rate: bool):
        self._hub = hub
        self.sink = sink
        self.motion = motion
        self.heart_rate = heart_rate
        self.active = True

    def unregister(self) -> None:
        self._hub._remove(self)


class SensorHub:
    def __init__(self) -> None:
        self._lock = RLock()
        self._registrations: list[SensorRegistration] = []
        self.motion_published = 0
        self.heart_rate_published = 0

    def register(
        self,
        sink: SampleSink,
        *,
        motion: bool = True,
        heart_rate: bool = True,
    ) -> SensorRegistration:
        registration = SensorRegistration(self, sink, motion=motion, heart_rate=heart_rate)
        with self._lock:
            self._registrations.append(registration)
        LOGGER.info(
            "Registered sample sink %s (motion=%s heart_rate=%s)",
            type(sink).__name__,
            motion,
            heart_rate,
        )
        return registration

    def _remove(self, registration: SensorRegistration) -> None:
        with self._lock:
            if not registration.active:
                return
            registration.active = False
            self._registrations = [r for r in self._registrations if r is not registration]

    def sink_count(self) -> int:
        with self._lock:
            return len(self._registrations)

    def publish_motion(self, sample: MotionSample) -> list[CycleEvent]:
        """Deliver *sample* to every motion sink; returns the cycles detected."""
        events: list[CycleEvent] = []
        with self._lock:
            self.motion_published += 1
            for registration in self._registrations:
                if not registration.motion:
                    continue
                event = registration.sink.on_motion_sample(sample)
                if event is not None:
                    events.append(event)
        return events

    def publish_heart_rate(self, sample: HeartRateSample) -> int:
        """Deliver *sample* to every heart-rate sink; returns how many got it."""
        delivered = 0
        with self._lock:
            self.heart_rate_published += 1
            for registration in self._registrations:
                if not registration.heart_rate:
                    continue
                registration.sink.on_heart_rate_sample(sample)
                delivered += 1
        return delivered
