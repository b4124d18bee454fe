"""Shared fixtures for the swingtrack test suite."""

from __future__ import annotations

import asyncio
import os
import time

import pytest

# Importing swingtrack.app must not build a server app against the
# checked-in config while the tests run.
os.environ.setdefault("SWINGTRACK_DISABLE_AUTO_APP", "1")

from builders import FakeClock  # noqa: E402
from swingtrack.history_store import HistoryStore  # noqa: E402
from swingtrack.kv_store import MemoryKeyValueStore  # noqa: E402
from swingtrack.sensors import SensorHub  # noqa: E402
from swingtrack.session_service import SessionService  # noqa: E402


async def async_wait_until(predicate, timeout_s: float = 2.0, step_s: float = 0.02) -> bool:
    """Poll *predicate* until it returns truthy, yielding to the event loop between polls."""
    deadline = time.monotonic() + timeout_s
    while time.monotonic() < deadline:
        if predicate():
            return True
        await asyncio.sleep(step_s)
    return False


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(1_700_000_000_000)


@pytest.fixture
def history() -> HistoryStore:
    return HistoryStore(MemoryKeyValueStore())


@pytest.fixture
def hub() -> SensorHub:
    return SensorHub()


@pytest.fixture
def service(hub: SensorHub, history: HistoryStore, clock: FakeClock) -> SessionService:
    return SessionService(hub=hub, history=history, clock=clock)
