"""Append-only session history persisted as one JSON array value.

The whole list is read, extended and written back on every append because
the backing stores only offer whole-value get/set.  Reading is lenient: an
absent value, invalid JSON or a non-array top level all load as an empty
history, and the next append overwrites whatever was there.
"""

from __future__ import annotations

import json
import logging
import math
from threading import RLock
from typing import Any

from .domain_models import SessionSummary
from .kv_store import KeyValueStore

LOGGER = logging.getLogger(__name__)

HISTORY_RECORDS_KEY = "history_records"


def _finite_or_zero(value: Any) -> Any:
    if isinstance(value, float) and not math.isfinite(value):
        return 0.0
    return value


def encode_history(summaries: list[SessionSummary]) -> str:
    records = [
        {key: _finite_or_zero(value) for key, value in summary.to_dict().items()}
        for summary in summaries
    ]
    return json.dumps(records, ensure_ascii=False, allow_nan=False, separators=(",", ":"))


def decode_history(text: str | None) -> list[SessionSummary]:
    """Decode a persisted blob; never raises."""
    if not text:
        return []
    try:
        payload = json.loads(text)
    except (json.JSONDecodeError, TypeError, ValueError, RecursionError):
        LOGGER.warning("Discarding unreadable session history blob", exc_info=True)
        return []
    if not isinstance(payload, list):
        LOGGER.warning(
            "Discarding session history blob: expected a JSON array, got %s",
            type(payload).__name__,
        )
        return []
    summaries: list[SessionSummary] = []
    skipped = 0
    for item in payload:
        if not isinstance(item, dict):
            skipped += 1
            continue
        summaries.append(SessionSummary.from_dict(item))
    if skipped:
        LOGGER.warning("Skipped %d malformed session history record(s)", skipped)
    return summaries


class HistoryStore:
    """Ordered log of completed sessions, oldest first."""

    def __init__(self, store: KeyValueStore, key: str = HISTORY_RECORDS_KEY) -> None:
        self._store = store
        self._key = key
        self._lock = RLock()

    @property
    def key(self) -> str:
        return self._key

    def load_all(self) -> list[SessionSummary]:
        with self._lock:
            return decode_history(self._store.get_value(self._key))

    def append(self, summary: SessionSummary) -> int:
        """Persist *summary* after every existing record; returns the new size."""
        with self._lock:
            history = self.load_all()
            history.append(summary)
            self._store.set_value(self._key, encode_history(history))
            LOGGER.info(
                "Appended session to history (cycles=%d duration_ms=%d, %d total)",
                summary.cycle_count,
                summary.duration_ms,
                len(history),
            )
            return len(history)

    def count(self) -> int:
        return len(self.load_all())

    def close(self) -> None:
        self._store.close()
