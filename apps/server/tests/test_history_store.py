from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
from swingtrack.domain_models import HISTORY_FIELDS, SessionSummary
from swingtrack.history_store import (
    HISTORY_RECORDS_KEY,
    HistoryStore,
    decode_history,
    encode_history,
)
from swingtrack.kv_store import JsonFileKeyValueStore, MemoryKeyValueStore, SQLiteKeyValueStore


def _summary(start_ms: int = 1_700_000_000_000, cycles: int = 12) -> SessionSummary:
    return SessionSummary.build(
        start_time_ms=start_ms,
        end_time_ms=start_ms + 60_000,
        cycle_count=cycles,
        max_frequency=2.0,
        average_heart_rate=131.5,
        max_heart_rate=158.0,
    )


def test_never_written_store_loads_empty() -> None:
    assert HistoryStore(MemoryKeyValueStore()).load_all() == []


def test_append_then_load_returns_records_in_order() -> None:
    history = HistoryStore(MemoryKeyValueStore())
    first, second = _summary(cycles=3), _summary(start_ms=1_700_000_100_000, cycles=7)
    assert history.append(first) == 1
    assert history.append(second) == 2
    assert history.load_all() == [first, second]
    assert history.count() == 2


def test_append_grows_by_exactly_one() -> None:
    history = HistoryStore(MemoryKeyValueStore())
    for n in range(5):
        history.append(_summary(cycles=n))
    before = history.load_all()
    new = _summary(cycles=99)
    history.append(new)
    after = history.load_all()
    assert len(after) == len(before) + 1
    assert after[:-1] == before
    assert after[-1] == new


def test_blob_uses_interchange_keys() -> None:
    kv = MemoryKeyValueStore()
    HistoryStore(kv).append(_summary())
    payload = json.loads(kv.get_value(HISTORY_RECORDS_KEY))
    assert isinstance(payload, list)
    assert set(payload[0]) == set(HISTORY_FIELDS)
    assert payload[0]["duration"] == 60_000
    assert payload[0]["cycleCount"] == 12
    assert payload[0]["averageFrequency"] == pytest.approx(0.2)
    assert payload[0]["endTime"] - payload[0]["startTime"] == 60_000


def test_custom_key_is_isolated() -> None:
    kv = MemoryKeyValueStore()
    HistoryStore(kv, key="other").append(_summary())
    assert HistoryStore(kv).load_all() == []
    assert HistoryStore(kv, key="other").count() == 1


_DEEPLY_NESTED = "[" * 200_000 + "]" * 200_000


@pytest.mark.parametrize(
    "blob",
    [
        "",
        "not json",
        "{\"duration\": 1}",
        "42",
        "[1, 2",
        pytest.param(_DEEPLY_NESTED, id="deeply-nested"),
    ],
)
def test_corrupt_blob_loads_empty(blob: str, caplog: pytest.LogCaptureFixture) -> None:
    kv = MemoryKeyValueStore()
    kv.set_value(HISTORY_RECORDS_KEY, blob)
    with caplog.at_level(logging.WARNING):
        assert HistoryStore(kv).load_all() == []


def test_append_over_corrupt_blob_starts_a_new_list() -> None:
    kv = MemoryKeyValueStore()
    kv.set_value(HISTORY_RECORDS_KEY, "{{garbage")
    history = HistoryStore(kv)
    assert history.append(_summary()) == 1
    assert len(json.loads(kv.get_value(HISTORY_RECORDS_KEY))) == 1


def test_append_over_deeply_nested_blob_starts_a_new_list() -> None:
    kv = MemoryKeyValueStore()
    kv.set_value(HISTORY_RECORDS_KEY, _DEEPLY_NESTED)
    history = HistoryStore(kv)
    assert history.append(_summary()) == 1
    assert history.load_all() == [_summary()]


def test_decode_skips_non_object_entries(caplog: pytest.LogCaptureFixture) -> None:
    blob = json.dumps([_summary().to_dict(), "junk", None, 3])
    with caplog.at_level(logging.WARNING):
        decoded = decode_history(blob)
    assert decoded == [_summary()]
    assert "Skipped 3 malformed" in caplog.text


def test_decode_defaults_missing_fields_to_zero() -> None:
    decoded = decode_history('[{"duration": 5000, "cycleCount": 4}]')
    assert decoded == [
        SessionSummary(
            duration_ms=5000,
            average_frequency=0.0,
            max_frequency=0.0,
            cycle_count=4,
            start_time_ms=0,
            end_time_ms=0,
            average_heart_rate=0.0,
            max_heart_rate=0.0,
        )
    ]


def test_decode_reads_records_written_by_other_clients() -> None:
    blob = (
        '[{"duration":2000,"averageFrequency":1.5,"maxFrequency":3.0,"cycleCount":3,'
        '"startTime":0,"endTime":2000,"averageHeartRate":150.0,"maxHeartRate":200.0}]'
    )
    (summary,) = decode_history(blob)
    assert summary.cycle_count == 3
    assert summary.average_frequency == 1.5
    assert summary.max_heart_rate == 200.0


def test_encode_replaces_non_finite_numbers() -> None:
    summary = SessionSummary(
        duration_ms=1000,
        average_frequency=float("nan"),
        max_frequency=1.0,
        cycle_count=1,
        start_time_ms=0,
        end_time_ms=1000,
        average_heart_rate=float("inf"),
        max_heart_rate=0.0,
    )
    payload = json.loads(encode_history([summary]))
    assert payload[0]["averageFrequency"] == 0.0
    assert payload[0]["averageHeartRate"] == 0.0


@pytest.mark.parametrize("backend", ["sqlite", "json"])
def test_history_survives_reopen(tmp_path: Path, backend: str) -> None:
    def _open():
        if backend == "sqlite":
            return SQLiteKeyValueStore(tmp_path / "history.db")
        return JsonFileKeyValueStore(tmp_path / "history.json")

    history = HistoryStore(_open())
    history.append(_summary(cycles=1))
    history.append(_summary(cycles=2))
    history.close()

    reopened = HistoryStore(_open())
    assert [s.cycle_count for s in reopened.load_all()] == [1, 2]
    reopened.close()
