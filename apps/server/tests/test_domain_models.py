from __future__ import annotations

import pytest
from swingtrack.domain_models import (
    HISTORY_FIELDS,
    LiveStatus,
    SessionPhase,
    SessionSummary,
    average_frequency,
)


class TestAverageFrequency:
    def test_cycles_per_second(self) -> None:
        assert average_frequency(3, 2000) == pytest.approx(1.5)

    @pytest.mark.parametrize("duration_ms", [0, -100])
    def test_non_positive_duration_is_zero(self, duration_ms: int) -> None:
        assert average_frequency(5, duration_ms) == 0.0


class TestSessionSummaryBuild:
    def test_derives_duration_and_average(self) -> None:
        summary = SessionSummary.build(
            start_time_ms=10_000,
            end_time_ms=40_000,
            cycle_count=45,
            max_frequency=3.0,
            average_heart_rate=120.0,
            max_heart_rate=140.0,
        )
        assert summary.duration_ms == 30_000
        assert summary.average_frequency == pytest.approx(1.5)
        assert summary.end_time_ms - summary.start_time_ms == summary.duration_ms

    def test_negative_inputs_are_clamped(self) -> None:
        summary = SessionSummary.build(
            start_time_ms=5000,
            end_time_ms=1000,
            cycle_count=0,
            max_frequency=-1.0,
            average_heart_rate=-3.0,
            max_heart_rate=-3.0,
        )
        assert summary.duration_ms == 0
        assert summary.end_time_ms == 5000
        assert summary.max_frequency == 0.0
        assert summary.average_heart_rate == 0.0
        assert summary.max_heart_rate == 0.0


class TestSessionSummarySerialization:
    def test_to_dict_keys_match_interchange_fields(self) -> None:
        summary = SessionSummary.build(
            start_time_ms=0,
            end_time_ms=1000,
            cycle_count=1,
            max_frequency=1.0,
            average_heart_rate=0.0,
            max_heart_rate=0.0,
        )
        assert tuple(summary.to_dict()) == HISTORY_FIELDS

    def test_from_dict_tolerates_junk_values(self) -> None:
        summary = SessionSummary.from_dict(
            {
                "duration": "1500",
                "averageFrequency": "NaN",
                "maxFrequency": None,
                "cycleCount": 2.0,
                "startTime": "oops",
                "endTime": 1500,
                "averageHeartRate": [],
                "maxHeartRate": "171.5",
            }
        )
        assert summary.duration_ms == 1500
        assert summary.average_frequency == 0.0
        assert summary.max_frequency == 0.0
        assert summary.cycle_count == 2
        assert summary.start_time_ms == 0
        assert summary.end_time_ms == 1500
        assert summary.average_heart_rate == 0.0
        assert summary.max_heart_rate == 171.5

    def test_from_dict_ignores_unknown_keys(self) -> None:
        summary = SessionSummary.from_dict({"cycleCount": 4, "notes": "felt good"})
        assert summary.cycle_count == 4


def test_idle_live_status_dict() -> None:
    payload = LiveStatus.idle().to_dict()
    assert payload["phase"] == "idle"
    assert payload["start_time_ms"] is None
    assert payload["cycle_count"] == 0


def test_session_phase_renders_as_plain_string() -> None:
    assert str(SessionPhase.running) == "running"
    assert SessionPhase("stopped") is SessionPhase.stopped
