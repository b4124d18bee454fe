"""Pydantic request/response models for the SwingTrack HTTP API.

Separated from the route modules to keep routing logic distinct from data
contracts.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class MotionSampleIn(BaseModel):
    x: float
    y: float
    z: float
    timestamp_ms: int | None = Field(default=None, ge=0)


class HeartRateSampleIn(BaseModel):
    bpm: float
    timestamp_ms: int | None = Field(default=None, ge=0)


class MotionBatchRequest(BaseModel):
    samples: list[MotionSampleIn] = Field(min_length=1, max_length=10_000)


class HeartRateBatchRequest(BaseModel):
    samples: list[HeartRateSampleIn] = Field(min_length=1, max_length=10_000)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    status: str
    session_phase: str
    history_size: int
    tick_failures: int


class LiveStatusResponse(BaseModel):
    phase: Literal["idle", "running", "stopped"]
    start_time_ms: int | None = None
    elapsed_ms: int
    cycle_count: int
    frequency: float
    max_frequency: float
    window_start_ms: int | None = None
    last_heart_rate: float | None = None
    heart_rate_samples: int
    dropped_events: int


class SessionSummaryResponse(BaseModel):
    duration: int
    averageFrequency: float
    maxFrequency: float
    cycleCount: int
    startTime: int
    endTime: int
    averageHeartRate: float
    maxHeartRate: float


class HistoryEntryResponse(SessionSummaryResponse):
    index: int


class HistoryListResponse(BaseModel):
    order: Literal["newest", "oldest"]
    total: int
    sessions: list[HistoryEntryResponse]


class MotionIngestResponse(BaseModel):
    received: int
    cycles_detected: int
    cycle_count: int


class HeartRateIngestResponse(BaseModel):
    received: int
    delivered: int
    last_heart_rate: float | None = None
