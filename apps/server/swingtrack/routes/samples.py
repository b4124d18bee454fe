"""Sensor ingestion endpoints – push motion and heart-rate samples."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter
from swingtrack_core import HeartRateSample, MotionSample

from ..api_models import (
    HeartRateBatchRequest,
    HeartRateIngestResponse,
    MotionBatchRequest,
    MotionIngestResponse,
)

if TYPE_CHECKING:
    from ..app import RuntimeState

LOGGER = logging.getLogger(__name__)


def create_sample_routes(state: RuntimeState) -> APIRouter:
    router = APIRouter()

    @router.post("/api/samples/motion", response_model=MotionIngestResponse)
    async def ingest_motion(req: MotionBatchRequest) -> MotionIngestResponse:
        now_ms = state.sessions.now_ms()
        cycles = 0
        for item in req.samples:
            sample = MotionSample(
                x=item.x,
                y=item.y,
                z=item.z,
                timestamp_ms=item.timestamp_ms if item.timestamp_ms is not None else now_ms,
            )
            cycles += len(state.hub.publish_motion(sample))
        return {
            "received": len(req.samples),
            "cycles_detected": cycles,
            "cycle_count": state.sessions.status().cycle_count,
        }

    @router.post("/api/samples/heart-rate", response_model=HeartRateIngestResponse)
    async def ingest_heart_rate(req: HeartRateBatchRequest) -> HeartRateIngestResponse:
        now_ms = state.sessions.now_ms()
        delivered = 0
        for item in req.samples:
            sample = HeartRateSample(
                bpm=item.bpm,
                timestamp_ms=item.timestamp_ms if item.timestamp_ms is not None else now_ms,
            )
            delivered += state.hub.publish_heart_rate(sample)
        if not delivered:
            LOGGER.debug("No heart-rate sink registered; %d sample(s) ignored", len(req.samples))
        return {
            "received": len(req.samples),
            "delivered": delivered,
            "last_heart_rate": state.sessions.status().last_heart_rate,
        }

    return router
