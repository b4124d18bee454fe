"""Health check endpoint."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from fastapi import APIRouter

from ..api_models import HealthResponse

if TYPE_CHECKING:
    from ..app import RuntimeState


def create_health_routes(state: RuntimeState) -> APIRouter:
    router = APIRouter()

    @router.get("/api/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        history_size = await asyncio.to_thread(state.history.count)
        return {
            "status": "ok",
            "session_phase": str(state.sessions.phase),
            "history_size": history_size,
            "tick_failures": state.sessions.tick_failure_count,
        }

    return router
