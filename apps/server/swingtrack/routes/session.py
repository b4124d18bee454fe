"""Recording control endpoints – start/stop a session, live status."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from fastapi import APIRouter

from ..api_models import LiveStatusResponse, SessionSummaryResponse
from ..domain_models import SessionStateError
from ._helpers import conflict_from

if TYPE_CHECKING:
    from ..app import RuntimeState


def create_session_routes(state: RuntimeState) -> APIRouter:
    router = APIRouter()

    @router.get("/api/session/status", response_model=LiveStatusResponse)
    async def get_session_status() -> LiveStatusResponse:
        return state.sessions.status().to_dict()

    @router.post("/api/session/start", response_model=LiveStatusResponse)
    async def start_session() -> LiveStatusResponse:
        try:
            return state.sessions.start().to_dict()
        except SessionStateError as exc:
            raise conflict_from(exc) from exc

    @router.post("/api/session/stop", response_model=SessionSummaryResponse)
    async def stop_session() -> SessionSummaryResponse:
        # Appending to history does blocking storage I/O.
        try:
            summary = await asyncio.to_thread(state.sessions.stop)
        except SessionStateError as exc:
            raise conflict_from(exc) from exc
        return summary.to_dict()

    return router
