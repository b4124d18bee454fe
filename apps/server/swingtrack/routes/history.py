"""Session history listing and detail endpoints.

The store keeps sessions oldest first; the list endpoint presents them
newest first unless ``order=oldest`` is requested.  ``index`` always refers
to the stored position.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Annotated, Literal

from fastapi import APIRouter, HTTPException, Query

from ..api_models import HistoryEntryResponse, HistoryListResponse
from ._helpers import history_entry

if TYPE_CHECKING:
    from ..app import RuntimeState


def create_history_routes(state: RuntimeState) -> APIRouter:
    router = APIRouter()

    @router.get("/api/history", response_model=HistoryListResponse)
    async def list_history(
        order: Annotated[Literal["newest", "oldest"], Query()] = "newest",
    ) -> HistoryListResponse:
        summaries = await asyncio.to_thread(state.history.load_all)
        entries = [history_entry(index, summary) for index, summary in enumerate(summaries)]
        if order == "newest":
            entries.reverse()
        return {"order": order, "total": len(entries), "sessions": entries}

    @router.get("/api/history/{index}", response_model=HistoryEntryResponse)
    async def get_history_entry(index: int) -> HistoryEntryResponse:
        summaries = await asyncio.to_thread(state.history.load_all)
        if not 0 <= index < len(summaries):
            raise HTTPException(status_code=404, detail="Session not found")
        return history_entry(index, summaries[index])

    return router
