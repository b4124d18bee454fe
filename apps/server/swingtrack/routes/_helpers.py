"""Shared route helpers used across multiple route modules."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import HTTPException

from ..domain_models import SessionStateError

if TYPE_CHECKING:
    from ..domain_models import SessionSummary


def conflict_from(exc: SessionStateError) -> HTTPException:
    return HTTPException(status_code=409, detail=str(exc))


def history_entry(index: int, summary: SessionSummary) -> dict[str, object]:
    return {"index": index, **summary.to_dict()}
