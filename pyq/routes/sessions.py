"""Endpoints for recorded sessions and time entries."""
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session as DbSession

from pyq.database import get_db
from pyq.services.session_service import (
    list_sessions,
    list_time_entries,
    serialize_session_row,
    serialize_time_entry_row,
)

router = APIRouter(prefix="/api", tags=["sessions"])


@router.get("/sessions")
def get_sessions(
    db: Annotated[DbSession, Depends(get_db)],
    subject: str | None = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> list[dict[str, object]]:
    """List recorded session summaries, newest first."""
    return [
        serialize_session_row(row)
        for row in list_sessions(db, subject=subject, limit=limit, offset=offset)
    ]


@router.get("/time-entries")
def get_time_entries(
    db: Annotated[DbSession, Depends(get_db)],
    subject: str | None = Query(None),
    activity_type: str | None = Query(None, alias="activityType"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> list[dict[str, object]]:
    """List recorded time entries, newest first."""
    return [
        serialize_time_entry_row(row)
        for row in list_time_entries(
            db,
            subject=subject,
            activity_type=activity_type,
            limit=limit,
            offset=offset,
        )
    ]
