"""Session Lifecycle — start, look up, summarize the breakdown of, and clear tea sessions.

Invariants:
    - POST /sessions reuses the active session if there is one (200), else creates (201)
    - /current and /active are declared before /{session_id}
    - Routes never contain business logic (delegate to services/session_queries.py)
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from tea_rotation.config import Settings, get_settings
from tea_rotation.infrastructure.database import get_db
from tea_rotation.schemas.session import (
    ClearSessionsResponse,
    CurrentSessionResponse,
    SessionResponse,
    SessionSummaryResponse,
)
from tea_rotation.services import session_queries

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/sessions", tags=["sessions"])


@router.post(
    "", response_model=SessionResponse, status_code=status.HTTP_201_CREATED,
)
async def start_session(response: Response, db: AsyncSession = Depends(get_db)):
    """Start tea time. Only one session can be active at a time."""
    session, created = await session_queries.start_session(db)
    if not created:
        response.status_code = status.HTTP_200_OK
    return SessionResponse.from_session(session)


@router.get("/current", response_model=CurrentSessionResponse)
async def get_current_session(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Active session, or one summarized within the last few minutes."""
    session = await session_queries.get_current_session(
        db, window_minutes=settings.recent_summary_window_minutes,
    )
    return CurrentSessionResponse(
        session=SessionResponse.from_session(session) if session else None,
    )


@router.delete("/active", response_model=ClearSessionsResponse)
async def clear_active_sessions(db: AsyncSession = Depends(get_db)):
    """Admin cleanup: drop every active session and its orders."""
    deleted = await session_queries.clear_active_sessions(db)
    return ClearSessionsResponse(deleted=deleted)


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(session_id: UUID, db: AsyncSession = Depends(get_db)):
    session = await session_queries.get_session_or_404(db, session_id)
    return SessionResponse.from_session(session)


@router.get("/{session_id}/summary", response_model=SessionSummaryResponse)
async def get_session_summary(
    session_id: UUID, db: AsyncSession = Depends(get_db),
):
    """What to make and for whom. Excused orders are listed too."""
    summary = await session_queries.build_summary(db, session_id)
    return SessionSummaryResponse(**summary)
