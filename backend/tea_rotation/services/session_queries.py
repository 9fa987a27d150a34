"""Session Queries — reads and lifecycle writes for sessions and their orders.

Invariants:
    - load_participants never returns excused orders; every returned order has its user loaded
    - get_current_session prefers the active session, then a session completed within the
      grace window, else None
    - start_session never creates a second active session (application-level check)
    - build_summary counts ALL orders, excused included

Design Decisions:
    - Sessions raise domain errors (ResourceNotFoundError) instead of HTTPException:
      the global handler owns the HTTP mapping
"""

import logging
from datetime import datetime, timedelta, timezone
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from tea_rotation.core.domain_types import SessionStatus
from tea_rotation.core.errors import ResourceNotFoundError
from tea_rotation.core.order_summary import (
    OrderLine, count_by_drink, names_by_order, order_sentence,
)
from tea_rotation.models.order import Order
from tea_rotation.models.session import Session as SessionModel

logger = logging.getLogger(__name__)


async def get_session_or_404(db: AsyncSession, session_id: UUID) -> SessionModel:
    """Get session or raise ResourceNotFoundError."""
    result = await db.execute(
        select(SessionModel).where(SessionModel.id == session_id),
    )
    session = result.scalar_one_or_none()
    if not session:
        raise ResourceNotFoundError("Session", str(session_id))
    return session


async def get_active_session(db: AsyncSession) -> SessionModel | None:
    result = await db.execute(
        select(SessionModel)
        .where(SessionModel.status == SessionStatus.ACTIVE.value)
        .order_by(SessionModel.created_at.asc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def get_current_session(
    db: AsyncSession, window_minutes: int = 5, now: datetime | None = None,
) -> SessionModel | None:
    """Active session, else the latest one completed within the grace window."""
    active = await get_active_session(db)
    if active:
        return active
    now = now or datetime.now(timezone.utc)
    cutoff = now - timedelta(minutes=window_minutes)
    result = await db.execute(
        select(SessionModel)
        .where(SessionModel.status == SessionStatus.COMPLETED.value)
        .where(SessionModel.ended_at >= cutoff)
        .order_by(SessionModel.ended_at.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def start_session(db: AsyncSession) -> tuple[SessionModel, bool]:
    """Return (session, created). An existing active session is reused."""
    active = await get_active_session(db)
    if active:
        return active, False
    session = SessionModel(status=SessionStatus.ACTIVE.value)
    db.add(session)
    await db.commit()
    await db.refresh(session)
    logger.info("Tea session started", extra={"session_id": str(session.id)})
    return session, True


async def load_participants(db: AsyncSession, session_id: UUID) -> list[Order]:
    """Non-excused orders of a session with their users joined, oldest first."""
    result = await db.execute(
        select(Order)
        .where(Order.session_id == session_id)
        .where(Order.is_excused.is_(False))
        .order_by(Order.created_at.asc(), Order.id.asc())
    )
    return [order for order in result.scalars().all() if order.user is not None]


async def list_orders(db: AsyncSession, session_id: UUID) -> list[Order]:
    result = await db.execute(
        select(Order)
        .where(Order.session_id == session_id)
        .order_by(Order.created_at.asc(), Order.id.asc())
    )
    return list(result.scalars().all())


async def build_summary(db: AsyncSession, session_id: UUID) -> dict:
    """Drink/sugar breakdown, names per drink, and the instruction sentence."""
    session = await get_session_or_404(db, session_id)
    orders = await list_orders(db, session_id)
    lines = [
        OrderLine(
            drink_type=order.drink_type,
            sugar_level=order.sugar_level,
            user_name=order.user.name if order.user else None,
            is_excused=order.is_excused,
        )
        for order in orders
    ]
    return {
        "session_id": session.id,
        "status": session.status,
        "assignee_name": session.assignee_name,
        "total_orders": len(lines),
        "counts": count_by_drink(lines),
        "names": names_by_order(lines),
        "sentence": order_sentence(lines),
    }


async def clear_active_sessions(db: AsyncSession) -> int:
    """Delete every active session and its orders. Completed history is kept."""
    result = await db.execute(
        select(SessionModel.id)
        .where(SessionModel.status == SessionStatus.ACTIVE.value)
    )
    session_ids = list(result.scalars().all())
    if not session_ids:
        return 0
    await db.execute(
        delete(Order).where(Order.session_id.in_(session_ids)),
    )
    await db.execute(
        delete(SessionModel).where(SessionModel.id.in_(session_ids)),
    )
    await db.commit()
    logger.warning(f"Cleared {len(session_ids)} active session(s)")
    return len(session_ids)
