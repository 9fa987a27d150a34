"""Order Intake — submit and revoke drink orders while a session is active.

Invariants:
    - One order per (session, user): resubmission overwrites drink, sugar, excused flag
      and created_at in a single upsert statement
    - Orders of a completed session are immutable (SessionClosedError)
"""

import logging
import uuid
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from tea_rotation.core.domain_types import SessionStatus
from tea_rotation.core.errors import (
    DatabaseError, ResourceNotFoundError, SessionClosedError,
)
from tea_rotation.models.order import Order
from tea_rotation.schemas.session import OrderUpsert
from tea_rotation.services.session_queries import get_session_or_404
from tea_rotation.services.user_registry import get_user_or_404

logger = logging.getLogger(__name__)

_UPSERT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


async def _require_active(db: AsyncSession, session_id: UUID) -> None:
    session = await get_session_or_404(db, session_id)
    if session.status != SessionStatus.ACTIVE.value:
        raise SessionClosedError(str(session_id))


async def upsert_order(
    db: AsyncSession,
    session_id: UUID,
    body: OrderUpsert,
    now: datetime | None = None,
) -> Order:
    """Insert or overwrite the user's order for this session."""
    await _require_active(db, session_id)
    await get_user_or_404(db, body.user_id)

    dialect = db.get_bind().dialect.name
    insert = _UPSERT_INSERTS.get(dialect)
    if insert is None:
        raise DatabaseError(f"no upsert support for dialect '{dialect}'", "upsert")

    values = {
        "drink_type": body.drink_type,
        "sugar_level": body.sugar_level.value,
        "is_excused": body.is_excused,
        "created_at": now or datetime.now(timezone.utc),
    }
    stmt = insert(Order).values(
        id=uuid.uuid4(), session_id=session_id, user_id=body.user_id, **values,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["session_id", "user_id"], set_=values,
    )
    await db.execute(stmt)
    await db.commit()

    result = await db.execute(
        select(Order)
        .where(Order.session_id == session_id)
        .where(Order.user_id == body.user_id)
        .execution_options(populate_existing=True)
    )
    order = result.scalar_one()
    logger.info(
        "Order placed",
        extra={"session_id": str(session_id), "user_id": str(body.user_id)},
    )
    return order


async def revoke_order(db: AsyncSession, session_id: UUID, user_id: UUID) -> None:
    """Remove the user's order from an active session."""
    await _require_active(db, session_id)
    result = await db.execute(
        delete(Order)
        .where(Order.session_id == session_id)
        .where(Order.user_id == user_id)
    )
    if result.rowcount == 0:
        raise ResourceNotFoundError("Order", f"{session_id}/{user_id}")
    await db.commit()
    logger.info(
        "Order revoked",
        extra={"session_id": str(session_id), "user_id": str(user_id)},
    )
