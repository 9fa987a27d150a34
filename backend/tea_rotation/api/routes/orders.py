"""Orders — place, list, and revoke drink orders within a session."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from tea_rotation.infrastructure.database import get_db
from tea_rotation.schemas.session import OrderResponse, OrderUpsert
from tea_rotation.services import order_intake, session_queries

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/sessions/{session_id}/orders", tags=["orders"])


@router.put("", response_model=OrderResponse)
async def place_order(
    session_id: UUID, body: OrderUpsert, db: AsyncSession = Depends(get_db),
):
    """Submit or overwrite the user's order."""
    order = await order_intake.upsert_order(db, session_id, body)
    return OrderResponse.from_order(order)


@router.get("", response_model=list[OrderResponse])
async def list_orders(session_id: UUID, db: AsyncSession = Depends(get_db)):
    await session_queries.get_session_or_404(db, session_id)
    orders = await session_queries.list_orders(db, session_id)
    return [OrderResponse.from_order(o) for o in orders]


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def revoke_order(
    session_id: UUID, user_id: UUID, db: AsyncSession = Depends(get_db),
):
    await order_intake.revoke_order(db, session_id, user_id)
