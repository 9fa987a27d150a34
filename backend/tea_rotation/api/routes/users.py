"""Users — add, list and link tea drinkers to their auth identity."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from tea_rotation.infrastructure.database import get_db
from tea_rotation.schemas.user import UserCreate, UserResponse, UserSync
from tea_rotation.services import user_registry

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.post(
    "", response_model=UserResponse, status_code=status.HTTP_201_CREATED,
)
async def create_user(body: UserCreate, db: AsyncSession = Depends(get_db)):
    user = await user_registry.create_user(db, body.name)
    return UserResponse.from_user(user)


@router.get("", response_model=list[UserResponse])
async def list_users(db: AsyncSession = Depends(get_db)):
    users = await user_registry.list_users(db)
    return [UserResponse.from_user(u) for u in users]


@router.post("/sync", response_model=UserResponse)
async def sync_user(
    body: UserSync, response: Response, db: AsyncSession = Depends(get_db),
):
    """Link a signed-in identity to its tea drinker, creating one if needed."""
    user, created = await user_registry.sync_user(
        db, body.auth_user_id, body.display_name,
    )
    if created:
        response.status_code = status.HTTP_201_CREATED
    return UserResponse.from_user(user)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: UUID, db: AsyncSession = Depends(get_db)):
    return UserResponse.from_user(await user_registry.get_user_or_404(db, user_id))
