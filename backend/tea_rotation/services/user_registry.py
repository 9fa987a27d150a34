"""User Registry — user creation, lookup, auth identity linking and caller resolution.

Invariants:
    - An auth identity is linked to at most one user (users.auth_user_id is unique)
    - sync_user never re-links a user that already carries another identity
"""

import logging
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tea_rotation.core.errors import DuplicateUserNameError, ResourceNotFoundError
from tea_rotation.models.user import User

logger = logging.getLogger(__name__)


async def create_user(db: AsyncSession, name: str) -> User:
    """Add a user. Names are compared case-insensitively to catch duplicates."""
    result = await db.execute(
        select(User.id).where(func.lower(User.name) == name.lower()),
    )
    if result.first() is not None:
        raise DuplicateUserNameError(name)
    user = User(name=name)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info(f"User '{name}' added", extra={"user_id": str(user.id)})
    return user


async def list_users(db: AsyncSession) -> list[User]:
    result = await db.execute(select(User).order_by(User.name.asc(), User.id.asc()))
    return list(result.scalars().all())


async def get_user_or_404(db: AsyncSession, user_id: UUID) -> User:
    user = await db.get(User, user_id)
    if not user:
        raise ResourceNotFoundError("User", str(user_id))
    return user


async def resolve_user_id_by_auth(
    db: AsyncSession, auth_user_id: str | None,
) -> UUID | None:
    """Map the upstream auth identity to a users.id; None when unknown."""
    if not auth_user_id:
        return None
    result = await db.execute(
        select(User.id).where(User.auth_user_id == auth_user_id),
    )
    return result.scalar_one_or_none()


async def sync_user(
    db: AsyncSession, auth_user_id: str, name: str,
) -> tuple[User, bool]:
    """Link an auth identity to a user. Returns (user, created).

    An already-linked identity returns its user unchanged. Otherwise an unlinked
    user with the same name (case-insensitive) is claimed, else a new user is added.
    """
    result = await db.execute(
        select(User).where(User.auth_user_id == auth_user_id),
    )
    linked = result.scalar_one_or_none()
    if linked:
        return linked, False

    result = await db.execute(
        select(User)
        .where(func.lower(User.name) == name.lower())
        .order_by(User.created_at.asc())
        .limit(1)
    )
    user = result.scalar_one_or_none()
    if user and user.auth_user_id is not None:
        raise DuplicateUserNameError(name)

    created = user is None
    if created:
        user = User(name=name, auth_user_id=auth_user_id)
        db.add(user)
    else:
        user.auth_user_id = auth_user_id
    await db.commit()
    await db.refresh(user)
    logger.info(
        f"Auth identity linked to '{user.name}'",
        extra={"user_id": str(user.id)},
    )
    return user, created
