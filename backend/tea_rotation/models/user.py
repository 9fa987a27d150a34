"""User ORM — a tea drinker with rotation bookkeeping.

Invariants:
    - id is UUID primary key; all rotation logic keys on id
    - name is display-only and NOT unique at the DB level
    - drink_count / total_drinks_bought only ever move through atomic SQL increments
    - last_assigned_at NULL means "never assigned"

Design Decisions:
    - auth_user_id links the row to the upstream auth identity (nullable, unique)
    - last_ordered_drink / last_sugar_level cache the latest finalized order for prefill
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Integer, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from tea_rotation.db.base import Base


class User(Base):
    """User entity — participant in the tea rotation."""
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    auth_user_id: Mapped[str | None] = mapped_column(
        String(64), nullable=True, unique=True,
    )
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    drink_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
    total_drinks_bought: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
    last_assigned_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    last_ordered_drink: Mapped[str | None] = mapped_column(
        String(50), nullable=True,
    )
    last_sugar_level: Mapped[str | None] = mapped_column(
        String(20), nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
