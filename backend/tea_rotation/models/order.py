"""Order ORM — one drink request per (session, user).

Invariants:
    - (session_id, user_id) is unique: resubmitting overwrites the previous order
    - is_excused orders never count toward fairness or counters, but still display
    - Deleted together with their session
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    String, Boolean, DateTime, ForeignKey, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from tea_rotation.db.base import Base


class Order(Base):
    """Order entity — a user's drink for one session."""
    __tablename__ = "orders"
    __table_args__ = (
        UniqueConstraint("session_id", "user_id", name="uq_orders_session_user"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    session_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("sessions.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    drink_type: Mapped[str] = mapped_column(String(50), nullable=False)
    sugar_level: Mapped[str] = mapped_column(String(20), nullable=False)
    is_excused: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    session: Mapped["Session"] = relationship(
        "Session", back_populates="orders",
    )
    user: Mapped["User"] = relationship("User", lazy="joined")
