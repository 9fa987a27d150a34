"""Session ORM — one bounded round of tea ordering.

Invariants:
    - id is UUID primary key (client-side default)
    - status transitions: active -> completed, only through the summarize commit
    - ended_at, assignee_name, total_drinks_in_session, summarized_by are set together
      with status=completed and never before
    - At most one active session (application-level check, see services/session_queries.py)

Design Decisions:
    - assignee_name denormalized: the summary view reads one row, no JOIN
    - cascade delete for orders: a session owns its orders
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Integer, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from tea_rotation.core.domain_types import SessionStatus
from tea_rotation.db.base import Base


class Session(Base):
    """Session aggregate root — owns the round's orders."""
    __tablename__ = "sessions"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=SessionStatus.ACTIVE.value,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    ended_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    assignee_name: Mapped[str | None] = mapped_column(
        String(50), nullable=True,
    )
    total_drinks_in_session: Mapped[int | None] = mapped_column(
        Integer, nullable=True,
    )
    summarized_by: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    orders: Mapped[list["Order"]] = relationship(
        "Order", back_populates="session",
        cascade="all, delete-orphan",
    )
