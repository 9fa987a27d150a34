"""Session & Order Schemas — Pydantic models with field-level validation for API boundaries.

Invariants:
    - OrderUpsert.drink_type: 1-50 chars, stripped, non-empty
    - OrderUpsert.sugar_level is one of SugarLevel
    - Summary payload counts excused orders (display only)
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from tea_rotation.core.domain_types import SugarLevel


class SessionResponse(BaseModel):
    """Session response — public-facing session data."""
    id: UUID
    status: str
    created_at: datetime
    ended_at: datetime | None = None
    assignee_name: str | None = None
    total_drinks_in_session: int | None = None
    summarized_by: UUID | None = None

    @classmethod
    def from_session(cls, session) -> "SessionResponse":
        return cls(
            id=session.id,
            status=session.status,
            created_at=session.created_at,
            ended_at=session.ended_at,
            assignee_name=session.assignee_name,
            total_drinks_in_session=session.total_drinks_in_session,
            summarized_by=session.summarized_by,
        )


class CurrentSessionResponse(BaseModel):
    """The active session, a just-finished one, or nothing."""
    session: SessionResponse | None = None


class OrderUpsert(BaseModel):
    """Order submission — the latest one per (session, user) wins."""
    user_id: UUID
    drink_type: str = Field(min_length=1, max_length=50)
    sugar_level: SugarLevel = SugarLevel.NORMAL
    is_excused: bool = False

    @field_validator("drink_type")
    @classmethod
    def strip_drink_type(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("drink_type cannot be empty or whitespace")
        return v


class OrderResponse(BaseModel):
    id: UUID
    session_id: UUID
    user_id: UUID
    user_name: str | None = None
    drink_type: str
    sugar_level: str
    is_excused: bool
    created_at: datetime

    @classmethod
    def from_order(cls, order) -> "OrderResponse":
        return cls(
            id=order.id,
            session_id=order.session_id,
            user_id=order.user_id,
            user_name=order.user.name if order.user else None,
            drink_type=order.drink_type,
            sugar_level=order.sugar_level,
            is_excused=order.is_excused,
            created_at=order.created_at,
        )


class SessionSummaryResponse(BaseModel):
    """Order breakdown shown once the session is summarized."""
    session_id: UUID
    status: str
    assignee_name: str | None = None
    total_orders: int
    counts: dict[str, dict[str, int]]
    names: dict[str, list[str]]
    sentence: str


class ClearSessionsResponse(BaseModel):
    deleted: int
