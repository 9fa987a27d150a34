"""User Schemas — user creation and the rotation-facing user payloads.

Invariants:
    - UserCreate.name: 1-50 chars after stripping
    - UserSync always yields a non-empty display name (first word of full_name, else
      the email local part)
    - sponsor_ratio is always finite in JSON; an infinite ratio is reported as
      sponsor_ratio=None with sponsor_ratio_infinite=True
"""

import math
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from tea_rotation.core.rank_candidates import Participant, sponsor_ratio


class UserCreate(BaseModel):
    """User creation — validates and strips the display name."""
    name: str = Field(min_length=1, max_length=50)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty or whitespace")
        return v


class CandidateResponse(BaseModel):
    """User fields the UI needs to show ratio and recency for a candidate or assignee."""
    id: UUID
    name: str
    drink_count: int
    total_drinks_bought: int
    last_assigned_at: datetime | None = None
    sponsor_ratio: float | None = None
    sponsor_ratio_infinite: bool = False

    @classmethod
    def from_participant(cls, participant: Participant) -> "CandidateResponse":
        return cls(
            id=participant.user_id,
            name=participant.name,
            drink_count=participant.drink_count,
            total_drinks_bought=participant.total_drinks_bought,
            last_assigned_at=participant.last_assigned_at,
            **_ratio_fields(participant.sponsor_ratio),
        )


class UserResponse(CandidateResponse):
    """Full user view, including cached order preferences."""
    last_ordered_drink: str | None = None
    last_sugar_level: str | None = None

    @classmethod
    def from_user(cls, user) -> "UserResponse":
        return cls(
            id=user.id,
            name=user.name,
            drink_count=user.drink_count,
            total_drinks_bought=user.total_drinks_bought,
            last_assigned_at=user.last_assigned_at,
            last_ordered_drink=user.last_ordered_drink,
            last_sugar_level=user.last_sugar_level,
            **_ratio_fields(
                sponsor_ratio(user.drink_count, user.total_drinks_bought),
            ),
        )


def _ratio_fields(ratio: float) -> dict:
    if math.isinf(ratio):
        return {"sponsor_ratio": None, "sponsor_ratio_infinite": True}
    return {"sponsor_ratio": ratio, "sponsor_ratio_infinite": False}


class UserSync(BaseModel):
    """Auth identity to link, with the profile fields a display name is derived from."""
    auth_user_id: str = Field(min_length=1, max_length=64)
    full_name: str | None = Field(None, max_length=200)
    email: str | None = Field(None, max_length=254)

    @field_validator("auth_user_id")
    @classmethod
    def strip_auth_user_id(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("auth_user_id cannot be empty or whitespace")
        return v

    @model_validator(mode="after")
    def require_display_name(self) -> "UserSync":
        if not self.display_name:
            raise ValueError("full_name or email must yield a display name")
        return self

    @property
    def display_name(self) -> str:
        """First word of the full name, else the local part of the email."""
        full_name = (self.full_name or "").strip()
        if full_name:
            return full_name.split()[0][:50]
        return (self.email or "").strip().split("@")[0][:50]
