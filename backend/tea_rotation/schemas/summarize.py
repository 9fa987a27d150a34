"""Summarize Schemas — request/response contracts of the two-phase assignment endpoint.

Invariants:
    - Missing or blank confirm_assignee means Phase 1 (propose)
    - Response keys are camelCase on the wire (requiresConfirmation, failedUserIds)
    - Phase 1 returns at most candidate_count candidates
"""

from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tea_rotation.schemas.user import CandidateResponse


class SummarizeRequest(BaseModel):
    """Body of POST /summarize."""
    session_id: UUID
    confirm_assignee: str | None = Field(None, max_length=64)

    @field_validator("confirm_assignee")
    @classmethod
    def blank_means_absent(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        return v or None


class ProposalResponse(BaseModel):
    """Phase 1 — top candidates, nothing written."""
    model_config = ConfigDict(populate_by_name=True)

    requires_confirmation: Literal[True] = Field(
        True, alias="requiresConfirmation",
    )
    candidates: list[CandidateResponse]


class CommitResponse(BaseModel):
    """Phase 2 — assignee committed, session closed."""
    model_config = ConfigDict(populate_by_name=True)

    assignee: CandidateResponse
    committed: Literal[True] = True
    failed_user_ids: list[UUID] = Field(
        default_factory=list, alias="failedUserIds",
    )
