"""Summarize — the two-phase assignee endpoint.

Invariants:
    - Without confirm_assignee: Phase 1, returns candidates, writes nothing
    - With confirm_assignee: Phase 2, commits or fails with a typed error
    - OPTIONS answers 200 with an empty body; CORS headers come from the middleware
    - Caller identity comes from the X-Auth-User-Id header set by the auth proxy
"""

import logging

from fastapi import APIRouter, Depends, Header, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from tea_rotation.config import Settings, get_settings
from tea_rotation.infrastructure.database import get_db
from tea_rotation.schemas.summarize import (
    CommitResponse, ProposalResponse, SummarizeRequest,
)
from tea_rotation.schemas.user import CandidateResponse
from tea_rotation.services.assignment_engine import AssignmentEngine

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/summarize", tags=["summarize"])


def get_assignment_engine(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> AssignmentEngine:
    return AssignmentEngine(
        db,
        candidate_count=settings.candidate_count,
        deprioritized_user_ids=settings.deprioritized_user_ids,
    )


@router.options("", include_in_schema=False)
async def summarize_preflight():
    return Response(status_code=status.HTTP_200_OK)


@router.post("", response_model=ProposalResponse | CommitResponse)
async def summarize(
    body: SummarizeRequest,
    engine: AssignmentEngine = Depends(get_assignment_engine),
    x_auth_user_id: str | None = Header(None),
):
    """Propose candidates, or commit the confirmed assignee."""
    if body.confirm_assignee is None:
        candidates = await engine.propose(body.session_id)
        return ProposalResponse(
            candidates=[CandidateResponse.from_participant(c) for c in candidates],
        )

    result = await engine.commit(
        body.session_id, body.confirm_assignee, auth_user_id=x_auth_user_id,
    )
    return CommitResponse(
        assignee=CandidateResponse.from_participant(result.assignee),
        failed_user_ids=result.failed_user_ids,
    )
