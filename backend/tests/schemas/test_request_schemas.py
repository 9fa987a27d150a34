"""Request Schemas — boundary validation for users, orders and summarize.

Invariants:
    - Names and drink types are stripped; blank values rejected
    - sugar_level limited to the SugarLevel values
    - Blank confirm_assignee means "propose", not "confirm"
"""

from uuid import uuid4

import pytest
from pydantic import ValidationError

from tea_rotation.core.domain_types import SugarLevel
from tea_rotation.schemas.session import OrderUpsert
from tea_rotation.schemas.summarize import (
    CommitResponse, ProposalResponse, SummarizeRequest,
)
from tea_rotation.schemas.user import CandidateResponse, UserCreate, UserSync
from tea_rotation.core.rank_candidates import Participant


# --- UserCreate ---------------------------------------------------------------

def test_user_name_is_stripped():
    assert UserCreate(name="  Alice ").name == "Alice"


def test_blank_user_name_rejected():
    with pytest.raises(ValidationError):
        UserCreate(name="   ")


def test_user_name_max_length_enforced():
    with pytest.raises(ValidationError):
        UserCreate(name="x" * 51)


# --- UserSync -----------------------------------------------------------------

def test_sync_display_name_is_first_word_of_full_name():
    assert UserSync(auth_user_id="a1", full_name="  Dana  Katherine Scully").display_name == "Dana"


def test_sync_display_name_falls_back_to_email():
    body = UserSync(auth_user_id="a1", full_name="   ", email="fox.mulder@fbi.gov")
    assert body.display_name == "fox.mulder"


def test_sync_requires_a_name_source():
    with pytest.raises(ValidationError):
        UserSync(auth_user_id="a1")
    with pytest.raises(ValidationError):
        UserSync(auth_user_id="a1", email="@nowhere")


def test_sync_rejects_blank_auth_id():
    with pytest.raises(ValidationError):
        UserSync(auth_user_id="  ", full_name="Dana")


# --- OrderUpsert --------------------------------------------------------------

def test_order_defaults_to_normal_sugar_not_excused():
    order = OrderUpsert(user_id=uuid4(), drink_type=" Tea ")
    assert order.drink_type == "Tea"
    assert order.sugar_level is SugarLevel.NORMAL
    assert order.is_excused is False


def test_order_rejects_unknown_sugar_level():
    with pytest.raises(ValidationError):
        OrderUpsert(user_id=uuid4(), drink_type="Tea", sugar_level="Extra")


def test_order_rejects_blank_drink():
    with pytest.raises(ValidationError):
        OrderUpsert(user_id=uuid4(), drink_type="  ")


# --- SummarizeRequest ---------------------------------------------------------

def test_missing_confirm_assignee_is_none():
    req = SummarizeRequest(session_id=uuid4())
    assert req.confirm_assignee is None


def test_blank_confirm_assignee_is_none():
    req = SummarizeRequest(session_id=uuid4(), confirm_assignee="  ")
    assert req.confirm_assignee is None


def test_session_id_must_be_uuid():
    with pytest.raises(ValidationError):
        SummarizeRequest(session_id="not-a-session")


# --- Responses ----------------------------------------------------------------

def _participant(drinks, bought) -> Participant:
    return Participant(
        user_id=uuid4(), name="Alice", drink_count=drinks, total_drinks_bought=bought,
    )


def test_candidate_reports_infinite_ratio_without_infinity():
    candidate = CandidateResponse.from_participant(_participant(4, 0))
    assert candidate.sponsor_ratio is None
    assert candidate.sponsor_ratio_infinite is True


def test_candidate_reports_finite_ratio():
    candidate = CandidateResponse.from_participant(_participant(3, 1))
    assert candidate.sponsor_ratio == 3.0
    assert candidate.sponsor_ratio_infinite is False


def test_proposal_serializes_camel_case():
    proposal = ProposalResponse(candidates=[])
    assert proposal.model_dump(by_alias=True) == {
        "requiresConfirmation": True, "candidates": [],
    }


def test_commit_serializes_failed_user_ids_camel_case():
    failed = uuid4()
    commit = CommitResponse(
        assignee=CandidateResponse.from_participant(_participant(1, 1)),
        failed_user_ids=[failed],
    )
    dumped = commit.model_dump(by_alias=True, mode="json")
    assert dumped["committed"] is True
    assert dumped["failedUserIds"] == [str(failed)]
