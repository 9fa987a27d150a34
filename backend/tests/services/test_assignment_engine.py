"""Assignment Engine — service-level behavior of the commit transaction.

Invariants:
    - A per-participant bookkeeping failure is rolled back to its savepoint, reported
      in failed_user_ids, and does not stop the session from closing
    - A session closed between read and claim raises ConcurrentModificationError and
      leaves every counter untouched
    - A failure while stamping the assignee rolls the whole commit back
"""

import pytest
from sqlalchemy import update
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from tea_rotation.core.errors import (
    ConcurrentModificationError, DatabaseError, NoOrdersFoundError,
)
from tea_rotation.models.session import Session as SessionModel
from tea_rotation.models.user import User
from tea_rotation.services.assignment_engine import AssignmentEngine


async def _pair(seed):
    session = await seed.session()
    alice = await seed.user("Alice", drink_count=3, total_drinks_bought=1)
    bob = await seed.user("Bob", drink_count=3, total_drinks_bought=3)
    await seed.order(session, alice, drink_type="Tea", sugar_level="Less")
    await seed.order(session, bob, drink_type="Coffee")
    return session, alice, bob


async def test_failed_participant_is_reported_and_skipped(
    client, seed, monkeypatch,
):
    session, alice, bob = await _pair(seed)
    original = AssignmentEngine._record_participant

    async def flaky(self, order):
        if order.user_id == bob.id:
            raise OperationalError("UPDATE users", {}, Exception("row locked"))
        await original(self, order)

    monkeypatch.setattr(AssignmentEngine, "_record_participant", flaky)

    res = await client.post("/api/v1/summarize", json={
        "session_id": str(session.id), "confirm_assignee": str(alice.id),
    })

    assert res.status_code == 200
    assert res.json()["failedUserIds"] == [str(bob.id)]
    bob_after = await seed.get(User, bob.id)
    alice_after = await seed.get(User, alice.id)
    assert bob_after.drink_count == 3
    assert bob_after.last_ordered_drink is None
    assert alice_after.drink_count == 4
    assert alice_after.total_drinks_bought == 3
    assert (await seed.get(SessionModel, session.id)).status == "completed"


async def test_session_closed_between_read_and_claim(
    test_session_factory, seed, monkeypatch,
):
    session, alice, bob = await _pair(seed)
    original = AssignmentEngine._claim_session

    async def racing_claim(self, session_id, *args):
        async with test_session_factory() as other:
            await other.execute(
                update(SessionModel)
                .where(SessionModel.id == session_id)
                .values(status="completed", assignee_name="Bob")
            )
            await other.commit()
        await original(self, session_id, *args)

    monkeypatch.setattr(AssignmentEngine, "_claim_session", racing_claim)

    async with test_session_factory() as db:
        with pytest.raises(ConcurrentModificationError):
            await AssignmentEngine(db).commit(session.id, str(alice.id))

    alice_after = await seed.get(User, alice.id)
    assert alice_after.total_drinks_bought == 1
    assert alice_after.drink_count == 3
    assert (await seed.get(SessionModel, session.id)).assignee_name == "Bob"


async def test_assignee_stamp_failure_rolls_back_everything(
    test_session_factory, seed, monkeypatch,
):
    session, alice, bob = await _pair(seed)

    async def broken_stamp(self, *args):
        raise OperationalError("UPDATE users", {}, Exception("disk full"))

    monkeypatch.setattr(AssignmentEngine, "_stamp_assignee", broken_stamp)

    async with test_session_factory() as db:
        with pytest.raises(DatabaseError, match="disk full"):
            await AssignmentEngine(db).commit(session.id, str(alice.id))

    assert (await seed.get(SessionModel, session.id)).status == "active"
    assert (await seed.get(User, bob.id)).drink_count == 3


async def test_rank_raises_when_no_participants(test_session_factory, seed):
    session = await seed.session()
    async with test_session_factory() as db:
        with pytest.raises(NoOrdersFoundError):
            await AssignmentEngine(db).rank(session.id)


async def test_candidate_count_is_configurable(test_session_factory, seed):
    session = await seed.session()
    for name in ("A", "B", "C"):
        await seed.order(session, await seed.user(name, drink_count=1, total_drinks_bought=1))

    async with test_session_factory() as db:
        candidates = await AssignmentEngine(db, candidate_count=3).propose(session.id)

    assert [c.name for c in candidates] == ["A", "B", "C"]


async def test_reload_failure_after_commit_still_reports_success(
    client, seed, monkeypatch,
):
    session, alice, bob = await _pair(seed)
    original_get = AsyncSession.get

    async def flaky_get(self, entity, ident, **kwargs):
        if entity is User and kwargs.get("populate_existing"):
            raise OperationalError("SELECT users", {}, Exception("connection lost"))
        return await original_get(self, entity, ident, **kwargs)

    monkeypatch.setattr(AsyncSession, "get", flaky_get)

    res = await client.post("/api/v1/summarize", json={
        "session_id": str(session.id), "confirm_assignee": str(alice.id),
    })

    assert res.status_code == 200
    body = res.json()
    assert body["committed"] is True
    assert body["assignee"]["id"] == str(alice.id)
    assert body["assignee"]["total_drinks_bought"] == 1
    monkeypatch.undo()
    assert (await seed.get(User, alice.id)).total_drinks_bought == 3
    assert (await seed.get(SessionModel, session.id)).status == "completed"
