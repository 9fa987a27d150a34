"""Assignment Engine — two-phase pick of who makes the tea for a session.

Invariants:
    - propose() is read-only: it never writes users or sessions
    - commit() accepts any participating (non-excused) user, not only proposed candidates
    - commit() claims the session with a conditional UPDATE ... WHERE status='active' as its
      first write; zero rows -> ConcurrentModificationError before any counter moves
    - Counters change only through SQL increments (drink_count + 1), never read-modify-write
    - Per-participant bookkeeping runs in its own SAVEPOINT; a failure there is rolled back,
      logged, and reported in failed_user_ids without aborting the commit
    - Assignee stamping and the session claim are all-or-nothing with the transaction
    - Nothing after db.commit() can fail the request: the assignee reload falls back
      to the pre-commit participant

Design Decisions:
    - Ranking delegated to core/rank_candidates.py (pure); this module is the IO shell
    - Summarizer resolved before the claim so the claim writes every session field at once
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tea_rotation.core.domain_types import SessionStatus
from tea_rotation.core.errors import (
    ConcurrentModificationError,
    DatabaseError,
    InvalidAssigneeError,
    NoOrdersFoundError,
    TeaRotationError,
)
from tea_rotation.core.rank_candidates import (
    Participant, find_participant, rank_participants, top_candidates,
)
from tea_rotation.infrastructure.database import describe_db_error
from tea_rotation.models.order import Order
from tea_rotation.models.session import Session as SessionModel
from tea_rotation.models.user import User
from tea_rotation.services.session_queries import load_participants
from tea_rotation.services.user_registry import resolve_user_id_by_auth

logger = logging.getLogger(__name__)


@dataclass
class CommitResult:
    """Outcome of a successful commit."""
    assignee: Participant
    failed_user_ids: list[UUID] = field(default_factory=list)


def to_participant(user: User) -> Participant:
    return Participant(
        user_id=user.id,
        name=user.name,
        drink_count=user.drink_count,
        total_drinks_bought=user.total_drinks_bought,
        last_assigned_at=user.last_assigned_at,
    )


class AssignmentEngine:
    """Propose candidates for a session, then commit the confirmed assignee."""

    def __init__(
        self,
        db: AsyncSession,
        candidate_count: int = 2,
        deprioritized_user_ids: list[str] | None = None,
    ):
        self.db = db
        self.candidate_count = candidate_count
        self.deprioritized_user_ids = frozenset(deprioritized_user_ids or ())

    # ─── Phase 1 ────────────────────────────────────────────────

    async def rank(self, session_id: UUID) -> list[Participant]:
        """All participants, most owed first. Raises NoOrdersFoundError when empty."""
        orders = await self._participating_orders(session_id)
        return rank_participants(
            [to_participant(order.user) for order in orders],
            self.deprioritized_user_ids,
        )

    async def propose(self, session_id: UUID) -> list[Participant]:
        """Top candidates for human confirmation. Read-only."""
        candidates = top_candidates(
            await self.rank(session_id), self.candidate_count,
        )
        logger.info(
            f"Proposed {len(candidates)} candidate(s)",
            extra={
                "session_id": str(session_id),
                "candidate_ids": [str(c.user_id) for c in candidates],
            },
        )
        return candidates

    # ─── Phase 2 ────────────────────────────────────────────────

    async def commit(
        self,
        session_id: UUID,
        confirm_assignee: str,
        auth_user_id: str | None = None,
        now: datetime | None = None,
    ) -> CommitResult:
        """Close the session with the confirmed assignee and update every counter."""
        now = now or datetime.now(timezone.utc)
        orders = await self._participating_orders(session_id)
        participants = [to_participant(order.user) for order in orders]
        assignee = self._resolve_assignee(participants, confirm_assignee)

        try:
            summarizer_id = await resolve_user_id_by_auth(self.db, auth_user_id)
            await self._claim_session(
                session_id, assignee, len(orders), summarizer_id, now,
            )
            failed_user_ids = await self._record_participants(session_id, orders)
            await self._stamp_assignee(assignee.user_id, len(orders), now)
            await self.db.commit()
        except TeaRotationError:
            await self.db.rollback()
            raise
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                f"Commit failed: {e}", extra={"session_id": str(session_id)},
            )
            raise DatabaseError(describe_db_error(e), "commit")

        logger.info(
            f"Session summarized, assignee '{assignee.name}'",
            extra={
                "session_id": str(session_id),
                "assignee_id": str(assignee.user_id),
                "failed_user_ids": [str(u) for u in failed_user_ids] or None,
            },
        )
        return CommitResult(
            assignee=await self._reload(assignee),
            failed_user_ids=failed_user_ids,
        )

    # ─── Helpers ────────────────────────────────────────────────

    async def _participating_orders(self, session_id: UUID) -> list[Order]:
        try:
            orders = await load_participants(self.db, session_id)
        except SQLAlchemyError as e:
            raise DatabaseError(describe_db_error(e), "query")
        if not orders:
            raise NoOrdersFoundError(str(session_id))
        return orders

    @staticmethod
    def _resolve_assignee(
        participants: list[Participant], confirm_assignee: str,
    ) -> Participant:
        try:
            wanted = UUID(confirm_assignee)
        except (TypeError, ValueError):
            raise InvalidAssigneeError(str(confirm_assignee))
        assignee = find_participant(participants, wanted)
        if assignee is None:
            raise InvalidAssigneeError(str(confirm_assignee))
        return assignee

    async def _claim_session(
        self,
        session_id: UUID,
        assignee: Participant,
        drink_total: int,
        summarizer_id: UUID | None,
        now: datetime,
    ) -> None:
        result = await self.db.execute(
            update(SessionModel)
            .where(SessionModel.id == session_id)
            .where(SessionModel.status == SessionStatus.ACTIVE.value)
            .values(
                status=SessionStatus.COMPLETED.value,
                ended_at=now,
                assignee_name=assignee.name,
                total_drinks_in_session=drink_total,
                summarized_by=summarizer_id,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            logger.warning(
                "Rejected commit on a session that is no longer active",
                extra={"session_id": str(session_id)},
            )
            raise ConcurrentModificationError(str(session_id))

    async def _record_participants(
        self, session_id: UUID, orders: list[Order],
    ) -> list[UUID]:
        failed: list[UUID] = []
        for order in orders:
            try:
                async with self.db.begin_nested():
                    await self._record_participant(order)
            except SQLAlchemyError as e:
                logger.error(
                    f"Failed to update user {order.user_id}: {e}",
                    extra={
                        "session_id": str(session_id),
                        "user_id": str(order.user_id),
                    },
                )
                failed.append(order.user_id)
        return failed

    async def _record_participant(self, order: Order) -> None:
        """Cache the order as the user's last preference and count the cup they drank."""
        await self.db.execute(
            update(User)
            .where(User.id == order.user_id)
            .values(
                last_ordered_drink=order.drink_type,
                last_sugar_level=order.sugar_level,
                drink_count=User.drink_count + 1,
            )
            .execution_options(synchronize_session=False)
        )

    async def _stamp_assignee(
        self, assignee_id: UUID, drink_total: int, now: datetime,
    ) -> None:
        await self.db.execute(
            update(User)
            .where(User.id == assignee_id)
            .values(
                last_assigned_at=now,
                total_drinks_bought=User.total_drinks_bought + drink_total,
            )
            .execution_options(synchronize_session=False)
        )

    async def _reload(self, assignee: Participant) -> Participant:
        """Assignee with committed counters; the pre-commit view if the read fails."""
        try:
            user = await self.db.get(User, assignee.user_id, populate_existing=True)
        except SQLAlchemyError as e:
            logger.warning(
                f"Assignee reload failed after commit: {e}",
                extra={"assignee_id": str(assignee.user_id)},
            )
            return assignee
        return to_participant(user) if user else assignee
