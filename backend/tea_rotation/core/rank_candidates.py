"""Candidate Ranking — orders a session's participants by who is most owed a turn.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - Primary key: sponsor ratio (drink_count / total_drinks_bought) descending
    - Tie-break: last_assigned_at ascending, never-assigned (None) first
    - Full ties keep input order (sorted() is stable)
    - Deprioritized users go behind everyone else, keeping their relative ranking

Design Decisions:
    - Participant is a frozen snapshot, decoupled from the ORM row: ranking can be
      tested without a database and cannot mutate user state
    - Naive timestamps are read as UTC: SQLite drops tzinfo, PostgreSQL keeps it
"""

import math
from collections.abc import Collection, Iterable
from dataclasses import dataclass
from datetime import datetime, timezone
from uuid import UUID

_NEVER_ASSIGNED = datetime.min.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class Participant:
    """One non-excused order's user, as seen at ranking time."""
    user_id: UUID
    name: str
    drink_count: int
    total_drinks_bought: int
    last_assigned_at: datetime | None = None

    @property
    def sponsor_ratio(self) -> float:
        return sponsor_ratio(self.drink_count, self.total_drinks_bought)


def sponsor_ratio(drink_count: int, total_drinks_bought: int) -> float:
    """Drinks consumed per drink sponsored. +inf when never sponsored but has drunk."""
    if total_drinks_bought > 0:
        return drink_count / total_drinks_bought
    return math.inf if drink_count > 0 else 0.0


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def ranking_key(participant: Participant) -> tuple[float, bool, datetime]:
    """Sort key: highest ratio first, then oldest (or missing) last assignment."""
    assigned = participant.last_assigned_at
    return (
        -participant.sponsor_ratio,
        assigned is not None,
        _as_utc(assigned) if assigned is not None else _NEVER_ASSIGNED,
    )


def rank_participants(
    participants: Iterable[Participant],
    deprioritized: Collection[str] = (),
) -> list[Participant]:
    """Return participants most-owed first.

    ``deprioritized`` holds user ids (as strings) that are pushed behind every
    other participant. They stay in the list so a pool made only of them can
    still produce candidates.
    """
    ranked = sorted(participants, key=ranking_key)
    if not deprioritized:
        return ranked
    flagged = {str(user_id) for user_id in deprioritized}
    preferred = [p for p in ranked if str(p.user_id) not in flagged]
    demoted = [p for p in ranked if str(p.user_id) in flagged]
    return preferred + demoted


def top_candidates(ranked: list[Participant], count: int = 2) -> list[Participant]:
    """First min(count, len(ranked)) participants."""
    return ranked[:min(count, len(ranked))]


def find_participant(
    participants: Iterable[Participant], user_id: UUID | str,
) -> Participant | None:
    """Look up by id only. Names are display attributes and may repeat."""
    wanted = str(user_id)
    for participant in participants:
        if str(participant.user_id) == wanted:
            return participant
    return None
