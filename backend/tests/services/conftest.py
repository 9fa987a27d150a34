"""Service test fixtures — async DB, seed helpers, and FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use the test session factory
    - db_manager patched so readiness probes see the test engine
    - Seeder writes through short-lived sessions; reads always hit the DB fresh
"""

from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select

from tea_rotation.db.base import Base
from tea_rotation.db.session import create_session_factory
from tea_rotation.infrastructure.database import get_db, DatabaseSessionManager
from tea_rotation.models.order import Order
from tea_rotation.models.session import Session as SessionModel
from tea_rotation.models.user import User
import tea_rotation.infrastructure.database as db_module
from tea_rotation.main import app


@pytest.fixture
async def db_handles():
    engine, factory = create_session_factory("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine, factory
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def test_engine(db_handles):
    return db_handles[0]


@pytest.fixture
def test_session_factory(db_handles):
    return db_handles[1]


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


class Seeder:
    """Insert and re-read rows without sharing identity maps with the app."""

    def __init__(self, factory):
        self._factory = factory
        self._clock = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)

    def _tick(self) -> datetime:
        self._clock += timedelta(seconds=1)
        return self._clock

    async def _add(self, row):
        async with self._factory() as db:
            db.add(row)
            await db.commit()
            await db.refresh(row)
        return row

    async def user(
        self,
        name: str,
        drink_count: int = 0,
        total_drinks_bought: int = 0,
        last_assigned_at: datetime | None = None,
        auth_user_id: str | None = None,
    ) -> User:
        return await self._add(User(
            name=name,
            drink_count=drink_count,
            total_drinks_bought=total_drinks_bought,
            last_assigned_at=last_assigned_at,
            auth_user_id=auth_user_id,
        ))

    async def session(
        self, status: str = "active", ended_at: datetime | None = None,
    ) -> SessionModel:
        return await self._add(SessionModel(status=status, ended_at=ended_at))

    async def order(
        self,
        session: SessionModel,
        user: User,
        drink_type: str = "Tea",
        sugar_level: str = "Normal",
        is_excused: bool = False,
    ) -> Order:
        return await self._add(Order(
            session_id=session.id,
            user_id=user.id,
            drink_type=drink_type,
            sugar_level=sugar_level,
            is_excused=is_excused,
            created_at=self._tick(),
        ))

    async def get(self, model, row_id):
        async with self._factory() as db:
            return await db.get(model, row_id)

    async def all(self, model) -> list:
        async with self._factory() as db:
            result = await db.execute(select(model))
            return list(result.scalars().all())

    async def snapshot(self) -> dict:
        """Column values of every user and session, keyed by table and id."""
        snap = {}
        for model in (User, SessionModel):
            for row in await self.all(model):
                snap[(model.__tablename__, row.id)] = {
                    col.name: getattr(row, col.key)
                    for col in model.__table__.columns
                }
        return snap


@pytest.fixture
def seed(test_session_factory):
    return Seeder(test_session_factory)
