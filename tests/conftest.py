import asyncio
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

from app.config.database import get_db
from app.infrastructure.database.models import Base, Collection, Frame, User
from app.main import app

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _make_engine(tmp_path):
    return create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'frames.db'}", poolclass=NullPool)


def _make_factory(engine):
    return sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


async def _create_schema(engine):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def _seed_user(factory, username="alice", collections=None):
    """Insert a user with collections and frames.

    ``collections`` is a list of ``(name, [frame kwargs, ...])``; collections are
    created one second apart so their order is deterministic.
    """
    if collections is None:
        collections = [("Home", [dict(x=0, y=0, width=2, height=1, title="News", url="https://example.com")])]
    async with factory() as session:
        user = User(username=username)
        session.add(user)
        await session.flush()

        collection_ids, frame_ids = [], []
        for index, (name, frames) in enumerate(collections):
            collection = Collection(
                name=name, user_id=user.id, position=index + 1, create_time=BASE_TIME + timedelta(seconds=index)
            )
            session.add(collection)
            await session.flush()
            collection_ids.append(collection.id)
            for frame_kwargs in frames:
                frame = Frame(collection_id=collection.id, **frame_kwargs)
                session.add(frame)
                await session.flush()
                frame_ids.append(frame.id)
        await session.commit()
        return SimpleNamespace(
            user_id=user.id,
            username=user.username,
            collection_ids=collection_ids,
            frame_ids=frame_ids,
        )


@pytest.fixture
def seed_user():
    """Async helper seeding a user; await it, or wrap it in ``asyncio.run``."""
    return _seed_user


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    engine = _make_engine(tmp_path)
    await _create_schema(engine)
    yield _make_factory(engine)
    await engine.dispose()


@pytest.fixture
def sync_session_factory(tmp_path):
    """Session factory for tests driving the app through TestClient."""
    engine = _make_engine(tmp_path)
    asyncio.run(_create_schema(engine))
    yield _make_factory(engine)
    asyncio.run(engine.dispose())


@pytest.fixture
def test_client(sync_session_factory):
    """Create a test client for the FastAPI app backed by the test database."""

    async def _override_get_db():
        async with sync_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
