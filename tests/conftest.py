from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from league.models.base import Base
from league.models import (  # noqa: F401
    user, contestant, tribe, episode, game_event, event, team, draft,
)
from league.config import settings
from league.database import get_db
from league.main import create_app
from league.simulation import clear_cache

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
DATA_DIR = Path(__file__).parent / "data"


@pytest_asyncio.fixture
async def db_engine():
    engine = create_async_engine(TEST_DATABASE_URL, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    session_factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(db_engine):
    session_factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app = create_app()
    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def sim_data(monkeypatch):
    """Point the simulator at the bundled test seasons."""
    monkeypatch.setattr(settings, "SIM_DATA_DIR", str(DATA_DIR))
    clear_cache()
    yield DATA_DIR
    clear_cache()
