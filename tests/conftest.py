"""
Test configuration and fixtures.

Provides:
- In-memory SQLite engine (aiosqlite) with the schema created per test
- An AsyncSession bound to it
- A deterministic millisecond clock for the core modules
- Two user ids and an active run owned by the first one
"""
import os

# Settings are read at import time; keep tests off PostgreSQL and Telegram
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("BOT_TOKEN", "123456:test-token")

from collections.abc import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from nuzdex.core.runs import create_run
from nuzdex.database.models import Base

ASH = "user-ash"
MISTY = "user-misty"

START_MS = 1_700_000_000_000


class FakeClock:
    """Monotonic clock advancing one second per reading."""

    def __init__(self, start: int = START_MS) -> None:
        self.now = start

    def __call__(self) -> int:
        self.now += 1000
        return self.now


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory database for each test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Session configured like the application's session factory."""
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    async with factory() as session:
        yield session


@pytest.fixture(autouse=True)
def clock(monkeypatch: pytest.MonkeyPatch) -> FakeClock:
    """Replace now_ms in the core modules with a predictable clock."""
    fake = FakeClock()
    for module in ("nuzdex.core.runs", "nuzdex.core.pokedex", "nuzdex.core.party"):
        monkeypatch.setattr(f"{module}.now_ms", fake)
    return fake


# =============================================================================
# Domain Fixtures
# =============================================================================

@pytest.fixture
async def run_id(session: AsyncSession) -> str:
    """Active Scarlet/Violet run owned by ASH."""
    return await create_run(session, ASH, name="Scarlet Nuzlocke", game="scarlet-violet", set_active=True)


@pytest.fixture
async def other_run_id(session: AsyncSession) -> str:
    """Run owned by MISTY."""
    return await create_run(session, MISTY, name="Misty's Yellow", game="yellow", set_active=True)
