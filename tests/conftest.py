"""Pytest configuration and fixtures."""

import os
from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

# Set required environment variables for testing BEFORE any imports of Settings
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./showtrack_test.db")

# Test database - a fresh SQLite file per test unless TEST_DATABASE_URL points elsewhere
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL")

BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


def _iso(dt: datetime) -> str:
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@pytest.fixture
async def test_engine(tmp_path):
    """Create test database engine."""
    url = TEST_DATABASE_URL or f"sqlite+aiosqlite:///{tmp_path / 'showtrack_test.db'}"
    engine = create_async_engine(url, echo=False, future=True)

    # Register table metadata before create_all
    import showtrack_core.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    # Cleanup
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def test_session(test_engine):
    """Create test database session."""
    session_maker = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

    async with session_maker() as session:
        yield session


@pytest.fixture
async def mock_session_factory(test_engine):
    """Create a session factory for testing that uses the test engine."""
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def repository(mock_session_factory):
    """SQL result repository bound to the test database."""
    from showtrack_sync.storage import SqlResultRepository

    return SqlResultRepository(session_factory=mock_session_factory)


@pytest.fixture
def mock_settings(tmp_path):
    """Mock settings for testing."""
    from showtrack_core.config import (
        DatabaseConfig,
        LoggingConfig,
        ProviderConfig,
        Settings,
        StatsConfig,
        SyncConfig,
    )

    return Settings(
        database=DatabaseConfig(url="sqlite+aiosqlite:///:memory:"),
        provider=ProviderConfig(page_size=25, sort="data.settledAt,desc"),
        sync=SyncConfig(interval_seconds=60, run_on_start=True, max_concurrent_games=None),
        stats=StatsConfig(),
        logging=LoggingConfig(level="INFO", file=str(tmp_path / "logs" / "showtrack.log")),
    )


@pytest.fixture
def make_game():
    """Factory for Game rows."""
    from showtrack_core.models import Game

    def _make(api_name="monopoly", url="https://api.test/monopoly?duration=6", **kwargs):
        defaults = {
            "name": api_name.replace("-", " ").title(),
            "category": "game-show",
            "provider": "Evolution",
        }
        defaults.update(kwargs)
        return Game(api_name=api_name, fetch_results_url=url, **defaults)

    return _make


@pytest.fixture
def make_raw_result():
    """Factory for provider result records."""

    def _make(
        external_id="r1",
        settled_offset_seconds=0,
        duration_seconds=40,
        outcome=None,
        status="Resolved",
        winners=None,
        total_winners=None,
        total_amount=None,
    ):
        settled_at = BASE_TIME + timedelta(seconds=settled_offset_seconds)
        started_at = settled_at - timedelta(seconds=duration_seconds)
        record = {
            "id": external_id,
            "data": {
                "id": external_id,
                "startedAt": _iso(started_at),
                "settledAt": _iso(settled_at),
                "status": status,
                "gameType": "monopoly",
                "result": {"outcome": outcome if outcome is not None else {}},
            },
        }
        if winners is not None:
            record["winners"] = winners
        if total_winners is not None:
            record["totalWinners"] = total_winners
        if total_amount is not None:
            record["totalAmount"] = total_amount
        return record

    return _make


@pytest.fixture
def make_result():
    """Factory for in-memory GameResult rows (no database)."""
    from showtrack_core.models import GameResult

    counter = {"n": 0}

    def _make(
        outcome=None,
        settled_offset_seconds=0,
        duration_seconds=40,
        external_id=None,
        game_id="game-1",
        winners=None,
        total_winners=None,
        total_amount=None,
        raw_payload=None,
        status="Resolved",
    ):
        counter["n"] += 1
        settled_at = BASE_TIME + timedelta(seconds=settled_offset_seconds)
        return GameResult(
            id=counter["n"],
            game_id=game_id,
            external_id=external_id or f"round-{counter['n']}",
            started_at=settled_at - timedelta(seconds=duration_seconds),
            settled_at=settled_at,
            status=status,
            outcome=outcome if outcome is not None else {},
            winners=winners,
            total_winners=total_winners,
            total_amount=total_amount,
            raw_payload=raw_payload or {},
        )

    return _make
