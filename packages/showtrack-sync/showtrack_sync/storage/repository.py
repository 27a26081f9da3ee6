"""SQLModel-backed result repository."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Any

import structlog
from showtrack_core.database import get_session
from showtrack_core.exceptions import PersistenceError
from showtrack_core.models import Game, GameResult, utc_now
from showtrack_core.time import ensure_utc
from sqlalchemy import func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from showtrack_sync.storage.base import ResultRepository

logger = structlog.get_logger()

# Columns refreshed when a known (game_id, external_id) is ingested again
MUTABLE_RESULT_COLUMNS = (
    "status",
    "outcome",
    "settled_at",
    "winners",
    "total_winners",
    "total_amount",
    "raw_payload",
)

NATURAL_KEY = ("game_id", "external_id")


def _dialect_insert(session: AsyncSession):
    """Return the ON CONFLICT capable insert() for the session's dialect."""
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert
    if dialect == "sqlite":
        return sqlite.insert
    raise PersistenceError(f"Upsert is not supported for dialect '{dialect}'")


class SqlResultRepository(ResultRepository):
    """Result repository on an async SQLAlchemy session factory."""

    def __init__(self, session_factory=get_session):
        """
        Initialize repository.

        Args:
            session_factory: Callable returning an AsyncSession context manager.
                Every operation runs in its own session and transaction.
        """
        self._session_factory = session_factory

    async def find_games_needing_sync(self) -> list[Game]:
        return await self.list_games()

    async def list_games(self) -> list[Game]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(select(Game).order_by(Game.name))
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load games: {e}") from e

    async def get_game_by_api_name(self, api_name: str) -> Game | None:
        try:
            async with self._session_factory() as session:
                result = await session.execute(select(Game).where(Game.api_name == api_name))
                return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load game {api_name}: {e}") from e

    async def count_games(self) -> int:
        try:
            async with self._session_factory() as session:
                result = await session.execute(select(func.count()).select_from(Game))
                return int(result.scalar_one())
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to count games: {e}") from e

    async def add_game(self, game: Game) -> Game:
        try:
            async with self._session_factory() as session:
                session.add(game)
                await session.commit()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to add game {game.api_name}: {e}") from e

        logger.info("game_created", game_id=game.id, api_name=game.api_name)
        return game

    async def upsert_result(
        self, game_id: str, external_id: str, fields: dict[str, Any]
    ) -> GameResult:
        """
        Insert or update a result in a single statement.

        Uses INSERT ... ON CONFLICT (game_id, external_id) DO UPDATE so overlapping
        sync cycles never race between a lookup and a write; concurrent updates of
        the same key resolve as last-write-wins.

        Args:
            game_id: Owning game id
            external_id: Provider round id
            fields: Column values (started_at, settled_at, status, outcome, winners,
                total_winners, total_amount, raw_payload)

        Returns:
            The stored GameResult after the write

        Raises:
            PersistenceError: If the statement fails
        """
        now = utc_now()
        values = {
            **fields,
            "game_id": game_id,
            "external_id": external_id,
            "created_at": now,
            "updated_at": now,
        }
        for column in ("started_at", "settled_at"):
            if isinstance(values.get(column), datetime):
                values[column] = ensure_utc(values[column])

        try:
            async with self._session_factory() as session:
                insert = _dialect_insert(session)
                stmt = insert(GameResult).values(**values)
                set_ = {
                    column: stmt.excluded[column]
                    for column in MUTABLE_RESULT_COLUMNS
                    if column in values
                }
                set_["updated_at"] = now
                stmt = stmt.on_conflict_do_update(index_elements=list(NATURAL_KEY), set_=set_)

                await session.execute(stmt)
                await session.commit()

                result = await session.execute(
                    select(GameResult)
                    .where(
                        GameResult.game_id == game_id,
                        GameResult.external_id == external_id,
                    )
                    .execution_options(populate_existing=True)
                )
                stored = result.scalar_one()
        except SQLAlchemyError as e:
            raise PersistenceError(
                f"Failed to upsert result {external_id} for game {game_id}: {e}"
            ) from e

        logger.debug("result_upserted", game_id=game_id, external_id=external_id)
        return stored

    async def query_results(
        self,
        game_id: str,
        since: datetime,
        order_desc: bool = True,
        limit: int | None = None,
    ) -> list[GameResult]:
        order = GameResult.settled_at.desc() if order_desc else GameResult.settled_at.asc()
        query = (
            select(GameResult)
            .where(
                GameResult.game_id == game_id,
                GameResult.settled_at >= ensure_utc(since),
            )
            .order_by(order, GameResult.id)
        )
        if limit is not None:
            query = query.limit(limit)

        try:
            async with self._session_factory() as session:
                result = await session.execute(query)
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to query results for game {game_id}: {e}") from e

    async def query_results_across_games(
        self,
        game_ids: Sequence[str],
        since: datetime,
        limit: int | None = None,
    ) -> list[GameResult]:
        if not game_ids:
            return []

        query = (
            select(GameResult)
            .where(
                GameResult.game_id.in_(list(game_ids)),
                GameResult.settled_at >= ensure_utc(since),
            )
            .order_by(GameResult.settled_at.desc(), GameResult.id)
        )
        if limit is not None:
            query = query.limit(limit)

        try:
            async with self._session_factory() as session:
                result = await session.execute(query)
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to query results across games: {e}") from e
