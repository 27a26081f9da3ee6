"""Abstract result repository contract."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import datetime
from typing import Any

from showtrack_core.models import Game, GameResult


class ResultRepository(ABC):
    """
    Storage contract for games and their settled results.

    Results are keyed by (game_id, external_id). Writes are upserts: the first write
    of a key creates the result, later writes update every mutable field but never
    ``started_at`` or the key itself.

    Implementations raise ``PersistenceError`` for storage failures.
    """

    @abstractmethod
    async def find_games_needing_sync(self) -> list[Game]:
        """Return every tracked game; callers skip those without a results URL."""

    @abstractmethod
    async def upsert_result(
        self, game_id: str, external_id: str, fields: dict[str, Any]
    ) -> GameResult:
        """Atomically insert or update the result stored under (game_id, external_id)."""

    @abstractmethod
    async def query_results(
        self,
        game_id: str,
        since: datetime,
        order_desc: bool = True,
        limit: int | None = None,
    ) -> list[GameResult]:
        """Results of one game settled at or after ``since``, ordered by settled_at."""

    @abstractmethod
    async def query_results_across_games(
        self,
        game_ids: Sequence[str],
        since: datetime,
        limit: int | None = None,
    ) -> list[GameResult]:
        """Results of several games settled at or after ``since``, newest first."""

    @abstractmethod
    async def list_games(self) -> list[Game]:
        """All tracked games ordered by name."""

    @abstractmethod
    async def get_game_by_api_name(self, api_name: str) -> Game | None:
        """Look up a game by its provider slug."""

    @abstractmethod
    async def count_games(self) -> int:
        """Number of tracked games."""

    @abstractmethod
    async def add_game(self, game: Game) -> Game:
        """Persist a new game definition."""
