"""Sync service fetching game show results and upserting them into storage."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from contextlib import nullcontext
from dataclasses import dataclass, field

import structlog
from showtrack_core.api_models import parse_raw_result
from showtrack_core.config import ProviderConfig, Settings, get_settings
from showtrack_core.models import Game, GameResult

from showtrack_sync.data_fetcher import CasinoScoresClient, ResultFetcher
from showtrack_sync.storage.base import ResultRepository

logger = structlog.get_logger(__name__)


@dataclass(slots=True)
class ResultIngestionFailure:
    """Information about a single result that failed to ingest."""

    external_id: str | None
    error: str


@dataclass(slots=True)
class GameSyncResult:
    """Outcome of syncing one game during a cycle."""

    game_id: str
    api_name: str
    fetched: int = 0
    upserted: int = 0
    skipped: bool = False
    fetch_error: str | None = None
    failures: list[ResultIngestionFailure] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """Return True when the game was fetched and every result stored."""
        return not self.skipped and self.fetch_error is None and not self.failures

    @property
    def error_count(self) -> int:
        """Number of failed results."""
        return len(self.failures)


@dataclass(slots=True)
class SyncCycleResult:
    """Aggregate report of one sync cycle across all games."""

    game_results: list[GameSyncResult] = field(default_factory=list)

    @property
    def total_games(self) -> int:
        return len(self.game_results)

    @property
    def synced_games(self) -> int:
        """Games that were attempted (not skipped)."""
        return sum(1 for result in self.game_results if not result.skipped)

    @property
    def skipped_games(self) -> int:
        return sum(1 for result in self.game_results if result.skipped)

    @property
    def failed_games(self) -> int:
        """Games whose fetch failed."""
        return sum(1 for result in self.game_results if result.fetch_error is not None)

    @property
    def total_fetched(self) -> int:
        return sum(result.fetched for result in self.game_results)

    @property
    def total_upserted(self) -> int:
        return sum(result.upserted for result in self.game_results)

    @property
    def total_failures(self) -> int:
        """Failed results across all games."""
        return sum(result.error_count for result in self.game_results)

    def by_game(self, api_name: str) -> GameSyncResult | None:
        """Find the result for a specific game if present."""
        for result in self.game_results:
            if result.api_name == api_name:
                return result
        return None


class GameSyncService:
    """Runs sync cycles: fetch the newest page of every game and upsert each result."""

    def __init__(
        self,
        repository: ResultRepository,
        *,
        client_factory: Callable[[ProviderConfig], ResultFetcher] = CasinoScoresClient,
        settings: Settings | None = None,
    ) -> None:
        self._repository = repository
        self._client_factory = client_factory
        self._settings = settings or get_settings()

    async def run_sync_cycle(self) -> SyncCycleResult:
        """
        Run one cycle over every tracked game.

        Games without a results URL are skipped. A failing game is logged and
        recorded without affecting the others, and a failing result is logged and
        recorded without affecting the rest of its page. The cycle never raises.

        Returns:
            SyncCycleResult with one GameSyncResult per game
        """
        try:
            games = await self._repository.find_games_needing_sync()
        except Exception as e:
            logger.error("sync_cycle_failed", error=str(e), exc_info=True)
            return SyncCycleResult()

        sync_config = self._settings.sync
        provider_config = self._settings.provider
        limit = sync_config.max_concurrent_games
        sem = asyncio.Semaphore(limit) if limit else None

        try:
            async with self._client_factory(provider_config) as client:

                async def _sync_with_limit(game: Game) -> GameSyncResult:
                    async with sem if sem is not None else nullcontext():
                        return await self.sync_game(game, client)

                results = await asyncio.gather(
                    *(_sync_with_limit(game) for game in games), return_exceptions=True
                )
        except Exception as e:
            logger.error("sync_cycle_failed", error=str(e), exc_info=True)
            return SyncCycleResult()

        cycle = SyncCycleResult()
        for game, result in zip(games, results, strict=True):
            if isinstance(result, Exception):
                logger.error(
                    "game_sync_failed",
                    game_id=game.id,
                    api_name=game.api_name,
                    error=str(result),
                )
                result = GameSyncResult(
                    game_id=game.id, api_name=game.api_name, fetch_error=str(result)
                )
            cycle.game_results.append(result)

        logger.info(
            "sync_cycle_completed",
            games=cycle.total_games,
            synced=cycle.synced_games,
            skipped=cycle.skipped_games,
            failed=cycle.failed_games,
            fetched=cycle.total_fetched,
            upserted=cycle.total_upserted,
            result_failures=cycle.total_failures,
        )
        return cycle

    async def sync_game(self, game: Game, client: ResultFetcher) -> GameSyncResult:
        """
        Fetch one game's newest results and upsert every record.

        Args:
            game: Game to sync
            client: Open fetcher shared by the cycle

        Returns:
            GameSyncResult for the game; fetch failures are recorded, not raised
        """
        report = GameSyncResult(game_id=game.id, api_name=game.api_name)

        if not game.fetch_results_url:
            logger.info("game_sync_skipped", game_id=game.id, api_name=game.api_name)
            report.skipped = True
            return report

        provider_config = self._settings.provider
        try:
            records = await client.fetch_latest_results(
                game.fetch_results_url, provider_config.page_size, provider_config.sort
            )
        except Exception as e:
            logger.error(
                "game_sync_failed",
                game_id=game.id,
                api_name=game.api_name,
                url=game.fetch_results_url,
                error=str(e),
            )
            report.fetch_error = str(e)
            return report

        report.fetched = len(records)

        outcomes = await asyncio.gather(
            *(self._ingest_record(game, raw) for raw in records), return_exceptions=True
        )

        for raw, outcome in zip(records, outcomes, strict=True):
            if isinstance(outcome, Exception):
                external_id = _record_id(raw)
                logger.warning(
                    "result_upsert_failed",
                    game_id=game.id,
                    api_name=game.api_name,
                    external_id=external_id,
                    error=str(outcome),
                )
                report.failures.append(
                    ResultIngestionFailure(external_id=external_id, error=str(outcome))
                )
            else:
                report.upserted += 1

        logger.info(
            "game_synced",
            api_name=game.api_name,
            fetched=report.fetched,
            upserted=report.upserted,
            failures=report.error_count,
        )
        return report

    async def _ingest_record(self, game: Game, raw: dict) -> GameResult:
        parsed = parse_raw_result(raw)
        return await self._repository.upsert_result(game.id, parsed.external_id, parsed.to_fields())


def _record_id(raw: object) -> str | None:
    """Best-effort round id of a raw record for failure reports."""
    if not isinstance(raw, dict):
        return None
    value = raw.get("id")
    if value is None and isinstance(raw.get("data"), dict):
        value = raw["data"].get("id")
    return str(value) if value is not None else None
