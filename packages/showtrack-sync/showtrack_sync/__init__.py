"""
Result ingestion for the game show tracker.

Fetches the newest results of every tracked game on a fixed interval and upserts
them into storage.
"""

from showtrack_sync.data_fetcher import CasinoScoresClient, ResultFetcher
from showtrack_sync.ingestion import GameSyncResult, GameSyncService, SyncCycleResult

__all__ = [
    "CasinoScoresClient",
    "ResultFetcher",
    "GameSyncService",
    "GameSyncResult",
    "SyncCycleResult",
]
