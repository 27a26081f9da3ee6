"""Result storage contract and SQL implementation."""

from showtrack_sync.storage.base import ResultRepository
from showtrack_sync.storage.repository import SqlResultRepository

__all__ = ["ResultRepository", "SqlResultRepository"]
