"""Shared wiring for CLI commands."""

from showtrack_sync.storage import ResultRepository, SqlResultRepository


def get_repository() -> ResultRepository:
    """Repository on the configured database."""
    return SqlResultRepository()
