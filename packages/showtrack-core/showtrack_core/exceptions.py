"""Exceptions raised while ingesting and storing game show results."""


class ShowTrackError(Exception):
    """Base exception for all tracker errors."""


class FetchError(ShowTrackError):
    """Failed to retrieve a page of results from a provider endpoint."""

    def __init__(self, message: str, *, url: str | None = None, status: int | None = None):
        super().__init__(message)
        self.url = url
        self.status = status


class ParseError(ShowTrackError):
    """A raw provider record cannot be normalized into a keyed result."""


class PersistenceError(ShowTrackError):
    """A repository read or write failed."""
