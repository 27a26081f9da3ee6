"""Exceptions for the sync scheduler."""


class SchedulerError(Exception):
    """Base exception for sync scheduler errors."""


class SchedulerUnavailableError(SchedulerError):
    """Scheduler cannot start, e.g. when no event loop is running."""
