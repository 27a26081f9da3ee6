"""Periodic scheduling of sync cycles."""

from showtrack_sync.scheduling.exceptions import SchedulerError, SchedulerUnavailableError
from showtrack_sync.scheduling.scheduler import SYNC_JOB_ID, SyncScheduler

__all__ = ["SYNC_JOB_ID", "SchedulerError", "SchedulerUnavailableError", "SyncScheduler"]
