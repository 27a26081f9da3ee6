"""Paging and lookback window helpers for result queries."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator
from showtrack_core.time import hours_ago

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
DEFAULT_DURATION_HOURS = 12
MAX_DURATION_HOURS = 720


def _clamp(value: int | None, default: int, maximum: int) -> int:
    if value is None or value <= 0:
        return default
    return min(value, maximum)


class PageParams(BaseModel):
    """
    Normalized query parameters.

    Out-of-range values are clamped rather than rejected: a missing or
    non-positive size or duration falls back to its default, larger values are
    capped, and a negative page becomes 0.
    """

    page: int = Field(default=0, description="Zero-based page index")
    size: int = Field(default=DEFAULT_PAGE_SIZE, description="Results per page")
    duration: int = Field(default=DEFAULT_DURATION_HOURS, description="Lookback window in hours")

    @field_validator("page", mode="before")
    @classmethod
    def _clamp_page(cls, value):
        return max(int(value or 0), 0)

    @field_validator("size", mode="before")
    @classmethod
    def _clamp_size(cls, value):
        return _clamp(None if value is None else int(value), DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE)

    @field_validator("duration", mode="before")
    @classmethod
    def _clamp_duration(cls, value):
        return _clamp(
            None if value is None else int(value), DEFAULT_DURATION_HOURS, MAX_DURATION_HOURS
        )

    @property
    def offset(self) -> int:
        return self.page * self.size

    def since(self, now: datetime | None = None) -> datetime:
        return window_start(self.duration, now)


def window_start(duration_hours: float, now: datetime | None = None) -> datetime:
    """Inclusive lower bound on settled_at for a lookback of ``duration_hours``."""
    return hours_ago(duration_hours, now)
