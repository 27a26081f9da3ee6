"""Time utility helpers for consistent timezone handling."""

from datetime import UTC, datetime, timedelta


def ensure_utc(dt: datetime) -> datetime:
    """Return datetime guaranteed to be timezone-aware in UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def parse_api_datetime(value: str) -> datetime:
    """Parse provider datetime strings as UTC-aware datetimes."""
    value = value.strip()
    # Replace trailing Z with explicit UTC offset so fromisoformat works cross-version
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    dt = datetime.fromisoformat(value)
    return ensure_utc(dt)


def utc_isoformat(dt: datetime) -> str:
    """Serialize datetime as ISO 8601 with millisecond precision and trailing Z."""
    return ensure_utc(dt).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def hours_ago(hours: float, now: datetime | None = None) -> datetime:
    """Return the UTC instant ``hours`` before ``now``."""
    reference = ensure_utc(now) if now is not None else datetime.now(UTC)
    return reference - timedelta(hours=hours)
