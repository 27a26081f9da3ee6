"""Provider response models and conversion utilities."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from showtrack_core.exceptions import ParseError
from showtrack_core.time import parse_api_datetime


@dataclass(slots=True)
class ParsedResult:
    """A provider round record normalized into storable result fields."""

    external_id: str
    started_at: datetime
    settled_at: datetime
    status: str | None
    outcome: dict
    winners: list[dict] | None
    total_winners: int | None
    total_amount: float | None
    raw_payload: dict = field(repr=False)

    def to_fields(self) -> dict[str, Any]:
        """Column values for a repository upsert, excluding the natural key."""
        return {
            "started_at": self.started_at,
            "settled_at": self.settled_at,
            "status": self.status,
            "outcome": self.outcome,
            "winners": self.winners,
            "total_winners": self.total_winners,
            "total_amount": self.total_amount,
            "raw_payload": self.raw_payload,
        }


def _extract_outcome_payload(result: Any) -> dict:
    """
    Pick the structured outcome out of ``data.result``.

    Wheel shows nest it under ``result.outcome``; dice and card shows put their facts
    directly on ``result``. Anything else stores an empty outcome.
    """
    if not isinstance(result, dict):
        return {}
    nested = result.get("outcome")
    if isinstance(nested, dict):
        return nested
    return result


def _parse_timestamp(data: dict, key: str, external_id: str) -> datetime:
    value = data.get(key)
    if not isinstance(value, str) or not value:
        raise ParseError(f"Result {external_id} is missing {key}")
    try:
        return parse_api_datetime(value)
    except ValueError as e:
        raise ParseError(f"Result {external_id} has invalid {key}: {value!r}") from e


def _optional_number(value: Any, kind: type) -> Any:
    if value is None or isinstance(value, bool):
        return None
    try:
        return kind(value)
    except (TypeError, ValueError):
        return None


def parse_raw_result(raw: Any) -> ParsedResult:
    """
    Normalize one record of a provider results page.

    Args:
        raw: Record as returned by the provider, e.g.
            {
                "id": "18285f1a2b3c",
                "data": {
                    "startedAt": "2024-05-01T12:00:00.000Z",
                    "settledAt": "2024-05-01T12:00:41.000Z",
                    "status": "Resolved",
                    "result": {"outcome": {"wheelResult": {...}, "maxMultiplier": 25}}
                },
                "totalWinners": 120,
                "totalAmount": 5321.5,
                "winners": [{"screenName": "lucky777", "winnings": 900.0}]
            }

    Returns:
        ParsedResult ready for ``ResultRepository.upsert_result``

    Raises:
        ParseError: When the record has no round id, no usable timestamps, or
            settles before it starts
    """
    if not isinstance(raw, dict):
        raise ParseError(f"Result record is not an object: {type(raw).__name__}")

    data = raw.get("data")
    if not isinstance(data, dict):
        raise ParseError(f"Result {raw.get('id')!r} has no data object")

    external_id = raw.get("id") or data.get("id")
    if not external_id:
        raise ParseError("Result record has no id")
    external_id = str(external_id)

    started_at = _parse_timestamp(data, "startedAt", external_id)
    settled_at = _parse_timestamp(data, "settledAt", external_id)
    if settled_at < started_at:
        raise ParseError(f"Result {external_id} settles before it starts")

    winners = raw.get("winners")
    status = data.get("status")

    return ParsedResult(
        external_id=external_id,
        started_at=started_at,
        settled_at=settled_at,
        status=str(status) if status is not None else None,
        outcome=_extract_outcome_payload(data.get("result")),
        winners=winners if isinstance(winners, list) else None,
        total_winners=_optional_number(raw.get("totalWinners"), int),
        total_amount=_optional_number(raw.get("totalAmount"), float),
        raw_payload=raw,
    )
