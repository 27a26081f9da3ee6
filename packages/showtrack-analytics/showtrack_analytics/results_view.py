"""Public 'latest results' representation of stored results."""

from __future__ import annotations

from typing import Any

from showtrack_core.models import GameResult
from showtrack_core.time import utc_isoformat

from showtrack_analytics.biggest_wins import public_winners


def transform_game_result(result: GameResult) -> dict[str, Any]:
    """
    Render a stored result the way the provider published it.

    The raw ``data`` object is kept, with id, timestamps, status and the result
    payload replaced by their normalized stored values. Winner screen names are
    truncated; totals and ``transmissionId`` appear only when known.
    """
    raw = result.raw_payload if isinstance(result.raw_payload, dict) else {}
    raw_data = raw.get("data") if isinstance(raw.get("data"), dict) else {}
    raw_result = raw_data.get("result")

    data = {
        **raw_data,
        "id": result.external_id,
        "startedAt": utc_isoformat(result.started_at),
        "settledAt": utc_isoformat(result.settled_at),
        "status": result.status,
        "result": raw_result if isinstance(raw_result, dict) else {"outcome": result.outcome},
    }

    document: dict[str, Any] = {"id": result.external_id, "data": data}

    transmission_id = raw_data.get("transmissionId") or raw.get("transmissionId")
    if transmission_id:
        document["transmissionId"] = transmission_id
    if result.total_winners is not None:
        document["totalWinners"] = result.total_winners
    if result.total_amount is not None:
        document["totalAmount"] = result.total_amount

    winners = public_winners(result.winners)
    if winners:
        document["winners"] = [winner.model_dump(by_alias=True) for winner in winners]

    return document


def transform_game_results(results: list[GameResult]) -> list[dict[str, Any]]:
    return [transform_game_result(result) for result in results]
