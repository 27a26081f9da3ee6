"""Biggest-win feed: high multiplier rounds across game shows."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from pydantic import Field
from showtrack_core.models import GameResult
from showtrack_core.outcome import (
    extract_outcome,
    max_multiplier,
    numeric_value,
    roulette_color,
    spin_outcome_label,
    truncate_screen_name,
    winning_number,
)
from showtrack_core.time import ensure_utc, utc_isoformat

from showtrack_analytics.aggregation import StatsModel
from showtrack_analytics.media import DEFAULT_MEDIA_BASE_URL, stream_url, thumbnail_url

BIG_WIN_MIN_MULTIPLIER = 50


class GameShowWinner(StatsModel):
    screen_name: str = Field(description="Truncated screen name")
    winnings: float = Field(default=0, description="Amount won")


class GameShowWin(StatsModel):
    """One qualifying round of the biggest wins feed."""

    id: str = Field(description="Provider round id")
    game_show_event_id: str = Field(description="Provider round id")
    game_show: str = Field(description="Game identifier, e.g. CRAZY_TIME")
    multiplier: float = Field(description="Round max multiplier")
    started_at: str = Field(description="Round start (ISO-8601)")
    settled_at: str = Field(description="Round settlement (ISO-8601)")
    duration_in_seconds: int = Field(ge=0, description="Whole seconds from start to settlement")
    spin_outcome: str = Field(description="Display label of the spin")
    stream_url: str = Field(description="Replay clip URL")
    thumbnail_url: str = Field(description="Replay thumbnail URL")
    total_winners: int | None = None
    total_amount: float | None = None
    winners: list[GameShowWinner] | None = None
    roulette_number_color: str | None = None

    def to_document(self) -> dict:
        """camelCase document with absent optional fields left out."""
        return self.model_dump(by_alias=True, exclude_none=True)


def game_show_name(api_name: str) -> str:
    """'lightning-roulette' -> 'LIGHTNING_ROULETTE'."""
    return api_name.upper().replace("-", "_")


def public_winners(winners: object) -> list[GameShowWinner]:
    """
    Winners with screen names truncated.

    Entries that are not objects are dropped; non-numeric winnings count as 0.
    """
    if not isinstance(winners, list):
        return []
    return [
        GameShowWinner(
            screen_name=truncate_screen_name(winner.get("screenName")),
            winnings=numeric_value(winner.get("winnings")) or 0,
        )
        for winner in winners
        if isinstance(winner, Mapping)
    ]


def transform_to_biggest_win(
    result: GameResult,
    api_name: str,
    *,
    min_multiplier: float = BIG_WIN_MIN_MULTIPLIER,
    media_base_url: str = DEFAULT_MEDIA_BASE_URL,
) -> GameShowWin | None:
    """
    Build the feed entry for one result.

    Returns:
        GameShowWin, or None when the round has no outcome or its multiplier is
        below ``min_multiplier``
    """
    outcome = extract_outcome(result.outcome)
    if outcome is None:
        return None

    multiplier = max_multiplier(outcome)
    if multiplier < min_multiplier:
        return None

    started_at = ensure_utc(result.started_at)
    settled_at = ensure_utc(result.settled_at)
    duration = max(0, int((settled_at - started_at).total_seconds()))
    game_show = game_show_name(api_name)

    win = GameShowWin(
        id=result.external_id,
        game_show_event_id=result.external_id,
        game_show=game_show,
        multiplier=multiplier,
        started_at=utc_isoformat(started_at),
        settled_at=utc_isoformat(settled_at),
        duration_in_seconds=duration,
        spin_outcome=spin_outcome_label(outcome),
        stream_url=stream_url(result.external_id, media_base_url),
        thumbnail_url=thumbnail_url(result.external_id, media_base_url),
        total_winners=result.total_winners,
        total_amount=result.total_amount,
        winners=public_winners(result.winners) or None,
    )

    if "ROULETTE" in game_show:
        number = winning_number(outcome)
        if number is not None and 0 <= number <= 36:
            win.roulette_number_color = roulette_color(number)

    return win


def select_biggest_wins(
    results: Sequence[GameResult],
    game_names: Mapping[str, str],
    size: int,
    *,
    min_multiplier: float = BIG_WIN_MIN_MULTIPLIER,
    media_base_url: str = DEFAULT_MEDIA_BASE_URL,
) -> list[GameShowWin]:
    """
    Rank qualifying rounds across games.

    Args:
        results: Results of any games inside the window
        game_names: game_id -> api_name; results of other games are skipped
        size: Maximum entries returned
        min_multiplier: Smallest max multiplier that qualifies

    Returns:
        Wins ordered by multiplier descending, ties broken by the most recent
        settlement
    """
    ranked: list[tuple[GameShowWin, float]] = []
    for result in results:
        api_name = game_names.get(result.game_id)
        if api_name is None:
            continue
        win = transform_to_biggest_win(
            result, api_name, min_multiplier=min_multiplier, media_base_url=media_base_url
        )
        if win is not None:
            ranked.append((win, ensure_utc(result.settled_at).timestamp()))

    ranked.sort(key=lambda item: (item[0].multiplier, item[1]), reverse=True)
    return [win for win, _ in ranked[: max(size, 0)]]
