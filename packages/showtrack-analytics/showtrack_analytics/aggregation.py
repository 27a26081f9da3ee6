"""
Statistics over a window of one game's settled results.

``aggregate_game_stats`` is a pure function: it takes results already filtered to
the window and ordered by ``settled_at`` descending, and recomputes every
statistic on each call. Nothing is persisted.

Long-term averages are derived from the same window as the current values, so
every "frequency percentage" deviation comes out as 0. Those fields are kept in
the output because dashboard consumers read them.
"""

from __future__ import annotations

import math
from collections import defaultdict
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import numpy as np
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from showtrack_core.models import GameResult
from showtrack_core.outcome import (
    UNKNOWN_OUTCOME,
    extract_outcome,
    max_multiplier,
    numeric_value,
    truncate_screen_name,
    wheel_result_label,
)
from showtrack_core.time import ensure_utc, utc_isoformat

from showtrack_analytics.media import DEFAULT_MEDIA_BASE_URL, stream_url

CASH_HUNT_ROWS = 12
CASH_HUNT_COLS = 9
LEADERBOARD_SIZE = 5


class StatsModel(BaseModel):
    """Base for statistics output; serializes with camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class WheelResultStat(StatsModel):
    wheel_result: str = Field(description="Wheel result label")
    count: int = Field(description="Occurrences in the window")
    percentage: float = Field(description="Share of all results in the window (%)")
    last_occurred_at: str = Field(description="Latest settlement of this label (ISO-8601)")
    last_seen_before: int = Field(description="Results settled since the last occurrence")
    hot_frequency_percentage: float = Field(
        description="Current percentage minus long-term average"
    )


class BestMultiplier(StatsModel):
    id: str = Field(description="Provider round id")
    wheel_result: str = Field(description="Wheel result label")
    last_occurred_at: str = Field(description="Settlement time of the round (ISO-8601)")
    max_multiplier: float = Field(description="Highest multiplier seen for the label")
    big_win_stream_url: str | None = Field(default=None, description="Replay clip URL")


class TopSlotStat(StatsModel):
    matched: bool = Field(description="Whether the top slot matched the wheel result")
    percentage: float = Field(description="Share of rounds carrying top slot data (%)")
    total_count: int = Field(description="Rounds in this bucket")
    top_slot_matched_frequency_percentage: float = Field(default=0)
    top_slot_matched_long_term_average: float = Field(default=0)


class IndividualWin(StatsModel):
    id: str = Field(description="Provider round id")
    screen_name: str = Field(description="Truncated winner screen name")
    win_amount: float = Field(description="Amount won")
    wheel_result: str = Field(description="Wheel result label of the round")
    max_multiplier: float = Field(description="Round multiplier")
    last_occurred_at: str = Field(description="Settlement time of the round (ISO-8601)")


class CashHuntPositionStats(StatsModel):
    cash_hunt_avg_array: list[list[float]] = Field(
        description="Mean multiplier per grid cell, 0 where no data"
    )
    max_multiplier: float = Field(description="Highest cell mean")
    min_multiplier: float = Field(description="Lowest cell mean among cells with data")


class CashHuntSymbolStat(StatsModel):
    symbol: str
    avg_multiplier: float
    count: int
    cash_hunt_multiplier_frequency_percentage: float = 0
    cash_hunt_long_term_average: float = 0


class FlapperStat(StatsModel):
    symbol: str
    avg_multiplier: float
    flapper_long_term_average_multiplier: float = 0
    flapper_multiplier_frequency_percentage: float = 0


class CoinFlipStat(StatsModel):
    symbol: str
    avg_multiplier: float
    count: int
    percentage: float
    coin_flip_frequency_percentage: float = 0
    coin_flip_multiplier_frequency_percentage: float = 0
    coin_flip_multiplier_long_term_average: float = 0
    coin_flip_percentage_long_term_average: float = 0


class GameStats(StatsModel):
    """All statistics of one game over a window."""

    total_count: int = 0
    agg_stats: list[WheelResultStat] = Field(default_factory=list)
    best_multipliers: list[BestMultiplier] = Field(default_factory=list)
    top_slot_to_wheel_result_stats: list[TopSlotStat] = Field(default_factory=list)
    best_individual_wins: list[IndividualWin] = Field(default_factory=list)
    cash_hunt_avg_stats_by_position: CashHuntPositionStats | None = None
    cash_hunt_symbol_stats: list[CashHuntSymbolStat] = Field(default_factory=list)
    crazy_bonus_flapper_stats: list[FlapperStat] = Field(default_factory=list)
    coin_flip_stats: list[CoinFlipStat] = Field(default_factory=list)


def _round2(value: float) -> float:
    """Round to 2 dp; a NaN deviation (0 / 0) is reported as 0."""
    if math.isnan(value):
        return 0.0
    return round(value, 2)


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _relative_deviation(value: float, baseline: float) -> float:
    if baseline == 0:
        return math.nan
    return (value - baseline) / baseline * 100


@dataclass(slots=True)
class _LabelTally:
    count: int = 0
    last_occurred_at: datetime | None = None


@dataclass(slots=True)
class _BestRound:
    external_id: str
    label: str
    settled_at: datetime
    multiplier: float


@dataclass(slots=True)
class _WinEntry:
    external_id: str
    screen_name: str
    amount: float
    label: str
    multiplier: float
    settled_at: datetime


@dataclass
class _CashHuntGrid:
    sums: np.ndarray = field(default_factory=lambda: np.zeros((CASH_HUNT_ROWS, CASH_HUNT_COLS)))
    counts: np.ndarray = field(
        default_factory=lambda: np.zeros((CASH_HUNT_ROWS, CASH_HUNT_COLS), dtype=int)
    )
    seen: bool = False

    def add(self, positions: Sequence[Any]) -> None:
        self.seen = True
        for i, row in enumerate(positions[:CASH_HUNT_ROWS]):
            if not isinstance(row, list):
                continue
            for j, cell in enumerate(row[:CASH_HUNT_COLS]):
                if not isinstance(cell, Mapping):
                    continue
                multiplier = numeric_value(cell.get("multiplier"))
                if multiplier is not None:
                    self.sums[i, j] += multiplier
                    self.counts[i, j] += 1

    def stats(self) -> CashHuntPositionStats | None:
        if not self.seen:
            return None
        has_data = self.counts > 0
        averages = np.divide(
            self.sums, self.counts, out=np.zeros_like(self.sums), where=has_data
        )
        if has_data.any():
            max_avg = max(0.0, float(averages[has_data].max()))
            min_avg = float(averages[has_data].min())
        else:
            max_avg = min_avg = 0.0
        return CashHuntPositionStats(
            cash_hunt_avg_array=averages.tolist(),
            max_multiplier=_round2(max_avg),
            min_multiplier=_round2(min_avg),
        )


def _last_seen_before(last_occurred_at: datetime, recency: Sequence[datetime]) -> int:
    """Index of ``last_occurred_at`` in settlement times sorted newest first."""
    for index, settled_at in enumerate(recency):
        if settled_at == last_occurred_at:
            return index
    return len(recency)


def aggregate_game_stats(
    results: Sequence[GameResult],
    *,
    leaderboard_size: int = LEADERBOARD_SIZE,
    media_base_url: str = DEFAULT_MEDIA_BASE_URL,
) -> GameStats:
    """
    Compute every statistic of one game over a window of results.

    Args:
        results: Results of one game inside the window, newest first
        leaderboard_size: Entries kept in best multipliers and best individual wins
        media_base_url: Base of replay clip URLs

    Returns:
        GameStats; ``model_dump(by_alias=True)`` yields the camelCase document.
        Empty input yields zero counts, empty lists and no cash hunt grid.
    """
    total_count = len(results)
    if total_count == 0:
        return GameStats()

    labels: dict[str, _LabelTally] = {}
    best_rounds: dict[str, _BestRound] = {}
    top_slot_matched = 0
    top_slot_unmatched = 0
    grid = _CashHuntGrid()
    cash_hunt_symbols: dict[str, list[float]] = defaultdict(list)
    flappers: dict[str, list[float]] = defaultdict(list)
    coin_flips: dict[str, list[float]] = defaultdict(list)
    wins: list[_WinEntry] = []

    for result in results:
        outcome = extract_outcome(result.outcome)
        if outcome is None:
            continue

        settled_at = ensure_utc(result.settled_at)
        multiplier = max_multiplier(outcome)
        label = wheel_result_label(outcome)

        if label is not None:
            tally = labels.setdefault(label, _LabelTally())
            tally.count += 1
            if tally.last_occurred_at is None or settled_at > tally.last_occurred_at:
                tally.last_occurred_at = settled_at

            best = best_rounds.get(label)
            if best is None or multiplier > best.multiplier:
                best_rounds[label] = _BestRound(
                    external_id=result.external_id,
                    label=label,
                    settled_at=settled_at,
                    multiplier=multiplier,
                )

        if "isTopSlotMatchedToWheelResult" in outcome:
            if outcome["isTopSlotMatchedToWheelResult"]:
                top_slot_matched += 1
            else:
                top_slot_unmatched += 1

        cash_hunt = outcome.get("cashHunt")
        positions = cash_hunt.get("positions") if isinstance(cash_hunt, Mapping) else None
        if isinstance(positions, list):
            grid.add(positions)
            for row in positions:
                if not isinstance(row, list):
                    continue
                for cell in row:
                    if not isinstance(cell, Mapping) or not cell.get("symbol"):
                        continue
                    cell_multiplier = numeric_value(cell.get("multiplier"))
                    if cell_multiplier is not None:
                        cash_hunt_symbols[str(cell["symbol"])].append(cell_multiplier)

        crazy_bonus = outcome.get("crazyBonus")
        flapper = crazy_bonus.get("flapper") if isinstance(crazy_bonus, Mapping) else None
        if isinstance(flapper, Mapping):
            symbol = str(flapper.get("symbol") or UNKNOWN_OUTCOME)
            flappers[symbol].append(numeric_value(flapper.get("multiplier")) or 0)

        coin_flip = outcome.get("coinFlip")
        if isinstance(coin_flip, Mapping):
            symbol = str(coin_flip.get("symbol") or UNKNOWN_OUTCOME)
            coin_flips[symbol].append(numeric_value(coin_flip.get("multiplier")) or 0)

        if label is not None and isinstance(result.winners, list):
            for winner in result.winners:
                if not isinstance(winner, Mapping):
                    continue
                amount = numeric_value(winner.get("winnings"))
                if winner.get("screenName") and amount:
                    wins.append(
                        _WinEntry(
                            external_id=result.external_id,
                            screen_name=str(winner["screenName"]),
                            amount=amount,
                            label=label,
                            multiplier=multiplier,
                            settled_at=settled_at,
                        )
                    )

    recency = sorted((ensure_utc(r.settled_at) for r in results), reverse=True)

    agg_stats = []
    for label, tally in labels.items():
        percentage = tally.count / total_count * 100
        long_term_average = percentage
        agg_stats.append(
            WheelResultStat(
                wheel_result=label,
                count=tally.count,
                percentage=_round2(percentage),
                last_occurred_at=utc_isoformat(tally.last_occurred_at),
                last_seen_before=_last_seen_before(tally.last_occurred_at, recency),
                hot_frequency_percentage=_round2(percentage - long_term_average),
            )
        )
    agg_stats.sort(key=lambda stat: stat.count, reverse=True)

    best_multipliers = [
        BestMultiplier(
            id=best.external_id,
            wheel_result=best.label,
            last_occurred_at=utc_isoformat(best.settled_at),
            max_multiplier=best.multiplier,
            big_win_stream_url=(
                stream_url(best.external_id, media_base_url) if best.external_id else None
            ),
        )
        for best in sorted(best_rounds.values(), key=lambda b: b.multiplier, reverse=True)[
            :leaderboard_size
        ]
    ]

    top_slot_total = top_slot_matched + top_slot_unmatched
    top_slot_stats = []
    for matched, bucket_count in ((False, top_slot_unmatched), (True, top_slot_matched)):
        share = _round2(bucket_count / top_slot_total * 100) if top_slot_total else 0.0
        top_slot_stats.append(
            TopSlotStat(
                matched=matched,
                percentage=share,
                total_count=bucket_count,
                top_slot_matched_frequency_percentage=0,
                top_slot_matched_long_term_average=share,
            )
        )

    wins.sort(key=lambda win: win.amount, reverse=True)
    best_individual_wins = [
        IndividualWin(
            id=win.external_id,
            screen_name=truncate_screen_name(win.screen_name),
            win_amount=win.amount,
            wheel_result=win.label,
            max_multiplier=win.multiplier,
            last_occurred_at=utc_isoformat(win.settled_at),
        )
        for win in wins[:leaderboard_size]
    ]

    cash_hunt_symbol_stats = []
    for symbol, multipliers in cash_hunt_symbols.items():
        avg = _mean(multipliers)
        long_term_average = avg
        cash_hunt_symbol_stats.append(
            CashHuntSymbolStat(
                symbol=symbol,
                avg_multiplier=_round2(avg),
                count=len(multipliers),
                cash_hunt_multiplier_frequency_percentage=_round2(avg - long_term_average),
                cash_hunt_long_term_average=_round2(long_term_average),
            )
        )
    cash_hunt_symbol_stats.sort(key=lambda stat: stat.avg_multiplier, reverse=True)

    flapper_stats = []
    for symbol, multipliers in flappers.items():
        avg = _mean(multipliers)
        long_term_average = avg
        flapper_stats.append(
            FlapperStat(
                symbol=symbol,
                avg_multiplier=_round2(avg),
                flapper_long_term_average_multiplier=_round2(long_term_average),
                flapper_multiplier_frequency_percentage=_round2(
                    _relative_deviation(avg, long_term_average)
                ),
            )
        )

    coin_flip_total = sum(len(multipliers) for multipliers in coin_flips.values())
    coin_flip_stats = []
    for symbol, multipliers in coin_flips.items():
        avg = _mean(multipliers)
        percentage = len(multipliers) / coin_flip_total * 100 if coin_flip_total else 0.0
        percentage_long_term_average = percentage
        multiplier_long_term_average = avg
        coin_flip_stats.append(
            CoinFlipStat(
                symbol=symbol,
                avg_multiplier=_round2(avg),
                count=len(multipliers),
                percentage=_round2(percentage),
                coin_flip_frequency_percentage=_round2(percentage - percentage_long_term_average),
                coin_flip_multiplier_frequency_percentage=_round2(
                    _relative_deviation(avg, multiplier_long_term_average)
                ),
                coin_flip_multiplier_long_term_average=_round2(multiplier_long_term_average),
                coin_flip_percentage_long_term_average=_round2(percentage_long_term_average),
            )
        )

    return GameStats(
        total_count=total_count,
        agg_stats=agg_stats,
        best_multipliers=best_multipliers,
        top_slot_to_wheel_result_stats=top_slot_stats,
        best_individual_wins=best_individual_wins,
        cash_hunt_avg_stats_by_position=grid.stats(),
        cash_hunt_symbol_stats=cash_hunt_symbol_stats,
        crazy_bonus_flapper_stats=flapper_stats,
        coin_flip_stats=coin_flip_stats,
    )
