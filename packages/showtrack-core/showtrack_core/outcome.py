"""
Interpretation of game show round outcomes.

The provider does not tag outcomes with a reliable game type, so every helper here
inspects which optional sub-objects are populated and applies an ordered chain of
"if this field exists, read it thus" rules. A missing field is never an error: the
helpers return ``None`` (or a documented fallback) and callers treat that as "this
round contributes nothing to this statistic".

Outcome shapes seen in practice (all keys optional):

    wheelResult:  {"type": "WinningNumber" | "BonusRound" | ..., "wheelSector": "..."}
    maxMultiplier: 125
    topSlot: {"wheelSector": "...", "multiplier": 10}
    isTopSlotMatchedToWheelResult: true
    cashHunt: {"positions": [[{"symbol": "...", "multiplier": 10}, ...], ...]}
    crazyBonus: {"flapper": {"symbol": "...", "multiplier": 50}}
    coinFlip: {"symbol": "...", "multiplier": 5}
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

WINNING_NUMBER = "WinningNumber"
BONUS_ROUND = "BonusRound"
UNKNOWN_OUTCOME = "Unknown"

RED_NUMBERS = frozenset({1, 3, 5, 7, 9, 12, 14, 16, 18, 19, 21, 23, 25, 27, 30, 32, 34, 36})

SCREEN_NAME_MAX_VISIBLE = 5
SCREEN_NAME_PREFIX_LENGTH = 3


def extract_outcome(value: Any) -> Mapping[str, Any] | None:
    """Return ``value`` when it is a usable outcome mapping, else None."""
    if isinstance(value, Mapping) and value:
        return value
    return None


def _wheel_result(outcome: Mapping[str, Any] | None) -> Mapping[str, Any] | None:
    if not outcome:
        return None
    wheel_result = outcome.get("wheelResult")
    return wheel_result if isinstance(wheel_result, Mapping) else None


def _sector(wheel_result: Mapping[str, Any]) -> str | None:
    sector = wheel_result.get("wheelSector")
    if sector is None or sector == "":
        return None
    return str(sector)


def wheel_result_label(outcome: Mapping[str, Any] | None) -> str | None:
    """
    Normalized label of the wheel sector or bonus that occurred.

    Rules, first match wins:
        1. wheelResult.type == "WinningNumber" with a sector -> the sector ("17", "2")
        2. wheelResult.type present -> the type ("BonusRound", "CoinFlip")
        3. wheelResult.wheelSector present -> the sector
        4. otherwise None (no wheel-based outcome on this round)
    """
    wheel_result = _wheel_result(outcome)
    if wheel_result is None:
        return None

    result_type = wheel_result.get("type") or None
    sector = _sector(wheel_result)

    if result_type == WINNING_NUMBER and sector is not None:
        return sector
    if result_type is not None:
        return str(result_type)
    return sector


def spin_outcome_label(outcome: Mapping[str, Any] | None) -> str:
    """
    Display label of a spin for the biggest wins feed.

    Rules, first match wins:
        1. wheelResult.type == "BonusRound" with a sector -> the bonus game name
           ("Pachinko", "CashHunt")
        2. wheel_result_label(outcome) when it is not None
        3. "Unknown"
    """
    wheel_result = _wheel_result(outcome)
    if wheel_result is not None and wheel_result.get("type") == BONUS_ROUND:
        sector = _sector(wheel_result)
        if sector is not None:
            return sector
    return wheel_result_label(outcome) or UNKNOWN_OUTCOME


def roulette_color(number: int) -> str:
    """Color of a European single-zero roulette pocket."""
    if not 0 <= number <= 36:
        raise ValueError(f"Roulette number out of range: {number}")
    if number == 0:
        return "Green"
    return "Red" if number in RED_NUMBERS else "Black"


def numeric_value(value: Any) -> float | None:
    """``value`` when it is an int or float (bools excluded), else None."""
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    return value


def truncate_screen_name(screen_name: Any) -> str:
    """
    Hide most of a winner's screen name: 'abcdef' -> 'abc...'.

    Non-string names (the provider occasionally sends numbers) are stringified first.
    """
    if screen_name is None or screen_name == "":
        return ""
    screen_name = str(screen_name)
    if len(screen_name) > SCREEN_NAME_MAX_VISIBLE:
        return screen_name[:SCREEN_NAME_PREFIX_LENGTH] + "..."
    return screen_name


def max_multiplier(outcome: Mapping[str, Any] | None) -> float:
    """The round's headline multiplier, 0 when absent or not numeric."""
    if not outcome:
        return 0
    value = numeric_value(outcome.get("maxMultiplier"))
    return value if value is not None else 0


def winning_number(outcome: Mapping[str, Any] | None) -> int | None:
    """Numeric pocket of a WinningNumber outcome, None for any other shape."""
    wheel_result = _wheel_result(outcome)
    if wheel_result is None or wheel_result.get("type") != WINNING_NUMBER:
        return None
    sector = _sector(wheel_result)
    if sector is None:
        return None
    try:
        return int(sector)
    except ValueError:
        return None
