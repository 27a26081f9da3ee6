"""
Read-side analytics for the game show tracker.

Pure functions over windows of stored results: per-game statistics, the biggest
wins feed and the public results view.
"""

from showtrack_analytics.aggregation import GameStats, aggregate_game_stats
from showtrack_analytics.biggest_wins import GameShowWin, select_biggest_wins
from showtrack_analytics.results_view import transform_game_result
from showtrack_analytics.windows import PageParams, window_start

__all__ = [
    "GameStats",
    "aggregate_game_stats",
    "GameShowWin",
    "select_biggest_wins",
    "transform_game_result",
    "PageParams",
    "window_start",
]
